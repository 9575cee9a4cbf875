from typing import List, Optional, Tuple
from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from social_network.exceptions import InvalidArgumentError
from social_network.models.media import Media
from social_network.utils.file_upload import save_upload_file, delete_file
from social_network.utils.pagination import fetch_page

logger = logging.getLogger(__name__)

class MediaService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_user_medias(self, user_id: int, files: List[UploadFile]) -> List[Media]:
        """Store every uploaded file and record it; nothing is kept if one file is rejected"""
        if not files:
            raise InvalidArgumentError("No files were uploaded")

        saved: List[str] = []
        medias: List[Media] = []
        try:
            for upload in files:
                url, size = await save_upload_file(upload, subdirectory=str(user_id))
                saved.append(url)
                media = Media(
                    user_id=user_id,
                    file_name=upload.filename,
                    file_path=url,
                    content_type=upload.content_type,
                    size=size,
                )
                self.db.add(media)
                medias.append(media)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            for url in saved:
                await delete_file(url)
            raise

        for media in medias:
            await self.db.refresh(media)

        logger.info(f"User {user_id} uploaded {len(medias)} file(s)")
        return medias

    async def get_user_medias(
        self,
        user_id: int,
        limit: int,
        cursor: int = 0
    ) -> Tuple[List[Media], Optional[int]]:
        stmt = (
            select(Media)
            .where(Media.user_id == user_id)
            .order_by(Media.created_at.desc(), Media.id.desc())
        )
        return await fetch_page(self.db, stmt, limit, cursor)
