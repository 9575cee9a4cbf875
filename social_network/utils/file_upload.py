"""
File upload utility functions
"""
import uuid
import logging
from pathlib import Path
from typing import Tuple
from fastapi import UploadFile
import aiofiles
import aiofiles.os
from social_network.config import settings
from social_network.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def is_allowed_file(filename: str) -> bool:
    """Check if file extension is allowed"""
    if not filename:
        return False

    file_extension = Path(filename).suffix.lower()
    return file_extension in settings.ALLOWED_EXTENSIONS


async def save_upload_file(upload_file: UploadFile, subdirectory: str = "") -> Tuple[str, int]:
    """
    Save uploaded file to disk under a generated name

    Returns:
        URL path to the saved file and its size in bytes
    """
    if not is_allowed_file(upload_file.filename):
        raise InvalidArgumentError(f"File type is not allowed: {upload_file.filename}")

    unique_filename = f"{uuid.uuid4().hex}{Path(upload_file.filename).suffix.lower()}"

    upload_dir = Path(settings.UPLOAD_DIR) / subdirectory
    upload_dir.mkdir(parents=True, exist_ok=True)
    file_path = upload_dir / unique_filename

    size = 0
    try:
        async with aiofiles.open(file_path, 'wb') as out_file:
            while True:
                chunk = await upload_file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.MAX_UPLOAD_SIZE:
                    raise InvalidArgumentError(f"File is too large: {upload_file.filename}")
                await out_file.write(chunk)
    except Exception:
        # Never leave a partial file behind
        if await aiofiles.os.path.exists(file_path):
            await aiofiles.os.remove(file_path)
        raise

    logger.info(f"Saved upload {upload_file.filename} as {file_path} ({size} bytes)")

    # Return relative path for URL
    url = f"/uploads/{subdirectory}/{unique_filename}" if subdirectory else f"/uploads/{unique_filename}"
    return url, size


async def delete_file(url_path: str) -> bool:
    """Delete a file previously returned by save_upload_file"""
    relative = url_path[len("/uploads/"):] if url_path.startswith("/uploads/") else url_path
    full_path = Path(settings.UPLOAD_DIR) / relative
    if full_path.exists():
        await aiofiles.os.remove(full_path)
        return True
    return False
