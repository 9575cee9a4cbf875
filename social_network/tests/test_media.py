import io

import pytest
from fastapi import UploadFile

from social_network.config import settings
from social_network.services.media_service import MediaService

API = "/api/v1/users/medias"


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(directory))
    return directory


@pytest.mark.asyncio
async def test_upload_medias(client_factory, upload_dir, users):
    alice = users[0]
    client = client_factory(alice)

    response = await client.post(API, files=[
        ("files", ("cat.png", b"\x89PNG fake image", "image/png")),
        ("files", ("clip.MP4", b"0" * 1000, "video/mp4")),
    ])

    assert response.status_code == 200
    medias = response.json()
    assert [m["file_name"] for m in medias] == ["cat.png", "clip.MP4"]
    assert [m["size"] for m in medias] == [15, 1000]
    assert all(m["file_path"].startswith(f"/uploads/{alice.id}/") for m in medias)
    assert medias[1]["file_path"].endswith(".mp4")

    stored = sorted(p.name for p in (upload_dir / str(alice.id)).iterdir())
    assert stored == sorted(m["file_path"].rsplit("/", 1)[1] for m in medias)

    response = await client.get(API)
    assert response.status_code == 200
    assert {m["id"] for m in response.json()["items"]} == {m["id"] for m in medias}


@pytest.mark.asyncio
async def test_rejected_file_discards_batch(client_factory, upload_dir, users):
    alice = users[0]
    client = client_factory(alice)

    response = await client.post(API, files=[
        ("files", ("ok.jpg", b"jpeg bytes", "image/jpeg")),
        ("files", ("script.exe", b"MZ", "application/octet-stream")),
    ])

    assert response.status_code == 400
    assert response.json()["detail"] == "File type is not allowed: script.exe"
    assert list((upload_dir / str(alice.id)).iterdir()) == []

    response = await client.get(API)
    assert response.json()["items"] == []


@pytest.mark.asyncio
async def test_file_too_large(client_factory, upload_dir, monkeypatch, users):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 10)
    alice = users[0]

    response = await client_factory(alice).post(API, files=[
        ("files", ("big.png", b"x" * 11, "image/png")),
    ])

    assert response.status_code == 400
    assert response.json()["detail"] == "File is too large: big.png"
    assert list((upload_dir / str(alice.id)).iterdir()) == []


@pytest.mark.asyncio
async def test_media_list_is_private_to_caller(client_factory, upload_dir, users):
    alice, bob, _ = users
    await client_factory(alice).post(API, files=[("files", ("a.gif", b"GIF89a", "image/gif"))])

    response = await client_factory(bob).get(API)
    assert response.json()["items"] == []


class BrokenUpload:
    """Upload whose stream drops after the first chunk"""
    filename = "broken.png"
    content_type = "image/png"

    def __init__(self):
        self.reads = 0

    async def read(self, size: int = -1) -> bytes:
        self.reads += 1
        if self.reads == 1:
            return b"partial"
        raise OSError("connection reset")


@pytest.mark.asyncio
async def test_failed_read_discards_batch(test_db, upload_dir, users):
    alice = users[0]
    files = [UploadFile(io.BytesIO(b"jpeg bytes"), filename="ok.jpg"), BrokenUpload()]

    with pytest.raises(OSError):
        await MediaService(test_db).add_user_medias(alice.id, files)

    assert list((upload_dir / str(alice.id)).iterdir()) == []
    medias, _ = await MediaService(test_db).get_user_medias(alice.id, limit=10)
    assert medias == []
