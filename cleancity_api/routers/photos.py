"""Photo upload, listing, download and delete endpoints."""
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from cleancity_api.auth import Identity, get_current_identity
from cleancity_api.config import settings
from cleancity_api.events import EventNotifier, get_notifier
from cleancity_api.schemas import PhotoOut
from cleancity_api.services import get_photo_service
from cleancity_api.services.photo_service import PhotoService

router = APIRouter(prefix="/api/photos", tags=["photos"])

CHUNK_SIZE = 1024 * 1024


async def _read_limited(upload: UploadFile) -> bytes:
    """Read the upload, stopping one byte past the size limit."""
    data = bytearray()
    while len(data) <= settings.MAX_FILE_SIZE:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
    return bytes(data)


@router.post("/{occurrence_id}", status_code=201)
async def upload_photo(
    occurrence_id: str,
    photo: Optional[UploadFile] = File(None),
    identity: Identity = Depends(get_current_identity),
    service: PhotoService = Depends(get_photo_service),
    notifier: EventNotifier = Depends(get_notifier),
):
    """Attach a JPEG/PNG/WebP image to an occurrence the caller owns."""
    data = await _read_limited(photo) if photo is not None else None
    record = service.upload(
        occurrence_id,
        identity.user_id,
        photo.filename if photo is not None else None,
        photo.content_type if photo is not None else None,
        data,
    )
    out = PhotoOut.model_validate(record)
    await notifier.photo_uploaded(record.user_id, out)
    return {"success": True, "data": out}


@router.get("/download/{photo_id}")
async def download_photo(
    photo_id: str,
    identity: Identity = Depends(get_current_identity),
    service: PhotoService = Depends(get_photo_service),
):
    photo = service.resolve(photo_id)
    return StreamingResponse(
        service.file_store.open(photo.file_path),
        media_type=photo.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(photo.file_name)}",
        },
    )


@router.get("/{occurrence_id}")
async def list_photos(
    occurrence_id: str,
    identity: Identity = Depends(get_current_identity),
    service: PhotoService = Depends(get_photo_service),
):
    photos = service.list_for_occurrence(occurrence_id)
    return {"success": True, "data": [PhotoOut.model_validate(p) for p in photos]}


@router.delete("/{photo_id}")
async def delete_photo(
    photo_id: str,
    identity: Identity = Depends(get_current_identity),
    service: PhotoService = Depends(get_photo_service),
):
    service.delete(photo_id, identity.user_id)
    return {"success": True, "message": "Photo deleted successfully"}
