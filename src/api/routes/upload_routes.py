# upload_routes.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, UploadFile

from src.api.dependencies import get_current_user, get_media_service
from src.models.base import ok
from src.services.media_service import MediaService

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/image")
def upload_image(
    image: UploadFile = File(...),
    user: Dict[str, Any] = Depends(get_current_user),
    media: MediaService = Depends(get_media_service),
):
    url = media.upload(image.file, image.filename, "image")
    return ok("Image uploaded successfully", {"url": url})


@router.post("/video")
def upload_video(
    video: UploadFile = File(...),
    user: Dict[str, Any] = Depends(get_current_user),
    media: MediaService = Depends(get_media_service),
):
    url = media.upload(video.file, video.filename, "video")
    return ok("Video uploaded successfully", {"url": url})
