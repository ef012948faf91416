# src/services/media_service.py
import logging
import os
from typing import BinaryIO
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from src.config.settings import Settings
from src.utils.errors import ExternalServiceError, ValidationError

VIDEO_EXTENSIONS = {".mp4", ".avi", ".mkv", ".mov"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


class MediaService:
    """Sube archivos al media host y devuelve la URL durable."""

    def __init__(self, settings: Settings):
        self.settings = settings
        if settings.cloudinary_url:
            # cloudinary://<api_key>:<api_secret>@<cloud_name>
            parsed = urlparse(settings.cloudinary_url)
            cloudinary.config(
                cloud_name=parsed.hostname,
                api_key=parsed.username,
                api_secret=parsed.password,
                secure=True,
            )

    def upload(self, file: BinaryIO, filename: str, kind: str) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        if kind == "video":
            if ext not in VIDEO_EXTENSIONS:
                raise ValidationError("Only video files are allowed")
            options = {"resource_type": "video", "folder": "videos"}
        else:
            if ext not in IMAGE_EXTENSIONS:
                raise ValidationError("Only image files are allowed")
            options = {"resource_type": "image", "folder": "images"}

        # el SDK ya envuelve errores HTTP/socket en CloudinaryError; ValueError = credenciales
        # faltantes al firmar, OSError = lectura del archivo
        try:
            result = cloudinary.uploader.upload(file, **options)
        except (CloudinaryError, ValueError, OSError) as e:
            logging.error(f"[uploads] Cloudinary rechazó {filename}: {e}")
            raise ExternalServiceError("Error uploading file")
        return result["secure_url"]
