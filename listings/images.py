# listings/images.py
import logging
from collections.abc import Mapping
from dataclasses import dataclass

import cloudinary.exceptions
import cloudinary.uploader
from django.conf import settings

from .exceptions import UploadFailed, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ['image/jpeg', 'image/jpg', 'image/png', 'image/webp']
ALLOWED_FORMATS = ['jpeg', 'jpg', 'png', 'webp']


@dataclass(frozen=True)
class UploadedImage:
    """Result of an upload: where the binary lives and its storage id."""

    url: str
    filename: str

    def as_dict(self):
        return {"url": self.url, "filename": self.filename}


def upload_image(file):
    """
    Push one uploaded file to Cloudinary and return an UploadedImage.

    Returns None when no file was sent. Bad input raises ValidationError;
    a failed upload raises UploadFailed so the request is aborted before
    anything is written.
    """
    if file is None:
        return None

    if getattr(file, 'content_type', None) not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("image: Invalid file type. Supported: JPEG, PNG, WebP.")

    if file.size > settings.UPLOAD_MAX_BYTES:
        raise ValidationError("image: File too large. Maximum 10MB allowed.")

    try:
        upload_result = cloudinary.uploader.upload(
            file,
            folder=settings.CLOUDINARY_FOLDER,
            resource_type="image",
            allowed_formats=ALLOWED_FORMATS,
            overwrite=False,
            unique_filename=True,
            timeout=settings.UPLOAD_TIMEOUT
        )
    except cloudinary.exceptions.Error as exc:
        logger.error("Cloudinary upload failed for %s: %s", file.name, exc)
        raise UploadFailed("Image upload failed. Please try again.") from exc

    image_url = upload_result.get('secure_url')
    if not image_url:
        logger.error("Cloudinary returned no secure_url for %s: %r", file.name, upload_result)
        raise UploadFailed("Image upload failed. Please try again.")

    return UploadedImage(url=image_url, filename=upload_result.get('public_id', ''))


def coerce_upload(upload):
    """Accept an UploadedImage or a {url, filename} / {path, filename} mapping."""
    if upload is None or isinstance(upload, UploadedImage):
        return upload
    if isinstance(upload, Mapping):
        url = upload.get('url') or upload.get('path') or upload.get('secure_url')
        if not url:
            raise ValidationError("image: upload result has no URL")
        filename = upload.get('filename') or upload.get('public_id') or ''
        return UploadedImage(url=url, filename=filename)
    raise TypeError(f"Unsupported upload result: {type(upload).__name__}")


def bind_image(listing, upload):
    """Set listing.image from an upload result; None leaves it untouched."""
    image = coerce_upload(upload)
    if image is None:
        return False
    listing.image = image.as_dict()
    return True
