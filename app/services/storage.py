"""
Storage service for property media uploads.
One upload contract with pluggable destinations: local disk, the chunked blob
store, or Cloudinary. The destination is chosen from settings at startup.
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type
from urllib.parse import urlparse, unquote
import logging
import secrets

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.repositories.blob import get_blob_bucket, DEFAULT_BUCKET
from app.utils.exceptions import FileUploadError, FileSizeExceededError
from app.utils.file_utils import (
    AssetKind,
    FileStorage,
    FileValidator,
    KIND_DIRECTORIES,
    MODEL_MIME_TYPES,
    generate_blob_filename,
    generate_local_filename,
)

logger = logging.getLogger(__name__)

UPLOADS_ROUTE = "/uploads"
FILES_ROUTE = "/api/files"


class StorageBackend(ABC):
    """Destination for validated uploads."""

    name: str = ""

    def __init__(self, db: Optional[AsyncSession] = None):
        self.db = db

    @abstractmethod
    async def save(self, upload: UploadFile, kind: AssetKind, extension: str, base_url: str) -> str:
        """
        Persist an upload.

        Args:
            upload: Validated uploaded file
            kind: Asset kind of the upload
            extension: Lowercase extension including the dot
            base_url: Public base URL of this service

        Returns:
            Public URL of the stored file
        """

    @abstractmethod
    async def delete(self, url: str) -> bool:
        """
        Remove a stored file by its public URL.

        Returns:
            True if a file was removed
        """


class LocalStorageBackend(StorageBackend):
    """Writes uploads under the upload dir, served statically at /uploads."""

    name = "local"

    def __init__(self, db: Optional[AsyncSession] = None, file_storage: Optional[FileStorage] = None):
        super().__init__(db)
        self.file_storage = file_storage or FileStorage()

    async def save(self, upload: UploadFile, kind: AssetKind, extension: str, base_url: str) -> str:
        filename = generate_local_filename(kind, extension)
        file_path = self.file_storage.get_kind_directory(kind) / filename

        written = await self.file_storage.save_file(upload, file_path)
        logger.info(f"Stored {kind.value} upload {filename} on disk ({written} bytes)")

        return f"{base_url}{UPLOADS_ROUTE}/{KIND_DIRECTORIES[kind]}/{filename}"

    async def delete(self, url: str) -> bool:
        path = unquote(urlparse(url).path)
        marker = f"{UPLOADS_ROUTE}/"
        if marker not in path:
            return False

        file_path = self.file_storage.resolve_relative(path.split(marker, 1)[1])
        if file_path is None:
            return False
        return self.file_storage.delete_file(file_path)


class BlobStoreBackend(LocalStorageBackend):
    """
    Keeps 3D models in the chunked blob store and images on local disk.
    Models are served by the /api/files route.
    """

    name = "gridfs"

    async def save(self, upload: UploadFile, kind: AssetKind, extension: str, base_url: str) -> str:
        if kind == AssetKind.IMAGE:
            return await super().save(upload, kind, extension, base_url)

        bucket = get_blob_bucket(self.db, DEFAULT_BUCKET)
        filename = generate_blob_filename(extension)

        await upload.seek(0)
        await bucket.upload_from_stream(filename, upload, content_type=MODEL_MIME_TYPES.get(extension))

        return f"{base_url}{FILES_ROUTE}/{bucket.bucket_name}/{filename}"

    async def delete(self, url: str) -> bool:
        path = unquote(urlparse(url).path)
        marker = f"{FILES_ROUTE}/{DEFAULT_BUCKET}/"
        if marker not in path:
            return await super().delete(url)

        bucket = get_blob_bucket(self.db, DEFAULT_BUCKET)
        return await bucket.delete_by_name(path.split(marker, 1)[1])


class CloudinaryStorageBackend(StorageBackend):
    """Uploads to Cloudinary, resizing images and passing models through raw."""

    name = "cloudinary"

    IMAGE_FOLDER = "homesphere/properties"
    MODEL_FOLDER = "homesphere/models"
    IMAGE_FORMATS = ["jpg", "jpeg", "png", "webp"]
    IMAGE_TRANSFORMATION = [{"width": 1200, "height": 800, "crop": "limit"}]

    @staticmethod
    def configure() -> None:
        """Load Cloudinary credentials from settings."""
        if settings.cloudinary_url:
            parsed = urlparse(settings.cloudinary_url)
            cloudinary.config(
                cloud_name=parsed.hostname,
                api_key=unquote(parsed.username or ""),
                api_secret=unquote(parsed.password or ""),
                secure=True
            )
        else:
            cloudinary.config(
                cloud_name=settings.cloudinary_cloud_name,
                api_key=settings.cloudinary_api_key,
                api_secret=settings.cloudinary_api_secret,
                secure=True
            )

    @classmethod
    def upload_options(cls, kind: AssetKind, extension: str) -> Dict:
        """Cloudinary upload options for an asset kind."""
        token = secrets.token_hex(8)
        if kind == AssetKind.IMAGE:
            return {
                "folder": cls.IMAGE_FOLDER,
                "resource_type": "image",
                "public_id": f"img-{token}",
                "allowed_formats": cls.IMAGE_FORMATS,
                "transformation": cls.IMAGE_TRANSFORMATION,
            }
        # Raw assets keep their extension in the public id
        return {
            "folder": cls.MODEL_FOLDER,
            "resource_type": "raw",
            "public_id": f"model-{token}{extension}",
        }

    async def save(self, upload: UploadFile, kind: AssetKind, extension: str, base_url: str) -> str:
        options = self.upload_options(kind, extension)
        await upload.seek(0)

        try:
            result = await run_in_threadpool(cloudinary.uploader.upload, upload.file, **options)
        except Exception as e:
            logger.exception(f"Cloudinary upload failed filename={upload.filename!r} kind={kind.value}")
            raise FileUploadError(f"Failed to upload to Cloudinary: {str(e)[:200]}")

        logger.info(f"Stored {kind.value} upload on Cloudinary as {result.get('public_id')}")
        return result["secure_url"]

    @staticmethod
    def public_id_from_url(url: str) -> Optional[Tuple[str, str]]:
        """
        Recover (public_id, resource_type) from a Cloudinary delivery URL.

        Returns:
            Tuple, or None if the URL is not a Cloudinary upload URL
        """
        parts = unquote(urlparse(url).path).strip("/").split("/")
        if "upload" not in parts:
            return None

        upload_index = parts.index("upload")
        resource_type = parts[upload_index - 1] if upload_index > 0 else "image"
        remainder = parts[upload_index + 1:]

        # Skip transformation and version segments
        while remainder and ("," in remainder[0] or (remainder[0].startswith("v") and remainder[0][1:].isdigit())):
            remainder = remainder[1:]
        if not remainder:
            return None

        public_id = "/".join(remainder)
        if resource_type != "raw":
            public_id = str(Path(public_id).with_suffix(""))
        return public_id, resource_type

    async def delete(self, url: str) -> bool:
        located = self.public_id_from_url(url)
        if located is None:
            return False

        public_id, resource_type = located
        result = await run_in_threadpool(cloudinary.uploader.destroy, public_id, resource_type=resource_type)
        return result.get("result") == "ok"


STORAGE_BACKEND_CLASSES: Dict[str, Type[StorageBackend]] = {
    LocalStorageBackend.name: LocalStorageBackend,
    BlobStoreBackend.name: BlobStoreBackend,
    CloudinaryStorageBackend.name: CloudinaryStorageBackend,
}


@lru_cache()
def select_storage_backend(name: Optional[str] = None) -> Type[StorageBackend]:
    """
    Resolve the configured storage backend class, configuring it once.

    Args:
        name: Backend name, defaults to settings.storage_backend

    Returns:
        StorageBackend subclass
    """
    backend_name = name or settings.storage_backend
    backend_cls = STORAGE_BACKEND_CLASSES[backend_name]

    if backend_cls is CloudinaryStorageBackend:
        if not settings.cloudinary_configured:
            logger.warning("Cloudinary storage selected but credentials are missing")
        CloudinaryStorageBackend.configure()

    logger.info(f"Using '{backend_name}' storage backend")
    return backend_cls


class StorageService:
    """
    Validates and stores multipart uploads.
    All files of a request are validated before any is written.
    """

    def __init__(self, backend: StorageBackend, base_url: str):
        self.backend = backend
        self.base_url = base_url.rstrip("/")

    def validate_uploads(self, fields: Dict[str, List[UploadFile]]) -> List[Tuple[str, UploadFile, AssetKind, str]]:
        """
        Validate every file of every upload field.

        Args:
            fields: Mapping of multipart field name to its files

        Returns:
            List of (field, file, kind, extension) ready to store

        Raises:
            FileUploadError: If any file or field is rejected
        """
        validated = []
        total_size = 0

        for field_name, files in fields.items():
            present = [f for f in (files or []) if f is not None and f.filename]
            if not present:
                continue

            kind = FileValidator.kind_for_field(field_name)
            max_count = settings.max_images_per_request if kind == AssetKind.IMAGE else 1
            if len(present) > max_count:
                raise FileUploadError(f"Too many files for field '{field_name}' (maximum: {max_count})", field=field_name)

            for upload in present:
                kind, extension = FileValidator.validate_upload_file(field_name, upload)
                total_size += upload.size or 0
                validated.append((field_name, upload, kind, extension))

        if total_size > settings.max_request_size:
            raise FileSizeExceededError(total_size, settings.max_request_size)

        return validated

    async def store_uploads(self, fields: Dict[str, List[UploadFile]]) -> Dict[str, List[str]]:
        """
        Validate and store uploads, returning public URLs per field.
        If a write fails, files already written by this call are removed.

        Args:
            fields: Mapping of multipart field name to its files

        Returns:
            Mapping of field name to stored URLs, in upload order
        """
        validated = self.validate_uploads(fields)
        urls: Dict[str, List[str]] = {field_name: [] for field_name in fields}
        stored: List[str] = []

        try:
            for field_name, upload, kind, extension in validated:
                url = await self.backend.save(upload, kind, extension, self.base_url)
                stored.append(url)
                urls[field_name].append(url)
        except Exception:
            await self.discard(stored)
            raise

        return urls

    async def discard(self, urls: List[str]) -> None:
        """Best-effort removal of stored files."""
        for url in urls:
            try:
                await self.backend.delete(url)
            except Exception as e:
                logger.warning(f"Failed to remove stored file {url}: {e}")
