"""
File upload utilities for validating and storing property media.
Provides per-field validation rules, filename generation and local disk operations.
"""

import enum
import random
import secrets
import time
from pathlib import Path
from typing import Optional, Tuple
import aiofiles
from fastapi import UploadFile

from app.config import get_settings
from app.utils.exceptions import FileUploadError, FileSizeExceededError

settings = get_settings()

# Bytes read per iteration when copying uploads
COPY_CHUNK_SIZE = 1024 * 1024


class AssetKind(str, enum.Enum):
    """Kinds of uploaded assets."""
    IMAGE = "image"
    MODEL = "model"


# Multipart field names and the asset kind each one carries
FIELD_KINDS = {
    "images": AssetKind.IMAGE,
    "newImages": AssetKind.IMAGE,
    "model": AssetKind.MODEL,
    "newModel": AssetKind.MODEL,
}

# Sub directory of the upload dir per asset kind
KIND_DIRECTORIES = {
    AssetKind.IMAGE: "images",
    AssetKind.MODEL: "models",
}

MODEL_MIME_TYPES = {
    ".glb": "model/gltf-binary",
    ".gltf": "model/gltf+json",
}


class FileValidator:
    """Utility class for upload validation, one rule set per asset kind."""

    IMAGE_FORMATS = ("jpeg", "jpg", "png", "gif", "webp")
    MODEL_FORMATS = ("glb", "gltf")

    IMAGE_ERROR = "Only image files are allowed (jpeg, jpg, png, gif, webp)"
    MODEL_ERROR = "Only .glb or .gltf model files are allowed"

    @classmethod
    def kind_for_field(cls, field_name: str) -> AssetKind:
        """
        Resolve the asset kind of a multipart field.

        Args:
            field_name: Name of the multipart field

        Returns:
            Asset kind carried by the field

        Raises:
            FileUploadError: If the field is not an upload field
        """
        kind = FIELD_KINDS.get(field_name)
        if kind is None:
            raise FileUploadError("Unknown field name", field=field_name)
        return kind

    @staticmethod
    def get_extension(filename: Optional[str]) -> str:
        """Lowercase extension of a filename, including the dot."""
        return Path(filename or "").suffix.lower()

    @classmethod
    def validate_image(cls, file: UploadFile, field_name: str) -> str:
        """
        Validate an image upload. Extension and declared content type must both be images.

        Args:
            file: Uploaded file
            field_name: Multipart field the file arrived in

        Returns:
            Lowercase file extension

        Raises:
            FileUploadError: If the file is not an accepted image
        """
        extension = cls.get_extension(file.filename)
        content_type = (file.content_type or "").lower()
        media_type, _, subtype = content_type.partition("/")

        extension_ok = extension.lstrip(".") in cls.IMAGE_FORMATS
        content_type_ok = media_type == "image" and subtype in cls.IMAGE_FORMATS

        if not (extension_ok and content_type_ok):
            raise FileUploadError(cls.IMAGE_ERROR, field=field_name)

        return extension

    @classmethod
    def validate_model(cls, file: UploadFile, field_name: str) -> str:
        """
        Validate a 3D model upload. Only the extension is checked.

        Args:
            file: Uploaded file
            field_name: Multipart field the file arrived in

        Returns:
            Lowercase file extension

        Raises:
            FileUploadError: If the extension is not glb or gltf
        """
        extension = cls.get_extension(file.filename)
        if extension.lstrip(".") not in cls.MODEL_FORMATS:
            raise FileUploadError(cls.MODEL_ERROR, field=field_name)
        return extension

    @classmethod
    def validate_file_size(cls, file_size: Optional[int], max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Args:
            file_size: Size of the file in bytes
            max_size: Maximum allowed size in bytes (optional)

        Returns:
            Validated file size

        Raises:
            FileSizeExceededError: If file size exceeds limit
        """
        size = file_size or 0
        max_allowed = max_size or settings.max_upload_size
        if size > max_allowed:
            raise FileSizeExceededError(size, max_allowed)
        return size

    @classmethod
    def validate_upload_file(cls, field_name: str, file: UploadFile) -> Tuple[AssetKind, str]:
        """
        Validate an uploaded file against the rules of its field.

        Args:
            field_name: Multipart field the file arrived in
            file: Uploaded file

        Returns:
            Tuple of (asset kind, lowercase extension)

        Raises:
            FileUploadError: If any validation fails
        """
        kind = cls.kind_for_field(field_name)

        if kind == AssetKind.IMAGE:
            extension = cls.validate_image(file, field_name)
        else:
            extension = cls.validate_model(file, field_name)

        cls.validate_file_size(file.size)
        return kind, extension


def generate_local_filename(kind: AssetKind, extension: str) -> str:
    """
    Generate a collision resistant filename for disk storage.

    Args:
        kind: Asset kind, which selects the prefix
        extension: Original extension including the dot

    Returns:
        Filename such as img-1700000000000-123456789.jpg
    """
    prefix = "img" if kind == AssetKind.IMAGE else "model"
    millis = int(time.time() * 1000)
    suffix = random.randint(0, 999_999_999)
    return f"{prefix}-{millis}-{suffix}{extension}"


def generate_blob_filename(extension: str) -> str:
    """Random hex filename with the original extension."""
    return f"{secrets.token_hex(16)}{extension}"


class FileStorage:
    """Utility class for local disk storage operations."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        for sub_dir in KIND_DIRECTORIES.values():
            (self.base_dir / sub_dir).mkdir(parents=True, exist_ok=True)

    def get_kind_directory(self, kind: AssetKind) -> Path:
        """Directory that holds files of an asset kind."""
        return self.base_dir / KIND_DIRECTORIES[kind]

    async def save_file(self, file: UploadFile, file_path: Path) -> int:
        """
        Save uploaded file to disk.

        Args:
            file: UploadFile object
            file_path: Path where to save the file

        Returns:
            Number of bytes written
        """
        written = 0
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            await file.seek(0)

            async with aiofiles.open(file_path, 'wb') as f:
                while True:
                    chunk = await file.read(COPY_CHUNK_SIZE)
                    if not chunk:
                        break
                    await f.write(chunk)
                    written += len(chunk)

            return written
        except Exception:
            # Do not leave partial files behind
            self.delete_file(file_path)
            raise

    def delete_file(self, file_path: Path) -> bool:
        """
        Delete a file from disk.

        Args:
            file_path: Path to the file to delete

        Returns:
            True if file was deleted, False otherwise
        """
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except OSError:
            return False

    def resolve_relative(self, relative_path: str) -> Optional[Path]:
        """
        Resolve a path relative to the upload dir, refusing anything outside it.

        Args:
            relative_path: Path such as images/img-1.jpg

        Returns:
            Absolute path, or None if it escapes the upload dir
        """
        base = self.base_dir.resolve()
        candidate = (base / relative_path).resolve()
        if base not in candidate.parents:
            return None
        return candidate
