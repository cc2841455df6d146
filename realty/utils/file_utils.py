"""
File upload utilities for listing images.
Provides upload validation and disk storage for the single listing image.
"""

import io
import uuid
import logging
from pathlib import Path
from typing import List, Optional
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from realty.config import get_settings
from realty.utils.exceptions import FileUploadError

logger = logging.getLogger(__name__)

settings = get_settings()


class FileValidator:
    """Utility class for image upload validation."""

    # Pillow format names accepted for each extension
    SUPPORTED_FORMATS = {
        '.png': 'PNG',
        '.jpg': 'JPEG',
        '.jpeg': 'JPEG',
    }

    def __init__(self, allowed_extensions: Optional[List[str]] = None, max_file_size: Optional[int] = None):
        self.allowed_extensions = [ext.lower() for ext in (allowed_extensions or settings.allowed_image_extensions)]
        self.max_file_size = max_file_size or settings.max_file_size

    def validate_file_extension(self, filename: str) -> str:
        """
        Validate file extension.

        Returns:
            Lowercase file extension

        Raises:
            FileUploadError: If extension is not supported
        """
        if not filename:
            raise FileUploadError("Filename is required")

        extension = Path(filename).suffix.lower()

        if not extension:
            raise FileUploadError("File must have an extension")

        if extension not in self.allowed_extensions:
            raise FileUploadError(
                f"File extension '{extension}' not supported. "
                f"Supported extensions: {', '.join(self.allowed_extensions)}"
            )

        return extension

    def validate_file_size(self, file_size: int) -> int:
        """
        Validate file size.

        Raises:
            FileUploadError: If file is empty or exceeds the limit
        """
        if file_size <= 0:
            raise FileUploadError("File is empty")

        if file_size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            actual_mb = file_size / (1024 * 1024)
            raise FileUploadError(
                f"File size ({actual_mb:.1f}MB) exceeds maximum allowed size ({max_mb:.1f}MB)"
            )

        return file_size

    def validate_image_content(self, content: bytes, extension: str) -> None:
        """
        Check the bytes decode as an image matching the extension.

        Raises:
            FileUploadError: If the content is not a valid image
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                image_format = img.format
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file: {str(e)}")

        expected = self.SUPPORTED_FORMATS.get(extension)
        if expected and image_format != expected:
            raise FileUploadError(f"File content doesn't match extension '{extension}'")

    async def read_and_validate(self, file: UploadFile) -> bytes:
        """
        Comprehensive validation of an uploaded image.

        Returns:
            File content
        """
        extension = self.validate_file_extension(file.filename or "")

        await file.seek(0)
        content = await file.read()
        await file.seek(0)

        self.validate_file_size(len(content))
        self.validate_image_content(content, extension)
        return content


class ImageStorage:
    """Stores listing images under generated unique names in the upload directory."""

    def __init__(self, upload_dir: Optional[str] = None, validator: Optional[FileValidator] = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.validator = validator or FileValidator()
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def generate_unique_filename(self, original_filename: str) -> str:
        extension = Path(original_filename).suffix.lower()
        return f"{uuid.uuid4().hex}{extension}"

    def path_for(self, filename: str) -> Path:
        # Only the final path component is honoured
        return self.upload_dir / Path(filename).name

    async def save(self, file: UploadFile) -> str:
        """
        Validate and write an uploaded image.

        Returns:
            Stored filename

        Raises:
            FileUploadError: If validation or writing fails
        """
        content = await self.validator.read_and_validate(file)
        filename = self.generate_unique_filename(file.filename)
        file_path = self.path_for(filename)

        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            if file_path.exists():
                file_path.unlink()
            raise FileUploadError(f"Failed to save image file: {str(e)}")

        logger.info(f"Stored image {filename} ({len(content)} bytes)")
        return filename

    def remove(self, filename: str) -> bool:
        """
        Remove a stored image.

        Returns:
            True if a file was removed, False if it was already absent

        Raises:
            OSError: If the file exists but cannot be removed
        """
        file_path = self.path_for(filename)
        try:
            file_path.unlink()
        except FileNotFoundError:
            logger.warning(f"Image {filename} was already absent from {self.upload_dir}")
            return False

        logger.info(f"Removed image {filename}")
        return True

    def exists(self, filename: str) -> bool:
        return bool(filename) and self.path_for(filename).is_file()
