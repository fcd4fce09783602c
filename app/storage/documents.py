"""Local file storage for supporting documents."""

import logging
import shutil
from pathlib import Path, PurePath
from typing import BinaryIO
from uuid import uuid4

from app.core.errors import PersistenceError

logger = logging.getLogger(__name__)


class DocumentStorage:
    """
    Saves validated attachment bytes under the uploads directory.

    The reference returned by save() is the stored file name; it is what a
    claim keeps in supporting_document.
    """

    def __init__(self, uploads_dir: str = "data/uploads"):
        """
        Initialize DocumentStorage.

        Args:
            uploads_dir: Directory for supporting documents
        """
        self.uploads_dir = Path(uploads_dir)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Initialized DocumentStorage: uploads_dir={self.uploads_dir}")

    @staticmethod
    def make_reference(filename: str) -> str:
        """Unique stored name keeping the original base name and suffix."""
        name = PurePath(filename.replace("\\", "/")).name
        return f"{uuid4().hex}_{name}"

    def path_for(self, reference: str) -> Path:
        # References are bare file names; anything else would escape uploads_dir
        if PurePath(reference).name != reference:
            raise ValueError(f"Invalid document reference: {reference}")
        return self.uploads_dir / reference

    def save(self, filename: str, stream: BinaryIO) -> str:
        """
        Save an uploaded document.

        Args:
            filename: Original filename, already validated
            stream: Binary stream positioned at the start of the content

        Returns:
            Reference of the stored document

        Raises:
            PersistenceError: If the file cannot be written
        """
        reference = self.make_reference(filename)
        file_path = self.path_for(reference)

        try:
            with open(file_path, "wb") as f:
                shutil.copyfileobj(stream, f)
        except OSError as e:
            file_path.unlink(missing_ok=True)
            logger.error(f"Failed to save document {filename}: {str(e)}")
            raise PersistenceError(f"Failed to save document: {str(e)}") from e

        logger.info(f"Saved document: {file_path} ({file_path.stat().st_size} bytes)")
        return reference

    def load(self, reference: str) -> bytes:
        file_path = self.path_for(reference)
        if not file_path.exists():
            raise FileNotFoundError(f"Document not found: {reference}")
        return file_path.read_bytes()

    def exists(self, reference: str) -> bool:
        return self.path_for(reference).exists()

    def delete(self, reference: str) -> bool:
        """
        Remove a stored document.

        Returns:
            True if a file was removed, False if there was nothing to remove
        """
        file_path = self.path_for(reference)
        if not file_path.exists():
            return False
        file_path.unlink()
        logger.info(f"Deleted document: {file_path}")
        return True
