"""
Supporting Document Validator

Pure decision on whether an uploaded attachment may back a claim.
"""
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable, Optional

from app.core.models import Attachment

DEFAULT_ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx")
DEFAULT_MAX_BYTES = 10 * 1024 * 1024

INVALID_FILE_TYPE = "invalid file type"
EMPTY_FILE = "empty file"
FILE_TOO_LARGE = "file too large"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None

    @classmethod
    def accept(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def reject(cls, reason: str) -> "ValidationResult":
        return cls(ok=False, reason=reason)


def file_extension(filename: Optional[str]) -> str:
    """Lower-cased suffix of a file name, '' when there is none."""
    if not filename or not filename.strip():
        return ""
    # Browsers on Windows may send the full client path
    name = PurePath(filename.replace("\\", "/")).name
    return PurePath(name).suffix.lower()


def validate_attachment(
    attachment: Attachment,
    allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
    max_bytes: Optional[int] = DEFAULT_MAX_BYTES
) -> ValidationResult:
    """
    Decide whether an attachment is acceptable.

    Checks run in order: file type, emptiness, size limit. The first failing
    check decides the reason.

    Args:
        attachment: File name and byte length of the upload
        allowed_extensions: Accepted suffixes, with or without the leading dot
        max_bytes: Upper size limit, None for no limit

    Returns:
        ValidationResult.accept() or ValidationResult.reject(reason)
    """
    allowed = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in allowed_extensions
    }

    extension = file_extension(attachment.filename)
    if not extension or extension not in allowed:
        return ValidationResult.reject(INVALID_FILE_TYPE)

    if attachment.size == 0:
        return ValidationResult.reject(EMPTY_FILE)

    if max_bytes is not None and attachment.size > max_bytes:
        return ValidationResult.reject(FILE_TOO_LARGE)

    return ValidationResult.accept()
