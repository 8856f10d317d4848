"""Domain error codes and exceptions."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_SLUG = "INVALID_SLUG"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"


STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.INVALID_SLUG: 400,
    ErrorCode.VALIDATION_FAILED: 400,
    ErrorCode.IMAGE_UPLOAD_FAILED: 500,
}


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE.get(self.code, 500)


class EventNotFoundError(DomainError):
    """Raised when no event matches a slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.slug = slug


class InvalidSlugError(DomainError):
    """Raised when a slug parameter is empty after trimming."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.INVALID_SLUG, message="Slug cannot be empty")


class EventValidationError(DomainError):
    """Raised when an event fails validation; ``errors`` maps field to reason."""

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message="Event validation failed")
        self.errors = dict(errors)


class ImageUploadError(DomainError):
    """Raised when the asset host rejects or fails an upload."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.IMAGE_UPLOAD_FAILED, message=f"Image upload failed: {reason}")
