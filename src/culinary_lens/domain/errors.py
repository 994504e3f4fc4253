"""Error categories and domain exceptions."""

from dataclasses import dataclass
from enum import StrEnum


class ErrorCategory(StrEnum):
    """User-facing categories for image generation failures."""

    NETWORK = "network"
    CONTENT_POLICY = "content_policy"
    RATE_LIMIT = "rate_limit"
    EMPTY_RESULT = "empty_result"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedError:
    """A failure mapped to a category and guidance message."""

    category: ErrorCategory
    message: str


class ConfigError(ValueError):
    """Raised for configuration values outside the supported set."""


class MenuAnalysisError(RuntimeError):
    """Raised when the menu text could not be analyzed."""


class DishNotFoundError(LookupError):
    """Raised when a dish id is not in the current registry."""


class DishImageMissingError(RuntimeError):
    """Raised when an image operation targets a dish without an image."""


class EditSessionNotFoundError(LookupError):
    """Raised when an edit session id is unknown."""


class EditSessionBusyError(RuntimeError):
    """Raised when an edit session already has an operation in flight."""


class EditSessionClosedError(RuntimeError):
    """Raised when an operation targets a closed edit session."""


class InvalidInstructionError(ValueError):
    """Raised for blank edit instructions."""


class StyleLockedError(RuntimeError):
    """Raised when the photo style changes while dishes are generating."""
