"""Exception hierarchy.

Errors fall into three families so callers can tell bad input data
(:class:`InvalidInputError`) from bad configuration
(:class:`ConfigurationError`). Failures raised by collaborators such as the
file system or zlib are not wrapped and reach the caller unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class SitemapError(Exception):
    """Base class for all sitemap_kit errors."""


class InvalidInputError(SitemapError, ValueError):
    """Entry data that cannot be turned into a valid sitemap entry."""


class MalformedURLError(InvalidInputError):
    def __init__(self, url: Any, base: str | None = None) -> None:
        detail = f"Cannot resolve URL {url!r}"
        if base:
            detail += f" against {base!r}"
        super().__init__(detail)
        self.url = url
        self.base = base


class InvalidDateError(InvalidInputError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"{field} is not a valid date: {value!r}")
        self.field = field
        self.value = value


class InvalidFieldValueError(InvalidInputError):
    def __init__(self, field: str, value: Any, detail: str) -> None:
        super().__init__(f"{field}: {detail} (got {value!r})")
        self.field = field
        self.value = value


class ViolationKind(str, Enum):
    MISSING_FIELD = "missing_field"
    OUT_OF_RANGE = "out_of_range"
    INVALID_ENUM = "invalid_enum"
    INVALID_FORMAT = "invalid_format"


class ValidationViolation(InvalidInputError):
    """A protocol constraint broken by a normalized entry."""

    kind: ViolationKind

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
        self.message = message


class MissingFieldError(ValidationViolation):
    kind = ViolationKind.MISSING_FIELD


class OutOfRangeError(ValidationViolation):
    kind = ViolationKind.OUT_OF_RANGE


class InvalidEnumError(ValidationViolation):
    kind = ViolationKind.INVALID_ENUM


class InvalidFormatError(ValidationViolation):
    kind = ViolationKind.INVALID_FORMAT


VIOLATION_TYPES: dict[ViolationKind, type[ValidationViolation]] = {
    ViolationKind.MISSING_FIELD: MissingFieldError,
    ViolationKind.OUT_OF_RANGE: OutOfRangeError,
    ViolationKind.INVALID_ENUM: InvalidEnumError,
    ViolationKind.INVALID_FORMAT: InvalidFormatError,
}


class ConfigurationError(SitemapError):
    """Missing or inconsistent configuration detected before any work starts."""


class UndefinedTargetFolderError(ConfigurationError):
    def __init__(self, target_folder: Any) -> None:
        super().__init__(f"UndefinedTargetFolder: target folder must exist and be a directory: {target_folder!r}")
        self.target_folder = target_folder


class StreamClosedError(SitemapError):
    """Write attempted after the sitemap stream was ended."""


__all__ = [
    "SitemapError",
    "InvalidInputError",
    "MalformedURLError",
    "InvalidDateError",
    "InvalidFieldValueError",
    "ViolationKind",
    "ValidationViolation",
    "MissingFieldError",
    "OutOfRangeError",
    "InvalidEnumError",
    "InvalidFormatError",
    "VIOLATION_TYPES",
    "ConfigurationError",
    "UndefinedTargetFolderError",
    "StreamClosedError",
]
