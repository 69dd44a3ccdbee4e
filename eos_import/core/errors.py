"""Error taxonomy for the import pipeline.

Parse and type errors are fatal to a request. Row validation errors are
plain data (see validators.ValidationError) and row import failures are
recorded in the ImportReport, so neither has an exception class here.
"""

from typing import Optional


class ImportServiceError(Exception):
    """Base class for request-fatal import errors."""


class ParseError(ImportServiceError):
    """The uploaded file could not be decoded."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)


class EmptyFileError(ParseError):
    """The uploaded file has no header row or no content at all."""

    def __init__(self, message: str = "File is empty or has no header row"):
        super().__init__(message)


class UnsupportedTypeError(ImportServiceError):
    """The declared import type is not one of the supported entity types."""

    def __init__(self, import_type: Optional[str]):
        self.import_type = import_type
        super().__init__(f"Unsupported import type: '{import_type}'")


class UploadNotFoundError(ImportServiceError):
    """No uploaded file (or no live ticket) exists for the given filename."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Uploaded file not found: '{filename}'")


class UploadOwnershipError(ImportServiceError):
    """The upload belongs to another user or was declared for another type."""


class InvalidUploadError(ImportServiceError):
    """The upload failed validation and strict imports are enabled."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Upload has {len(errors)} validation errors")


class UploadTooLargeError(ImportServiceError):
    """The uploaded file exceeds the configured size limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"File too large. Maximum upload size is {limit // (1024 * 1024)}MB")
