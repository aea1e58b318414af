"""Exception hierarchy for the matching pipeline."""
from __future__ import annotations


class FaceMatchError(RuntimeError):
    """Base class for errors that abort a run."""


class FilenameParseError(FaceMatchError):
    """A reference image key does not encode an identity label."""

    def __init__(self, key: str) -> None:
        super().__init__(f"error parsing filename {key}")
        self.key = key


class StackOutputError(FaceMatchError):
    """The Pulumi stack could not be read or lacks required outputs."""


class StorageError(FaceMatchError):
    """An S3 call failed."""


class RekognitionError(FaceMatchError):
    """A Rekognition call failed (as opposed to returning no results)."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"error in {operation}: {message}")
        self.operation = operation


__all__ = [
    "FaceMatchError",
    "FilenameParseError",
    "RekognitionError",
    "StackOutputError",
    "StorageError",
]
