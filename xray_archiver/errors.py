"""
Exception hierarchy for the archiver.

Every error raised while processing a window carries the window and the
artifact type when they are known, so a failed run says where it stopped.
"""

from __future__ import annotations

from typing import Optional

from .dto import TimeWindow


class ArchiverError(Exception):
    """Base class for all archiver failures."""

    def __init__(
        self,
        message: str,
        *,
        window: Optional[TimeWindow] = None,
        artifact: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.window = window
        self.artifact = artifact

    def annotate(self, *, window: Optional[TimeWindow] = None, artifact: Optional[str] = None) -> "ArchiverError":
        """Fill in window and artifact if the raiser did not know them."""
        if self.window is None:
            self.window = window
        if self.artifact is None:
            self.artifact = artifact
        return self

    def __str__(self) -> str:
        context = []
        if self.window is not None:
            context.append(f"window={self.window.label}")
        if self.artifact is not None:
            context.append(f"artifact={self.artifact}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConfigError(ArchiverError):
    """Configuration is missing or invalid."""


class FetchError(ArchiverError):
    """Retrieving trace summaries or segments failed."""


class MalformedDocumentError(ArchiverError):
    """A segment document could not be parsed."""


class StorageError(ArchiverError):
    """Bucket region lookup or object upload failed."""
