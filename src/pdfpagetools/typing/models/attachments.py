"""Binary inputs and operation outputs."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pdfpagetools.typing.enums import MimeType


class BinaryAttachment(BaseModel):
    """Binary payload supplied by the caller with its declared MIME type."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: bytes = Field(repr=False)
    mime_type: str
    file_name: str | None = None

    @classmethod
    def from_path(cls, path: Path, *, mime_type: str | None = None) -> BinaryAttachment:
        """Read an attachment from disk, guessing the MIME type from the suffix.

        Args:
            path (Path): File to read.
            mime_type (str | None): Explicit MIME type overriding the guess.

        Returns:
            BinaryAttachment: Loaded attachment.
        """
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            mime_type=mime_type or guessed or "application/octet-stream",
            file_name=path.name,
        )

    @property
    def stem(self) -> str | None:
        """Return the file name without its suffix."""
        if not self.file_name:
            return None
        return Path(self.file_name).stem


class DocumentOutput(BaseModel):
    """PDF document produced by an operation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: bytes = Field(repr=False)
    file_name: str
    mime_type: str = MimeType.PDF.value


class JsonOutput(BaseModel):
    """Structured result produced by read-only operations."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    payload: dict[str, Any]


class DocumentBundle(BaseModel):
    """Several PDF documents produced by one operation, in page order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    documents: list[DocumentOutput]


OperationResult = DocumentOutput | DocumentBundle | JsonOutput
