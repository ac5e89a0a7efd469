"""PDF service interfaces.

Coordinates are PDF user-space points with the origin at the bottom-left corner of the page.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Self

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from types import TracebackType


class EmbeddedImage(Protocol):
    """Image resource embedded once in a document and drawable on any of its pages."""

    @property
    def width(self) -> float:
        """Natural image width in points."""

    @property
    def height(self) -> float:
        """Natural image height in points."""


class PdfDocument(Protocol):
    """Loaded document handle, valid for a single operation invocation."""

    @property
    def page_count(self) -> int:
        """Number of pages in the document."""

    def __enter__(self) -> Self:
        """Acquire the handle."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Release the handle on every exit path."""

    def append_pages(self, source: PdfDocument, indices: Sequence[int]) -> None:
        """Copy pages of `source` to the end of this document.

        Args:
            source: Document to copy from.
            indices: Zero-based page indices, copied in the given order (duplicates included).
        """

    def remove_page(self, index: int) -> None:
        """Remove one page by zero-based index."""

    def get_rotation(self, index: int) -> int:
        """Return the page rotation in degrees."""

    def set_rotation(self, index: int, degrees: int) -> None:
        """Set the page rotation in degrees."""

    def page_size(self, index: int) -> tuple[float, float]:
        """Return the page `(width, height)` in points."""

    def embed_image(self, data: bytes, mime_type: str) -> EmbeddedImage:
        """Embed a PNG or JPEG image resource.

        Args:
            data: Encoded image bytes.
            mime_type: Declared image MIME type.

        Returns:
            EmbeddedImage: Reusable image resource.
        """

    def draw_image(
        self,
        index: int,
        image: EmbeddedImage,
        *,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        """Draw an embedded image with its bottom-left corner at `(x, y)`."""

    def draw_text(
        self,
        index: int,
        text: str,
        *,
        x: float,
        y: float,
        font_size: float,
        color: tuple[float, float, float],
        opacity: float,
    ) -> None:
        """Draw text with its baseline origin at `(x, y)`."""

    def read_metadata(self) -> dict[str, str | datetime | None]:
        """Return the information dictionary keyed by `DocumentMetadata` field names."""

    def save(self) -> bytes:
        """Serialize the document."""

    def close(self) -> None:
        """Release the handle."""


class PdfService(Protocol):
    """Factory for document handles."""

    def load(self, data: bytes) -> PdfDocument:
        """Load a document from bytes.

        Args:
            data: Raw PDF bytes.

        Returns:
            PdfDocument: Loaded document handle.
        """

    def create(self) -> PdfDocument:
        """Create an empty document.

        Returns:
            PdfDocument: Empty document handle.
        """


class TextExtractor(Protocol):
    """Text extraction backend."""

    def extract_text(self, data: bytes) -> str:
        """Extract the full text of a PDF.

        Args:
            data: Raw PDF bytes.

        Returns:
            str: Extracted text.
        """
