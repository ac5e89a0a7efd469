"""PyMuPDF implementation of the PDF and text-extraction services."""

from __future__ import annotations

import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Self

import pymupdf as fitz

from pdfpagetools.exceptions import ExternalServiceFailure, PackageError, UnsupportedImageFormat
from pdfpagetools.logging import get_logger
from pdfpagetools.typing.enums import MimeType

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from types import TracebackType

logger = get_logger(__name__)

_PDF_DATE = re.compile(
    r"^(?:D:)?(?P<year>\d{4})(?P<month>\d{2})?(?P<day>\d{2})?"
    r"(?P<hour>\d{2})?(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?:(?P<utc>Z)|(?P<sign>[+-])(?P<tz_hour>\d{2})'?(?P<tz_minute>\d{2})?'?)?",
)

_FITZ_LOCK = threading.RLock()

_METADATA_KEYS = {
    "title": "title",
    "author": "author",
    "subject": "subject",
    "keywords": "keywords",
    "creator": "creator",
    "producer": "producer",
}


@contextmanager
def _service_call(message: str) -> Iterator[None]:
    """Serialize a PyMuPDF call and wrap its failures into `ExternalServiceFailure`.

    PyMuPDF is not thread-safe, so every call into it from this module holds `_FITZ_LOCK`.

    Args:
        message (str): Error message describing the failed call.

    Raises:
        ExternalServiceFailure: If the wrapped block raises a non-package error.
    """
    with _FITZ_LOCK:
        try:
            yield
        except PackageError:
            raise
        except Exception as exc:
            raise ExternalServiceFailure(message=message, exc=exc) from exc


def parse_pdf_date(raw: str | None) -> datetime | None:
    """Parse a PDF date string (`D:YYYYMMDDHHmmSS+HH'mm'`).

    Missing time zone information is read as UTC.

    Args:
        raw (str | None): Raw date string from the information dictionary.

    Returns:
        datetime | None: Time-zone aware datetime, or None when absent or unparsable.
    """
    if not raw:
        return None
    match = _PDF_DATE.match(raw.strip())
    if match is None:
        return None

    parts = match.groupdict()
    tz: timezone = UTC
    if parts["sign"]:
        offset = timedelta(hours=int(parts["tz_hour"]), minutes=int(parts["tz_minute"] or 0))
        tz = timezone(-offset if parts["sign"] == "-" else offset)

    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"] or 1),
            int(parts["day"] or 1),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            tzinfo=tz,
        )
    except ValueError:
        logger.warning("Ignoring invalid PDF date", extra={"raw": raw})
        return None


@dataclass
class PyMuPdfImage:
    """Image embedded lazily on first draw, then reused through its xref."""

    data: bytes = field(repr=False)
    width: float
    height: float
    xref: int = 0


class PyMuPdfDocument:
    """Document handle backed by a `fitz.Document`."""

    def __init__(self, document: fitz.Document) -> None:
        """Wrap an open PyMuPDF document.

        Args:
            document (fitz.Document): Open document, owned by this handle.
        """
        self._document = document

    @property
    def fitz_document(self) -> fitz.Document:
        """Return the underlying PyMuPDF document."""
        return self._document

    @property
    def page_count(self) -> int:
        """Return the number of pages."""
        with _service_call("Failed to read page count"):
            return self._document.page_count

    def __enter__(self) -> Self:
        """Return self for `with` blocks."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the document."""
        self.close()

    def append_pages(self, source: PyMuPdfDocument, indices: Sequence[int]) -> None:
        """Copy pages of `source` in the given order, duplicates included."""
        with _service_call("Failed to copy pages"):
            for index in indices:
                self._document.insert_pdf(source.fitz_document, from_page=index, to_page=index)

    def remove_page(self, index: int) -> None:
        """Remove one page."""
        with _service_call(f"Failed to remove page {index + 1}"):
            self._document.delete_page(index)

    def get_rotation(self, index: int) -> int:
        """Return the page rotation in degrees."""
        with _service_call(f"Failed to read rotation of page {index + 1}"):
            return self._document[index].rotation

    def set_rotation(self, index: int, degrees: int) -> None:
        """Set the page rotation in degrees."""
        with _service_call(f"Failed to rotate page {index + 1}"):
            self._document[index].set_rotation(degrees)

    def page_size(self, index: int) -> tuple[float, float]:
        """Return the unrotated page size."""
        with _service_call(f"Failed to read size of page {index + 1}"):
            box = self._document[index].cropbox
        return box.width, box.height

    def embed_image(self, data: bytes, mime_type: str) -> PyMuPdfImage:
        """Validate an image and read its natural size.

        Raises:
            UnsupportedImageFormat: If the MIME type is neither PNG nor JPEG.
        """
        if mime_type not in {MimeType.PNG, MimeType.JPEG}:
            raise UnsupportedImageFormat(mime_type=mime_type)
        with _service_call(f"Failed to decode {mime_type} image"):
            pixmap = fitz.Pixmap(data)
            width, height = float(pixmap.width), float(pixmap.height)
        return PyMuPdfImage(data=data, width=width, height=height)

    def draw_image(
        self,
        index: int,
        image: PyMuPdfImage,
        *,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        """Draw an image with its bottom-left corner at `(x, y)`."""
        with _service_call(f"Failed to draw image on page {index + 1}"):
            page = self._document[index]
            top = page.cropbox.height - y - height
            rect = fitz.Rect(x, top, x + width, top + height)
            if image.xref:
                page.insert_image(rect, xref=image.xref, keep_proportion=False)
            else:
                image.xref = page.insert_image(rect, stream=image.data, keep_proportion=False)

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
        """Draw text with its baseline origin at `(x, y)` in unrotated page space.

        `insert_text` reads its point in rotated page space, so the origin goes through the
        page rotation matrix and the text is turned with the page.
        """
        with _service_call(f"Failed to draw text on page {index + 1}"):
            page = self._document[index]
            origin = fitz.Point(x, page.cropbox.height - y) * page.rotation_matrix
            page.insert_text(
                origin,
                text,
                fontsize=font_size,
                color=color,
                fill_opacity=opacity,
                rotate=page.rotation,
            )

    def read_metadata(self) -> dict[str, str | datetime | None]:
        """Return the information dictionary with parsed dates."""
        with _service_call("Failed to read metadata"):
            raw = self._document.metadata or {}
        metadata: dict[str, str | datetime | None] = {
            name: raw.get(key) or None for name, key in _METADATA_KEYS.items()
        }
        metadata["creation_date"] = parse_pdf_date(raw.get("creationDate"))
        metadata["modification_date"] = parse_pdf_date(raw.get("modDate"))
        return metadata

    def save(self) -> bytes:
        """Serialize the document with unused objects collected."""
        with _service_call("Failed to save PDF document"):
            return self._document.tobytes(garbage=3, deflate=True)

    def close(self) -> None:
        """Close the document if still open."""
        with _service_call("Failed to close PDF document"):
            if not self._document.is_closed:
                self._document.close()


class PyMuPdfService:
    """PDF service and text extractor backed by PyMuPDF."""

    def load(self, data: bytes) -> PyMuPdfDocument:
        """Open PDF bytes.

        Raises:
            ExternalServiceFailure: If the bytes are not a readable, unencrypted PDF.
        """
        with _service_call("Failed to open PDF document"):
            document = fitz.open(stream=data, filetype="pdf")
            if document.needs_pass:
                document.close()
                raise ExternalServiceFailure(message="PDF document is encrypted")
            page_count = document.page_count
        logger.debug("PDF loaded", extra={"pages": page_count, "size": len(data)})
        return PyMuPdfDocument(document)

    def create(self) -> PyMuPdfDocument:
        """Create an empty PDF."""
        with _service_call("Failed to create PDF document"):
            return PyMuPdfDocument(fitz.open())

    def extract_text(self, data: bytes) -> str:
        """Extract the text of every page, pages separated by a blank line."""
        with self.load(data) as document, _service_call("Failed to extract text"):
            return "\n\n".join(page.get_text().rstrip("\n") for page in document.fitz_document)
