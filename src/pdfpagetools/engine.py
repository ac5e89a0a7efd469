"""Page operation engine.

Each operation validates its inputs, resolves the page selection against the loaded
document, computes the page-index transformation, then mutates and saves. Documents
are only held for the duration of one `execute` call.
"""

from __future__ import annotations

from contextlib import ExitStack
from datetime import datetime
from typing import TYPE_CHECKING

from pdfpagetools.backends.pymupdf_service import PyMuPdfService
from pdfpagetools.exceptions import (
    InsufficientInputs,
    InvalidPageSelection,
    InvalidRotationAngle,
    NoPagesSelected,
    UnsupportedMediaType,
)
from pdfpagetools.logging import get_logger
from pdfpagetools.selection import resolve_pages
from pdfpagetools.typing.enums import MimeType, OperationKind, SplitMode
from pdfpagetools.typing.models import (
    LENIENT_SORTED,
    STRICT_AS_GIVEN,
    AddImageRequest,
    AddWatermarkRequest,
    DeletePagesRequest,
    DocumentBundle,
    DocumentMetadata,
    DocumentOutput,
    ExtractPagesRequest,
    ExtractTextRequest,
    JsonOutput,
    MergeRequest,
    ReadMetadataRequest,
    ReorderPagesRequest,
    RotatePagesRequest,
    SplitRequest,
)

if TYPE_CHECKING:
    from pdfpagetools.typing.models import BinaryAttachment, OperationRequest, OperationResult, SelectionPolicy
    from pdfpagetools.typing.protocol import PdfDocument, PdfService, TextExtractor

logger = get_logger(__name__)

PDF_TYPES = (MimeType.PDF.value,)
IMAGE_TYPES = (MimeType.PNG.value, MimeType.JPEG.value)
MIN_MERGE_INPUTS = 2
RIGHT_ANGLE = 90
FULL_TURN = 360


def ensure_mime_type(attachment: BinaryAttachment, expected: tuple[str, ...], *, field_name: str | None = None) -> None:
    """Check an attachment declares one of the expected MIME types.

    Args:
        attachment (BinaryAttachment): Input attachment.
        expected (tuple[str, ...]): Allowed MIME types.
        field_name (str | None): Field name used in the error message.

    Raises:
        UnsupportedMediaType: If the declared MIME type is not allowed.
    """
    if attachment.mime_type not in expected:
        raise UnsupportedMediaType(expected=expected, actual=attachment.mime_type, field_name=field_name)


def parse_hex_color(color: str) -> tuple[float, float, float]:
    """Convert `#RRGGBB` (or `RRGGBB`) into normalized RGB components.

    Args:
        color (str): Six hex digit color.

    Returns:
        tuple[float, float, float]: Red, green and blue in `[0, 1]`.
    """
    digits = color.removeprefix("#")
    return (
        int(digits[0:2], 16) / 255,
        int(digits[2:4], 16) / 255,
        int(digits[4:6], 16) / 255,
    )


def rotate_angle(current: int, delta: int) -> int:
    """Add a rotation delta and reduce it into `[0, 360)`."""
    return (current + delta) % FULL_TURN


def deletion_order(indices: list[int]) -> list[int]:
    """Return indices highest first so earlier removals never shift later ones."""
    return sorted(indices, reverse=True)


class PageOperationEngine:
    """Execute one page operation per call against a PDF service."""

    def __init__(
        self,
        service: PdfService | None = None,
        text_extractor: TextExtractor | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            service (PdfService | None): Document service, PyMuPDF by default.
            text_extractor (TextExtractor | None): Text extractor, PyMuPDF by default.
        """
        if service is None or text_extractor is None:
            default = PyMuPdfService()
            service = default if service is None else service
            text_extractor = default if text_extractor is None else text_extractor
        self._service = service
        self._text_extractor = text_extractor

    def execute(self, request: OperationRequest) -> OperationResult:
        """Run one operation.

        Args:
            request (OperationRequest): Operation variant with its parameters and inputs.

        Raises:
            TypeError: If the request is not a known operation variant.

        Returns:
            OperationResult: New document bytes, or a JSON payload for read-only operations.
        """
        logger.info("Starting operation", extra={"operation": type(request).__name__})
        match request:
            case DeletePagesRequest():
                result = self.delete_pages(request)
            case SplitRequest(mode=SplitMode.PAGES):
                result = self.split_pages(request)
            case ExtractPagesRequest() | SplitRequest():
                result = self.extract_pages(request)
            case ReorderPagesRequest():
                result = self.reorder_pages(request)
            case RotatePagesRequest():
                result = self.rotate_pages(request)
            case MergeRequest():
                result = self.merge(request)
            case AddImageRequest():
                result = self.add_image(request)
            case AddWatermarkRequest():
                result = self.add_watermark(request)
            case ReadMetadataRequest():
                result = self.read_metadata(request)
            case ExtractTextRequest():
                result = self.extract_text(request)
            case _:
                message = f"Unsupported operation request: {type(request).__name__}"
                raise TypeError(message)
        logger.info("Operation completed", extra={"operation": type(request).__name__})
        return result

    def delete_pages(self, request: DeletePagesRequest) -> DocumentOutput:
        """Remove the selected pages, highest index first."""
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        with self._service.load(request.source.data) as document:
            indices = self._resolve_required(
                request.pages,
                document.page_count,
                operation=OperationKind.DELETE,
                policy=LENIENT_SORTED,
            )
            if len(indices) == document.page_count:
                raise InvalidPageSelection(
                    term=request.pages,
                    page_count=document.page_count,
                    reason="cannot delete every page",
                )
            for index in deletion_order(indices):
                document.remove_page(index)
            logger.debug("Pages removed", extra={"removed": len(indices), "remaining": document.page_count})
            return self._output(document.save(), request.source, request.output_name)

    def extract_pages(self, request: ExtractPagesRequest | SplitRequest) -> DocumentOutput:
        """Copy the selected pages, ascending, into a new document."""
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        with self._service.load(request.source.data) as source:
            indices = self._resolve_required(
                request.pages,
                source.page_count,
                operation=request.kind,
                policy=LENIENT_SORTED,
            )
            return self._compose(source, indices, request.source, request.output_name)

    def split_pages(self, request: SplitRequest) -> DocumentBundle:
        """Copy each selected page, ascending, into its own document named `page-N.pdf`."""
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        with self._service.load(request.source.data) as source:
            indices = self._resolve_required(
                request.pages,
                source.page_count,
                operation=request.kind,
                policy=LENIENT_SORTED,
            )
            documents = []
            for index in indices:
                with self._service.create() as target:
                    target.append_pages(source, [index])
                    documents.append(DocumentOutput(data=target.save(), file_name=f"page-{index + 1}.pdf"))
        logger.debug("Document split", extra={"documents": len(documents)})
        return DocumentBundle(documents=documents)

    def reorder_pages(self, request: ReorderPagesRequest) -> DocumentOutput:
        """Rebuild the document in caller order.

        Out-of-range or malformed terms fail the whole operation; duplicates and omissions are kept.
        """
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        with self._service.load(request.source.data) as source:
            indices = self._resolve_required(
                request.order,
                source.page_count,
                operation=OperationKind.REORDER,
                policy=STRICT_AS_GIVEN,
            )
            return self._compose(source, indices, request.source, request.output_name)

    def rotate_pages(self, request: RotatePagesRequest) -> DocumentOutput:
        """Add the requested angle to each selected page, in place."""
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        if request.angle % RIGHT_ANGLE:
            raise InvalidRotationAngle(angle=request.angle)

        with self._service.load(request.source.data) as document:
            indices = resolve_pages(request.pages, document.page_count, policy=LENIENT_SORTED)
            for index in indices:
                document.set_rotation(index, rotate_angle(document.get_rotation(index), request.angle))
            return self._output(document.save(), request.source, request.output_name)

    def merge(self, request: MergeRequest) -> DocumentOutput:
        """Concatenate every page of every input, in input order."""
        if len(request.sources) < MIN_MERGE_INPUTS:
            raise InsufficientInputs(received=len(request.sources), required=MIN_MERGE_INPUTS)
        for position, source in enumerate(request.sources):
            ensure_mime_type(source, PDF_TYPES, field_name=f"sources[{position}]")

        with ExitStack() as stack:
            merged = stack.enter_context(self._service.create())
            for source in request.sources:
                document = stack.enter_context(self._service.load(source.data))
                merged.append_pages(document, range(document.page_count))
            logger.debug("Documents merged", extra={"inputs": len(request.sources), "pages": merged.page_count})
            return self._output(merged.save(), request.sources[0], request.output_name)

    def add_image(self, request: AddImageRequest) -> DocumentOutput:
        """Draw the image on each selected page, embedding it only once."""
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        ensure_mime_type(request.image, IMAGE_TYPES, field_name="image")
        placement = request.placement

        with self._service.load(request.source.data) as document:
            indices = resolve_pages(request.pages, document.page_count, policy=LENIENT_SORTED)
            image = document.embed_image(request.image.data, request.image.mime_type)
            width = image.width * placement.scale
            height = image.height * placement.scale
            for index in indices:
                document.draw_image(index, image, x=placement.x, y=placement.y, width=width, height=height)
            return self._output(document.save(), request.source, request.output_name)

    def add_watermark(self, request: AddWatermarkRequest) -> DocumentOutput:
        """Draw the watermark text on each selected page.

        The text is drawn at the style's `(x, y)` when both are set, else at the page centre.
        """
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        style = request.style
        color = parse_hex_color(style.color)

        with self._service.load(request.source.data) as document:
            indices = resolve_pages(request.pages, document.page_count, policy=LENIENT_SORTED)
            for index in indices:
                x, y = style.x, style.y
                if x is None or y is None:
                    width, height = document.page_size(index)
                    x, y = width / 2, height / 2
                document.draw_text(
                    index,
                    style.text,
                    x=x,
                    y=y,
                    font_size=style.font_size,
                    color=color,
                    opacity=style.opacity,
                )
            return self._output(document.save(), request.source, request.output_name)

    def read_metadata(self, request: ReadMetadataRequest) -> JsonOutput:
        """Return the information dictionary, empty strings for absent values."""
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        with self._service.load(request.source.data) as document:
            raw = document.read_metadata()

        values: dict[str, str] = {}
        for name, value in raw.items():
            if isinstance(value, datetime):
                values[name] = value.isoformat()
            else:
                values[name] = value or ""
        metadata = DocumentMetadata.model_validate(values)
        return JsonOutput(payload=metadata.model_dump(by_alias=True))

    def extract_text(self, request: ExtractTextRequest) -> JsonOutput:
        """Return the full document text."""
        ensure_mime_type(request.source, PDF_TYPES, field_name="source")
        text = self._text_extractor.extract_text(request.source.data)
        return JsonOutput(payload={"text": text})

    def _resolve_required(
        self,
        expression: str,
        page_count: int,
        *,
        operation: OperationKind,
        policy: SelectionPolicy,
    ) -> list[int]:
        """Resolve a selection that must contain at least one page.

        Raises:
            NoPagesSelected: If the selection is empty.
        """
        indices = resolve_pages(expression, page_count, policy=policy)
        if not indices:
            raise NoPagesSelected(operation=operation.to_str(), expression=expression)
        return indices

    def _compose(
        self,
        source: PdfDocument,
        indices: list[int],
        attachment: BinaryAttachment,
        output_name: str | None,
    ) -> DocumentOutput:
        """Copy `indices` of `source`, in order, into a new document."""
        with self._service.create() as target:
            target.append_pages(source, indices)
            return self._output(target.save(), attachment, output_name)

    @staticmethod
    def _output(data: bytes, attachment: BinaryAttachment, output_name: str | None) -> DocumentOutput:
        """Package saved bytes as a PDF output."""
        name = output_name or attachment.stem or "output"
        return DocumentOutput(data=data, file_name=f"{name}.pdf")
