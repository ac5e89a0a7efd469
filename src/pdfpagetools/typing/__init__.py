"""Typing-centric domain modules."""

from pdfpagetools.typing.enums import MimeType, OperationKind, SelectionMode, SelectionOrder, SplitMode
from pdfpagetools.typing.models import (
    BinaryAttachment,
    DocumentMetadata,
    DocumentOutput,
    ImagePlacement,
    JsonOutput,
    OperationRequest,
    OperationResult,
    SelectionPolicy,
    WatermarkStyle,
)
from pdfpagetools.typing.protocol import EmbeddedImage, PdfDocument, PdfService, TextExtractor

__all__ = [
    "BinaryAttachment",
    "DocumentMetadata",
    "DocumentOutput",
    "EmbeddedImage",
    "ImagePlacement",
    "JsonOutput",
    "MimeType",
    "OperationKind",
    "OperationRequest",
    "OperationResult",
    "PdfDocument",
    "PdfService",
    "SelectionMode",
    "SelectionOrder",
    "SelectionPolicy",
    "SplitMode",
    "TextExtractor",
]
