"""PDF service backends."""

from pdfpagetools.backends.pymupdf_service import PyMuPdfDocument, PyMuPdfImage, PyMuPdfService
from pdfpagetools.typing.protocol import PdfDocument, PdfService, TextExtractor

__all__ = [
    "PdfDocument",
    "PdfService",
    "PyMuPdfDocument",
    "PyMuPdfImage",
    "PyMuPdfService",
    "TextExtractor",
]
