"""Core domain model exports."""

from pdfpagetools.typing.models.attachments import (
    BinaryAttachment,
    DocumentBundle,
    DocumentOutput,
    JsonOutput,
    OperationResult,
)
from pdfpagetools.typing.models.operations import (
    AddImageRequest,
    AddWatermarkRequest,
    DeletePagesRequest,
    ExtractPagesRequest,
    ExtractTextRequest,
    MergeRequest,
    OperationRequest,
    ReadMetadataRequest,
    ReorderPagesRequest,
    RotatePagesRequest,
    SplitRequest,
)
from pdfpagetools.typing.models.selection import (
    LENIENT_AS_GIVEN,
    LENIENT_SORTED,
    STRICT_AS_GIVEN,
    STRICT_SORTED,
    SelectionPolicy,
)
from pdfpagetools.typing.models.styles import DocumentMetadata, ImagePlacement, WatermarkStyle

__all__ = [
    "LENIENT_AS_GIVEN",
    "LENIENT_SORTED",
    "STRICT_AS_GIVEN",
    "STRICT_SORTED",
    "AddImageRequest",
    "AddWatermarkRequest",
    "BinaryAttachment",
    "DeletePagesRequest",
    "DocumentBundle",
    "DocumentMetadata",
    "DocumentOutput",
    "ExtractPagesRequest",
    "ExtractTextRequest",
    "ImagePlacement",
    "JsonOutput",
    "MergeRequest",
    "OperationRequest",
    "OperationResult",
    "ReadMetadataRequest",
    "ReorderPagesRequest",
    "RotatePagesRequest",
    "SelectionPolicy",
    "SplitRequest",
    "WatermarkStyle",
]
