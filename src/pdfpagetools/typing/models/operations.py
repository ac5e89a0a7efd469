"""Operation request variants.

Each operation is one variant of a closed union discriminated on `kind`; the engine
dispatches on the variant with a `match` statement.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from pdfpagetools.typing.enums import OperationKind, SplitMode
from pdfpagetools.typing.models.attachments import BinaryAttachment  # noqa: TC001
from pdfpagetools.typing.models.styles import ImagePlacement, WatermarkStyle


class _SourceRequest(BaseModel):
    """Base payload for operations acting on one source document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source: BinaryAttachment
    output_name: str | None = None


class DeletePagesRequest(_SourceRequest):
    """Remove the selected pages."""

    kind: Literal[OperationKind.DELETE] = OperationKind.DELETE
    pages: str


class ExtractPagesRequest(_SourceRequest):
    """Copy the selected pages into a new document."""

    kind: Literal[OperationKind.EXTRACT_PAGES] = OperationKind.EXTRACT_PAGES
    pages: str


class SplitRequest(_SourceRequest):
    """Split the selected pages out of a document.

    `SplitMode.RANGE` yields one document holding the selection, `SplitMode.PAGES` one
    document per selected page.
    """

    kind: Literal[OperationKind.SPLIT] = OperationKind.SPLIT
    pages: str = "all"
    mode: SplitMode = SplitMode.RANGE


class ReorderPagesRequest(_SourceRequest):
    """Rebuild the document following a caller-given page order."""

    kind: Literal[OperationKind.REORDER] = OperationKind.REORDER
    order: str


class RotatePagesRequest(_SourceRequest):
    """Add a rotation angle to the selected pages."""

    kind: Literal[OperationKind.ROTATE] = OperationKind.ROTATE
    pages: str
    angle: int = 90


class MergeRequest(BaseModel):
    """Concatenate whole documents in the given order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal[OperationKind.MERGE] = OperationKind.MERGE
    sources: list[BinaryAttachment]
    output_name: str | None = None


class AddImageRequest(_SourceRequest):
    """Draw one PNG or JPEG image on the selected pages."""

    kind: Literal[OperationKind.ADD_IMAGE] = OperationKind.ADD_IMAGE
    image: BinaryAttachment
    pages: str = "all"
    placement: ImagePlacement = Field(default_factory=ImagePlacement)


class AddWatermarkRequest(_SourceRequest):
    """Draw watermark text on the selected pages."""

    kind: Literal[OperationKind.WATERMARK] = OperationKind.WATERMARK
    style: WatermarkStyle
    pages: str = "all"


class ReadMetadataRequest(_SourceRequest):
    """Read the document information dictionary."""

    kind: Literal[OperationKind.METADATA] = OperationKind.METADATA


class ExtractTextRequest(_SourceRequest):
    """Extract the document text."""

    kind: Literal[OperationKind.EXTRACT_TEXT] = OperationKind.EXTRACT_TEXT


OperationRequest = Annotated[
    DeletePagesRequest
    | ExtractPagesRequest
    | SplitRequest
    | ReorderPagesRequest
    | RotatePagesRequest
    | MergeRequest
    | AddImageRequest
    | AddWatermarkRequest
    | ReadMetadataRequest
    | ExtractTextRequest,
    Field(discriminator="kind"),
]
