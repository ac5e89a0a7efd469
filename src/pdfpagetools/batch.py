"""Workflow batch adapter.

Maps named node parameters and binary attachments of each input item onto an operation
request, runs items independently and packages their outputs.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from pdfpagetools.engine import PageOperationEngine
from pdfpagetools.exceptions import ItemProcessingError, MissingBinaryField
from pdfpagetools.logging import get_logger
from pdfpagetools.settings import get_settings
from pdfpagetools.typing.enums import OperationKind, SplitMode
from pdfpagetools.typing.models import (
    AddImageRequest,
    AddWatermarkRequest,
    BinaryAttachment,
    DeletePagesRequest,
    DocumentBundle,
    DocumentOutput,
    ExtractPagesRequest,
    ExtractTextRequest,
    ImagePlacement,
    MergeRequest,
    ReadMetadataRequest,
    ReorderPagesRequest,
    RotatePagesRequest,
    SplitRequest,
    WatermarkStyle,
)

if TYPE_CHECKING:
    from pdfpagetools.settings import Settings
    from pdfpagetools.typing.models import OperationRequest

logger = get_logger(__name__)


class WatermarkOptions(BaseModel):
    """Watermark styling parameters, without the text."""

    model_config = ConfigDict(extra="forbid")

    font_size: float = Field(default=50.0, gt=0.0)
    color: str = "#808080"
    opacity: float = Field(default=0.3, ge=0.0, le=1.0)
    x: float | None = None
    y: float | None = None


class NodeParameters(BaseModel):
    """Named parameters of one node invocation."""

    model_config = ConfigDict(extra="forbid")

    operation: OperationKind
    pdf_binary_name: str = "data"
    pdf_binary_names: str = ""
    image_binary_name: str = "image"
    pages: str = "all"
    new_page_order: str = ""
    rotation_angle: int = 90
    split_mode: SplitMode = SplitMode.RANGE
    image_options: ImagePlacement = Field(default_factory=ImagePlacement)
    watermark_text: str = ""
    watermark_options: WatermarkOptions = Field(default_factory=WatermarkOptions)
    output_binary_name: str | None = None

    def merge_binary_names(self) -> list[str]:
        """Return the comma-separated merge field names, trimmed, empty entries dropped."""
        return [name.strip() for name in self.pdf_binary_names.split(",") if name.strip()]


class WorkflowItem(BaseModel):
    """Input item: JSON payload plus named binary attachments."""

    model_config = ConfigDict(extra="forbid")

    payload: dict[str, Any] = Field(default_factory=dict)
    binary: dict[str, BinaryAttachment] = Field(default_factory=dict)

    def attachment(self, name: str) -> BinaryAttachment:
        """Return a named attachment.

        Args:
            name (str): Binary field name.

        Raises:
            MissingBinaryField: If the item has no attachment with that name.

        Returns:
            BinaryAttachment: The attachment.
        """
        try:
            return self.binary[name]
        except KeyError as exc:
            raise MissingBinaryField(field_name=name, available=sorted(self.binary)) from exc


class ItemResult(BaseModel):
    """Output item, or an error-shaped item when failures are tolerated."""

    model_config = ConfigDict(extra="forbid")

    item_index: int
    payload: dict[str, Any] = Field(default_factory=dict)
    binary: dict[str, DocumentOutput] = Field(default_factory=dict)
    error: str | None = None


def build_request(
    parameters: NodeParameters,
    item: WorkflowItem,
    *,
    output_name: str | None = None,
) -> OperationRequest:
    """Build the operation request for one item.

    Args:
        parameters (NodeParameters): Node parameters.
        item (WorkflowItem): Input item holding the binary attachments.
        output_name (str | None): Output file stem.

    Raises:
        MissingBinaryField: If a named attachment is absent from the item.

    Returns:
        OperationRequest: Typed request for the engine.
    """
    if parameters.operation == OperationKind.MERGE:
        sources = [item.attachment(name) for name in parameters.merge_binary_names()]
        return MergeRequest(sources=sources, output_name=output_name)

    source = item.attachment(parameters.pdf_binary_name)
    common: dict[str, Any] = {"source": source, "output_name": output_name}
    match parameters.operation:
        case OperationKind.DELETE:
            return DeletePagesRequest(pages=parameters.pages, **common)
        case OperationKind.EXTRACT_PAGES:
            return ExtractPagesRequest(pages=parameters.pages, **common)
        case OperationKind.SPLIT:
            return SplitRequest(pages=parameters.pages, mode=parameters.split_mode, **common)
        case OperationKind.REORDER:
            return ReorderPagesRequest(order=parameters.new_page_order, **common)
        case OperationKind.ROTATE:
            return RotatePagesRequest(pages=parameters.pages, angle=parameters.rotation_angle, **common)
        case OperationKind.ADD_IMAGE:
            return AddImageRequest(
                image=item.attachment(parameters.image_binary_name),
                pages=parameters.pages,
                placement=parameters.image_options,
                **common,
            )
        case OperationKind.WATERMARK:
            style = WatermarkStyle(
                text=parameters.watermark_text,
                **parameters.watermark_options.model_dump(),
            )
            return AddWatermarkRequest(style=style, pages=parameters.pages, **common)
        case OperationKind.METADATA:
            return ReadMetadataRequest(**common)
        case OperationKind.EXTRACT_TEXT:
            return ExtractTextRequest(**common)
    message = f"Unsupported operation: {parameters.operation}"
    raise ValueError(message)


def _run_item(
    engine: PageOperationEngine,
    parameters: NodeParameters,
    item: WorkflowItem,
    item_index: int,
    *,
    output_binary_name: str,
    continue_on_fail: bool,
) -> list[ItemResult]:
    """Run one item, converting its failure according to `continue_on_fail`.

    A per-page split yields one result per produced document; every other operation yields one.

    Raises:
        ItemProcessingError: If the item fails and failures are not tolerated.
    """
    try:
        request = build_request(parameters, item, output_name=output_binary_name)
        result = engine.execute(request)
    except Exception as exc:
        if not continue_on_fail:
            raise ItemProcessingError(item_index=item_index, error=exc) from exc
        logger.warning(
            "Item failed, continuing",
            extra={"item_index": item_index, "operation": parameters.operation.to_str(), "error": str(exc)},
        )
        return [ItemResult(item_index=item_index, payload={"error": str(exc)}, error=str(exc))]

    match result:
        case DocumentBundle():
            return [
                ItemResult(item_index=item_index, binary={output_binary_name: document})
                for document in result.documents
            ]
        case DocumentOutput():
            return [ItemResult(item_index=item_index, binary={output_binary_name: result})]
    return [ItemResult(item_index=item_index, payload=result.payload)]


def process_items(
    items: list[WorkflowItem],
    parameters: NodeParameters,
    *,
    engine: PageOperationEngine | None = None,
    continue_on_fail: bool = False,
    settings: Settings | None = None,
) -> list[ItemResult]:
    """Process items in worker threads, returning results in input order.

    Calls into PyMuPDF are serialized by the backend.

    Args:
        items (list[WorkflowItem]): Input items.
        parameters (NodeParameters): Node parameters shared by all items.
        engine (PageOperationEngine | None): Engine to use, default PyMuPDF engine.
        continue_on_fail (bool): Emit error-shaped items instead of raising.
        settings (Settings | None): Runtime settings.

    Raises:
        ItemProcessingError: For the first failing item when failures are not tolerated.

    Returns:
        list[ItemResult]: One result per input item, or one per document for a per-page split.
    """
    config = settings or get_settings()
    runner = engine or PageOperationEngine()
    output_binary_name = parameters.output_binary_name or config.output_binary_name

    with ThreadPoolExecutor(max_workers=config.batch_concurrency) as pool:
        futures = [
            pool.submit(
                _run_item,
                runner,
                parameters,
                item,
                index,
                output_binary_name=output_binary_name,
                continue_on_fail=continue_on_fail,
            )
            for index, item in enumerate(items)
        ]
        results = [result for future in futures for result in future.result()]

    logger.info("Batch processed", extra={"items": len(results), "operation": parameters.operation.to_str()})
    return results


async def aprocess_items(
    items: list[WorkflowItem],
    parameters: NodeParameters,
    *,
    engine: PageOperationEngine | None = None,
    continue_on_fail: bool = False,
    settings: Settings | None = None,
) -> list[ItemResult]:
    """Async variant of `process_items`, bounded by a semaphore.

    Raises:
        ItemProcessingError: For the first failing item (by index) when failures are not tolerated.

    Returns:
        list[ItemResult]: Results in input order, flattened like `process_items`.
    """
    config = settings or get_settings()
    runner = engine or PageOperationEngine()
    output_binary_name = parameters.output_binary_name or config.output_binary_name
    semaphore = asyncio.Semaphore(config.batch_concurrency)

    async def _run(index: int, item: WorkflowItem) -> list[ItemResult]:
        async with semaphore:
            return await asyncio.to_thread(
                _run_item,
                runner,
                parameters,
                item,
                index,
                output_binary_name=output_binary_name,
                continue_on_fail=continue_on_fail,
            )

    outcomes = await asyncio.gather(
        *[_run(index, item) for index, item in enumerate(items)],
        return_exceptions=True,
    )
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome

    logger.info("Batch processed", extra={"items": len(outcomes), "operation": parameters.operation.to_str()})
    return [result for outcome in outcomes if isinstance(outcome, list) for result in outcome]
