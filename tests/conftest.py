"""Pytest marker auto-assignment by folder and shared PDF fixtures."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

import fitz
import pytest

from pdfpagetools import logger
from pdfpagetools.typing.models import BinaryAttachment

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except Exception:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


@dataclass
class FakeImage:
    width: float
    height: float


class FakeDocument:
    """In-memory document recording every mutation on its service."""

    def __init__(self, pages: list[dict[str, Any]], service: FakeService) -> None:
        self.pages = pages
        self.service = service
        self.closed = False

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        _ = (exc_type, exc, tb)
        self.close()

    def append_pages(self, source: FakeDocument, indices: Sequence[int]) -> None:
        self.service.calls.append(("append", list(indices)))
        self.pages.extend(dict(source.pages[index]) for index in indices)

    def remove_page(self, index: int) -> None:
        self.service.calls.append(("remove", index))
        del self.pages[index]

    def get_rotation(self, index: int) -> int:
        return self.pages[index]["rotation"]

    def set_rotation(self, index: int, degrees: int) -> None:
        self.service.calls.append(("set_rotation", index, degrees))
        self.pages[index]["rotation"] = degrees

    def page_size(self, index: int) -> tuple[float, float]:
        _ = index
        return 600.0, 800.0

    def embed_image(self, data: bytes, mime_type: str) -> FakeImage:
        _ = data
        self.service.calls.append(("embed", mime_type))
        return FakeImage(width=200.0, height=100.0)

    def draw_image(self, index: int, image: FakeImage, *, x: float, y: float, width: float, height: float) -> None:
        self.service.calls.append(("draw_image", index, id(image), x, y, width, height))

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
        self.service.calls.append(("draw_text", index, text, x, y, font_size, color, opacity))

    def read_metadata(self) -> dict[str, str | datetime | None]:
        return self.service.metadata

    def save(self) -> bytes:
        return json.dumps({"pages": self.pages}).encode()

    def close(self) -> None:
        self.closed = True


class FakeService:
    """PDF service and text extractor over JSON page descriptions."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.documents: list[FakeDocument] = []
        self.metadata: dict[str, str | datetime | None] = {}
        self.text = "extracted text"

    def load(self, data: bytes) -> FakeDocument:
        self.calls.append(("load",))
        document = FakeDocument(json.loads(data)["pages"], self)
        self.documents.append(document)
        return document

    def create(self) -> FakeDocument:
        self.calls.append(("create",))
        document = FakeDocument([], self)
        self.documents.append(document)
        return document

    def extract_text(self, data: bytes) -> str:
        _ = data
        self.calls.append(("extract_text",))
        return self.text


def page_labels(data: bytes) -> list[str]:
    """Return the labels of a document saved by `FakeDocument.save`."""
    return [page["label"] for page in json.loads(data)["pages"]]


@pytest.fixture
def fake_service() -> FakeService:
    return FakeService()


@pytest.fixture
def fake_pdf() -> Callable[..., BinaryAttachment]:
    """Build a fake PDF attachment with labelled pages `p1..pN`."""

    def _build(page_count: int, *, rotations: Sequence[int] | None = None, prefix: str = "p") -> BinaryAttachment:
        rotations = rotations or [0] * page_count
        pages = [{"label": f"{prefix}{number}", "rotation": rotations[number - 1]} for number in range(1, page_count + 1)]
        return BinaryAttachment(
            data=json.dumps({"pages": pages}).encode(),
            mime_type="application/pdf",
            file_name=f"{prefix}.pdf",
        )

    return _build


def build_pdf_bytes(page_count: int, *, prefix: str = "Page", width: float = 595, height: float = 842) -> bytes:
    """Create a real PDF whose page N contains the text `<prefix> N`."""
    with fitz.open() as document:
        for number in range(1, page_count + 1):
            page = document.new_page(width=width, height=height)
            page.insert_text((72, 72), f"{prefix} {number}", fontsize=12)
        return document.tobytes()


def build_png_bytes(width: int = 20, height: int = 10) -> bytes:
    """Create a white RGB PNG."""
    pixmap = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)  # noqa: FBT003
    pixmap.clear_with(255)
    return pixmap.tobytes("png")


@pytest.fixture
def real_pdf() -> Callable[..., BinaryAttachment]:
    """Build a real PyMuPDF document attachment."""

    def _build(page_count: int, *, prefix: str = "Page", file_name: str = "doc.pdf") -> BinaryAttachment:
        return BinaryAttachment(
            data=build_pdf_bytes(page_count, prefix=prefix),
            mime_type="application/pdf",
            file_name=file_name,
        )

    return _build


@pytest.fixture
def png_attachment() -> BinaryAttachment:
    return BinaryAttachment(data=build_png_bytes(), mime_type="image/png", file_name="logo.png")


@pytest.fixture
def labels() -> Callable[[bytes], list[str]]:
    """Return a reader for the page labels of fake-saved documents."""
    return page_labels


@pytest.fixture
def pdf_bytes() -> Callable[..., bytes]:
    """Return the real PDF builder."""
    return build_pdf_bytes


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    """Return the PNG builder."""
    return build_png_bytes
