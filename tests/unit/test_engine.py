from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest

from pdfpagetools.engine import PageOperationEngine, deletion_order, parse_hex_color, rotate_angle
from pdfpagetools.exceptions import (
    InsufficientInputs,
    InvalidPageSelection,
    InvalidRotationAngle,
    NoPagesSelected,
    UnsupportedMediaType,
)
from pdfpagetools.typing.enums import SplitMode
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
    JsonOutput,
    MergeRequest,
    ReadMetadataRequest,
    ReorderPagesRequest,
    RotatePagesRequest,
    SplitRequest,
    WatermarkStyle,
)


@pytest.fixture
def engine(fake_service) -> PageOperationEngine:
    return PageOperationEngine(service=fake_service, text_extractor=fake_service)


def _calls(fake_service, name: str) -> list[tuple]:
    return [call for call in fake_service.calls if call[0] == name]


def test_delete_removes_pages_highest_index_first(engine, fake_service, fake_pdf, labels) -> None:
    result = engine.execute(DeletePagesRequest(source=fake_pdf(5), pages="2,4"))

    assert isinstance(result, DocumentOutput)
    assert labels(result.data) == ["p1", "p3", "p5"]
    assert _calls(fake_service, "remove") == [("remove", 3), ("remove", 1)]


def test_delete_output_is_named_after_source(engine, fake_pdf) -> None:
    result = engine.execute(DeletePagesRequest(source=fake_pdf(3), pages="1"))

    assert result.file_name == "p.pdf"
    assert result.mime_type == "application/pdf"


def test_delete_uses_explicit_output_name(engine, fake_pdf) -> None:
    result = engine.execute(DeletePagesRequest(source=fake_pdf(3), pages="1", output_name="output"))

    assert result.file_name == "output.pdf"


@pytest.mark.parametrize("pages", ["", "9", "abc", "3-1"])
def test_delete_requires_a_selected_page(engine, fake_service, fake_pdf, pages: str) -> None:
    with pytest.raises(NoPagesSelected, match="delete"):
        engine.execute(DeletePagesRequest(source=fake_pdf(2), pages=pages))

    assert _calls(fake_service, "remove") == []


def test_delete_refuses_removing_every_page(engine, fake_service, fake_pdf) -> None:
    with pytest.raises(InvalidPageSelection, match="cannot delete every page"):
        engine.execute(DeletePagesRequest(source=fake_pdf(3), pages="all"))

    assert _calls(fake_service, "remove") == []


def test_extract_copies_selected_pages_ascending(engine, fake_service, fake_pdf, labels) -> None:
    result = engine.execute(ExtractPagesRequest(source=fake_pdf(5), pages="4,2,2,9"))

    assert labels(result.data) == ["p2", "p4"]
    assert _calls(fake_service, "append") == [("append", [1, 3])]


def test_split_behaves_like_extract(engine, fake_pdf, labels) -> None:
    result = engine.execute(SplitRequest(source=fake_pdf(3), pages="1-2"))

    assert labels(result.data) == ["p1", "p2"]


def test_split_per_page_returns_one_document_per_page(engine, fake_service, fake_pdf, labels) -> None:
    result = engine.execute(SplitRequest(source=fake_pdf(4), pages="3,1", mode=SplitMode.PAGES))

    assert isinstance(result, DocumentBundle)
    assert [document.file_name for document in result.documents] == ["page-1.pdf", "page-3.pdf"]
    assert [labels(document.data) for document in result.documents] == [["p1"], ["p3"]]
    assert _calls(fake_service, "append") == [("append", [0]), ("append", [2])]


def test_split_per_page_requires_a_selected_page(engine, fake_pdf) -> None:
    with pytest.raises(NoPagesSelected, match="split"):
        engine.execute(SplitRequest(source=fake_pdf(3), pages="9", mode=SplitMode.PAGES))


def test_extract_requires_a_selected_page(engine, fake_pdf) -> None:
    with pytest.raises(NoPagesSelected, match="extractPages"):
        engine.execute(ExtractPagesRequest(source=fake_pdf(3), pages="7"))


def test_reorder_preserves_caller_order_and_duplicates(engine, fake_pdf, labels) -> None:
    result = engine.execute(ReorderPagesRequest(source=fake_pdf(3), order="3,1,1"))

    assert labels(result.data) == ["p3", "p1", "p1"]


def test_reorder_allows_omitting_pages(engine, fake_pdf, labels) -> None:
    result = engine.execute(ReorderPagesRequest(source=fake_pdf(4), order="2 4"))

    assert labels(result.data) == ["p2", "p4"]


@pytest.mark.parametrize("order", ["1,5", "2,x", "0"])
def test_reorder_fails_on_invalid_term(engine, fake_service, fake_pdf, order: str) -> None:
    with pytest.raises(InvalidPageSelection):
        engine.execute(ReorderPagesRequest(source=fake_pdf(3), order=order))

    assert _calls(fake_service, "append") == []
    assert all(document.closed for document in fake_service.documents)


def test_reorder_requires_an_order(engine, fake_pdf) -> None:
    with pytest.raises(NoPagesSelected, match="reorder"):
        engine.execute(ReorderPagesRequest(source=fake_pdf(3), order=""))


def test_rotate_is_additive_modulo_360(engine, fake_pdf) -> None:
    result = engine.execute(
        RotatePagesRequest(source=fake_pdf(2, rotations=[270, 0]), pages="1", angle=180),
    )

    assert isinstance(result, DocumentOutput)
    assert [page["rotation"] for page in _saved_pages(result)] == [90, 0]


def test_rotate_negative_angle_uses_floor_modulo(engine, fake_service, fake_pdf) -> None:
    engine.execute(RotatePagesRequest(source=fake_pdf(3), pages="all", angle=-90))

    assert _calls(fake_service, "set_rotation") == [
        ("set_rotation", 0, 270),
        ("set_rotation", 1, 270),
        ("set_rotation", 2, 270),
    ]


def test_rotate_saves_in_place_without_new_document(engine, fake_service, fake_pdf) -> None:
    engine.execute(RotatePagesRequest(source=fake_pdf(2), pages="2"))

    assert _calls(fake_service, "create") == []


def test_rotate_ignores_out_of_range_pages(engine, fake_service, fake_pdf) -> None:
    engine.execute(RotatePagesRequest(source=fake_pdf(2), pages="5"))

    assert _calls(fake_service, "set_rotation") == []


def test_rotate_rejects_non_right_angle(engine, fake_service, fake_pdf) -> None:
    with pytest.raises(InvalidRotationAngle, match="45"):
        engine.execute(RotatePagesRequest(source=fake_pdf(2), pages="1", angle=45))

    assert _calls(fake_service, "load") == []


def test_merge_concatenates_in_input_order(engine, fake_service, fake_pdf, labels) -> None:
    first = fake_pdf(2, prefix="a")
    second = fake_pdf(3, prefix="b")

    result = engine.execute(MergeRequest(sources=[first, second]))

    assert labels(result.data) == ["a1", "a2", "b1", "b2", "b3"]
    assert result.file_name == "a.pdf"
    assert all(document.closed for document in fake_service.documents)


@pytest.mark.parametrize("count", [0, 1])
def test_merge_requires_two_documents(engine, fake_pdf, count: int) -> None:
    with pytest.raises(InsufficientInputs, match="At least 2"):
        engine.execute(MergeRequest(sources=[fake_pdf(1) for _ in range(count)]))


def test_merge_validates_every_input_type(engine, fake_service, fake_pdf) -> None:
    text = BinaryAttachment(data=b"hello", mime_type="text/plain")

    with pytest.raises(UnsupportedMediaType, match=r"sources\[1\]"):
        engine.execute(MergeRequest(sources=[fake_pdf(1), text]))

    assert fake_service.calls == []


def test_add_image_embeds_once_and_draws_on_every_page(engine, fake_service, fake_pdf, png_attachment) -> None:
    request = AddImageRequest(
        source=fake_pdf(3),
        image=png_attachment,
        placement=ImagePlacement(x=10, y=20, scale=0.5),
    )

    engine.execute(request)

    assert _calls(fake_service, "embed") == [("embed", "image/png")]
    draws = _calls(fake_service, "draw_image")
    assert [draw[1] for draw in draws] == [0, 1, 2]
    assert {draw[2] for draw in draws} == {draws[0][2]}
    assert {draw[3:] for draw in draws} == {(10, 20, 100.0, 50.0)}


def test_add_image_only_on_selected_pages(engine, fake_service, fake_pdf, png_attachment) -> None:
    engine.execute(AddImageRequest(source=fake_pdf(4), image=png_attachment, pages="2,4"))

    assert [draw[1] for draw in _calls(fake_service, "draw_image")] == [1, 3]


def test_add_image_rejects_unsupported_image_type(engine, fake_service, fake_pdf) -> None:
    gif = BinaryAttachment(data=b"GIF89a", mime_type="image/gif")

    with pytest.raises(UnsupportedMediaType, match="image/gif"):
        engine.execute(AddImageRequest(source=fake_pdf(1), image=gif))

    assert fake_service.calls == []


def test_watermark_defaults_to_page_centre(engine, fake_service, fake_pdf) -> None:
    style = WatermarkStyle(text="DRAFT", font_size=40, color="#FF0000", opacity=0.5)

    engine.execute(AddWatermarkRequest(source=fake_pdf(2), style=style))

    assert _calls(fake_service, "draw_text") == [
        ("draw_text", 0, "DRAFT", 300.0, 400.0, 40, (1.0, 0.0, 0.0), 0.5),
        ("draw_text", 1, "DRAFT", 300.0, 400.0, 40, (1.0, 0.0, 0.0), 0.5),
    ]


def test_watermark_honours_caller_coordinates(engine, fake_service, fake_pdf) -> None:
    style = WatermarkStyle(text="COPY", x=15, y=25)

    engine.execute(AddWatermarkRequest(source=fake_pdf(3), style=style, pages="3"))

    draws = _calls(fake_service, "draw_text")
    assert len(draws) == 1
    assert draws[0][1:5] == (2, "COPY", 15, 25)


def test_watermark_with_only_x_falls_back_to_centre(engine, fake_service, fake_pdf) -> None:
    engine.execute(AddWatermarkRequest(source=fake_pdf(1), style=WatermarkStyle(text="X", x=5)))

    assert _calls(fake_service, "draw_text")[0][3:5] == (300.0, 400.0)


def test_read_metadata_defaults_and_iso_dates(engine, fake_service, fake_pdf) -> None:
    fake_service.metadata = {
        "title": "Report",
        "author": None,
        "subject": None,
        "keywords": None,
        "creator": "Writer",
        "producer": None,
        "creation_date": datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
        "modification_date": None,
    }

    result = engine.execute(ReadMetadataRequest(source=fake_pdf(1)))

    assert isinstance(result, JsonOutput)
    assert result.payload == {
        "title": "Report",
        "author": "",
        "subject": "",
        "keywords": "",
        "creator": "Writer",
        "producer": "",
        "creationDate": "2024-01-02T03:04:05+00:00",
        "modificationDate": "",
    }


def test_read_metadata_keeps_time_zone_offset(engine, fake_service, fake_pdf) -> None:
    fake_service.metadata = {
        "modification_date": datetime(2023, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=2))),
    }

    result = engine.execute(ReadMetadataRequest(source=fake_pdf(1)))

    assert result.payload["modificationDate"] == "2023-06-01T12:00:00+02:00"
    assert result.payload["title"] == ""


def test_extract_text_delegates_to_extractor(engine, fake_service, fake_pdf) -> None:
    result = engine.execute(ExtractTextRequest(source=fake_pdf(1)))

    assert result.payload == {"text": "extracted text"}
    assert _calls(fake_service, "extract_text") == [("extract_text",)]


def test_source_type_is_checked_before_loading(engine, fake_service) -> None:
    image = BinaryAttachment(data=b"png", mime_type="image/png")

    with pytest.raises(UnsupportedMediaType, match="Expected one of: application/pdf"):
        engine.execute(ExtractPagesRequest(source=image, pages="1"))

    assert fake_service.calls == []


def test_unknown_request_is_rejected(engine) -> None:
    with pytest.raises(TypeError, match="Unsupported operation request"):
        engine.execute(object())  # type: ignore[arg-type]


def test_parse_hex_color_accepts_optional_hash() -> None:
    assert parse_hex_color("#808080") == parse_hex_color("808080")
    assert parse_hex_color("#00ff00") == (0.0, 1.0, 0.0)


@pytest.mark.parametrize(
    ("current", "delta", "expected"),
    [(270, 180, 90), (0, -90, 270), (90, 270, 0), (180, -540, 0), (0, 720, 0)],
)
def test_rotate_angle(current: int, delta: int, expected: int) -> None:
    assert rotate_angle(current, delta) == expected


def test_deletion_order_is_descending() -> None:
    assert deletion_order([1, 3]) == [3, 1]


def _saved_pages(result: DocumentOutput) -> list[dict]:
    return json.loads(result.data)["pages"]


def test_engine_builds_default_backend_only_when_needed(mocker, fake_service) -> None:
    backend = mocker.patch("pdfpagetools.engine.PyMuPdfService")

    PageOperationEngine(service=fake_service, text_extractor=fake_service)
    backend.assert_not_called()

    engine = PageOperationEngine(service=fake_service)
    backend.assert_called_once_with()
    assert engine._text_extractor is backend.return_value
