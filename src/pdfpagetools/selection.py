"""Page selection expressions.

Grammar::

    expression := "all" | term (sep term)*
    sep        := "," | ";" | whitespace
    term       := INTEGER | INTEGER "-" INTEGER

Terms are 1-based and ranges are inclusive. A reversed range (`"5-2"`) selects nothing.
Whitespace around a range dash is ignored, so `"1 - 3"` reads as `"1-3"`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pdfpagetools.exceptions import InvalidPageSelection
from pdfpagetools.typing.enums import SelectionMode, SelectionOrder
from pdfpagetools.typing.models import LENIENT_SORTED

if TYPE_CHECKING:
    from pdfpagetools.typing.models import SelectionPolicy

ALL_PAGES = "all"

_SEPARATORS = re.compile(r"[,;\s]+")
_RANGE_DASH = re.compile(r"\s*-\s*")
_UNSIGNED = re.compile(r"\d+")


def split_terms(expression: str) -> list[str]:
    """Split an expression into its non-empty terms.

    Args:
        expression (str): Raw selection expression.

    Returns:
        list[str]: Terms in caller order.
    """
    collapsed = _RANGE_DASH.sub("-", expression.strip())
    return [term for term in _SEPARATORS.split(collapsed) if term]


def _parse_term(term: str) -> tuple[int, int] | None:
    """Parse one term into inclusive 1-based bounds.

    Args:
        term (str): Single term.

    Returns:
        tuple[int, int] | None: `(start, end)` bounds, or None when the term is malformed.
    """
    if "-" in term:
        parts = term.split("-")
        if len(parts) != 2 or not all(_UNSIGNED.fullmatch(part) for part in parts):  # noqa: PLR2004
            return None
        return int(parts[0]), int(parts[1])

    if not _UNSIGNED.fullmatch(term):
        return None
    page = int(term)
    return page, page


def resolve_pages(
    expression: str,
    page_count: int,
    *,
    policy: SelectionPolicy = LENIENT_SORTED,
) -> list[int]:
    """Resolve a selection expression into zero-based page indices.

    Args:
        expression (str): Selection expression, e.g. `"1,3-5"` or `"all"`.
        page_count (int): Number of pages in the target document.
        policy (SelectionPolicy): Handling of invalid terms and ordering of the result.

    Raises:
        ValueError: If `page_count` is negative.
        InvalidPageSelection: In strict mode, when a term is malformed or out of range.

    Returns:
        list[int]: Zero-based indices, sorted and deduplicated unless the policy keeps caller order.
    """
    if page_count < 0:
        message = f"page_count must be >= 0, got {page_count}"
        raise ValueError(message)

    if expression.strip().casefold() == ALL_PAGES:
        return list(range(page_count))

    strict = policy.mode == SelectionMode.STRICT
    indices: list[int] = []
    for term in split_terms(expression):
        bounds = _parse_term(term)
        if bounds is None:
            if strict:
                raise InvalidPageSelection(term=term, page_count=page_count, reason="not a page number or range")
            continue

        start, end = bounds
        if start > end:
            continue
        if strict and (start < 1 or end > page_count):
            raise InvalidPageSelection(term=term, page_count=page_count, reason="page out of range")
        indices.extend(range(max(start, 1) - 1, min(end, page_count)))

    if policy.order == SelectionOrder.AS_GIVEN:
        return indices
    return sorted(set(indices))
