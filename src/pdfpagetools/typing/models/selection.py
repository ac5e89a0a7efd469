"""Page selection policy model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pdfpagetools.typing.enums import SelectionMode, SelectionOrder


class SelectionPolicy(BaseModel):
    """Resolution policy applied by one operation call site."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: SelectionMode = SelectionMode.LENIENT
    order: SelectionOrder = SelectionOrder.SORTED


LENIENT_SORTED = SelectionPolicy(mode=SelectionMode.LENIENT, order=SelectionOrder.SORTED)
LENIENT_AS_GIVEN = SelectionPolicy(mode=SelectionMode.LENIENT, order=SelectionOrder.AS_GIVEN)
STRICT_SORTED = SelectionPolicy(mode=SelectionMode.STRICT, order=SelectionOrder.SORTED)
STRICT_AS_GIVEN = SelectionPolicy(mode=SelectionMode.STRICT, order=SelectionOrder.AS_GIVEN)
