"""Drawing parameters and document metadata models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ImagePlacement(BaseModel):
    """Image position in page space and uniform scale of its natural size."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    x: float = 50.0
    y: float = 400.0
    scale: float = Field(default=0.5, gt=0.0, le=1.0)


class WatermarkStyle(BaseModel):
    """Watermark text and styling.

    `x` and `y` are optional: the watermark is centred on the page unless both are set.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str = Field(min_length=1)
    font_size: float = Field(default=50.0, gt=0.0)
    color: str = Field(default="#808080", pattern=r"^#?[0-9a-fA-F]{6}$")
    opacity: float = Field(default=0.3, ge=0.0, le=1.0)
    x: float | None = None
    y: float | None = None


class DocumentMetadata(BaseModel):
    """Document information dictionary, serialized with camelCase keys."""

    model_config = ConfigDict(extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str = ""
    author: str = ""
    subject: str = ""
    keywords: str = ""
    creator: str = ""
    producer: str = ""
    creation_date: str = ""
    modification_date: str = ""
