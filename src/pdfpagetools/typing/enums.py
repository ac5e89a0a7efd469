"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class OperationKind(_EnumMixin):
    """Supported page operations."""

    ADD_IMAGE = "addImage"
    WATERMARK = "watermark"
    DELETE = "delete"
    EXTRACT_PAGES = "extractPages"
    EXTRACT_TEXT = "extractText"
    MERGE = "merge"
    METADATA = "metadata"
    REORDER = "reorder"
    ROTATE = "rotate"
    SPLIT = "split"


class SelectionMode(_EnumMixin):
    """How unparsable or out-of-range selection terms are handled."""

    LENIENT = "lenient"
    STRICT = "strict"


class SelectionOrder(_EnumMixin):
    """Whether resolved pages are normalized or kept in caller order."""

    SORTED = "sorted"
    AS_GIVEN = "as_given"


class MimeType(_EnumMixin):
    """MIME types accepted as operation inputs."""

    PDF = "application/pdf"
    PNG = "image/png"
    JPEG = "image/jpeg"


class SplitMode(_EnumMixin):
    """Whether a split yields one document with the selection or one document per page."""

    RANGE = "range"
    PAGES = "pages"
