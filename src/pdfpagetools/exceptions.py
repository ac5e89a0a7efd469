"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class InvalidPageSelection(PackageError):
    """Raised when a page selection term cannot be resolved in strict mode."""

    term: str
    page_count: int
    reason: str = "invalid page selection"

    def __str__(self) -> str:
        """Return error message payload."""
        if self.page_count <= 0:
            return f"Invalid page selection term '{self.term}' ({self.reason}): document has no pages"
        return (
            f"Invalid page selection term '{self.term}' ({self.reason}): "
            f"pages must be between 1 and {self.page_count}"
        )


@dataclass(frozen=True)
class NoPagesSelected(PackageError):
    """Raised when an operation requiring pages resolves to an empty selection."""

    operation: str
    expression: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"No pages selected for '{self.operation}' with expression '{self.expression}'"


@dataclass(frozen=True)
class UnsupportedMediaType(PackageError):
    """Raised when a binary input does not have one of the expected MIME types."""

    expected: tuple[str, ...]
    actual: str | None
    field_name: str | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        where = f" for '{self.field_name}'" if self.field_name else ""
        return (
            f"Unsupported MIME type{where}: {self.actual or 'none'}. "
            f"Expected one of: {', '.join(self.expected)}"
        )


@dataclass(frozen=True)
class UnsupportedImageFormat(PackageError):
    """Raised when an image cannot be embedded because its format is not PNG or JPEG."""

    mime_type: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Unsupported image format: {self.mime_type}. Supported formats: PNG, JPEG"


@dataclass(frozen=True)
class InsufficientInputs(PackageError):
    """Raised when a merge receives fewer than two documents."""

    received: int
    required: int = 2

    def __str__(self) -> str:
        """Return error message payload."""
        return f"At least {self.required} PDF documents are required to merge, got {self.received}"


@dataclass(frozen=True)
class MissingBinaryField(PackageError):
    """Raised when a named binary attachment is absent from an input item."""

    field_name: str
    available: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        """Return error message payload."""
        available = ", ".join(self.available) if self.available else "none"
        return f"No binary data found for '{self.field_name}' (available: {available})"


@dataclass(frozen=True)
class InvalidRotationAngle(PackageError):
    """Raised when a rotation angle is not a multiple of 90 degrees."""

    angle: int

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Rotation angle must be a multiple of 90 degrees, got {self.angle}"


@dataclass(frozen=True)
class ExternalServiceFailure(PackageError):
    """Raised when the PDF codec or the text extractor fails."""

    message: str
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class ItemProcessingError(PackageError):
    """Raised when one item of a batch fails, carrying the originating item index."""

    item_index: int
    error: BaseException

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Item {self.item_index} failed: {self.error}"
