"""pdfpagetools package."""

from pdfpagetools.exceptions import (
    DependencyError,
    ExternalServiceFailure,
    InsufficientInputs,
    InvalidPageSelection,
    InvalidRotationAngle,
    ItemProcessingError,
    MissingBinaryField,
    NoPagesSelected,
    PackageError,
    SettingsError,
    UnsupportedImageFormat,
    UnsupportedMediaType,
)
from pdfpagetools.logging import configure_logging, get_logger
from pdfpagetools.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("pdfpagetools")

__all__ = [
    "DependencyError",
    "ExternalServiceFailure",
    "InsufficientInputs",
    "InvalidPageSelection",
    "InvalidRotationAngle",
    "ItemProcessingError",
    "MissingBinaryField",
    "NoPagesSelected",
    "PackageError",
    "Settings",
    "SettingsError",
    "UnsupportedImageFormat",
    "UnsupportedMediaType",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
]
