"""
Mosaic: compose large documents from small reusable text fragments.

Fragments are Markdown files with optional YAML metadata. They reference
each other with {{ selector }} tokens and use {{ $variable }} tokens for
values supplied by the session.
"""

from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsCollector
from .exceptions import (
    ConfigValidationError,
    DirectoryError,
    DirectoryNotFoundError,
    InvalidSelectorError,
    MosaicError,
    PayloadValidationError,
    RootNotDirectoryError,
    ValidationError,
    VariablesValidationError,
)
from .session import Composition, Mosaic

__version__ = "0.1.0"

__all__ = [
    "Composition",
    "ConfigValidationError",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticsCollector",
    "DirectoryError",
    "DirectoryNotFoundError",
    "InvalidSelectorError",
    "Mosaic",
    "MosaicError",
    "PayloadValidationError",
    "RootNotDirectoryError",
    "ValidationError",
    "VariablesValidationError",
]
