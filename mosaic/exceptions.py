"""Mosaic exceptions."""

from typing import List
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class MosaicError(Exception):
    """Base class for fatal composition errors."""

    exit_code = 2


class DirectoryError(MosaicError):
    """Raised when the fragment root directory cannot be used."""

    def __init__(self, directory: str, message: str):
        self.directory = directory
        super().__init__(message)


class DirectoryNotFoundError(DirectoryError):
    """The fragment root directory does not exist."""

    def __init__(self, directory: str):
        super().__init__(directory, f"Directory does not exist: {directory}")


class RootNotDirectoryError(DirectoryError):
    """The fragment root exists but is not a directory."""

    def __init__(self, directory: str):
        super().__init__(directory, f"Item is not a directory: {directory}")


class InvalidSelectorError(MosaicError):
    """Raised when the selector passed to compose is syntactically invalid."""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"'{selector}' is not a valid fragment selector")


class PayloadValidationError(MosaicError):
    """Raised when a variables, overrides or config payload fails validation.

    All problems found in the payload are collected first, so callers
    (the CLI in particular) can report every one of them at once.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2

        messages = []
        for error in errors:
            if error.path:
                messages.append(f"Validation error at '{error.path}': {error.message}")
            else:
                messages.append(f"Validation error: {error.message}")

        super().__init__("\n".join(messages))


class VariablesValidationError(PayloadValidationError):
    """Variables or overrides contain keys or values of the wrong type."""


class ConfigValidationError(PayloadValidationError):
    """Compose config file is malformed."""
