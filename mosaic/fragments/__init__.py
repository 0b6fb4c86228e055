"""Fragment parsing module."""

from .parser import Fragment, FragmentParser, ReferenceExtraction

__all__ = [
    "Fragment",
    "FragmentParser",
    "ReferenceExtraction",
]
