"""Content store module for reading fragment files."""

from .content_store import Absent, ContentResult, ContentStore, Found, IdMatch

__all__ = [
    "Absent",
    "ContentResult",
    "ContentStore",
    "Found",
    "IdMatch",
]
