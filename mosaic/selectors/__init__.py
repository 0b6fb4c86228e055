"""
Selector module.
Classifies selector syntax and normalizes selectors to canonical paths.
"""

from .selector import (
    SelectorNormalizer,
    SelectorType,
    classify,
    is_canonical_path,
)

__all__ = [
    'SelectorNormalizer',
    'SelectorType',
    'classify',
    'is_canonical_path',
]
