"""
Variable module.
Implements payload validation, scoped resolution and token substitution.
"""

from .resolver import (
    VariableResolver,
    decode_overrides,
    decode_variables,
    merge_overrides,
    validate_overrides,
    validate_variables,
)
from .substitution import TemplateSubstitutor

__all__ = [
    'TemplateSubstitutor',
    'VariableResolver',
    'decode_overrides',
    'decode_variables',
    'merge_overrides',
    'validate_overrides',
    'validate_variables',
]
