"""
Variable payload validation and scoped variable resolution.

Global variables apply to every fragment; overrides apply to a single
canonical path and win over global values on key collision.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from mosaic.exceptions import ValidationError, VariablesValidationError
from mosaic.variables.substitution import SIGIL


logger = logging.getLogger(__name__)

Scalar = Union[str, int, float]
VariableSet = Dict[str, Scalar]
OverrideMap = Dict[str, VariableSet]


def _is_scalar(value: Any) -> bool:
    # bool is an int subclass but is not an accepted variable value
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def validate_variables(variables: Any, path: str = "variables") -> List[ValidationError]:
    """
    Check a variables payload without raising.

    Args:
        variables: Candidate mapping of names to scalars
        path: Location used in error messages

    Returns:
        List of validation errors (empty if valid)
    """
    if not isinstance(variables, Mapping):
        return [ValidationError(
            f"must be a mapping of names to strings or numbers, got {type(variables).__name__}",
            path
        )]

    errors = []
    for key, value in variables.items():
        if not isinstance(key, str):
            errors.append(ValidationError(
                f"variable name must be a string, got {type(key).__name__}", path
            ))
        elif not _is_scalar(value):
            errors.append(ValidationError(
                f"value must be a string or number, got {type(value).__name__}",
                f"{path}.{key}"
            ))
    return errors


def validate_overrides(overrides: Any, path: str = "overrides") -> List[ValidationError]:
    """
    Check an overrides payload without raising.

    Args:
        overrides: Candidate mapping of selectors to variable payloads
        path: Location used in error messages

    Returns:
        List of validation errors (empty if valid)
    """
    if not isinstance(overrides, Mapping):
        return [ValidationError(
            f"must be a mapping of selectors to variables, got {type(overrides).__name__}",
            path
        )]

    errors = []
    for selector, variables in overrides.items():
        if not isinstance(selector, str):
            errors.append(ValidationError(
                f"override selector must be a string, got {type(selector).__name__}", path
            ))
            continue
        errors.extend(validate_variables(variables, f"{path}.{selector}"))
    return errors


def decode_variables(variables: Any) -> VariableSet:
    """
    Validate a variables payload and return a copy.

    Raises:
        VariablesValidationError: If any key or value has the wrong type
    """
    errors = validate_variables(variables)
    if errors:
        raise VariablesValidationError(errors)
    return dict(variables)


def decode_overrides(overrides: Any) -> Dict[str, VariableSet]:
    """
    Validate an overrides payload and return a copy (selector keys untouched).

    Raises:
        VariablesValidationError: If any selector or variable has the wrong type
    """
    errors = validate_overrides(overrides)
    if errors:
        raise VariablesValidationError(errors)
    return {selector: dict(variables) for selector, variables in overrides.items()}


def merge_overrides(base: OverrideMap, overlay: OverrideMap) -> OverrideMap:
    """
    Merge overlay into base per path, variable by variable.

    Args:
        base: Existing override map
        overlay: New overrides (take precedence)

    Returns:
        New merged override map; inputs are not modified
    """
    result = {path: dict(variables) for path, variables in base.items()}
    for path, variables in overlay.items():
        result.setdefault(path, {}).update(variables)
    return result


class VariableResolver:
    """Builds the substitution context for one fragment."""

    def __init__(
        self,
        variables: Optional[Mapping[str, Scalar]] = None,
        overrides: Optional[Mapping[str, Mapping[str, Scalar]]] = None
    ):
        """
        Initialize resolver with a snapshot of session configuration.

        Args:
            variables: Global variables
            overrides: Canonical path -> variables, already normalized
        """
        self.variables = dict(variables or {})
        self.overrides = {path: dict(values) for path, values in (overrides or {}).items()}

    def resolve(self, path: str) -> Dict[str, Scalar]:
        """
        Merge global variables with the overrides for one canonical path.

        Args:
            path: Canonical path of the fragment being rendered

        Returns:
            Sigil-prefixed variable context (override wins)
        """
        merged = {**self.variables, **self.overrides.get(path, {})}
        context = {f"{SIGIL}{key}": value for key, value in merged.items()}
        logger.debug(f"Template variables for {path}: {context}")
        return context
