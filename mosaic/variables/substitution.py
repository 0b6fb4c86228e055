"""
Token substitution implementation.
Handles {{ $var }} variable tokens and {{ selector }} reference tokens.
"""

import re
from typing import Any, Collection, Dict, Mapping, Set

from mosaic.selectors import is_canonical_path


# {{ expr }} with arbitrary surrounding whitespace; expr may not contain braces
TOKEN_PATTERN = re.compile(r'\{\{\s*([^{}]+?)\s*\}\}')
VARIABLE_PATTERN = re.compile(r'\{\{\s*\$([A-Za-z0-9_-]+)\s*\}\}')
VARIABLE_EXPR = re.compile(r'^\$[A-Za-z0-9_-]+$')

SIGIL = '$'


def is_variable_expr(expr: str) -> bool:
    """True if a token expression names a variable."""
    return VARIABLE_EXPR.match(expr) is not None


def token_key(expr: str) -> str:
    """
    Context key a token expression is looked up under.

    Variable expressions keep their sigil ('$name'); rewritten reference
    tokens ('@a/b') map to their canonical path ('a/b'); anything else is
    its own literal key.
    """
    if is_variable_expr(expr):
        return expr
    if expr.startswith('@') and is_canonical_path(expr[1:]):
        return expr[1:]
    return expr


def reference_token(key: str) -> str:
    """Render a reference token for a key in its unambiguous form."""
    if is_canonical_path(key):
        return f"{{{{ @{key} }}}}"
    return f"{{{{ {key} }}}}"


def format_value(value: Any) -> str:
    """Convert a scalar to the text inserted into a fragment."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class TemplateSubstitutor:
    """
    Substitutes token values into fragment text.

    Missing keys never raise: they render as the empty string and are
    tracked in undefined_vars for debugging.
    """

    def __init__(self):
        """Initialize the substitutor."""
        self.undefined_vars: Set[str] = set()

    def substitute_variables(self, text: str, variables: Mapping[str, Any]) -> str:
        """
        Replace variable tokens only; reference tokens are left untouched.

        Args:
            text: Fragment body
            variables: Sigil-prefixed variable context ('$name' -> value)

        Returns:
            Text with every variable token replaced
        """
        self.undefined_vars.clear()

        def replace_var(match):
            key = f"{SIGIL}{match.group(1)}"
            if key not in variables:
                self.undefined_vars.add(match.group(1))
                return ''
            return format_value(variables[key])

        return VARIABLE_PATTERN.sub(replace_var, text)

    def substitute_all(self, text: str, context: Mapping[str, Any]) -> str:
        """
        Replace every token, variable or reference, from one context.

        Tokens without a matching context entry render as the empty string.
        Substituted text is not rescanned.

        Args:
            text: Fragment body
            context: Mapping of token keys (see token_key) to values

        Returns:
            Text with no tokens left from the original text
        """
        self.undefined_vars.clear()

        def replace_token(match):
            key = token_key(match.group(1))
            if key not in context:
                self.undefined_vars.add(key)
                return ''
            return format_value(context[key])

        return TOKEN_PATTERN.sub(replace_token, text)

    def strip_tokens(self, text: str, keys: Collection[str]) -> str:
        """
        Remove every token whose key is in keys.

        Args:
            text: Fragment body
            keys: Token keys to remove

        Returns:
            Text without the matching tokens
        """
        def remove_token(match):
            if token_key(match.group(1)) in keys:
                return ''
            return match.group(0)

        return TOKEN_PATTERN.sub(remove_token, text)
