"""
Selector classification and normalization.

Supported selector formats:
- Relative path: 'some-dir/core-instructions'
- Root path, prefixed with '@': '@root-block', '@namespace/path'
- Id, prefixed with '#': '#some-id' (looked up in fragment metadata)

Every valid selector normalizes to a canonical path: a root-relative,
extension-less POSIX path such as 'general/rules/special-rules'.
"""

import logging
import posixpath
import re
from enum import Enum
from typing import Optional

from mosaic.diagnostics import DiagnosticKind, DiagnosticsCollector


logger = logging.getLogger(__name__)

SEGMENT = r'[A-Za-z0-9_-]+'
RELATIVE_PATTERN = re.compile(rf'^{SEGMENT}(?:/{SEGMENT})*$')
ROOT_PATTERN = re.compile(rf'^@{SEGMENT}(?:/{SEGMENT})*$')
ID_PATTERN = re.compile(rf'^#{SEGMENT}$')

ROOT_PREFIX = '@'
ID_PREFIX = '#'


class SelectorType(str, Enum):
    """Syntactic category of a selector."""
    RELATIVE = "relative"
    ROOT = "root"
    ID = "id"
    INVALID = "invalid"


def classify(selector: str) -> SelectorType:
    """
    Determine the selector type.

    Args:
        selector: Raw selector text (already stripped of surrounding whitespace)

    Returns:
        The selector type, INVALID when no grammar rule matches
    """
    if not isinstance(selector, str):
        return SelectorType.INVALID
    if RELATIVE_PATTERN.match(selector):
        return SelectorType.RELATIVE
    if ROOT_PATTERN.match(selector):
        return SelectorType.ROOT
    if ID_PATTERN.match(selector):
        return SelectorType.ID
    return SelectorType.INVALID


def is_canonical_path(value: str) -> bool:
    """True if value is a canonical fragment path."""
    return isinstance(value, str) and RELATIVE_PATTERN.match(value) is not None


class SelectorNormalizer:
    """
    Resolves selectors to canonical paths.

    Id selectors are looked up through the content store; relative
    selectors found inside a fragment resolve against that fragment's
    directory.
    """

    def __init__(self, store, diagnostics: DiagnosticsCollector):
        """
        Initialize normalizer.

        Args:
            store: ContentStore used for id lookups
            diagnostics: Sink for duplicate id reports
        """
        self.store = store
        self.diagnostics = diagnostics

    def normalize(self, selector: str, base_path: Optional[str] = None) -> Optional[str]:
        """
        Normalize a selector to a canonical path.

        Args:
            selector: Raw selector text
            base_path: Canonical path of the referencing fragment; None
                for selectors given at the top level (compose, overrides)

        Returns:
            Canonical path, or None if the selector is invalid or the id is unknown
        """
        selector_type = classify(selector)

        if selector_type == SelectorType.INVALID:
            return None

        if selector_type == SelectorType.ROOT:
            return selector[len(ROOT_PREFIX):]

        if selector_type == SelectorType.ID:
            return self._lookup_id(selector[len(ID_PREFIX):], base_path or "")

        # Relative: resolve against the referencing fragment's directory
        if base_path:
            directory = posixpath.dirname(base_path)
            if directory:
                return f"{directory}/{selector}"
        return selector

    def _lookup_id(self, fragment_id: str, referrer: str) -> Optional[str]:
        match = self.store.find_by_id(fragment_id)
        if match.is_duplicate:
            self.diagnostics.report(
                DiagnosticKind.DUPLICATE_ID,
                f"Multiple fragments found with id '#{fragment_id}': "
                f"{', '.join(match.matches)}. Using the first one: {match.path}",
                path=referrer,
                subject=f"{ID_PREFIX}{fragment_id}"
            )
        if match.path is None:
            logger.debug(f"No fragment declares id '{fragment_id}'")
        return match.path
