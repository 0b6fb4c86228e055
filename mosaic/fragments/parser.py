"""
Fragment parsing: metadata, declared variables and declared references.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from mosaic.diagnostics import DiagnosticKind, DiagnosticsCollector
from mosaic.frontmatter import ParsedDocument, parse_frontmatter
from mosaic.selectors import SelectorNormalizer, classify, SelectorType
from mosaic.variables.substitution import (
    TOKEN_PATTERN,
    VARIABLE_PATTERN,
    is_variable_expr,
    reference_token,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fragment:
    """
    One parsed unit of content. Never mutated once built.

    Attributes:
        path: Canonical path (or the literal key for unresolved references)
        metadata: Leading key/value block, None if the fragment has none
        body: Text with reference tokens rewritten to canonical form
        variables: Declared variable names, first-appearance order
        references: Declared reference keys, first-appearance order
    """
    path: str
    metadata: Optional[Dict[str, Any]]
    body: str
    variables: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()

    @classmethod
    def empty(cls, path: str) -> 'Fragment':
        """Degraded fragment used when content is absent."""
        return cls(path=path, metadata=None, body='')


@dataclass(frozen=True)
class ReferenceExtraction:
    """References found in a body and the body with tokens normalized."""
    references: List[str] = field(default_factory=list)
    body: str = ''


class FragmentParser:
    """Parses raw fragment text and extracts its tokens."""

    def __init__(self, normalizer: SelectorNormalizer, diagnostics: DiagnosticsCollector):
        """
        Initialize parser.

        Args:
            normalizer: Resolves selectors found inside content
            diagnostics: Sink for malformed metadata and invalid selector reports
        """
        self.normalizer = normalizer
        self.diagnostics = diagnostics

    def parse(self, raw: str, path: str = "") -> ParsedDocument:
        """Split raw text into metadata and body, reporting malformed metadata."""
        document = parse_frontmatter(raw)
        if document.error:
            self.diagnostics.report(
                DiagnosticKind.MALFORMED_METADATA,
                f"Ignoring malformed metadata block in '{path}': {document.error}",
                path=path
            )
        return document

    def extract_variables(self, body: str) -> List[str]:
        """
        Declared variable names in first-appearance order, without duplicates.
        """
        names = []
        for match in VARIABLE_PATTERN.finditer(body):
            if match.group(1) not in names:
                names.append(match.group(1))
        return names

    def extract_references(self, body: str, current_path: str) -> ReferenceExtraction:
        """
        Find, normalize and deduplicate every reference token in a body.

        Relative selectors resolve against the directory of current_path.
        Selectors that cannot be normalized (invalid syntax, unknown id)
        keep their literal text as key so the lookup fails later as an
        ordinary missing target. Each resolved token is rewritten to its
        root form so ancestors re-extracting this text get the same key.

        Args:
            body: Text to scan
            current_path: Canonical path of the fragment owning the text

        Returns:
            ReferenceExtraction with keys and the rewritten body
        """
        references: List[str] = []

        def normalize_token(match):
            expr = match.group(1)
            if is_variable_expr(expr):
                return match.group(0)

            key = self.normalizer.normalize(expr, base_path=current_path)
            if key is None:
                if classify(expr) == SelectorType.INVALID:
                    self.diagnostics.report(
                        DiagnosticKind.INVALID_SELECTOR,
                        f"'{expr}' in '{current_path}' is not a valid selector; "
                        f"treating it as an unresolved reference",
                        path=current_path,
                        subject=expr
                    )
                key = expr

            if key not in references:
                references.append(key)
            return reference_token(key)

        rewritten = TOKEN_PATTERN.sub(normalize_token, body)
        return ReferenceExtraction(references=references, body=rewritten)

    def parse_fragment(self, path: str, raw: str) -> Fragment:
        """
        Build a Fragment from raw file text.

        Args:
            path: Canonical path the text was loaded from
            raw: Raw file contents

        Returns:
            Parsed Fragment
        """
        document = self.parse(raw, path)
        variables = self.extract_variables(document.body)
        extraction = self.extract_references(document.body, path)

        logger.debug(
            f"Parsed fragment '{path}': variables={variables}, references={extraction.references}"
        )
        return Fragment(
            path=path,
            metadata=document.metadata,
            body=extraction.body,
            variables=tuple(variables),
            references=tuple(extraction.references),
        )
