"""
Composition session.

A Mosaic session owns the fragment root directory, the global variables
and the path-scoped overrides. Configuration calls chain; compose reads a
snapshot of the configuration and never modifies it.
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from mosaic.diagnostics import Diagnostic, DiagnosticKind, DiagnosticsCollector
from mosaic.exceptions import (
    DirectoryNotFoundError,
    InvalidSelectorError,
    RootNotDirectoryError,
)
from mosaic.fragments import FragmentParser
from mosaic.selectors import SelectorNormalizer, SelectorType, classify
from mosaic.store import ContentStore
from mosaic.tree import TreeBuilder
from mosaic.variables import (
    VariableResolver,
    decode_overrides,
    decode_variables,
    merge_overrides,
)


logger = logging.getLogger(__name__)


@dataclass
class Composition:
    """Composed text plus the recoverable diagnostics raised while composing."""
    text: str
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]


class Mosaic:
    """Composes fragment trees found below a root directory."""

    def __init__(self, root_dir: Union[str, Path]):
        """
        Create a session over a fragment directory.

        Args:
            root_dir: Directory containing the fragment files

        Raises:
            DirectoryNotFoundError: If root_dir does not exist
            RootNotDirectoryError: If root_dir is not a directory
        """
        root = Path(root_dir).resolve()
        if not root.exists():
            raise DirectoryNotFoundError(str(root))
        if not root.is_dir():
            raise RootNotDirectoryError(str(root))

        self.root_dir = root
        self.store = ContentStore(root)
        self._lock = threading.RLock()
        self._variables: Dict[str, Any] = {}
        self._overrides: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def from_directory(cls, root_dir: Union[str, Path]) -> 'Mosaic':
        """Create a session, validating the directory (same as the constructor)."""
        return cls(root_dir)

    @classmethod
    def from_config(cls, config, root_dir: Optional[Union[str, Path]] = None) -> 'Mosaic':
        """
        Create a session from a loaded ComposeConfig.

        Args:
            config: ComposeConfig from ComposeConfigLoader
            root_dir: Explicit root; takes precedence over config.root

        Returns:
            Configured session
        """
        root = root_dir or config.root or Path.cwd()
        return cls.from_directory(root).set_variables(config.variables).set_overrides(config.overrides)

    @property
    def variables(self) -> Dict[str, Any]:
        """Copy of the global variables."""
        with self._lock:
            return dict(self._variables)

    @property
    def overrides(self) -> Dict[str, Dict[str, Any]]:
        """Copy of the normalized override map."""
        with self._lock:
            return {path: dict(values) for path, values in self._overrides.items()}

    def set_variables(self, variables: Mapping[str, Any]) -> 'Mosaic':
        """
        Merge global variables; later calls win on key collision.

        Raises:
            VariablesValidationError: If any name or value has the wrong type
        """
        decoded = decode_variables(variables)
        with self._lock:
            self._variables = {**self._variables, **decoded}
        return self

    def set_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> 'Mosaic':
        """
        Merge path-scoped variable overrides.

        Selector keys are normalized now (id selectors are looked up in the
        current directory contents). Keys that cannot be normalized are
        dropped with a diagnostic.

        Raises:
            VariablesValidationError: If the payload has the wrong shape or types
        """
        decoded = decode_overrides(overrides)
        diagnostics = DiagnosticsCollector(logger)
        normalizer = SelectorNormalizer(self.store, diagnostics)

        normalized: Dict[str, Dict[str, Any]] = {}
        for selector, values in decoded.items():
            path = normalizer.normalize(selector)
            if path is None:
                if classify(selector) == SelectorType.INVALID:
                    diagnostics.report(
                        DiagnosticKind.INVALID_SELECTOR,
                        f"Ignoring override for invalid selector '{selector}'",
                        subject=selector
                    )
                else:
                    diagnostics.report(
                        DiagnosticKind.MISSING_TARGET,
                        f"Ignoring override for '{selector}': no fragment declares that id",
                        subject=selector
                    )
                continue
            normalized = merge_overrides(normalized, {path: values})

        with self._lock:
            self._overrides = merge_overrides(self._overrides, normalized)
        return self

    def compose(self, selector: str) -> str:
        """
        Compose the fragment tree rooted at selector into one text.

        Raises:
            InvalidSelectorError: If selector is syntactically invalid
        """
        return self.compose_with_diagnostics(selector).text

    def compose_with_diagnostics(self, selector: str) -> Composition:
        """
        Compose and also return the recoverable diagnostics.

        Args:
            selector: Root selector (relative, '@root' or '#id')

        Returns:
            Composition with the text and diagnostics

        Raises:
            InvalidSelectorError: If selector is syntactically invalid
        """
        if classify(selector) == SelectorType.INVALID:
            logger.error(f"{selector} is not a valid fragment selector")
            raise InvalidSelectorError(selector)

        with self._lock:
            resolver = VariableResolver(self._variables, self._overrides)

        diagnostics = DiagnosticsCollector(logger)
        normalizer = SelectorNormalizer(self.store, diagnostics)
        parser = FragmentParser(normalizer, diagnostics)
        builder = TreeBuilder(self.store, parser, resolver, diagnostics)

        # An unknown root id still composes: the literal key is absent content
        root_key = normalizer.normalize(selector) or selector
        logger.debug(f"Composing '{selector}' (canonical: '{root_key}') from {self.root_dir}")

        node = builder.build(root_key)
        return Composition(text=node.body, diagnostics=diagnostics.diagnostics)
