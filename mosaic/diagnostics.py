"""
Recoverable diagnostics side channel.

Anomalies that do not stop a composition (missing fragments, duplicate ids,
reference loops, unparsable selectors inside content) are reported here
instead of being raised. Each report is also logged at WARNING level.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set, Tuple


logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    """Category of a recoverable anomaly."""
    DUPLICATE_ID = "duplicate_id"
    MISSING_TARGET = "missing_target"
    SELF_REFERENCE = "self_reference"
    ANCESTOR_LOOP = "ancestor_loop"
    INVALID_SELECTOR = "invalid_selector"
    MALFORMED_METADATA = "malformed_metadata"


@dataclass(frozen=True)
class Diagnostic:
    """
    One recoverable anomaly.

    Attributes:
        kind: Anomaly category
        message: Human readable description (not a stable contract)
        path: Canonical path of the fragment being processed, if any
        subject: The selector, key or id the anomaly is about
    """
    kind: DiagnosticKind
    message: str
    path: str = ""
    subject: str = ""


class DiagnosticsCollector:
    """
    Collects diagnostics for one operation (a compose call or a
    configuration call).

    Identical reports (same kind, path and subject) are recorded once,
    since the same token can be seen several times while a tree is
    flattened.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        """
        Initialize an empty collector.

        Args:
            log: Logger used to emit reports (defaults to this module's logger)
        """
        self._log = log or logger
        self._diagnostics: List[Diagnostic] = []
        self._seen: Set[Tuple[DiagnosticKind, str, str]] = set()

    def report(
        self,
        kind: DiagnosticKind,
        message: str,
        path: str = "",
        subject: str = ""
    ) -> Diagnostic:
        """
        Record a diagnostic and log it.

        Args:
            kind: Anomaly category
            message: Description of the anomaly
            path: Fragment being processed
            subject: Selector/key/id concerned

        Returns:
            The recorded (or previously recorded identical) diagnostic
        """
        diagnostic = Diagnostic(kind=kind, message=message, path=path, subject=subject)
        key = (kind, path, subject)
        if key in self._seen:
            return diagnostic

        self._seen.add(key)
        self._diagnostics.append(diagnostic)
        self._log.warning(f"[{kind.value}] {message}")
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        """Return recorded diagnostics of one category, in report order."""
        return [d for d in self._diagnostics if d.kind == kind]

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """All recorded diagnostics, in report order."""
        return list(self._diagnostics)

    def __len__(self) -> int:
        return len(self._diagnostics)
