"""Filesystem content store for fragment files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from mosaic.frontmatter import parse_frontmatter
from mosaic.selectors import is_canonical_path


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Found:
    """Content lookup succeeded."""
    path: str
    text: str
    source: Path


@dataclass(frozen=True)
class Absent:
    """Content lookup failed; reason says why."""
    key: str
    reason: str


ContentResult = Union[Found, Absent]


@dataclass(frozen=True)
class IdMatch:
    """Results of an id search."""
    fragment_id: str
    matches: List[str] = field(default_factory=list)  # canonical paths, enumeration order

    @property
    def path(self) -> Optional[str]:
        """First match in enumeration order, or None."""
        return self.matches[0] if self.matches else None

    @property
    def is_duplicate(self) -> bool:
        """True if more than one fragment declares the id."""
        return len(self.matches) > 1


class ContentStore:
    """Reads fragments stored as '<root>/<canonical path>.md'."""

    EXTENSION = ".md"

    def __init__(self, root: Union[str, Path]):
        """Initialize store with the fragment root directory.

        Args:
            root: Directory containing the fragment files
        """
        self.root = Path(root).resolve()

    def get(self, key: str) -> ContentResult:
        """Fetch the raw text stored under a canonical path.

        Never raises for content that cannot be found or read.

        Args:
            key: Canonical path (or an unresolved literal selector)

        Returns:
            Found with the text, or Absent with a reason
        """
        if not is_canonical_path(key):
            return Absent(key, "not a canonical fragment path")

        file_path = self.root / f"{key}{self.EXTENSION}"
        if not file_path.is_file():
            return Absent(key, f"no fragment file at {file_path}")

        # Symlinks must not escape the fragment root
        resolved = file_path.resolve()
        if not resolved.is_relative_to(self.root):
            return Absent(key, f"fragment file '{file_path}' escapes root directory")

        try:
            text = resolved.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            return Absent(key, f"fragment file unreadable: {e}")

        logger.debug(f"Loaded fragment '{key}' from {resolved}")
        return Found(path=key, text=text, source=resolved)

    def iter_paths(self) -> List[str]:
        """Enumerate canonical paths of all fragments below the root.

        Returns:
            Canonical paths in deterministic lexicographic order
        """
        paths = []
        for file_path in self.root.rglob(f"*{self.EXTENSION}"):
            if not file_path.is_file():
                continue
            relative = file_path.relative_to(self.root).as_posix()
            key = relative[:-len(self.EXTENSION)]
            # Files whose names are not addressable by a selector are skipped
            if is_canonical_path(key):
                paths.append(key)

        paths.sort()
        return paths

    def find_by_id(self, fragment_id: str) -> IdMatch:
        """Search every fragment for metadata declaring the given id.

        Args:
            fragment_id: Bare id (without the '#' prefix)

        Returns:
            IdMatch listing every fragment whose metadata 'id' equals fragment_id
        """
        matches = []
        for key in self.iter_paths():
            result = self.get(key)
            if not isinstance(result, Found):
                continue
            # Cheap textual pre-filter before parsing YAML
            if fragment_id not in result.text:
                continue

            metadata = parse_frontmatter(result.text).metadata
            if metadata and isinstance(metadata.get('id'), str) and metadata['id'] == fragment_id:
                matches.append(key)

        return IdMatch(fragment_id=fragment_id, matches=matches)
