"""Fixtures and helpers for building fragment directories."""

from pathlib import Path
from typing import Optional

import pytest

from mosaic.diagnostics import DiagnosticsCollector
from mosaic.fragments import FragmentParser
from mosaic.selectors import SelectorNormalizer
from mosaic.store import ContentStore


def write_fragment(root: Path, key: str, body: str, fragment_id: Optional[str] = None) -> Path:
    """Create '<root>/<key>.md', with an id metadata block when fragment_id is given."""
    path = root / f"{key}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    if fragment_id is not None:
        path.write_text(f"---\nid: {fragment_id}\n---\n{body}", encoding='utf-8')
    else:
        path.write_text(body, encoding='utf-8')
    return path


@pytest.fixture
def fragments_dir(tmp_path):
    """Empty fragment root directory."""
    root = tmp_path / "fragments"
    root.mkdir()
    return root


@pytest.fixture
def diagnostics():
    return DiagnosticsCollector()


@pytest.fixture
def store(fragments_dir):
    return ContentStore(fragments_dir)


@pytest.fixture
def normalizer(store, diagnostics):
    return SelectorNormalizer(store, diagnostics)


@pytest.fixture
def parser(normalizer, diagnostics):
    return FragmentParser(normalizer, diagnostics)
