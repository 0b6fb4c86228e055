"""Leading YAML metadata block ("frontmatter") parsing for fragment files."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml


class PreservingLoader(yaml.SafeLoader):
    """YAML loader that keeps 'on', 'off', 'yes', 'no' as strings instead of booleans."""
    pass


# Only 'true'/'false' stay booleans; an id such as 'on' or 'no' remains a string
PreservingLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers
        if not (tag == 'tag:yaml.org,2002:bool' and first not in 'tTfF')
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

FRONTMATTER_PATTERN = re.compile(
    r'\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?',
    re.DOTALL | re.MULTILINE
)


@dataclass(frozen=True)
class ParsedDocument:
    """
    Raw fragment text split into metadata and body.

    Attributes:
        metadata: Key/value mapping from the leading block, None when absent or empty
        body: Text following the metadata block (the whole text when there is none)
        error: YAML error message when the block could not be loaded
    """
    metadata: Optional[Dict[str, Any]]
    body: str
    error: Optional[str] = None


def parse_frontmatter(text: str) -> ParsedDocument:
    """
    Split raw fragment text into its metadata block and body.

    Args:
        text: Raw file contents

    Returns:
        ParsedDocument; never raises for malformed YAML
    """
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return ParsedDocument(metadata=None, body=text)

    body = text[match.end():]
    try:
        data = yaml.load(match.group(1), Loader=PreservingLoader)
    except yaml.YAMLError as e:
        return ParsedDocument(metadata=None, body=body, error=str(e))

    if not isinstance(data, dict) or not data:
        return ParsedDocument(metadata=None, body=body)

    return ParsedDocument(metadata=data, body=body)
