"""Compose config loader with strict validation."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from mosaic.exceptions import ConfigValidationError, ValidationError
from mosaic.frontmatter import PreservingLoader
from mosaic.variables import validate_overrides, validate_variables


@dataclass
class ComposeConfig:
    """Validated compose configuration."""
    root: Optional[Path] = None
    variables: Dict[str, Any] = field(default_factory=dict)
    overrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)


class ComposeConfigLoader:
    """Loads and validates compose config YAML.

    Example document:

        root: instructions
        variables:
          name: World
        overrides:
          "#special-rules":
            name: Friend
    """

    KNOWN_FIELDS = {'root', 'variables', 'overrides'}

    def __init__(self, base_dir: Optional[Path] = None):
        """Initialize loader.

        Args:
            base_dir: Directory a relative 'root' resolves against; defaults
                to the directory of the loaded file
        """
        self.base_dir = base_dir
        self.errors: List[ValidationError] = []

    def load(self, config_path: Path) -> ComposeConfig:
        """Load and validate a config file."""
        config_path = Path(config_path)
        self.errors = []
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                document = yaml.load(f, Loader=PreservingLoader)
        except (OSError, yaml.YAMLError) as e:
            self._add_error(f"Failed to load config: {e}")
            self._raise_validation_errors()

        if document is None:
            document = {}

        if not isinstance(document, dict):
            self._add_error("Config must be a YAML object/dictionary")
            self._raise_validation_errors()

        base_dir = self.base_dir or config_path.parent
        return self.load_mapping(document, base_dir)

    def load_mapping(self, document: Dict[str, Any], base_dir: Path) -> ComposeConfig:
        """Validate an already parsed config mapping."""
        self.errors = []
        for key in document.keys():
            if key not in self.KNOWN_FIELDS:
                self._add_error(f"Unknown field '{key}'", str(key))

        root = None
        if 'root' in document:
            if not isinstance(document['root'], str) or not document['root']:
                self._add_error("'root' must be a non-empty string", 'root')
            else:
                root = (Path(base_dir) / document['root']).resolve()

        variables = document.get('variables')
        if variables is None:
            variables = {}
        self.errors.extend(validate_variables(variables, 'variables'))

        overrides = document.get('overrides')
        if overrides is None:
            overrides = {}
        self.errors.extend(validate_overrides(overrides, 'overrides'))

        if self.errors:
            self._raise_validation_errors()

        return ComposeConfig(
            root=root,
            variables=dict(variables),
            overrides={selector: dict(values) for selector, values in overrides.items()},
        )

    def _add_error(self, message: str, path: str = "", exit_code: int = 2):
        """Add validation error."""
        self.errors.append(ValidationError(message, path, exit_code))

    def _raise_validation_errors(self):
        """Raise ConfigValidationError with accumulated errors."""
        raise ConfigValidationError(self.errors)
