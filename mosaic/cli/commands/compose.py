"""Compose command implementation."""

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any, Dict

import yaml

from mosaic.config import ComposeConfig, ComposeConfigLoader
from mosaic.exceptions import MosaicError, PayloadValidationError
from mosaic.frontmatter import PreservingLoader
from mosaic.session import Mosaic


logger = logging.getLogger(__name__)

STRICT_EXIT_CODE = 3


def parse_variables(args: Namespace) -> Dict[str, Any]:
    """Parse global variables from the command line arguments.

    Values from --var win over values from --vars-file.
    """
    variables: Dict[str, Any] = {}

    if args.vars_file:
        vars_file = Path(args.vars_file)
        if not vars_file.exists():
            raise FileNotFoundError(f"Variables file not found: {vars_file}")

        with open(vars_file, 'r', encoding='utf-8') as f:
            if vars_file.suffix == '.json':
                file_variables = json.load(f)
            else:
                file_variables = yaml.load(f, Loader=PreservingLoader)

        if not isinstance(file_variables, dict):
            raise ValueError(
                f"Variables file must contain an object, got {type(file_variables).__name__}"
            )
        variables.update(file_variables)

    if args.var:
        for item in args.var:
            if '=' not in item:
                raise ValueError(f"Invalid variable format: {item}. Expected KEY=VALUE")
            key, value = item.split('=', 1)
            variables[key] = value

    return variables


def configure_logging(args: Namespace) -> None:
    """Set up logging to stderr from --log-level/--debug/--quiet."""
    level_name = 'warning' if args.log_level == 'warn' else args.log_level
    log_level = getattr(logging, level_name.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def compose_fragments(args: Namespace) -> int:
    """
    Compose a fragment tree and write the result.

    Returns:
        0 on success, 1 on usage/IO errors, 2 on fatal validation errors,
        3 with --strict when diagnostics were recorded
    """
    configure_logging(args)

    try:
        config = ComposeConfig()
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
            config = ComposeConfigLoader().load(config_path)

        variables = parse_variables(args)
        session = Mosaic.from_config(config, root_dir=args.root)
        session.set_variables(variables)

        composition = session.compose_with_diagnostics(args.selector)
    except PayloadValidationError as e:
        for error in e.errors:
            location = f" ({error.path})" if error.path else ""
            logger.error(f"Validation error{location}: {error.message}")
        return e.exit_code
    except MosaicError as e:
        logger.error(str(e))
        return e.exit_code
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(str(e))
        return 1

    if args.output:
        output_path = Path(args.output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(composition.text, encoding='utf-8')
        except OSError as e:
            logger.error(f"Failed to write output: {e}")
            return 1
        logger.info(f"Wrote composed text to {output_path}")
    else:
        sys.stdout.write(composition.text)

    if args.strict and composition.diagnostics:
        logger.error(f"{len(composition.diagnostics)} diagnostic(s) recorded in strict mode")
        return STRICT_EXIT_CODE

    return 0
