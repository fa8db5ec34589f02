"""
Configuration file support for MutexFinder CLI.

Supports YAML and JSON config files with CLI argument override. A config
file holds the permutation settings shared by many runs::

    permutation:
      iterations: 10000
      randomization_strength: 100
      seed: 42
      n_jobs: 4
"""

import json
from argparse import Namespace
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class RunConfig:
    """Permutation settings of a calculate run."""
    iterations: int = 1000
    randomization_strength: int = 100
    seed: Optional[int] = None
    n_jobs: int = 1


def load_config(path: Path) -> Dict[str, Any]:
    """
    Read a run configuration file.

    Parameters:
        path: ``.yaml``/``.yml`` (PyYAML safe loader) or ``.json`` file

    Returns:
        Parsed mapping; an empty file gives an empty mapping

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the extension is unknown, the content cannot be
            parsed, or the top level is not a mapping

    Examples:
        >>> config = load_config(Path("run.yaml"))
        >>> config['permutation']['iterations']
        10000
    """
    if not path.is_file():
        raise FileNotFoundError(f"Run configuration not found: {path}")

    kind = path.suffix.lower()
    if kind not in ('.yaml', '.yml', '.json'):
        raise ValueError(
            f"Unsupported config format: {kind or '(none)'}. "
            f"Expected .yaml, .yml or .json"
        )

    text = path.read_text(encoding='utf-8')
    try:
        config = json.loads(text) if kind == '.json' else yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"{path} must hold a mapping at top level, got {type(config).__name__}")
    return config


def validate_config(config: Dict[str, Any]) -> RunConfig:
    """
    Validate the permutation section and return it as a RunConfig.

    Raises:
        ValueError: If a value has the wrong type or range, or a key is unknown
    """
    section = config.get('permutation', {}) or {}
    if not isinstance(section, dict):
        raise ValueError("'permutation' must be a mapping")

    known = set(RunConfig.__dataclass_fields__)
    unknown = set(section) - known
    if unknown:
        raise ValueError(
            f"Unknown permutation settings: {sorted(unknown)}. "
            f"Choose from: {', '.join(sorted(known))}"
        )

    for key in ('iterations', 'randomization_strength', 'n_jobs'):
        if key in section:
            value = section[key]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{key} must be a positive integer, got: {value}")

    if section.get('seed') is not None:
        seed = section['seed']
        if not isinstance(seed, int) or isinstance(seed, bool) or seed < 0:
            raise ValueError(f"seed must be a non-negative integer, got: {seed}")

    return RunConfig(**section)


def _explicit_arg_names(cli_args: Optional[List[str]]) -> set:
    """
    Destination names of the options present on the command line.

    Long options must be spelled out (the calculate parsers disable
    abbreviations). Short options may carry a glued value (``-n7``) or follow
    value-less flags in one cluster (``-vn7``).
    """
    short_to_long = {
        'n': 'iterations',
        'o': 'output',
        's': 'seed',
        'j': 'n_jobs',
    }
    short_flags = {'v'}
    explicit = set()
    for arg in cli_args or []:
        if arg == '--':
            break
        if arg.startswith('--'):
            explicit.add(arg[2:].split('=', 1)[0].replace('-', '_'))
        elif arg.startswith('-') and len(arg) > 1:
            # A cluster ends at the first option that takes a value
            for char in arg[1:]:
                if char in short_to_long:
                    explicit.add(short_to_long[char])
                    break
                if char not in short_flags:
                    break
    return explicit


def merge_config_with_args(config: Dict[str, Any], args: Namespace, cli_args: Optional[List[str]] = None) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Parameters:
        config: Configuration dictionary from load_config()
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values)
                  If None, assumes all args are defaults

    Returns:
        Updated Namespace with merged values
    """
    run_config = validate_config(config)
    section = config.get('permutation', {}) or {}
    explicit = _explicit_arg_names(cli_args)

    merged = Namespace(**vars(args))
    for key in section:
        if key not in explicit:
            setattr(merged, key, getattr(run_config, key))
    return merged
