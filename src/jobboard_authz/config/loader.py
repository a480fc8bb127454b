"""
Configuration loading.

Reads ``authz.yaml`` and substitutes ``${VAR}`` / ``${VAR:-default}``
references from the environment before building an AppConfig.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .schema import AppConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "authz.yaml"
CONFIG_ENV_VAR = "AUTHZ_CONFIG"

ENV_VAR_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')


def _substitute(match: re.Match) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name, default)
    if value is None:
        raise KeyError(
            f"Environment variable '{name}' is required but not set "
            f"(use ${{{name}:-default}} to make it optional)"
        )
    return value


def interpolate_env_vars(value: Any) -> Any:
    """Substitute environment references in every string of a parsed YAML tree."""
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(_substitute, value)
    if isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [interpolate_env_vars(v) for v in value]
    return value


def load_config_from_file(config_path: Union[str, Path]) -> AppConfig:
    """
    Load an AppConfig from a YAML file.

    Raises:
        FileNotFoundError: the file does not exist
        KeyError: a required environment variable is unset
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")
    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.from_dict(interpolate_env_vars(raw_config))


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    working_dir: Optional[Union[str, Path]] = None,
) -> AppConfig:
    """
    Resolve and load the service configuration.

    Tries the explicit path, then ``$AUTHZ_CONFIG``, then ``authz.yaml`` or
    ``config/authz.yaml`` under ``working_dir`` and the current directory.
    Falls back to defaults when none exists.
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return load_config_from_file(explicit)

    roots = [Path(working_dir)] if working_dir else []
    roots.append(Path.cwd())
    for root in roots:
        for path in (root / CONFIG_FILENAME, root / "config" / CONFIG_FILENAME):
            if path.exists():
                return load_config_from_file(path)

    logger.info(f"No {CONFIG_FILENAME} found, using default configuration")
    return AppConfig()
