"""Helper utility functions."""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union

from studytrack.utils.exceptions import ConfigurationError, ValidationError
from studytrack.utils.validators import Settings, validate_request

DEFAULT_CONFIG_PATH = "config/config.yaml"



def find_config(config_path: str = DEFAULT_CONFIG_PATH) -> Optional[Path]:
    """
    Locate a config file.
    Relative paths are tried from the current directory and up to 5 parents,
    then relative to the project root.
    """
    config_file = Path(config_path)

    if config_file.is_absolute():
        return config_file if config_file.exists() else None

    current = Path.cwd()
    for _ in range(5):
        candidate = current / config_path
        if candidate.exists():
            return candidate
        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / config_path
    if candidate.exists():
        return candidate

    return None


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Raises:
        FileNotFoundError: If the file cannot be located
        ConfigurationError: If the file is not a YAML mapping
    """
    config_file = find_config(config_path)
    if config_file is None:
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            f"Searched from: {Path.cwd()}"
        )

    with open(config_file, 'r') as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config root must be a mapping: {config_file}")
    return config


def get_settings(config_path: Union[str, Path, None] = None) -> Settings:
    """
    Load and validate settings.

    A missing default config file falls back to built-in defaults; an
    explicitly requested file must exist.
    """
    if config_path is None:
        try:
            raw = load_config(DEFAULT_CONFIG_PATH)
        except FileNotFoundError:
            raw = {}
    else:
        raw = load_config(str(config_path))

    try:
        return validate_request(raw, Settings)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {'; '.join(e.details.get('errors', []))}",
            error_code="CONFIG_INVALID",
            details=e.details
        ) from e
