"""
Configuration management and loading.

Handles recorder settings and environment variables.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

CONFIG_ENV_VAR = "CLINE_USAGE_CONFIG"
DOCUMENTS_DIR_ENV_VAR = "CLINE_DOCUMENTS_DIR"


@dataclass(frozen=True)
class RecorderConfig:
    """Where and how the usage log is written."""
    documents_dir: Optional[str] = None
    app_dir_name: str = "Cline"
    log_filename: str = "usage_log.json"
    indent: int = 2

    def __post_init__(self):
        """Validate names are plain path segments and indent is sane."""
        _require_segment(self.app_dir_name, "app_dir_name")
        _require_segment(self.log_filename, "log_filename")
        if isinstance(self.indent, bool) or not isinstance(self.indent, int) or self.indent < 0:
            raise ValueError("indent must be an integer >= 0")
        if self.documents_dir is not None and not str(self.documents_dir).strip():
            raise ValueError("documents_dir cannot be empty")


def _require_segment(value: Any, name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")
    if "/" in value or "\\" in value or value in (".", ".."):
        raise ValueError(f"{name} must be a single path segment, got {value!r}")


def load_recorder_config(path: str) -> RecorderConfig:
    """Load and validate recorder configuration from YAML file.

    Unknown keys are rejected so that a typo cannot silently send the log
    somewhere unexpected.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated RecorderConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Recorder config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")

    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    return _parse_recorder_config(raw_config)


def _parse_recorder_config(data: Dict[str, Any]) -> RecorderConfig:
    """Parse and validate the top-level configuration mapping.

    Raises:
        ValueError: If configuration is invalid
    """
    allowed_keys = {'documents_dir', 'app_dir_name', 'log_filename', 'indent'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    kwargs: Dict[str, Any] = {}

    if data.get('documents_dir') is not None:
        if not isinstance(data['documents_dir'], str):
            raise ValueError("'documents_dir' must be a string")
        kwargs['documents_dir'] = str(Path(data['documents_dir']).expanduser())

    for key in ('app_dir_name', 'log_filename'):
        if key in data:
            if not isinstance(data[key], str):
                raise ValueError(f"'{key}' must be a string")
            kwargs[key] = data[key]

    if 'indent' in data:
        indent = data['indent']
        if isinstance(indent, bool) or not isinstance(indent, int):
            raise ValueError("'indent' must be an integer")
        kwargs['indent'] = indent

    return RecorderConfig(**kwargs)


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> RecorderConfig:
    """Build configuration from environment variables.

    CLINE_USAGE_CONFIG points at a YAML file loaded first; CLINE_DOCUMENTS_DIR
    then overrides the documents directory.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        RecorderConfig, defaults when no variable is set
    """
    environ = os.environ if environ is None else environ

    config_file = environ.get(CONFIG_ENV_VAR)
    config = load_recorder_config(config_file) if config_file else RecorderConfig()

    documents_dir = environ.get(DOCUMENTS_DIR_ENV_VAR)
    if documents_dir:
        config = replace(config, documents_dir=str(Path(documents_dir).expanduser()))

    return config
