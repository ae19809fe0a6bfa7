"""
Configuration Loader Module

Loads MAXSPAN configuration from a YAML file and applies environment
variable overrides (MAXSPAN_ prefix).
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger

from maxspan.config.span_config import SpanConfig

DEFAULT_CONFIG_PATH = Path("config/maxspan.yaml")

# env var -> (section, key, type)
ENV_MAPPING = {
    "MAXSPAN_LOG_LEVEL": ("logging", "level", str),
    "MAXSPAN_LOG_FILE": ("logging", "file", str),
    "MAXSPAN_SCENARIO_DECIMALS": ("merge", "decimals", int),
    "MAXSPAN_MERGE_MODE": ("merge", "default_mode", str),
    "MAXSPAN_TOP_CONTRIBUTORS": ("report", "top_contributors", int),
}


def load_config(path: Optional[Union[str, Path]] = None) -> SpanConfig:
    """
    Load configuration from YAML, falling back to defaults.

    Args:
        path: Config file path (default: config/maxspan.yaml)

    Returns:
        SpanConfig with file settings and env overrides applied

    Raises:
        ValueError: If the resulting configuration is invalid
    """
    config_file = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if config_file.exists():
        with open(config_file, "r") as f:
            config_data = yaml.safe_load(f) or {}
        logger.info(f"Loaded config from {config_file}")
    else:
        if path is not None:
            logger.warning(f"Config file not found: {config_file}, using defaults")
        config_data = {}

    config_data = merge_config_with_env(config_data)
    config = SpanConfig.from_dict(config_data)

    errors = config.validate()
    if errors:
        error_msg = "Config validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise ValueError(error_msg)

    return config


def merge_config_with_env(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration with environment variables.

    Environment variables override config file settings.

    Examples:
        MAXSPAN_LOG_LEVEL=DEBUG
        MAXSPAN_MERGE_MODE=later-only

    Args:
        config_data: Configuration data from file

    Returns:
        New dict with env vars applied
    """
    merged = {k: dict(v) if isinstance(v, dict) else v for k, v in config_data.items()}

    for env_var, (section, key, cast) in ENV_MAPPING.items():
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue
        try:
            value = cast(env_value)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {env_value!r}") from e
        if not isinstance(merged.get(section), dict):
            merged[section] = {}
        merged[section][key] = value
        logger.debug(f"Overriding {section}.{key} from env: {env_var}")

    return merged
