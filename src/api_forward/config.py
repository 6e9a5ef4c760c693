"""Settings loading with environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from api_forward.models.config import AppSettings

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

DEFAULT_SETTINGS_PATH = "config.yaml"


def substitute_env_vars(value: str) -> str:
    """Replace ${VAR} and ${VAR:-default} patterns with environment values."""
    if not isinstance(value, str):
        return value

    def replace_match(match: re.Match) -> str:
        var_name, default = match.group(1), match.group(2)
        env_value = os.environ.get(var_name)
        if env_value is None:
            if default is None:
                raise ValueError(f"Environment variable '{var_name}' not set")
            return default
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def substitute_env_vars_recursive(obj: dict | list | str) -> dict | list | str:
    """Recursively substitute env vars in a nested structure."""
    if isinstance(obj, dict):
        return {k: substitute_env_vars_recursive(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [substitute_env_vars_recursive(item) for item in obj]
    elif isinstance(obj, str):
        return substitute_env_vars(obj)
    return obj


def load_settings(path: Path) -> AppSettings:
    """Load settings from a YAML file, or defaults when the file is absent."""
    if not path.exists():
        return AppSettings()

    with open(path) as f:
        raw_settings = yaml.safe_load(f) or {}

    settings_data = substitute_env_vars_recursive(raw_settings)

    return AppSettings(**settings_data)


def settings_path_from_env() -> Path:
    """Path of the settings file, from API_FORWARD_CONFIG or the default."""
    return Path(os.environ.get("API_FORWARD_CONFIG", DEFAULT_SETTINGS_PATH))
