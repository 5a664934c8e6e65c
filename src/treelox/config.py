"""Interpreter settings loaded from YAML, with environment and user overrides.

Settings are looked up in this order, first match wins:
    1. An explicit path passed to load_settings (the CLI's --config)
    2. The file named by the TREELOX_CONFIG environment variable
    3. The user config file (~/.config/treelox/config.yaml)
    4. Built-in defaults

Example config.yaml:
    schema_version: "1.0"
    prompt: "lox> "
    show_source: true
    max_errors: 10
    dump_ast: false
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

__all__ = [
    "TREELOX_CONFIG",
    "Settings",
    "find_config_file",
    "load_settings",
]

# Environment variable naming a config file
TREELOX_CONFIG = "TREELOX_CONFIG"


@dataclass(frozen=True)
class Settings:
    """Driver settings. Defaults apply when no config file is found."""
    schema_version: str = "1.0"
    prompt: str = "> "
    show_source: bool = True
    max_errors: int = 20
    dump_ast: bool = False
    source_path: Optional[str] = None


_EXPECTED_TYPES = {
    "schema_version": str,
    "prompt": str,
    "show_source": bool,
    "max_errors": int,
    "dump_ast": bool,
}


def _user_config_file() -> Path:
    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"
    return config_base / "treelox" / "config.yaml"


def find_config_file(explicit: Optional[Path] = None) -> Optional[Path]:
    """Return the config file to load, or None to use defaults.

    An explicit path or one named by TREELOX_CONFIG must exist; the user
    config file is optional.
    """
    if explicit is not None:
        path = Path(explicit).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return path

    env_path = os.environ.get(TREELOX_CONFIG)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file from {TREELOX_CONFIG} not found: {path}")
        return path

    user_config = _user_config_file()
    if user_config.is_file():
        return user_config
    return None


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load and validate a YAML config file."""
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    # An empty file means all defaults
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config format in {path}: expected mapping at root")

    schema_version = data.get("schema_version", "1.0")
    if not isinstance(schema_version, str) or not schema_version.startswith("1."):
        raise ValueError(
            f"Unsupported schema version '{schema_version}' in {path}. "
            f"Expected version 1.x"
        )

    unknown = sorted(set(data) - set(_EXPECTED_TYPES))
    if unknown:
        raise ValueError(f"Unknown config key(s) in {path}: {', '.join(map(str, unknown))}")

    for key, value in data.items():
        expected = _EXPECTED_TYPES[key]
        # bool is a subclass of int, so reject it explicitly for int keys
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ValueError(
                f"Config key '{key}' in {path} must be {expected.__name__}, "
                f"got {type(value).__name__}"
            )

    if "max_errors" in data and data["max_errors"] <= 0:
        raise ValueError(f"Config key 'max_errors' in {path} must be positive")

    return data


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings following the lookup order in the module docstring.

    Raises:
        FileNotFoundError: An explicit or environment config path is missing
        ValueError: The file is malformed, has unknown keys or wrong types
    """
    config_file = find_config_file(path)
    if config_file is None:
        return Settings()

    data = _load_yaml(config_file)
    return replace(Settings(), source_path=str(config_file), **data)
