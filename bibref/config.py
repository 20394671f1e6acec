"""Preference storage for export settings."""

import copy
import os
from pathlib import Path
from typing import Any

import yaml

DEFAULTS: dict[str, Any] = {
    "enable_export_replacement": False,
    "export_replacement": [],
    "selected_csl_style": "apa",
    "imported_csl_styles_path": "",
}

ENV_OVERRIDES = {
    "BIBREF_CSL_STYLE": "selected_csl_style",
    "BIBREF_CSL_STYLES_PATH": "imported_csl_styles_path",
}


class Preferences:
    """Key-value preference store consulted by the engine.

    Values fall back to ``DEFAULTS`` for keys that were never set.
    """

    def __init__(self, values: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Get a preference value."""
        if key in self._values:
            return self._values[key]
        if default is not None:
            return default
        return copy.deepcopy(DEFAULTS.get(key))

    def set(self, key: str, value: Any) -> None:
        """Set a preference value."""
        self._values[key] = value

    def update(self, values: dict[str, Any]) -> None:
        """Merge values into the store."""
        self._values = _deep_merge(self._values, values)

    def to_dict(self) -> dict[str, Any]:
        """Return all values, defaults included."""
        return _deep_merge(copy.deepcopy(DEFAULTS), self._values)

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load preferences from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file must hold a mapping: {path}")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get configuration paths in precedence order."""
        paths = []

        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "bibref" / "config.yaml")

        paths.append(Path(".bibref.yaml"))
        paths.append(Path("bibref.yaml"))

        return paths

    @classmethod
    def load(cls, path: Path | None = None) -> "Preferences":
        """Load preferences from default locations, a file and the environment.

        Later sources win: default paths, then ``path``, then environment
        variables.
        """
        values: dict[str, Any] = {}

        for config_path in cls.get_config_paths():
            if config_path.exists():
                try:
                    values = _deep_merge(values, cls.from_file(config_path))
                except ValueError:
                    continue

        if path is not None:
            values = _deep_merge(values, cls.from_file(path))

        for env_name, key in ENV_OVERRIDES.items():
            if value := os.environ.get(env_name):
                values[key] = value

        return cls(values)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
