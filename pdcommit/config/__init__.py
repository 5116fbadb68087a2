"""Configuration Management Package"""

import json
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from pdcommit import COMMIT_TYPE_NAMES

VALID_PROVIDERS = {"auto", "claude", "ollama"}


@dataclass
class Config:
    """Tool settings with sensible defaults."""
    mapping_file: str = "pipedream-config.yaml"
    marker_file: str = "workflow.yaml"
    default_type: str = "fix"
    provider: str = "auto"
    model: Optional[str] = None
    max_diff_chars: int = 12000  # Staged diff budget for --suggest prompts

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        for name in ('mapping_file', 'marker_file'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                warnings.append(f"Invalid {name} '{value}', using '{getattr(defaults, name)}'")
                setattr(self, name, getattr(defaults, name))

        if not isinstance(self.default_type, str) or self.default_type not in COMMIT_TYPE_NAMES:
            warnings.append(f"Invalid default_type '{self.default_type}', using '{defaults.default_type}'")
            self.default_type = defaults.default_type

        if not isinstance(self.provider, str) or self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider

        if not isinstance(self.max_diff_chars, int) or self.max_diff_chars <= 0:
            warnings.append(f"Invalid max_diff_chars '{self.max_diff_chars}', using {defaults.max_diff_chars}")
            self.max_diff_chars = defaults.max_diff_chars

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigManager:
    """Loads tool settings from ./.pdcommitrc, then ~/.pdcommitrc, then defaults."""

    CONFIG_FILENAME = ".pdcommitrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top level must be an object")
            return Config.from_dict(data)
        except (ValueError, OSError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "get_config_path",
    "VALID_PROVIDERS",
]
