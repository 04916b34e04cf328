from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from wmlink.config.schema import ClientConfig


class ConfigError(Exception):
    """Raised when config loading or validation fails."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """``$XDG_CONFIG_HOME/wmlink/config.yaml``, falling back to ``~/.config``."""
    env = os.environ if environ is None else environ
    base = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "wmlink" / "config.yaml"


class ConfigLoader:
    """Reads the client config file and validates it. A missing file means defaults."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else default_config_path()

    def load(self) -> ClientConfig:
        if not self.path.exists():
            return ClientConfig()
        if not self.path.is_file():
            raise ConfigError(self.path, "Config path is not a file")

        try:
            raw = yaml.safe_load(self.path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(self.path, f"Invalid YAML: {e}") from e

        if raw is None:
            return ClientConfig()
        if not isinstance(raw, dict):
            raise ConfigError(self.path, "Expected a YAML mapping at top level")

        try:
            return ClientConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(self.path, f"Validation error: {e}") from e
