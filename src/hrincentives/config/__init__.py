"""Configuration file loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..schemas.config import AppConfig, load_config


class ConfigManager:
    """Load engine settings documents from a YAML directory."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML document by name without file extension."""
        path = self._base_path / f"{name}.yaml"
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    def load_app_config(self, name: str = "settings") -> AppConfig:
        """Load and validate the engine settings document."""
        return load_config(self.load(name))


__all__ = ["ConfigManager"]
