from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "source": {"uri": "", "frame_interval_ms": 30, "loop": False},
    "edges": {"blur_kernel": 9, "blur_sigma": 2.0, "canny_low": 40, "canny_high": 120, "canny_aperture": 3},
    "classifier": {},
    "validator": {},
    "matcher": {},
    "render": {"enabled": True},
    "logging": {"level": "INFO", "log_file": ""},
}


def merge_dicts(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigManager:
    """Detector settings backed by a YAML file, layered over DEFAULT_CONFIG."""

    def __init__(self, path: Path | str = Path("config/config.yaml")) -> None:
        self.path = Path(path)
        self._config: Dict[str, Any] = {}
        self.load()

    @property
    def data(self) -> Dict[str, Any]:
        return self._config

    def load(self) -> None:
        loaded: Dict[str, Any] = {}
        if self.path.exists():
            with self.path.open("r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        else:
            logger.warning("Config file %s not found, using defaults", self.path)
        if not isinstance(loaded, dict):
            logger.warning("Config file %s is not a mapping, using defaults", self.path)
            loaded = {}
        self._config = merge_dicts(DEFAULT_CONFIG, loaded)

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self._config, f, sort_keys=False, allow_unicode=False)

    def get_section(self, name: str, default: Dict[str, Any] | None = None) -> Dict[str, Any]:
        section = self._config.get(name, default or {})
        return copy.deepcopy(section)

    def set_value(self, path: str, value: Any) -> None:
        """Set a nested value by dot path (e.g. 'source.uri'), creating sections as needed."""
        parts = path.split(".")
        node = self._config
        for key in parts[:-1]:
            node = node.setdefault(key, {})
        node[parts[-1]] = value

    def get_value(self, path: str, default: Any = None) -> Any:
        parts = path.split(".")
        node: Any = self._config
        for key in parts:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return copy.deepcopy(node)

    def detector_config(self) -> Dict[str, Any]:
        """Sections consumed by LightBarPipeline."""
        return {name: self.get_section(name) for name in ("edges", "classifier", "validator", "matcher")}
