"""Persistent key/value settings with defaults, stored as YAML."""

import copy
import logging
import os
import time
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigurationError
from .models.config import (
    DEFAULT_ENDPOINT,
    DEFAULT_MODEL,
    DeliveryConfig,
    ExtractionConfig,
    RefineConfig,
    Web2MarkdownConfig,
)
from .prompts import DEFAULT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

MAX_MODEL_HISTORY = 10

DEFAULT_SETTINGS: dict[str, Any] = {
    "include_images": True,
    "model": DEFAULT_MODEL,
    "endpoint": DEFAULT_ENDPOINT,
    "api_key": "",
    "system_prompt": DEFAULT_SYSTEM_PROMPT,
    "temperature": 0.3,
    "auto_copy": True,
    "show_notifications": True,
    "append_page_info": False,
    "model_history": [],
}

# Setting key -> configuration field, per section
EXTRACTION_FIELDS = {"include_images": "include_images"}
REFINE_FIELDS = {
    "model": "model",
    "endpoint": "endpoint",
    "api_key": "api_key",
    "system_prompt": "system_prompt",
    "temperature": "temperature",
}
DELIVERY_FIELDS = {
    "auto_copy": "auto_copy",
    "show_notifications": "show_notifications",
    "append_page_info": "append_page_info",
}


def default_settings_path() -> Path:
    """Settings file location, overridable with WEB2MARKDOWN_SETTINGS."""
    override = os.environ.get("WEB2MARKDOWN_SETTINGS")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "web2markdown" / "settings.yaml"


class SettingsStore:
    """
    YAML-backed settings store.

    Values missing from the file fall back to DEFAULT_SETTINGS. Only known
    keys may be read or written.

    Example:
        store = SettingsStore()
        store.set(model="gpt-4.1-mini", api_key="$OPENAI_API_KEY")
        config = store.to_config()
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_settings_path()
        self._data: Optional[dict[str, Any]] = None

    def _check_key(self, key: str) -> None:
        if key not in DEFAULT_SETTINGS:
            raise ConfigurationError(f"Unknown setting: {key}")

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            if self.path.exists():
                loaded = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
                if not isinstance(loaded, dict):
                    raise ConfigurationError(f"Settings file {self.path} must contain a mapping")
                self._data = {key: value for key, value in loaded.items() if key in DEFAULT_SETTINGS}
                ignored = set(loaded) - set(self._data)
                if ignored:
                    logger.warning(f"Ignoring unknown settings in {self.path}: {', '.join(sorted(ignored))}")
            else:
                self._data = {}
        return self._data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(yaml.safe_dump(self._load(), default_flow_style=False), encoding="utf-8")
        logger.debug(f"Saved settings to {self.path}")

    def get(self, key: str) -> Any:
        """Return the stored value for ``key`` or its default."""
        self._check_key(key)
        data = self._load()
        if key in data:
            return data[key]
        return copy.deepcopy(DEFAULT_SETTINGS[key])

    def get_many(self, keys: list[str]) -> dict[str, Any]:
        return {key: self.get(key) for key in keys}

    def all(self) -> dict[str, Any]:
        """Return every setting, defaults filled in."""
        return self.get_many(list(DEFAULT_SETTINGS))

    def set(self, **values: Any) -> None:
        """
        Store one or more settings and persist the file.

        Raises:
            ConfigurationError: If a key is unknown
        """
        for key in values:
            self._check_key(key)
        self._load().update(values)
        self._save()

    def ensure_defaults(self) -> list[str]:
        """Write defaults for any missing keys; returns the keys added."""
        data = self._load()
        missing = [key for key in DEFAULT_SETTINGS if key not in data]
        if missing:
            for key in missing:
                data[key] = copy.deepcopy(DEFAULT_SETTINGS[key])
            self._save()
        return missing

    def remember_model(self, model: str, endpoint: str) -> list[dict[str, Any]]:
        """
        Record a model in the history (most recent first, capped at MAX_MODEL_HISTORY).

        Models already present are left where they are.
        """
        model = model.strip()
        history: list[dict[str, Any]] = self.get("model_history")
        if model and not any(entry.get("model") == model for entry in history):
            history.insert(0, {"model": model, "endpoint": endpoint.strip(), "timestamp": int(time.time() * 1000)})
            history = history[:MAX_MODEL_HISTORY]
            self.set(model_history=history)
        return history

    def forget_model(self, model: str) -> list[dict[str, Any]]:
        """Remove a model from the history."""
        history = [entry for entry in self.get("model_history") if entry.get("model") != model]
        self.set(model_history=history)
        return history

    def to_config(self, base: Optional[Web2MarkdownConfig] = None) -> Web2MarkdownConfig:
        """
        Build a configuration from the stored settings.

        Only keys present in the settings file override ``base``; defaults
        never replace values that came from a configuration file.

        Args:
            base: Configuration to start from (defaults if None)

        Returns:
            Web2MarkdownConfig with saved settings applied on top of ``base``
        """
        base = base or Web2MarkdownConfig()
        stored = self._load()

        def overrides(fields: dict[str, str]) -> dict[str, Any]:
            return {field: stored[key] for key, field in fields.items() if key in stored}

        extraction = overrides(EXTRACTION_FIELDS)
        refine = overrides(REFINE_FIELDS)
        delivery = overrides(DELIVERY_FIELDS)
        if "api_key" in refine:
            refine["api_key"] = refine["api_key"] or None

        return base.model_copy(
            update={
                "extraction": ExtractionConfig(**{**base.extraction.model_dump(), **extraction}),
                "refine": RefineConfig(**{**base.refine.model_dump(), **refine}),
                "delivery": DeliveryConfig(**{**base.delivery.model_dump(), **delivery}),
            }
        )
