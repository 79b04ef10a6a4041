"""Persistent clip options backed by a YAML file.

File format::

    tanaOptions:
      includeMetadata: true
      defaultTag: webclip
      notificationEnabled: true
      omitEmptyMetadata: true

A bare mapping without the ``tanaOptions`` key is accepted as well.  The
store caches the parsed options and re-reads the file whenever its
modification time changes.  Per-call overrides are merged into a copy and
never written back.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tanaclip.items import OptionsOverride, TanaOptions

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_OPTIONS: dict[str, Any] = {
    "includeMetadata": True,
    "defaultTag": "webclip",
    "notificationEnabled": True,
    "omitEmptyMetadata": True,
    "strictFiltering": True,
}

OPTIONS_KEY = "tanaOptions"
CONFIG_ENV_VAR = "TANACLIP_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/tanaclip/options.yaml")


def default_config_path() -> Path:
    env = os.environ.get(CONFIG_ENV_VAR, "").strip()
    return Path(env).expanduser() if env else DEFAULT_CONFIG_PATH.expanduser()


def _options_from_data(data: Any) -> TanaOptions:
    defaults = TanaOptions.model_validate(DEFAULT_OPTIONS)
    if not isinstance(data, dict):
        return defaults
    section = data.get(OPTIONS_KEY, data)
    if not isinstance(section, dict):
        return defaults
    # Keys may be camelCase (as written by save()) or snake_case
    return defaults.merged(OptionsOverride.model_validate(section))


class SettingsStore:
    """Process-wide cache of the saved :class:`TanaOptions`."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path else default_config_path()
        self._lock = threading.Lock()
        self._cached: TanaOptions | None = None
        self._mtime: float | None = None

    def _current_mtime(self) -> float | None:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def load(self) -> TanaOptions:
        """Return the saved options, re-reading the file if it changed."""
        mtime = self._current_mtime()
        with self._lock:
            if self._cached is not None and mtime == self._mtime:
                return self._cached
            self._cached = self._read()
            self._mtime = mtime
            return self._cached

    def _read(self) -> TanaOptions:
        if not self.path.exists():
            logger.debug("No options file at %s; using defaults", self.path)
            return TanaOptions.model_validate(DEFAULT_OPTIONS)
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
            options = _options_from_data(data)
        except (OSError, yaml.YAMLError, ValidationError) as exc:
            logger.warning("Ignoring unreadable options file %s: %s", self.path, exc)
            return TanaOptions.model_validate(DEFAULT_OPTIONS)
        logger.debug("Loaded options from %s", self.path)
        return options

    def options(
        self,
        override: OptionsOverride | Mapping[str, Any] | None = None,
    ) -> TanaOptions:
        """Saved options with *override* applied for this call only."""
        return self.load().merged(override)

    def save(self, options: TanaOptions) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {OPTIONS_KEY: options.model_dump(by_alias=True)}
        self.path.write_text(
            yaml.safe_dump(payload, sort_keys=False, default_flow_style=False),
            encoding="utf-8",
        )
        with self._lock:
            self._cached = options
            self._mtime = self._current_mtime()
        logger.info("Saved options to %s", self.path)

    def reset(self) -> TanaOptions:
        """Restore and persist the default options."""
        defaults = TanaOptions.model_validate(DEFAULT_OPTIONS)
        self.save(defaults)
        return defaults


_store: SettingsStore | None = None
_store_lock = threading.Lock()


def get_settings_store() -> SettingsStore:
    """Return the process-wide store for the default config path."""
    global _store
    with _store_lock:
        if _store is None:
            _store = SettingsStore()
        return _store
