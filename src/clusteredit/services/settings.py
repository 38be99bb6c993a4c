"""Settings dataclasses and persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = ["Settings", "SettingsStore"]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".clusteredit"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "CLUSTEREDIT_API_BASE_URL": "api_base_url",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "CLUSTEREDIT_DEBUG_LOGGING": "debug_logging",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "CLUSTEREDIT_REQUEST_TIMEOUT": "request_timeout",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    api_base_url: str = "http://localhost:8082"
    request_timeout: float = 30.0
    default_headers: dict[str, str] = field(default_factory=dict)
    debug_logging: bool = False
    dialog_width_ratio: float = 0.5


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, then apply ``overrides`` and environment variables."""

        payload = self._read_payload()
        settings = Settings(**_filter_fields(payload))
        if overrides:
            settings = self._apply_overrides(settings, overrides)
        return self._apply_env_overrides(settings)

    def save(self, settings: Settings) -> Path:
        """Persist ``settings`` atomically and return the written path."""

        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = self._serialize(settings)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _serialize(self, settings: Settings) -> Dict[str, Any]:
        payload = asdict(settings)
        payload["settings_version"] = _SETTINGS_VERSION
        return payload

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Failed to read settings from %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring malformed settings payload in %s", self._path)
            return {}
        return data

    def _apply_overrides(self, settings: Settings, overrides: Mapping[str, Any]) -> Settings:
        filtered = {key: value for key, value in _filter_fields(overrides).items() if value is not None}
        if not filtered:
            return settings
        return replace(settings, **filtered)

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        updates: Dict[str, Any] = {}
        for env_name, attr in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                updates[attr] = value
        for env_name, attr in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                updates[attr] = value.strip().lower() in _TRUE_VALUES
        for env_name, attr in _FLOAT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if not value:
                continue
            try:
                updates[attr] = float(value)
            except ValueError:
                LOGGER.warning("Ignoring invalid %s=%r", env_name, value)
        if not updates:
            return settings
        return replace(settings, **updates)


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {item.name for item in fields(Settings)}
    filtered = {key: value for key, value in payload.items() if key in allowed}
    if "default_headers" in filtered:
        headers = filtered.pop("default_headers")
        if isinstance(headers, Mapping):
            filtered["default_headers"] = {str(key): str(value) for key, value in headers.items()}
        elif headers is not None:
            LOGGER.warning("Ignoring non-mapping default_headers=%r", headers)
    return filtered
