"""Key-value configuration providers used to resolve per-client secrets.

The registry never reads ``os.environ`` directly; it asks a provider. Any object
with a ``get(key, default=None)`` method qualifies, so a plain ``dict`` works as
a fake in tests.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

__all__ = [
    "ConfigProvider",
    "EnvConfigProvider",
    "SecretsManager",
    "get_config_provider",
]


@runtime_checkable
class ConfigProvider(Protocol):
    """Return a configuration value for *key* or *default* if missing."""

    def get(self, key: str, default: Optional[Any] = None) -> Any:  # noqa: D401
        ...


class EnvConfigProvider:
    """Read values from the process environment at lookup time."""

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return os.environ.get(key, default)


class SecretsManager:
    """Load secrets from a JSON file pointed to by ``SUPREMO_SECRETS_PATH``.

    The file is cached on first access. Tests may override or update the
    in-memory cache via :meth:`set_override` or :meth:`update`.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(
            path or os.getenv("SUPREMO_SECRETS_PATH", "/var/run/secrets/supremo.json")
        )
        self._cache: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._cache is None:
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    self._cache = json.load(fh)
            except FileNotFoundError:
                self._cache = {}
        return self._cache

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return secret value for *key* or *default* if missing."""

        return self._load().get(key, default)

    def set_override(self, data: dict[str, Any]) -> None:
        """Replace the entire secret cache (test helper)."""

        self._cache = dict(data)

    def update(self, data: dict[str, Any]) -> None:
        """Merge *data* into the existing cache (test helper)."""

        current = self._load()
        current.update(data)
        self._cache = current


_SOURCES = {
    "env": EnvConfigProvider,
    "file": SecretsManager,
}


def get_config_provider() -> ConfigProvider:
    source = os.getenv("SUPREMO_CONFIG_SOURCE", "env").lower()
    provider_cls = _SOURCES.get(source)
    if provider_cls is None:
        raise ValueError(f"Unsupported SUPREMO_CONFIG_SOURCE: {source}")
    return provider_cls()
