"""Login settings glue and persisted settings storage."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pyanalytics._constants import DEFAULT_LOGIN_EMAIL_KEY
from pyanalytics.client import AnalyticsClient
from pyanalytics.config import AnalyticsConfig
from pyanalytics.exceptions import AnalyticsConfigError, SettingsStoreError
from pyanalytics.models.traits import Traits

_logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    """Durable key-value store provided by the host environment."""

    def get_string(self, key: str, default: str | None = None) -> str | None: ...

    def put_string(self, key: str, value: str) -> None: ...


class JsonFileSettingsStore:
    """Settings persisted as a flat JSON object in a single file.

    Every write rewrites the file through a temporary file and an atomic
    rename, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @classmethod
    def from_config(cls, config: AnalyticsConfig) -> JsonFileSettingsStore:
        if not config.settings_path:
            raise AnalyticsConfigError("settings_path is not configured")
        return cls(config.settings_path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise SettingsStoreError(f"Cannot read settings: {exc}", path=str(self._path)) from exc
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise SettingsStoreError(f"Settings file is not JSON: {exc}", path=str(self._path)) from exc
        if not isinstance(data, dict):
            raise SettingsStoreError("Settings file must contain a JSON object", path=str(self._path))
        return {str(k): str(v) for k, v in data.items()}

    def get_string(self, key: str, default: str | None = None) -> str | None:
        return self._load().get(key, default)

    def put_string(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise SettingsStoreError(f"Cannot write settings: {exc}", path=str(self._path)) from exc
        _logger.debug("Stored setting %s in %s", key, self._path)


class LoginSettings:
    """Reacts to the login email preference changing.

    The new email is sent as an identify call (used as the profile id and
    as the ``email`` trait) and then persisted under *key*.
    """

    def __init__(
        self,
        client: AnalyticsClient,
        store: SettingsStore,
        key: str = DEFAULT_LOGIN_EMAIL_KEY,
    ) -> None:
        self._client = client
        self._store = store
        self._key = key

    @classmethod
    def from_config(cls, client: AnalyticsClient, config: AnalyticsConfig) -> LoginSettings:
        """Wire the listener to the JSON settings file named in *config*."""
        return cls(client, JsonFileSettingsStore.from_config(config), key=config.login_email_key)

    @property
    def key(self) -> str:
        return self._key

    def on_preference_change(self, new_value: str) -> bool:
        """Forward *new_value*; returns ``True`` so the change is accepted."""
        self._client.identify(new_value, Traits().put_email(new_value))
        self._store.put_string(self._key, new_value)
        return True
