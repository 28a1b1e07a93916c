"""Client configuration for pyanalytics."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyanalytics._constants import DEFAULT_LOGIN_EMAIL_KEY
from pyanalytics.exceptions import AnalyticsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise AnalyticsConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class DeviceProfile:
    """Fixed device facts answered by :class:`pyanalytics.probe.ProfileProbe`.

    Fields left as ``None`` are reported as unavailable, which the
    context store turns into the ``"undefined"`` sentinel or omits.
    """

    app_build: str | None = None
    device_id: str | None = None
    manufacturer: str | None = None
    device_name: str | None = None
    network_permission: bool = True
    bluetooth_connected: bool = False
    cellular_connected: bool = False
    carrier_name: str | None = None
    os_version: str | None = None
    screen_density: float | None = None
    screen_height: int | None = None
    screen_width: int | None = None
    language: str | None = None
    country: str | None = None
    timezone_id: str | None = None
    user_agent: str | None = None


@dataclasses.dataclass(frozen=True)
class AnalyticsConfig:
    """Client configuration.

    Parameters
    ----------
    collect_device_id : bool
        Report the probe's stable device id.  When ``False`` the device id
        falls back to the anonymous id in the user's traits.
    deep_copy_snapshots : bool
        Make :attr:`pyanalytics.client.AnalyticsClient.context` return a
        deep copy instead of the default shallow read-only copy.
    advertising_id_enabled : bool
        Look up an advertising-id provider when the client starts.
    login_email_key : str
        Settings key the login email is persisted under.
    settings_path : str or None
        JSON file backing :class:`pyanalytics.settings.JsonFileSettingsStore`.
    device : DeviceProfile
        Device facts for :class:`pyanalytics.probe.ProfileProbe`.
    """

    collect_device_id: bool = True
    deep_copy_snapshots: bool = False
    advertising_id_enabled: bool = True
    login_email_key: str = DEFAULT_LOGIN_EMAIL_KEY
    settings_path: str | None = None
    device: DeviceProfile = dataclasses.field(default_factory=DeviceProfile)

    @classmethod
    def from_env(cls, **overrides: Any) -> AnalyticsConfig:
        """Create configuration from ``ANALYTICS_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        AnalyticsConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        device_kwargs: dict[str, Any] = {}
        _ENV_DEVICE_STR_MAP = {
            "ANALYTICS_DEVICE_APP_BUILD": "app_build",
            "ANALYTICS_DEVICE_ID": "device_id",
            "ANALYTICS_DEVICE_MANUFACTURER": "manufacturer",
            "ANALYTICS_DEVICE_NAME": "device_name",
            "ANALYTICS_DEVICE_CARRIER": "carrier_name",
            "ANALYTICS_DEVICE_OS_VERSION": "os_version",
            "ANALYTICS_DEVICE_LANGUAGE": "language",
            "ANALYTICS_DEVICE_COUNTRY": "country",
            "ANALYTICS_DEVICE_TIMEZONE": "timezone_id",
            "ANALYTICS_DEVICE_USER_AGENT": "user_agent",
        }
        for env_key, field_name in _ENV_DEVICE_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                device_kwargs[field_name] = val

        for env_key, field_name in (
            ("ANALYTICS_DEVICE_NETWORK_PERMISSION", "network_permission"),
            ("ANALYTICS_DEVICE_BLUETOOTH", "bluetooth_connected"),
            ("ANALYTICS_DEVICE_CELLULAR", "cellular_connected"),
        ):
            val = env.get(env_key)
            if val is not None:
                device_kwargs[field_name] = _env_bool(val, False)

        density_env = env.get("ANALYTICS_DEVICE_SCREEN_DENSITY")
        if density_env is not None:
            device_kwargs["screen_density"] = _env_number("ANALYTICS_DEVICE_SCREEN_DENSITY", density_env, float)
        for env_key, field_name in (
            ("ANALYTICS_DEVICE_SCREEN_HEIGHT", "screen_height"),
            ("ANALYTICS_DEVICE_SCREEN_WIDTH", "screen_width"),
        ):
            val = env.get(env_key)
            if val is not None:
                device_kwargs[field_name] = _env_number(env_key, val, int)

        # Allow overriding device fields via a nested dict
        device_overrides = overrides.pop("device", None)
        if isinstance(device_overrides, dict):
            device_kwargs.update(device_overrides)
        elif isinstance(device_overrides, DeviceProfile):
            device_kwargs = dataclasses.asdict(device_overrides)

        device = DeviceProfile(**device_kwargs) if device_kwargs else DeviceProfile()

        config_kwargs: dict[str, Any] = {"device": device}
        if "collect_device_id" not in overrides:
            config_kwargs["collect_device_id"] = _env_bool(env.get("ANALYTICS_COLLECT_DEVICE_ID"), True)
        if "deep_copy_snapshots" not in overrides:
            config_kwargs["deep_copy_snapshots"] = _env_bool(env.get("ANALYTICS_DEEP_COPY_SNAPSHOTS"), False)
        if "advertising_id_enabled" not in overrides:
            config_kwargs["advertising_id_enabled"] = _env_bool(
                env.get("ANALYTICS_ADVERTISING_ID_ENABLED"),
                True,
            )

        login_key = env.get("ANALYTICS_LOGIN_EMAIL_KEY")
        if login_key is not None:
            config_kwargs["login_email_key"] = login_key
        settings_path = env.get("ANALYTICS_SETTINGS_PATH")
        if settings_path is not None:
            config_kwargs["settings_path"] = settings_path

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
