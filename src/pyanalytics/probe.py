"""Read-only environment facts used to seed the analytics context."""

from __future__ import annotations

import locale as _locale
import os
import platform
import uuid
import zoneinfo
from collections.abc import Sequence
from dataclasses import dataclass
from importlib.metadata import version
from pathlib import Path
from typing import Protocol

from pyanalytics.config import DeviceProfile


@dataclass(frozen=True)
class ScreenMetrics:
    """Display density and size in pixels."""

    density: float
    height_px: int
    width_px: int


class EnvironmentProbe(Protocol):
    """Structural interface for environment facts.

    Any method may return ``None`` (fact unavailable) or raise; the context
    store treats both as a missing fact and never fails because of it.
    """

    def app_build(self) -> str | None: ...

    def device_id(self) -> str | None: ...

    def manufacturer(self) -> str | None: ...

    def device_name(self) -> str | None: ...

    def has_network_permission(self) -> bool: ...

    def bluetooth_connected(self) -> bool: ...

    def cellular_connected(self) -> bool: ...

    def carrier_name(self) -> str | None: ...

    def os_version(self) -> str | None: ...

    def screen(self) -> ScreenMetrics | None: ...

    def locale(self) -> tuple[str, str] | None: ...

    def timezone_id(self) -> str | None: ...

    def user_agent(self) -> str | None: ...


class ProfileProbe:
    """Probe answering from a fixed :class:`DeviceProfile`."""

    def __init__(self, profile: DeviceProfile) -> None:
        self._profile = profile

    def app_build(self) -> str | None:
        return self._profile.app_build

    def device_id(self) -> str | None:
        return self._profile.device_id

    def manufacturer(self) -> str | None:
        return self._profile.manufacturer

    def device_name(self) -> str | None:
        return self._profile.device_name

    def has_network_permission(self) -> bool:
        return self._profile.network_permission

    def bluetooth_connected(self) -> bool:
        return self._profile.bluetooth_connected

    def cellular_connected(self) -> bool:
        return self._profile.cellular_connected

    def carrier_name(self) -> str | None:
        return self._profile.carrier_name

    def os_version(self) -> str | None:
        return self._profile.os_version

    def screen(self) -> ScreenMetrics | None:
        p = self._profile
        if p.screen_density is None or p.screen_height is None or p.screen_width is None:
            return None
        return ScreenMetrics(density=p.screen_density, height_px=p.screen_height, width_px=p.screen_width)

    def locale(self) -> tuple[str, str] | None:
        if not self._profile.language:
            return None
        return self._profile.language, self._profile.country or ""

    def timezone_id(self) -> str | None:
        return self._profile.timezone_id

    def user_agent(self) -> str | None:
        return self._profile.user_agent


class HostProbe:
    """Probe answering from the running Python host.

    Parameters
    ----------
    distribution : str or None
        Installed distribution whose version is reported as the app build.
        Lookup failures propagate as :class:`importlib.metadata.PackageNotFoundError`.
    tzpath : sequence of str, optional
        Time zone database roots; defaults to :data:`zoneinfo.TZPATH`.
    localtime : str
        Link naming the host zone, resolved against *tzpath*.
    """

    def __init__(
        self,
        distribution: str | None = None,
        *,
        tzpath: Sequence[str] | None = None,
        localtime: str = "/etc/localtime",
    ) -> None:
        self._distribution = distribution
        self._tzpath = tuple(tzpath) if tzpath is not None else zoneinfo.TZPATH
        self._localtime = localtime

    def app_build(self) -> str | None:
        if self._distribution is None:
            return None
        return version(self._distribution)

    def device_id(self) -> str | None:
        return f"{uuid.getnode():012x}"

    def manufacturer(self) -> str | None:
        return platform.system() or None

    def device_name(self) -> str | None:
        return platform.node() or None

    def has_network_permission(self) -> bool:
        # No portable way to read link state.
        return False

    def bluetooth_connected(self) -> bool:
        return False

    def cellular_connected(self) -> bool:
        return False

    def carrier_name(self) -> str | None:
        return None

    def os_version(self) -> str | None:
        return platform.release() or None

    def screen(self) -> ScreenMetrics | None:
        return None

    def locale(self) -> tuple[str, str] | None:
        name, _encoding = _locale.getlocale()
        if not name:
            return None
        language, _, country = name.partition("_")
        return language, country

    def timezone_id(self) -> str | None:
        """IANA zone key such as ``Europe/Amsterdam``, or ``None``.

        ``TZ`` wins when it names a zone in the database; otherwise the
        *localtime* link is resolved.  Abbreviations like ``CEST`` are
        never returned.
        """
        key = os.environ.get("TZ", "").removeprefix(":")
        if key and self._is_zone_key(key):
            return key
        try:
            target = Path(self._localtime).resolve(strict=True)
        except OSError:
            return None
        for root in self._tzpath:
            try:
                key = target.relative_to(Path(root).resolve()).as_posix()
            except (OSError, ValueError):
                continue
            key = key.removeprefix("posix/")
            if self._is_zone_key(key):
                return key
        return None

    def _is_zone_key(self, key: str) -> bool:
        if key.startswith("/") or ".." in key.split("/"):
            return False
        return any((Path(root) / key).is_file() for root in self._tzpath)

    def user_agent(self) -> str | None:
        return f"Python/{platform.python_version()} ({platform.system()} {platform.release()})"
