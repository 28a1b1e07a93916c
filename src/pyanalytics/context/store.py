"""Analytics context: free-form information about the state of the device.

The context is attached to every outgoing payload.  It is filled once when
the client starts and is not persisted.

Writes only happen from the owning event loop (the client that created the
context).  Readers on any thread get read-only copies from
:meth:`AnalyticsContext.unmodifiable_copy`.  Those copies are shallow by
default, so nested structures a caller mutates after handing them over are
not protected; pass ``deep=True`` to trade some speed for full isolation.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Callable, MutableMapping
from typing import Any, TypeVar

from pyanalytics._constants import (
    APP_BUILD_KEY,
    CAMPAIGN_KEY,
    DEVICE_ID_KEY,
    DEVICE_KEY,
    DEVICE_MANUFACTURER_KEY,
    DEVICE_NAME_KEY,
    LOCALE_KEY,
    LOCATION_KEY,
    NETWORK_BLUETOOTH_KEY,
    NETWORK_CARRIER_KEY,
    NETWORK_CELLULAR_KEY,
    OS_VERSION_KEY,
    REFERRER_KEY,
    SCREEN_DENSITY_KEY,
    SCREEN_HEIGHT_KEY,
    SCREEN_WIDTH_KEY,
    TIMEZONE_KEY,
    TRAITS_KEY,
    UNDEFINED,
    UNKNOWN_CARRIER,
    USER_AGENT_KEY,
)
from pyanalytics.advertising import AdvertisingIdProvider
from pyanalytics.models._base import ValueMap
from pyanalytics.models.context import Campaign, Device, Location, Referrer
from pyanalytics.models.traits import Traits
from pyanalytics.probe import EnvironmentProbe

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def put_undefined_if_empty(target: MutableMapping[str, Any], key: str, value: str | None) -> None:
    """Store *value*, or the ``"undefined"`` sentinel when it is empty."""
    target[key] = value if value else UNDEFINED


def _read(fn: Callable[[], T], what: str) -> T | None:
    """Call a probe method, mapping any failure to ``None``."""
    try:
        return fn()
    except Exception:
        _logger.debug("Environment probe could not supply %s", what, exc_info=True)
        return None


class AnalyticsContext(ValueMap):
    """Ambient key-value metadata attached to every payload."""

    @classmethod
    def create(
        cls,
        probe: EnvironmentProbe,
        traits: Traits,
        collect_device_id: bool,
    ) -> AnalyticsContext:
        """Return a new context filled from *probe*.

        Keys downstream consumers rely on are always present; facts the
        probe cannot supply become ``"undefined"``.
        """
        context = cls()
        context.set_traits(traits)
        context._put_app(probe)
        context._put_device(probe, collect_device_id)
        context._put_locale(probe)
        context._put_network(probe)
        context._put_os(probe)
        context._put_screen(probe)
        put_undefined_if_empty(context, USER_AGENT_KEY, _read(probe.user_agent, "user agent"))
        put_undefined_if_empty(context, TIMEZONE_KEY, _read(probe.timezone_id, "timezone"))
        return context

    # ------------------------------------------------------------------
    # Environment facts
    # ------------------------------------------------------------------

    def _put_app(self, probe: EnvironmentProbe) -> None:
        build = _read(probe.app_build, "app build")
        if build is not None:
            self[APP_BUILD_KEY] = str(build)

    def _put_device(self, probe: EnvironmentProbe, collect_device_id: bool) -> None:
        identifier = _read(probe.device_id, "device id") if collect_device_id else None
        if not identifier:
            traits = self.traits()
            identifier = traits.anonymous_id if traits is not None else None
        device = Device()
        put_undefined_if_empty(device, DEVICE_ID_KEY, identifier)
        put_undefined_if_empty(device, DEVICE_MANUFACTURER_KEY, _read(probe.manufacturer, "manufacturer"))
        put_undefined_if_empty(device, DEVICE_NAME_KEY, _read(probe.device_name, "device name"))
        self[DEVICE_KEY] = device

    def _put_locale(self, probe: EnvironmentProbe) -> None:
        value: str | None = None
        parts = _read(probe.locale, "locale")
        if parts:
            language, country = parts
            value = f"{language}-{country}" if country else language
        put_undefined_if_empty(self, LOCALE_KEY, value)

    def _put_network(self, probe: EnvironmentProbe) -> None:
        if _read(probe.has_network_permission, "network permission"):
            self[NETWORK_BLUETOOTH_KEY] = bool(_read(probe.bluetooth_connected, "bluetooth state"))
            self[NETWORK_CELLULAR_KEY] = bool(_read(probe.cellular_connected, "cellular state"))

        carrier = _read(probe.carrier_name, "carrier")
        self[NETWORK_CARRIER_KEY] = carrier if carrier is not None else UNKNOWN_CARRIER

    def _put_os(self, probe: EnvironmentProbe) -> None:
        put_undefined_if_empty(self, OS_VERSION_KEY, _read(probe.os_version, "OS version"))

    def _put_screen(self, probe: EnvironmentProbe) -> None:
        metrics = _read(probe.screen, "screen metrics")
        if metrics is None:
            return
        self[SCREEN_DENSITY_KEY] = float(metrics.density)
        self[SCREEN_HEIGHT_KEY] = int(metrics.height_px)
        self[SCREEN_WIDTH_KEY] = int(metrics.width_px)

    # ------------------------------------------------------------------
    # Copies and traits
    # ------------------------------------------------------------------

    def unmodifiable_copy(self, deep: bool = False) -> AnalyticsContext:
        """Return a read-only copy of this context.

        The default copy is shallow: nested sub-objects are shared with the
        live context.  With *deep* set, nested values are copied as well.
        """
        if deep:
            return AnalyticsContext(copy.deepcopy(self._delegate), read_only=True)
        return AnalyticsContext(self._delegate, read_only=True)

    def set_traits(self, traits: Traits) -> None:
        """Attach a read-only copy of *traits*."""
        self[TRAITS_KEY] = traits.unmodifiable_copy()

    def traits(self) -> Traits | None:
        return self.get_value_map(TRAITS_KEY, Traits)

    # ------------------------------------------------------------------
    # Optional sub-objects
    # ------------------------------------------------------------------

    def put_campaign(self, campaign: Campaign) -> AnalyticsContext:
        return self.put_value(CAMPAIGN_KEY, campaign)

    def campaign(self) -> Campaign | None:
        return self.get_value_map(CAMPAIGN_KEY, Campaign)

    def device(self) -> Device | None:
        return self.get_value_map(DEVICE_KEY, Device)

    def put_device_token(self, token: str) -> AnalyticsContext:
        """Set the push token on the device sub-object."""
        self._check_writable()
        device = self.device()
        if device is None:
            device = Device()
            self[DEVICE_KEY] = device
        device.put_device_token(token)
        return self

    def put_location(self, location: Location) -> AnalyticsContext:
        return self.put_value(LOCATION_KEY, location)

    def location(self) -> Location | None:
        return self.get_value_map(LOCATION_KEY, Location)

    def put_referrer(self, referrer: Referrer) -> AnalyticsContext:
        return self.put_value(REFERRER_KEY, referrer)

    def referrer(self) -> Referrer | None:
        return self.get_value_map(REFERRER_KEY, Referrer)

    # ------------------------------------------------------------------
    # Advertising id
    # ------------------------------------------------------------------

    def attach_advertising_id(
        self,
        provider: AdvertisingIdProvider | None,
        logger: logging.Logger | None = None,
    ) -> asyncio.Future[None]:
        """Fetch the advertising id in the background.

        Returns a future that completes once the attempt is over, whether
        the id was stored, the lookup failed, or no provider is installed.
        The future can be cancelled.  Must be called from the owning loop.
        """
        log = logger or _logger
        loop = asyncio.get_running_loop()
        if provider is None:
            log.debug("Not collecting advertising ID because no advertising ID provider is installed.")
            done: asyncio.Future[None] = loop.create_future()
            done.set_result(None)
            return done
        return loop.create_task(self._fetch_advertising_id(provider, log))

    async def _fetch_advertising_id(self, provider: AdvertisingIdProvider, log: logging.Logger) -> None:
        try:
            info = await provider.fetch()
        except Exception:
            log.debug("Unable to collect advertising ID", exc_info=True)
            return

        device = self.device()
        if device is None:
            device = Device()
            self[DEVICE_KEY] = device
        device.put_advertising_info(info.advertising_id, info.ad_tracking_enabled)
        log.debug("Collected advertising ID (ad tracking enabled: %s)", info.ad_tracking_enabled)
