"""Optional advertising-id side channel.

A provider is an object with an async ``fetch()`` returning
:class:`AdvertisingInfo`.  Providers are either passed in explicitly or
discovered at runtime through the ``pyanalytics.advertising_id``
entry-point group; when none is installed, the id is simply not collected.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from pyanalytics._constants import ADVERTISING_ID_ENTRY_POINT_GROUP

_logger = logging.getLogger(__name__)


class AdvertisingInfo(BaseModel):
    """Result of an advertising-id lookup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    advertising_id: str | None = None
    limit_ad_tracking_enabled: bool = False

    @property
    def ad_tracking_enabled(self) -> bool:
        return not self.limit_ad_tracking_enabled


class AdvertisingIdProvider(Protocol):
    async def fetch(self) -> AdvertisingInfo: ...


def detect_advertising_provider(group: str = ADVERTISING_ID_ENTRY_POINT_GROUP) -> AdvertisingIdProvider | None:
    """Return the first installed provider, or ``None``.

    Entry points may name either a provider instance or a zero-argument
    factory (class or function).  A provider that fails to load is logged
    and skipped.
    """
    for ep in entry_points(group=group):
        try:
            provider = ep.load()
            if isinstance(provider, type) or (callable(provider) and not hasattr(provider, "fetch")):
                provider = provider()
        except Exception:
            _logger.debug("Failed to load advertising id provider %s", ep.name, exc_info=True)
            continue
        if not hasattr(provider, "fetch"):
            _logger.debug("Entry point %s does not provide fetch()", ep.name)
            continue
        _logger.debug("Using advertising id provider %s", ep.name)
        return provider
    return None
