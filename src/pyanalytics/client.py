"""High-level client owning the analytics context."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from pyanalytics._constants import TRAITS_KEY
from pyanalytics._dispatch import Dispatcher, LoggingDispatcher
from pyanalytics._redact import redact_for_log
from pyanalytics.advertising import AdvertisingIdProvider, detect_advertising_provider
from pyanalytics.config import AnalyticsConfig
from pyanalytics.context.store import AnalyticsContext
from pyanalytics.exceptions import AnalyticsError
from pyanalytics.models.context import Campaign, Location, Referrer
from pyanalytics.models.payload import (
    IdentifyPayload,
    IdentifyPayloadBuilder,
    TrackPayload,
    TrackPayloadBuilder,
)
from pyanalytics.models.target import ItemTarget
from pyanalytics.models.traits import Traits
from pyanalytics.probe import EnvironmentProbe, ProfileProbe

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def _deep_snapshot(context: AnalyticsContext) -> AnalyticsContext:
    return context.unmodifiable_copy(deep=True)


class AnalyticsClient:
    """Client that builds payloads against a process-lifetime context.

    The event loop that enters the client owns the context: ``identify``,
    ``track`` and the ``put_*`` methods must run on it.  :attr:`context`
    may be read from any thread.  With deep snapshots configured, an
    off-loop read is copied on the owner loop, which must be running.

    Usage::

        async with AnalyticsClient(config, dispatcher=dispatcher) as client:
            client.identify("user@example.com", Traits().put_email("user@example.com"))
            client.track("play", {"position": 0})
    """

    def __init__(
        self,
        config: AnalyticsConfig,
        *,
        probe: EnvironmentProbe | None = None,
        dispatcher: Dispatcher | None = None,
        advertising_provider: AdvertisingIdProvider | None = None,
        traits: Traits | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._probe: EnvironmentProbe = probe if probe is not None else ProfileProbe(config.device)
        self._dispatcher: Dispatcher = dispatcher if dispatcher is not None else LoggingDispatcher()
        self._advertising_provider = advertising_provider
        self._initial_traits = traits
        self._clock = clock
        self._context: AnalyticsContext | None = None
        self._advertising_future: asyncio.Future[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> AnalyticsClient:
        self._loop = asyncio.get_running_loop()
        traits = Traits(self._initial_traits) if self._initial_traits is not None else Traits.create()
        if not traits.anonymous_id:
            traits.put_anonymous_id(Traits.create().anonymous_id or "")
        self._context = AnalyticsContext.create(self._probe, traits, self._config.collect_device_id)

        provider: AdvertisingIdProvider | None = None
        if self._config.advertising_id_enabled:
            provider = self._advertising_provider or detect_advertising_provider()
        self._advertising_future = self._context.attach_advertising_id(provider, _logger)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        pending = self._advertising_future
        self._advertising_future = None
        if pending is not None and not pending.done():
            pending.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pending
        self._context = None
        self._loop = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_context(self) -> AnalyticsContext:
        if self._context is None:
            raise AnalyticsError("Client not initialized. Use 'async with AnalyticsClient(...) as client:'")
        return self._context

    def _on_owner_loop(self) -> bool:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        return running is self._loop

    def _require_owner(self) -> AnalyticsContext:
        context = self._require_context()
        if not self._on_owner_loop():
            raise AnalyticsError("Context writes must run on the event loop that entered the client")
        return context

    def _snapshot(self, context: AnalyticsContext) -> AnalyticsContext:
        """Read-only copy of *context*.

        A deep copy walks nested sub-objects the owner loop may be writing,
        so off-loop callers have it taken on the owner loop and block until
        it is done.
        """
        if not self._config.deep_copy_snapshots:
            return context.unmodifiable_copy()
        if self._on_owner_loop() or self._loop is None:
            return context.unmodifiable_copy(deep=True)
        return asyncio.run_coroutine_threadsafe(_deep_snapshot(context), self._loop).result()

    # ------------------------------------------------------------------
    # Context access
    # ------------------------------------------------------------------

    @property
    def context(self) -> AnalyticsContext:
        """Read-only snapshot of the current context."""
        return self._snapshot(self._require_context())

    @property
    def traits(self) -> Traits:
        traits = self._require_context().traits()
        return traits if traits is not None else Traits(read_only=True)

    def put_campaign(self, campaign: Campaign) -> None:
        self._require_owner().put_campaign(campaign)

    def put_location(self, location: Location) -> None:
        self._require_owner().put_location(location)

    def put_referrer(self, referrer: Referrer) -> None:
        self._require_owner().put_referrer(referrer)

    def put_device_token(self, token: str) -> None:
        self._require_owner().put_device_token(token)

    async def wait_for_advertising_id(self, timeout: float | None = None) -> None:
        """Wait until the advertising-id attempt has finished.

        A timeout raises :class:`TimeoutError` but leaves the lookup running.
        """
        pending = self._advertising_future
        if pending is None:
            return
        await asyncio.wait_for(asyncio.shield(pending), timeout)

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def identify(
        self,
        profile_id: str | None,
        traits: Mapping[str, Any] | None = None,
        *,
        session_id: str | None = None,
    ) -> IdentifyPayload:
        """Merge *traits* into the user's traits and send an identify call.

        The payload is validated before the stored traits change or the
        dispatcher is called.
        """
        context = self._require_owner()
        current = context.traits()
        merged = Traits(current) if current is not None else Traits.create()
        if traits:
            merged.update(traits)
        if profile_id:
            merged.put_user_id(profile_id)

        payload_context = dict(self._snapshot(context))
        payload_context[TRAITS_KEY] = merged
        payload = (
            IdentifyPayloadBuilder(clock=self._clock)
            .profile_id(profile_id)
            .anonymous_id(merged.anonymous_id)
            .session_id(session_id)
            .traits(merged)
            .context(payload_context)
            .build()
        )

        context.set_traits(merged)
        _logger.debug("Identify %s", redact_for_log({"profileId": profile_id, "traits": merged}))
        self._dispatcher.dispatch(payload)
        return payload

    def track(
        self,
        event: str,
        properties: Mapping[str, Any] | None = None,
        *,
        target: ItemTarget | None = None,
        session_id: str | None = None,
        profile_id: str | None = None,
    ) -> TrackPayload:
        """Record a user action and send it to the dispatcher."""
        context = self._require_owner()
        builder = TrackPayloadBuilder(clock=self._clock).event(event)
        if properties is not None:
            builder.properties(properties)

        traits = context.traits()
        payload = (
            builder.profile_id(profile_id or (traits.user_id if traits is not None else None))
            .anonymous_id(traits.anonymous_id if traits is not None else None)
            .session_id(session_id)
            .target(target)
            .context(self._snapshot(context))
            .build()
        )

        _logger.debug("Track %s (%s)", payload.event, payload.message_id)
        self._dispatcher.dispatch(payload)
        return payload

    def reset(self) -> None:
        """Forget the current user and start over with a new anonymous id."""
        self._require_owner().set_traits(Traits.create())
