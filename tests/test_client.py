from __future__ import annotations

import asyncio
import logging
import threading
from datetime import UTC, datetime

import pytest
from _fakes import FakeAdvertisingProvider, FakeProbe, RecordingDispatcher

from pyanalytics.client import AnalyticsClient
from pyanalytics.config import AnalyticsConfig
from pyanalytics.context.store import AnalyticsContext
from pyanalytics.exceptions import AnalyticsError, PayloadValidationError
from pyanalytics.models.context import Campaign
from pyanalytics.models.payload import IdentifyPayload, TrackPayload
from pyanalytics.models.traits import Traits
from pyanalytics.tracking import PLAY, StreamMetadata, metadata_target


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _client(
    dispatcher: RecordingDispatcher,
    *,
    provider: FakeAdvertisingProvider | None = None,
    **config: object,
) -> AnalyticsClient:
    return AnalyticsClient(
        AnalyticsConfig(**config),  # type: ignore[arg-type]
        probe=FakeProbe(),
        dispatcher=dispatcher,
        advertising_provider=provider,
        traits=Traits().put_anonymous_id("anon-1"),
        clock=_dt,
    )


@pytest.mark.asyncio
async def test_track_dispatches_payload_with_context() -> None:
    dispatcher = RecordingDispatcher()
    async with _client(dispatcher, advertising_id_enabled=False) as client:
        target = metadata_target(StreamMetadata(id="v1", name="Video", like_count=1, view_count=2))
        payload = client.track(PLAY, {"position": 0}, target=target, session_id="s-1")

    assert dispatcher.payloads == [payload]
    assert isinstance(payload, TrackPayload)
    assert payload.event == "play"
    assert payload.anonymous_id == "anon-1"
    assert payload.session_id == "s-1"
    assert payload.context["device"]["device_id"] == "ABC123"
    assert payload.context["traits"]["anonymousId"] == "anon-1"
    assert payload.timestamp == _dt()


@pytest.mark.asyncio
@pytest.mark.parametrize("event", ["", None])
async def test_invalid_track_never_reaches_dispatcher(event: str | None) -> None:
    dispatcher = RecordingDispatcher()
    async with _client(dispatcher, advertising_id_enabled=False) as client:
        with pytest.raises(PayloadValidationError, match="event cannot be null or empty"):
            client.track(event)  # type: ignore[arg-type]

    assert dispatcher.payloads == []


@pytest.mark.asyncio
async def test_identify_merges_traits_and_updates_context() -> None:
    dispatcher = RecordingDispatcher()
    async with _client(dispatcher, advertising_id_enabled=False) as client:
        payload = client.identify("user@example.com", Traits().put_email("user@example.com"))
        traits = client.traits
        followup = client.track("pause")

    assert isinstance(payload, IdentifyPayload)
    assert payload.profile_id == "user@example.com"
    assert payload.traits["email"] == "user@example.com"
    assert payload.traits["anonymousId"] == "anon-1"
    assert payload.context["traits"]["userId"] == "user@example.com"
    assert traits.email == "user@example.com"
    assert traits.user_id == "user@example.com"
    assert followup.profile_id == "user@example.com"
    assert len(dispatcher.payloads) == 2


@pytest.mark.asyncio
async def test_reset_starts_new_anonymous_identity() -> None:
    dispatcher = RecordingDispatcher()
    async with _client(dispatcher, advertising_id_enabled=False) as client:
        client.identify("user@example.com")
        client.reset()
        traits = client.traits

    assert traits.user_id is None
    assert traits.anonymous_id and traits.anonymous_id != "anon-1"


@pytest.mark.asyncio
async def test_context_property_is_read_only_snapshot() -> None:
    dispatcher = RecordingDispatcher()
    async with _client(dispatcher, advertising_id_enabled=False) as client:
        snapshot = client.context
        with pytest.raises(TypeError):
            snapshot["locale"] = "fr-FR"
        client.put_campaign(Campaign().put_name("spring"))
        assert "campaign" not in snapshot
        assert client.context["campaign"]["name"] == "spring"


@pytest.mark.asyncio
async def test_advertising_id_attached_on_enter() -> None:
    dispatcher = RecordingDispatcher()
    provider = FakeAdvertisingProvider()
    async with _client(dispatcher, provider=provider) as client:
        await client.wait_for_advertising_id(timeout=1.0)
        payload = client.track("play")

    assert provider.calls == 1
    assert payload.context["device"]["advertisingId"] == "ad-1"
    assert payload.context["device"]["adTrackingEnabled"] is True


@pytest.mark.asyncio
async def test_advertising_disabled_skips_provider() -> None:
    provider = FakeAdvertisingProvider()
    async with _client(RecordingDispatcher(), provider=provider, advertising_id_enabled=False) as client:
        await client.wait_for_advertising_id()
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_exit_cancels_pending_advertising_lookup() -> None:
    provider = FakeAdvertisingProvider(gate=asyncio.Event())
    client = _client(RecordingDispatcher(), provider=provider)
    async with client:
        with pytest.raises(TimeoutError):
            await client.wait_for_advertising_id(timeout=0.01)
        pending = client._advertising_future  # noqa: SLF001
    assert pending is not None
    assert pending.cancelled()


@pytest.mark.asyncio
async def test_collect_device_id_disabled_uses_anonymous_id() -> None:
    async with _client(RecordingDispatcher(), advertising_id_enabled=False, collect_device_id=False) as client:
        device = client.context.device()
    assert device is not None
    assert device.device_id == "anon-1"


def test_use_outside_context_manager_raises() -> None:
    client = _client(RecordingDispatcher())
    with pytest.raises(AnalyticsError):
        client.track("play")
    with pytest.raises(AnalyticsError):
        _ = client.context


@pytest.mark.asyncio
async def test_writes_from_other_thread_rejected() -> None:
    dispatcher = RecordingDispatcher()
    async with _client(dispatcher, advertising_id_enabled=False) as client:
        with pytest.raises(AnalyticsError, match="event loop"):
            await asyncio.to_thread(client.track, "play")
        snapshot = await asyncio.to_thread(lambda: client.context)

    assert snapshot["locale"] == "en-US"
    assert dispatcher.payloads == []


@pytest.mark.asyncio
async def test_default_dispatcher_logs_redacted_payload(caplog: pytest.LogCaptureFixture) -> None:
    client = AnalyticsClient(AnalyticsConfig(advertising_id_enabled=False), probe=FakeProbe())
    with caplog.at_level(logging.DEBUG, logger="pyanalytics._dispatch"):
        async with client:
            client.identify("user@example.com", Traits().put_email("user@example.com"))

    assert "identify payload" in caplog.text
    assert "user@example.com" not in caplog.text


@pytest.mark.asyncio
async def test_deep_snapshot_from_other_thread_is_taken_on_owner_loop(monkeypatch: pytest.MonkeyPatch) -> None:
    copy_threads: list[int] = []
    original = AnalyticsContext.unmodifiable_copy

    def recording_copy(self: AnalyticsContext, deep: bool = False) -> AnalyticsContext:
        copy_threads.append(threading.get_ident())
        return original(self, deep)

    monkeypatch.setattr(AnalyticsContext, "unmodifiable_copy", recording_copy)
    async with _client(RecordingDispatcher(), advertising_id_enabled=False, deep_copy_snapshots=True) as client:
        snapshot = await asyncio.to_thread(lambda: client.context)
        client.put_device_token("push-1")
        live = client.context

    assert copy_threads == [threading.get_ident(), threading.get_ident()]
    assert "token" not in snapshot["device"]
    assert live["device"]["token"] == "push-1"
