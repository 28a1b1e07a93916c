from __future__ import annotations

import asyncio
import logging

import pytest
from _fakes import BrokenProbe, FakeAdvertisingProvider, FakeProbe

from pyanalytics.advertising import AdvertisingInfo
from pyanalytics.context.store import AnalyticsContext
from pyanalytics.models.context import Campaign, Device, Location, Referrer
from pyanalytics.models.traits import Traits
from pyanalytics.probe import HostProbe


def _traits() -> Traits:
    return Traits().put_anonymous_id("anon-1")


def _context(probe: FakeProbe | None = None, collect_device_id: bool = True) -> AnalyticsContext:
    return AnalyticsContext.create(probe or FakeProbe(), _traits(), collect_device_id)


# ------------------------------------------------------------------
# create()
# ------------------------------------------------------------------


class TestCreate:
    def test_device_scenario(self) -> None:
        context = _context()

        device = context.device()
        assert device is not None
        assert device["device_id"] == "ABC123"
        assert device["deviceBrand"] == "Google"
        assert device["deviceName"] == "oriole"
        assert context["os_version"] == "14"
        assert context["screen_density"] == 2.0
        assert context["screen_height"] == 1920
        assert context["screen_width"] == 1080
        assert context["locale"] == "en-US"
        assert context["build"] == "42"
        assert context["timezone"] == "Europe/Amsterdam"
        assert context["userAgent"] == "Dalvik/2.1.0"

    def test_network_keys(self) -> None:
        context = _context()
        assert context["network_bluetooth"] is False
        assert context["network_cellular"] is True
        assert context["network_carrier"] == "T-Mobile"

    def test_network_state_omitted_without_permission(self) -> None:
        context = _context(FakeProbe(network_permission=False, carrier=None))
        assert "network_bluetooth" not in context
        assert "network_cellular" not in context
        assert context["network_carrier"] == "unknown"

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_user_agent_and_timezone_become_undefined(self, value: str | None) -> None:
        context = _context(FakeProbe(agent=value, tz=value))
        assert context["userAgent"] == "undefined"
        assert context["timezone"] == "undefined"

    def test_missing_device_strings_become_undefined(self) -> None:
        context = _context(FakeProbe(brand="", name=None, os=None, language=None))
        device = context.device()
        assert device is not None
        assert device.manufacturer == "undefined"
        assert device.name == "undefined"
        assert context["os_version"] == "undefined"
        assert context["locale"] == "undefined"

    def test_device_id_falls_back_to_anonymous_id(self) -> None:
        context = _context(collect_device_id=False)
        device = context.device()
        assert device is not None
        assert device.device_id == "anon-1"

    def test_device_id_falls_back_when_probe_has_none(self) -> None:
        context = _context(FakeProbe(stable_id=None))
        device = context.device()
        assert device is not None
        assert device.device_id == "anon-1"

    def test_probe_failures_do_not_fail_creation(self) -> None:
        context = _context(BrokenProbe())
        assert "build" not in context
        assert "screen_density" not in context
        assert context["timezone"] == "undefined"
        assert context["os_version"] == "14"

    def test_traits_attached_as_read_only_copy(self) -> None:
        traits = _traits()
        context = AnalyticsContext.create(FakeProbe(), traits, True)
        traits.put_email("late@example.com")

        stored = context.traits()
        assert stored is not None
        assert stored.anonymous_id == "anon-1"
        assert stored.email is None
        with pytest.raises(TypeError):
            stored.put_email("x@example.com")


# ------------------------------------------------------------------
# Copies
# ------------------------------------------------------------------


class TestUnmodifiableCopy:
    def test_copy_rejects_mutation(self) -> None:
        context = _context()
        snapshot = context.unmodifiable_copy()

        with pytest.raises(TypeError):
            snapshot["locale"] = "fr-FR"
        with pytest.raises(TypeError):
            del snapshot["locale"]
        with pytest.raises(TypeError):
            snapshot.put_campaign(Campaign().put_name("spring"))
        with pytest.raises(TypeError):
            snapshot.put_device_token("tok")

        assert context["locale"] == "en-US"
        assert "campaign" not in context
        device = context.device()
        assert device is not None
        assert device.token is None

    def test_copy_is_point_in_time_for_top_level_keys(self) -> None:
        context = _context()
        snapshot = context.unmodifiable_copy()
        context.put_value("custom", 1)
        assert "custom" not in snapshot

    def test_shallow_copy_shares_nested_values(self) -> None:
        context = _context()
        snapshot = context.unmodifiable_copy()
        context.put_device_token("tok")
        device = snapshot.device()
        assert device is not None
        assert device.token == "tok"

    def test_deep_copy_isolates_nested_values(self) -> None:
        context = _context()
        snapshot = context.unmodifiable_copy(deep=True)
        context.put_device_token("tok")
        device = snapshot.device()
        assert device is not None
        assert device.token is None


# ------------------------------------------------------------------
# Sub-objects
# ------------------------------------------------------------------


class TestSubObjects:
    def test_put_value_is_fluent(self) -> None:
        context = _context()
        assert context.put_value("a", 1).put_value("b", 2) is context
        assert context["a"] == 1
        assert context["b"] == 2

    def test_campaign_location_referrer(self) -> None:
        context = _context()
        context.put_campaign(
            Campaign().put_name("spring").put_source("newsletter").put_medium("email").put_term("t").put_content("c")
        )
        context.put_location(Location().put_latitude(52.37).put_longitude(4.89).put_speed(0.0))
        context.put_referrer(Referrer().put_id("r1").put_type("web").put_url("https://example.com"))

        campaign = context.campaign()
        assert campaign is not None
        assert (campaign.name, campaign.source, campaign.medium, campaign.term, campaign.content) == (
            "spring",
            "newsletter",
            "email",
            "t",
            "c",
        )
        location = context.location()
        assert location is not None
        assert location.latitude == pytest.approx(52.37)
        referrer = context.referrer()
        assert referrer is not None
        assert referrer.url == "https://example.com"
        assert context.to_dict()["campaign"]["name"] == "spring"

    def test_plain_dict_sub_object_is_wrapped(self) -> None:
        context = _context()
        context.put_value("campaign", {"name": "plain"})
        campaign = context.campaign()
        assert isinstance(campaign, Campaign)
        assert campaign.name == "plain"
        assert context.campaign() is campaign

    def test_put_device_token(self) -> None:
        context = _context()
        context.put_device_token("push-token")
        device = context.device()
        assert device is not None
        assert device["token"] == "push-token"


# ------------------------------------------------------------------
# Advertising id
# ------------------------------------------------------------------


class TestAdvertisingId:
    @pytest.mark.asyncio
    async def test_missing_provider_completes_immediately(self, caplog: pytest.LogCaptureFixture) -> None:
        context = _context()
        with caplog.at_level(logging.DEBUG, logger="pyanalytics.context.store"):
            done = context.attach_advertising_id(None)
        assert done.done()
        assert "Not collecting advertising ID" in caplog.text
        device = context.device()
        assert device is not None
        assert "advertisingId" not in device

    @pytest.mark.asyncio
    async def test_fetch_writes_device_fields(self) -> None:
        context = _context()
        await context.attach_advertising_id(FakeAdvertisingProvider())
        device = context.device()
        assert device is not None
        assert device.advertising_id == "ad-1"
        assert device.ad_tracking_enabled is True

    @pytest.mark.asyncio
    async def test_limited_tracking_skips_id(self) -> None:
        context = _context()
        provider = FakeAdvertisingProvider(info=AdvertisingInfo(advertising_id="ad-1", limit_ad_tracking_enabled=True))
        await context.attach_advertising_id(provider)
        device = context.device()
        assert device is not None
        assert "advertisingId" not in device
        assert device["adTrackingEnabled"] is False

    @pytest.mark.asyncio
    async def test_fetch_failure_still_completes(self) -> None:
        context = _context()
        provider = FakeAdvertisingProvider(error=RuntimeError("play services unavailable"))
        await context.attach_advertising_id(provider)
        device = context.device()
        assert device is not None
        assert "adTrackingEnabled" not in device

    @pytest.mark.asyncio
    async def test_fetch_can_be_cancelled(self) -> None:
        context = _context()
        provider = FakeAdvertisingProvider(gate=asyncio.Event())
        pending = context.attach_advertising_id(provider)
        await asyncio.sleep(0)
        assert provider.calls == 1
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending
        device = context.device()
        assert isinstance(device, Device)
        assert "adTrackingEnabled" not in device


def test_host_probe_fills_required_keys() -> None:
    context = AnalyticsContext.create(HostProbe("pyanalytics-not-installed"), _traits(), True)

    assert "build" not in context
    assert context["userAgent"].startswith("Python/")
    assert context["network_carrier"] == "unknown"
    assert "network_bluetooth" not in context
    assert "screen_width" not in context
    for key in ("locale", "timezone", "os_version"):
        assert context[key]
    device = context.device()
    assert device is not None
    assert device.device_id
