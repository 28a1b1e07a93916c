"""Context sub-objects: campaign, device, location and referrer."""

from __future__ import annotations

from pyanalytics._constants import (
    DEVICE_AD_TRACKING_ENABLED_KEY,
    DEVICE_ADVERTISING_ID_KEY,
    DEVICE_ID_KEY,
    DEVICE_MANUFACTURER_KEY,
    DEVICE_NAME_KEY,
    DEVICE_TOKEN_KEY,
)
from pyanalytics.models._base import ValueMap


class Campaign(ValueMap):
    """Campaign that resulted in the call.

    Maps directly to the common UTM parameters: name, source, medium,
    term and content.
    """

    def put_name(self, name: str) -> Campaign:
        return self.put_value("name", name)

    @property
    def name(self) -> str | None:
        return self.get_string("name")

    def put_source(self, source: str) -> Campaign:
        return self.put_value("source", source)

    @property
    def source(self) -> str | None:
        return self.get_string("source")

    def put_medium(self, medium: str) -> Campaign:
        return self.put_value("medium", medium)

    @property
    def medium(self) -> str | None:
        return self.get_string("medium")

    def put_term(self, term: str) -> Campaign:
        return self.put_value("term", term)

    @property
    def term(self) -> str | None:
        return self.get_string("term")

    def put_content(self, content: str) -> Campaign:
        return self.put_value("content", content)

    @property
    def content(self) -> str | None:
        return self.get_string("content")


class Device(ValueMap):
    """Information about the device."""

    @property
    def device_id(self) -> str | None:
        return self.get_string(DEVICE_ID_KEY)

    @property
    def manufacturer(self) -> str | None:
        return self.get_string(DEVICE_MANUFACTURER_KEY)

    @property
    def name(self) -> str | None:
        return self.get_string(DEVICE_NAME_KEY)

    @property
    def advertising_id(self) -> str | None:
        return self.get_string(DEVICE_ADVERTISING_ID_KEY)

    @property
    def ad_tracking_enabled(self) -> bool:
        return self.get_bool(DEVICE_AD_TRACKING_ENABLED_KEY)

    @property
    def token(self) -> str | None:
        return self.get_string(DEVICE_TOKEN_KEY)

    def put_advertising_info(self, advertising_id: str | None, ad_tracking_enabled: bool) -> Device:
        """Record advertising info.

        The id itself is only stored while ad tracking is enabled.
        """
        if ad_tracking_enabled and advertising_id:
            self[DEVICE_ADVERTISING_ID_KEY] = advertising_id
        self[DEVICE_AD_TRACKING_ENABLED_KEY] = ad_tracking_enabled
        return self

    def put_device_token(self, token: str) -> Device:
        return self.put_value(DEVICE_TOKEN_KEY, token)


class Location(ValueMap):
    """Location of the device."""

    def put_latitude(self, latitude: float) -> Location:
        return self.put_value("latitude", latitude)

    @property
    def latitude(self) -> float:
        return self.get_float("latitude")

    def put_longitude(self, longitude: float) -> Location:
        return self.put_value("longitude", longitude)

    @property
    def longitude(self) -> float:
        return self.get_float("longitude")

    def put_speed(self, speed: float) -> Location:
        return self.put_value("speed", speed)

    @property
    def speed(self) -> float:
        return self.get_float("speed")


class Referrer(ValueMap):
    """Referrer that resulted in the call."""

    def put_id(self, referrer_id: str) -> Referrer:
        return self.put_value("id", referrer_id)

    @property
    def id(self) -> str | None:
        return self.get_string("id")

    def put_link(self, link: str) -> Referrer:
        return self.put_value("link", link)

    @property
    def link(self) -> str | None:
        return self.get_string("link")

    def put_name(self, name: str) -> Referrer:
        return self.put_value("name", name)

    @property
    def name(self) -> str | None:
        return self.get_string("name")

    def put_type(self, referrer_type: str) -> Referrer:
        return self.put_value("type", referrer_type)

    @property
    def type(self) -> str | None:
        return self.get_string("type")

    def put_url(self, url: str) -> Referrer:
        return self.put_value("url", url)

    @property
    def url(self) -> str | None:
        return self.get_string("url")
