"""Data models for context values, payloads and targets."""

from pyanalytics.models._base import FrozenMapping, ValueMap, freeze, to_plain
from pyanalytics.models.context import Campaign, Device, Location, Referrer
from pyanalytics.models.payload import (
    BasePayload,
    IdentifyPayload,
    IdentifyPayloadBuilder,
    PayloadBuilder,
    PayloadType,
    TrackPayload,
    TrackPayloadBuilder,
)
from pyanalytics.models.target import ItemTarget, ItemTargetBuilder
from pyanalytics.models.traits import Traits

__all__ = [
    "BasePayload",
    "FrozenMapping",
    "Campaign",
    "Device",
    "IdentifyPayload",
    "IdentifyPayloadBuilder",
    "ItemTarget",
    "ItemTargetBuilder",
    "Location",
    "PayloadBuilder",
    "PayloadType",
    "Referrer",
    "TrackPayload",
    "TrackPayloadBuilder",
    "Traits",
    "ValueMap",
    "freeze",
    "to_plain",
]
