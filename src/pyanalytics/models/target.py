"""Target item descriptor attached to a payload."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pyanalytics.exceptions import PayloadBuilderStateError, PayloadValidationError
from pyanalytics.models._base import FrozenMapping, to_plain


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ItemTarget(BaseModel):
    """The item an event is about, e.g. a specific video.

    Parameters
    ----------
    item_id : str
        Identifier of the item in the host application.
    item_type : str
        Type tag such as ``"video"`` or ``"game"``.
    timestamp : datetime
        When the descriptor was created.
    properties : Mapping
        Free-form item attributes, stored as a read-only deep copy.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    item_id: str
    item_type: str
    timestamp: datetime = Field(default_factory=_utcnow)
    properties: FrozenMapping = Field(default_factory=dict, validate_default=True)

    @field_validator("item_id", "item_type")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-empty")
        return value

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ItemTargetBuilder:
    """Fluent builder for :class:`ItemTarget`."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._item_id: str | None = None
        self._item_type: str | None = None
        self._timestamp: datetime | None = None
        self._properties: dict[str, Any] = {}
        self._built = False

    def _check_building(self) -> None:
        if self._built:
            raise PayloadBuilderStateError("target already built")

    def item_id(self, item_id: str) -> ItemTargetBuilder:
        self._check_building()
        if not item_id:
            raise PayloadValidationError("itemId cannot be null or empty")
        self._item_id = item_id
        return self

    def item_type(self, item_type: str) -> ItemTargetBuilder:
        self._check_building()
        if not item_type:
            raise PayloadValidationError("itemType cannot be null or empty")
        self._item_type = item_type
        return self

    def timestamp(self, timestamp: datetime) -> ItemTargetBuilder:
        self._check_building()
        self._timestamp = timestamp
        return self

    def properties(self, properties: Mapping[str, Any] | None) -> ItemTargetBuilder:
        self._check_building()
        if properties is None:
            raise PayloadValidationError("properties == null")
        self._properties = to_plain(properties)
        return self

    def build(self) -> ItemTarget:
        self._check_building()
        if not self._item_id:
            raise PayloadValidationError("itemId cannot be null or empty")
        if not self._item_type:
            raise PayloadValidationError("itemType cannot be null or empty")
        target = ItemTarget(
            item_id=self._item_id,
            item_type=self._item_type,
            timestamp=self._timestamp or self._clock(),
            properties=self._properties,
        )
        self._built = True
        return target
