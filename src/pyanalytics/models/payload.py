"""Outgoing event payloads and their builders.

Builders validate eagerly: a bad argument fails in the setter, and a
missing required field fails in :meth:`PayloadBuilder.build`, always with
:class:`~pyanalytics.exceptions.PayloadValidationError` and always before
the payload can reach a dispatcher.  Once ``build()`` returns, the builder
is spent and the payload is a frozen model whose mapping fields are
read-only deep copies.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Generic, Literal, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pyanalytics.exceptions import PayloadBuilderStateError, PayloadValidationError
from pyanalytics.models._base import FrozenMapping, to_plain
from pyanalytics.models.target import ItemTarget


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PayloadType(StrEnum):
    TRACK = "track"
    IDENTIFY = "identify"


class BasePayload(BaseModel):
    """Fields shared by every payload kind."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    type: PayloadType
    message_id: str
    timestamp: datetime
    profile_id: str | None = None
    session_id: str | None = None
    anonymous_id: str | None = None
    context: FrozenMapping = Field(default_factory=dict, validate_default=True)
    target: ItemTarget | None = None

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict handed to the backend."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class TrackPayload(BasePayload):
    """A user action, e.g. ``play`` on a video."""

    type: Literal[PayloadType.TRACK] = PayloadType.TRACK
    event: str
    properties: FrozenMapping = Field(default_factory=dict, validate_default=True)

    @field_validator("event")
    @classmethod
    def _event_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("event cannot be null or empty")
        return value


class IdentifyPayload(BasePayload):
    """Ties a user to their traits."""

    type: Literal[PayloadType.IDENTIFY] = PayloadType.IDENTIFY
    traits: FrozenMapping = Field(default_factory=dict, validate_default=True)


TPayload = TypeVar("TPayload", bound=BasePayload)


class PayloadBuilder(Generic[TPayload]):
    """Shared builder state.

    Subclasses implement :meth:`_validate` for their kind-specific
    required fields and :meth:`_create` to instantiate the model.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._message_id: str | None = None
        self._timestamp: datetime | None = None
        self._profile_id: str | None = None
        self._session_id: str | None = None
        self._anonymous_id: str | None = None
        self._context: dict[str, Any] = {}
        self._target: ItemTarget | None = None
        self._built = False

    def _check_building(self) -> None:
        if self._built:
            raise PayloadBuilderStateError(f"{type(self).__name__} already built")

    def message_id(self, message_id: str) -> Self:
        self._check_building()
        if not message_id:
            raise PayloadValidationError("messageId cannot be null or empty")
        self._message_id = message_id
        return self

    def timestamp(self, timestamp: datetime) -> Self:
        self._check_building()
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        self._timestamp = timestamp
        return self

    def profile_id(self, profile_id: str | None) -> Self:
        self._check_building()
        self._profile_id = profile_id or None
        return self

    def session_id(self, session_id: str | None) -> Self:
        self._check_building()
        self._session_id = session_id or None
        return self

    def anonymous_id(self, anonymous_id: str | None) -> Self:
        self._check_building()
        self._anonymous_id = anonymous_id or None
        return self

    def context(self, context: Mapping[str, Any]) -> Self:
        """Attach the context snapshot; nested values are copied."""
        self._check_building()
        if context is None:
            raise PayloadValidationError("context == null")
        self._context = to_plain(context)
        return self

    def target(self, target: ItemTarget | None) -> Self:
        self._check_building()
        self._target = target
        return self

    def _validate(self) -> None:
        """Raise :class:`PayloadValidationError` for missing required fields."""

    def _create(self, **common: Any) -> TPayload:
        raise NotImplementedError

    def build(self) -> TPayload:
        self._check_building()
        self._validate()
        payload = self._create(
            message_id=self._message_id or str(uuid.uuid4()),
            timestamp=self._timestamp or self._clock(),
            profile_id=self._profile_id,
            session_id=self._session_id,
            anonymous_id=self._anonymous_id,
            context=self._context,
            target=self._target,
        )
        self._built = True
        return payload


class TrackPayloadBuilder(PayloadBuilder[TrackPayload]):
    """Builder for :class:`TrackPayload`.

    Usage::

        payload = (
            TrackPayloadBuilder()
            .profile_id("user-1")
            .event("play")
            .properties({"duration": 1000})
            .build()
        )
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        super().__init__(clock=clock)
        self._event: str | None = None
        self._properties: dict[str, Any] = {}

    def event(self, event: str | None) -> TrackPayloadBuilder:
        self._check_building()
        if not event:
            raise PayloadValidationError("event cannot be null or empty")
        self._event = event
        return self

    def properties(self, properties: Mapping[str, Any] | None) -> TrackPayloadBuilder:
        self._check_building()
        if properties is None:
            raise PayloadValidationError("properties == null")
        self._properties = to_plain(properties)
        return self

    def _validate(self) -> None:
        if not self._event:
            raise PayloadValidationError("event cannot be null or empty")

    def _create(self, **common: Any) -> TrackPayload:
        assert self._event is not None  # noqa: S101
        return TrackPayload(event=self._event, properties=self._properties, **common)


class IdentifyPayloadBuilder(PayloadBuilder[IdentifyPayload]):
    """Builder for :class:`IdentifyPayload`.

    Traits are required, and the payload must carry either a profile id or
    an anonymous id.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        super().__init__(clock=clock)
        self._traits: dict[str, Any] | None = None

    def traits(self, traits: Mapping[str, Any] | None) -> IdentifyPayloadBuilder:
        self._check_building()
        if traits is None:
            raise PayloadValidationError("traits == null")
        self._traits = to_plain(traits)
        return self

    def _validate(self) -> None:
        if self._traits is None:
            raise PayloadValidationError("traits == null")
        if not self._profile_id and not self._anonymous_id:
            raise PayloadValidationError("either profileId or anonymousId is required")

    def _create(self, **common: Any) -> IdentifyPayload:
        return IdentifyPayload(traits=self._traits or {}, **common)
