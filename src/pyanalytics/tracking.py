"""Media playback tracking helpers.

Turns stream metadata into an :class:`~pyanalytics.models.target.ItemTarget`
so playback events (``play``, ``pause`` ...) can say which video they are
about.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyanalytics.models.target import ItemTarget, ItemTargetBuilder

PLAY = "play"
PAUSE = "pause"
SEEK = "seek"
PLAY_NEXT = "play_next"

VIDEO_ITEM_TYPE = "video"


class StreamType(StrEnum):
    NONE = "NONE"
    VIDEO_STREAM = "VIDEO_STREAM"
    AUDIO_STREAM = "AUDIO_STREAM"
    LIVE_STREAM = "LIVE_STREAM"
    AUDIO_LIVE_STREAM = "AUDIO_LIVE_STREAM"
    POST_LIVE_STREAM = "POST_LIVE_STREAM"
    POST_LIVE_AUDIO_STREAM = "POST_LIVE_AUDIO_STREAM"
    FILE = "FILE"


class StreamMetadata(BaseModel):
    """Metadata of the stream being played."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    name: str | None = None
    category: str = ""
    sub_channel_name: str = Field(default="", alias="subChannelName")
    like_count: int = Field(default=-1, alias="likeCount")
    view_count: int = Field(default=-1, alias="viewCount")
    stream_type: StreamType | str = Field(default=StreamType.NONE, alias="streamType")


def metadata_properties(stream: StreamMetadata) -> dict[str, Any]:
    """Target properties for *stream*.

    ``category`` and ``channel`` are left out when empty; the remaining
    keys are always present, even when their value is ``None``.
    """
    properties: dict[str, Any] = {}
    if stream.category:
        properties["category"] = stream.category
    properties["likes"] = stream.like_count
    if stream.sub_channel_name:
        properties["channel"] = stream.sub_channel_name
    properties["views"] = stream.view_count
    stream_type = stream.stream_type
    properties["type"] = stream_type.value if isinstance(stream_type, StreamType) else str(stream_type)
    properties["title"] = stream.name
    return properties


def metadata_target(stream: StreamMetadata, item_type: str = VIDEO_ITEM_TYPE) -> ItemTarget:
    """Describe *stream* as the target of a playback event."""
    return ItemTargetBuilder().item_id(stream.id).item_type(item_type).properties(metadata_properties(stream)).build()
