"""
Event data model shared by every consumer.

Wire format::

    {"client_id": "...", "event_list": [{"type": "track", "event": "...",
     "time": 1765866851234, "time_free": false, "properties": {...}}]}
"""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_core import PydanticSerializationError

from gedata.constants import PROFILE, TRACK
from gedata.errors import SerializationError

EventKind = Literal["track", "profile"]


class SubEvent(BaseModel):
    """
    A single typed, timestamped event with its property bag.
    """

    model_config = ConfigDict(populate_by_name=True)

    kind: EventKind = Field(alias="type")
    name: str = Field(alias="event")
    time: int
    time_free: bool = False
    properties: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_name(self) -> "SubEvent":
        if self.kind == TRACK and not self.name:
            raise ValueError("the event name must be provided")
        return self

    @property
    def is_profile(self) -> bool:
        return self.kind == PROFILE


class EventRecord(BaseModel):
    """
    One client's bundle of sub-events submitted together.
    """

    client_id: str
    event_list: List[SubEvent] = Field(default_factory=list)

    def to_json(self) -> bytes:
        """
        Serialize the record to its wire representation.

        Returns:
            bytes: UTF-8 encoded JSON.

        Raises:
            SerializationError: If a property value has no JSON representation.
        """
        try:
            return self.model_dump_json(by_alias=True).encode("utf-8")
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise SerializationError(reason=str(e)) from e

    @classmethod
    def from_json(cls, data: str) -> "EventRecord":
        return cls.model_validate_json(data)


def group_by_client(records: List[EventRecord]) -> List[EventRecord]:
    """
    Merge records that share a client id.

    Clients keep the order in which they were first seen and each client's
    events are concatenated in encounter order.

    Args:
        records: Records of one batch.

    Returns:
        List[EventRecord]: One record per client id.
    """
    grouped: Dict[str, List[SubEvent]] = {}
    for record in records:
        grouped.setdefault(record.client_id, []).extend(record.event_list)

    return [
        EventRecord(client_id=client_id, event_list=events)
        for client_id, events in grouped.items()
    ]
