import logging
from typing import Any, Dict, Mapping, Optional

from gedata.constants import (
    LIB_NAME,
    LIB_PROPERTY,
    LIB_VERSION_PROPERTY,
    PROFILE,
    TRACK,
    USER_APPEND,
    USER_DELETE,
    USER_INCREMENT,
    USER_NUM_MAX,
    USER_NUM_MIN,
    USER_SET,
    USER_SET_ONCE,
    USER_UNIQ_APPEND,
    USER_UNSET,
)
from gedata.consumers import Consumer
from gedata.errors import InvalidEventError, InvalidPropertyError
from gedata.meta import get_version
from gedata.models import EventRecord, SubEvent
from gedata.utils import invalid_keys, merge_properties, normalize_properties, now_ms

Properties = Optional[Mapping[str, Any]]


class GEAnalytics:
    """
    Public tracking API.

    Builds event records and hands them to a consumer. Caller properties are
    copied, never mutated.
    """

    def __init__(self, consumer: Consumer, logger: Optional[logging.Logger] = None):
        self.consumer = consumer
        self.logger = logger or logging.getLogger(__name__)
        self.logger.info("init SDK success")

    def track(self, client_id: str, event_name: str, properties: Properties = None) -> None:
        """
        Report an ordinary event.

        Raises:
            InvalidEventError: If the event name is empty
        """
        if not event_name:
            message = "the event name must be provided"
            self.logger.error(message)
            raise InvalidEventError(message)

        p: Dict[str, Any] = {
            LIB_PROPERTY: LIB_NAME,
            LIB_VERSION_PROPERTY: get_version(),
        }
        merge_properties(p, properties)

        self._add(client_id, TRACK, event_name, p)

    def user_set(self, client_id: str, properties: Properties) -> None:
        """Set user properties, overwriting existing values."""
        self._user(client_id, USER_SET, properties)

    def user_unset(self, client_id: str, properties: Properties) -> None:
        """
        Clear user properties.

        Raises:
            InvalidEventError: If no properties are given
        """
        if not properties:
            message = "invalid params for user_unset: properties is empty"
            self.logger.info(message)
            raise InvalidEventError(message)
        self._user(client_id, USER_UNSET, properties)

    def user_set_once(self, client_id: str, properties: Properties) -> None:
        """Set user properties that were never set before."""
        self._user(client_id, USER_SET_ONCE, properties)

    def user_increment(self, client_id: str, properties: Properties) -> None:
        self._user(client_id, USER_INCREMENT, properties)

    def user_append(self, client_id: str, properties: Properties) -> None:
        """Append values to array properties."""
        self._user(client_id, USER_APPEND, properties)

    def user_uniq_append(self, client_id: str, properties: Properties) -> None:
        """Append values to array properties, skipping values already present."""
        self._user(client_id, USER_UNIQ_APPEND, properties)

    def user_num_max(self, client_id: str, properties: Properties) -> None:
        self._user(client_id, USER_NUM_MAX, properties)

    def user_num_min(self, client_id: str, properties: Properties) -> None:
        self._user(client_id, USER_NUM_MIN, properties)

    def user_delete(self, client_id: str) -> None:
        """Delete a user. This can not be undone."""
        self._user(client_id, USER_DELETE, None)

    def flush(self) -> None:
        self.consumer.flush()

    def close(self) -> None:
        try:
            self.consumer.close()
        finally:
            self.logger.info("SDK close")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _user(self, client_id: str, event_name: str, properties: Properties) -> None:
        p: Dict[str, Any] = {}
        merge_properties(p, properties)
        self._add(client_id, PROFILE, event_name, p)

    def _check_keys(self, properties: Mapping[str, Any]) -> None:
        for key in invalid_keys(properties):
            if self.consumer.is_stringent():
                self.logger.error("Invalid property key: %r", key)
                raise InvalidPropertyError(key=key)
            self.logger.warning("Invalid property key: %r", key)

    def _add(self, client_id: str, kind: str, event_name: str, properties: Dict[str, Any]) -> None:
        self._check_keys(properties)

        item = SubEvent(
            kind=kind,
            name=event_name,
            time=now_ms(),
            properties=normalize_properties(properties),
        )
        record = EventRecord(client_id=client_id, event_list=[item])

        self.consumer.add(record)
