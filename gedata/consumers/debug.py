import logging
from typing import Optional

import httpx

from gedata.config.batch import resolve_timeout, validate_server_url
from gedata.errors import ServerRejectedError, UnexpectedStatusError
from gedata.models import EventRecord
from gedata.transport import send_payload

from .base import Consumer


class DebugConsumer(Consumer):
    """
    Consumer that sends every record as soon as it is added.

    Failures are raised to the caller right away; nothing is buffered or
    retried. Meant for integration testing, not production traffic.
    """

    def __init__(
        self,
        server_url: str,
        http_client: Optional[httpx.Client] = None,
        timeout_ms: int = 0,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.server_url = validate_server_url(server_url)

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.Client(
            timeout=httpx.Timeout(resolve_timeout(timeout_ms))
        )

        self.logger.info("Mode: debug consumer, server_url: %s", self.server_url)

    def add(self, record: EventRecord) -> None:
        data = record.to_json()
        count = len(record.event_list)

        self.logger.info("%s", data.decode("utf-8"))
        self.logger.debug("send len(event_list): %s", count)

        response = send_payload(
            self.http_client, self.server_url, data, compress=False, count=count
        )

        if response.status_code != httpx.codes.OK:
            raise UnexpectedStatusError(status_code=response.status_code)

        if response.code != 0:
            error = ServerRejectedError(code=response.code, body=response.body)
            self.logger.error(error.message)
            raise error

        self.logger.info("send success: %s", response.body)

    def flush(self) -> None:
        self.logger.info("flush data")

    def close(self) -> None:
        self.logger.info("debug consumer close")
        if self._owns_client:
            self.http_client.close()

    def is_stringent(self) -> bool:
        return True
