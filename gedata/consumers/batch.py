"""
Batching consumer.

Records accumulate in an active buffer. A flush moves the buffer into a
bounded cache of batches and tries to deliver the oldest cached batch.
Batches that fail stay cached for the next flush; once the cache grows
past its capacity the oldest batch is dropped.
"""

import logging
import threading
from typing import List, Optional, Set, Tuple

import httpx

from gedata.config import BatchConfig, resolve_batch_config
from gedata.errors import (
    ConsumerClosedError,
    DeliveryError,
    NetworkError,
    SerializationError,
)
from gedata.models import EventRecord, group_by_client
from gedata.transport import post_events

from .base import Consumer
from .scheduler import FlushScheduler


class BatchConsumer(Consumer):
    """
    Consumer that uploads records in batches over HTTP.

    ``add`` triggers a flush once the buffer holds ``batch_size`` records or
    while undelivered batches are cached, so producers slow down when the
    endpoint does. Delivery runs on the calling thread.

    Two locks guard the state: the flush lock serializes whole flushes and is
    always taken before the buffer lock, which guards the buffer and cache.
    """

    def __init__(self, config: BatchConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize the consumer.

        Args:
            config: Batch options
            logger: Logger for this consumer, the module logger when None

        Raises:
            ConfigurationError: If the server url is missing or invalid
        """
        self.logger = logger or logging.getLogger(__name__)

        resolved = resolve_batch_config(config)
        self.server_url = resolved.server_url
        self.compress = resolved.compress
        self.batch_size = resolved.batch_size
        self.cache_capacity = resolved.cache_capacity
        self.timeout = resolved.timeout

        if config.http_client is None:
            self.http_client = httpx.Client(timeout=httpx.Timeout(self.timeout))
            self._owns_client = True
            self._request_timeout: Optional[float] = None
        else:
            self.http_client = config.http_client
            self._owns_client = False
            self._request_timeout = self.timeout if config.timeout_ms > 0 else None

        self._buffer_lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._buffer: List[EventRecord] = []
        self._cache: List[List[EventRecord]] = []
        self._closed = False

        self._scheduler: Optional[FlushScheduler] = None
        if resolved.auto_flush:
            self._scheduler = FlushScheduler(
                resolved.interval, self._timer_flush, logger=self.logger
            )
            self._scheduler.start()

        self.logger.info("Mode: batch consumer, server_url: %s", self.server_url)

    @classmethod
    def from_url(
        cls,
        server_url: str,
        batch_size: int = 0,
        compress: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> "BatchConsumer":
        config = BatchConfig(
            server_url=server_url, batch_size=batch_size, compress=compress
        )
        return cls(config, logger=logger)

    @property
    def pending_events(self) -> int:
        """Number of records in the active buffer."""
        with self._buffer_lock:
            return len(self._buffer)

    @property
    def pending_batches(self) -> int:
        """Number of flushed batches waiting for delivery."""
        with self._buffer_lock:
            return len(self._cache)

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, record: EventRecord) -> None:
        if self._closed:
            error = ConsumerClosedError()
            self.logger.error(error.message)
            raise error

        try:
            record.to_json()
        except SerializationError as e:
            self.logger.error("Dropping record of client %s: %s", record.client_id, e)
            raise

        with self._buffer_lock:
            if self._closed:
                raise ConsumerClosedError()
            self._buffer.append(record)
            should_flush = len(self._buffer) >= self.batch_size or len(self._cache) > 0

        if should_flush:
            self.flush()

    def flush(self) -> None:
        self.logger.info("flush data")
        self._inner_flush()

    def _timer_flush(self) -> None:
        self.logger.info("timer flush data")
        self._inner_flush()

    def _inner_flush(self) -> None:
        with self._flush_lock, self._buffer_lock:
            if not self._buffer and not self._cache:
                self.logger.debug("flush data: buffer and cache are empty")
                return

            try:
                if not self._cache or len(self._buffer) >= self.batch_size:
                    self._cache.append(self._buffer)
                    self._buffer = []

                self._upload_oldest()
            finally:
                if len(self._cache) > self.cache_capacity:
                    dropped = self._cache.pop(0)
                    self.logger.warning(
                        "Cache capacity %s exceeded, dropped oldest batch of %s records",
                        self.cache_capacity,
                        len(dropped),
                    )

    def _upload_oldest(self) -> None:
        """
        Deliver the oldest cached batch, one request per client id.

        Must be called with both locks held. On failure the batch stays at the
        head of the cache without the clients already accepted.
        """
        batch = self._cache[0]
        delivered: Set[str] = set()

        try:
            for group in group_by_client(batch):
                try:
                    data = group.to_json()
                except SerializationError:
                    # can never succeed, keep the rest of the batch deliverable
                    delivered.add(group.client_id)
                    raise

                count = len(group.event_list)
                self.logger.debug("send len(event_list): %s", count)

                post_events(
                    self.http_client,
                    self.server_url,
                    data,
                    self.compress,
                    count,
                    self._request_timeout,
                )
                delivered.add(group.client_id)
                self.logger.info(
                    "send success: client_id=%s, events=%s", group.client_id, count
                )
        except (DeliveryError, SerializationError) as e:
            self.logger.error("Batch delivery failed: %s", e)
            if delivered:
                remaining = [r for r in batch if r.client_id not in delivered]
                if remaining:
                    self._cache[0] = remaining
                else:
                    self._cache.pop(0)
            raise

        self._cache.pop(0)

    def _pending_counts(self) -> Tuple[int, int]:
        with self._buffer_lock:
            return len(self._cache), len(self._buffer)

    def flush_all(self) -> None:
        """
        Flush until the buffer and the cache are empty.

        Network errors are tolerated while they make progress; a network error
        that leaves the pending counts unchanged since the previous one is
        raised. Any other error is raised immediately.
        """
        stalled_at = None

        while True:
            pending = self._pending_counts()
            if pending == (0, 0):
                return

            try:
                self.flush()
            except NetworkError as e:
                pending = self._pending_counts()
                if pending == stalled_at:
                    raise
                stalled_at = pending
                self.logger.warning(
                    "Network error while draining, %s batches and %s records pending: %s",
                    pending[0],
                    pending[1],
                    e,
                )

    def close(self) -> None:
        with self._buffer_lock:
            if self._closed:
                return
            self._closed = True

        self.logger.info("batch consumer close")

        if self._scheduler is not None:
            self._scheduler.stop()

        try:
            self.flush_all()
        finally:
            if self._owns_client:
                self.http_client.close()

    def is_stringent(self) -> bool:
        return False
