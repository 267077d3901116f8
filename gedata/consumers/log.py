"""
File writing consumer.

Records are serialized on the producer thread and written by a single
writer thread, one JSON document per line. Files rotate when the date
(or hour) changes and, optionally, when a file grows past a size limit:

    {directory}/{prefix.}log.{date}          without a size limit
    {directory}/{prefix.}log.{date}_{index}  with a size limit
"""

import logging
import os
import queue
import threading
from datetime import datetime
from typing import BinaryIO, Iterator, Optional

from pydantic import ValidationError

from gedata.config import LogConsumerConfig, resolve_log_config
from gedata.errors import ConsumerClosedError
from gedata.models import EventRecord

from .base import Consumer

LOG = logging.getLogger(__name__)

_STOP = None


class LogConsumer(Consumer):
    """
    Consumer that appends records to rotating local files.
    """

    def __init__(self, config: LogConsumerConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize the consumer and start its writer thread.

        Args:
            config: File and rotation options
            logger: Logger for this consumer, the module logger when None

        Raises:
            ConfigurationError: If the rotate mode is unknown
            OSError: If the directory or the first file can not be created
        """
        self.logger = logger or LOG

        resolved = resolve_log_config(config)
        self.directory = resolved.directory
        self.date_format = resolved.date_format
        self.file_size = resolved.file_size
        self.file_name_prefix = resolved.file_name_prefix

        self._queue: "queue.Queue[Optional[bytes]]" = queue.Queue(maxsize=resolved.channel_size)
        self._mutex = threading.Lock()
        self._closed = False
        self._file_index = 0
        self._time_str = datetime.now().strftime(self.date_format)
        self._current_file: Optional[BinaryIO] = None

        try:
            os.makedirs(self.directory, exist_ok=True)
            self._current_file = self._open(self.construct_file_name(self._time_str, 0))
        except OSError as e:
            self.logger.error("init log file failed: %s", e)
            raise

        self._writer = threading.Thread(
            target=self._run, name="gedata-log-writer", daemon=True
        )
        self._writer.start()

        self.logger.info("Mode: log consumer, log path: %s", self.directory)

    @property
    def current_file_name(self) -> Optional[str]:
        with self._mutex:
            return self._current_file.name if self._current_file else None

    def construct_file_name(self, time_str: str, index: int) -> str:
        prefix = f"{self.file_name_prefix}." if self.file_name_prefix else ""
        if self.file_size > 0:
            name = f"{prefix}log.{time_str}_{index}"
        else:
            name = f"{prefix}log.{time_str}"
        return os.path.join(self.directory, name)

    def add(self, record: EventRecord) -> None:
        with self._mutex:
            closed = self._closed
        if closed:
            error = ConsumerClosedError()
            self.logger.error(error.message)
            raise error

        data = record.to_json()
        self._queue.put(data)

    def flush(self) -> None:
        """
        Sync the current file to disk.

        Records still queued for the writer are not waited for.
        """
        self.logger.info("flush data")
        with self._mutex:
            if self._current_file is not None:
                self._current_file.flush()
                os.fsync(self._current_file.fileno())

    def close(self) -> None:
        """
        Stop accepting records, write everything queued and close the file.

        Raises:
            ConsumerClosedError: If the consumer was already closed
        """
        self.logger.info("log consumer close")

        with self._mutex:
            if self._closed:
                raise ConsumerClosedError("SDK has been closed")
            self._closed = True

        self._queue.put(_STOP)
        self._writer.join()

    def is_stringent(self) -> bool:
        return False

    def _open(self, file_name: str) -> BinaryIO:
        return open(file_name, "ab")

    def _run(self) -> None:
        try:
            while True:
                data = self._queue.get()
                if data is _STOP:
                    return
                self.logger.debug("write event data: %s", data)
                self._write(data)
        finally:
            with self._mutex:
                if self._current_file is not None:
                    self._current_file.flush()
                    os.fsync(self._current_file.fileno())
                    self._current_file.close()
                    self._current_file = None
            self.logger.info("Gracefully shutting down")

    def _rotated_name(self) -> Optional[str]:
        """Return the name of the file to switch to, or None to keep writing."""
        time_str = datetime.now().strftime(self.date_format)

        if time_str != self._time_str:
            self._time_str = time_str
            self._file_index = 0
            return self.construct_file_name(time_str, 0)

        if self._current_file is None:
            return self.construct_file_name(time_str, self._file_index)

        if self.file_size > 0 and self._current_file.tell() > self.file_size:
            self._file_index += 1
            return self.construct_file_name(time_str, self._file_index)

        return None

    def _write(self, data: bytes) -> None:
        with self._mutex:
            new_name = self._rotated_name()
            try:
                if new_name is not None:
                    if self._current_file is not None:
                        self._current_file.flush()
                        os.fsync(self._current_file.fileno())
                        self._current_file.close()
                        self._current_file = None
                    self._current_file = self._open(new_name)

                self._current_file.write(data + b"\n")
            except OSError as e:
                self.logger.error("write to log file failed: %s", e)


def iter_log_files(directory: str, file_name_prefix: str = "") -> Iterator[str]:
    """
    Yield the files written by a LogConsumer in a directory, oldest name first.
    """
    marker = f"{file_name_prefix}.log." if file_name_prefix else "log."
    for name in sorted(os.listdir(directory)):
        path = os.path.join(directory, name)
        if name.startswith(marker) and os.path.isfile(path):
            yield path


def read_log_file(path: str) -> Iterator[EventRecord]:
    """
    Yield the records of a file written by a LogConsumer.

    Lines that are blank or do not hold a valid record are skipped with a warning.
    """
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield EventRecord.from_json(line)
            except ValidationError as e:
                LOG.warning("Skipping invalid record at %s:%s: %s", path, line_number, e)
