"""
Consumer definitions for the tracking facade.
"""

from abc import ABC, abstractmethod

from gedata.models import EventRecord


class Consumer(ABC):
    """
    Abstract base class for consumers.

    A consumer receives event records from ``GEAnalytics`` and is responsible
    for getting them to their destination.
    """

    @abstractmethod
    def add(self, record: EventRecord) -> None:
        """
        Hand an event record to the consumer.

        Args:
            record: The record to deliver

        Raises:
            GEDataError: If the record could not be accepted or delivered
        """
        pass

    @abstractmethod
    def flush(self) -> None:
        """
        Push any buffered data to the destination.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Flush and release any resources held by the consumer.
        """
        pass

    @abstractmethod
    def is_stringent(self) -> bool:
        """
        Whether malformed events are rejected instead of passed through.
        """
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
