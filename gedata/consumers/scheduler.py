import logging
import threading
from typing import Callable, Optional


class FlushScheduler:
    """
    Recurring timer that runs a flush callback on its own thread.

    The thread waits on a stop event between ticks, so ``stop`` wakes it
    immediately and the thread can be joined.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            interval: Seconds between two callback runs
            callback: Function to run on every tick
            logger: Logger used to report failed ticks
        """
        self.interval = interval
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.logger = logger or logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="gedata-flush-timer", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the timer and wait for its thread to finish.

        A tick already in progress is allowed to complete.

        Returns:
            True if the thread finished within the timeout
        """
        self._stop_event.set()

        if self._thread is None:
            return True

        if self._thread is not threading.current_thread():
            self._thread.join(timeout)

        return not self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self._callback()
            except Exception as e:
                self.logger.error("Timer flush failed: %s", e)
