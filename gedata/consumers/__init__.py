from .base import Consumer
from .batch import BatchConsumer
from .debug import DebugConsumer
from .log import LogConsumer
from .scheduler import FlushScheduler

__all__ = [
    "Consumer",
    "BatchConsumer",
    "DebugConsumer",
    "LogConsumer",
    "FlushScheduler",
]
