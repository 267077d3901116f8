# -*- coding: utf-8 -*-
"""
gedata - event tracking SDK for the Gravity Engine collection API.

Events are built by ``GEAnalytics`` and handed to a consumer:

- ``BatchConsumer`` buffers events and delivers them in batches over HTTP
- ``DebugConsumer`` sends every event immediately
- ``LogConsumer`` appends events to rotating local files
"""

__author__ = """gravity-engine.com"""

import os

ROOT = os.path.dirname(os.path.abspath(__file__))

with open(os.path.join(ROOT, 'VERSION')) as version_file:
    VERSION = version_file.read().strip()

from gedata.analytics import GEAnalytics  # noqa: E402
from gedata.config import BatchConfig, LogConsumerConfig, RotateMode  # noqa: E402
from gedata.consumers import (  # noqa: E402
    BatchConsumer,
    Consumer,
    DebugConsumer,
    LogConsumer,
)
from gedata.errors import (  # noqa: E402
    ConfigurationError,
    ConsumerClosedError,
    DeliveryError,
    GEDataError,
    InvalidEventError,
    InvalidPropertyError,
    NetworkError,
    SerializationError,
    ServerRejectedError,
    UnexpectedStatusError,
)
from gedata.models import EventRecord, SubEvent  # noqa: E402

__version__ = VERSION

__all__ = [
    "GEAnalytics",
    # Consumers
    "Consumer",
    "BatchConsumer",
    "DebugConsumer",
    "LogConsumer",
    # Config
    "BatchConfig",
    "LogConsumerConfig",
    "RotateMode",
    # Models
    "EventRecord",
    "SubEvent",
    # Errors
    "GEDataError",
    "ConfigurationError",
    "ConsumerClosedError",
    "DeliveryError",
    "NetworkError",
    "ServerRejectedError",
    "UnexpectedStatusError",
    "SerializationError",
    "InvalidEventError",
    "InvalidPropertyError",
]
