import logging
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from gedata.constants import DEFAULT_CHANNEL_SIZE
from gedata.errors import ConfigurationError
from .log_codes import LOG_ROTATE_MODE_INVALID

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024


class RotateMode(Enum):
    DAILY = 0
    HOURLY = 1


# strftime formats used in log file names
ROTATE_DATE_FORMATS = {
    RotateMode.DAILY: "%Y-%m-%d",
    RotateMode.HOURLY: "%Y-%m-%d-%H",
}


@dataclass
class LogConsumerConfig:
    """
    Options of the file writing consumer.

    Args:
        directory (str): Directory of the log files, created if missing.
        rotate_mode (RotateMode): Start a new file every day or every hour.
        file_size (int): Max size of a single file in MB, 0 disables size rotation.
        file_name_prefix (str): Optional prefix of the file names.
        channel_size (int): Capacity of the writer queue.
    """

    directory: str
    rotate_mode: RotateMode = RotateMode.DAILY
    file_size: int = 0
    file_name_prefix: str = ""
    channel_size: int = 0


class ResolvedLogConfig(NamedTuple):
    directory: str
    date_format: str
    file_size: int
    file_name_prefix: str
    channel_size: int


def resolve_log_config(config: LogConsumerConfig) -> ResolvedLogConfig:
    """
    Resolve rotation format, byte size and queue size.

    Raises:
        ConfigurationError: If the rotate mode is unknown.
    """
    try:
        date_format = ROTATE_DATE_FORMATS[RotateMode(config.rotate_mode)]
    except (ValueError, KeyError) as e:
        logger.error(LOG_ROTATE_MODE_INVALID, extra={"rotate_mode": config.rotate_mode})
        raise ConfigurationError("unknown Rotate mode") from e

    return ResolvedLogConfig(
        directory=config.directory,
        date_format=date_format,
        file_size=max(config.file_size, 0) * MEGABYTE,
        file_name_prefix=config.file_name_prefix or "",
        channel_size=config.channel_size if config.channel_size > 0 else DEFAULT_CHANNEL_SIZE,
    )
