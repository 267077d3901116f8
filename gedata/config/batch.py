import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, NamedTuple, Optional, Union

import httpx

from gedata.constants import (
    CONFIG,
    DEFAULT_BATCH_SIZE,
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_INTERVAL,
    DEFAULT_TIMEOUT_MS,
    ENV_AUTO_FLUSH,
    ENV_BATCH_SIZE,
    ENV_CACHE_CAPACITY,
    ENV_COMPRESS,
    ENV_INTERVAL,
    ENV_SERVER_URL,
    ENV_TIMEOUT_MS,
    MAX_BATCH_SIZE,
)
from gedata.errors import ConfigurationError
from .log_codes import (
    BATCH_CONFIG_MISSING_SECTION,
    BATCH_ENV_VALUE_INVALID,
    BATCH_RESOLVED,
    BATCH_SERVER_URL_INVALID,
    BATCH_SERVER_URL_MISSING,
    BATCH_SIZE_CLAMPED,
)

logger = logging.getLogger(__name__)

BATCH_SECTION_NAME = "batch"

SERVER_URL_KEY = "server_url"
BATCH_SIZE_KEY = "batch_size"
CACHE_CAPACITY_KEY = "cache_capacity"
TIMEOUT_MS_KEY = "timeout_ms"
COMPRESS_KEY = "compress"
AUTO_FLUSH_KEY = "auto_flush"
INTERVAL_KEY = "interval"

ALLOWED_SCHEMES = ("http", "https")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class BatchConfig:
    """
    User facing options of the batch consumer.

    Zero or negative sizes, capacities, timeouts and intervals fall back to
    their defaults when the consumer resolves the configuration.

    Args:
        server_url (str): Collection endpoint, required.
        batch_size (int): Events per flush, clamped to MAX_BATCH_SIZE.
        timeout_ms (int): Per request timeout in milliseconds.
        compress (bool): Gzip request bodies.
        auto_flush (bool): Run a background timer that flushes periodically.
        interval (float): Seconds between automatic flushes.
        cache_capacity (int): Maximum number of flushed batches kept in memory.
        http_client (Optional[httpx.Client]): Externally owned client to send with.
    """

    server_url: str
    batch_size: int = 0
    timeout_ms: int = 0
    compress: bool = True
    auto_flush: bool = False
    interval: float = 0
    cache_capacity: int = 0
    http_client: Optional[httpx.Client] = None


class ResolvedBatchConfig(NamedTuple):
    server_url: str
    batch_size: int
    cache_capacity: int
    timeout: float
    compress: bool
    auto_flush: bool
    interval: float

    def as_dict(self) -> Dict[str, Union[str, int, float, bool]]:
        return {
            SERVER_URL_KEY: self.server_url,
            BATCH_SIZE_KEY: self.batch_size,
            CACHE_CAPACITY_KEY: self.cache_capacity,
            "timeout": self.timeout,
            COMPRESS_KEY: self.compress,
            AUTO_FLUSH_KEY: self.auto_flush,
            INTERVAL_KEY: self.interval,
        }


def validate_server_url(server_url: Optional[str]) -> str:
    """
    Validate the collection endpoint.

    Args:
        server_url (Optional[str]): The endpoint URL.

    Returns:
        str: The normalized URL.

    Raises:
        ConfigurationError: If the URL is empty or not an absolute http(s) URL.
    """
    if not server_url or not server_url.strip():
        logger.error(BATCH_SERVER_URL_MISSING)
        raise ConfigurationError("ServerUrl not be empty")

    try:
        url = httpx.URL(server_url.strip())
    except (httpx.InvalidURL, TypeError) as e:
        logger.error(BATCH_SERVER_URL_INVALID, extra={"server_url": server_url})
        raise ConfigurationError(f"Invalid server url {server_url!r}: {e}") from e

    if url.scheme not in ALLOWED_SCHEMES or not url.host:
        logger.error(BATCH_SERVER_URL_INVALID, extra={"server_url": server_url})
        raise ConfigurationError(
            f"Invalid server url {server_url!r}: an absolute http(s) URL is required"
        )

    return str(url)


def resolve_batch_size(batch_size: int) -> int:
    if batch_size > MAX_BATCH_SIZE:
        logger.debug(
            BATCH_SIZE_CLAMPED, extra={"requested": batch_size, "max": MAX_BATCH_SIZE}
        )
        return MAX_BATCH_SIZE
    if batch_size <= 0:
        return DEFAULT_BATCH_SIZE
    return batch_size


def resolve_cache_capacity(cache_capacity: int) -> int:
    return cache_capacity if cache_capacity > 0 else DEFAULT_CACHE_CAPACITY


def resolve_timeout(timeout_ms: int) -> float:
    """Return the request timeout in seconds."""
    timeout_ms = timeout_ms if timeout_ms > 0 else DEFAULT_TIMEOUT_MS
    return timeout_ms / 1000.0


def resolve_interval(interval: float) -> float:
    return float(interval if interval > 0 else DEFAULT_INTERVAL)


def resolve_batch_config(config: BatchConfig) -> ResolvedBatchConfig:
    """
    Apply defaults and bounds to a batch configuration.

    Raises:
        ConfigurationError: If the server url is missing or invalid.
    """
    return ResolvedBatchConfig(
        server_url=validate_server_url(config.server_url),
        batch_size=resolve_batch_size(config.batch_size),
        cache_capacity=resolve_cache_capacity(config.cache_capacity),
        timeout=resolve_timeout(config.timeout_ms),
        compress=config.compress,
        auto_flush=config.auto_flush,
        interval=resolve_interval(config.interval),
    )


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {raw!r}")


_FIELD_PARSERS: Dict[str, Callable[[str], Any]] = {
    SERVER_URL_KEY: str,
    BATCH_SIZE_KEY: int,
    CACHE_CAPACITY_KEY: int,
    TIMEOUT_MS_KEY: int,
    COMPRESS_KEY: _parse_bool,
    AUTO_FLUSH_KEY: _parse_bool,
    INTERVAL_KEY: float,
}

_ENV_KEYS = {
    SERVER_URL_KEY: ENV_SERVER_URL,
    BATCH_SIZE_KEY: ENV_BATCH_SIZE,
    CACHE_CAPACITY_KEY: ENV_CACHE_CAPACITY,
    TIMEOUT_MS_KEY: ENV_TIMEOUT_MS,
    COMPRESS_KEY: ENV_COMPRESS,
    AUTO_FLUSH_KEY: ENV_AUTO_FLUSH,
    INTERVAL_KEY: ENV_INTERVAL,
}


def _batch_from_env() -> Dict[str, Any]:
    """
    Read batch options from GEDATA_* environment variables.

    Raises:
        ConfigurationError: If a variable holds a value of the wrong type.
    """
    values = {}
    for key, env_name in _ENV_KEYS.items():
        raw = os.environ.get(env_name)
        if raw is None or not raw.strip():
            continue
        try:
            values[key] = _FIELD_PARSERS[key](raw.strip())
        except ValueError as e:
            logger.error(BATCH_ENV_VALUE_INVALID, extra={"variable": env_name})
            raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}") from e
    return values


def _batch_from_config_ini(config_path: Path) -> Dict[str, Any]:
    """
    Read batch options from the [batch] section of a config.ini file.

    Args:
        config_path (Path): The path to the config.ini file.

    Returns:
        Dict[str, Any]: The options found, possibly empty.
    """
    config = configparser.ConfigParser()
    config_files = config.read(filenames=[config_path])

    if not config_files or not config.has_section(BATCH_SECTION_NAME):
        if config_files:
            logger.debug(
                BATCH_CONFIG_MISSING_SECTION, extra={"config_path": str(config_path)}
            )
        return {}

    section = config[BATCH_SECTION_NAME]
    values = {}
    for key, parser in _FIELD_PARSERS.items():
        raw = section.get(key, None)
        if raw is None or not raw.strip():
            continue
        try:
            values[key] = parser(raw.strip())
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {key} in {config_path}: {raw!r}"
            ) from e
    return values


def get_batch_config(
    server_url: Optional[str] = None,
    batch_size: Optional[int] = None,
    cache_capacity: Optional[int] = None,
    timeout_ms: Optional[int] = None,
    compress: Optional[bool] = None,
    auto_flush: Optional[bool] = None,
    interval: Optional[float] = None,
    config_path: Path = CONFIG,
) -> BatchConfig:
    """
    Resolve the effective batch consumer configuration.

    Each option is taken from the first source that defines it:
      1. Explicit arguments
      2. GEDATA_* environment variables
      3. The [batch] section of the config.ini file

    Args:
        server_url (Optional[str]): Collection endpoint.
        batch_size (Optional[int]): Events per flush.
        cache_capacity (Optional[int]): Maximum number of pending batches.
        timeout_ms (Optional[int]): Per request timeout in milliseconds.
        compress (Optional[bool]): Gzip request bodies.
        auto_flush (Optional[bool]): Enable the background flush timer.
        interval (Optional[float]): Seconds between automatic flushes.
        config_path (Path): The path to the config.ini file.

    Returns:
        BatchConfig: The merged configuration.

    Raises:
        ConfigurationError: If no source provides a server url or a value is invalid.
    """
    explicit = {
        SERVER_URL_KEY: server_url,
        BATCH_SIZE_KEY: batch_size,
        CACHE_CAPACITY_KEY: cache_capacity,
        TIMEOUT_MS_KEY: timeout_ms,
        COMPRESS_KEY: compress,
        AUTO_FLUSH_KEY: auto_flush,
        INTERVAL_KEY: interval,
    }

    sources = [
        ("cli", lambda: {k: v for k, v in explicit.items() if v is not None}),
        ("env", _batch_from_env),
        ("config", lambda: _batch_from_config_ini(config_path=config_path)),
    ]

    values: Dict[str, Any] = {}
    origins: Dict[str, str] = {}
    for source_name, source_func in sources:
        for key, value in source_func().items():
            if key not in values:
                values[key] = value
                origins[key] = source_name

    if not values.get(SERVER_URL_KEY):
        logger.error(BATCH_SERVER_URL_MISSING, extra={"config_path": str(config_path)})
        raise ConfigurationError("ServerUrl not be empty")

    logger.info(BATCH_RESOLVED, extra={"sources": origins, "config_path": str(config_path)})

    return BatchConfig(**values)
