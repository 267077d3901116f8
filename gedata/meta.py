from importlib.metadata import PackageNotFoundError, version
import logging
import platform
from typing import Dict

from gedata.constants import (
    COMPRESS_GZIP,
    COMPRESS_NONE,
    HEADER_COMPRESS,
    HEADER_INTEGRATION_COUNT,
    HEADER_INTEGRATION_TYPE,
    HEADER_INTEGRATION_VERSION,
    HEADER_VERSION,
    LIB_NAME,
    SDK_VERSION,
)


LOG = logging.getLogger(__name__)


def get_version() -> str:
    """
    Get the version of the gedata package.

    Falls back to the bundled VERSION file when the distribution metadata
    is not available (e.g. running from a source checkout).

    Returns:
      str: The gedata version.
    """
    try:
        return version("gedata")
    except PackageNotFoundError:
        LOG.debug("gedata distribution metadata not found, using %s", SDK_VERSION)
        return SDK_VERSION


# platform.machine() spellings of the same architecture
ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "arm64",
}


def get_platform_tag() -> str:
    """
    Return "{os} {arch}" with the architecture name normalized across platforms.
    """
    machine = platform.machine().lower()
    arch = ARCH_ALIASES.get(machine, machine) or "unknown"
    return f"{platform.system()} {arch}"


def get_user_agent() -> str:
    return (
        f"gedata-{LIB_NAME}/{get_version()} "
        f"({get_platform_tag()}; Python/{platform.python_version()})"
    )


def get_meta_http_headers(compress: bool, count: int) -> Dict[str, str]:
    """
    Get the identification headers sent with every delivery request.

    Args:
      compress (bool): Whether the request body is gzip encoded.
      count (int): Number of events carried by the request.

    Returns:
      Dict[str, str]: The metadata headers.
    """
    sdk_version = get_version()

    return {
        "User-Agent": get_user_agent(),
        HEADER_VERSION: sdk_version,
        HEADER_COMPRESS: COMPRESS_GZIP if compress else COMPRESS_NONE,
        HEADER_INTEGRATION_TYPE: LIB_NAME,
        HEADER_INTEGRATION_VERSION: sdk_version,
        HEADER_INTEGRATION_COUNT: str(count),
    }
