# -*- coding: utf-8 -*-
from pathlib import Path

from gedata import VERSION

SDK_VERSION = VERSION
LIB_NAME = "python"

# Event types
TRACK = "track"
PROFILE = "profile"

# Profile operations
USER_SET = "profile_set"
USER_SET_ONCE = "profile_set_once"
USER_UNSET = "profile_unset"
USER_INCREMENT = "profile_increment"
USER_NUM_MAX = "profile_number_max"
USER_NUM_MIN = "profile_number_min"
USER_APPEND = "profile_append"
USER_UNIQ_APPEND = "profile_uniq_append"
USER_DELETE = "profile_delete"

# Preset properties added to every track event
LIB_PROPERTY = "$lib"
LIB_VERSION_PROPERTY = "$lib_version"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
KEY_PATTERN = r"^[a-zA-Z$][A-Za-z0-9_]{0,49}$"

# Batch consumer defaults
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_BATCH_SIZE = 20
MAX_BATCH_SIZE = 200
DEFAULT_INTERVAL = 30
DEFAULT_CACHE_CAPACITY = 50
MAX_SEND_ATTEMPTS = 3

# Log consumer defaults
DEFAULT_CHANNEL_SIZE = 1000

# Request headers
HEADER_VERSION = "version"
HEADER_COMPRESS = "Gravity-Content-Compress"
HEADER_INTEGRATION_TYPE = "GE-Integration-Type"
HEADER_INTEGRATION_VERSION = "GE-Integration-Version"
HEADER_INTEGRATION_COUNT = "GE-Integration-Count"

COMPRESS_GZIP = "gzip"
COMPRESS_NONE = "none"

DIR_NAME = ".gedata"


def get_user_dir() -> Path:
    """
    Get the user directory for the gedata configuration.

    Returns:
        Path: The user directory path.
    """
    return Path("~", DIR_NAME).expanduser()


USER_CONFIG_DIR = get_user_dir()
CONFIG = USER_CONFIG_DIR / "config.ini"

# Environment variables read by the configuration layer
ENV_SERVER_URL = "GEDATA_SERVER_URL"
ENV_BATCH_SIZE = "GEDATA_BATCH_SIZE"
ENV_CACHE_CAPACITY = "GEDATA_CACHE_CAPACITY"
ENV_TIMEOUT_MS = "GEDATA_TIMEOUT_MS"
ENV_COMPRESS = "GEDATA_COMPRESS"
ENV_AUTO_FLUSH = "GEDATA_AUTO_FLUSH"
ENV_INTERVAL = "GEDATA_INTERVAL"
