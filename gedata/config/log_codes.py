"""
Log codes for configuration-related operations.
"""

CONFIG = "config"

# Batch consumer configuration
BATCH = f"{CONFIG}.batch"
BATCH_RESOLVED = f"{BATCH}.resolved"
BATCH_SERVER_URL_MISSING = f"{BATCH}.server_url_missing"
BATCH_SERVER_URL_INVALID = f"{BATCH}.server_url_invalid"
BATCH_SIZE_CLAMPED = f"{BATCH}.batch_size_clamped"
BATCH_CONFIG_MISSING_SECTION = f"{BATCH}.missing_section"
BATCH_ENV_VALUE_INVALID = f"{BATCH}.env_value_invalid"

# Log consumer configuration
LOG = f"{CONFIG}.log"
LOG_ROTATE_MODE_INVALID = f"{LOG}.rotate_mode_invalid"
