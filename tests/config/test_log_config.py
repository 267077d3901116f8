import pytest

from gedata.config import LogConsumerConfig, RotateMode, resolve_log_config
from gedata.errors import ConfigurationError


@pytest.mark.parametrize(
    "rotate_mode, date_format",
    [
        (RotateMode.DAILY, "%Y-%m-%d"),
        (RotateMode.HOURLY, "%Y-%m-%d-%H"),
        (0, "%Y-%m-%d"),
        (1, "%Y-%m-%d-%H"),
    ],
)
def test_rotate_mode_formats(rotate_mode, date_format):
    resolved = resolve_log_config(LogConsumerConfig(directory="logs", rotate_mode=rotate_mode))

    assert resolved.date_format == date_format


def test_unknown_rotate_mode():
    with pytest.raises(ConfigurationError, match="unknown Rotate mode"):
        resolve_log_config(LogConsumerConfig(directory="logs", rotate_mode=2))


def test_file_size_is_converted_to_bytes():
    resolved = resolve_log_config(LogConsumerConfig(directory="logs", file_size=2))

    assert resolved.file_size == 2 * 1024 * 1024


def test_defaults():
    resolved = resolve_log_config(LogConsumerConfig(directory="logs"))

    assert resolved.file_size == 0
    assert resolved.file_name_prefix == ""
    assert resolved.channel_size == 1000


def test_negative_file_size_disables_size_rotation():
    resolved = resolve_log_config(LogConsumerConfig(directory="logs", file_size=-3))

    assert resolved.file_size == 0
