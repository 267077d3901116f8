import configparser
from pathlib import Path
from typing import Dict, Optional

import pytest

from gedata.config.batch import (
    BatchConfig,
    _batch_from_config_ini,
    _batch_from_env,
    _parse_bool,
    get_batch_config,
    resolve_batch_config,
    resolve_batch_size,
    resolve_cache_capacity,
    resolve_interval,
    resolve_timeout,
    validate_server_url,
)
from gedata.constants import ENV_BATCH_SIZE, ENV_COMPRESS, ENV_SERVER_URL
from gedata.errors import ConfigurationError

ENV_NAMES = (
    "GEDATA_SERVER_URL",
    "GEDATA_BATCH_SIZE",
    "GEDATA_CACHE_CAPACITY",
    "GEDATA_TIMEOUT_MS",
    "GEDATA_COMPRESS",
    "GEDATA_AUTO_FLUSH",
    "GEDATA_INTERVAL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file_factory(tmp_path: Path):
    """
    Factory fixture to create config.ini files with custom content.
    """

    def _create_config(batch_section: Optional[Dict[str, str]] = None) -> Path:
        config = configparser.ConfigParser()
        if batch_section is not None:
            config["batch"] = batch_section

        config_path = tmp_path / "config.ini"
        with open(config_path, "w") as f:
            config.write(f)
        return config_path

    return _create_config


class TestResolvers:
    """
    Tests for defaults and bounds applied to each option.
    """

    @pytest.mark.parametrize(
        "requested, expected",
        [(0, 20), (-5, 20), (1, 1), (200, 200), (201, 200), (10_000, 200)],
    )
    def test_batch_size(self, requested: int, expected: int) -> None:
        assert resolve_batch_size(requested) == expected

    @pytest.mark.parametrize("requested, expected", [(0, 50), (-1, 50), (1, 1), (500, 500)])
    def test_cache_capacity(self, requested: int, expected: int) -> None:
        assert resolve_cache_capacity(requested) == expected

    def test_timeout_is_in_seconds(self) -> None:
        assert resolve_timeout(0) == 30.0
        assert resolve_timeout(1500) == 1.5

    def test_interval(self) -> None:
        assert resolve_interval(0) == 30.0
        assert resolve_interval(5) == 5.0

    def test_resolve_batch_config(self) -> None:
        resolved = resolve_batch_config(
            BatchConfig(server_url="https://example.com/collect", batch_size=300)
        )

        assert resolved.as_dict() == {
            "server_url": "https://example.com/collect",
            "batch_size": 200,
            "cache_capacity": 50,
            "timeout": 30.0,
            "compress": True,
            "auto_flush": False,
            "interval": 30.0,
        }


class TestValidateServerUrl:
    @pytest.mark.parametrize("url", ["", "   ", None])
    def test_missing(self, url) -> None:
        with pytest.raises(ConfigurationError, match="ServerUrl not be empty"):
            validate_server_url(url)

    @pytest.mark.parametrize("url", ["ftp://example.com/collect", "example.com/collect", "https://"])
    def test_invalid(self, url: str) -> None:
        with pytest.raises(ConfigurationError, match="Invalid server url"):
            validate_server_url(url)

    def test_keeps_query_string(self) -> None:
        url = "https://example.com/collect/?access_token=abc"
        assert validate_server_url(f"  {url} ") == url

    def test_configuration_error_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_server_url("")


class TestParseBool:
    @pytest.mark.parametrize("raw", ["1", "true", "Yes", " ON "])
    def test_true(self, raw: str) -> None:
        assert _parse_bool(raw) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_false(self, raw: str) -> None:
        assert _parse_bool(raw) is False

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            _parse_bool("maybe")


class TestSources:
    def test_env_values_are_parsed(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_SERVER_URL, "https://env.example.com")
        monkeypatch.setenv(ENV_BATCH_SIZE, "15")
        monkeypatch.setenv(ENV_COMPRESS, "false")

        assert _batch_from_env() == {
            "server_url": "https://env.example.com",
            "batch_size": 15,
            "compress": False,
        }

    def test_invalid_env_value(self, monkeypatch) -> None:
        monkeypatch.setenv(ENV_BATCH_SIZE, "many")

        with pytest.raises(ConfigurationError, match=ENV_BATCH_SIZE):
            _batch_from_env()

    def test_config_ini_values(self, config_file_factory) -> None:
        path = config_file_factory(
            {"server_url": "https://ini.example.com", "cache_capacity": "7", "auto_flush": "yes"}
        )

        assert _batch_from_config_ini(path) == {
            "server_url": "https://ini.example.com",
            "cache_capacity": 7,
            "auto_flush": True,
        }

    def test_config_ini_without_section(self, config_file_factory) -> None:
        assert _batch_from_config_ini(config_file_factory()) == {}

    def test_missing_config_file(self, tmp_path: Path) -> None:
        assert _batch_from_config_ini(tmp_path / "missing.ini") == {}

    def test_invalid_config_ini_value(self, config_file_factory) -> None:
        path = config_file_factory({"interval": "soon"})

        with pytest.raises(ConfigurationError, match="interval"):
            _batch_from_config_ini(path)


class TestGetBatchConfig:
    def test_explicit_arguments_win(self, monkeypatch, config_file_factory) -> None:
        monkeypatch.setenv(ENV_SERVER_URL, "https://env.example.com")
        monkeypatch.setenv(ENV_BATCH_SIZE, "15")
        path = config_file_factory({"server_url": "https://ini.example.com", "batch_size": "5"})

        config = get_batch_config(
            server_url="https://cli.example.com", batch_size=2, config_path=path
        )

        assert config.server_url == "https://cli.example.com"
        assert config.batch_size == 2

    def test_env_over_config_ini(self, monkeypatch, config_file_factory) -> None:
        monkeypatch.setenv(ENV_BATCH_SIZE, "15")
        path = config_file_factory(
            {"server_url": "https://ini.example.com", "batch_size": "5", "interval": "9"}
        )

        config = get_batch_config(config_path=path)

        assert config.server_url == "https://ini.example.com"
        assert config.batch_size == 15
        assert config.interval == 9

    def test_explicit_false_is_kept(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv(ENV_COMPRESS, "true")

        config = get_batch_config(
            server_url="https://cli.example.com",
            compress=False,
            config_path=tmp_path / "missing.ini",
        )

        assert config.compress is False

    def test_defaults(self, tmp_path: Path) -> None:
        config = get_batch_config(
            server_url="https://cli.example.com", config_path=tmp_path / "missing.ini"
        )

        assert config == BatchConfig(server_url="https://cli.example.com")

    def test_server_url_required(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="ServerUrl not be empty"):
            get_batch_config(config_path=tmp_path / "missing.ini")

    def test_http_client_is_not_read_from_sources(self, tmp_path: Path) -> None:
        config = get_batch_config(
            server_url="https://cli.example.com", config_path=tmp_path / "missing.ini"
        )

        assert config.http_client is None
