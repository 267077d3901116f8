import dataclasses
import functools

import httpx
import pytest
from click.testing import CliRunner

from gedata import cli as cli_module
from gedata.cli import cli
from gedata.config import LogConsumerConfig, get_batch_config
from gedata.consumers import BatchConsumer, DebugConsumer, LogConsumer
from gedata.meta import get_version


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    for name in ("GEDATA_SERVER_URL", "GEDATA_BATCH_SIZE", "GEDATA_COMPRESS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        cli_module,
        "get_batch_config",
        functools.partial(get_batch_config, config_path=tmp_path / "missing.ini"),
    )


@pytest.fixture(autouse=True)
def mock_transport(monkeypatch, http_client):
    """
    Route every consumer built by the CLI through the fake endpoint.

    Returns the list of batch consumers created so far.
    """
    created = []

    def batch_consumer(config):
        consumer = BatchConsumer(dataclasses.replace(config, http_client=http_client))
        created.append(consumer)
        return consumer

    def debug_consumer(server_url, timeout_ms=0):
        return DebugConsumer(server_url, http_client=http_client, timeout_ms=timeout_ms)

    monkeypatch.setattr(cli_module, "BatchConsumer", batch_consumer)
    monkeypatch.setattr(cli_module, "DebugConsumer", debug_consumer)

    return created


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert get_version() in result.output


class TestTrack:
    def test_sends_event(self, runner, server_url, fake_endpoint):
        result = runner.invoke(
            cli,
            [
                "track",
                "--server-url", server_url,
                "--client-id", "c1",
                "--event", "pay",
                "-p", "amount=12.5",
                "-p", "channel=web",
                "-p", 'tags=["a", "b"]',
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Event 'pay' sent for client 'c1'" in result.output

        payload = fake_endpoint.payloads()[0]
        properties = payload["event_list"][0]["properties"]
        assert payload["client_id"] == "c1"
        assert properties["amount"] == 12.5
        assert properties["channel"] == "web"
        assert properties["tags"] == ["a", "b"]
        assert properties["$lib"] == "python"

    def test_no_compress(self, runner, server_url, fake_endpoint):
        result = runner.invoke(
            cli,
            ["track", "--server-url", server_url, "--client-id", "c1", "--event", "pay", "--no-compress"],
        )

        assert result.exit_code == 0, result.output
        assert fake_endpoint.requests[0].headers["Gravity-Content-Compress"] == "none"

    def test_server_url_from_env(self, runner, server_url, fake_endpoint, monkeypatch):
        monkeypatch.setenv("GEDATA_SERVER_URL", server_url)

        result = runner.invoke(cli, ["track", "--client-id", "c1", "--event", "pay"])

        assert result.exit_code == 0, result.output
        assert len(fake_endpoint.requests) == 1

    def test_debug_mode_reports_rejection(self, runner, server_url, fake_endpoint):
        fake_endpoint.always((200, {"code": 4}))

        result = runner.invoke(
            cli,
            ["track", "--server-url", server_url, "--client-id", "c1", "--event", "pay", "--debug-mode"],
        )

        assert result.exit_code == 1
        assert "send to receiver failed with code 4" in result.output

    def test_missing_server_url(self, runner):
        result = runner.invoke(cli, ["track", "--client-id", "c1", "--event", "pay"])

        assert result.exit_code == 1
        assert "ServerUrl not be empty" in result.output

    def test_invalid_property(self, runner, server_url):
        result = runner.invoke(
            cli,
            ["track", "--server-url", server_url, "--client-id", "c1", "--event", "pay", "-p", "novalue"],
        )

        assert result.exit_code == 2
        assert "expected key=value" in result.output


class TestReplay:
    @pytest.fixture
    def log_directory(self, tmp_path, make_record):
        directory = tmp_path / "logs"
        consumer = LogConsumer(LogConsumerConfig(directory=str(directory), file_name_prefix="app"))
        for name in ("a", "b", "c"):
            consumer.add(make_record(name=name))
        consumer.close()
        return directory

    def test_replays_records(self, runner, server_url, fake_endpoint, log_directory):
        result = runner.invoke(
            cli,
            ["replay", str(log_directory), "--server-url", server_url, "--prefix", "app", "--batch-size", "2"],
        )

        assert result.exit_code == 0, result.output
        assert "Replayed 3 records" in result.output
        assert fake_endpoint.delivered_events() == ["a", "b", "c"]

    def test_wrong_prefix_replays_nothing(self, runner, server_url, fake_endpoint, log_directory):
        result = runner.invoke(cli, ["replay", str(log_directory), "--server-url", server_url])

        assert result.exit_code == 0, result.output
        assert "Replayed 0 records" in result.output
        assert fake_endpoint.requests == []

    def test_reports_delivery_failure(
        self, runner, server_url, fake_endpoint, log_directory, mock_transport
    ):
        fake_endpoint.always((200, {"code": 7}))

        result = runner.invoke(
            cli,
            ["replay", str(log_directory), "--server-url", server_url, "--prefix", "app", "--batch-size", "2"],
        )

        assert result.exit_code == 1
        assert "Replay stopped after reading 2 records" in result.output
        assert mock_transport[0].closed

    def test_transient_network_error_is_retried(
        self, runner, server_url, fake_endpoint, log_directory
    ):
        fake_endpoint.queue(httpx.ConnectError("Connection refused"))

        result = runner.invoke(
            cli,
            ["replay", str(log_directory), "--server-url", server_url, "--prefix", "app", "--batch-size", "1"],
        )

        assert result.exit_code == 0, result.output
        assert "Replayed 3 records" in result.output
        # the first request failed and its batch was sent again
        assert fake_endpoint.delivered_events() == ["a", "a", "b", "c"]

    def test_batches_queued_during_outage_are_drained_on_close(
        self, runner, server_url, fake_endpoint, log_directory
    ):
        fake_endpoint.queue(
            httpx.ConnectError("Connection refused"),
            httpx.ConnectError("Connection refused"),
        )

        result = runner.invoke(
            cli,
            ["replay", str(log_directory), "--server-url", server_url, "--prefix", "app", "--batch-size", "2"],
        )

        assert result.exit_code == 0, result.output
        assert fake_endpoint.delivered_events()[-3:] == ["a", "b", "c"]

    def test_directory_must_exist(self, runner, server_url, tmp_path):
        result = runner.invoke(cli, ["replay", str(tmp_path / "missing"), "--server-url", server_url])

        assert result.exit_code == 2


def test_debug_flag_configures_logging(runner, server_url):
    result = runner.invoke(
        cli,
        ["--debug", "track", "--server-url", server_url, "--client-id", "c1", "--event", "pay"],
    )

    assert result.exit_code == 0, result.output
