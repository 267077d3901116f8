# -*- coding: utf-8 -*-
import json
import logging
from typing import Any, Dict, Optional, Tuple

import click

from gedata.analytics import GEAnalytics
from gedata.config import get_batch_config
from gedata.consumers import BatchConsumer, DebugConsumer
from gedata.consumers.log import iter_log_files, read_log_file
from gedata.errors import GEDataError, NetworkError
from gedata.meta import get_version

LOG = logging.getLogger(__name__)

CLI_MAIN_INTRODUCTION = "Send tracking events to a Gravity Engine collection endpoint."
CLI_DEBUG_HELP = "Enable debug logging."
CLI_SERVER_URL_HELP = (
    "Collection endpoint. Falls back to GEDATA_SERVER_URL and the [batch] "
    "section of ~/.gedata/config.ini."
)


def configure_logger(ctx, param, debug):
    level = logging.CRITICAL

    if debug:
        level = logging.DEBUG

    logging.basicConfig(format="%(asctime)s %(name)s => %(message)s", level=level)


def parse_properties(ctx, param, values: Tuple[str, ...]) -> Dict[str, Any]:
    """
    Turn repeated key=value options into a properties dict.

    Values are decoded as JSON when possible and kept as strings otherwise.
    """
    properties: Dict[str, Any] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}")
        try:
            properties[key] = json.loads(raw)
        except json.JSONDecodeError:
            properties[key] = raw
    return properties


@click.group(help=CLI_MAIN_INTRODUCTION)
@click.option(
    "--debug",
    is_flag=True,
    help=CLI_DEBUG_HELP,
    callback=configure_logger,
    expose_value=False,
    is_eager=True,
)
@click.version_option(version=get_version())
def cli():
    pass


@cli.command()
@click.option("--server-url", default=None, help=CLI_SERVER_URL_HELP)
@click.option("--client-id", required=True, help="Client the event belongs to.")
@click.option("--event", "event_name", required=True, help="Event name.")
@click.option(
    "-p",
    "--property",
    "properties",
    multiple=True,
    callback=parse_properties,
    help="Event property as key=value, repeatable.",
)
@click.option(
    "--debug-mode",
    is_flag=True,
    help="Send immediately and report server rejections.",
)
@click.option("--compress/--no-compress", default=None, help="Gzip the request body.")
def track(
    server_url: Optional[str],
    client_id: str,
    event_name: str,
    properties: Dict[str, Any],
    debug_mode: bool,
    compress: Optional[bool],
):
    """
    Send a single track event.
    """
    try:
        config = get_batch_config(server_url=server_url, compress=compress)
        if debug_mode:
            consumer = DebugConsumer(config.server_url, timeout_ms=config.timeout_ms)
        else:
            consumer = BatchConsumer(config)

        with GEAnalytics(consumer) as ge:
            ge.track(client_id, event_name, properties)
    except GEDataError as e:
        raise click.ClickException(e.message)

    click.echo(f"Event {event_name!r} sent for client {client_id!r}")


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--server-url", default=None, help=CLI_SERVER_URL_HELP)
@click.option("--prefix", default="", help="File name prefix used by the log consumer.")
@click.option("--batch-size", type=int, default=None, help="Events per request batch.")
@click.option("--compress/--no-compress", default=None, help="Gzip the request body.")
def replay(
    directory: str,
    server_url: Optional[str],
    prefix: str,
    batch_size: Optional[int],
    compress: Optional[bool],
):
    """
    Deliver the records written by a log consumer in DIRECTORY.
    """
    try:
        config = get_batch_config(
            server_url=server_url, batch_size=batch_size, compress=compress
        )
        consumer = BatchConsumer(config)
    except GEDataError as e:
        raise click.ClickException(e.message)

    count = 0
    error: Optional[GEDataError] = None
    try:
        for path in iter_log_files(directory, file_name_prefix=prefix):
            LOG.info("Replaying %s", path)
            for record in read_log_file(path):
                count += 1
                try:
                    consumer.add(record)
                except NetworkError as e:
                    # the batch stays queued and is retried by the next flush
                    LOG.warning("Delivery deferred after %s records: %s", count, e.message)
    except GEDataError as e:
        error = e
    finally:
        try:
            consumer.close()
        except GEDataError as e:
            error = error or e

    if error is not None:
        raise click.ClickException(
            f"Replay stopped after reading {count} records: {error.message}"
        )

    click.echo(f"Replayed {count} records from {directory}")
