"""hookgate entry point — loads settings and serves the webhook gate."""

from __future__ import annotations

import asyncio
import signal
import sys

import click

from hookgate.config import Settings, load_settings
from hookgate.utils.logging import get_logger, setup_logging
from hookgate.webhooks.errors import WebhookError
from hookgate.webhooks.models import WebhookEvent
from hookgate.webhooks.receiver import Webhooks
from hookgate.webhooks.server import WebhookServer

log = get_logger(__name__)


def build_webhooks(settings: Settings) -> Webhooks:
    """Create the receiver with handlers that log every delivery."""
    webhooks = Webhooks(
        settings.webhooks.secret,
        additional_secrets=settings.webhooks.additional_secrets,
    )

    async def _log_delivery(event: WebhookEvent) -> None:
        log.info("webhook_received", github_event=event.name, action=event.action, id=event.id)

    async def _log_error(error: WebhookError) -> None:
        log.warning("webhook_error", status=error.status, error=str(error))

    webhooks.on_any(_log_delivery)
    webhooks.on_error(_log_error)
    return webhooks


async def run(settings: Settings) -> None:
    server = WebhookServer(settings, build_webhooks(settings))

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    await server.start()

    try:
        if sys.platform == "win32":
            while not stop_event.is_set():
                await asyncio.sleep(1)
        else:
            await stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await server.stop()


@click.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--port", type=int, default=None, help="Port to listen on")
def cli(config_path: str | None, log_level: str | None, port: int | None) -> None:
    """Receive GitHub webhook deliveries."""
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    if port is not None:
        settings.server.port = port
    if not settings.webhooks.secret:
        raise click.ClickException(
            "No webhook secret configured. Set webhooks.secret in the config "
            "file or HOOKGATE_WEBHOOKS__SECRET in the environment."
        )
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    asyncio.run(run(settings))


if __name__ == "__main__":
    cli()
