"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from pathlib import Path
from typing import Sequence

from .chat_adapters.slack_adapter import SlackBot
from .core import AuthenticationError, Config, ConfigError, Router, load_config

LOGGER = logging.getLogger(__name__)


def cli(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="slack-widget",
        description="Slack Widget - minimal Slack bot on the Events API",
    )
    parser.add_argument(
        "--config-dir",
        help="Directory holding .env and settings.yaml (default: ~/.slack-widget)",
    )
    parser.add_argument(
        "--listen-url",
        help="URL the webhook endpoint listens on, e.g. http://localhost:3000/events-endpoint",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    init_parser = subparsers.add_parser(
        "init",
        help="Create Slack Widget configuration interactively",
    )
    init_parser.add_argument("--config-dir", dest="init_config_dir", help="Target directory")

    args = parser.parse_args(argv)

    if args.command == "init":
        from .commands import run_init_command

        return run_init_command(args)

    try:
        return asyncio.run(_run_async(args.config_dir, args.listen_url))
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return 1
    except AuthenticationError as exc:
        LOGGER.error("Slack authentication failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")
        return 130


def run() -> None:
    raise SystemExit(cli())


async def _run_async(config_dir: str | Path | None, listen_url: str | None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {"listen_url": listen_url} if listen_url else None
    config: Config = load_config(config_dir, overrides=overrides)

    log_level = getattr(logging, config.log_level, logging.INFO)
    logging.getLogger().setLevel(log_level)

    bot = await SlackBot.from_config(config)
    LOGGER.info("listening on %s", config.listen_url)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _request_shutdown() -> None:
        LOGGER.info("Shutdown requested")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown)
        except NotImplementedError:
            # Windows event loops before 3.11 do not support signal handlers.
            pass

    router_task = asyncio.create_task(Router(bot, reply_text=config.reply_text).run())
    stop_task = asyncio.create_task(stop_event.wait())
    done, _ = await asyncio.wait({router_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

    if stop_task in done:
        await bot.stop()
    else:
        stop_task.cancel()

    termination = await router_task
    if termination is not None and not termination.graceful:
        LOGGER.error("Event stream ended: %s", termination.reason)
        return 1
    LOGGER.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(cli())
