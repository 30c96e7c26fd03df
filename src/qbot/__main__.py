"""CLI entry point for qbot."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from qbot.app import QBotApp
from qbot.config import AppConfig, load_config
from qbot.log import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="qbot",
        description="Maritime WhatsApp assistant: classification, quotas and technical answers",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("start", "Start the bot"),
        ("config-check", "Validate configuration"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
        sub.add_argument("-e", "--env", default=".env", help="Path to .env file")

    args = parser.parse_args()

    if args.command is None:
        args.command = "start"
        args.config = "config.yaml"
        args.env = ".env"

    if args.command == "config-check":
        _check_config(args.config, args.env)
    elif args.command == "start":
        _run(args.config, args.env)


def _load_or_exit(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and fill in your keys.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    config = _load_or_exit(config_path, env_path)
    print(f"Configuration valid: {config_path}")
    print(f"  Transport : {config.transport.platform}")
    if config.transport.platform == "whatsapp":
        print(f"  Endpoint  : {config.transport.api_endpoint or '(missing)'}")
        print(
            f"  Webhook   : {config.transport.webhook_host}:{config.transport.webhook_port}"
            f"{config.transport.webhook_path}"
        )
    print(f"  Model     : {config.ai.model} (timeout {config.ai.timeout}s)")
    print(f"  Anthropic : {'configured' if config.anthropic else '(missing)'}")
    print(
        f"  Quota     : {config.quota.complete_profile_limit}/"
        f"{config.quota.incomplete_profile_limit} per day "
        f"(profile >= {config.quota.completeness_threshold}%, {config.quota.timezone})"
    )
    print(f"  Clarify   : {config.clarification.ttl_minutes} min TTL")
    print(f"  Storage   : {config.storage.db_path}")


def _run(config_path: str, env_path: str) -> None:
    """Load config and run until SIGINT/SIGTERM."""
    config = _load_or_exit(config_path, env_path)
    setup_logging(config.log_level, json_output=config.log_json)

    async def _async_main() -> None:
        loop = asyncio.get_running_loop()
        stop_event = asyncio.Event()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                signal.signal(sig, lambda s, f: stop_event.set())

        app = QBotApp(config)
        await app.start()
        try:
            await stop_event.wait()
        finally:
            await app.stop()

    asyncio.run(_async_main())


if __name__ == "__main__":
    main()
