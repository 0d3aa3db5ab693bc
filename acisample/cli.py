"""Command line entry point.

    acisample --region westeurope --poll-timeout 600
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from acisample.config import resolve_config
from acisample.core.exceptions import AciSampleError
from acisample.observability import LogConfig, setup_logging, teardown_logging
from acisample.prompt import AutoPrompter, ConsolePrompter
from acisample.tutorial import run

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acisample",
        description="Azure Container Instances walk-through",
    )
    parser.add_argument("--config", type=Path, default=None, help="TOML config file (default: ./acisample.toml)")
    parser.add_argument("--region", default=None, help="Azure region (default: eastus)")
    parser.add_argument("--auth-location", dest="auth_location", default=None, help="SDK auth file, overrides AZURE_AUTH_LOCATION")
    parser.add_argument("--subscription-id", dest="subscription_id", default=None)
    parser.add_argument("--resource-group", dest="resource_group", default=None, help="Resource group name (default: random rg-aci-xxxxxx)")
    parser.add_argument("--container-group", dest="container_group", default=None, help="Container group name (default: random aci-xxxxxx)")
    parser.add_argument("--poll-interval", dest="poll_interval", type=float, default=None, help="Seconds between readiness polls")
    parser.add_argument("--poll-timeout", dest="poll_timeout", type=float, default=None, help="Give up polling after this many seconds")
    parser.add_argument("--keep-resource-group", action="store_true", help="Do not offer to delete the resource group")
    parser.add_argument("-y", "--yes", action="store_true", help="Answer every prompt without waiting for input")
    parser.add_argument("--log-level", default="WARNING", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console()

    overrides = {
        "region": args.region,
        "auth_location": args.auth_location,
        "subscription_id": args.subscription_id,
        "resource_group": args.resource_group,
        "container_group": args.container_group,
        "poll_interval": args.poll_interval,
        "poll_timeout": args.poll_timeout,
        "delete_resource_group": False if args.keep_resource_group else None,
    }

    handlers = setup_logging(LogConfig(level=args.log_level, file=args.log_file))
    try:
        config = resolve_config(overrides, config_path=args.config)
        prompter = AutoPrompter() if args.yes else ConsolePrompter(console)
        asyncio.run(run(config, prompter=prompter, console=console))
    except AciSampleError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        console.print("\nInterrupted. Resources created so far were left in place.")
        return EXIT_INTERRUPTED
    finally:
        teardown_logging(handlers)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
