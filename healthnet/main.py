"""Command line entry point.

Usage:
    healthnet serve [--host 0.0.0.0] [--port 9999]
    healthnet query [--servers a:9999,b:9999] [--select 1,2]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Sequence

from healthnet.config import Settings, load_server_addresses, settings
from healthnet.engine import (
    FanOutCoordinator,
    SelectionError,
    menu_lines,
    prompt_selection,
    select_addresses,
)
from healthnet.models import RequestOutcome
from healthnet.net import Requester, Responder
from healthnet.probe import PsutilProbe
from healthnet.render import ConsoleRenderer

logger = logging.getLogger("healthnet")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="healthnet", description="Remote host health snapshots")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Answer snapshot requests on a TCP port")
    serve.add_argument("--host", help="Listen address (default from settings)")
    serve.add_argument("--port", type=int, help="Listen port (default from settings)")

    query = sub.add_parser("query", help="Request snapshots from configured servers")
    query.add_argument("--servers", help="Comma-separated host:port list, overrides settings")
    query.add_argument("--select", help="Server numbers, e.g. '1,2' or '0' for all")
    return parser


# ── serve ───────────────────────────────────────────


async def serve(settings: Settings, host: str | None = None, port: int | None = None) -> None:
    responder = Responder(
        PsutilProbe(cpu_interval=settings.cpu_sample_interval),
        host=host or settings.listen_host,
        port=port if port is not None else settings.listen_port,
    )
    try:
        await responder.serve_forever()
    finally:
        await responder.stop()


# ── query ───────────────────────────────────────────


async def query(
    settings: Settings,
    addresses: Sequence[str],
    renderer: ConsoleRenderer,
) -> list[RequestOutcome]:
    requester = Requester(
        dial_timeout=settings.dial_timeout,
        read_timeout=settings.read_timeout,
        max_payload_bytes=settings.max_payload_bytes,
    )
    coordinator = FanOutCoordinator(requester, on_outcome=renderer.handle)
    return await coordinator.dispatch(addresses)


def _resolve_selection(servers: list[str], selection: str | None) -> list[str]:
    if selection is None:
        return prompt_selection(servers)
    for line in menu_lines(servers):
        print(line)
    return select_addresses(servers, selection)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)

    if args.command == "serve":
        try:
            asyncio.run(serve(settings, args.host, args.port))
        except OSError as exc:
            logger.error("Cannot listen: %s", exc)
            return 1
        except KeyboardInterrupt:
            logger.info("Interrupted")
        return 0

    if args.servers:
        servers = [s.strip() for s in args.servers.split(",") if s.strip()]
    else:
        servers = load_server_addresses(settings)

    try:
        selected = _resolve_selection(servers, args.select)
    except SelectionError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    except (EOFError, KeyboardInterrupt):
        return 130

    asyncio.run(query(settings, selected, ConsoleRenderer()))
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
