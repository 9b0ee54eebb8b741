#!/usr/bin/env python3
"""Dashboard entrypoint — wires the live alert stack and serves it over HTTP.

Usage::

    # Run with default config
    python scripts/dashboard.py

    # Custom config file
    python scripts/dashboard.py --config config/settings.yaml

    # Override log level / port
    python scripts/dashboard.py --log-level DEBUG --port 9000
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from herdwatch.core.config import load_settings
from herdwatch.core.logging import setup_logging
from herdwatch.monitor.factory import create_live_stack
from herdwatch.monitor.web_dashboard import start_web_dashboard

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start the dashboard and run until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    session, synthesizer, controller = create_live_stack(settings)
    port = args.port or settings.dashboard.port

    logger.info(
        "dashboard_starting",
        devices=len(session.devices),
        alerts=len(session.ledger),
        synthesis=settings.synthesis.enabled,
        interval_secs=settings.synthesis.interval_secs,
        port=port,
    )

    runner = await start_web_dashboard(
        session,
        controller=controller,
        synthesizer=synthesizer,
        host=settings.dashboard.host,
        port=port,
        refresh_ms=settings.dashboard.refresh_ms,
        recent_alerts=settings.dashboard.recent_alerts,
    )

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("dashboard_shutting_down")
    await runner.cleanup()

    logger.info(
        "dashboard_stopped",
        alerts=len(session.ledger),
        synthesized=synthesizer.fired if synthesizer else 0,
        map_creations=controller.creations,
        map_disposals=controller.disposals,
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the elephant-collar tracking dashboard.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="HTTP port override (default: dashboard.port from config)",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
