#!/usr/bin/env python3
"""
Sample Receipt Script
=====================

Standalone script to print (or dry-run) a sample activity receipt
without the web UI.

This script:
    1. Builds a sample activity with a synthetic loop route
    2. Runs it through the print pipeline
    3. Optionally writes the raw ESC/POS bytes to a file
    4. Reports the transmission summary

Prerequisites:
    - Printing for real needs CUPS (``lp``/``lpstat``) and a TM-series printer
    - Install dependencies: pip install -e .

Usage:
    python scripts/print_sample.py --dry-run --output receipt.bin
    python scripts/print_sample.py --pacing medium
    python scripts/print_sample.py --server http://localhost:3001
"""

import argparse
import asyncio
import logging
import math
import os
import sys
from datetime import datetime, timezone

import requests

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from activity_receipt.config import load_config
from activity_receipt.models.request import PrintRequest
from activity_receipt.service import create_print_service
from activity_receipt.transmission import DryRunSpooler


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def sample_payload(route_points: int) -> dict:
    """Sample /print body: a 5 mile run around a small loop."""
    route = [
        {
            "lat": 40.6602 + 0.01 * math.sin(2 * math.pi * i / route_points),
            "lng": -73.9690 + 0.014 * math.cos(2 * math.pi * i / route_points),
        }
        for i in range(route_points)
    ]
    return {
        "activity": {
            "id": 1234567890,
            "name": "Morning Run",
            "type": "Run",
            "distance": 8046.72,
            "moving_time": 2400,
            "elapsed_time": 2520,
            "total_elevation_gain": 42.0,
            "average_heartrate": 151.4,
            "start_date": datetime.now(timezone.utc).isoformat(),
            "location_city": "Brooklyn",
            "location_state": "New York",
            "description": "Easy loop around the park before work.",
        },
        "route": route,
        "photos": [],
    }


async def run_local(payload: dict, args: argparse.Namespace) -> int:
    """Run the sample through an in-process print service."""
    settings = load_config(args.config)
    if args.dry_run or args.output:
        settings.printer.dry_run = True
    if args.pacing:
        settings.printer.pacing = args.pacing

    service = create_print_service(settings)
    try:
        report = await service.print_activity(PrintRequest.from_payload(payload))
    finally:
        await service.aclose()

    logger.info("=" * 60)
    logger.info("SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Printer: {report.printer or 'default'}")
    logger.info(f"Pacing: {report.pacing.value}")
    logger.info(f"Sections sent: {report.sections_sent}/{report.sections_total}")
    logger.info(f"Bytes sent: {report.bytes_sent}")
    logger.info(f"Duration: {report.duration_ms:.0f}ms")
    logger.info("=" * 60)

    spooler = service.scheduler.spooler
    if args.output and isinstance(spooler, DryRunSpooler):
        with open(args.output, "wb") as f:
            f.write(spooler.payload)
        logger.info(f"Wrote {len(spooler.payload)} bytes to {args.output}")

    return 0 if report.ok else 1


def run_remote(payload: dict, server: str) -> int:
    """POST the sample to a running print server."""
    url = server.rstrip("/") + "/print"
    logger.info(f"POST {url}")
    response = requests.post(url, json=payload, timeout=60)
    logger.info(f"{response.status_code}: {response.text}")
    return 0 if response.ok else 1


def main():
    parser = argparse.ArgumentParser(
        description="Print a sample activity receipt"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: search the usual locations)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the receipt instead of printing it",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the raw ESC/POS bytes to this file (implies --dry-run)",
    )
    parser.add_argument(
        "--pacing",
        choices=["off", "fast", "medium", "slow"],
        default=None,
        help="Slow-print mode override",
    )
    parser.add_argument(
        "--route-points",
        type=int,
        default=60,
        help="Points in the synthetic route (default: 60)",
    )
    parser.add_argument(
        "--server",
        type=str,
        default=None,
        help="Send to a running print server instead, e.g. http://localhost:3001",
    )

    args = parser.parse_args()
    payload = sample_payload(max(2, args.route_points))

    if args.server:
        sys.exit(run_remote(payload, args.server))
    sys.exit(asyncio.run(run_local(payload, args)))


if __name__ == "__main__":
    main()
