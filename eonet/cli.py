"""CLI entrypoint: run one EONET load cycle and print the result."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional, TextIO

from eonet.cache import MemoryStore
from eonet.config import EonetSettings, settings as eonet_settings
from eonet.geometry import event_position
from eonet.loader import LoadResult, loader_from_settings
from eonet.models import dump_events

LOGGER = logging.getLogger("eonet_load")


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load wildfire events from NASA EONET.")
    parser.add_argument(
        "--status",
        choices=("open", "closed", "all"),
        default=None,
        help="Event status filter (default: EONET_STATUS or 'open').",
    )
    parser.add_argument("--limit", type=int, default=None, help="Max events in the list request.")
    parser.add_argument(
        "--detail-limit",
        type=int,
        default=None,
        help="Max geometry backfill requests per load.",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Use a throwaway in-memory cache instead of the on-disk one.",
    )
    parser.add_argument("--json", action="store_true", help="Print merged events as JSON.")
    return parser.parse_args(argv)


def _print_summary(result: LoadResult, out: TextIO) -> None:
    events = result.data or []
    out.write(f"{len(events)} wildfire events\n")
    for event in events:
        position = event_position(event)
        where = f"{position[0]:.3f},{position[1]:.3f}" if position else "-"
        latest = event.latest_geometry
        when = (latest.date if latest is not None else None) or "-"
        out.write(f"{event.id}\t{when}\t{where}\t{event.title}\n")


def run_load(
    args: argparse.Namespace,
    config: EonetSettings | None = None,
    out: Optional[TextIO] = None,
) -> int:
    config = config or eonet_settings
    out = out or sys.stdout
    loader = loader_from_settings(
        config,
        store=MemoryStore() if args.no_cache else None,
        status=args.status,
        limit=args.limit,
        limit_detail_fetch=args.detail_limit,
    )
    result = asyncio.run(loader.load(force=True))
    if result.error is not None:
        LOGGER.error("EONET load failed: %s", result.error)
        return 1

    if args.json:
        json.dump(dump_events(result.data or []), out, indent=2)
        out.write("\n")
    else:
        _print_summary(result, out)
    return 0


def main(argv: List[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    sys.exit(run_load(parse_args(argv)))


if __name__ == "__main__":
    main()
