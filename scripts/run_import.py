#!/usr/bin/env python3
"""
Run the catalog import stages against the configured providers.

Examples:
    # Full import from every provider (countries -> ... -> matches)
    python scripts/run_import.py --create-tables --rugbydb-year 2024-2025

    # Teams only, from API-Sports, for Top 14 2024
    python scripts/run_import.py --stages teams --providers api_sports --league 16 --season 2024
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rugbylive.config import settings
from rugbylive.db import Base, get_engine
from rugbylive.pipeline import CatalogImporter
from rugbylive.providers import CLIENTS
from rugbylive.tasks import StageRegistry

logger = logging.getLogger("run_import")

DEFAULT_PROVIDERS = "api_sports,rapidapi,rugbydatabase,wikidata"


def _build_importer(providers: list[str] | None = None) -> CatalogImporter:
    names = providers or DEFAULT_PROVIDERS.split(",")
    unknown = [name for name in names if name not in CLIENTS]
    if unknown:
        raise ValueError(f"Unknown providers: {', '.join(unknown)}")
    return CatalogImporter({name: CLIENTS[name]() for name in names})


def _build_registry(providers: list[str] | None = None) -> StageRegistry:
    return _build_importer(providers).build_registry()


def _provider_options(args: argparse.Namespace) -> dict[str, dict[str, Any]]:
    api_sports: dict[str, Any] = {}
    if args.league:
        api_sports["league"] = args.league
    if args.season:
        api_sports["season"] = args.season
    if args.date:
        api_sports["day"] = args.date

    rugbydb: dict[str, Any] = {}
    if args.rugbydb_year:
        rugbydb["year"] = args.rugbydb_year
    if args.country:
        rugbydb["country"] = args.country

    return {"api_sports": api_sports, "rugbydatabase": rugbydb}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import the rugby catalog from providers.")
    parser.add_argument(
        "--stages",
        default=None,
        help="Comma-separated stage list. Default: every stage.",
    )
    parser.add_argument(
        "--skip-stages",
        default="",
        help="Comma-separated stage names to skip.",
    )
    parser.add_argument(
        "--providers",
        default=DEFAULT_PROVIDERS,
        help=f"Comma-separated providers, authoritative first. Default: {DEFAULT_PROVIDERS}",
    )
    parser.add_argument(
        "--authoritative",
        default="api_sports",
        help="Providers whose unmatched teams are created instead of queued for review.",
    )
    parser.add_argument(
        "--priority-teams",
        default="",
        help="Comma-separated team names to create when nothing matches.",
    )
    parser.add_argument("--league", default=None, help="API-Sports league id filter.")
    parser.add_argument("--season", type=int, default=None, help="API-Sports season (start year).")
    parser.add_argument("--date", default=None, help="API-Sports fixture date (YYYY-MM-DD).")
    parser.add_argument(
        "--rugbydb-year",
        default=None,
        help="rugbydatabase competitions year, e.g. 2024-2025.",
    )
    parser.add_argument("--country", default=None, help="rugbydatabase team country filter.")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before importing.",
    )
    parser.add_argument(
        "--metrics-json",
        default=None,
        help="Write the run summary JSON to this path.",
    )
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    providers = [p.strip() for p in args.providers.split(",") if p.strip()]
    importer = _build_importer(providers)

    if args.create_tables:
        Base.metadata.create_all(get_engine())
        logger.info("Tables created")

    include = [s.strip() for s in args.stages.split(",")] if args.stages else None
    skip = {s.strip() for s in args.skip_stages.split(",") if s.strip()}
    options = {
        "provider_options": _provider_options(args),
        "authoritative_providers": [p.strip() for p in args.authoritative.split(",") if p.strip()],
        "priority_teams": [t.strip() for t in args.priority_teams.split(",") if t.strip()],
    }

    results = await importer.run(include=include, skip=skip, options=options)
    summary = {
        "stages": [result.to_dict() for result in results],
        "status": "failed" if any(r.status == "failed" for r in results) else "success",
    }

    for result in results:
        print(f"{result.stage_name:<10} {result.status:<8} {result.duration_s:6.1f}s")

    if args.metrics_json:
        path = Path(args.metrics_json)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(summary, indent=2) + "\n", encoding="utf-8")

    return 1 if summary["status"] == "failed" else 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
