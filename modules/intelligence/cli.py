#!/usr/bin/env python3
"""
Business Intelligence CLI.

Command-line tool for inspecting a tenant's intelligence.

Usage:
    python -m modules.intelligence.cli report <tenant_id>
    python -m modules.intelligence.cli report <tenant_id> --json
    python -m modules.intelligence.cli report <tenant_id> --no-cache
    python -m modules.intelligence.cli invalidate <tenant_id>
    python -m modules.intelligence.cli check
    python -m modules.intelligence.cli init-db
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from modules.intelligence.cache import IntelligenceCache, RedisCacheBackend, create_cache
from modules.intelligence.config_loader import IntelligenceConfigLoader
from modules.intelligence.core.exceptions import ConfigurationException
from modules.intelligence.formatter import format_business_summary, format_insights_block
from modules.intelligence.intelligence_service import PROMPT_INSIGHT_LIMIT, IntelligenceService
from modules.intelligence.store import SqlSignalStore
from shared.utils.logger import setup_logger
from src.database.connection import check_connection, close_connections, create_tables

logger = setup_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m modules.intelligence.cli",
        description="Business intelligence and proactive insights",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Print health summary and insights for a tenant")
    report.add_argument("tenant_id", help="Workspace / tenant identifier")
    report.add_argument("--actor", dest="actor_id", default=None, help="Cache per actor")
    report.add_argument("--json", dest="as_json", action="store_true", help="Print the full result as JSON")
    report.add_argument("--no-cache", dest="no_cache", action="store_true", help="Bypass the result cache")

    invalidate = subparsers.add_parser("invalidate", help="Drop a tenant's cached result")
    invalidate.add_argument("tenant_id", help="Workspace / tenant identifier")
    invalidate.add_argument("--actor", dest="actor_id", default=None)

    subparsers.add_parser("check", help="Check database and cache connectivity")
    subparsers.add_parser("init-db", help="Create workspace tables (local demos)")

    return parser


async def render_report(
    service: IntelligenceService,
    tenant_id: str,
    as_json: bool = False,
    actor_id: Optional[str] = None
) -> str:
    """Render a tenant report as text or JSON from a single computation."""
    result = await service.get_business_intelligence(tenant_id, actor_id)

    if as_json:
        return result.model_dump_json(indent=2)

    sections = [format_business_summary(result)]
    block = format_insights_block(list(result.correlations), limit=PROMPT_INSIGHT_LIMIT)
    sections.append(block or "No insights right now.")
    return "\n\n".join(sections)


async def check_connectivity(cache: Optional[IntelligenceCache] = None) -> bool:
    """Check the database, and Redis when it backs the cache."""
    print("Checking database connection...")
    ok = await check_connection()
    print("✓ Database reachable" if ok else "✗ Database unreachable")

    if cache is not None and isinstance(cache.backend, RedisCacheBackend):
        print("Checking Redis connection...")
        redis_ok = await cache.ping()
        print("✓ Redis reachable" if redis_ok else "✗ Redis unreachable")
        ok = ok and redis_ok

    return ok


async def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    args = build_parser().parse_args(argv)

    cache = None if getattr(args, "no_cache", False) else create_cache()
    config_loader = IntelligenceConfigLoader()
    service = IntelligenceService(
        store=SqlSignalStore(),
        cache=cache,
        config_loader=config_loader,
    )

    try:
        # The service falls back on bad config; surface it here instead
        if args.command in ("report", "invalidate"):
            config_loader.get_config(args.tenant_id)

        if args.command == "report":
            print(await render_report(service, args.tenant_id, args.as_json, args.actor_id))
            return 0

        if args.command == "invalidate":
            await service.invalidate(args.tenant_id, args.actor_id)
            print(f"Invalidated cached intelligence for {args.tenant_id}")
            return 0

        if args.command == "check":
            return 0 if await check_connectivity(cache) else 1

        if args.command == "init-db":
            await create_tables()
            print("✓ Workspace tables created")
            return 0

        return 1

    except ConfigurationException as e:
        logger.error(f"✗ Invalid configuration: {e}")
        return 2
    finally:
        await close_connections()
        if cache is not None:
            await cache.close()


def run():
    """Console script entrypoint."""
    exit_code = asyncio.run(main())
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
