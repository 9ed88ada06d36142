#!/usr/bin/env python3
"""
Manual Sports Catalog Script.

Command-line interface for creating the catalog tables, seeding sports,
syncing from SportsDataIO and checking alias resolution.
"""
import sys
import asyncio
import argparse
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sports_catalog.core.config import settings
from sports_catalog.core.database import get_session_factory, init_db
from sports_catalog.core.exceptions import CatalogError
from sports_catalog.core.logging import configure_logging
from sports_catalog.models.seed import seed_sports
from sports_catalog.repositories.unit_of_work import UnitOfWork
from sports_catalog.services.catalog.coordinator import SportClientCoordinator
from sports_catalog.services.resolution.alias_resolver import AliasResolver
from sports_catalog.services.sync.catalog_sync import CatalogSyncService, SyncResult


def _print_result(result: SyncResult):
    if result.skipped:
        print(f"⏭️  {result.sport_code}: skipped ({result.reason})")
        return
    if result.error:
        print(f"❌ {result.sport_code}: {result.error}")
        return

    print(f"✅ {result.sport_code} sync complete ({result.duration_ms}ms):")
    print(f"   Stadiums: {result.stadiums}")
    print(f"   Teams: {result.teams} ({result.teams_deactivated} deactivated, "
          f"{result.team_aliases_added} aliases added)")
    print(f"   Players: {result.players} ({result.players_deactivated} deactivated)")


def cmd_init_db() -> int:
    init_db()
    print("✅ Catalog tables created")
    return 0


def cmd_seed() -> int:
    with get_session_factory()() as db:
        created = seed_sports(db)
    print(f"✅ Seeded {created} sports")
    return 0


async def cmd_sync(sport: str = None, entity: str = None) -> int:
    """
    Sync one sport (or every active sport) from SportsDataIO.

    Args:
        sport: Sport code (NFL, NBA, ...). None syncs all active sports.
        entity: stadiums, teams or players. Requires --sport.
    """
    session_factory = get_session_factory()
    coordinator = SportClientCoordinator(session_factory)
    coordinator.initialize()

    try:
        with UnitOfWork.from_factory(session_factory) as uow:
            service = CatalogSyncService(uow, coordinator)
            if sport:
                print(f"🔄 Syncing {sport.upper()} catalog...")
                results = [await service.sync_sport(sport, entity_type=entity)]
            else:
                print(f"🔄 Syncing all supported sports: {', '.join(coordinator.list_supported_sports())}")
                results = await service.sync_all()
    except (CatalogError, ValueError) as e:
        print(f"❌ Error: {e}")
        return 1
    finally:
        await coordinator.close()

    for result in results:
        _print_result(result)
    return 0 if all(r.success or r.skipped for r in results) else 1


def cmd_resolve(term: str, entity_type: str = None, sport: str = None) -> int:
    with UnitOfWork.from_factory(get_session_factory()) as uow:
        results = AliasResolver(uow).resolve(term, entity_type, sport)

    if not results:
        print(f"No match for '{term}'")
        return 1

    print(f"\n{'Type':<8}{'ID':<10}{'Name':<30}{'Sport':<8}{'Match':<20}{'Conf':<6}")
    print("-" * 82)
    for r in results:
        print(f"{r.entity_type:<8}{r.entity_id:<10}{r.name:<30}{(r.sport_code or ''):<8}"
              f"{r.match_type.value:<20}{r.confidence:<6.2f}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Sports catalog management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create tables and seed sports
  python scripts/sync_catalog.py init-db
  python scripts/sync_catalog.py seed

  # Sync every supported sport
  python scripts/sync_catalog.py sync

  # Sync only NFL players
  python scripts/sync_catalog.py sync --sport NFL --entity players

  # Resolve free text
  python scripts/sync_catalog.py resolve Chiefs --sport NFL
        """
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create catalog tables")
    subparsers.add_parser("seed", help="Insert missing seed sports")

    sync_parser = subparsers.add_parser("sync", help="Sync from SportsDataIO")
    sync_parser.add_argument('--sport', type=str, default=None, help='Sport code (default: all active sports)')
    sync_parser.add_argument(
        '--entity',
        type=str,
        choices=['stadiums', 'teams', 'players'],
        default=None,
        help='Only sync one entity type (requires --sport)'
    )

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a team or player name")
    resolve_parser.add_argument('term', type=str)
    resolve_parser.add_argument('--type', dest='entity_type', choices=['team', 'player'], default=None)
    resolve_parser.add_argument('--sport', type=str, default=None)

    args = parser.parse_args()
    configure_logging(level=settings.LOG_LEVEL, json_output=False)

    if args.command == "init-db":
        return cmd_init_db()
    if args.command == "seed":
        return cmd_seed()
    if args.command == "sync":
        if args.entity and not args.sport:
            parser.error("--entity requires --sport")
        return asyncio.run(cmd_sync(args.sport, args.entity))
    if args.command == "resolve":
        return cmd_resolve(args.term, args.entity_type, args.sport)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
