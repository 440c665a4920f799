import argparse
import random
import sys
from pathlib import Path

from . import __version__
from .assembler import FeedAssembler
from .config import LOG_LEVELS, Settings
from .database import Account, get_session, init_database
from .env import load_env
from .errors import CallerContractError, FeedAssemblyError, StorageUnavailable
from .logger import get_logger, reset_logger
from .search_client import HttpSearchSource, JsonFileSearchSource
from .storage import SqlConnectionService, SqlDirectoryService, load_directory
from .writer import FeedWriter


class EmptySearchSource:
    """Search source with no results; the feed is filled from groups only."""

    def query(self, criteria):
        return iter(())


def build_search_source(args: argparse.Namespace, settings: Settings):
    if args.results:
        results_path = Path(args.results)
        if not results_path.exists():
            raise SystemExit(f"Results file not found: {results_path}")
        return JsonFileSearchSource(results_path)
    search_url = args.search_url or settings.search_url
    if search_url:
        return HttpSearchSource(search_url, items_per_page=args.items or settings.items_per_page)
    return EmptySearchSource()


def cmd_related(args: argparse.Namespace, settings: Settings) -> None:
    db_path = Path(args.db) if args.db else settings.db_path
    if not db_path.exists():
        raise SystemExit(f"Directory database not found: {db_path}")

    session = get_session(db_path)
    try:
        assembler = FeedAssembler(
            search=build_search_source(args, settings),
            connections=SqlConnectionService(session),
            directory=SqlDirectoryService(session, viewer_id=args.user),
            policy=settings.policy(),
            logger=get_logger(),
            rng=random.Random(args.seed) if args.seed is not None else None,
        )
        result = assembler.assemble(args.user, items_per_page=args.items)
    except (CallerContractError, FeedAssemblyError) as e:
        raise SystemExit(str(e))
    finally:
        session.close()

    FeedWriter(sys.stdout, indent=args.pretty).write_results(result.records, result.quota)


def cmd_seed(args: argparse.Namespace, settings: Settings) -> None:
    input_path = Path(args.input)
    db_path = Path(args.db) if args.db else settings.db_path
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")

    init_database(db_path)
    session = get_session(db_path)
    try:
        counts = load_directory(input_path, session)
    except (CallerContractError, StorageUnavailable) as e:
        raise SystemExit(str(e))
    finally:
        session.close()
    print(f"Loaded accounts={counts['accounts']} memberships={counts['memberships']} connections={counts['connections']}")


def cmd_list(args: argparse.Namespace, settings: Settings) -> None:
    db_path = Path(args.db) if args.db else settings.db_path
    if not db_path.exists():
        print(f"Directory database not found: {db_path}")
        return
    session = get_session(db_path)
    try:
        accounts = session.query(Account).order_by(Account.kind, Account.id).all()
    finally:
        session.close()
    if not accounts:
        print("No accounts in directory.")
        return
    print(f"Found {len(accounts)} accounts in {db_path}:\n")
    for account in accounts:
        name = " ".join(n for n in [account.first_name, account.last_name] if n)
        flag = " (private)" if account.private else ""
        print(f"[{account.kind}] {account.id}{flag}" + (f"  {name}" if name else ""))


def main(argv=None):
    load_env()
    try:
        settings = Settings.from_env()
    except CallerContractError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    parser = argparse.ArgumentParser(prog="relatedfeed", description="Related people feed assembly")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.log_level,
        help="Log level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command")
    rel = subparsers.add_parser("related", help="Assemble the related-people feed for a user")
    rel.add_argument("--user", required=True, help="Requesting user id")
    rel.add_argument("--db", help="Path to directory database (default: data/directory.db)")
    rel.add_argument("--results", help="JSON file of ranked search documents")
    rel.add_argument("--search-url", help="Search endpoint URL (or set RELATEDFEED_SEARCH_URL)")
    rel.add_argument("--items", type=int, help="Items per page (default from settings)")
    rel.add_argument("--seed", type=int, help="Random seed for fallback ordering")
    rel.add_argument("--pretty", action="store_true", help="One result per line")
    rel.set_defaults(func=cmd_related)

    sd = subparsers.add_parser("seed", help="Load accounts, groups and connections from a JSON seed")
    sd.add_argument("--input", required=True, help="Path to seed JSON")
    sd.add_argument("--db", help="Path to directory database (default: data/directory.db)")
    sd.set_defaults(func=cmd_seed)

    lst = subparsers.add_parser("list", help="List accounts in the directory")
    lst.add_argument("--db", help="Path to directory database (default: data/directory.db)")
    lst.set_defaults(func=cmd_list)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    # File-only logging keeps stdout valid JSON
    reset_logger()
    get_logger(level=args.log_level, log_dir=settings.log_dir, enable_console=False)

    if hasattr(args, "func"):
        args.func(args, settings)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
