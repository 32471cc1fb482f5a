import argparse
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path

from inkwell.adapters.auth.crypto import JWTAuthAdapter
from inkwell.adapters.clock import FixedClock, SystemClock
from inkwell.adapters.sqlite.migrator import SQLiteMigrator
from inkwell.adapters.sqlite.repos import SQLiteStatsRepo, SQLiteUserRepo
from inkwell.api.deps import Settings
from inkwell.components.analytics import (
    CompareStatsInput,
    DailyStatUpdate,
    RecordDailyStatInput,
    run_compare,
    run_record,
)
from inkwell.components.auth import CreateUserInput, run_create_user
from inkwell.domain.errors import StorageError
from inkwell.rules.loader import load_rules
from inkwell.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def _rules(settings: Settings) -> Rules:
    if not Path(settings.rules_path).exists():
        logger.warning(f"Rules file {settings.rules_path} not found, using defaults.")
        return Rules()
    return load_rules(Path(settings.rules_path))


def _fmt_change(value: float | None) -> str:
    return "n/a" if value is None else f"{value:+.1f}%"


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


def handle_create_user(settings: Settings, args: argparse.Namespace) -> None:
    result = run_create_user(
        CreateUserInput(
            email=args.email,
            password=args.password,
            role=args.role,
            display_name=args.name,
        ),
        SQLiteUserRepo(settings.db_path, timeout=settings.db_timeout),
        JWTAuthAdapter(secret_key=settings.secret_key),
    )
    if not result.success or not result.user:
        logger.error(f"Could not create user: {result.error}")
        sys.exit(1)
    print(f"Created {result.user.role} {result.user.email} ({result.user.id})")


def handle_record_stats(settings: Settings, args: argparse.Namespace) -> None:
    update = DailyStatUpdate(
        day=args.date,
        page_views=args.page_views,
        unique_visitors=args.unique_visitors,
        bounce_rate=args.bounce_rate,
        avg_session_duration=args.session_duration,
    )
    result = run_record(
        RecordDailyStatInput(update=update),
        store=SQLiteStatsRepo(settings.db_path, timeout=settings.db_timeout),
        time_port=SystemClock(),
    )
    if not result.success or result.stat is None:
        for error in result.errors:
            logger.error(f"{error.field_name}: {error.message}")
        sys.exit(1)

    stat = result.stat
    print(
        f"{stat.date.isoformat()}: {stat.page_views} views, {stat.unique_visitors} visitors, "
        f"bounce {stat.bounce_rate:.1f}%, session {stat.avg_session_duration:.0f}s"
    )


def handle_stats(settings: Settings, args: argparse.Namespace) -> None:
    rules = _rules(settings)
    days = args.days if args.days is not None else rules.analytics.comparison_window_days
    clock = (
        FixedClock(datetime.combine(args.today, datetime.min.time(), tzinfo=UTC))
        if args.today
        else SystemClock()
    )

    result = run_compare(
        CompareStatsInput(period_days=days),
        store=SQLiteStatsRepo(settings.db_path, timeout=settings.db_timeout),
        time_port=clock,
    )
    if not result.success or result.comparison is None:
        for error in result.errors:
            logger.error(error.message)
        sys.exit(1)

    comparison = result.comparison
    current, previous = comparison.current, comparison.previous
    cur_range, prev_range = comparison.current_range, comparison.previous_range
    print(f"Current:  {cur_range.start} .. {cur_range.last_day}")
    print(f"Previous: {prev_range.start} .. {prev_range.last_day}")
    if current is None:
        print("No data for the current period.")
        return

    changes = result.changes
    print(f"Page views:       {current.total_page_views} ({_fmt_change(changes.page_views)})")
    print(
        f"Unique visitors:  {current.total_unique_visitors} "
        f"({_fmt_change(changes.unique_visitors)})"
    )
    print(f"Bounce rate:      {current.avg_bounce_rate:.1f}% ({_fmt_change(changes.bounce_rate)})")
    print(
        f"Session duration: {current.avg_session_duration:.0f}s "
        f"({_fmt_change(changes.session_duration)})"
    )
    if previous is None:
        print("No data for the previous period.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inkwell CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-admin / create-author
    for command, role in (("create-admin", "admin"), ("create-author", "author")):
        user_parser = subparsers.add_parser(command, help=f"Create an {role} account")
        user_parser.add_argument("--email", required=True)
        user_parser.add_argument("--password", required=True)
        user_parser.add_argument("--name", help="Display name (defaults to email local part)")
        user_parser.set_defaults(role=role)

    # record-stats
    record_parser = subparsers.add_parser("record-stats", help="Add to a day's site statistics")
    record_parser.add_argument(
        "--date", type=date.fromisoformat, help="UTC day, YYYY-MM-DD (defaults to today)"
    )
    record_parser.add_argument("--page-views", type=int, default=0)
    record_parser.add_argument("--unique-visitors", type=int, default=0)
    record_parser.add_argument("--bounce-rate", type=float, help="0-100, replaces the day's value")
    record_parser.add_argument(
        "--session-duration", type=float, help="Seconds, replaces the day's value"
    )

    # stats
    stats_parser = subparsers.add_parser("stats", help="Compare the last N days with the N before")
    stats_parser.add_argument("--days", type=int, help="Window length (defaults to rules.yaml)")
    stats_parser.add_argument(
        "--today", type=date.fromisoformat, help="Anchor day, YYYY-MM-DD (defaults to today)"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = Settings()

    handlers = {
        "migrate": handle_migrate,
        "create-admin": handle_create_user,
        "create-author": handle_create_user,
        "record-stats": handle_record_stats,
        "stats": handle_stats,
    }
    try:
        handlers[args.command](settings, args)
    except StorageError as e:
        logger.error(f"Storage error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
