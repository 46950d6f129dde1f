"""CLI/bootstrap helpers for the AdZone application."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import sqlite3
import sys
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from adzone.action_messages import build_actionable_error
from adzone.config import load_config, save_config
from adzone.models import CONFIG_APP_NAME, MAX_PAGE_SIZE, UserConfig
from adzone.services import AppServices
from adzone.store import AdStore, get_db_path

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse a shuffled, auto-scrolling feed of ads in a TUI"
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite database file (default: config value or the platform data dir)",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help=f"Ads revealed per page (1-{MAX_PAGE_SIZE}; default: config value)",
    )
    parser.add_argument(
        "--velocity",
        type=float,
        default=None,
        help="Autoscroll speed in rows per second (default: config value)",
    )
    parser.add_argument(
        "--no-autoscroll",
        action="store_true",
        help="Start with autoscroll paused (press p to start it)",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Insert the sample ads into an empty database and exit",
    )
    parser.add_argument(
        "--no-seed-data",
        action="store_true",
        help="Do not insert sample ads when the database is empty",
    )
    parser.add_argument(
        "--admin",
        action="store_true",
        help="Open the admin login on startup",
    )
    parser.add_argument(
        "--check-db",
        action="store_true",
        help="Run a database self-test and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/adzone/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    return parser


def _session_config(args: argparse.Namespace, config: UserConfig) -> UserConfig:
    """Apply CLI overrides to a copy of the loaded config."""
    feed_overrides: dict[str, Any] = {}
    if args.page_size is not None:
        feed_overrides["page_size"] = args.page_size
    if args.velocity is not None:
        feed_overrides["velocity"] = args.velocity
    if args.no_autoscroll:
        feed_overrides["autoscroll_enabled"] = False
    # replace() re-runs FeedSettings clamping
    feed = replace(config.feed, **feed_overrides)
    session = replace(config, feed=feed)
    if args.db is not None:
        session.db_path = str(args.db)
    if args.no_seed_data:
        session.seed_sample_data = False
    return session


def _run_check_db(store: AdStore) -> int:
    results = store.check_connection()
    print(f"Database: {store.db_path}")
    for step, passed in results:
        print(f"  [{'ok' if passed else 'FAIL'}] {step}")
    if all(passed for _, passed in results):
        print("Database self-test passed.")
        return 0
    print(
        build_actionable_error(
            "verify the database",
            why="one or more self-test steps failed",
            next_step="check the --db path permissions or rerun with --debug",
        ),
        file=sys.stderr,
    )
    return 1


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    save_config_fn: Callable[[UserConfig], bool] = save_config,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    store_factory: Callable[[Path], AdStore] = AdStore,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    args = _build_parser().parse_args(argv)

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("adzone starting, cwd=%s", Path.cwd())

    persisted = load_config_fn()
    config = _session_config(args, persisted)
    db_path = Path(config.db_path) if config.db_path else get_db_path()
    store = store_factory(db_path)

    if args.check_db:
        return _run_check_db(store)

    if args.seed:
        try:
            inserted = store.seed_defaults()
        except (sqlite3.Error, OSError) as e:
            print(
                build_actionable_error(
                    "seed the database",
                    why=str(e),
                    next_step="run adzone --check-db",
                ),
                file=sys.stderr,
            )
            return 1
        if inserted:
            print(f"Inserted {inserted} sample ads into {db_path}")
        else:
            print(f"Database {db_path} already has ads; nothing inserted")
        return 0

    if not validate_interactive_tty_fn():
        print(
            "Error: adzone requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run adzone directly in a terminal session", file=sys.stderr)
        print("  - Use --check-db or --seed for non-interactive output", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    if config.seed_sample_data:
        try:
            store.seed_defaults()
        except (sqlite3.Error, OSError):
            logger.warning("Could not seed sample ads into %s", db_path, exc_info=True)

    def persist_session(updated: UserConfig) -> bool:
        # Only the admin session flag outlives the run; CLI overrides do not
        persisted.admin_session = updated.admin_session
        return save_config_fn(persisted)

    if app_factory is None:
        from adzone.app import AdZoneApp as _AdZoneApp

        app_factory = _AdZoneApp

    app = app_factory(
        services=AppServices(store=store),
        config=config,
        persist_config=persist_session,
        start_admin=args.admin,
    )
    app.run()
    return 0


__all__ = [
    "_configure_color_mode",
    "_configure_logging",
    "_session_config",
    "_validate_interactive_tty",
    "main",
]
