"""
Numbered console menu for the rental desk.

Loads the data files, then loops until Exit (or end of input), which saves
every collection. Launch it with:

    python -m cli.menu --data-dir ./data
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from dotenv import load_dotenv

from cli.prompts import Console
from cli.router import EXIT_CHOICE, MENU_OPTIONS, select_action
from rental.config import Settings
from rental.errors import PersistenceError, RentalError
from rental.system import RentalSystem
from storage.flat_file_store import FlatFileStore
from storage.memory_store import InMemoryStore
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


def _render_menu(console: Console) -> None:
    for number, label in MENU_OPTIONS:
        console.say(f"{number}. {label}")


def _exit(system: RentalSystem, console: Console) -> int:
    try:
        system.save_all()
    except PersistenceError as exc:
        console.say(f"Error saving data: {exc}")
    console.say("Exiting...")
    logger.info("session_closed")
    return 0


def run_menu_cli(system: RentalSystem, console: Optional[Console] = None) -> int:
    """
    Run the menu loop until the operator exits.

    Errors from one option are printed and the menu is shown again; only Exit
    or end of input leaves the loop. Returns the process exit status.
    """
    console = console or Console()
    while True:
        _render_menu(console)
        try:
            raw = console.ask("Choose an option: ")
        except EOFError:
            return _exit(system, console)
        try:
            choice = str(int(raw))
        except ValueError:
            console.say("Invalid input. Please enter a number.")
            continue
        if choice == EXIT_CHOICE:
            return _exit(system, console)
        try:
            handler = select_action(choice)
        except ValueError:
            console.say("Invalid choice.")
            continue

        try:
            handler(system, console)
        except EOFError:
            return _exit(system, console)
        except PersistenceError as exc:
            console.say(f"{exc} The change is kept in memory but is not on disk yet.")
        except RentalError as exc:
            logger.info("operation_rejected", extra={"choice": choice, "error": type(exc).__name__})
            console.say(str(exc))


def build_system(data_dir: Optional[str] = None, *, demo: bool = False) -> RentalSystem:
    store = InMemoryStore() if demo else FlatFileStore(Settings.from_env(data_dir))
    return RentalSystem.open(store)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rental desk: houses, tenants and bookings")
    parser.add_argument(
        "--data-dir",
        "-d",
        metavar="DIR",
        help="Directory holding houses.txt, tenants.txt and agreements.txt (default: RENTAL_DATA_DIR or .).",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Keep everything in memory; nothing is read from or written to disk.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    system = build_system(args.data_dir, demo=args.demo)
    return run_menu_cli(system)


if __name__ == "__main__":
    raise SystemExit(main())
