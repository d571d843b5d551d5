"""
Maps menu choices to console actions.

Kept apart from the loop in cli.menu so another front end can reuse the same
dispatch table.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from cli import actions
from cli.prompts import Console
from rental.system import RentalSystem

MenuAction = Callable[[RentalSystem, Console], None]

EXIT_CHOICE = "6"

MENU_OPTIONS: Tuple[Tuple[str, str], ...] = (
    ("1", "Add House"),
    ("2", "Remove House"),
    ("3", "Search Houses"),
    ("4", "Register Tenant"),
    ("5", "Book House"),
    (EXIT_CHOICE, "Exit"),
)

ACTIONS: Dict[str, MenuAction] = {
    "1": actions.add_house,
    "2": actions.remove_house,
    "3": actions.search_houses,
    "4": actions.register_tenant,
    "5": actions.book_house,
}


def select_action(choice: str) -> MenuAction:
    """Return the action for a menu choice; raises ValueError for anything else."""
    normalized = (choice or "").strip()
    handler = ACTIONS.get(normalized)
    if not handler:
        raise ValueError("Unsupported menu choice")
    return handler
