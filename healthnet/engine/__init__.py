from .coordinator import FanOutCoordinator
from .selection import (
    SelectionError,
    menu_lines,
    parse_selection,
    prompt_selection,
    select_addresses,
)

__all__ = [
    "FanOutCoordinator",
    "SelectionError",
    "menu_lines",
    "parse_selection",
    "prompt_selection",
    "select_addresses",
]
