"""Shared keyboard utility functions."""

from blessed.keyboard import Keystroke

from feather_player.ui.blessed.state import Action, Command

NAMED_KEYS = {
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "escape",
    "KEY_BACKSPACE": "backspace",
    "KEY_DELETE": "backspace",
    "KEY_TAB": "tab",
    "KEY_UP": "arrow_up",
    "KEY_DOWN": "arrow_down",
    "KEY_LEFT": "arrow_left",
    "KEY_RIGHT": "arrow_right",
    "KEY_PGUP": "page_up",
    "KEY_PGDOWN": "page_down",
}

CONTROL_CHARS = {
    "\n": "enter",
    "\r": "enter",
    "\x1b": "escape",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\t": "tab",
    "\x03": "ctrl_c",
}


def parse_key(key: Keystroke) -> dict:
    """
    Parse keystroke into event dictionary.

    Args:
        key: blessed Keystroke

    Returns:
        Event dictionary with "type" (enter, escape, backspace, tab,
        arrow_*, page_*, ctrl_c, char or unknown) and "char"
    """
    text = str(key) if key is not None else ""
    name = getattr(key, "name", None)

    event = {"type": "unknown", "name": name, "char": None}

    if name in NAMED_KEYS:
        event["type"] = NAMED_KEYS[name]
    elif text in CONTROL_CHARS:
        event["type"] = CONTROL_CHARS[text]
    elif len(text) == 1 and text.isprintable():
        event["type"] = "char"
        event["char"] = text

    return event


def navigation_command(event: dict) -> list[Command]:
    """Up/down list movement shared by every list view (arrows and k/j)."""
    if event["type"] == "arrow_up" or event["char"] == "k":
        return [Command(Action.NAVIGATE_UP)]
    if event["type"] == "arrow_down" or event["char"] == "j":
        return [Command(Action.NAVIGATE_DOWN)]
    return []


def paging_command(event: dict) -> list[Command]:
    """Left/right (and page keys) switch pages in paged views."""
    if event["type"] in ("arrow_right", "page_down"):
        return [Command(Action.NEXT_PAGE)]
    if event["type"] in ("arrow_left", "page_up"):
        return [Command(Action.PREVIOUS_PAGE)]
    return []
