"""Player mode key handling."""

from feather_player.ui.blessed.state import Action, Command, UIState

PLAYER_CHARS = {
    "n": Action.SKIP_NEXT,
    "p": Action.SKIP_PREVIOUS,
    "+": Action.VOLUME_UP,
    "=": Action.VOLUME_UP,
    "-": Action.VOLUME_DOWN,
    "l": Action.SEEK_FORWARD,
    "h": Action.SEEK_BACKWARD,
    " ": Action.TOGGLE_PAUSE,
    ";": Action.TOGGLE_PAUSE,
}

PLAYER_KEYS = {
    "arrow_up": Action.VOLUME_UP,
    "arrow_down": Action.VOLUME_DOWN,
    "arrow_right": Action.SEEK_FORWARD,
    "arrow_left": Action.SEEK_BACKWARD,
}


def handle_player_key(state: UIState, event: dict) -> list[Command]:
    action = PLAYER_KEYS.get(event["type"])
    if action is None and event["char"] is not None:
        action = PLAYER_CHARS.get(event["char"])
    return [Command(action)] if action else []
