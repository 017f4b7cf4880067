"""Layout calculation functions."""

from blessed import Terminal

HEADER_HEIGHT = 2
PLAYER_BAR_HEIGHT = 3
STATUS_BAR_HEIGHT = 1


def calculate_layout(term: Terminal) -> dict[str, int]:
    """
    Pure function: calculate y-positions for all regions.

    Args:
        term: blessed Terminal instance

    Returns:
        Dictionary with region positions and heights
    """
    term_height = term.height or 24
    body_height = max(
        term_height - HEADER_HEIGHT - PLAYER_BAR_HEIGHT - STATUS_BAR_HEIGHT, 1
    )

    return {
        "header_y": 0,
        "body_y": HEADER_HEIGHT,
        "body_height": body_height,
        "player_y": HEADER_HEIGHT + body_height,
        "status_y": HEADER_HEIGHT + body_height + PLAYER_BAR_HEIGHT,
    }
