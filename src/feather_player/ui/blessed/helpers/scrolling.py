"""Pure helper functions for selection and paging in list views.

Lists never wrap: moving past either end leaves the cursor on the first or
last row.
"""


def move_selection(current: int, delta: int, total_items: int) -> int:
    """Move a list cursor by delta, clamped to the list.

    Examples:
        >>> move_selection(current=9, delta=1, total_items=10)
        9
        >>> move_selection(current=0, delta=-1, total_items=0)
        0
    """
    return clamp_selection(current + delta, total_items)


def clamp_selection(selection: int, total_items: int) -> int:
    """Clamp selection to [0, total_items - 1] after the list changed size.

    Examples:
        >>> clamp_selection(selection=15, total_items=10)
        9
        >>> clamp_selection(selection=5, total_items=0)
        0
    """
    if total_items <= 0:
        return 0
    return max(0, min(selection, total_items - 1))


def page_bounds(selected: int, total_items: int, page_size: int) -> tuple[int, int, int, int]:
    """Return (start, end, page, page_count) of the page holding selected.

    Examples:
        >>> page_bounds(selected=25, total_items=45, page_size=20)
        (20, 40, 1, 3)
        >>> page_bounds(selected=0, total_items=0, page_size=20)
        (0, 0, 0, 1)
    """
    page_count = max(1, (total_items + page_size - 1) // page_size)
    page = min(max(selected, 0) // page_size, page_count - 1)
    start = page * page_size
    end = min(start + page_size, total_items)
    return start, end, page, page_count


def turn_page(selected: int, direction: int, total_items: int, page_size: int) -> int:
    """Jump to the first row of the next (1) or previous (-1) page.

    Examples:
        >>> turn_page(selected=5, direction=1, total_items=45, page_size=20)
        20
        >>> turn_page(selected=44, direction=1, total_items=45, page_size=20)
        40
    """
    if total_items <= 0:
        return 0
    _, _, page, page_count = page_bounds(selected, total_items, page_size)
    page = max(0, min(page_count - 1, page + direction))
    return page * page_size
