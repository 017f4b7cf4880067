"""Main event loop for the blessed UI."""

import queue
import sys
from dataclasses import replace
from typing import Optional

from blessed import Terminal
from loguru import logger

from feather_player.context import AppContext
from feather_player.ui.blessed.components import (
    calculate_layout,
    render_body,
    render_header,
    render_help,
    render_player_bar,
    render_popup,
    render_status_bar,
)
from feather_player.ui.blessed.events.commands import (
    execute_command,
    flush_listening_time,
    handle_message,
    switch_mode,
)
from feather_player.ui.blessed.events.keyboard import route_key
from feather_player.ui.blessed.state import Mode, UIState
from feather_player.ui.blessed.state_selectors import RenderSnapshot, build_snapshot

# Upper bound on messages applied per frame so input stays responsive
MAX_MESSAGES_PER_FRAME = 100


def initial_state(ctx: AppContext) -> UIState:
    """Start on Home with library data loaded and the configured volume."""
    state = UIState()
    state = switch_mode(state, Mode.HOME)
    return replace(state, playback=replace(state.playback, volume=ctx.config.player.volume))


def drain_inbox(
    ctx: AppContext, state: UIState, inbox: queue.Queue
) -> tuple[UIState, bool]:
    """
    Apply pending background messages in arrival order.

    Returns:
        Tuple of (updated state, whether any message was applied)
    """
    changed = False
    for _ in range(MAX_MESSAGES_PER_FRAME):
        try:
            msg = inbox.get_nowait()
        except queue.Empty:
            break
        state = handle_message(ctx, state, msg)
        changed = True
    return state, changed


def render(term: Terminal, ctx: AppContext, snapshot: RenderSnapshot) -> None:
    layout = calculate_layout(term)
    ui = ctx.config.ui

    render_header(term, snapshot, layout["header_y"])
    render_body(term, snapshot.body, layout["body_y"], layout["body_height"], ui.selected_item_char)
    render_player_bar(term, snapshot.player, layout["player_y"])
    render_status_bar(term, snapshot.hints, snapshot.feedback, layout["status_y"])

    if snapshot.help is not None:
        render_help(term, snapshot.help)
    if snapshot.popup is not None:
        render_popup(term, snapshot.popup, ui.selected_item_char)

    sys.stdout.flush()


def run_interactive_ui(ctx: AppContext, inbox: queue.Queue) -> UIState:
    """
    Run the main interactive UI event loop.

    Args:
        ctx: Application context
        inbox: Queue background workers and the player post messages to

    Returns:
        Final UI state after the session ends
    """
    term = Terminal()
    state = initial_state(ctx)

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        try:
            state = main_loop(term, ctx, state, inbox)
        finally:
            state = shutdown(ctx, state)

    return state


def main_loop(
    term: Terminal, ctx: AppContext, state: UIState, inbox: queue.Queue
) -> UIState:
    """
    One iteration per frame: drain the inbox, read at most one key, redraw
    when the snapshot changed.
    """
    last_snapshot: Optional[RenderSnapshot] = None
    last_size = (term.width, term.height)
    refresh = ctx.config.ui.refresh_interval
    should_quit = False

    try:
        while not should_quit:
            state, _ = drain_inbox(ctx, state, inbox)

            size = (term.width, term.height)
            if size != last_size:
                sys.stdout.write(term.clear)
                last_snapshot = None
                last_size = size
            snapshot = build_snapshot(state, ctx.config)
            if snapshot != last_snapshot:
                render(term, ctx, snapshot)
                last_snapshot = snapshot

            key = term.inkey(timeout=refresh)
            if not key:
                continue

            state, commands = route_key(state, key, ctx.config.keys)
            for cmd in commands:
                ctx, state, should_quit = execute_command(ctx, state, cmd)
                if should_quit:
                    logger.info("Quit requested")
                    break
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return state


def shutdown(ctx: AppContext, state: UIState) -> UIState:
    """Persist pending listening time and stop background workers."""
    state = flush_listening_time(state, force=True)
    ctx.player.stop()
    ctx.jobs.shutdown()
    return state
