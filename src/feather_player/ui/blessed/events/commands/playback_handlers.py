"""Playback command and message handlers.

Every play request bumps playback.generation. Source resolution, load
results and status ticks carry the generation they belong to; anything from
an older generation is dropped so a superseded request can never take over
playback started after it.
"""

from dataclasses import replace
from typing import Optional

from loguru import logger

from feather_player.context import AppContext
from feather_player.core import database
from feather_player.core.exceptions import PersistenceError
from feather_player.domain.library.models import Track
from feather_player.domain.playback.player import clamp_seek, clamp_volume
from feather_player.domain.playback.queue import (
    PlaybackQueue,
    advance,
    skip_next,
    skip_previous,
)
from feather_player.domain.provider.exceptions import ProviderError, RestrictedError
from feather_player.messages import (
    PlaybackTick,
    PlayerCrashed,
    SourceFailed,
    SourceResolved,
    TrackLoaded,
    TrackLoadFailed,
)
from feather_player.ui.blessed.state import (
    Mode,
    PlaybackStatus,
    UIState,
    body_mode,
    set_feedback,
)

# Accumulated listening time is written to the database in chunks
LISTENING_FLUSH_SECONDS = 10.0

# Position jumps larger than this between ticks are seeks, not listening
MAX_TICK_ADVANCE = 5.0


def _resolve_job(ctx: AppContext, track: Track, generation: int):
    def job():
        try:
            locator = ctx.provider.resolve_playable_source(track)
        except ProviderError as e:
            return SourceFailed(generation, track, e)
        return SourceResolved(generation, track, locator)

    return job


def start_playback(
    ctx: AppContext,
    state: UIState,
    track: Track,
    queue: Optional[PlaybackQueue] = None,
) -> UIState:
    """Request playback of track.

    Args:
        queue: Bound auto-play queue positioned on track, or None for
            single-track play (disengages auto-play)
    """
    generation = state.playback.generation + 1
    playback = replace(
        state.playback,
        status=PlaybackStatus.LOADING,
        pending=track,
        queue=queue or PlaybackQueue(),
        generation=generation,
        error=None,
    )
    logger.info(f"Play requested: {track.title} ({track.id}) generation={generation}")
    ctx.jobs.submit(f"resolve:{track.id}", _resolve_job(ctx, track, generation))
    return replace(state, playback=playback)


def _is_stale(state: UIState, generation: Optional[int], what: str) -> bool:
    if generation != state.playback.generation:
        logger.debug(
            f"Discarding stale {what} (generation={generation}, current={state.playback.generation})"
        )
        return True
    return False


def handle_source_resolved(ctx: AppContext, state: UIState, msg: SourceResolved) -> UIState:
    if _is_stale(state, msg.generation, "source"):
        return state
    ctx.player.load(msg.locator, msg.generation)
    return state


def _auto_advance(ctx: AppContext, state: UIState) -> tuple[UIState, Optional[Track]]:
    wrap = ctx.config.playback.at_end == "loop"
    queue, next_track = advance(state.playback.queue, wrap=wrap)
    if next_track is None:
        state = replace(state, playback=replace(state.playback, queue=queue))
        return state, None
    return start_playback(ctx, state, next_track, queue), next_track


def _playback_failed(ctx: AppContext, state: UIState, message: str) -> UIState:
    """Drop the pending request and stop the previous track, whose generation
    is no longer current."""
    ctx.player.stop_playback()
    playback = replace(
        state.playback,
        status=PlaybackStatus.ERROR,
        current=None,
        pending=None,
        position=0.0,
        duration=0.0,
        paused=False,
        error=message,
    )
    return set_feedback(replace(state, playback=playback), message, "error")


def handle_source_failed(ctx: AppContext, state: UIState, msg: SourceFailed) -> UIState:
    if _is_stale(state, msg.generation, "source failure"):
        return state

    logger.warning(f"Could not resolve {msg.track.id}: {msg.error}")

    if (
        isinstance(msg.error, RestrictedError)
        and state.playback.queue.engaged
        and ctx.config.playback.skip_restricted
    ):
        advanced, next_track = _auto_advance(ctx, state)
        if next_track is not None:
            return set_feedback(
                advanced, f"Skipped restricted track: {msg.track.title}", "warning"
            )
        return _playback_failed(
            ctx, advanced, f"Restricted: {msg.track.title} (end of queue)"
        )

    if isinstance(msg.error, RestrictedError):
        return _playback_failed(ctx, state, f"Restricted: {msg.track.title}")
    return _playback_failed(ctx, state, f"Cannot play {msg.track.title}: {msg.error}")


def handle_track_loaded(ctx: AppContext, state: UIState, msg: TrackLoaded) -> UIState:
    if _is_stale(state, msg.generation, "load"):
        return state

    track = state.playback.pending or state.playback.current
    playback = replace(
        state.playback,
        status=PlaybackStatus.PLAYING,
        current=track,
        pending=None,
        position=0.0,
        duration=msg.duration or (track.duration if track and track.duration else 0.0),
        paused=False,
        error=None,
    )
    state = replace(state, playback=playback)

    if track is None:
        return state

    try:
        database.append_history(track, limit=ctx.config.library.history_limit)
    except PersistenceError as e:
        return set_feedback(state, f"History not saved: {e}", "error")

    if body_mode(state) == Mode.HISTORY:
        # Imported here: history_handlers imports start_playback from this module
        from .history_handlers import load_history

        state = load_history(state)
        ids = [entry.track.id for entry in state.history.entries]
        if track.id in ids:
            state = replace(state, history=replace(state.history, selected=ids.index(track.id)))
    return state


def handle_track_load_failed(ctx: AppContext, state: UIState, msg: TrackLoadFailed) -> UIState:
    if _is_stale(state, msg.generation, "load failure"):
        return state
    track = state.playback.pending
    title = track.title if track else "track"
    return _playback_failed(ctx, state, f"Player could not open {title}: {msg.error}")


def flush_listening_time(state: UIState, force: bool = False) -> UIState:
    """Write accumulated listening time to the database."""
    seconds = state.playback.unflushed_seconds
    if seconds <= 0 or (not force and seconds < LISTENING_FLUSH_SECONDS):
        return state
    try:
        database.add_listening_time(seconds)
    except PersistenceError as e:
        logger.warning(f"Listening time not saved: {e}")
        return state
    return replace(state, playback=replace(state.playback, unflushed_seconds=0.0))


def handle_playback_tick(ctx: AppContext, state: UIState, msg: PlaybackTick) -> UIState:
    playback = state.playback
    if msg.generation != playback.generation or playback.status != PlaybackStatus.PLAYING:
        return state

    listened = msg.position - playback.position
    unflushed = playback.unflushed_seconds
    if not msg.paused and 0 < listened <= MAX_TICK_ADVANCE:
        unflushed += listened

    playback = replace(
        playback,
        position=msg.position,
        duration=msg.duration or playback.duration,
        paused=msg.paused,
        volume=msg.volume if msg.volume is not None else playback.volume,
        unflushed_seconds=unflushed,
    )
    state = flush_listening_time(replace(state, playback=playback))

    if not msg.ended:
        return state

    logger.info(f"Track ended: {playback.current.title if playback.current else '?'}")
    if state.playback.queue.engaged:
        state, next_track = _auto_advance(ctx, state)
        if next_track is not None:
            return state

    return replace(
        state,
        playback=replace(
            state.playback, status=PlaybackStatus.ENDED, position=state.playback.duration
        ),
    )


def handle_player_crashed(ctx: AppContext, state: UIState, msg: PlayerCrashed) -> UIState:
    playback = replace(
        state.playback,
        status=PlaybackStatus.ERROR,
        current=None,
        pending=None,
        paused=False,
        position=0.0,
        duration=0.0,
        error=str(msg.error),
    )
    state = replace(state, playback=playback)
    return set_feedback(
        state, f"Player stopped: {msg.error}. Select a track to retry.", "error"
    )


# -----------------------------------------------------------------------------
# Transport commands
# -----------------------------------------------------------------------------


def handle_toggle_pause(ctx: AppContext, state: UIState) -> UIState:
    playback = state.playback
    if playback.current is None or playback.status != PlaybackStatus.PLAYING:
        return state
    ctx.player.toggle()
    return replace(state, playback=replace(playback, paused=not playback.paused))


def handle_volume(ctx: AppContext, state: UIState, direction: int) -> UIState:
    delta = direction * ctx.config.player.volume_step
    volume = clamp_volume(state.playback.volume, delta)
    ctx.player.set_volume(delta)
    return replace(state, playback=replace(state.playback, volume=volume))


def handle_seek(ctx: AppContext, state: UIState, direction: int) -> UIState:
    playback = state.playback
    if playback.current is None or playback.status != PlaybackStatus.PLAYING:
        return state
    delta = direction * ctx.config.player.seek_seconds
    position = clamp_seek(playback.position, delta, playback.duration)
    ctx.player.seek(delta)
    return replace(state, playback=replace(playback, position=position))


def handle_skip(ctx: AppContext, state: UIState, direction: int) -> UIState:
    """Load the adjacent queue entry; no-op unless auto-play is engaged."""
    queue = state.playback.queue
    if direction > 0:
        queue, track = skip_next(queue)
    else:
        queue, track = skip_previous(queue)
    if track is None:
        return state
    return start_playback(ctx, state, track, queue)
