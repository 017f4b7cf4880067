"""Player controller owning the long-lived mpv process.

A single worker thread owns the process handle. Public methods only enqueue
commands, so the IPC socket never sees concurrent writers. Results and
status are reported through the post callback (the UI inbox).
"""

import queue
import threading
import time
from typing import Any, Callable, NamedTuple, Optional

from loguru import logger

from feather_player.core.config import PlayerConfig
from feather_player.messages import (
    PlaybackTick,
    PlayerCrashed,
    TrackLoaded,
    TrackLoadFailed,
)

from . import player
from .exceptions import LoadError, PlayerProcessError


class ControllerCommand(NamedTuple):
    action: str  # spawn, load, unload, play, pause, toggle, seek, volume, stop
    value: Any = None
    generation: Optional[int] = None


class PlayerController:
    """Drives mpv from a worker thread.

    Args:
        config: Player configuration
        post: Thread-safe callback receiving messages for the UI thread
    """

    def __init__(self, config: PlayerConfig, post: Callable[[object], None]):
        self.config = config
        self._post = post
        self._commands: "queue.Queue[ControllerCommand]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

        # Owned by the worker thread
        self._state: Optional[player.PlayerState] = None
        self._status = player.PlayerStatus(volume=config.volume)
        self._volume = config.volume
        self._loaded_generation: Optional[int] = None
        self._loaded_at: Optional[float] = None
        self._ended_reported = False
        self._crash_reported = False

    # ------------------------------------------------------------------
    # Public API (any thread)
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the worker thread and spawn mpv."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run, name="player-controller", daemon=True
        )
        self._thread.start()
        self._commands.put(ControllerCommand("spawn"))

    def load(self, locator: str, generation: int) -> None:
        """Replace the current track; reports TrackLoaded or TrackLoadFailed."""
        self._commands.put(ControllerCommand("load", locator, generation))

    def stop_playback(self) -> None:
        """Stop the loaded track but keep mpv running for the next load."""
        self._commands.put(ControllerCommand("unload"))

    def play(self) -> None:
        self._commands.put(ControllerCommand("play"))

    def pause(self) -> None:
        self._commands.put(ControllerCommand("pause"))

    def toggle(self) -> None:
        self._commands.put(ControllerCommand("toggle"))

    def seek(self, delta: float) -> None:
        """Seek relative to the current position, clamped to [0, duration]."""
        self._commands.put(ControllerCommand("seek", delta))

    def set_volume(self, delta: int) -> None:
        """Change volume by delta, clamped to [0, 100]."""
        self._commands.put(ControllerCommand("volume", delta))

    def stop(self, timeout: float = 3.0) -> None:
        """Terminate mpv and the worker thread."""
        if self._thread is None:
            self._shutdown()
            return

        self._commands.put(ControllerCommand("stop"))
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Player worker did not stop in time, killing mpv directly")
            if self._state is not None:
                player.stop_mpv(self._state)
        self._thread = None

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _run(self) -> None:
        next_poll = time.monotonic()
        while True:
            timeout = max(0.0, next_poll - time.monotonic())
            try:
                command = self._commands.get(timeout=timeout)
            except queue.Empty:
                command = None

            if command is not None:
                if command.action == "stop":
                    self._shutdown()
                    return
                try:
                    self._handle(command)
                except Exception as e:
                    logger.exception(f"Player command {command.action} failed")
                    self._report_crash(PlayerProcessError(str(e)))

            if time.monotonic() >= next_poll:
                try:
                    self.poll_status()
                except Exception as e:
                    logger.exception("Player status poll failed")
                    self._report_crash(PlayerProcessError(str(e)))
                next_poll = time.monotonic() + self.config.poll_interval

    def _handle(self, command: ControllerCommand) -> None:
        action = command.action
        if action == "spawn":
            self._ensure_process()
        elif action == "load":
            self._load(command.value, command.generation)
        elif action == "unload":
            self._unload()
        elif action in ("play", "pause", "toggle"):
            self._transport(action)
        elif action == "seek":
            self._seek(command.value)
        elif action == "volume":
            self._change_volume(command.value)
        else:
            logger.warning(f"Unknown player command: {action}")

    def _ensure_process(self) -> bool:
        if player.is_mpv_running(self._state):
            return True

        if self._state is not None:
            player.stop_mpv(self._state)
            self._state = None

        state = player.start_mpv(self.config)
        if state is None:
            self._report_crash(PlayerProcessError("mpv could not be started"))
            return False

        self._state = state
        self._crash_reported = False
        if self._volume != self.config.volume:
            player.set_volume(state, self._volume)
        return True

    def _load(self, locator: str, generation: int) -> None:
        self._loaded_generation = None
        if not self._ensure_process():
            self._post(
                TrackLoadFailed(generation, PlayerProcessError("Player is not running"))
            )
            return

        logger.info(f"Loading source (generation={generation})")
        duration = player.load_source(self._state, locator, self.config.load_timeout)
        if duration is None:
            self._post(TrackLoadFailed(generation, LoadError("Could not open stream")))
            return

        self._loaded_generation = generation
        self._loaded_at = time.monotonic()
        self._ended_reported = False
        self._status = player.PlayerStatus(duration=duration, volume=self._volume)
        self._post(TrackLoaded(generation, duration))

    def _unload(self) -> None:
        if self._loaded_generation is None:
            return
        logger.info(f"Stopping playback (generation={self._loaded_generation})")
        self._loaded_generation = None
        self._status = player.PlayerStatus(volume=self._volume)
        if player.is_mpv_running(self._state):
            player.unload_source(self._state)

    def _transport(self, action: str) -> None:
        if self._loaded_generation is None or not player.is_mpv_running(self._state):
            return

        if action == "toggle":
            paused = player.get_mpv_property(self._state.socket_path, "pause")
            target = not bool(paused)
        else:
            target = action == "pause"

        if player.set_pause(self._state, target):
            self._status = self._status._replace(paused=target)

    def _seek(self, delta: float) -> None:
        if self._loaded_generation is None or not player.is_mpv_running(self._state):
            return

        position = player.get_mpv_property(self._state.socket_path, "time-pos")
        if position is None:
            position = self._status.position
        target = player.clamp_seek(float(position), delta, self._status.duration)
        if player.seek_absolute(self._state, target):
            self._status = self._status._replace(position=target)

    def _change_volume(self, delta: int) -> None:
        self._volume = player.clamp_volume(self._volume, delta)
        if player.is_mpv_running(self._state):
            player.set_volume(self._state, self._volume)
        self._status = self._status._replace(volume=self._volume)

    def poll_status(self) -> Optional[PlaybackTick]:
        """Poll mpv once and post a PlaybackTick.

        Runs on the worker thread. ended is edge-triggered: it is true only
        on the first poll that observes the end of the loaded track.
        """
        if self._state is None:
            return None

        if not player.is_mpv_running(self._state):
            self._report_crash(PlayerProcessError("mpv exited unexpectedly"))
            player.stop_mpv(self._state)
            self._state = None
            self._loaded_generation = None
            return None

        if self._loaded_generation is None:
            return None

        self._status = player.read_status(self._state, self._status)
        elapsed = time.monotonic() - (self._loaded_at or time.monotonic())
        finished = player.is_track_finished(self._status, elapsed)

        ended = finished and not self._ended_reported
        if ended:
            self._ended_reported = True
            logger.debug(f"Track ended (generation={self._loaded_generation})")

        tick = PlaybackTick(
            generation=self._loaded_generation,
            position=self._status.position,
            duration=self._status.duration,
            paused=self._status.paused,
            volume=self._status.volume if self._status.volume is not None else self._volume,
            ended=ended,
        )
        self._post(tick)
        return tick

    def _report_crash(self, error: PlayerProcessError) -> None:
        if self._crash_reported:
            return
        self._crash_reported = True
        logger.error(f"Player unavailable: {error}")
        self._post(PlayerCrashed(error))

    def _shutdown(self) -> None:
        if self._state is not None:
            logger.info("Stopping MPV")
            player.stop_mpv(self._state)
            self._state = None
        self._loaded_generation = None
