"""
MPV player integration with JSON IPC for Feather
Functional approach with explicit state management
"""

import json
import os
import socket
import subprocess
import tempfile
import time
from itertools import count
from pathlib import Path
from typing import Any, NamedTuple, Optional

from loguru import logger

from feather_player.core.config import PlayerConfig

# Minimum playback time before allowing "track finished" (seconds)
MIN_PLAYBACK_TIME = 1.0

# Seconds to wait for an IPC reply
IPC_TIMEOUT = 2.0

_request_ids = count(1)


class PlayerState(NamedTuple):
    """Immutable handle on the mpv process."""

    socket_path: Optional[str] = None
    process: Optional[subprocess.Popen] = None


class PlayerStatus(NamedTuple):
    """One status poll of mpv."""

    position: float = 0.0
    duration: float = 0.0
    paused: bool = False
    volume: Optional[int] = None
    eof_reached: bool = False
    idle: bool = False


def clamp_volume(current: int, delta: int) -> int:
    """Apply delta to a volume, keeping the result in [0, 100]."""
    return max(0, min(100, current + delta))


def clamp_seek(position: float, delta: float, duration: float) -> float:
    """Apply delta to a position, keeping the result in [0, duration].

    An unknown duration (0) only clamps at zero.
    """
    target = max(0.0, position + delta)
    if duration > 0:
        target = min(target, duration)
    return target


def check_mpv_available(mpv_path: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            [mpv_path, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def default_socket_path() -> str:
    temp_dir = Path(tempfile.gettempdir())
    return str(temp_dir / f"feather-mpv-{os.getpid()}.sock")


def start_mpv(config: PlayerConfig) -> Optional[PlayerState]:
    """Start MPV with JSON IPC and return initial state, or None on failure."""
    socket_path = config.mpv_socket_path or default_socket_path()

    logger.info(f"Starting MPV player with socket: {socket_path}")

    try:
        if os.path.exists(socket_path):
            logger.debug(f"Removing existing socket: {socket_path}")
            os.unlink(socket_path)

        cmd = [
            config.mpv_path,
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={socket_path}",
            f"--volume={config.volume}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]

        process = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )

        # Wait for socket to be created
        start_time = time.time()
        while not os.path.exists(socket_path):
            if process.poll() is not None:
                logger.error(f"MPV exited during startup (code={process.returncode})")
                return None
            if time.time() - start_time > config.startup_timeout:
                logger.error(f"MPV socket creation timeout after {config.startup_timeout}s")
                process.kill()
                return None
            time.sleep(0.05)

        state = PlayerState(socket_path=socket_path, process=process)
        if get_mpv_property(socket_path, "idle-active") is not None:
            logger.info(f"MPV started successfully (pid={process.pid})")
            return state

        logger.error("MPV socket connection test failed")
        stop_mpv(state)
        return None

    except (subprocess.SubprocessError, OSError) as e:
        logger.error(f"Failed to start MPV: {e}")
        return None


def stop_mpv(state: PlayerState) -> None:
    """Stop MPV process and cleanup."""
    if state.process:
        try:
            state.process.kill()
            state.process.wait(timeout=2.0)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"MPV did not exit cleanly: {e}")

    if state.socket_path and os.path.exists(state.socket_path):
        try:
            os.unlink(state.socket_path)
        except OSError as e:
            logger.warning(f"Could not remove MPV socket {state.socket_path}: {e}")


def is_mpv_running(state: Optional[PlayerState]) -> bool:
    """Check if MPV process is still running and its socket exists."""
    if state is None or not state.process:
        return False

    if state.process.poll() is not None:
        return False

    if not state.socket_path or not os.path.exists(state.socket_path):
        return False

    return True


def _request(socket_path: Optional[str], command: list[Any]) -> Optional[dict[str, Any]]:
    """Send one IPC command and return mpv's reply, or None when unreachable.

    mpv interleaves event notifications with replies on the same socket, so
    lines are read until the one carrying our request_id arrives.
    """
    if not socket_path or not os.path.exists(socket_path):
        return None

    request_id = next(_request_ids)
    payload = json.dumps({"command": command, "request_id": request_id}) + "\n"

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(IPC_TIMEOUT)
            sock.connect(socket_path)
            sock.sendall(payload.encode("utf-8"))

            buffer = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    return None
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    if not line.strip():
                        continue
                    try:
                        message = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if message.get("request_id") == request_id:
                        return message

    except (socket.timeout, OSError) as e:
        logger.debug(f"MPV IPC request {command[0]} failed: {e}")
        return None


def send_mpv_command(socket_path: Optional[str], command: list[Any]) -> bool:
    """Send a JSON IPC command to MPV and report whether it succeeded."""
    response = _request(socket_path, command)
    return response is not None and response.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV (None when unavailable)."""
    response = _request(socket_path, ["get_property", property_name])
    if response and response.get("error") == "success":
        return response.get("data")
    return None


def load_source(state: PlayerState, locator: str, timeout: float = 10.0) -> Optional[float]:
    """Replace the current file with locator and start playback.

    Waits until mpv reports a duration or goes idle (which means it could not
    open the source).

    Returns:
        The reported duration (0.0 if it never arrived), or None if mpv
        rejected the source
    """
    if not send_mpv_command(state.socket_path, ["loadfile", locator, "replace"]):
        return None

    send_mpv_command(state.socket_path, ["set_property", "pause", False])

    poll_interval = 0.1
    elapsed = 0.0
    # mpv stays idle for a moment before it starts opening the file
    grace = 1.0
    while elapsed < timeout:
        duration = get_mpv_property(state.socket_path, "duration")
        if duration and duration > 0:
            logger.info(f"Source loaded: duration={duration:.2f}s, elapsed={elapsed:.2f}s")
            return float(duration)

        if elapsed >= grace and get_mpv_property(state.socket_path, "idle-active") is True:
            logger.warning(f"MPV went idle while opening {locator[:80]}")
            return None

        if not is_mpv_running(state):
            return None

        time.sleep(poll_interval)
        elapsed += poll_interval

    logger.warning(f"Duration not reported after {timeout}s, assuming stream is playing")
    return 0.0


def unload_source(state: PlayerState) -> bool:
    """Stop the current file and leave mpv idle."""
    return send_mpv_command(state.socket_path, ["stop"])


def set_pause(state: PlayerState, paused: bool) -> bool:
    return send_mpv_command(state.socket_path, ["set_property", "pause", paused])


def seek_absolute(state: PlayerState, position: float) -> bool:
    return send_mpv_command(state.socket_path, ["seek", position, "absolute"])


def set_volume(state: PlayerState, volume: int) -> bool:
    """Set volume (0-100)."""
    volume = max(0, min(100, volume))
    return send_mpv_command(state.socket_path, ["set_property", "volume", volume])


def read_status(state: PlayerState, previous: Optional[PlayerStatus] = None) -> PlayerStatus:
    """Poll mpv for its playback status.

    Values mpv does not report (e.g. during a seek) keep their previous value.
    """
    previous = previous or PlayerStatus()
    position = get_mpv_property(state.socket_path, "time-pos")
    duration = get_mpv_property(state.socket_path, "duration")
    paused = get_mpv_property(state.socket_path, "pause")
    volume = get_mpv_property(state.socket_path, "volume")
    eof = get_mpv_property(state.socket_path, "eof-reached")
    idle = get_mpv_property(state.socket_path, "idle-active")

    return PlayerStatus(
        position=float(position) if position is not None else previous.position,
        duration=float(duration) if duration is not None else previous.duration,
        paused=bool(paused) if paused is not None else previous.paused,
        volume=int(round(volume)) if volume is not None else previous.volume,
        eof_reached=eof is True,
        idle=idle is True,
    )


def is_track_finished(status: PlayerStatus, playback_elapsed: float) -> bool:
    """Check if the loaded track has finished.

    Safeguards:
    1. Minimum playback time (mpv reports stale eof while a file opens)
    2. EOF flag, which --keep-open=yes leaves set at the end of a file
    3. Position-based check for streams that never set eof-reached
    4. mpv falling back to idle (stream aborted mid-play)
    """
    if playback_elapsed < MIN_PLAYBACK_TIME:
        return False

    if status.eof_reached or status.idle:
        return True

    return status.duration > 0 and status.position >= status.duration - 0.5
