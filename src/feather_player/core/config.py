"""
Configuration management for Feather
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

APP_DIR_NAME = "feather"

# Environment variable naming a Netscape cookies file for the provider
COOKIES_ENV_VAR = "FEATHER_COOKIES"

VALID_AT_END_POLICIES = ("stop", "loop")
VALID_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class PlayerConfig:
    """Configuration for the mpv playback process."""

    mpv_path: str = "mpv"
    mpv_socket_path: Optional[str] = None
    volume: int = 50
    volume_step: int = 5
    seek_seconds: int = 5
    poll_interval: float = 0.25  # Seconds between status polls
    startup_timeout: float = 5.0  # Seconds to wait for the IPC socket
    load_timeout: float = 15.0  # Seconds to wait for a stream to open

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0 <= self.volume <= 100:
            raise ValueError(f"volume must be within 0-100, got {self.volume}")
        if self.volume_step <= 0 or self.seek_seconds <= 0:
            raise ValueError("volume_step and seek_seconds must be positive")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")


@dataclass
class PlaybackConfig:
    """Configuration for auto-play behaviour."""

    at_end: str = "stop"  # 'stop' or 'loop' when the bound sequence runs out
    skip_restricted: bool = True  # Advance past restricted tracks during auto-play

    def validate(self) -> None:
        if self.at_end not in VALID_AT_END_POLICIES:
            raise ValueError(
                f"Invalid at_end policy: {self.at_end!r}. "
                f"Valid values are: {VALID_AT_END_POLICIES}"
            )


@dataclass
class LibraryConfig:
    """Configuration for history and list presentation."""

    history_limit: int = 50
    page_size: int = 20

    def validate(self) -> None:
        if self.history_limit <= 0 or self.page_size <= 0:
            raise ValueError("history_limit and page_size must be positive")


@dataclass
class ProviderConfig:
    """Configuration for the YouTube provider."""

    search_limit: int = 20
    playlist_search_limit: int = 20
    cookies_file: Optional[str] = None
    workers: int = 4  # Background threads for provider calls
    stream_cache_ttl: int = 600


@dataclass
class UIConfig:
    """Configuration for the terminal interface."""

    refresh_interval: float = 0.1  # inkey() timeout in seconds
    play_icon: str = "▶"
    pause_icon: str = "❚❚"
    selected_item_char: str = ">"
    feedback_seconds: float = 4.0


@dataclass
class KeysConfig:
    """Leader-sequence navigation keys."""

    leader: str = ":"
    home: str = ";"
    quit: str = "q"
    search: str = "s"
    history: str = "h"
    player: str = "p"
    userplaylist: str = "u"

    def validate(self) -> None:
        keys = [
            self.home,
            self.quit,
            self.search,
            self.history,
            self.player,
            self.userplaylist,
        ]
        for key in [self.leader] + keys:
            if len(key) != 1:
                raise ValueError(f"Key bindings must be single characters, got {key!r}")
        if len(set(keys)) != len(keys):
            raise ValueError("Navigation keys must be distinct")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: ~/.local/share/feather/feather.log
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / APP_DIR_NAME
    return Path.home() / ".local" / "share" / APP_DIR_NAME


def get_config_path(explicit: Optional[str] = None) -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Explicit path (``--config``)
    2. Current working directory
    3. XDG_CONFIG_HOME/feather (or ~/.config/feather)
    """
    if explicit:
        return Path(explicit).expanduser()

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_log_file(config: Config) -> Path:
    """Resolve the log file location from config."""
    if config.logging.log_file:
        return Path(config.logging.log_file).expanduser()
    return get_data_dir() / "feather.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Feather Configuration

[player]
# mpv executable
mpv_path = "mpv"

# Path for mpv socket (auto-generated if not specified)
# mpv_socket_path = "/tmp/feather-mpv.sock"

# Initial volume (0-100)
volume = 50

# Volume change per key press
volume_step = 5

# Seek distance in seconds
seek_seconds = 5

# Seconds between player status polls
poll_interval = 0.25

# Seconds to wait for a stream to start before reporting a load error
load_timeout = 15.0

[playback]
# What happens after the last track of a playlist: "stop" or "loop"
at_end = "stop"

# Skip tracks the provider refuses to play while auto-playing
skip_restricted = true

[library]
# Number of songs kept in history
history_limit = 50

# Rows per page in history and playlist views
page_size = 20

[provider]
search_limit = 20
playlist_search_limit = 20

# Netscape cookies file passed to yt-dlp (FEATHER_COOKIES overrides this)
# cookies_file = "~/.config/feather/cookies.txt"

# Background threads for searches and stream resolution
workers = 4

[ui]
play_icon = "▶"
pause_icon = "❚❚"
selected_item_char = ">"

[keys]
# Leader key followed by a navigation key switches mode (e.g. ":s")
leader = ":"
home = ";"
quit = "q"
search = "s"
history = "h"
player = "p"
userplaylist = "u"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/feather/feather.log)
# log_file = "/path/to/feather.log"

max_file_size_mb = 10
backup_count = 5
""".strip()


def _build_section(cls, data: dict, default):
    """Build a config section from TOML data, keeping defaults for missing keys.

    Unknown keys are ignored with a warning. Invalid sections fall back to
    defaults so a typo never prevents startup.
    """
    known = {name for name in default.__dataclass_fields__}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown [{cls.__name__}] keys: {sorted(unknown)}")

    values = {name: data.get(name, getattr(default, name)) for name in known}
    try:
        section = cls(**values)
        if hasattr(section, "validate"):
            section.validate()
        return section
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid {cls.__name__}: {e}. Using defaults.")
        return default


def parse_config(toml_data: dict) -> Config:
    """Parse TOML data into a Config object."""
    config = Config()

    sections = {
        "player": PlayerConfig,
        "playback": PlaybackConfig,
        "library": LibraryConfig,
        "provider": ProviderConfig,
        "ui": UIConfig,
        "keys": KeysConfig,
        "logging": LoggingConfig,
    }
    for name, cls in sections.items():
        if name in toml_data:
            setattr(
                config, name, _build_section(cls, toml_data[name], getattr(config, name))
            )

    if config.logging.level.upper() not in VALID_LOG_LEVELS:
        logger.warning(f"Invalid log level {config.logging.level!r}, using INFO")
        config.logging.level = "INFO"
    config.logging.level = config.logging.level.upper()

    return config


def apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides.

    - FEATHER_COOKIES: cookies file for the provider
    """
    cookies = os.environ.get(COOKIES_ENV_VAR)
    if cookies:
        config.provider.cookies_file = cookies
    return config


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables (optionally loaded from ``<config dir>/.env``)
    override TOML values.
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path(path)

    if not config_path.exists():
        if path:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        logger.info(f"Created default configuration at: {config_path}")
        return apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.warning(f"Could not parse {config_path}: {e}. Using defaults.")
        return apply_env_overrides(Config())

    return apply_env_overrides(parse_config(toml_data))


def ensure_directories() -> None:
    """Ensure config and data directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
