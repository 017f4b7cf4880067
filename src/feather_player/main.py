"""
Feather - main entry point for the interactive player
"""

import queue
from dataclasses import replace
from typing import Optional

from loguru import logger

from feather_player.context import AppContext
from feather_player.core import config, database
from feather_player.core.console import print_error
from feather_player.core.exceptions import PersistenceError
from feather_player.core.output import setup_loguru
from feather_player.domain.playback import PlayerController, check_mpv_available
from feather_player.domain.provider import YouTubeProvider


def setup(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    console_logging: bool = False,
) -> config.Config:
    """Load configuration, initialize logging and migrate the database."""
    cfg = config.load_config(config_path)
    if log_level:
        cfg = replace(cfg, logging=replace(cfg.logging, level=log_level.upper()))

    config.ensure_directories()
    setup_loguru(
        config.get_log_file(cfg),
        level=cfg.logging.level,
        max_file_size_mb=cfg.logging.max_file_size_mb,
        backup_count=cfg.logging.backup_count,
        console=console_logging,
    )
    database.init_database()
    return cfg


def create_context(cfg: config.Config, inbox: queue.Queue) -> AppContext:
    """Wire the provider, job runner and player controller together."""
    from feather_player.ui.blessed.workers import JobRunner

    jobs = JobRunner(inbox, max_workers=cfg.provider.workers)
    player = PlayerController(cfg.player, jobs.post)
    provider = YouTubeProvider(cfg.provider)
    return AppContext(config=cfg, provider=provider, player=player, jobs=jobs)


def interactive_mode(
    config_path: Optional[str] = None, log_level: Optional[str] = None
) -> int:
    """Run the full-screen player. Returns a process exit code."""
    try:
        cfg = setup(config_path, log_level)
    except FileNotFoundError as e:
        print_error(str(e))
        return 1
    except PersistenceError as e:
        print_error(f"Cannot open library database: {e}")
        return 1

    if not check_mpv_available(cfg.player.mpv_path):
        print_error(f"mpv not found ({cfg.player.mpv_path}). Install mpv or set player.mpv_path.")
        logger.error(f"mpv not available at {cfg.player.mpv_path}")
        return 1

    inbox: queue.Queue = queue.Queue()
    ctx = create_context(cfg, inbox)
    ctx.player.start()

    from feather_player.ui.blessed.app import run_interactive_ui

    logger.info("Starting interactive UI")
    try:
        run_interactive_ui(ctx, inbox)
    except Exception:
        logger.exception("Interactive UI crashed")
        print_error("Feather stopped unexpectedly; see the log for details")
        return 1
    finally:
        # Both are idempotent; the UI normally stops them itself
        ctx.player.stop()
        ctx.jobs.shutdown()

    logger.info("Feather exited cleanly")
    return 0
