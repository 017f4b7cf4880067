"""Background job runner.

Provider calls never run on the UI thread. Each job returns a message that
is posted to the inbox the main loop drains once per frame.
"""

import queue
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from loguru import logger

from feather_player.messages import JobFailed


class JobRunner:
    """Runs blocking work on a thread pool and posts the results."""

    def __init__(self, inbox: queue.Queue, max_workers: int = 4):
        self.inbox = inbox
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="feather-job"
        )
        self._closed = False

    def post(self, message: object) -> None:
        """Thread-safe: deliver a message to the UI thread."""
        self.inbox.put(message)

    def submit(self, name: str, job: Callable[[], Optional[object]]) -> None:
        """Run job in the background and post the message it returns.

        Expected failures are turned into messages by the job itself; anything
        else is logged and reported as JobFailed.
        """
        if self._closed:
            logger.debug(f"Job runner closed, dropping job {name}")
            return

        def run() -> None:
            try:
                message = job()
            except Exception as e:
                logger.exception(f"Background job {name} failed")
                message = JobFailed(name, e)
            if message is not None:
                self.post(message)

        logger.debug(f"Submitting job {name}")
        self._executor.submit(run)

    def shutdown(self) -> None:
        """Stop accepting jobs; queued jobs are cancelled, running ones abandoned."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
