"""Waits for the LoginRadius widget library to become available."""

import time
from enum import Enum
from typing import Callable, List, Optional

from .. import logging

logger = logging.getLogger(__name__)

SCRIPT_URL = 'https://auth.lrcontent.com/v2/js/LoginRadiusV2.js'
POLL_INTERVAL = 0.1
"""Seconds between readiness checks."""

MAX_ATTEMPTS = 100
"""Readiness checks before giving up."""

ReadyCallback = Callable[[bool], None]


class LoadState(Enum):
    """Where the script load is at."""

    NOT_LOADED = 'not_loaded'
    LOADING = 'loading'
    READY = 'ready'
    FAILED = 'failed'


class ScriptLoader(object):
    """
    Loads the widget library, and tells everyone who asked when it's done.

    ``probe`` answers whether the library is available. If it isn't,
    ``inject`` is called once with the script URL, and the probe is polled
    every ``interval`` seconds, at most ``max_attempts`` times. The load
    finishes either ready or failed. Every callback registered with
    :meth:`on_ready` is called exactly once with the outcome, in the order
    they were registered; a callback registered after that is called right
    away.
    """

    def __init__(self, probe: Callable[[], bool],
                 inject: Optional[Callable[[str], None]] = None,
                 script_url: str = SCRIPT_URL,
                 interval: float = POLL_INTERVAL,
                 max_attempts: int = MAX_ATTEMPTS,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.probe = probe
        self.inject = inject
        self.script_url = script_url
        self.interval = interval
        self.max_attempts = max_attempts
        self.sleep = sleep
        self.state = LoadState.NOT_LOADED
        self.attempts = 0
        self._callbacks: List[ReadyCallback] = []

    @property
    def done(self) -> bool:
        return self.state in (LoadState.READY, LoadState.FAILED)

    def on_ready(self, callback: ReadyCallback) -> None:
        """Register a callback for the outcome of the load."""
        if self.done:
            callback(self.state is LoadState.READY)
            return
        self._callbacks.append(callback)

    def _finish(self, ready: bool) -> None:
        self.state = LoadState.READY if ready else LoadState.FAILED
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(ready)

    def load(self) -> bool:
        """
        Load the library, if it isn't already.

        Returns
        -------
        bool
            Whether the library is available.

        """
        if self.done:
            return self.state is LoadState.READY

        self.state = LoadState.LOADING
        if self.probe():
            self._finish(True)
            return True

        if self.inject is not None:
            self.inject(self.script_url)
        while self.attempts < self.max_attempts:
            self.sleep(self.interval)
            self.attempts += 1
            if self.probe():
                self._finish(True)
                return True

        logger.error('LoginRadius script not available after %i attempts',
                     self.attempts)
        self._finish(False)
        return False
