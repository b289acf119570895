"""
Profiling tools for the build stages.
"""

__author__ = "W.R.Saunders"
__copyright__ = "Copyright 2016, W.R.Saunders"
__license__ = "GPL"


# system level imports
import time


PROFILE = {}
"""Accumulated stage times in seconds, keyed by ``'Build:<stage>'``."""


class Timer(object):
    """
    Automatic timing class.

    :arg int level_object: Level of the object being timed.
    :arg int level: Timer runs only if ``level_object > level``.
    :arg bool start: Start the timer on construction.
    """
    def __init__(self, level_object=1, level=0, start=False):
        self._lo = level_object
        self._l = level
        self._ts = 0.0
        self._tt = 0.0
        self._running = False

        if start:
            self.start()

    def start(self):
        """
        Start the timer.
        """
        if (self._lo > self._l) and (self._running is False):
            self._ts = time.time()
            self._running = True

    def pause(self):
        """
        Pause the timer.
        """
        if (self._lo > self._l) and (self._running is True):
            self._tt += time.time() - self._ts
            self._ts = 0.0
            self._running = False

    def time(self):
        """
        Return current total time.
        """
        return self._tt


def record(key, timer):
    """Add the time held by ``timer`` to ``PROFILE[key]``."""
    PROFILE[key] = PROFILE.get(key, 0.0) + timer.time()
