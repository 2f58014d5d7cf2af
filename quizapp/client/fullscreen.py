"""
Fullscreen compliance tracking for timed student quizzes
"""

import logging
import shutil
import threading

import click

from .timers import IntervalTimer

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0


class TerminalDisplay:
    """Fullscreen for a terminal: the window kept at least as large as when the quiz began.

    `request()` asks the student to maximise the terminal and records that
    size; any later shrink counts as leaving fullscreen.
    """

    def __init__(self, prompt: bool = True):
        self.prompt = prompt
        self.baseline = None

    def request(self):
        if self.prompt:
            click.echo("Maximise this terminal window now; shrinking it during the quiz is recorded.")
            click.pause("Press any key when ready...")
        self.baseline = shutil.get_terminal_size()

    def is_fullscreen(self) -> bool:
        if self.baseline is None:
            return False
        size = shutil.get_terminal_size()
        return size.columns >= self.baseline.columns and size.lines >= self.baseline.lines

    def exit(self):
        self.baseline = None


class FullscreenTracker:
    """Accumulates seconds spent outside fullscreen while a quiz is active.

    Each poll, one second apart, adds a second when the display reports
    it is not fullscreen. `poll()` can be called directly; `start(realtime=True)`
    polls on a background interval instead.
    """

    def __init__(self, display):
        self.display = display
        self.seconds_outside = 0
        self.is_fullscreen = False
        self.tracking = False
        self._lock = threading.Lock()
        self._timer = None

    def start(self, realtime: bool = False):
        """Request fullscreen and count this attempt's seconds from zero"""
        self.reset()
        try:
            self.display.request()
        except Exception as e:
            # a refused request still starts tracking; the time is counted as outside
            logger.error(f"Error attempting to enable fullscreen: {e}")
        self.tracking = True
        self.is_fullscreen = self.display.is_fullscreen()
        if realtime:
            self._timer = IntervalTimer(POLL_INTERVAL, self.poll, name="fullscreen-poll").start()

    def poll(self):
        with self._lock:
            if not self.tracking:
                return
            self.is_fullscreen = self.display.is_fullscreen()
            if not self.is_fullscreen:
                self.seconds_outside += 1

    def reset(self):
        with self._lock:
            self.seconds_outside = 0
            self.is_fullscreen = False

    def pause(self):
        """Stop accumulating (quiz complete) without leaving fullscreen"""
        with self._lock:
            self.tracking = False

    def stop(self):
        """Cancel polling and leave fullscreen"""
        self.pause()
        if self._timer:
            self._timer.cancel()
            self._timer = None
        self.display.exit()
