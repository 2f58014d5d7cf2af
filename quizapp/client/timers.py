import threading


class IntervalTimer:
    """Call `callback` every `interval` seconds on a daemon thread until cancelled"""

    def __init__(self, interval: float, callback, name: str = None):
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self):
        self._thread.start()
        return self

    def _run(self):
        while not self._stopped.wait(self.interval):
            self.callback()

    def cancel(self):
        self._stopped.set()

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stopped.is_set()
