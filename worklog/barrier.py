"""
Counting completion barrier: waiters are released once every registered party has called done().
"""

import threading


class CompletionBarrier:
    def __init__(self, parties: int = 0):
        if parties < 0:
            raise ValueError("parties must be >= 0")
        self._count = parties
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def add(self, n: int = 1):
        with self._cond:
            if self._count + n < 0:
                raise ValueError("barrier count would go negative")
            self._count += n
            if self._count == 0:
                self._cond.notify_all()

    def done(self):
        self.add(-1)

    def wait(self, timeout=None) -> bool:
        """Block until the count reaches zero. Returns False if timeout expired first."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)
