"""
Bounded, closable queue used for the pipeline's work and result streams.
"""

import threading
from collections import deque
from typing import Any, Deque, Iterator


class QueueClosed(Exception):
    """Raised by put() on a closed queue, and by get() once a closed queue is drained."""


class ClosableQueue:
    """Thread-safe FIFO with a capacity and a one-way close signal.

    put() blocks while the queue is full, get() blocks while it is empty and open.
    close() is idempotent and wakes every blocked producer and consumer.
    """

    def __init__(self, maxsize: int):
        if maxsize <= 0:
            raise ValueError("maxsize must be > 0")
        self.maxsize = maxsize
        self._items: Deque[Any] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def put(self, item: Any):
        with self._not_full:
            while len(self._items) >= self.maxsize and not self._closed:
                self._not_full.wait()
            if self._closed:
                raise QueueClosed()
            self._items.append(item)
            self._not_empty.notify()

    def get(self) -> Any:
        with self._not_empty:
            while not self._items and not self._closed:
                self._not_empty.wait()
            if not self._items:
                raise QueueClosed()
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def __iter__(self) -> Iterator[Any]:
        """Consume items until the queue is closed and drained."""
        while True:
            try:
                yield self.get()
            except QueueClosed:
                return

    def __len__(self):
        with self._lock:
            return len(self._items)
