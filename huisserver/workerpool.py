"""A pool of grouped worker threads with one hand-off slot per group."""

from __future__ import annotations

import logging
import queue
import threading

log = logging.getLogger(__name__)

GROUPS = 25
WORKERS_PER_GROUP = 20


class WorkerPool:
    """Runs submitted callables on idle workers, or on a fresh thread."""

    def __init__(self, groups=GROUPS, workers_per_group=WORKERS_PER_GROUP):
        if groups < 1 or workers_per_group < 1:
            raise ValueError("groups and workers_per_group must be positive")
        self.groups = groups
        self.workers_per_group = workers_per_group
        self._lock = threading.Lock()
        self._available = [0] * groups
        self._slots = [queue.Queue(maxsize=1) for _ in range(groups)]
        self._next = 0
        self._threads = []
        self._started = False
        self._closed = False

    def start(self):
        """Launch the worker threads."""
        with self._lock:
            if self._started or self._closed:
                raise RuntimeError("pool already started or shut down")
            self._started = True
        for group in range(self.groups):
            for number in range(self.workers_per_group):
                thread = threading.Thread(
                    target=self._work, args=(group,), name=f"worker-{group}-{number}", daemon=True
                )
                thread.start()
                self._threads.append(thread)

    def _work(self, group):
        slot = self._slots[group]
        while True:
            with self._lock:
                self._available[group] += 1
            task = slot.get()
            if task is None:
                return
            func, args = task
            try:
                func(*args)
            except Exception:
                log.exception("task %r failed", func)

    def submit(self, func, *args):
        """Run ``func(*args)`` on an idle worker or a new thread."""
        with self._lock:
            if self._closed:
                raise RuntimeError("pool is shut down")
            chosen = None
            for _ in range(self.groups):
                self._next = (self._next + 1) % self.groups
                if self._available[self._next]:
                    self._available[self._next] -= 1
                    chosen = self._next
                    break
        if chosen is None:
            threading.Thread(target=func, args=args, daemon=True).start()
            return
        self._slots[chosen].put((func, args))

    def shutdown(self):
        """Stop all workers and wait for them to finish."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for group in range(self.groups):
            if self._started:
                for _ in range(self.workers_per_group):
                    self._slots[group].put(None)
        for thread in self._threads:
            thread.join()
        self._threads.clear()