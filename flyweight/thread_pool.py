"""A fixed-size pool of worker threads fed from a job queue."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from types import TracebackType

logger = logging.getLogger(__name__)

_STOP = object()


class ThreadPool:
    """Runs submitted jobs on a fixed number of worker threads."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("thread pool size must be greater than zero")
        self._jobs: queue.SimpleQueue = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False
        self._workers = [
            threading.Thread(target=self._work, args=(worker_id,), name=f"worker-{worker_id}", daemon=True)
            for worker_id in range(size)
        ]
        for worker in self._workers:
            worker.start()

    @property
    def size(self) -> int:
        """Number of worker threads."""
        return len(self._workers)

    def _work(self, worker_id: int) -> None:
        while True:
            job = self._jobs.get()
            if job is _STOP:
                logger.debug("worker %d disconnected; shutting down", worker_id)
                return
            logger.debug("worker %d got a job; executing", worker_id)
            try:
                job()
            except Exception:
                logger.exception("worker %d: job failed", worker_id)

    def execute(self, job: Callable[[], object]) -> None:
        """Queue ``job`` to run on a worker thread."""
        with self._lock:
            if self._closed:
                raise RuntimeError("thread pool is shut down")
            self._jobs.put(job)

    def shutdown(self) -> None:
        """Stop accepting jobs, let queued jobs finish and join the workers."""
        with self._lock:
            if not self._closed:
                self._closed = True
                for _ in self._workers:
                    self._jobs.put(_STOP)
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                logger.debug("shutting down %s", worker.name)
                worker.join()

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()