"""
=============================================================================
WORKER POOL
=============================================================================

A fixed set of daemon threads pulling connection tasks from a bounded queue.

    accept loop ──submit()──► ┌──────────────────────┐
                              │  queue.Queue(maxsize) │
                              └──────────┬───────────┘
                          ┌──────────────┼──────────────┐
                          ▼              ▼              ▼
                      Worker-0       Worker-1  ...  Worker-N

With workers=1 requests are served strictly one after another. A full
queue makes submit() return False; the server answers 503 on the spot.

=============================================================================
WORKER LIFECYCLE
=============================================================================

    while not shutdown:
        task = queue.get()      ← blocks (with a timeout to re-check shutdown)
        if task is None:        ← poison pill
            break
        run(task)               ← exceptions are logged, the worker survives
        queue.task_done()

shutdown() puts one None per worker and joins them.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """A deferred call: func(*args)."""

    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """Daemon thread executing tasks from the shared queue."""

    def __init__(self, task_queue: queue.Queue, worker_id: int, idle_timeout: float = 1.0):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout
        self.state = WorkerState.IDLE
        self._shutdown = threading.Event()
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")
        while not self._shutdown.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()
        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()
        try:
            task.func(*task.args)
            self.tasks_completed += 1
            logger.debug(f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s")
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}")
        finally:
            self.state = WorkerState.IDLE

    def shutdown(self):
        self._shutdown.set()


class WorkerPool:
    """
    Fixed-size thread pool.

    Usage:
        pool = WorkerPool(workers=4, queue_size=100)
        pool.start()
        if not pool.submit(handle, conn):
            reject(conn)
        pool.shutdown()
    """

    def __init__(self, workers: int = 1, queue_size: int = 100):
        self.workers = workers
        self.queue_size = queue_size
        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    @property
    def pending(self) -> int:
        """Tasks waiting in the queue."""
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                "workers": len(self._workers),
                "busy": sum(1 for w in self._workers if w.state == WorkerState.BUSY),
                "pending": self.pending,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            }

    def start(self):
        with self._lock:
            if self._started:
                return
            logger.info(f"Starting worker pool with {self.workers} worker(s)")
            for worker_id in range(self.workers):
                worker = Worker(self._task_queue, worker_id)
                self._workers.append(worker)
                worker.start()
            self._started = True

    def submit(self, func: Callable[..., Any], *args: Any) -> bool:
        """
        Queue func(*args).

        Returns:
            False if the pool is shut down or the queue is full.
        """
        if self._shutdown:
            return False
        try:
            self._task_queue.put_nowait(Task(func=func, args=args))
            return True
        except queue.Full:
            logger.warning(f"Task queue full ({self.queue_size}), rejecting task")
            return False

    def shutdown(self, wait: bool = True, timeout: Optional[float] = 5.0):
        """
        Stop all workers.

        Args:
            wait: Join the worker threads.
            timeout: Per-thread join timeout.
        """
        if self._shutdown:
            return
        self._shutdown = True
        logger.info("Shutting down worker pool...")

        with self._lock:
            workers = list(self._workers)
        for _ in workers:
            # Blocks while the queue is full; workers keep draining it
            self._task_queue.put(None)

        if wait:
            for worker in workers:
                worker.join(timeout=timeout)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} did not stop in time")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False
