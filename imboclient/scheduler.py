# -*- coding: utf-8 -*-
"""Queue hash tasks onto the background worker, one at a time."""

import asyncio
import logging
from collections import deque, namedtuple

from . import config
from .exceptions import ComputationError
from .utils import computehash
from .worker import get_worker

logger = logging.getLogger(__name__)

_queue = None


class HashTask(namedtuple("HashTask", ["buffer", "callback"])):
    """A buffer waiting to be hashed and the callback receiving the result."""

    __slots__ = ()


class WorkerQueue(object):
    """FIFO of :class:`HashTask` drained by a single worker.

    At most one task is in flight with the worker. When the worker answers,
    the head task is removed, its callback invoked, and the next task (if
    any) is dispatched. Every task gets exactly one callback.

    Without a worker nothing is queued: the digest is computed on the next
    tick of the event loop and handed to the callback from there.

    Args:
        worker: Object with ``post_message(buffer)`` and
            ``on_message(listener)``, or ``None`` for in-loop hashing.
        algorithm: ``hashlib`` algorithm name for in-loop hashing.
    """

    def __init__(self, worker=None, algorithm=config.DIGEST_ALGORITHM):
        self.worker = worker
        self.algorithm = algorithm
        self._tasks = deque()

        if worker is not None:
            worker.on_message(self._on_message)

    @property
    def pending(self) -> int:
        """Number of tasks queued, including the one in flight."""
        return len(self._tasks)

    def add(self, buffer, callback):
        """Queue `buffer` for hashing. Returns immediately; must be called
        from a running event loop.
        """
        if self.worker is None:
            asyncio.get_running_loop().call_soon(
                self._compute, buffer, callback)
            return

        self._tasks.append(HashTask(buffer, callback))

        # More than one task means the worker is busy and will drain the
        # queue when it answers.
        if len(self._tasks) == 1:
            self._dispatch()

    def _dispatch(self):
        if self._tasks:
            logger.debug("Dispatching hash task (%d pending)",
                         len(self._tasks))
            self.worker.post_message(self._tasks[0].buffer)

    def _on_message(self, error, digest):
        if not self._tasks:
            logger.warning("Dropping worker message with no pending task")
            return

        task = self._tasks.popleft()
        try:
            task.callback(error, digest)
        finally:
            self._dispatch()

    def _compute(self, buffer, callback):
        try:
            digest = computehash(buffer, self.algorithm)
        except (TypeError, ValueError) as exc:
            error = ComputationError(
                "Could not compute digest: {0}".format(exc))
            error.__cause__ = exc
            callback(error, None)
            return

        callback(None, digest)


def get_queue() -> WorkerQueue:
    """Return the process-wide queue guarding the shared worker."""
    global _queue

    if _queue is None:
        _queue = WorkerQueue(get_worker())

    return _queue
