# -*- coding: utf-8 -*-
"""Background hashing worker.

The worker is a single-process pool shared by the whole interpreter. It is
created on first use, at most once, and never torn down. Communication is by
message only: a buffer goes in through :meth:`Md5Worker.post_message`, and a
``(error, digest)`` message comes back to every listener on the event loop.
"""

import asyncio
import logging
from concurrent.futures import ProcessPoolExecutor

from . import config
from .exceptions import ComputationError, UnsupportedEnvironmentError
from .utils import computehash

logger = logging.getLogger(__name__)

_worker = None
_checked = False


class Md5Worker(object):
    """Hash buffers in a background process.

    Args:
        executor: Executor running the hash computation. Defaults to a
            ``ProcessPoolExecutor`` with a single process.
        algorithm: ``hashlib`` algorithm name. Defaults to ``'md5'``.

    Raises:
        UnsupportedEnvironmentError: If no executor was given and the
            platform can't start worker processes.
    """

    def __init__(self, executor=None, algorithm=config.DIGEST_ALGORITHM):
        if executor is None:
            executor = create_executor()

        self.executor = executor
        self.algorithm = algorithm
        self._listeners = []

    def on_message(self, listener):
        """Register `listener` to receive ``(error, digest)`` messages."""
        self._listeners.append(listener)

    def post_message(self, buffer):
        """Send `buffer` to the worker. Must be called from a running event
        loop; the answer arrives later as a message on that loop.
        """
        loop = asyncio.get_running_loop()

        try:
            future = loop.run_in_executor(
                self.executor, computehash, buffer, self.algorithm)
        except Exception as exc:
            logger.warning("Hashing worker rejected a task: %s", exc)
            loop.call_soon(self._emit, _computation_error(exc), None)
            return

        future.add_done_callback(self._on_done)

    def _on_done(self, future):
        error = future.exception()
        if error is not None:
            logger.warning("Hashing worker failed: %s", error)
            self._emit(_computation_error(error), None)
        else:
            self._emit(None, future.result())

    def _emit(self, error, digest):
        for listener in list(self._listeners):
            listener(error, digest)


def create_executor():
    """Trial-instantiate the single-process pool backing the worker.

    Raises:
        UnsupportedEnvironmentError: If process pools are unavailable, e.g.
            when the platform lacks a working ``sem_open``.
    """
    try:
        # Requires the semaphore primitives process pools are built on.
        import multiprocessing.synchronize  # noqa: F401

        executor = ProcessPoolExecutor(max_workers=1)
    except (ImportError, OSError, NotImplementedError) as exc:
        raise UnsupportedEnvironmentError(
            "Background hashing is unavailable: {0}".format(exc)) from exc

    # The pool starts its process lazily, so run a no-op task to find out
    # whether a process can be started at all.
    try:
        executor.submit(int).result()
    except Exception as exc:
        executor.shutdown(wait=False)
        raise UnsupportedEnvironmentError(
            "Background hashing is unavailable: {0}".format(exc)) from exc

    return executor


def get_worker():
    """Return the process-wide :class:`Md5Worker`, creating it on first use.

    Returns ``None`` when workers are disabled by configuration or
    unsupported by the platform, in which case hashing falls back to the
    event loop thread.
    """
    global _worker, _checked

    if not _checked:
        _checked = True

        if not config.USE_WORKERS:
            logger.debug("Background hashing disabled by configuration")
        else:
            try:
                _worker = Md5Worker()
            except UnsupportedEnvironmentError as exc:
                logger.debug("Falling back to in-loop hashing: %s", exc)
            else:
                logger.debug("Started background hashing worker")

    return _worker


def supports_workers() -> bool:
    """Return whether digests are computed in a background worker."""
    return get_worker() is not None


def _computation_error(error):
    if isinstance(error, ComputationError):
        return error

    wrapped = ComputationError("Could not compute digest: {0}".format(error))
    wrapped.__cause__ = error
    return wrapped
