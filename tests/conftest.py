# -*- coding: utf-8 -*-

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from imboclient import scheduler, worker


class FakeWorker(object):
    """Worker stand-in that records posted buffers and answers on demand."""

    def __init__(self):
        self.posted = []
        self._listeners = []

    def on_message(self, listener):
        self._listeners.append(listener)

    def post_message(self, buffer):
        self.posted.append(buffer)

    def reply(self, error=None, digest=None):
        for listener in list(self._listeners):
            listener(error, digest)


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()

    yield loop

    loop.run_until_complete(loop.shutdown_default_executor())
    loop.close()


@pytest.fixture
def fake_worker():
    return FakeWorker()


@pytest.fixture
def no_workers(monkeypatch):
    monkeypatch.setattr(worker, "_worker", None)
    monkeypatch.setattr(worker, "_checked", True)
    monkeypatch.setattr(scheduler, "_queue", None)


@pytest.fixture
def thread_worker(monkeypatch):
    executor = ThreadPoolExecutor(max_workers=1)
    md5_worker = worker.Md5Worker(executor=executor)

    monkeypatch.setattr(worker, "_worker", md5_worker)
    monkeypatch.setattr(worker, "_checked", True)
    monkeypatch.setattr(scheduler, "_queue", None)

    yield md5_worker

    executor.shutdown()
