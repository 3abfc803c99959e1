# -*- coding: utf-8 -*-
"""Content checksums for images before they are uploaded.

Identical content always maps to the same digest, so the digest serves as a
stable identifier for the image on the server.
"""

import asyncio

from . import readers
from .scheduler import get_queue


def md5(source, callback, type=None, binary=False, filesystem=None,
        loop=None):
    """Compute the MD5 digest of `source` and pass it to `callback`.

    `callback` is called exactly once as ``callback(error, digest)``, never
    from within this call. Failures are reported through `error`, never
    raised.

    Args:
        source: Raw bytes, a readable object, a path, or a URL when
            ``type='url'``.
        callback: Callable receiving ``(error, digest)``.
        type: ``'url'`` to fetch `source` over HTTP before hashing.
        binary: Treat `source` as raw bytes, skipping file detection.
        filesystem: pyfilesystem2 filesystem, FS URL or directory in which
            paths are looked up. Defaults to the local disk.
        loop: Event loop to run on. Defaults to the running loop.
    """
    loop = loop or asyncio.get_running_loop()

    def resolved(error, data):
        if error is not None:
            callback(error, None)
            return

        md5(data, callback, binary=True, loop=loop)

    if type == readers.URL:
        readers.get_contents_from_url(source, resolved, loop=loop)
    elif not binary and readers.is_file_source(source):
        readers.get_contents_from_file(source, resolved,
                                       filesystem=filesystem, loop=loop)
    else:
        loop.call_soon(_enqueue, source, callback)


async def md5_async(source, **options) -> str:
    """Awaitable variant of :func:`md5`. Returns the digest or raises the
    error the callback would have received.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def callback(error, digest):
        if future.cancelled():
            return

        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(digest)

    md5(source, callback, loop=loop, **options)
    return await future


def _enqueue(buffer, callback):
    if isinstance(buffer, (bytearray, memoryview)):
        # The worker process receives a pickled copy.
        buffer = bytes(buffer)

    get_queue().add(buffer, callback)
