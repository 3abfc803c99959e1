# -*- coding: utf-8 -*-
"""Source readers: turn a file handle, a path or a URL into raw bytes.

Reading happens in the event loop's default executor so the loop is never
blocked. Results are handed to ``callback(error, data)`` on the loop, where
exactly one of the two arguments is ``None``.
"""

import asyncio
import functools
import logging
import os
from contextlib import closing

import fs as pyfs
import requests
from fs.opener.errors import OpenerError

from . import config
from .exceptions import ResolutionError
from .utils import Stream, load_fs

logger = logging.getLogger(__name__)

URL = "url"


def is_file_source(source) -> bool:
    """Return whether `source` must be read as a file rather than hashed as
    raw bytes.
    """
    return hasattr(source, "read") or isinstance(source, (str, os.PathLike))


def read_file(source, filesystem=None) -> bytes:
    """Read every byte of a file-like object or path.

    Args:
        source: Readable object or path to a file.
        filesystem: Optional pyfilesystem2 filesystem, FS URL (e.g.
            ``mem://``) or directory in which `source` is looked up when it
            is a path. Filesystems opened from a URL or directory are closed
            after reading.

    Raises:
        ResolutionError: If the filesystem can't be opened or the file can't
            be found or read.
    """
    if filesystem is None or isinstance(filesystem, pyfs.base.FS):
        return _read_stream(source, filesystem)

    try:
        filesystem = load_fs(filesystem)
    except (pyfs.errors.FSError, OpenerError) as exc:
        raise ResolutionError(
            "Could not open filesystem {0!r}: {1}".format(filesystem, exc),
            source=source) from exc

    with filesystem:
        return _read_stream(source, filesystem)


def _read_stream(source, filesystem):
    try:
        stream = Stream(source, fs=filesystem)
    except (ValueError, OSError, pyfs.errors.FSError) as exc:
        raise ResolutionError(str(exc), source=source) from exc

    with closing(stream):
        try:
            return stream.read()
        except (OSError, pyfs.errors.FSError) as exc:
            raise ResolutionError(
                "Could not read {0!r}: {1}".format(source, exc),
                source=source) from exc


def read_url(url, timeout=None) -> bytes:
    """Fetch the body of `url`.

    Raises:
        ResolutionError: On network failure or a non-2xx response.
    """
    if timeout is None:
        timeout = config.URL_TIMEOUT

    try:
        response = requests.get(url, timeout=timeout, stream=True)
        response.raise_for_status()
        return b"".join(response.iter_content(chunk_size=config.CHUNK_SIZE))
    except requests.RequestException as exc:
        raise ResolutionError(
            "Could not fetch {0}: {1}".format(url, exc), source=url) from exc


def get_contents_from_file(source, callback, filesystem=None, loop=None):
    """Read `source` in the background and pass the bytes to `callback`."""
    _submit(functools.partial(read_file, source, filesystem),
            callback, source, loop)


def get_contents_from_url(url, callback, timeout=None, loop=None):
    """Fetch `url` in the background and pass the body to `callback`."""
    _submit(functools.partial(read_url, url, timeout), callback, url, loop)


def resolve(source, callback, type=None, filesystem=None, loop=None):
    """Resolve a delegation descriptor into raw bytes.

    ``type="url"`` treats `source` as a URL, anything else as a file handle
    or path.
    """
    if type == URL:
        get_contents_from_url(source, callback, loop=loop)
    else:
        get_contents_from_file(source, callback, filesystem=filesystem,
                               loop=loop)


def _submit(func, callback, source, loop):
    loop = loop or asyncio.get_running_loop()
    future = loop.run_in_executor(None, func)

    def done(future):
        error = future.exception()
        if error is None:
            callback(None, future.result())
            return

        if not isinstance(error, ResolutionError):
            wrapped = ResolutionError(
                "Could not resolve {0!r}: {1}".format(source, error),
                source=source)
            wrapped.__cause__ = error
            error = wrapped

        logger.debug("Failed to resolve %r: %s", source, error)
        callback(error, None)

    future.add_done_callback(done)
