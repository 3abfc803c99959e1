# -*- coding: utf-8 -*-


"""
common utils for imboclient
"""


import hashlib
import os
from typing import Union

import fs as pyfs
from fs.osfs import OSFS

from . import config


def to_bytes(text) -> bytes:
    """Return `text` as ``bytes``, encoding strings as UTF-8."""
    if isinstance(text, (bytearray, memoryview)):
        return bytes(text)
    if not isinstance(text, bytes):
        text = bytes(text, "utf8")
    return text


def computehash(data, algorithm: str = config.DIGEST_ALGORITHM) -> str:
    """Compute the lowercase hex digest of `data` using `algorithm`.

    Args:
        data: Bytes-like object or an iterable of chunks (e.g. a
            :class:`Stream`).
        algorithm: Name of an algorithm available in ``hashlib``.
    """
    hasher = hashlib.new(algorithm)
    if isinstance(data, (bytes, bytearray, memoryview)):
        hasher.update(data)
    else:
        for chunk in data:
            hasher.update(to_bytes(chunk))
    return hasher.hexdigest()


def load_fs(root: Union[pyfs.base.FS, str]) -> pyfs.base.FS:
    """Return a pyfilesystem2 filesystem for `root`.

    `root` may already be a filesystem, an FS URL such as ``mem://`` or
    ``s3://bucket``, or a local directory path.
    """
    if isinstance(root, pyfs.base.FS):
        return root

    root = os.fspath(root)
    if "://" in root:
        return pyfs.open_fs(root)

    return OSFS(root)


class Stream(object):
    """Common interface for file-like objects.

    The input `obj` can be a file-like object or a path to a file. Paths are
    looked up in `fs` when given, otherwise on the local disk. If `obj` is a
    path, then it will be opened until :meth:`close` is called. If `obj` is a
    file-like object, then it's original position will be restored when
    :meth:`close` is called instead of closing the object automatically.

    Successive readings of the stream is supported without having to manually
    set it's position back to ``0``.
    """

    def __init__(self, obj, fs=None, chunk_size=config.CHUNK_SIZE):
        self._owned_fs = None
        self.chunk_size = chunk_size

        if hasattr(obj, "read"):
            pos = obj.tell() if _seekable(obj) else None
            self._opened = False
        else:
            obj = self._open(obj, fs)
            pos = None
            self._opened = True

        self._obj = obj
        self._pos = pos

    def _open(self, path, fs):
        try:
            path = os.fspath(path)
        except TypeError:
            raise ValueError(
                "Object must be a valid file path or a readable object.")

        location = path
        if fs is None:
            directory, path = os.path.split(os.path.abspath(path))
            try:
                fs = self._owned_fs = OSFS(directory)
            except pyfs.errors.CreateFailed:
                raise ValueError(
                    "Could not locate file: {0}".format(location))

        if not fs.isfile(path):
            self.close()
            raise ValueError("Could not locate file: {0}".format(location))

        try:
            return fs.openbin(path)
        except (OSError, pyfs.errors.FSError):
            self.close()
            raise

    def __iter__(self):
        """Read underlying IO object and yield results. Return object to
        original position if we didn't open it originally.
        """
        if _seekable(self._obj):
            self._obj.seek(0)

        while True:
            data = self._obj.read(self.chunk_size)

            if not data:
                break

            yield data

        if self._pos is not None:
            self._obj.seek(self._pos)

    def read(self) -> bytes:
        """Return the full contents of the underlying IO object as bytes."""
        return b"".join(to_bytes(chunk) for chunk in self)

    def close(self):
        """Close underlying IO object if we opened it, else return it to
        original position.
        """
        obj = getattr(self, "_obj", None)
        if obj is not None:
            if self._opened:
                obj.close()
            elif self._pos is not None:
                obj.seek(self._pos)

        if self._owned_fs is not None:
            self._owned_fs.close()
            self._owned_fs = None


def _seekable(obj):
    seekable = getattr(obj, "seekable", None)
    if seekable is not None:
        return seekable()
    return hasattr(obj, "seek") and hasattr(obj, "tell")
