# -*- coding: utf-8 -*-
"""Exceptions raised or reported by imboclient."""


class ImboClientError(Exception):
    """Base class for all imboclient errors."""


class ResolutionError(ImboClientError):
    """Bytes could not be obtained from a file handle, path or URL."""

    def __init__(self, message, source=None):
        super(ResolutionError, self).__init__(message)
        self.source = source


class UnsupportedEnvironmentError(ImboClientError):
    """The platform can't run a background hashing worker."""


class ComputationError(ImboClientError):
    """A digest could not be computed from the given buffer."""


class SignatureError(ImboClientError):
    """A request or URL could not be signed."""
