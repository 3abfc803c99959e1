# -*- coding: utf-8 -*-
"""imboclient computes what a client of the Imbo image server needs to talk
to it securely:

- MD5 checksums of image data, used as stable image identifiers. Hashing runs
  in a shared background process when the platform allows it, and on the next
  event loop tick otherwise.
- HMAC-SHA256 signatures for write requests and access tokens for image URLs,
  computed over canonical strings the server can rebuild independently.
"""

import logging

from .__meta__ import (
    __title__,
    __summary__,
    __url__,
    __version__,
    __author__,
    __email__,
    __license__,
)

from .digest import md5, md5_async
from .exceptions import (
    ComputationError,
    ImboClientError,
    ResolutionError,
    SignatureError,
    UnsupportedEnvironmentError,
)
from .signing import (
    canonical_query,
    canonical_request,
    canonical_url,
    sign,
    SignedRequest,
    sign_request,
    sign_url,
    verify_url,
)

sha256 = sign

logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = (
    "md5",
    "md5_async",
    "sha256",
    "sign",
    "SignedRequest",
    "sign_request",
    "sign_url",
    "verify_url",
    "canonical_query",
    "canonical_request",
    "canonical_url",
    "ImboClientError",
    "ResolutionError",
    "ComputationError",
    "SignatureError",
    "UnsupportedEnvironmentError",
)
