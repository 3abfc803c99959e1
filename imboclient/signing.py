# -*- coding: utf-8 -*-
"""Request and URL signing.

Imbo authenticates write requests and private image URLs with an
HMAC-SHA256 over a canonical string, keyed with the private key of a
public/private key pair. The server rebuilds the same canonical string from
what it receives and compares MACs, so canonicalization must not depend on
the order in which parameters were collected: query pairs are always sorted
by key, and only repeated keys (the ``t[]`` transformation chain) keep their
given order.

The private key is only ever the MAC key. It never appears in a canonical
string, header or URL.
"""

import hmac
import time
from collections import namedtuple
from datetime import datetime, timedelta, timezone
from operator import itemgetter
from typing import Optional
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

from . import config
from .exceptions import SignatureError
from .utils import to_bytes

_KEY_SAFE = "[]"
_VALUE_SAFE = ":,"


def sign(key, data) -> str:
    """Return the hex HMAC-SHA256 of `data` keyed with `key`."""
    return hmac.new(to_bytes(key), to_bytes(data),
                    config.SIGNATURE_ALGORITHM).hexdigest()


class SigningContext(namedtuple("SigningContext",
                                ["public_key", "private_key", "payload"])):
    """Inputs of a single signing operation.

    Raises:
        SignatureError: If the private key is empty.
    """

    __slots__ = ()

    def __new__(cls, public_key, private_key, payload):
        if not private_key:
            raise SignatureError("A private key is required for signing")

        return super(SigningContext, cls).__new__(
            cls, public_key, private_key, payload)

    def __repr__(self):
        return "SigningContext(public_key={0!r}, payload={1!r})".format(
            self.public_key, self.payload)

    @property
    def signature(self) -> str:
        return sign(self.private_key, self.payload)


def canonical_query(params) -> str:
    """Serialize query parameters deterministically.

    `params` is a mapping or a sequence of ``(key, value)`` pairs. Pairs are
    sorted by key; a list or tuple value expands to repeated ``key[]`` pairs
    in its own order. ``None`` values are left out.
    """
    pairs = sorted(_pairs(params), key=itemgetter(0))
    return "&".join(
        "{0}={1}".format(quote(key, safe=_KEY_SAFE),
                         quote(value, safe=_VALUE_SAFE))
        for key, value in pairs)


def canonical_url(url, params=None) -> str:
    """Return `url` with a canonical query string.

    Extra `params` are merged into the query. The scheme and host are
    lowercased and the fragment dropped. The result is stable under
    re-canonicalization.
    """
    parts = urlsplit(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)

    if params:
        pairs.extend(_pairs(params))

    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(),
                       parts.path or "/", canonical_query(pairs), ""))


def canonical_request(method, url, public_key, timestamp) -> str:
    """Return the string signed for a write request:
    ``METHOD|url|public_key|timestamp``.
    """
    return "|".join([method.upper(), canonical_url(url), public_key,
                     timestamp])


def format_timestamp(when: Optional[datetime] = None) -> str:
    """Format `when` (default: now) as a UTC ``YYYY-MM-DDTHH:MM:SSZ``
    timestamp. Naive datetimes are taken to be UTC.
    """
    if when is None:
        when = datetime.now(timezone.utc)
    elif when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    return when.astimezone(timezone.utc).strftime(config.TIMESTAMP_FORMAT)


class SignedRequest(namedtuple("SignedRequest", ["url", "headers"])):
    """The URL a request must be sent to and the authentication headers
    signed over exactly that URL.
    """

    __slots__ = ()


def sign_request(method, url, public_key, private_key,
                 timestamp=None) -> SignedRequest:
    """Sign a write request.

    The signature covers the canonical form of `url`, which is returned with
    the headers. Send the request to the returned URL, since the server
    verifies against the URL it receives.

    Args:
        method: HTTP method.
        url: Full request URL.
        public_key: Public key the request is made as.
        private_key: Private key paired with `public_key`.
        timestamp: ``datetime`` or preformatted timestamp. Defaults to now.
    """
    if not isinstance(timestamp, str):
        timestamp = format_timestamp(timestamp)

    url = canonical_url(url)
    context = SigningContext(
        public_key, private_key,
        canonical_request(method, url, public_key, timestamp))

    return SignedRequest(url, {
        config.SIGNATURE_HEADER: context.signature,
        config.TIMESTAMP_HEADER: timestamp,
    })


def sign_url(url, private_key, expires=None) -> str:
    """Return `url` in canonical form with an ``accessToken`` appended.

    Args:
        url: URL to sign. An existing access token is replaced.
        private_key: Private key of the user the URL belongs to.
        expires: Optional expiry as unix seconds, a ``datetime`` or a
            ``timedelta`` from now. Added to the URL as ``expires`` and
            covered by the signature.
    """
    drop = {config.ACCESS_TOKEN_PARAM}
    params = None

    if expires is not None:
        drop.add(config.EXPIRES_PARAM)
        params = [(config.EXPIRES_PARAM, str(_unix_time(expires)))]

    signed = canonical_url(_without(url, drop), params)
    context = SigningContext(None, private_key, signed)

    separator = "&" if urlsplit(signed).query else "?"
    return "{0}{1}{2}={3}".format(signed, separator,
                                  config.ACCESS_TOKEN_PARAM,
                                  context.signature)


def verify_url(url, private_key, now=None) -> bool:
    """Check the access token of a URL built by :func:`sign_url`.

    Returns ``False`` for a missing, duplicated or wrong token and for an
    expired URL.
    """
    if not private_key:
        return False

    pairs = parse_qsl(urlsplit(url).query, keep_blank_values=True)
    tokens = [value for key, value in pairs
              if key == config.ACCESS_TOKEN_PARAM]

    if len(tokens) != 1:
        return False

    unsigned = canonical_url(_without(url, {config.ACCESS_TOKEN_PARAM}))
    if not hmac.compare_digest(sign(private_key, unsigned), tokens[0]):
        return False

    expiries = [value for key, value in pairs
                if key == config.EXPIRES_PARAM]
    if expiries:
        if now is None:
            now = time.time()
        try:
            return all(int(value) >= now for value in expiries)
        except ValueError:
            return False

    return True


def _pairs(params):
    items = params.items() if hasattr(params, "items") else params
    pairs = []

    for key, value in items:
        if value is None:
            continue

        if isinstance(value, (list, tuple)):
            if not key.endswith("[]"):
                key += "[]"
            pairs.extend((key, str(item)) for item in value)
        else:
            pairs.append((key, str(value)))

    return pairs


def _without(url, names):
    parts = urlsplit(url)
    pairs = [(key, value)
             for key, value in parse_qsl(parts.query, keep_blank_values=True)
             if key not in names]
    return urlunsplit(parts._replace(query=canonical_query(pairs)))


def _unix_time(expires) -> int:
    if isinstance(expires, timedelta):
        expires = datetime.now(timezone.utc) + expires

    if isinstance(expires, datetime):
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return int(expires.timestamp())

    return int(expires)
