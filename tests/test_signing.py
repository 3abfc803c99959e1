# -*- coding: utf-8 -*-

from collections import OrderedDict
from datetime import datetime, timedelta, timezone

import pytest

import imboclient
from imboclient import config, signing
from imboclient.exceptions import SignatureError


PUBLIC_KEY = "espen"
PRIVATE_KEY = "a4cb1ed2b4f4ce4b1a3f5a5bcb2a5ef3d44d9c6b"
IMAGE_URL = "https://imbo.example.com/users/espen/images/929db9c5fc3099f7576f5655207eba47.png"


def test_sign_known_vector():
    assert signing.sign(
        "key", "The quick brown fox jumps over the lazy dog") == \
        "f7bc83f430538424b13298e6aa6fb143ef4d59a14946175997479dbc2d1a3cd8"


def test_sign_deterministic():
    assert signing.sign(PRIVATE_KEY, "data") == \
        signing.sign(PRIVATE_KEY, "data")


@pytest.mark.parametrize("key,data", [
    (PRIVATE_KEY + "x", "data"),
    (PRIVATE_KEY, "datb"),
    (PRIVATE_KEY, "data "),
    ("", "data"),
])
def test_sign_sensitive_to_inputs(key, data):
    assert signing.sign(key, data) != signing.sign(PRIVATE_KEY, "data")


def test_sign_hex_output():
    signature = signing.sign(PRIVATE_KEY, u"æøå")

    assert len(signature) == 64
    assert signature == signature.lower()
    int(signature, 16)


def test_sha256_alias():
    assert imboclient.sha256 is signing.sign


def test_canonical_query_insertion_order():
    first = OrderedDict([("width", 100), ("height", 50), ("page", 2)])
    second = OrderedDict([("page", 2), ("width", 100), ("height", 50)])

    assert signing.canonical_query(first) == \
        signing.canonical_query(second) == "height=50&page=2&width=100"


def test_canonical_query_pairs():
    assert signing.canonical_query([("b", "2"), ("a", "1")]) == "a=1&b=2"


def test_canonical_query_transformations_keep_order():
    thumb_first = signing.canonical_query(
        {"t": ["thumbnail:width=50", "border"], "a": "1"})
    border_first = signing.canonical_query(
        {"a": "1", "t": ["border", "thumbnail:width=50"]})

    assert thumb_first == "a=1&t[]=thumbnail:width%3D50&t[]=border"
    assert thumb_first != border_first


def test_canonical_query_skips_none():
    assert signing.canonical_query({"a": None, "b": "1"}) == "b=1"


def test_canonical_query_escapes():
    assert signing.canonical_query({"q": "a b&c"}) == "q=a%20b%26c"


def test_canonical_url_order_independent():
    assert signing.canonical_url(IMAGE_URL + "?b=2&a=1") == \
        signing.canonical_url(IMAGE_URL + "?a=1&b=2") == \
        IMAGE_URL + "?a=1&b=2"


def test_canonical_url_normalizes():
    assert signing.canonical_url("HTTPS://Imbo.Example.com?b=2&a=1#top") == \
        "https://imbo.example.com/?a=1&b=2"


def test_canonical_url_merges_params():
    assert signing.canonical_url(IMAGE_URL + "?t[]=border",
                                 {"t": ["thumbnail"], "a": 1}) == \
        IMAGE_URL + "?a=1&t[]=border&t[]=thumbnail"


def test_canonical_url_idempotent():
    url = IMAGE_URL + "?t[]=border:color=000&q=a b"
    once = signing.canonical_url(url)

    assert signing.canonical_url(once) == once


def test_canonical_request():
    payload = signing.canonical_request(
        "put", IMAGE_URL, PUBLIC_KEY, "2013-01-01T12:00:00Z")

    assert payload == \
        "PUT|" + IMAGE_URL + "|espen|2013-01-01T12:00:00Z"


def test_canonical_request_query_order():
    first = signing.canonical_request(
        "GET", IMAGE_URL + "?b=2&a=1", PUBLIC_KEY, "2013-01-01T12:00:00Z")
    second = signing.canonical_request(
        "GET", IMAGE_URL + "?a=1&b=2", PUBLIC_KEY, "2013-01-01T12:00:00Z")

    assert first == second


@pytest.mark.parametrize("when,expected", [
    (datetime(2013, 1, 1, 12, 0, 0), "2013-01-01T12:00:00Z"),
    (datetime(2013, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
     "2013-01-01T12:00:00Z"),
    (datetime(2013, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2))),
     "2013-01-01T12:00:00Z"),
])
def test_format_timestamp(when, expected):
    assert signing.format_timestamp(when) == expected


def test_format_timestamp_now():
    timestamp = signing.format_timestamp()

    assert timestamp.endswith("Z")
    assert datetime.strptime(timestamp, config.TIMESTAMP_FORMAT)


def test_sign_request():
    signed = signing.sign_request("PUT", IMAGE_URL, PUBLIC_KEY, PRIVATE_KEY,
                                  timestamp="2013-01-01T12:00:00Z")
    payload = signing.canonical_request("PUT", IMAGE_URL, PUBLIC_KEY,
                                        "2013-01-01T12:00:00Z")

    assert isinstance(signed, signing.SignedRequest)
    assert signed.url == IMAGE_URL
    assert signed.headers == {
        "X-Imbo-Authenticate-Signature": signing.sign(PRIVATE_KEY, payload),
        "X-Imbo-Authenticate-Timestamp": "2013-01-01T12:00:00Z",
    }
    assert PRIVATE_KEY not in "".join(signed.headers.values())


def test_sign_request_signs_the_url_to_send():
    url = IMAGE_URL.replace("imbo.example.com", "Imbo.Example.com") + \
        "?t[]=border&a=1"
    signed = signing.sign_request("GET", url, PUBLIC_KEY, PRIVATE_KEY,
                                  timestamp="2013-01-01T12:00:00Z")

    assert signed.url == IMAGE_URL + "?a=1&t[]=border"

    # What the server rebuilds from the URL it receives.
    received = "|".join(["GET", signed.url, PUBLIC_KEY,
                         "2013-01-01T12:00:00Z"])
    assert signed.headers["X-Imbo-Authenticate-Signature"] == \
        signing.sign(PRIVATE_KEY, received)


def test_sign_request_datetime():
    when = datetime(2013, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    assert signing.sign_request("PUT", IMAGE_URL, PUBLIC_KEY, PRIVATE_KEY,
                                timestamp=when) == \
        signing.sign_request("PUT", IMAGE_URL, PUBLIC_KEY, PRIVATE_KEY,
                             timestamp="2013-01-01T12:00:00Z")


def test_sign_request_requires_private_key():
    with pytest.raises(SignatureError):
        signing.sign_request("PUT", IMAGE_URL, PUBLIC_KEY, "")


def test_sign_request_private_key_equal_to_public_key():
    signed = signing.sign_request("GET", IMAGE_URL, "secret", "secret",
                                  timestamp="2013-01-01T12:00:00Z")
    payload = "GET|" + IMAGE_URL + "|secret|2013-01-01T12:00:00Z"

    assert signed.headers["X-Imbo-Authenticate-Signature"] == \
        signing.sign("secret", payload)


def test_signing_context_hides_private_key():
    context = signing.SigningContext(PUBLIC_KEY, PRIVATE_KEY, "payload")

    assert PRIVATE_KEY not in repr(context)
    assert context.signature == signing.sign(PRIVATE_KEY, "payload")


def test_signing_context_accepts_key_inside_payload():
    context = signing.SigningContext(PUBLIC_KEY, "png",
                                     "GET|" + IMAGE_URL)

    assert context.signature == signing.sign("png", "GET|" + IMAGE_URL)


def test_sign_url_key_inside_url():
    url = signing.sign_url(IMAGE_URL, "png")

    assert url == "{0}?accessToken={1}".format(
        IMAGE_URL, signing.sign("png", IMAGE_URL))
    assert signing.verify_url(url, "png")


def test_sign_url():
    url = signing.sign_url(IMAGE_URL + "?t[]=thumbnail", PRIVATE_KEY)
    unsigned = IMAGE_URL + "?t[]=thumbnail"

    assert url == "{0}&accessToken={1}".format(
        unsigned, signing.sign(PRIVATE_KEY, unsigned))
    assert PRIVATE_KEY not in url


def test_sign_url_without_query():
    url = signing.sign_url(IMAGE_URL, PRIVATE_KEY)

    assert url.startswith(IMAGE_URL + "?accessToken=")
    assert signing.verify_url(url, PRIVATE_KEY)


def test_sign_url_replaces_token():
    url = signing.sign_url(IMAGE_URL + "?a=1", PRIVATE_KEY)

    assert signing.sign_url(url, PRIVATE_KEY) == url


def test_verify_url():
    url = signing.sign_url(IMAGE_URL + "?t[]=thumbnail&t[]=border",
                           PRIVATE_KEY)

    assert signing.verify_url(url, PRIVATE_KEY)
    assert not signing.verify_url(url, PRIVATE_KEY + "x")
    assert not signing.verify_url(url, "")
    assert not signing.verify_url(url.replace("border", "sepia"),
                                  PRIVATE_KEY)
    assert not signing.verify_url(IMAGE_URL, PRIVATE_KEY)


def test_verify_url_swapped_transformations():
    url = signing.sign_url(IMAGE_URL + "?t[]=thumbnail&t[]=border",
                           PRIVATE_KEY)
    token = url.rsplit("=", 1)[1]
    swapped = IMAGE_URL + "?t[]=border&t[]=thumbnail&accessToken=" + token

    assert not signing.verify_url(swapped, PRIVATE_KEY)


def test_verify_url_reordered_params():
    url = signing.sign_url(IMAGE_URL + "?b=2&a=1", PRIVATE_KEY)
    token = url.rsplit("=", 1)[1]
    reordered = IMAGE_URL + "?accessToken={0}&b=2&a=1".format(token)

    assert signing.verify_url(reordered, PRIVATE_KEY)


def test_verify_url_duplicate_token():
    url = signing.sign_url(IMAGE_URL, PRIVATE_KEY)
    token = url.rsplit("=", 1)[1]

    assert not signing.verify_url(url + "&accessToken=" + token, PRIVATE_KEY)


def test_sign_url_expires():
    url = signing.sign_url(IMAGE_URL, PRIVATE_KEY, expires=1000)

    assert "expires=1000" in url
    assert signing.verify_url(url, PRIVATE_KEY, now=999)
    assert signing.verify_url(url, PRIVATE_KEY, now=1000)
    assert not signing.verify_url(url, PRIVATE_KEY, now=1001)
    assert not signing.verify_url(url.replace("expires=1000", "expires=9999"),
                                  PRIVATE_KEY, now=1001)


def test_sign_url_expires_replaces_previous():
    url = signing.sign_url(IMAGE_URL + "?expires=5", PRIVATE_KEY,
                           expires=1000)

    assert "expires=5" not in url
    assert url.count("expires=") == 1


def test_sign_url_expires_datetime():
    when = datetime(2030, 1, 1, tzinfo=timezone.utc)
    url = signing.sign_url(IMAGE_URL, PRIVATE_KEY, expires=when)

    assert "expires={0}".format(int(when.timestamp())) in url


def test_sign_url_expires_timedelta():
    url = signing.sign_url(IMAGE_URL, PRIVATE_KEY,
                           expires=timedelta(hours=1))

    assert signing.verify_url(url, PRIVATE_KEY)
