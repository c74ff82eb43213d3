"""
oauth.py

One-legged OAuth1.0a-style signing for WooCommerce over plain HTTP.

  parameter string = sorted "k=v" pairs (both percent-encoded) joined by "&"
  base string      = METHOD & enc(base_url) & enc(parameter string)
  signing key      = consumer_secret + "&"   (bare secret for legacy v1/v2)
  signature        = base64(HMAC_SHA256(signing key, base string))

Encoding is form-style (space -> "+"), identical on signing and transmission.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import time
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, quote_plus, urlencode, urlsplit, urlunsplit

from woo_connector.errors import InvalidURLError, SigningError

logger = logging.getLogger(__name__)

SIGNATURE_METHOD = "HMAC-SHA256"
SIGNATURE_PARAM = "oauth_signature"

# legacy wc-api versions sign with the bare secret
BARE_SECRET_VERSIONS = ("v1", "v2")


def percent_encode(value: str) -> str:
    return quote_plus(str(value), safe="")


def generate_nonce() -> str:
    return secrets.token_hex(32)


def split_url(url: str) -> Tuple[str, Dict[str, str]]:
    """
    Returns (base_url, params): the URL without query/fragment, and its query
    parameters with the first value winning for repeated keys.
    """
    if not url or not isinstance(url, str):
        raise InvalidURLError(f"Cannot sign an empty URL: {url!r}")

    try:
        parts = urlsplit(url)
        parts.port  # raises on a malformed port
    except ValueError as e:
        raise InvalidURLError(f"Unparseable URL {url!r}: {e}") from e

    if not parts.scheme or not parts.netloc:
        raise InvalidURLError(f"URL must be absolute (scheme and host): {url!r}")

    params: Dict[str, str] = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        params.setdefault(key, value)

    base_url = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    return base_url, params


def parameter_string(params: Mapping[str, str]) -> str:
    pairs = []
    for key in sorted(k for k in params if k != SIGNATURE_PARAM):
        pairs.append(f"{percent_encode(key)}={percent_encode(params[key])}")
    return "&".join(pairs)


def signature_base_string(method: str, base_url: str, params: Mapping[str, str]) -> str:
    return "&".join(
        (
            method.upper(),
            percent_encode(base_url),
            percent_encode(parameter_string(params)),
        )
    )


def signing_key(consumer_secret: str, version: str) -> bytes:
    if not consumer_secret:
        raise SigningError("Missing consumer secret; cannot derive a signing key")
    key = consumer_secret.encode("utf-8")
    if version not in BARE_SECRET_VERSIONS:
        key += b"&"
    return key


def generate_oauth_signature(
    params: Mapping[str, str],
    base_url: str,
    method: str,
    consumer_secret: str,
    version: str,
) -> str:
    if not method:
        raise SigningError("Missing HTTP method; cannot build a signature base string")

    base_string = signature_base_string(method, base_url, params)
    digest = hmac.new(signing_key(consumer_secret, version), base_string.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


class OAuth:
    """Signs a single request; build one per call."""

    def __init__(
        self,
        url: str,
        consumer_key: str,
        consumer_secret: str,
        version: str,
        method: str,
        timestamp: Optional[int] = None,
        nonce: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
    ):
        self.url = url
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.version = version
        self.method = method.upper()
        self.timestamp = int(time.time()) if timestamp is None else int(timestamp)
        self.nonce = nonce
        self.params = dict(params or {})

    def oauth_params(self) -> Tuple[str, Dict[str, str]]:
        base_url, params = split_url(self.url)
        # explicit params override the URL's own query
        params.update((k, str(v)) for k, v in self.params.items())

        params["oauth_consumer_key"] = self.consumer_key
        params["oauth_timestamp"] = str(self.timestamp)
        params["oauth_nonce"] = self.nonce or generate_nonce()
        params["oauth_signature_method"] = SIGNATURE_METHOD
        params.pop(SIGNATURE_PARAM, None)
        return base_url, params

    def get_oauth_url(self) -> str:
        base_url, params = self.oauth_params()

        signature = generate_oauth_signature(params, base_url, self.method, self.consumer_secret, self.version)
        params[SIGNATURE_PARAM] = signature

        logger.debug(
            "Signed %s %s",
            self.method,
            base_url,
            extra={"oauth_timestamp": params["oauth_timestamp"], "signature_prefix": signature[:10]},
        )
        return f"{base_url}?{urlencode(sorted(params.items()))}"


def build_oauth_url(
    url: str,
    consumer_key: str,
    consumer_secret: str,
    version: str,
    method: str,
    timestamp: Optional[int] = None,
    nonce: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
) -> str:
    return OAuth(url, consumer_key, consumer_secret, version, method, timestamp, nonce, params).get_oauth_url()


def verify_oauth_url(
    signed_url: str,
    method: str,
    consumer_secret: str,
    version: str,
    max_age: Optional[int] = None,
    now: Optional[int] = None,
) -> bool:
    """
    Server-side check: rebuild the signature from the URL's own parameters and
    compare in constant time. With max_age, also reject stale or future
    timestamps outside the window.
    """
    base_url, params = split_url(signed_url)
    provided = params.get(SIGNATURE_PARAM)
    if not provided:
        return False

    if max_age is not None:
        try:
            ts = int(params.get("oauth_timestamp", ""))
        except ValueError:
            return False
        current = int(time.time()) if now is None else now
        if abs(current - ts) > max_age:
            return False

    expected = generate_oauth_signature(params, base_url, method, consumer_secret, version)
    return hmac.compare_digest(expected, provided)
