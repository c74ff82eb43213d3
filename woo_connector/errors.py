from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    SIGNING_FAILURE = "signing_failure"
    CONFIG = "config"
    AUTH = "auth"
    HTTP = "http"


class WooCommerceError(Exception):
    kind: ErrorKind = ErrorKind.HTTP


class InvalidURLError(WooCommerceError):
    kind = ErrorKind.INVALID_URL


class SigningError(WooCommerceError):
    kind = ErrorKind.SIGNING_FAILURE


class WooCommerceConfigError(WooCommerceError):
    kind = ErrorKind.CONFIG


class WooCommerceHTTPError(WooCommerceError):
    kind = ErrorKind.HTTP

    def __init__(self, message: str, *, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class WooCommerceAuthError(WooCommerceHTTPError):
    kind = ErrorKind.AUTH
