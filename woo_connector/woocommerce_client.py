"""
woocommerce_client.py

WooCommerceClient supporting:
- WooCommerceClient()                                   (env config)
- WooCommerceClient(config=WooCommerceConfig(...))
- WooCommerceClient(url=..., consumer_key=..., consumer_secret=..., ...)

Authentication per WooCommerce REST docs (as implemented here):
- HTTPS: Basic Auth header (default), or consumer_key/consumer_secret in the
  query string when query_string_auth is on (weaker; only for servers that
  strip the Authorization header)
- HTTP:  one-legged OAuth1.0a signature in the query string (see oauth.py)
"""

from __future__ import annotations

import json as jsonlib
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import requests

from woo_connector.config import DEFAULT_TIMEOUT, DEFAULT_VERSION, USER_AGENT, env, env_bool, env_int
from woo_connector.errors import (
    WooCommerceAuthError,
    WooCommerceConfigError,
    WooCommerceHTTPError,
)
from woo_connector.oauth import build_oauth_url

logger = logging.getLogger(__name__)


def _mask(s: str, keep: int = 4) -> str:
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return s[:keep] + "*" * (len(s) - keep)


class AuthMode(str, Enum):
    BASIC_AUTH = "basic"
    QUERY_STRING_CREDENTIALS = "query_string"
    OAUTH_SIGNED = "oauth"


def _parse_auth_mode(raw: Optional[str]) -> Optional[AuthMode]:
    if not raw:
        return None
    try:
        return AuthMode(raw.strip().lower())
    except ValueError as e:
        choices = ", ".join(m.value for m in AuthMode)
        raise WooCommerceConfigError(f"Unknown auth mode {raw!r} (expected one of: {choices})") from e


@dataclass(frozen=True)
class WooCommerceConfig:
    url: str
    consumer_key: str
    consumer_secret: str
    version: str = DEFAULT_VERSION
    wp_api: bool = True
    timeout_seconds: int = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    query_string_auth: bool = False
    auth_mode: Optional[AuthMode] = None
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if isinstance(self.auth_mode, str) and not isinstance(self.auth_mode, AuthMode):
            object.__setattr__(self, "auth_mode", _parse_auth_mode(self.auth_mode))

    def __repr__(self) -> str:
        return (
            f"WooCommerceConfig(url={self.url!r}, consumer_key={_mask(self.consumer_key)!r}, "
            f"consumer_secret={_mask(self.consumer_secret)!r}, version={self.version!r}, "
            f"auth_mode={self.resolved_auth_mode().value!r})"
        )

    @property
    def is_ssl(self) -> bool:
        return self.url.lower().startswith("https")

    def resolved_auth_mode(self) -> AuthMode:
        if self.auth_mode is not None:
            return self.auth_mode
        if self.is_ssl and not self.query_string_auth:
            return AuthMode.BASIC_AUTH
        if self.is_ssl:
            return AuthMode.QUERY_STRING_CREDENTIALS
        return AuthMode.OAUTH_SIGNED

    def validate(self) -> "WooCommerceConfig":
        if not self.url:
            raise WooCommerceConfigError("Missing store url / WOOCOMMERCE_URL")
        if not self.consumer_key:
            raise WooCommerceConfigError("Missing consumer_key / WOOCOMMERCE_CONSUMER_KEY")
        if not self.consumer_secret:
            raise WooCommerceConfigError("Missing consumer_secret / WOOCOMMERCE_CONSUMER_SECRET")

        mode = self.resolved_auth_mode()
        if mode is not AuthMode.OAUTH_SIGNED and not self.is_ssl:
            raise WooCommerceConfigError(
                f"Auth mode {mode.value!r} sends credentials in the clear; it requires an https store url"
            )
        return self

    @staticmethod
    def from_env() -> "WooCommerceConfig":
        return WooCommerceConfig.from_values()

    @staticmethod
    def from_values(
        *,
        url: Optional[str] = None,
        consumer_key: Optional[str] = None,
        consumer_secret: Optional[str] = None,
        version: Optional[str] = None,
        wp_api: Optional[bool] = None,
        timeout_seconds: Optional[int] = None,
        verify_ssl: Optional[bool] = None,
        query_string_auth: Optional[bool] = None,
        auth_mode: Optional[str] = None,
    ) -> "WooCommerceConfig":
        u = (url or env("WOOCOMMERCE_URL")).strip().rstrip("/")
        k = (consumer_key or env("WOOCOMMERCE_CONSUMER_KEY")).strip()
        s = (consumer_secret or env("WOOCOMMERCE_CONSUMER_SECRET")).strip()
        v = (version or env("WOOCOMMERCE_VERSION", DEFAULT_VERSION)).strip("/")
        t = int(timeout_seconds if timeout_seconds is not None else env_int("WOOCOMMERCE_TIMEOUT", DEFAULT_TIMEOUT))

        cfg = WooCommerceConfig(
            url=u,
            consumer_key=k,
            consumer_secret=s,
            version=v,
            wp_api=env_bool("WOOCOMMERCE_WP_API", True) if wp_api is None else wp_api,
            timeout_seconds=t,
            verify_ssl=env_bool("WOOCOMMERCE_VERIFY_SSL", True) if verify_ssl is None else verify_ssl,
            query_string_auth=(
                env_bool("WOOCOMMERCE_QUERY_STRING_AUTH", False) if query_string_auth is None else query_string_auth
            ),
            auth_mode=_parse_auth_mode(auth_mode or env("WOOCOMMERCE_AUTH_MODE")),
        )
        return cfg.validate()


class WooCommerceClient:
    def __init__(
        self,
        config: Optional[WooCommerceConfig] = None,
        *,
        url: Optional[str] = None,
        consumer_key: Optional[str] = None,
        consumer_secret: Optional[str] = None,
        version: Optional[str] = None,
        wp_api: Optional[bool] = None,
        timeout_seconds: Optional[int] = None,
        verify_ssl: Optional[bool] = None,
        query_string_auth: Optional[bool] = None,
        auth_mode: Optional[str] = None,
        session: Optional[requests.Session] = None,
        raise_errors: bool = True,
    ):
        if config is None:
            config = WooCommerceConfig.from_values(
                url=url,
                consumer_key=consumer_key,
                consumer_secret=consumer_secret,
                version=version,
                wp_api=wp_api,
                timeout_seconds=timeout_seconds,
                verify_ssl=verify_ssl,
                query_string_auth=query_string_auth,
                auth_mode=auth_mode,
            )
        else:
            config.validate()

        self.config = config
        self.auth_mode = config.resolved_auth_mode()
        self.session = session or requests.Session()
        self.raise_errors = raise_errors

    def get_url(self, endpoint: str) -> str:
        api_path = "wp-json" if self.config.wp_api else "wc-api"
        return f"{self.config.url}/{api_path}/{self.config.version}/{endpoint.lstrip('/')}"

    def _oauth_url(self, url: str, method: str, params: Optional[Dict[str, Any]]) -> str:
        # the signed parameter set is single-valued; refuse rather than drop values
        multi = sorted(k for k, v in (params or {}).items() if isinstance(v, (list, tuple, set)))
        if multi:
            raise WooCommerceConfigError(
                f"OAuth-signed requests take one value per query parameter; got multiple for: {', '.join(multi)}. "
                "Join them (e.g. include='1,2') or use an https store url."
            )
        return build_oauth_url(
            url,
            self.config.consumer_key,
            self.config.consumer_secret,
            self.config.version,
            method,
            timestamp=int(time.time()),
            params={k: str(v) for k, v in (params or {}).items()},
        )

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """
        params may hold lists (repeated keys) under Basic / query-string auth.
        OAuth-signed requests raise WooCommerceConfigError for them instead.
        """
        method_u = method.upper()
        url = self.get_url(endpoint)

        req_headers = {
            "user-agent": self.config.user_agent,
            "accept": "application/json",
        }
        body: Optional[bytes] = None
        if data is not None:
            body = jsonlib.dumps(data, ensure_ascii=False).encode("utf-8")
            req_headers["content-type"] = "application/json;charset=utf-8"
        req_headers.update(headers or {})

        req_params: Optional[Dict[str, Any]] = dict(params or {})
        auth = None

        if self.auth_mode is AuthMode.BASIC_AUTH:
            auth = (self.config.consumer_key, self.config.consumer_secret)
        elif self.auth_mode is AuthMode.QUERY_STRING_CREDENTIALS:
            req_params["consumer_key"] = self.config.consumer_key
            req_params["consumer_secret"] = self.config.consumer_secret
        else:
            url = self._oauth_url(url, method_u, req_params)
            req_params = None

        logger.info(
            "WooCommerce %s %s",
            method_u,
            endpoint,
            extra={"auth_mode": self.auth_mode.value, "consumer_key": _mask(self.config.consumer_key)},
        )

        try:
            resp = self.session.request(
                method=method_u,
                url=url,
                params=req_params,
                data=body,
                headers=req_headers,
                auth=auth,
                timeout=self.config.timeout_seconds,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as e:
            raise WooCommerceHTTPError(f"Network error calling WooCommerce {method_u} {endpoint}: {e}") from e

        if self.raise_errors:
            self._raise_for_status(resp, method_u, endpoint)
        return resp

    def _raise_for_status(self, resp: requests.Response, method: str, endpoint: str) -> None:
        if resp.status_code < 400:
            return

        body_text = (resp.text or "")[:800]
        if resp.status_code in (401, 403):
            raise WooCommerceAuthError(
                f"WooCommerce auth failed ({resp.status_code}) for {method} {endpoint}. Response: {body_text}",
                status_code=resp.status_code,
                response=resp,
            )
        raise WooCommerceHTTPError(
            f"WooCommerce http error ({resp.status_code}) for {method} {endpoint}. Response: {body_text}",
            status_code=resp.status_code,
            response=resp,
        )

    def get(self, endpoint: str, *, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, data: Any, *, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("POST", endpoint, data=data, params=params)

    def put(self, endpoint: str, data: Any, *, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("PUT", endpoint, data=data, params=params)

    def delete(self, endpoint: str, *, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("DELETE", endpoint, params=params)

    def options(self, endpoint: str, *, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.request("OPTIONS", endpoint, params=params)
