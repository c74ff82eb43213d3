# woo_connector/main.py
from typing import Any, Dict

from fastapi import Depends, FastAPI, HTTPException, Request

from woo_connector.config import LOG_LEVEL, SERVICE_NAME, __version__, setup_logging
from woo_connector.errors import WooCommerceAuthError, WooCommerceConfigError, WooCommerceError, WooCommerceHTTPError
from woo_connector.woocommerce_client import WooCommerceClient

app = FastAPI(title="WooCommerce Connector", version=__version__)


# ---- Startup ----
@app.on_event("startup")
def startup():
    setup_logging(LOG_LEVEL)


def get_client() -> WooCommerceClient:
    # Lazy client creation so app can boot even if env vars are temporarily missing
    try:
        return WooCommerceClient()
    except WooCommerceConfigError as e:
        raise HTTPException(status_code=500, detail={"error": "WooCommerce not configured", "message": str(e)})


def _passthrough(c: WooCommerceClient, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
    try:
        resp = c.get(endpoint, params=params)
    except WooCommerceAuthError as e:
        raise HTTPException(status_code=401, detail={"error": "WooCommerce auth failed", "message": str(e)})
    except WooCommerceHTTPError as e:
        raise HTTPException(
            status_code=e.status_code or 502,
            detail={"error": "WooCommerce request failed", "message": str(e)},
        )
    except WooCommerceError as e:
        raise HTTPException(status_code=500, detail={"error": e.kind.value, "message": str(e)})

    try:
        data = resp.json()
    except ValueError:
        data = {"raw": resp.text}
    return {"ok": True, "data": data}


# ---- Health ----
@app.get("/")
def root():
    return {"ok": True, "service": SERVICE_NAME, "version": __version__}


# ---- WooCommerce passthroughs ----
@app.get("/woo/system_status")
def system_status(c: WooCommerceClient = Depends(get_client)):
    return _passthrough(c, "system_status", {})


@app.get("/woo/{endpoint:path}")
def woo_get(endpoint: str, request: Request, c: WooCommerceClient = Depends(get_client)):
    """
    GET passthrough, e.g. /woo/products?per_page=5 -> {store}/wp-json/wc/v3/products?per_page=5
    """
    return _passthrough(c, endpoint, dict(request.query_params))
