import logging

import pytest
from fastapi.testclient import TestClient

from conftest import FakeResponse, RecordingSession
from woo_connector.main import app, get_client
from woo_connector.woocommerce_client import WooCommerceClient


@pytest.fixture
def api():
    holder = {}

    def use_session(session):
        holder["client"] = WooCommerceClient(
            url="https://shop.example.com", consumer_key="ck", consumer_secret="cs", session=session
        )
        app.dependency_overrides[get_client] = lambda: holder["client"]
        return TestClient(app)

    yield use_session
    app.dependency_overrides.clear()


def test_health():
    res = TestClient(app).get("/")
    assert res.status_code == 200
    assert res.json()["ok"] is True
    assert res.json()["service"] == "woocommerce-connector"


def test_system_status_passthrough(api):
    session = RecordingSession(FakeResponse(200, {"environment": {"version": "8.5.0"}}))
    res = api(session).get("/woo/system_status")

    assert res.status_code == 200
    assert res.json() == {"ok": True, "data": {"environment": {"version": "8.5.0"}}}
    assert session.calls[0]["url"] == "https://shop.example.com/wp-json/wc/v3/system_status"


def test_get_passthrough_forwards_query(api):
    session = RecordingSession(FakeResponse(200, [{"id": 1}]))
    res = api(session).get("/woo/products/categories", params={"per_page": "5"})

    assert res.status_code == 200
    assert res.json()["data"] == [{"id": 1}]
    call = session.calls[0]
    assert call["url"] == "https://shop.example.com/wp-json/wc/v3/products/categories"
    assert call["params"] == {"per_page": "5"}


def test_non_json_body_is_wrapped(api):
    session = RecordingSession(FakeResponse(200, None, text="<html>"))
    res = api(session).get("/woo/products")
    assert res.json()["data"] == {"raw": "<html>"}


def test_upstream_auth_failure_maps_to_401(api):
    session = RecordingSession(FakeResponse(401, {"code": "woocommerce_rest_authentication_error"}))
    res = api(session).get("/woo/products")
    assert res.status_code == 401
    assert res.json()["detail"]["error"] == "WooCommerce auth failed"


def test_upstream_http_error_keeps_status(api):
    session = RecordingSession(FakeResponse(404, {"code": "rest_no_route"}))
    res = api(session).get("/woo/nope")
    assert res.status_code == 404


def test_network_error_maps_to_502(api, failing_session):
    res = api(failing_session).get("/woo/products")
    assert res.status_code == 502


def test_missing_config_is_500():
    res = TestClient(app).get("/woo/products")
    assert res.status_code == 500
    assert res.json()["detail"]["error"] == "WooCommerce not configured"


@pytest.fixture
def sentinel_handler():
    handler = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(handler)
    yield handler
    root.removeHandler(handler)


def test_requests_leave_host_logging_alone(sentinel_handler):
    TestClient(app).get("/")
    assert sentinel_handler in logging.getLogger().handlers


def test_startup_configures_logging(sentinel_handler):
    with TestClient(app) as client:
        assert client.get("/").status_code == 200
        handlers = logging.getLogger().handlers
        assert sentinel_handler not in handlers
        assert len(handlers) == 1
