import time

from typing import Any

import pytest

from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.middleware.request_context import (
    REQUEST_ID_HEADER,
    REQUEST_ID_PREFIX,
    RESPONSE_TIME_HEADER,
    RequestContext,
    RequestContextMiddleware,
    clear_request_context,
    generate_request_id,
    get_request_context,
    get_request_id,
    set_request_context,
    update_request_context,
)


def test_request_context_dataclass() -> None:
    ctx = RequestContext(request_id="123")
    assert ctx.request_id == "123"
    assert ctx.elapsed_ms >= 0
    assert "request_id" in ctx.to_log_context()

    time.sleep(0.01)
    assert ctx.elapsed_ms > 0


def test_log_context_optional_fields() -> None:
    ctx = RequestContext(request_id="r", path="/p", method="POST")
    assert "client_ip" not in ctx.to_log_context()
    assert "step_name" not in ctx.to_log_context()

    ctx.client_ip = "10.0.0.1"
    ctx.step_name = "Summarize"
    ctx.extra["model"] = "gpt-4.1"
    log_context = ctx.to_log_context()

    assert log_context["client_ip"] == "10.0.0.1"
    assert log_context["step_name"] == "Summarize"
    assert log_context["model"] == "gpt-4.1"


def test_generate_request_id() -> None:
    rid1 = generate_request_id()
    rid2 = generate_request_id()
    assert rid1.startswith(REQUEST_ID_PREFIX)
    assert len(rid1) == len(REQUEST_ID_PREFIX) + 16
    assert rid1 != rid2

    assert generate_request_id("run_").startswith("run_")


def test_context_var_management() -> None:
    ctx = RequestContext(request_id="test")

    set_request_context(ctx)
    assert get_request_context() == ctx
    assert get_request_id() == "test"

    update_request_context(step_name="Research", model="gpt-4o")
    assert get_request_context().step_name == "Research"
    assert get_request_context().extra == {"model": "gpt-4o"}

    clear_request_context()
    assert get_request_context() is None
    assert get_request_id() is None


def test_update_without_context_is_noop() -> None:
    update_request_context(step_name="ignored")
    assert get_request_context() is None


def test_update_cannot_replace_extra() -> None:
    set_request_context(RequestContext(request_id="x"))
    update_request_context(extra="value")
    assert get_request_context().extra == {"extra": "value"}


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/context")
    def get_ctx() -> dict[str, Any]:
        ctx = get_request_context()
        return {
            "request_id": ctx.request_id,
            "client_ip": ctx.client_ip,
            "path": ctx.path,
            "method": ctx.method,
        }

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def test_middleware_sets_context_and_headers(client: TestClient) -> None:
    response = client.get("/context")

    assert response.status_code == 200
    data = response.json()
    assert data["request_id"].startswith(REQUEST_ID_PREFIX)
    assert data["path"] == "/context"
    assert data["method"] == "GET"
    assert response.headers[REQUEST_ID_HEADER] == data["request_id"]
    assert response.headers[RESPONSE_TIME_HEADER].endswith("ms")


def test_middleware_honors_incoming_request_id(client: TestClient) -> None:
    response = client.get("/context", headers={REQUEST_ID_HEADER: "upstream-42"})

    assert response.json()["request_id"] == "upstream-42"
    assert response.headers[REQUEST_ID_HEADER] == "upstream-42"


def test_middleware_uses_forwarded_for(client: TestClient) -> None:
    response = client.get("/context", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert response.json()["client_ip"] == "203.0.113.7"


def test_middleware_falls_back_to_peer_address(client: TestClient) -> None:
    response = client.get("/context")
    assert response.json()["client_ip"] == "testclient"


def test_context_cleared_after_request(client: TestClient) -> None:
    client.get("/context")
    assert get_request_context() is None
