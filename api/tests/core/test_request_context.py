"""Tests for request ids, tracing headers and log context."""

from fastapi.testclient import TestClient
from starlette.requests import Request

from commentable.core.context import (
    bind_actor,
    clear_context,
    get_context,
    set_request_id,
    set_tracing,
)
from commentable.core.middleware import trace_id_from_headers


def _request(headers: dict[str, str]) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "headers": raw})


class TestContext:
    def test_collects_non_empty_values(self) -> None:
        set_request_id("req-1")
        bind_actor("user-1", "moderator")
        set_tracing(None, "corr-1")

        assert get_context() == {
            "request_id": "req-1",
            "user_id": "user-1",
            "user_role": "moderator",
            "correlation_id": "corr-1",
        }

        clear_context()
        assert get_context() == {}

    def test_generates_request_id(self) -> None:
        assert set_request_id(None)
        clear_context()


class TestTraceHeaders:
    def test_explicit_trace_header_wins(self) -> None:
        request = _request({"X-Trace-ID": "abc", "traceparent": "00-def-01-01"})
        assert trace_id_from_headers(request) == "abc"

    def test_traceparent(self) -> None:
        request = _request(
            {"traceparent": "00-0af7651916cd43dd8448eb211c80319c-b7ad6b7169203331-01"}
        )
        assert trace_id_from_headers(request) == "0af7651916cd43dd8448eb211c80319c"

    def test_missing(self) -> None:
        assert trace_id_from_headers(_request({})) is None


def test_request_id_is_echoed(client: TestClient) -> None:
    response = client.get("/health/live", headers={"X-Request-ID": "fixed-id"})
    assert response.headers["X-Request-ID"] == "fixed-id"


def test_request_id_is_generated(client: TestClient) -> None:
    response = client.get("/health/live")
    assert response.headers["X-Request-ID"]
