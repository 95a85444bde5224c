"""Shared fixtures: a small raw-ASGI application and reporters."""

from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import parse_qs

import pytest

from httptester import RecordingReporter, Tester
from httptester.pytest_plugin import http_reporter, http_tester  # noqa: F401

Send = Callable[[dict[str, Any]], Awaitable[None]]


async def _read_body(receive: Callable[[], Awaitable[dict[str, Any]]]) -> bytes:
    parts: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        parts.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(parts)


async def _respond(
    send: Send, body: bytes = b"", *, status: int = 200, headers: list[tuple[bytes, bytes]] | None = None
) -> None:
    await send({"type": "http.response.start", "status": status, "headers": headers or []})
    await send({"type": "http.response.body", "body": body})


def _form_lines(values: dict[str, list[str]]) -> bytes:
    return "".join(f"{k}={values[k][0]}\n" for k in sorted(values)).encode("utf-8")


async def demo_app(scope: dict[str, Any], receive: Any, send: Send) -> None:
    """Routes used throughout the suite."""
    assert scope["type"] == "http"
    path = scope["path"]
    method = scope["method"]
    body = await _read_body(receive)

    match path:
        case "/hello":
            await _respond(
                send,
                b"hello world",
                headers=[(b"x-hello", b"World"), (b"x-number", b"42")],
            )
        case "/empty":
            await _respond(send)
        case "/echo":
            await _respond(send, body if method == "POST" else b"")
        case "/echo-form":
            if method in ("POST", "PUT"):
                values = parse_qs(body.decode("latin-1"), keep_blank_values=True)
            else:
                values = parse_qs(scope["query_string"].decode("latin-1"), keep_blank_values=True)
            await _respond(send, _form_lines(values))
        case "/echo-request":
            headers = [(b"x-method", method.encode("latin-1"))]
            headers.extend((b"x-echo-" + name, value) for name, value in scope["headers"])
            await _respond(send, scope["query_string"], headers=headers)
        case "/tags":
            await _respond(send, b"", headers=[(b"x-tag", b"alpha"), (b"x-tag", b"beta"), (b"x-count", b"7")])
        case "/invalid-write-header":
            await send({"type": "http.response.start", "status": 0, "headers": []})
            await send({"type": "http.response.body", "body": b""})
        case "/multiple-write-header":
            await send({"type": "http.response.start", "status": 200, "headers": []})
            await send({"type": "http.response.start", "status": 300, "headers": []})
            await send({"type": "http.response.body", "body": b""})
        case "/body-only":
            await send({"type": "http.response.body", "body": b"implicit"})
        case "/boom":
            msg = "handler exploded"
            raise RuntimeError(msg)
        case _:
            await _respond(send, b"not found", status=404)


@pytest.fixture
def app() -> Callable[..., Awaitable[None]]:
    return demo_app


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def tester(reporter: RecordingReporter) -> Tester:
    return Tester(reporter, demo_app)
