"""Request dispatch — run one request through an ASGI app in-process.

No sockets are involved. The request is delivered through ``receive()``
and the response is captured through a ``ResponseRecorder`` passed as
``send()``. The coroutine is driven to completion with ``anyio.run``,
so dispatch blocks the calling test like a direct handler call would.

Payload handling:

1. mapping, query-style method (``GET``/``HEAD``)
   -> URL-encoded and appended to the query string
2. mapping, any other method
   -> URL-encoded body with ``content-type: application/x-www-form-urlencoded``
3. anything else
   -> normalized to bytes (``None`` is an empty body)
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote, urlencode

import anyio

from httptester._internal.asgi import ASGIApp, Message, Scope
from httptester.capture import ResponseCapture, ResponseRecorder
from httptester.config import TesterConfig
from httptester.errors import HandlerProtocolError
from httptester.values import normalize_bytes

logger = logging.getLogger("httptester.dispatch")

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
QUERY_METHODS = frozenset({"GET", "HEAD"})

# Characters left as-is when percent-encoding the target; "%" keeps existing escapes
_PATH_SAFE = "/%:@!$&'()*+,;="
_QUERY_SAFE = _PATH_SAFE + "?"


@dataclass(frozen=True, slots=True)
class PreparedRequest:
    """A request ready to be sent to the app."""

    method: str
    path: str
    raw_path: bytes = b""
    query_string: bytes = b""
    headers: tuple[tuple[bytes, bytes], ...] = ()
    body: bytes = b""


def _form_value(value: Any) -> str | bytes:
    if isinstance(value, bytes | str):
        return value
    if isinstance(value, bytearray | memoryview):
        return bytes(value)
    return str(value)


def encode_form(fields: Mapping[str, Any]) -> str:
    """URL-encode *fields*.

    Values are stringified with ``str()``; ``bytes`` are percent-encoded
    as-is so they survive byte for byte. A list or tuple value becomes a
    repeated field.
    """
    pairs: list[tuple[str, str | bytes]] = []
    for key, value in fields.items():
        if isinstance(value, list | tuple):
            pairs.extend((key, _form_value(v)) for v in value)
        else:
            pairs.append((key, _form_value(value)))
    return urlencode(pairs)


def _encode_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[bytes, bytes]]:
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers]


def build_request(
    method: str,
    path: str,
    payload: object = None,
    *,
    headers: Iterable[tuple[str, str]] | Mapping[str, str] | None = None,
    config: TesterConfig | None = None,
) -> PreparedRequest:
    """Prepare a request from a path and an optional payload.

    Raises:
        UnsupportedValueError: If *payload* cannot be used as a body.
        StreamReadError: If *payload* is a stream that cannot be read.
    """
    config = config or TesterConfig()
    method = method.upper()

    # Split path and query string
    if "?" in path:
        path_part, query_string = path.split("?", 1)
    else:
        path_part = path
        query_string = ""

    extra = headers.items() if isinstance(headers, Mapping) else (headers or ())
    raw_headers = _encode_headers(config.default_headers) + _encode_headers(extra)

    body = b""
    if isinstance(payload, Mapping):
        encoded = encode_form(payload)
        if method in QUERY_METHODS:
            query_string = f"{query_string}&{encoded}" if query_string else encoded
        else:
            body = encoded.encode("ascii")
            if not any(name == b"content-type" for name, _ in raw_headers):
                raw_headers.append((b"content-type", FORM_CONTENT_TYPE.encode("latin-1")))
    else:
        body = normalize_bytes(payload, "request body")

    if body and not any(name == b"content-length" for name, _ in raw_headers):
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    # Percent-encode non-ASCII; scope["path"] stays decoded
    raw_path = quote(path_part, safe=_PATH_SAFE)
    return PreparedRequest(
        method=method,
        path=unquote(raw_path),
        raw_path=raw_path.encode("ascii"),
        query_string=quote(query_string, safe=_QUERY_SAFE).encode("ascii"),
        headers=tuple(raw_headers),
        body=body,
    )


def build_scope(request: PreparedRequest, config: TesterConfig) -> Scope:
    """Build the ASGI HTTP scope for *request*."""
    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": config.http_version,
        "method": request.method,
        "scheme": config.scheme,
        "path": request.path,
        "raw_path": request.raw_path or quote(request.path, safe=_PATH_SAFE).encode("ascii"),
        "query_string": request.query_string,
        "root_path": config.root_path,
        "headers": list(request.headers),
        "server": config.server,
        "client": config.client,
        "state": {},
    }


async def _run(
    app: ASGIApp, request: PreparedRequest, config: TesterConfig, recorder: ResponseRecorder
) -> None:
    body = request.body
    chunk_size = config.chunk_size
    chunks = [body[i : i + chunk_size] for i in range(0, len(body), chunk_size)] or [b""]
    pending = iter(enumerate(chunks, start=1))

    async def receive() -> Message:
        for index, chunk in pending:
            return {"type": "http.request", "body": chunk, "more_body": index < len(chunks)}
        # After body is sent, report disconnect (simplified)
        return {"type": "http.disconnect"}

    await app(build_scope(request, config), receive, recorder)


def dispatch(
    app: ASGIApp, request: PreparedRequest, config: TesterConfig | None = None
) -> tuple[ResponseCapture, list[HandlerProtocolError]]:
    """Send *request* to *app* and wait for the response.

    Returns the captured response and the protocol violations the app
    committed while producing it. Exceptions raised by the app propagate.
    """
    config = config or TesterConfig()
    recorder = ResponseRecorder()
    anyio.run(_run, app, request, config, recorder, backend=config.backend, backend_options=config.backend_options)
    capture, problems = recorder.finish()
    logger.debug("%s %s -> %d (%d bytes)", request.method, request.path, capture.status, len(capture.body))
    for problem in problems:
        logger.debug("%s %s: %s", request.method, request.path, problem)
    return capture, problems
