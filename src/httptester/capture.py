"""Response capture — record what an ASGI application sent.

``ResponseRecorder`` is the ``send`` callable handed to the application.
It accumulates the status, headers and body, and notes misuse of the
response protocol instead of raising inside the application:

- an ``http.response.start`` with a status outside 100..999
- more than one ``http.response.start``

``ResponseRecorder.finish()`` freezes the result into a
``ResponseCapture`` and returns the protocol problems found, so the
dispatcher can attribute them to the chain for this request.
"""

from dataclasses import dataclass, field
from typing import Any

from httptester._internal.asgi import Message
from httptester.errors import HandlerProtocolError
from httptester.headers import Headers

DEFAULT_STATUS = 200


def _valid_status(status: Any) -> bool:
    return isinstance(status, int) and not isinstance(status, bool) and 100 <= status <= 999


@dataclass(frozen=True, slots=True)
class ResponseCapture:
    """A finished response. Immutable."""

    status: int = DEFAULT_STATUS
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""

    @property
    def text(self) -> str:
        """The body decoded as UTF-8 (invalid bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")


class ResponseRecorder:
    """ASGI ``send`` callable that records an HTTP response."""

    __slots__ = ("_body", "_headers", "_invalid", "_starts", "_status")

    def __init__(self) -> None:
        self._status: int | None = None
        self._headers: list[tuple[bytes, bytes]] = []
        self._body: list[bytes] = []
        self._starts = 0
        self._invalid: list[Any] = []

    async def __call__(self, message: Message) -> None:
        match message.get("type"):
            case "http.response.start":
                self._start(message.get("status"), message.get("headers", ()))
            case "http.response.body":
                if self._starts == 0:
                    # Writing a body without starting implies 200.
                    self._start(DEFAULT_STATUS, ())
                self._body.append(bytes(message.get("body", b"")))
            case _:
                pass

    def _start(self, status: Any, headers: Any) -> None:
        self._starts += 1
        if not _valid_status(status):
            self._invalid.append(status)
            return
        if self._status is None:
            self._status = status
            self._headers.extend((bytes(k), bytes(v)) for k, v in headers)

    @property
    def started(self) -> bool:
        return self._starts > 0

    def problems(self) -> list[HandlerProtocolError]:
        """Protocol violations seen so far, oldest first."""
        found = [
            HandlerProtocolError(f"http.response.start called with invalid code {status!r}")
            for status in self._invalid
        ]
        if self._starts > 1:
            found.append(HandlerProtocolError(f"http.response.start called {self._starts} times"))
        return found

    def finish(self) -> tuple[ResponseCapture, list[HandlerProtocolError]]:
        """Freeze the recorded response and return it with any protocol problems."""
        capture = ResponseCapture(
            status=self._status if self._status is not None else DEFAULT_STATUS,
            headers=Headers(self._headers),
            body=b"".join(self._body),
        )
        return capture, self.problems()
