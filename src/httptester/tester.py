"""Tester — entry point binding a reporter to an ASGI application.

Usage::

    from httptester import RaisingReporter, Tester

    tester = Tester(RaisingReporter(), app)
    tester.get("/hello").expect(200).contains("hello")
    tester.form("/login", {"user": "ada"}).expect(303).expect_header("Location", "/")

Each call dispatches one request synchronously and returns a fresh
``AssertionChain`` for its response.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from httptester._internal.asgi import ASGIApp
from httptester.capture import ResponseCapture
from httptester.chain import AssertionChain
from httptester.config import TesterConfig
from httptester.dispatch import build_request, dispatch
from httptester.errors import FatalError
from httptester.reporter import Reporter

HeadersArg = Iterable[tuple[str, str]] | Mapping[str, str] | None


class Tester:
    """Issues requests against an ASGI app and wraps each response in a chain.

    Immutable after creation. A tester can be reused for any number of
    sequential requests, but not from several threads at once, and not
    from inside a running event loop.
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("_app", "_config", "_reporter")

    def __init__(self, reporter: Reporter, app: ASGIApp, config: TesterConfig | None = None) -> None:
        object.__setattr__(self, "_reporter", reporter)
        object.__setattr__(self, "_app", app)
        object.__setattr__(self, "_config", config or TesterConfig())

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is immutable"
        raise AttributeError(msg)

    @property
    def reporter(self) -> Reporter:
        return self._reporter

    @property
    def app(self) -> ASGIApp:
        return self._app

    @property
    def config(self) -> TesterConfig:
        return self._config

    def request(
        self,
        method: str,
        path: str,
        payload: object = None,
        *,
        headers: HeadersArg = None,
    ) -> AssertionChain:
        """Send an arbitrary request and return the chain for its response.

        If the request cannot be built (unsupported payload type,
        unreadable stream), the app is not called and the returned chain
        is already in the fatal state.
        """
        try:
            prepared = build_request(method, path, payload, headers=headers, config=self._config)
        except FatalError as exc:
            chain = AssertionChain(ResponseCapture(), self._reporter)
            chain.record_fatal(exc)
            return chain

        capture, problems = dispatch(self._app, prepared, self._config)
        chain = AssertionChain(capture, self._reporter)
        for problem in problems:
            chain.record_error(problem)
        return chain

    def get(self, path: str, payload: object = None, *, headers: HeadersArg = None) -> AssertionChain:
        """Send a GET request. A mapping *payload* becomes the query string."""
        return self.request("GET", path, payload, headers=headers)

    def post(self, path: str, payload: object = None, *, headers: HeadersArg = None) -> AssertionChain:
        """Send a POST request. A mapping *payload* is sent form-encoded."""
        return self.request("POST", path, payload, headers=headers)

    def put(self, path: str, payload: object = None, *, headers: HeadersArg = None) -> AssertionChain:
        return self.request("PUT", path, payload, headers=headers)

    def patch(self, path: str, payload: object = None, *, headers: HeadersArg = None) -> AssertionChain:
        return self.request("PATCH", path, payload, headers=headers)

    def delete(self, path: str, payload: object = None, *, headers: HeadersArg = None) -> AssertionChain:
        return self.request("DELETE", path, payload, headers=headers)

    def form(self, path: str, fields: Mapping[str, Any], *, headers: HeadersArg = None) -> AssertionChain:
        """POST *fields* as ``application/x-www-form-urlencoded``.

        A ``Content-Type`` in *headers* replaces the form default.
        """
        return self.request("POST", path, dict(fields), headers=headers)


def new(reporter: Reporter, app: ASGIApp, config: TesterConfig | None = None) -> Tester:
    """Create a ``Tester``."""
    return Tester(reporter, app, config)
