"""httptester — fluent assertions for ASGI applications, in-process.

Sends requests straight into an ASGI app (no sockets), captures the
response, and checks it with chainable assertions::

    from httptester import RecordingReporter, Tester

    reporter = RecordingReporter()
    tester = Tester(reporter, app)
    tester.get("/hello").expect(200).contains("hello").expect_header("X-Number", 42)
    tester.post("/echo", b"\\x01\\x02").expect(b"\\x01\\x02")
    tester.form("/echo-form", {"foo": 1}).expect("foo=1\\n")

Failures go to a reporter: ``error()`` for mismatches, ``fatal()`` for
checks that cannot be evaluated. pytest users get ready-made fixtures
from ``httptester.pytest_plugin``.
"""

__version__ = "0.1.0"
__all__ = [
    "AssertionChain",
    "ChainState",
    "ConfigurationError",
    "FatalError",
    "HandlerProtocolError",
    "HeaderNotFoundError",
    "Headers",
    "MismatchError",
    "NumericHeaderError",
    "PatternError",
    "RaisingReporter",
    "RecordingReporter",
    "Reporter",
    "ResponseCapture",
    "StreamReadError",
    "Tester",
    "TesterConfig",
    "TesterError",
    "UnsupportedValueError",
    "new",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import httptester`` fast (anyio is only imported on use).
    """
    if name in ("Tester", "new"):
        from httptester import tester as _tester

        return getattr(_tester, name)

    if name in ("AssertionChain", "ChainState"):
        from httptester import chain as _chain

        return getattr(_chain, name)

    if name == "ResponseCapture":
        from httptester.capture import ResponseCapture

        return ResponseCapture

    if name == "Headers":
        from httptester.headers import Headers

        return Headers

    if name == "TesterConfig":
        from httptester.config import TesterConfig

        return TesterConfig

    if name in ("RaisingReporter", "RecordingReporter", "Reporter"):
        from httptester import reporter as _reporter

        return getattr(_reporter, name)

    if name in (
        "ConfigurationError",
        "FatalError",
        "HandlerProtocolError",
        "HeaderNotFoundError",
        "MismatchError",
        "NumericHeaderError",
        "PatternError",
        "StreamReadError",
        "TesterError",
        "UnsupportedValueError",
    ):
        from httptester import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
