"""Assertion chain — fluent checks against one captured response.

Each dispatched request yields an ``AssertionChain``. Every assertion
method returns the chain, so checks compose::

    tester.get("/hello").expect(200).contains("hello").expect_header("X-Hello", "World")

State machine:

- ``OPEN``: nothing has failed yet.
- ``ERRORED``: at least one mismatch was reported. Later checks still
  run and still report, but ``err()`` keeps returning the first one.
- ``FATAL``: a check could not be evaluated (bad pattern, unsupported
  value, unreadable stream, non-numeric header). Every later check is a
  no-op.

The error and fatal slots are independent: a chain can be both errored
and fatal, and each slot holds the first failure of its kind.
"""

import logging
from collections.abc import Callable
from enum import Enum

from httptester import compare
from httptester.capture import ResponseCapture
from httptester.compare import Pattern
from httptester.errors import FatalError, MismatchError
from httptester.headers import Headers
from httptester.reporter import Reporter

logger = logging.getLogger("httptester.chain")


class ChainState(Enum):
    OPEN = "open"
    ERRORED = "errored"
    FATAL = "fatal"


class AssertionChain:
    """Chainable assertions on a ``ResponseCapture``.

    Not thread-safe: the error slots are plain attributes.
    """

    __slots__ = ("_error", "_fatal", "_reporter", "_response")

    def __init__(self, response: ResponseCapture, reporter: Reporter) -> None:
        self._response = response
        self._reporter = reporter
        self._error: MismatchError | None = None
        self._fatal: FatalError | None = None

    def __repr__(self) -> str:
        return f"<AssertionChain {self.state.value} status={self._response.status}>"

    # -- State -------------------------------------------------------------

    @property
    def response(self) -> ResponseCapture:
        return self._response

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def headers(self) -> Headers:
        return self._response.headers

    @property
    def body(self) -> bytes:
        return self._response.body

    @property
    def state(self) -> ChainState:
        if self._fatal is not None:
            return ChainState.FATAL
        if self._error is not None:
            return ChainState.ERRORED
        return ChainState.OPEN

    @property
    def error(self) -> MismatchError | None:
        """First non-fatal failure, or ``None``."""
        return self._error

    @property
    def fatal_error(self) -> FatalError | None:
        """First fatal failure, or ``None``."""
        return self._fatal

    def err(self) -> MismatchError | None:
        """Return the first recorded non-fatal error (``None`` if none)."""
        return self._error

    # -- Recording ---------------------------------------------------------

    def record_error(self, err: MismatchError) -> None:
        """Record a mismatch and report it through ``Reporter.error``."""
        if self._error is None:
            self._error = err
        logger.debug("assertion failed: %s", err)
        self._reporter.error(err)

    def record_fatal(self, err: FatalError) -> None:
        """Record a fatal failure and report it through ``Reporter.fatal``."""
        if self._fatal is None:
            self._fatal = err
        logger.warning("assertion aborted: %s", err)
        self._reporter.fatal(err)

    def _check(self, check: Callable[[], None]) -> "AssertionChain":
        if self._fatal is not None:
            return self
        try:
            check()
        except MismatchError as exc:
            self.record_error(exc)
        except FatalError as exc:
            self.record_fatal(exc)
        return self

    # -- Assertions --------------------------------------------------------

    def expect(self, value: object) -> "AssertionChain":
        """Check the status (for an ``int``) or the body (anything else).

        ``None``, ``""`` and ``b""`` all expect an empty body. Streams are
        read to the end and compared byte for byte.
        """
        if isinstance(value, int) and not isinstance(value, bool):
            return self._check(lambda: compare.expect_status(value, self._response.status))
        return self._check(lambda: compare.expect_body(value, self._response.body))

    def contains(self, value: object) -> "AssertionChain":
        """Check that the body contains *value*."""
        return self._check(lambda: compare.contains_body(value, self._response.body))

    def match(self, pattern: Pattern) -> "AssertionChain":
        """Check that some part of the body matches the regular expression *pattern*."""
        return self._check(lambda: compare.match_body(pattern, self._response.body))

    def expect_header(self, name: str, value: object) -> "AssertionChain":
        """Check that a value of header *name* equals *value*.

        Numbers are compared numerically against the parsed header value.
        """
        return self._check(lambda: compare.expect_header(self._response.headers, name, value))

    def contains_header(self, name: str, value: object) -> "AssertionChain":
        return self._check(lambda: compare.contains_header(self._response.headers, name, value))

    def match_header(self, name: str, pattern: Pattern) -> "AssertionChain":
        return self._check(lambda: compare.match_header(self._response.headers, name, pattern))
