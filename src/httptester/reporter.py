"""Reporters — how assertion failures reach the test framework.

A reporter has two entry points:

- ``error(err)``: the check failed; the test keeps going.
- ``fatal(err)``: the check could not be evaluated; abort the test the
  way the host framework aborts (typically by raising).

``AssertionChain`` records the failure on itself *before* calling the
reporter, so a reporter that raises still leaves the chain consistent.

For pytest, use ``PytestReporter`` from ``httptester.pytest_plugin`` or
the ``http_reporter`` fixture it provides.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Reporter(Protocol):
    """Test failure sink with a non-fatal and a fatal path."""

    def error(self, err: Exception) -> None: ...
    def fatal(self, err: Exception) -> None: ...


class RecordingReporter:
    """Reporter that only records.

    Keeps every reported error in order; ``err`` and ``fatal_err`` are
    the most recent of each kind (``None`` when nothing was reported).
    """

    __slots__ = ("errors", "fatals")

    def __init__(self) -> None:
        self.errors: list[Exception] = []
        self.fatals: list[Exception] = []

    def error(self, err: Exception) -> None:
        self.errors.append(err)

    def fatal(self, err: Exception) -> None:
        self.fatals.append(err)

    @property
    def err(self) -> Exception | None:
        return self.errors[-1] if self.errors else None

    @property
    def fatal_err(self) -> Exception | None:
        return self.fatals[-1] if self.fatals else None

    @property
    def failed(self) -> bool:
        return bool(self.errors or self.fatals)

    def clear(self) -> None:
        self.errors.clear()
        self.fatals.clear()


class RaisingReporter:
    """Reporter that raises every failure, for plain ``assert``-style tests.

    Mismatches are ``AssertionError`` subclasses, so any test runner
    shows them as ordinary assertion failures.
    """

    __slots__ = ()

    def error(self, err: Exception) -> None:
        raise err

    def fatal(self, err: Exception) -> None:
        raise err
