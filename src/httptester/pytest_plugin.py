"""pytest integration.

Provides ``PytestReporter`` and two fixtures. Enable them from a
``conftest.py``::

    pytest_plugins = ["httptester.pytest_plugin"]

then::

    def test_hello(http_tester):
        http_tester(app).get("/hello").expect(200).contains("hello")

Mismatches are collected while the test runs and fail it at teardown,
so one test reports every failed check. Fatal failures fail the test
immediately.
"""

from collections.abc import Callable, Iterator

import pytest

from httptester._internal.asgi import ASGIApp
from httptester.config import TesterConfig
from httptester.reporter import RecordingReporter
from httptester.tester import Tester


class PytestReporter(RecordingReporter):
    """Reporter bound to pytest's failure primitives."""

    __slots__ = ()

    def fatal(self, err: Exception) -> None:
        super().fatal(err)
        pytest.fail(f"{type(err).__name__}: {err}", pytrace=False)

    def check(self) -> None:
        """Fail the current test if any mismatch was reported."""
        if not self.errors:
            return
        lines = [f"{len(self.errors)} HTTP assertion(s) failed:"]
        lines.extend(f"  - {err}" for err in self.errors)
        pytest.fail("\n".join(lines), pytrace=False)


@pytest.fixture
def http_reporter() -> Iterator[PytestReporter]:
    """A ``PytestReporter`` checked when the test finishes."""
    reporter = PytestReporter()
    yield reporter
    reporter.check()


@pytest.fixture
def http_tester(http_reporter: PytestReporter) -> Callable[..., Tester]:
    """Factory building a ``Tester`` for an app, reporting to ``http_reporter``."""

    def factory(app: ASGIApp, config: TesterConfig | None = None) -> Tester:
        return Tester(http_reporter, app, config)

    return factory
