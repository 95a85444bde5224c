"""httptester exception hierarchy.

Two families, matching the two reporting severities:

- ``MismatchError``: the response did not look like the test expected.
  Reported through ``Reporter.error``; the chain keeps running.
- ``FatalError``: the check itself is meaningless (bad pattern, value of
  an unsupported type, unreadable stream, non-numeric header). Reported
  through ``Reporter.fatal``; the chain stops.
"""


class TesterError(Exception):
    """Base for all httptester errors."""

    __test__ = False  # Tell pytest this is not a test class


class ConfigurationError(TesterError, ValueError):
    """Raised when a TesterConfig is invalid."""


class MismatchError(TesterError, AssertionError):
    """A non-fatal assertion failure."""


class HeaderNotFoundError(MismatchError):
    """The response has no header with the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"header {name!r} not found")


class HandlerProtocolError(MismatchError):
    """The application misused the ASGI response protocol.

    Raised for an ``http.response.start`` message with an invalid status
    code and for repeated ``http.response.start`` messages.
    """


class FatalError(TesterError):
    """A failure that makes further checks on the same response meaningless."""


class UnsupportedValueError(FatalError, TypeError):
    """A value of a type that cannot be compared or sent as a body."""

    def __init__(self, value: object, detail: str = "") -> None:
        self.value_type = type(value)
        msg = detail or f"unsupported value type {type(value).__qualname__}"
        super().__init__(msg)


class StreamReadError(FatalError):
    """Reading a stream passed as a body or expectation failed."""


class PatternError(FatalError):
    """A regular expression could not be compiled."""


class NumericHeaderError(FatalError):
    """A header value could not be parsed for a numeric comparison."""
