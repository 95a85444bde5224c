"""Comparisons between expectations and a captured response.

Every function returns ``None`` on success and raises on failure:

- ``MismatchError`` (or a subclass) when the response does not match
- a ``FatalError`` subclass when the expectation cannot be evaluated

Header checks succeed when *any* value of the named header satisfies
the comparison, so a header sent several times matches on any of its
values.
"""

import re
from collections.abc import Sequence

from httptester.errors import (
    HeaderNotFoundError,
    MismatchError,
    NumericHeaderError,
    PatternError,
    UnsupportedValueError,
)
from httptester.headers import Headers
from httptester.values import Absent, Expectation, Float, Integer, Raw, Stream, Text, classify, drain

Pattern = str | bytes | re.Pattern[str] | re.Pattern[bytes]

_SNIPPET = 200

# Plain decimal: no underscores, no inf/nan, no hex
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def _show(data: bytes) -> str:
    """Short printable form of *data* for error messages."""
    if len(data) > _SNIPPET:
        return f"{data[:_SNIPPET]!r}... ({len(data)} bytes)"
    return repr(data)


def compile_pattern(pattern: Pattern) -> re.Pattern[str] | re.Pattern[bytes]:
    """Compile *pattern*, wrapping compiler errors in ``PatternError``."""
    match pattern:
        case re.Pattern():
            return pattern
        case str() | bytes():
            try:
                return re.compile(pattern)
            except re.error as exc:
                msg = f"error compiling regular expression {pattern!r}: {exc}"
                raise PatternError(msg) from exc
        case _:
            raise UnsupportedValueError(
                pattern, f"pattern must be str, bytes or re.Pattern, not {type(pattern).__qualname__}"
            )


def _search(compiled: re.Pattern[str] | re.Pattern[bytes], data: bytes) -> bool:
    if isinstance(compiled.pattern, bytes):
        return compiled.search(data) is not None  # type: ignore[arg-type]
    return compiled.search(data.decode("utf-8", errors="surrogateescape")) is not None  # type: ignore[arg-type]


def _expected_bytes(expected: object, purpose: str, kind: Expectation | None = None) -> bytes:
    match kind if kind is not None else classify(expected):
        case Absent():
            return b""
        case Raw(data):
            return data
        case Text(text):
            return text.encode("utf-8")
        case Stream(reader):
            return drain(reader)
        case Integer() | Float():
            msg = f"cannot use number {expected!r} for {purpose}"
            raise UnsupportedValueError(expected, msg)


# ---------------------------------------------------------------------------
# Status and body
# ---------------------------------------------------------------------------


def expect_status(expected: int, status: int) -> None:
    if status != expected:
        msg = f"expecting status {expected}, got {status}"
        raise MismatchError(msg)


def expect_body(expected: object, body: bytes) -> None:
    """Byte-for-byte body equality.

    ``None``, ``""`` and ``b""`` all mean "no body". A numeric
    expectation is never equal to a body, since bodies are not parsed as
    numbers.
    """
    kind = classify(expected)
    if isinstance(kind, Integer | Float):
        msg = f"expecting numeric body {float(kind.value)!r}, got body {_show(body)}"
        raise MismatchError(msg)
    want = _expected_bytes(expected, "body equality", kind)
    if want != body:
        msg = f"expecting body {_show(want)}, got {_show(body)}"
        raise MismatchError(msg)


def contains_body(expected: object, body: bytes) -> None:
    want = _expected_bytes(expected, "containment")
    if want not in body:
        msg = f"expecting body to contain {_show(want)}, got {_show(body)}"
        raise MismatchError(msg)


def match_body(pattern: Pattern, body: bytes) -> None:
    compiled = compile_pattern(pattern)
    if not _search(compiled, body):
        msg = f"expecting body to match {compiled.pattern!r}, got {_show(body)}"
        raise MismatchError(msg)


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


def _header_values(headers: Headers, name: str) -> list[bytes]:
    values = headers.get_raw_list(name)
    if not values:
        raise HeaderNotFoundError(name)
    return values


def _parse_number(name: str, value: bytes) -> float:
    text = value.decode("latin-1").strip()
    if _NUMBER.fullmatch(text) is None:
        msg = f"error parsing header {name!r} value {value!r} as a number: not a decimal number"
        raise NumericHeaderError(msg)
    return float(text)


def _decoded(values: Sequence[bytes]) -> list[str]:
    return [v.decode("latin-1") for v in values]


def expect_header(headers: Headers, name: str, expected: object) -> None:
    """Equality against any value of header *name*.

    Numeric expectations parse each header value as a number; a value
    that does not parse is fatal.
    """
    values = _header_values(headers, name)
    match classify(expected):
        case Integer(number) | Float(number):
            want = float(number)
            if any(_parse_number(name, v) == want for v in values):
                return
            msg = f"expecting header {name!r} = {number!r}, got {_decoded(values)!r}"
            raise MismatchError(msg)
        case _:
            want_bytes = _expected_bytes(expected, "header equality")
            if want_bytes in values:
                return
            msg = f"expecting header {name!r} = {want_bytes!r}, got {_decoded(values)!r}"
            raise MismatchError(msg)


def contains_header(headers: Headers, name: str, expected: object) -> None:
    values = _header_values(headers, name)
    want = _expected_bytes(expected, "header containment")
    if not any(want in v for v in values):
        msg = f"expecting header {name!r} to contain {want!r}, got {_decoded(values)!r}"
        raise MismatchError(msg)


def match_header(headers: Headers, name: str, pattern: Pattern) -> None:
    compiled = compile_pattern(pattern)
    values = _header_values(headers, name)
    if not any(_search(compiled, v) for v in values):
        msg = f"expecting header {name!r} to match {compiled.pattern!r}, got {_decoded(values)!r}"
        raise MismatchError(msg)
