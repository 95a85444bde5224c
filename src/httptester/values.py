"""Value normalization — turn test inputs into comparable values.

Expectations and request bodies arrive as whatever the test found
convenient: ``None``, text, bytes, a readable stream, or a number.
``classify()`` maps each input onto a small closed set of tagged
variants, and ``normalize()`` reduces a variant to one of two canonical
forms:

- ``bytes`` for absent, text, raw and stream values
- ``float`` for every numeric kind

Text is never parsed as a number here. Numeric parsing of header values
is an explicit decision of the comparator.
"""

import numbers
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, runtime_checkable

from httptester.errors import StreamReadError, UnsupportedValueError


@runtime_checkable
class Readable(Protocol):
    """Anything with a ``read()`` returning the rest of its content."""

    def read(self, *args: Any) -> bytes | str: ...


@dataclass(frozen=True, slots=True)
class Absent:
    """No value (``None``). Normalizes to an empty byte string."""


@dataclass(frozen=True, slots=True)
class Raw:
    data: bytes


@dataclass(frozen=True, slots=True)
class Text:
    text: str


@dataclass(frozen=True, slots=True)
class Stream:
    reader: Readable


@dataclass(frozen=True, slots=True)
class Integer:
    value: int


@dataclass(frozen=True, slots=True)
class Float:
    value: float


Expectation: TypeAlias = Absent | Raw | Text | Stream | Integer | Float
Normalized: TypeAlias = bytes | float


def classify(value: object) -> Expectation:
    """Tag *value* with its expectation kind.

    Dispatch order:

    1. ``None``                             -> ``Absent``
    2. ``str``                              -> ``Text``
    3. ``bytes`` / ``bytearray`` / ``memoryview`` -> ``Raw``
    4. object with a ``read()`` method      -> ``Stream``
    5. ``int`` (but not ``bool``)           -> ``Integer``
    6. any other real number                -> ``Float``

    Raises:
        UnsupportedValueError: For any other type, ``bool`` included.
    """
    match value:
        case None:
            return Absent()
        case str():
            return Text(value)
        case bytes() | bytearray() | memoryview():
            return Raw(bytes(value))
        case bool():
            raise UnsupportedValueError(value)
        case Readable():
            return Stream(value)
        case int():
            return Integer(value)
        case numbers.Real():
            return Float(float(value))
        case _:
            raise UnsupportedValueError(value)


def drain(reader: Readable) -> bytes:
    """Read *reader* to the end. The stream is left open."""
    try:
        data = reader.read()
    except (OSError, ValueError) as exc:
        msg = f"error reading {type(reader).__qualname__}: {exc}"
        raise StreamReadError(msg) from exc
    if isinstance(data, str):
        return data.encode("utf-8")
    if data is None:
        # Non-blocking raw streams return None when nothing is available.
        return b""
    return bytes(data)


def normalize(value: object) -> Normalized:
    """Reduce *value* to ``bytes`` or ``float``.

    Already-normalized byte strings come back unchanged, so normalizing
    twice is harmless.
    """
    kind = value if isinstance(value, Expectation) else classify(value)
    match kind:
        case Absent():
            return b""
        case Raw(data):
            return data
        case Text(text):
            return text.encode("utf-8")
        case Stream(reader):
            return drain(reader)
        case Integer(number) | Float(number):
            return float(number)


def normalize_bytes(value: object, purpose: str) -> bytes:
    """Like ``normalize()`` but numbers are rejected.

    Args:
        value: The input to normalize.
        purpose: What the bytes will be used as, for the error message
            (e.g. ``"request body"``).
    """
    normalized = normalize(value)
    if isinstance(normalized, float):
        msg = f"cannot use {type(value).__qualname__} {value!r} as {purpose}"
        raise UnsupportedValueError(value, msg)
    return normalized
