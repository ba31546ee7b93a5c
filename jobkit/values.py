"""Value kinds stored in a job data map.

Every entry in a JobDataMap is a DataValue: a tag (ValueKind) plus the
Python value. The tag keeps "stored natively" distinct from "stored as a
canonical string", and keeps the 32-bit / 64-bit and single / double
distinctions that Python's int and float do not carry on their own.

This module also holds the canonical string codecs. Each kind has a
formatter (value -> canonical string) and a parser (string -> value). The
formatters are locale-independent; the parsers are their inverses.
"""

import math
import re
import struct
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from typeguard import TypeCheckError, check_type

from jobkit.constants import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    TIMESPAN_FRACTION_DIGITS,
)
from jobkit.exception import FormatError, TypeMismatchError


class ValueKind(str, Enum):
    """The runtime type of a stored value."""

    STRING = "string"
    # 32-bit signed integer
    INT = "int"
    # 64-bit signed integer
    LONG = "long"
    # Single-precision float
    FLOAT = "float"
    # Double-precision float
    DOUBLE = "double"
    BOOLEAN = "boolean"
    # A single character
    CHAR = "char"
    UUID = "uuid"
    # A datetime, without a guaranteed offset
    DATETIME = "datetime"
    # A datetime with a UTC offset
    DATETIME_OFFSET = "datetime_offset"
    # A duration
    TIMESPAN = "timespan"
    # Anything else; only produced from loosely-typed sources
    OBJECT = "object"


@dataclass(frozen=True)
class DataValue:
    """A value stored in a job data map, tagged with its kind."""

    kind: ValueKind
    value: Any

    @classmethod
    def of(cls, value: Any) -> "DataValue":
        """Tag a value with the kind inferred from its Python type."""

        if isinstance(value, DataValue):
            return value

        return cls(kind=infer_kind(value), value=value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataValue):
            return NotImplemented
        if self.kind is not other.kind:
            return False

        # NaN is equal to itself within a kind
        if isinstance(self.value, float) and isinstance(other.value, float):
            if math.isnan(self.value) and math.isnan(other.value):
                return True

        return self.value == other.value

    @property
    def is_string(self) -> bool:
        return self.kind is ValueKind.STRING


def infer_kind(value: Any) -> ValueKind:
    """Infer the kind of an untyped value.

    bool is checked before int, as bool is an int subclass. Integers are
    INT when they fit in 32 bits, LONG when they fit in 64, and opaque
    otherwise.
    """

    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return ValueKind.INT
        if INT64_MIN <= value <= INT64_MAX:
            return ValueKind.LONG
        return ValueKind.OBJECT
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, uuid.UUID):
        return ValueKind.UUID
    if isinstance(value, datetime):
        return ValueKind.DATETIME_OFFSET if value.tzinfo is not None else ValueKind.DATETIME
    if isinstance(value, timedelta):
        return ValueKind.TIMESPAN

    return ValueKind.OBJECT


# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++ Formatting ++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++


def _to_single(value: float) -> float:
    """Round a double to the nearest single-precision value."""

    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _format_special(value: float) -> str | None:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return None


def _format_double(value: float) -> str:
    special = _format_special(value)
    if special is not None:
        return special

    # repr is the shortest string that round-trips
    text = repr(value)
    if text.endswith(".0"):
        text = text[:-2]

    return text.replace("e", "E")


def _format_single(value: float) -> str:
    single = _to_single(value)

    special = _format_special(single)
    if special is not None:
        return special

    # nine significant digits always round-trip a single
    for precision in range(1, 10):
        candidate = f"{single:.{precision}g}"
        if _to_single(float(candidate)) == single:
            break

    return _format_double(float(candidate))


def _format_timespan(value: timedelta) -> str:
    ticks = ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 10
    sign = "-" if ticks < 0 else ""

    seconds, fraction = divmod(abs(ticks), 10**TIMESPAN_FRACTION_DIGITS)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        text = f"{days}.{text}"
    if fraction:
        text = f"{text}.{fraction:0{TIMESPAN_FRACTION_DIGITS}d}"

    return sign + text


# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++ Parsing +++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++

_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")
_TIMESPAN_DAYS = re.compile(r"\s*(?P<sign>-)?(?P<days>[0-9]+)\s*")
_TIMESPAN = re.compile(
    r"\s*(?P<sign>-)?(?:(?P<days>[0-9]+)\.)?"
    r"(?P<hours>[0-9]{1,2}):(?P<minutes>[0-9]{1,2})"
    r"(?::(?P<seconds>[0-9]{1,2})(?:\.(?P<fraction>[0-9]{1,7}))?)?\s*"
)


def _integer_parser(lower: int, upper: int) -> Callable[[str], int]:
    def parse(text: str) -> int:
        if not _INTEGER.fullmatch(text):
            raise ValueError(f"'{text}' is not an integer")

        value = int(text)
        if not lower <= value <= upper:
            raise ValueError(f"{value} is outside the range [{lower}, {upper}]")

        return value

    return parse


def _parse_double(text: str) -> float:
    if "_" in text:
        raise ValueError(f"'{text}' is not a number")

    return float(text)


def _parse_single(text: str) -> float:
    return _to_single(_parse_double(text))


def _parse_boolean(text: str) -> bool:
    normalised = text.strip().lower()

    if normalised == "true":
        return True
    if normalised == "false":
        return False

    raise ValueError(f"'{text}' is not a boolean")


def _parse_char(text: str) -> str:
    if not text:
        raise ValueError("cannot read a character from an empty string")

    return text[0]


def _parse_uuid(text: str) -> uuid.UUID:
    return uuid.UUID(text.strip())


def _parse_datetime(text: str) -> datetime:
    return datetime.fromisoformat(text.strip())


def _parse_datetime_offset(text: str) -> datetime:
    value = _parse_datetime(text)
    if value.tzinfo is None:
        raise ValueError(f"'{text}' has no UTC offset")

    return value


def _parse_timespan(text: str) -> timedelta:
    match = _TIMESPAN_DAYS.fullmatch(text)
    if match:
        delta = timedelta(days=int(match["days"]))
        return -delta if match["sign"] else delta

    match = _TIMESPAN.fullmatch(text)
    if not match:
        raise ValueError(f"'{text}' is not a timespan")

    hours = int(match["hours"])
    minutes = int(match["minutes"])
    seconds = int(match["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"'{text}' has a component out of range")

    fraction = (match["fraction"] or "").ljust(TIMESPAN_FRACTION_DIGITS, "0")

    delta = timedelta(
        days=int(match["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=int(fraction) // 10,
    )

    return -delta if match["sign"] else delta


# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++ Codecs ++++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++


@dataclass(frozen=True)
class Codec:
    """How a kind is validated, encoded to and decoded from a string."""

    # The Python type a native value of this kind must have
    python_type: Any
    # value -> canonical string
    format: Callable[[Any], str]
    # canonical string -> value
    parse: Callable[[str], Any]
    # returned by try_get_* on failure
    default: Any


CODECS: dict[ValueKind, Codec] = {
    ValueKind.STRING: Codec(str, str, str, ""),
    ValueKind.INT: Codec(int, str, _integer_parser(INT32_MIN, INT32_MAX), 0),
    ValueKind.LONG: Codec(int, str, _integer_parser(INT64_MIN, INT64_MAX), 0),
    ValueKind.FLOAT: Codec(float, _format_single, _parse_single, 0.0),
    ValueKind.DOUBLE: Codec(float, _format_double, _parse_double, 0.0),
    ValueKind.BOOLEAN: Codec(bool, lambda value: "True" if value else "False", _parse_boolean, False),
    ValueKind.CHAR: Codec(str, str, _parse_char, "\0"),
    ValueKind.UUID: Codec(uuid.UUID, lambda value: value.hex, _parse_uuid, uuid.UUID(int=0)),
    ValueKind.DATETIME: Codec(datetime, datetime.isoformat, _parse_datetime, datetime.min),
    ValueKind.DATETIME_OFFSET: Codec(
        datetime,
        datetime.isoformat,
        _parse_datetime_offset,
        datetime.min.replace(tzinfo=timezone.utc),
    ),
    ValueKind.TIMESPAN: Codec(timedelta, _format_timespan, _parse_timespan, timedelta(0)),
}


def codec_for(kind: ValueKind) -> Codec:
    if kind not in CODECS:
        raise TypeMismatchError(f"Values of kind '{kind.value}' have no string encoding")

    return CODECS[kind]


def native_value(kind: ValueKind, value: Any) -> Any:
    """Validate a value for a typed put, returning it normalised for the kind.

    @param kind: The kind the value is being stored as
    @param value: The value to validate
    @return: The value to store
    @raises TypeMismatchError: If the value cannot be stored as the kind
    """

    if kind is ValueKind.OBJECT:
        return value

    codec = codec_for(kind)

    try:
        check_type(value, codec.python_type)
    except TypeCheckError as err:
        raise TypeMismatchError(
            f"Cannot store {type(value).__name__} as {kind.value}: {err}"
        ) from err

    if kind in (ValueKind.INT, ValueKind.LONG, ValueKind.FLOAT, ValueKind.DOUBLE) and isinstance(value, bool):
        raise TypeMismatchError(f"Cannot store bool as {kind.value}")

    if kind is ValueKind.INT and not INT32_MIN <= value <= INT32_MAX:
        raise TypeMismatchError(f"{value} does not fit in 32 bits; store it as long")
    if kind is ValueKind.LONG and not INT64_MIN <= value <= INT64_MAX:
        raise TypeMismatchError(f"{value} does not fit in 64 bits")
    if kind is ValueKind.FLOAT:
        return _to_single(float(value))
    if kind is ValueKind.DOUBLE:
        return float(value)
    if kind is ValueKind.CHAR and len(value) != 1:
        raise TypeMismatchError(f"A char must be exactly one character, got {len(value)}")
    if kind is ValueKind.DATETIME_OFFSET and value.tzinfo is None:
        raise TypeMismatchError("A datetime offset must carry a tzinfo")

    return value


def format_value(kind: ValueKind, value: Any) -> str:
    """Encode a value of the given kind as its canonical string."""

    return codec_for(kind).format(native_value(kind, value))


def parse_value(kind: ValueKind, text: str) -> Any:
    """Decode a canonical string into a value of the given kind.

    @raises FormatError: If the string cannot be parsed
    """

    codec = codec_for(kind)

    try:
        return codec.parse(text)
    except (ValueError, OverflowError) as err:
        raise FormatError(f"Cannot read '{text}' as {kind.value}") from err
