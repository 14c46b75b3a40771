"""Serialisation of IMAP fields onto a byte stream."""

from __future__ import annotations

import datetime as _dt
import io
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol, runtime_checkable

from imapkit.seqset import SeqSet

__all__ = [
    "RawString",
    "Date",
    "DateTime",
    "SearchDate",
    "LiteralLengthError",
    "Writer",
    "format_string_list",
]

CRLF = "\r\n"
NIL_ATOM = "NIL"
UNSYNC_LITERAL_LIMIT = 4096

_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_ESCAPES = {
    "\a": "\\a", "\b": "\\b", "\f": "\\f", "\n": "\\n",
    "\r": "\\r", "\t": "\\t", "\v": "\\v", "\\": "\\\\", '"': '\\"',
}


class RawString(str):
    """A string written as is, without quoting."""


@runtime_checkable
class Literal(Protocol):
    """A readable byte source that knows its own length."""

    def read(self, size: int = -1) -> bytes: ...

    def __len__(self) -> int: ...


class _SizedBytes(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self._size = len(data)

    def __len__(self) -> int:
        return self._size


def _as_datetime(value: _dt.date) -> _dt.datetime:
    if isinstance(value, _dt.datetime):
        return value
    return _dt.datetime.combine(value, _dt.time())


def _format_offset(value: _dt.datetime) -> str:
    offset = value.utcoffset() or _dt.timedelta(0)
    minutes = int(offset.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{mins:02d}"


def _format_date(value: _dt.date) -> str:
    return f"{value.day}-{_MONTHS[value.month - 1]}-{value.year:04d}"


def _format_date_time(value: _dt.date) -> str:
    moment = _as_datetime(value)
    return (
        f"{moment.day:02d}-{_MONTHS[moment.month - 1]}-{moment.year:04d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d} "
        f"{_format_offset(moment)}"
    )


@dataclass(frozen=True)
class Date:
    """A date written as "d-Mon-yyyy"; None is written as NIL."""

    value: _dt.date | None = None

    def format(self) -> str:
        assert self.value is not None
        return _format_date(self.value)


@dataclass(frozen=True)
class SearchDate(Date):
    """A date argument of a SEARCH key, written as "d-Mon-yyyy"."""


@dataclass(frozen=True)
class DateTime:
    """A date-time written as "dd-Mon-yyyy hh:mm:ss +zzzz"; None is NIL."""

    value: _dt.date | None = None

    def format(self) -> str:
        assert self.value is not None
        return _format_date_time(self.value)


class LiteralLengthError(ValueError):
    """Raised when a literal's stated length does not match its data."""

    def __init__(self, actual: int, expected: int) -> None:
        super().__init__(
            f"size of literal is not equal to its length ({expected} != {actual})"
        )
        self.actual = actual
        self.expected = expected


def _quote(text: str) -> str:
    parts = ['"']
    for ch in text:
        if ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        elif ord(ch) < 0x80:
            parts.append(f"\\x{ord(ch):02x}")
        elif ord(ch) <= 0xFFFF:
            parts.append(f"\\u{ord(ch):04x}")
        else:
            parts.append(f"\\U{ord(ch):08x}")
    parts.append('"')
    return "".join(parts)


def _is_ascii(text: str) -> bool:
    return all(0x20 <= ord(ch) < 0x7F for ch in text)


def format_string_list(values: Iterable[str]) -> list[Any]:
    """Turn a list of strings into a list of fields."""
    return list(values)


class Writer:
    """Writes IMAP fields to a binary stream.

    ``continues``, when given, is called before each synchronising literal and
    must return True once the peer has sent a continuation request.
    """

    def __init__(
        self,
        stream: BinaryIO,
        allow_async_literals: bool = False,
        continues: Callable[[], bool] | None = None,
    ) -> None:
        self.stream = stream
        self.allow_async_literals = allow_async_literals
        self.continues = continues

    def write_string(self, text: str) -> None:
        self.stream.write(text.encode("utf-8"))

    def write_crlf(self) -> None:
        self.write_string(CRLF)
        self.flush()

    def write_number(self, num: int) -> None:
        self.write_string(str(num % (1 << 32)))

    def write_quoted(self, text: str) -> None:
        self.write_string(_quote(text))

    def _write_quoted_or_literal(self, text: str) -> None:
        if _is_ascii(text):
            self.write_quoted(text)
        else:
            # 8-bit data is only allowed inside literals
            self.write_literal(text.encode("utf-8"))

    def _write_date(self, value: Date | DateTime) -> None:
        if value.value is None:
            self.write_string(NIL_ATOM)
        else:
            self.write_quoted(value.format())

    def write_fields(self, fields: Iterable[Any]) -> None:
        for index, item in enumerate(fields):
            if index:
                self.write_string(" ")
            self.write_field(item)

    def write_list(self, fields: Iterable[Any]) -> None:
        self.write_string("(")
        self.write_fields(fields)
        self.write_string(")")

    def write_literal(self, literal: Literal | bytes | bytearray | memoryview | None) -> None:
        if literal is None:
            self.write_string(NIL_ATOM)
            return
        if isinstance(literal, (bytes, bytearray, memoryview)):
            literal = _SizedBytes(bytes(literal))

        expected = len(literal)
        unsync = self.allow_async_literals and expected <= UNSYNC_LITERAL_LIMIT
        self.write_string("{" + str(expected) + ("+" if unsync else "") + "}" + CRLF)

        if not unsync and self.continues is not None:
            # flush first, otherwise no continuation request may ever arrive
            self.flush()
            if not self.continues():
                raise ConnectionError(
                    "cannot send literal: no continuation request received"
                )

        written = 0
        while written < expected:
            chunk = literal.read(expected - written)
            if not chunk:
                raise LiteralLengthError(written, expected)
            self.stream.write(chunk)
            written += len(chunk)

        extra = 0
        while chunk := literal.read(65536):
            extra += len(chunk)
        if extra:
            raise LiteralLengthError(written + extra, expected)

    def write_field(self, field: Any) -> None:
        if field is None:
            self.write_string(NIL_ATOM)
        elif isinstance(field, RawString):
            self.write_string(str(field))
        elif isinstance(field, str):
            self._write_quoted_or_literal(field)
        elif isinstance(field, bool):
            raise TypeError(f"cannot format field: {field!r}")
        elif isinstance(field, int):
            self.write_number(field)
        elif isinstance(field, (bytes, bytearray, memoryview, Literal)):
            self.write_literal(field)
        elif isinstance(field, (list, tuple)):
            self.write_list(field)
        elif isinstance(field, (Date, DateTime)):
            self._write_date(field)
        elif isinstance(field, _dt.datetime):
            self._write_date(DateTime(field))
        elif isinstance(field, SeqSet):
            self.write_string(str(field))
        else:
            raise TypeError(f"cannot format field: {field!r}")

    def write_resp_code(self, code: str, args: Iterable[Any] | None) -> None:
        self.write_string("[")
        self.write_fields([RawString(str(code)), *(args or ())])
        self.write_string("]")

    def write_line(self, *args: Any) -> None:
        self.write_fields(args)
        self.write_crlf()

    def flush(self) -> None:
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()