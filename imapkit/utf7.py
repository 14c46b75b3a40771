"""Modified UTF-7 encoding for IMAP mailbox names (RFC 3501 section 5.1.3)."""

from __future__ import annotations

import base64
import binascii
import itertools
import struct
from collections.abc import Iterator

__all__ = ["InvalidUTF7Error", "encode", "decode"]

_MIN = 0x20  # smallest self-representing value
_MAX = 0x7E  # largest self-representing value
_REPLACEMENT = "\ufffd"
_ALTCHARS = b"+,"
_B64_ALPHABET = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+,"
)


class InvalidUTF7Error(ValueError):
    """Raised when input is not valid modified UTF-7."""

    def __init__(self, message: str = "invalid modified UTF-7") -> None:
        super().__init__(message)


def _is_printable(ch: str) -> bool:
    return _MIN <= ord(ch) <= _MAX


def _utf8_chars(data: bytes) -> Iterator[str]:
    """Decode UTF-8, replacing each byte of an invalid sequence with U+FFFD."""
    i = 0
    while i < len(data):
        lead = data[i]
        if lead < 0x80:
            size = 1
        elif 0xC2 <= lead <= 0xDF:
            size = 2
        elif 0xE0 <= lead <= 0xEF:
            size = 3
        elif 0xF0 <= lead <= 0xF4:
            size = 4
        else:
            size = 0
        if size:
            try:
                yield data[i : i + size].decode("utf-8")
            except UnicodeDecodeError:
                pass
            else:
                i += size
                continue
        yield _REPLACEMENT
        i += 1


def _as_text(text: str | bytes | bytearray) -> str:
    if isinstance(text, (bytes, bytearray)):
        return "".join(_utf8_chars(bytes(text)))
    return "".join(
        _REPLACEMENT if 0xD800 <= ord(ch) <= 0xDFFF else ch for ch in text
    )


def _encode_run(run: str) -> str:
    raw = run.encode("utf-16-be")
    b64 = base64.b64encode(raw, altchars=_ALTCHARS).rstrip(b"=").decode("ascii")
    return f"&{b64}-"


def encode(text: str | bytes | bytearray) -> str:
    """Encode text as modified UTF-7.

    Bytes are read as UTF-8; every byte of an invalid sequence becomes U+FFFD.
    """
    parts = []
    for printable, group in itertools.groupby(_as_text(text), key=_is_printable):
        run = "".join(group)
        parts.append(run.replace("&", "&-") if printable else _encode_run(run))
    return "".join(parts)


def _decode_segment(segment: str) -> str:
    if segment.endswith("=") or not set(segment) <= _B64_ALPHABET:
        raise InvalidUTF7Error("invalid base64 in modified UTF-7")
    padded = segment + "=" * (-len(segment) % 4)
    try:
        raw = base64.b64decode(padded, altchars=_ALTCHARS)
    except binascii.Error as exc:
        raise InvalidUTF7Error("invalid base64 in modified UTF-7") from exc
    if len(raw) % 2:
        raise InvalidUTF7Error("truncated UTF-16 in modified UTF-7")

    units = iter(struct.unpack(f">{len(raw) // 2}H", raw))
    chars = []
    for unit in units:
        if 0xD800 <= unit <= 0xDFFF:
            low = next(units, None)
            if low is None or not (
                unit <= 0xDBFF and 0xDC00 <= low <= 0xDFFF
            ):
                raise InvalidUTF7Error("bad surrogate in modified UTF-7")
            code = 0x10000 + ((unit - 0xD800) << 10) + (low - 0xDC00)
        elif _MIN <= unit <= _MAX:
            raise InvalidUTF7Error("printable ASCII encoded in base64")
        else:
            code = unit
        chars.append(chr(code))
    if not chars:
        raise InvalidUTF7Error("empty base64 segment")
    return "".join(chars)


def decode(text: str | bytes | bytearray) -> str:
    """Decode modified UTF-7 text, raising InvalidUTF7Error on bad input."""
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("latin-1")

    out = []
    ascii_mode = True
    i = 0
    while i < len(text):
        ch = text[i]
        if not _is_printable(ch):
            raise InvalidUTF7Error(f"illegal character {ch!r}")
        if ch != "&":
            out.append(ch)
            ascii_mode = True
            i += 1
            continue

        end = text.find("-", i + 1)
        segment = text[i + 1 :] if end < 0 else text[i + 1 : end]
        if "\r" in segment or "\n" in segment:
            raise InvalidUTF7Error("line break inside base64 segment")
        if end < 0:
            raise InvalidUTF7Error("unterminated base64 segment")

        if not segment:
            out.append("&")
            ascii_mode = True
        else:
            if not ascii_mode:
                raise InvalidUTF7Error("adjacent base64 segments")
            out.append(_decode_segment(segment))
            ascii_mode = False
        i = end + 1
    return "".join(out)