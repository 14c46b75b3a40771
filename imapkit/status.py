"""Status responses (RFC 3501 section 7.1)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from imapkit.write import RawString, Writer

__all__ = [
    "StatusRespType",
    "StatusRespCode",
    "StatusError",
    "StatusResp",
    "StatusRespError",
    "check_status",
]


class StatusRespType(str, Enum):
    """Status response types."""

    OK = "OK"
    NO = "NO"
    BAD = "BAD"
    PREAUTH = "PREAUTH"
    BYE = "BYE"

    def __str__(self) -> str:
        return self.value


class StatusRespCode(str, Enum):
    """Status response codes defined by RFC 3501."""

    ALERT = "ALERT"
    BAD_CHARSET = "BADCHARSET"
    CAPABILITY = "CAPABILITY"
    PARSE = "PARSE"
    PERMANENT_FLAGS = "PERMANENTFLAGS"
    READ_ONLY = "READ-ONLY"
    READ_WRITE = "READ-WRITE"
    TRY_CREATE = "TRYCREATE"
    UID_NEXT = "UIDNEXT"
    UID_VALIDITY = "UIDVALIDITY"
    UNSEEN = "UNSEEN"

    def __str__(self) -> str:
        return self.value


class StatusError(Exception):
    """A NO or BAD status, or a missing one."""


@dataclass
class StatusResp:
    """A status response; an empty tag is written as "*"."""

    type: StatusRespType | str
    tag: str = ""
    code: StatusRespCode | str = ""
    arguments: list[Any] = field(default_factory=list)
    info: str = ""

    def check(self) -> None:
        """Raise StatusError carrying the info if this is NO or BAD."""
        if str(self.type) in (StatusRespType.NO.value, StatusRespType.BAD.value):
            raise StatusError(self.info)

    def write_to(self, writer: Writer) -> None:
        tag = self.tag or "*"
        writer.write_fields([RawString(tag), RawString(str(self.type))])
        writer.write_string(" ")
        if self.code:
            writer.write_resp_code(str(self.code), self.arguments)
            writer.write_string(" ")
        writer.write_string(self.info)
        writer.write_crlf()


class StatusRespError(Exception):
    """Replaces the default status response; None suppresses it."""

    def __init__(self, resp: StatusResp | None = None) -> None:
        super().__init__("suppressed response" if resp is None else resp.info)
        self.resp = resp


def check_status(resp: StatusResp | None) -> None:
    """Raise StatusError if resp is missing or is NO or BAD."""
    if resp is None:
        raise StatusError("connection closed during command execution")
    resp.check()