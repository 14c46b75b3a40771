"""Sequence sets of message numbers or UIDs (RFC 3501 sequence-set)."""

from __future__ import annotations

import bisect
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

__all__ = ["BadSeqSetError", "Seq", "SeqSet", "parse_seq", "parse_seq_set"]

MAX_NUMBER = 0xFFFFFFFF
_NUMBER = re.compile(r"[1-9][0-9]*", re.ASCII)


class BadSeqSetError(ValueError):
    """Raised for a malformed sequence set value."""

    def __init__(self, value: str) -> None:
        super().__init__(f"bad sequence set value {value!r}")
        self.value = value


@dataclass(frozen=True)
class Seq:
    """A seq-number or seq-range; 0 stands for "*".

    A number has start == stop. Values are ordered start <= stop, except for
    "n:*", which is start = n and stop = 0.
    """

    start: int
    stop: int

    def contains(self, q: int) -> bool:
        """Whether seq-number q (0 for "*") lies in this value."""
        if q == 0:
            return self.stop == 0
        return self.start != 0 and self.start <= q and (q <= self.stop or self.stop == 0)

    def less(self, q: int) -> bool:
        """Whether this value precedes and does not contain q."""
        return (self.stop < q or q == 0) and self.stop != 0

    def merge(self, other: Seq) -> Seq | None:
        """Return the union of both values, or None if they do not touch."""
        if self == other:
            return self
        s, t = self, other
        if s.start != 0 and t.start != 0:
            if s.start > t.start:
                s, t = t, s
            if (s.stop >= t.stop and t.stop != 0) or s.stop == 0:
                return s
            if s.stop + 1 >= t.start:
                return Seq(s.start, t.stop)
            return None
        # exactly one of them is "*"
        if s.start == 0:
            return t if t.stop == 0 else None
        return s if s.stop == 0 else None

    def __str__(self) -> str:
        if self.start == self.stop:
            return "*" if self.start == 0 else str(self.start)
        stop = "*" if self.stop == 0 else str(self.stop)
        return f"{self.start}:{stop}"


def _parse_number(text: str) -> int:
    if text == "*":
        return 0
    if _NUMBER.fullmatch(text):
        number = int(text)
        if number <= MAX_NUMBER:
            return number
    raise BadSeqSetError(text)


def parse_seq(value: str) -> Seq:
    """Parse "n" or "n:m", where either side may be "*"."""
    head, sep, tail = value.partition(":")
    try:
        start = _parse_number(head)
        stop = _parse_number(tail) if sep else start
    except BadSeqSetError:
        raise BadSeqSetError(value) from None
    if (stop < start and stop != 0) or start == 0:
        start, stop = stop, start
    return Seq(start, stop)


@dataclass
class SeqSet:
    """A sorted set of sequence values; empty by default."""

    seqs: list[Seq] = field(default_factory=list)

    def add(self, text: str) -> None:
        """Insert the comma-separated values of text.

        Values inserted before an invalid one stay in the set.
        """
        for part in text.split(","):
            self._insert(parse_seq(part))

    def add_num(self, *args: int) -> None:
        """Insert sequence numbers; 0 stands for "*"."""
        for number in args:
            self._insert(Seq(number, number))

    def add_range(self, start: int, stop: int) -> None:
        """Insert the range start:stop."""
        if (stop < start and stop != 0) or start == 0:
            self._insert(Seq(stop, start))
        else:
            self._insert(Seq(start, stop))

    def add_set(self, other: SeqSet) -> None:
        """Insert every value of another set."""
        for seq in other.seqs:
            self._insert(seq)

    def clear(self) -> None:
        self.seqs.clear()

    def is_empty(self) -> bool:
        return not self.seqs

    def is_dynamic(self) -> bool:
        """Whether the set holds "*" or "n:*"."""
        return bool(self.seqs) and self.seqs[-1].stop == 0

    def contains(self, q: int) -> bool:
        """Whether the non-zero number q is in the set; "n:*" holds all q >= n."""
        _, found = self._search(q)
        return found and q != 0

    def __iter__(self) -> Iterator[Seq]:
        return iter(self.seqs)

    def __str__(self) -> str:
        return ",".join(str(seq) for seq in self.seqs)

    def _search(self, q: int) -> tuple[int, bool]:
        index = bisect.bisect_left(self.seqs, True, key=lambda seq: not seq.less(q))
        if index == len(self.seqs):
            return index, False
        return index, self.seqs[index].contains(q)

    def _insert(self, value: Seq) -> None:
        seqs = self.seqs
        i, _ = self._search(value.start)
        merged = False
        if i > 0:
            union = seqs[i - 1].merge(value)
            if union is not None:
                seqs[i - 1] = union
                merged = True
        if i == len(seqs):
            if not merged:
                seqs.append(value)
            return
        if merged:
            i -= 1
        else:
            union = seqs[i].merge(value)
            if union is None:
                seqs.insert(i, value)
                return
            seqs[i] = union
        # seqs[i] grew; absorb any following values it now touches
        for j in range(i + 1, len(seqs)):
            union = seqs[i].merge(seqs[j])
            if union is None:
                del seqs[i + 1 : j]
                return
            seqs[i] = union
        del seqs[i + 1 :]


def parse_seq_set(text: str) -> SeqSet:
    """Build a SeqSet from its string form."""
    result = SeqSet()
    result.add(text)
    return result