# imapkit

Building blocks for IMAP (RFC 3501) software, with no third-party
dependencies.

- `imapkit.utf7`: the modified UTF-7 encoding used for mailbox names
  (`encode`, `decode`, `InvalidUTF7Error`).
- `imapkit.seqset`: message sequence numbers and UID sets (`Seq`, `SeqSet`,
  `parse_seq`, `parse_seq_set`, `BadSeqSetError`).
- `imapkit.write`: serialising protocol fields to a binary stream (`Writer`,
  `RawString`, `Date`, `DateTime`, `SearchDate`, `LiteralLengthError`,
  `format_string_list`).
- `imapkit.status`: status responses such as `OK`, `NO` and `BAD`
  (`StatusResp`, `StatusRespType`, `StatusRespCode`, `StatusError`,
  `StatusRespError`, `check_status`).

## Installation

```
pip install .
```

## Examples

Mailbox names:

```python
from imapkit.utf7 import encode, decode

encode("~peter/mail/台北/日本語")   # '~peter/mail/&U,BTFw-/&ZeVnLIqe-'
decode("&Jjo-!")                    # '☺!'
```

`decode` raises `InvalidUTF7Error` (a `ValueError`) on malformed input.

Sequence sets:

```python
from imapkit.seqset import parse_seq_set

s = parse_seq_set("1,2,3,7:9,20:*")
str(s)            # '1:3,7:9,20:*'
s.contains(8)     # True
s.is_dynamic()    # True
```

Values are merged and kept sorted as they are added; `0` stands for `*`.
Malformed values raise `BadSeqSetError`.

Writing fields and a status response:

```python
import io
from imapkit.status import StatusResp, StatusRespType
from imapkit.write import RawString, Writer

buf = io.BytesIO()
w = Writer(buf)
w.write_line(RawString("*"), RawString("SEARCH"), 2, 5)
StatusResp(tag="a001", type=StatusRespType.OK, info="SEARCH completed").write_to(w)
buf.getvalue()    # b'* SEARCH 2 5\r\na001 OK SEARCH completed\r\n'
```

Plain strings are written quoted, or as a literal when they hold non-ASCII
or control characters; lists are written in parentheses; `None` is `NIL`.
With `allow_async_literals=True`, literals of up to 4096 bytes are written
in the non-synchronising `{n+}` form.

`StatusResp.check()` and `check_status()` raise `StatusError` for `NO` and
`BAD` responses (and `check_status` also for a missing response).

## What this package does not do

It only writes protocol data. It has no parser for incoming commands or
responses, no SEARCH criteria handling, and no IMAP client or server, nor
any mailbox storage.

## Running the tests

```
pip install ".[test]"
pytest
```