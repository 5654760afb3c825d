"""
Line splitting and scalar field decoders shared by every record family.

Records are line oriented: each line starts with a keyword followed by
whitespace-separated arguments, optionally followed by a PEM-style object
block (``-----BEGIN ...-----`` to ``-----END ...-----``). The helpers here
are pure functions; identity, address and timestamp failures raise
[FieldDecodeError][torbrotr.core.exceptions.FieldDecodeError] while numeric
counters (bandwidth, uptime, ports) degrade to ``0``.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from ipaddress import IPv4Address, IPv6Address, ip_address

from torbrotr.core.exceptions import FieldDecodeError
from torbrotr.models.constants import PORT_MAX


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_BLOCK_BEGIN = "-----BEGIN "
_BLOCK_END = "-----END "


@dataclass(frozen=True, slots=True)
class Line:
    """One keyword line of a record, with its trailing object block if any."""

    keyword: str
    args: tuple[str, ...]
    block: str = ""


def iter_lines(chunk: str, *, strip_opt: bool = False) -> Iterator[Line]:
    """Split *chunk* into [Line][torbrotr.parsing.fields.Line] items.

    Blank lines are skipped. Object blocks are attached, verbatim and
    newline-joined, to the keyword line that precedes them. With
    *strip_opt*, a leading ``opt`` token is dropped so ``opt fingerprint``
    reads as ``fingerprint``.
    """
    pending: Line | None = None
    block: list[str] | None = None

    for text in chunk.split("\n"):
        if block is not None:
            block.append(text)
            if text.startswith(_BLOCK_END):
                if pending is not None:
                    pending = Line(pending.keyword, pending.args, "\n".join(block))
                block = None
            continue
        if text.startswith(_BLOCK_BEGIN):
            block = [text]
            continue

        words = text.split()
        if not words:
            continue
        if strip_opt and words[0] == "opt":
            words = words[1:]
            if not words:
                continue
        if pending is not None:
            yield pending
        pending = Line(words[0], tuple(words[1:]))

    if pending is not None:
        yield pending


def find_line(chunk: str, keyword: str) -> str | None:
    """Return the first line of *chunk* whose keyword is *keyword*, without splitting the rest.

    The ``opt`` prefix is honoured. Only the text up to the matching line is
    scanned.
    """
    for prefix in (f"{keyword} ", f"opt {keyword} "):
        if chunk.startswith(prefix):
            start = 0
        else:
            start = chunk.find(f"\n{prefix}")
            if start < 0:
                continue
            start += 1
        end = chunk.find("\n", start)
        return chunk[start:] if end < 0 else chunk[start:end]
    return None


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


def decode_base64_fingerprint(value: str, keyword: str | None = None) -> str:
    """Decode an unpadded base64 identity into upper-case hex.

    Directory documents strip the ``=`` padding, so it is restored before
    decoding.

    Raises:
        FieldDecodeError: If *value* is not valid base64.

    Examples:
        ```python
        decode_base64_fingerprint("OVSyFvUCAKNSYpz8ZPArMLqf0Ds")
        # '3954B216F50200A352629CFC64F02B30BA9FD03B'
        ```
    """
    padded = value + "=" * (-len(value) % 4)
    try:
        decoded = base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FieldDecodeError(f"invalid base64 identity {value!r}: {e}", keyword) from e
    return decoded.hex().upper()


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def _is_uint(value: str) -> bool:
    return value.isascii() and value.isdigit()


def parse_uint(value: str) -> int:
    """Parse an unsigned integer, returning ``0`` for anything else."""
    return int(value) if _is_uint(value) else 0


def parse_port(value: str) -> int:
    """Parse a port number, returning ``0`` unless it fits in 16 unsigned bits."""
    port = parse_uint(value)
    return port if port <= PORT_MAX else 0


def parse_bool(value: str) -> bool:
    """``1``/``t``/``true`` in any case are true; everything else is false."""
    return value.lower() in ("1", "t", "true")


# ---------------------------------------------------------------------------
# Timestamps and addresses
# ---------------------------------------------------------------------------


def parse_timestamp(date: str, time: str, keyword: str | None = None) -> datetime:
    """Parse the two-token ``YYYY-MM-DD HH:MM:SS`` form into an aware UTC datetime.

    Raises:
        FieldDecodeError: If the tokens do not form a valid timestamp.
    """
    try:
        return datetime.strptime(f"{date} {time}", TIMESTAMP_FORMAT).replace(tzinfo=UTC)
    except ValueError as e:
        raise FieldDecodeError(f"invalid timestamp {date!r} {time!r}", keyword) from e


def parse_ip(value: str, keyword: str | None = None) -> IPv4Address | IPv6Address:
    """Parse an IP literal (brackets around IPv6 are accepted).

    Raises:
        FieldDecodeError: If *value* is not an IP address.
    """
    text = value[1:-1] if value.startswith("[") and value.endswith("]") else value
    try:
        return ip_address(text)
    except ValueError as e:
        raise FieldDecodeError(f"invalid IP address {value!r}", keyword) from e


def parse_ipv4(value: str, keyword: str | None = None) -> IPv4Address:
    address = parse_ip(value, keyword)
    if not isinstance(address, IPv4Address):
        raise FieldDecodeError(f"expected an IPv4 address, got {value!r}", keyword)
    return address


def parse_bracketed_endpoint(
    value: str, keyword: str | None = None
) -> tuple[IPv4Address | IPv6Address, int]:
    """Split an ``address:port`` endpoint where IPv6 addresses are bracketed.

    ``[2002:470:6e:80d::2]:22`` splits at the closing bracket, never at the
    colons inside the address; ``1.2.3.4:9001`` splits at its only colon.
    The port degrades to ``0`` when unparseable.

    Raises:
        FieldDecodeError: If the brackets are unbalanced or the address is invalid.
    """
    if value.startswith("["):
        close = value.find("]")
        if close < 0 or value[close + 1 : close + 2] != ":":
            raise FieldDecodeError(f"malformed bracketed endpoint {value!r}", keyword)
        host, port = value[1:close], value[close + 2 :]
    else:
        host, sep, port = value.rpartition(":")
        if not sep:
            raise FieldDecodeError(f"endpoint without port {value!r}", keyword)
    return parse_ip(host, keyword), parse_port(port)
