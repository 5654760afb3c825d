"""
Decoder for network status entries (consensus and bridge network status).

One entry looks like::

    r seele AAoQ1DAR6kkoo19hBAX5K0QztNw bdrzhG0Kk/8DUsnSdmzj7DjFQjY 2014-12-08 12:27:05 73.15.150.172 9001 0
    a [2002:470:6e:80d::2]:22
    s Fast Running Stable Valid
    v Tor 0.2.5.10
    w Bandwidth=18
    p reject 1-65535

Only the ``r`` line is required. Unknown keywords are ignored.
"""

from __future__ import annotations

from collections.abc import Callable
from ipaddress import IPv6Address
from typing import Any

from torbrotr.core.exceptions import FieldDecodeError
from torbrotr.models.constants import RouterFlag
from torbrotr.models.fingerprint import Fingerprint, normalize_fingerprint
from torbrotr.models.status import RelayAddress, RelayStatusEntry

from .fields import (
    Line,
    decode_base64_fingerprint,
    find_line,
    iter_lines,
    parse_bracketed_endpoint,
    parse_ipv4,
    parse_port,
    parse_timestamp,
    parse_uint,
)


IDENTITY_KEYWORD = "r"
_IDENTITY_ARGS = 8


def extract_status_fingerprint(raw: str) -> Fingerprint:
    """Read the identity of an entry from its ``r`` line alone.

    Raises:
        FieldDecodeError: If the chunk has no ``r`` line or its identity is
            not valid base64.
    """
    line = find_line(raw, IDENTITY_KEYWORD)
    if line is None:
        raise FieldDecodeError("status entry has no identity line", IDENTITY_KEYWORD)
    words = line.split()
    if len(words) < 3:
        raise FieldDecodeError(f"truncated identity line {line!r}", IDENTITY_KEYWORD)
    return normalize_fingerprint(decode_base64_fingerprint(words[2], IDENTITY_KEYWORD))


def _identity(values: dict[str, Any], line: Line) -> None:
    if len(line.args) < _IDENTITY_ARGS:
        raise FieldDecodeError(
            f"identity line needs {_IDENTITY_ARGS} fields, got {len(line.args)}", line.keyword
        )
    nickname, identity, digest, date, time, address, or_port, dir_port = line.args[:_IDENTITY_ARGS]
    values["nickname"] = nickname
    values["fingerprint"] = decode_base64_fingerprint(identity, line.keyword)
    values["digest"] = decode_base64_fingerprint(digest, line.keyword)
    values["published"] = parse_timestamp(date, time, line.keyword)
    values["ipv4_address"] = parse_ipv4(address, line.keyword)
    values["ipv4_or_port"] = parse_port(or_port)
    values["ipv4_dir_port"] = parse_port(dir_port)


def _alternate_address(values: dict[str, Any], line: Line) -> None:
    if not line.args:
        return
    address, port = parse_bracketed_endpoint(line.args[0], line.keyword)
    # the last IPv6 "a" line wins
    if isinstance(address, IPv6Address):
        values["ipv6_address"] = address
        values["ipv6_or_port"] = port


def _flags(values: dict[str, Any], line: Line) -> None:
    values["flags"] = frozenset(
        flag.value for flag in map(RouterFlag.lookup, line.args) if flag is not None
    )


def _version(values: dict[str, Any], line: Line) -> None:
    values["version"] = line.args[0] if line.args else ""
    values["version_number"] = line.args[1] if len(line.args) > 1 else ""


def _weights(values: dict[str, Any], line: Line) -> None:
    for arg in line.args:
        key, _, value = arg.partition("=")
        if key == "Bandwidth":
            values["bandwidth"] = parse_uint(value)
        elif key == "Measured":
            values["measured"] = parse_uint(value)
        elif key == "Unmeasured":
            values["unmeasured"] = value == "1"


def _port_summary(values: dict[str, Any], line: Line) -> None:
    if not line.args:
        return
    values["accept"] = line.args[0] == "accept"
    values["port_list"] = " ".join(line.args[1:])


_HANDLERS: dict[str, Callable[[dict[str, Any], Line], None]] = {
    "r": _identity,
    "a": _alternate_address,
    "s": _flags,
    "v": _version,
    "w": _weights,
    "p": _port_summary,
}

_ADDRESS_FIELDS = ("ipv4_address", "ipv4_or_port", "ipv4_dir_port", "ipv6_address", "ipv6_or_port")


def decode_status_entry(raw: str) -> RelayStatusEntry:
    """Decode one status entry chunk.

    Raises:
        FieldDecodeError: If the ``r`` line is missing, truncated, or carries
            an invalid identity, digest, timestamp or IPv4 address.
    """
    values: dict[str, Any] = {}
    for line in iter_lines(raw):
        handler = _HANDLERS.get(line.keyword)
        if handler is not None:
            handler(values, line)

    if "fingerprint" not in values:
        raise FieldDecodeError("status entry has no identity line", IDENTITY_KEYWORD)

    address = RelayAddress(**{k: values.pop(k) for k in _ADDRESS_FIELDS if k in values})
    return RelayStatusEntry(address=address, **values)


class StatusEntryCodec:
    """[RecordCodec][torbrotr.models.lazy.RecordCodec] for status entries."""

    def extract_fingerprint(self, raw: str) -> Fingerprint:
        return extract_status_fingerprint(raw)

    def decode(self, raw: str) -> RelayStatusEntry:
        return decode_status_entry(raw)
