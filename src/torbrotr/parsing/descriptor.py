"""
Decoder for relay server descriptors.

Every descriptor starts with a ``router`` line and ends with the
``router-signature`` object block. Lines may carry the legacy ``opt``
prefix. The ``fingerprint`` line is the identity; policy lines
(``accept``/``reject``) are kept in document order because the first
matching rule wins.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from torbrotr.core.exceptions import FieldDecodeError
from torbrotr.models.descriptor import ExitPattern, OrAddress, RelayDescriptor
from torbrotr.models.fingerprint import Fingerprint, normalize_fingerprint

from .fields import (
    Line,
    find_line,
    iter_lines,
    parse_bool,
    parse_bracketed_endpoint,
    parse_ipv4,
    parse_port,
    parse_timestamp,
    parse_uint,
)


IDENTITY_KEYWORD = "fingerprint"
_ROUTER_ARGS = 5


def extract_descriptor_fingerprint(raw: str) -> Fingerprint:
    """Read the identity of a descriptor from its ``fingerprint`` line alone.

    Raises:
        FieldDecodeError: If the chunk has no (or an empty) ``fingerprint`` line.
    """
    line = find_line(raw, IDENTITY_KEYWORD)
    if line is None:
        raise FieldDecodeError("descriptor has no fingerprint line", IDENTITY_KEYWORD)
    words = line.split()
    if words[0] == "opt":
        words = words[1:]
    fingerprint = normalize_fingerprint("".join(words[1:]))
    if not fingerprint:
        raise FieldDecodeError("descriptor has an empty fingerprint line", IDENTITY_KEYWORD)
    return fingerprint


def _router(values: dict[str, Any], line: Line) -> None:
    if len(line.args) < _ROUTER_ARGS:
        raise FieldDecodeError(
            f"router line needs {_ROUTER_ARGS} fields, got {len(line.args)}", line.keyword
        )
    nickname, address, or_port, socks_port, dir_port = line.args[:_ROUTER_ARGS]
    values["nickname"] = nickname
    values["address"] = parse_ipv4(address, line.keyword)
    values["or_port"] = parse_port(or_port)
    values["socks_port"] = parse_port(socks_port)
    values["dir_port"] = parse_port(dir_port)


def _or_address(values: dict[str, Any], line: Line) -> None:
    if not line.args:
        return
    address, port = parse_bracketed_endpoint(line.args[0], line.keyword)
    values.setdefault("or_addresses", []).append(OrAddress(address, port))


def _platform(values: dict[str, Any], line: Line) -> None:
    args = line.args
    values["platform"] = " ".join(args)
    values["version"] = args[0] if args else ""
    if "on" in args:
        on = args.index("on")
        values["operating_system"] = " ".join(args[on + 1 :])
        values["version_number"] = args[1] if on > 1 else ""
    else:
        values["version_number"] = args[1] if len(args) > 1 else ""


def _published(values: dict[str, Any], line: Line) -> None:
    if len(line.args) < 2:
        raise FieldDecodeError("published line needs a date and a time", line.keyword)
    values["published"] = parse_timestamp(line.args[0], line.args[1], line.keyword)


def _fingerprint(values: dict[str, Any], line: Line) -> None:
    values.setdefault("fingerprint", "".join(line.args))


def _uptime(values: dict[str, Any], line: Line) -> None:
    values["uptime"] = parse_uint(line.args[0]) if line.args else 0


def _hibernating(values: dict[str, Any], line: Line) -> None:
    values["hibernating"] = parse_bool(line.args[0]) if line.args else False


def _bandwidth(values: dict[str, Any], line: Line) -> None:
    avg, burst, observed = (list(line.args) + ["", "", ""])[:3]
    values["bandwidth_avg"] = parse_uint(avg)
    values["bandwidth_burst"] = parse_uint(burst)
    values["bandwidth_observed"] = parse_uint(observed)


def _family(values: dict[str, Any], line: Line) -> None:
    values["family"] = line.args


def _contact(values: dict[str, Any], line: Line) -> None:
    values["contact"] = " ".join(line.args)


def _hidden_service_dir(values: dict[str, Any], line: Line) -> None:
    values["hidden_service_dir"] = True


def _onion_key(values: dict[str, Any], line: Line) -> None:
    values["onion_key"] = line.block


def _signing_key(values: dict[str, Any], line: Line) -> None:
    values["signing_key"] = line.block


def _ntor_onion_key(values: dict[str, Any], line: Line) -> None:
    values["ntor_onion_key"] = line.args[0] if line.args else ""


def _policy(values: dict[str, Any], line: Line) -> None:
    if not line.args:
        raise FieldDecodeError("policy line without a rule", line.keyword)
    rule = line.args[0]
    try:
        pattern = ExitPattern.parse(line.keyword, rule)
    except ValueError as e:
        raise FieldDecodeError(str(e), line.keyword) from e
    values.setdefault("exit_policy", []).append(pattern)
    raw_key = "raw_accept" if line.keyword == "accept" else "raw_reject"
    values[raw_key] = values.get(raw_key, "") + rule + " "
    values["raw_exit_policy"] = values.get("raw_exit_policy", "") + f"{line.keyword} {rule}\n"


_HANDLERS: dict[str, Callable[[dict[str, Any], Line], None]] = {
    "router": _router,
    "or-address": _or_address,
    "platform": _platform,
    "published": _published,
    "fingerprint": _fingerprint,
    "uptime": _uptime,
    "hibernating": _hibernating,
    "bandwidth": _bandwidth,
    "family": _family,
    "contact": _contact,
    "hidden-service-dir": _hidden_service_dir,
    "onion-key": _onion_key,
    "signing-key": _signing_key,
    "ntor-onion-key": _ntor_onion_key,
    "accept": _policy,
    "reject": _policy,
}


def decode_descriptor(raw: str) -> RelayDescriptor:
    """Decode one server descriptor chunk.

    Raises:
        FieldDecodeError: If the fingerprint line is missing, or the router
            line, published timestamp, an address or a policy rule is malformed.
    """
    values: dict[str, Any] = {}
    for line in iter_lines(raw, strip_opt=True):
        handler = _HANDLERS.get(line.keyword)
        if handler is not None:
            handler(values, line)

    if not normalize_fingerprint(values.get("fingerprint", "")):
        raise FieldDecodeError("descriptor has no fingerprint line", IDENTITY_KEYWORD)
    return RelayDescriptor(**values)


class DescriptorCodec:
    """[RecordCodec][torbrotr.models.lazy.RecordCodec] for server descriptors."""

    def extract_fingerprint(self, raw: str) -> Fingerprint:
        return extract_descriptor_fingerprint(raw)

    def decode(self, raw: str) -> RelayDescriptor:
        return decode_descriptor(raw)
