"""
Relay status entries as published in network status documents.

A status entry is the network-wide vote on one relay: its identity, the
address it was seen at, the flags the authorities assigned to it, its
software version and bandwidth weight. Entries are decoded by
[decode_status_entry()][torbrotr.parsing.status.decode_status_entry] from the
``r``/``a``/``s``/``v``/``w``/``p`` lines of one record chunk.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from ipaddress import IPv4Address, IPv6Address

from ._validation import (
    validate_instance,
    validate_optional_datetime,
    validate_optional_ip,
    validate_port,
    validate_str_no_null,
    validate_uint,
)
from .constants import RouterFlag
from .fingerprint import Fingerprint, normalize_fingerprint


def format_timestamp(value: datetime | None) -> str:
    """Render *value* as RFC 3339 (``2014-12-08T06:57:54Z``), or ``""`` when absent."""
    if value is None:
        return ""
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def strip_commas(value: str) -> str:
    return value.replace(",", "")


@dataclass(frozen=True, slots=True)
class RelayAddress:
    """The endpoints a relay listens on.

    The IPv4 endpoint comes from the identity line and is always present on
    a decoded entry; the IPv6 endpoint comes from an optional ``a`` line.

    Examples:
        ```python
        str(address)   # '193.11.166.194|9000|80,2002:470:6e:80d::2|22'
        ```
    """

    ipv4_address: IPv4Address | None = None
    ipv4_or_port: int = 0
    ipv4_dir_port: int = 0
    ipv6_address: IPv6Address | None = None
    ipv6_or_port: int = 0

    def __post_init__(self) -> None:
        validate_optional_ip(self.ipv4_address, 4, "ipv4_address")
        validate_optional_ip(self.ipv6_address, 6, "ipv6_address")
        validate_port(self.ipv4_or_port, "ipv4_or_port")
        validate_port(self.ipv4_dir_port, "ipv4_dir_port")
        validate_port(self.ipv6_or_port, "ipv6_or_port")

    @property
    def addresses(self) -> tuple[str, ...]:
        """String forms of every address present, IPv4 first."""
        return tuple(str(a) for a in (self.ipv4_address, self.ipv6_address) if a is not None)

    def __str__(self) -> str:
        ipv4_parts = [str(self.ipv4_address)] if self.ipv4_address is not None else []
        ipv4_parts += [str(self.ipv4_or_port), str(self.ipv4_dir_port)]
        rendered = "|".join(ipv4_parts)
        if self.ipv6_address is None:
            return rendered
        return f"{rendered},{self.ipv6_address}|{self.ipv6_or_port}"


@dataclass(frozen=True, slots=True)
class RelayStatusEntry:
    """Immutable relay status entry.

    Attributes:
        fingerprint: Normalized relay identity (upper-case hex).
        nickname: Relay nickname from the ``r`` line.
        digest: Hex digest of the relay's current descriptor.
        published: Publication time of that descriptor (UTC).
        address: IPv4 (and optional IPv6) endpoints.
        flags: Flags from the ``s`` line, as their vocabulary spellings.
        version: Second token of the ``v`` line (the software name, ``Tor``).
        version_number: Third token of the ``v`` line, when present.
        bandwidth: ``Bandwidth=`` weight of the ``w`` line.
        measured: ``Measured=`` weight of the ``w`` line (0 when absent).
        unmeasured: Whether the ``w`` line carried ``Unmeasured=1``.
        accept: True for ``p accept``, False for ``p reject``.
        port_list: Port summary following the ``p`` line's action.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a flag is outside the vocabulary or a string field
            contains null bytes.
    """

    fingerprint: Fingerprint = ""
    nickname: str = ""
    digest: str = ""
    published: datetime | None = None
    address: RelayAddress = field(default_factory=RelayAddress)
    flags: frozenset[str] = frozenset()
    version: str = ""
    version_number: str = ""
    bandwidth: int = 0
    measured: int = 0
    unmeasured: bool = False
    accept: bool = False
    port_list: str = ""

    def __post_init__(self) -> None:
        for name in ("fingerprint", "nickname", "digest", "version", "version_number", "port_list"):
            validate_str_no_null(getattr(self, name), name)
        validate_optional_datetime(self.published, "published")
        validate_instance(self.address, RelayAddress, "address")
        validate_uint(self.bandwidth, "bandwidth")
        validate_uint(self.measured, "measured")

        object.__setattr__(self, "fingerprint", normalize_fingerprint(self.fingerprint))
        object.__setattr__(self, "flags", _coerce_flags(self.flags))

    @property
    def addresses(self) -> tuple[str, ...]:
        return self.address.addresses

    def has_flag(self, flag: RouterFlag | str) -> bool:
        """Whether the entry carries *flag* (a ``RouterFlag`` or its spelling)."""
        return str(flag) in self.flags

    def __str__(self) -> str:
        """Canonical form: ``fingerprint,nickname,address,flags,published,version``."""
        return ",".join(
            (
                self.fingerprint,
                self.nickname,
                str(self.address),
                format_flags(self.flags),
                format_timestamp(self.published),
                strip_commas(self.version),
            )
        )


def format_flags(flags: Iterable[str]) -> str:
    """Join *flags* with ``|`` in vocabulary order."""
    present = set(flags)
    return "|".join(flag.value for flag in RouterFlag if flag.value in present)


def _coerce_flags(flags: Iterable[str]) -> frozenset[str]:
    if isinstance(flags, str):
        raise TypeError("flags must be an iterable of flag names, got str")
    coerced: set[str] = set()
    for flag in flags:
        member = RouterFlag.lookup(str(flag))
        if member is None:
            raise ValueError(f"unknown router flag: {flag!r}")
        coerced.add(member.value)
    return frozenset(coerced)
