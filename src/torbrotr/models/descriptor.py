"""
Relay server descriptors.

A server descriptor is a relay's own statement about itself: identity,
listening endpoints, platform, uptime, bandwidth, family, contact, exit
policy and key material. Key blocks are kept as opaque PEM text.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
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
from .constants import PolicyAction
from .fingerprint import Fingerprint, normalize_fingerprint
from .status import format_timestamp, strip_commas


@dataclass(frozen=True, slots=True)
class ExitPattern:
    """One exit policy rule, e.g. ``accept *:22`` or ``reject 10.0.0.0/8:*``.

    Rules keep their line order inside a descriptor; the first matching rule
    wins when a policy is evaluated.
    """

    action: PolicyAction
    address_spec: str
    port_spec: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", PolicyAction(self.action))
        validate_str_no_null(self.address_spec, "address_spec")
        validate_str_no_null(self.port_spec, "port_spec")

    @classmethod
    def parse(cls, action: str, rule: str) -> ExitPattern:
        """Split ``<address>:<port>`` at its last colon (IPv6 specs contain colons).

        Raises:
            ValueError: If *rule* has no port part or *action* is unknown.
        """
        address_spec, sep, port_spec = rule.rpartition(":")
        if not sep or not address_spec or not port_spec:
            raise ValueError(f"exit pattern must look like <address>:<port>, got {rule!r}")
        return cls(PolicyAction(action), address_spec, port_spec)

    def __str__(self) -> str:
        return f"{self.action} {self.address_spec}:{self.port_spec}"


@dataclass(frozen=True, slots=True)
class OrAddress:
    """A secondary onion-router endpoint from an ``or-address`` line."""

    address: IPv4Address | IPv6Address
    port: int

    def __post_init__(self) -> None:
        validate_instance(self.address, (IPv4Address, IPv6Address), "address")
        validate_port(self.port, "port")

    def __str__(self) -> str:
        if isinstance(self.address, IPv6Address):
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


@dataclass(frozen=True, slots=True)
class RelayDescriptor:
    """Immutable (partial) relay server descriptor.

    All fields default to empty values so a descriptor can be built
    programmatically field by field.

    Attributes:
        fingerprint: Normalized relay identity from the ``fingerprint`` line.
        nickname: Relay nickname from the ``router`` line.
        address: IPv4 address from the ``router`` line.
        or_port: Onion-router port.
        socks_port: Obsolete SOCKS port (always 0 on current relays).
        dir_port: Directory port.
        or_addresses: Secondary endpoints from ``or-address`` lines.
        platform: Full ``platform`` line value.
        version: Software name of the platform line (``Tor``).
        version_number: Version following the software name.
        operating_system: Text after ``on`` in the platform line.
        published: Publication time (UTC).
        uptime: Seconds the relay has been running (0 if unparseable).
        bandwidth_avg: Average bandwidth, bytes per second.
        bandwidth_burst: Burst bandwidth, bytes per second.
        bandwidth_observed: Observed bandwidth, bytes per second.
        hibernating: Whether the relay declared itself hibernating.
        family: Normalized family members (fingerprints or nicknames).
        contact: Free-form contact string.
        hidden_service_dir: Whether the relay serves hidden service descriptors.
        onion_key: PEM block of the onion key.
        ntor_onion_key: Base64 curve25519 ntor key.
        signing_key: PEM block of the signing key.
        exit_policy: Exit policy rules in line order.
        raw_accept: Accept rule bodies, space-terminated, in line order.
        raw_reject: Reject rule bodies, space-terminated, in line order.
        raw_exit_policy: Every policy line, newline-terminated, in line order.
    """

    fingerprint: Fingerprint = ""
    nickname: str = ""
    address: IPv4Address | None = None
    or_port: int = 0
    socks_port: int = 0
    dir_port: int = 0
    or_addresses: tuple[OrAddress, ...] = ()
    platform: str = ""
    version: str = ""
    version_number: str = ""
    operating_system: str = ""
    published: datetime | None = None
    uptime: int = 0
    bandwidth_avg: int = 0
    bandwidth_burst: int = 0
    bandwidth_observed: int = 0
    hibernating: bool = False
    family: frozenset[str] = frozenset()
    contact: str = ""
    hidden_service_dir: bool = False
    onion_key: str = ""
    ntor_onion_key: str = ""
    signing_key: str = ""
    exit_policy: tuple[ExitPattern, ...] = ()
    raw_accept: str = ""
    raw_reject: str = ""
    raw_exit_policy: str = ""

    def __post_init__(self) -> None:
        for name in (
            "fingerprint",
            "nickname",
            "platform",
            "version",
            "version_number",
            "operating_system",
            "contact",
            "onion_key",
            "ntor_onion_key",
            "signing_key",
        ):
            validate_str_no_null(getattr(self, name), name)
        validate_optional_ip(self.address, 4, "address")
        validate_port(self.or_port, "or_port")
        validate_port(self.socks_port, "socks_port")
        validate_port(self.dir_port, "dir_port")
        validate_optional_datetime(self.published, "published")
        for name in ("uptime", "bandwidth_avg", "bandwidth_burst", "bandwidth_observed"):
            validate_uint(getattr(self, name), name)

        object.__setattr__(self, "fingerprint", normalize_fingerprint(self.fingerprint))
        object.__setattr__(self, "family", normalize_family(self.family))
        object.__setattr__(self, "or_addresses", tuple(self.or_addresses))
        object.__setattr__(self, "exit_policy", tuple(self.exit_policy))

    @property
    def addresses(self) -> tuple[str, ...]:
        """String forms of the primary address and every ``or-address`` host."""
        found: list[str] = [str(self.address)] if self.address is not None else []
        for or_address in self.or_addresses:
            host = str(or_address.address)
            if host not in found:
                found.append(host)
        return tuple(found)

    def has_family(self, member: str) -> bool:
        """Whether *member* (fingerprint, ``$``-prefixed or not, or nickname) is declared family."""
        return normalize_family_member(member) in self.family

    def __str__(self) -> str:
        """Canonical form: ``fingerprint,nickname,address,or_port,dir_port,published,uptime,os,version,contact``."""
        return ",".join(
            (
                self.fingerprint,
                self.nickname,
                str(self.address) if self.address is not None else "",
                str(self.or_port),
                str(self.dir_port),
                format_timestamp(self.published),
                str(self.uptime),
                strip_commas(self.operating_system),
                strip_commas(self.version),
                strip_commas(self.contact),
            )
        )


def normalize_family_member(member: str) -> str:
    """Normalize one ``family`` token: drop ``$`` and any ``~nickname``/``=nickname`` suffix.

    A bare nickname is normalized the same way as a fingerprint.
    """
    token = member.strip()
    if token.startswith("$"):
        token = token[1:]
        for separator in ("~", "="):
            token = token.split(separator, 1)[0]
    return normalize_fingerprint(token)


def normalize_family(members: Iterable[str]) -> frozenset[str]:
    if isinstance(members, str):
        raise TypeError("family must be an iterable of members, got str")
    return frozenset(m for m in (normalize_family_member(x) for x in members) if m)
