"""
Set-valued record predicate.

An [ObjectFilter][torbrotr.models.filter.ObjectFilter] holds three
independent category sets: fingerprints, string-form addresses and
nicknames. A record matches a populated filter when it matches *any*
category; an empty filter matches everything. Conjunction across categories
is deliberately not offered.

See Also:
    [ObjectStore.iterate()][torbrotr.models.store.ObjectStore.iterate]:
        Narrows iteration with a filter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Protocol

from .fingerprint import normalize_fingerprint


class FilterableRecord(Protocol):
    """What a record must expose to be matched by a filter."""

    @property
    def fingerprint(self) -> str: ...

    @property
    def nickname(self) -> str: ...

    @property
    def addresses(self) -> tuple[str, ...]: ...


def canonical_address(address: str | IPv4Address | IPv6Address) -> str:
    """Return the canonical string form of *address*.

    Strings that are not IP literals are kept verbatim (trimmed), so a
    filter can still hold them.
    """
    if isinstance(address, (IPv4Address, IPv6Address)):
        return str(address)
    text = address.strip().strip("[]")
    try:
        return str(ip_address(text))
    except ValueError:
        return address.strip()


@dataclass(slots=True)
class ObjectFilter:
    """Fingerprint / address / nickname filter with OR semantics.

    Built incrementally by its owner, then handed read-only to
    [ObjectStore.iterate()][torbrotr.models.store.ObjectStore.iterate].
    All ``add_*`` methods are idempotent.

    Examples:
        ```python
        flt = ObjectFilter()
        flt.add_fingerprint("9695dfc35ffeb861329b9f1ab04c46397020ce31")
        flt.add_nickname("seele")
        flt.matches(record)  # True for either relay
        ```
    """

    fingerprints: set[str] = field(default_factory=set)
    addresses: set[str] = field(default_factory=set)
    nicknames: set[str] = field(default_factory=set)

    def add_fingerprint(self, fingerprint: str) -> None:
        self.fingerprints.add(normalize_fingerprint(fingerprint))

    def add_address(self, address: str | IPv4Address | IPv6Address) -> None:
        self.addresses.add(canonical_address(address))

    def add_nickname(self, nickname: str) -> None:
        self.nicknames.add(nickname)

    def has_fingerprint(self, fingerprint: str) -> bool:
        return normalize_fingerprint(fingerprint) in self.fingerprints

    def has_address(self, address: str | IPv4Address | IPv6Address) -> bool:
        return canonical_address(address) in self.addresses

    def has_nickname(self, nickname: str) -> bool:
        return nickname in self.nicknames

    def is_empty(self) -> bool:
        return not (self.fingerprints or self.addresses or self.nicknames)

    def matches(self, record: FilterableRecord) -> bool:
        """Whether *record* passes the filter.

        Returns ``True`` for an empty filter; otherwise ``True`` iff the
        record's fingerprint, any of its addresses, or its nickname is held.
        """
        if self.is_empty():
            return True
        if self.has_fingerprint(record.fingerprint):
            return True
        if any(self.has_address(address) for address in record.addresses):
            return True
        return self.has_nickname(record.nickname)
