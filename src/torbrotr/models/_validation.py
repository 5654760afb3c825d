"""Shared validation helpers for frozen dataclass models.

Private module, not part of the public API. Used by ``__post_init__``
methods in sibling model modules to enforce runtime type constraints and
null-byte safety before an instance escapes its constructor.
"""

from __future__ import annotations

from datetime import datetime
from ipaddress import IPv4Address, IPv6Address
from typing import Any

from .constants import PORT_MAX


def validate_instance(value: Any, expected: type | tuple[type, ...], name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        label = (
            " or ".join(t.__name__ for t in expected)
            if isinstance(expected, tuple)
            else expected.__name__
        )
        article = "an" if label[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {label}, got {type(value).__name__}")


def validate_str_no_null(value: Any, name: str) -> None:
    """Raise if *value* is not a ``str`` or contains null bytes."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if "\x00" in value:
        raise ValueError(f"{name} contains null bytes")


def validate_uint(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_port(value: Any, name: str) -> None:
    """Raise if *value* is not an unsigned 16-bit ``int``."""
    validate_uint(value, name)
    if value > PORT_MAX:
        raise ValueError(f"{name} must be at most {PORT_MAX}")


def validate_optional_ip(value: Any, version: int, name: str) -> None:
    """Raise if *value* is neither ``None`` nor an address of the given IP version."""
    if value is None:
        return
    validate_instance(value, IPv4Address if version == 4 else IPv6Address, name)


def validate_optional_datetime(value: Any, name: str) -> None:
    """Raise if *value* is neither ``None`` nor a timezone-aware ``datetime``."""
    if value is None:
        return
    validate_instance(value, datetime, name)
    if value.tzinfo is None:
        raise ValueError(f"{name} must be timezone-aware")
