"""Relay identity normalization.

A fingerprint is a relay identity written as hexadecimal digits. Two
fingerprints are equal iff their normalized forms (trimmed and upper-cased)
are byte-equal, so every insertion and lookup boundary in
[ObjectStore][torbrotr.models.store.ObjectStore] and
[ObjectFilter][torbrotr.models.filter.ObjectFilter] routes through
[normalize_fingerprint()][torbrotr.models.fingerprint.normalize_fingerprint].
"""

from __future__ import annotations

import string
from typing import TypeAlias

from .constants import FINGERPRINT_HEX_LENGTH


Fingerprint: TypeAlias = str

_HEX_DIGITS = frozenset(string.hexdigits)


def normalize_fingerprint(fingerprint: str) -> Fingerprint:
    """Return the canonical form of *fingerprint*: surrounding whitespace removed, upper case.

    Examples:
        ```python
        normalize_fingerprint("  9695dfc35ffeb861329b9f1ab04c46397020ce31\\n")
        # '9695DFC35FFEB861329B9F1AB04C46397020CE31'
        ```
    """
    return fingerprint.strip().upper()


def is_valid_fingerprint(fingerprint: str) -> bool:
    """Whether *fingerprint* normalizes to exactly 40 hexadecimal digits."""
    normalized = normalize_fingerprint(fingerprint)
    return len(normalized) == FINGERPRINT_HEX_LENGTH and all(c in _HEX_DIGITS for c in normalized)
