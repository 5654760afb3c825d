"""Consensus header metadata.

The header of a consensus (everything before the first ``dir-source``
section) is a list of ``keyword value`` lines. [parse_meta_info()][torbrotr.parsing.meta.parse_meta_info]
keeps them as strings; [ConsensusMeta][torbrotr.parsing.meta.ConsensusMeta]
decodes the validity period and the shared random values.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from torbrotr.core.exceptions import FieldDecodeError

from .fields import parse_timestamp


_HEADER_END_KEYWORDS = ("dir-source", "fingerprint")


def parse_meta_info(preamble: str) -> dict[str, str]:
    """Collect the ``keyword value`` lines of a document header.

    Stops at the first ``dir-source`` (or ``fingerprint``) line. ``@type``
    annotations and blank lines are skipped; the first occurrence of a
    keyword wins.
    """
    meta: dict[str, str] = {}
    for line in preamble.split("\n"):
        line = line.strip()
        if not line or line.startswith("@"):
            continue
        key, _, value = line.partition(" ")
        if key in _HEADER_END_KEYWORDS:
            break
        meta.setdefault(key, value.strip())
    return meta


def _timestamp(meta: Mapping[str, str], key: str) -> datetime:
    value = meta.get(key)
    if value is None:
        raise FieldDecodeError(f"consensus header has no {key} line", key)
    date, _, time = value.partition(" ")
    return parse_timestamp(date, time, key)


def _shared_random(meta: Mapping[str, str], key: str) -> bytes | None:
    value = meta.get(key)
    if value is None:
        return None
    # "<number of reveals> <base64 value>"
    _, sep, encoded = value.partition(" ")
    if not sep:
        raise FieldDecodeError(f"malformed shared random line {value!r}", key)
    try:
        return base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise FieldDecodeError(f"invalid shared random value {encoded!r}", key) from e


@dataclass(frozen=True, slots=True)
class ConsensusMeta:
    """Validity period and shared randomness of one consensus."""

    valid_after: datetime
    fresh_until: datetime
    valid_until: datetime
    shared_rand_previous: bytes | None = None
    shared_rand_current: bytes | None = None

    @classmethod
    def from_meta_info(cls, meta: Mapping[str, str]) -> ConsensusMeta:
        """Decode the header mapping produced by [parse_meta_info()][torbrotr.parsing.meta.parse_meta_info].

        Raises:
            FieldDecodeError: If a validity timestamp is missing or invalid,
                or a shared random line is malformed.
        """
        return cls(
            valid_after=_timestamp(meta, "valid-after"),
            fresh_until=_timestamp(meta, "fresh-until"),
            valid_until=_timestamp(meta, "valid-until"),
            shared_rand_previous=_shared_random(meta, "shared-rand-previous-value"),
            shared_rand_current=_shared_random(meta, "shared-rand-current-value"),
        )
