"""
Deferred record decoding.

A [LazyRecord][torbrotr.models.lazy.LazyRecord] pairs one raw record chunk
with the codec of its document family. The identity is extracted eagerly
from the identity line alone; the full decode is deferred until
[resolve()][torbrotr.models.lazy.LazyRecord.resolve] is first called.

The handle is an explicit two-state machine::

    Unresolved(raw) ──resolve()──▶ Resolved(record)

``Resolved`` is never left again. Memoization is optional: with
``memoize=False`` the handle stays ``Unresolved`` and every ``resolve()``
re-runs the decoder, which yields an equal record because decoding is a
pure function of the immutable chunk.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from .fingerprint import Fingerprint, normalize_fingerprint


RecordT = TypeVar("RecordT")
RecordT_co = TypeVar("RecordT_co", covariant=True)


class RecordCodec(Protocol[RecordT_co]):
    """Cheap identity extraction plus full decode for one document family."""

    def extract_fingerprint(self, raw: str) -> Fingerprint: ...

    def decode(self, raw: str) -> RecordT_co: ...


@dataclass(frozen=True, slots=True)
class Unresolved:
    raw: str


@dataclass(frozen=True, slots=True)
class Resolved(Generic[RecordT]):
    record: RecordT


class LazyRecord(Generic[RecordT]):
    """Handle to one record that may not be decoded yet.

    Args:
        raw: The record chunk as isolated by the tokenizer.
        codec: Decoder for the chunk's document family.
        memoize: Keep the decoded record after the first ``resolve()``.

    Raises:
        FieldDecodeError: From the constructor when the identity line is
            missing or malformed; from ``resolve()`` when any required line
            is.
    """

    __slots__ = ("_codec", "_fingerprint", "_memoize", "_state")

    def __init__(self, raw: str, codec: RecordCodec[RecordT], *, memoize: bool = True) -> None:
        self._codec: RecordCodec[RecordT] | None = codec
        self._memoize = memoize
        self._state: Unresolved | Resolved[RecordT] = Unresolved(raw)
        self._fingerprint = normalize_fingerprint(codec.extract_fingerprint(raw))

    @classmethod
    def from_record(cls, record: RecordT, fingerprint: str) -> LazyRecord[RecordT]:
        """Wrap an already decoded record in a handle that starts ``Resolved``."""
        handle = cls.__new__(cls)
        handle._codec = None
        handle._memoize = True
        handle._state = Resolved(record)
        handle._fingerprint = normalize_fingerprint(fingerprint)
        return handle

    @property
    def state(self) -> Unresolved | Resolved[RecordT]:
        return self._state

    @property
    def is_resolved(self) -> bool:
        return isinstance(self._state, Resolved)

    def fingerprint(self) -> Fingerprint:
        """The normalized identity, available without a full decode."""
        return self._fingerprint

    def resolve(self) -> RecordT:
        """Return the decoded record, decoding the raw chunk if needed."""
        state = self._state
        if isinstance(state, Resolved):
            return state.record
        assert self._codec is not None
        record = self._codec.decode(state.raw)
        if self._memoize:
            self._state = Resolved(record)
        return record

    def copy(self) -> LazyRecord[RecordT]:
        """Return an independent handle in the same state."""
        clone = self.__class__.__new__(self.__class__)
        clone._codec = self._codec
        clone._memoize = self._memoize
        clone._state = self._state
        clone._fingerprint = self._fingerprint
        return clone

    def __repr__(self) -> str:
        status = "resolved" if self.is_resolved else "unresolved"
        return f"LazyRecord(fingerprint={self._fingerprint!r}, {status})"
