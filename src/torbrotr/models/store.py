"""
Fingerprint-keyed record collection.

An [ObjectStore][torbrotr.models.store.ObjectStore] maps normalized
fingerprints to [LazyRecord][torbrotr.models.lazy.LazyRecord] handles. It
holds at most one record per fingerprint and offers filtered iteration and
set algebra between two stores:

| operation          | keys of the result          | values from                  |
|--------------------|-----------------------------|------------------------------|
| ``a.merge(b)``     | union (``a`` updated in place) | ``a`` where present, else ``b`` |
| ``a.intersect(b)`` | in ``a`` and in ``b``       | ``a``                        |
| ``a.subtract(b)``  | in ``a`` but not in ``b``   | ``a``                        |

Set-algebra operations never fail. The store is not order-preserving and
is not safe for concurrent mutation; callers serialize access.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Generic, TypeVar

from .filter import FilterableRecord, ObjectFilter
from .fingerprint import Fingerprint, normalize_fingerprint
from .lazy import LazyRecord


RecordT = TypeVar("RecordT", bound=FilterableRecord)


class ObjectStore(Generic[RecordT]):
    """Collection of records keyed by normalized fingerprint.

    Attributes:
        meta_info: Document header key/value pairs (empty for documents
            without a header section or for programmatically built stores).

    Examples:
        ```python
        store = ObjectStore()
        store.set("9695dfc35ffeb861329b9f1ab04c46397020ce31", entry)
        record, found = store.get("9695DFC35FFEB861329B9F1AB04C46397020CE31")
        ```
    """

    __slots__ = ("_records", "meta_info")

    def __init__(self, meta_info: Mapping[str, str] | None = None) -> None:
        self._records: dict[Fingerprint, LazyRecord[RecordT]] = {}
        self.meta_info: dict[str, str] = dict(meta_info or {})

    # -------------------------------------------------------------------------
    # Insertion and lookup
    # -------------------------------------------------------------------------

    def set(self, fingerprint: str, record: RecordT) -> None:
        """Insert an already decoded *record*, replacing any record under the same key."""
        key = normalize_fingerprint(fingerprint)
        self._records[key] = LazyRecord.from_record(record, key)

    def put_handle(self, handle: LazyRecord[RecordT]) -> None:
        """Insert a (possibly unresolved) handle under its own fingerprint, last write wins."""
        self._records[handle.fingerprint()] = handle

    def get(self, fingerprint: str) -> tuple[RecordT | None, bool]:
        """Look up *fingerprint*; returns ``(record, True)`` or ``(None, False)``.

        Raises:
            FieldDecodeError: If the handle is unresolved and its chunk fails
                to decode.
        """
        handle = self._records.get(normalize_fingerprint(fingerprint))
        if handle is None:
            return None, False
        return handle.resolve(), True

    def length(self) -> int:
        """Number of distinct fingerprints held."""
        return len(self._records)

    def fingerprints(self) -> frozenset[Fingerprint]:
        return frozenset(self._records)

    def handles(self) -> list[LazyRecord[RecordT]]:
        """Every handle, unresolved ones left untouched."""
        return list(self._records.values())

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def iterate(self, record_filter: ObjectFilter | None = None) -> Iterator[RecordT]:
        """Yield decoded records, narrowed by *record_filter* when it is non-empty.

        The generator is lazy and single-use; unresolved handles are decoded
        as they are reached. Order is unspecified.
        """
        narrow = record_filter is not None and not record_filter.is_empty()
        for handle in list(self._records.values()):
            record = handle.resolve()
            if narrow and not record_filter.matches(record):  # type: ignore[union-attr]
                continue
            yield record

    # -------------------------------------------------------------------------
    # Set algebra
    # -------------------------------------------------------------------------

    def merge(self, other: ObjectStore[RecordT]) -> None:
        """Add every record of *other* whose fingerprint is absent here.

        Records already present are kept, unlike [set()][torbrotr.models.store.ObjectStore.set].
        """
        for key, handle in other._records.items():
            if key not in self._records:
                self._records[key] = handle.copy()

    def intersect(self, other: ObjectStore[RecordT]) -> ObjectStore[RecordT]:
        """New store with this store's records whose fingerprint is also in *other*."""
        return self._select(lambda key: key in other._records)

    def subtract(self, other: ObjectStore[RecordT]) -> ObjectStore[RecordT]:
        """New store with this store's records whose fingerprint is absent from *other*."""
        return self._select(lambda key: key not in other._records)

    def _select(self, keep: Callable[[Fingerprint], bool]) -> ObjectStore[RecordT]:
        result: ObjectStore[RecordT] = ObjectStore(self.meta_info)
        for key, handle in self._records.items():
            if keep(key):
                result._records[key] = handle
        return result

    # -------------------------------------------------------------------------
    # Container protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return self.length()

    def __contains__(self, fingerprint: object) -> bool:
        if not isinstance(fingerprint, str):
            return False
        return normalize_fingerprint(fingerprint) in self._records

    def __iter__(self) -> Iterator[RecordT]:
        return self.iterate()

    def __repr__(self) -> str:
        return f"ObjectStore(records={len(self._records)})"
