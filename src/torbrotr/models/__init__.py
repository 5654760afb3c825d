"""Pure record types, filter, lazy handle and store, with zero I/O.

The models layer sits beside ``torbrotr.core`` at the bottom of the diamond
DAG and depends only on the Python standard library. Records use
``@dataclass(frozen=True, slots=True)`` and validate in ``__post_init__``,
so an invalid instance never escapes its constructor. Model constructors
raise plain ``TypeError``/``ValueError``; the parsing layer translates them
into the [TorBrotrError][torbrotr.core.exceptions.TorBrotrError] hierarchy.

Attributes:
    RelayStatusEntry: One relay's entry in a consensus or bridge network
        status document, with its [RelayAddress][torbrotr.models.status.RelayAddress].
    RelayDescriptor: A relay's server descriptor, with its ordered
        [ExitPattern][torbrotr.models.descriptor.ExitPattern] rules.
    Annotation: ``@type`` document tag.
    ObjectFilter: OR-combined fingerprint / address / nickname predicate.
    LazyRecord: Deferred-decode handle with an eagerly extracted fingerprint.
    ObjectStore: Fingerprint-keyed collection with merge, intersect and
        subtract.

Note:
    Computed and normalized fields are written with ``object.__setattr__``
    inside ``__post_init__``, the usual way to initialize frozen dataclasses.
"""

from .annotation import Annotation
from .constants import FINGERPRINT_HEX_LENGTH, PORT_MAX, DocumentType, PolicyAction, RouterFlag
from .descriptor import ExitPattern, OrAddress, RelayDescriptor
from .filter import FilterableRecord, ObjectFilter
from .fingerprint import Fingerprint, is_valid_fingerprint, normalize_fingerprint
from .lazy import LazyRecord, RecordCodec, Resolved, Unresolved
from .status import RelayAddress, RelayStatusEntry
from .store import ObjectStore


__all__ = [
    "FINGERPRINT_HEX_LENGTH",
    "PORT_MAX",
    "Annotation",
    "DocumentType",
    "ExitPattern",
    "FilterableRecord",
    "Fingerprint",
    "LazyRecord",
    "ObjectFilter",
    "ObjectStore",
    "OrAddress",
    "PolicyAction",
    "RecordCodec",
    "RelayAddress",
    "RelayDescriptor",
    "RelayStatusEntry",
    "Resolved",
    "RouterFlag",
    "Unresolved",
    "is_valid_fingerprint",
    "normalize_fingerprint",
]
