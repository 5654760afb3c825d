r"""TorBrotr -- streaming decoder for Tor directory documents.

Splits multi-megabyte consensus, bridge network status and server
descriptor documents into record chunks, decodes each chunk into a typed
record (eagerly or on first access) and collects the records in a
fingerprint-keyed store with filtered iteration and set algebra.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
              parsing          Tokenizer, decoders, format registry, pipelines
             /       \
          core      models     Errors/logging/config | pure records and store
```

Attributes:
    models: Pure frozen dataclasses, filter, lazy handle and store. Zero I/O.
    core: Exceptions, structured logging, YAML loading, pydantic config.
    parsing: Record tokenizer, field decoders, registry, parse pipelines.

Note:
    For lightweight usage, import directly from subpackages::

        from torbrotr.models import ObjectStore
        from torbrotr.parsing import parse

    Top-level imports (``from torbrotr import parse``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("torbrotr")

__all__ = [
    "Annotation",
    "Boundary",
    "ConsensusMeta",
    "DocumentError",
    "DocumentFormat",
    "DocumentType",
    "ExitPattern",
    "FieldDecodeError",
    "LazyRecord",
    "Logger",
    "ObjectFilter",
    "ObjectStore",
    "ParserConfig",
    "RecordTokenizer",
    "RelayAddress",
    "RelayDescriptor",
    "RelayStatusEntry",
    "RouterFlag",
    "TorBrotrError",
    "decoder_for",
    "normalize_fingerprint",
    "parse",
    "parse_async",
    "tokenize",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "DocumentError": ("torbrotr.core", "DocumentError"),
    "FieldDecodeError": ("torbrotr.core", "FieldDecodeError"),
    "Logger": ("torbrotr.core", "Logger"),
    "ParserConfig": ("torbrotr.core", "ParserConfig"),
    "TorBrotrError": ("torbrotr.core", "TorBrotrError"),
    "Annotation": ("torbrotr.models", "Annotation"),
    "DocumentType": ("torbrotr.models", "DocumentType"),
    "ExitPattern": ("torbrotr.models", "ExitPattern"),
    "LazyRecord": ("torbrotr.models", "LazyRecord"),
    "ObjectFilter": ("torbrotr.models", "ObjectFilter"),
    "ObjectStore": ("torbrotr.models", "ObjectStore"),
    "RelayAddress": ("torbrotr.models", "RelayAddress"),
    "RelayDescriptor": ("torbrotr.models", "RelayDescriptor"),
    "RelayStatusEntry": ("torbrotr.models", "RelayStatusEntry"),
    "RouterFlag": ("torbrotr.models", "RouterFlag"),
    "normalize_fingerprint": ("torbrotr.models", "normalize_fingerprint"),
    "Boundary": ("torbrotr.parsing", "Boundary"),
    "ConsensusMeta": ("torbrotr.parsing", "ConsensusMeta"),
    "DocumentFormat": ("torbrotr.parsing", "DocumentFormat"),
    "RecordTokenizer": ("torbrotr.parsing", "RecordTokenizer"),
    "decoder_for": ("torbrotr.parsing", "decoder_for"),
    "parse": ("torbrotr.parsing", "parse"),
    "parse_async": ("torbrotr.parsing", "parse_async"),
    "tokenize": ("torbrotr.parsing", "tokenize"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'torbrotr' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
