"""TorBrotr exception hierarchy.

Provides typed exceptions for every failure a document decode can hit, so
callers can tell a truncated document apart from a corrupt record and both
of them apart from I/O failures on the underlying source (which are never
wrapped and propagate as ``OSError`` / ``UnicodeDecodeError``).

Exception hierarchy:

```text
TorBrotrError (base -- never raised directly)
├── ConfigurationError              -- bad YAML, invalid ParserConfig
└── DocumentError                   -- anything wrong with a document
    ├── MalformedHeaderError        -- "@type" annotation unparseable
    ├── UnknownDocumentTypeError    -- no registered format for a tag
    ├── BoundaryError               -- record boundary search failed
    │   ├── MissingStartMarkerError -- no record start found at all
    │   └── UnterminatedRecordError -- input ended inside a record
    └── FieldDecodeError            -- a required line/sub-token is invalid
```

See Also:
    [RecordTokenizer][torbrotr.parsing.tokenizer.RecordTokenizer]: Raises
        the [BoundaryError][torbrotr.core.exceptions.BoundaryError] family.
    [parse()][torbrotr.parsing.pipeline.parse]: Tolerates
        [UnterminatedRecordError][torbrotr.core.exceptions.UnterminatedRecordError]
        in non-strict mode.
"""

from __future__ import annotations


class TorBrotrError(Exception):
    """Base exception for all TorBrotr errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(TorBrotrError):
    """Invalid or missing configuration (YAML file, ParserConfig fields).

    See Also:
        [ParserConfig][torbrotr.core.config.ParserConfig]: The pydantic model
            whose validation failures are re-raised as this error.
    """


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class DocumentError(TorBrotrError):
    """Base for all errors caused by the content of a document.

    The contract is all-or-nothing: any ``DocumentError`` aborts the parse
    of the whole document.
    """


class MalformedHeaderError(DocumentError):
    """The leading ``@type <name> <major>.<minor>`` annotation is unparseable."""


class UnknownDocumentTypeError(DocumentError):
    """No document format is registered for the requested type tag.

    Attributes:
        type_name: The type name that could not be resolved.
    """

    def __init__(self, type_name: str, message: str | None = None) -> None:
        super().__init__(message or f"no decoder registered for document type {type_name!r}")
        self.type_name = type_name


class BoundaryError(DocumentError):
    """A record boundary could not be located.

    Distinct from I/O failures on the source: a caller can decide to tolerate
    a missing terminal marker while still rejecting a missing start marker.
    """


class MissingStartMarkerError(BoundaryError):
    """No start marker was found anywhere in the remaining input.

    Never tolerated, in strict or non-strict mode.
    """


class UnterminatedRecordError(BoundaryError):
    """Input ended after a record start but before any terminating marker.

    Attributes:
        chunk: The trailing, unterminated record text. A non-strict caller
            uses it as the final chunk (end-of-input as implicit terminal).
    """

    def __init__(self, message: str, chunk: str = "") -> None:
        super().__init__(message)
        self.chunk = chunk


class FieldDecodeError(DocumentError):
    """A required line or sub-token of a record could not be decoded.

    Raised for bad identity encodings, truncated identity lines, invalid
    addresses and malformed timestamps. Numeric bandwidth and uptime values
    never raise; they degrade to zero.

    Attributes:
        keyword: The line keyword being decoded, when known.
    """

    def __init__(self, message: str, keyword: str | None = None) -> None:
        super().__init__(message)
        self.keyword = keyword
