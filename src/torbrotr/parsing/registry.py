"""
Capability table of supported document formats.

Each [DocumentFormat][torbrotr.parsing.registry.DocumentFormat] binds a
document type name to its record [Boundary][torbrotr.parsing.tokenizer.Boundary],
its record codec (cheap identity extraction and full decode), its default
strictness and the annotation versions it accepts. The tokenizer and the
pipelines are parameterized by the selected entry; there is no per-format
subclassing.

| type name                    | start     | terminal                  | strict | versions |
|------------------------------|-----------|---------------------------|--------|----------|
| ``network-status-consensus-3`` | ``r ``    | ``directory-signature``   | yes    | 1.0      |
| ``bridge-network-status``    | ``r ``    | ``directory-signature``   | no     | 1.2      |
| ``server-descriptor``        | ``router `` | ``-----END SIGNATURE-----`` (per record) | yes | 1.0 |
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from torbrotr.core.exceptions import MalformedHeaderError, UnknownDocumentTypeError
from torbrotr.models.annotation import Annotation
from torbrotr.models.constants import DocumentType
from torbrotr.models.fingerprint import Fingerprint
from torbrotr.models.lazy import RecordCodec

from .descriptor import DescriptorCodec
from .status import StatusEntryCodec
from .tokenizer import Boundary


@dataclass(frozen=True, slots=True)
class DocumentFormat:
    """Everything needed to tokenize and decode one document family.

    A ``DocumentFormat`` is itself a
    [RecordCodec][torbrotr.models.lazy.RecordCodec], so it can be handed
    straight to [LazyRecord][torbrotr.models.lazy.LazyRecord].

    Attributes:
        type_name: Annotation type name, e.g. ``server-descriptor``.
        boundary: Start and terminal markers of a record.
        codec: Identity extractor and decoder for one record chunk.
        strict_default: Whether a missing terminal marker is fatal when the
            caller does not choose.
        versions: Accepted ``(major, minor)`` annotation versions.
        parses_meta: Whether the preamble holds header key/value lines.
    """

    type_name: str
    boundary: Boundary
    codec: RecordCodec[Any]
    strict_default: bool = True
    versions: frozenset[tuple[int, int]] = frozenset({(1, 0)})
    parses_meta: bool = False

    @property
    def start_marker(self) -> str:
        return self.boundary.start_marker

    @property
    def terminal_marker(self) -> str:
        return self.boundary.terminal_marker

    def extract_fingerprint(self, raw: str) -> Fingerprint:
        return self.codec.extract_fingerprint(raw)

    def decode(self, raw: str) -> Any:
        return self.codec.decode(raw)

    def supports(self, annotation: Annotation) -> bool:
        return annotation.type == self.type_name and (annotation.major, annotation.minor) in self.versions


@dataclass(slots=True)
class DecoderRegistry:
    """Mutable mapping of type name to [DocumentFormat][torbrotr.parsing.registry.DocumentFormat]."""

    formats: dict[str, DocumentFormat] = field(default_factory=dict)

    def register(self, document_format: DocumentFormat) -> None:
        """Add *document_format*, replacing any format with the same type name."""
        self.formats[document_format.type_name] = document_format

    def decoder_for(self, document_type: str | Annotation) -> DocumentFormat:
        """Select the format for a type name or a full ``@type`` annotation.

        An annotation must also carry a supported version.

        Raises:
            UnknownDocumentTypeError: If nothing matches.
        """
        if isinstance(document_type, Annotation):
            document_format = self.formats.get(document_type.type)
            if document_format is None or not document_format.supports(document_type):
                raise UnknownDocumentTypeError(
                    document_type.type, f"unsupported document annotation: {document_type}"
                )
            return document_format

        document_format = self.formats.get(str(document_type))
        if document_format is None:
            raise UnknownDocumentTypeError(str(document_type))
        return document_format

    def __contains__(self, type_name: object) -> bool:
        return type_name in self.formats


_STATUS_CODEC = StatusEntryCodec()

CONSENSUS = DocumentFormat(
    type_name=DocumentType.CONSENSUS.value,
    boundary=Boundary("r ", "directory-signature"),
    codec=_STATUS_CODEC,
    parses_meta=True,
)

BRIDGE_NETWORK_STATUS = DocumentFormat(
    type_name=DocumentType.BRIDGE_NETWORK_STATUS.value,
    boundary=Boundary("r ", "directory-signature"),
    codec=_STATUS_CODEC,
    strict_default=False,
    versions=frozenset({(1, 2)}),
)

SERVER_DESCRIPTOR = DocumentFormat(
    type_name=DocumentType.SERVER_DESCRIPTOR.value,
    boundary=Boundary("router ", "-----END SIGNATURE-----", per_record=True),
    codec=DescriptorCodec(),
)


def default_registry() -> DecoderRegistry:
    """A fresh registry holding the three built-in formats."""
    registry = DecoderRegistry()
    for document_format in (CONSENSUS, BRIDGE_NETWORK_STATUS, SERVER_DESCRIPTOR):
        registry.register(document_format)
    return registry


_registry = default_registry()


def parse_annotation(line: str | bytes) -> Annotation:
    """Parse the ``@type`` line that heads a document.

    Raises:
        MalformedHeaderError: If *line* is not a type annotation.
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    try:
        return Annotation.parse(line)
    except ValueError as e:
        raise MalformedHeaderError(str(e)) from e


def decoder_for(document_type: str | Annotation) -> DocumentFormat:
    """Look *document_type* up in the process-wide registry."""
    return _registry.decoder_for(document_type)


def register_format(document_format: DocumentFormat) -> None:
    """Add *document_format* to the process-wide registry."""
    _registry.register(document_format)


def get_registry() -> DecoderRegistry:
    return _registry
