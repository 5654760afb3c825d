"""Parsing layer: tokenizer, record decoders, format registry and pipelines.

Top of the diamond DAG; depends on both ``torbrotr.core`` and
``torbrotr.models``.

Attributes:
    Boundary: Start/terminal marker pair of a document family.
    RecordTokenizer: Push-based splitter of a document into record chunks.
        See [tokenizer][torbrotr.parsing.tokenizer].
    decode_status_entry: Decoder for consensus and bridge status entries.
    decode_descriptor: Decoder for relay server descriptors.
    DocumentFormat: One row of the format capability table.
        See [registry][torbrotr.parsing.registry].
    ConsensusMeta: Validity period and shared randomness of a consensus.
    parse: Synchronous whole-document pipeline.
    parse_async: Producer/consumer pipeline on asyncio.
"""

from .descriptor import DescriptorCodec, decode_descriptor, extract_descriptor_fingerprint
from .fields import (
    decode_base64_fingerprint,
    parse_bracketed_endpoint,
    parse_port,
    parse_timestamp,
    parse_uint,
)
from .meta import ConsensusMeta, parse_meta_info
from .pipeline import parse, parse_async
from .registry import (
    BRIDGE_NETWORK_STATUS,
    CONSENSUS,
    SERVER_DESCRIPTOR,
    DecoderRegistry,
    DocumentFormat,
    decoder_for,
    default_registry,
    parse_annotation,
    register_format,
)
from .status import StatusEntryCodec, decode_status_entry, extract_status_fingerprint
from .tokenizer import Boundary, RecordTokenizer, atokenize, tokenize


__all__ = [
    "BRIDGE_NETWORK_STATUS",
    "CONSENSUS",
    "SERVER_DESCRIPTOR",
    "Boundary",
    "ConsensusMeta",
    "DecoderRegistry",
    "DescriptorCodec",
    "DocumentFormat",
    "RecordTokenizer",
    "StatusEntryCodec",
    "atokenize",
    "decode_base64_fingerprint",
    "decode_descriptor",
    "decode_status_entry",
    "decoder_for",
    "default_registry",
    "extract_descriptor_fingerprint",
    "extract_status_fingerprint",
    "parse",
    "parse_annotation",
    "parse_async",
    "parse_bracketed_endpoint",
    "parse_meta_info",
    "parse_port",
    "parse_timestamp",
    "parse_uint",
    "register_format",
    "tokenize",
]
