"""Core layer: errors, logging and configuration shared by the parsers.

Sits beside ``torbrotr.models`` in the diamond DAG and below
``torbrotr.parsing``. It has no knowledge of record layouts.

Attributes:
    TorBrotrError: Root of the exception hierarchy.
        See [exceptions][torbrotr.core.exceptions].
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][torbrotr.core.logger.Logger].
    ParserConfig: Pydantic settings for the parse pipelines.
        See [ParserConfig][torbrotr.core.config.ParserConfig].
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
        See [load_yaml()][torbrotr.core.yaml.load_yaml].
"""

from .config import ParserConfig
from .exceptions import (
    BoundaryError,
    ConfigurationError,
    DocumentError,
    FieldDecodeError,
    MalformedHeaderError,
    MissingStartMarkerError,
    TorBrotrError,
    UnknownDocumentTypeError,
    UnterminatedRecordError,
)
from .logger import Logger, StructuredFormatter, configure_logging, format_kv_pairs
from .yaml import load_yaml


__all__ = [
    "BoundaryError",
    "ConfigurationError",
    "DocumentError",
    "FieldDecodeError",
    "Logger",
    "MalformedHeaderError",
    "MissingStartMarkerError",
    "ParserConfig",
    "StructuredFormatter",
    "TorBrotrError",
    "UnknownDocumentTypeError",
    "UnterminatedRecordError",
    "configure_logging",
    "format_kv_pairs",
    "load_yaml",
]
