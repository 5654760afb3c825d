"""Pydantic configuration for the document parsing pipelines.

[ParserConfig][torbrotr.core.config.ParserConfig] collects every knob of
[parse()][torbrotr.parsing.pipeline.parse] and
[parse_async()][torbrotr.parsing.pipeline.parse_async] so the same settings
can be kept in a YAML file and shared between tools.

Examples:
    ```yaml
    read_size: 131072
    lazy: true
    strict: null      # use the document format's default
    queue_size: 512
    log_level: DEBUG
    ```

    ```python
    config = ParserConfig.from_yaml("config/parser.yaml")
    store = parse(fd, "network-status-consensus-3", config=config)
    ```
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError
from .logger import configure_logging
from .yaml import load_yaml


class ParserConfig(BaseModel):
    """Settings shared by the synchronous and asynchronous parse pipelines.

    See Also:
        [load_yaml()][torbrotr.core.yaml.load_yaml]: Safe YAML loading used
            by [from_yaml()][torbrotr.core.config.ParserConfig.from_yaml].
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    read_size: int = Field(
        default=65_536,
        ge=1,
        description="Characters (or bytes) requested from the source per read",
    )
    lazy: bool = Field(
        default=False,
        description="Defer decoding of each record until it is first read",
    )
    strict: bool | None = Field(
        default=None,
        description="Require an explicit terminal marker (None = format default)",
    )
    memoize: bool = Field(
        default=True,
        description="Lazy handles keep the decoded record after the first resolve",
    )
    queue_size: int = Field(
        default=256,
        ge=0,
        description="Bound of the async tokenizer-to-decoder handoff (0 = unbounded)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level installed by apply_logging()",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines from the pipelines and install a JSON root handler",
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build a config from a dictionary, raising ``ConfigurationError`` on bad input."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid parser configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> Self:
        """Build a config from a YAML file."""
        return cls.from_dict(load_yaml(config_path))

    def apply_logging(self) -> logging.Handler:
        """Install the root handler described by ``log_level`` and ``json_logs``."""
        return configure_logging(self.log_level, json_output=self.json_logs)
