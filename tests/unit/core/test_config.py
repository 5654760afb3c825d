"""
Unit tests for core.config module.

Tests:
- ParserConfig defaults and constraints
- from_dict() / from_yaml() construction
- ConfigurationError wrapping of validation failures
- apply_logging() root handler installation
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from torbrotr.core.config import ParserConfig
from torbrotr.core.exceptions import ConfigurationError
from torbrotr.core.logger import StructuredFormatter


class TestDefaults:
    def test_defaults(self):
        config = ParserConfig()
        assert config.read_size == 65_536
        assert config.lazy is False
        assert config.strict is None
        assert config.memoize is True
        assert config.queue_size == 256
        assert config.log_level == "INFO"
        assert config.json_logs is False

    def test_frozen(self):
        config = ParserConfig()
        with pytest.raises(ValidationError):
            config.lazy = True  # type: ignore[misc]


class TestFromDict:
    def test_valid(self):
        config = ParserConfig.from_dict({"read_size": 10, "lazy": True, "strict": False})
        assert config.read_size == 10
        assert config.lazy is True
        assert config.strict is False

    def test_zero_queue_size_means_unbounded(self):
        assert ParserConfig.from_dict({"queue_size": 0}).queue_size == 0

    @pytest.mark.parametrize(
        "data",
        [
            {"read_size": 0},
            {"queue_size": -1},
            {"log_level": "TRACE"},
            {"unknown_field": 1},
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ConfigurationError, match="Invalid parser configuration"):
            ParserConfig.from_dict(data)


class TestFromYaml:
    def test_loads_file(self, tmp_path: Path):
        yaml_file = tmp_path / "parser.yaml"
        yaml_file.write_text("read_size: 512\nlazy: true\nlog_level: DEBUG\n")

        config = ParserConfig.from_yaml(yaml_file)
        assert config.read_size == 512
        assert config.lazy is True
        assert config.log_level == "DEBUG"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        yaml_file = tmp_path / "parser.yaml"
        yaml_file.write_text("")

        assert ParserConfig.from_yaml(yaml_file) == ParserConfig()

    def test_invalid_values(self, tmp_path: Path):
        yaml_file = tmp_path / "parser.yaml"
        yaml_file.write_text("read_size: -5\n")

        with pytest.raises(ConfigurationError):
            ParserConfig.from_yaml(yaml_file)


class TestApplyLogging:
    def test_installs_configured_level(self):
        root = logging.getLogger()
        previous_level = root.level
        try:
            handler = ParserConfig(log_level="DEBUG").apply_logging()
            assert handler in root.handlers
            assert root.level == logging.DEBUG
            assert isinstance(handler.formatter, StructuredFormatter)
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)

    def test_json_logs_uses_bare_formatter(self):
        root = logging.getLogger()
        previous_level = root.level
        try:
            handler = ParserConfig(json_logs=True).apply_logging()
            assert not isinstance(handler.formatter, StructuredFormatter)
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)
