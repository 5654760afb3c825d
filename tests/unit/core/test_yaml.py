"""
Unit tests for core.yaml module.

Tests:
- load_yaml() - YAML configuration file loading
  - Valid YAML files
  - Empty files
  - File not found
  - Invalid YAML syntax and non-mapping documents
"""

from pathlib import Path

import pytest

from torbrotr.core.exceptions import ConfigurationError
from torbrotr.core.yaml import load_yaml


class TestLoadYamlValid:
    """load_yaml() with valid files."""

    def test_simple_key_value(self, tmp_path: Path):
        yaml_file = tmp_path / "parser.yaml"
        yaml_file.write_text("read_size: 4096\nlazy: true\n")

        assert load_yaml(str(yaml_file)) == {"read_size": 4096, "lazy": True}

    def test_accepts_path_object(self, tmp_path: Path):
        yaml_file = tmp_path / "parser.yaml"
        yaml_file.write_text("strict: null\n")

        assert load_yaml(yaml_file) == {"strict": None}

    def test_empty_file(self, tmp_path: Path):
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert load_yaml(yaml_file) == {}

    def test_comments_only(self, tmp_path: Path):
        yaml_file = tmp_path / "comments.yaml"
        yaml_file.write_text("# nothing here\n")

        assert load_yaml(yaml_file) == {}


class TestLoadYamlErrors:
    """load_yaml() failure modes."""

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_yaml(tmp_path / "missing.yaml")

    def test_invalid_syntax(self, tmp_path: Path):
        yaml_file = tmp_path / "broken.yaml"
        yaml_file.write_text("read_size: [1, 2\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml(yaml_file)

    def test_top_level_list(self, tmp_path: Path):
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_yaml(yaml_file)

    def test_unsafe_tags_rejected(self, tmp_path: Path):
        yaml_file = tmp_path / "unsafe.yaml"
        yaml_file.write_text("value: !!python/object/apply:os.system ['true']\n")

        with pytest.raises(ConfigurationError):
            load_yaml(yaml_file)
