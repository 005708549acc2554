"""Tests for YAML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from classifiles.config import DEFAULT_MIME_INFO_ROOT, ClassifilesConfig
from classifiles.config_loader import create_config_from_yaml, load_config
from classifiles.errors import FatalError


class TestLoadConfig:

    def test_defaults_without_file(self):
        config = load_config(None)

        assert config.mime_info_db_root == DEFAULT_MIME_INFO_ROOT
        assert config.libmagic_db_file is None
        assert config.libmagic_used_for == ["application/zip"]

    def test_full_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "mime_info_db:\n"
            "  root: /opt/mime\n"
            "libmagic:\n"
            "  db_file: /opt/magic.mgc\n"
            "  used_for:\n"
            "    - Application/ZIP\n"
            "    - application/x-sharedlib\n",
            encoding="utf-8",
        )

        config = create_config_from_yaml(path)

        assert config.mime_info_db_root == Path("/opt/mime")
        assert config.libmagic_db_file == Path("/opt/magic.mgc")
        assert config.libmagic_used_for == ["application/zip", "application/x-sharedlib"]

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("libmagic:\n  db_file: null\n", encoding="utf-8")

        config = load_config(path)

        assert config == ClassifilesConfig()

    def test_empty_used_for(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("libmagic:\n  used_for: []\n", encoding="utf-8")
        assert load_config(path).libmagic_used_for == []

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == ClassifilesConfig()

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(FatalError):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml_is_fatal(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("libmagic: [unclosed\n", encoding="utf-8")
        with pytest.raises(FatalError):
            load_config(path)

    def test_scalar_used_for_is_fatal(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("libmagic:\n  used_for: application/zip\n", encoding="utf-8")
        with pytest.raises(FatalError):
            load_config(path)

    def test_non_mapping_is_fatal(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(FatalError):
            load_config(path)

    def test_example_config_loads(self):
        example = Path(__file__).parent.parent / "config.example.yaml"
        config = load_config(example)
        assert config.libmagic_used_for == ["application/zip"]
