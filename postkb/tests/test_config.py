"""Tests for configuration loading."""

from __future__ import annotations

from datetime import timezone

import pytest
import yaml

from postkb.config import AppConfig, CatalogConfig, load_config, resolve_path, site_timezone


class TestLoadConfig:
    def test_defaults_when_no_path(self, monkeypatch):
        monkeypatch.delenv("POSTKB_LOG_LEVEL", raising=False)

        config = load_config(None)

        assert config == AppConfig()
        assert config.content.content_roots == ["_posts"]
        assert config.logging.level == "INFO"

    def test_yaml_merged_over_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("POSTKB_LOG_LEVEL", raising=False)
        cfg = tmp_path / "postkb.yaml"
        cfg.write_text(
            """
content:
  content_roots: [posts, drafts]
catalog:
  timezone: Asia/Shanghai
""",
            encoding="utf-8",
        )

        config = load_config(cfg)

        assert config.content.content_roots == ["posts", "drafts"]
        assert config.content.file_extensions == [".md", ".markdown"]
        assert config.catalog.timezone == "Asia/Shanghai"
        assert config.logging.level == "INFO"

    def test_flat_content_keys(self, tmp_path):
        cfg = tmp_path / "postkb.yaml"
        cfg.write_text("content_roots: [blog]\nfile_extensions: [md]\n", encoding="utf-8")

        config = load_config(cfg)

        assert config.content.content_roots == ["blog"]
        assert config.content.file_extensions == [".md"]

    def test_json_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("POSTKB_LOG_LEVEL", raising=False)
        cfg = tmp_path / "postkb.json"
        cfg.write_text('{"logging": {"level": "DEBUG"}}', encoding="utf-8")

        assert load_config(cfg).logging.level == "DEBUG"

    def test_env_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("POSTS_ROOT", "/srv/blog/_posts")
        cfg = tmp_path / "postkb.yaml"
        cfg.write_text("content:\n  content_roots: ['${POSTS_ROOT:-_posts}', '${UNSET_ROOT:-drafts}']\n")

        config = load_config(cfg)

        assert config.content.content_roots == ["/srv/blog/_posts", "drafts"]

    def test_env_log_level_override(self, monkeypatch):
        monkeypatch.setenv("POSTKB_LOG_LEVEL", "debug")

        assert load_config(None).logging.level == "DEBUG"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("content:\n  content_roots: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_config(cfg)

    def test_unknown_key(self, tmp_path):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("catalog:\n  sort: newest\n")

        with pytest.raises(TypeError):
            load_config(cfg)

    def test_empty_section_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("POSTKB_LOG_LEVEL", raising=False)
        cfg = tmp_path / "postkb.yaml"
        cfg.write_text("content:\ncatalog:\n  timezone: Asia/Shanghai\n")

        config = load_config(cfg)

        assert config.content == AppConfig().content
        assert config.catalog.timezone == "Asia/Shanghai"

    def test_section_must_be_mapping(self, tmp_path):
        cfg = tmp_path / "bad.yaml"
        cfg.write_text("catalog: UTC\n")

        with pytest.raises(ValueError, match="catalog"):
            load_config(cfg)


class TestHelpers:
    def test_site_timezone_utc(self):
        assert site_timezone(CatalogConfig()) is timezone.utc

    def test_site_timezone_unknown(self):
        with pytest.raises(ValueError):
            site_timezone(CatalogConfig(timezone="Mars/Olympus_Mons"))

    def test_resolve_path(self, tmp_path):
        assert resolve_path("_posts", tmp_path) == (tmp_path / "_posts").resolve()
        assert resolve_path(str(tmp_path)) == tmp_path
