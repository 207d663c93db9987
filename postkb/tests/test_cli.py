"""Tests for CLI commands."""

from __future__ import annotations

import json

from click.testing import CliRunner

import pytest

from postkb.cli import cli


@pytest.fixture
def config_file(posts_dir):
    config = posts_dir.parent / "postkb.yaml"
    config.write_text(
        """
content:
  content_roots: [_posts]
catalog:
  timezone: UTC
logging:
  level: WARNING
""",
        encoding="utf-8",
    )
    return config


def _invoke(*args):
    return CliRunner().invoke(cli, ["--log-level", "ERROR", *args])


class TestValidateCommand:
    def test_validate_valid_config(self, config_file):
        result = _invoke("validate", "-c", str(config_file))

        assert result.exit_code == 0
        assert "✓ Configuration is valid" in result.output
        assert "_posts" in result.output

    def test_validate_invalid_config(self, tmp_path):
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("content:\n  content_roots: [unclosed\n")

        result = _invoke("validate", "-c", str(config_file))

        assert result.exit_code != 0
        assert "Configuration error" in result.output


class TestCheckCommand:
    def test_check_valid_posts(self, config_file):
        result = _invoke("check", "-c", str(config_file))

        assert result.exit_code == 0
        assert "✓ 2 posts loaded" in result.output
        assert "python: 1" in result.output

    def test_check_reports_every_failure(self, config_file, posts_dir):
        (posts_dir / "2024-05-02-rust.md").write_text("---\ntitle: Rust\n---\n", encoding="utf-8")
        (posts_dir / "2024-03-01-go.md").write_text("no header\n", encoding="utf-8")

        result = _invoke("check", "-c", str(config_file))

        assert result.exit_code != 0
        assert "2 document(s) failed to load" in result.output
        assert "2024-05-02-rust: date" in result.output
        assert "2024-03-01-go: front-matter" in result.output


class TestListCommand:
    def test_list_newest_first(self, config_file):
        result = _invoke("list", "-c", str(config_file))

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("2024-08-08  2024-08-08-caddy  Caddy")
        assert lines[1].startswith("2024-01-25  2024-01-25-python-perf  Python Perf")

    def test_list_category(self, config_file):
        result = _invoke("list", "-c", str(config_file), "--category", "python")

        assert result.exit_code == 0
        assert "python-perf" in result.output
        assert "caddy" not in result.output

    def test_list_unknown_category_is_empty(self, config_file):
        result = _invoke("list", "-c", str(config_file), "--category", "rust")

        assert result.exit_code == 0
        assert result.output.strip() == ""


class TestShowCommand:
    def test_show(self, config_file):
        result = _invoke("show", "2024-08-08-caddy", "-c", str(config_file))

        assert result.exit_code == 0
        assert "title: Caddy" in result.output
        assert "categories: caddy deployment" in result.output

    def test_show_unknown(self, config_file):
        result = _invoke("show", "missing", "-c", str(config_file))

        assert result.exit_code != 0
        assert "Document not found: missing" in result.output


class TestExportCommand:
    def test_export_manifest(self, config_file, tmp_path):
        output = tmp_path / "out" / "posts.json"

        result = _invoke("export", "-c", str(config_file), "-o", str(output))

        assert result.exit_code == 0
        manifest = json.loads(output.read_text(encoding="utf-8"))
        assert manifest["total_posts"] == 2
        assert [post["id"] for post in manifest["posts"]] == ["2024-08-08-caddy", "2024-01-25-python-perf"]
        assert "body" not in manifest["posts"][0]
        assert manifest["categories"]["python"] == ["2024-01-25-python-perf"]
        assert manifest["fingerprint"]

    def test_export_with_body(self, config_file, tmp_path):
        output = tmp_path / "posts.json"

        _invoke("export", "-c", str(config_file), "-o", str(output), "--with-body")

        manifest = json.loads(output.read_text(encoding="utf-8"))
        assert manifest["posts"][1]["body"] == "Profiling first, then tuning.\n"
