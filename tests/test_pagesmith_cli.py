"""
Pagesmith CLI Tests

Uses click's CliRunner. Commands that talk to Supabase get a mocked
LandingPageService; `page render` needs no database at all.

Run with: pytest tests/test_pagesmith_cli.py -v
"""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from pagesmith.cli.main import cli
from pagesmith.core.database import DatabaseConfigError
from pagesmith.services.landing_page.defaults import create_personalized_fallback
from pagesmith.services.landing_page.generation_service import RateLimitedError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def page_service():
    service = MagicMock()
    with patch("pagesmith.cli.page.LandingPageService", return_value=service):
        yield service


class TestHelp:
    def test_page_help(self, runner):
        result = runner.invoke(cli, ["page", "--help"])
        assert result.exit_code == 0
        for command in ("create", "generate", "render", "publish", "export"):
            assert command in result.output


class TestRender:
    def test_render_to_stdout(self, runner, tmp_path):
        doc = tmp_path / "page.json"
        doc.write_text(json.dumps({
            "sections": [{"id": "h", "type": "hero", "content": {"headline": "Hello rockets"}}],
            "metadata": {},
        }))
        result = runner.invoke(cli, ["page", "render", str(doc), "-t", "Acme"])
        assert result.exit_code == 0
        assert "<!DOCTYPE html>" in result.output
        assert "Hello rockets" in result.output

    def test_render_to_file(self, runner, tmp_path):
        doc = tmp_path / "page.json"
        doc.write_text("{}")
        out = tmp_path / "out.html"
        result = runner.invoke(cli, ["page", "render", str(doc), "-t", "Acme", "-o", str(out)])
        assert result.exit_code == 0
        assert "Acme" in out.read_text()

    def test_render_invalid_json(self, runner, tmp_path):
        doc = tmp_path / "page.json"
        doc.write_text("{not json")
        result = runner.invoke(cli, ["page", "render", str(doc)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestPageCommands:
    def test_create(self, runner, page_service):
        page_service.create_page.return_value = {"id": "p1", "title": "Acme", "slug": "acme-abc"}
        result = runner.invoke(cli, ["page", "create", "Acme", "-d", "Sell rockets"])
        assert result.exit_code == 0
        assert "acme-abc" in result.output
        assert page_service.create_page.call_args.kwargs["description"] == "Sell rockets"

    def test_show_missing(self, runner, page_service):
        page_service.get_page.return_value = None
        result = runner.invoke(cli, ["page", "show", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_show_lists_sections(self, runner, page_service):
        page_service.get_page.return_value = {
            "id": "p1",
            "title": "Acme",
            "slug": "acme-abc",
            "status": "draft",
            "content_json": {
                "sections": [
                    {"id": "h", "type": "hero", "content": {}},
                    {"id": "x", "type": "pricing", "content": {}},
                ],
                "metadata": {},
            },
        }
        result = runner.invoke(cli, ["page", "show", "p1"])
        assert result.exit_code == 0
        assert "1. hero [h]" in result.output
        assert "pricing [x]  (not rendered)" in result.output

    def test_export(self, runner, page_service, tmp_path):
        page_service.get_page.return_value = {"id": "p1", "title": "Acme Launch", "slug": "s", "content_json": None}
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["page", "export", "p1"])
            assert result.exit_code == 0
            assert "acme-launch.html" in result.output


class TestGenerate:
    def test_fallback_is_reported(self, runner):
        generator = MagicMock()
        generator.regenerate.return_value = SimpleNamespace(
            document=create_personalized_fallback("Acme"),
            source="fallback",
            used_fallback=True,
            skipped_assets=["https://cdn/w.png"],
        )
        with patch("pagesmith.cli.page.LandingPageGenerationService", return_value=generator):
            result = runner.invoke(cli, ["page", "generate", "p1"])
        assert result.exit_code == 0
        assert "Generated 6 sections" in result.output
        assert "starter page" in result.output
        assert "https://cdn/w.png" in result.output

    def test_rate_limited(self, runner):
        generator = MagicMock()
        generator.regenerate.side_effect = RateLimitedError("Rate limit exceeded.")
        with patch("pagesmith.cli.page.LandingPageGenerationService", return_value=generator):
            result = runner.invoke(cli, ["page", "generate", "p1"])
        assert result.exit_code == 1
        assert "Try again" in result.output


class TestDatabaseConfig:
    @pytest.mark.parametrize("args", [
        ["page", "list"],
        ["page", "show", "p1"],
        ["page", "archive", "p1"],
        ["page", "publish", "p1", "--site-url", "https://x", "--username", "a", "--app-password", "b"],
    ])
    def test_unconfigured_database_reported(self, runner, args):
        error = DatabaseConfigError("Missing required configuration: SUPABASE_URL")
        with patch("pagesmith.cli.page.LandingPageService", side_effect=error):
            result = runner.invoke(cli, args)
        assert result.exit_code == 1
        assert "❌ Error: Missing required configuration: SUPABASE_URL" in result.output
