"""
Tests for render_landing_page — determinism, ordering, footer handling,
placeholder output, unknown types, defaults and escaping.
"""

import re

import pytest

from pagesmith.core.config import Config
from pagesmith.services.landing_page.renderer import (
    export_filename,
    extract_body_fragment,
    render_landing_page,
)
from pagesmith.services.landing_page.defaults import create_personalized_fallback


def _doc(*sections, metadata=None):
    return {
        "sections": [
            {"id": f"{s[0]}-{i}", "type": s[0], "content": s[1] if len(s) > 1 else {}}
            for i, s in enumerate(sections)
        ],
        "metadata": metadata or {},
    }


def _footer_count(html: str) -> int:
    return html.count("<footer")


# ============================================================================
# Document structure
# ============================================================================

class TestDocumentShape:
    def test_complete_html_document(self):
        html = render_landing_page(_doc(("hero", {"headline": "Hello"})), "Acme", year=2025)
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Acme</title>" in html
        assert '<meta name="description"' in html
        assert "</body>" in html and "</html>" in html

    def test_deterministic(self):
        doc = create_personalized_fallback("Acme Launch", "Sell rockets", year=2025)
        assert render_landing_page(doc, "Acme Launch", year=2025) == render_landing_page(doc, "Acme Launch", year=2025)

    def test_deterministic_with_current_year(self):
        doc = _doc(("hero",), ("cta",))
        assert render_landing_page(doc, "Acme") == render_landing_page(doc, "Acme")

    def test_accepts_model_or_dict(self):
        fallback = create_personalized_fallback("Acme", year=2025)
        assert render_landing_page(fallback, "Acme", year=2025) == render_landing_page(fallback.to_dict(), "Acme", year=2025)

    def test_primary_color_variable(self):
        html = render_landing_page(_doc(("hero",), metadata={"primaryColor": "#ff5500"}), "Acme")
        assert "--primary-color: #ff5500" in html

    def test_invalid_primary_color_uses_default(self):
        html = render_landing_page(_doc(("hero",), metadata={"primaryColor": "red; } body { display:none"}), "Acme")
        assert "--primary-color: #6366f1" in html

    def test_missing_primary_color_uses_configured_default(self, monkeypatch):
        monkeypatch.setattr(Config, "DEFAULT_PRIMARY_COLOR", "#0a7f3c")
        html = render_landing_page(_doc(("hero",)), "Acme")
        assert "--primary-color: #0a7f3c" in html

    def test_fallback_page_uses_configured_default(self, monkeypatch):
        monkeypatch.setattr(Config, "DEFAULT_PRIMARY_COLOR", "#0a7f3c")
        assert create_personalized_fallback("Acme").metadata.primary_color == "#0a7f3c"

    def test_meta_description_prefers_subheadline(self):
        html = render_landing_page(_doc(("hero",), metadata={"subheadline": "Rockets for all"}), "Acme")
        assert '<meta name="description" content="Rockets for all">' in html


# ============================================================================
# Empty documents and footers
# ============================================================================

class TestEmptyAndFooter:
    def test_empty_sections_renders_placeholder_with_title(self):
        html = render_landing_page({"sections": []}, "Acme Launch", year=2025)
        assert "<h1" in html and "Acme Launch</h1>" in html
        assert _footer_count(html) == 1

    def test_missing_sections_and_none_document(self):
        for document in ({}, None, {"title": "x"}):
            html = render_landing_page(document, "Acme")
            assert "Acme</h1>" in html
            assert _footer_count(html) == 1

    def test_footer_synthesized_when_absent(self):
        html = render_landing_page(_doc(("hero",)), "Acme", year=2031)
        assert _footer_count(html) == 1
        assert "© 2031 Acme. All rights reserved." in html

    def test_existing_footer_not_duplicated(self):
        html = render_landing_page(_doc(("hero",), ("footer", {"copyright": "© Acme Corp"})), "Acme", year=2025)
        assert _footer_count(html) == 1
        assert "© Acme Corp" in html
        assert "All rights reserved" not in html

    def test_footer_without_copyright_uses_default_line(self):
        html = render_landing_page(_doc(("footer",)), "Acme", year=2025)
        assert _footer_count(html) == 1
        assert "© 2025 Acme. All rights reserved." in html


# ============================================================================
# Ordering and unknown types
# ============================================================================

class TestOrdering:
    def test_sections_render_in_array_order(self):
        html = render_landing_page(_doc(
            ("cta", {"title": "CTA_MARK"}),
            ("hero", {"headline": "HERO_MARK"}),
            ("features", {"title": "FEATURES_MARK"}),
        ), "Acme")
        assert html.index("CTA_MARK") < html.index("HERO_MARK") < html.index("FEATURES_MARK")

    def test_unknown_type_skipped_others_rendered(self):
        html = render_landing_page(_doc(
            ("hero", {"headline": "FIRST"}),
            ("carousel", {"title": "CAROUSEL_MARK"}),
            ("cta", {"title": "LAST"}),
        ), "Acme")
        assert "CAROUSEL_MARK" not in html
        assert html.index("FIRST") < html.index("LAST")

    def test_only_unknown_sections_still_has_footer(self):
        html = render_landing_page(_doc(("carousel",)), "Acme")
        assert _footer_count(html) == 1


# ============================================================================
# Per-type defaults
# ============================================================================

class TestSectionDefaults:
    def test_hero_defaults(self):
        html = render_landing_page(_doc(("hero",)), "Acme", year=2025)
        assert "Acme</h1>" in html
        assert "Get Started" in html
        assert 'href="#cta"' in html

    def test_hero_headline_falls_back_to_metadata(self):
        html = render_landing_page(_doc(("hero",), metadata={"headline": "Meta headline"}), "Acme")
        assert "Meta headline</h1>" in html

    def test_features_defaults_and_empty_grid(self):
        html = render_landing_page(_doc(("features", {"features": []})), "Acme")
        assert "Why choose us?" in html
        assert 'class="grid' in html

    def test_feature_icon_default(self):
        html = render_landing_page(_doc(("features", {"features": [{"title": "Fast"}]})), "Acme")
        assert "✨" in html
        assert "Fast" in html

    def test_testimonials_default_title(self):
        html = render_landing_page(_doc(("testimonials", {"testimonials": [{"quote": "Great", "name": "zoe"}]})), "Acme")
        assert "What our customers say" in html
        assert ">Z</div>" in html

    def test_cta_defaults(self):
        html = render_landing_page(_doc(("cta",)), "Acme")
        assert "Ready to start?" in html
        assert 'id="cta"' in html
        assert 'href="#"' in html

    def test_how_it_works_steps_numbered(self):
        html = render_landing_page(_doc(("how-it-works", {"steps": [
            {"title": "Sign up"}, {"title": "Configure"}, {"title": "Launch"},
        ]})), "Acme")
        assert "How it works" in html
        numbers = re.findall(r"flex-shrink-0\">(\d+)</div>", html)
        assert numbers == ["1", "2", "3"]

    def test_malformed_arrays_tolerated(self):
        html = render_landing_page(_doc(
            ("features", {"features": "not a list"}),
            ("testimonials", {"testimonials": [None, "x", {"quote": "ok"}]}),
        ), "Acme")
        assert "ok" in html
        assert "Customer" in html


# ============================================================================
# Escaping
# ============================================================================

class TestEscaping:
    def test_text_is_escaped(self):
        html = render_landing_page(_doc(("hero", {"headline": "<script>alert(1)</script>"})), "Acme")
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_title_is_escaped(self):
        html = render_landing_page({"sections": []}, "A & B <i>")
        assert "<title>A &amp; B &lt;i&gt;</title>" in html

    def test_javascript_link_replaced(self):
        html = render_landing_page(_doc(("cta", {"ctaLink": "javascript:alert(1)"})), "Acme")
        assert "javascript:" not in html
        assert 'href="#"' in html


# ============================================================================
# Helpers
# ============================================================================

class TestHelpers:
    def test_extract_body_fragment(self):
        html = render_landing_page(_doc(("hero", {"headline": "Hi"})), "Acme")
        body = extract_body_fragment(html)
        assert "<body" not in body and "<html" not in body
        assert body.startswith("<section")
        assert "Hi" in body

    def test_extract_body_fragment_without_body(self):
        assert extract_body_fragment("<p>Hi</p>") == "<p>Hi</p>"
        assert extract_body_fragment("") == ""

    @pytest.mark.parametrize("title,expected", [
        ("Acme Launch", "acme-launch.html"),
        ("  Big   Sale  ", "big-sale.html"),
        ("", "landing-page.html"),
    ])
    def test_export_filename(self, title, expected):
        assert export_filename(title) == expected
