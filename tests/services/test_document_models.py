"""
Tests for the landing page document schema: tolerant loading, unknown
section types, extra keys and camelCase metadata.
"""

from pagesmith.services.models import (
    LandingPage,
    LandingPageDocument,
    PageStatus,
    Section,
    SectionType,
)


class TestLandingPageDocument:
    def test_missing_sections_is_empty(self):
        doc = LandingPageDocument.from_dict({"title": "Acme", "description": "x"})
        assert doc.sections == []

    def test_none_is_empty_document(self):
        doc = LandingPageDocument.from_dict(None)
        assert doc.sections == []
        assert doc.metadata.primary_color is None

    def test_null_sections_and_metadata(self):
        doc = LandingPageDocument.from_dict({"sections": None, "metadata": None})
        assert doc.sections == []

    def test_extra_keys_round_trip(self):
        data = {
            "title": "Acme",
            "sections": [
                {"id": "s1", "type": "hero", "content": {"headline": "Hi", "badge": "New"}, "layout": "wide"},
            ],
            "metadata": {"primaryColor": "#ff0000", "lastEdited": "2025-01-01T00:00:00"},
        }
        out = LandingPageDocument.from_dict(data).to_dict()
        assert out["title"] == "Acme"
        assert out["sections"][0]["content"]["badge"] == "New"
        assert out["sections"][0]["layout"] == "wide"
        assert out["metadata"]["primaryColor"] == "#ff0000"
        assert out["metadata"]["lastEdited"] == "2025-01-01T00:00:00"

    def test_unknown_section_type_preserved(self):
        data = {"sections": [{"id": "c1", "type": "carousel", "content": {"slides": [1, 2]}}]}
        doc = LandingPageDocument.from_dict(data)
        assert doc.sections[0].type == "carousel"
        assert not doc.sections[0].is_known_type
        assert doc.to_dict()["sections"][0]["content"] == {"slides": [1, 2]}

    def test_missing_section_id_is_assigned(self):
        doc = LandingPageDocument.from_dict({"sections": [{"type": "hero", "content": {}}, {"type": "hero"}]})
        ids = [s.id for s in doc.sections]
        assert all(i.startswith("hero-") for i in ids)
        assert len(set(ids)) == 2

    def test_to_dict_omits_unset_metadata(self):
        out = LandingPageDocument.from_dict({"sections": []}).to_dict()
        assert out["metadata"] == {}

    def test_has_section_type(self):
        doc = LandingPageDocument.from_dict({"sections": [{"id": "f", "type": "footer"}]})
        assert doc.has_section_type("footer")
        assert not doc.has_section_type("hero")


class TestSection:
    def test_none_content_becomes_empty_dict(self):
        assert Section(id="x", type="cta", content=None).content == {}

    def test_known_types(self):
        assert SectionType.values() == ["hero", "features", "testimonials", "cta", "how-it-works", "footer"]


class TestLandingPageRow:
    def test_generation_request_from_row(self):
        page = LandingPage.model_validate({
            "id": "p1",
            "title": "Acme",
            "slug": "acme-1",
            "status": "draft",
            "doc_text": "Brief",
            "original_wireframe_url": "https://x/storage/v1/object/public/wireframes/u/a.png",
            "tone": "playful",
            "unknown_column": 1,
        })
        request = page.generation_request()
        assert page.status == PageStatus.DRAFT
        assert request.title == "Acme"
        assert request.doc_text == "Brief"
        assert request.wireframe_url.endswith("a.png")
        assert request.tone == "playful"
