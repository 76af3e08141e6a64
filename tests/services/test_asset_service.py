"""
AssetIntakeService: per-file outcomes and the single row update.
"""

import io
from unittest.mock import MagicMock

import pytest
from docx import Document

from pagesmith.services.asset_service import AssetIntakeService
from pagesmith.services.storage_service import StorageError


def _docx(text):
    doc = Document()
    doc.add_paragraph(text)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def storage():
    storage = MagicMock()
    storage.upload_asset.side_effect = lambda kind, user_id, filename, data, content_type: {
        "path": f"{user_id}/{filename}",
        "public_url": f"https://cdn/{kind}/{filename}",
    }
    return storage


@pytest.fixture
def pages():
    return MagicMock()


@pytest.fixture
def intake(storage, pages):
    return AssetIntakeService(storage=storage, pages=pages)


class TestIngest:
    @pytest.mark.asyncio
    async def test_all_assets(self, intake, pages):
        result = await intake.ingest("p1", "u1", {
            "document": ("brief.docx", _docx("Rockets for all"), None),
            "wireframe": ("sketch.png", b"png", "image/png"),
            "inspiration": ("mood.jpg", b"jpg", "image/jpeg"),
        })

        assert not result.failed
        assert result.doc_text == "Rockets for all"
        pages.update_page.assert_called_once_with("p1", {
            "original_word_doc_url": "https://cdn/document/brief.docx",
            "original_wireframe_url": "https://cdn/wireframe/sketch.png",
            "inspiration_layout_url": "https://cdn/inspiration/mood.jpg",
            "doc_text": "Rockets for all",
        })

    @pytest.mark.asyncio
    async def test_one_failed_upload_does_not_block_others(self, intake, storage, pages):
        def upload(kind, user_id, filename, data, content_type):
            if kind == "wireframe":
                raise StorageError("bucket full")
            return {"path": filename, "public_url": f"https://cdn/{filename}"}

        storage.upload_asset.side_effect = upload
        result = await intake.ingest("p1", "u1", {
            "wireframe": ("sketch.png", b"png", "image/png"),
            "inspiration": ("mood.jpg", b"jpg", "image/jpeg"),
        })

        assert [o.kind for o in result.failed] == ["wireframe"]
        assert "bucket full" in result.failed[0].error
        pages.update_page.assert_called_once_with("p1", {"inspiration_layout_url": "https://cdn/mood.jpg"})

    @pytest.mark.asyncio
    async def test_unreadable_document_keeps_url(self, intake, pages):
        result = await intake.ingest("p1", "u1", {"document": ("brief.docx", b"not a docx", None)})

        outcome = result.outcomes[0]
        assert outcome.public_url == "https://cdn/document/brief.docx"
        assert "extraction failed" in outcome.error
        assert result.doc_text is None
        pages.update_page.assert_called_once_with("p1", {"original_word_doc_url": "https://cdn/document/brief.docx"})

    @pytest.mark.asyncio
    async def test_unsupported_document_type(self, intake, storage, pages):
        result = await intake.ingest("p1", "u1", {"document": ("brief.pdf", b"%PDF", "application/pdf")})
        assert result.failed[0].public_url is None
        storage.upload_asset.assert_not_called()
        pages.update_page.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_kind(self, intake):
        with pytest.raises(ValueError):
            await intake.ingest("p1", "u1", {"video": ("a.mp4", b"", None)})
