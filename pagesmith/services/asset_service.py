"""
Asset intake - upload source files for a landing page and extract document text.

Each file is handled on its own: a failed upload or extraction is recorded
on that file's outcome and the others carry on. Whatever succeeded is then
written to the page row in one update.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .document_extractor import ExtractionError, extract_text, is_supported_document
from .landing_page_service import LandingPageService
from .storage_service import StorageError, StorageService

logger = logging.getLogger(__name__)

# asset kind -> landing_pages column holding its public URL
URL_COLUMNS = {
    "document": "original_word_doc_url",
    "wireframe": "original_wireframe_url",
    "inspiration": "inspiration_layout_url",
}

# filename, bytes, content type
AssetFile = Tuple[str, bytes, Optional[str]]


class AssetOutcome(BaseModel):
    kind: str
    filename: str
    public_url: Optional[str] = None
    extracted_chars: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.public_url is not None and self.error is None


class AssetIntakeResult(BaseModel):
    outcomes: List[AssetOutcome] = Field(default_factory=list)
    doc_text: Optional[str] = None

    @property
    def failed(self) -> List[AssetOutcome]:
        return [o for o in self.outcomes if o.error]


class AssetIntakeService:
    """
    Usage:
        intake = AssetIntakeService()
        result = await intake.ingest(page_id, user_id, {
            "document": ("brief.docx", docx_bytes, None),
            "wireframe": ("sketch.png", png_bytes, "image/png"),
        })
    """

    def __init__(self, supabase=None, storage: Optional[StorageService] = None, pages: Optional[LandingPageService] = None):
        self.storage = storage or StorageService(supabase)
        self.pages = pages or LandingPageService(supabase)

    async def ingest(self, page_id: str, user_id: str, files: Dict[str, AssetFile]) -> AssetIntakeResult:
        unknown = set(files) - set(URL_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown asset kinds: {', '.join(sorted(unknown))}")

        texts: Dict[str, str] = {}
        outcomes = await asyncio.gather(*[
            self._ingest_one(kind, user_id, filename, data, content_type, texts)
            for kind, (filename, data, content_type) in files.items()
        ])

        result = AssetIntakeResult(outcomes=list(outcomes), doc_text=texts.get("document"))

        fields = {URL_COLUMNS[o.kind]: o.public_url for o in outcomes if o.public_url}
        if result.doc_text:
            fields["doc_text"] = result.doc_text
        if fields:
            self.pages.update_page(page_id, fields)

        for outcome in result.failed:
            logger.warning(f"Asset {outcome.kind} ({outcome.filename}) for page {page_id}: {outcome.error}")
        return result

    async def _ingest_one(
        self,
        kind: str,
        user_id: str,
        filename: str,
        data: bytes,
        content_type: Optional[str],
        texts: Dict[str, str],
    ) -> AssetOutcome:
        outcome = AssetOutcome(kind=kind, filename=filename)

        if kind == "document" and not is_supported_document(filename, content_type):
            outcome.error = "Unsupported document type; upload a .docx file"
            return outcome

        try:
            uploaded = await asyncio.to_thread(
                self.storage.upload_asset, kind, user_id, filename, data, content_type
            )
            outcome.public_url = uploaded["public_url"]
        except StorageError as e:
            outcome.error = str(e)
            return outcome

        if kind == "document":
            try:
                text = await asyncio.to_thread(extract_text, data)
                texts[kind] = text
                outcome.extracted_chars = len(text)
            except ExtractionError as e:
                outcome.error = f"Uploaded, but text extraction failed: {e}"

        return outcome
