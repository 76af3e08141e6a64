"""
LandingPageService - CRUD for the landing_pages table.

Every write is a single-row update so a save lands atomically: title,
content_json and generated_html are written together or not at all.
"""

import logging
import re
import time
import unicodedata
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from ..core.database import get_supabase_client
from .models import LandingPageDocument, PageStatus
from .landing_page.renderer import render_landing_page

logger = logging.getLogger(__name__)

TABLE = "landing_pages"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class PersistenceError(Exception):
    """A read or write against the landing_pages table failed."""
    pass


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_slug(title: str, now: Optional[float] = None) -> str:
    """
    URL slug for a new page: accents stripped, lowercased, non-alphanumeric
    runs collapsed to '-', with a base36 millisecond timestamp appended.

    Example:
        generate_slug("Lançamento Acme!")  ->  "lancamento-acme-m1x2y3z4"
    """
    normalized = unicodedata.normalize("NFKD", title or "")
    ascii_title = normalized.encode("ascii", "ignore").decode("ascii").lower()
    base = re.sub(r"[^a-z0-9]+", "-", ascii_title).strip("-") or "page"
    timestamp = int((now if now is not None else time.time()) * 1000)
    return f"{base}-{_to_base36(timestamp)}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LandingPageService:
    """
    Service for landing page rows.

    Usage:
        service = LandingPageService()
        page = service.create_page("Acme Launch", user_id=user_id)
        service.save_document(page["id"], document, title="Acme Launch")
    """

    def __init__(self, supabase=None):
        self.supabase = supabase or get_supabase_client()

    # ---------------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------------

    def get_page(self, page_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a page by id, or None."""
        try:
            result = self.supabase.table(TABLE).select("*").eq("id", page_id).limit(1).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to load landing page {page_id}: {e}") from e
        return result.data[0] if result.data else None

    def list_pages(
        self,
        user_id: Optional[str] = None,
        status: Optional[Union[PageStatus, str]] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """List pages, most recently updated first."""
        query = self.supabase.table(TABLE).select(
            "id, title, slug, status, published_at, created_at, updated_at"
        )
        if user_id:
            query = query.eq("user_id", user_id)
        if status:
            query = query.eq("status", PageStatus(status).value)
        try:
            result = query.order("updated_at", desc=True).limit(limit).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to list landing pages: {e}") from e
        return result.data or []

    def get_published_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        """Public lookup: only pages with status 'published' are returned."""
        try:
            result = (
                self.supabase.table(TABLE)
                .select("id, title, slug, generated_html, content_json, published_at")
                .eq("slug", slug)
                .eq("status", PageStatus.PUBLISHED.value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to load published page '{slug}': {e}") from e
        return result.data[0] if result.data else None

    # ---------------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------------

    def create_page(
        self,
        title: str,
        user_id: Optional[str] = None,
        description: Optional[str] = None,
        doc_text: Optional[str] = None,
        tone: Optional[str] = None,
        language: Optional[str] = None,
        target_audience: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Insert a new draft page.

        Args:
            title: Page title (required)
            user_id: Owning user

        Returns:
            The inserted row
        """
        if not title or not title.strip():
            raise ValueError("title is required")

        record = {
            "user_id": user_id,
            "title": title.strip(),
            "slug": generate_slug(title),
            "description": description,
            "status": PageStatus.DRAFT.value,
            "content_json": {"title": title.strip(), "description": description},
            "doc_text": doc_text,
            "tone": tone,
            "language": language,
            "target_audience": target_audience,
        }

        try:
            result = self.supabase.table(TABLE).insert(record).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to create landing page: {e}") from e

        if not result.data:
            raise PersistenceError("Insert returned no row")

        page = result.data[0]
        logger.info(f"Created landing page {page.get('id')} ({record['slug']})")
        return page

    def update_page(self, page_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update one row in a single statement.

        Raises:
            PersistenceError: If the update fails or the row does not exist
        """
        payload = dict(fields)
        payload["updated_at"] = _now_iso()
        try:
            result = self.supabase.table(TABLE).update(payload).eq("id", page_id).execute()
        except Exception as e:
            logger.error(f"Failed to update landing page {page_id}: {e}")
            raise PersistenceError(f"Failed to update landing page {page_id}: {e}") from e

        if not result.data:
            raise PersistenceError(f"Landing page {page_id} not found")
        return result.data[0]

    def save_document(
        self,
        page_id: str,
        document: Union[LandingPageDocument, Dict[str, Any]],
        title: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Persist an edited document along with its rendered HTML.

        The metadata gets a ``lastEdited`` timestamp. The full section list,
        metadata, title and HTML go out in one update.
        """
        if not isinstance(document, LandingPageDocument):
            document = LandingPageDocument.from_dict(document)

        content = document.to_dict()
        content["metadata"]["lastEdited"] = _now_iso()

        fields: Dict[str, Any] = {
            "content_json": content,
            "generated_html": render_landing_page(document, title or ""),
        }
        if title is not None:
            fields["title"] = title

        row = self.update_page(page_id, fields)
        logger.info(f"Saved landing page {page_id} ({len(document.sections)} sections)")
        return row

    def update_asset_urls(
        self,
        page_id: str,
        word_doc_url: Optional[str] = None,
        wireframe_url: Optional[str] = None,
        inspiration_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Record uploaded source asset URLs. Only the given URLs are written."""
        fields = {
            "original_word_doc_url": word_doc_url,
            "original_wireframe_url": wireframe_url,
            "inspiration_layout_url": inspiration_url,
        }
        fields = {k: v for k, v in fields.items() if v is not None}
        if not fields:
            raise ValueError("No asset URLs given")
        return self.update_page(page_id, fields)

    def mark_published(self, page_id: str) -> Dict[str, Any]:
        return self.update_page(page_id, {
            "status": PageStatus.PUBLISHED.value,
            "published_at": _now_iso(),
        })

    def archive_page(self, page_id: str) -> Dict[str, Any]:
        return self.update_page(page_id, {"status": PageStatus.ARCHIVED.value})

    def delete_page(self, page_id: str) -> None:
        try:
            self.supabase.table(TABLE).delete().eq("id", page_id).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to delete landing page {page_id}: {e}") from e
        logger.info(f"Deleted landing page {page_id}")
