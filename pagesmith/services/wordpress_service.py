"""
WordPress publishing via the REST API.

Authenticates with a username + application password (HTTP Basic). Pages
are created from the rendered landing page's <body> fragment.
"""

import logging
import re
from typing import Any, Dict, Optional

import requests

from ..core.config import Config
from .landing_page.renderer import extract_body_fragment, render_landing_page
from .landing_page_service import LandingPageService
from .models import LandingPageDocument

logger = logging.getLogger(__name__)


class WordPressError(Exception):
    """WordPress rejected the request or could not be reached."""
    pass


def default_wp_slug(title: str) -> str:
    return re.sub(r"\s+", "-", (title or "").strip().lower())


class WordPressService:
    """
    Client for one WordPress site.

    Usage:
        wp = WordPressService("https://example.com/", "admin", "abcd efgh ijkl")
        wp.test_connection()
        page = wp.create_page("Acme Launch", "<section>...</section>")
        page["url"]
    """

    def __init__(
        self,
        site_url: str,
        username: str,
        app_password: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
    ):
        if not site_url or not username or not app_password:
            raise ValueError("site_url, username and app_password are required")

        self.site_url = site_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.auth = (username, app_password)
        self.timeout = timeout or Config.WORDPRESS_TIMEOUT

    def _url(self, path: str) -> str:
        return f"{self.site_url}/wp-json/wp/v2/{path}"

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"WordPress request to {self.site_url} failed: {e}")
            raise WordPressError(f"Could not reach {self.site_url}: {e}") from e

        if not response.ok:
            logger.error(f"WordPress {method} {path} failed: {response.status_code} {response.text[:200]}")
            raise WordPressError(f"WordPress returned {response.status_code} for {path}")

        return response.json()

    def test_connection(self) -> str:
        """
        Check the credentials.

        Returns:
            The authenticated user's display name
        """
        user = self._request("GET", "users/me")
        logger.info(f"WordPress connection OK for {self.site_url}")
        return user.get("name", "")

    def create_page(
        self,
        title: str,
        html_body: str,
        slug: Optional[str] = None,
        status: str = "publish",
    ) -> Dict[str, Any]:
        """
        Create a WordPress page.

        Args:
            title: Page title
            html_body: HTML fragment for the page content (no <html>/<body> wrapper)
            slug: URL slug; defaults to the title lowercased with spaces as dashes
            status: 'publish' or 'draft'

        Returns:
            Dict with page_id and url
        """
        if status not in ("publish", "draft"):
            raise ValueError(f"Invalid WordPress status: {status}")

        page = self._request("POST", "pages", json={
            "title": title,
            "content": html_body,
            "slug": slug or default_wp_slug(title),
            "status": status,
        })
        logger.info(f"Created WordPress page {page.get('id')} on {self.site_url}")
        return {"page_id": page.get("id"), "url": page.get("link")}

    def publish_landing_page(
        self,
        page: Dict[str, Any],
        pages: LandingPageService,
        slug: Optional[str] = None,
        status: str = "publish",
    ) -> Dict[str, Any]:
        """
        Publish a stored landing page and mark its row as published.

        Uses the stored HTML when present, otherwise renders the document.
        """
        html = page.get("generated_html") or render_landing_page(
            LandingPageDocument.from_dict(page.get("content_json")), page.get("title", "")
        )
        result = self.create_page(page["title"], extract_body_fragment(html), slug=slug, status=status)
        pages.mark_published(page["id"])
        return result
