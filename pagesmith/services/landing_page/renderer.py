"""
HTML renderer for landing page documents.

This is the only place a document becomes HTML: the editor preview, static
export, the public page route, WordPress publishing and the generator all
call render_landing_page(). Output depends only on the document, the title
fallback, the year used in the default copyright line and the configured
DEFAULT_PRIMARY_COLOR.

Text is inserted through Jinja2 with autoescaping enabled, so headline,
quote and other user strings are HTML-escaped.
"""

import logging
import os
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

import jinja2

from ...core.config import Config
from ..models import LandingPageDocument, PageMetadata, SectionType

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Landing Page"

_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
_jinja_env: Optional[jinja2.Environment] = None

_COLOR_RE = re.compile(
    r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20}|(rgb|rgba|hsl|hsla)\([0-9.,%\s]+\))$"
)
_UNSAFE_LINK_RE = re.compile(r"^\s*(javascript|vbscript|data):", re.IGNORECASE)
_BODY_RE = re.compile(r"<body[^>]*>([\s\S]*)</body>", re.IGNORECASE)


def _get_jinja_env() -> jinja2.Environment:
    """Get or create the Jinja2 environment with template loader."""
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _jinja_env


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _first(*values: Any) -> str:
    """First non-empty value as a string, or ''."""
    for value in values:
        if value is None:
            continue
        text = str(value).strip() if not isinstance(value, (dict, list)) else ""
        if text:
            return text
    return ""


def _items(value: Any) -> List[Dict[str, Any]]:
    """Array-valued content field, ignoring anything that is not a list of mappings."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _link(value: Any, default: str) -> str:
    link = _first(value)
    if not link or _UNSAFE_LINK_RE.match(link):
        return default
    return link


def _primary_color(metadata: PageMetadata) -> str:
    color = _first(metadata.primary_color)
    if color and _COLOR_RE.match(color):
        return color
    return Config.DEFAULT_PRIMARY_COLOR


def default_copyright(title: str, year: int) -> str:
    return f"© {year} {title}. All rights reserved."


# ---------------------------------------------------------------------------
# Per-type template contexts
# ---------------------------------------------------------------------------

def _hero_context(content: Dict[str, Any], metadata: PageMetadata, title: str, year: int) -> Dict[str, Any]:
    return {
        "headline": _first(content.get("headline"), metadata.headline, title),
        "subheadline": _first(content.get("subheadline"), metadata.subheadline),
        "cta_text": _first(content.get("ctaText"), "Get Started"),
        "cta_link": _link(content.get("ctaLink"), "#cta"),
    }


def _features_context(content: Dict[str, Any], metadata: PageMetadata, title: str, year: int) -> Dict[str, Any]:
    features = [
        {
            "icon": _first(f.get("icon"), "✨"),
            "title": _first(f.get("title")),
            "description": _first(f.get("description")),
        }
        for f in _items(content.get("features"))
    ]
    return {
        "title": _first(content.get("title"), "Why choose us?"),
        "subtitle": _first(content.get("subtitle")),
        "features": features,
        "columns": min(len(features), 4) or 3,
    }


def _testimonials_context(content: Dict[str, Any], metadata: PageMetadata, title: str, year: int) -> Dict[str, Any]:
    testimonials = []
    for t in _items(content.get("testimonials")):
        name = _first(t.get("name"), "Customer")
        testimonials.append({
            "name": name,
            "role": _first(t.get("role")),
            "quote": _first(t.get("quote")),
            "initial": name[0].upper(),
        })
    return {
        "title": _first(content.get("title"), "What our customers say"),
        "testimonials": testimonials,
    }


def _cta_context(content: Dict[str, Any], metadata: PageMetadata, title: str, year: int) -> Dict[str, Any]:
    return {
        "title": _first(content.get("title"), "Ready to start?"),
        "subtitle": _first(content.get("subtitle")),
        "cta_text": _first(content.get("ctaText"), "Get Started"),
        "cta_link": _link(content.get("ctaLink"), "#"),
    }


def _how_it_works_context(content: Dict[str, Any], metadata: PageMetadata, title: str, year: int) -> Dict[str, Any]:
    steps = [
        {
            "number": index,
            "title": _first(s.get("title")),
            "description": _first(s.get("description")),
        }
        for index, s in enumerate(_items(content.get("steps")), start=1)
    ]
    return {
        "title": _first(content.get("title"), "How it works"),
        "steps": steps,
    }


def _footer_context(content: Dict[str, Any], metadata: PageMetadata, title: str, year: int) -> Dict[str, Any]:
    return {"copyright": _first(content.get("copyright"), default_copyright(title, year))}


ContextBuilder = Callable[[Dict[str, Any], PageMetadata, str, int], Dict[str, Any]]

SECTION_RENDERERS: Dict[str, ContextBuilder] = {
    SectionType.HERO.value: _hero_context,
    SectionType.FEATURES.value: _features_context,
    SectionType.TESTIMONIALS.value: _testimonials_context,
    SectionType.CTA.value: _cta_context,
    SectionType.HOW_IT_WORKS.value: _how_it_works_context,
    SectionType.FOOTER.value: _footer_context,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def render_landing_page(
    document: Union[LandingPageDocument, Dict[str, Any], None],
    title_fallback: str = "",
    year: Optional[int] = None,
) -> str:
    """
    Render a landing page document to a complete HTML page.

    Sections render in list order. Unknown section types are skipped. An
    empty document renders a placeholder hero. A footer is synthesized only
    when the document has none.

    Args:
        document: Document model or its stored JSON (None is an empty document)
        title_fallback: Page title, used when a section has no copy of its own
        year: Year for the default copyright line (defaults to the current year)

    Returns:
        HTML string starting with <!DOCTYPE html>
    """
    if not isinstance(document, LandingPageDocument):
        document = LandingPageDocument.from_dict(document)

    env = _get_jinja_env()
    year = year or datetime.now().year
    metadata = document.metadata
    title = _first(title_fallback, metadata.headline, DEFAULT_TITLE)

    blocks: List[str] = []

    if not document.sections:
        blocks.append(env.get_template("sections/placeholder.html").render(
            headline=title,
            subheadline=_first(metadata.subheadline),
        ))

    for section in document.sections:
        build_context = SECTION_RENDERERS.get(section.type)
        if build_context is None:
            logger.debug(f"Skipping section {section.id} with unsupported type '{section.type}'")
            continue
        template = env.get_template(f"sections/{section.type}.html")
        blocks.append(template.render(**build_context(section.content, metadata, title, year)))

    if not document.has_section_type(SectionType.FOOTER.value):
        blocks.append(env.get_template("sections/footer.html").render(
            copyright=default_copyright(title, year),
        ))

    return env.get_template("page.html").render(
        title=title,
        description=_first(metadata.subheadline, title),
        primary_color=_primary_color(metadata),
        body="\n".join(blocks),
    )


def extract_body_fragment(html: str) -> str:
    """Inner content of <body>, or the whole input when there is no body tag."""
    if not html:
        return ""
    match = _BODY_RE.search(html)
    return (match.group(1) if match else html).strip()


def export_filename(title: str) -> str:
    """File name for a static HTML export of a page titled ``title``."""
    stem = re.sub(r"\s+", "-", (title or "").strip().lower()) or "landing-page"
    return f"{stem}.html"
