"""
Streamlit UI - Landing page editor.

Create a page from a title and source assets, generate its content, edit
sections with a live preview, then save, export or publish to WordPress.

Saving is manual: the header shows an unsaved-changes indicator while the
editor is dirty and the Save button writes the document. There is no
background autosave in the Streamlit app.

Run with:
    streamlit run pagesmith/ui/app.py

Environment variables required:
    SUPABASE_URL, SUPABASE_SERVICE_KEY: Supabase project
    ANTHROPIC_API_KEY: Claude API key for generation
"""

import asyncio
import logging
from typing import Any, Dict, List

import streamlit as st
import streamlit.components.v1 as components

from pagesmith.core.database import DatabaseConfigError, get_supabase_client
from pagesmith.core.observability import setup_logfire
from pagesmith.services.asset_service import AssetIntakeService
from pagesmith.services.landing_page import PreviewSynchronizer, SectionEditor, export_filename
from pagesmith.services.landing_page.generation_service import (
    GenerationError,
    LandingPageGenerationService,
    MissingCredentialsError,
    QuotaExhaustedError,
    RateLimitedError,
)
from pagesmith.services.landing_page_service import LandingPageService, PersistenceError
from pagesmith.services.models import SectionType
from pagesmith.services.wordpress_service import WordPressError, WordPressService

logger = logging.getLogger(__name__)

st.set_page_config(page_title="Pagesmith", page_icon="📄", layout="wide")

# Plain content fields per section type
SECTION_FIELDS: Dict[str, List[str]] = {
    "hero": ["headline", "subheadline", "ctaText", "ctaLink"],
    "features": ["title", "subtitle"],
    "testimonials": ["title"],
    "cta": ["title", "subtitle", "ctaText", "ctaLink"],
    "how-it-works": ["title"],
    "footer": ["copyright"],
}

# Array field and item keys per section type
SECTION_ARRAYS: Dict[str, tuple] = {
    "features": ("features", ["icon", "title", "description"]),
    "testimonials": ("testimonials", ["name", "role", "quote"]),
    "how-it-works": ("steps", ["title", "description"]),
}

LONG_FIELDS = {"subheadline", "subtitle", "description", "quote"}


@st.cache_resource
def init_observability():
    """Initialize Logfire once per process."""
    return setup_logfire(service_name="pagesmith-ui")


def get_page_service() -> LandingPageService:
    return LandingPageService(get_supabase_client())


def get_generation_service() -> LandingPageGenerationService:
    return LandingPageGenerationService(supabase=get_supabase_client())


# Session state
if "ps_page_id" not in st.session_state:
    st.session_state.ps_page_id = None
if "ps_editor" not in st.session_state:
    st.session_state.ps_editor = None
if "ps_preview" not in st.session_state:
    st.session_state.ps_preview = None
if "ps_epoch" not in st.session_state:
    st.session_state.ps_epoch = 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _open_page(page: Dict[str, Any]):
    """Load a page row into a fresh editor + preview."""
    if st.session_state.ps_preview is not None:
        st.session_state.ps_preview.close()
    editor = SectionEditor.from_page(page)
    st.session_state.ps_page_id = page["id"]
    st.session_state.ps_editor = editor
    st.session_state.ps_preview = PreviewSynchronizer(editor)
    st.session_state.ps_epoch += 1


def _run_generation(page_id: str) -> bool:
    """Regenerate a page, showing a distinct message per failure kind."""
    try:
        with st.spinner("Generating landing page..."):
            result = get_generation_service().regenerate(page_id)
    except MissingCredentialsError as e:
        st.error(f"Generation is not configured: {e}")
        return False
    except RateLimitedError:
        st.warning("Rate limit reached. Wait a moment and try again.")
        return False
    except QuotaExhaustedError:
        st.error("Generation credits are exhausted. Add credits to continue.")
        return False
    except (GenerationError, PersistenceError) as e:
        st.error(f"Generation failed: {e}")
        return False

    if result.used_fallback:
        st.info("The AI response could not be used, so a starter page was built from your title.")
    for url in result.skipped_assets:
        st.warning(f"Could not attach image: {url}")
    return True


def _save(editor: SectionEditor) -> bool:
    revision = editor.revision
    try:
        with st.spinner("Saving..."):
            get_page_service().save_document(st.session_state.ps_page_id, editor.snapshot(), title=editor.title)
    except PersistenceError as e:
        st.error(f"Save failed, your changes are still here: {e}")
        return False
    editor.mark_clean(revision)
    return True


def _widget_key(section_id: str, *parts: Any) -> str:
    return "ps_" + "_".join([str(st.session_state.ps_epoch), section_id] + [str(p) for p in parts])


def _on_field(editor: SectionEditor, section_id: str, field: str, key: str):
    editor.update_field(section_id, field, st.session_state[key])


def _on_item(editor: SectionEditor, section_id: str, array: str, index: int, field: str, key: str):
    editor.update_array_item(section_id, array, index, field, st.session_state[key])


def _bump_epoch():
    st.session_state.ps_epoch += 1


# ---------------------------------------------------------------------------
# Sidebar: pages + new page
# ---------------------------------------------------------------------------

def render_sidebar():
    st.sidebar.title("📄 Pagesmith")

    with st.sidebar.expander("➕ New landing page", expanded=st.session_state.ps_page_id is None):
        with st.form("ps_new_page"):
            title = st.text_input("Title *")
            description = st.text_area("Description")
            user_id = st.text_input("User ID", value="local")
            tone = st.text_input("Tone (optional)")
            language = st.text_input("Language (optional)")
            audience = st.text_input("Target audience (optional)")
            document = st.file_uploader("Content document (.docx)", type=["docx"])
            wireframe = st.file_uploader("Wireframe", type=["png", "jpg", "jpeg", "webp", "gif"])
            inspiration = st.file_uploader("Design inspiration", type=["png", "jpg", "jpeg", "webp", "gif"])
            submitted = st.form_submit_button("Create & generate", type="primary")

        if submitted:
            if not title.strip():
                st.error("Title is required")
            else:
                _create_and_generate(title, description, user_id, tone, language, audience,
                                     {"document": document, "wireframe": wireframe, "inspiration": inspiration})

    try:
        pages = get_page_service().list_pages(limit=100)
    except PersistenceError as e:
        st.sidebar.error(str(e))
        return

    st.sidebar.subheader("Your pages")
    for page in pages:
        label = f"{'✅' if page.get('status') == 'published' else '📝'} {page['title']}"
        if st.sidebar.button(label, key=f"ps_open_{page['id']}", use_container_width=True):
            row = get_page_service().get_page(page["id"])
            if row:
                _open_page(row)
                st.rerun()


def _create_and_generate(title, description, user_id, tone, language, audience, uploads):
    pages = get_page_service()
    try:
        page = pages.create_page(
            title=title,
            user_id=user_id or None,
            description=description or None,
            tone=tone or None,
            language=language or None,
            target_audience=audience or None,
        )
    except PersistenceError as e:
        st.error(f"Could not create page: {e}")
        return

    files = {kind: (f.name, f.getvalue(), f.type) for kind, f in uploads.items() if f is not None}
    if files:
        result = asyncio.run(AssetIntakeService(get_supabase_client()).ingest(page["id"], user_id or "local", files))
        for outcome in result.failed:
            st.warning(f"{outcome.kind}: {outcome.error}")

    _run_generation(page["id"])
    row = pages.get_page(page["id"])
    if row:
        _open_page(row)
        st.rerun()


# ---------------------------------------------------------------------------
# Section editor
# ---------------------------------------------------------------------------

def render_section_list(editor: SectionEditor):
    st.subheader("Sections")
    for index, section in enumerate(editor.sections):
        cols = st.columns([6, 1, 1, 1])
        selected = section.id == editor.selected_id
        label = f"{'▶ ' if selected else ''}{index + 1}. {section.type}"
        if cols[0].button(label, key=f"ps_sel_{section.id}", use_container_width=True):
            editor.select(section.id)
            st.rerun()
        if cols[1].button("↑", key=f"ps_up_{section.id}", disabled=index == 0):
            editor.move_section(section.id, -1)
            st.rerun()
        if cols[2].button("↓", key=f"ps_down_{section.id}", disabled=index == len(editor.sections) - 1):
            editor.move_section(section.id, 1)
            st.rerun()
        if cols[3].button("🗑", key=f"ps_del_{section.id}"):
            editor.delete_section(section.id)
            st.rerun()

    add_cols = st.columns([3, 1])
    new_type = add_cols[0].selectbox("Add section", SectionType.values(), label_visibility="collapsed")
    if add_cols[1].button("Add"):
        editor.add_section(new_type)
        st.rerun()


def render_section_form(editor: SectionEditor):
    section = editor.selected_section
    if section is None:
        st.caption("Select a section to edit it.")
        return

    st.subheader(f"Edit: {section.type}")

    if not section.is_known_type:
        st.caption("This section type is not rendered; raw data shown.")
        st.json(section.content)
        return

    for field in SECTION_FIELDS.get(section.type, []):
        key = _widget_key(section.id, field)
        widget = st.text_area if field in LONG_FIELDS else st.text_input
        widget(
            field,
            value=str(section.content.get(field) or ""),
            key=key,
            on_change=_on_field,
            args=(editor, section.id, field, key),
        )

    if section.type not in SECTION_ARRAYS:
        return

    array, item_fields = SECTION_ARRAYS[section.type]
    items = section.content.get(array) if isinstance(section.content.get(array), list) else []
    for index, item in enumerate(items):
        with st.expander(f"{array} #{index + 1}", expanded=False):
            for field in item_fields:
                key = _widget_key(section.id, array, index, field)
                widget = st.text_area if field in LONG_FIELDS else st.text_input
                widget(
                    field,
                    value=str((item or {}).get(field) or "") if isinstance(item, dict) else "",
                    key=key,
                    on_change=_on_item,
                    args=(editor, section.id, array, index, field, key),
                )
            if st.button("Remove", key=_widget_key(section.id, array, index, "remove")):
                editor.remove_array_item(section.id, array, index)
                _bump_epoch()
                st.rerun()

    if st.button(f"➕ Add to {array}", key=_widget_key(section.id, array, "add")):
        editor.add_array_item(section.id, array, {field: "" for field in item_fields})
        _bump_epoch()
        st.rerun()


def render_publish(editor: SectionEditor, html: str):
    st.download_button(
        "⬇️ Export HTML",
        data=html,
        file_name=export_filename(editor.title),
        mime="text/html",
    )

    with st.expander("🌐 Publish to WordPress"):
        with st.form("ps_wp"):
            site_url = st.text_input("Site URL", placeholder="https://example.com")
            username = st.text_input("Username")
            app_password = st.text_input("Application password", type="password")
            as_draft = st.checkbox("Publish as draft")
            submitted = st.form_submit_button("Publish")

        if submitted:
            if editor.is_dirty and not _save(editor):
                return
            pages = get_page_service()
            try:
                wp = WordPressService(site_url, username, app_password)
                page = pages.get_page(st.session_state.ps_page_id)
                result = wp.publish_landing_page(page, pages, status="draft" if as_draft else "publish")
            except (WordPressError, PersistenceError, ValueError) as e:
                st.error(f"Publishing failed: {e}")
                return
            st.success(f"Published: {result['url']}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    init_observability()
    try:
        get_supabase_client()
    except DatabaseConfigError as e:
        st.error(f"Database not configured: {e}")
        st.stop()
    render_sidebar()

    editor: SectionEditor = st.session_state.ps_editor
    preview: PreviewSynchronizer = st.session_state.ps_preview
    if editor is None:
        st.title("Pagesmith")
        st.write("Create a landing page from the sidebar, or open an existing one.")
        return

    header = st.columns([4, 2, 1, 1])
    new_title = header[0].text_input("Title", value=editor.title, key=f"ps_title_{st.session_state.ps_page_id}")
    if new_title != editor.title:
        editor.set_title(new_title)
    header[1].markdown("🟠 **Unsaved changes**" if editor.is_dirty else "🟢 Saved")
    if header[2].button("💾 Save", disabled=not editor.is_dirty, type="primary"):
        if _save(editor):
            st.rerun()
    if header[3].button("✨ Regenerate"):
        if _run_generation(st.session_state.ps_page_id):
            row = get_page_service().get_page(st.session_state.ps_page_id)
            if row:
                _open_page(row)
                st.rerun()

    left, right = st.columns([2, 3])
    with left:
        render_section_list(editor)
        st.divider()
        render_section_form(editor)
    with right:
        st.subheader("Preview")
        components.html(preview.html, height=900, scrolling=True)
        render_publish(editor, preview.html)


main()
