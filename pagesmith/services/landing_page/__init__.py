"""
Landing page document pipeline.

- renderer: the one document -> HTML renderer
- defaults: starter section content and the personalized fallback page
- editor: in-memory section editing with dirty tracking
- preview: live re-render on every edit
- autosave: debounced persistence for an editing session

The Claude-backed generator lives in
pagesmith.services.landing_page.generation_service.
"""

from pagesmith.services.landing_page.renderer import (
    render_landing_page,
    extract_body_fragment,
    export_filename,
)
from pagesmith.services.landing_page.defaults import (
    create_personalized_fallback,
    default_content_for_type,
)
from pagesmith.services.landing_page.editor import SectionEditor
from pagesmith.services.landing_page.preview import PreviewSynchronizer
from pagesmith.services.landing_page.autosave import AutosaveScheduler

__all__ = [
    "render_landing_page",
    "extract_body_fragment",
    "export_filename",
    "create_personalized_fallback",
    "default_content_for_type",
    "SectionEditor",
    "PreviewSynchronizer",
    "AutosaveScheduler",
]
