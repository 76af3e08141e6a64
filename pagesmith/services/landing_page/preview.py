"""Live preview: re-render the editor's document on every change."""

import logging
from typing import Callable, Optional

from .editor import SectionEditor
from .renderer import render_landing_page

logger = logging.getLogger(__name__)


class PreviewSynchronizer:
    """
    Keeps rendered HTML in step with unsaved edits.

    The HTML is recomputed from scratch on each change, never patched and
    never debounced. It is display-only; the editor's document is the
    source of truth.
    """

    def __init__(self, editor: SectionEditor, on_render: Optional[Callable[[str], None]] = None):
        self.editor = editor
        self.on_render = on_render
        self.html = ""
        self.render_count = 0
        self._unsubscribe = editor.subscribe(self._on_change)
        self.refresh()

    def _on_change(self, editor: SectionEditor) -> None:
        self.refresh()

    def refresh(self) -> str:
        self.html = render_landing_page(self.editor.document, self.editor.title)
        self.render_count += 1
        if self.on_render is not None:
            self.on_render(self.html)
        return self.html

    def close(self) -> None:
        self._unsubscribe()
