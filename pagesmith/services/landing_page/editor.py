"""
Section editor - in-memory editing of a landing page document.

The editor owns a working copy of the document. Every effective mutation
marks it dirty, bumps ``revision`` and notifies subscribers (the preview
synchronizer and the autosave scheduler). Index-based operations that
point outside the array do nothing and leave the dirty flag alone.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Union

from ..models import LandingPageDocument, Section, new_section_id
from .defaults import default_content_for_type, starter_sections

logger = logging.getLogger(__name__)

ChangeListener = Callable[["SectionEditor"], None]


class SectionEditor:
    """
    Editing session for one document.

    Usage:
        editor = SectionEditor.from_page(page_row)
        unsubscribe = editor.subscribe(lambda ed: print(ed.revision))
        editor.update_field(section_id, "headline", "New headline")
        editor.reorder(section_id, 0)
        page_service.save_document(page_id, editor.snapshot(), title=editor.title)
    """

    def __init__(self, document: Union[LandingPageDocument, Dict[str, Any], None] = None, title: str = ""):
        if isinstance(document, LandingPageDocument):
            document = document.model_copy(deep=True)
        else:
            document = LandingPageDocument.from_dict(copy.deepcopy(document))

        reissued = document.reissue_duplicate_ids()
        if reissued:
            logger.warning(f"Document repeated section ids; reissued {', '.join(reissued)}")

        self.document = document
        self.title = title
        self.selected_id: Optional[str] = None
        self.revision = 0
        self._dirty = False
        self._listeners: List[ChangeListener] = []
        self._issued_ids: Set[str] = {s.id for s in document.sections}

    @classmethod
    def from_page(cls, page: Dict[str, Any]) -> "SectionEditor":
        """Open a stored page. Pages without sections start with hero, features and cta."""
        content = copy.deepcopy(page.get("content_json") or {})
        if not content.get("sections"):
            content["sections"] = starter_sections()
        return cls(content, title=page.get("title") or "")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def sections(self) -> List[Section]:
        return self.document.sections

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def mark_clean(self, revision: Optional[int] = None) -> bool:
        """
        Clear the dirty flag after a successful persist.

        When ``revision`` is given, the flag is only cleared if no edit has
        happened since that revision was snapshotted.
        """
        if revision is not None and revision != self.revision:
            return False
        self._dirty = False
        return True

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self._dirty = True
        self.revision += 1
        for listener in list(self._listeners):
            listener(self)

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the document as stored JSON."""
        return self.document.to_dict()

    # ------------------------------------------------------------------
    # Lookup and selection
    # ------------------------------------------------------------------

    def index_of(self, section_id: str) -> int:
        for index, section in enumerate(self.sections):
            if section.id == section_id:
                return index
        raise KeyError(f"Section not found: {section_id}")

    def get_section(self, section_id: str) -> Section:
        return self.sections[self.index_of(section_id)]

    def select(self, section_id: Optional[str]) -> None:
        if section_id is not None:
            self.index_of(section_id)
        self.selected_id = section_id

    @property
    def selected_section(self) -> Optional[Section]:
        if self.selected_id is None:
            return None
        return self.get_section(self.selected_id)

    # ------------------------------------------------------------------
    # Field edits
    # ------------------------------------------------------------------

    def update_field(self, section_id: str, field: str, value: Any) -> None:
        """Replace one key in a section's content. No shape validation."""
        self.get_section(section_id).content[field] = value
        self._changed()

    def _array(self, section: Section, array_field: str) -> Optional[List[Any]]:
        value = section.content.get(array_field)
        return value if isinstance(value, list) else None

    def add_array_item(self, section_id: str, array_field: str, item: Optional[Dict[str, Any]] = None) -> int:
        """Append ``item`` to an array field, creating the array if needed. Returns its index."""
        section = self.get_section(section_id)
        items = self._array(section, array_field)
        if items is None:
            items = []
            section.content[array_field] = items
        items.append(copy.deepcopy(item) if item is not None else {})
        self._changed()
        return len(items) - 1

    def remove_array_item(self, section_id: str, array_field: str, index: int) -> bool:
        """Remove the item at ``index``. Out-of-range indexes are a no-op."""
        items = self._array(self.get_section(section_id), array_field)
        if items is None or not 0 <= index < len(items):
            return False
        del items[index]
        self._changed()
        return True

    def update_array_item(self, section_id: str, array_field: str, index: int, field: str, value: Any) -> bool:
        """Set ``field`` on the item at ``index``. Out-of-range indexes are a no-op."""
        items = self._array(self.get_section(section_id), array_field)
        if items is None or not 0 <= index < len(items) or not isinstance(items[index], dict):
            return False
        items[index][field] = value
        self._changed()
        return True

    def set_title(self, title: str) -> None:
        self.title = title
        self._changed()

    def update_metadata(self, field: str, value: Any) -> None:
        """Set a metadata key, e.g. 'primaryColor'."""
        attribute = "primary_color" if field == "primaryColor" else field
        setattr(self.document.metadata, attribute, value)
        self._changed()

    # ------------------------------------------------------------------
    # Section list edits
    # ------------------------------------------------------------------

    def reorder(self, section_id: str, new_index: int) -> bool:
        """
        Move one section to ``new_index`` (clamped to the list bounds).

        All other sections keep their relative order.
        """
        old_index = self.index_of(section_id)
        new_index = max(0, min(new_index, len(self.sections) - 1))
        if new_index == old_index:
            return False
        section = self.sections.pop(old_index)
        self.sections.insert(new_index, section)
        self._changed()
        return True

    def move_section(self, section_id: str, offset: int) -> bool:
        """Move a section up (negative) or down (positive) by ``offset`` places."""
        return self.reorder(section_id, self.index_of(section_id) + offset)

    def _fresh_id(self, section_type: str) -> str:
        section_id = new_section_id(section_type)
        while section_id in self._issued_ids:
            section_id = new_section_id(section_type)
        self._issued_ids.add(section_id)
        return section_id

    def add_section(self, section_type: str) -> Section:
        """Append a section with default content for its type and select it."""
        section = Section(
            id=self._fresh_id(section_type),
            type=section_type,
            content=default_content_for_type(section_type),
        )
        self.sections.append(section)
        self.selected_id = section.id
        logger.debug(f"Added section {section.id}")
        self._changed()
        return section

    def delete_section(self, section_id: str) -> bool:
        """Remove a section. Deleting the selected section clears the selection."""
        try:
            index = self.index_of(section_id)
        except KeyError:
            return False
        del self.sections[index]
        if self.selected_id == section_id:
            self.selected_id = None
        self._changed()
        return True
