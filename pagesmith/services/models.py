"""
Pydantic models for landing page documents and their persisted rows.

A document is an ordered list of typed sections plus advisory metadata.
Section content is an open mapping: the generator and older documents may
carry keys the editor does not know about, and those must survive a
load/save cycle untouched. Unknown section types are kept as-is too.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SectionType(str, Enum):
    HERO = "hero"
    FEATURES = "features"
    TESTIMONIALS = "testimonials"
    CTA = "cta"
    HOW_IT_WORKS = "how-it-works"
    FOOTER = "footer"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class PageStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


def new_section_id(section_type: str) -> str:
    """Fresh section id, unique for the life of a document."""
    return f"{section_type or 'section'}-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Document schema
# ---------------------------------------------------------------------------

class Section(BaseModel):
    """One typed content block. ``type`` is a plain string so unknown variants round-trip."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Stable identifier, never reused or renumbered")
    type: str = Field(description="hero | features | testimonials | cta | how-it-works | footer")
    content: Dict[str, Any] = Field(default_factory=dict, description="Open field mapping")

    @model_validator(mode="before")
    @classmethod
    def _assign_missing_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            data = dict(data)
            data["id"] = new_section_id(str(data.get("type") or ""))
        return data

    @field_validator("content", mode="before")
    @classmethod
    def _none_content(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_known_type(self) -> bool:
        return self.type in SectionType.values()


class PageMetadata(BaseModel):
    """Document-wide defaults used when a section omits its own copy."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    headline: Optional[str] = None
    subheadline: Optional[str] = None


class LandingPageDocument(BaseModel):
    """
    The content_json payload of a landing page.

    Usage:
        doc = LandingPageDocument.from_dict(row["content_json"])
        doc.sections.append(...)
        row["content_json"] = doc.to_dict()
    """

    model_config = ConfigDict(extra="allow")

    sections: List[Section] = Field(default_factory=list)
    metadata: PageMetadata = Field(default_factory=PageMetadata)

    @field_validator("sections", mode="before")
    @classmethod
    def _none_sections(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _none_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "LandingPageDocument":
        """Load stored JSON. Missing ``sections`` is an empty document, not an error."""
        return cls.model_validate(data or {})

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True)
        data["metadata"] = {k: v for k, v in data["metadata"].items() if v is not None}
        return data

    def has_section_type(self, section_type: str) -> bool:
        return any(section.type == section_type for section in self.sections)

    def reissue_duplicate_ids(self) -> List[str]:
        """
        Give every section after the first holder of an id a fresh one.

        Generated and legacy documents can repeat ids. The first section
        keeps the id; later ones are renamed in place.

        Returns:
            The new ids that were assigned
        """
        seen = set()
        reissued: List[str] = []
        for section in self.sections:
            if section.id in seen:
                section_id = new_section_id(section.type)
                while section_id in seen:
                    section_id = new_section_id(section.type)
                section.id = section_id
                reissued.append(section_id)
            seen.add(section.id)
        return reissued


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class GenerationRequest(BaseModel):
    """Inputs for one generation call."""
    title: str = Field(..., min_length=1, description="Project / page title")
    description: Optional[str] = Field(default=None, description="Free-text project description")
    doc_text: Optional[str] = Field(default=None, description="Text extracted from the content document")
    content_doc_url: Optional[str] = Field(default=None, description="Public URL of the uploaded content document")
    wireframe_url: Optional[str] = Field(default=None, description="Public URL of a wireframe image")
    inspiration_url: Optional[str] = Field(default=None, description="Public URL of a design-inspiration image")
    tone: Optional[str] = Field(default=None, description="e.g. 'professional', 'playful'")
    language: Optional[str] = Field(default=None, description="Output language, e.g. 'en', 'pt-BR'")
    target_audience: Optional[str] = None


class GenerationResult(BaseModel):
    document: LandingPageDocument
    html: str
    source: str = Field(description="tool_call | text | fallback")
    skipped_assets: List[str] = Field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return self.source == "fallback"


# ---------------------------------------------------------------------------
# Persistence rows
# ---------------------------------------------------------------------------

class LandingPage(BaseModel):
    """A row of the landing_pages table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: Optional[str] = None
    title: str
    slug: str
    description: Optional[str] = None
    status: PageStatus = PageStatus.DRAFT
    content_json: Optional[Dict[str, Any]] = None
    generated_html: Optional[str] = None
    original_word_doc_url: Optional[str] = None
    original_wireframe_url: Optional[str] = None
    inspiration_layout_url: Optional[str] = None
    doc_text: Optional[str] = None
    tone: Optional[str] = None
    language: Optional[str] = None
    target_audience: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def document(self) -> LandingPageDocument:
        return LandingPageDocument.from_dict(self.content_json)

    def generation_request(self) -> GenerationRequest:
        """Rebuild the generation inputs stored on this row (used by regenerate)."""
        return GenerationRequest(
            title=self.title,
            description=self.description,
            doc_text=self.doc_text,
            content_doc_url=self.original_word_doc_url,
            wireframe_url=self.original_wireframe_url,
            inspiration_url=self.inspiration_layout_url,
            tone=self.tone,
            language=self.language,
            target_audience=self.target_audience,
        )
