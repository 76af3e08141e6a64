"""
API Request and Response Models.

Pydantic models for FastAPI request/response validation and
automatic OpenAPI documentation generation.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


# ============================================================================
# Landing Page Request Models
# ============================================================================

class CreatePageRequest(BaseModel):
    """Request model for creating a landing page row."""
    title: str = Field(..., min_length=1, description="Page title")
    user_id: Optional[str] = Field(None, description="Owning user id")
    description: Optional[str] = Field(None, description="Free-text project description")
    tone: Optional[str] = Field(None, description="Tone of voice hint for generation")
    language: Optional[str] = Field(None, description="Output language hint, e.g. 'en'")
    target_audience: Optional[str] = Field(None, description="Audience hint for generation")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Acme Launch",
                "description": "Sell rockets to hobbyists",
                "tone": "playful",
                "language": "en"
            }
        }


class SaveDocumentRequest(BaseModel):
    """Full document save from the editor. Sections and metadata are written together."""
    document: Dict[str, Any] = Field(..., description="Document JSON: {sections: [...], metadata: {...}}")
    title: Optional[str] = Field(None, description="Updated page title")


class PreviewRequest(BaseModel):
    """Render an unsaved document."""
    document: Dict[str, Any] = Field(default_factory=dict)
    title: str = Field("", description="Title used when sections have no copy of their own")


class WordPressCredentials(BaseModel):
    site_url: str = Field(..., description="WordPress site URL, e.g. https://example.com")
    username: str = Field(..., description="WordPress username")
    app_password: str = Field(..., description="WordPress application password")


class WordPressPublishRequest(WordPressCredentials):
    slug: Optional[str] = Field(None, description="Page slug (defaults to the title)")
    status: str = Field("publish", description="'publish' or 'draft'")


# ============================================================================
# Landing Page Response Models
# ============================================================================

class PageResponse(BaseModel):
    """Response model wrapping a landing page row."""
    success: bool = Field(..., description="Whether the operation succeeded")
    page: Optional[Dict[str, Any]] = Field(None, description="Landing page row")
    error: Optional[str] = Field(None, description="Error message if the operation failed")
    timestamp: datetime = Field(default_factory=datetime.now)


class PageListResponse(BaseModel):
    success: bool = True
    pages: List[Dict[str, Any]] = Field(default_factory=list)
    count: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)


class GenerationResponse(BaseModel):
    """Response model for landing page generation."""
    success: bool = Field(..., description="Whether generation succeeded")
    page_id: Optional[str] = Field(None, description="Landing page the result was saved to")
    content_json: Dict[str, Any] = Field(default_factory=dict, description="Generated document")
    source: str = Field(..., description="tool_call | text | fallback")
    skipped_assets: List[str] = Field(default_factory=list, description="Asset URLs that could not be attached")
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "page_id": "0b5c...",
                "content_json": {"sections": [{"id": "hero-1a2b", "type": "hero", "content": {}}], "metadata": {}},
                "source": "tool_call",
                "skipped_assets": [],
                "timestamp": "2025-01-18T12:00:00Z"
            }
        }


class AssetUploadResponse(BaseModel):
    success: bool
    outcomes: List[Dict[str, Any]] = Field(default_factory=list)
    doc_text_chars: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)


class WordPressPublishResponse(BaseModel):
    success: bool
    page_id: Optional[int] = Field(None, description="WordPress page id")
    url: Optional[str] = Field(None, description="Published page URL")
    timestamp: datetime = Field(default_factory=datetime.now)


class WordPressTestResponse(BaseModel):
    success: bool
    user: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)


# ============================================================================
# Health Check Models
# ============================================================================

class HealthResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=datetime.now)
    services: Dict[str, str] = Field(
        default_factory=dict,
        description="Status of dependent services (database, generation)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "timestamp": "2025-01-18T12:00:00Z",
                "services": {
                    "database": "connected",
                    "generation": "available"
                }
            }
        }


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response model."""
    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Landing page not found",
                "detail": "No landing page with id 0b5c...",
                "timestamp": "2025-01-18T12:00:00Z"
            }
        }
