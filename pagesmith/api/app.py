"""
Pagesmith FastAPI Application.

REST API for the landing page workflow: create a page, upload its source
assets, generate content with Claude, save editor changes, preview and
export HTML, and publish to WordPress or the public /p/{slug} route.

Features:
- API key authentication
- Rate limiting
- Health check endpoint
- Automatic OpenAPI documentation
"""

# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import asyncio
import logging
import os
from typing import Optional
from datetime import datetime

from fastapi import FastAPI, HTTPException, Depends, Request, UploadFile, File, Form, Query, status
from fastapi.security import APIKeyHeader
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .models import (
    CreatePageRequest,
    SaveDocumentRequest,
    PreviewRequest,
    WordPressCredentials,
    WordPressPublishRequest,
    PageResponse,
    PageListResponse,
    GenerationResponse,
    AssetUploadResponse,
    WordPressPublishResponse,
    WordPressTestResponse,
    HealthResponse,
    ErrorResponse,
)
from ..core.database import DatabaseConfigError
from ..core.observability import setup_logfire
from ..services.asset_service import AssetIntakeService
from ..services.landing_page_service import LandingPageService, PersistenceError
from ..services.landing_page.generation_service import (
    LandingPageGenerationService,
    GenerationError,
    MissingCredentialsError,
    RateLimitedError,
    QuotaExhaustedError,
)
from ..services.landing_page.renderer import render_landing_page, export_filename
from ..services.models import LandingPageDocument
from ..services.wordpress_service import WordPressService, WordPressError

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# ============================================================================
# FastAPI Application Setup
# ============================================================================

app = FastAPI(
    title="Pagesmith API",
    description="REST API for AI landing page generation, editing and publishing",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# ============================================================================
# CORS Configuration
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Rate Limiting
# ============================================================================

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ============================================================================
# API Key Authentication
# ============================================================================

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)

async def verify_api_key(api_key: Optional[str] = Depends(API_KEY_HEADER)):
    """
    Verify API key from request header.

    Checks against environment variable PAGESMITH_API_KEY.
    If not set, allows all requests (development mode).

    Raises:
        HTTPException: If API key is invalid or missing
    """
    expected_key = os.getenv("PAGESMITH_API_KEY")

    if not expected_key:
        logger.debug("PAGESMITH_API_KEY not set - running in development mode (no auth)")
        return True

    if not api_key:
        logger.warning("API key missing from request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide via X-API-Key header."
        )

    if api_key != expected_key:
        logger.warning(f"Invalid API key attempt: {api_key[:10]}...")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key"
        )

    return True

# ============================================================================
# Service Dependencies
# ============================================================================

def get_page_service() -> LandingPageService:
    return LandingPageService()


def get_generation_service() -> LandingPageGenerationService:
    return LandingPageGenerationService()


def get_asset_service() -> AssetIntakeService:
    return AssetIntakeService()


def _load_page(pages: LandingPageService, page_id: str) -> dict:
    page = pages.get_page(page_id)
    if page is None:
        raise HTTPException(status_code=404, detail=f"Landing page not found: {page_id}")
    return page


def _page_html(page: dict) -> str:
    return render_landing_page(LandingPageDocument.from_dict(page.get("content_json")), page.get("title", ""))

# ============================================================================
# Health Check Endpoint
# ============================================================================

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check endpoint"
)
async def health_check():
    """
    Check API health and service status.

    Reports whether the database client can be created and whether
    generation credentials are configured.
    """
    services = {}

    try:
        get_page_service()
        services["database"] = "connected"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        services["database"] = "error"

    services["generation"] = "available" if get_generation_service().client else "error"

    overall_status = "healthy" if all(
        s != "error" for s in services.values()
    ) else "degraded"

    return HealthResponse(
        status=overall_status,
        version=API_VERSION,
        timestamp=datetime.now(),
        services=services
    )

# ============================================================================
# Landing Page Endpoints
# ============================================================================

# Handlers that block on Supabase or WordPress are plain defs so FastAPI runs
# them in its threadpool instead of on the event loop.

@app.post("/pages", response_model=PageResponse, status_code=201, tags=["Pages"], summary="Create a landing page")
def create_page(
    body: CreatePageRequest,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    page = pages.create_page(
        title=body.title,
        user_id=body.user_id,
        description=body.description,
        tone=body.tone,
        language=body.language,
        target_audience=body.target_audience,
    )
    return PageResponse(success=True, page=page)


@app.get("/pages", response_model=PageListResponse, tags=["Pages"], summary="List landing pages")
def list_pages(
    user_id: Optional[str] = None,
    page_status: Optional[str] = Query(None, alias="status"),
    limit: int = 50,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    rows = pages.list_pages(user_id=user_id, status=page_status, limit=limit)
    return PageListResponse(success=True, pages=rows, count=len(rows))


@app.get("/pages/{page_id}", response_model=PageResponse, tags=["Pages"], summary="Get a landing page")
def get_page(
    page_id: str,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    return PageResponse(success=True, page=_load_page(pages, page_id))


@app.put("/pages/{page_id}/document", response_model=PageResponse, tags=["Pages"], summary="Save editor changes")
def save_document(
    page_id: str,
    body: SaveDocumentRequest,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    """Write the full section list, metadata, title and rendered HTML in one update."""
    page = pages.save_document(page_id, body.document, title=body.title)
    return PageResponse(success=True, page=page)


@app.post("/pages/{page_id}/archive", response_model=PageResponse, tags=["Pages"], summary="Archive a landing page")
def archive_page(
    page_id: str,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    return PageResponse(success=True, page=pages.archive_page(page_id))


@app.delete("/pages/{page_id}", status_code=204, tags=["Pages"], summary="Delete a landing page")
def delete_page(
    page_id: str,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    pages.delete_page(page_id)


@app.post(
    "/pages/{page_id}/assets",
    response_model=AssetUploadResponse,
    tags=["Pages"],
    summary="Upload source assets (content document, wireframe, inspiration)"
)
async def upload_assets(
    page_id: str,
    user_id: str = Form(...),
    document: Optional[UploadFile] = File(None),
    wireframe: Optional[UploadFile] = File(None),
    inspiration: Optional[UploadFile] = File(None),
    authenticated: bool = Depends(verify_api_key),
    intake: AssetIntakeService = Depends(get_asset_service),
):
    """Each file is uploaded independently; a failure is reported per file."""
    files = {}
    for kind, upload in (("document", document), ("wireframe", wireframe), ("inspiration", inspiration)):
        if upload is not None:
            files[kind] = (upload.filename or kind, await upload.read(), upload.content_type)

    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")

    result = await intake.ingest(page_id, user_id, files)
    return AssetUploadResponse(
        success=not result.failed,
        outcomes=[o.model_dump() for o in result.outcomes],
        doc_text_chars=len(result.doc_text or ""),
    )

# ============================================================================
# Generation Endpoint
# ============================================================================

@app.post(
    "/pages/{page_id}/generate",
    response_model=GenerationResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Invalid API key"},
        402: {"model": ErrorResponse, "description": "Generation credits exhausted"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
        503: {"model": ErrorResponse, "description": "Generation service not configured"}
    },
    tags=["Generation"],
    summary="Generate (or regenerate) landing page content"
)
@limiter.limit("5/minute")
async def generate_page(
    request: Request,
    page_id: str,
    authenticated: bool = Depends(verify_api_key),
    generator: LandingPageGenerationService = Depends(get_generation_service),
):
    """
    Generate the page from the inputs stored on its row (title, description,
    document text, asset URLs, tone/language/audience) and save the result.
    """
    result = await asyncio.to_thread(generator.regenerate, page_id)
    return GenerationResponse(
        success=True,
        page_id=page_id,
        content_json=result.document.to_dict(),
        source=result.source,
        skipped_assets=result.skipped_assets,
    )

# ============================================================================
# Preview / Export / Public Endpoints
# ============================================================================

@app.post("/preview", response_class=HTMLResponse, tags=["Preview"], summary="Render an unsaved document")
async def preview_document(body: PreviewRequest, authenticated: bool = Depends(verify_api_key)):
    return HTMLResponse(render_landing_page(body.document, body.title))


@app.get("/pages/{page_id}/preview", response_class=HTMLResponse, tags=["Preview"], summary="Render a stored page")
def preview_page(
    page_id: str,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    return HTMLResponse(_page_html(_load_page(pages, page_id)))


@app.get("/pages/{page_id}/export", tags=["Preview"], summary="Download the page as a static HTML file")
def export_page(
    page_id: str,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    page = _load_page(pages, page_id)
    return HTMLResponse(
        _page_html(page),
        headers={"Content-Disposition": f'attachment; filename="{export_filename(page.get("title", ""))}"'},
    )


@app.get("/p/{slug}", response_class=HTMLResponse, tags=["Public"], summary="Serve a published page")
def public_page(slug: str, pages: LandingPageService = Depends(get_page_service)):
    page = pages.get_published_by_slug(slug)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return HTMLResponse(page.get("generated_html") or _page_html(page))

# ============================================================================
# WordPress Endpoints
# ============================================================================

@app.post("/wordpress/test", response_model=WordPressTestResponse, tags=["WordPress"], summary="Test WordPress credentials")
def wordpress_test(body: WordPressCredentials, authenticated: bool = Depends(verify_api_key)):
    wp = WordPressService(body.site_url, body.username, body.app_password)
    return WordPressTestResponse(success=True, user=wp.test_connection())


@app.post(
    "/pages/{page_id}/publish/wordpress",
    response_model=WordPressPublishResponse,
    tags=["WordPress"],
    summary="Publish a landing page to WordPress"
)
def wordpress_publish(
    page_id: str,
    body: WordPressPublishRequest,
    authenticated: bool = Depends(verify_api_key),
    pages: LandingPageService = Depends(get_page_service),
):
    page = _load_page(pages, page_id)
    wp = WordPressService(body.site_url, body.username, body.app_password)
    result = wp.publish_landing_page(page, pages, slug=body.slug, status=body.status)
    return WordPressPublishResponse(success=True, page_id=result["page_id"], url=result["url"])

# ============================================================================
# Error Handlers
# ============================================================================

def _error(status_code: int, error: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(mode="json")
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return _error(exc.status_code, str(exc.detail), str(exc))


@app.exception_handler(DatabaseConfigError)
async def database_config_handler(request: Request, exc: DatabaseConfigError):
    logger.error(f"Database not configured: {exc}")
    return _error(503, "Database not configured", str(exc))


@app.exception_handler(MissingCredentialsError)
async def missing_credentials_handler(request: Request, exc: MissingCredentialsError):
    return _error(503, "Generation service not configured", str(exc))


@app.exception_handler(RateLimitedError)
async def rate_limited_handler(request: Request, exc: RateLimitedError):
    return _error(429, "Generation rate limit exceeded. Try again shortly.", str(exc))


@app.exception_handler(QuotaExhaustedError)
async def quota_exhausted_handler(request: Request, exc: QuotaExhaustedError):
    return _error(402, "Generation credits exhausted", str(exc))


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    return _error(502, "Generation failed", str(exc))


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure: {exc}")
    return _error(500, "Could not save landing page", str(exc))


@app.exception_handler(WordPressError)
async def wordpress_error_handler(request: Request, exc: WordPressError):
    return _error(502, "WordPress request failed", str(exc))


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return _error(400, "Invalid request", str(exc))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error(500, "Internal server error", str(exc))

# ============================================================================
# Startup/Shutdown Events
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Configure observability and log startup information."""
    setup_logfire(service_name="pagesmith-api")
    logger.info("="*60)
    logger.info("Pagesmith API Starting...")
    logger.info(f"API Version: {API_VERSION}")
    logger.info(f"Docs available at: /docs")
    logger.info(f"Auth mode: {'Production (API key required)' if os.getenv('PAGESMITH_API_KEY') else 'Development (no auth)'}")
    logger.info("="*60)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Pagesmith API Shutting down...")
