"""
Landing Page Generation Service - Turn a title and source assets into a document.

Pipeline:
1. Build a prompt from the request (title, description, document text,
   tone/language/audience) and attach wireframe / inspiration images
2. Call Claude with the generate_landing_page tool forced
3. Parse: tool_use payload -> JSON found in text -> personalized fallback
4. Render HTML and, when a page id is given, write document + HTML + status
   in one update

Malformed model output never surfaces as an error; it yields the fallback
page. Missing credentials, rate limits, exhausted credit and persistence
failures do surface, each as its own exception type.
"""

import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional, Tuple

import anthropic
import logfire

from ...core.config import Config
from ..landing_page_service import LandingPageService
from ..models import GenerationRequest, GenerationResult, LandingPage, LandingPageDocument, PageStatus
from ..storage_service import StorageError, StorageService
from .defaults import create_personalized_fallback
from .prompts import GENERATE_LANDING_PAGE_TOOL, SYSTEM_PROMPT, TOOL_NAME, build_user_prompt
from .renderer import render_landing_page
from .utils import coerce_document, parse_llm_json

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class GenerationError(Exception):
    """Generation failed and produced nothing."""
    pass


class MissingCredentialsError(GenerationError):
    """The generation service is not configured (no or rejected API key)."""
    pass


class RateLimitedError(GenerationError):
    """The generation service is rate limiting us. Safe to retry later."""
    pass


class QuotaExhaustedError(GenerationError):
    """Credits or billing quota for the generation service are used up."""
    pass


def _is_quota_error(error: anthropic.APIStatusError) -> bool:
    if error.status_code == 402:
        return True
    message = str(error).lower()
    return "credit balance" in message or "billing" in message or "quota" in message


class LandingPageGenerationService:
    """
    Generates landing page documents with Claude.

    Usage:
        service = LandingPageGenerationService()
        result = service.generate(
            GenerationRequest(title="Acme Launch", description="Sell rockets"),
            page_id=page["id"],
        )
        result.document, result.html
    """

    def __init__(
        self,
        anthropic_api_key: Optional[str] = None,
        model: Optional[str] = None,
        supabase=None,
        pages: Optional[LandingPageService] = None,
        storage: Optional[StorageService] = None,
        client: Optional[anthropic.Anthropic] = None,
    ):
        api_key = anthropic_api_key or Config.ANTHROPIC_API_KEY

        if client is not None:
            self.client = client
        elif not api_key:
            logger.warning("ANTHROPIC_API_KEY not set - landing page generation will fail")
            self.client = None
        else:
            self.client = anthropic.Anthropic(api_key=api_key)

        self.model = model or Config.get_model("generation")
        self.max_tokens = Config.GENERATION_MAX_TOKENS
        self._supabase = supabase
        self._pages = pages
        self._storage = storage

    @property
    def pages(self) -> LandingPageService:
        if self._pages is None:
            self._pages = LandingPageService(self._supabase)
        return self._pages

    @property
    def storage(self) -> StorageService:
        if self._storage is None:
            self._storage = StorageService(self._supabase)
        return self._storage

    def _ensure_client(self) -> None:
        """Raise if the Anthropic client is not configured."""
        if not self.client:
            raise MissingCredentialsError(
                "Anthropic client not configured. Set ANTHROPIC_API_KEY environment variable."
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, request: GenerationRequest, page_id: Optional[str] = None) -> GenerationResult:
        """
        Generate a landing page document.

        Args:
            request: Title plus optional description, assets and hints
            page_id: If given, the result is written to this landing page row

        Returns:
            GenerationResult with the document, its HTML and the parse source

        Raises:
            MissingCredentialsError: No API key configured or key rejected
            RateLimitedError: Upstream rate limit; caller may retry later
            QuotaExhaustedError: Upstream credits exhausted
            GenerationError: Any other upstream failure
            PersistenceError: Writing the result to page_id failed
        """
        self._ensure_client()

        with logfire.span("generate_landing_page", title=request.title, page_id=page_id):
            logger.info(f"Generating landing page for: {request.title}")

            content, skipped = self._build_user_content(request)
            response = self._call_model(content)
            document, source = self._parse_response(response, request)
            html = render_landing_page(document, request.title)

            if page_id:
                self.pages.update_page(page_id, {
                    "content_json": document.to_dict(),
                    "generated_html": html,
                    "status": PageStatus.DRAFT.value,
                })
                logger.info(f"Landing page {page_id} updated from {source}")

        return GenerationResult(document=document, html=html, source=source, skipped_assets=skipped)

    async def generate_async(self, request: GenerationRequest, page_id: Optional[str] = None) -> GenerationResult:
        """Run generate() in a worker thread so an event loop stays responsive."""
        return await asyncio.to_thread(self.generate, request, page_id)

    def regenerate(self, page_id: str) -> GenerationResult:
        """Re-run generation for a stored page using the inputs saved on its row."""
        row = self.pages.get_page(page_id)
        if row is None:
            raise ValueError(f"Landing page not found: {page_id}")

        page = LandingPage.model_validate(row)
        request = page.generation_request()
        if not request.description:
            request.description = (page.content_json or {}).get("description")
        return self.generate(request, page_id=page_id)

    # ------------------------------------------------------------------
    # Prompt assembly
    # ------------------------------------------------------------------

    def _image_block(self, url: str) -> Dict[str, Any]:
        data, mime = self.storage.download_public_url(url)
        if mime not in SUPPORTED_IMAGE_TYPES:
            raise StorageError(f"Unsupported image type {mime}")
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": mime,
                "data": base64.b64encode(data).decode(),
            },
        }

    def _build_user_content(self, request: GenerationRequest) -> Tuple[List[Dict[str, Any]], List[str]]:
        """Text prompt plus any images that could be fetched. Returns (content, skipped urls)."""
        images: List[Dict[str, Any]] = []
        skipped: List[str] = []
        attached = {"wireframe": False, "inspiration": False}

        for kind, url in (("wireframe", request.wireframe_url), ("inspiration", request.inspiration_url)):
            if not url:
                continue
            try:
                images.append(self._image_block(url))
                attached[kind] = True
            except (StorageError, ValueError) as e:
                logger.warning(f"Failed to load {kind} image, continuing without it: {e}")
                skipped.append(url)

        text = build_user_prompt(
            request,
            has_wireframe=attached["wireframe"],
            has_inspiration=attached["inspiration"],
        )
        return [{"type": "text", "text": text}] + images, skipped

    # ------------------------------------------------------------------
    # Upstream call
    # ------------------------------------------------------------------

    def _call_model(self, content: List[Dict[str, Any]]) -> Any:
        """Call Claude, mapping upstream failures onto the generation errors."""
        try:
            return self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                tools=[GENERATE_LANDING_PAGE_TOOL],
                tool_choice={"type": "tool", "name": TOOL_NAME},
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.RateLimitError as e:
            logger.warning(f"Generation rate limited: {e}")
            raise RateLimitedError("Rate limit exceeded. Please try again in a few moments.") from e
        except anthropic.AuthenticationError as e:
            logger.error(f"Generation credentials rejected: {e}")
            raise MissingCredentialsError("Anthropic API key was rejected.") from e
        except anthropic.APIStatusError as e:
            if e.status_code == 429:
                raise RateLimitedError("Rate limit exceeded. Please try again in a few moments.") from e
            if _is_quota_error(e):
                logger.error(f"Generation quota exhausted: {e}")
                raise QuotaExhaustedError("Generation credits exhausted. Add credits to continue.") from e
            logger.error(f"Generation API error: {e}")
            raise GenerationError(f"Generation service error ({e.status_code})") from e
        except anthropic.APIError as e:
            logger.error(f"Generation API error: {e}")
            raise GenerationError(f"Generation service error: {e}") from e

    # ------------------------------------------------------------------
    # Response parsing
    # ------------------------------------------------------------------

    def _parse_response(self, response: Any, request: GenerationRequest) -> Tuple[LandingPageDocument, str]:
        blocks = getattr(response, "content", None) or []

        for block in blocks:
            if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == TOOL_NAME:
                payload = block.input
                if isinstance(payload, str):
                    try:
                        payload = parse_llm_json(payload)
                    except ValueError:
                        payload = None
                document = coerce_document(payload)
                if document is not None:
                    logger.info(f"Parsed tool call with {len(document.sections)} sections")
                    return document, "tool_call"

        text = "".join(getattr(b, "text", "") or "" for b in blocks if getattr(b, "type", None) == "text")
        if text:
            try:
                document = coerce_document(parse_llm_json(text))
            except ValueError:
                document = None
            if document is not None:
                logger.info(f"Parsed JSON from text with {len(document.sections)} sections")
                return document, "text"

        logger.warning(f"No usable generation output, using fallback for: {request.title}")
        return create_personalized_fallback(request.title, request.description), "fallback"
