"""
Landing page commands for Pagesmith CLI
"""

import asyncio
import json
import mimetypes
from pathlib import Path
from typing import Optional

import click

from ..core.database import DatabaseConfigError
from ..services.asset_service import AssetIntakeService
from ..services.landing_page_service import LandingPageService, PersistenceError
from ..services.landing_page.generation_service import (
    LandingPageGenerationService,
    GenerationError,
    RateLimitedError,
)
from ..services.landing_page.renderer import render_landing_page, export_filename
from ..services.models import LandingPageDocument, PageStatus
from ..services.wordpress_service import WordPressService, WordPressError


def _fail(message: str):
    click.echo(f"❌ Error: {message}", err=True)
    raise SystemExit(1)


def _require_page(pages: LandingPageService, page_id: str) -> dict:
    page = pages.get_page(page_id)
    if page is None:
        _fail(f"Landing page not found: {page_id}")
    return page


@click.group('page')
def page_group():
    """Manage landing pages"""
    pass


@page_group.command('create')
@click.argument('title')
@click.option('--description', '-d', help='Project description used for generation')
@click.option('--user-id', help='Owning user id')
@click.option('--tone', help='Tone of voice, e.g. professional, playful')
@click.option('--language', help='Copy language, e.g. en, pt-BR')
@click.option('--audience', 'target_audience', help='Target audience')
def create_page(title: str, description: Optional[str], user_id: Optional[str],
                tone: Optional[str], language: Optional[str], target_audience: Optional[str]):
    """
    Create a draft landing page

    Examples:
        pagesmith page create "Acme Launch" -d "Sell rockets"
    """
    try:
        page = LandingPageService().create_page(
            title=title,
            user_id=user_id,
            description=description,
            tone=tone,
            language=language,
            target_audience=target_audience,
        )
    except (DatabaseConfigError, PersistenceError, ValueError) as e:
        _fail(str(e))

    click.echo(f"✅ Created landing page: {page['title']}")
    click.echo(f"   ID:   {page['id']}")
    click.echo(f"   Slug: {page['slug']}")
    click.echo(f"\nGenerate content with: pagesmith page generate {page['id']}")


@page_group.command('list')
@click.option('--user-id', help='Filter by user')
@click.option('--status', type=click.Choice([s.value for s in PageStatus]), help='Filter by status')
@click.option('--limit', default=50, show_default=True, help='Maximum pages to show')
def list_pages(user_id: Optional[str], status: Optional[str], limit: int):
    """
    List landing pages

    Examples:
        pagesmith page list
        pagesmith page list --status published
    """
    try:
        pages = LandingPageService().list_pages(user_id=user_id, status=status, limit=limit)
    except (DatabaseConfigError, PersistenceError) as e:
        _fail(str(e))

    if not pages:
        click.echo("No landing pages found.")
        click.echo("\nCreate your first page with: pagesmith page create <title>")
        return

    click.echo(f"\n{'='*60}")
    click.echo(f"📄 Landing pages ({len(pages)})")
    click.echo(f"{'='*60}\n")

    icons = {"draft": "📝", "published": "✅", "archived": "📦"}
    for page in pages:
        click.echo(f"{icons.get(page.get('status'), '•')} {page['title']}")
        click.echo(f"   ID: {page['id']}")
        click.echo(f"   Slug: {page['slug']}  Status: {page.get('status')}")
        click.echo()


@page_group.command('show')
@click.argument('page_id')
def show_page(page_id: str):
    """
    Show a landing page and its sections

    Examples:
        pagesmith page show 0b5c...
    """
    try:
        page = _require_page(LandingPageService(), page_id)
    except (DatabaseConfigError, PersistenceError) as e:
        _fail(str(e))

    document = LandingPageDocument.from_dict(page.get("content_json"))
    click.echo(f"\n📄 {page['title']} ({page.get('status')})")
    click.echo(f"   Slug: {page['slug']}")
    if page.get("published_at"):
        click.echo(f"   Published: {page['published_at']}")
    click.echo(f"\n   Sections ({len(document.sections)}):")
    for index, section in enumerate(document.sections, start=1):
        marker = "" if section.is_known_type else "  (not rendered)"
        click.echo(f"   {index}. {section.type} [{section.id}]{marker}")


@page_group.command('generate')
@click.argument('page_id')
def generate_page(page_id: str):
    """
    Generate (or regenerate) content for a landing page

    Uses the title, description, document text, uploaded images and
    tone/language/audience stored on the page.

    Examples:
        pagesmith page generate 0b5c...
    """
    click.echo("⏳ Generating landing page...")
    try:
        result = LandingPageGenerationService().regenerate(page_id)
    except RateLimitedError as e:
        _fail(f"{e} Try again in a few moments.")
    except (DatabaseConfigError, GenerationError, PersistenceError, ValueError) as e:
        _fail(str(e))

    click.echo(f"✅ Generated {len(result.document.sections)} sections (source: {result.source})")
    if result.used_fallback:
        click.echo("⚠️  The model output could not be used; a starter page was built from the title.")
    for url in result.skipped_assets:
        click.echo(f"⚠️  Skipped asset: {url}")


@page_group.command('upload')
@click.argument('page_id')
@click.option('--user-id', required=True, help='Owning user id (storage folder)')
@click.option('--document', 'document_path', type=click.Path(exists=True, dir_okay=False), help='Content document (.docx)')
@click.option('--wireframe', 'wireframe_path', type=click.Path(exists=True, dir_okay=False), help='Wireframe image')
@click.option('--inspiration', 'inspiration_path', type=click.Path(exists=True, dir_okay=False), help='Design inspiration image')
def upload_assets(page_id: str, user_id: str, document_path: Optional[str],
                  wireframe_path: Optional[str], inspiration_path: Optional[str]):
    """
    Upload source assets for a landing page

    Examples:
        pagesmith page upload 0b5c... --user-id u1 --document brief.docx --wireframe sketch.png
    """
    files = {}
    for kind, path in (("document", document_path), ("wireframe", wireframe_path), ("inspiration", inspiration_path)):
        if path:
            p = Path(path)
            files[kind] = (p.name, p.read_bytes(), mimetypes.guess_type(p.name)[0])

    if not files:
        _fail("Provide at least one of --document, --wireframe, --inspiration")

    try:
        result = asyncio.run(AssetIntakeService().ingest(page_id, user_id, files))
    except (DatabaseConfigError, PersistenceError, ValueError) as e:
        _fail(str(e))

    for outcome in result.outcomes:
        if outcome.error:
            click.echo(f"⚠️  {outcome.kind}: {outcome.error}")
        else:
            click.echo(f"✅ {outcome.kind}: {outcome.public_url}")
    if result.doc_text:
        click.echo(f"📝 Extracted {len(result.doc_text)} characters of document text")


@page_group.command('export')
@click.argument('page_id')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output file (defaults to <title>.html)')
def export_page(page_id: str, output: Optional[str]):
    """
    Export a landing page as a static HTML file

    Examples:
        pagesmith page export 0b5c... -o launch.html
    """
    try:
        page = _require_page(LandingPageService(), page_id)
    except (DatabaseConfigError, PersistenceError) as e:
        _fail(str(e))

    html = render_landing_page(LandingPageDocument.from_dict(page.get("content_json")), page.get("title", ""))
    path = Path(output or export_filename(page.get("title", "")))
    path.write_text(html, encoding="utf-8")
    click.echo(f"✅ Exported to {path}")


@page_group.command('render')
@click.argument('document_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--title', '-t', default='', help='Title used when sections have no copy')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Output file (defaults to stdout)')
def render_file(document_file: str, title: str, output: Optional[str]):
    """
    Render a local document JSON file to HTML (no database needed)

    Examples:
        pagesmith page render page.json -t "Acme Launch" -o page.html
    """
    try:
        data = json.loads(Path(document_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in {document_file}: {e}")

    html = render_landing_page(data, title)
    if output:
        Path(output).write_text(html, encoding="utf-8")
        click.echo(f"✅ Rendered to {output}")
    else:
        click.echo(html)


@page_group.command('publish')
@click.argument('page_id')
@click.option('--site-url', envvar='WORDPRESS_SITE_URL', required=True, help='WordPress site URL')
@click.option('--username', envvar='WORDPRESS_USERNAME', required=True, help='WordPress username')
@click.option('--app-password', envvar='WORDPRESS_APP_PASSWORD', required=True, help='WordPress application password')
@click.option('--slug', help='WordPress page slug (defaults to the title)')
@click.option('--draft', is_flag=True, help='Create the WordPress page as a draft')
def publish_page(page_id: str, site_url: str, username: str, app_password: str,
                 slug: Optional[str], draft: bool):
    """
    Publish a landing page to WordPress

    Examples:
        pagesmith page publish 0b5c... --site-url https://example.com --username admin
    """
    try:
        pages = LandingPageService()
        page = _require_page(pages, page_id)
        wp = WordPressService(site_url, username, app_password)
        result = wp.publish_landing_page(page, pages, slug=slug, status="draft" if draft else "publish")
    except (DatabaseConfigError, WordPressError, PersistenceError, ValueError) as e:
        _fail(str(e))

    click.echo(f"✅ Published to WordPress (page {result['page_id']})")
    click.echo(f"   {result['url']}")


@page_group.command('archive')
@click.argument('page_id')
def archive_page(page_id: str):
    """Archive a landing page"""
    try:
        LandingPageService().archive_page(page_id)
    except (DatabaseConfigError, PersistenceError) as e:
        _fail(str(e))
    click.echo(f"📦 Archived {page_id}")
