"""
Public, read-only HTML pages rendered with Jinja2.
"""
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from portfolio import auth
from portfolio.config import get_settings
from portfolio.deps import StoreDep
from portfolio.services import portfolio as content
from portfolio.services.render import excerpt, render_markdown


TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["markdown"] = render_markdown
templates.env.filters["excerpt"] = excerpt

router = APIRouter(default_response_class=HTMLResponse)


def _render(request: Request, name: str, status_code: int = 200, **context) -> HTMLResponse:
    settings = get_settings()
    context.setdefault("site_name", settings.SITE_NAME)
    context["is_admin"] = auth.is_admin(request, settings)
    return templates.TemplateResponse(request, name, context, status_code=status_code)


@router.get("/")
def home(request: Request, store: StoreDep):
    """Profile with work and presence links."""
    return _render(
        request,
        "home.html",
        profile=content.get_profile(store),
        links=content.group_links(store.list_links()),
    )


@router.get("/notes")
def notes(request: Request, store: StoreDep):
    """All notes, newest first; the newest one is shown in full."""
    items = store.list_notes()
    return _render(
        request,
        "notes.html",
        notes=items,
        featured=items[0] if items else None,
    )


@router.get("/notes/{note_id}")
def note(note_id: str, request: Request, store: StoreDep):
    item = store.get_note(note_id)
    if not item:
        return _render(request, "not_found.html", status_code=404, what="Note")
    return _render(request, "note.html", note=item)


@router.get("/learning")
def learning(request: Request, store: StoreDep):
    return _render(request, "learning.html", items=store.list_learning())
