"""
JSON API routes.

Reads are public; every write (and the maintenance endpoints) needs the
admin cookie. Handlers are plain `def` so database retries run in the
threadpool instead of blocking the event loop.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.engine import make_url

from portfolio import auth
from portfolio.auth import AdminDep
from portfolio.deps import SettingsDep, StoreDep
from portfolio.schemas import (
    CollectionCounts,
    DatabaseMode,
    HealthStatus,
    LearningIn,
    LearningItem,
    LearningLinksRequest,
    LearningUpdate,
    Link,
    LinkGroups,
    LinkGroupsIn,
    LinkIn,
    LinkUpdate,
    LoginRequest,
    MessageResponse,
    MigrationRequest,
    Note,
    NoteIn,
    NoteUpdate,
    PortfolioData,
    PortfolioUpdate,
    Profile,
    SessionStatus,
)
from portfolio.services import migrate as migration
from portfolio.services import portfolio as content
from portfolio.tasks.jobs import job_migrate_json, job_status_code


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _not_found(kind: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{kind} not found")


# === Auth ===

@router.post("/auth", response_model=MessageResponse)
def login(body: LoginRequest, response: Response, settings: SettingsDep):
    """Check admin credentials and set the auth cookie."""
    if not auth.check_credentials(settings, body.username, body.password):
        logger.warning("Failed admin login for %r", body.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    auth.set_auth_cookie(response, settings)
    return MessageResponse(message="Login successful")


@router.delete("/auth", response_model=MessageResponse)
def logout(response: Response, settings: SettingsDep):
    auth.clear_auth_cookie(response, settings)
    return MessageResponse(message="Logged out")


@router.get("/auth", response_model=SessionStatus)
def session_status(request: Request, settings: SettingsDep):
    return SessionStatus(authenticated=auth.is_admin(request, settings))


# === Whole Portfolio ===

@router.get("/data", response_model=PortfolioData)
def get_data(store: StoreDep):
    return content.get_portfolio(store)


@router.post("/data", response_model=MessageResponse)
def update_data(body: PortfolioUpdate, store: StoreDep, _: AdminDep):
    """Legacy update: `{profile?, links?}`."""
    updated = content.update_portfolio(store, body)
    if not updated:
        raise HTTPException(status_code=422, detail="Nothing to update: send profile and/or links")
    return MessageResponse(message=f"Updated {' and '.join(updated)}")


# === Profile ===

@router.get("/profile", response_model=Profile)
def get_profile(store: StoreDep):
    return content.get_profile(store)


@router.put("/profile", response_model=Profile)
def put_profile(body: Profile, store: StoreDep, _: AdminDep):
    return store.save_profile(body)


# === Links ===

@router.get("/links", response_model=LinkGroups)
def list_links(store: StoreDep):
    return content.group_links(store.list_links())


@router.post("/links", response_model=Link, status_code=201)
def create_link(body: LinkIn, store: StoreDep, _: AdminDep):
    return content.create_link(store, body)


@router.put("/links", response_model=LinkGroups)
def replace_links(body: LinkGroupsIn, store: StoreDep, _: AdminDep):
    return content.replace_links(store, body)


@router.get("/links/{link_id}", response_model=Link)
def get_link(link_id: str, store: StoreDep):
    link = store.get_link(link_id)
    if not link:
        raise _not_found("Link")
    return link


@router.put("/links/{link_id}", response_model=Link)
def update_link(link_id: str, body: LinkUpdate, store: StoreDep, _: AdminDep):
    link = content.update_link(store, link_id, body)
    if not link:
        raise _not_found("Link")
    return link


@router.delete("/links/{link_id}", response_model=MessageResponse)
def delete_link(link_id: str, store: StoreDep, _: AdminDep):
    if not store.delete_link(link_id):
        raise _not_found("Link")
    return MessageResponse(message="Link deleted")


# === Notes ===

@router.get("/notes", response_model=list[Note])
def list_notes(store: StoreDep):
    return store.list_notes()


@router.post("/notes", response_model=Note, status_code=201)
def create_note(body: NoteIn, store: StoreDep, _: AdminDep):
    return content.create_note(store, body)


@router.get("/notes/{note_id}", response_model=Note)
def get_note(note_id: str, store: StoreDep):
    note = store.get_note(note_id)
    if not note:
        raise _not_found("Note")
    return note


@router.put("/notes/{note_id}", response_model=Note)
def update_note(note_id: str, body: NoteUpdate, store: StoreDep, _: AdminDep):
    note = content.update_note(store, note_id, body)
    if not note:
        raise _not_found("Note")
    return note


@router.delete("/notes/{note_id}", response_model=MessageResponse)
def delete_note(note_id: str, store: StoreDep, _: AdminDep):
    if not store.delete_note(note_id):
        raise _not_found("Note")
    return MessageResponse(message="Note deleted")


# === Learning ===

@router.get("/learning", response_model=list[LearningItem])
def list_learning(store: StoreDep):
    return store.list_learning()


@router.post("/learning", response_model=LearningItem, status_code=201)
def create_learning(body: LearningIn, store: StoreDep, _: AdminDep):
    return content.create_learning(store, body)


@router.get("/learning/{item_id}", response_model=LearningItem)
def get_learning(item_id: str, store: StoreDep):
    item = store.get_learning(item_id)
    if not item:
        raise _not_found("Learning item")
    return item


@router.put("/learning/{item_id}", response_model=LearningItem)
def update_learning(item_id: str, body: LearningUpdate, store: StoreDep, _: AdminDep):
    item = content.update_learning(store, item_id, body)
    if not item:
        raise _not_found("Learning item")
    return item


@router.delete("/learning/{item_id}", response_model=MessageResponse)
def delete_learning(item_id: str, store: StoreDep, _: AdminDep):
    if not store.delete_learning(item_id):
        raise _not_found("Learning item")
    return MessageResponse(message="Learning item deleted")


# === Health & Stats ===

@router.get("/health", response_model=HealthStatus, response_model_exclude_none=True)
def health(
    store: StoreDep,
    detailed: bool = Query(False, description="Include per-collection counts"),
):
    """
    Data layer health.

    Returns 503 when neither the database nor the data file can serve reads.
    """
    status = store.check_health(detailed=detailed)
    if status.status == "unhealthy":
        return JSONResponse(
            status_code=503,
            content=status.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    return status


@router.get("/stats", response_model=CollectionCounts)
def stats(store: StoreDep):
    return CollectionCounts(**store.counts())


# === Maintenance (admin) ===

@router.get("/database-mode", response_model=DatabaseMode)
def database_mode(store: StoreDep, _: AdminDep):
    connected = store.is_database_available(refresh=True)
    return DatabaseMode(
        current_mode="database" if connected else "json",
        database_configured=store.database_configured,
        connected=connected,
        error=store.health.error if store.database_configured else None,
    )


@router.get("/migrate")
def migrate_status(store: StoreDep, _: AdminDep) -> dict[str, Any]:
    return migration.migration_status(store)


@router.post("/migrate")
def run_migration(store: StoreDep, _: AdminDep, body: Optional[MigrationRequest] = None):
    """Copy the JSON data file into the database (replaces database contents)."""
    verify = body.verify if body else True
    result = job_migrate_json(store, verify=verify)
    status_code = job_status_code(result)
    if status_code:
        return JSONResponse(status_code=status_code, content=result)
    return result


@router.get("/migrate/learning-links")
def learning_links_status(store: StoreDep, _: AdminDep) -> dict[str, Any]:
    return content.learning_links_status(store)


@router.post("/migrate/learning-links")
def update_learning_links(body: LearningLinksRequest, store: StoreDep, _: AdminDep):
    item = content.set_learning_links(store, body.learning_id, body.links)
    if not item:
        raise _not_found("Learning item")
    return {
        "success": True,
        "message": "Learning links updated successfully",
        "learningId": item.id,
        "linksCount": len(item.links),
    }


@router.get("/debug")
def debug(settings: SettingsDep, _: AdminDep) -> dict[str, Any]:
    """Configuration summary with secrets masked."""
    database_url = "Not configured"
    if settings.DATABASE_URL:
        database_url = make_url(settings.DATABASE_URL).render_as_string(hide_password=True)
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": {
            "configured": settings.database_configured,
            "url": database_url,
        },
        "dataFile": settings.DATA_FILE,
        "hasAdminCreds": settings.admin_configured,
        "hasSecretKey": bool(settings.SECRET_KEY),
        "cookieSecure": settings.COOKIE_SECURE,
        "logLevel": settings.LOG_LEVEL,
    }
