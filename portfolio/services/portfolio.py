"""
Portfolio content operations.

Turns request payloads into stored records (ids, timestamps, default
publish dates) and assembles the views the API and public pages read.
"""
import secrets
import time
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel

from portfolio.db.models import utc_now
from portfolio.schemas import (
    LearningIn,
    LearningItem,
    LearningUpdate,
    Link,
    LinkGroups,
    LinkGroupsIn,
    LinkIn,
    LinkUpdate,
    Note,
    NoteIn,
    NoteUpdate,
    PortfolioData,
    PortfolioUpdate,
    Profile,
    ResourceLink,
)
from portfolio.services.store import PortfolioStore


# Shown on the public pages until a profile has been saved
DEFAULT_PROFILE = Profile(
    name="Portfolio Owner",
    title="Full Stack Developer",
    location="Remote",
    email="contact@example.com",
    skills="Python, JavaScript, SQL",
    interests="Web Development, Open Source",
)


def generate_id(kind: str) -> str:
    """New record id: `<kind>-<epoch ms>-<random suffix>`."""
    return f"{kind}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def changes_from(payload: BaseModel) -> dict[str, Any]:
    """Fields explicitly supplied in an update payload (None means omitted)."""
    return {
        name: getattr(payload, name)
        for name in payload.model_fields_set
        if getattr(payload, name) is not None
    }


def group_links(links: list[Link]) -> LinkGroups:
    return LinkGroups(
        work=[link for link in links if link.category == "work"],
        presence=[link for link in links if link.category == "presence"],
    )


# === Whole Portfolio ===

def get_portfolio(store: PortfolioStore) -> PortfolioData:
    data = store.load_all()
    if data.profile is None:
        data.profile = DEFAULT_PROFILE.model_copy()
    return data


def get_profile(store: PortfolioStore) -> Profile:
    return store.get_profile() or DEFAULT_PROFILE.model_copy()


def update_portfolio(store: PortfolioStore, body: PortfolioUpdate) -> list[str]:
    """
    Apply the legacy `{profile?, links?}` update.

    The profile is merged over the stored one; links replace the whole set.
    Returns the names of the parts that were updated.
    """
    updated = []
    if body.profile is not None:
        current = get_profile(store)
        store.save_profile(current.model_copy(update=changes_from(body.profile)))
        updated.append("profile")
    if body.links is not None:
        replace_links(store, body.links)
        updated.append("links")
    return updated


# === Links ===

def build_link(payload: LinkIn) -> Link:
    return Link(
        id=payload.id or generate_id("link"),
        name=payload.name,
        url=payload.url,
        icon=payload.icon,
        category=payload.category,
    )


def create_link(store: PortfolioStore, payload: LinkIn) -> Link:
    return store.add_link(build_link(payload))


def update_link(
    store: PortfolioStore, link_id: str, payload: LinkUpdate
) -> Optional[Link]:
    return store.update_link(link_id, changes_from(payload))


def replace_links(store: PortfolioStore, groups: LinkGroupsIn) -> LinkGroups:
    links = [build_link(entry) for entry in groups.to_links()]
    return group_links(store.replace_links(links))


# === Notes ===

def build_note(payload: NoteIn) -> Note:
    now = utc_now()
    return Note(
        id=payload.id or generate_id("note"),
        title=payload.title,
        content=payload.content,
        published_at=payload.published_at or date.today().isoformat(),
        created_at=now,
        updated_at=now,
    )


def create_note(store: PortfolioStore, payload: NoteIn) -> Note:
    return store.add_note(build_note(payload))


def update_note(
    store: PortfolioStore, note_id: str, payload: NoteUpdate
) -> Optional[Note]:
    return store.update_note(note_id, changes_from(payload))


# === Learning ===

def build_learning(payload: LearningIn) -> LearningItem:
    now = utc_now()
    return LearningItem(
        id=payload.id or generate_id("learning"),
        title=payload.title,
        description=payload.description,
        type=payload.type,
        date=payload.date,
        links=payload.links,
        created_at=now,
        updated_at=now,
    )


def create_learning(store: PortfolioStore, payload: LearningIn) -> LearningItem:
    return store.add_learning(build_learning(payload))


def update_learning(
    store: PortfolioStore, item_id: str, payload: LearningUpdate
) -> Optional[LearningItem]:
    return store.update_learning(item_id, changes_from(payload))


def learning_links_status(store: PortfolioStore) -> dict[str, Any]:
    """Which learning items carry resource links."""
    items = store.list_learning()
    status = [
        {
            "id": item.id,
            "title": item.title,
            "hasLinks": bool(item.links),
            "linksCount": len(item.links),
            "links": [link.model_dump(by_alias=True) for link in item.links],
        }
        for item in items
    ]
    with_links = sum(1 for entry in status if entry["hasLinks"])
    return {
        "totalLearningItems": len(items),
        "itemsWithLinks": with_links,
        "itemsWithoutLinks": len(items) - with_links,
        "linksStatus": status,
    }


def set_learning_links(
    store: PortfolioStore, item_id: str, links: list[ResourceLink]
) -> Optional[LearningItem]:
    """Replace the resource links of one learning item."""
    return store.update_learning(item_id, {"links": links})
