"""
Fallback store: the whole portfolio kept in a single JSON file.

Every write loads the file, changes one collection and atomically replaces
the file. Concurrent writers are not coordinated (last write wins).
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from portfolio.db.models import utc_now
from portfolio.schemas import (
    LINK_CATEGORIES,
    LearningItem,
    Link,
    LinkGroups,
    Note,
    PortfolioData,
    Profile,
)
from portfolio.services.store import BackendUnavailable, DuplicateIdError, apply_changes


logger = logging.getLogger(__name__)


class JsonFileStore:
    """Portfolio store backed by a JSON document on the local filesystem."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    # === File I/O ===

    def load(self) -> PortfolioData:
        """
        Read the data file.

        A missing file is an empty portfolio; an unreadable or malformed file
        raises BackendUnavailable.
        """
        if not self.path.exists():
            return PortfolioData()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return PortfolioData.model_validate(_inject_categories(raw))
        except (OSError, ValueError, ValidationError) as e:
            logger.error("Cannot read data file %s: %s", self.path, e)
            raise BackendUnavailable(f"Data file {self.path} is unreadable: {e}") from e

    def dump(self, data: PortfolioData) -> None:
        """Write the data file via a temporary file and an atomic rename."""
        payload = data.model_dump(mode="json", by_alias=True)
        for category in LINK_CATEGORIES:
            for entry in payload["links"][category]:
                entry.pop("category", None)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Cannot write data file %s: %s", self.path, e)
            raise BackendUnavailable(f"Data file {self.path} is not writable: {e}") from e

    # === Profile ===

    def get_profile(self) -> Optional[Profile]:
        return self.load().profile

    def save_profile(self, profile: Profile) -> Profile:
        data = self.load()
        data.profile = profile
        self.dump(data)
        return profile

    # === Links ===

    def list_links(self) -> list[Link]:
        return self.load().links.flatten()

    def get_link(self, link_id: str) -> Optional[Link]:
        return _find(self.list_links(), link_id)

    def add_link(self, link: Link) -> Link:
        data = self.load()
        if _find(data.links.flatten(), link.id):
            raise DuplicateIdError("links", link.id)
        getattr(data.links, link.category).append(link)
        self.dump(data)
        return link

    def update_link(self, link_id: str, changes: dict[str, Any]) -> Optional[Link]:
        data = self.load()
        link = _find(data.links.flatten(), link_id)
        if not link:
            return None
        old_category = link.category
        if apply_changes(link, changes):
            if link.category != old_category:
                getattr(data.links, old_category).remove(link)
                getattr(data.links, link.category).append(link)
            self.dump(data)
        return link

    def delete_link(self, link_id: str) -> bool:
        data = self.load()
        link = _find(data.links.flatten(), link_id)
        if not link:
            return False
        getattr(data.links, link.category).remove(link)
        self.dump(data)
        return True

    def replace_links(self, links: list[Link]) -> list[Link]:
        seen: set[str] = set()
        for link in links:
            if link.id in seen:
                raise DuplicateIdError("links", link.id)
            seen.add(link.id)

        data = self.load()
        data.links = LinkGroups(
            work=[link for link in links if link.category == "work"],
            presence=[link for link in links if link.category == "presence"],
        )
        self.dump(data)
        return data.links.flatten()

    # === Notes ===

    def list_notes(self) -> list[Note]:
        return self.load().notes

    def get_note(self, note_id: str) -> Optional[Note]:
        return _find(self.list_notes(), note_id)

    def add_note(self, note: Note) -> Note:
        data = self.load()
        if _find(data.notes, note.id):
            raise DuplicateIdError("notes", note.id)
        # Newest first
        data.notes.insert(0, _stamped(note))
        self.dump(data)
        return data.notes[0]

    def update_note(self, note_id: str, changes: dict[str, Any]) -> Optional[Note]:
        data = self.load()
        note = _find(data.notes, note_id)
        if not note:
            return None
        if apply_changes(note, changes):
            note.updated_at = utc_now()
            self.dump(data)
        return note

    def delete_note(self, note_id: str) -> bool:
        data = self.load()
        note = _find(data.notes, note_id)
        if not note:
            return False
        data.notes.remove(note)
        self.dump(data)
        return True

    # === Learning ===

    def list_learning(self) -> list[LearningItem]:
        return self.load().learning

    def get_learning(self, item_id: str) -> Optional[LearningItem]:
        return _find(self.list_learning(), item_id)

    def add_learning(self, item: LearningItem) -> LearningItem:
        data = self.load()
        if _find(data.learning, item.id):
            raise DuplicateIdError("learning", item.id)
        data.learning.insert(0, _stamped(item))
        self.dump(data)
        return data.learning[0]

    def update_learning(
        self, item_id: str, changes: dict[str, Any]
    ) -> Optional[LearningItem]:
        data = self.load()
        item = _find(data.learning, item_id)
        if not item:
            return None
        if apply_changes(item, changes):
            item.updated_at = utc_now()
            self.dump(data)
        return item

    def delete_learning(self, item_id: str) -> bool:
        data = self.load()
        item = _find(data.learning, item_id)
        if not item:
            return False
        data.learning.remove(item)
        self.dump(data)
        return True

    # === Whole Portfolio ===

    def counts(self) -> dict[str, int]:
        data = self.load()
        return {
            "profiles": 1 if data.profile else 0,
            "links": len(data.links.flatten()),
            "notes": len(data.notes),
            "learning": len(data.learning),
        }

    def load_all(self) -> PortfolioData:
        return self.load()

    def replace_all(self, data: PortfolioData) -> None:
        self.dump(data)


def _find(records: list[Any], record_id: str) -> Optional[Any]:
    for record in records:
        if record.id == record_id:
            return record
    return None


def _stamped(record: Any) -> Any:
    """Copy of a record with missing timestamps filled in."""
    now = utc_now()
    created = record.created_at or now
    return record.model_copy(
        update={"created_at": created, "updated_at": record.updated_at or created}
    )


def _inject_categories(raw: Any) -> Any:
    """Links are stored in their group without a category key."""
    if not isinstance(raw, dict) or not isinstance(raw.get("links"), dict):
        return raw
    groups = {}
    for category in LINK_CATEGORIES:
        entries = raw["links"].get(category) or []
        groups[category] = [
            {**entry, "category": category} if isinstance(entry, dict) else entry
            for entry in entries
        ]
    return {**raw, "links": groups}
