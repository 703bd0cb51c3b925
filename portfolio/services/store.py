"""
Storage interface shared by the database and JSON file backends.

Both backends store fully formed records (ids and timestamps assigned by the
portfolio service) and return `None`/`False` for missing records.
"""
from typing import Any, Optional, Protocol

from portfolio.schemas import (
    LearningItem,
    Link,
    Note,
    PortfolioData,
    Profile,
)


class StoreError(Exception):
    """Base class for data layer errors."""
    pass


class DuplicateIdError(StoreError):
    """Raised when a record id already exists in its collection."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} id {record_id!r} already exists")


class BackendUnavailable(StoreError):
    """Raised when no backend can serve the operation."""
    pass


class PortfolioStore(Protocol):
    """Operations every backend provides."""

    def get_profile(self) -> Optional[Profile]:
        ...

    def save_profile(self, profile: Profile) -> Profile:
        ...

    def list_links(self) -> list[Link]:
        ...

    def get_link(self, link_id: str) -> Optional[Link]:
        ...

    def add_link(self, link: Link) -> Link:
        ...

    def update_link(self, link_id: str, changes: dict[str, Any]) -> Optional[Link]:
        ...

    def delete_link(self, link_id: str) -> bool:
        ...

    def replace_links(self, links: list[Link]) -> list[Link]:
        ...

    def list_notes(self) -> list[Note]:
        ...

    def get_note(self, note_id: str) -> Optional[Note]:
        ...

    def add_note(self, note: Note) -> Note:
        ...

    def update_note(self, note_id: str, changes: dict[str, Any]) -> Optional[Note]:
        ...

    def delete_note(self, note_id: str) -> bool:
        ...

    def list_learning(self) -> list[LearningItem]:
        ...

    def get_learning(self, item_id: str) -> Optional[LearningItem]:
        ...

    def add_learning(self, item: LearningItem) -> LearningItem:
        ...

    def update_learning(
        self, item_id: str, changes: dict[str, Any]
    ) -> Optional[LearningItem]:
        ...

    def delete_learning(self, item_id: str) -> bool:
        ...

    def counts(self) -> dict[str, int]:
        ...

    def load_all(self) -> PortfolioData:
        ...

    def replace_all(self, data: PortfolioData) -> None:
        ...


def apply_changes(record: Any, changes: dict[str, Any]) -> bool:
    """
    Set changed attributes on a record.

    Returns True if any value actually differed, so callers only bump
    `updated_at` for real modifications.
    """
    changed = False
    for key, value in changes.items():
        if getattr(record, key) != value:
            setattr(record, key, value)
            changed = True
    return changed
