"""
Primary store backed by a SQL database through SQLModel.
"""
import json
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import delete, desc
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select, func

from portfolio.db.engine import create_db_engine, init_db, ping, count_rows
from portfolio.db.models import ProfileDB, LinkDB, NoteDB, LearningDB, utc_now
from portfolio.schemas import (
    LearningItem,
    Link,
    LinkGroups,
    Note,
    PortfolioData,
    Profile,
    ResourceLink,
)
from portfolio.services.store import DuplicateIdError, apply_changes


# === Row Conversion ===

def _profile_out(row: ProfileDB) -> Profile:
    return Profile.model_validate(row)


def _link_out(row: LinkDB) -> Link:
    return Link.model_validate(row)


def _note_out(row: NoteDB) -> Note:
    return Note.model_validate(row)


def _learning_out(row: LearningDB) -> LearningItem:
    return LearningItem(
        id=row.id,
        title=row.title,
        description=row.description,
        type=row.type,
        date=row.date,
        links=json.loads(row.links) if row.links else [],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _dump_resource_links(links: list[ResourceLink]) -> str:
    return json.dumps([link.model_dump() for link in links])


class DatabaseStore:
    """
    SQLModel implementation of the portfolio store.

    Tables are created lazily on the first successful ping so that
    constructing the store never touches the network.
    """

    def __init__(self, database_url: str, *, connect_timeout: float = 5.0):
        self.database_url = database_url
        self.engine: Engine = create_db_engine(database_url, connect_timeout)
        self._schema_ready = False

    def ping(self) -> None:
        """Raise if the database is unreachable."""
        if not self._schema_ready:
            init_db(self.engine)
            self._schema_ready = True
        ping(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if not self._schema_ready:
            self.ping()
        with Session(self.engine) as session:
            yield session

    def _insert(self, session: Session, row: Any, collection: str) -> None:
        if session.get(type(row), row.id) is not None:
            raise DuplicateIdError(collection, row.id)
        session.add(row)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise DuplicateIdError(collection, row.id)
        session.refresh(row)

    def _update(self, session: Session, row: Any, changes: dict[str, Any]) -> None:
        if apply_changes(row, changes):
            row.updated_at = utc_now()
            session.add(row)
            session.commit()
            session.refresh(row)

    def _delete(self, model: Any, record_id: str) -> bool:
        with self._session() as session:
            row = session.get(model, record_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    # === Profile ===

    def _latest_profile(self, session: Session) -> Optional[ProfileDB]:
        statement = select(ProfileDB).order_by(desc(ProfileDB.created_at)).limit(1)
        return session.exec(statement).first()

    def get_profile(self) -> Optional[Profile]:
        with self._session() as session:
            row = self._latest_profile(session)
            return _profile_out(row) if row else None

    def save_profile(self, profile: Profile) -> Profile:
        with self._session() as session:
            row = self._latest_profile(session)
            if row is None:
                row = ProfileDB(**profile.model_dump())
                session.add(row)
                session.commit()
                session.refresh(row)
            else:
                self._update(session, row, profile.model_dump())
            return _profile_out(row)

    # === Links ===

    def list_links(self) -> list[Link]:
        with self._session() as session:
            statement = select(LinkDB).order_by(LinkDB.position, LinkDB.created_at)
            return [_link_out(row) for row in session.exec(statement).all()]

    def get_link(self, link_id: str) -> Optional[Link]:
        with self._session() as session:
            row = session.get(LinkDB, link_id)
            return _link_out(row) if row else None

    def add_link(self, link: Link) -> Link:
        with self._session() as session:
            last = session.exec(select(func.max(LinkDB.position))).one()
            row = LinkDB(**link.model_dump(), position=(last or 0) + 1)
            self._insert(session, row, "links")
            return _link_out(row)

    def update_link(self, link_id: str, changes: dict[str, Any]) -> Optional[Link]:
        with self._session() as session:
            row = session.get(LinkDB, link_id)
            if not row:
                return None
            if changes.get("category", row.category) != row.category:
                # A link moved to another group goes to the end of it
                last = session.exec(select(func.max(LinkDB.position))).one()
                changes = {**changes, "position": (last or 0) + 1}
            self._update(session, row, changes)
            return _link_out(row)

    def delete_link(self, link_id: str) -> bool:
        return self._delete(LinkDB, link_id)

    def replace_links(self, links: list[Link]) -> list[Link]:
        with self._session() as session:
            session.execute(delete(LinkDB))
            for position, link in enumerate(links, start=1):
                session.add(LinkDB(**link.model_dump(), position=position))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise DuplicateIdError("links", _first_duplicate(links))
        return self.list_links()

    # === Notes ===

    def list_notes(self) -> list[Note]:
        with self._session() as session:
            statement = select(NoteDB).order_by(desc(NoteDB.created_at))
            return [_note_out(row) for row in session.exec(statement).all()]

    def get_note(self, note_id: str) -> Optional[Note]:
        with self._session() as session:
            row = session.get(NoteDB, note_id)
            return _note_out(row) if row else None

    def add_note(self, note: Note) -> Note:
        with self._session() as session:
            row = NoteDB(**_with_timestamps(note.model_dump()))
            self._insert(session, row, "notes")
            return _note_out(row)

    def update_note(self, note_id: str, changes: dict[str, Any]) -> Optional[Note]:
        with self._session() as session:
            row = session.get(NoteDB, note_id)
            if not row:
                return None
            self._update(session, row, changes)
            return _note_out(row)

    def delete_note(self, note_id: str) -> bool:
        return self._delete(NoteDB, note_id)

    # === Learning ===

    def list_learning(self) -> list[LearningItem]:
        with self._session() as session:
            statement = select(LearningDB).order_by(desc(LearningDB.created_at))
            return [_learning_out(row) for row in session.exec(statement).all()]

    def get_learning(self, item_id: str) -> Optional[LearningItem]:
        with self._session() as session:
            row = session.get(LearningDB, item_id)
            return _learning_out(row) if row else None

    def add_learning(self, item: LearningItem) -> LearningItem:
        with self._session() as session:
            row = _learning_row(item)
            self._insert(session, row, "learning")
            return _learning_out(row)

    def update_learning(
        self, item_id: str, changes: dict[str, Any]
    ) -> Optional[LearningItem]:
        with self._session() as session:
            row = session.get(LearningDB, item_id)
            if not row:
                return None
            if "links" in changes:
                changes = {**changes, "links": _dump_resource_links(changes["links"])}
            self._update(session, row, changes)
            return _learning_out(row)

    def delete_learning(self, item_id: str) -> bool:
        return self._delete(LearningDB, item_id)

    # === Whole Portfolio ===

    def counts(self) -> dict[str, int]:
        if not self._schema_ready:
            self.ping()
        return count_rows(self.engine)

    def load_all(self) -> PortfolioData:
        links = self.list_links()
        return PortfolioData(
            profile=self.get_profile(),
            links=LinkGroups(
                work=[link for link in links if link.category == "work"],
                presence=[link for link in links if link.category == "presence"],
            ),
            notes=self.list_notes(),
            learning=self.list_learning(),
        )

    def replace_all(self, data: PortfolioData) -> None:
        """Clear every table and write the snapshot in one transaction."""
        with self._session() as session:
            for model in (ProfileDB, LinkDB, NoteDB, LearningDB):
                session.execute(delete(model))
            if data.profile:
                session.add(ProfileDB(**data.profile.model_dump()))
            for position, link in enumerate(data.links.flatten(), start=1):
                session.add(LinkDB(**link.model_dump(), position=position))
            for note in data.notes:
                session.add(NoteDB(**_with_timestamps(note.model_dump())))
            for item in data.learning:
                session.add(_learning_row(item))
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateIdError("portfolio", str(e.orig))


def _with_timestamps(values: dict[str, Any]) -> dict[str, Any]:
    """Fill missing timestamps (legacy records may lack them)."""
    now = utc_now()
    created = values.get("created_at") or now
    return {
        **values,
        "created_at": created,
        "updated_at": values.get("updated_at") or created,
    }


def _learning_row(item: LearningItem) -> LearningDB:
    values = _with_timestamps(item.model_dump(exclude={"links"}))
    return LearningDB(**values, links=_dump_resource_links(item.links))


def _first_duplicate(links: list[Link]) -> str:
    seen: set[str] = set()
    for link in links:
        if link.id in seen:
            return link.id
        seen.add(link.id)
    return ""
