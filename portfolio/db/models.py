"""
SQLModel database models, one table per portfolio collection.
"""
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Column, Text, Index


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


class ProfileDB(SQLModel, table=True):
    """
    Site owner profile.

    Only the most recently created row is read; writes update it in place.
    """
    __tablename__ = "profiles"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(max_length=200)
    title: str = Field(sa_column=Column(Text, nullable=False))
    location: str = Field(max_length=200)
    email: str = Field(max_length=320)
    skills: str = Field(sa_column=Column(Text, nullable=False))
    interests: str = Field(sa_column=Column(Text, nullable=False))
    home_image: str = Field(default="", sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)


class LinkDB(SQLModel, table=True):
    """
    Curated link in the work or presence group.

    `position` preserves insertion order within the whole link set.
    """
    __tablename__ = "links"

    id: str = Field(primary_key=True, max_length=100)

    name: str = Field(max_length=200)
    url: str = Field(sa_column=Column(Text, nullable=False))
    icon: str = Field(max_length=50)
    category: str = Field(max_length=20)
    position: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)

    __table_args__ = (
        Index("idx_links_position", "position"),
        Index("idx_links_category", "category"),
    )


class NoteDB(SQLModel, table=True):
    """Markdown note."""
    __tablename__ = "notes"

    id: str = Field(primary_key=True, max_length=100)

    title: str = Field(sa_column=Column(Text, nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    published_at: str = Field(max_length=10)

    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)

    __table_args__ = (
        Index("idx_notes_created_at", "created_at"),
    )


class LearningDB(SQLModel, table=True):
    """
    Learning log entry.

    Resource links are small and always read with their item, so they are
    stored inline as JSON text.
    """
    __tablename__ = "learning"

    id: str = Field(primary_key=True, max_length=100)

    title: str = Field(sa_column=Column(Text, nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    type: str = Field(max_length=50)
    date: str = Field(max_length=10)

    # Store as JSON text (simpler than separate table)
    links: str = Field(default="[]", sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)

    __table_args__ = (
        Index("idx_learning_created_at", "created_at"),
    )
