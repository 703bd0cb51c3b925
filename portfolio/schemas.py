"""
Pydantic schemas for portfolio records and API request/response models.

Design principles:
- Records are camelCase on the wire and in the JSON data file
- Inputs accept either camelCase or snake_case field names
- Separate create/update schemas so partial updates stay explicit
"""
from typing import Optional, Literal
from datetime import datetime, date, timezone
from dateutil import parser as date_parser
from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel


LinkCategory = Literal["work", "presence"]
LINK_CATEGORIES: tuple[str, ...] = ("work", "presence")


def normalize_date(value: Optional[str]) -> Optional[str]:
    """Parse a loosely formatted date and return it as YYYY-MM-DD."""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    try:
        return date_parser.parse(str(value)).date().isoformat()
    except (ValueError, OverflowError):
        raise ValueError(f"Invalid date: {value!r}")


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps (as SQLite returns them) as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# === Profile ===

class Profile(CamelModel):
    """The site owner's profile (a singleton record)."""
    name: str = Field(min_length=1, max_length=200)
    title: str = Field(min_length=1, max_length=1000)
    location: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=320)
    skills: str = Field(min_length=1, max_length=2000)
    interests: str = Field(min_length=1, max_length=2000)
    home_image: str = Field(default="", max_length=2000)


class ProfileUpdate(CamelModel):
    """Partial profile used by the legacy whole-data update."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    title: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, min_length=1, max_length=320)
    skills: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    interests: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    home_image: Optional[str] = Field(default=None, max_length=2000)


# === Link Schemas ===

class LinkEntry(CamelModel):
    """A link as listed inside its category group."""
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    url: str = Field(min_length=1, max_length=2000)
    icon: str = Field(min_length=1, max_length=50)


class LinkIn(LinkEntry):
    """Input schema for a curated link."""
    category: LinkCategory


class LinkUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    url: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    icon: Optional[str] = Field(default=None, min_length=1, max_length=50)
    category: Optional[LinkCategory] = None


class Link(CamelModel):
    id: str
    name: str
    url: str
    icon: str
    category: LinkCategory


class LinkGroups(CamelModel):
    """Links grouped by category, each group in insertion order."""
    work: list[Link] = Field(default_factory=list)
    presence: list[Link] = Field(default_factory=list)

    def flatten(self) -> list[Link]:
        return [*self.work, *self.presence]


class LinkGroupsIn(CamelModel):
    """Replacement set of links; the category is implied by the group."""
    work: list[LinkEntry] = Field(default_factory=list)
    presence: list[LinkEntry] = Field(default_factory=list)

    def to_links(self) -> list[LinkIn]:
        return [
            LinkIn(**entry.model_dump(), category=category)
            for category in LINK_CATEGORIES
            for entry in getattr(self, category)
        ]


# === Note Schemas ===

class NoteIn(CamelModel):
    """Input schema for a markdown note."""
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)
    title: str = Field(min_length=1, max_length=500)
    content: str = Field(min_length=1)
    published_at: Optional[str] = Field(
        default=None,
        description="Publish date (defaults to today)"
    )

    @field_validator("published_at")
    @classmethod
    def validate_published_at(cls, v: Optional[str]) -> Optional[str]:
        return normalize_date(v)


class NoteUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    content: Optional[str] = Field(default=None, min_length=1)
    published_at: Optional[str] = None

    @field_validator("published_at")
    @classmethod
    def validate_published_at(cls, v: Optional[str]) -> Optional[str]:
        return normalize_date(v)


class Note(CamelModel):
    id: str
    title: str
    content: str
    published_at: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


# === Learning Schemas ===

class ResourceLink(CamelModel):
    """A resource attached to a learning item."""
    title: str = Field(min_length=1, max_length=500)
    url: str = Field(min_length=1, max_length=2000)
    description: str = Field(default="", max_length=2000)


class LearningIn(CamelModel):
    """Input schema for a learning log entry."""
    id: Optional[str] = Field(default=None, min_length=1, max_length=100)
    title: str = Field(min_length=1, max_length=500)
    description: str = Field(min_length=1)
    type: str = Field(min_length=1, max_length=50)
    date: str
    links: list[ResourceLink] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return normalize_date(v)


class LearningUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    date: Optional[str] = None
    links: Optional[list[ResourceLink]] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return normalize_date(v)


class LearningItem(CamelModel):
    id: str
    title: str
    description: str
    type: str
    date: str
    links: list[ResourceLink] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def validate_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


# === Whole Portfolio ===

class PortfolioData(CamelModel):
    """Everything the site shows, as stored in the JSON data file."""
    profile: Optional[Profile] = None
    links: LinkGroups = Field(default_factory=LinkGroups)
    notes: list[Note] = Field(default_factory=list)
    learning: list[LearningItem] = Field(default_factory=list)


class PortfolioUpdate(CamelModel):
    """Legacy update body: profile and/or a replacement set of links."""
    profile: Optional[ProfileUpdate] = None
    links: Optional[LinkGroupsIn] = None


# === Auth Schemas ===

class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=1, max_length=200)


class SessionStatus(BaseModel):
    authenticated: bool


# === Migration Schemas ===

class MigrationRequest(BaseModel):
    """Options for the JSON → database migration trigger."""
    verify: bool = Field(default=True, description="Compare counts afterwards")


class LearningLinksRequest(CamelModel):
    action: Literal["add-links"] = "add-links"
    learning_id: str = Field(min_length=1)
    links: list[ResourceLink]


# === Health / Status Schemas ===

class CollectionCounts(BaseModel):
    profiles: int = 0
    links: int = 0
    notes: int = 0
    learning: int = 0

    @property
    def total(self) -> int:
        return self.profiles + self.links + self.notes + self.learning


class HealthStatus(CamelModel):
    """Data layer health."""
    status: str  # healthy, degraded, unhealthy
    backend: str  # database, json
    connected: bool
    fallback_mode: bool
    error: Optional[str] = None
    timestamp: datetime
    collections: Optional[CollectionCounts] = None
    total_documents: Optional[int] = None


class DatabaseMode(CamelModel):
    current_mode: str
    database_configured: bool
    connected: bool
    error: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# === Error Schemas ===

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    code: Optional[str] = None
