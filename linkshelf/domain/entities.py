from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# --- Enums / Literals ---
LinkId = int | str
SortOrder = Literal["newest", "oldest"]
EditState = Literal["viewing", "editing", "saving"]

MAX_TAG_LENGTH = 50


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Lowercase, strip and deduplicate tags, keeping first-seen order."""
    if not tags:
        return []
    seen: list[str] = []
    for raw in tags:
        tag = str(raw).strip().lower()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tag '{tag[:20]}...' exceeds {MAX_TAG_LENGTH} characters")
        if tag not in seen:
            seen.append(tag)
    return seen


def describe_validation_error(error: ValidationError) -> str:
    """Join pydantic error messages into one user-facing line."""
    messages = []
    for err in error.errors():
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        messages.append(msg)
    return "; ".join(messages)


def _required_text(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"{field} is required")
    return value


# --- Links ---

class Link(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: LinkId | None = None
    url: str
    title: str
    description: str | None = None
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @field_validator("url")
    @classmethod
    def _url_required(cls, value: str) -> str:
        return _required_text(value, "URL")

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        return _required_text(value, "Title")

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> list[str]:
        return normalize_tags(value)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class LinkDraft(BaseModel):
    """Payload for a link that does not exist on the server yet."""

    url: str
    title: str
    description: str | None = None
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("url")
    @classmethod
    def _url_required(cls, value: str) -> str:
        return _required_text(value, "URL")

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        return _required_text(value, "Title")

    @field_validator("description", "notes")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> list[str]:
        return normalize_tags(value)


class LinkPatch(BaseModel):
    """
    Partial update of a link.

    Only fields that were explicitly set take part in the update; use
    `changes_against` to reduce it to the fields that actually differ.
    """

    url: str | None = None
    title: str | None = None
    description: str | None = None
    notes: str | None = None
    tags: list[str] | None = None

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _required_text(value, "URL")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _required_text(value, "Title")

    @field_validator("description", "notes")
    @classmethod
    def _blank_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return normalize_tags(value)

    def changes_against(self, link: Link) -> dict[str, Any]:
        current = link.model_dump()
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if current.get(name) != value
        }


class LinkEcho(BaseModel):
    """What the server returns for an update; any field may be missing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: LinkId | None = None
    url: str | None = None
    title: str | None = None
    description: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return normalize_tags(value)


class ListFilters(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=500, ge=1)
    tags: tuple[str, ...] = ()
    search: str | None = None


# --- Capture ---

class PageMetadata(BaseModel):
    url: str
    title: str = ""
    description: str = ""


# --- Account ---

class CredentialCheck(BaseModel):
    valid: bool


class UserInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str | None = None
    plan: str | None = None
