from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from linkshelf.domain.entities import EditState, Link, LinkId, LinkPatch


class EditSession(BaseModel):
    """Transient per-row edit state. `original` is never modified."""

    model_config = ConfigDict(frozen=True)

    link_id: LinkId
    original: Link
    draft: dict[str, Any] = Field(default_factory=dict)
    state: EditState = "editing"
    error: str | None = None

    def as_patch(self) -> LinkPatch:
        return LinkPatch(**self.draft)

    def current_value(self, field: str) -> Any:
        if field in self.draft:
            return self.draft[field]
        return getattr(self.original, field)


def can_transition(current: EditState, new: EditState) -> bool:
    """
    Determine if an edit-session state change is allowed.

    viewing -> editing
    editing -> saving | viewing (cancel)
    saving  -> viewing (saved) | editing (save failed)
    """
    if current == "viewing":
        return new == "editing"

    if current == "editing":
        return new in ("saving", "viewing")

    if current == "saving":
        return new in ("viewing", "editing")

    return False


def begin(link: Link) -> EditSession:
    if link.id is None:
        raise ValueError("Only persisted links can be edited")
    return EditSession(link_id=link.id, original=link)


def transition(
    session: EditSession, new_state: EditState, error: str | None = None
) -> EditSession:
    """
    Return a NEW EditSession in `new_state`.
    Raises ValueError if the transition is invalid.
    """
    if not can_transition(session.state, new_state):
        raise ValueError(f"Invalid edit transition from {session.state} to {new_state}")

    updates: dict[str, Any] = {"state": new_state, "error": None}

    if new_state == "editing" and session.state == "saving":
        # Failed save: keep the draft so the user can correct it
        updates["error"] = error

    if new_state == "viewing":
        updates["draft"] = {}

    return session.model_copy(update=updates)


def with_draft(session: EditSession, **fields: Any) -> EditSession:
    if session.state != "editing":
        raise ValueError(f"Cannot change draft while {session.state}")
    draft = {**session.draft, **fields}
    return session.model_copy(update={"draft": draft, "error": session.error})
