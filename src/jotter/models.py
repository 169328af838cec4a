"""
Note model and collection codec for Jotter.

The JSON field names here are the on-disk contract shared with the
mobile app's saved notes, so they keep its camelCase spelling.
"""

from typing import Annotated, Iterable
from uuid import UUID, uuid4

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter


class Note(BaseModel):
    """A single user note."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(default_factory=uuid4, frozen=True, description="Stable identifier")
    title: str = Field(default="", description="Short title")
    content: str = Field(default="", description="Note body")
    is_completed: bool = Field(default=False, alias="isCompleted", description="Completion flag")


def _unique_ids(notes: list[Note]) -> list[Note]:
    """Lookups by ID must be unambiguous."""
    seen: set[UUID] = set()
    for note in notes:
        if note.id in seen:
            raise ValueError(f"Duplicate note id: {note.id}")
        seen.add(note.id)
    return notes


NOTES_ADAPTER = TypeAdapter(Annotated[list[Note], AfterValidator(_unique_ids)])


def dump_notes(notes: Iterable[Note]) -> bytes:
    """Serialize a notes collection to UTF-8 JSON."""
    return NOTES_ADAPTER.dump_json(list(notes), by_alias=True)


def load_notes(blob: bytes | str) -> list[Note]:
    """
    Decode a notes collection.

    Raises pydantic.ValidationError on malformed input or repeated IDs.
    """
    return NOTES_ADAPTER.validate_json(blob)
