"""
Notes store for Jotter.

Owns the ordered notes collection. Every mutation rewrites the whole
collection into the preference store before returning (write-through).
"""

import logging
import sqlite3
import threading
from typing import Any, Callable, Iterable, Iterator
from uuid import UUID

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from jotter.config import load_config
from jotter.models import Note, dump_notes, load_notes
from jotter.normalizer import DEFAULT_LANGUAGE, TextNormalizer
from jotter.preferences import Preferences

logger = logging.getLogger(__name__)

# Preference key holding the serialized notes; part of the on-disk contract.
SAVE_KEY = "SavedNotes"


class NotesStore:
    """Single source of truth for the notes collection."""

    def __init__(
        self,
        preferences: Preferences | None = None,
        normalizer: Callable[[str], str] | None = None,
        key: str = SAVE_KEY,
    ):
        self.preferences = preferences or Preferences()
        self.normalizer = normalizer or TextNormalizer()
        self.key = key
        self._notes: list[Note] = []
        self._lock = threading.RLock()
        self.load()

    @property
    def notes(self) -> list[Note]:
        """Snapshot of the collection in display order."""
        return list(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes)

    def index_of(self, note_id: UUID | str) -> int | None:
        """Position of a note by ID, or None."""
        note_id = _as_uuid(note_id)
        if note_id is None:
            return None
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    def get(self, note_id: UUID | str) -> Note | None:
        """Get a single note by ID."""
        index = self.index_of(note_id)
        return self._notes[index] if index is not None else None

    def resolve(self, ref: str) -> int:
        """
        Resolve a user reference to a position.

        Accepts "#n" or "n" (1-based position as shown in listings), a full
        ID, or an unambiguous ID prefix of at least 4 characters. A number
        outside the list is tried as an ID prefix, since short IDs can be
        all digits.
        Raises ValueError if nothing (or more than one note) matches.
        """
        ref = ref.strip()
        number = ref[1:] if ref.startswith("#") else ref
        if number.isdigit():
            position = int(number) - 1
            if 0 <= position < len(self._notes):
                return position

        index = self.index_of(number)
        if index is not None:
            return index

        prefix = number.lower().replace("-", "")
        matches = []
        if len(prefix) >= 4:
            matches = [
                i for i, note in enumerate(self._notes)
                if note.id.hex.startswith(prefix)
            ]
        if len(matches) == 1:
            return matches[0]
        if matches:
            raise ValueError(f"Ambiguous reference: {ref} ({len(matches)} notes)")
        if number.isdigit():
            raise ValueError(f"No note at position {number}")
        if len(prefix) < 4:
            raise ValueError(f"Reference too short: {ref}")
        raise ValueError(f"Note not found: {ref}")

    def add(self, title: str, content: str) -> Note:
        """
        Append a new note and persist.

        The note keeps the text exactly as given. Normalization still runs
        but its result is not stored, unlike update().
        """
        with self._lock:
            normalized_title = self.normalizer(title)
            normalized_content = self.normalizer(content)
            logger.debug(
                "Normalized new note (unused): %r / %r",
                normalized_title, normalized_content,
            )

            note = Note(title=title, content=content)
            self._notes.append(note)
            self.persist()
            return note

    def update(self, note_id: UUID | str, title: str, content: str) -> bool:
        """
        Replace a note's title and content with their normalized forms.

        Returns False (and changes nothing) if the ID is unknown.
        """
        with self._lock:
            index = self.index_of(note_id)
            if index is None:
                logger.info("Update skipped, note not found: %s", note_id)
                return False

            note = self._notes[index]
            note.title = self.normalizer(title)
            note.content = self.normalizer(content)
            self.persist()
            return True

    def toggle_completion(self, note_id: UUID | str) -> bool:
        """Flip a note's completion flag. Returns False if the ID is unknown."""
        with self._lock:
            index = self.index_of(note_id)
            if index is None:
                logger.info("Toggle skipped, note not found: %s", note_id)
                return False

            note = self._notes[index]
            note.is_completed = not note.is_completed
            self.persist()
            return True

    def delete(self, positions: Iterable[int]) -> None:
        """
        Remove the notes at the given positions in one batch and persist once.

        Raises IndexError, without removing anything, if any position is
        out of range.
        """
        with self._lock:
            doomed = set(positions)
            for position in doomed:
                if not 0 <= position < len(self._notes):
                    raise IndexError(f"Note position out of range: {position}")

            self._notes = [
                note for index, note in enumerate(self._notes)
                if index not in doomed
            ]
            self.persist()

    def load(self) -> None:
        """
        Restore the collection from the preference store.

        Missing or unreadable data leaves the in-memory collection as is.
        """
        try:
            blob = self.preferences.get(self.key)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Could not read saved notes: %s", e)
            return

        if blob is None:
            return

        try:
            self._notes = load_notes(blob)
        except ValidationError as e:
            logger.warning(
                "Saved notes are unreadable, starting empty (%d errors)",
                e.error_count(),
            )

    def persist(self) -> bool:
        """
        Overwrite the saved blob with the full collection.

        A failed write is logged and dropped; the in-memory collection keeps
        its changes. Returns True on success.
        """
        with self._lock:
            try:
                blob = dump_notes(self._notes)
                self.preferences.set(self.key, blob)
            except (PydanticSerializationError, sqlite3.Error, OSError):
                logger.exception("Failed to save %d notes", len(self._notes))
                return False
            return True


def _as_uuid(value: UUID | str) -> UUID | None:
    """Coerce an ID to UUID; None for anything that isn't one."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def open_store(config: dict[str, Any] | None = None) -> NotesStore:
    """Open the notes store described by the user's config."""
    config = config or load_config()
    language = config.get("normalizer", {}).get("language", DEFAULT_LANGUAGE)
    key = config.get("store", {}).get("key", SAVE_KEY)

    return NotesStore(normalizer=TextNormalizer(language=language), key=key)
