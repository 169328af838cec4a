import logging
import sqlite3
import uuid

import pytest

from jotter.models import Note, dump_notes
from jotter.store import SAVE_KEY, NotesStore


def reloaded(store):
    return NotesStore(store.preferences, normalizer=store.normalizer, key=store.key).notes


def test_starts_empty(store):
    assert store.notes == []
    assert len(store) == 0


def test_add_appends_raw_text(store):
    first = store.add("Milk", "Buy milk")
    second = store.add("Running dogs", "")

    assert store.notes == [first, second]
    assert second.title == "Running dogs"
    assert second.content == ""
    assert not second.is_completed
    assert first.id != second.id


def test_add_still_runs_normalizer(prefs):
    seen = []

    def recording(text):
        seen.append(text)
        return text.upper()

    store = NotesStore(prefs, normalizer=recording)
    note = store.add("Milk", "Buy milk")

    assert seen == ["Milk", "Buy milk"]
    assert note.title == "Milk"


def test_add_accepts_empty_strings(store):
    note = store.add("", "")
    assert note.title == ""
    assert reloaded(store) == [note]


def test_every_mutation_round_trips(store):
    a = store.add("Milk", "Buy milk")
    assert reloaded(store) == store.notes

    b = store.add("Eggs", "a dozen")
    assert reloaded(store) == store.notes

    store.toggle_completion(b.id)
    assert reloaded(store) == store.notes

    store.update(a.id, "Milk 2", "Buy milk and eggs")
    assert reloaded(store) == store.notes

    store.delete({0})
    assert reloaded(store) == store.notes


def test_update_stores_normalized_text(store):
    note = store.add("Milk", "Buy milk")
    store.toggle_completion(note.id)

    assert store.update(note.id, "Milk 2", "Buy milk and eggs!")

    updated = store.get(note.id)
    assert updated.title == "milk 2"
    assert updated.content == "buy milk and egg"
    assert updated.id == note.id
    assert updated.is_completed


def test_update_accepts_string_id(store):
    note = store.add("Milk", "")
    assert store.update(str(note.id), "dogs", "")
    assert store.get(note.id).title == "dog"


def test_update_unknown_id_changes_nothing(store, prefs):
    note = store.add("Milk", "Buy milk")
    before = store.notes
    blob = prefs.get(SAVE_KEY)

    assert store.update(uuid.uuid4(), "x", "y") is False
    assert store.update("not-a-uuid", "x", "y") is False

    assert store.notes == before
    assert store.notes[0] is note
    assert prefs.get(SAVE_KEY) == blob


def test_toggle_flips_only_target(store):
    a = store.add("a", "")
    b = store.add("b", "")

    assert store.toggle_completion(b.id)
    assert [n.is_completed for n in store.notes] == [False, True]

    store.toggle_completion(b.id)
    assert [n.is_completed for n in store.notes] == [False, False]
    assert store.get(a.id) is a


def test_toggle_unknown_id(store):
    store.add("a", "")
    assert store.toggle_completion(uuid.uuid4()) is False
    assert not store.notes[0].is_completed


def test_delete_two_positions_keeps_order(store):
    notes = [store.add(str(i), "") for i in range(5)]

    store.delete({1, 3})

    assert store.notes == [notes[0], notes[2], notes[4]]
    assert reloaded(store) == store.notes


def test_delete_all(store):
    for i in range(3):
        store.add(str(i), "")

    store.delete(range(3))

    assert store.notes == []
    assert reloaded(store) == []


def test_delete_out_of_range_removes_nothing(store):
    store.add("a", "")
    store.add("b", "")

    with pytest.raises(IndexError):
        store.delete({0, 2})
    with pytest.raises(IndexError):
        store.delete([-1])

    assert [n.title for n in store.notes] == ["a", "b"]


def test_delete_persists_once(store, monkeypatch):
    store.add("a", "")
    store.add("b", "")
    calls = []
    original = store.preferences.set
    monkeypatch.setattr(store.preferences, "set", lambda k, v: (calls.append(k), original(k, v)))

    store.delete({0, 1})

    assert calls == [SAVE_KEY]


def test_load_ignores_corrupt_blob(prefs, normalizer, caplog):
    prefs.set(SAVE_KEY, b"{not json")

    with caplog.at_level(logging.WARNING, logger="jotter.store"):
        store = NotesStore(prefs, normalizer=normalizer)

    assert store.notes == []
    assert "unreadable" in caplog.text


def test_load_reads_mobile_app_format(prefs, normalizer):
    note_id = uuid.uuid4()
    blob = (
        '[{"id": "%s", "title": "Milk", "content": "Buy milk", "isCompleted": true}]'
        % str(note_id).upper()
    ).encode()
    prefs.set(SAVE_KEY, blob)

    store = NotesStore(prefs, normalizer=normalizer)

    assert len(store) == 1
    assert store.notes[0].id == note_id
    assert store.notes[0].is_completed


def test_load_rejects_duplicate_ids(prefs, normalizer, caplog):
    note_id = uuid.uuid4()
    blob = (
        '[{"id": "%s", "title": "a", "content": "", "isCompleted": false},'
        ' {"id": "%s", "title": "b", "content": "", "isCompleted": false}]'
        % (note_id, note_id)
    ).encode()
    prefs.set(SAVE_KEY, blob)

    with caplog.at_level(logging.WARNING, logger="jotter.store"):
        store = NotesStore(prefs, normalizer=normalizer)

    assert store.notes == []
    assert store.toggle_completion(note_id) is False
    assert "unreadable" in caplog.text


def test_custom_key(prefs, normalizer):
    store = NotesStore(prefs, normalizer=normalizer, key="OtherNotes")
    store.add("a", "")

    assert prefs.get(SAVE_KEY) is None
    assert prefs.get("OtherNotes") == dump_notes(store.notes)


class BrokenPreferences:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        raise sqlite3.OperationalError("disk I/O error")


def test_persist_failure_is_logged_not_raised(normalizer, caplog):
    store = NotesStore(BrokenPreferences(), normalizer=normalizer)

    with caplog.at_level(logging.ERROR, logger="jotter.store"):
        note = store.add("Milk", "Buy milk")

    assert store.notes == [note]
    assert store.persist() is False
    assert "Failed to save" in caplog.text


def test_load_read_error_starts_empty(normalizer):
    class Unreadable(BrokenPreferences):
        def get(self, key):
            raise sqlite3.DatabaseError("file is not a database")

    store = NotesStore(Unreadable(), normalizer=normalizer)
    assert store.notes == []


def test_resolve_positions_and_ids(store):
    a = store.add("a", "")
    b = store.add("b", "")

    assert store.resolve("1") == 0
    assert store.resolve("#2") == 1
    assert store.resolve(str(a.id)) == 0
    assert store.resolve(str(b.id)) == 1


def test_resolve_numeric_id_prefix(prefs, normalizer):
    digits_id = uuid.UUID("12345678-0000-4000-8000-000000000000")
    prefs.set(SAVE_KEY, dump_notes([
        Note(title="a"),
        Note(id=digits_id, title="b"),
    ]))
    store = NotesStore(prefs, normalizer=normalizer)

    assert store.resolve("2") == 1
    assert store.resolve("#2") == 1
    assert store.resolve("12345678") == 1
    assert store.resolve("#12345678") == 1
    assert store.resolve("1234-5678") == 1
    with pytest.raises(ValueError, match="No note at position 99999999"):
        store.resolve("99999999")


def test_resolve_id_prefix(prefs, normalizer):
    hex_id = uuid.UUID("abcdef12-0000-4000-8000-000000000000")
    prefs.set(SAVE_KEY, dump_notes([Note(id=hex_id, title="a")]))
    store = NotesStore(prefs, normalizer=normalizer)

    assert store.resolve("abcdef12") == 0
    assert store.resolve("ABCD") == 0


@pytest.mark.parametrize("ref", ["0", "#3", "zz", "abcdefgh"])
def test_resolve_rejects_unknown(store, ref):
    store.add("a", "")
    store.add("b", "")
    with pytest.raises(ValueError):
        store.resolve(ref)


def test_end_to_end_scenario(store, prefs, normalizer):
    note = store.add("Milk", "Buy milk")
    assert len(store) == 1
    assert (note.title, note.content, note.is_completed) == ("Milk", "Buy milk", False)

    store.toggle_completion(note.id)
    assert store.get(note.id).is_completed

    store.update(note.id, "Milk 2", "Buy milk and eggs")
    updated = store.get(note.id)
    assert updated.title == normalizer("Milk 2")
    assert updated.content == normalizer("Buy milk and eggs")
    assert updated.is_completed

    store.delete({0})
    assert store.notes == []

    assert NotesStore(prefs, normalizer=normalizer).notes == []
