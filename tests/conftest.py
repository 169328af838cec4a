"""Shared fixtures for Jotter tests."""

import re

import pytest

from jotter.normalizer import TextNormalizer
from jotter.preferences import Preferences
from jotter.store import NotesStore

# Tiny lemma dictionary so store tests don't depend on simplemma's data.
LEMMAS = {
    "Milk": "milk",
    "Buy": "buy",
    "eggs": "egg",
    "dogs": "dog",
    "running": "run",
    "Running": "run",
    "notes": "note",
}

_SEGMENT_RE = re.compile(r"\w+|[^\w\s]+|\s+")


def fake_tagger(text):
    for token in _SEGMENT_RE.findall(text):
        yield token, LEMMAS.get(token)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point data and config dirs at a temp directory."""
    monkeypatch.setenv("JOTTER_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("JOTTER_TELEGRAM_TOKEN", raising=False)
    monkeypatch.delenv("JOTTER_TELEGRAM_USERS", raising=False)
    monkeypatch.delenv("JOTTER_LOG_LEVEL", raising=False)
    return tmp_path


@pytest.fixture
def normalizer():
    return TextNormalizer(tagger=fake_tagger)


@pytest.fixture
def prefs(tmp_path):
    return Preferences(tmp_path / "jotter.db")


@pytest.fixture
def store(prefs, normalizer):
    return NotesStore(prefs, normalizer=normalizer)
