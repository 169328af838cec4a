"""
Text normalizer for Jotter.

Maps text to its space-joined lemma tokens ("Running dogs!" -> "run dog").
The lemmatizer is a pluggable tagger so the joining, fallback and trimming
rules can be exercised without a linguistic backend.
"""

from typing import Callable, Iterable

import simplemma

# A tagger splits text into segments and reports each segment's lemma,
# or None when the lemmatizer has nothing for it.
Tagger = Callable[[str], Iterable[tuple[str, str | None]]]

DEFAULT_LANGUAGE = "en"


def simplemma_tagger(language: str = DEFAULT_LANGUAGE) -> Tagger:
    """Build a tagger on the simplemma dictionary lemmatizer."""

    def tag(text: str) -> Iterable[tuple[str, str | None]]:
        for token in simplemma.simple_tokenizer(text):
            if not _is_word(token):
                yield token, None
                continue
            lemma = simplemma.lemmatize(token, lang=language)
            if lemma != token or simplemma.is_known(token, lang=language):
                yield token, lemma
            else:
                yield token, None

    return tag


def _is_word(token: str) -> bool:
    """Punctuation and whitespace segments carry no alphanumerics."""
    return any(ch.isalnum() for ch in token)


def normalize(text: str, tagger: Tagger | None = None) -> str:
    """
    Normalize text to lemma tokens.

    Punctuation and whitespace segments are dropped. A word without a lemma
    keeps its original surface text. Tokens are joined by single spaces.
    """
    if not text:
        return ""

    tagger = tagger or simplemma_tagger()

    words = []
    for token, lemma in tagger(text):
        if not _is_word(token):
            continue
        words.append(lemma if lemma else token)

    return " ".join(words).strip()


class TextNormalizer:
    """Callable normalizer bound to one tagger."""

    def __init__(self, tagger: Tagger | None = None, language: str = DEFAULT_LANGUAGE):
        self.language = language
        self.tagger = tagger or simplemma_tagger(language)

    def __call__(self, text: str) -> str:
        return normalize(text, self.tagger)
