"""Inverted index: map emits (word, document) once per distinct word."""

from __future__ import annotations

from distlab.apps.wc import _words
from distlab.mrtypes import KeyValue


def mapf(document: str, value: str) -> list[KeyValue]:
    """Emit (word, document) for each distinct word in value."""
    return [KeyValue(word, document) for word in dict.fromkeys(_words(value))]


def reducef(key: str, values: list[str]) -> str:
    """Return the number of documents and their sorted, comma-joined names."""
    names = sorted(values)
    return f"{len(names)} {','.join(names)}"