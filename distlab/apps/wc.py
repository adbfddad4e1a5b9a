"""Word count: map emits (word, "1") for each word, reduce counts them."""

from __future__ import annotations

from itertools import groupby
from typing import Iterator

from distlab.mrtypes import KeyValue


def _words(text: str) -> Iterator[str]:
    """Yield the maximal runs of letters in text."""
    for is_letter, chars in groupby(text, str.isalpha):
        if is_letter:
            yield "".join(chars)


def mapf(filename: str, contents: str) -> list[KeyValue]:
    """Emit (word, "1") for every word in contents; the file name is ignored."""
    return [KeyValue(word, "1") for word in _words(contents)]


def reducef(key: str, values: list[str]) -> str:
    """Return the number of occurrences of key."""
    return str(len(values))