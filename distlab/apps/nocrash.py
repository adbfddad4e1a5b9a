"""The crash application without the crashes: deterministic file descriptions."""

from __future__ import annotations

from distlab.mrtypes import KeyValue


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", "surrogateescape"))


def mapf(filename: str, contents: str) -> list[KeyValue]:
    """Emit four pairs describing the file: its name, name length, size and a constant."""
    return [
        KeyValue("a", filename),
        KeyValue("b", str(_byte_len(filename))),
        KeyValue("c", str(_byte_len(contents))),
        KeyValue("d", "xyzzy"),
    ]


def reducef(key: str, values: list[str]) -> str:
    """Return the values sorted and joined by spaces."""
    return " ".join(sorted(values))