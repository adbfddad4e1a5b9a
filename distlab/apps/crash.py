"""A MapReduce application that sometimes crashes and sometimes stalls,
to exercise recovery from failed workers."""

from __future__ import annotations

import os
import secrets
import time

from distlab.mrtypes import KeyValue


def maybe_crash() -> None:
    """Exit the process a third of the time; sleep up to ten seconds another third."""
    roll = secrets.randbelow(1000)
    if roll < 330:
        os._exit(1)
    elif roll < 660:
        time.sleep(secrets.randbelow(10 * 1000) / 1000)


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", "surrogateescape"))


def mapf(filename: str, contents: str) -> list[KeyValue]:
    """Emit four pairs describing the file: its name, name length, size and a constant."""
    maybe_crash()
    return [
        KeyValue("a", filename),
        KeyValue("b", str(_byte_len(filename))),
        KeyValue("c", str(_byte_len(contents))),
        KeyValue("d", "xyzzy"),
    ]


def reducef(key: str, values: list[str]) -> str:
    """Return the values sorted and joined by spaces."""
    maybe_crash()
    return " ".join(sorted(values))