"""Counts files; some reduce tasks take a long time, to catch workers that
exit before the job is finished."""

from __future__ import annotations

import time

from distlab.mrtypes import KeyValue


def mapf(filename: str, contents: str) -> list[KeyValue]:
    """Emit (filename, "1") once per file."""
    return [KeyValue(filename, "1")]


def reducef(key: str, values: list[str]) -> str:
    """Return the number of values, sleeping three seconds for some keys."""
    if "sherlock" in key or "tom" in key:
        time.sleep(3)
    return str(len(values))