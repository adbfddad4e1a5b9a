"""Checks that map tasks run in parallel by counting live sibling workers."""

from __future__ import annotations

import os
import re
import time
from pathlib import Path

from distlab.mrtypes import KeyValue


def _is_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except (OSError, OverflowError):
        return False
    return True


def nparallel(phase: str) -> int:
    """Return how many workers, this one included, are running phase right now."""
    marker = Path(f"mr-worker-{phase}-{os.getpid()}")
    marker.write_text("x")

    pattern = re.compile(rf"mr-worker-{re.escape(phase)}-([+-]?\d+)")
    running = 0
    for name in os.listdir("."):
        match = pattern.match(name)
        if match and _is_alive(int(match.group(1))):
            running += 1

    time.sleep(1)
    marker.unlink()
    return running


def mapf(filename: str, contents: str) -> list[KeyValue]:
    """Emit this worker's start time and how many map workers ran alongside it."""
    started = time.time()
    pid = os.getpid()
    n = nparallel("map")
    return [
        KeyValue(f"times-{pid}", f"{started:.1f}"),
        KeyValue(f"parallel-{pid}", str(n)),
    ]


def reducef(key: str, values: list[str]) -> str:
    """Return the values sorted and joined by spaces."""
    return " ".join(sorted(values))