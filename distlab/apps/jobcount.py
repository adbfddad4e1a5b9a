"""Counts how many times map tasks run, to detect tasks assigned twice."""

from __future__ import annotations

import itertools
import os
import random
import time
from pathlib import Path

from distlab.mrtypes import KeyValue

_PREFIX = "mr-worker-jobcount"
_invocations = itertools.count()


def mapf(filename: str, contents: str) -> list[KeyValue]:
    """Leave a marker file for this invocation, then work for two to five seconds."""
    marker = f"{_PREFIX}-{os.getpid()}-{next(_invocations)}"
    Path(marker).write_text("x")
    time.sleep((2000 + random.randrange(3000)) / 1000)
    return [KeyValue("a", "x")]


def reducef(key: str, values: list[str]) -> str:
    """Return the number of map invocations recorded in the current directory."""
    return str(sum(1 for name in os.listdir(".") if name.startswith(_PREFIX)))