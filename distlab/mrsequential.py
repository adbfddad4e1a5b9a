"""Sequential MapReduce: map every input file, sort, reduce, write mr-out-0."""

from __future__ import annotations

import sys
from itertools import groupby
from operator import attrgetter
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Union

from distlab.apps import (
    crash,
    early_exit,
    indexer,
    jobcount,
    mtiming,
    nocrash,
    rtiming,
    wc,
)
from distlab.mrtypes import KeyValue

MapFunc = Callable[[str, str], list[KeyValue]]
ReduceFunc = Callable[[str, list[str]], str]

_APPS = {
    "wc": wc,
    "indexer": indexer,
    "crash": crash,
    "nocrash": nocrash,
    "early_exit": early_exit,
    "jobcount": jobcount,
    "mtiming": mtiming,
    "rtiming": rtiming,
}

_OUTPUT = "mr-out-0"
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def load_app(name: str) -> tuple[MapFunc, ReduceFunc]:
    """Return the map and reduce functions of an application.

    name may be a bare application name ("wc") or a file name such as
    "../apps/wc.so"; only the stem is used.
    """
    app = _APPS.get(Path(name).stem)
    if app is None:
        raise ValueError(f"cannot load plugin {name}")
    return app.mapf, app.reducef


def run(
    mapf: MapFunc,
    reducef: ReduceFunc,
    filenames: Iterable[Union[str, Path]],
    output: Union[str, Path],
) -> None:
    """Map every file, then reduce each distinct key, writing "key result" lines."""
    intermediate: list[KeyValue] = []
    for filename in filenames:
        content = Path(filename).read_text(encoding=_ENCODING, errors=_ERRORS)
        intermediate.extend(mapf(str(filename), content))

    intermediate.sort(key=attrgetter("key"))

    with open(output, "w", encoding=_ENCODING, errors=_ERRORS, newline="\n") as out:
        for key, group in groupby(intermediate, key=attrgetter("key")):
            result = reducef(key, [kv.value for kv in group])
            out.write(f"{key} {result}\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run an application over input files: mrsequential app inputfiles..."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("Usage: mrsequential xxx.so inputfiles...", file=sys.stderr)
        return 1
    try:
        mapf, reducef = load_app(args[0])
        run(mapf, reducef, args[1:], _OUTPUT)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"cannot open {exc.filename}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())