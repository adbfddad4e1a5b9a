"""Sequential model of a versioned key/value store, for checking histories.

Histories are split per key; each key starts out empty at version 0. A put
succeeds only when its version matches the key's current version.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

GET = 0
PUT = 1

INVALID_STATE = "<invalid>"


@dataclass(frozen=True)
class KvInput:
    op: int
    key: str
    value: str = ""
    version: int = 0


@dataclass(frozen=True)
class KvOutput:
    value: str = ""
    version: int = 0
    err: str = ""


@dataclass(frozen=True)
class KvState:
    value: str = ""
    version: int = 0


@dataclass(frozen=True)
class Operation:
    """One client call: what was asked, what came back, and when (call, ret)."""

    input: KvInput
    output: KvOutput
    call: int
    ret: int
    client_id: int = 0


def partition(history: Iterable[Operation]) -> list[list[Operation]]:
    """Split a history by key, keys in sorted order, operations in original order."""
    by_key: dict[str, list[Operation]] = {}
    for op in history:
        by_key.setdefault(op.input.key, []).append(op)
    return [by_key[key] for key in sorted(by_key)]


def init_state() -> KvState:
    """Return the state of a key that has never been written."""
    return KvState("", 0)


def step(
    state: KvState, inp: KvInput, out: KvOutput
) -> tuple[bool, Union[KvState, str]]:
    """Apply one operation; return whether out is legal and the next state."""
    if inp.op == GET:
        return out.value == state.value, state
    if inp.op == PUT:
        if state.version == inp.version:
            return out.err in ("OK", "ErrMaybe"), KvState(inp.value, state.version + 1)
        return out.err in ("ErrVersion", "ErrMaybe"), state
    return False, INVALID_STATE


def describe_operation(inp: KvInput, out: KvOutput) -> str:
    """Return a one-line description of an operation and its result."""
    if inp.op == GET:
        return f"get('{inp.key}') -> ('{out.value}', '{out.version:d}', '{out.err}')"
    if inp.op == PUT:
        return f"put('{inp.key}', '{inp.value}', '{inp.version:d}') -> ('{out.err}')"
    return "<invalid>"