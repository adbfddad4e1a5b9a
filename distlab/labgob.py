"""Serialisation of values sent over RPC or persisted, with warnings for
fields that will not travel and for decoding into non-default targets.

Only plain data is accepted: ``None``, booleans, numbers, strings, bytes,
lists, tuples, dicts, sets, frozensets, enum members and dataclass
instances. Dataclass fields whose names start with an underscore are
private: they are never transmitted, and the first time a type with such a
field is seen a warning is printed and the error count goes up.
"""

from __future__ import annotations

import dataclasses
import enum
import pickle
import threading
from typing import Any, BinaryIO

_lock = threading.Lock()
_error_count = 0
_checked: set[type] = set()
_name_by_type: dict[type, str] = {}
_type_by_name: dict[str, type] = {}

_PRIMITIVES = (bool, int, float, str, bytes, type(None))
_PROTOCOL = 5


def error_count() -> int:
    """Return how many warnings and errors have been reported so far."""
    with _lock:
        return _error_count


def _bump() -> int:
    """Increase the error count and return its previous value."""
    global _error_count
    with _lock:
        previous = _error_count
        _error_count += 1
        return previous


def _default_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _is_struct(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _registrable(cls: type) -> bool:
    return dataclasses.is_dataclass(cls) or issubclass(cls, enum.Enum)


def _register_type(cls: type, name: str) -> None:
    with _lock:
        existing = _name_by_type.get(cls)
        if existing is not None and existing != name:
            raise ValueError(
                f"labgob: type {cls.__qualname__} already registered as {existing!r}"
            )
        other = _type_by_name.get(name)
        if other is not None and other is not cls:
            raise ValueError(f"labgob: name {name!r} already registered for another type")
        _name_by_type[cls] = name
        _type_by_name[name] = cls


def _ensure_registered(cls: type) -> str:
    with _lock:
        name = _name_by_type.get(cls)
        if name is None:
            name = _default_name(cls)
            stale = _type_by_name.get(name)
            if stale is not None:
                _name_by_type.pop(stale, None)
            _name_by_type[cls] = name
            _type_by_name[name] = cls
        return name


def _lookup(name: str) -> type:
    with _lock:
        cls = _type_by_name.get(name)
    if cls is None:
        raise ValueError(f"labgob: unknown type name {name!r}")
    return cls


def _check_type(cls: type) -> None:
    """Warn once per type about private dataclass fields."""
    with _lock:
        if cls in _checked:
            return
        _checked.add(cls)
    if not dataclasses.is_dataclass(cls):
        return
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            print(
                f"labgob error: private field {f.name} of {cls.__name__} "
                "in RPC or persist/snapshot will not be transmitted"
            )
            _bump()


def _check_value(value: Any) -> None:
    """Check every dataclass type reachable from value."""
    stack = [value]
    seen: set[int] = set()
    while stack:
        item = stack.pop()
        if isinstance(item, type):
            _check_type(item)
            continue
        if id(item) in seen:
            continue
        seen.add(id(item))
        if _is_struct(item):
            _check_type(type(item))
            stack.extend(
                getattr(item, f.name)
                for f in dataclasses.fields(item)
                if hasattr(item, f.name)
            )
        elif isinstance(item, (list, tuple, set, frozenset)):
            stack.extend(item)
        elif isinstance(item, dict):
            stack.extend(item.keys())
            stack.extend(item.values())


def _to_tree(value: Any, active: set[int]) -> tuple:
    if isinstance(value, enum.Enum):
        name = _ensure_registered(type(value))
        return ("e", name, _to_tree(value.value, active))
    if isinstance(value, _PRIMITIVES):
        return ("v", value)

    if id(value) in active:
        raise ValueError("labgob: cannot encode a cyclic value")
    active.add(id(value))
    try:
        if _is_struct(value):
            cls = type(value)
            _check_type(cls)
            name = _ensure_registered(cls)
            sent = []
            for f in dataclasses.fields(value):
                if not hasattr(value, f.name):
                    continue
                member = getattr(value, f.name)
                if f.name.startswith("_"):
                    _check_value(member)
                else:
                    sent.append((f.name, _to_tree(member, active)))
            return ("o", name, sent)
        if isinstance(value, list):
            return ("l", [_to_tree(v, active) for v in value])
        if isinstance(value, tuple):
            return ("t", [_to_tree(v, active) for v in value])
        if isinstance(value, dict):
            return (
                "d",
                [(_to_tree(k, active), _to_tree(v, active)) for k, v in value.items()],
            )
        if isinstance(value, frozenset):
            return ("f", [_to_tree(v, active) for v in value])
        if isinstance(value, set):
            return ("s", [_to_tree(v, active) for v in value])
    finally:
        active.discard(id(value))
    raise TypeError(f"labgob: cannot encode value of type {type(value).__name__}")


def _build_struct(cls: type, sent: list) -> Any:
    if not dataclasses.is_dataclass(cls):
        raise ValueError(f"labgob: {cls.__qualname__} is not a struct type")
    obj = object.__new__(cls)
    received = {name: node for name, node in sent}
    for f in dataclasses.fields(cls):
        if f.name in received:
            object.__setattr__(obj, f.name, _from_tree(received[f.name]))
        elif f.default is not dataclasses.MISSING:
            object.__setattr__(obj, f.name, f.default)
        elif f.default_factory is not dataclasses.MISSING:
            object.__setattr__(obj, f.name, f.default_factory())
    return obj


def _from_tree(node: Any) -> Any:
    if not isinstance(node, tuple) or not node:
        raise ValueError("labgob: corrupt stream")
    kind = node[0]
    try:
        if kind == "v":
            return node[1]
        if kind == "l":
            return [_from_tree(v) for v in node[1]]
        if kind == "t":
            return tuple(_from_tree(v) for v in node[1])
        if kind == "d":
            return {_from_tree(k): _from_tree(v) for k, v in node[1]}
        if kind == "s":
            return {_from_tree(v) for v in node[1]}
        if kind == "f":
            return frozenset(_from_tree(v) for v in node[1])
        if kind == "e":
            return _lookup(node[1])(_from_tree(node[2]))
        if kind == "o":
            return _build_struct(_lookup(node[1]), node[2])
    except (IndexError, TypeError) as exc:
        raise ValueError("labgob: corrupt stream") from exc
    raise ValueError(f"labgob: corrupt stream (unknown tag {kind!r})")


class _Unpickler(pickle.Unpickler):
    def find_class(self, module: str, name: str) -> Any:
        raise pickle.UnpicklingError(f"labgob: refusing to load global {module}.{name}")


def _check_default(value: Any, depth: int, name: str) -> None:
    if depth > 3:
        return
    if _is_struct(value):
        for f in dataclasses.fields(value):
            if not hasattr(value, f.name):
                continue
            inner = f"{name}.{f.name}" if name else f.name
            _check_default(getattr(value, f.name), depth + 1, inner)
        return
    if isinstance(value, enum.Enum):
        return
    if isinstance(value, (bool, int, float, str)) and value != type(value)():
        if _bump() < 1:
            what = name or type(value).__name__
            print(
                f"labgob warning: decoding into non-default field {what} "
                "discards its value"
            )


def register(value: Any) -> None:
    """Register a dataclass or enum type (or an instance of one) under its default name."""
    cls = value if isinstance(value, type) else type(value)
    if not _registrable(cls):
        raise TypeError(f"labgob: cannot register {cls.__name__}")
    _check_value(value)
    _register_type(cls, _default_name(cls))


def register_name(name: str, value: Any) -> None:
    """Register a dataclass or enum type (or an instance of one) under name."""
    cls = value if isinstance(value, type) else type(value)
    if not _registrable(cls):
        raise TypeError(f"labgob: cannot register {cls.__name__}")
    _check_value(value)
    _register_type(cls, name)


class LabEncoder:
    """Writes values to a binary stream, one after another."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def encode(self, value: Any) -> None:
        tree = _to_tree(value, set())
        pickle.dump(tree, self._stream, protocol=_PROTOCOL)


class LabDecoder:
    """Reads values written by a LabEncoder, in the same order."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def decode(self) -> Any:
        """Return the next value; raise EOFError when the stream is exhausted."""
        return _from_tree(_Unpickler(self._stream).load())

    def decode_into(self, target: Any) -> Any:
        """Decode the next value and copy its public fields into target."""
        if not _is_struct(target):
            raise TypeError("labgob: decode_into needs a dataclass instance")
        _check_value(target)
        _check_default(target, 1, "")
        value = self.decode()
        if type(value) is not type(target):
            raise TypeError(
                f"labgob: stream holds {type(value).__name__}, "
                f"not {type(target).__name__}"
            )
        for f in dataclasses.fields(target):
            if not f.name.startswith("_") and hasattr(value, f.name):
                object.__setattr__(target, f.name, getattr(value, f.name))
        return target