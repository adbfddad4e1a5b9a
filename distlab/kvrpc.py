"""Argument, reply and error types of the key/value service RPCs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

Tversion = int

_MAX_VERSION = 2**64 - 1


class Err(str, Enum):
    """Errors returned by the key/value servers and clerks."""

    OK = "OK"
    ERR_NO_KEY = "ErrNoKey"
    ERR_VERSION = "ErrVersion"
    # returned by the clerk only
    ERR_MAYBE = "ErrMaybe"
    # for replicated and sharded servers
    ERR_WRONG_LEADER = "ErrWrongLeader"
    ERR_WRONG_GROUP = "ErrWrongGroup"

    def __str__(self) -> str:
        return self.value

    def __format__(self, spec: str) -> str:
        return format(self.value, spec)


def _check_version(version: object) -> None:
    if isinstance(version, bool) or not isinstance(version, int):
        raise TypeError(f"version must be an int, not {type(version).__name__}")
    if not 0 <= version <= _MAX_VERSION:
        raise ValueError(f"version {version} out of range")


@dataclass
class PutArgs:
    key: str
    value: str
    version: Tversion = 0

    def __post_init__(self) -> None:
        _check_version(self.version)


@dataclass
class PutReply:
    err: Err = Err.OK

    def __post_init__(self) -> None:
        self.err = Err(self.err)


@dataclass
class GetArgs:
    key: str


@dataclass
class GetReply:
    value: str = ""
    version: Tversion = 0
    err: Err = Err.OK

    def __post_init__(self) -> None:
        _check_version(self.version)
        self.err = Err(self.err)