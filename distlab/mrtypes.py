"""Types exchanged between the MapReduce coordinator and its workers.

Also holds the key-partitioning hash and the framing used to carry RPCs
over the coordinator's UNIX-domain socket: each message is a four-byte
big-endian length followed by a labgob-encoded value.
"""

from __future__ import annotations

import io
import os
import struct
from dataclasses import dataclass
from typing import Any, BinaryIO

from distlab import labgob

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_HEADER = struct.Struct(">I")


@dataclass
class KeyValue:
    """One pair emitted by a map function."""

    key: str
    value: str


@dataclass
class ExampleArgs:
    x: int = 0


@dataclass
class ExampleReply:
    y: int = 0


@dataclass
class RequestTask:
    worker_id: int = 0


@dataclass
class RequestedTaskReply:
    worker_id: int = 0
    task_type: str = ""
    file_name: str = ""
    n_reduce: int = 0
    task_id: int = 0


@dataclass
class ReportBackToMaster:
    worker_id: int = 0
    task_type: str = ""
    task_id: int = 0


@dataclass
class ReportTaskToWorker:
    can_exit: bool = False


for _cls in (
    KeyValue,
    ExampleArgs,
    ExampleReply,
    RequestTask,
    RequestedTaskReply,
    ReportBackToMaster,
    ReportTaskToWorker,
):
    labgob.register(_cls)


def coordinator_sock() -> str:
    """Return a per-user UNIX-domain socket name in /var/tmp for the coordinator."""
    return "/var/tmp/5840-mr-" + str(os.getuid())


def ihash(key: str) -> int:
    """Hash a key with 32-bit FNV-1a; use ihash(key) % n_reduce to pick a reduce task."""
    h = _FNV32_OFFSET
    for byte in key.encode("utf-8"):
        h ^= byte
        h = (h * _FNV32_PRIME) & 0xFFFFFFFF
    return h & 0x7FFFFFFF


def _write_frame(stream: BinaryIO, value: Any) -> None:
    """Write one length-prefixed labgob value and flush it."""
    buf = io.BytesIO()
    labgob.LabEncoder(buf).encode(value)
    body = buf.getvalue()
    stream.write(_HEADER.pack(len(body)) + body)
    stream.flush()


def _read_frame(stream: BinaryIO) -> Any:
    """Read one value written by _write_frame.

    Raise EOFError if the stream ends before a frame starts, ValueError if
    it ends inside one.
    """
    header = stream.read(_HEADER.size)
    if not header:
        raise EOFError("end of stream")
    if len(header) < _HEADER.size:
        raise ValueError("truncated frame header")
    (length,) = _HEADER.unpack(header)
    body = stream.read(length)
    if len(body) < length:
        raise ValueError("truncated frame body")
    return labgob.LabDecoder(io.BytesIO(body)).decode()