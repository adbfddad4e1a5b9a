"""Client side of the coordinator RPCs, used by MapReduce workers."""

from __future__ import annotations

import socket
from typing import Any, Optional, TypeVar

from distlab.mrtypes import (
    ExampleArgs,
    ExampleReply,
    _read_frame,
    _write_frame,
    coordinator_sock,
)

R = TypeVar("R")


class RpcError(Exception):
    """The coordinator answered an RPC with an error."""


def call(rpcname: str, args: Any, reply_type: type[R], sockname: Optional[str] = None) -> R:
    """Send an RPC to the coordinator and return its reply.

    Raise ConnectionError if the coordinator cannot be reached, RpcError if
    it reports an error, and TypeError if the reply is not a reply_type.
    """
    path = sockname if sockname is not None else coordinator_sock()
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(path)
    except OSError as exc:
        sock.close()
        raise ConnectionError(f"dialing: {exc}") from exc
    with sock, sock.makefile("rwb") as stream:
        _write_frame(stream, (rpcname, args))
        try:
            status, payload = _read_frame(stream)
        except (EOFError, ValueError) as exc:
            raise RpcError(f"rpc: connection lost during {rpcname}") from exc
    if status != "ok":
        raise RpcError(str(payload))
    if not isinstance(payload, reply_type):
        raise TypeError(
            f"rpc: reply to {rpcname} is {type(payload).__name__}, "
            f"not {reply_type.__name__}"
        )
    return payload


def call_example(sockname: Optional[str] = None) -> Optional[ExampleReply]:
    """Send the Example RPC with x = 99 and print the reply; y should be 100."""
    try:
        reply = call("Coordinator.Example", ExampleArgs(x=99), ExampleReply, sockname)
    except RpcError as err:
        print(err)
        print("call failed!")
        return None
    print(f"reply.Y {reply.y}")
    return reply