"""The MapReduce coordinator: serves RPCs from workers over a UNIX socket."""

from __future__ import annotations

import os
import re
import socketserver
import threading
from contextlib import suppress
from typing import Any, Optional, Sequence

from distlab.mrtypes import (
    ExampleArgs,
    ExampleReply,
    _read_frame,
    _write_frame,
    coordinator_sock,
)

_RPC_HANDLERS = frozenset({"example"})


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class _Handler(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        coordinator: Coordinator = self.server.coordinator  # type: ignore[attr-defined]
        while True:
            try:
                request = _read_frame(self.rfile)
            except (EOFError, ValueError):
                return
            _write_frame(self.wfile, coordinator._serve(request))


class _UnixServer(socketserver.ThreadingUnixStreamServer):
    daemon_threads = True

    def __init__(self, path: str, coordinator: Coordinator) -> None:
        self.coordinator = coordinator
        super().__init__(path, _Handler)


class Coordinator:
    """Holds the job description and answers worker RPCs until closed."""

    def __init__(
        self, files: Sequence[str], n_reduce: int, sockname: Optional[str] = None
    ) -> None:
        self.files = list(files)
        self.n_reduce = n_reduce
        self.sockname = sockname if sockname is not None else coordinator_sock()
        self._lock = threading.Lock()
        self._closed = False
        with suppress(FileNotFoundError):
            os.remove(self.sockname)
        self._server = _UnixServer(self.sockname, self)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def __enter__(self) -> Coordinator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def example(self, args: ExampleArgs) -> ExampleReply:
        """Example RPC handler: reply with args.x + 1."""
        return ExampleReply(y=args.x + 1)

    def done(self) -> bool:
        """Report whether the coordinator has finished and stopped serving."""
        with self._lock:
            return self._closed

    def close(self) -> None:
        """Stop serving and remove the socket file."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()
        with suppress(FileNotFoundError):
            os.remove(self.sockname)

    def _serve(self, request: Any) -> tuple:
        if not (
            isinstance(request, tuple) and len(request) == 2 and isinstance(request[0], str)
        ):
            return ("err", "rpc: malformed request")
        rpcname, args = request
        service, _, method = rpcname.rpartition(".")
        if service != type(self).__name__:
            return ("err", f"rpc: can't find service {rpcname}")
        handler = _snake(method)
        if handler not in _RPC_HANDLERS:
            return ("err", f"rpc: can't find method {rpcname}")
        try:
            reply = getattr(self, handler)(args)
        except Exception as exc:
            return ("err", str(exc))
        return ("ok", reply)


def make_coordinator(
    files: Sequence[str], n_reduce: int, sockname: Optional[str] = None
) -> Coordinator:
    """Create a coordinator for files with n_reduce reduce tasks and start serving."""
    return Coordinator(files, n_reduce, sockname)