"""An in-process RPC network that can lose, delay and reorder messages.

A :class:`Network` holds client end-points, servers and the connections
between them. A :class:`Server` is a collection of :class:`Service` objects,
each wrapping a receiver whose public one-argument methods become RPC
handlers. Arguments and replies are serialised with :mod:`distlab.labgob`, so
an RPC never shares objects between caller and handler.

``end.call("Raft.append_entries", args)`` returns the handler's reply, or
raises :class:`CallFailed` if no reply arrived: the network lost the request
or the reply, the end-point is disabled, or the server was deleted.
"""

from __future__ import annotations

import io
import random
import threading
import time
from concurrent.futures import Future, wait
from types import FunctionType
from typing import Any, Callable, Hashable

from distlab.labgob import LabDecoder, LabEncoder

SHORTDELAY = 27  # ms
LONGDELAY = 7000  # ms
MAXDELAY = LONGDELAY + 100

_POLL_INTERVAL = 0.1  # seconds between checks for a deleted server

# code-object flags for *args and **kwargs
_CO_VARARGS = 0x04
_CO_VARKEYWORDS = 0x08


class CallFailed(Exception):
    """No reply was received for an RPC."""


class UnknownHandlerError(LookupError):
    """The named service or method does not exist on the server."""


def _encode(value: Any) -> bytes:
    buf = io.BytesIO()
    LabEncoder(buf).encode(value)
    return buf.getvalue()


def _decode(data: bytes) -> Any:
    return LabDecoder(io.BytesIO(data)).decode()


def _sleep_ms(ms: int) -> None:
    if ms > 0:
        time.sleep(ms / 1000)


class Service:
    """An object whose public one-argument methods can be called via RPC."""

    def __init__(self, rcvr: Any) -> None:
        self.name = type(rcvr).__name__
        self._rcvr = rcvr
        self._methods: dict[str, Callable[[Any], Any]] = {}
        attributes: dict[str, Any] = {}
        for klass in reversed(type(rcvr).__mro__):
            attributes.update(vars(klass))
        for name, attr in attributes.items():
            if name.startswith("_") or not isinstance(attr, FunctionType):
                continue
            if self._is_handler(attr):
                self._methods[name] = getattr(rcvr, name)

    @staticmethod
    def _is_handler(function: FunctionType) -> bool:
        code = function.__code__
        return (
            code.co_argcount == 2
            and code.co_kwonlyargcount == 0
            and not code.co_flags & (_CO_VARARGS | _CO_VARKEYWORDS)
        )

    @property
    def methods(self) -> list[str]:
        """Names of the methods that handle RPCs, sorted."""
        return sorted(self._methods)

    def _dispatch(self, methname: str, svc_meth: str, payload: bytes) -> bytes:
        method = self._methods.get(methname)
        if method is None:
            raise UnknownHandlerError(
                f"unknown method {methname} in {svc_meth}; "
                f"expecting one of {self.methods}"
            )
        reply = method(_decode(payload))
        return _encode(reply)


class Server:
    """A collection of services sharing one RPC dispatcher."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._services: dict[str, Service] = {}
        self._count = 0

    def add_service(self, service: Service) -> None:
        with self._lock:
            self._services[service.name] = service

    def get_count(self) -> int:
        """Return the number of RPCs this server has received."""
        with self._lock:
            return self._count

    def _dispatch(self, svc_meth: str, payload: bytes) -> bytes:
        with self._lock:
            self._count += 1
            service_name, _, method_name = svc_meth.rpartition(".")
            service = self._services.get(service_name)
            choices = sorted(self._services)
        if service is None:
            raise UnknownHandlerError(
                f"unknown service {service_name} in {svc_meth}; "
                f"expecting one of {choices}"
            )
        return service._dispatch(method_name, svc_meth, payload)


class ClientEnd:
    """A client end-point, able to talk to the one server it is connected to."""

    def __init__(self, network: Network, endname: Hashable) -> None:
        self._network = network
        self.endname = endname

    def call(self, svc_meth: str, args: Any) -> Any:
        """Send an RPC and wait for its reply; raise CallFailed if none came."""
        reply = self._network._deliver(self.endname, svc_meth, _encode(args))
        return _decode(reply)


class Network:
    """Simulated network of client end-points and servers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reliable = True
        self._long_delays = False
        self._long_reordering = False
        self._ends: dict[Hashable, ClientEnd] = {}
        self._enabled: dict[Hashable, bool] = {}
        self._servers: dict[Hashable, Server | None] = {}
        self._connections: dict[Hashable, Hashable | None] = {}
        self._done = threading.Event()
        self._count = 0
        self._bytes = 0

    def __enter__(self) -> Network:
        return self

    def __exit__(self, *exc: object) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        """Shut the network down; later calls fail at once."""
        self._done.set()

    def reliable(self, yes: bool) -> None:
        with self._lock:
            self._reliable = yes

    def is_reliable(self) -> bool:
        with self._lock:
            return self._reliable

    def long_reordering(self, yes: bool) -> None:
        with self._lock:
            self._long_reordering = yes

    def long_delays(self, yes: bool) -> None:
        with self._lock:
            self._long_delays = yes

    def is_long_delays(self) -> bool:
        with self._lock:
            return self._long_delays

    def make_end(self, endname: Hashable) -> ClientEnd:
        """Create a disabled, unconnected client end-point."""
        with self._lock:
            if endname in self._ends:
                raise ValueError(f"make_end: {endname!r} already exists")
            end = ClientEnd(self, endname)
            self._ends[endname] = end
            self._enabled[endname] = False
            self._connections[endname] = None
            return end

    def delete_end(self, endname: Hashable) -> None:
        with self._lock:
            if endname not in self._ends:
                raise KeyError(f"delete_end: {endname!r} doesn't exist")
            del self._ends[endname]
            del self._enabled[endname]
            del self._connections[endname]

    def add_server(self, servername: Hashable, server: Server) -> None:
        with self._lock:
            self._servers[servername] = server

    def delete_server(self, servername: Hashable) -> None:
        with self._lock:
            self._servers[servername] = None

    def connect(self, endname: Hashable, servername: Hashable) -> None:
        """Connect a client end-point to a server."""
        with self._lock:
            self._connections[endname] = servername

    def enable(self, endname: Hashable, enabled: bool) -> None:
        with self._lock:
            self._enabled[endname] = enabled

    def get_count(self, servername: Hashable) -> int:
        """Return the number of RPCs the named server has received."""
        with self._lock:
            server = self._servers.get(servername)
        if server is None:
            raise KeyError(f"no server {servername!r}")
        return server.get_count()

    def get_total_count(self) -> int:
        with self._lock:
            return self._count

    def get_total_bytes(self) -> int:
        with self._lock:
            return self._bytes

    def _add_bytes(self, n: int) -> None:
        with self._lock:
            self._bytes += n

    def _read_end_info(
        self, endname: Hashable
    ) -> tuple[bool, Hashable | None, Server | None, bool, bool]:
        with self._lock:
            enabled = self._enabled.get(endname, False)
            servername = self._connections.get(endname)
            server = (
                self._servers.get(servername) if servername is not None else None
            )
            return enabled, servername, server, self._reliable, self._long_reordering

    def _is_server_dead(
        self, endname: Hashable, servername: Hashable, server: Server
    ) -> bool:
        with self._lock:
            return (
                not self._enabled.get(endname, False)
                or self._servers.get(servername) is not server
            )

    def _deliver(self, endname: Hashable, svc_meth: str, payload: bytes) -> bytes:
        if self._done.is_set():
            raise CallFailed("network has been cleaned up")
        with self._lock:
            self._count += 1
            self._bytes += len(payload)
        return self._process(endname, svc_meth, payload)

    def _process(self, endname: Hashable, svc_meth: str, payload: bytes) -> bytes:
        enabled, servername, server, reliable, longreordering = self._read_end_info(
            endname
        )

        if not (enabled and servername is not None and server is not None):
            # simulate no reply and an eventual timeout
            if self.is_long_delays():
                _sleep_ms(random.randrange(LONGDELAY))
            else:
                _sleep_ms(random.randrange(100))
            raise CallFailed(f"no reply for {svc_meth}")

        if not reliable:
            _sleep_ms(random.randrange(SHORTDELAY))
        if not reliable and random.randrange(1000) < 100:
            raise CallFailed(f"request for {svc_meth} was lost")

        # Run the handler in its own thread so that a deleted server can be
        # noticed while the handler is still busy.
        outcome: Future[bytes] = Future()

        def run() -> None:
            try:
                outcome.set_result(server._dispatch(svc_meth, payload))
            except BaseException as exc:  # handed back to the caller
                outcome.set_exception(exc)

        threading.Thread(target=run, daemon=True).start()

        reply_ok = False
        server_dead = False
        while not reply_ok and not server_dead:
            finished, _ = wait([outcome], timeout=_POLL_INTERVAL)
            if finished:
                reply_ok = True
            else:
                server_dead = self._is_server_dead(endname, servername, server)

        # never reply once the server is gone, even if the handler finished
        server_dead = self._is_server_dead(endname, servername, server)
        if not reply_ok or server_dead:
            raise CallFailed(f"server {servername!r} is gone")

        reply = outcome.result()

        if not reliable and random.randrange(1000) < 100:
            raise CallFailed(f"reply for {svc_meth} was lost")
        if longreordering and random.randrange(900) < 600:
            _sleep_ms(200 + random.randrange(1 + random.randrange(2000)))
        self._add_bytes(len(reply))
        return reply