# distlab

Small, self-contained pieces for building and testing distributed systems
in Python. It runs on POSIX systems (the MapReduce coordinator uses a
UNIX-domain socket) and needs nothing beyond the standard library.

- **`distlab.labrpc`**: an in-process RPC network that can drop requests,
  drop replies, delay messages, and disconnect individual client ends or
  whole servers.
- **`distlab.labgob`**: the encoder and decoder (`LabEncoder`,
  `LabDecoder`) that carry RPC arguments and replies as bytes, so that no
  object is shared between caller and handler.
- **`distlab.kvrpc`**: the request and reply records of a versioned
  key/value service (`PutArgs`, `PutReply`, `GetArgs`, `GetReply`) and the
  `Err` outcomes they carry.
- **`distlab.kvmodel`**: a sequential model of a versioned key/value store
  for checking histories of `Operation` records.
- **MapReduce**: shared records and helpers in `distlab.mrtypes`, a
  `Coordinator` serving RPCs over a UNIX-domain socket, the client-side
  `call` and `call_example` in `distlab.worker`, a set of applications in
  `distlab.apps`, and a sequential runner, `distlab.mrsequential`.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## A simulated network

```python
from distlab.labrpc import Network, Server, Service


class Echo:
    def shout(self, text):
        return text.upper()


net = Network()
end = net.make_end("client-1")

server = Server()
server.add_service(Service(Echo()))
net.add_server("server-1", server)

net.connect("client-1", "server-1")
net.enable("client-1", True)

end.call("Echo.shout", "hello")   # "HELLO"
```

A `Service` wraps a receiver object; every public method that takes exactly
one argument becomes a handler, addressed as `"ClassName.method"`, and its
return value is the reply. New ends start disabled and unconnected.

`ClientEnd.call` returns the reply once the handler has run, or raises
`CallFailed` when no reply arrives: the end is not enabled or not
connected, the server has been removed with `delete_server`, the network
has been shut down with `cleanup()`, or (after `reliable(False)`) the
request or reply was randomly lost. Asking for a service or method the
server does not have raises `UnknownHandlerError`; exceptions raised by a
handler reach the caller.

- `reliable(False)` adds short random delays and drops about one request
  and one reply in ten.
- `long_delays(True)` makes calls on dead connections take up to seven
  seconds to fail instead of up to a tenth of a second.
- `long_reordering(True)` holds back about two replies in three for a
  random while, so that replies can overtake one another.
- `get_count(servername)`, `get_total_count()` and `get_total_bytes()`
  report traffic statistics. `Network` can also be used as a context
  manager, which calls `cleanup()` on exit.

## Encoding values

`LabEncoder(stream).encode(value)` writes a value; a `LabDecoder` on the
same bytes returns them in order with `decode()` (raising `EOFError` at the
end) or copies the next one into an existing dataclass instance with
`decode_into(target)`. Plain data is accepted: `None`, booleans, numbers,
strings, bytes, lists, tuples, dicts, sets, enum members and dataclass
instances. Dataclass fields whose names start with an underscore are never
sent; the first time such a type is seen a warning is printed. Decoding
into a target that already holds non-default values also warns.
`error_count()` reports how many warnings have been issued. Types may be
registered ahead of time with `register` or under a chosen name with
`register_name`.

## Checking a key/value history

```python
from distlab import kvmodel

state = kvmodel.init_state()
put = kvmodel.KvInput(op=kvmodel.PUT, key="k", value="v", version=0)
ok, state = kvmodel.step(state, put, kvmodel.KvOutput(err="OK"))
```

A put is applied only when its version matches the stored one, and then
`OK` or `ErrMaybe` are the legal answers; on a mismatch only `ErrVersion`
or `ErrMaybe` are. A get is legal when it returns the current value.
`partition(history)` splits a history per key, keys sorted, and
`describe_operation(inp, out)` renders an operation as one line.

## MapReduce applications

Each module in `distlab.apps` provides `mapf(filename, contents)` returning
a list of `KeyValue` and `reducef(key, values)` returning a string:

| Application  | What it does                                                                  |
|--------------|-------------------------------------------------------------------------------|
| `wc`         | word count; words are runs of letters                                         |
| `indexer`    | for each word, the number of documents containing it and their sorted names   |
| `crash`      | fixed records per file; exits a third of the time, stalls up to 10 s another third |
| `nocrash`    | the same records as `crash`, without the failures                             |
| `early_exit` | counts files; reduce sleeps 3 s for keys containing "sherlock" or "tom"       |
| `jobcount`   | writes a marker file per map call; reduce counts the markers                  |
| `mtiming`    | reports how many map workers ran at the same time                             |
| `rtiming`    | reports how many reduce workers ran at the same time                          |

`jobcount`, `mtiming` and `rtiming` write marker files in the current
directory, and the timing applications sleep a second per call.

`distlab.mrtypes.ihash(key)` is the 31-bit FNV-1a hash used to choose a
reduce task: `ihash(key) % n_reduce`.

### Sequential runs

`mrsequential` runs an application in one process and writes one line per
distinct key, `key result`, sorted by key, to `mr-out-0` in the current
directory:

```
mrsequential wc pg-*.txt
```

The application may be given by name (`wc`) or by a file name whose stem is
the name (`wc.so`). From Python, `load_app(name)` returns the `mapf` and
`reducef` of an application, and `run(mapf, reducef, filenames, output)`
performs the run into any output file.

### Coordinator and RPC client

`make_coordinator(files, n_reduce, sockname)` starts a `Coordinator`
listening on `sockname` (by default the per-user path returned by
`coordinator_sock()`). It answers the `"Coordinator.Example"` RPC, whose
reply holds the argument plus one. `done()` reports whether the
coordinator has been closed, and `close()` stops it and removes the
socket; it is also a context manager.

`distlab.worker.call(rpcname, args, reply_type, sockname)` sends one RPC
and returns the reply, raising `ConnectionError` if the coordinator cannot
be reached, `RpcError` if it reports an error and `TypeError` if the reply
has the wrong type. `call_example(sockname)` sends the example request with
`x = 99` and prints `reply.Y 100`.

## What the package does not do

- The coordinator does not hand out or track map and reduce tasks, and
  `done()` does not reflect job progress; there is no worker loop that
  fetches tasks. The task messages in `distlab.mrtypes`
  (`RequestTask`, `RequestedTaskReply`, `ReportBackToMaster`,
  `ReportTaskToWorker`) are defined but no handler uses them. Distributed
  MapReduce jobs therefore cannot be run; use `mrsequential`.
- There is no key/value server, clerk or replicated service: `kvrpc` only
  defines the messages and `kvmodel` only checks histories.