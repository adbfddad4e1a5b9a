import os
import shutil
import socket
import tempfile

import pytest

from distlab.coordinator import Coordinator, make_coordinator
from distlab.mrtypes import ExampleArgs, ExampleReply, _read_frame, _write_frame


@pytest.fixture
def sockname():
    d = tempfile.mkdtemp(prefix="mr")
    yield os.path.join(d, "c.sock")
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def coordinator(sockname):
    c = make_coordinator(["pg-a.txt", "pg-b.txt"], 10, sockname)
    yield c
    c.close()


def _rpc(path, request):
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.connect(path)
        with sock.makefile("rwb") as stream:
            _write_frame(stream, request)
            return _read_frame(stream)


def test_example_adds_one_directly(coordinator):
    assert coordinator.example(ExampleArgs(x=99)) == ExampleReply(y=100)


def test_coordinator_keeps_job_description(coordinator):
    assert coordinator.files == ["pg-a.txt", "pg-b.txt"]
    assert coordinator.n_reduce == 10


def test_example_over_socket(coordinator, sockname):
    status, reply = _rpc(sockname, ("Coordinator.Example", ExampleArgs(x=99)))
    assert status == "ok"
    assert reply == ExampleReply(y=100)


def test_unknown_method_is_reported(coordinator, sockname):
    status, message = _rpc(sockname, ("Coordinator.Missing", ExampleArgs(x=1)))
    assert status == "err"
    assert "Coordinator.Missing" in message


def test_unknown_service_is_reported(coordinator, sockname):
    status, message = _rpc(sockname, ("Master.Example", ExampleArgs(x=1)))
    assert status == "err"
    assert "Master.Example" in message


def test_non_handler_methods_are_not_callable(coordinator, sockname):
    status, _ = _rpc(sockname, ("Coordinator.Done", ExampleArgs()))
    assert status == "err"
    assert coordinator.done() is False


def test_handler_failure_is_reported(coordinator, sockname):
    status, message = _rpc(sockname, ("Coordinator.Example", "not args"))
    assert status == "err"
    assert message


def test_malformed_request(coordinator, sockname):
    status, _ = _rpc(sockname, ["Coordinator.Example"])
    assert status == "err"


def test_several_requests_on_one_connection(coordinator, sockname):
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
        sock.connect(sockname)
        with sock.makefile("rwb") as stream:
            results = []
            for x in range(5):
                _write_frame(stream, ("Coordinator.Example", ExampleArgs(x=x)))
                results.append(_read_frame(stream)[1].y)
    assert results == [x + 1 for x in range(5)]


def test_done_and_close(sockname):
    c = Coordinator([], 3, sockname)
    assert os.path.exists(sockname)
    assert c.done() is False
    c.close()
    assert c.done() is True
    assert not os.path.exists(sockname)
    c.close()
    assert c.done() is True


def test_stale_socket_file_is_replaced(sockname):
    with open(sockname, "w") as f:
        f.write("stale")
    with Coordinator(["x"], 1, sockname) as c:
        status, reply = _rpc(sockname, ("Coordinator.Example", ExampleArgs(x=4)))
        assert status == "ok"
        assert reply.y == 5
    assert c.done() is True