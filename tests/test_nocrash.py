from distlab.apps.nocrash import mapf, reducef
from distlab.mrtypes import KeyValue


def test_map_describes_file():
    assert mapf("in.txt", "hello") == [
        KeyValue("a", "in.txt"),
        KeyValue("b", str(len("in.txt"))),
        KeyValue("c", str(len("hello"))),
        KeyValue("d", "xyzzy"),
    ]


def test_map_values_pinned():
    assert [kv.value for kv in mapf("x", "yz")] == ["x", "1", "2", "xyzzy"]
    assert [kv.key for kv in mapf("x", "yz")] == ["a", "b", "c", "d"]


def test_map_counts_bytes():
    assert mapf("f", "ü")[2] == KeyValue("c", "2")


def test_reduce_sorts_values():
    assert reducef("a", ["pg-b.txt", "pg-a.txt"]) == "pg-a.txt pg-b.txt"


def test_reduce_single_value():
    assert reducef("d", ["xyzzy"]) == "xyzzy"