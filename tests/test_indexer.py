from distlab.apps.indexer import mapf, reducef
from distlab.mrtypes import KeyValue


def test_map_emits_each_word_once():
    result = mapf("doc1", "the cat, the dog")
    assert result == [
        KeyValue("the", "doc1"),
        KeyValue("cat", "doc1"),
        KeyValue("dog", "doc1"),
    ]


def test_map_values_are_document_name():
    assert {kv.value for kv in mapf("pg-x.txt", "a b a c b")} == {"pg-x.txt"}


def test_map_keys_are_distinct():
    keys = [kv.key for kv in mapf("d", "x y x y z x")]
    assert len(keys) == len(set(keys))
    assert set(keys) == {"x", "y", "z"}


def test_map_empty():
    assert mapf("d", "123 !!") == []


def test_reduce_sorts_and_counts():
    assert reducef("w", ["b", "a", "c"]) == "3 a,b,c"


def test_reduce_does_not_change_input():
    values = ["z", "y"]
    reducef("w", values)
    assert values == ["z", "y"]