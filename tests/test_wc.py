from distlab.apps.wc import mapf, reducef
from distlab.mrtypes import KeyValue


def test_map_splits_on_non_letters():
    result = mapf("f.txt", "Hello, world! hello")
    assert result == [
        KeyValue("Hello", "1"),
        KeyValue("world", "1"),
        KeyValue("hello", "1"),
    ]


def test_map_digits_separate_words():
    assert [kv.key for kv in mapf("f", "abc123def 42")] == ["abc", "def"]


def test_map_keeps_unicode_letters():
    assert [kv.key for kv in mapf("f", "café naïve")] == ["café", "naïve"]


def test_map_ignores_filename():
    text = "one two three two"
    assert mapf("a.txt", text) == mapf("b.txt", text)


def test_map_empty_contents():
    assert mapf("f", "  ,.;123 ") == []


def test_every_value_is_one():
    assert {kv.value for kv in mapf("f", "a b c a b")} == {"1"}


def test_reduce_counts_values():
    assert reducef("word", ["1", "1", "1"]) == "3"


def test_reduce_no_values():
    assert reducef("word", []) == "0"