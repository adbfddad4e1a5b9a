from unittest import mock

import pytest

from distlab.apps.early_exit import mapf, reducef
from distlab.mrtypes import KeyValue


def test_map_emits_filename():
    assert mapf("pg-x.txt", "anything at all") == [KeyValue("pg-x.txt", "1")]


@pytest.mark.parametrize("key", ["pg-sherlock_holmes.txt", "pg-tom_sawyer.txt"])
def test_reduce_sleeps_for_slow_keys(key):
    with mock.patch("time.sleep") as sleep_mock:
        result = reducef(key, ["1"])
    sleep_mock.assert_called_once_with(3)
    assert result == "1"


def test_reduce_fast_key():
    with mock.patch("time.sleep") as sleep_mock:
        result = reducef("pg-grimm.txt", ["1", "1"])
    assert sleep_mock.call_count == 0
    assert result == "2"