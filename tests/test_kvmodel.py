from distlab.kvmodel import (
    GET,
    INVALID_STATE,
    PUT,
    KvInput,
    KvOutput,
    KvState,
    Operation,
    describe_operation,
    init_state,
    partition,
    step,
)


def _op(key, call):
    return Operation(KvInput(GET, key), KvOutput(), call, call + 1)


def test_partition_sorts_keys_and_keeps_order():
    b1, a1, b2 = _op("b", 0), _op("a", 1), _op("b", 2)
    groups = partition([b1, a1, b2])
    assert groups == [[a1], [b1, b2]]


def test_partition_empty():
    assert partition([]) == []


def test_partition_covers_every_operation():
    history = [_op(k, i) for i, k in enumerate(["x", "y", "x", "z", "y"])]
    groups = partition(history)
    assert sum(len(g) for g in groups) == len(history)
    for group in groups:
        assert len({op.input.key for op in group}) == 1


def test_init_state():
    assert init_state() == KvState("", 0)


def test_get_matches_value():
    state = KvState("v", 2)
    ok, nxt = step(state, KvInput(GET, "k"), KvOutput("v", 2, "OK"))
    assert ok is True
    assert nxt is state


def test_get_wrong_value():
    state = KvState("v", 2)
    ok, nxt = step(state, KvInput(GET, "k"), KvOutput("w", 2, "OK"))
    assert ok is False
    assert nxt is state


def test_put_matching_version():
    state = init_state()
    for err, legal in [("OK", True), ("ErrMaybe", True), ("ErrVersion", False)]:
        ok, nxt = step(state, KvInput(PUT, "k", "v", 0), KvOutput(err=err))
        assert ok is legal
        assert nxt == KvState("v", 1)


def test_put_wrong_version():
    state = KvState("v", 1)
    for err, legal in [("ErrVersion", True), ("ErrMaybe", True), ("OK", False)]:
        ok, nxt = step(state, KvInput(PUT, "k", "w", 5), KvOutput(err=err))
        assert ok is legal
        assert nxt is state


def test_invalid_op():
    ok, nxt = step(init_state(), KvInput(7, "k"), KvOutput())
    assert ok is False
    assert nxt == INVALID_STATE == "<invalid>"


def test_sequential_history_is_legal():
    state = init_state()
    ops = [
        (KvInput(PUT, "k", "a", 0), KvOutput(err="OK")),
        (KvInput(GET, "k"), KvOutput("a", 1, "OK")),
        (KvInput(PUT, "k", "b", 0), KvOutput(err="ErrVersion")),
        (KvInput(PUT, "k", "b", 1), KvOutput(err="OK")),
        (KvInput(GET, "k"), KvOutput("b", 2, "OK")),
    ]
    for inp, out in ops:
        ok, state = step(state, inp, out)
        assert ok
    assert state == KvState("b", 2)


def test_describe_get():
    text = describe_operation(KvInput(GET, "k"), KvOutput("v", 3, "OK"))
    assert text == "get('k') -> ('v', '3', 'OK')"


def test_describe_put():
    text = describe_operation(KvInput(PUT, "k", "v", 2), KvOutput(err="ErrVersion"))
    assert text == "put('k', 'v', '2') -> ('ErrVersion')"


def test_describe_invalid():
    assert describe_operation(KvInput(9, "k"), KvOutput()) == "<invalid>"