import pytest

from distlab.apps import indexer, wc
from distlab.mrsequential import load_app, main, run


def _write_inputs(tmp_path):
    first = tmp_path / "in-1.txt"
    second = tmp_path / "in-2.txt"
    first.write_text("a b a")
    second.write_text("b c")
    return [first, second]


def test_load_app_by_plugin_name():
    assert load_app("wc.so") == (wc.mapf, wc.reducef)


def test_load_app_by_path():
    assert load_app("../mrapps/indexer.so") == (indexer.mapf, indexer.reducef)


def test_load_app_bare_name():
    assert load_app("wc") == (wc.mapf, wc.reducef)


def test_load_app_unknown():
    with pytest.raises(ValueError, match="cannot load plugin"):
        load_app("nosuchapp.so")


def test_run_word_count(tmp_path):
    out = tmp_path / "out"
    run(wc.mapf, wc.reducef, _write_inputs(tmp_path), out)
    assert out.read_text() == "a 2\nb 2\nc 1\n"


def test_run_output_sorted_and_complete(tmp_path):
    text = "the quick brown fox jumps over the lazy dog the end"
    src = tmp_path / "in.txt"
    src.write_text(text)
    out = tmp_path / "out"
    run(wc.mapf, wc.reducef, [src], out)
    lines = out.read_text().splitlines()
    keys = [line.split(" ")[0] for line in lines]
    assert keys == sorted(set(text.split()))
    assert sum(int(line.split(" ")[1]) for line in lines) == len(text.split())


def test_run_indexer(tmp_path):
    paths = _write_inputs(tmp_path)
    out = tmp_path / "out"
    run(indexer.mapf, indexer.reducef, paths, out)
    lines = out.read_text().splitlines()
    assert lines[0] == f"a 1 {paths[0]}"
    assert lines[1] == f"b 2 {paths[0]},{paths[1]}"


def test_run_missing_file(tmp_path):
    with pytest.raises(OSError):
        run(wc.mapf, wc.reducef, [tmp_path / "missing.txt"], tmp_path / "out")


def test_main_usage(capsys):
    assert main(["wc.so"]) == 1
    assert "Usage: mrsequential" in capsys.readouterr().err


def test_main_writes_output(tmp_path, monkeypatch):
    paths = _write_inputs(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert main(["wc.so", *map(str, paths)]) == 0
    expected = tmp_path / "expected"
    run(wc.mapf, wc.reducef, paths, expected)
    assert (tmp_path / "mr-out-0").read_text() == expected.read_text()


def test_main_missing_input(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["wc.so", "missing.txt"]) == 1
    assert "cannot open missing.txt" in capsys.readouterr().err


def test_main_unknown_app(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["bogus.so", "x.txt"]) == 1
    assert "cannot load plugin bogus.so" in capsys.readouterr().err