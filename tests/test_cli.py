import json

from crucible.cli import main


def _write(tmp_path, name, text):
    p = tmp_path / name
    p.write_text(text)
    return str(p)


def test_default_is_part_one(tmp_path, capsys, lava_pool_text):
    path = _write(tmp_path, "input.txt", lava_pool_text)
    assert main([path]) == 0
    assert capsys.readouterr().out.strip() == "102"


def test_part_two_and_explicit_runs(tmp_path, capsys, ultra_corridor_text):
    path = _write(tmp_path, "input.txt", ultra_corridor_text)
    assert main(["--part", "2", path]) == 0
    assert capsys.readouterr().out.strip() == "71"
    assert main(["--min-run", "4", "--max-run", "10", "--early-exit", path]) == 0
    assert capsys.readouterr().out.strip() == "71"


def test_json_map_supplies_run_limits(tmp_path, capsys, lava_pool_text):
    path = _write(tmp_path, "m.json", json.dumps({"rows": lava_pool_text.split(), "min_run": 4, "max_run": 10}))
    assert main([path]) == 0
    assert capsys.readouterr().out.strip() == "94"


def test_show_path(tmp_path, capsys):
    path = _write(tmp_path, "input.txt", "11\n11\n")
    assert main(["--show-path", path]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "2"
    cells = lines[1].split()
    assert cells[0] == "0,0" and cells[-1] == "1,1"


def test_no_path_exit_status(tmp_path, capsys):
    path = _write(tmp_path, "input.txt", "5\n")
    assert main(["--min-run", "1", path]) == 1
    assert capsys.readouterr().out.strip() == "no path"


def test_errors_exit_status(tmp_path, capsys):
    bad = _write(tmp_path, "input.txt", "12\n3\n")
    assert main([bad]) == 2
    assert "ragged" in capsys.readouterr().err

    good = _write(tmp_path, "ok.txt", "12\n34\n")
    assert main(["--min-run", "5", "--max-run", "2", good]) == 2
    assert "min_run" in capsys.readouterr().err

    assert main([str(tmp_path / "missing.txt")]) == 2


def test_malformed_map_exit_status(tmp_path, capsys):
    for bad in ({"rows": [123, 456]}, {"rows": ["12"], "min_run": "x"},
                {"rows": ["12"], "start": ["a", 0]}, {"cells": [[1.9, 2.7]]}):
        path = _write(tmp_path, "bad.json", json.dumps(bad))
        assert main([path]) == 2
        assert capsys.readouterr().err.startswith("error:")


def test_bad_log_level_exit_status(tmp_path, capsys):
    path = _write(tmp_path, "ok.txt", "12\n34\n")
    assert main(["--log-level", "LOUD", path]) == 2
    assert "log_level" in capsys.readouterr().err
