from __future__ import annotations

import json

import pytest

from arrayconf.cli import main


def test_default_run_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--no-color"]) == 0
    out = capsys.readouterr().out
    assert "arrayconf array types test" in out
    assert "-- Integer arrays --" in out
    assert "72/72 checks passed" in out
    assert out.rstrip().endswith("Done.")


def test_json_output_is_clean(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--json", "--only", "enums"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert [s["name"] for s in doc["sections"]] == ["enums"]
    names = [r["actual"] for r in doc["sections"][0]["results"]]
    assert names == [0, 1, 2, 3]


def test_only_keeps_declared_order(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--json", "--only", "float-ops", "--only", "integers"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert [s["name"] for s in doc["sections"]] == ["integers", "float-ops"]


def test_list(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list"]) == 0
    out = capsys.readouterr().out
    assert "heap-structs" in out and "dispatch" in out


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    assert "llvmlite" in capsys.readouterr().out


def test_unknown_scenario_exits_two(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--only", "nope"]) == 2
    assert "CD0004" in capsys.readouterr().err


def test_unknown_arch_exits_two(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--target-arch", "pdp11"]) == 2
    assert "CD0005" in capsys.readouterr().err


def test_bad_arguments_exit_two() -> None:
    assert main(["--backend", "qbe"]) == 2


def test_llvm_backend_dump(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--backend", "llvm", "--dump-ll", "--only", "integers", "--no-color"]) == 0
    out = capsys.readouterr().out
    assert "[3 x i16]" in out
    assert "33/33 checks passed" in out


def test_dump_ll_without_llvm_backend(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--dump-ll", "--only", "booleans", "--json"]) == 0
    assert "no effect" in capsys.readouterr().err


def test_narrow_target(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--target-arch", "386", "--only", "integers", "--json"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["summary"]["failed"] == 0
