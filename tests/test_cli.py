# tests/test_cli.py
from __future__ import annotations

import re

import pytest

from divgrid import cli

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text):
    return ANSI_RE.sub("", text)


@pytest.fixture
def run_cli(monkeypatch, capsys):
    """Call cli.main() without touching global streams or logging handlers."""
    monkeypatch.setattr(cli, "colorama_init", lambda **kw: None)
    monkeypatch.setattr(cli, "_configure_logging", lambda debug: None)

    def _run(*argv):
        rc = cli.main(list(argv))
        out, err = capsys.readouterr()
        return rc, strip_ansi(out), strip_ansi(err)

    return _run


def _offline_profile(workspace):
    pdir = workspace / "profiles"
    pdir.mkdir(parents=True, exist_ok=True)
    (pdir / "offline.toml").write_text(
        '[PROFILE]\ndescription = "No network"\n[OEIS]\nALLOW_NETWORK = false\n',
        encoding="utf-8",
    )


def test_grid(run_cli):
    rc, out, _ = run_cli("grid", "12", "--rows", "3", "--columns", "20")
    assert rc == 0
    lines = out.splitlines()
    assert lines[0] == "key 12, level 1"
    assert "1 | p^pop^oop#poo^popoo" in lines
    assert "3 | o  o  o  #  o  o  o" in lines


def test_grid_accepts_expressions_and_clamps_level(run_cli):
    rc, out, _ = run_cli("grid", "2**5", "--level", "0", "--rows", "1", "--columns", "10")
    assert rc == 0
    assert out.splitlines()[0] == "key 32, level 1"
    assert "powers of two: 32" in out


def test_grid_prime_key(run_cli):
    rc, out, _ = run_cli("grid", "7", "--rows", "1", "--columns", "20")
    assert rc == 0
    assert out.splitlines()[1] == "likely primes: -2, 2, 3, 5, 7, 11, 13"
    assert "1 | p^o^pp^po#^oopopoo^" in out


def test_run_collatz_finishes(run_cli):
    rc, out, _ = run_cli("run", "collatz", "--key", "1")
    assert rc == 0
    assert out.splitlines()[1:] == ["i0  4", "i1  2", "i2  1", "finished"]


def test_run_pell_stops_after_steps(run_cli):
    rc, out, _ = run_cli("run", "pell", "--steps", "4")
    assert rc == 0
    lines = out.splitlines()
    assert lines[0].startswith("Pell")
    assert "https://oeis.org/A000129" in lines[0]
    assert lines[1:5] == ["i0  0", "i1  1", "i2  2", "i3  5"]
    assert lines[-1] == "stopped after 4 values"


def test_run_oeis_from_catalog(run_cli):
    rc, out, _ = run_cli("run", "oeis", "--oeis", "A000045", "--steps", "3")
    assert rc == 0
    assert out.splitlines()[1:4] == ["i0  0", "i1  1", "i2  1"]


def test_run_oeis_offline_miss(run_cli, workspace):
    _offline_profile(workspace)
    rc, out, _ = run_cli("--profile", "offline", "run", "oeis", "--oeis", "A999999")
    assert rc == 1
    assert "unavailable" in out


def test_run_custom_list_invalid(run_cli):
    rc, out, _ = run_cli("run", "custom", "--list", "1, x")
    assert rc == 2
    assert out.splitlines()[-1].startswith("invalid")


def test_run_custom_list(run_cli):
    rc, out, _ = run_cli("run", "custom", "--list", "3, 1, 4")
    assert rc == 0
    assert out.splitlines()[1:] == ["i0  3", "i1  1", "i2  4", "finished"]


def test_run_unknown_variant(run_cli):
    rc, _, err = run_cli("run", "tribonacci")
    assert rc == 2
    assert "Error:" in err


def test_info(run_cli):
    rc, out, _ = run_cli("info", "360")
    assert rc == 0
    assert "Prime (trial):        No" in out
    assert "Divisors (24):" in out
    assert "2^3 × 3^2 × 5" in out


def test_scan(run_cli):
    rc, out, _ = run_cli("scan", "12", "--level", "4")
    assert (rc, out.strip()) == (0, "level 6")
    rc, out, _ = run_cli("scan", "12", "--level", "6")
    assert out.startswith("level 12 (reached |key|")


def test_variants(run_cli):
    rc, out, _ = run_cli("variants")
    assert rc == 0
    for tag in ("collatz", "collatz-sqrt", "pell", "fibonacci", "time", "oeis", "custom"):
        assert f"  {tag} " in out
    assert "https://oeis.org/A037992" in out
    assert "offline OEIS ids: A000040, A000045, A000129, A000142" in out


def test_bad_key(run_cli):
    rc, _, err = run_cli("grid", "twelve")
    assert rc == 2
    assert err.startswith("Error:")


def test_unknown_profile(run_cli):
    rc, _, err = run_cli("--profile", "nope", "variants")
    assert rc == 2
    assert "Unknown profile" in err


def test_profile_is_remembered(run_cli, workspace):
    _offline_profile(workspace)
    run_cli("--profile", "offline", "variants")
    rc, out, _ = run_cli("profiles")
    assert rc == 0
    assert "* offline" in out
    assert "  default" in out


def test_init_and_where(run_cli, workspace):
    rc, out, _ = run_cli("init")
    assert rc == 0
    assert "Workspace ready at" in out
    assert (workspace / "profiles" / "default.toml").is_file()

    rc, out, _ = run_cli("where")
    assert rc == 0
    assert str(workspace.resolve()) in out


def test_init_overwrite_needs_dev_flag(run_cli, monkeypatch):
    monkeypatch.delenv("DIVGRID_DEV", raising=False)
    rc, out, _ = run_cli("init", "--overwrite")
    assert rc == 2
    assert "Refusing" in out
