import math

import pytest

from summarize_proof_timings import compare, main, per_proof_stats, read_timings


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_per_proof_stats_counts_failures(tmp_path):
    p = write(tmp_path / "t.csv", "a,1.0,3.0\nb,,2.0,\n")
    stats = per_proof_stats(read_timings(p))

    assert stats.loc["a", "runs"] == 2
    assert stats.loc["a", "failures"] == 0
    assert stats.loc["a", "mean"] == pytest.approx(2.0)
    assert stats.loc["a", "min"] == 1.0
    assert stats.loc["a", "max"] == 3.0
    assert stats.loc["b", "runs"] == 3
    assert stats.loc["b", "failures"] == 2
    assert stats.loc["b", "mean"] == pytest.approx(2.0)
    assert math.isnan(stats.loc["b", "std"])


def test_compare_only_shared_proofs(tmp_path):
    a = per_proof_stats(read_timings(write(tmp_path / "a.csv", "x,1.0,1.0\ny,2.0\n")))
    b = per_proof_stats(read_timings(write(tmp_path / "b.csv", "x,1.5,2.5\nz,9.0\n")))

    summary = compare(a, b, "a", "b")

    assert list(summary.index) == ["x"]
    assert summary.loc["x", "delta(b-a)"] == pytest.approx(1.0)


def test_main_prints_table(tmp_path, capsys):
    main(write(tmp_path / "t.csv", "aws_array_eq,0.5,0.7\n"))
    out = capsys.readouterr().out
    assert "aws_array_eq" in out
    assert "mean" in out


def test_no_shared_proofs_exits_2(tmp_path):
    a = write(tmp_path / "a.csv", "x,1.0\n")
    b = write(tmp_path / "b.csv", "y,1.0\n")
    with pytest.raises(SystemExit) as exc_info:
        main(a, b)
    assert exc_info.value.code == 2
