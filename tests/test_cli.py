"""
Tests for the command line front end, using the real TLSH fingerprint.
"""
import csv

import pytest

from conftest import make_zip, sample_text
from fuzzplag.cli import CLIApplication


def write_config(tmp_path, archive, extra: str = "") -> str:
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        f"input:\n"
        f"  path: {archive}\n"
        f"output:\n"
        f"  path: {tmp_path / 'result.csv'}\n"
        f"smallfile-threshold: 256\n"
        f"parallel: 2\n"
        f"distance-threshold: 0\n"
        f"{extra}",
        encoding="utf-8"
    )
    return str(cfg)


@pytest.fixture
def course_archive(tmp_path):
    shared = sample_text(21, 2048)
    root = tmp_path / "course.zip"
    make_zip({
        "alice123456.zip": make_zip({"main.c": shared}),
        "bob654321xx.zip": make_zip({"main.c": shared}),
        "carol98765.zip": make_zip({"main.c": sample_text(22, 2048)}),
    }, root)
    return root


class TestCLIApplication:

    def test_writes_csv_report(self, tmp_path, course_archive, capsys):
        CLIApplication().run(["-c", write_config(tmp_path, course_archive)])

        with open(tmp_path / "result.csv", newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == ["Source", "Dest", "Distance"]
        assert rows[1:] == [
            ["alice123456.zip:main.c", "bob654321xx.zip:main.c", "0"],
            ["bob654321xx.zip:main.c", "alice123456.zip:main.c", "0"],
        ]
        assert "Found 2 suspect pairs" in capsys.readouterr().out

    def test_command_line_overrides_config(self, tmp_path, course_archive):
        report = tmp_path / "table.txt"

        CLIApplication().run([
            "-c", write_config(tmp_path, course_archive),
            "-o", str(report), "--format", "text", "-j", "1", "-q"
        ])

        lines = report.read_text(encoding="utf-8").splitlines()
        assert lines[0].split() == ["Source", "Dest", "Distance"]
        assert len(lines) == 4
        assert not (tmp_path / "result.csv").exists()

    def test_verbose_prints_statistics(self, tmp_path, course_archive, capsys):
        CLIApplication().run(["-c", write_config(tmp_path, course_archive), "-v"])

        out = capsys.readouterr().out
        assert "Hashing" in out
        assert "Completed" in out

    def test_missing_config_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            CLIApplication().run(["-c", str(tmp_path / "absent.yaml")])

        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().err

    def test_missing_archive_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            CLIApplication().run(["-c", write_config(tmp_path, tmp_path / "absent.zip")])

        assert exc.value.code == 1

    def test_bad_regex_exits(self, tmp_path, course_archive, capsys):
        cfg = write_config(tmp_path, course_archive, "accept-patterns: ['(unclosed']\n")

        with pytest.raises(SystemExit) as exc:
            CLIApplication().run(["-c", cfg])

        assert exc.value.code == 1
        assert "Error compiling regex" in capsys.readouterr().err

    def test_invalid_format_rejected_by_argparse(self, tmp_path, course_archive):
        with pytest.raises(SystemExit) as exc:
            CLIApplication().run(["-c", write_config(tmp_path, course_archive), "--format", "xml"])

        assert exc.value.code == 2
