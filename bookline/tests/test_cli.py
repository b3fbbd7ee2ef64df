"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main


class TestCLI:
    """Tests for CLI commands."""

    def test_lines(self, capsys):
        main(["lines", "scotch-gambit"])

        out = capsys.readouterr().out
        assert out.startswith("Scotch Gambit:")
        assert "e4 e5 Nf3 Nc6 d4 exd4 Bc4 Be7 Nxd4 d6 Nxc6 bxc6 O-O" in out

    def test_odds_at_first_branch(self, capsys):
        main(["odds", "scotch-gambit"])

        out = capsys.readouterr().out
        assert "Bc5" in out
        assert "45.0%" in out

    def test_odds_off_book(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["odds", "scotch-gambit", "d4"])

        assert exc_info.value.code == 1
        assert "Not a book line" in capsys.readouterr().out

    def test_validate_ok(self, tmp_path, capsys, sample_raw_tree):
        path = tmp_path / "latvian.json"
        path.write_text(json.dumps(sample_raw_tree), encoding="utf-8")

        main(["validate", str(path)])

        out = capsys.readouterr().out
        assert "Lines: 3" in out
        assert out.rstrip().endswith("OK")

    def test_validate_errors(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"move": None, "children": {"e4": 5}}), encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main(["validate", str(path)])

        assert exc_info.value.code == 1
        assert "root.children.e4" in capsys.readouterr().out

    def test_validate_warns_on_non_canonical_san(self, tmp_path, capsys):
        path = tmp_path / "checks.json"
        path.write_text(
            json.dumps({"move": None, "children": {"e4": {"children": {"e5": {"children": {"Nf3+": {}}}}}}}),
            encoding="utf-8",
        )

        main(["validate", str(path)])

        out = capsys.readouterr().out
        assert "not legal SAN: e4 e5 Nf3+" in out

    def test_unknown_opening(self, capsys):
        with pytest.raises(SystemExit):
            main(["lines", "kings-gambit"])

        assert "Unknown opening source" in capsys.readouterr().out

    def test_drill_session(self, tmp_path, capsys, monkeypatch, sample_raw_tree):
        """A scripted drill toggles, resets and plays."""
        path = tmp_path / "latvian.json"
        path.write_text(json.dumps(sample_raw_tree), encoding="utf-8")

        inputs = iter(["toggle Be7", "reset", "Nxe5", "quit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))

        main([
            "drill", str(path),
            "--prefix", "e4", "e5", "Nf3",
            "--seed", "1",
            "--delay", "0",
        ])

        out = capsys.readouterr().out
        assert "[ ] Be7" in out
        assert "Opponent played f5." in out
        assert "Opponent played Qf6." in out or "Opponent played Nc6." in out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])

    def test_drill_refuses_illegal_book_line(self, tmp_path, capsys, monkeypatch):
        """A tree with an impossible reply is refused before the drill starts."""
        path = tmp_path / "broken.json"
        path.write_text(
            json.dumps({"move": None, "children": {"e4": {"children": {"Qxh7": {"children": {"Nf3": {}}}}}}}),
            encoding="utf-8",
        )
        monkeypatch.setattr("builtins.input", lambda prompt="": "Nf3")

        with pytest.raises(SystemExit) as exc_info:
            main(["drill", str(path), "--prefix", "e4", "--delay", "0"])

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Book lines are not legal SAN" in out
        assert "e4 Qxh7 Nf3" in out
        assert "Drilling" not in out
