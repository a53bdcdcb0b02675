"""Tests for the command line entry point."""

import main


class TestMain:

    def test_plans_configured_dive(self, tmp_path, capsys):
        code = main.main(
            ["--depth", "18", "--time", "10", "--config", str(tmp_path / "none.yaml")]
        )
        out = capsys.readouterr().out

        assert code == 0
        assert "--- DIVE PLAN ---" in out
        assert "Deco:      0 min" in out
        assert "3m    3 min" in out

    def test_deco_warning(self, tmp_path, capsys):
        code = main.main(
            ["--depth", "40", "--time", "30", "--config", str(tmp_path / "none.yaml")]
        )
        out = capsys.readouterr().out
        assert code == 0
        assert "Mandatory decompression" in out

    def test_invalid_parameters_exit_code(self, tmp_path, capsys):
        code = main.main(["--fO2", "0", "--config", str(tmp_path / "none.yaml")])
        assert code == 2
        assert "--- DIVE PLAN ---" not in capsys.readouterr().out

    def test_table(self, tmp_path, capsys):
        code = main.main(
            ["--table", "--workers", "1", "--config", str(tmp_path / "none.yaml")]
        )
        out = capsys.readouterr().out
        assert code == 0
        assert "--- TABLE" in out
        assert out.count("m ") >= len(main.TABLE_DEPTHS)
