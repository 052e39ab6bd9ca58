import os

import pytest

import cyclochron.__main__


def _missing_config (tmp_path) -> str:

	return os.path.join(str(tmp_path), "missing.yaml")


def test_generate_prints_rhythms (tmp_path, capsys: pytest.CaptureFixture) -> None:

	code = cyclochron.__main__.main(["--config", _missing_config(tmp_path), "generate", "--steps", "8", "--seed", "1", "--count", "3"])

	lines = capsys.readouterr().out.splitlines()

	assert code == 0
	assert len(lines) == 3
	assert all(line.startswith("|") and "axis:" in line for line in lines)


def test_generate_is_repeatable (tmp_path, capsys: pytest.CaptureFixture) -> None:

	args = ["--config", _missing_config(tmp_path), "generate", "--steps", "12", "--seed", "42"]

	cyclochron.__main__.main(args)
	first = capsys.readouterr().out

	cyclochron.__main__.main(args)
	second = capsys.readouterr().out

	assert first == second


def test_generate_reads_config (tmp_path, capsys: pytest.CaptureFixture) -> None:

	path = tmp_path / "cyclochron.yaml"
	path.write_text("generator:\n  position_count: 5\n")

	cyclochron.__main__.main(["--config", str(path), "generate", "--seed", "2"])

	out = capsys.readouterr().out

	assert out.startswith("|")
	assert out.split("  ")[0].count("X") + out.split("  ")[0].count(".") == 5


def test_generate_unsatisfiable_returns_error (tmp_path, capsys: pytest.CaptureFixture) -> None:

	code = cyclochron.__main__.main([
		"--config", _missing_config(tmp_path),
		"generate", "--steps", "7", "--max-rest", "1", "--max-active", "0"
	])

	assert code == 1
	assert capsys.readouterr().out == ""


def test_invalid_settings_return_two (tmp_path) -> None:

	assert cyclochron.__main__.main(["--config", _missing_config(tmp_path), "generate", "--steps", "300"]) == 2


def test_unknown_config_key_returns_two (tmp_path) -> None:

	path = tmp_path / "bad.yaml"
	path.write_text("playback:\n  tempo: 100\n")

	assert cyclochron.__main__.main(["--config", str(path), "generate"]) == 2
