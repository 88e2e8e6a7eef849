import json

import click.testing
import mido
import pytest
import yaml

import etherdaw
import etherdaw.__main__


@pytest.fixture
def runner () -> click.testing.CliRunner:

	return click.testing.CliRunner()


@pytest.fixture
def score_file (tmp_path, arpeggio_document: dict) -> str:

	"""The arpeggio score written as YAML."""

	path = tmp_path / "arp.yaml"
	path.write_text(yaml.safe_dump(arpeggio_document))

	return str(path)


def test_compile_prints_stats (runner: click.testing.CliRunner, score_file: str) -> None:

	"""Compiling reports sections, notes and duration."""

	result = runner.invoke(etherdaw.__main__.main, ["compile", score_file, "--seed", "1"])

	assert result.exit_code == 0, result.output
	assert "Sections:    1 (main)" in result.output
	assert "Notes:       16" in result.output
	assert "Duration:    8.00s" in result.output
	assert "Instruments: piano" in result.output


def test_compile_writes_midi (tmp_path, runner: click.testing.CliRunner, score_file: str) -> None:

	"""``--output`` writes a MIDI file."""

	output = tmp_path / "arp.mid"

	result = runner.invoke(etherdaw.__main__.main, ["compile", score_file, "-o", str(output), "--tempo", "60"])

	assert result.exit_code == 0, result.output
	assert "Duration:    16.00s" in result.output
	assert len(mido.MidiFile(str(output)).tracks) == 2


def test_info (runner: click.testing.CliRunner, score_file: str) -> None:

	"""Info summarises without compiling."""

	result = runner.invoke(etherdaw.__main__.main, ["info", score_file])

	assert result.exit_code == 0, result.output
	assert "Tempo 120 BPM, C major, 4/4" in result.output
	assert "main: 4 bars (piano)" in result.output
	assert "Patterns: arp" in result.output


def test_validate_ok (runner: click.testing.CliRunner, score_file: str) -> None:

	"""A consistent score validates."""

	result = runner.invoke(etherdaw.__main__.main, ["validate", score_file])

	assert result.exit_code == 0
	assert result.output.strip() == "OK"


def test_validate_lists_problems (tmp_path, runner: click.testing.CliRunner, arpeggio_document: dict) -> None:

	"""Problems are listed and the exit status is non-zero."""

	arpeggio_document["arrangement"].append("outro")
	path = tmp_path / "broken.json"
	path.write_text(json.dumps(arpeggio_document))

	result = runner.invoke(etherdaw.__main__.main, ["validate", str(path)])

	assert result.exit_code == 1
	assert 'Arrangement references unknown section: "outro"' in result.output


def test_bad_score_is_reported (tmp_path, runner: click.testing.CliRunner) -> None:

	"""A score with the wrong shape fails with a message, not a traceback."""

	path = tmp_path / "bad.yaml"
	path.write_text("settings:\n  tempo: 120\n")

	result = runner.invoke(etherdaw.__main__.main, ["compile", str(path)])

	assert result.exit_code == 1
	assert "arrangement is required" in result.output
	assert not isinstance(result.exception, ValueError)


def test_version (runner: click.testing.CliRunner) -> None:

	result = runner.invoke(etherdaw.__main__.main, ["--version"])

	assert result.exit_code == 0
	assert etherdaw.__version__ in result.output
