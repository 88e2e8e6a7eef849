import logging
import sys

import click
import yaml

import etherdaw
import etherdaw.compiler
import etherdaw.midi_export
import etherdaw.score


logger = logging.getLogger(__name__)


def _load (path: str) -> etherdaw.score.Score:

	try:
		return etherdaw.score.load_score_file(path)
	except (OSError, ValueError, yaml.YAMLError) as e:
		raise click.ClickException(f"Could not load {path}: {e}")


def _print_warnings (warnings: list) -> None:

	for warning in warnings:
		click.echo(f"warning: {warning}", err=True)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=etherdaw.__version__, prog_name="etherdaw")
@click.option("--verbose", "-v", is_flag=True, help="Log compile progress.")
def main (verbose: bool) -> None:

	"""EtherDAW: compile declarative scores into timed note events."""

	logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("score_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", default=None, metavar="PATH", help="Write a Standard MIDI File.")
@click.option("--seed", type=int, default=None, help="Seed for every random choice.")
@click.option("--start", "start_section", default=None, help="First section to compile.")
@click.option("--end", "end_section", default=None, help="Last section to compile.")
@click.option("--tempo", type=click.FloatRange(min=1.0), default=None, help="Override the global tempo in BPM.")
@click.option("--key", default=None, help="Override the global key, e.g. 'D minor'.")
def compile (
	score_path: str,
	output: str,
	seed: int,
	start_section: str,
	end_section: str,
	tempo: float,
	key: str
) -> None:

	"""Compile a score and print its statistics."""

	score = _load(score_path)

	options = etherdaw.compiler.CompileOptions(
		start_section = start_section,
		end_section = end_section,
		tempo = tempo,
		key = key,
		seed = seed,
	)

	try:
		result = etherdaw.compiler.compile(score, options)
	except ValueError as e:
		raise click.ClickException(str(e))

	stats = result.stats

	click.echo(f"Sections:    {stats.total_sections} ({', '.join(stats.sections)})")
	click.echo(f"Bars:        {stats.total_bars:g}")
	click.echo(f"Notes:       {stats.total_notes}")
	click.echo(f"Duration:    {stats.duration_seconds:.2f}s")
	click.echo(f"Instruments: {', '.join(stats.instruments)}")

	_print_warnings(result.warnings)

	if output:
		etherdaw.midi_export.save_midi(result.timeline, output)
		click.echo(f"Wrote {output}")


@main.command()
@click.argument("score_path", type=click.Path(exists=True, dir_okay=False))
def info (score_path: str) -> None:

	"""Summarise a score without compiling it."""

	score = _load(score_path)
	analysis = etherdaw.compiler.analyze(score)

	if score.settings.title:
		click.echo(score.settings.title)

	click.echo(f"Tempo {score.settings.tempo:g} BPM, {score.settings.key}, {score.settings.time_signature}")
	click.echo(f"{analysis.total_sections} sections, {analysis.total_bars:g} bars, about {analysis.duration_seconds:.1f}s")

	for section in analysis.sections:
		click.echo(f"  {section.name}: {section.bars:g} bars ({', '.join(section.instruments)})")

	click.echo(f"Patterns: {', '.join(analysis.patterns)}")


@main.command()
@click.argument("score_path", type=click.Path(exists=True, dir_okay=False))
def validate (score_path: str) -> None:

	"""Check a score for unknown section, pattern and instrument references."""

	problems = etherdaw.compiler.validate_references(_load(score_path))

	for problem in problems:
		click.echo(problem)

	if problems:
		sys.exit(1)

	click.echo("OK")


if __name__ == "__main__":
	main()
