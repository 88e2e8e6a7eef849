"""Drum step sequencing.

Each line is a string of steps, one character per step::

	"x..."   hit on the first step
	"X..."   accented hit
	">..."   accented hit (same as X)
	"...."   rest

Drum notes are ``drum:<name>@<kit>`` tokens; renderers map them to sounds.
Octave and transpose offsets never apply to them.
"""

import typing

import etherdaw.constants.velocity
import etherdaw.notation
import etherdaw.patterns


BEATS_PER_BAR = 4.0


def step_velocity (char: str, velocity: float) -> typing.Optional[float]:

	"""Return the velocity of one step character, or None for a rest."""

	if char == "x":
		return velocity * etherdaw.constants.velocity.DRUM_HIT_SCALE

	if char in ("X", ">"):
		return etherdaw.constants.velocity.DRUM_ACCENT_VELOCITY

	return None


def _line_hits (drum: str, line: str, kit: str, step: float, velocity: float) -> typing.List[etherdaw.patterns.ExpandedNote]:

	hits: typing.List[etherdaw.patterns.ExpandedNote] = []

	for index, char in enumerate(line):

		hit_velocity = step_velocity(char, velocity)

		if hit_velocity is None:
			continue

		hits.append(etherdaw.patterns.ExpandedNote(
			pitch = etherdaw.notation.drum_pitch(drum, kit),
			start = index * step,
			duration = step,
			velocity = hit_velocity,
		))

	return hits


def expand_drums (pattern: etherdaw.patterns.DrumsPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""
	Expand a drum pattern.

	With ``lines`` the length is the longest line (or ``bars``).  Otherwise
	the legacy ``steps`` line plays the kick and ``hits`` are placed at
	their drum times; the length is ``bars``, else the ``steps`` line, else
	one step past the last hit with a one-bar minimum.
	"""

	step = etherdaw.notation.parse_duration_string(pattern.step)
	expanded = etherdaw.patterns.ExpandedPattern()

	if pattern.lines:

		longest = 0

		for drum, line in pattern.lines.items():
			expanded.notes.extend(_line_hits(drum, line, pattern.kit, step, ctx.velocity))
			longest = max(longest, len(line))

		if pattern.bars is not None:
			expanded.total_beats = pattern.bars * BEATS_PER_BAR
		else:
			expanded.total_beats = longest * step

		return expanded

	if pattern.steps:
		expanded.notes.extend(_line_hits("kick", pattern.steps, pattern.kit, step, ctx.velocity))

	hit_times = [etherdaw.notation.parse_drum_time(hit.time) for hit in pattern.hits]

	for hit, start in zip(pattern.hits, hit_times):
		expanded.notes.append(etherdaw.patterns.ExpandedNote(
			pitch = etherdaw.notation.drum_pitch(hit.drum, pattern.kit),
			start = start,
			duration = step,
			velocity = hit.velocity if hit.velocity is not None else ctx.velocity,
		))

	if pattern.bars is not None:
		expanded.total_beats = pattern.bars * BEATS_PER_BAR
	elif pattern.steps:
		expanded.total_beats = len(pattern.steps) * step
	elif hit_times:
		expanded.total_beats = max(max(hit_times) + step, BEATS_PER_BAR)

	return expanded
