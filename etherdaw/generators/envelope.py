import dataclasses
import logging
import math
import typing

import etherdaw.constants.velocity
import etherdaw.diagnostics
import etherdaw.patterns


logger = logging.getLogger(__name__)

ENVELOPE_PRESETS = ("crescendo", "diminuendo", "swell", "accent_first", "accent_downbeats")


def preset_velocities (preset: str, count: int, base: float) -> typing.List[float]:

	"""
	Return one velocity per note for a named envelope.

	The envelope moves between ``max(0.1, base * 0.3)`` and
	``min(1, base * 1.2)``.  ``accent_downbeats`` accents every other note
	and drops the rest to 70% of ``base``.

	Raises:
		ValueError: For an unknown preset name.
	"""

	if preset not in ENVELOPE_PRESETS:
		raise ValueError(f"Unknown envelope {preset!r}. Valid envelopes: {', '.join(ENVELOPE_PRESETS)}")

	if count == 0:
		return []

	if count == 1:
		return [base]

	low = max(etherdaw.constants.velocity.ENVELOPE_MIN_FLOOR, base * etherdaw.constants.velocity.ENVELOPE_MIN_RATIO)
	high = min(etherdaw.constants.velocity.MAX_VELOCITY, base * etherdaw.constants.velocity.ENVELOPE_PEAK_RATIO)
	positions = [i / (count - 1) for i in range(count)]

	if preset == "crescendo":
		return [low + t * (high - low) for t in positions]

	if preset == "diminuendo":
		return [high - t * (high - low) for t in positions]

	if preset == "swell":
		return [low + math.sin(t * math.pi) * (high - low) for t in positions]

	if preset == "accent_first":
		return [high] + [base] * (count - 1)

	return [high if i % 2 == 0 else base * etherdaw.constants.velocity.ENVELOPE_OFFBEAT_RATIO for i in range(count)]


def interpolate_velocities (values: typing.Sequence[float], count: int) -> typing.List[float]:

	"""Stretch a list of velocities over ``count`` notes by linear interpolation, clamped to [0, 1]."""

	if not values or count == 0:
		return []

	result: typing.List[float] = []

	for i in range(count):

		position = 0.0 if count == 1 else i / (count - 1) * (len(values) - 1)
		lower = int(math.floor(position))
		upper = min(lower + 1, len(values) - 1)
		fraction = position - lower

		value = values[lower] * (1 - fraction) + values[upper] * fraction
		result.append(min(etherdaw.constants.velocity.MAX_VELOCITY, max(etherdaw.constants.velocity.MIN_VELOCITY, value)))

	return result


def apply_envelope (
	notes: typing.Sequence[etherdaw.patterns.ExpandedNote],
	envelope: etherdaw.patterns.Envelope,
	base: float,
	diagnostics: etherdaw.diagnostics.Diagnostics
) -> typing.List[etherdaw.patterns.ExpandedNote]:

	"""Return copies of ``notes`` with velocities taken from an envelope, in note order."""

	if not notes:
		return []

	if isinstance(envelope, str):

		if envelope not in ENVELOPE_PRESETS:
			diagnostics.warn(f"Unknown envelope {envelope!r}, velocities left unchanged", logger)
			return list(notes)

		velocities = preset_velocities(envelope, len(notes), base)

	else:

		velocities = interpolate_velocities(list(envelope), len(notes))

		if not velocities:
			return list(notes)

	return [dataclasses.replace(note, velocity=velocity) for note, velocity in zip(notes, velocities)]
