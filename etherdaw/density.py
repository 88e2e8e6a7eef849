"""Density curves: how busy a section is as it plays.

A section's density moves from ``start`` to ``end`` along a named curve.
Density multiplies each note's own probability (1.0 when the note has none),
and a note plays when a uniform draw lands below the result::

	density 1.0  -> notes keep their own probability
	density 0.5  -> every probability halved
	density 0.0  -> nothing plays

Example:
	```python
	build = DensityCurve(start=0.2, end=1.0, curve="exponential")
	density_at_position(build, 0.5)   # ~0.97, exponential fills in early
	```
"""

import dataclasses
import typing

import etherdaw.easing


@dataclasses.dataclass(frozen=True)
class DensityCurve:

	start: float
	end: float
	curve: str = "linear"


def density_at_position (config: DensityCurve, position: float) -> float:

	"""
	Return the density at a normalised section position, clamped to [0, 1].

	Unknown curve names are read as ``"linear"``; :func:`validate_density`
	reports them.
	"""

	shape = config.curve if config.curve in etherdaw.easing.DENSITY_CURVES else "linear"

	return etherdaw.easing.clamp01(etherdaw.easing.interpolate(config.start, config.end, position, shape))


def density_at_beat (config: DensityCurve, beat: float, total_beats: float) -> float:

	"""Return the density at a beat within a section of ``total_beats``."""

	if total_beats <= 0:
		return config.start

	return density_at_position(config, beat / total_beats)


def effective_probability (probability: typing.Optional[float], density: float) -> float:

	"""Combine a note's probability (None means always) with the density."""

	return (1.0 if probability is None else probability) * density


def should_play (probability: typing.Optional[float], density: float, roll: float) -> bool:

	"""
	Decide whether a note survives.

	``roll`` is a uniform draw in [0, 1) supplied by the caller, so the
	decision is reproducible from a seeded stream.
	"""

	return roll < effective_probability(probability, density)


def density_preview (config: DensityCurve, resolution: int = 100) -> typing.List[typing.Tuple[float, float]]:

	"""Sample a curve at ``resolution + 1`` evenly spaced positions as ``(position, density)`` pairs."""

	return [(i / resolution, density_at_position(config, i / resolution)) for i in range(resolution + 1)]


def validate_density (config: DensityCurve) -> typing.List[str]:

	warnings: typing.List[str] = []

	if not 0.0 <= config.start <= 1.0:
		warnings.append(f"Density start value {config.start} should be between 0 and 1")

	if not 0.0 <= config.end <= 1.0:
		warnings.append(f"Density end value {config.end} should be between 0 and 1")

	if config.curve not in etherdaw.easing.DENSITY_CURVES:
		warnings.append(f"Unknown density curve: {config.curve}. Valid curves: {', '.join(etherdaw.easing.DENSITY_CURVES)}")

	return warnings
