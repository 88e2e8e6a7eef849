from __future__ import annotations

import dataclasses
import math
import random
import typing

import etherdaw.constants.velocity


@dataclasses.dataclass(frozen=True)
class Groove:

	"""
	A timing/velocity template applied per grid slot within each beat.

	A groove is a repeating pattern of per-slot timing offsets and velocity
	multipliers aligned to a rhythmic grid.  A track names one with
	``groove: <name>`` (or gets one from an ``expression`` preset) to give
	its notes a characteristic feel - shuffle, laid back, Dilla-style pocket.

	Parameters:
		offsets: Timing offset per grid slot, in beats. Repeats cyclically.
			Positive values delay the note; negative values push it earlier.
		grid: Grid size in beats (0.25 = 16th notes, 0.5 = 8th notes).
		velocities: Optional velocity multiplier per grid slot (1.0 = unchanged).
		description: Human-readable summary for listings.
	"""

	offsets: typing.Tuple[float, ...]
	grid: float = 0.25
	velocities: typing.Optional[typing.Tuple[float, ...]] = None
	description: str = ""


GROOVE_TEMPLATES: typing.Dict[str, Groove] = {
	"straight": Groove(offsets=(0.0, 0.0, 0.0, 0.0), velocities=(1.0, 0.8, 0.9, 0.8), description="Quantized, metronomic timing"),
	"shuffle": Groove(offsets=(0.0, 0.08, 0.0, 0.08), velocities=(1.0, 0.7, 0.9, 0.7), description="Classic swing feel with delayed offbeats"),
	"funk": Groove(offsets=(0.0, -0.02, 0.02, -0.01), velocities=(1.0, 0.9, 0.85, 0.95), description="Tight, slightly pushed 16ths"),
	"laid_back": Groove(offsets=(0.03, 0.03, 0.03, 0.03), velocities=(1.0, 0.85, 0.9, 0.85), description="Everything a touch behind the beat"),
	"pushed": Groove(offsets=(-0.02, -0.02, -0.02, -0.02), velocities=(1.0, 0.9, 0.95, 0.9), description="Everything a touch ahead of the beat"),
	"hip_hop": Groove(offsets=(0.0, 0.05, 0.0, 0.07), velocities=(1.0, 0.75, 0.9, 0.8), description="Lazy boom-bap swing"),
	"dilla": Groove(offsets=(0.0, 0.06, -0.02, 0.09), velocities=(1.0, 0.7, 0.85, 0.65), description="Drunk, unquantized pocket"),
	"reggae": Groove(offsets=(0.0, 0.04, 0.0, 0.06), velocities=(0.7, 0.9, 1.0, 0.8), description="Offbeat emphasis"),
	"dnb": Groove(offsets=(0.0, -0.01, 0.01, -0.01), velocities=(1.0, 0.6, 0.85, 0.55), description="Tight breakbeat timing"),
	"trap": Groove(offsets=(0.0, 0.02, 0.0, 0.03), velocities=(1.0, 0.65, 0.9, 0.6), description="Rolling hats with a slight drag"),
	"gospel": Groove(offsets=(0.0, 0.04, 0.0, 0.05), velocities=(0.9, 1.0, 0.85, 0.95), description="Church feel with strong backbeat"),
	"new_orleans": Groove(offsets=(0.0, 0.07, 0.02, 0.05), velocities=(1.0, 0.8, 0.9, 0.85), description="Second-line shuffle"),
	"bossa": Groove(offsets=(0.0, 0.03, 0.0, 0.04), velocities=(1.0, 0.75, 0.85, 0.8), description="Gentle Brazilian sway"),
	"afrobeat": Groove(offsets=(0.0, 0.02, 0.04, 0.01), velocities=(1.0, 0.85, 0.9, 0.8), description="Interlocking polyrhythmic push"),
}


@dataclasses.dataclass(frozen=True)
class ExpressionPreset:

	"""Humanize amount, groove name and velocity variance bundled as a performance style."""

	humanize: float
	groove: str
	velocity_variance: float
	description: str = ""


EXPRESSION_PRESETS: typing.Dict[str, ExpressionPreset] = {
	"mechanical": ExpressionPreset(0.0, "straight", 0.0, "Quantized, robotic - no humanization"),
	"tight": ExpressionPreset(0.01, "straight", 0.02, "Clean, professional studio performance"),
	"natural": ExpressionPreset(0.03, "straight", 0.05, "Human but controlled, slight variations"),
	"romantic": ExpressionPreset(0.04, "laid_back", 0.08, "Expressive, rubato-like, laid back feel"),
	"jazzy": ExpressionPreset(0.03, "dilla", 0.1, "Loose, swung, Dilla-inspired groove"),
	"funk": ExpressionPreset(0.02, "funk", 0.06, "Tight pocket with funky timing"),
	"gospel": ExpressionPreset(0.03, "gospel", 0.08, "Church feel with strong backbeat"),
	"aggressive": ExpressionPreset(0.01, "pushed", 0.04, "Forward, driving, slightly ahead of beat"),
}


def apply_groove (beat: float, velocity: float, groove: Groove) -> typing.Tuple[float, float]:

	"""
	Shift one note by the groove slot it falls in.

	The slot is the grid cell within the beat that contains the note
	(``floor((beat % 1) / grid)``), wrapping over the template length.

	Parameters:
		beat: Note start in beats.
		velocity: Note velocity, 0-1.
		groove: The groove template to apply.

	Returns:
		``(beat, velocity)`` after the groove.  Velocity is not clamped.
	"""

	slot = int(math.floor((beat % 1.0) / groove.grid + 1e-9))

	offset = groove.offsets[slot % len(groove.offsets)]

	if groove.velocities:
		velocity = velocity * groove.velocities[slot % len(groove.velocities)]

	return beat + offset, velocity


def apply_swing (beat: float, amount: float, division: float = 0.5) -> float:

	"""
	Delay notes on odd subdivisions of the beat.

	At ``amount`` 1.0 the offbeat moves by a third of the division, which
	turns straight eighths into a triplet feel.
	"""

	if amount == 0:
		return beat

	division_number = int(math.floor((beat % 1.0) / division))

	if division_number % 2 == 1:
		return beat + (division / 3.0) * amount

	return beat


def humanize_timing (beat: float, amount: float, rng: random.Random) -> float:

	"""Nudge a start time by up to ``HUMANIZE_TIMING_BEATS * amount`` either way, never below 0."""

	if amount == 0:
		return beat

	deviation = rng.uniform(-1.0, 1.0) * etherdaw.constants.velocity.HUMANIZE_TIMING_BEATS * amount

	return max(0.0, beat + deviation)


def humanize_velocity (velocity: float, amount: float, rng: random.Random, spread: float = etherdaw.constants.velocity.HUMANIZE_VELOCITY) -> float:

	"""Nudge a velocity by up to ``spread * amount`` either way, clamped to [0, 1]."""

	if amount == 0:
		return velocity

	deviation = rng.uniform(-1.0, 1.0) * spread * amount

	return min(etherdaw.constants.velocity.MAX_VELOCITY, max(etherdaw.constants.velocity.MIN_VELOCITY, velocity + deviation))


def humanize_duration (duration: float, amount: float, rng: random.Random) -> float:

	"""Stretch or shrink a duration by up to ``HUMANIZE_DURATION * amount``, never below the minimum."""

	if amount == 0:
		return duration

	deviation = rng.uniform(-1.0, 1.0) * etherdaw.constants.velocity.HUMANIZE_DURATION * amount

	return max(etherdaw.constants.velocity.HUMANIZE_MIN_DURATION, duration * (1.0 + deviation))


def get_groove (name: str) -> Groove:

	"""
	Look up a groove template by name.

	Raises:
		ValueError: For an unknown groove name.
	"""

	if name not in GROOVE_TEMPLATES:
		raise ValueError(f"Unknown groove {name!r}. Available grooves: {', '.join(GROOVE_TEMPLATES)}")

	return GROOVE_TEMPLATES[name]


def get_expression (name: str) -> ExpressionPreset:

	"""
	Look up an expression preset by name.

	Raises:
		ValueError: For an unknown preset name.
	"""

	if name not in EXPRESSION_PRESETS:
		raise ValueError(f"Unknown expression preset {name!r}. Available presets: {', '.join(EXPRESSION_PRESETS)}")

	return EXPRESSION_PRESETS[name]
