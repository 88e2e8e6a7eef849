"""Section automation: parameter ramps evaluated over section progress.

An automation is keyed by a path naming what it moves::

	"tempo"                     global tempo, in BPM
	"bass.volume", "bass.pan"   channel parameters
	"pad.params.brightness"     a semantic synth parameter (0-1)
	"lead.filter.frequency"     an effect parameter

Its value at normalised section position ``t`` comes either from explicit
``(time, value)`` points or from a named curve between ``start`` and ``end``.
Tempo automation also changes how beats map to seconds inside the section,
see :func:`automated_seconds`.
"""

import dataclasses
import logging
import math
import typing

import etherdaw.easing


logger = logging.getLogger(__name__)

TEMPO_PATH = "tempo"
GLOBAL_INSTRUMENT = "_global"

TARGET_TEMPO = "tempo"
TARGET_PARAMS = "params"
TARGET_CHANNEL = "channel"
TARGET_EFFECTS = "effects"

CHANNEL_PARAMS = ("volume", "pan")

AUTOMATION_CURVES = ("linear", "exponential", "sine", "step")

DEFAULT_RESOLUTION = 20

EXPONENTIAL_FLOOR = 0.001

MIN_TEMPO = 1.0

TEMPO_SLICES = 64


@dataclasses.dataclass(frozen=True)
class AutomationPoint:

	time: float
	value: float


@dataclasses.dataclass(frozen=True)
class Automation:

	"""
	One automation curve.

	``points`` (times 0-1 within the section) win over ``start``/``end``/
	``curve`` when present.
	"""

	start: float = 0.0
	end: float = 0.0
	curve: str = "linear"
	points: typing.Tuple[AutomationPoint, ...] = ()


@dataclasses.dataclass(frozen=True)
class AutomationPath:

	"""A parsed automation path.  ``param`` is the semantic, channel or effect parameter name."""

	instrument: str
	target: str
	param: typing.Optional[str] = None
	effect: typing.Optional[str] = None


@dataclasses.dataclass(frozen=True)
class SemanticParam:

	"""Concrete synth parameter behind a semantic one, and how 0-1 maps onto it."""

	target: str
	transform: typing.Callable[[float], float]


SEMANTIC_PARAMS: typing.Dict[str, SemanticParam] = {
	"brightness": SemanticParam("modulationIndex", lambda v: v * 20.0),
	"warmth": SemanticParam("harmonicity", lambda v: 0.5 + (1.0 - v) * 7.5),
	"attack": SemanticParam("envelope.attack", lambda v: 0.001 + v * 1.999),
	"decay": SemanticParam("envelope.decay", lambda v: 0.05 + v * 3.95),
	"sustain": SemanticParam("envelope.sustain", lambda v: v),
	"release": SemanticParam("envelope.release", lambda v: 0.1 + v * 3.9),
}


def parse_automation_path (path: str) -> typing.Optional[AutomationPath]:

	"""
	Parse an automation path.  Returns None when the path has no meaning.

	Example:
		```python
		parse_automation_path("bass.params.brightness")
		# AutomationPath(instrument='bass', target='params', param='brightness', effect=None)
		```
	"""

	if path == TEMPO_PATH:
		return AutomationPath(instrument=GLOBAL_INSTRUMENT, target=TARGET_TEMPO)

	parts = path.split(".")

	if len(parts) < 2 or not parts[0]:
		return None

	instrument = parts[0]

	if parts[1] == TARGET_PARAMS and len(parts) >= 3:
		return AutomationPath(instrument=instrument, target=TARGET_PARAMS, param=parts[2])

	if len(parts) == 2 and parts[1] in CHANNEL_PARAMS:
		return AutomationPath(instrument=instrument, target=TARGET_CHANNEL, param=parts[1])

	if len(parts) >= 3:
		return AutomationPath(instrument=instrument, target=TARGET_EFFECTS, param=parts[2], effect=parts[1])

	return None


def resolve_semantic_param (name: str, start: float, end: float) -> typing.Optional[typing.Tuple[str, float, float]]:

	"""Return ``(synth_param, start, end)`` in synth units, or None for an unknown name."""

	mapping = SEMANTIC_PARAMS.get(name)

	if mapping is None:
		return None

	return mapping.target, mapping.transform(start), mapping.transform(end)


def interpolate_points (points: typing.Sequence[AutomationPoint], t: float) -> float:

	"""Piecewise-linear value through ``points`` at ``t``, held flat before the first and after the last."""

	ordered = sorted(points, key=lambda point: point.time)

	if t <= ordered[0].time:
		return ordered[0].value

	if t >= ordered[-1].time:
		return ordered[-1].value

	for lower, upper in zip(ordered, ordered[1:]):

		if lower.time <= t <= upper.time:

			if upper.time == lower.time:
				return upper.value

			local = (t - lower.time) / (upper.time - lower.time)

			return lower.value + local * (upper.value - lower.value)

	return ordered[-1].value


def interpolate_curve (start: float, end: float, t: float, curve: str) -> float:

	"""
	Value between ``start`` and ``end`` at ``t`` along a curve.

	``"exponential"`` moves multiplicatively (equal ratios per step), which
	suits frequencies; both ends are floored at 0.001 first.  Unknown curves
	are linear.
	"""

	if curve == "exponential":
		safe_start = max(EXPONENTIAL_FLOOR, start)
		safe_end = max(EXPONENTIAL_FLOOR, end)
		return safe_start * math.pow(safe_end / safe_start, t)

	if curve == "sine":
		return start + etherdaw.easing.ease_in_out_sine(t) * (end - start)

	if curve == "step":
		return start if t < 0.5 else end

	return start + t * (end - start)


def automation_value (config: Automation, t: float) -> float:

	"""Return the automation's value at normalised section position ``t``."""

	if config.points:
		return interpolate_points(config.points, t)

	return interpolate_curve(config.start, config.end, t, config.curve)


def generate_automation_events (
	config: Automation,
	duration: float,
	resolution: int = DEFAULT_RESOLUTION
) -> typing.List[typing.Tuple[float, float]]:

	"""
	Sample an automation into ``resolution + 1`` ``(time, value)`` pairs.

	``time`` runs from 0 to ``duration`` in whatever unit ``duration`` is
	given in.
	"""

	return [
		(i / resolution * duration, automation_value(config, i / resolution))
		for i in range(resolution + 1)
	]


def validate_automation (path: str, config: Automation) -> typing.List[str]:

	warnings: typing.List[str] = []
	parsed = parse_automation_path(path)

	if parsed is None:
		warnings.append(f"Invalid automation path: {path}")
		return warnings

	if parsed.target == TARGET_PARAMS and parsed.param not in SEMANTIC_PARAMS:
		warnings.append(f"Unknown semantic parameter: {parsed.param} (in automation {path!r})")

	if not config.points and config.curve not in AUTOMATION_CURVES:
		warnings.append(f"Unknown automation curve: {config.curve}. Valid curves: {', '.join(AUTOMATION_CURVES)}")

	if parsed.target == TARGET_TEMPO:
		values = [point.value for point in config.points] if config.points else [config.start, config.end]
		if min(values) <= 0:
			warnings.append(f"Tempo automation values must be positive; values below {MIN_TEMPO} BPM are clamped")

	return warnings


def tempo_at (config: Automation, t: float) -> float:

	return max(MIN_TEMPO, automation_value(config, t))


def automated_seconds (beat: float, section_beats: float, config: Automation) -> float:

	"""
	Seconds from the section start to ``beat`` under a tempo automation.

	The section is cut into equal slices, each played at the tempo at its
	midpoint, and the time of every slice up to ``beat`` is summed.  Beats
	past the end of the section run at the final tempo.
	"""

	if section_beats <= 0 or beat <= 0:
		return 0.0

	slice_beats = section_beats / TEMPO_SLICES
	seconds = 0.0
	position = 0.0

	while position < beat - 1e-12:
		span = min(slice_beats, beat - position)
		midpoint = min(1.0, (position + span / 2.0) / section_beats)
		seconds += span * 60.0 / tempo_at(config, midpoint)
		position += span

	return seconds
