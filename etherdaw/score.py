"""The Score document and its loader.

A score is usually written as YAML or JSON::

	settings:
	  tempo: 120
	  key: A minor
	patterns:
	  riff:
	    notes: ["A3:8", "C4:8", "E4:q", "r:q"]
	  beat:
	    drums:
	      lines: {kick: "x...x...x...x...", snare: "....x.......x..."}
	sections:
	  verse:
	    bars: 4
	    tracks:
	      bass: {pattern: riff, repeat: 4, octave: -1}
	      drums: {pattern: beat, repeat: 4}
	arrangement: [verse, verse]

:func:`load_score` turns such a mapping into typed, frozen dataclasses.  Keys
may be written in the score's camelCase (``constrainToScale``) or in
snake_case.  Shape errors raise :class:`ScoreError` naming the offending
path; the strings inside (notes, chords, keys) are parsed later, at compile
time.
"""

import dataclasses
import json
import logging
import os
import typing

import yaml

import etherdaw.automation
import etherdaw.constants
import etherdaw.constants.durations
import etherdaw.constants.gm_drums
import etherdaw.density
import etherdaw.patterns


logger = logging.getLogger(__name__)


class ScoreError (ValueError):

	"""The score document does not have the expected shape."""

	pass


@dataclasses.dataclass(frozen=True)
class Settings:

	tempo: float = etherdaw.constants.DEFAULT_TEMPO
	key: str = etherdaw.constants.DEFAULT_KEY
	time_signature: str = etherdaw.constants.DEFAULT_TIME_SIGNATURE
	swing: float = etherdaw.constants.DEFAULT_SWING
	title: typing.Optional[str] = None


@dataclasses.dataclass(frozen=True)
class Track:

	"""
	One instrument's part in a section.

	``humanize`` and ``groove`` win over the values an ``expression``
	preset supplies.
	"""

	patterns: typing.Tuple[str, ...]
	velocity: typing.Optional[float] = None
	repeat: int = 1
	humanize: typing.Optional[float] = None
	octave: int = 0
	transpose: int = 0
	mute: bool = False
	groove: typing.Optional[str] = None
	expression: typing.Optional[str] = None


@dataclasses.dataclass(frozen=True)
class Section:

	bars: float
	tracks: typing.Dict[str, Track] = dataclasses.field(default_factory=dict)
	tempo: typing.Optional[float] = None
	key: typing.Optional[str] = None
	density: typing.Optional[etherdaw.density.DensityCurve] = None
	automation: typing.Dict[str, etherdaw.automation.Automation] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class Score:

	settings: Settings
	patterns: typing.Dict[str, etherdaw.patterns.Pattern]
	sections: typing.Dict[str, Section]
	arrangement: typing.Tuple[str, ...]
	instruments: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _snake (name: str) -> str:

	return "".join("_" + c.lower() if c.isupper() else c for c in name)


def _get (data: typing.Mapping[str, typing.Any], key: str, default: typing.Any = None) -> typing.Any:

	"""Read ``key`` written in snake_case or camelCase."""

	if key in data:
		return data[key]

	for candidate in data:
		if isinstance(candidate, str) and _snake(candidate) == key:
			return data[candidate]

	return default


def _mapping (value: typing.Any, path: str) -> typing.Mapping[str, typing.Any]:

	if not isinstance(value, dict):
		raise ScoreError(f"{path} must be a mapping, got {type(value).__name__}")

	return value


def _number (value: typing.Any, path: str) -> float:

	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise ScoreError(f"{path} must be a number, got {value!r}")

	return float(value)


def _optional_number (value: typing.Any, path: str) -> typing.Optional[float]:

	return None if value is None else _number(value, path)


def _integer (value: typing.Any, path: str) -> int:

	if isinstance(value, bool) or not isinstance(value, int):
		raise ScoreError(f"{path} must be a whole number, got {value!r}")

	return value


def _at_least (value: int, minimum: int, path: str) -> int:

	if value < minimum:
		raise ScoreError(f"{path} must be at least {minimum}, got {value!r}")

	return value


def _string (value: typing.Any, path: str) -> str:

	if not isinstance(value, str):
		raise ScoreError(f"{path} must be a string, got {value!r}")

	return value


def _strings (value: typing.Any, path: str) -> typing.Tuple[str, ...]:

	"""A list of strings, or one string taken as compact notation."""

	if isinstance(value, str):
		return (value,)

	if not isinstance(value, list):
		raise ScoreError(f"{path} must be a list of strings or a string")

	return tuple(_string(item, f"{path}[{i}]") for i, item in enumerate(value))


# ─── Patterns ─────────────────────────────────────────────────────────────────


CONTENT_KEYS = (
	"notes", "chords", "degrees", "arpeggio", "drums", "euclidean", "markov",
	"continuation", "voice_lead", "tuplet", "rest",
)

META_KEYS = ("conditional", "extends", "transform")


def _envelope (value: typing.Any, path: str) -> typing.Optional[etherdaw.patterns.Envelope]:

	if value is None:
		return None

	if isinstance(value, dict):
		value = value.get("velocity")

	if isinstance(value, str):
		return value

	if isinstance(value, list):
		return tuple(_number(item, f"{path}[{i}]") for i, item in enumerate(value))

	raise ScoreError(f"{path} must be an envelope name or a list of velocities")


def _flags (data: typing.Mapping[str, typing.Any], path: str) -> typing.Dict[str, typing.Any]:

	return {
		"velocity": _optional_number(_get(data, "velocity"), f"{path}.velocity"),
		"envelope": _envelope(_get(data, "envelope"), f"{path}.envelope"),
		"constrain_to_scale": bool(_get(data, "constrain_to_scale", False)),
	}


def _drums (data: typing.Mapping[str, typing.Any], path: str, flags: typing.Dict[str, typing.Any]) -> etherdaw.patterns.DrumsPattern:

	lines = dict(_get(data, "lines") or {})

	# Drum names given directly, e.g. {kick: "x...", snare: "..x."}
	if not lines:
		lines = {name: line for name, line in data.items() if name in etherdaw.constants.gm_drums.DRUM_NAMES and isinstance(line, str)}

	for name, line in lines.items():
		_string(line, f"{path}.lines.{name}")

	hits = []

	for i, hit in enumerate(_get(data, "hits") or []):
		hit = _mapping(hit, f"{path}.hits[{i}]")
		hits.append(etherdaw.patterns.DrumHit(
			drum = _string(hit.get("drum"), f"{path}.hits[{i}].drum"),
			time = str(hit.get("time", "0")),
			velocity = _optional_number(hit.get("velocity"), f"{path}.hits[{i}].velocity"),
		))

	bars = _get(data, "bars")

	return etherdaw.patterns.DrumsPattern(
		lines = lines,
		kit = str(_get(data, "kit", etherdaw.constants.DEFAULT_DRUM_KIT)),
		step = str(_get(data, "step_duration", _get(data, "step", etherdaw.constants.durations.DEFAULT_DRUM_STEP))),
		steps = _get(data, "steps"),
		hits = tuple(hits),
		bars = None if bars is None else _number(bars, f"{path}.bars"),
		**flags,
	)


def _content (key: str, value: typing.Any, data: typing.Mapping[str, typing.Any], path: str) -> etherdaw.patterns.BasePattern:

	flags = _flags(data, path)
	where = f"{path}.{key}"

	if key == "notes":
		return etherdaw.patterns.NotesPattern(notes=_strings(value, where), **flags)

	if key == "chords":
		return etherdaw.patterns.ChordsPattern(chords=_strings(value, where), **flags)

	if key == "degrees":
		if not isinstance(value, list):
			raise ScoreError(f"{where} must be a list")
		rhythm = _get(data, "rhythm")
		return etherdaw.patterns.DegreesPattern(
			degrees = tuple(value),
			rhythm = _strings(rhythm, f"{path}.rhythm") if rhythm else ("q",),
			**flags,
		)

	if key == "rest":
		return etherdaw.patterns.RestPattern(rest=_string(value, where), **flags)

	if key == "drums":
		return _drums(_mapping(value, where), where, flags)

	config = _mapping(value, where)

	if key == "arpeggio":
		order = _get(config, "pattern")
		steps = _get(config, "steps")
		return etherdaw.patterns.ArpeggioPattern(
			chord = _string(_get(config, "chord"), f"{where}.chord"),
			duration = str(_get(config, "duration", "16")),
			mode = _get(config, "mode"),
			octaves = _at_least(_integer(_get(config, "octaves", 1), f"{where}.octaves"), 1, f"{where}.octaves"),
			gate = _number(_get(config, "gate", 0.8), f"{where}.gate"),
			steps = None if steps is None else _integer(steps, f"{where}.steps"),
			pattern = None if order is None else tuple(_integer(i, f"{where}.pattern") for i in order),
			**flags,
		)

	if key == "euclidean":
		return etherdaw.patterns.EuclideanPattern(
			hits = _integer(_get(config, "hits"), f"{where}.hits"),
			steps = _integer(_get(config, "steps"), f"{where}.steps"),
			duration = str(_get(config, "duration", "16")),
			rotation = _integer(_get(config, "rotation", 0), f"{where}.rotation"),
			pitch = _get(config, "pitch"),
			drum = _get(config, "drum"),
			kit = str(_get(config, "kit", etherdaw.constants.DEFAULT_DRUM_KIT)),
			**flags,
		)

	if key == "markov":
		duration = _get(config, "duration", "q")
		durations = duration if isinstance(duration, str) else _strings(duration, f"{where}.duration")

		if not durations:
			raise ScoreError(f"{where}.duration must not be empty")

		seed = _get(config, "seed")
		return etherdaw.patterns.MarkovPattern(
			states = tuple(str(state) for state in _get(config, "states") or ()),
			steps = _integer(_get(config, "steps"), f"{where}.steps"),
			duration = durations,
			transitions = _get(config, "transitions"),
			preset = _get(config, "preset"),
			initial_state = _get(config, "initial_state"),
			octave = _integer(_get(config, "octave", etherdaw.constants.DEFAULT_CHORD_OCTAVE), f"{where}.octave"),
			seed = None if seed is None else _integer(seed, f"{where}.seed"),
			constrain_states = bool(_get(config, "constrain_to_scale", False)),
			chord_scale = _get(config, "chord_scale"),
			**flags,
		)

	if key == "continuation":
		return etherdaw.patterns.ContinuationPattern(
			source = _string(_get(config, "source"), f"{where}.source"),
			technique = _string(_get(config, "technique"), f"{where}.technique"),
			steps = _integer(_get(config, "steps", 3), f"{where}.steps"),
			interval = _integer(_get(config, "interval", -2), f"{where}.interval"),
			**flags,
		)

	if key == "voice_lead":
		ranges = _get(config, "voice_ranges")
		return etherdaw.patterns.VoiceLeadPattern(
			progression = _strings(_get(config, "progression", []), f"{where}.progression"),
			voices = _integer(_get(config, "voices", 4), f"{where}.voices"),
			style = str(_get(config, "style", "jazz")),
			constraints = _strings(_get(config, "constraints", []), f"{where}.constraints"),
			voice_ranges = None if ranges is None else {name: tuple(bounds) for name, bounds in _mapping(ranges, f"{where}.voice_ranges").items()},
			**flags,
		)

	if key == "tuplet":
		ratio = _get(config, "ratio")
		if not isinstance(ratio, list) or len(ratio) != 2:
			raise ScoreError(f"{where}.ratio must be a list of two numbers [actual, normal]")
		return etherdaw.patterns.TupletPattern(
			ratio = (ratio[0], ratio[1]),
			notes = _strings(_get(config, "notes", []), f"{where}.notes"),
			**flags,
		)

	raise ScoreError(f"{path}: unknown pattern content {key!r}")


def parse_pattern (name: str, data: typing.Any) -> etherdaw.patterns.Pattern:

	"""
	Build one pattern from its mapping.

	Exactly one kind of content (or one meta form) may be given; mixing,
	say, ``notes`` with ``markov`` is an error.

	Raises:
		ScoreError: For a malformed pattern.
	"""

	path = f"patterns.{name}"
	data = _mapping(data, path)

	if _get(data, "type") == "drums" and _get(data, "drums") is None:
		return _drums(data, path, _flags(data, path))

	present = [key for key in META_KEYS + CONTENT_KEYS if _get(data, key) is not None]

	if not present:
		raise ScoreError(f'Pattern "{name}" has no recognizable content. Add one of: {", ".join(CONTENT_KEYS + META_KEYS)}')

	if len(present) > 1:
		raise ScoreError(f'Pattern "{name}" mixes {" and ".join(present)}; a pattern has exactly one kind of content')

	key = present[0]
	value = _get(data, key)

	if key == "conditional":
		config = _mapping(value, f"{path}.conditional")
		return etherdaw.patterns.ConditionalPattern(
			condition = _string(config.get("condition"), f"{path}.conditional.condition"),
			operator = _string(config.get("operator"), f"{path}.conditional.operator"),
			value = _number(config.get("value"), f"{path}.conditional.value"),
			then = _string(config.get("then"), f"{path}.conditional.then"),
			otherwise = config.get("else"),
		)

	if key == "extends":
		overrides = _mapping(_get(data, "overrides") or {}, f"{path}.overrides")
		notes = overrides.get("notes")
		constrain = _get(data, "constrain_to_scale")
		return etherdaw.patterns.ExtendsPattern(
			parent = _string(value, f"{path}.extends"),
			notes = None if notes is None else _strings(notes, f"{path}.overrides.notes"),
			transpose = _integer(overrides.get("transpose", 0), f"{path}.overrides.transpose"),
			octave = _integer(overrides.get("octave", 0), f"{path}.overrides.octave"),
			velocity = _optional_number(overrides.get("velocity", _get(data, "velocity")), f"{path}.overrides.velocity"),
			envelope = _envelope(_get(data, "envelope"), f"{path}.envelope"),
			constrain_to_scale = None if constrain is None else bool(constrain),
		)

	if key == "transform":
		config = _mapping(value, f"{path}.transform")
		return etherdaw.patterns.TransformPattern(
			source = _string(config.get("source"), f"{path}.transform.source"),
			operation = _string(config.get("operation"), f"{path}.transform.operation"),
			params = dict(config.get("params") or {}),
			**_flags(data, path),
		)

	return _content(key, value, data, path)


# ─── Sections ─────────────────────────────────────────────────────────────────


def parse_track (data: typing.Any, path: str) -> Track:

	data = _mapping(data, path)

	if _get(data, "patterns") is not None:
		names = _strings(_get(data, "patterns"), f"{path}.patterns")
	elif _get(data, "pattern") is not None:
		names = (_string(_get(data, "pattern"), f"{path}.pattern"),)
	else:
		names = ()

	return Track(
		patterns = names,
		velocity = _optional_number(_get(data, "velocity"), f"{path}.velocity"),
		repeat = _integer(_get(data, "repeat", 1), f"{path}.repeat"),
		humanize = _optional_number(_get(data, "humanize"), f"{path}.humanize"),
		octave = _integer(_get(data, "octave", 0), f"{path}.octave"),
		transpose = _integer(_get(data, "transpose", 0), f"{path}.transpose"),
		mute = bool(_get(data, "mute", False)),
		groove = _get(data, "groove"),
		expression = _get(data, "expression"),
	)


def _automation (data: typing.Any, path: str) -> etherdaw.automation.Automation:

	data = _mapping(data, path)
	points = []

	for i, point in enumerate(data.get("points") or []):
		point = _mapping(point, f"{path}.points[{i}]")
		points.append(etherdaw.automation.AutomationPoint(
			time = _number(point.get("time"), f"{path}.points[{i}].time"),
			value = _number(point.get("value"), f"{path}.points[{i}].value"),
		))

	return etherdaw.automation.Automation(
		start = _number(data.get("start", 0.0), f"{path}.start"),
		end = _number(data.get("end", data.get("start", 0.0)), f"{path}.end"),
		curve = str(data.get("curve", "linear")),
		points = tuple(points),
	)


def parse_section (name: str, data: typing.Any) -> Section:

	path = f"sections.{name}"
	data = _mapping(data, path)

	if "bars" not in data:
		raise ScoreError(f"{path}.bars is required")

	density = _get(data, "density")
	tempo = _get(data, "tempo")

	return Section(
		bars = _number(data["bars"], f"{path}.bars"),
		tracks = {
			track_name: parse_track(track, f"{path}.tracks.{track_name}")
			for track_name, track in _mapping(data.get("tracks") or {}, f"{path}.tracks").items()
		},
		tempo = None if tempo is None else _number(tempo, f"{path}.tempo"),
		key = _get(data, "key"),
		density = None if density is None else etherdaw.density.DensityCurve(
			start = _number(_mapping(density, f"{path}.density").get("start", 1.0), f"{path}.density.start"),
			end = _number(density.get("end", density.get("start", 1.0)), f"{path}.density.end"),
			curve = str(density.get("curve", "linear")),
		),
		automation = {
			target: _automation(config, f"{path}.automation.{target}")
			for target, config in _mapping(data.get("automation") or {}, f"{path}.automation").items()
		},
	)


# ─── Loading ──────────────────────────────────────────────────────────────────


def load_score (data: typing.Any) -> Score:

	"""
	Build a :class:`Score` from a parsed document.

	Raises:
		ScoreError: When the document does not have the expected shape.
	"""

	data = _mapping(data, "score")
	settings = _mapping(data.get("settings") or {}, "settings")
	meta = data.get("meta") or {}

	arrangement = data.get("arrangement")

	if arrangement is None:
		raise ScoreError("arrangement is required")

	return Score(
		settings = Settings(
			tempo = _number(settings.get("tempo", etherdaw.constants.DEFAULT_TEMPO), "settings.tempo"),
			key = str(settings.get("key", etherdaw.constants.DEFAULT_KEY)),
			time_signature = str(_get(settings, "time_signature", etherdaw.constants.DEFAULT_TIME_SIGNATURE)),
			swing = _number(settings.get("swing", etherdaw.constants.DEFAULT_SWING), "settings.swing"),
			title = meta.get("title") if isinstance(meta, dict) else None,
		),
		patterns = {name: parse_pattern(name, pattern) for name, pattern in _mapping(data.get("patterns") or {}, "patterns").items()},
		sections = {name: parse_section(name, section) for name, section in _mapping(data.get("sections") or {}, "sections").items()},
		arrangement = _strings(arrangement, "arrangement"),
		instruments = dict(_mapping(data.get("instruments") or {}, "instruments")),
	)


def load_score_file (path: str) -> Score:

	"""
	Load a score from a YAML or JSON file.

	JSON is read with the YAML loader unless the file ends in ``.json``.
	"""

	logger.debug(f"Loading score from {path}")

	with open(path, "r", encoding="utf-8") as f:
		if os.path.splitext(path)[1].lower() == ".json":
			data = json.load(f)
		else:
			data = yaml.safe_load(f)

	return load_score(data)


def simple_score (
	patterns: typing.Mapping[str, typing.Sequence[str]],
	bars: float = 4,
	tempo: float = etherdaw.constants.DEFAULT_TEMPO,
	key: str = etherdaw.constants.DEFAULT_KEY
) -> Score:

	"""
	Build a one-section score with one track per note list.

	Each track is named after its pattern and the section is called ``main``.
	"""

	return Score(
		settings = Settings(tempo=tempo, key=key),
		patterns = {name: etherdaw.patterns.NotesPattern(notes=tuple(notes)) for name, notes in patterns.items()},
		sections = {"main": Section(bars=bars, tracks={name: Track(patterns=(name,)) for name in patterns})},
		arrangement = ("main",),
	)
