"""Markov-chain melodies.

States are walked first, then each state becomes a note:

- a scale degree (``"1"``, ``"b3"``, ``"#4"``, ``"9"``) in the active key,
  or in ``chord_scale``'s scale when one is given
- an absolute pitch (``"C4"``)
- ``"rest"``, which advances the cursor without a note
- ``"approach"``, a semitone below the next state's pitch (silent when the
  next state has no pitch)

A pattern with a ``seed`` always walks the same way; without one it draws
from the section's random stream.
"""

import logging
import random
import re
import typing

import etherdaw.intervals
import etherdaw.markov_chain
import etherdaw.notation
import etherdaw.patterns


logger = logging.getLogger(__name__)

STATE_REST = "rest"
STATE_APPROACH = "approach"

BASE_VELOCITY = 0.7
VELOCITY_SPREAD = 0.2

CONSTRAIN_DISTANCE = 2

# Scale played over a chord quality when ``chord_scale`` is set.
CHORD_SCALE_MODES: typing.Dict[str, str] = {
	"maj": "major",
	"maj7": "major",
	"maj9": "major",
	"maj6": "major",
	"6": "major",
	"6/9": "major",
	"add9": "major",
	"m": "minor",
	"min": "minor",
	"m7": "dorian",
	"min7": "dorian",
	"m9": "dorian",
	"m6": "dorian",
	"m11": "dorian",
	"7": "mixolydian",
	"dom7": "mixolydian",
	"9": "mixolydian",
	"11": "mixolydian",
	"13": "mixolydian",
	"7sus4": "mixolydian",
	"7#9": "mixolydian",
	"7b9": "phrygian",
	"m7b5": "locrian",
	"half-dim": "locrian",
	"dim": "locrian",
	"dim7": "locrian",
	"sus2": "major",
	"sus4": "major",
	"aug": "major",
	"+": "major",
}

_CHORD_SYMBOL_RE = re.compile(r"^(?P<root>[A-G][#b]?)(?P<quality>.*)$")

_PITCH_STATE_RE = re.compile(r"^[A-G][#b]?-?\d+$")

_DEGREE_STATE_RE = re.compile(r"^(?P<accidental>[#b]?)(?P<degree>\d+)$")


def chord_scale_key (symbol: str) -> etherdaw.intervals.Key:

	"""Return the scale to improvise over a chord, e.g. ``"Dm7"`` gives D dorian."""

	match = _CHORD_SYMBOL_RE.match(symbol.strip())

	if not match:
		return etherdaw.intervals.Key(root="C", mode="major")

	mode = CHORD_SCALE_MODES.get(match.group("quality") or "maj", "major")

	return etherdaw.intervals.Key(root=match.group("root"), mode=mode)


def is_known_state (state: str) -> bool:

	return state in (STATE_REST, STATE_APPROACH) or bool(_PITCH_STATE_RE.match(state) or _DEGREE_STATE_RE.match(state))


def resolve_state (
	state: str,
	key: etherdaw.intervals.Key,
	octave: int,
	next_pitch: typing.Optional[str] = None
) -> typing.Optional[str]:

	"""Return the pitch a state plays, or None when it is silent."""

	if state == STATE_REST:
		return None

	if state == STATE_APPROACH:
		if next_pitch is None:
			return None
		return etherdaw.notation.transpose_pitch(next_pitch, -1)

	if _PITCH_STATE_RE.match(state):
		return state

	match = _DEGREE_STATE_RE.match(state)

	if not match:
		return None

	accidental = {"": 0, "#": 1, "b": -1}[match.group("accidental")]
	midi = etherdaw.intervals.degree_to_midi(key, int(match.group("degree")), octave, accidental)

	return etherdaw.notation.midi_to_pitch(midi)


def _transitions (
	pattern: etherdaw.patterns.MarkovPattern,
	ctx: etherdaw.patterns.PatternContext
) -> etherdaw.markov_chain.TransitionTable:

	states = list(pattern.states)

	if pattern.transitions:
		ctx.diagnostics.extend(etherdaw.markov_chain.validate_transitions(states, pattern.transitions), logger)
		return pattern.transitions

	if pattern.preset in etherdaw.markov_chain.PRESETS:
		return etherdaw.markov_chain.preset_transitions(pattern.preset, states)

	if pattern.preset:
		ctx.diagnostics.warn(f"Unknown Markov preset {pattern.preset!r}, using a uniform distribution", logger)
	else:
		ctx.diagnostics.warn("Markov pattern has no transitions or preset, using a uniform distribution", logger)

	return etherdaw.markov_chain.preset_transitions("uniform", states)


def generate_markov (
	pattern: etherdaw.patterns.MarkovPattern,
	ctx: etherdaw.patterns.PatternContext
) -> typing.Tuple[typing.List[etherdaw.patterns.ExpandedNote], float]:

	"""
	Walk the chain and return notes with raw velocities in [0.7, 0.9), plus
	the beat the walk ends on.  Rest states still take their time.

	Pitches are not yet moved by the track offsets.  All state draws happen
	before any velocity draw.
	"""

	if not pattern.states:
		ctx.diagnostics.warn("Markov pattern has no states", logger)
		return [], 0.0

	for state in pattern.states:
		if not is_known_state(state):
			ctx.diagnostics.warn(f"Unknown Markov state {state!r}, treating it as a rest", logger)

	key = chord_scale_key(pattern.chord_scale) if pattern.chord_scale else ctx.key
	rng = random.Random(pattern.seed) if pattern.seed is not None else ctx.rng

	chain: etherdaw.markov_chain.MarkovChain[str] = etherdaw.markov_chain.MarkovChain(
		_transitions(pattern, ctx),
		initial_state = pattern.initial_state or pattern.states[0],
		rng = rng,
	)

	sequence = chain.walk(pattern.steps)
	durations = (pattern.duration,) if isinstance(pattern.duration, str) else tuple(pattern.duration)
	scale_pcs = etherdaw.intervals.scale_pitch_classes(key)

	if not durations:
		raise ValueError("Markov pattern needs at least one duration")

	notes: typing.List[etherdaw.patterns.ExpandedNote] = []
	cursor = 0.0

	for i, state in enumerate(sequence):

		length = etherdaw.notation.parse_duration_string(durations[i % len(durations)])

		next_pitch = resolve_state(sequence[i + 1], key, pattern.octave) if i + 1 < len(sequence) else None
		pitch = resolve_state(state, key, pattern.octave, next_pitch)

		if pitch is not None:

			if pattern.constrain_states:
				midi = etherdaw.intervals.quantize_pitch(etherdaw.notation.pitch_to_midi(pitch), scale_pcs, max_distance=CONSTRAIN_DISTANCE)
				pitch = etherdaw.notation.midi_to_pitch(midi)

			notes.append(etherdaw.patterns.ExpandedNote(
				pitch = pitch,
				start = cursor,
				duration = length,
				velocity = BASE_VELOCITY + rng.random() * VELOCITY_SPREAD,
			))

		cursor += length

	return notes, cursor


def expand_markov (pattern: etherdaw.patterns.MarkovPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""Expand a Markov pattern.  Its length is the whole walk, trailing rests included."""

	generated, total_beats = generate_markov(pattern, ctx)

	notes = [
		etherdaw.patterns.ExpandedNote(
			pitch = ctx.place(note.pitch),
			start = note.start,
			duration = note.duration,
			velocity = note.velocity * ctx.velocity,
		)
		for note in generated
	]

	return etherdaw.patterns.ExpandedPattern(notes=notes, total_beats=total_beats)
