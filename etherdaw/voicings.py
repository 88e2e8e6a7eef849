"""Constraint-based voice leading across a chord progression.

Each chord is voiced for a fixed number of voices (bass upward), every voice
kept inside its range.  The search keeps the best-scoring partial
progressions (a beam) and extends them chord by chord, so the chosen
voicings connect smoothly instead of jumping around the keyboard.

Example:
	```python
	from etherdaw.voicings import voice_lead_progression

	result = voice_lead_progression(["Dm7", "G7", "Cmaj7"], voices=4, style="bach")
	result.voicings[0]   # ['D2', 'F3', 'A3', 'C4'] or similar
	```

Constraint names:
- ``no_parallel_fifths`` / ``no_parallel_octaves``: reject a transition where two voices
  a fifth (or octave) apart move the same way into another fifth (or octave)
- ``avoid_voice_crossing``: reject a voicing where a lower voice reaches a higher one
- ``contrary_outer_motion``: penalise outer voices that do not move in opposite directions
- ``smooth_motion``: penalise total semitone movement
- ``resolve_leading_tones`` / ``resolve_sevenths``: accepted for style presets; not scored
"""

import dataclasses
import typing

import etherdaw.chords
import etherdaw.notation

MAX_VOICINGS = 1000
BEAM_WIDTH = 50
CONTRARY_MOTION_PENALTY = 10
RELAXED_PENALTY = 100

VOICE_NAMES = ["bass", "tenor", "alto", "soprano"]

DEFAULT_RANGES: typing.Dict[str, typing.Tuple[int, int]] = {
	"bass": (28, 48),       # E1 to C3
	"tenor": (36, 55),      # C2 to G3
	"alto": (43, 62),       # G2 to D4
	"soprano": (48, 79),    # C3 to G5
}

CONSTRAINT_PRESETS: typing.Dict[str, typing.List[str]] = {
	"bach": [
		"no_parallel_fifths",
		"no_parallel_octaves",
		"resolve_leading_tones",
		"resolve_sevenths",
		"smooth_motion",
		"contrary_outer_motion",
		"avoid_voice_crossing",
	],
	"jazz": [
		"smooth_motion",
		"avoid_voice_crossing",
	],
	"pop": [
		"smooth_motion",
	],
	"custom": [],
}

Voicing = typing.List[int]


@dataclasses.dataclass
class VoiceLeadingResult:

	"""Voiced pitch names per chord (bass first) plus any warnings."""

	voicings: typing.List[typing.List[str]]
	warnings: typing.List[str] = dataclasses.field(default_factory=list)


def _sign (value: int) -> int:

	return (value > 0) - (value < 0)


def _has_parallel (previous: Voicing, current: Voicing, interval: int) -> bool:

	"""Return True if any voice pair holds ``interval`` (mod 12) while moving the same way."""

	for i in range(len(previous)):
		for j in range(i + 1, len(previous)):

			before = abs(previous[j] - previous[i]) % 12
			after = abs(current[j] - current[i]) % 12

			if before != interval or after != interval:
				continue

			motion_i = current[i] - previous[i]
			motion_j = current[j] - previous[j]

			if motion_i != 0 and motion_j != 0 and _sign(motion_i) == _sign(motion_j):
				return True

	return False


def has_parallel_fifths (previous: Voicing, current: Voicing) -> bool:

	return _has_parallel(previous, current, 7)


def has_parallel_octaves (previous: Voicing, current: Voicing) -> bool:

	return _has_parallel(previous, current, 0)


def has_voice_crossing (voicing: Voicing) -> bool:

	"""Return True if any voice is at or above the voice above it."""

	return any(voicing[i] >= voicing[i + 1] for i in range(len(voicing) - 1))


def total_motion (previous: Voicing, current: Voicing) -> int:

	"""Sum of the semitone distances each voice moves."""

	return sum(abs(b - a) for a, b in zip(previous, current))


def has_contrary_outer_motion (previous: Voicing, current: Voicing) -> bool:

	if len(previous) < 2:
		return True

	bass = current[0] - previous[0]
	soprano = current[-1] - previous[-1]

	return bass != 0 and soprano != 0 and _sign(bass) != _sign(soprano)


def possible_voicings (chord_pitches: typing.Sequence[str], ranges: typing.Sequence[typing.Tuple[int, int]]) -> typing.List[Voicing]:

	"""
	Enumerate voicings of a chord, one pitch per voice, each within its range.

	A voicing must contain the first three pitch classes of the chord (root,
	third and fifth for a plain triad).  Enumeration stops at
	:data:`MAX_VOICINGS`.
	"""

	pitch_classes = [etherdaw.notation.pitch_to_midi(p) % 12 for p in chord_pitches]
	required = set(pitch_classes[:3])

	options = [
		[midi for midi in range(low, high + 1) if midi % 12 in pitch_classes]
		for low, high in ranges
	]

	voicings: typing.List[Voicing] = []
	current: Voicing = []

	def build (voice: int) -> None:

		if len(voicings) >= MAX_VOICINGS:
			return

		if voice == len(options):
			if required.issubset(m % 12 for m in current):
				voicings.append(list(current))
			return

		for midi in options[voice]:
			current.append(midi)
			build(voice + 1)
			current.pop()

	build(0)

	return voicings


def score_transition (previous: Voicing, current: Voicing, constraints: typing.Collection[str]) -> typing.Tuple[bool, float]:

	"""Return ``(valid, score)`` for moving from one voicing to the next.  Higher is better."""

	valid = True
	score = 0.0

	if "no_parallel_fifths" in constraints and has_parallel_fifths(previous, current):
		valid = False

	if "no_parallel_octaves" in constraints and has_parallel_octaves(previous, current):
		valid = False

	if "avoid_voice_crossing" in constraints and has_voice_crossing(current):
		valid = False

	if "contrary_outer_motion" in constraints and not has_contrary_outer_motion(previous, current):
		score -= CONTRARY_MOTION_PENALTY

	if "smooth_motion" in constraints:
		score -= total_motion(previous, current)

	return valid, score


def voice_ranges (voices: int, overrides: typing.Optional[typing.Dict[str, typing.Sequence[str]]] = None) -> typing.List[typing.Tuple[int, int]]:

	"""
	Return a MIDI ``(low, high)`` range per voice.

	Voices are named bass, tenor, alto and soprano from the bottom.  Extra
	voices get two-octave ranges stacked an octave apart.  ``overrides`` maps
	a voice name to ``[low_pitch, high_pitch]``.
	"""

	overrides = overrides or {}
	ranges: typing.List[typing.Tuple[int, int]] = []

	for i in range(voices):

		name = VOICE_NAMES[i] if i < len(VOICE_NAMES) else f"voice{i}"

		if name in overrides:
			low, high = overrides[name]
			ranges.append((etherdaw.notation.pitch_to_midi(low), etherdaw.notation.pitch_to_midi(high)))
		elif name in DEFAULT_RANGES:
			ranges.append(DEFAULT_RANGES[name])
		else:
			ranges.append((36 + i * 12, 60 + i * 12))

	return ranges


def effective_constraints (style: str, constraints: typing.Optional[typing.Sequence[str]] = None) -> typing.List[str]:

	"""Combine a style preset with extra constraint names, without duplicates."""

	extra = list(constraints or [])
	combined = extra

	if style != "custom" and style in CONSTRAINT_PRESETS:
		combined = CONSTRAINT_PRESETS[style] + extra

	return list(dict.fromkeys(combined))


def _best_sequence (
	progression: typing.Sequence[str],
	ranges: typing.Sequence[typing.Tuple[int, int]],
	constraints: typing.Collection[str],
	warnings: typing.List[str]
) -> typing.Optional[typing.List[Voicing]]:

	all_voicings = [possible_voicings(etherdaw.chords.chord_notes(chord, 3), ranges) for chord in progression]

	for chord, candidates in zip(progression, all_voicings):
		if not candidates:
			warnings.append(f"No valid voicings for chord: {chord}")
			return None

	beam: typing.List[typing.Tuple[float, typing.List[Voicing]]] = [(0.0, [v]) for v in all_voicings[0]]

	for index in range(1, len(progression)):

		next_beam: typing.List[typing.Tuple[float, typing.List[Voicing]]] = []

		for score, sequence in beam:
			for candidate in all_voicings[index]:
				valid, step_score = score_transition(sequence[-1], candidate, constraints)
				if valid:
					next_beam.append((score + step_score, sequence + [candidate]))

		if not next_beam:
			warnings.append(f"No valid voicings satisfy all constraints at chord {index}")

			for score, sequence in beam:
				for candidate in all_voicings[index]:
					next_beam.append((score - RELAXED_PENALTY, sequence + [candidate]))

		# Stable sort keeps enumeration order among equal scores.
		beam = sorted(next_beam, key=lambda state: -state[0])[:BEAM_WIDTH]

	if not beam:
		return None

	return beam[0][1]


def voice_lead_progression (
	progression: typing.Sequence[str],
	voices: int = 4,
	style: str = "jazz",
	constraints: typing.Optional[typing.Sequence[str]] = None,
	ranges: typing.Optional[typing.Dict[str, typing.Sequence[str]]] = None
) -> VoiceLeadingResult:

	"""
	Voice a chord progression under a constraint style.

	Parameters:
		progression: Chord symbols without durations, e.g. ``["Am", "Dm", "E7"]``
		voices: Number of voices, bass upward
		style: ``"bach"``, ``"jazz"``, ``"pop"`` or ``"custom"``
		constraints: Extra constraint names added to the style preset
		ranges: Per-voice pitch range overrides

	Returns:
		A :class:`VoiceLeadingResult`.  When no voicing sequence exists the
		chords fall back to plain stacking and a warning is included.
	"""

	warnings: typing.List[str] = []

	if not progression:
		return VoiceLeadingResult(voicings=[], warnings=warnings)

	active = effective_constraints(style, constraints)
	sequence = _best_sequence(progression, voice_ranges(voices, ranges), active, warnings)

	if sequence is None:
		warnings.append("Could not find valid voicing sequence for all chords")
		return VoiceLeadingResult(
			voicings = [etherdaw.chords.chord_notes(chord, 3) for chord in progression],
			warnings = warnings,
		)

	return VoiceLeadingResult(
		voicings = [[etherdaw.notation.midi_to_pitch(m) for m in voicing] for voicing in sequence],
		warnings = warnings,
	)


def validate_voice_lead (progression: typing.Sequence[str], voices: int, style: typing.Optional[str]) -> typing.List[str]:

	"""Return warnings for a voice-lead configuration without running the search."""

	warnings: typing.List[str] = []

	if not progression:
		warnings.append("Voice leading must have a chord progression")

	if voices < 2 or voices > 6:
		warnings.append(f"Voice count {voices} should be between 2 and 6")

	if style and style not in CONSTRAINT_PRESETS:
		warnings.append(f"Unknown style: {style}. Valid: {', '.join(CONSTRAINT_PRESETS)}")

	return warnings
