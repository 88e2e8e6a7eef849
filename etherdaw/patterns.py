"""Pattern definitions, expanded notes and the expansion context.

A pattern is exactly one of the variants below.  Base patterns produce notes
directly; meta patterns (:class:`TransformPattern`, :class:`ExtendsPattern`,
:class:`ConditionalPattern`) name other patterns and are rewritten into a base
pattern by :mod:`etherdaw.resolver` before expansion.

Every base pattern ends with the same three optional fields:

- ``velocity``: replaces the track velocity for this pattern
- ``envelope``: a velocity envelope preset name or a list of velocities
- ``constrain_to_scale``: snap every non-drum pitch to the active key

Pattern values are shared by name between tracks and sections and are never
modified once built.  Expansion always allocates new :class:`ExpandedNote`
objects.
"""

import dataclasses
import random
import typing

import etherdaw.constants
import etherdaw.constants.durations
import etherdaw.constants.velocity
import etherdaw.diagnostics
import etherdaw.intervals
import etherdaw.notation


Envelope = typing.Union[str, typing.Tuple[float, ...]]


# ─── Base patterns ────────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True)
class NotesPattern:

	"""Literal note and rest strings, played in order."""

	notes: typing.Tuple[str, ...]
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class ChordsPattern:

	"""Chord strings, each sounding all its tones at once."""

	chords: typing.Tuple[str, ...]
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class DegreesPattern:

	"""Scale degrees in the active key, with a cycling rhythm for degrees that carry no duration."""

	degrees: typing.Tuple[typing.Union[int, str], ...]
	rhythm: typing.Tuple[str, ...] = ("q",)
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class ArpeggioPattern:

	"""One chord broken into single notes."""

	chord: str
	duration: str
	mode: typing.Optional[str] = None
	octaves: int = etherdaw.constants.velocity.ARPEGGIO_OCTAVES
	gate: float = etherdaw.constants.velocity.ARPEGGIO_GATE
	steps: typing.Optional[int] = None
	pattern: typing.Optional[typing.Tuple[int, ...]] = None
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class DrumHit:

	"""A single drum hit at a drum-time position such as ``"h+8"``."""

	drum: str
	time: str
	velocity: typing.Optional[float] = None


@dataclasses.dataclass(frozen=True)
class DrumsPattern:

	"""
	A drum step sequencer.

	``lines`` maps a drum name to a step string (``x`` hit, ``X`` or ``>``
	accent, ``.`` rest).  ``steps`` is a single step string played on the
	kick.  ``hits`` places individual hits at drum-time positions.
	"""

	lines: typing.Dict[str, str] = dataclasses.field(default_factory=dict)
	kit: str = etherdaw.constants.DEFAULT_DRUM_KIT
	step: str = etherdaw.constants.durations.DEFAULT_DRUM_STEP
	steps: typing.Optional[str] = None
	hits: typing.Tuple[DrumHit, ...] = ()
	bars: typing.Optional[float] = None
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class EuclideanPattern:

	"""``hits`` onsets spread evenly over ``steps`` slots of length ``duration``."""

	hits: int
	steps: int
	duration: str
	rotation: int = 0
	pitch: typing.Optional[str] = None
	drum: typing.Optional[str] = None
	kit: str = etherdaw.constants.DEFAULT_DRUM_KIT
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class MarkovPattern:

	"""
	A melody walked from a Markov chain over scale-degree, pitch, ``rest`` and ``approach`` states.

	``seed`` pins this pattern to its own random stream; without it the
	compile-wide stream is used.  ``constrain_states`` snaps generated
	pitches to the key (or to ``chord_scale``'s scale).
	"""

	states: typing.Tuple[str, ...]
	steps: int
	duration: typing.Union[str, typing.Tuple[str, ...]]
	transitions: typing.Optional[typing.Dict[str, typing.Dict[str, float]]] = None
	preset: typing.Optional[str] = None
	initial_state: typing.Optional[str] = None
	octave: int = etherdaw.constants.DEFAULT_CHORD_OCTAVE
	seed: typing.Optional[int] = None
	constrain_states: bool = False
	chord_scale: typing.Optional[str] = None
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class ContinuationPattern:

	"""Extends the notes of ``source`` by sequence, extension, fragmentation or development."""

	source: str
	technique: str
	steps: int = 3
	interval: int = -2
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class VoiceLeadPattern:

	"""A chord progression voiced by constraint search, one bar per chord."""

	progression: typing.Tuple[str, ...]
	voices: int = 4
	style: str = "jazz"
	constraints: typing.Tuple[str, ...] = ()
	voice_ranges: typing.Optional[typing.Dict[str, typing.Tuple[str, str]]] = None
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class TupletPattern:

	"""``ratio[0]`` notes in the time of ``ratio[1]``."""

	ratio: typing.Tuple[int, int]
	notes: typing.Tuple[str, ...]
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class RestPattern:

	"""Silence for the length of one rest string."""

	rest: str
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


# ─── Meta patterns ────────────────────────────────────────────────────────────


TRANSFORM_OPERATIONS = ("invert", "retrograde", "augment", "diminish", "transpose", "octave")

CONDITIONS = ("density", "probability", "section_index")

OPERATORS = (">", "<", ">=", "<=", "==", "!=")


@dataclasses.dataclass(frozen=True)
class TransformPattern:

	"""The notes of ``source`` rewritten by one transform operation."""

	source: str
	operation: str
	params: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: bool = False


@dataclasses.dataclass(frozen=True)
class ExtendsPattern:

	"""
	A copy of ``parent`` with overrides.

	``notes`` replaces the parent's notes, then ``transpose`` and ``octave``
	shift them.  ``velocity``, ``envelope`` and ``constrain_to_scale`` win over
	the parent's values when set.
	"""

	parent: str
	notes: typing.Optional[typing.Tuple[str, ...]] = None
	transpose: int = 0
	octave: int = 0
	velocity: typing.Optional[float] = None
	envelope: typing.Optional[Envelope] = None
	constrain_to_scale: typing.Optional[bool] = None


@dataclasses.dataclass(frozen=True)
class ConditionalPattern:

	"""Plays ``then`` when the condition holds, else ``otherwise`` (or ``then`` if unset)."""

	condition: str
	operator: str
	value: float
	then: str
	otherwise: typing.Optional[str] = None


BasePattern = typing.Union[
	NotesPattern,
	ChordsPattern,
	DegreesPattern,
	ArpeggioPattern,
	DrumsPattern,
	EuclideanPattern,
	MarkovPattern,
	ContinuationPattern,
	VoiceLeadPattern,
	TupletPattern,
	RestPattern,
]

MetaPattern = typing.Union[TransformPattern, ExtendsPattern, ConditionalPattern]

Pattern = typing.Union[BasePattern, MetaPattern]

BASE_PATTERN_TYPES: typing.Tuple[type, ...] = (
	NotesPattern,
	ChordsPattern,
	DegreesPattern,
	ArpeggioPattern,
	DrumsPattern,
	EuclideanPattern,
	MarkovPattern,
	ContinuationPattern,
	VoiceLeadPattern,
	TupletPattern,
	RestPattern,
)


# ─── Expansion output ─────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True)
class ExpandedNote:

	"""
	One note relative to the start of its pattern.

	``timing_offset`` is in milliseconds and ``probability`` in [0, 1]; both
	stay ``None`` when the note string did not set them.
	"""

	pitch: str
	start: float
	duration: float
	velocity: float
	timing_offset: typing.Optional[int] = None
	probability: typing.Optional[float] = None
	portamento: bool = False

	@property
	def end (self) -> float:

		return self.start + self.duration


@dataclasses.dataclass
class ExpandedPattern:

	"""Notes from one expansion and the beat length of the pattern."""

	notes: typing.List[ExpandedNote] = dataclasses.field(default_factory=list)
	total_beats: float = 0.0


# ─── Context ──────────────────────────────────────────────────────────────────


@dataclasses.dataclass
class PatternContext:

	"""
	Everything a generator may read besides the pattern itself.

	Parameters:
		key: Active key (section override or global).
		tempo: Active tempo in BPM.
		patterns: The score's pattern table, looked up by name and never modified.
		rng: Random stream for this section occurrence.
		diagnostics: Where recoverable problems are reported.
		velocity: Track velocity, 0-1.
		octave_offset: Whole octaves added to every pitch.
		transpose: Semitones added to every pitch.
		density: Density at the start of the section, if the section has a curve.
		section_index: Position of the section occurrence in the arrangement.
	"""

	key: etherdaw.intervals.Key
	tempo: float
	patterns: typing.Mapping[str, Pattern]
	rng: random.Random
	diagnostics: etherdaw.diagnostics.Diagnostics
	velocity: float = etherdaw.constants.velocity.DEFAULT_VELOCITY
	octave_offset: int = 0
	transpose: int = 0
	density: typing.Optional[float] = None
	section_index: int = 0

	def place (self, pitch: str) -> str:

		"""Apply the octave offset then the transpose to a pitch.  Drum tokens pass through."""

		if etherdaw.notation.is_drum_pitch(pitch):
			return pitch

		return etherdaw.notation.transpose_pitch(
			etherdaw.notation.shift_pitch_octave(pitch, self.octave_offset),
			self.transpose
		)
