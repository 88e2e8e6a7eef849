"""The compiled Timeline and the builder that assembles it.

A Timeline is the only thing renderers see.  Every note carries its position
in beats and in seconds; ``timing_offset`` (milliseconds) is kept separate
from ``time`` so a renderer can choose whether to apply it.  Probability is
already resolved: notes that lost their roll are not on the Timeline.

Notes are ordered by beat.  Notes on the same beat keep the order they were
added in, which is arrangement order, then track order.
"""

import dataclasses
import typing

import etherdaw.constants.gm_drums
import etherdaw.notation
import etherdaw.score


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""
	One sounding note.

	Parameters:
		instrument: The track (instrument) that plays it.
		pitch: A pitch like ``"C4"`` or a ``drum:<name>@<kit>`` token.
		beat: Absolute start in beats.
		duration_beats: Length in beats.
		time: Absolute start in seconds.
		duration: Length in seconds.
		velocity: 0-1.
		timing_offset: Extra push or drag in milliseconds, not folded into ``time``.
		portamento: Glide into this note.
		section: Name of the section occurrence the note came from.
	"""

	instrument: str
	pitch: str
	beat: float
	duration_beats: float
	time: float
	duration: float
	velocity: float
	timing_offset: typing.Optional[int] = None
	portamento: bool = False
	section: str = ""

	@property
	def is_drum (self) -> bool:

		return etherdaw.notation.is_drum_pitch(self.pitch)

	@property
	def midi_note (self) -> typing.Optional[int]:

		"""MIDI note number, via the General MIDI drum map for drum tokens.  None for an unmapped drum."""

		if self.is_drum:
			name = self.pitch[len("drum:"):].split("@")[0]
			return etherdaw.constants.gm_drums.DRUM_NAME_TO_GM.get(name)

		return etherdaw.notation.pitch_to_midi(self.pitch)

	@property
	def end (self) -> float:

		return self.time + self.duration


@dataclasses.dataclass(frozen=True)
class SectionMarker:

	"""Where a section occurrence starts, with the tempo and key it plays in."""

	name: str
	index: int
	beat: float
	time: float
	bars: float
	beats: float
	seconds: float
	tempo: float
	key: str


@dataclasses.dataclass(frozen=True)
class AutomationEvent:

	"""One sampled automation value.  ``path`` is the automation key, e.g. ``"pad.params.brightness"``."""

	path: str
	beat: float
	time: float
	value: float


@dataclasses.dataclass(frozen=True)
class Timeline:

	notes: typing.Tuple[NoteEvent, ...]
	total_beats: float
	total_seconds: float
	instruments: typing.Tuple[str, ...]
	settings: etherdaw.score.Settings
	sections: typing.Tuple[SectionMarker, ...] = ()
	automation: typing.Tuple[AutomationEvent, ...] = ()

	def notes_for (self, instrument: str) -> typing.List[NoteEvent]:

		return [note for note in self.notes if note.instrument == instrument]

	def __len__ (self) -> int:

		return len(self.notes)


class TimelineBuilder:

	"""
	Collects events section by section and builds one sorted Timeline.

	Example:
		```python
		builder = TimelineBuilder(settings)
		builder.add_section(marker)
		builder.add_note(note)
		timeline = builder.build(total_beats=16.0, total_seconds=8.0)
		```
	"""

	def __init__ (self, settings: etherdaw.score.Settings) -> None:

		self.settings = settings
		self.notes: typing.List[NoteEvent] = []
		self.sections: typing.List[SectionMarker] = []
		self.automation: typing.List[AutomationEvent] = []
		self._instruments: typing.Dict[str, None] = {}


	def add_note (self, note: NoteEvent) -> None:

		self._instruments.setdefault(note.instrument, None)
		self.notes.append(note)


	def add_section (self, marker: SectionMarker) -> None:

		self.sections.append(marker)


	def add_automation (self, event: AutomationEvent) -> None:

		self.automation.append(event)


	def build (self, total_beats: float, total_seconds: float) -> Timeline:

		"""Sort everything by beat (stable) and freeze it."""

		return Timeline(
			notes = tuple(sorted(self.notes, key=lambda note: note.beat)),
			total_beats = total_beats,
			total_seconds = total_seconds,
			instruments = tuple(self._instruments),
			settings = self.settings,
			sections = tuple(sorted(self.sections, key=lambda marker: marker.beat)),
			automation = tuple(sorted(self.automation, key=lambda event: event.beat)),
		)


def filter_by_instrument (timeline: Timeline, instrument: str) -> Timeline:

	"""Return a Timeline holding only one instrument's notes.  Section markers and totals are kept."""

	return dataclasses.replace(
		timeline,
		notes = tuple(timeline.notes_for(instrument)),
		instruments = tuple(name for name in timeline.instruments if name == instrument),
	)


def offset_timeline (timeline: Timeline, beats: float, seconds: float = 0.0) -> Timeline:

	"""Shift every event by ``beats`` (and ``seconds``); the totals grow by the same amount."""

	return dataclasses.replace(
		timeline,
		notes = tuple(dataclasses.replace(note, beat=note.beat + beats, time=note.time + seconds) for note in timeline.notes),
		sections = tuple(dataclasses.replace(marker, beat=marker.beat + beats, time=marker.time + seconds) for marker in timeline.sections),
		automation = tuple(dataclasses.replace(event, beat=event.beat + beats, time=event.time + seconds) for event in timeline.automation),
		total_beats = timeline.total_beats + beats,
		total_seconds = timeline.total_seconds + seconds,
	)


def merge_timelines (timelines: typing.Sequence[Timeline]) -> Timeline:

	"""
	Overlay timelines into one.

	The result lasts as long as the longest input and keeps the first
	input's settings.

	Raises:
		ValueError: If ``timelines`` is empty.
	"""

	if not timelines:
		raise ValueError("Cannot merge an empty list of timelines")

	instruments: typing.Dict[str, None] = {}

	for timeline in timelines:
		for name in timeline.instruments:
			instruments.setdefault(name, None)

	return Timeline(
		notes = tuple(sorted((note for timeline in timelines for note in timeline.notes), key=lambda note: note.beat)),
		total_beats = max(timeline.total_beats for timeline in timelines),
		total_seconds = max(timeline.total_seconds for timeline in timelines),
		instruments = tuple(instruments),
		settings = timelines[0].settings,
		sections = tuple(sorted((marker for timeline in timelines for marker in timeline.sections), key=lambda marker: marker.beat)),
		automation = tuple(sorted((event for timeline in timelines for event in timeline.automation), key=lambda event: event.beat)),
	)
