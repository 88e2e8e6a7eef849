import pytest

import etherdaw.score
import etherdaw.timeline


def _note (instrument: str, beat: float, pitch: str = "C4") -> etherdaw.timeline.NoteEvent:

	return etherdaw.timeline.NoteEvent(
		instrument = instrument,
		pitch = pitch,
		beat = beat,
		duration_beats = 1.0,
		time = beat * 0.5,
		duration = 0.5,
		velocity = 0.8,
	)


def _timeline (*notes: etherdaw.timeline.NoteEvent, total_beats: float = 4.0) -> etherdaw.timeline.Timeline:

	builder = etherdaw.timeline.TimelineBuilder(etherdaw.score.Settings())

	for note in notes:
		builder.add_note(note)

	return builder.build(total_beats=total_beats, total_seconds=total_beats * 0.5)


def test_builder_sorts_stably () -> None:

	"""Notes come out by beat; ties keep insertion order."""

	timeline = _timeline(_note("b", 2.0), _note("a", 0.0), _note("c", 2.0), _note("a", 1.0))

	assert [(note.instrument, note.beat) for note in timeline.notes] == [("a", 0.0), ("a", 1.0), ("b", 2.0), ("c", 2.0)]
	assert timeline.instruments == ("b", "a", "c")
	assert len(timeline) == 4


def test_note_properties () -> None:

	"""Drum tokens map through the General MIDI table; pitches through their number."""

	kick = _note("drums", 0.0, "drum:kick@909")
	cowbell = _note("drums", 0.0, "drum:cowbell@808")
	unknown = _note("drums", 0.0, "drum:gong@909")
	melodic = _note("lead", 1.0, "A4")

	assert kick.is_drum and kick.midi_note == 36
	assert cowbell.midi_note == 56
	assert unknown.midi_note is None
	assert not melodic.is_drum and melodic.midi_note == 69
	assert melodic.end == pytest.approx(1.0)


def test_notes_for_and_filter () -> None:

	"""Filtering keeps one instrument's notes and the totals."""

	timeline = _timeline(_note("bass", 0.0), _note("lead", 1.0), _note("bass", 2.0))
	bass = etherdaw.timeline.filter_by_instrument(timeline, "bass")

	assert [note.beat for note in timeline.notes_for("bass")] == [0.0, 2.0]
	assert bass.instruments == ("bass",)
	assert len(bass) == 2
	assert bass.total_beats == timeline.total_beats


def test_offset_timeline () -> None:

	"""Offsetting moves every event and grows the totals."""

	timeline = _timeline(_note("lead", 1.0))
	moved = etherdaw.timeline.offset_timeline(timeline, 4.0, 2.0)

	assert moved.notes[0].beat == 5.0
	assert moved.notes[0].time == 2.5
	assert moved.total_beats == 8.0
	assert moved.total_seconds == 4.0
	assert timeline.notes[0].beat == 1.0


def test_merge_timelines () -> None:

	"""Merging overlays notes in beat order and keeps the longest length."""

	first = _timeline(_note("lead", 0.0), _note("lead", 2.0), total_beats=4.0)
	second = _timeline(_note("bass", 1.0), total_beats=8.0)

	merged = etherdaw.timeline.merge_timelines([first, second])

	assert [(note.instrument, note.beat) for note in merged.notes] == [("lead", 0.0), ("bass", 1.0), ("lead", 2.0)]
	assert merged.instruments == ("lead", "bass")
	assert merged.total_beats == 8.0
	assert merged.settings == first.settings


def test_merge_nothing_raises () -> None:

	"""There is nothing to merge in an empty list."""

	with pytest.raises(ValueError):
		etherdaw.timeline.merge_timelines([])
