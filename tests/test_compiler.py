import math

import pytest

import etherdaw.compiler
import etherdaw.score


def _compile (document: dict, **options) -> etherdaw.compiler.CompilationResult:

	return etherdaw.compiler.compile(etherdaw.score.load_score(document), etherdaw.compiler.CompileOptions(**options))


def _one_section (tracks: dict, patterns: dict, bars: float = 1, **section) -> dict:

	return {
		"settings": {"tempo": 120},
		"patterns": patterns,
		"sections": {"s": dict(bars=bars, tracks=tracks, **section)},
		"arrangement": ["s"],
	}


# ─── Timing ───────────────────────────────────────────────────────────────────


def test_arpeggio_timing (arpeggio_document: dict) -> None:

	"""Four repeats of a four-note arpeggio fill four bars at 120 BPM: 16 notes over 8 seconds."""

	result = _compile(arpeggio_document, seed=1)
	timeline = result.timeline

	assert len(timeline) == 16
	assert timeline.total_beats == 16.0
	assert timeline.total_seconds == pytest.approx(8.0)
	assert [note.pitch for note in timeline.notes[:4]] == ["C4", "E4", "G4", "C5"]
	assert [note.time for note in timeline.notes] == pytest.approx([i * 0.5 for i in range(16)])
	assert all(note.duration == pytest.approx(0.5) for note in timeline.notes)
	assert result.stats == etherdaw.compiler.CompilationStats(
		total_sections = 1,
		total_bars = 4.0,
		total_notes = 16,
		instruments = ("piano",),
		duration_seconds = 8.0,
		sections = ("main",),
	)
	assert result.warnings == []


def test_sections_follow_each_other (song_document: dict) -> None:

	"""Sections start where the previous one ended, each at its own tempo."""

	result = _compile(song_document, seed=1)
	markers = result.timeline.sections

	assert [marker.name for marker in markers] == ["a", "b", "c"]
	assert [marker.beat for marker in markers] == [0.0, 4.0, 8.0]
	assert [marker.tempo for marker in markers] == [100.0, 100.0, 140.0]
	assert [marker.time for marker in markers] == pytest.approx([0.0, 2.4, 4.8])
	assert markers[0].key == "A minor"
	assert result.timeline.total_beats == 16.0
	assert result.timeline.total_seconds == pytest.approx(4.8 + 8 * 60.0 / 140.0)


def test_notes_are_sorted_by_beat (song_document: dict) -> None:

	"""The timeline is ordered by beat, and every note falls inside its section."""

	timeline = _compile(song_document, seed=2).timeline
	beats = [note.beat for note in timeline.notes]

	assert beats == sorted(beats)
	assert timeline.instruments == ("drums", "bass", "lead")

	starts = {marker.name: marker.beat for marker in timeline.sections}
	ends = {marker.name: marker.beat + marker.beats for marker in timeline.sections}

	for note in timeline.notes:
		assert starts[note.section] - 0.1 <= note.beat < ends[note.section] + 0.1


def test_same_beat_keeps_track_order () -> None:

	"""Notes on one beat stay in track order."""

	document = _one_section(
		{"first": {"pattern": "p"}, "second": {"pattern": "p"}},
		{"p": {"notes": ["C4:w"]}},
	)

	assert [note.instrument for note in _compile(document).timeline.notes] == ["first", "second"]


def test_timing_offset_is_kept_separate () -> None:

	"""A millisecond offset rides along without moving the note's time."""

	document = _one_section({"lead": {"pattern": "p"}}, {"p": {"notes": ["r:q", "C4:q+20ms"]}})
	note = _compile(document).timeline.notes[0]

	assert note.time == pytest.approx(0.5)
	assert note.timing_offset == 20


def test_score_swing () -> None:

	"""Global swing delays off-beat eighths."""

	document = _one_section({"hats": {"pattern": "p"}}, {"p": {"notes": ["C4:8", "C4:8"]}})
	document["settings"]["swing"] = 0.6

	notes = _compile(document).timeline.notes

	assert notes[1].beat == pytest.approx(0.5 + 0.5 / 3.0 * 0.6)


# ─── Options ──────────────────────────────────────────────────────────────────


def test_seed_is_reproducible (song_document: dict) -> None:

	"""The same seed gives the same timeline."""

	first = _compile(song_document, seed=11)
	second = _compile(song_document, seed=11)

	assert first.timeline.notes == second.timeline.notes
	assert first.stats == second.stats


def test_start_section (song_document: dict) -> None:

	"""Compiling from a section starts the timeline at that section."""

	result = _compile(song_document, seed=1, start_section="b")

	assert result.stats.sections == ("b", "c")
	assert result.stats.total_bars == 3.0
	assert result.timeline.sections[0].beat == 0.0
	assert {note.section for note in result.timeline.notes} == {"b", "c"}


def test_end_section (song_document: dict) -> None:

	"""The end section is included."""

	result = _compile(song_document, seed=1, start_section="a", end_section="b")

	assert result.stats.sections == ("a", "b")
	assert result.timeline.total_beats == 8.0


def test_unknown_slice_names_are_ignored (song_document: dict) -> None:

	"""Unknown start and end names compile the whole arrangement."""

	result = _compile(song_document, seed=1, start_section="bridge", end_section="outro")

	assert result.stats.sections == ("a", "b", "c")


def test_tempo_override (arpeggio_document: dict) -> None:

	"""A tempo option replaces the score tempo."""

	assert _compile(arpeggio_document, tempo=60).timeline.total_seconds == pytest.approx(16.0)


def test_key_override () -> None:

	"""A key option moves scale degrees."""

	document = _one_section({"lead": {"pattern": "p"}}, {"p": {"degrees": [1, 3]}})
	document["settings"]["key"] = "C major"

	notes = _compile(document, key="D major").timeline.notes

	assert [note.pitch for note in notes] == ["D4", "F#4"]


# ─── Sections ─────────────────────────────────────────────────────────────────


def test_missing_section_warns (arpeggio_document: dict) -> None:

	"""An unknown arrangement entry is skipped with a warning."""

	arpeggio_document["arrangement"] = ["main", "ghost", "main"]

	result = _compile(arpeggio_document, seed=1)

	assert result.warnings == ['Section "ghost" in arrangement not found']
	assert result.stats.total_sections == 2
	assert result.timeline.total_beats == 32.0


def test_missing_section_outside_slice_is_quiet (arpeggio_document: dict) -> None:

	"""Only the compiled slice is checked for missing sections."""

	arpeggio_document["sections"]["outro"] = {"bars": 1, "tracks": {}}
	arpeggio_document["arrangement"] = ["main", "outro", "ghost"]

	result = _compile(arpeggio_document, seed=1, end_section="outro")

	assert result.warnings == []
	assert result.stats.sections == ("main", "outro")


def test_missing_pattern_warns () -> None:

	"""A track naming an unknown pattern is silent and reported."""

	result = _compile(_one_section({"lead": {"pattern": "nope"}}, {}))

	assert len(result.timeline) == 0
	assert result.warnings == ['Pattern "nope" not found']


def test_notes_past_section_end_are_dropped () -> None:

	"""A pattern longer than its section is cut at the section end."""

	document = _one_section({"lead": {"pattern": "p"}}, {"p": {"notes": ["C4:h", "D4:h", "E4:h", "F4:h"]}})
	timeline = _compile(document).timeline

	assert [note.pitch for note in timeline.notes] == ["C4", "D4"]
	assert timeline.total_beats == 4.0


def test_muted_track_is_silent () -> None:

	"""Muted tracks do not reach the timeline."""

	document = _one_section(
		{"lead": {"pattern": "p"}, "pad": {"pattern": "p", "mute": True}},
		{"p": {"notes": ["C4:w"]}},
	)

	assert _compile(document).timeline.instruments == ("lead",)


def test_zero_density_section () -> None:

	"""A section at zero density plays nothing but still takes its time."""

	document = _one_section({"lead": {"pattern": "p"}}, {"p": {"notes": ["C4:q"] * 4}}, density={"start": 0, "end": 0})
	result = _compile(document, seed=1)

	assert len(result.timeline) == 0
	assert result.timeline.total_seconds == pytest.approx(2.0)


def test_probability_notes () -> None:

	"""Notes marked ?0 never play and notes marked ?1 always do."""

	document = _one_section({"lead": {"pattern": "p"}}, {"p": {"notes": ["C4:q?0", "D4:q?1", "E4:q?0", "F4:q"]}})

	for seed in range(5):
		assert [note.pitch for note in _compile(document, seed=seed).timeline.notes] == ["D4", "F4"]


def test_tempo_automation () -> None:

	"""A tempo ramp stretches seconds and is sampled into automation events."""

	document = _one_section(
		{"lead": {"pattern": "p"}},
		{"p": {"notes": ["C4:q"] * 16}},
		bars = 4,
		automation = {"tempo": {"start": 60, "end": 120}},
	)
	timeline = _compile(document).timeline

	assert timeline.total_seconds == pytest.approx(16.0 * math.log(2.0), rel=1e-3)
	assert len(timeline.automation) == 21
	assert timeline.automation[0].value == 60.0
	assert timeline.automation[-1].value == 120.0

	gaps = [b.time - a.time for a, b in zip(timeline.notes, timeline.notes[1:])]

	assert all(later < earlier for earlier, later in zip(gaps, gaps[1:]))


def test_bad_automation_path_warns () -> None:

	"""Meaningless automation paths are reported."""

	document = _one_section({}, {}, automation={"volume": {"start": 0, "end": 1}})

	assert _compile(document).warnings == ["Invalid automation path: volume"]


def test_conditional_on_section_index () -> None:

	"""Conditionals see the section's place in the arrangement."""

	document = {
		"patterns": {
			"low": {"notes": ["C3:w"]},
			"high": {"notes": ["C5:w"]},
			"pick": {"conditional": {"condition": "section_index", "operator": ">=", "value": 1, "then": "high", "else": "low"}},
		},
		"sections": {"s": {"bars": 1, "tracks": {"lead": {"pattern": "pick"}}}},
		"arrangement": ["s", "s"],
	}

	assert [note.pitch for note in _compile(document).timeline.notes] == ["C3", "C5"]


# ─── Errors ───────────────────────────────────────────────────────────────────


def test_bad_note_is_a_compile_error () -> None:

	"""A malformed note stops the compile and says where it was."""

	document = _one_section({"lead": {"pattern": "p"}}, {"p": {"notes": ["C4:quarter"]}})

	with pytest.raises(etherdaw.compiler.CompileError, match='Section "s" track "lead"'):
		_compile(document)


def test_cycle_is_a_compile_error () -> None:

	"""Self-referencing patterns stop the compile."""

	document = _one_section({"lead": {"pattern": "a"}}, {"a": {"extends": "b"}, "b": {"extends": "a"}})

	with pytest.raises(etherdaw.compiler.CompileError):
		_compile(document)


def test_bad_key_raises (arpeggio_document: dict) -> None:

	"""An unknown key is rejected."""

	arpeggio_document["settings"]["key"] = "H major"

	with pytest.raises(ValueError):
		_compile(arpeggio_document)


# ─── Analysis and validation ──────────────────────────────────────────────────


def test_analyze (song_document: dict) -> None:

	"""Analysis sums bars and time without expanding patterns."""

	analysis = etherdaw.compiler.analyze(etherdaw.score.load_score(song_document))

	assert analysis.total_sections == 3
	assert analysis.total_bars == 4.0
	assert analysis.instruments == ("drums", "bass", "lead")
	assert analysis.duration_seconds == pytest.approx(4.8 + 8 * 60.0 / 140.0)
	assert [section.name for section in analysis.sections] == ["a", "b", "c"]
	assert analysis.patterns == ("beat", "bassline", "melody")


def test_analyze_skips_missing_sections (arpeggio_document: dict) -> None:

	"""Analysis counts the same sections a compile would."""

	arpeggio_document["arrangement"] = ["main", "ghost"]
	score = etherdaw.score.load_score(arpeggio_document)

	analysis = etherdaw.compiler.analyze(score)

	assert analysis.total_sections == 1
	assert analysis.total_sections == etherdaw.compiler.compile(score).stats.total_sections


def test_validate_references (song_document: dict) -> None:

	"""Unknown sections, patterns and instruments are all listed."""

	song_document["arrangement"].append("coda")
	song_document["sections"]["a"]["tracks"]["keys"] = {"pattern": "chords"}

	problems = etherdaw.compiler.validate_references(etherdaw.score.load_score(song_document))

	assert problems == [
		'Arrangement references unknown section: "coda"',
		'Section "a" track "keys" references unknown pattern: "chords"',
		'Section "a" has track "keys" with no matching instrument',
	]


def test_validate_clean_score (song_document: dict) -> None:

	"""A consistent score has no problems."""

	assert etherdaw.compiler.validate_references(etherdaw.score.load_score(song_document)) == []
