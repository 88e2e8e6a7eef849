import json

import pytest
import yaml

import etherdaw.automation
import etherdaw.density
import etherdaw.patterns
import etherdaw.score


def test_load_song (song_document: dict) -> None:

	"""A full document becomes typed settings, patterns, sections and arrangement."""

	score = etherdaw.score.load_score(song_document)

	assert score.settings == etherdaw.score.Settings(tempo=100.0, key="A minor", swing=0.0, title="Test Song")
	assert score.arrangement == ("a", "b", "c")
	assert set(score.instruments) == {"drums", "bass", "lead"}
	assert isinstance(score.patterns["beat"], etherdaw.patterns.DrumsPattern)
	assert score.patterns["beat"].kit == "808"
	assert score.patterns["bassline"] == etherdaw.patterns.NotesPattern(notes=("A2:q A2:q C3:q E3:q",))
	assert score.patterns["melody"].preset == "neighbor_weighted"
	assert score.sections["c"].tempo == 140.0
	assert score.sections["c"].tracks["lead"] == etherdaw.score.Track(patterns=("melody",), repeat=2, expression="jazzy")


def test_defaults () -> None:

	"""Missing settings fall back to 120 BPM in C major, 4/4, no swing."""

	score = etherdaw.score.load_score({"arrangement": []})

	assert score.settings == etherdaw.score.Settings()
	assert score.settings.tempo == 120.0
	assert score.settings.key == "C major"
	assert score.patterns == {}


def test_camel_case_keys () -> None:

	"""Score keys may be written in camelCase."""

	pattern = etherdaw.score.parse_pattern("p", {"notes": ["C#4:q"], "constrainToScale": True})

	assert pattern.constrain_to_scale is True

	score = etherdaw.score.load_score({"settings": {"timeSignature": "3/4"}, "arrangement": []})

	assert score.settings.time_signature == "3/4"


@pytest.mark.parametrize("data, expected", [
	({"chords": ["Am7:h", "D7:h"]}, etherdaw.patterns.ChordsPattern(chords=("Am7:h", "D7:h"))),
	({"degrees": [1, "3+", "r"], "rhythm": ["8"]}, etherdaw.patterns.DegreesPattern(degrees=(1, "3+", "r"), rhythm=("8",))),
	({"rest": "r:w"}, etherdaw.patterns.RestPattern(rest="r:w")),
	({"arpeggio": {"chord": "Cmaj7", "duration": "16", "mode": "updown", "octaves": 2}},
		etherdaw.patterns.ArpeggioPattern(chord="Cmaj7", duration="16", mode="updown", octaves=2)),
	({"euclidean": {"hits": 5, "steps": 8, "drum": "hihat"}},
		etherdaw.patterns.EuclideanPattern(hits=5, steps=8, duration="16", drum="hihat")),
	({"tuplet": {"ratio": [3, 2], "notes": ["C4:8", "D4:8", "E4:8"]}},
		etherdaw.patterns.TupletPattern(ratio=(3, 2), notes=("C4:8", "D4:8", "E4:8"))),
	({"continuation": {"source": "motif", "technique": "extension", "steps": 4}},
		etherdaw.patterns.ContinuationPattern(source="motif", technique="extension", steps=4)),
	({"voiceLead": {"progression": ["Dm7", "G7"], "style": "bach"}},
		etherdaw.patterns.VoiceLeadPattern(progression=("Dm7", "G7"), style="bach")),
	({"notes": ["C4:q"], "velocity": 0.5, "envelope": "crescendo"},
		etherdaw.patterns.NotesPattern(notes=("C4:q",), velocity=0.5, envelope="crescendo")),
])
def test_pattern_shapes (data: dict, expected: etherdaw.patterns.Pattern) -> None:

	"""Every pattern kind loads into its dataclass."""

	assert etherdaw.score.parse_pattern("p", data) == expected


def test_meta_patterns () -> None:

	"""Transform, extends and conditional forms load as meta patterns."""

	transform = etherdaw.score.parse_pattern("t", {"transform": {"source": "a", "operation": "transpose", "params": {"semitones": 5}}})
	extends = etherdaw.score.parse_pattern("e", {"extends": "a", "overrides": {"transpose": 2, "velocity": 0.4}})
	conditional = etherdaw.score.parse_pattern("c", {"conditional": {"condition": "density", "operator": ">", "value": 0.5, "then": "a", "else": "b"}})

	assert transform == etherdaw.patterns.TransformPattern(source="a", operation="transpose", params={"semitones": 5})
	assert extends == etherdaw.patterns.ExtendsPattern(parent="a", transpose=2, velocity=0.4)
	assert conditional == etherdaw.patterns.ConditionalPattern(condition="density", operator=">", value=0.5, then="a", otherwise="b")


def test_drum_shorthand () -> None:

	"""``type: drums`` with drum names as keys is a drum pattern."""

	pattern = etherdaw.score.parse_pattern("beat", {"type": "drums", "kick": "x...", "snare": "..x.", "kit": "808"})

	assert pattern == etherdaw.patterns.DrumsPattern(lines={"kick": "x...", "snare": "..x."}, kit="808")


def test_drum_hits () -> None:

	"""Individual drum hits load with their times."""

	pattern = etherdaw.score.parse_pattern("fill", {"drums": {"hits": [{"drum": "crash", "time": "h+8", "velocity": 0.9}]}})

	assert pattern.hits == (etherdaw.patterns.DrumHit(drum="crash", time="h+8", velocity=0.9),)


def test_empty_pattern_raises () -> None:

	"""A pattern without content names the pattern."""

	with pytest.raises(etherdaw.score.ScoreError, match='Pattern "ghost"'):
		etherdaw.score.parse_pattern("ghost", {"velocity": 0.5})


def test_empty_markov_durations_raise () -> None:

	"""A Markov pattern needs at least one duration."""

	with pytest.raises(etherdaw.score.ScoreError, match="patterns.walk.markov.duration"):
		etherdaw.score.parse_pattern("walk", {"markov": {"states": ["1"], "steps": 4, "duration": []}})


def test_arpeggio_octaves_must_be_positive () -> None:

	"""An arpeggio spans at least one octave."""

	with pytest.raises(etherdaw.score.ScoreError, match="octaves must be at least 1"):
		etherdaw.score.parse_pattern("arp", {"arpeggio": {"chord": "C", "mode": "up", "octaves": 0, "steps": 4}})


def test_mixed_pattern_raises () -> None:

	"""One pattern cannot hold two kinds of content."""

	with pytest.raises(etherdaw.score.ScoreError, match="notes and markov|markov and notes"):
		etherdaw.score.parse_pattern("both", {"notes": ["C4:q"], "markov": {"states": ["1"], "steps": 4}})


@pytest.mark.parametrize("document, message", [
	({}, "arrangement is required"),
	({"arrangement": [], "sections": {"a": {"tracks": {}}}}, "sections.a.bars is required"),
	({"arrangement": [], "sections": {"a": {"bars": "four"}}}, "sections.a.bars must be a number"),
	({"arrangement": [], "settings": {"tempo": "fast"}}, "settings.tempo must be a number"),
	({"arrangement": [], "patterns": {"p": ["C4:q"]}}, "patterns.p must be a mapping"),
	({"arrangement": [], "sections": {"a": {"bars": 1, "tracks": {"t": {"pattern": "p", "repeat": 1.5}}}}}, "sections.a.tracks.t.repeat"),
	([1, 2], "score must be a mapping"),
])
def test_shape_errors (document: object, message: str) -> None:

	"""Shape errors name the path that is wrong."""

	with pytest.raises(etherdaw.score.ScoreError, match=message):
		etherdaw.score.load_score(document)


def test_track_forms () -> None:

	"""A track names one pattern or a list played in order."""

	single = etherdaw.score.parse_track({"pattern": "a", "octave": -1, "mute": True}, "t")
	several = etherdaw.score.parse_track({"patterns": ["a", "b"], "groove": "funk"}, "t")

	assert single == etherdaw.score.Track(patterns=("a",), octave=-1, mute=True)
	assert several == etherdaw.score.Track(patterns=("a", "b"), groove="funk")
	assert etherdaw.score.parse_track({}, "t").patterns == ()


def test_section_density_and_automation () -> None:

	"""Density curves and automation load with their defaults."""

	section = etherdaw.score.parse_section("build", {
		"bars": 8,
		"density": {"start": 0.2, "end": 1.0, "curve": "exponential"},
		"automation": {
			"tempo": {"start": 100, "end": 120},
			"bass.volume": {"points": [{"time": 0, "value": 0.5}, {"time": 1, "value": 1.0}]},
		},
	})

	assert section.bars == 8.0
	assert section.density == etherdaw.density.DensityCurve(start=0.2, end=1.0, curve="exponential")
	assert section.automation["tempo"] == etherdaw.automation.Automation(start=100.0, end=120.0)
	assert section.automation["bass.volume"].points[1] == etherdaw.automation.AutomationPoint(time=1.0, value=1.0)


def test_load_yaml_file (tmp_path, arpeggio_document: dict) -> None:

	"""YAML files load through the safe loader."""

	path = tmp_path / "song.yaml"
	path.write_text(yaml.safe_dump(arpeggio_document))

	score = etherdaw.score.load_score_file(str(path))

	assert score.patterns["arp"] == etherdaw.patterns.NotesPattern(notes=("C4:q", "E4:q", "G4:q", "C5:q"))
	assert score.sections["main"].tracks["piano"].repeat == 4


def test_load_json_file (tmp_path, arpeggio_document: dict) -> None:

	"""JSON files load too."""

	path = tmp_path / "song.json"
	path.write_text(json.dumps(arpeggio_document))

	assert etherdaw.score.load_score_file(str(path)) == etherdaw.score.load_score(arpeggio_document)


def test_simple_score () -> None:

	"""One section, one track per note list."""

	score = etherdaw.score.simple_score({"melody": ["C4:q", "D4:q"], "bass": ["C2:w"]}, bars=2, tempo=90)

	assert score.arrangement == ("main",)
	assert score.settings.tempo == 90
	assert score.sections["main"].bars == 2
	assert score.sections["main"].tracks["bass"] == etherdaw.score.Track(patterns=("bass",))
	assert score.patterns["melody"] == etherdaw.patterns.NotesPattern(notes=("C4:q", "D4:q"))
