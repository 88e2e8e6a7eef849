import random
import typing

import pytest

import etherdaw.diagnostics
import etherdaw.intervals
import etherdaw.patterns


ContextFactory = typing.Callable[..., etherdaw.patterns.PatternContext]


@pytest.fixture
def c_major () -> etherdaw.intervals.Key:

	"""C major, the default key."""

	return etherdaw.intervals.parse_key("C major")


@pytest.fixture
def make_ctx (c_major: etherdaw.intervals.Key) -> ContextFactory:

	"""Build a pattern context with a seeded stream and a fresh diagnostics list."""

	def factory (
		patterns: typing.Optional[typing.Dict[str, etherdaw.patterns.Pattern]] = None,
		seed: int = 1,
		**overrides: typing.Any
	) -> etherdaw.patterns.PatternContext:

		fields: typing.Dict[str, typing.Any] = {
			"key": c_major,
			"tempo": 120.0,
			"patterns": patterns or {},
			"rng": random.Random(seed),
			"diagnostics": etherdaw.diagnostics.Diagnostics(),
		}
		fields.update(overrides)

		return etherdaw.patterns.PatternContext(**fields)

	return factory


@pytest.fixture
def arpeggio_document () -> typing.Dict[str, typing.Any]:

	"""One C major arpeggio repeated four times over a four-bar section."""

	return {
		"settings": {"tempo": 120, "key": "C major"},
		"patterns": {
			"arp": {"notes": ["C4:q", "E4:q", "G4:q", "C5:q"]},
		},
		"sections": {
			"main": {
				"bars": 4,
				"tracks": {
					"piano": {"pattern": "arp", "repeat": 4},
				},
			},
		},
		"arrangement": ["main"],
	}


@pytest.fixture
def song_document () -> typing.Dict[str, typing.Any]:

	"""A three-section song with drums, bass and a randomised melody."""

	return {
		"meta": {"title": "Test Song"},
		"settings": {"tempo": 100, "key": "A minor", "swing": 0.0},
		"instruments": {"drums": {}, "bass": {}, "lead": {}},
		"patterns": {
			"beat": {
				"drums": {
					"kit": "808",
					"lines": {
						"kick": "x...x...x...x...",
						"snare": "....X.......X...",
						"hihat": "x.x.x.x.x.x.x.x.",
					},
				},
			},
			"bassline": {"notes": "A2:q A2:q C3:q E3:q"},
			"melody": {
				"markov": {
					"states": ["1", "3", "5", "rest"],
					"preset": "neighbor_weighted",
					"steps": 8,
					"duration": "8",
				},
			},
		},
		"sections": {
			"a": {
				"bars": 1,
				"tracks": {
					"drums": {"pattern": "beat"},
					"bass": {"pattern": "bassline"},
				},
			},
			"b": {
				"bars": 1,
				"tracks": {
					"drums": {"pattern": "beat"},
					"lead": {"pattern": "melody", "humanize": 0.5},
				},
			},
			"c": {
				"bars": 2,
				"tempo": 140,
				"tracks": {
					"bass": {"pattern": "bassline", "repeat": 2},
					"lead": {"pattern": "melody", "repeat": 2, "expression": "jazzy"},
				},
			},
		},
		"arrangement": ["a", "b", "c"],
	}
