import pytest

import etherdaw.generators
import etherdaw.patterns
import etherdaw.resolver
import etherdaw.transforms


# ─── Transforms ───────────────────────────────────────────────────────────────


def test_retrograde_reverses_notes_and_rests () -> None:

	"""Retrograde keeps every string and only changes the order."""

	assert etherdaw.transforms.retrograde(["C4:q", "r:8", "E4:h"]) == ["E4:h", "r:8", "C4:q"]


def test_invert_around_first_note () -> None:

	"""Intervals mirror around the first sounding pitch."""

	assert etherdaw.transforms.invert(["C4:q", "E4:q", "G4:h"]) == ["C4:q", "G#3:q", "F3:h"]


def test_invert_keeps_suffixes_and_rests () -> None:

	"""Expression suffixes travel with the mirrored pitch."""

	assert etherdaw.transforms.invert(["r:q", "D4:8*@0.5", "E4:q"], axis="D4") == ["r:q", "D4:8*@0.5", "C4:q"]


def test_augment_and_diminish () -> None:

	"""Lengths scale and are written with the nearest duration code."""

	assert etherdaw.transforms.augment(["C4:8", "D4:8.", "r:q"]) == ["C4:q", "D4:q.", "r:h"]
	assert etherdaw.transforms.diminish(["C4:w", "D4:h."]) == ["C4:h", "D4:q."]


def test_beats_to_code_rounds_down () -> None:

	"""Lengths with no exact code take the largest code that fits."""

	assert etherdaw.transforms.beats_to_code(1.0) == ("q", False)
	assert etherdaw.transforms.beats_to_code(3.0) == ("h", True)
	assert etherdaw.transforms.beats_to_code(1.25) == ("q", False)
	assert etherdaw.transforms.beats_to_code(0.01) == ("32", False)


def test_transpose_and_octave () -> None:

	"""Transposition moves every pitch, rests untouched."""

	assert etherdaw.transforms.transpose(["B3:q", "r:q"], 1) == ["C4:q", "r:q"]
	assert etherdaw.transforms.shift_octave(["A4:8"], -1) == ["A3:8"]


def test_unknown_transform_raises () -> None:

	"""Unknown operation names are rejected."""

	with pytest.raises(ValueError):
		etherdaw.transforms.apply_transform(["C4:q"], "explode", {})


# ─── Transform patterns ───────────────────────────────────────────────────────


def test_transform_pattern_resolves_to_notes (make_ctx) -> None:

	"""A transform becomes a notes pattern built from its source."""

	patterns = {
		"motif": etherdaw.patterns.NotesPattern(notes=("C4:8", "E4:8"), velocity=0.4),
		"slow": etherdaw.patterns.TransformPattern(source="motif", operation="augment"),
	}

	resolved = etherdaw.resolver.resolve(patterns["slow"], make_ctx(patterns=patterns))

	assert resolved == etherdaw.patterns.NotesPattern(notes=("C4:q", "E4:q"), velocity=0.4)


def test_transform_params (make_ctx) -> None:

	"""Operation parameters come from the pattern."""

	patterns = {
		"motif": etherdaw.patterns.NotesPattern(notes=("C4:q",)),
		"up": etherdaw.patterns.TransformPattern(source="motif", operation="transpose", params={"semitones": 7}),
	}

	assert etherdaw.resolver.resolve(patterns["up"], make_ctx(patterns=patterns)).notes == ("G4:q",)


def test_transform_of_non_notes_warns (make_ctx) -> None:

	"""Only note lists can be transformed."""

	patterns = {
		"beat": etherdaw.patterns.DrumsPattern(lines={"kick": "x..."}),
		"back": etherdaw.patterns.TransformPattern(source="beat", operation="retrograde"),
	}
	ctx = make_ctx(patterns=patterns)

	assert etherdaw.resolver.resolve(patterns["back"], ctx) is None
	assert ctx.diagnostics.warnings


def test_transform_missing_source_expands_empty (make_ctx) -> None:

	"""A missing source gives an empty pattern and a warning."""

	ctx = make_ctx()
	pattern = etherdaw.patterns.TransformPattern(source="ghost", operation="invert")

	expanded = etherdaw.generators.expand_pattern(pattern, ctx)

	assert expanded.notes == []
	assert expanded.total_beats == 0.0
	assert 'Transform source pattern "ghost" not found' in ctx.diagnostics.warnings


# ─── Inheritance ──────────────────────────────────────────────────────────────


def test_extends_transposes_parent_notes (make_ctx) -> None:

	"""A child pattern moves the parent's notes and keeps everything else."""

	patterns = {
		"verse": etherdaw.patterns.NotesPattern(notes=("C4:q", "E4:q"), envelope="crescendo"),
		"verse_up": etherdaw.patterns.ExtendsPattern(parent="verse", transpose=2),
	}

	resolved = etherdaw.resolver.resolve(patterns["verse_up"], make_ctx(patterns=patterns))

	assert resolved.notes == ("D4:q", "F#4:q")
	assert resolved.envelope == "crescendo"
	assert patterns["verse"].notes == ("C4:q", "E4:q")


def test_extends_overrides (make_ctx) -> None:

	"""Set fields on the child win over the parent."""

	patterns = {
		"verse": etherdaw.patterns.NotesPattern(notes=("C4:q",), velocity=0.9),
		"quiet": etherdaw.patterns.ExtendsPattern(parent="verse", notes=("G4:h",), octave=-1, velocity=0.3, constrain_to_scale=True),
	}

	resolved = etherdaw.resolver.resolve(patterns["quiet"], make_ctx(patterns=patterns))

	assert resolved == etherdaw.patterns.NotesPattern(notes=("G3:h",), velocity=0.3, constrain_to_scale=True)


def test_extends_chain (make_ctx) -> None:

	"""A transform of a child of a pattern resolves through both."""

	patterns = {
		"base": etherdaw.patterns.NotesPattern(notes=("C4:q", "D4:q")),
		"child": etherdaw.patterns.ExtendsPattern(parent="base", transpose=12),
		"backwards": etherdaw.patterns.TransformPattern(source="child", operation="retrograde"),
	}

	assert etherdaw.resolver.resolve(patterns["backwards"], make_ctx(patterns=patterns)).notes == ("D5:q", "C5:q")


def test_extends_missing_parent_warns (make_ctx) -> None:

	"""A missing parent is reported and resolves to nothing."""

	ctx = make_ctx()

	assert etherdaw.resolver.resolve(etherdaw.patterns.ExtendsPattern(parent="nobody"), ctx) is None
	assert 'Pattern inheritance: parent pattern "nobody" not found' in ctx.diagnostics.warnings


def test_reference_cycle_raises (make_ctx) -> None:

	"""Self-referencing chains stop with a resolution error."""

	patterns = {
		"a": etherdaw.patterns.ExtendsPattern(parent="b"),
		"b": etherdaw.patterns.TransformPattern(source="a", operation="retrograde"),
	}

	with pytest.raises(etherdaw.resolver.ResolutionError):
		etherdaw.resolver.resolve(patterns["a"], make_ctx(patterns=patterns))


# ─── Conditionals ─────────────────────────────────────────────────────────────


@pytest.fixture
def choice_patterns () -> dict:

	"""Two plain targets and a conditional on density."""

	return {
		"busy": etherdaw.patterns.NotesPattern(notes=("C4:8",) * 8),
		"sparse": etherdaw.patterns.NotesPattern(notes=("C4:w",)),
		"pick": etherdaw.patterns.ConditionalPattern(condition="density", operator=">", value=0.6, then="busy", otherwise="sparse"),
	}


def test_density_condition (make_ctx, choice_patterns: dict) -> None:

	"""The section density chooses the branch; no density counts as 0.5."""

	pick = choice_patterns["pick"]

	assert etherdaw.resolver.resolve(pick, make_ctx(patterns=choice_patterns, density=0.8)) is choice_patterns["busy"]
	assert etherdaw.resolver.resolve(pick, make_ctx(patterns=choice_patterns, density=0.2)) is choice_patterns["sparse"]
	assert etherdaw.resolver.resolve(pick, make_ctx(patterns=choice_patterns)) is choice_patterns["sparse"]


def test_section_index_condition (make_ctx, choice_patterns: dict) -> None:

	"""Later sections can pick a different pattern."""

	pick = etherdaw.patterns.ConditionalPattern(condition="section_index", operator=">=", value=2, then="busy", otherwise="sparse")

	assert etherdaw.resolver.evaluate_condition(pick, make_ctx(section_index=1)) == "sparse"
	assert etherdaw.resolver.evaluate_condition(pick, make_ctx(section_index=2)) == "busy"


def test_otherwise_defaults_to_then (make_ctx) -> None:

	"""Without an else branch a false condition still plays the target."""

	pick = etherdaw.patterns.ConditionalPattern(condition="density", operator="<", value=0.1, then="busy")

	assert etherdaw.resolver.evaluate_condition(pick, make_ctx(density=0.9)) == "busy"


def test_probability_condition_is_seeded (make_ctx) -> None:

	"""Probability conditions draw from the context stream."""

	pick = etherdaw.patterns.ConditionalPattern(condition="probability", operator="<", value=0.5, then="a", otherwise="b")

	first = [etherdaw.resolver.evaluate_condition(pick, ctx) for ctx in [make_ctx(seed=3)] * 10]
	second = [etherdaw.resolver.evaluate_condition(pick, ctx) for ctx in [make_ctx(seed=3)] * 10]

	assert first == second
	assert set(first) <= {"a", "b"}


def test_missing_conditional_target_warns (make_ctx) -> None:

	"""A selected target that does not exist resolves to nothing."""

	ctx = make_ctx()
	pick = etherdaw.patterns.ConditionalPattern(condition="density", operator=">", value=0.0, then="absent")

	assert etherdaw.resolver.resolve(pick, ctx) is None
	assert 'Conditional pattern target "absent" not found' in ctx.diagnostics.warnings


def test_resolve_name_warns_for_unknown (make_ctx) -> None:

	"""Looking up an unknown name reports it."""

	ctx = make_ctx()

	assert etherdaw.resolver.resolve_name("missing", ctx) is None
	assert 'Pattern "missing" not found' in ctx.diagnostics.warnings
