"""Rewrite meta patterns into base patterns.

Resolution runs before expansion, in a fixed order: a conditional picks its
target, an ``extends`` pattern is merged onto its parent, and a transform
rewrites its source's notes.  Targets, parents and sources are resolved
recursively, so chains such as "a transform of a pattern that extends
another" work.  A chain that loops back on itself stops with
:class:`ResolutionError` once it passes :data:`MAX_RESOLUTION_DEPTH`.

Nothing here modifies a pattern from the table; every rewrite builds a new
value with :func:`dataclasses.replace`.
"""

import dataclasses
import logging
import operator
import typing

import etherdaw.patterns
import etherdaw.transforms


logger = logging.getLogger(__name__)

MAX_RESOLUTION_DEPTH = 32

DEFAULT_CONDITION_DENSITY = 0.5

_OPERATORS: typing.Dict[str, typing.Callable[[float, float], bool]] = {
	">": operator.gt,
	"<": operator.lt,
	">=": operator.ge,
	"<=": operator.le,
	"==": operator.eq,
	"!=": operator.ne,
}


class ResolutionError (Exception):

	"""A chain of extends/transform/conditional references does not terminate."""

	pass


def evaluate_condition (conditional: etherdaw.patterns.ConditionalPattern, ctx: etherdaw.patterns.PatternContext) -> str:

	"""
	Return the name of the pattern a conditional selects.

	``density`` reads the section density (0.5 when the section has none),
	``probability`` draws from the context's random stream and
	``section_index`` is the section's position in the arrangement.
	"""

	if conditional.condition == "density":
		left = ctx.density if ctx.density is not None else DEFAULT_CONDITION_DENSITY
	elif conditional.condition == "probability":
		left = ctx.rng.random()
	elif conditional.condition == "section_index":
		left = float(ctx.section_index)
	else:
		ctx.diagnostics.warn(f"Unknown condition {conditional.condition!r}, treating its value as 0", logger)
		left = 0.0

	compare = _OPERATORS.get(conditional.operator)

	if compare is None:
		ctx.diagnostics.warn(f"Unknown conditional operator {conditional.operator!r}", logger)
		result = False
	else:
		result = compare(left, conditional.value)

	if result:
		return conditional.then

	return conditional.otherwise or conditional.then


def resolve (
	pattern: etherdaw.patterns.Pattern,
	ctx: etherdaw.patterns.PatternContext,
	depth: int = 0
) -> typing.Optional[etherdaw.patterns.BasePattern]:

	"""
	Resolve a pattern to a base pattern.

	Returns ``None`` when a conditional's target does not exist; the caller
	treats that as an empty pattern.  Missing parents and transform sources
	are reported and the meta pattern is reduced to what it can still
	produce on its own (nothing, for a transform without a source).

	Raises:
		ResolutionError: When the reference chain is deeper than
			:data:`MAX_RESOLUTION_DEPTH`.
	"""

	if depth > MAX_RESOLUTION_DEPTH:
		raise ResolutionError(f"Pattern resolution depth exceeded ({MAX_RESOLUTION_DEPTH}); check for a cycle in extends/transform/conditional references")

	if isinstance(pattern, etherdaw.patterns.ConditionalPattern):

		target_name = evaluate_condition(pattern, ctx)
		target = ctx.patterns.get(target_name)

		if target is None:
			ctx.diagnostics.warn(f'Conditional pattern target "{target_name}" not found', logger)
			return None

		return resolve(target, ctx, depth + 1)

	if isinstance(pattern, etherdaw.patterns.ExtendsPattern):
		return _resolve_extends(pattern, ctx, depth)

	if isinstance(pattern, etherdaw.patterns.TransformPattern):
		return _resolve_transform(pattern, ctx, depth)

	return pattern


def resolve_name (name: str, ctx: etherdaw.patterns.PatternContext) -> typing.Optional[etherdaw.patterns.BasePattern]:

	"""Look a pattern up by name and resolve it.  Unknown names warn and return ``None``."""

	pattern = ctx.patterns.get(name)

	if pattern is None:
		ctx.diagnostics.warn(f'Pattern "{name}" not found', logger)
		return None

	return resolve(pattern, ctx)


def _resolve_extends (
	pattern: etherdaw.patterns.ExtendsPattern,
	ctx: etherdaw.patterns.PatternContext,
	depth: int
) -> typing.Optional[etherdaw.patterns.BasePattern]:

	parent = ctx.patterns.get(pattern.parent)

	if parent is None:
		ctx.diagnostics.warn(f'Pattern inheritance: parent pattern "{pattern.parent}" not found', logger)
		return None

	parent_resolved = resolve(parent, ctx, depth + 1)

	if parent_resolved is None:
		return None

	merged: etherdaw.patterns.BasePattern = parent_resolved

	if pattern.notes is not None:
		if isinstance(merged, etherdaw.patterns.NotesPattern):
			merged = dataclasses.replace(merged, notes=tuple(pattern.notes))
		else:
			merged = etherdaw.patterns.NotesPattern(
				notes = tuple(pattern.notes),
				velocity = merged.velocity,
				envelope = merged.envelope,
				constrain_to_scale = merged.constrain_to_scale,
			)

	if (pattern.transpose or pattern.octave) and not isinstance(merged, etherdaw.patterns.NotesPattern):
		ctx.diagnostics.warn(f'Pattern inheritance: transpose/octave overrides on "{pattern.parent}" need a notes pattern and were ignored', logger)

	if isinstance(merged, etherdaw.patterns.NotesPattern):

		notes = list(merged.notes)

		if pattern.transpose:
			notes = etherdaw.transforms.transpose(notes, pattern.transpose)

		if pattern.octave:
			notes = etherdaw.transforms.shift_octave(notes, pattern.octave)

		merged = dataclasses.replace(merged, notes=tuple(notes))

	overrides: typing.Dict[str, typing.Any] = {}

	if pattern.velocity is not None:
		overrides["velocity"] = pattern.velocity

	if pattern.envelope is not None:
		overrides["envelope"] = pattern.envelope

	if pattern.constrain_to_scale is not None:
		overrides["constrain_to_scale"] = pattern.constrain_to_scale

	if overrides:
		merged = dataclasses.replace(merged, **overrides)

	return merged


def _resolve_transform (
	pattern: etherdaw.patterns.TransformPattern,
	ctx: etherdaw.patterns.PatternContext,
	depth: int
) -> typing.Optional[etherdaw.patterns.BasePattern]:

	source = ctx.patterns.get(pattern.source)

	if source is None:
		ctx.diagnostics.warn(f'Transform source pattern "{pattern.source}" not found', logger)
		return None

	resolved = resolve(source, ctx, depth + 1)

	if resolved is None:
		return None

	if not isinstance(resolved, etherdaw.patterns.NotesPattern):
		ctx.diagnostics.warn(f'Transform on pattern "{pattern.source}" with no notes array - transforms only work on notes', logger)
		return None

	if pattern.operation in etherdaw.patterns.TRANSFORM_OPERATIONS:
		notes = etherdaw.transforms.apply_transform(resolved.notes, pattern.operation, pattern.params)
	else:
		ctx.diagnostics.warn(f"Unknown transform operation {pattern.operation!r}; using the notes of \"{pattern.source}\" unchanged", logger)
		notes = list(resolved.notes)

	return etherdaw.patterns.NotesPattern(
		notes = tuple(notes),
		velocity = pattern.velocity if pattern.velocity is not None else resolved.velocity,
		envelope = pattern.envelope if pattern.envelope is not None else resolved.envelope,
		constrain_to_scale = pattern.constrain_to_scale or resolved.constrain_to_scale,
	)
