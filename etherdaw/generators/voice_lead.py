import logging

import etherdaw.constants.durations
import etherdaw.patterns
import etherdaw.voicings


logger = logging.getLogger(__name__)


def expand_voice_lead (pattern: etherdaw.patterns.VoiceLeadPattern, ctx: etherdaw.patterns.PatternContext) -> etherdaw.patterns.ExpandedPattern:

	"""Voice the progression and hold each chord for one bar."""

	ctx.diagnostics.extend(etherdaw.voicings.validate_voice_lead(pattern.progression, pattern.voices, pattern.style), logger)

	result = etherdaw.voicings.voice_lead_progression(
		pattern.progression,
		voices = pattern.voices,
		style = pattern.style,
		constraints = list(pattern.constraints) or None,
		ranges = pattern.voice_ranges,
	)

	ctx.diagnostics.extend(result.warnings, logger)

	length = etherdaw.constants.durations.VOICE_LEAD_CHORD_BEATS
	expanded = etherdaw.patterns.ExpandedPattern()
	cursor = 0.0

	for voicing in result.voicings:

		for pitch in voicing:
			expanded.notes.append(etherdaw.patterns.ExpandedNote(
				pitch = ctx.place(pitch),
				start = cursor,
				duration = length,
				velocity = ctx.velocity,
			))

		cursor += length

	expanded.total_beats = cursor

	return expanded
