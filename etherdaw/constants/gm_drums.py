"""General MIDI Level 1 drum notes for EtherDAW drum names.

Drum events in a Timeline carry a ``drum:<name>@<kit>`` token instead of a
pitch.  The MIDI file export maps ``<name>`` through ``DRUM_NAME_TO_GM`` and
writes the hit on channel 10 (0-indexed channel 9).  The kit is ignored for
MIDI output; every kit lands on the same GM map.
"""

import typing


# ─── Individual note constants ───────────────────────────────────────

KICK_1 = 36
SIDE_STICK = 37
SNARE_1 = 38
HAND_CLAP = 39
LOW_FLOOR_TOM = 41
HI_HAT_CLOSED = 42
HI_HAT_OPEN = 46
LOW_MID_TOM = 47
CRASH_1 = 49
HIGH_TOM = 50
RIDE_1 = 51
COWBELL = 56
HIGH_BONGO = 60
SHAKER = 82

GM_DRUM_CHANNEL = 9


# ─── EtherDAW drum name map ──────────────────────────────────────────

DRUM_NAME_TO_GM: typing.Dict[str, int] = {
	"kick": KICK_1,
	"snare": SNARE_1,
	"clap": HAND_CLAP,
	"hihat": HI_HAT_CLOSED,
	"closedhat": HI_HAT_CLOSED,
	"hihat_open": HI_HAT_OPEN,
	"openhat": HI_HAT_OPEN,
	"tom_hi": HIGH_TOM,
	"tom_mid": LOW_MID_TOM,
	"tom_lo": LOW_FLOOR_TOM,
	"crash": CRASH_1,
	"ride": RIDE_1,
	"rim": SIDE_STICK,
	"cowbell": COWBELL,
	"shaker": SHAKER,
	"perc": HIGH_BONGO,
}

# Keys accepted directly on a drums pattern as shorthand for ``lines``.
DRUM_NAMES: typing.FrozenSet[str] = frozenset(DRUM_NAME_TO_GM)
