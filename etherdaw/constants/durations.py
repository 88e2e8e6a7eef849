"""Beat-based duration constants and the duration-code table.

All values are in **beats**, where 1.0 = one quarter note.  Note strings name
their length with a short code after the colon::

    "C4:q"    # quarter note, 1 beat
    "C4:8."   # dotted eighth, 0.75 beats
    "r:h"     # half-note rest, 2 beats

``DURATION_CODES`` maps each code to its beat value.  A trailing dot multiplies
by ``DOTTED_MULTIPLIER``.
"""

import typing

THIRTYSECOND = 0.125
SIXTEENTH = 0.25
EIGHTH = 0.5
QUARTER = 1.0
HALF = 2.0
WHOLE = 4.0

DOTTED_MULTIPLIER = 1.5

DURATION_CODES: typing.Dict[str, float] = {
	"w": WHOLE,
	"h": HALF,
	"q": QUARTER,
	"8": EIGHTH,
	"16": SIXTEENTH,
	"32": THIRTYSECOND,
	# Numeric aliases for half and quarter.
	"2": HALF,
	"4": QUARTER,
}

# Reverse lookup used when rewriting durations (augment / diminish).
BEATS_TO_CODE: typing.Dict[float, str] = {
	WHOLE: "w",
	HALF: "h",
	QUARTER: "q",
	EIGHTH: "8",
	SIXTEENTH: "16",
	THIRTYSECOND: "32",
}

DEFAULT_DRUM_STEP = "16"
VOICE_LEAD_CHORD_BEATS = 4.0
