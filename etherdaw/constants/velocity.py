"""Velocity, dynamics and articulation constants.

Velocity is a float in [0, 1].  Dynamics markings map to fixed velocities and
can be used in place of a number after ``@`` in a note string (``"C4:q@mf"``).
Articulation marks change how long a note sounds (its gate) and how hard it
is played (a velocity boost).
"""

import typing

# Primary defaults
DEFAULT_VELOCITY = 0.8
DRUM_HIT_SCALE = 0.8            # Plain "x" hits play at this fraction of the track velocity
DRUM_ACCENT_VELOCITY = 1.0      # "X" and ">" hits ignore the track velocity

# Envelope shaping boundaries (fractions of the base velocity)
ENVELOPE_MIN_RATIO = 0.3
ENVELOPE_MIN_FLOOR = 0.1
ENVELOPE_PEAK_RATIO = 1.2
ENVELOPE_OFFBEAT_RATIO = 0.7

MIN_VELOCITY = 0.0
MAX_VELOCITY = 1.0

DYNAMICS: typing.Dict[str, float] = {
	"ppp": 0.10,
	"pp": 0.20,
	"p": 0.35,
	"mp": 0.50,
	"mf": 0.65,
	"f": 0.80,
	"ff": 0.95,
	"fff": 1.0,
}


class Articulation (typing.NamedTuple):

	"""Gate ratio and velocity boost for one articulation mark."""

	gate: float
	velocity_boost: float


ARTICULATIONS: typing.Dict[str, Articulation] = {
	"": Articulation(gate=1.0, velocity_boost=0.0),
	"*": Articulation(gate=0.3, velocity_boost=0.0),    # staccato
	"~": Articulation(gate=1.1, velocity_boost=0.0),    # legato
	">": Articulation(gate=1.0, velocity_boost=0.2),    # accent
	"^": Articulation(gate=0.3, velocity_boost=0.2),    # marcato
}

# Arpeggiator defaults
ARPEGGIO_GATE = 0.8
ARPEGGIO_OCTAVES = 1

# Humanize ranges at amount = 1.0
HUMANIZE_TIMING_BEATS = 0.05
HUMANIZE_VELOCITY = 0.1
HUMANIZE_DURATION = 0.05
HUMANIZE_MIN_DURATION = 0.01
