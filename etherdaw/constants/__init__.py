"""Constants for EtherDAW.

This package contains the fixed tables the compiler reads:

- ``etherdaw.constants.durations`` - Duration codes and beat-based durations
- ``etherdaw.constants.velocity`` - Velocity defaults, dynamics markings and articulations
- ``etherdaw.constants.gm_drums`` - General MIDI drum notes for the MIDI file export

Velocities throughout EtherDAW are floats in [0, 1], not MIDI 0-127.
"""

DEFAULT_TEMPO = 120.0
DEFAULT_KEY = "C major"
DEFAULT_TIME_SIGNATURE = "4/4"
DEFAULT_SWING = 0.0

DEFAULT_DRUM_KIT = "909"
DEFAULT_CHORD_OCTAVE = 3
DEFAULT_NOTE_OCTAVE = 4

SEMITONES_PER_OCTAVE = 12
