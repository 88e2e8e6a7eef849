"""
EtherDAW - compile declarative music scores into timed note events.

A score names reusable patterns (literal notes, scale degrees, arpeggios,
drum step sequences, Euclidean rhythms, Markov melodies, continuations,
voice-led progressions, tuplets), places them on tracks inside sections,
and orders the sections into an arrangement.  The compiler resolves every
pattern, lays the tracks out in beats, applies swing, groove, humanize and
density, and converts beats to seconds.  The result is a single time-sorted
Timeline that renderers (MIDI, audio, notation) consume.

What it does:

- **Compact notation.** ``"C4:q"``, ``"E4:8.*@mf"``, ``"G4:h~>-10ms?0.7"``
  and chords like ``"Cmaj7@drop2:w"`` carry pitch, duration, articulation
  and expression in one string.
- **Pattern generators.** One generator per pattern kind, all returning
  notes relative to the pattern start plus a total length in beats.
- **Meta patterns.** Transforms (invert, retrograde, augment, diminish,
  transpose, octave), inheritance with overrides, and conditionals on
  density, probability or section position.
- **Reproducible randomness.** Every random choice draws from a stream
  seeded once per compile, so a fixed seed gives an identical Timeline.
- **Diagnostics.** Missing sections and patterns become warnings, not
  failures; malformed note strings fail fast with the string in the message.

Minimal example:

    ```python
    import etherdaw

    score = etherdaw.simple_score({"lead": ["C4:q", "E4:q", "G4:q", "C5:q"]}, bars=1)
    result = etherdaw.compile(score, etherdaw.CompileOptions(seed=1))

    for note in result.timeline.notes:
        print(note.time, note.pitch, note.velocity)
    ```

Package-level exports: ``compile``, ``CompileOptions``, ``load_score``,
``load_score_file``, ``simple_score``, ``save_midi``.
"""

import etherdaw.compiler
import etherdaw.midi_export
import etherdaw.score


__version__ = "0.1.0"

compile = etherdaw.compiler.compile
CompileOptions = etherdaw.compiler.CompileOptions
load_score = etherdaw.score.load_score
load_score_file = etherdaw.score.load_score_file
simple_score = etherdaw.score.simple_score
save_midi = etherdaw.midi_export.save_midi
