
"""
Chordroll - a functional-harmony chord progression generator.

Chordroll picks a key, draws a four- or eight-chord progression that follows
the tonic / predominant / dominant cycle, and lays it out on a sixteenth-note
grid with a separate bass layer. The result can be analysed in Roman
numerals, drawn as a piano roll, played through a MIDI output, or written to
a standard MIDI file.

What it does:

- **Scales and chords.** Major and natural minor scales in all twelve keys,
  diatonic triads voiced as three upper notes over a bass an octave below,
  and sus2/sus4 variants of every degree.
- **Functional generation.** Each slot draws from a group of degrees for its
  harmonic role. Diminished triads are avoided, and a fresh progression is
  never identical to the previous one while the retry bound allows.
- **Rhythm grid.** Named patterns (``none``, ``house``, ``trance``,
  ``syncopated``) split every chord into note and rest steps, separately for
  the chord and bass layers. Extra patterns can be added from the config.
- **Analysis.** Roman numerals with case for quality, ``°`` for diminished
  and ``sus2``/``sus4`` suffixes.
- **Playback and export.** Timelines play through ``mido`` with an asyncio
  transport, loop seamlessly, and export as two-track MIDI files named after
  the key and numerals.

Minimal example:

    ```python
    import chordroll

    session = chordroll.Session()
    session.dispatch(chordroll.Generate(key="C", is_minor=False))
    session.dispatch(chordroll.SetRhythmPattern("house"))

    print(session.key_name(), session.numeral_text())
    session.export("out")
    ```

Package-level exports: ``Session``, ``Generate``, ``ReorderChord``,
``ReplaceChordAt``, ``SetRhythmPattern``, ``SetTempo``, ``Settings``,
``load_config``, ``build_scale``, ``ProgressionGenerator``.
"""

import chordroll.config
import chordroll.functional
import chordroll.scales
import chordroll.session


Session = chordroll.session.Session
Generate = chordroll.session.Generate
ReorderChord = chordroll.session.ReorderChord
ReplaceChordAt = chordroll.session.ReplaceChordAt
SetRhythmPattern = chordroll.session.SetRhythmPattern
SetTempo = chordroll.session.SetTempo
Settings = chordroll.config.Settings
load_config = chordroll.config.load_config
build_scale = chordroll.scales.build_scale
ProgressionGenerator = chordroll.functional.ProgressionGenerator
