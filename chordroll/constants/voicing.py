"""Octave layout for the fixed four-voice chord.

Every chord is voiced as ``[bass, root, third, fifth]``. The three upper
voices share a single octave and the bass doubles the root one octave below.
"""

CHORD_OCTAVE = 4
BASS_OCTAVE = CHORD_OCTAVE - 1

MIN_OCTAVE = 0
MAX_OCTAVE = 9
