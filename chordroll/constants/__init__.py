"""Constants for chordroll.

This package contains the shared timing and voicing tables:

- ``chordroll.constants.durations`` - The rhythm unit table shared by playback, rendering and export
- ``chordroll.constants.velocity`` - MIDI velocity defaults for the chord and bass layers
- ``chordroll.constants.voicing`` - Fixed octave layout of the four-voice chord
"""
