"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127). The chord layer plays a little
softer than the bass so the root stays audible under the upper voices.
"""

DEFAULT_CHORD_VELOCITY = 90     # Upper voices of each chord
DEFAULT_BASS_VELOCITY = 100     # Bass root

# MIDI standard range
MIN_VELOCITY = 0
MAX_VELOCITY = 127
