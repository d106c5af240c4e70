"""Unit-based duration table shared by playback, rendering and export.

The smallest time subdivision is one **unit**, a sixteenth note. Rhythm
patterns, timeline events and the piano roll all count in units; anything that
needs real time or MIDI ticks converts through :func:`units_to_beats` so the
player and the exporter can never disagree::

    import chordroll.constants.durations as dur

    dur.units_to_beats(dur.QUARTER)            # 1.0
    dur.units_to_seconds(dur.BAR, bpm=120)     # 2.0
    dur.note_value(dur.EIGHTH)                 # "8"
"""

import typing


SIXTEENTH = 1
EIGHTH = 2
QUARTER = 4
HALF = 8
WHOLE = 16

# One 4/4 bar.
BAR = WHOLE

UNITS_PER_BEAT = QUARTER

# Symbolic note value for each unit count, as used by score and MIDI writers
# ("4" = quarter note).
UNIT_NOTE_VALUES: typing.Dict[int, str] = {
	SIXTEENTH: "16",
	EIGHTH: "8",
	QUARTER: "4",
	HALF: "2",
	WHOLE: "1",
}


def units_to_beats (units: float) -> float:

	"""Convert a unit count to quarter-note beats.

	Example:
		```python
		units_to_beats(16)  # → 4.0
		units_to_beats(1)   # → 0.25
		```
	"""

	return units / UNITS_PER_BEAT


def units_to_seconds (units: float, bpm: float) -> float:

	"""Convert a unit count to seconds at the given tempo.

	Raises:
		ValueError: If ``bpm`` is not positive.
	"""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	return units_to_beats(units) * 60.0 / bpm


def seconds_to_units (seconds: float, bpm: float) -> float:

	"""Convert elapsed seconds back to (fractional) units at the given tempo."""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	return seconds * bpm / 60.0 * UNITS_PER_BEAT


def note_value (units: int) -> typing.Optional[str]:

	"""Return the symbolic note value for a unit count.

	Returns ``None`` for counts that are not a single plain note value
	(e.g. 3 units, a dotted eighth).
	"""

	return UNIT_NOTE_VALUES.get(units)
