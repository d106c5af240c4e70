"""Roman-numeral analysis of chords against the current scale.

Numerals are uppercase in major keys and lowercase in minor keys, then
adjusted for the chord quality:

	maj   unchanged          C major: C → "I"
	min   lowercased         C major: Dm → "ii"
	dim   lowercased + "°"   C major: B° → "vii°"
	sus2  + "sus2"           C major: Csus2 → "Isus2"
	sus4  + "sus4"           A minor: Dsus4 → "ivsus4"

A chord whose root is not in the scale gets the ``UNKNOWN`` marker instead of
raising; this only happens when a chord was inserted from outside the current
key.
"""

import typing

import chordroll.chords
import chordroll.progression
import chordroll.scales


UNKNOWN = "?"

UPPER_NUMERALS: typing.Tuple[str, ...] = ("I", "II", "III", "IV", "V", "VI", "VII")
LOWER_NUMERALS: typing.Tuple[str, ...] = ("i", "ii", "iii", "iv", "v", "vi", "vii")

DIMINISHED_MARK = "°"


def analyze (scale: chordroll.scales.Scale, root: typing.Union[str, int], quality: str) -> str:

	"""Return the Roman numeral for a chord root and quality.

	Parameters:
		scale: The key the progression was generated in.
		root: Chord root name (``"A"``, ``"Bb"``) or pitch class.
		quality: One of ``"maj"``, ``"min"``, ``"dim"``, ``"sus2"``, ``"sus4"``.

	Returns:
		The numeral, or ``UNKNOWN`` when the root is not a scale degree.

	Example:
		```python
		c_major = build_scale("C")
		analyze(c_major, "C", "maj")   # → "I"
		analyze(c_major, "C", "dim")   # → "i°"
		analyze(c_major, "F#", "maj")  # → "?"
		```
	"""

	try:
		pc = chordroll.chords.pitch_class(root)
	except chordroll.chords.InvalidPitchClass:
		return UNKNOWN

	degree = scale.degree_of(pc)

	if degree is None:
		return UNKNOWN

	numeral = LOWER_NUMERALS[degree] if scale.is_minor else UPPER_NUMERALS[degree]

	if quality == chordroll.chords.MINOR:
		numeral = numeral.lower()

	elif quality == chordroll.chords.DIMINISHED:
		numeral = numeral.lower() + DIMINISHED_MARK

	elif quality in (chordroll.chords.SUS2, chordroll.chords.SUS4):
		numeral += quality

	return numeral


def chord_numeral (scale: chordroll.scales.Scale, chord: chordroll.chords.Chord) -> str:

	"""Analyze a ``Chord`` object."""

	return analyze(scale, chord.root_pc, chord.quality)


def progression_numerals (scale: chordroll.scales.Scale, progression: chordroll.progression.Progression) -> typing.List[str]:

	"""Return one numeral per slot of a progression."""

	return [chord_numeral(scale, chord) for chord in progression]


def numeral_text (scale: chordroll.scales.Scale, progression: chordroll.progression.Progression) -> str:

	"""Space-joined numerals, e.g. ``"I vi IV V"``."""

	return " ".join(progression_numerals(scale, progression))
