import logging
import random
import typing

import chordroll.chords
import chordroll.constants.voicing
import chordroll.scales


logger = logging.getLogger(__name__)


def chord_quality (scale: chordroll.scales.Scale, degree: int) -> str:

	"""Classify the diatonic triad on a scale degree.

	The interval from the degree's root to its diatonic third (degree + 2) and
	fifth (degree + 4) is measured in semitones, reduced modulo 12:

	- third 3, fifth 6 → ``"dim"``
	- third 3, fifth 7 → ``"min"``
	- anything else → ``"maj"``

	This is exact for the major and natural minor scales built by
	:func:`chordroll.scales.build_scale`; augmented triads cannot occur there.

	Example:
		```python
		c_major = build_scale("C")
		chord_quality(c_major, 0)  # → "maj"  (C)
		chord_quality(c_major, 1)  # → "min"  (Dm)
		chord_quality(c_major, 6)  # → "dim"  (B°)
		```
	"""

	root = scale.pc(degree)
	third = (scale.pc(degree + 2) - root) % 12
	fifth = (scale.pc(degree + 4) - root) % 12

	if third == 3 and fifth == 6:
		return chordroll.chords.DIMINISHED

	if third == 3 and fifth == 7:
		return chordroll.chords.MINOR

	return chordroll.chords.MAJOR


def _voice (root_pc: int, middle_pc: int, fifth_pc: int, quality: str) -> chordroll.chords.Chord:

	"""Lay out a chord in the fixed four-voice layout."""

	octave = chordroll.constants.voicing.CHORD_OCTAVE

	return chordroll.chords.Chord(
		root_pc = root_pc,
		quality = quality,
		notes = (
			chordroll.chords.Note(root_pc, chordroll.constants.voicing.BASS_OCTAVE),
			chordroll.chords.Note(root_pc, octave),
			chordroll.chords.Note(middle_pc, octave),
			chordroll.chords.Note(fifth_pc, octave),
		)
	)


def build_triads (scale: chordroll.scales.Scale) -> typing.List[chordroll.chords.Chord]:

	"""Return the seven diatonic triads of a scale, one per degree.

	Each chord is voiced bass + root/third/fifth, with the three upper voices
	at the same octave. Qualities come from :func:`chord_quality`, so the
	triads follow the scale arithmetic rather than a lookup table.
	"""

	return [
		_voice(
			root_pc = scale.pc(degree),
			middle_pc = scale.pc(degree + 2),
			fifth_pc = scale.pc(degree + 4),
			quality = chord_quality(scale, degree)
		)
		for degree in range(chordroll.scales.DEGREE_COUNT)
	]


def build_sus_chords (scale: chordroll.scales.Scale) -> typing.List[chordroll.chords.Chord]:

	"""Return the fourteen suspended chords of a scale.

	For each degree the sus2 variant (scale degree + 1 in place of the third)
	is followed by the sus4 variant (degree + 3). Bass, root and fifth match
	the triad on the same degree.
	"""

	chords: typing.List[chordroll.chords.Chord] = []

	for degree in range(chordroll.scales.DEGREE_COUNT):
		root_pc = scale.pc(degree)
		fifth_pc = scale.pc(degree + 4)

		chords.append(_voice(root_pc, scale.pc(degree + 1), fifth_pc, chordroll.chords.SUS2))
		chords.append(_voice(root_pc, scale.pc(degree + 3), fifth_pc, chordroll.chords.SUS4))

	return chords


def add_sus_extension (chord: chordroll.chords.Chord, scale: chordroll.scales.Scale, rng: random.Random) -> chordroll.chords.Chord:

	"""Suspend a chord by replacing its third with the 2nd or 4th above the root.

	The choice between sus2 and sus4 is a coin flip. The substitute is placed
	in the root voice's octave and only the third voice and the quality change;
	the input chord is left untouched.

	Chords whose root is outside ``scale`` are returned unchanged.
	"""

	degree = scale.degree_of(chord.root_pc)

	if degree is None:
		logger.debug(f"Skipping sus extension for {chord.name()}: root is not in {scale.key_name()}")
		return chord

	octave = chord.notes[1].octave

	if rng.random() < 0.5:
		third = chordroll.chords.Note(scale.pc(degree + 1), octave)
		quality = chordroll.chords.SUS2
	else:
		third = chordroll.chords.Note(scale.pc(degree + 3), octave)
		quality = chordroll.chords.SUS4

	return chord.with_third(third, quality)


def chord_palette (scale: chordroll.scales.Scale) -> typing.List[chordroll.chords.Chord]:

	"""Return every chord the chord picker offers for a scale.

	The seven triads and fourteen suspended chords, sorted by root pitch class
	and then alphabetically by quality name.
	"""

	chords = build_triads(scale) + build_sus_chords(scale)

	return sorted(chords, key=lambda chord: (chord.root_pc, chord.quality))
