"""Diatonic scales built by walking a fixed step pattern from a root.

Only the two modes the generator uses are defined here: major (Ionian) and
natural minor (Aeolian). Degree indices are 0-based and wrap modulo 7, so
``scale.pc(8)`` is the same pitch class as ``scale.pc(1)``.
"""

import dataclasses
import random
import typing

import chordroll.chords


MAJOR_STEPS: typing.Tuple[int, ...] = (2, 2, 1, 2, 2, 2, 1)
MINOR_STEPS: typing.Tuple[int, ...] = (2, 1, 2, 2, 1, 2, 2)

DEGREE_COUNT = 7


@dataclasses.dataclass(frozen=True)
class Scale:

	"""
	A seven-note diatonic scale.

	Attributes:
		root_pc: Pitch class of the tonic; always equal to ``pitch_classes[0]``.
		is_minor: ``True`` for natural minor, ``False`` for major.
		pitch_classes: The seven scale pitch classes in degree order.
	"""

	root_pc: int
	is_minor: bool
	pitch_classes: typing.Tuple[int, ...]

	def __post_init__ (self) -> None:

		if len(self.pitch_classes) != DEGREE_COUNT:
			raise ValueError(f"A scale has exactly {DEGREE_COUNT} degrees")

		if self.pitch_classes[0] != self.root_pc:
			raise ValueError("The first scale degree must be the root")

	def __len__ (self) -> int:

		return DEGREE_COUNT

	def __getitem__ (self, degree: int) -> int:

		return self.pc(degree)

	def pc (self, degree: int) -> int:

		"""Return the pitch class of a degree, wrapping modulo 7."""

		return self.pitch_classes[degree % DEGREE_COUNT]

	def degree_of (self, pc: int) -> typing.Optional[int]:

		"""Return the 0-based degree holding ``pc``, or ``None`` if it is not in the scale."""

		try:
			return self.pitch_classes.index(pc % 12)
		except ValueError:
			return None

	@property
	def mode_name (self) -> str:

		return "minor" if self.is_minor else "major"

	def names (self) -> typing.List[str]:

		"""Return the note names of the seven degrees."""

		return [chordroll.chords.pitch_class_name(pc) for pc in self.pitch_classes]

	def key_name (self) -> str:

		"""
		Return the key label used for display and filenames, e.g. ``"F# minor"``.
		"""

		return f"{chordroll.chords.pitch_class_name(self.root_pc)} {self.mode_name}"


def build_scale (root: typing.Union[str, int], is_minor: bool = False) -> Scale:

	"""Build a diatonic scale from a root and mode.

	Parameters:
		root: Root note name (``"C"``, ``"F#"``, ``"Bb"``) or pitch class.
		is_minor: Natural minor when ``True``, major otherwise.

	Returns:
		A ``Scale`` whose first degree is the root.

	Raises:
		InvalidPitchClass: If ``root`` is not a recognised pitch class.

	Example:
		```python
		build_scale("A", is_minor=True).names()
		# → ['A', 'B', 'C', 'D', 'E', 'F', 'G']
		```
	"""

	root_pc = chordroll.chords.pitch_class(root)
	steps = MINOR_STEPS if is_minor else MAJOR_STEPS

	pcs = [root_pc]
	current = root_pc

	# The final step lands back on the root, so only the first six are walked.
	for step in steps[:-1]:
		current = (current + step) % 12
		pcs.append(current)

	return Scale(root_pc=root_pc, is_minor=is_minor, pitch_classes=tuple(pcs))


def random_key (rng: random.Random) -> typing.Tuple[int, bool]:

	"""Pick a uniformly random root pitch class and a 50/50 mode."""

	root_pc = rng.randrange(12)
	is_minor = rng.random() < 0.5

	return root_pc, is_minor
