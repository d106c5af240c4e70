"""Pitch classes, notes and the four-voice `Chord`.

Module-level constants:
- `NOTE_NAMES`: The 12 canonical pitch class names, sharp spelling, C = 0
- `NOTE_NAME_TO_PC`: Maps note names (including flat aliases such as `"Bb"`) to pitch classes
- `QUALITIES`: The chord qualities this package produces

Module-level helpers:
- `pitch_class(name)`: Validate a note name and return its pitch class (0–11).
  Raises `InvalidPitchClass` for unknown names. Every module that accepts a key
  or root name goes through this function.

Notes are structured values (`Note`) everywhere inside the package. They are
only turned into strings such as ``"C#4"`` at the boundary with the audio
engine and the exporter (see `Note.name()` and `Note.parse()`).
"""

import dataclasses
import re
import typing

import chordroll.constants.voicing


NOTE_NAMES: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]

NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

MAJOR = "maj"
MINOR = "min"
DIMINISHED = "dim"
SUS2 = "sus2"
SUS4 = "sus4"

QUALITIES: typing.Tuple[str, ...] = (MAJOR, MINOR, DIMINISHED, SUS2, SUS4)
TRIAD_QUALITIES: typing.Tuple[str, ...] = (MAJOR, MINOR, DIMINISHED)

_NOTE_PATTERN = re.compile(r"^([A-G](?:#|b)?)(\d)$")


class InvalidPitchClass (ValueError):

	"""Raised when a root or key name is not one of the recognised pitch classes."""


def pitch_class (name: typing.Union[str, int]) -> int:

	"""Validate a note name and return its pitch class (0–11).

	Integers are accepted as-is when they are already in range, so callers can
	pass either ``"F#"`` or ``6``.

	Parameters:
		name: Note name (e.g. ``"C"``, ``"F#"``, ``"Bb"``) or pitch class.

	Returns:
		Pitch class integer (0–11).

	Raises:
		InvalidPitchClass: If the name is not recognised.

	Example:
		```python
		pitch_class("C")   # → 0
		pitch_class("Bb")  # → 10
		pitch_class(7)     # → 7
		```
	"""

	if isinstance(name, bool):
		raise InvalidPitchClass(f"Unknown pitch class: {name!r}")

	if isinstance(name, int):
		if 0 <= name < 12:
			return name
		raise InvalidPitchClass(f"Pitch class out of range: {name}. Expected 0-11.")

	if name not in NOTE_NAME_TO_PC:
		raise InvalidPitchClass(
			f"Unknown pitch class: {name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[name]


def pitch_class_name (pc: int) -> str:

	"""Return the canonical (sharp) name for a pitch class."""

	return NOTE_NAMES[pc % 12]


@dataclasses.dataclass(frozen=True)
class Note:

	"""
	A pitch class bound to an octave.

	Two notes compare by absolute height (``midi``), so ``sorted()`` and
	``min()``/``max()`` give the lowest and highest sounding pitches.
	"""

	pitch_class: int
	octave: int

	def __post_init__ (self) -> None:

		if not 0 <= self.pitch_class < 12:
			raise ValueError(f"Pitch class out of range: {self.pitch_class}")

		if not chordroll.constants.voicing.MIN_OCTAVE <= self.octave <= chordroll.constants.voicing.MAX_OCTAVE:
			raise ValueError(f"Octave must be a single digit (0-9), got {self.octave}")

	@property
	def midi (self) -> int:

		"""Absolute semitone height (C4 = 60)."""

		return self.pitch_class + (self.octave + 1) * 12

	def __lt__ (self, other: "Note") -> bool:

		if not isinstance(other, Note):
			return NotImplemented

		return self.midi < other.midi

	def __le__ (self, other: "Note") -> bool:

		if not isinstance(other, Note):
			return NotImplemented

		return self.midi <= other.midi

	def __gt__ (self, other: "Note") -> bool:

		if not isinstance(other, Note):
			return NotImplemented

		return self.midi > other.midi

	def __ge__ (self, other: "Note") -> bool:

		if not isinstance(other, Note):
			return NotImplemented

		return self.midi >= other.midi

	def name (self) -> str:

		"""
		Return the engine/exporter string form, e.g. ``"C#4"``.
		"""

		return f"{NOTE_NAMES[self.pitch_class]}{self.octave}"

	@classmethod
	def parse (cls, text: str) -> "Note":

		"""Parse a ``"{PitchClassName}{Octave}"`` string such as ``"A#3"``.

		Raises:
			InvalidPitchClass: If the pitch name is not recognised.
			ValueError: If the string is not in the expected form.
		"""

		match = _NOTE_PATTERN.match(text)

		if match is None:
			raise ValueError(f"Cannot parse note {text!r}. Expected e.g. 'C4', 'F#3'.")

		return cls(pitch_class=pitch_class(match.group(1)), octave=int(match.group(2)))

	@classmethod
	def from_midi (cls, midi: int) -> "Note":

		"""Build a note from a MIDI note number."""

		return cls(pitch_class=midi % 12, octave=midi // 12 - 1)


@dataclasses.dataclass(frozen=True)
class Chord:

	"""
	A chord voiced as ``[bass, root, third-or-substitute, fifth]``.

	``root_pc`` labels the chord; ``quality`` is one of ``QUALITIES``. The bass
	always doubles the root one octave below the upper voices.
	"""

	root_pc: int
	quality: str
	notes: typing.Tuple[Note, Note, Note, Note]

	def __post_init__ (self) -> None:

		if self.quality not in QUALITIES:
			raise ValueError(f"Unknown chord quality: {self.quality}")

		if len(self.notes) != 4:
			raise ValueError(f"A chord has exactly 4 notes, got {len(self.notes)}")

		bass, root = self.notes[0], self.notes[1]

		if root.pitch_class != self.root_pc or bass.pitch_class != self.root_pc:
			raise ValueError("Bass and root voices must carry the chord root")

		if root.midi - bass.midi != 12:
			raise ValueError("The bass must sit one octave below the root voice")

	@property
	def root_name (self) -> str:

		"""Canonical pitch class name of the root."""

		return NOTE_NAMES[self.root_pc]

	@property
	def bass (self) -> Note:

		"""The doubled bass root."""

		return self.notes[0]

	@property
	def upper (self) -> typing.Tuple[Note, ...]:

		"""The three upper voices (root, third or substitute, fifth)."""

		return self.notes[1:]

	def with_third (self, third: Note, quality: str) -> "Chord":

		"""Return a copy with the third voice and quality replaced."""

		bass, root, _, fifth = self.notes

		return Chord(root_pc=self.root_pc, quality=quality, notes=(bass, root, third, fifth))

	def name (self) -> str:

		"""
		Return a display label such as ``"A min"``.
		"""

		return f"{self.root_name} {self.quality}"
