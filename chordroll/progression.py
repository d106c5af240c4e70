import dataclasses
import typing

import chordroll.chords


ALLOWED_LENGTHS: typing.Tuple[int, ...] = (4, 8)


@dataclasses.dataclass(frozen=True)
class Progression:

	"""An ordered, immutable sequence of chords.

	Editing never changes a progression in place: :meth:`reorder` and
	:meth:`replace` return a new instance, so anything holding the old value
	(a render in progress, a scheduled playback) keeps a consistent view.

	Example:
		```python
		progression = Progression(chords=(c, am, f, g))
		progression = progression.reorder(3, 0)   # g, c, am, f
		progression = progression.replace(1, em)  # g, em, am, f
		```
	"""

	chords: typing.Tuple[chordroll.chords.Chord, ...]

	def __len__ (self) -> int:

		return len(self.chords)

	def __iter__ (self) -> typing.Iterator[chordroll.chords.Chord]:

		return iter(self.chords)

	def __getitem__ (self, index: int) -> chordroll.chords.Chord:

		return self.chords[index]

	def _check_index (self, index: int) -> None:

		if not 0 <= index < len(self.chords):
			raise IndexError(f"Chord slot {index} is out of range for a {len(self.chords)}-chord progression")

	def reorder (self, from_index: int, to_index: int) -> "Progression":

		"""Move the chord at ``from_index`` so that it ends up at ``to_index``.

		Matches drag-and-drop: the chord is removed first, then inserted at
		the target position of the shortened list.
		"""

		self._check_index(from_index)
		self._check_index(to_index)

		chords = list(self.chords)
		moved = chords.pop(from_index)
		chords.insert(to_index, moved)

		return Progression(chords=tuple(chords))

	def replace (self, index: int, chord: chordroll.chords.Chord) -> "Progression":

		"""Return a copy with one slot swapped for ``chord``."""

		self._check_index(index)

		chords = list(self.chords)
		chords[index] = chord

		return Progression(chords=tuple(chords))

	def signature (self) -> str:

		"""Concatenate root name and quality per chord, e.g. ``"CmajAminFmajGmaj"``.

		Two progressions with the same signature sound the same harmonically;
		the generator uses this to avoid handing out the same progression twice
		in a row.
		"""

		return "".join(f"{chord.root_name}{chord.quality}" for chord in self.chords)

	def names (self) -> typing.List[str]:

		"""Display labels for each slot."""

		return [chord.name() for chord in self.chords]
