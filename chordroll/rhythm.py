"""Named rhythm patterns for the chord and bass layers.

A pattern describes one chord slot. Each layer is a list of integers in
units (sixteenth notes): ``0`` is a one-unit rest, any positive value is a
sounding event of that many units. The same pattern repeats for every chord
in the progression.

Built-in patterns::

	none        chords [16]                 bass [16]
	house       chords [4, 4, 4, 4]         bass off-beat sixteenths
	trance      chords [2, 2, 2, 2]         bass eight sixteenths
	syncopated  chords [1, 0, 1, 1, 0, 1]   bass [0, 1, 0, 1, 1, 0]

The table is static configuration. Extra patterns may be supplied when a
:class:`RhythmGrid` is built (for example from the YAML config) but a grid
never changes afterwards.
"""

import dataclasses
import logging
import typing


logger = logging.getLogger(__name__)


DEFAULT_PATTERN = "none"


class UnknownPattern (KeyError):

	"""Raised when a rhythm pattern name has no table entry."""


def _layer_units (steps: typing.Sequence[int]) -> int:

	"""Total units covered by a layer, counting each rest as one unit."""

	return sum(1 if step == 0 else step for step in steps)


@dataclasses.dataclass(frozen=True)
class RhythmPattern:

	"""
	Parallel subdivision sequences for the chord layer and the bass layer.
	"""

	name: str
	chords: typing.Tuple[int, ...]
	bass: typing.Tuple[int, ...]

	def __post_init__ (self) -> None:

		for layer_name, steps in (("chords", self.chords), ("bass", self.bass)):

			if not steps:
				raise ValueError(f"Rhythm pattern '{self.name}' has an empty {layer_name} layer")

			for step in steps:
				if not isinstance(step, int) or isinstance(step, bool) or step < 0:
					raise ValueError(f"Rhythm pattern '{self.name}' {layer_name} steps must be non-negative integers, got {step!r}")

	@property
	def chord_units (self) -> int:

		"""Units the chord layer spans per chord slot."""

		return _layer_units(self.chords)

	@property
	def bass_units (self) -> int:

		"""Units the bass layer spans per chord slot."""

		return _layer_units(self.bass)

	@property
	def is_balanced (self) -> bool:

		"""``True`` when both layers span the same number of units."""

		return self.chord_units == self.bass_units

	@classmethod
	def from_mapping (cls, name: str, mapping: typing.Mapping[str, typing.Sequence[int]]) -> "RhythmPattern":

		"""Build a pattern from a ``{"chords": [...], "bass": [...]}`` mapping."""

		if "chords" not in mapping or "bass" not in mapping:
			raise ValueError(f"Rhythm pattern '{name}' needs both 'chords' and 'bass' lists")

		return cls(name=name, chords=tuple(mapping["chords"]), bass=tuple(mapping["bass"]))


RHYTHM_PATTERNS: typing.Dict[str, RhythmPattern] = {
	"none": RhythmPattern(
		name = "none",
		chords = (16,),
		bass = (16,)
	),
	"house": RhythmPattern(
		name = "house",
		chords = (4, 4, 4, 4),
		bass = (0, 1) * 8
	),
	"trance": RhythmPattern(
		name = "trance",
		chords = (2, 2, 2, 2),
		bass = (1,) * 8
	),
	"syncopated": RhythmPattern(
		name = "syncopated",
		chords = (1, 0, 1, 1, 0, 1),
		bass = (0, 1, 0, 1, 1, 0)
	),
}


class RhythmGrid:

	"""Read-only lookup table of rhythm patterns."""

	def __init__ (self, extra_patterns: typing.Optional[typing.Iterable[RhythmPattern]] = None) -> None:

		"""
		Initialize the grid with the built-in patterns plus any extras.

		Extras with a built-in name replace the built-in, except ``"none"``
		which must stay available as the fallback.
		"""

		patterns = dict(RHYTHM_PATTERNS)

		for pattern in extra_patterns or ():

			if pattern.name == DEFAULT_PATTERN:
				raise ValueError(f"The '{DEFAULT_PATTERN}' pattern cannot be redefined")

			if not pattern.is_balanced:
				logger.warning(
					f"Rhythm pattern '{pattern.name}' layers differ in length "
					f"({pattern.chord_units} vs {pattern.bass_units} units per chord)"
				)

			patterns[pattern.name] = pattern

		self._patterns: typing.Dict[str, RhythmPattern] = patterns


	def __contains__ (self, name: object) -> bool:

		return name in self._patterns


	def names (self) -> typing.List[str]:

		"""Pattern names in table order, for pattern selectors."""

		return list(self._patterns)


	def lookup (self, name: str) -> RhythmPattern:

		"""Return the named pattern.

		Raises:
			UnknownPattern: If the name has no table entry.
		"""

		if name not in self._patterns:
			raise UnknownPattern(name)

		return self._patterns[name]


	def resolve (self, name: typing.Optional[str]) -> RhythmPattern:

		"""Return the named pattern, substituting ``"none"`` for unknown names."""

		if name is None:
			return self._patterns[DEFAULT_PATTERN]

		try:
			return self.lookup(name)

		except UnknownPattern:
			logger.warning(f"Unknown rhythm pattern '{name}' - falling back to '{DEFAULT_PATTERN}'")
			return self._patterns[DEFAULT_PATTERN]


DEFAULT_GRID = RhythmGrid()


def lookup (name: str) -> RhythmPattern:

	"""Look up a built-in pattern by name (raises ``UnknownPattern``)."""

	return DEFAULT_GRID.lookup(name)
