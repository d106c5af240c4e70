"""Functional-harmony progression generator.

Progression slots follow a fixed four-slot cycle of harmonic roles::

	slot % 4:   0       1             2          3
	role:       tonic   predominant   dominant   tonic

Each role draws uniformly from a group of scale degrees. The groups are a
tunable policy table (:class:`FunctionalGroups`) rather than fixed theory:
``CLASSIC_GROUPS`` is the conservative default and ``WIDE_GROUPS`` lets the
mediant and leading tone in for more colour.

Diminished triads are never picked while a group offers anything else. When a
group holds only diminished triads the first degree listed is used anyway;
this keeps generation moving at the cost of an occasional diminished chord.
"""

import dataclasses
import logging
import random
import typing

import chordroll.chords
import chordroll.harmony
import chordroll.progression
import chordroll.scales


logger = logging.getLogger(__name__)


TONIC = "tonic"
PREDOMINANT = "predominant"
DOMINANT = "dominant"

DEFAULT_SUS_PROBABILITY: float = 0.4
DEFAULT_MAX_ATTEMPTS: int = 50


@dataclasses.dataclass(frozen=True)
class FunctionalGroups:

	"""Scale degrees (0-based) available to each harmonic role.

	The order inside each group matters only for the all-diminished fallback,
	which uses the first degree listed.
	"""

	tonic: typing.Tuple[int, ...]
	predominant: typing.Tuple[int, ...]
	dominant: typing.Tuple[int, ...]

	def __post_init__ (self) -> None:

		for role in (TONIC, PREDOMINANT, DOMINANT):
			degrees = getattr(self, role)

			if not degrees:
				raise ValueError(f"Functional group '{role}' must list at least one degree")

			for degree in degrees:
				if not 0 <= degree < chordroll.scales.DEGREE_COUNT:
					raise ValueError(f"Functional group '{role}' has degree {degree} outside 0-6")

	def degrees_for (self, role: str) -> typing.Tuple[int, ...]:

		"""Return the degree group for a role name."""

		if role not in (TONIC, PREDOMINANT, DOMINANT):
			raise ValueError(f"Unknown harmonic role: {role}")

		return typing.cast(typing.Tuple[int, ...], getattr(self, role))

	@classmethod
	def from_mapping (cls, mapping: typing.Mapping[str, typing.Sequence[int]]) -> "FunctionalGroups":

		"""Build a table from a ``{"tonic": [...], "predominant": [...], "dominant": [...]}`` mapping."""

		missing = [role for role in (TONIC, PREDOMINANT, DOMINANT) if role not in mapping]

		if missing:
			raise ValueError(f"Functional groups missing roles: {', '.join(missing)}")

		return cls(
			tonic = tuple(int(d) for d in mapping[TONIC]),
			predominant = tuple(int(d) for d in mapping[PREDOMINANT]),
			dominant = tuple(int(d) for d in mapping[DOMINANT])
		)


# I/vi - ii/IV - V
CLASSIC_GROUPS = FunctionalGroups(tonic=(0, 5), predominant=(1, 3), dominant=(4,))

# I/iii/IV/vi - ii/IV - V/vii/iii
WIDE_GROUPS = FunctionalGroups(tonic=(0, 2, 3, 5), predominant=(1, 3), dominant=(4, 6, 2))

FUNCTIONAL_GROUP_TABLES: typing.Dict[str, FunctionalGroups] = {
	"classic": CLASSIC_GROUPS,
	"wide": WIDE_GROUPS,
}


def slot_function (index: int) -> str:

	"""Return the harmonic role of a progression slot.

	Example:
		```python
		[slot_function(i) for i in range(4)]
		# → ['tonic', 'predominant', 'dominant', 'tonic']
		```
	"""

	position = index % 4

	if position == 1:
		return PREDOMINANT

	if position == 2:
		return DOMINANT

	return TONIC


def pick_chord (
	triads: typing.Sequence[chordroll.chords.Chord],
	degrees: typing.Sequence[int],
	rng: random.Random
) -> chordroll.chords.Chord:

	"""Pick one triad from a degree group, avoiding diminished chords.

	Parameters:
		triads: The seven diatonic triads of the current scale.
		degrees: Candidate degrees for this slot's role.
		rng: Random source.

	Returns:
		A uniformly chosen non-diminished candidate, or the first listed
		degree's triad when every candidate is diminished.
	"""

	if not degrees:
		raise ValueError("Cannot pick from an empty degree group")

	candidates = [triads[d] for d in degrees if triads[d].quality != chordroll.chords.DIMINISHED]

	if not candidates:
		fallback = triads[degrees[0]]
		logger.debug(f"All candidates in degrees {list(degrees)} are diminished - using {fallback.name()}")
		return fallback

	return rng.choice(candidates)


@dataclasses.dataclass(frozen=True)
class GeneratedProgression:

	"""The output of one generation: the progression plus its key context.

	Attributes:
		scale: The scale (key and mode) the progression was built in.
		progression: The chords, one per slot.
		attempts: How many candidate progressions were drawn.
		repeated: ``True`` when the retry bound was hit and the result has the
			same signature as the previous generation.
	"""

	scale: chordroll.scales.Scale
	progression: chordroll.progression.Progression
	attempts: int = 1
	repeated: bool = False


class ProgressionGenerator:

	"""Draws functional progressions and avoids repeating the previous one."""

	def __init__ (
		self,
		groups: FunctionalGroups = CLASSIC_GROUPS,
		sus_probability: float = DEFAULT_SUS_PROBABILITY,
		max_attempts: int = DEFAULT_MAX_ATTEMPTS,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Initialize the generator.

		Parameters:
			groups: Degree table for the tonic, predominant and dominant roles.
			sus_probability: Per-chord chance (0.0 to 1.0) of a sus2/sus4
				substitution when extensions are enabled. Default 0.4.
			max_attempts: Upper bound on redraws while trying to differ from the
				previous progression. Default 50.
			rng: Optional seeded ``random.Random`` for repeatable output.
		"""

		if sus_probability < 0 or sus_probability > 1:
			raise ValueError("Sus probability must be between 0 and 1")

		if max_attempts < 1:
			raise ValueError("Max attempts must be at least 1")

		self.groups = groups
		self.sus_probability = sus_probability
		self.max_attempts = max_attempts
		self.rng = rng or random.Random()
		self.previous_signature: typing.Optional[str] = None


	def _draw (
		self,
		length: int,
		key: typing.Optional[typing.Union[str, int]],
		is_minor: typing.Optional[bool],
		extensions: bool
	) -> GeneratedProgression:

		"""Draw one candidate progression, choosing the key where it is not fixed."""

		random_root, random_minor = chordroll.scales.random_key(self.rng)

		root = random_root if key is None else key
		minor = random_minor if is_minor is None else is_minor

		scale = chordroll.scales.build_scale(root, minor)
		triads = chordroll.harmony.build_triads(scale)

		chords: typing.List[chordroll.chords.Chord] = []

		for index in range(length):
			degrees = self.groups.degrees_for(slot_function(index))
			chords.append(pick_chord(triads, degrees, self.rng))

		if extensions:
			chords = [
				chordroll.harmony.add_sus_extension(chord, scale, self.rng) if self.rng.random() < self.sus_probability else chord
				for chord in chords
			]

		return GeneratedProgression(
			scale = scale,
			progression = chordroll.progression.Progression(chords=tuple(chords))
		)


	def generate (
		self,
		length: int = 4,
		key: typing.Optional[typing.Union[str, int]] = None,
		is_minor: typing.Optional[bool] = None,
		extensions: bool = False
	) -> GeneratedProgression:

		"""Generate a progression that differs from the previous one.

		Each attempt draws a fresh key (unless fixed) and a fresh chord for
		every slot. Attempts continue until the signature differs from the
		last accepted progression or ``max_attempts`` is reached, in which
		case the repeat is accepted and flagged.

		Parameters:
			length: Number of slots, 4 or 8.
			key: Root name or pitch class; ``None`` picks one at random.
			is_minor: Mode; ``None`` picks one at random.
			extensions: Enable random sus2/sus4 substitutions.

		Raises:
			ValueError: If ``length`` is not 4 or 8.
			InvalidPitchClass: If ``key`` is not recognised.
		"""

		if length not in chordroll.progression.ALLOWED_LENGTHS:
			raise ValueError(f"Progression length must be one of {chordroll.progression.ALLOWED_LENGTHS}, got {length}")

		if key is not None:
			chordroll.chords.pitch_class(key)

		candidate: typing.Optional[GeneratedProgression] = None

		for attempt in range(1, self.max_attempts + 1):
			candidate = self._draw(length, key, is_minor, extensions)

			if candidate.progression.signature() != self.previous_signature:
				result = dataclasses.replace(candidate, attempts=attempt)
				break

		else:
			assert candidate is not None
			logger.warning(
				f"No new progression after {self.max_attempts} attempts - repeating "
				f"{candidate.progression.signature()}"
			)
			result = dataclasses.replace(candidate, attempts=self.max_attempts, repeated=True)

		self.previous_signature = result.progression.signature()

		logger.info(f"Generated {result.scale.key_name()}: {' | '.join(result.progression.names())}")

		return result
