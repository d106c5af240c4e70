import logging
import random

import pytest

import chordroll.chords
import chordroll.functional
import chordroll.harmony
import chordroll.scales


def test_slot_function_cycle () -> None:

	"""Slots cycle tonic, predominant, dominant, tonic."""

	roles = [chordroll.functional.slot_function(i) for i in range(8)]

	assert roles == ["tonic", "predominant", "dominant", "tonic"] * 2


def test_pick_chord_skips_diminished (c_major: chordroll.scales.Scale) -> None:

	"""A diminished candidate is never chosen while another is available."""

	triads = chordroll.harmony.build_triads(c_major)
	rng = random.Random(0)

	picks = {chordroll.functional.pick_chord(triads, (6, 0), rng).name() for _ in range(50)}

	assert picks == {"C maj"}


def test_pick_chord_all_diminished_fallback (c_major: chordroll.scales.Scale) -> None:

	"""An all-diminished group falls back to its first degree."""

	triads = chordroll.harmony.build_triads(c_major)

	chord = chordroll.functional.pick_chord(triads, (6,), random.Random(0))

	assert chord.name() == "B dim"


def test_pick_chord_empty_group (c_major: chordroll.scales.Scale) -> None:

	"""An empty degree group is an error."""

	triads = chordroll.harmony.build_triads(c_major)

	with pytest.raises(ValueError):
		chordroll.functional.pick_chord(triads, (), random.Random(0))


def test_classic_slots_in_c_major () -> None:

	"""Each slot's root comes from its role's degree group."""

	generator = chordroll.functional.ProgressionGenerator(rng=random.Random(5))

	for _ in range(20):
		result = generator.generate(length=8, key="C", is_minor=False)
		roots = [chord.root_name for chord in result.progression]

		for index, root in enumerate(roots):
			role = chordroll.functional.slot_function(index)
			allowed = {"tonic": {"C", "A"}, "predominant": {"D", "F"}, "dominant": {"G"}}[role]
			assert root in allowed


def test_generated_progressions_never_diminished () -> None:

	"""The wide table lists vii in the dominant group but it is never picked."""

	generator = chordroll.functional.ProgressionGenerator(
		groups = chordroll.functional.WIDE_GROUPS,
		rng = random.Random(11)
	)

	for _ in range(50):
		result = generator.generate(length=8)
		assert all(chord.quality != chordroll.chords.DIMINISHED for chord in result.progression)


def test_consecutive_progressions_differ () -> None:

	"""Back-to-back generations never share a signature while alternatives exist."""

	generator = chordroll.functional.ProgressionGenerator(rng=random.Random(2))
	previous = None

	for _ in range(30):
		result = generator.generate(key="C", is_minor=False)
		signature = result.progression.signature()

		assert signature != previous
		assert not result.repeated

		previous = signature


def test_retry_exhaustion_accepts_repeat (caplog: pytest.LogCaptureFixture) -> None:

	"""With only one possible progression the repeat is accepted and flagged."""

	groups = chordroll.functional.FunctionalGroups(tonic=(0,), predominant=(1,), dominant=(4,))
	generator = chordroll.functional.ProgressionGenerator(groups=groups, max_attempts=5, rng=random.Random(0))

	first = generator.generate(key="C", is_minor=False)

	with caplog.at_level(logging.WARNING):
		second = generator.generate(key="C", is_minor=False)

	assert first.attempts == 1
	assert not first.repeated
	assert second.repeated
	assert second.attempts == 5
	assert second.progression.signature() == first.progression.signature()
	assert "No new progression" in caplog.text


def test_fixed_key_and_mode () -> None:

	"""A fixed key and mode are honoured on every draw."""

	generator = chordroll.functional.ProgressionGenerator(rng=random.Random(4))
	result = generator.generate(key="A", is_minor=True)

	assert result.scale.key_name() == "A minor"
	assert result.progression[0].root_name in ("A", "F")


def test_extensions_always_applied () -> None:

	"""A sus probability of 1 suspends every chord."""

	generator = chordroll.functional.ProgressionGenerator(sus_probability=1.0, rng=random.Random(8))
	result = generator.generate(extensions=True)

	assert all(chord.quality in (chordroll.chords.SUS2, chordroll.chords.SUS4) for chord in result.progression)


def test_no_extensions_means_triads () -> None:

	"""Without extensions only triad qualities appear."""

	generator = chordroll.functional.ProgressionGenerator(sus_probability=1.0, rng=random.Random(8))
	result = generator.generate(extensions=False)

	assert all(chord.quality in chordroll.chords.TRIAD_QUALITIES for chord in result.progression)


def test_seeded_generators_repeat () -> None:

	"""The same seed gives the same progression."""

	a = chordroll.functional.ProgressionGenerator(rng=random.Random(42)).generate()
	b = chordroll.functional.ProgressionGenerator(rng=random.Random(42)).generate()

	assert a == b


@pytest.mark.parametrize("length", [0, 3, 5, 16])
def test_invalid_length (length: int) -> None:

	"""Only four- and eight-chord progressions are allowed."""

	with pytest.raises(ValueError, match="length"):
		chordroll.functional.ProgressionGenerator().generate(length=length)


def test_invalid_key () -> None:

	"""An unknown key fails before any draw."""

	with pytest.raises(chordroll.chords.InvalidPitchClass):
		chordroll.functional.ProgressionGenerator().generate(key="H")


def test_generator_parameter_validation () -> None:

	"""Probability and attempt bounds are checked."""

	with pytest.raises(ValueError):
		chordroll.functional.ProgressionGenerator(sus_probability=1.5)

	with pytest.raises(ValueError):
		chordroll.functional.ProgressionGenerator(max_attempts=0)


def test_functional_groups_from_mapping () -> None:

	"""Groups load from a mapping and reject bad degrees or missing roles."""

	groups = chordroll.functional.FunctionalGroups.from_mapping({"tonic": [0], "predominant": [3], "dominant": [4, 6]})

	assert groups.degrees_for("dominant") == (4, 6)

	with pytest.raises(ValueError, match="missing"):
		chordroll.functional.FunctionalGroups.from_mapping({"tonic": [0]})

	with pytest.raises(ValueError, match="outside"):
		chordroll.functional.FunctionalGroups(tonic=(7,), predominant=(1,), dominant=(4,))

	with pytest.raises(ValueError):
		chordroll.functional.FunctionalGroups(tonic=(), predominant=(1,), dominant=(4,))
