import logging

import pytest

import chordroll.rhythm


def test_builtin_patterns () -> None:

	"""The four built-in patterns are available in table order."""

	assert chordroll.rhythm.DEFAULT_GRID.names() == ["none", "house", "trance", "syncopated"]


def test_pattern_units () -> None:

	"""Rests count as one unit when totalling a layer."""

	syncopated = chordroll.rhythm.lookup("syncopated")

	assert syncopated.chord_units == 6
	assert syncopated.bass_units == 6
	assert chordroll.rhythm.lookup("none").chord_units == 16
	assert chordroll.rhythm.lookup("house").bass_units == 16
	assert chordroll.rhythm.lookup("trance").chord_units == 8


def test_lookup_unknown () -> None:

	"""Unknown names raise UnknownPattern, which is a KeyError."""

	with pytest.raises(chordroll.rhythm.UnknownPattern):
		chordroll.rhythm.lookup("dubstep")

	with pytest.raises(KeyError):
		chordroll.rhythm.lookup("dubstep")


def test_resolve_falls_back (caplog: pytest.LogCaptureFixture) -> None:

	"""resolve substitutes "none" for unknown names and logs a warning."""

	with caplog.at_level(logging.WARNING):
		pattern = chordroll.rhythm.DEFAULT_GRID.resolve("dubstep")

	assert pattern.name == "none"
	assert "dubstep" in caplog.text
	assert chordroll.rhythm.DEFAULT_GRID.resolve(None).name == "none"
	assert chordroll.rhythm.DEFAULT_GRID.resolve("house").name == "house"


@pytest.mark.parametrize("chords, bass", [
	((), (16,)),
	((4, -1), (16,)),
	((4,), (2.5,)),
])
def test_malformed_patterns (chords: tuple, bass: tuple) -> None:

	"""Empty layers, negative steps and non-integers are rejected."""

	with pytest.raises(ValueError):
		chordroll.rhythm.RhythmPattern(name="bad", chords=chords, bass=bass)


def test_from_mapping_requires_both_layers () -> None:

	"""A mapping must provide both layers."""

	pattern = chordroll.rhythm.RhythmPattern.from_mapping("halftime", {"chords": [8, 8], "bass": [16]})

	assert pattern.chords == (8, 8)

	with pytest.raises(ValueError):
		chordroll.rhythm.RhythmPattern.from_mapping("halftime", {"chords": [8, 8]})


def test_grid_with_extra_patterns (caplog: pytest.LogCaptureFixture) -> None:

	"""Extra patterns join the table; unbalanced ones log a warning."""

	extra = chordroll.rhythm.RhythmPattern(name="stab", chords=(2, 0), bass=(16,))

	with caplog.at_level(logging.WARNING):
		grid = chordroll.rhythm.RhythmGrid([extra])

	assert "stab" in grid
	assert grid.lookup("stab") is extra
	assert "differ" in caplog.text
	assert "stab" not in chordroll.rhythm.DEFAULT_GRID


def test_grid_keeps_none () -> None:

	"""The fallback pattern cannot be replaced."""

	with pytest.raises(ValueError):
		chordroll.rhythm.RhythmGrid([chordroll.rhythm.RhythmPattern(name="none", chords=(4,), bass=(4,))])
