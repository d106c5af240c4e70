import typing

import mido
import pytest

import chordroll.chords
import chordroll.harmony
import chordroll.progression
import chordroll.scales


class FakeMidiOut:

	"""Minimal MIDI output stub that records what it is sent."""

	def __init__ (self, name: str = "Dummy MIDI") -> None:

		self.name = name
		self.sent: typing.List[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.sent.append(message)


	def close (self) -> None:

		self.closed = True


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI", "Second MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	return FakeMidiOut(name)


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use fake MIDI outputs for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def c_major () -> chordroll.scales.Scale:

	return chordroll.scales.build_scale("C")


@pytest.fixture
def pop_progression (c_major: chordroll.scales.Scale) -> chordroll.progression.Progression:

	"""I vi IV V in C major."""

	triads = chordroll.harmony.build_triads(c_major)

	return chordroll.progression.Progression(chords=(triads[0], triads[5], triads[3], triads[4]))
