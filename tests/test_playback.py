import typing

import pytest

import chordroll.playback
import chordroll.progression
import chordroll.rhythm
import chordroll.timeline


class FakeEngine:

	"""Records every call the player makes, in order."""

	def __init__ (self) -> None:

		self.bpm = 120.0
		self.position = 0.0
		self.calls: typing.List[str] = []
		self.scheduled: typing.List[typing.Tuple[float, typing.Callable[[float], None]]] = []
		self.triggered: typing.List[typing.Tuple[str, float, float]] = []
		self.loop: typing.Optional[typing.Tuple[float, float]] = None

	@property
	def position_units (self) -> float:

		return self.position

	def schedule_at (self, start_units: float, callback: typing.Callable[[float], None]) -> None:

		self.scheduled.append((start_units, callback))

	def trigger_note (self, pitch_name: str, duration_units: float, time: float) -> None:

		self.triggered.append((pitch_name, duration_units, time))

	def start (self) -> None:

		self.calls.append("start")

	def stop (self) -> None:

		self.calls.append("stop")

	def cancel (self) -> None:

		self.calls.append("cancel")
		self.scheduled = []

	def release_all (self) -> None:

		self.calls.append("release_all")

	def set_loop (self, start_units: float, end_units: float) -> None:

		self.calls.append("set_loop")
		self.loop = (start_units, end_units)

	def clear_loop (self) -> None:

		self.calls.append("clear_loop")
		self.loop = None


@pytest.fixture
def timeline (pop_progression: chordroll.progression.Progression) -> chordroll.timeline.Timeline:

	return chordroll.timeline.map_to_timeline(pop_progression, chordroll.rhythm.lookup("none"))


def test_fake_engine_satisfies_protocol () -> None:

	"""The engine contract is structural."""

	assert isinstance(FakeEngine(), chordroll.playback.AudioEngine)


def test_play_clears_before_scheduling (timeline: chordroll.timeline.Timeline) -> None:

	"""Starting playback stops, cancels and silences before anything new is scheduled."""

	engine = FakeEngine()
	player = chordroll.playback.Player(engine)

	player.play(timeline)

	assert engine.calls[:3] == ["stop", "cancel", "release_all"]
	assert engine.calls[-1] == "start"
	assert player.is_playing


def test_play_schedules_every_event_and_the_end (timeline: chordroll.timeline.Timeline) -> None:

	"""One callback per event plus an end marker at total_units."""

	engine = FakeEngine()
	chordroll.playback.Player(engine).play(timeline)

	starts = [start for start, _ in engine.scheduled]

	assert len(starts) == len(timeline.events) + 1
	assert starts[-1] == timeline.total_units
	assert starts[:-1] == [event.start_units for event in timeline.events]


def test_replaying_does_not_stack (timeline: chordroll.timeline.Timeline) -> None:

	"""A second play replaces the first schedule."""

	engine = FakeEngine()
	player = chordroll.playback.Player(engine)

	player.play(timeline)
	player.play(timeline)

	assert len(engine.scheduled) == len(timeline.events) + 1


def test_callbacks_trigger_event_notes (timeline: chordroll.timeline.Timeline) -> None:

	"""A fired callback sounds each note of its event at the engine's time."""

	engine = FakeEngine()
	chordroll.playback.Player(engine).play(timeline)

	_, first_callback = engine.scheduled[0]
	first_callback(1.5)

	assert engine.triggered == [("C4", 16, 1.5), ("E4", 16, 1.5), ("G4", 16, 1.5)]


def test_looping (timeline: chordroll.timeline.Timeline) -> None:

	"""Looping covers the whole timeline and can be switched off mid-play."""

	engine = FakeEngine()
	player = chordroll.playback.Player(engine)
	player.set_looping(True)
	player.play(timeline)

	assert engine.loop == (0, 64)

	player.set_looping(False)

	assert engine.loop is None


def test_not_looping_clears_loop (timeline: chordroll.timeline.Timeline) -> None:

	"""A non-looping play removes any earlier loop region."""

	engine = FakeEngine()
	engine.loop = (0, 8)

	chordroll.playback.Player(engine).play(timeline)

	assert engine.loop is None


def test_empty_timeline () -> None:

	"""There is nothing to play in an empty timeline."""

	player = chordroll.playback.Player(FakeEngine())

	with pytest.raises(ValueError):
		player.play(chordroll.timeline.Timeline(events=(), chord_units=0, bass_units=0))


def test_stop (timeline: chordroll.timeline.Timeline) -> None:

	"""stop halts the engine and drops the schedule."""

	engine = FakeEngine()
	player = chordroll.playback.Player(engine)
	player.play(timeline)
	engine.calls.clear()

	player.stop()

	assert engine.calls == ["stop", "cancel", "release_all"]
	assert engine.scheduled == []
	assert not player.is_playing


def test_position_and_progress (timeline: chordroll.timeline.Timeline) -> None:

	"""The playhead wraps when looping and clamps otherwise."""

	engine = FakeEngine()
	player = chordroll.playback.Player(engine)

	assert player.progress() == 0.0

	player.play(timeline)
	engine.position = 80

	assert player.position_units() == 64
	assert player.finished()

	player.set_looping(True)

	assert player.position_units() == 16
	assert player.progress() == 0.25
	assert not player.finished()


def test_set_bpm () -> None:

	"""Tempo changes go to the engine and must be positive."""

	engine = FakeEngine()
	player = chordroll.playback.Player(engine)

	player.set_bpm(140)

	assert engine.bpm == 140

	with pytest.raises(ValueError):
		player.set_bpm(0)
