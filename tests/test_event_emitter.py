import typing

import pytest

import chordroll.event_emitter


@pytest.fixture
def emitter () -> chordroll.event_emitter.EventEmitter:

	return chordroll.event_emitter.EventEmitter(chordroll.event_emitter.ENGINE_EVENTS + chordroll.event_emitter.SESSION_EVENTS)


def test_on_and_emit_sync (emitter: chordroll.event_emitter.EventEmitter) -> None:

	"""Registered sync callbacks are called on emit_sync."""

	received: typing.List[str] = []

	emitter.on("changed", received.append)
	emitter.emit_sync("changed", "A minor")

	assert received == ["A minor"]


def test_unknown_event_names_are_rejected (emitter: chordroll.event_emitter.EventEmitter) -> None:

	"""A misspelt event name fails when registering and when emitting."""

	with pytest.raises(ValueError, match="finshed"):
		emitter.on("finshed", lambda: None)

	with pytest.raises(ValueError, match="expected one of"):
		emitter.emit_sync("chnaged")

	with pytest.raises(ValueError):
		chordroll.event_emitter.EventEmitter([])


def test_off_only_removes_target_callback (emitter: chordroll.event_emitter.EventEmitter) -> None:

	"""off() leaves other callbacks for the same event intact."""

	a: typing.List[int] = []
	b: typing.List[int] = []

	emitter.on("changed", a.append)
	emitter.on("changed", b.append)
	emitter.off("changed", a.append)
	emitter.emit_sync("changed", 7)

	assert a == []
	assert b == [7]
	assert emitter.listener_count("changed") == 1


def test_off_raises_for_unregistered_callback (emitter: chordroll.event_emitter.EventEmitter) -> None:

	"""off() raises ValueError when the callback was never registered."""

	with pytest.raises(ValueError, match="changed"):
		emitter.off("changed", lambda: None)


def test_listener_can_remove_itself (emitter: chordroll.event_emitter.EventEmitter) -> None:

	"""Removing a listener during emit does not skip the next one."""

	calls: typing.List[str] = []

	def once () -> None:
		calls.append("once")
		emitter.off("stop", once)

	emitter.on("stop", once)
	emitter.on("stop", lambda: calls.append("always"))

	emitter.emit_sync("stop")
	emitter.emit_sync("stop")

	assert calls == ["once", "always", "always"]
	assert emitter.listener_count("stop", once) == 0


def test_emit_sync_rejects_coroutines (emitter: chordroll.event_emitter.EventEmitter) -> None:

	"""Coroutine listeners cannot be called synchronously."""

	async def listener () -> None:
		return None

	emitter.on("finished", listener)

	with pytest.raises(ValueError, match="Async"):
		emitter.emit_sync("finished")


@pytest.mark.asyncio
async def test_emit_async_awaits_both_kinds (emitter: chordroll.event_emitter.EventEmitter) -> None:

	"""emit_async calls plain listeners and awaits coroutine listeners."""

	received: typing.List[str] = []

	async def async_listener () -> None:
		received.append("async")

	emitter.on("loop", lambda: received.append("sync"))
	emitter.on("loop", async_listener)

	await emitter.emit_async("loop")

	assert sorted(received) == ["async", "sync"]
