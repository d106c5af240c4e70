"""Named notifications shared by the editing session and the MIDI engine.

Each emitter is built with the event names it can raise. Registering for, or
emitting, any other name is a ``ValueError``, so a misspelt ``"finshed"``
fails at the call site instead of never firing.

Example:
	```python
	events = chordroll.event_emitter.EventEmitter(chordroll.event_emitter.ENGINE_EVENTS)
	events.on("finished", lambda: print("pass complete"))
	events.emit_sync("finished")
	```
"""

import asyncio
import typing


CallbackType = typing.Callable[..., typing.Any]

# Emitted by Session.dispatch with the new SessionState.
SESSION_EVENTS: typing.Tuple[str, ...] = ("changed",)

# Emitted by the MIDI engine's transport, without arguments.
ENGINE_EVENTS: typing.Tuple[str, ...] = ("start", "loop", "finished", "stop")


class EventEmitter:

	"""Listener registry over a fixed set of event names."""

	def __init__ (self, event_names: typing.Iterable[str]) -> None:

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {name: [] for name in event_names}

		if not self._listeners:
			raise ValueError("An emitter needs at least one event name")


	@property
	def event_names (self) -> typing.Tuple[str, ...]:

		return tuple(self._listeners)


	def _callbacks (self, event_name: str) -> typing.List[CallbackType]:

		if event_name not in self._listeners:
			raise ValueError(f"Unknown event {event_name!r} (expected one of {', '.join(self._listeners)})")

		return self._listeners[event_name]


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""Register a callback for an event name."""

		self._callbacks(event_name).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		callbacks = self._callbacks(event_name)

		if callback not in callbacks:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		callbacks.remove(callback)


	def listener_count (self, event_name: str, callback: typing.Optional[CallbackType] = None) -> int:

		"""Number of listeners for an event, or registrations of one callback."""

		callbacks = self._callbacks(event_name)

		if callback is None:
			return len(callbacks)

		return callbacks.count(callback)


	def emit_sync (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for an event immediately.

		Coroutine listeners cannot be awaited from synchronous code, so they
		are rejected.
		"""

		# Copy so a listener may unsubscribe itself while being notified.
		for callback in list(self._callbacks(event_name)):

			if asyncio.iscoroutinefunction(callback):
				raise ValueError("Async callback encountered in emit_sync")

			callback(*args, **kwargs)


	async def emit_async (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""Emit from the event loop, awaiting coroutine listeners together."""

		awaitables = [callback(*args, **kwargs) for callback in list(self._callbacks(event_name))]
		pending = [result for result in awaitables if asyncio.iscoroutine(result)]

		if pending:
			await asyncio.gather(*pending)
