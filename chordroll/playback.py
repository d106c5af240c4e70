"""Hand a timeline to an audio engine, one playback session at a time.

The engine is a black box described by :class:`AudioEngine`. It owns the
clock: :class:`Player` only schedules callbacks at unit offsets and each
callback triggers the event's notes at the time the engine hands it.
:class:`chordroll.midi_engine.MidiEngine` is the bundled implementation.

Starting playback always clears whatever was scheduled before, so two
overlapping "play" actions never stack up.
"""

import functools
import logging
import typing

import chordroll.timeline


logger = logging.getLogger(__name__)


@typing.runtime_checkable
class AudioEngine (typing.Protocol):

	"""
	Transport and note trigger contract the player relies on.

	Times passed to scheduled callbacks and to ``trigger_note`` are engine
	clock values; the player never interprets them.
	"""

	bpm: float

	@property
	def position_units (self) -> float:

		"""Current transport position in units."""

		...

	def schedule_at (self, start_units: float, callback: typing.Callable[[float], None]) -> None:

		"""Call ``callback(time)`` when the transport reaches ``start_units``."""

		...

	def trigger_note (self, pitch_name: str, duration_units: float, time: float) -> None:

		"""Sound ``pitch_name`` (e.g. ``"C#4"``) at ``time`` for ``duration_units``."""

		...

	def start (self) -> None:

		...

	def stop (self) -> None:

		...

	def cancel (self) -> None:

		"""Drop every scheduled callback."""

		...

	def release_all (self) -> None:

		"""Silence every sounding note."""

		...

	def set_loop (self, start_units: float, end_units: float) -> None:

		"""Loop the region ``[start_units, end_units)``."""

		...

	def clear_loop (self) -> None:

		...


class Player:

	"""Schedules timelines on an engine and tracks the playhead."""

	def __init__ (self, engine: AudioEngine) -> None:

		"""
		Initialize the player around an engine.
		"""

		self.engine = engine
		self.timeline: typing.Optional[chordroll.timeline.Timeline] = None
		self.is_playing = False
		self.looping = False


	def _trigger (self, event: chordroll.timeline.TimelineEvent, time: float) -> None:

		"""Sound every note of an event at the engine time given."""

		for pitch_name in event.pitch_names():
			self.engine.trigger_note(pitch_name, event.duration_units, time)


	def _on_end (self, time: float) -> None:

		logger.debug(f"Reached the end of the timeline at {time:.3f}")


	def play (self, timeline: chordroll.timeline.Timeline) -> None:

		"""Replace any current playback with ``timeline`` and start the transport.

		Raises:
			ValueError: If the timeline has no events.
		"""

		if not timeline.events:
			raise ValueError("Cannot play a timeline with no events")

		self.stop()

		self.timeline = timeline

		for event in timeline.events:
			self.engine.schedule_at(event.start_units, functools.partial(self._trigger, event))

		# Marks the end so trailing rests still count towards the pass length.
		self.engine.schedule_at(timeline.total_units, self._on_end)

		if self.looping:
			self.engine.set_loop(0, timeline.total_units)

		else:
			self.engine.clear_loop()

		self.engine.start()
		self.is_playing = True

		logger.info(
			f"Playing {len(timeline.events)} events over {timeline.total_units} units "
			f"({timeline.duration_seconds(self.engine.bpm):.2f}s at {self.engine.bpm:g} BPM)"
		)


	def stop (self) -> None:

		"""Stop the transport, drop the schedule and silence every note."""

		self.engine.stop()
		self.engine.cancel()
		self.engine.release_all()

		if self.is_playing:
			logger.info("Playback stopped")

		self.is_playing = False


	def set_looping (self, enabled: bool) -> None:

		"""Loop the whole timeline, or stop looping at the end of the current pass."""

		self.looping = enabled

		if enabled and self.timeline is not None:
			self.engine.set_loop(0, self.timeline.total_units)

		elif not enabled:
			self.engine.clear_loop()


	def set_bpm (self, bpm: float) -> None:

		"""Change the engine tempo."""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.engine.bpm = bpm


	def position_units (self) -> float:

		"""Playhead position in units (0 when nothing has been played)."""

		if self.timeline is None:
			return 0.0

		position = self.engine.position_units

		if self.looping:
			return position % self.timeline.total_units

		return min(position, float(self.timeline.total_units))


	def progress (self) -> float:

		"""Playhead position as a 0..1 fraction of the timeline."""

		if self.timeline is None:
			return 0.0

		return self.timeline.fraction(self.position_units())


	def finished (self) -> bool:

		"""``True`` once a non-looping pass has reached the end of the timeline."""

		if self.timeline is None or self.looping:
			return False

		return self.engine.position_units >= self.timeline.total_units
