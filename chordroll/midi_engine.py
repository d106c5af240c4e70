import asyncio
import heapq
import itertools
import logging
import time
import typing

import mido

import chordroll.chords
import chordroll.constants.durations
import chordroll.constants.velocity
import chordroll.event_emitter
import chordroll.midi_utils


logger = logging.getLogger(__name__)


# Upper bound on a single sleep, so tempo and loop changes are picked up promptly.
_MAX_SLEEP = 0.005

_NOTE_OFF = 0
_NOTE_ON = 1


class MidiEngine:

	"""
	An :class:`~chordroll.playback.AudioEngine` that plays through a MIDI output.

	The transport runs as one asyncio task. Its clock is anchored to
	``time.perf_counter()``; the unit position is derived from the anchor and
	the tempo, so a tempo change re-anchors rather than jumping. Scheduled
	callbacks fire in unit order and receive their exact due time, which they
	pass back to :meth:`trigger_note`. Note on/off messages wait in a heap
	ordered by time with note-offs first.

	A note-off computed from ``time + duration`` can land a rounding error
	after the next strike of the same pitch. Sounding pitches are therefore
	reference counted: a strike on a pitch that is still sounding sends a
	note-off and then the note-on, and a note-off only reaches the port when
	the last strike of that pitch has ended. The message stream is the same
	whichever order the two times round to.

	A tempo change rescales the remaining time of queued notes, so sounding
	notes keep their length in units.

	The engine needs a running event loop: call :meth:`start` from async code
	and ``await`` :meth:`wait` for a non-looping pass to end.
	"""

	def __init__ (
		self,
		output_device_name: typing.Optional[str] = None,
		bpm: float = 120,
		channel: int = 0,
		velocity: int = chordroll.constants.velocity.DEFAULT_CHORD_VELOCITY
	) -> None:

		"""Initialize the engine and open the MIDI output.

		Parameters:
			output_device_name: MIDI output device name. When omitted the first
				available output is used.
			bpm: Initial tempo in beats per minute.
			channel: MIDI channel (0-15) for every note.
			velocity: Note-on velocity (0-127).
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		if not 0 <= channel <= 15:
			raise ValueError("MIDI channel must be between 0 and 15")

		if not chordroll.constants.velocity.MIN_VELOCITY <= velocity <= chordroll.constants.velocity.MAX_VELOCITY:
			raise ValueError("Velocity must be between 0 and 127")

		self.channel = channel
		self.velocity = velocity
		self.events = chordroll.event_emitter.EventEmitter(chordroll.event_emitter.ENGINE_EVENTS)

		self._bpm = float(bpm)
		self._schedule: typing.List[typing.Tuple[float, int, typing.Callable[[float], None]]] = []
		self._schedule_counter = itertools.count()
		self._next_index = 0

		self._pending: typing.List[typing.Tuple[float, int, int, int]] = []
		self._pending_counter = itertools.count()
		# Pitch -> number of overlapping strikes still sounding.
		self.active_notes: typing.Dict[int, int] = {}

		self._anchor_time = 0.0
		self._anchor_units = 0.0

		self.loop_start: typing.Optional[float] = None
		self.loop_end: typing.Optional[float] = None

		self.running = False
		self.task: typing.Optional[asyncio.Task] = None

		self.output_device_name, self.midi_out = chordroll.midi_utils.select_output_device(output_device_name)

		if self.midi_out is None:
			logger.warning("No MIDI output - playback will run silently")


	# ------------------------------------------------------------------
	# Clock
	# ------------------------------------------------------------------

	@property
	def bpm (self) -> float:

		return self._bpm

	@bpm.setter
	def bpm (self, value: float) -> None:

		if value <= 0:
			raise ValueError("BPM must be positive")

		# Re-anchor so the position stays continuous across the change.
		if self.running:
			now = time.perf_counter()
			self._anchor_units = self.position_units
			self._anchor_time = now
			self._rescale_pending(now, self._bpm / float(value))

		self._bpm = float(value)
		logger.info(f"BPM set to {self._bpm:.2f}")

	@property
	def position_units (self) -> float:

		"""Transport position in units."""

		if not self.running:
			return self._anchor_units

		elapsed = time.perf_counter() - self._anchor_time

		return self._anchor_units + chordroll.constants.durations.seconds_to_units(elapsed, self._bpm)

	def _time_at (self, units: float) -> float:

		"""Clock time at which the transport reaches ``units`` in the current pass."""

		return self._anchor_time + chordroll.constants.durations.units_to_seconds(units - self._anchor_units, self._bpm)

	def _rescale_pending (self, now: float, ratio: float) -> None:

		"""Stretch the time left on every queued note message by ``ratio``."""

		self._pending = [
			(now + max(due - now, 0.0) * ratio, kind, counter, note)
			for due, kind, counter, note in self._pending
		]

		heapq.heapify(self._pending)


	# ------------------------------------------------------------------
	# AudioEngine interface
	# ------------------------------------------------------------------

	def schedule_at (self, start_units: float, callback: typing.Callable[[float], None]) -> None:

		"""Register ``callback(time)`` to fire when the transport reaches ``start_units``."""

		if start_units < 0:
			raise ValueError("Start position cannot be negative")

		entry = (float(start_units), next(self._schedule_counter), callback)

		index = len(self._schedule)
		while index > 0 and self._schedule[index - 1][:2] > entry[:2]:
			index -= 1

		self._schedule.insert(index, entry)

		if index < self._next_index:
			self._next_index += 1


	def trigger_note (self, pitch_name: str, duration_units: float, time: float) -> None:

		"""Queue a note-on at ``time`` and its note-off ``duration_units`` later."""

		note = chordroll.chords.Note.parse(pitch_name).midi
		off_time = time + chordroll.constants.durations.units_to_seconds(duration_units, self._bpm)

		heapq.heappush(self._pending, (time, _NOTE_ON, next(self._pending_counter), note))
		heapq.heappush(self._pending, (off_time, _NOTE_OFF, next(self._pending_counter), note))


	def start (self) -> None:

		"""Start the transport from its current position in a new asyncio task.

		Raises:
			RuntimeError: If called without a running event loop.
		"""

		if self.running:
			return

		loop = asyncio.get_running_loop()

		self._anchor_time = time.perf_counter()
		self.running = True
		self.task = loop.create_task(self._run_loop())

		logger.info("Transport started")
		self.events.emit_sync("start")


	def stop (self) -> None:

		"""Stop the transport and rewind it to the start."""

		was_running = self.running
		self.running = False

		if self.task is not None and not self.task.done():
			self.task.cancel()

		self.task = None
		self._anchor_units = 0.0
		self._next_index = 0

		if was_running:
			logger.info("Transport stopped")
			self.events.emit_sync("stop")


	def cancel (self) -> None:

		"""Drop every scheduled callback."""

		self._schedule = []
		self._schedule_counter = itertools.count()
		self._next_index = 0


	def release_all (self) -> None:

		"""Send note-off for every sounding note and drop queued notes."""

		self._pending = []

		for note in sorted(self.active_notes):
			self._send("note_off", note)

		self.active_notes = {}


	def set_loop (self, start_units: float, end_units: float) -> None:

		"""Loop the region ``[start_units, end_units)``."""

		if start_units < 0 or end_units <= start_units:
			raise ValueError("Loop region must satisfy 0 <= start < end")

		self.loop_start = float(start_units)
		self.loop_end = float(end_units)


	def clear_loop (self) -> None:

		self.loop_start = None
		self.loop_end = None


	async def wait (self) -> None:

		"""Wait for the current pass to finish (or the transport to be stopped)."""

		if self.task is None:
			return

		try:
			await self.task
		except asyncio.CancelledError:
			pass


	def close (self) -> None:

		"""Silence everything and close the MIDI output."""

		self.stop()
		self.release_all()

		if self.midi_out is not None:
			self.midi_out.close()
			self.midi_out = None


	# ------------------------------------------------------------------
	# Internals
	# ------------------------------------------------------------------

	def _send (self, message_type: str, note: int) -> None:

		"""Send a note message to the output port."""

		if self.midi_out is None:
			return

		velocity = self.velocity if message_type == "note_on" else 0

		try:
			self.midi_out.send(mido.Message(message_type, channel=self.channel, note=note, velocity=velocity))

		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


	def _fire_due_callbacks (self, position: float) -> None:

		"""Fire scheduled callbacks up to ``position`` (exclusive of the loop end)."""

		while self._next_index < len(self._schedule):
			units, _, callback = self._schedule[self._next_index]

			if units > position:
				break

			if self.loop_end is not None and units >= self.loop_end:
				break

			self._next_index += 1
			callback(self._time_at(units))


	def _process_pending (self, now: float) -> None:

		"""Send every queued note message that is due."""

		while self._pending and self._pending[0][0] <= now:
			_, kind, _, note = heapq.heappop(self._pending)

			count = self.active_notes.get(note, 0)

			if kind == _NOTE_ON:

				# Re-strike: release the sounding pitch before striking it again.
				if count:
					self._send("note_off", note)

				self.active_notes[note] = count + 1
				self._send("note_on", note)

			elif count == 1:
				del self.active_notes[note]
				self._send("note_off", note)

			elif count > 1:
				self.active_notes[note] = count - 1


	async def _wrap_loop (self, position: float) -> None:

		"""Rewind to the loop start, carrying over any overshoot."""

		assert self.loop_start is not None and self.loop_end is not None

		overshoot = position - self.loop_end
		self._anchor_units = self.loop_start
		self._anchor_time = time.perf_counter() - chordroll.constants.durations.units_to_seconds(overshoot, self._bpm)

		self._next_index = 0
		while self._next_index < len(self._schedule) and self._schedule[self._next_index][0] < self.loop_start:
			self._next_index += 1

		await self.events.emit_async("loop")


	def _is_exhausted (self) -> bool:

		return self._next_index >= len(self._schedule) and not self._pending and not self.active_notes


	async def _run_loop (self) -> None:

		"""Transport loop: fire callbacks, send notes, sleep until the next due time."""

		while self.running:

			position = self.position_units
			self._fire_due_callbacks(position)

			if self.loop_end is not None and position >= self.loop_end:
				await self._wrap_loop(position)
				continue

			self._process_pending(time.perf_counter())

			if self.loop_end is None and self._is_exhausted():
				logger.info("Playback complete (no more events or active notes).")
				self.running = False
				self._anchor_units = position
				await self.events.emit_async("finished")
				break

			next_times: typing.List[float] = []

			if self._next_index < len(self._schedule):
				next_times.append(self._time_at(self._schedule[self._next_index][0]))

			if self._pending:
				next_times.append(self._pending[0][0])

			sleep_time = _MAX_SLEEP

			if next_times:
				sleep_time = min(max(min(next_times) - time.perf_counter(), 0.0), _MAX_SLEEP)

			await asyncio.sleep(sleep_time)
