"""Editing session: the current progression plus the commands that change it.

Every command builds a complete new :class:`SessionState` and swaps it in with
a single assignment, so observers never see a half-applied edit. Views such as
the timeline, the numeral analysis and the piano roll are derived from the
state on demand rather than stored alongside it.

Example:
	```python
	session = chordroll.session.Session()
	unsubscribe = session.subscribe(lambda state: print(state.progression.names()))

	session.dispatch(chordroll.session.Generate(key="A", is_minor=True))
	session.dispatch(chordroll.session.ReorderChord(from_index=0, to_index=3))
	session.dispatch(chordroll.session.SetRhythmPattern("house"))
	unsubscribe()
	```
"""

import dataclasses
import logging
import random
import typing

import chordroll.chords
import chordroll.config
import chordroll.event_emitter
import chordroll.export
import chordroll.functional
import chordroll.harmony
import chordroll.progression
import chordroll.render
import chordroll.rhythm
import chordroll.roman
import chordroll.scales
import chordroll.timeline


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class SessionState:

	"""Snapshot of everything a view needs."""

	scale: chordroll.scales.Scale
	progression: chordroll.progression.Progression
	rhythm_name: str
	bpm: float


@dataclasses.dataclass(frozen=True)
class Generate:

	"""Draw a new progression. ``None`` fields fall back to the session settings."""

	key: typing.Optional[typing.Union[str, int]] = None
	is_minor: typing.Optional[bool] = None
	length: typing.Optional[int] = None
	extensions: typing.Optional[bool] = None


@dataclasses.dataclass(frozen=True)
class ReorderChord:

	from_index: int
	to_index: int


@dataclasses.dataclass(frozen=True)
class ReplaceChordAt:

	index: int
	chord: chordroll.chords.Chord


@dataclasses.dataclass(frozen=True)
class SetRhythmPattern:

	name: str


@dataclasses.dataclass(frozen=True)
class SetTempo:

	bpm: float


Command = typing.Union[Generate, ReorderChord, ReplaceChordAt, SetRhythmPattern, SetTempo]


class Session:

	"""Holds the current :class:`SessionState` and applies commands to it."""

	def __init__ (
		self,
		settings: typing.Optional[chordroll.config.Settings] = None,
		rng: typing.Optional[random.Random] = None
	) -> None:

		"""
		Initialize an empty session.

		Parameters:
			settings: Generation, rhythm and playback defaults. When omitted the
				built-in defaults are used.
			rng: Optional seeded ``random.Random`` for repeatable generation.
		"""

		self.settings = settings or chordroll.config.Settings()
		self.grid = self.settings.rhythm_grid()
		self.generator = chordroll.functional.ProgressionGenerator(
			groups = self.settings.groups,
			sus_probability = self.settings.sus_probability,
			max_attempts = self.settings.max_attempts,
			rng = rng
		)

		self.events = chordroll.event_emitter.EventEmitter(chordroll.event_emitter.SESSION_EVENTS)
		self.state: typing.Optional[SessionState] = None


	def _require_state (self) -> SessionState:

		if self.state is None:
			raise ValueError("No progression yet - generate one first")

		return self.state


	def _apply (self, command: Command) -> SessionState:

		"""Build the state that results from ``command``."""

		if isinstance(command, Generate):
			return self._generate(command)

		state = self._require_state()

		if isinstance(command, ReorderChord):
			return dataclasses.replace(state, progression=state.progression.reorder(command.from_index, command.to_index))

		if isinstance(command, ReplaceChordAt):
			return dataclasses.replace(state, progression=state.progression.replace(command.index, command.chord))

		if isinstance(command, SetRhythmPattern):
			# Unknown names are kept as-is; the timeline resolves them to "none".
			if command.name not in self.grid:
				logger.warning(f"Unknown rhythm pattern '{command.name}' selected")
			return dataclasses.replace(state, rhythm_name=command.name)

		if isinstance(command, SetTempo):
			if command.bpm <= 0:
				raise ValueError("BPM must be positive")
			return dataclasses.replace(state, bpm=float(command.bpm))

		raise ValueError(f"Unknown command: {command!r}")


	def _generate (self, command: Generate) -> SessionState:

		key = command.key if command.key is not None else self.settings.key
		is_minor = command.is_minor if command.is_minor is not None else self.settings.minor
		length = command.length if command.length is not None else self.settings.length
		extensions = command.extensions if command.extensions is not None else self.settings.extensions

		result = self.generator.generate(
			length = length,
			key = key,
			is_minor = is_minor,
			extensions = extensions
		)

		rhythm_name = self.settings.rhythm if self.state is None else self.state.rhythm_name
		bpm = self.settings.bpm if self.state is None else self.state.bpm

		return SessionState(
			scale = result.scale,
			progression = result.progression,
			rhythm_name = rhythm_name,
			bpm = bpm
		)


	def dispatch (self, command: Command) -> SessionState:

		"""Apply a command, swap in the new state and notify ``"changed"`` listeners.

		Raises:
			ValueError: If an edit arrives before the first :class:`Generate`, or
				a value is invalid.
			IndexError: If a slot index is out of range.
		"""

		new_state = self._apply(command)
		self.state = new_state

		logger.debug(f"Applied {type(command).__name__}")
		self.events.emit_sync("changed", new_state)

		return new_state


	def subscribe (self, callback: typing.Callable[[SessionState], typing.Any]) -> typing.Callable[[], None]:

		"""Call ``callback(state)`` after every command.

		Returns a function that removes the listener again. Calling it twice is
		harmless.
		"""

		self.events.on("changed", callback)

		def unsubscribe () -> None:

			if self.events.listener_count("changed", callback):
				self.events.off("changed", callback)

		return unsubscribe


	# ------------------------------------------------------------------
	# Derived views
	# ------------------------------------------------------------------

	def pattern (self) -> chordroll.rhythm.RhythmPattern:

		"""The selected rhythm pattern, or ``"none"`` when its name is unknown."""

		return self.grid.resolve(self._require_state().rhythm_name)


	def timeline (self) -> chordroll.timeline.Timeline:

		"""The current progression mapped through the selected rhythm pattern."""

		return chordroll.timeline.map_to_timeline(self._require_state().progression, self.pattern())


	def numerals (self) -> typing.List[str]:

		state = self._require_state()

		return chordroll.roman.progression_numerals(state.scale, state.progression)


	def numeral_text (self) -> str:

		state = self._require_state()

		return chordroll.roman.numeral_text(state.scale, state.progression)


	def key_name (self) -> str:

		return self._require_state().scale.key_name()


	def chord_options (self) -> typing.List[chordroll.chords.Chord]:

		"""Every triad and sus chord of the current key, for slot replacement."""

		return chordroll.harmony.chord_palette(self._require_state().scale)


	def piano_roll (self, width: float, height: float) -> chordroll.render.PianoRoll:

		return chordroll.render.PianoRoll(self.timeline(), self._require_state().scale, width, height)


	def export (self, directory: typing.Optional[str] = None) -> str:

		"""Write the current timeline as a MIDI file and return its path."""

		state = self._require_state()

		return chordroll.export.export_midi(
			self.timeline(),
			state.scale,
			state.progression,
			directory = directory if directory is not None else self.settings.export_directory,
			bpm = state.bpm,
			chord_channel = self.settings.chord_channel,
			bass_channel = self.settings.bass_channel
		)
