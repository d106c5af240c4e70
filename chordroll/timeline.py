"""Map a progression onto the shared unit time grid.

The timeline is the single source of timing for everything downstream: the
piano roll turns it into pixels, the player turns it into scheduled notes and
the exporter turns it into MIDI ticks. It is recomputed from the progression
and the rhythm pattern every time it is needed and never stored.

Each layer keeps one cursor running across the whole progression, so chord
boundaries fall on rhythmic phrase boundaries (after the pattern's unit total)
rather than on bar lines::

	syncopated chords [1, 0, 1, 1, 0, 1] on two chords

	units   0 1 2 3 4 5 | 6 7 8 9 10 11
	chord 1 X . X X . X |
	chord 2             | X . X X .  X

The chord and bass layers are walked independently. When a pattern's layers
cover a different number of units, both still share one denominator:
``total_units = max(chord_units, bass_units)``.
"""

import dataclasses
import typing

import chordroll.chords
import chordroll.constants.durations
import chordroll.progression
import chordroll.rhythm


CHORD_LAYER = "chord"
BASS_LAYER = "bass"

LAYERS: typing.Tuple[str, ...] = (CHORD_LAYER, BASS_LAYER)

REST_UNITS = 1


@dataclasses.dataclass(frozen=True)
class TimelineEvent:

	"""
	A set of notes sounding together for a span of units.

	Attributes:
		layer: ``"chord"`` (upper voices) or ``"bass"`` (the chord's bass root).
		notes: The notes to sound.
		start_units: Offset from the start of the progression.
		duration_units: Length, at least one unit.
		slot: Index of the chord in the progression this event came from.
	"""

	layer: str
	notes: typing.Tuple[chordroll.chords.Note, ...]
	start_units: int
	duration_units: int
	slot: int = 0

	@property
	def end_units (self) -> int:

		return self.start_units + self.duration_units

	def pitch_names (self) -> typing.List[str]:

		"""Engine-facing note names, e.g. ``["C4", "E4", "G4"]``."""

		return [note.name() for note in self.notes]


def _layer_notes (chord: chordroll.chords.Chord, layer: str) -> typing.Tuple[chordroll.chords.Note, ...]:

	if layer == CHORD_LAYER:
		return chord.upper

	if layer == BASS_LAYER:
		return (chord.bass,)

	raise ValueError(f"Unknown timeline layer: {layer}")


def map_layer (
	progression: chordroll.progression.Progression,
	steps: typing.Sequence[int],
	layer: str
) -> typing.Tuple[typing.List[TimelineEvent], int]:

	"""Walk one layer's step sequence across every chord of a progression.

	Parameters:
		progression: The chords, in playing order.
		steps: The layer's unit sequence for one chord slot.
		layer: ``"chord"`` or ``"bass"``, selects which voices sound.

	Returns:
		The emitted events and the layer's total length in units.
	"""

	events: typing.List[TimelineEvent] = []
	cursor = 0

	for slot, chord in enumerate(progression):
		notes = _layer_notes(chord, layer)

		for step in steps:

			if step == 0:
				cursor += REST_UNITS
				continue

			events.append(TimelineEvent(
				layer = layer,
				notes = notes,
				start_units = cursor,
				duration_units = step,
				slot = slot
			))

			cursor += step

	return events, cursor


@dataclasses.dataclass(frozen=True)
class Timeline:

	"""The flat, time-ordered event list for a progression and rhythm pattern."""

	events: typing.Tuple[TimelineEvent, ...]
	chord_units: int
	bass_units: int
	pattern_name: str = chordroll.rhythm.DEFAULT_PATTERN

	@property
	def total_units (self) -> int:

		"""Shared length of both layers, used as the denominator for time and width."""

		return max(self.chord_units, self.bass_units)

	def layer_events (self, layer: str) -> typing.List[TimelineEvent]:

		"""Events of one layer, in start order."""

		if layer not in LAYERS:
			raise ValueError(f"Unknown timeline layer: {layer}")

		return [event for event in self.events if event.layer == layer]

	def fraction (self, units: float) -> float:

		"""Convert a unit position to a 0..1 fraction of the whole timeline."""

		if self.total_units <= 0:
			return 0.0

		return min(max(units / self.total_units, 0.0), 1.0)

	def units_at (self, fraction: float) -> float:

		"""Convert a 0..1 fraction (e.g. a playhead x / width) back to units."""

		return min(max(fraction, 0.0), 1.0) * self.total_units

	def events_at (self, units: float) -> typing.List[TimelineEvent]:

		"""Return the events sounding at a unit position."""

		return [event for event in self.events if event.start_units <= units < event.end_units]

	def slot_at (self, units: float, layer: str = CHORD_LAYER) -> typing.Optional[int]:

		"""Return the progression slot whose events are sounding or most recently started at ``units``."""

		current: typing.Optional[int] = None

		for event in self.events:

			if event.layer != layer:
				continue

			if event.start_units > units:
				break

			current = event.slot

		return current

	def duration_seconds (self, bpm: float) -> float:

		"""Real length of the timeline at the given tempo."""

		return chordroll.constants.durations.units_to_seconds(self.total_units, bpm)

	def notes (self) -> typing.List[chordroll.chords.Note]:

		"""Every note appearing in the timeline (with repeats)."""

		return [note for event in self.events for note in event.notes]


def map_to_timeline (
	progression: chordroll.progression.Progression,
	pattern: chordroll.rhythm.RhythmPattern
) -> Timeline:

	"""Map a progression through a rhythm pattern into a :class:`Timeline`.

	Raises:
		ValueError: If the progression has no chords.

	Example:
		```python
		timeline = map_to_timeline(progression, chordroll.rhythm.lookup("none"))
		[e.start_units for e in timeline.layer_events("chord")]  # → [0, 16, 32, 48]
		```
	"""

	if len(progression) == 0:
		raise ValueError("Cannot map an empty progression to a timeline")

	chord_events, chord_units = map_layer(progression, pattern.chords, CHORD_LAYER)
	bass_events, bass_units = map_layer(progression, pattern.bass, BASS_LAYER)

	layer_order = {layer: i for i, layer in enumerate(LAYERS)}
	events = sorted(chord_events + bass_events, key=lambda e: (e.start_units, layer_order[e.layer]))

	return Timeline(
		events = tuple(events),
		chord_units = chord_units,
		bass_units = bass_units,
		pattern_name = pattern.name
	)
