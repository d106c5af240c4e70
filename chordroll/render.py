"""Piano-roll geometry and a terminal text view of a timeline.

:class:`PianoRoll` computes everything a canvas needs to draw the roll
(background rows, note rectangles, playhead position) without touching any
drawing API. The pitch axis spans the lowest to the highest note in the
timeline, one row per semitone, with scale tones flagged for highlighting.
The time axis divides the width by ``timeline.total_units``, the same
denominator the player uses, so the playhead and the notes stay aligned.

:func:`render_text` draws the same grid in ASCII for the command line::

	G4   |####....####....|
	E4   |####....####....|
	C4   |####....####....|
	C3   |================|
"""

import dataclasses
import typing

import chordroll.chords
import chordroll.constants.durations
import chordroll.rhythm
import chordroll.scales
import chordroll.timeline


DEFAULT_PADDING = 2.0

_CHORD_CHAR = "#"
_BASS_CHAR = "="
_EMPTY_CHAR = "."
_LABEL_WIDTH = 5


@dataclasses.dataclass(frozen=True)
class RowBand:

	"""A horizontal background band for one semitone."""

	midi: int
	y: float
	height: float
	in_scale: bool


@dataclasses.dataclass(frozen=True)
class NoteRect:

	"""A drawable rectangle for one note of one timeline event."""

	layer: str
	note: chordroll.chords.Note
	x: float
	y: float
	width: float
	height: float
	start_units: int
	duration_units: int


class PianoRoll:

	"""Pixel layout of a timeline on a ``width`` x ``height`` canvas."""

	def __init__ (
		self,
		timeline: chordroll.timeline.Timeline,
		scale: chordroll.scales.Scale,
		width: float,
		height: float,
		padding: float = DEFAULT_PADDING
	) -> None:

		"""
		Initialize the layout.

		Parameters:
			timeline: The events to draw.
			scale: Current key; its pitch classes are highlighted.
			width: Canvas width in pixels.
			height: Canvas height in pixels.
			padding: Inset applied on every side of each note rectangle.
		"""

		if width <= 0 or height <= 0:
			raise ValueError("Piano roll dimensions must be positive")

		notes = timeline.notes()

		if not notes:
			raise ValueError("Cannot lay out a timeline without notes")

		if timeline.total_units <= 0:
			raise ValueError("Cannot lay out a timeline with no duration")

		self.timeline = timeline
		self.scale = scale
		self.width = float(width)
		self.height = float(height)
		self.padding = padding

		self.min_midi = min(notes).midi
		self.max_midi = max(notes).midi
		self.pitch_range = self.max_midi - self.min_midi + 1

		self.note_height = self.height / self.pitch_range
		self.unit_width = self.width / timeline.total_units


	def row_y (self, midi: int) -> float:

		"""Top edge of the row for a MIDI pitch (higher pitches sit higher up)."""

		return self.height - (midi - self.min_midi + 1) * self.note_height


	def rows (self) -> typing.List[RowBand]:

		"""Background bands from the lowest to the highest pitch."""

		scale_pcs = set(self.scale.pitch_classes)

		return [
			RowBand(
				midi = midi,
				y = self.row_y(midi),
				height = self.note_height,
				in_scale = midi % 12 in scale_pcs
			)
			for midi in range(self.min_midi, self.max_midi + 1)
		]


	def note_rects (self, layer: typing.Optional[str] = None) -> typing.List[NoteRect]:

		"""Rectangles for every note of every event, optionally for one layer."""

		rects: typing.List[NoteRect] = []

		for event in self.timeline.events:

			if layer is not None and event.layer != layer:
				continue

			x = event.start_units * self.unit_width
			width = event.duration_units * self.unit_width

			for note in event.notes:
				rects.append(NoteRect(
					layer = event.layer,
					note = note,
					x = x + self.padding,
					y = self.row_y(note.midi) + self.padding,
					width = max(width - 2 * self.padding, 0.0),
					height = max(self.note_height - 2 * self.padding, 0.0),
					start_units = event.start_units,
					duration_units = event.duration_units
				))

		return rects


	def playhead_x (self, units: float) -> float:

		"""Pixel x of the playhead at a unit position."""

		return self.timeline.fraction(units) * self.width


	def units_at_x (self, x: float) -> float:

		"""Unit position under a pixel x (for click-to-seek)."""

		return self.timeline.units_at(x / self.width)


def render_text (
	timeline: chordroll.timeline.Timeline,
	columns: typing.Optional[int] = None,
	playhead_units: typing.Optional[float] = None
) -> str:

	"""Render a timeline as an ASCII piano roll, highest pitch first.

	Parameters:
		timeline: The events to draw.
		columns: Grid width in characters; defaults to one column per unit.
		playhead_units: When set, the column under the playhead shows ``|``
			in empty cells.

	Returns:
		A multi-line string.
	"""

	notes = timeline.notes()

	if not notes or timeline.total_units <= 0:
		return ""

	total = timeline.total_units
	width = columns if columns is not None else total

	if width <= 0:
		raise ValueError("Column count must be positive")

	units_per_column = total / width
	playhead_column = None if playhead_units is None else min(int(playhead_units / units_per_column), width - 1)

	pitches = sorted({note.midi for note in notes}, reverse=True)
	grid: typing.Dict[int, typing.List[str]] = {pitch: [_EMPTY_CHAR] * width for pitch in pitches}

	for event in timeline.events:
		char = _CHORD_CHAR if event.layer == chordroll.timeline.CHORD_LAYER else _BASS_CHAR
		first = int(event.start_units / units_per_column)
		last = max(first, int((event.end_units - 1e-9) / units_per_column))

		for note in event.notes:
			row = grid[note.midi]
			for column in range(first, min(last, width - 1) + 1):
				row[column] = char

	lines: typing.List[str] = []

	for pitch in pitches:
		cells = grid[pitch]

		if playhead_column is not None and cells[playhead_column] == _EMPTY_CHAR:
			cells[playhead_column] = "|"

		label = chordroll.chords.Note.from_midi(pitch).name()
		lines.append(f"{label:<{_LABEL_WIDTH}}|{''.join(cells)}|")

	return "\n".join(lines)


def _step_symbol (step: int) -> str:

	if step == 0:
		return "-"

	value = chordroll.constants.durations.note_value(step)

	return f"1/{value}" if value is not None else f"{step}u"


def pattern_text (pattern: chordroll.rhythm.RhythmPattern) -> str:

	"""Describe a rhythm pattern's steps as note values, one line per layer.

	Rests show as ``-``; steps with no single note value show their unit count.

	Example:
		```python
		print(pattern_text(chordroll.rhythm.lookup("syncopated")))
		# chords: 1/16 - 1/16 1/16 - 1/16
		# bass:   - 1/16 - 1/16 1/16 -
		```
	"""

	chords = " ".join(_step_symbol(step) for step in pattern.chords)
	bass = " ".join(_step_symbol(step) for step in pattern.bass)

	return f"chords: {chords}\nbass:   {bass}"
