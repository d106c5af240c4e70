"""Standard MIDI file export.

The file has two tracks: the chord layer (with the tempo and track-name
meta messages) and the bass layer. Tick positions come from the timeline's
unit offsets through :func:`chordroll.constants.durations.units_to_beats`,
the same conversion the player uses, so an exported file lines up with what
was heard.

The filename is the key and the Roman-numeral analysis::

	"A minor - i iv v i.mid"  →  "A_minor_-_i_iv_v_i.mid"
"""

import logging
import os
import re
import typing

import mido

import chordroll.constants.durations
import chordroll.constants.velocity
import chordroll.progression
import chordroll.roman
import chordroll.scales
import chordroll.timeline


logger = logging.getLogger(__name__)


TICKS_PER_BEAT = 480

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_CHARACTERS = re.compile(r"[^\w\-.]", re.ASCII)


def sanitize_filename (name: str) -> str:

	"""Collapse whitespace to ``_`` and drop everything but ASCII word characters, ``-`` and ``.``."""

	return _UNSAFE_CHARACTERS.sub("", _WHITESPACE.sub("_", name))


def export_filename (scale: chordroll.scales.Scale, progression: chordroll.progression.Progression) -> str:

	"""Return the sanitised ``"{key} - {numerals}.mid"`` filename.

	Example:
		```python
		export_filename(build_scale("C"), progression)  # → "C_major_-_I_vi_IV_V.mid"
		```
	"""

	numerals = chordroll.roman.numeral_text(scale, progression)

	return sanitize_filename(f"{scale.key_name()} - {numerals}.mid")


def units_to_ticks (units: float, ticks_per_beat: int = TICKS_PER_BEAT) -> int:

	"""Convert units to MIDI ticks."""

	return int(round(chordroll.constants.durations.units_to_beats(units) * ticks_per_beat))


def _layer_track (
	events: typing.Sequence[chordroll.timeline.TimelineEvent],
	name: str,
	channel: int,
	velocity: int,
	ticks_per_beat: int
) -> mido.MidiTrack:

	"""Build one track from a layer's events."""

	# (tick, order, note, message_type) - note-offs sort before note-ons at the same tick.
	messages: typing.List[typing.Tuple[int, int, int, str]] = []

	for event in events:
		start = units_to_ticks(event.start_units, ticks_per_beat)
		end = units_to_ticks(event.end_units, ticks_per_beat)

		for note in event.notes:
			messages.append((start, 1, note.midi, "note_on"))
			messages.append((end, 0, note.midi, "note_off"))

	messages.sort()

	track = mido.MidiTrack()
	track.append(mido.MetaMessage("track_name", name=name, time=0))

	last_tick = 0

	for tick, _, note, message_type in messages:
		message_velocity = velocity if message_type == "note_on" else 0
		track.append(mido.Message(message_type, channel=channel, note=note, velocity=message_velocity, time=tick - last_tick))
		last_tick = tick

	track.append(mido.MetaMessage("end_of_track", time=0))

	return track


def build_midi_file (
	timeline: chordroll.timeline.Timeline,
	bpm: float = 120,
	chord_channel: int = 0,
	bass_channel: int = 0,
	chord_velocity: int = chordroll.constants.velocity.DEFAULT_CHORD_VELOCITY,
	bass_velocity: int = chordroll.constants.velocity.DEFAULT_BASS_VELOCITY,
	ticks_per_beat: int = TICKS_PER_BEAT
) -> mido.MidiFile:

	"""Build a two-track type 1 MIDI file from a timeline.

	Parameters:
		timeline: The mapped progression.
		bpm: Tempo written to the chord track.
		chord_channel: MIDI channel for the chord track.
		bass_channel: MIDI channel for the bass track.
		chord_velocity: Note-on velocity for chord voices.
		bass_velocity: Note-on velocity for bass notes.
		ticks_per_beat: File resolution.

	Raises:
		ValueError: If the timeline has no events or the tempo is not positive.
	"""

	if not timeline.events:
		raise ValueError("Cannot export a timeline with no events")

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = ticks_per_beat

	chord_track = _layer_track(
		timeline.layer_events(chordroll.timeline.CHORD_LAYER),
		name = "Chords",
		channel = chord_channel,
		velocity = chord_velocity,
		ticks_per_beat = ticks_per_beat
	)

	chord_track.insert(0, mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))
	chord_track.insert(1, mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))

	bass_track = _layer_track(
		timeline.layer_events(chordroll.timeline.BASS_LAYER),
		name = "Bass",
		channel = bass_channel,
		velocity = bass_velocity,
		ticks_per_beat = ticks_per_beat
	)

	mid.tracks.append(chord_track)
	mid.tracks.append(bass_track)

	return mid


def export_midi (
	timeline: chordroll.timeline.Timeline,
	scale: chordroll.scales.Scale,
	progression: chordroll.progression.Progression,
	directory: str = ".",
	bpm: float = 120,
	**kwargs: typing.Any
) -> str:

	"""Write the timeline to ``directory`` and return the file path.

	Extra keyword arguments are passed to :func:`build_midi_file`.
	"""

	mid = build_midi_file(timeline, bpm=bpm, **kwargs)

	os.makedirs(directory, exist_ok=True)
	path = os.path.join(directory, export_filename(scale, progression))

	mid.save(path)
	logger.info(f"Exported {len(timeline.events)} events to {path}")

	return path
