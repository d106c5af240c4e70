"""Generate a chord progression from the command line.

Examples:
	python -m chordroll --key A --minor --rhythm house --grid
	python -m chordroll --length 8 --extensions --export out/
	python -m chordroll --seed 7 --play --loop --bpm 124
"""

import argparse
import asyncio
import dataclasses
import logging
import random
import typing

import chordroll.config
import chordroll.midi_engine
import chordroll.playback
import chordroll.render
import chordroll.session


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _apply_overrides (settings: chordroll.config.Settings, args: argparse.Namespace) -> chordroll.config.Settings:

	"""Replace config values with any flags given on the command line."""

	overrides: typing.Dict[str, typing.Any] = {}

	if args.key is not None:
		overrides["key"] = None if args.key == chordroll.config.RANDOM_KEY else args.key

	if args.minor is not None:
		overrides["minor"] = args.minor

	if args.length is not None:
		overrides["length"] = args.length

	if args.extensions:
		overrides["extensions"] = True

	if args.rhythm is not None:
		overrides["rhythm"] = args.rhythm

	if args.bpm is not None:
		overrides["bpm"] = args.bpm

	if args.loop:
		overrides["loop"] = True

	return dataclasses.replace(settings, **overrides)


async def _play (session: chordroll.session.Session) -> None:

	"""Play the current timeline once, or until interrupted when looping."""

	settings = session.settings
	state = session.state
	assert state is not None

	engine = chordroll.midi_engine.MidiEngine(output_device_name=settings.device_name, bpm=state.bpm)
	player = chordroll.playback.Player(engine)
	player.set_looping(settings.loop)

	try:
		player.play(session.timeline())
		await engine.wait()
	finally:
		engine.close()


def main () -> None:

	"""
	Main entry point for the chordroll command line.
	"""

	parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
	parser.add_argument("--config",     type=str,   default="chordroll.yaml", help="YAML config file (default: chordroll.yaml)")
	parser.add_argument("--key",        type=str,   default=None,  help="Root note, e.g. C, F#, Bb, or 'random'")
	parser.add_argument("--minor",      dest="minor", action="store_true", default=None, help="Natural minor mode")
	parser.add_argument("--major",      dest="minor", action="store_false", help="Major mode")
	parser.add_argument("--length",     type=int,   default=None,  choices=(4, 8), help="Number of chords")
	parser.add_argument("--extensions", action="store_true",       help="Allow random sus2/sus4 substitutions")
	parser.add_argument("--rhythm",     type=str,   default=None,  help="Rhythm pattern name")
	parser.add_argument("--bpm",        type=float, default=None,  help="Tempo in BPM")
	parser.add_argument("--seed",       type=int,   default=None,  help="Random seed for repeatable output")
	parser.add_argument("--export",     type=str,   default=None,  metavar="DIR", help="Write a MIDI file to DIR")
	parser.add_argument("--play",       action="store_true",       help="Play through the MIDI output")
	parser.add_argument("--loop",       action="store_true",       help="Loop playback until Ctrl+C")
	parser.add_argument("--grid",       action="store_true",       help="Print the rhythm and an ASCII piano roll")
	args = parser.parse_args()

	settings = _apply_overrides(chordroll.config.load_config(args.config), args)
	rng = random.Random(args.seed) if args.seed is not None else None

	session = chordroll.session.Session(settings, rng=rng)
	state = session.dispatch(chordroll.session.Generate())

	print(f"{session.key_name()}: {session.numeral_text()}")
	print("  ".join(state.progression.names()))

	if args.grid:
		print()
		print(chordroll.render.pattern_text(session.pattern()))
		print()
		print(chordroll.render.render_text(session.timeline()))

	if args.export is not None:
		path = session.export(args.export)
		print(f"Saved {path}")

	if args.play:
		try:
			asyncio.run(_play(session))
		except KeyboardInterrupt:
			logger.info("Stopping...")


if __name__ == "__main__":
	main()
