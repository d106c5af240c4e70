"""YAML configuration.

Every setting has a default, so the config file is optional. A full file
looks like this::

	generation:
	  key: random          # or a note name such as "F#"
	  minor: null          # true / false / null (random)
	  length: 4            # 4 or 8
	  extensions: false    # random sus2/sus4 substitutions
	  sus_probability: 0.4
	  max_attempts: 50
	  groups: classic      # "classic", "wide" or a mapping of role -> degrees

	rhythm:
	  pattern: none
	  patterns:            # extra patterns, merged into the built-in table
	    halftime:
	      chords: [8, 8]
	      bass: [16]

	playback:
	  bpm: 120
	  device_name: null
	  loop: false

	export:
	  directory: .
	  chord_channel: 0
	  bass_channel: 0
"""

import dataclasses
import logging
import os
import typing

import yaml

import chordroll.chords
import chordroll.functional
import chordroll.progression
import chordroll.rhythm


logger = logging.getLogger(__name__)


RANDOM_KEY = "random"


@dataclasses.dataclass(frozen=True)
class Settings:

	"""Validated generation, rhythm, playback and export settings."""

	key: typing.Optional[str] = None
	minor: typing.Optional[bool] = None
	length: int = 4
	extensions: bool = False
	sus_probability: float = chordroll.functional.DEFAULT_SUS_PROBABILITY
	max_attempts: int = chordroll.functional.DEFAULT_MAX_ATTEMPTS
	groups: chordroll.functional.FunctionalGroups = chordroll.functional.CLASSIC_GROUPS
	rhythm: str = chordroll.rhythm.DEFAULT_PATTERN
	extra_patterns: typing.Tuple[chordroll.rhythm.RhythmPattern, ...] = ()
	bpm: float = 120.0
	device_name: typing.Optional[str] = None
	loop: bool = False
	export_directory: str = "."
	chord_channel: int = 0
	bass_channel: int = 0

	def __post_init__ (self) -> None:

		if self.key is not None:
			chordroll.chords.pitch_class(self.key)

		if self.minor is not None and not isinstance(self.minor, bool):
			raise ValueError(f"minor must be true, false or null, got {self.minor!r}")

		for flag_name in ("extensions", "loop"):
			if not isinstance(getattr(self, flag_name), bool):
				raise ValueError(f"{flag_name} must be true or false, got {getattr(self, flag_name)!r}")

		if self.length not in chordroll.progression.ALLOWED_LENGTHS:
			raise ValueError(f"Progression length must be one of {chordroll.progression.ALLOWED_LENGTHS}, got {self.length}")

		if self.sus_probability < 0 or self.sus_probability > 1:
			raise ValueError("Sus probability must be between 0 and 1")

		if self.max_attempts < 1:
			raise ValueError("Max attempts must be at least 1")

		if self.bpm <= 0:
			raise ValueError("BPM must be positive")

		for channel in (self.chord_channel, self.bass_channel):
			if not 0 <= channel <= 15:
				raise ValueError("MIDI channels must be between 0 and 15")

	def rhythm_grid (self) -> chordroll.rhythm.RhythmGrid:

		"""Build the rhythm table with any configured extra patterns."""

		return chordroll.rhythm.RhythmGrid(self.extra_patterns)


def _parse_groups (value: typing.Any) -> chordroll.functional.FunctionalGroups:

	if isinstance(value, str):

		if value not in chordroll.functional.FUNCTIONAL_GROUP_TABLES:
			available = ", ".join(sorted(chordroll.functional.FUNCTIONAL_GROUP_TABLES))
			raise ValueError(f"Unknown functional group table: {value!r}. Available: {available}")

		return chordroll.functional.FUNCTIONAL_GROUP_TABLES[value]

	if isinstance(value, dict):
		return chordroll.functional.FunctionalGroups.from_mapping(value)

	raise ValueError(f"generation.groups must be a table name or a mapping, got {value!r}")


def _parse_key (value: typing.Any) -> typing.Optional[str]:

	if value is None or value == RANDOM_KEY:
		return None

	return str(value)


def settings_from_mapping (config: typing.Mapping[str, typing.Any]) -> Settings:

	"""Build :class:`Settings` from a parsed config mapping.

	Missing sections and keys fall back to the defaults.

	Raises:
		ValueError: If a value is out of range or malformed.
	"""

	generation = config.get("generation") or {}
	rhythm = config.get("rhythm") or {}
	playback = config.get("playback") or {}
	export = config.get("export") or {}

	defaults = Settings()

	extra_patterns = tuple(
		chordroll.rhythm.RhythmPattern.from_mapping(name, layers)
		for name, layers in (rhythm.get("patterns") or {}).items()
	)

	return Settings(
		key = _parse_key(generation.get("key")),
		minor = generation.get("minor"),
		length = int(generation.get("length", defaults.length)),
		extensions = generation.get("extensions", defaults.extensions),
		sus_probability = float(generation.get("sus_probability", defaults.sus_probability)),
		max_attempts = int(generation.get("max_attempts", defaults.max_attempts)),
		groups = _parse_groups(generation.get("groups", "classic")),
		rhythm = str(rhythm.get("pattern", defaults.rhythm)),
		extra_patterns = extra_patterns,
		bpm = float(playback.get("bpm", defaults.bpm)),
		device_name = playback.get("device_name"),
		loop = playback.get("loop", defaults.loop),
		export_directory = str(export.get("directory", defaults.export_directory)),
		chord_channel = int(export.get("chord_channel", defaults.chord_channel)),
		bass_channel = int(export.get("bass_channel", defaults.bass_channel))
	)


def load_config (config_path: str = "chordroll.yaml") -> Settings:

	"""
	Load settings from a YAML file, using defaults when the file is missing.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return Settings()

	with open(config_path, "r") as f:
		config = yaml.safe_load(f) or {}

	if not isinstance(config, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping at the top level")

	logger.info(f"Loaded config from {config_path}")

	return settings_from_mapping(config)
