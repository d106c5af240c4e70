import logging
import os
import typing

import pytest

import chordroll.chords
import chordroll.config
import chordroll.functional


def _write (tmp_path: typing.Any, text: str) -> str:

	path = os.path.join(str(tmp_path), "chordroll.yaml")

	with open(path, "w") as f:
		f.write(text)

	return path


def test_missing_file_uses_defaults (tmp_path: typing.Any, caplog: pytest.LogCaptureFixture) -> None:

	"""A missing config file logs a warning and gives default settings."""

	with caplog.at_level(logging.WARNING):
		settings = chordroll.config.load_config(os.path.join(str(tmp_path), "missing.yaml"))

	assert settings == chordroll.config.Settings()
	assert "not found" in caplog.text


def test_empty_file_uses_defaults (tmp_path: typing.Any) -> None:

	"""An empty file is the same as no settings."""

	assert chordroll.config.load_config(_write(tmp_path, "")) == chordroll.config.Settings()


def test_full_config (tmp_path: typing.Any) -> None:

	"""Every section is read into the settings."""

	path = _write(tmp_path, """
generation:
  key: F#
  minor: true
  length: 8
  extensions: true
  sus_probability: 0.25
  max_attempts: 10
  groups: wide

rhythm:
  pattern: halftime
  patterns:
    halftime:
      chords: [8, 8]
      bass: [16]

playback:
  bpm: 132
  device_name: Synth
  loop: true

export:
  directory: renders
  chord_channel: 1
  bass_channel: 2
""")

	settings = chordroll.config.load_config(path)

	assert settings.key == "F#"
	assert settings.minor is True
	assert settings.length == 8
	assert settings.extensions is True
	assert settings.sus_probability == 0.25
	assert settings.max_attempts == 10
	assert settings.groups == chordroll.functional.WIDE_GROUPS
	assert settings.rhythm == "halftime"
	assert settings.bpm == 132.0
	assert settings.device_name == "Synth"
	assert settings.loop is True
	assert settings.export_directory == "renders"
	assert (settings.chord_channel, settings.bass_channel) == (1, 2)
	assert settings.rhythm_grid().lookup("halftime").chords == (8, 8)


def test_random_key () -> None:

	"""The key "random" leaves the key open."""

	settings = chordroll.config.settings_from_mapping({"generation": {"key": "random"}})

	assert settings.key is None


def test_custom_groups () -> None:

	"""Groups may be given as a role mapping."""

	settings = chordroll.config.settings_from_mapping({
		"generation": {"groups": {"tonic": [0, 2], "predominant": [3], "dominant": [4]}}
	})

	assert settings.groups.tonic == (0, 2)


@pytest.mark.parametrize("config", [
	{"generation": {"length": 6}},
	{"generation": {"sus_probability": 2}},
	{"generation": {"max_attempts": 0}},
	{"generation": {"groups": "jazz"}},
	{"playback": {"bpm": 0}},
	{"export": {"chord_channel": 16}},
	{"generation": {"minor": "yes"}},
	{"generation": {"minor": 1}},
	{"generation": {"extensions": "false"}},
	{"playback": {"loop": "no"}},
	{"rhythm": {"patterns": {"broken": {"chords": [4]}}}},
])
def test_invalid_values (config: typing.Dict[str, typing.Any]) -> None:

	"""Out-of-range or malformed values raise ValueError."""

	with pytest.raises(ValueError):
		chordroll.config.settings_from_mapping(config)


def test_minor_flag_must_be_boolean () -> None:

	"""A quoted "false" would be truthy, so non-bool mode flags are rejected."""

	with pytest.raises(ValueError, match="minor"):
		chordroll.config.Settings(minor="false")  # type: ignore[arg-type]

	assert chordroll.config.Settings(minor=False).minor is False
	assert chordroll.config.settings_from_mapping({"generation": {"minor": None}}).minor is None


def test_invalid_key () -> None:

	"""Unknown keys raise InvalidPitchClass."""

	with pytest.raises(chordroll.chords.InvalidPitchClass):
		chordroll.config.settings_from_mapping({"generation": {"key": "H"}})


def test_top_level_must_be_mapping (tmp_path: typing.Any) -> None:

	"""A YAML list is not a config."""

	with pytest.raises(ValueError):
		chordroll.config.load_config(_write(tmp_path, "- 1\n- 2\n"))
