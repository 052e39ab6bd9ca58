"""Settings for the generator and for playback.

Settings come from three places: keyword arguments, a YAML file, and text
fields typed by a user.  All three end up as the same validated dataclasses.

A config file looks like::

	generator:
	  position_count: 16
	  max_rest_run: 2
	  max_active_run: 2
	  allow_off_axis_symmetry: true

	playback:
	  bpm: 120
	  midi_channel: 1
	  note: 60
	  output_device: "Scarlett 2i4 USB:Scarlett 2i4 USB MIDI 1 16:0"

Both sections, and every key within them, are optional.
"""

import dataclasses
import logging
import os
import typing

import yaml

import cyclochron.beat_buffer
import cyclochron.constants.velocity
import cyclochron.symmetry


logger = logging.getLogger(__name__)


_TRUE_WORDS = {"true", "on", "yes", "1"}
_FALSE_WORDS = {"false", "off", "no", "0", ""}


@dataclasses.dataclass
class GeneratorSettings:

	"""Parameters for ``cyclochron.mirror.generate()``."""

	position_count: int = 16
	max_rest_run: int = 2
	max_active_run: int = 2
	allow_off_axis_symmetry: bool = True


	def __post_init__ (self) -> None:

		cyclochron.beat_buffer.check_count(self.position_count)

		if self.max_rest_run < 0:
			raise ValueError(f"max_rest_run cannot be negative, got {self.max_rest_run}")

		if self.max_active_run < 0:
			raise ValueError(f"max_active_run cannot be negative, got {self.max_active_run}")


@dataclasses.dataclass
class PlaybackSettings:

	"""Transport settings.  ``midi_channel`` is 1-based, as shown on hardware."""

	bpm: float = 120
	midi_channel: int = 1
	note: int = 60
	velocity: int = cyclochron.constants.velocity.DEFAULT_VELOCITY
	gate: float = 0.5
	clock_output: bool = True
	output_device: typing.Optional[str] = None


	def __post_init__ (self) -> None:

		if self.bpm <= 0:
			raise ValueError("bpm must be positive")

		if not 1 <= self.midi_channel <= 16:
			raise ValueError(f"midi_channel must be between 1 and 16, got {self.midi_channel}")

		if not 0 <= self.note <= 127:
			raise ValueError(f"note must be between 0 and 127, got {self.note}")

		if not cyclochron.constants.velocity.MIN_VELOCITY < self.velocity <= cyclochron.constants.velocity.MAX_VELOCITY:
			raise ValueError(f"velocity must be between 1 and 127, got {self.velocity}")

		if not 0 < self.gate <= 1:
			raise ValueError(f"gate must be greater than 0 and at most 1, got {self.gate}")


@dataclasses.dataclass
class Settings:

	"""Everything a session needs."""

	generator: GeneratorSettings = dataclasses.field(default_factory=GeneratorSettings)
	playback: PlaybackSettings = dataclasses.field(default_factory=PlaybackSettings)


def _section (data: typing.Dict[str, typing.Any], name: str, cls: typing.Type[typing.Any]) -> typing.Dict[str, typing.Any]:

	"""Pull one section out of a loaded config, rejecting unknown keys."""

	section = data.get(name) or {}

	if not isinstance(section, dict):
		raise ValueError(f"Config section '{name}' must be a mapping")

	known = {field.name for field in dataclasses.fields(cls)}
	unknown = set(section) - known

	if unknown:
		raise ValueError(f"Unknown keys in config section '{name}': {sorted(unknown)}")

	return section


def settings_from_dict (data: typing.Optional[typing.Dict[str, typing.Any]]) -> Settings:

	"""Build validated settings from a parsed config mapping."""

	data = data or {}

	return Settings(
		generator = GeneratorSettings(**_section(data, "generator", GeneratorSettings)),
		playback = PlaybackSettings(**_section(data, "playback", PlaybackSettings))
	)


def load_settings (config_path: str = "cyclochron.yaml") -> Settings:

	"""
	Load settings from a YAML file, falling back to defaults when it does not exist.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return Settings()

	with open(config_path, "r") as f:
		data = yaml.safe_load(f)

	logger.info(f"Loaded settings from {config_path}")

	return settings_from_dict(data)


def _parse_int (fields: typing.Mapping[str, str], name: str, default: int) -> int:

	raw = fields.get(name)

	if raw is None or str(raw).strip() == "":
		return default

	try:
		return int(str(raw).strip())
	except ValueError:
		raise ValueError(f"{name} must be a whole number, got {raw!r}") from None


def _parse_bool (fields: typing.Mapping[str, str], name: str, default: bool) -> bool:

	raw = fields.get(name)

	if raw is None:
		return default

	word = str(raw).strip().lower()

	if word in _TRUE_WORDS:
		return True

	if word in _FALSE_WORDS:
		return False

	raise ValueError(f"{name} must be true or false, got {raw!r}")


def parse_form (fields: typing.Mapping[str, str], defaults: typing.Optional[GeneratorSettings] = None) -> GeneratorSettings:

	"""Parse text inputs into generator settings.

	Missing or blank fields keep their ``defaults`` value.

	Example:
		```python
		settings = parse_form({"position_count": "12", "max_rest_run": "3", "allow_off_axis_symmetry": "off"})
		```
	"""

	if defaults is None:
		defaults = GeneratorSettings()

	return GeneratorSettings(
		position_count = _parse_int(fields, "position_count", defaults.position_count),
		max_rest_run = _parse_int(fields, "max_rest_run", defaults.max_rest_run),
		max_active_run = _parse_int(fields, "max_active_run", defaults.max_active_run),
		allow_off_axis_symmetry = _parse_bool(fields, "allow_off_axis_symmetry", defaults.allow_off_axis_symmetry)
	)


def off_axis_available (settings: GeneratorSettings) -> bool:

	"""Whether the off-axis option should be offered for these settings."""

	return cyclochron.symmetry.off_axis_eligible(settings.position_count, settings.max_rest_run, settings.max_active_run)


def adjust_for_odd_count (settings: GeneratorSettings, changed: str) -> GeneratorSettings:

	"""Keep an odd cycle solvable after the user edits one run bound.

	An odd cycle always has two equal neighbours where its halves meet, so it
	needs room for a run of two of something.  When both bounds drop below two,
	the bound the user did *not* just change is raised to two.

	Parameters:
		settings: Settings after the edit.
		changed: ``"max_rest_run"`` or ``"max_active_run"``.
	"""

	if changed not in ("max_rest_run", "max_active_run"):
		raise ValueError(f"Unknown bound {changed!r}")

	if settings.position_count % 2 == 0 or settings.max_rest_run >= 2 or settings.max_active_run >= 2:
		return settings

	other = "max_active_run" if changed == "max_rest_run" else "max_rest_run"

	logger.info(f"Raised {other} to 2 so an odd cycle of {settings.position_count} can be generated")

	return dataclasses.replace(settings, **{other: 2})
