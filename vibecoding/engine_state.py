import dataclasses
import typing

import vibecoding.scales
import vibecoding.styles
from vibecoding.voice import Voice


DEFAULT_VOLUME = 0.8


def _all_voices (value: typing.Any) -> typing.Callable[[], typing.Dict[Voice, typing.Any]]:

	return lambda: {voice: value for voice in Voice}


@dataclasses.dataclass
class EngineState:

	"""
	Everything the generators and the transport read.

	One instance exists per engine and is shared by reference with the
	pattern generator and the transport scheduler. Only the engine's public
	setters write it, and each setter commits its changes in one step after
	any regeneration it needs has succeeded.

	Attributes:
		scale: Current scale; every pitch the voices produce belongs to it.
		style: Current style preset.
		bpm: Current tempo.
		is_playing: True between ``start()`` and ``stop()``.
		enabled: Per-voice enable flag. A disabled voice keeps stepping silently.
		volumes: Per-voice target volume (0-1) used when the voice fades in.
		master_volume: Master gain target (0-1).
		bass_rhythm_override: Bass template name that replaces the style's choice, or None.
		use_markov_chain: Generate pad progressions from the Markov chain.
		use_euclidean_rhythm: Generate drums from the Euclidean generator.
		euclidean_pulses: Onset count for Euclidean drums.
		euclidean_steps: Step count for Euclidean drums.
		drum_pattern_index: Index into the drum preset table.
		drum_pitch_offset: Semitones added to every drum hit at trigger time.
	"""

	scale: vibecoding.scales.Scale
	style: vibecoding.styles.Style
	bpm: float = 120
	is_playing: bool = False
	enabled: typing.Dict[Voice, bool] = dataclasses.field(default_factory=_all_voices(True))
	volumes: typing.Dict[Voice, float] = dataclasses.field(default_factory=_all_voices(DEFAULT_VOLUME))
	master_volume: float = 1.0
	bass_rhythm_override: typing.Optional[str] = None
	use_markov_chain: bool = False
	use_euclidean_rhythm: bool = False
	euclidean_pulses: int = 4
	euclidean_steps: int = 16
	drum_pattern_index: int = 0
	drum_pitch_offset: int = 0

	def candidate (self, **changes: typing.Any) -> "EngineState":

		"""
		Return a copy with ``changes`` applied, leaving this state untouched.

		Used to generate patterns against proposed settings before committing them.
		"""

		fields: typing.Dict[str, typing.Any] = {
			"enabled": dict(self.enabled),
			"volumes": dict(self.volumes),
		}
		fields.update(changes)

		return dataclasses.replace(self, **fields)

	def apply (self, **changes: typing.Any) -> None:

		"""Commit ``changes`` to this state in one step."""

		for name in changes:
			if not hasattr(self, name):
				raise AttributeError(f"EngineState has no field {name!r}")

		for name, value in changes.items():
			setattr(self, name, value)

	@property
	def drum_pattern (self) -> vibecoding.styles.DrumPatternPreset:

		"""The currently selected drum preset."""

		return vibecoding.styles.get_drum_pattern(self.drum_pattern_index)
