"""The VibeCoding engine: public operations over one clock and four voices.

Every public operation is synchronous and all-or-nothing. It validates its
input, generates any affected patterns against a candidate copy of the
engine state, and only then commits the state change and swaps the new
patterns onto the transport. If anything raises, the previous state and
bindings are left exactly as they were.

Example:
	```python
	import vibecoding

	engine = vibecoding.Engine(scale="A minor", style="techno", seed=7)
	engine.start()
	engine.run_for(bars=8)
	engine.set_euclidean_params(pulses=5, steps=16)
	engine.toggle_euclidean_rhythm(True)
	engine.run_for(bars=8)
	engine.stop()
	```
"""

import asyncio
import dataclasses
import logging
import math
import random
import signal
import typing

import vibecoding.constants
import vibecoding.engine_state
import vibecoding.gain
import vibecoding.markov_chain
import vibecoding.output
import vibecoding.pattern
import vibecoding.pattern_generator
import vibecoding.scales
import vibecoding.sequence_utils
import vibecoding.sequencer
import vibecoding.styles
import vibecoding.transport
from vibecoding.voice import Voice, parse_voice


logger = logging.getLogger(__name__)


VoiceLike = typing.Union[Voice, str]


@dataclasses.dataclass(frozen=True)
class StyleSelection:

	"""What :meth:`Engine.set_style` chose."""

	style_name: str
	bpm: int
	drum_pattern_name: str


def _validate_volume (value: float) -> float:

	if not 0.0 <= value <= 1.0:
		raise ValueError(f"Volume must be between 0 and 1 (got {value})")

	return float(value)


class Engine:

	"""
	Generates and plays bass, pad, arp and drum patterns in one phase-locked loop.
	"""

	def __init__ (
		self,
		output: typing.Optional[vibecoding.output.OutputSink] = None,
		scale: str = "C major",
		style: str = "techno",
		bpm: typing.Optional[float] = None,
		seed: typing.Optional[int] = None,
		fade_time: float = 2.0,
		volume_fade_time: float = 0.1,
		volumes: typing.Optional[typing.Dict[VoiceLike, float]] = None,
		master_volume: float = 1.0,
		spin_wait: bool = True
	) -> None:

		"""
		Parameters:
			output: Where triggers and gain changes go (defaults to :class:`NullOutput`).
			scale: Initial scale name, e.g. ``"A minor"``.
			style: Initial style name.
			bpm: Initial tempo. When omitted, one is chosen from the style's tempo range.
			seed: Seed for every stochastic choice, for repeatable output.
			fade_time: Seconds for stem fades and the global stop.
			volume_fade_time: Seconds for volume changes.
			volumes: Per-voice target volumes (0-1), keyed by voice or voice name.
			master_volume: Master volume (0-1).
			spin_wait: Use the sleep+spin timing strategy in real-time playback.
		"""

		self.output: vibecoding.output.OutputSink = output if output is not None else vibecoding.output.NullOutput()
		self.rng = random.Random(seed)

		initial_style = vibecoding.styles.get_style(style)
		initial_scale = vibecoding.scales.resolve_scale(scale)

		self.state = vibecoding.engine_state.EngineState(
			scale = initial_scale,
			style = initial_style,
			master_volume = _validate_volume(master_volume)
		)

		for voice, volume in (volumes or {}).items():
			self.state.volumes[parse_voice(voice)] = _validate_volume(volume)

		selection = self._choose_style_settings(initial_style)

		if bpm is not None:
			if bpm <= 0:
				raise ValueError("BPM must be positive")
			self.state.bpm = bpm
		else:
			self.state.bpm = selection["bpm"]

		self.state.drum_pattern_index = selection["drum_pattern_index"]

		self.sequencer = vibecoding.sequencer.Sequencer(initial_bpm=self.state.bpm, spin_wait=spin_wait)

		self.gains = vibecoding.gain.GainEnvelopeController(
			time_source = lambda: self.sequencer.current_time,
			fade_time = fade_time,
			volume_fade_time = volume_fade_time,
			master_level = self.state.master_volume
		)

		self.transition_table = vibecoding.markov_chain.learn(vibecoding.styles.training_corpus())
		self.generator = vibecoding.pattern_generator.PatternGenerator(self.rng, self.transition_table)
		self.transport = vibecoding.transport.TransportScheduler(self.sequencer, self.state, self.output.trigger)

		# Clock time at which a stopped engine disposes of its bindings.
		self._teardown_at: typing.Optional[float] = None
		self._teardown_handle: typing.Optional[vibecoding.sequencer.ScheduledCallback] = None

		self.sequencer.add_pulse_listener(self._on_pulse)

		logger.info(f"Engine ready: {self.state.scale.name}, {self.state.style.name} at {self.state.bpm} BPM")

	# ------------------------------------------------------------------
	# Internals
	# ------------------------------------------------------------------

	@property
	def is_playing (self) -> bool:

		return self.state.is_playing

	@property
	def teardown_pending (self) -> bool:

		"""True between :meth:`stop` and the end of its fade-out."""

		return self._teardown_at is not None

	def _choose_style_settings (self, style: vibecoding.styles.Style) -> typing.Dict[str, typing.Any]:

		low, high = style.tempo_range

		return {
			"bpm": self.rng.randint(low, high),
			"drum_pattern_index": self.rng.choice(style.compatible_drum_patterns),
		}

	def _update (self, voices: typing.Iterable[Voice], **changes: typing.Any) -> None:

		"""
		Commit ``changes`` and, while playing, regenerate and rebind ``voices``.

		Patterns are generated against a candidate state first; nothing is
		committed if generation raises.
		"""

		patterns: typing.Dict[Voice, vibecoding.pattern.Pattern] = {}

		if self.state.is_playing:
			candidate = self.state.candidate(**changes)
			patterns = {voice: self.generator.generate(voice, candidate) for voice in voices}

		self.state.apply(**changes)

		for voice, pattern in patterns.items():
			self.transport.rebind(voice, pattern)

	def _on_pulse (self, pulse: int, now: float) -> None:

		"""Gain settling and output housekeeping, once per pulse."""

		self.gains.settle()

		for voice, level in self.gains.levels().items():
			self.output.set_gain(voice, level, now)

		self.output.tick(now)

	def _schedule_teardown (self) -> None:

		"""Book the teardown on the first pulse that should fall at or after ``_teardown_at``."""

		assert self._teardown_at is not None

		remaining = self._teardown_at - self.sequencer.current_time
		pulses = max(1, math.ceil(remaining / self.sequencer.seconds_per_pulse))

		self._teardown_handle = self.sequencer.schedule_once(self._teardown, self.sequencer.pulse_count + pulses)

	def _teardown (self, pulse: int) -> None:

		assert self._teardown_at is not None

		# A tempo change during the fade moves the pulse that lands on the fade end.
		if self.sequencer.current_time < self._teardown_at:
			self._schedule_teardown()
			return

		self.transport.dispose_all()
		self._teardown_at = None
		self._teardown_handle = None

		logger.info(f"Transport stopped at pulse {pulse}")

	# ------------------------------------------------------------------
	# Transport
	# ------------------------------------------------------------------

	def start (self) -> None:

		"""
		Bind fresh patterns to all four voices, start them together and fade in every enabled voice.

		A start issued while a previous stop is still fading out cancels that
		stop's teardown, so the new bindings are never disposed by it.
		"""

		if self.state.is_playing:
			return

		patterns = self.generator.generate_all(self.state)

		if self._teardown_at is not None:
			if self._teardown_handle is not None:
				self._teardown_handle.cancel()
			self._teardown_handle = None
			self._teardown_at = None
			self.transport.dispose_all()
			logger.debug("Cancelled pending teardown")

		for voice in Voice:
			self.transport.bind(voice, patterns[voice], replace=True)

		self.transport.set_origin()
		self.transport.start(position=0)
		self.state.is_playing = True

		for voice in Voice:
			if self.state.enabled[voice]:
				self.gains.fade_in(voice, self.state.volumes[voice])

		logger.info(f"Playing {self.state.style.name} in {self.state.scale.name} at {self.state.bpm} BPM")

	def stop (self) -> None:

		"""
		Fade every voice out, then dispose of the bindings once the fade has finished.
		"""

		if not self.state.is_playing:
			return

		self.state.is_playing = False

		for voice in Voice:
			self.gains.fade_out(voice)

		self._teardown_at = self.sequencer.current_time + self.gains.fade_time
		self._schedule_teardown()

		logger.info(f"Stopping (fading out over {self.gains.fade_time}s)")

	def regenerate (self) -> None:

		"""Generate and rebind fresh patterns for every voice. Does nothing unless playing."""

		if not self.state.is_playing:
			return

		self._update(list(Voice))

		logger.info("Regenerated all patterns")

	# ------------------------------------------------------------------
	# Musical parameters
	# ------------------------------------------------------------------

	def set_scale (self, name: str) -> vibecoding.scales.Scale:

		"""
		Change the scale every voice plays in.

		Raises:
			UnknownScaleError: If the name cannot be resolved.
		"""

		scale = vibecoding.scales.resolve_scale(name)

		self._update(list(Voice), scale=scale)

		logger.info(f"Scale set to {scale.name}")

		return scale

	def set_style (self, name: str) -> StyleSelection:

		"""
		Switch style, choosing a tempo from its range and one of its drum patterns.

		Raises:
			UnknownStyleError: If the style is not cataloged (nothing changes).
		"""

		style = vibecoding.styles.get_style(name)
		chosen = self._choose_style_settings(style)

		self._update(
			list(Voice),
			style = style,
			bpm = chosen["bpm"],
			drum_pattern_index = chosen["drum_pattern_index"]
		)

		self.sequencer.set_bpm(self.state.bpm)

		selection = StyleSelection(
			style_name = style.name,
			bpm = chosen["bpm"],
			drum_pattern_name = self.state.drum_pattern.name
		)

		logger.info(f"Style set to {selection.style_name} ({selection.bpm} BPM, {selection.drum_pattern_name})")

		return selection

	def set_tempo (self, bpm: float) -> None:

		"""Change the tempo. Patterns keep their place on the pulse grid."""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.state.apply(bpm=bpm)
		self.sequencer.set_bpm(bpm)

	def set_bass_rhythm (self, name: typing.Optional[str]) -> None:

		"""
		Force a bass rhythm template, or pass None to return to the style's choice.

		Raises:
			InvalidGenerationInputError: If the template does not exist.
		"""

		if name is not None:
			vibecoding.pattern_generator.validate_bass_template(name)

		self._update([Voice.BASS], bass_rhythm_override=name)

		logger.info(f"Bass rhythm set to {name or 'style default'}")

	def set_drum_pitch_offset (self, semitones: int) -> None:

		"""
		Transpose every drum hit by ``semitones``, from the next hit on.

		Raises:
			ValueError: If ``semitones`` is not a whole number.
		"""

		if int(semitones) != semitones:
			raise ValueError(f"Drum pitch offset must be a whole number of semitones (got {semitones!r})")

		self.state.apply(drum_pitch_offset=int(semitones))

	def next_drum_pattern (self) -> str:

		"""Advance to the next drum preset (wrapping) and return its name."""

		index = (self.state.drum_pattern_index + 1) % len(vibecoding.styles.DRUM_PATTERNS)

		self._update([Voice.DRUMS], drum_pattern_index=index)

		name = self.state.drum_pattern.name

		logger.info(f"Drum pattern: {name}")

		return name

	def set_euclidean_params (self, pulses: int, steps: int) -> None:

		"""
		Set the onset and step counts used by Euclidean drums.

		Raises:
			InvalidGenerationInputError: If ``steps`` is not positive or ``pulses`` is negative.
		"""

		# Validates the pair even when Euclidean drums are not in use.
		vibecoding.sequence_utils.generate_euclidean_sequence(steps=steps, pulses=pulses)

		voices = [Voice.DRUMS] if self.state.use_euclidean_rhythm else []

		self._update(voices, euclidean_pulses=pulses, euclidean_steps=steps)

	def toggle_markov_chain (self, enabled: bool) -> None:

		"""Generate pad progressions from the Markov chain (True) or the style (False)."""

		self._update([Voice.PAD], use_markov_chain=bool(enabled))

	def toggle_euclidean_rhythm (self, enabled: bool) -> None:

		"""Generate drums from the Euclidean generator (True) or the preset table (False)."""

		self._update([Voice.DRUMS], use_euclidean_rhythm=bool(enabled))

	# ------------------------------------------------------------------
	# Mixing
	# ------------------------------------------------------------------

	def set_stem_enabled (self, voice: VoiceLike, enabled: bool) -> None:

		"""
		Enable or disable a voice. While playing it fades in or out; the voice keeps its place.
		"""

		voice = parse_voice(voice)
		self.state.enabled[voice] = bool(enabled)

		if not self.state.is_playing:
			return

		if enabled:
			self.gains.fade_in(voice, self.state.volumes[voice])
		else:
			self.gains.fade_out(voice)

	def set_stem_volume (self, voice: VoiceLike, volume: float) -> None:

		"""
		Set a voice's volume. Zero also disables the voice and anything above zero enables it.
		"""

		voice = parse_voice(voice)
		volume = _validate_volume(volume)

		self.state.volumes[voice] = volume
		self.state.enabled[voice] = volume > 0

		if self.state.is_playing:
			self.gains.set_volume(voice, volume)

	def set_master_volume (self, volume: float) -> None:

		volume = _validate_volume(volume)

		self.state.apply(master_volume=volume)
		self.gains.set_master(volume)

	# ------------------------------------------------------------------
	# Introspection
	# ------------------------------------------------------------------

	def pattern (self, voice: VoiceLike) -> typing.Optional[vibecoding.pattern.Pattern]:

		"""The pattern currently bound to ``voice``, or None."""

		return self.transport.pattern(parse_voice(voice))

	def info (self) -> typing.Dict[str, typing.Any]:

		"""
		Return a dictionary describing what the engine is doing right now.
		"""

		levels = self.gains.levels()
		voices = {}

		for voice in Voice:
			pattern = self.transport.pattern(voice)
			step = self.transport.step_index(voice)
			event = pattern.events[step] if pattern is not None and step is not None else None

			voices[voice.value] = {
				"state": self.transport.state_of(voice).value,
				"pattern": pattern.label if pattern is not None else None,
				"steps": len(pattern) if pattern is not None else 0,
				"subdivision": pattern.subdivision_name if pattern is not None else None,
				"step": step,
				"notes": [vibecoding.scales.note_name(p, use_flats=self.state.scale.use_flats) for p in vibecoding.pattern.as_pitches(event)],
				"enabled": self.state.enabled[voice],
				"volume": self.state.volumes[voice],
				"level": levels[voice],
			}

		return {
			"playing": self.state.is_playing,
			"bpm": self.sequencer.current_bpm,
			"scale": self.state.scale.name,
			"style": self.state.style.name,
			"drum_pattern": self.state.drum_pattern.name,
			"bass_rhythm": self.state.bass_rhythm_override,
			"markov_chain": self.state.use_markov_chain,
			"euclidean": {
				"enabled": self.state.use_euclidean_rhythm,
				"pulses": self.state.euclidean_pulses,
				"steps": self.state.euclidean_steps,
			},
			"drum_pitch_offset": self.state.drum_pitch_offset,
			"master_volume": self.state.master_volume,
			"pulse": self.sequencer.pulse_count,
			"bar": self.sequencer.pulse_count // vibecoding.constants.PULSES_PER_BAR,
			"voices": voices,
		}

	# ------------------------------------------------------------------
	# Running the clock
	# ------------------------------------------------------------------

	def run_for (self, bars: float) -> None:

		"""Advance the clock offline by ``bars`` bars."""

		if bars < 0:
			raise ValueError("Cannot run for a negative number of bars")

		self.sequencer.run_pulses(int(round(bars * vibecoding.constants.PULSES_PER_BAR)))

	def finish (self) -> None:

		"""Advance the clock offline until a pending stop has torn the transport down."""

		while self._teardown_at is not None:
			self.sequencer.advance_pulse()

	def render (self, bars: int, filename: str = "render.mid") -> None:

		"""
		Render ``bars`` bars plus the closing fade-out to a MIDI file, as fast as possible.

		Raises:
			ValueError: If the engine's output is not a :class:`MidiOutput`.
		"""

		if not isinstance(self.output, vibecoding.output.MidiOutput):
			raise ValueError("render() needs a MidiOutput to record into")

		self.output.recording = True
		self.output.record_filename = filename

		logger.info(f"Rendering {bars} bars to {filename}")

		self.start()
		self.run_for(bars)
		self.stop()
		self.finish()
		self.output.close()

	def play (self) -> None:

		"""
		Play in real time until interrupted (Ctrl+C or SIGTERM), then fade out and close the output.
		"""

		try:
			asyncio.run(self._run())

		except KeyboardInterrupt:
			pass

	async def _run (self) -> None:

		logger.info("Playing. Press Ctrl+C to stop.")

		self.start()
		await self.sequencer.start()

		stop_event = asyncio.Event()
		loop = asyncio.get_running_loop()

		def _request_stop () -> None:

			stop_event.set()

		for sig in (signal.SIGINT, signal.SIGTERM):
			loop.add_signal_handler(sig, _request_stop)

		assert self.sequencer.task is not None, "Sequencer task should exist after start()"
		await asyncio.wait(
			[asyncio.create_task(stop_event.wait()), self.sequencer.task],
			return_when = asyncio.FIRST_COMPLETED
		)

		self.stop()

		while self._teardown_at is not None and self.sequencer.running:
			await asyncio.sleep(self.sequencer.seconds_per_pulse)

		await self.sequencer.stop()
		self.output.close()
