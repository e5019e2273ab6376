import dataclasses
import enum
import logging
import typing

import vibecoding.constants.midi
import vibecoding.engine_state
import vibecoding.exceptions
import vibecoding.pattern
import vibecoding.sequencer
from vibecoding.voice import Voice


logger = logging.getLogger(__name__)


# trigger(voice, event, duration_seconds, scheduled_time)
Trigger = typing.Callable[[Voice, vibecoding.pattern.Event, float, float], typing.Any]


class VoiceState (enum.Enum):

	"""Lifecycle of one voice's binding."""

	UNBOUND = "unbound"
	BOUND = "bound"
	RUNNING = "running"
	DISPOSED = "disposed"


@dataclasses.dataclass
class VoiceBinding:

	"""
	A pattern bound to a voice, and the clock handle that steps it while running.
	"""

	voice: Voice
	pattern: vibecoding.pattern.Pattern
	state: VoiceState = VoiceState.BOUND
	position: int = 0
	handle: typing.Optional[vibecoding.sequencer.ScheduledCallback] = None


class TransportScheduler:

	"""
	Steps each voice's pattern on the shared clock, phase-locked to one origin.

	Every voice is stepped by its own repeating callback at its pattern's
	subdivision. The step index is always derived from the absolute pulse:

		step = ((pulse - origin - position) // subdivision) % len(pattern)

	so voices started together, or rebound later while playing, share one
	grid and keep a fixed phase relationship however their lengths differ.
	"""

	def __init__ (
		self,
		sequencer: vibecoding.sequencer.Sequencer,
		state: vibecoding.engine_state.EngineState,
		trigger: Trigger,
		gate: float = vibecoding.constants.midi.DEFAULT_GATE
	) -> None:

		if not 0 < gate <= 1:
			raise ValueError("Gate must be in (0, 1]")

		self.sequencer = sequencer
		self.state = state
		self.trigger = trigger
		self.gate = gate
		self.origin = sequencer.pulse_count

		self._bindings: typing.Dict[Voice, VoiceBinding] = {}

	def set_origin (self, pulse: typing.Optional[int] = None) -> None:

		"""
		Anchor the step grid at ``pulse`` (default: the current pulse).
		"""

		self.origin = self.sequencer.pulse_count if pulse is None else pulse

	def state_of (self, voice: Voice) -> VoiceState:

		binding = self._bindings.get(voice)

		return binding.state if binding is not None else VoiceState.UNBOUND

	def is_bound (self, voice: Voice) -> bool:

		"""True if ``voice`` has a live binding, running or not."""

		return self.state_of(voice) in (VoiceState.BOUND, VoiceState.RUNNING)

	def is_running (self, voice: Voice) -> bool:

		return self.state_of(voice) is VoiceState.RUNNING

	def pattern (self, voice: Voice) -> typing.Optional[vibecoding.pattern.Pattern]:

		"""The pattern currently bound to ``voice``, or None."""

		if not self.is_bound(voice):
			return None

		return self._bindings[voice].pattern

	def bind (self, voice: Voice, pattern: vibecoding.pattern.Pattern, replace: bool = False) -> VoiceBinding:

		"""
		Bind ``pattern`` to ``voice`` without starting it.

		Raises:
			SchedulingConflictError: If the voice is already bound and ``replace`` is False.
			ValueError: If the pattern was generated for a different voice.
		"""

		if pattern.voice is not voice:
			raise ValueError(f"Cannot bind a {pattern.voice.value} pattern to {voice.value}")

		if self.is_bound(voice):
			if not replace:
				raise vibecoding.exceptions.SchedulingConflictError(f"{voice.value} is already bound to '{self._bindings[voice].pattern.label}'")
			self.unbind(voice)

		binding = VoiceBinding(voice = voice, pattern = pattern)
		self._bindings[voice] = binding

		return binding

	def start (self, voice: typing.Optional[Voice] = None, position: int = 0) -> None:

		"""
		Start one voice, or every bound voice, on the shared grid.

		Each voice first fires on the first grid pulse at or after now.
		Starting a voice that is already running does nothing.

		Raises:
			SchedulingConflictError: If a named voice has no live binding.
		"""

		if voice is None:
			voices = [v for v in Voice if self.state_of(v) is VoiceState.BOUND]
		else:
			if not self.is_bound(voice):
				raise vibecoding.exceptions.SchedulingConflictError(f"Cannot start {voice.value}: no pattern bound")
			voices = [voice]

		for v in voices:

			if self.is_running(v):
				continue

			binding = self._bindings[v]

			subdivision = binding.pattern.subdivision
			anchor = self.origin + position
			now = self.sequencer.pulse_count

			# First grid pulse >= now.
			first_pulse = anchor - ((anchor - now) // subdivision) * subdivision

			binding.position = position
			binding.state = VoiceState.RUNNING
			binding.handle = self.sequencer.schedule_repeating(
				callback = lambda pulse, b=binding: self._fire(b, pulse),
				interval_pulses = subdivision,
				start_pulse = first_pulse
			)

			logger.debug(f"Started {v.value} '{binding.pattern.label}' at pulse {first_pulse} (every {subdivision} pulses)")

	def stop (self, voice: typing.Optional[Voice] = None) -> None:

		"""
		Cancel the pending steps of one voice, or of every running voice.

		Notes that are already sounding are left to finish.
		"""

		voices = list(Voice) if voice is None else [voice]

		for v in voices:

			if not self.is_running(v):
				continue

			binding = self._bindings[v]

			if binding.handle is not None:
				binding.handle.cancel()
				binding.handle = None

			binding.state = VoiceState.BOUND

	def unbind (self, voice: Voice) -> None:

		"""Stop ``voice`` and dispose of its binding."""

		binding = self._bindings.get(voice)

		if binding is None or binding.state is VoiceState.DISPOSED:
			return

		self.stop(voice)
		binding.state = VoiceState.DISPOSED

	def dispose_all (self) -> None:

		"""Stop and dispose of every binding."""

		for voice in Voice:
			self.unbind(voice)

		logger.debug("Disposed all voice bindings")

	def rebind (self, voice: Voice, pattern: vibecoding.pattern.Pattern, position: int = 0) -> None:

		"""
		Swap ``voice`` over to a new pattern and start it.

		The old handle is cancelled before the new one is scheduled, so no
		step of the superseded pattern can fire after this returns. The new
		pattern rejoins the shared grid at ``position``.
		"""

		self.unbind(voice)
		self.bind(voice, pattern)
		self.start(voice, position = position)

		logger.debug(f"Rebound {voice.value} to '{pattern.label}'")

	def step_index (self, voice: Voice, pulse: typing.Optional[int] = None) -> typing.Optional[int]:

		"""
		The step ``voice`` is on at ``pulse`` (default: now), or None if it is not running.
		"""

		binding = self._bindings.get(voice)

		if binding is None or binding.state is not VoiceState.RUNNING:
			return None

		if pulse is None:
			pulse = self.sequencer.pulse_count

		return self._index(binding, pulse)

	def _index (self, binding: VoiceBinding, pulse: int) -> int:

		pattern = binding.pattern

		return ((pulse - self.origin - binding.position) // pattern.subdivision) % len(pattern)

	def _fire (self, binding: VoiceBinding, pulse: int) -> None:

		if binding.state is not VoiceState.RUNNING:
			return

		voice = binding.voice
		event = binding.pattern.events[self._index(binding, pulse)]

		if event is None or not self.state.enabled[voice]:
			return

		if voice is Voice.DRUMS:
			event = vibecoding.pattern.transpose(event, self.state.drum_pitch_offset)

		duration = self.sequencer.pulses_to_seconds(binding.pattern.subdivision) * self.gate

		self.trigger(voice, event, duration, self.sequencer.current_time)
