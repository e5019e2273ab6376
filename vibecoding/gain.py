"""Click-free gain transitions for the four stems and the master bus.

Every :class:`Gain` carries at most one pending ramp. Starting a new ramp
re-anchors it at the value actually reached at that instant and replaces
whatever ramp was in flight, so overlapping fades can never stack or jump.

:class:`GainEnvelopeController` owns one gain per voice plus the master
gain and reads time from a callable (the sequencer's elapsed seconds), so
fades advance with the clock whether it is running in real time or being
stepped offline.
"""

import dataclasses
import logging
import typing

import vibecoding.easing
from vibecoding.voice import Voice


logger = logging.getLogger(__name__)


TimeSource = typing.Callable[[], float]


def _validate_level (value: float) -> float:

	if not 0.0 <= value <= 1.0:
		raise ValueError(f"Gain must be between 0 and 1 (got {value})")

	return float(value)


@dataclasses.dataclass
class GainRamp:

	"""
	One transition from ``start_value`` to ``target`` over ``duration`` seconds.
	"""

	start_value: float
	target: float
	start_time: float
	duration: float
	easing_fn: vibecoding.easing.EasingFn = vibecoding.easing.linear

	def value_at (self, now: float) -> float:

		if self.duration <= 0:
			return self.target

		progress = (now - self.start_time) / self.duration

		return vibecoding.easing.interpolate(self.start_value, self.target, progress, self.easing_fn)

	def finished (self, now: float) -> bool:

		return now >= self.start_time + self.duration


class Gain:

	"""
	A single gain level with an optional in-flight ramp.
	"""

	def __init__ (self, name: str, level: float = 0.0) -> None:

		self.name = name
		self.level = _validate_level(level)
		self.ramp: typing.Optional[GainRamp] = None

	def __repr__ (self) -> str:

		return f"Gain({self.name!r}, level={self.level:.3f}, ramping={self.pending})"

	@property
	def pending (self) -> bool:

		"""True while a ramp is in flight."""

		return self.ramp is not None

	@property
	def target (self) -> float:

		"""The level this gain is heading to (its current level if it is not ramping)."""

		return self.ramp.target if self.ramp is not None else self.level

	def value_at (self, now: float) -> float:

		"""The actual level at time ``now``."""

		if self.ramp is None:
			return self.level

		return self.ramp.value_at(now)

	def ramp_to (
		self,
		target: float,
		duration: float,
		now: float,
		shape: typing.Union[str, vibecoding.easing.EasingFn] = "linear"
	) -> None:

		"""
		Move towards ``target`` over ``duration`` seconds starting at ``now``.

		The new ramp starts from the value actually reached at ``now``; any
		pending ramp is discarded. A zero duration jumps straight to the target.

		Raises:
			ValueError: If ``target`` is outside [0, 1] or ``duration`` is negative.
		"""

		target = _validate_level(target)

		if duration < 0:
			raise ValueError(f"Ramp duration cannot be negative (got {duration})")

		easing_fn = vibecoding.easing.get_easing(shape)
		current = self.value_at(now)

		if duration == 0:
			self.level = target
			self.ramp = None
			return

		self.level = current
		self.ramp = GainRamp(
			start_value = current,
			target = target,
			start_time = now,
			duration = duration,
			easing_fn = easing_fn
		)

	def settle (self, now: float) -> bool:

		"""
		Finalise a finished ramp. Returns True if one was finalised.
		"""

		if self.ramp is not None and self.ramp.finished(now):
			self.level = self.ramp.target
			self.ramp = None
			return True

		return False

	def cancel (self, now: float) -> None:

		"""Freeze at the current actual value and drop any pending ramp."""

		self.level = self.value_at(now)
		self.ramp = None


class GainEnvelopeController:

	"""
	Per-voice and master gains driven by one time source.

	Stem fades (start, stop, enable, disable) take ``fade_time`` seconds;
	volume changes take ``volume_fade_time`` seconds. The level a stem is
	heard at is its own level multiplied by the master level.
	"""

	def __init__ (
		self,
		time_source: TimeSource,
		fade_time: float = 2.0,
		volume_fade_time: float = 0.1,
		shape: typing.Union[str, vibecoding.easing.EasingFn] = "linear",
		master_level: float = 1.0
	) -> None:

		if fade_time < 0 or volume_fade_time < 0:
			raise ValueError("Fade times cannot be negative")

		self.time_source = time_source
		self.fade_time = fade_time
		self.volume_fade_time = volume_fade_time
		self.shape = vibecoding.easing.get_easing(shape)

		self.gains: typing.Dict[Voice, Gain] = {voice: Gain(voice.value) for voice in Voice}
		self.master = Gain("master", master_level)

	def _now (self) -> float:

		return self.time_source()

	def fade_in (self, voice: Voice, target: float, shape: typing.Optional[typing.Union[str, vibecoding.easing.EasingFn]] = None) -> None:

		"""Ramp ``voice`` up to ``target`` over the fade time."""

		self.gains[voice].ramp_to(target, self.fade_time, self._now(), shape or self.shape)

		logger.debug(f"Fading in {voice.value} to {target:.2f} over {self.fade_time}s")

	def fade_out (self, voice: Voice, shape: typing.Optional[typing.Union[str, vibecoding.easing.EasingFn]] = None) -> None:

		"""Ramp ``voice`` down to silence over the fade time."""

		self.gains[voice].ramp_to(0.0, self.fade_time, self._now(), shape or self.shape)

		logger.debug(f"Fading out {voice.value} over {self.fade_time}s")

	def set_volume (self, voice: Voice, value: float) -> None:

		"""Ramp ``voice`` to ``value`` over the short volume fade time."""

		self.gains[voice].ramp_to(value, self.volume_fade_time, self._now(), self.shape)

	def set_master (self, value: float) -> None:

		"""Ramp the master gain to ``value`` over the short volume fade time."""

		self.master.ramp_to(value, self.volume_fade_time, self._now(), self.shape)

	def level (self, voice: Voice) -> float:

		"""The stem's own level right now (before the master gain)."""

		return self.gains[voice].value_at(self._now())

	def master_level (self) -> float:

		return self.master.value_at(self._now())

	def levels (self) -> typing.Dict[Voice, float]:

		"""The effective level of every voice right now: voice level times master level."""

		now = self._now()
		master = self.master.value_at(now)

		return {voice: gain.value_at(now) * master for voice, gain in self.gains.items()}

	def settle (self) -> None:

		"""Finalise every ramp that has reached its end."""

		now = self._now()

		for gain in self.gains.values():
			gain.settle(now)

		self.master.settle(now)

	def active_ramps (self, voice: Voice) -> int:

		"""Number of in-flight ramps on ``voice`` (never more than one)."""

		return 1 if self.gains[voice].pending else 0

