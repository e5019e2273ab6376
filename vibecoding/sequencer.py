import asyncio
import dataclasses
import heapq
import itertools
import logging
import time
import typing

import vibecoding.constants


logger = logging.getLogger(__name__)


StepCallback = typing.Callable[[int], typing.Any]
PulseListener = typing.Callable[[int, float], typing.Any]


@dataclasses.dataclass
class ScheduledCallback:

	"""
	A cancellable handle for a callback on the shared pulse grid.

	Repeating callbacks fire every ``interval_pulses`` starting at
	``next_fire_pulse``; one-shot callbacks have no interval. After
	``cancel()`` the callback is guaranteed never to fire again, even if it
	was due on the pulse currently being processed.
	"""

	callback: StepCallback
	next_fire_pulse: int
	interval_pulses: typing.Optional[int] = None
	cancelled: bool = False

	def cancel (self) -> None:

		"""
		Prevent any further invocation.
		"""

		self.cancelled = True

	@property
	def repeating (self) -> bool:

		return self.interval_pulses is not None


class Sequencer:

	"""
	The shared clock that drives every voice.

	The `Sequencer` counts pulses at 24 PPQN, keeps elapsed time in seconds
	(so tempo changes bend time without moving the pulse grid), and fires
	scheduled callbacks in strict pulse order. Pulses are advanced either by
	the real-time asyncio loop (:meth:`start`) or synchronously with
	:meth:`run_pulses` for offline rendering and tests. Both paths go
	through :meth:`advance_pulse`.
	"""

	def __init__ (
		self,
		initial_bpm: float = 120,
		spin_wait: bool = True
	) -> None:

		"""Initialize the clock at pulse 0.

		Parameters:
			initial_bpm: Tempo in BPM.
			spin_wait: When True (default), use a hybrid sleep+spin strategy for the
				final sub-millisecond of each pulse interval in real-time playback.
				Set to False to use pure ``asyncio.sleep()`` (lower CPU, higher jitter).
		"""

		self.pulses_per_beat = vibecoding.constants.PULSES_PER_BEAT
		self.pulse_count = 0
		self.elapsed_seconds = 0.0

		self.callback_queue: typing.List[typing.Tuple[int, int, ScheduledCallback]] = []
		self._callback_counter = itertools.count()
		self.pulse_listeners: typing.List[PulseListener] = []

		self.task: typing.Optional[asyncio.Task] = None
		self.running = False

		# Timing variables
		self.current_bpm: float = 0
		self.seconds_per_beat = 0.0
		self.seconds_per_pulse = 0.0
		self._spin_wait: bool = spin_wait
		# Sleep to this many seconds before the target, then busy-wait the remainder.
		self._spin_threshold: float = 0.001

		self.set_bpm(initial_bpm)


	@property
	def current_time (self) -> float:

		"""Seconds elapsed on the clock at the start of the current pulse."""

		return self.elapsed_seconds


	def set_bpm (self, bpm: float) -> None:

		"""
		Instantly change the tempo. Takes effect from the next pulse.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.current_bpm = bpm
		self.seconds_per_beat = 60.0 / self.current_bpm
		self.seconds_per_pulse = self.seconds_per_beat / self.pulses_per_beat

		logger.info(f"BPM set to {self.current_bpm:.2f}")


	def pulses_to_seconds (self, pulses: int) -> float:

		"""Convert a pulse count to seconds at the current tempo."""

		return pulses * self.seconds_per_pulse


	def add_pulse_listener (self, listener: PulseListener) -> None:

		"""
		Register a function called as ``listener(pulse, current_time)`` at the start of every pulse.
		"""

		self.pulse_listeners.append(listener)


	def _push (self, scheduled: ScheduledCallback) -> None:

		counter = next(self._callback_counter)
		heapq.heappush(self.callback_queue, (scheduled.next_fire_pulse, counter, scheduled))


	def schedule_repeating (self, callback: StepCallback, interval_pulses: int, start_pulse: typing.Optional[int] = None) -> ScheduledCallback:

		"""
		Call ``callback(pulse)`` every ``interval_pulses`` from ``start_pulse`` (default: now).

		Returns the handle whose ``cancel()`` stops further calls.
		"""

		if interval_pulses <= 0:
			raise ValueError("Interval must be at least one pulse")

		if start_pulse is None:
			start_pulse = self.pulse_count

		if start_pulse < self.pulse_count:
			raise ValueError(f"Cannot schedule in the past (pulse {start_pulse} < {self.pulse_count})")

		scheduled = ScheduledCallback(
			callback = callback,
			next_fire_pulse = start_pulse,
			interval_pulses = interval_pulses
		)

		self._push(scheduled)

		return scheduled


	def schedule_once (self, callback: StepCallback, pulse: int) -> ScheduledCallback:

		"""
		Call ``callback(pulse)`` once at ``pulse`` (clamped to now if it is already past).
		"""

		scheduled = ScheduledCallback(
			callback = callback,
			next_fire_pulse = max(pulse, self.pulse_count)
		)

		self._push(scheduled)

		return scheduled


	def pending_callbacks (self) -> int:

		"""Number of scheduled callbacks that have not been cancelled."""

		return sum(1 for _, _, scheduled in self.callback_queue if not scheduled.cancelled)


	def advance_pulse (self) -> None:

		"""
		Process one pulse: notify listeners, fire due callbacks, move the clock on.
		"""

		pulse = self.pulse_count
		now = self.elapsed_seconds

		# Listeners (gain settling, output ticks) run before step callbacks, so
		# notes fired on this pulse go out at this pulse's gain.
		for listener in list(self.pulse_listeners):
			listener(pulse, now)

		while self.callback_queue and self.callback_queue[0][0] <= pulse:

			_, _, scheduled = heapq.heappop(self.callback_queue)

			# Cancelled handles are dropped lazily; checking here, right before the
			# call, means one callback can cancel another due on the same pulse.
			if scheduled.cancelled:
				continue

			scheduled.callback(pulse)

			if scheduled.repeating and not scheduled.cancelled:
				assert scheduled.interval_pulses is not None
				scheduled.next_fire_pulse += scheduled.interval_pulses
				self._push(scheduled)

		self.pulse_count += 1
		self.elapsed_seconds += self.seconds_per_pulse


	def run_pulses (self, count: int) -> None:

		"""
		Advance the clock ``count`` pulses as fast as possible (offline rendering).
		"""

		for _ in range(count):
			self.advance_pulse()


	async def start (self) -> None:

		"""Start real-time playback of the clock in a separate asyncio task."""

		if self.running:
			return

		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.info("Sequencer started")


	async def stop (self) -> None:

		"""
		Stop real-time playback and wait for the loop to finish.
		"""

		if not self.running:
			return

		logger.info("Stopping sequencer...")

		self.running = False

		if self.task:
			await self.task
			self.task = None

		logger.info("Sequencer stopped")


	async def _run_loop (self) -> None:

		"""Playback loop driven by the wall clock.

		Sleeps between pulses to hold tempo, catching up pulse by pulse if the
		loop falls behind. The pulse grid is continuous across restarts: the
		loop resumes from the current pulse count.
		"""

		next_pulse_time = time.perf_counter()

		while self.running:

			current_time = time.perf_counter()

			while current_time >= next_pulse_time and self.running:
				self.advance_pulse()
				next_pulse_time += self.seconds_per_pulse

			if not self.running:
				break  # type: ignore[unreachable]

			sleep_time = next_pulse_time - time.perf_counter()

			if sleep_time > 0:
				if self._spin_wait and sleep_time > self._spin_threshold:
					# Sleep to within _spin_threshold of the target, then busy-wait
					# for the remaining sub-millisecond.
					await asyncio.sleep(sleep_time - self._spin_threshold)
					while time.perf_counter() < next_pulse_time:
						pass
				else:
					await asyncio.sleep(sleep_time)
			else:
				await asyncio.sleep(0)
