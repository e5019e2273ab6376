import datetime
import heapq
import itertools
import logging
import typing

import mido

import vibecoding.constants.midi
import vibecoding.pattern
from vibecoding.voice import Voice


logger = logging.getLogger(__name__)


# Recordings use a fixed 120 BPM tempo map and convert clock seconds to ticks,
# so tempo changes during a session are preserved as real timing.
RECORD_TICKS_PER_BEAT = 480
RECORD_BPM = 120
RECORD_TICKS_PER_SECOND = RECORD_TICKS_PER_BEAT * RECORD_BPM / 60


@typing.runtime_checkable
class OutputSink (typing.Protocol):

	"""
	Where the engine sends what it decides to play.
	"""

	def trigger (self, voice: Voice, event: vibecoding.pattern.Event, duration: float, time: float) -> None:

		"""
		Sound ``event`` on ``voice`` at clock time ``time`` for ``duration`` seconds.
		"""

		...

	def set_gain (self, voice: Voice, level: float, time: float) -> None:

		"""
		Set the effective output level (0-1) of ``voice``.
		"""

		...

	def tick (self, time: float) -> None:

		"""
		Called once per clock pulse with the current clock time.
		"""

		...

	def close (self) -> None:

		...


class NullOutput:

	"""An output that discards everything."""

	def trigger (self, voice: Voice, event: vibecoding.pattern.Event, duration: float, time: float) -> None:

		return None

	def set_gain (self, voice: Voice, level: float, time: float) -> None:

		return None

	def tick (self, time: float) -> None:

		return None

	def close (self) -> None:

		return None


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Select and open a MIDI output device.

	If `device_name` is provided, attempts to open that specific device.
	If `device_name` is None, auto-discovers available devices:
	- If exactly one device exists, it is selected automatically.
	- If multiple devices exist, prompts the user to choose one from the console.
	- If no devices exist, logs an error and returns None.

	Returns:
		A tuple of (device_name, midi_out_object) or (None, None) on failure.
	"""

	try:
		outputs = mido.get_output_names()
		logger.info(f"Available MIDI outputs: {outputs}")

		if not outputs:
			logger.error("No MIDI output devices found.")
			return None, None

		if device_name is not None:
			if device_name in outputs:
				midi_out = mido.open_output(device_name)
				logger.info(f"Opened MIDI output: {device_name}")
				return device_name, midi_out

			logger.error(f"MIDI output device '{device_name}' not found. Available devices: {outputs}")
			return None, None

		if len(outputs) == 1:
			selected_name = outputs[0]
			midi_out = mido.open_output(selected_name)
			logger.info(f"One MIDI output found - using '{selected_name}'")
			return selected_name, midi_out

		print("\nAvailable MIDI output devices:\n")
		for i, name in enumerate(outputs, 1):
			print(f"  {i}. {name}")
		print()

		while True:
			try:
				choice = int(input(f"Select a device (1-{len(outputs)}): "))
				if 1 <= choice <= len(outputs):
					break
			except (ValueError, EOFError):
				pass
			print(f"Enter a number between 1 and {len(outputs)}.")

		selected_name = outputs[choice - 1]
		midi_out = mido.open_output(selected_name)
		logger.info(f"Opened MIDI output: {selected_name}")

		print("\nTip: To skip this prompt, set the device in config.yaml:\n")
		print(f"  midi:\n    device_name: \"{selected_name}\"\n")

		return selected_name, midi_out

	except Exception as e:
		logger.error(f"Failed to open MIDI output: {e}")
		return None, None


class MidiOutput:

	"""
	Plays the four voices on a MIDI port, one channel per voice.

	Notes are released by :meth:`tick` once their duration has passed on the
	engine clock. Stem levels are sent as channel volume (CC 7), only when the
	7-bit value actually changes. Everything sent can also be recorded and
	saved as a standard MIDI file on :meth:`close`.
	"""

	def __init__ (
		self,
		device_name: typing.Optional[str] = None,
		record: bool = False,
		record_filename: typing.Optional[str] = None,
		velocity: int = vibecoding.constants.midi.DEFAULT_VELOCITY,
		chord_velocity: int = vibecoding.constants.midi.DEFAULT_CHORD_VELOCITY,
		open_device: bool = True
	) -> None:

		"""
		Parameters:
			device_name: MIDI output to open (None selects automatically).
			record: Record every message sent, for saving on close.
			record_filename: Filename for the recording (defaults to a timestamp).
			velocity: Velocity for single notes.
			chord_velocity: Velocity for each note of a chord.
			open_device: When False, no port is opened (offline rendering).
		"""

		self.velocity = velocity
		self.chord_velocity = chord_velocity

		self.recording = record
		self.record_filename = record_filename
		self.recorded_events: typing.List[typing.Tuple[float, typing.Union[mido.Message, mido.MetaMessage]]] = []

		# (channel, note) -> release time of the note currently sounding.
		self.active_notes: typing.Dict[typing.Tuple[int, int], float] = {}
		self._note_offs: typing.List[typing.Tuple[float, int, int, int]] = []
		self._note_off_counter = itertools.count()

		self._last_cc: typing.Dict[int, int] = {}
		self._last_time = 0.0

		self.device_name: typing.Optional[str] = None
		self.midi_out: typing.Optional[typing.Any] = None

		if open_device:
			self.device_name, self.midi_out = select_output_device(device_name)

	def _send (self, message: mido.Message, time: float) -> None:

		if self.recording:
			self.recorded_events.append((time, message))

		if self.midi_out is not None:
			try:
				self.midi_out.send(message)
			except Exception:
				logger.exception("MIDI send failed (device may be disconnected)")

	def trigger (self, voice: Voice, event: vibecoding.pattern.Event, duration: float, time: float) -> None:

		pitches = vibecoding.pattern.as_pitches(event)

		if not pitches:
			return

		channel = voice.channel
		velocity = self.chord_velocity if len(pitches) > 1 else self.velocity
		release = time + duration

		self._last_time = time

		for pitch in pitches:

			if not vibecoding.constants.midi.MIN_NOTE <= pitch <= vibecoding.constants.midi.MAX_NOTE:
				logger.warning(f"Skipping out-of-range note {pitch} on {voice.value}")
				continue

			key = (channel, pitch)

			# Retrigger: end the sounding note before starting the new one.
			if key in self.active_notes:
				self._send(mido.Message('note_off', channel=channel, note=pitch, velocity=0), time)

			self._send(mido.Message('note_on', channel=channel, note=pitch, velocity=velocity), time)

			self.active_notes[key] = release
			heapq.heappush(self._note_offs, (release, next(self._note_off_counter), channel, pitch))

	def set_gain (self, voice: Voice, level: float, time: float) -> None:

		channel = voice.channel
		value = max(0, min(127, int(round(level * 127))))

		if self._last_cc.get(channel) == value:
			return

		self._last_cc[channel] = value
		self._send(mido.Message('control_change', channel=channel, control=vibecoding.constants.midi.CC_CHANNEL_VOLUME, value=value), time)

	def tick (self, time: float) -> None:

		"""Send the note_off of every note whose release time has passed."""

		self._last_time = time

		while self._note_offs and self._note_offs[0][0] <= time:

			release, _, channel, pitch = heapq.heappop(self._note_offs)
			key = (channel, pitch)

			# A later retrigger owns the note now; its own release will end it.
			if self.active_notes.get(key) != release:
				continue

			del self.active_notes[key]
			self._send(mido.Message('note_off', channel=channel, note=pitch, velocity=0), release)

	def release_all (self) -> None:

		"""Send note_off for every sounding note at its scheduled release time."""

		if self._note_offs:
			self.tick(max(release for release, _, _, _ in self._note_offs))

		self.active_notes.clear()

	def panic (self) -> None:

		"""
		Send all notes off and all sound off on every channel.
		"""

		logger.info("Panic: sending all notes off.")

		if self.midi_out is None:
			return

		try:
			for channel in range(16):
				self.midi_out.send(mido.Message('control_change', channel=channel, control=vibecoding.constants.midi.CC_ALL_NOTES_OFF, value=0))
				self.midi_out.send(mido.Message('control_change', channel=channel, control=vibecoding.constants.midi.CC_ALL_SOUND_OFF, value=0))

			self.midi_out.panic()
			self.midi_out.reset()

		except Exception:
			logger.exception("MIDI panic failed (device may be disconnected)")

	def save_recording (self) -> None:

		"""Save the recorded session to a MIDI file."""

		if not self.recording or not self.recorded_events:
			return

		if self.record_filename:
			filename = self.record_filename
		else:
			now = datetime.datetime.now()
			filename = now.strftime("session_%Y%m%d_%H%M%S.mid")

		logger.info(f"Saving MIDI recording ({len(self.recorded_events)} events) to {filename}...")

		mid = mido.MidiFile(type=1, ticks_per_beat=RECORD_TICKS_PER_BEAT)
		track = mido.MidiTrack()
		mid.tracks.append(track)

		track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(RECORD_BPM), time=0))

		# Stable sort keeps same-time messages in the order they were sent.
		events = sorted(self.recorded_events, key=lambda x: x[0])
		last_tick = 0

		for time, message in events:

			tick = int(round(time * RECORD_TICKS_PER_SECOND))
			track.append(message.copy(time=max(0, tick - last_tick)))
			last_tick = max(last_tick, tick)

		try:
			mid.save(filename)
			logger.info(f"Saved {filename}")
		except Exception as e:
			logger.error(f"Failed to save MIDI recording: {e}")

	def close (self) -> None:

		"""Release sounding notes, silence the device, save any recording, and close the port."""

		self.release_all()
		self.panic()
		self.save_recording()

		if self.midi_out is not None:
			self.midi_out.close()
			self.midi_out = None
