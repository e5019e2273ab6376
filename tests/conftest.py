import typing

import mido
import pytest

import vibecoding.engine
import vibecoding.pattern
from vibecoding.voice import Voice


class FakeMidiOut:

	"""Minimal MIDI output stub that keeps every message it is sent."""

	def __init__ (self) -> None:

		self.sent: typing.List[mido.Message] = []
		self.closed = False
		self.panicked = False

	def send (self, message: mido.Message) -> None:

		"""Store outgoing MIDI messages."""

		self.sent.append(message)


	def close (self) -> None:

		self.closed = True


	def panic (self) -> None:

		self.panicked = True


	def reset (self) -> None:

		"""No-op reset for the fake device."""

		return None


# Module-level reference so tests can access the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	fake = FakeMidiOut()
	_current_fake_output = fake
	return fake


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def fake_port (patch_midi: None) -> typing.Callable[[], typing.Optional[FakeMidiOut]]:

	"""Return a function giving the most recently opened fake port."""

	return lambda: _current_fake_output


class RecordingOutput:

	"""An output sink that remembers every trigger and gain change."""

	def __init__ (self) -> None:

		self.triggers: typing.List[typing.Tuple[Voice, vibecoding.pattern.Event, float, float]] = []
		self.gains: typing.Dict[Voice, typing.List[typing.Tuple[float, float]]] = {voice: [] for voice in Voice}
		self.ticks = 0
		self.closed = False

	def trigger (self, voice: Voice, event: vibecoding.pattern.Event, duration: float, time: float) -> None:

		self.triggers.append((voice, event, duration, time))

	def set_gain (self, voice: Voice, level: float, time: float) -> None:

		self.gains[voice].append((time, level))

	def tick (self, time: float) -> None:

		self.ticks += 1

	def close (self) -> None:

		self.closed = True

	def events_for (self, voice: Voice) -> typing.List[vibecoding.pattern.Event]:

		"""Every event triggered on ``voice``, in order."""

		return [event for v, event, _, _ in self.triggers if v is voice]


@pytest.fixture
def recording_output () -> RecordingOutput:

	return RecordingOutput()


@pytest.fixture
def engine (recording_output: RecordingOutput) -> vibecoding.engine.Engine:

	"""A seeded engine in A minor techno at 120 BPM, sending to a recording sink."""

	return vibecoding.engine.Engine(
		output = recording_output,
		scale = "A minor",
		style = "techno",
		bpm = 120,
		seed = 1234,
		spin_wait = False
	)
