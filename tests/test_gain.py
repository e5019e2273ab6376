import pytest

import vibecoding.gain
from vibecoding.voice import Voice


class FakeClock:

	"""A settable time source."""

	def __init__ (self) -> None:

		self.now = 0.0

	def __call__ (self) -> float:

		return self.now


@pytest.fixture
def clock () -> FakeClock:

	return FakeClock()


@pytest.fixture
def controller (clock: FakeClock) -> vibecoding.gain.GainEnvelopeController:

	return vibecoding.gain.GainEnvelopeController(clock, fade_time=2.0, volume_fade_time=0.1)


def test_ramp_is_linear () -> None:

	gain = vibecoding.gain.Gain("test")
	gain.ramp_to(1.0, 2.0, now=0.0)

	assert gain.value_at(0.0) == pytest.approx(0.0)
	assert gain.value_at(0.5) == pytest.approx(0.25)
	assert gain.value_at(1.0) == pytest.approx(0.5)
	assert gain.value_at(5.0) == pytest.approx(1.0)


def test_new_ramp_reanchors_at_the_current_value () -> None:

	"""
	A ramp started mid-fade begins where the old one had got to, not where it started.
	"""

	gain = vibecoding.gain.Gain("test", level=0.8)
	gain.ramp_to(0.0, 2.0, now=0.0)
	gain.ramp_to(0.8, 2.0, now=1.0)

	assert gain.ramp is not None
	assert gain.ramp.start_value == pytest.approx(0.4)
	assert gain.value_at(1.0) == pytest.approx(0.4)
	assert gain.value_at(2.0) == pytest.approx(0.6)
	assert gain.value_at(3.0) == pytest.approx(0.8)


def test_zero_duration_jumps () -> None:

	gain = vibecoding.gain.Gain("test", level=0.3)
	gain.ramp_to(0.9, 0.0, now=4.0)

	assert not gain.pending
	assert gain.value_at(4.0) == pytest.approx(0.9)


def test_settle_finalises_only_finished_ramps () -> None:

	gain = vibecoding.gain.Gain("test")
	gain.ramp_to(0.5, 1.0, now=0.0)

	assert gain.settle(0.5) is False
	assert gain.pending

	assert gain.settle(1.0) is True
	assert not gain.pending
	assert gain.level == pytest.approx(0.5)


def test_cancel_freezes_the_level () -> None:

	gain = vibecoding.gain.Gain("test")
	gain.ramp_to(1.0, 4.0, now=0.0)
	gain.cancel(1.0)

	assert not gain.pending
	assert gain.value_at(10.0) == pytest.approx(0.25)


def test_ramp_validates_target () -> None:

	gain = vibecoding.gain.Gain("test")

	with pytest.raises(ValueError):
		gain.ramp_to(1.5, 1.0, now=0.0)

	with pytest.raises(ValueError):
		gain.ramp_to(-0.1, 1.0, now=0.0)

	with pytest.raises(ValueError):
		gain.ramp_to(0.5, -1.0, now=0.0)


def test_eased_ramp () -> None:

	gain = vibecoding.gain.Gain("test")
	gain.ramp_to(1.0, 1.0, now=0.0, shape="ease_in")

	assert gain.value_at(0.5) == pytest.approx(0.25)


def test_fade_out_then_fade_in_keeps_one_ramp (controller: vibecoding.gain.GainEnvelopeController, clock: FakeClock) -> None:

	"""
	A fade-out followed straight away by a fade-in leaves exactly one ramp, settling at the fade-in target.
	"""

	controller.fade_in(Voice.PAD, 0.8)
	clock.now = 3.0
	controller.settle()

	controller.fade_out(Voice.PAD)
	controller.fade_in(Voice.PAD, 0.6)

	assert controller.active_ramps(Voice.PAD) == 1

	while clock.now < 6.0:
		clock.now += 0.05
		controller.settle()
		assert controller.active_ramps(Voice.PAD) <= 1

	assert controller.active_ramps(Voice.PAD) == 0
	assert controller.level(Voice.PAD) == pytest.approx(0.6)


def test_levels_multiply_by_master (controller: vibecoding.gain.GainEnvelopeController, clock: FakeClock) -> None:

	controller.fade_in(Voice.BASS, 0.8)
	controller.set_master(0.5)
	clock.now = 2.0
	controller.settle()

	levels = controller.levels()

	assert levels[Voice.BASS] == pytest.approx(0.4)
	assert levels[Voice.ARP] == pytest.approx(0.0)
	assert controller.master_level() == pytest.approx(0.5)


def test_volume_changes_use_the_short_fade (controller: vibecoding.gain.GainEnvelopeController, clock: FakeClock) -> None:

	controller.set_volume(Voice.ARP, 1.0)

	clock.now = 0.05
	assert controller.level(Voice.ARP) == pytest.approx(0.5)

	clock.now = 0.1
	assert controller.level(Voice.ARP) == pytest.approx(1.0)


def test_negative_fade_time_rejected (clock: FakeClock) -> None:

	with pytest.raises(ValueError):
		vibecoding.gain.GainEnvelopeController(clock, fade_time=-1.0)
