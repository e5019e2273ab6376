import pytest

import vibecoding.easing


def test_all_easings_zero_at_zero ():

	"""Every easing function returns 0.0 at t=0."""

	for name, fn in vibecoding.easing.EASING_FUNCTIONS.items():
		assert fn(0.0) == pytest.approx(0.0), f"{name}(0) should be 0.0"


def test_all_easings_one_at_one ():

	"""Every easing function returns 1.0 at t=1."""

	for name, fn in vibecoding.easing.EASING_FUNCTIONS.items():
		assert fn(1.0) == pytest.approx(1.0), f"{name}(1) should be 1.0"


def test_all_easings_monotonic ():

	"""Every easing function is non-decreasing over [0, 1]."""

	steps = 100
	for name, fn in vibecoding.easing.EASING_FUNCTIONS.items():
		values = [fn(i / steps) for i in range(steps + 1)]
		for i in range(len(values) - 1):
			assert values[i] <= values[i + 1] + 1e-9, (
				f"{name} is not monotonic at t={i/steps:.2f}"
			)


def test_logarithmic_front_loads_the_change ():

	assert vibecoding.easing.logarithmic(0.5) > 0.5
	assert vibecoding.easing.ease_in(0.5) < 0.5


def test_get_easing_accepts_callables ():

	fn = lambda t: t ** 0.5

	assert vibecoding.easing.get_easing(fn) is fn


def test_get_easing_unknown_name_raises ():

	with pytest.raises(ValueError):
		vibecoding.easing.get_easing("bounce")


def test_interpolate_clamps_progress ():

	assert vibecoding.easing.interpolate(0.2, 0.8, 0.5) == pytest.approx(0.5)
	assert vibecoding.easing.interpolate(0.2, 0.8, 1.5) == pytest.approx(0.8)
	assert vibecoding.easing.interpolate(0.2, 0.8, -1.0) == pytest.approx(0.2)
	assert vibecoding.easing.interpolate(1.0, 0.0, 0.25) == pytest.approx(0.75)
