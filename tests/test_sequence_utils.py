import random
import typing

import pytest

import vibecoding.exceptions
import vibecoding.sequence_utils


def _onset_gaps (sequence: typing.Sequence[int]) -> typing.List[int]:

	"""Circular gaps between onsets, the last one wrapping back to the first."""

	indices = [i for i, v in enumerate(sequence) if v]
	gaps = [b - a for a, b in zip(indices, indices[1:])]
	gaps.append(indices[0] + len(sequence) - indices[-1])

	return gaps


def test_euclidean_three_in_eight () -> None:

	"""(3, 8) gives the canonical tresillo, starting on an onset."""

	assert vibecoding.sequence_utils.generate_euclidean_sequence(steps=8, pulses=3) == [1, 0, 0, 1, 0, 0, 1, 0]


def test_euclidean_four_in_sixteen () -> None:

	"""(4, 16) places a hit on every fourth step."""

	assert vibecoding.sequence_utils.generate_euclidean_sequence(steps=16, pulses=4) == [1, 0, 0, 0] * 4


def test_euclidean_single_pulse () -> None:

	"""One pulse lands on the first step."""

	assert vibecoding.sequence_utils.generate_euclidean_sequence(steps=4, pulses=1) == [1, 0, 0, 0]


def test_euclidean_zero_pulses_is_all_rests () -> None:

	assert vibecoding.sequence_utils.generate_euclidean_sequence(steps=5, pulses=0) == [0] * 5


def test_euclidean_pulses_at_or_above_steps_is_all_onsets () -> None:

	assert vibecoding.sequence_utils.generate_euclidean_sequence(steps=6, pulses=6) == [1] * 6
	assert vibecoding.sequence_utils.generate_euclidean_sequence(steps=6, pulses=9) == [1] * 6


def test_euclidean_length_and_onset_count () -> None:

	"""For every pulse count the result has ``steps`` values and min(pulses, steps) onsets."""

	for steps in range(1, 33):
		for pulses in range(0, steps + 2):
			sequence = vibecoding.sequence_utils.generate_euclidean_sequence(steps=steps, pulses=pulses)

			assert len(sequence) == steps, (steps, pulses)
			assert sum(sequence) == min(pulses, steps), (steps, pulses)


def test_euclidean_gaps_are_maximally_even () -> None:

	"""Circular inter-onset gaps take at most two values, differing by one."""

	for steps in range(1, 33):
		for pulses in range(1, steps + 1):
			sequence = vibecoding.sequence_utils.generate_euclidean_sequence(steps=steps, pulses=pulses)
			gaps = set(_onset_gaps(sequence))

			assert len(gaps) <= 2, (steps, pulses, gaps)
			assert max(gaps) - min(gaps) <= 1, (steps, pulses, gaps)


def test_euclidean_starts_on_onset () -> None:

	for steps in range(1, 17):
		for pulses in range(1, steps + 1):
			assert vibecoding.sequence_utils.generate_euclidean_sequence(steps=steps, pulses=pulses)[0] == 1


def test_euclidean_rejects_bad_input () -> None:

	"""Non-positive steps and negative pulses are rejected, not silently degenerate."""

	with pytest.raises(vibecoding.exceptions.InvalidGenerationInputError):
		vibecoding.sequence_utils.generate_euclidean_sequence(steps=0, pulses=0)

	with pytest.raises(vibecoding.exceptions.InvalidGenerationInputError):
		vibecoding.sequence_utils.generate_euclidean_sequence(steps=-4, pulses=1)

	with pytest.raises(vibecoding.exceptions.InvalidGenerationInputError):
		vibecoding.sequence_utils.generate_euclidean_sequence(steps=8, pulses=-1)


def test_invalid_generation_input_is_a_value_error () -> None:

	with pytest.raises(ValueError):
		vibecoding.sequence_utils.generate_euclidean_sequence(steps=0, pulses=1)


def test_weighted_choice_respects_weights () -> None:

	"""A zero-weight option is never chosen; the rest follow their weights."""

	rng = random.Random(3)
	counts = {"a": 0, "b": 0, "never": 0}

	for _ in range(4000):
		counts[vibecoding.sequence_utils.weighted_choice([("a", 3.0), ("never", 0.0), ("b", 1.0)], rng)] += 1

	assert counts["never"] == 0
	assert counts["a"] / 4000 == pytest.approx(0.75, abs=0.04)


def test_weighted_choice_rejects_empty_and_zero_total () -> None:

	rng = random.Random(0)

	with pytest.raises(ValueError):
		vibecoding.sequence_utils.weighted_choice([], rng)

	with pytest.raises(ValueError):
		vibecoding.sequence_utils.weighted_choice([("a", 0.0)], rng)
