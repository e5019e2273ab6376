import random
import typing

import vibecoding.exceptions


T = typing.TypeVar("T")


def generate_euclidean_sequence (steps: int, pulses: int) -> typing.List[int]:

	"""
	Generate a Euclidean rhythm using Bjorklund's algorithm.

	Distributes ``pulses`` onsets (1) as evenly as possible across ``steps``
	positions, the rest being rests (0). The result is rotated so that it
	starts on an onset, which matches the canonical reference sequences:

		generate_euclidean_sequence(8, 3)   # → [1, 0, 0, 1, 0, 0, 1, 0]
		generate_euclidean_sequence(16, 4)  # → [1, 0, 0, 0] * 4

	Pulses greater than or equal to ``steps`` give all onsets.

	Raises:
		InvalidGenerationInputError: If ``steps`` is not positive or ``pulses`` is negative.
	"""

	if steps <= 0:
		raise vibecoding.exceptions.InvalidGenerationInputError(f"Euclidean steps must be positive (got {steps})")

	if pulses < 0:
		raise vibecoding.exceptions.InvalidGenerationInputError(f"Euclidean pulses cannot be negative (got {pulses})")

	if pulses == 0:
		return [0] * steps

	if pulses >= steps:
		return [1] * steps

	sequence: typing.List[int] = []
	counts: typing.List[int] = []
	remainders: typing.List[int] = []
	divisor = steps - pulses

	remainders.append(pulses)
	level = 0

	while True:
		counts.append(divisor // remainders[level])
		remainders.append(divisor % remainders[level])
		divisor = remainders[level]
		level += 1
		if remainders[level] <= 1:
			break

	counts.append(divisor)

	def build (level: int) -> None:
		if level == -1:
			sequence.append(0)
		elif level == -2:
			sequence.append(1)
		else:
			for _ in range(counts[level]):
				build(level - 1)
			if remainders[level] != 0:
				build(level - 2)

	build(level)

	i = sequence.index(1)
	rotated = sequence[i:] + sequence[:i]

	# The construction is exact, but keep the length contract explicit.
	return (rotated + [0] * steps)[:steps]


def weighted_choice (options: typing.List[typing.Tuple[T, float]], rng: random.Random) -> T:

	"""Pick one item from a list of (value, weight) pairs.

	Weights are relative and need not sum to 1.0. The draw walks the options
	in order and takes the first whose cumulative weight reaches
	``rng.random() * total``; floating-point shortfall falls back to the last
	option.

	Parameters:
		options: List of `(value, weight)` tuples
		rng: Random number generator instance

	Example:
		```python
		degree = vibecoding.sequence_utils.weighted_choice([
			(4, 0.5),   # V: 50%
			(5, 0.3),   # vi: 30%
			(3, 0.2),   # IV: 20%
		], rng)
		```
	"""

	if not options:
		raise ValueError("Options list cannot be empty")

	total = sum(weight for _, weight in options)

	if total <= 0:
		raise ValueError("Total weight must be positive")

	threshold = rng.random() * total
	cumulative = 0.0

	for value, weight in options:
		cumulative += weight
		if cumulative >= threshold:
			return value

	return options[-1][0]
