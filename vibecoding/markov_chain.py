import logging
import random
import typing

import vibecoding.exceptions
import vibecoding.sequence_utils


logger = logging.getLogger(__name__)

DEGREES_PER_SCALE = 7

TransitionTable = typing.Dict[int, typing.Dict[int, float]]


def learn (corpus: typing.Iterable[typing.Sequence[int]]) -> TransitionTable:

	"""
	Learn a degree-to-degree transition table from a corpus of progressions.

	Every adjacent pair ``a → b`` in every sequence increments a counter;
	each source's counts are then normalised so its outgoing probabilities
	sum to 1. Degrees are reduced mod 7 and destinations keep the order in
	which they were first seen.

	Example:
		```python
		table = learn([[0, 3, 4, 0], [0, 5, 3, 4]])
		table[0]  # → {3: 0.5, 5: 0.5}
		table[3]  # → {4: 1.0}
		```
	"""

	counts: typing.Dict[int, typing.Dict[int, int]] = {}

	for progression in corpus:

		degrees = [degree % DEGREES_PER_SCALE for degree in progression]

		for source, target in zip(degrees, degrees[1:]):

			if source not in counts:
				counts[source] = {}

			# Repeated transitions accumulate to strengthen the edge.
			counts[source][target] = counts[source].get(target, 0) + 1

	table: TransitionTable = {}

	for source, targets in counts.items():
		total = sum(targets.values())
		table[source] = {target: count / total for target, count in targets.items()}

	logger.debug(f"Learned transition table with {len(table)} source degrees")

	return table


def choose_next (table: TransitionTable, current: int, rng: random.Random) -> int:

	"""
	Choose the degree that follows ``current``.

	Destinations are weighted by their learned probability. A degree with no outgoing entries falls back to a uniform
	choice among every source degree in the table.
	"""

	if not table:
		raise vibecoding.exceptions.InvalidGenerationInputError("Transition table cannot be empty")

	options = table.get(current)

	if not options:
		# Dead end: restart from any degree the corpus knows how to leave.
		return rng.choice(list(table))

	return vibecoding.sequence_utils.weighted_choice(list(options.items()), rng)


def generate (table: TransitionTable, start: int, length: int, rng: typing.Optional[random.Random] = None) -> typing.List[int]:

	"""
	Generate a progression by weighted random walk through ``table``.

	Parameters:
		table: A table produced by :func:`learn`.
		start: First degree of the progression (returned unchanged).
		length: Exact number of degrees to return (at least 1).
		rng: Random number generator (a fresh ``random.Random`` when omitted).

	Raises:
		InvalidGenerationInputError: If the table is empty or ``length`` is below 1.
	"""

	if not table:
		raise vibecoding.exceptions.InvalidGenerationInputError("Cannot generate from an empty transition table")

	if length < 1:
		raise vibecoding.exceptions.InvalidGenerationInputError(f"Progression length must be at least 1 (got {length})")

	rng = rng or random.Random()
	progression = [start]

	while len(progression) < length:
		progression.append(choose_next(table, progression[-1], rng))

	return progression

