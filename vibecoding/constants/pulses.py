"""Pulse-based timing constants.

The clock runs at **24 pulses per quarter note** (PPQN = 24). Every pattern
subdivision is a whole number of pulses, which keeps voices of different
step sizes on one integer grid:

- ``THIRTYSECOND = 3``
- ``SIXTEENTH = 6``
- ``EIGHTH = 12``
- ``QUARTER = 24``
- ``HALF = 48``
- ``WHOLE = 96`` (one 4/4 measure)
"""

import typing


THIRTYSECOND = 3
SIXTEENTH = 6
EIGHTH = 12
QUARTER = 24
HALF = 48
WHOLE = 96
MEASURE = WHOLE


SUBDIVISION_NAMES: typing.Dict[int, str] = {
	THIRTYSECOND: "32n",
	SIXTEENTH: "16n",
	EIGHTH: "8n",
	QUARTER: "4n",
	HALF: "2n",
	WHOLE: "1m",
}


def subdivision_name (pulses: int) -> str:

	"""Return the conventional note-value label for a pulse count (e.g. ``6`` → ``"16n"``)."""

	return SUBDIVISION_NAMES.get(pulses, f"{pulses}p")
