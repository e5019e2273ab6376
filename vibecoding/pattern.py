import dataclasses
import typing

import vibecoding.constants.pulses
import vibecoding.voice


# One step of a pattern: a single MIDI pitch, a chord of pitches, or a rest (None).
Event = typing.Union[int, typing.Tuple[int, ...], None]


@dataclasses.dataclass(frozen=True)
class Pattern:

	"""
	A looping sequence of events for one voice, stepped at a fixed subdivision.

	Produced fresh by every regeneration and owned by the transport until it
	is superseded.
	"""

	voice: vibecoding.voice.Voice
	events: typing.Tuple[Event, ...]
	subdivision: int
	label: str = ""
	degrees: typing.Tuple[int, ...] = ()

	def __post_init__ (self) -> None:

		if not self.events:
			raise ValueError("A pattern needs at least one step")

		if self.subdivision <= 0:
			raise ValueError("Subdivision must be a positive number of pulses")

	def __len__ (self) -> int:

		return len(self.events)

	@property
	def cycle_pulses (self) -> int:

		"""Length of one loop of the pattern, in pulses."""

		return len(self.events) * self.subdivision

	@property
	def subdivision_name (self) -> str:

		return vibecoding.constants.pulses.subdivision_name(self.subdivision)

	def onsets (self) -> typing.List[int]:

		"""Return 1 for every sounding step and 0 for every rest."""

		return [0 if event is None else 1 for event in self.events]

	def pitches (self) -> typing.List[int]:

		"""Flatten every pitch the pattern can sound, in step order."""

		result: typing.List[int] = []

		for event in self.events:
			if event is None:
				continue
			if isinstance(event, tuple):
				result.extend(event)
			else:
				result.append(event)

		return result


def as_pitches (event: Event) -> typing.Tuple[int, ...]:

	"""Normalise an event to a tuple of pitches (empty for a rest)."""

	if event is None:
		return ()

	if isinstance(event, tuple):
		return event

	return (event,)


def transpose (event: Event, semitones: int) -> Event:

	"""Shift every pitch in an event by ``semitones`` (rests are unchanged)."""

	if event is None or semitones == 0:
		return event

	if isinstance(event, tuple):
		return tuple(pitch + semitones for pitch in event)

	return event + semitones
