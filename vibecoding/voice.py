import enum
import typing


class Voice (enum.Enum):

	"""
	The four generated voices, in the order they are bound and started.
	"""

	BASS = "bass"
	PAD = "pad"
	ARP = "arp"
	DRUMS = "drums"

	@property
	def channel (self) -> int:

		"""MIDI channel (0-indexed) this voice is sent on."""

		return VOICE_CHANNELS[self]


VOICE_CHANNELS: typing.Dict[Voice, int] = {
	Voice.BASS: 0,
	Voice.PAD: 1,
	Voice.ARP: 2,
	Voice.DRUMS: 9,
}


def parse_voice (value: typing.Union[str, Voice]) -> Voice:

	"""Accept a ``Voice`` or its name (``"bass"``, ``"Drums"``, ...) and return the enum member."""

	if isinstance(value, Voice):
		return value

	try:
		return Voice(value.strip().lower())

	except ValueError:
		raise ValueError(f"Unknown voice {value!r}. Available: {[v.value for v in Voice]}") from None
