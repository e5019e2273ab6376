"""Scale resolution and pitch-class utilities.

Maps a scale name such as ``"A minor"``, ``"F# dorian"`` or ``"C"`` to a
:class:`Scale` of exactly seven pitch classes. Every degree lookup is
reduced modulo 7 (negative degrees wrap too), so a progression can never
index outside the scale.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g. `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `MODE_INTERVALS`: Maps mode names to their seven semitone offsets from the tonic

Registers are plain integers in the MIDI octave convention (C4 = 60), so
the note for pitch class ``pc`` in register ``r`` is ``12 * (r + 1) + pc``.
"""

import dataclasses
import logging
import re
import typing

import vibecoding.exceptions


logger = logging.getLogger(__name__)


DEGREES_PER_SCALE = 7


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

SHARP_NAMES: typing.List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NAMES: typing.List[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]


MODE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 2, 4, 5, 7, 9, 11],
	"ionian": [0, 2, 4, 5, 7, 9, 11],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"aeolian": [0, 2, 3, 5, 7, 8, 10],
	"locrian": [0, 1, 3, 5, 6, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
}

MODE_ALIASES: typing.Dict[str, str] = {
	"": "major",
	"maj": "major",
	"m": "minor",
	"min": "minor",
	"natural_minor": "minor",
	"harmonic": "harmonic_minor",
	"melodic": "melodic_minor",
}

_SCALE_NAME_RE = re.compile(r"^\s*([A-Ga-g])([#b]?)[\s_-]*(.*?)\s*$")


@dataclasses.dataclass(frozen=True)
class Scale:

	"""
	An ordered set of seven pitch classes, indexed by scale degree.
	"""

	name: str
	tonic: int
	pitch_classes: typing.Tuple[int, ...]
	use_flats: bool = False

	def __post_init__ (self) -> None:

		if len(self.pitch_classes) != DEGREES_PER_SCALE:
			raise ValueError(f"A scale needs exactly {DEGREES_PER_SCALE} pitch classes (got {len(self.pitch_classes)})")

	@property
	def notes (self) -> typing.List[str]:

		"""Pitch-class symbols for degrees 0-6 (e.g. ``["A", "B", "C", "D", "E", "F", "G"]``)."""

		names = FLAT_NAMES if self.use_flats else SHARP_NAMES
		return [names[pc] for pc in self.pitch_classes]

	def pitch_class (self, degree: int) -> int:

		"""Return the pitch class (0-11) of a scale degree, reduced modulo 7."""

		return self.pitch_classes[degree % DEGREES_PER_SCALE]

	def pitch (self, degree: int, register: int) -> int:

		"""Return the MIDI note of a scale degree in the given register (C4 = 60)."""

		return 12 * (register + 1) + self.pitch_class(degree)

	def triad (self, degree: int, register: int) -> typing.Tuple[int, int, int]:

		"""
		Build the diatonic triad on a degree, voiced upwards from its root.

		Third = degree + 2 and fifth = degree + 4 (both mod 7). A chord tone
		whose pitch class sits below the root is placed in ``register + 1``.
		"""

		root = self.pitch(degree, register)
		tones = [root]

		for offset in (2, 4):
			tone = self.pitch(degree + offset, register)
			if tone <= root:
				tone = self.pitch(degree + offset, register + 1)
			tones.append(tone)

		return (tones[0], tones[1], tones[2])

	def contains (self, midi_note: int) -> bool:

		"""Return True if the MIDI note's pitch class belongs to this scale."""

		return midi_note % 12 in self.pitch_classes


def key_name_to_pc (key_name: str) -> int:

	"""
	Validate a note name and return its pitch class (0-11).
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise vibecoding.exceptions.UnknownScaleError(f"Unknown note name {key_name!r}")

	return NOTE_NAME_TO_PC[key_name]


def resolve_scale (name: str) -> Scale:

	"""
	Resolve a scale name to a :class:`Scale`.

	Accepts ``"<tonic> <mode>"`` in any case with a space, dash or underscore
	separator, ``"Am"``-style shorthand, or a bare tonic (major).

	Example:
		```python
		resolve_scale("A minor").notes     # → ["A", "B", "C", "D", "E", "F", "G"]
		resolve_scale("bb-mixolydian").notes[0]  # → "Bb"
		```

	Raises:
		UnknownScaleError: If the tonic or mode is not recognised.
	"""

	match = _SCALE_NAME_RE.match(name)

	if match is None:
		raise vibecoding.exceptions.UnknownScaleError(f"Cannot parse scale name {name!r}")

	letter, accidental, mode_text = match.groups()
	tonic_name = letter.upper() + accidental
	tonic = key_name_to_pc(tonic_name)

	mode = re.sub(r"[\s-]+", "_", mode_text.strip().lower())
	mode = MODE_ALIASES.get(mode, mode)

	if mode not in MODE_INTERVALS:
		raise vibecoding.exceptions.UnknownScaleError(f"Unknown mode {mode_text!r} in scale {name!r}. Available: {sorted(MODE_INTERVALS)}")

	return Scale(
		name = f"{tonic_name} {mode}",
		tonic = tonic,
		pitch_classes = tuple((tonic + i) % 12 for i in MODE_INTERVALS[mode]),
		use_flats = accidental == "b" or tonic_name == "F"
	)


def note_name (midi_note: int, use_flats: bool = False) -> str:

	"""Return a readable name for a MIDI note, e.g. ``57`` → ``"A3"``."""

	names = FLAT_NAMES if use_flats else SHARP_NAMES
	return f"{names[midi_note % 12]}{midi_note // 12 - 1}"
