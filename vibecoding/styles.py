"""Style presets and the drum-pattern table.

A :class:`Style` bundles a tempo range, candidate chord progressions
(scale-degree sequences), bass and arp template tags, and the indices of
the drum presets that suit it. Styles and drum presets are immutable.

The progressions of every style together form the fixed training corpus
for the pad voice's Markov chain (:func:`training_corpus`).
"""

import dataclasses
import typing

import vibecoding.exceptions


@dataclasses.dataclass(frozen=True)
class DrumPatternPreset:

	"""
	A named, fixed one-bar onset sequence (8 eighth-note steps).
	"""

	name: str
	onsets: typing.Tuple[int, ...]


@dataclasses.dataclass(frozen=True)
class Style:

	"""
	A named generation preset.
	"""

	name: str
	tempo_range: typing.Tuple[int, int]
	chord_progressions: typing.Tuple[typing.Tuple[int, ...], ...]
	bass_pattern_tags: typing.Tuple[str, ...]
	arp_pattern_tags: typing.Tuple[str, ...]
	compatible_drum_patterns: typing.Tuple[int, ...]

	def drum_pattern_names (self) -> typing.List[str]:

		"""Names of this style's compatible drum presets."""

		return [DRUM_PATTERNS[i].name for i in self.compatible_drum_patterns]


DRUM_PATTERNS: typing.Tuple[DrumPatternPreset, ...] = (
	DrumPatternPreset("4-on-Floor",   (1, 0, 1, 0, 1, 0, 1, 0)),
	DrumPatternPreset("1, 2, 3&, 4",  (1, 0, 1, 0, 1, 1, 1, 0)),
	DrumPatternPreset("Half-Time",    (1, 0, 0, 0, 0, 0, 1, 0)),
	DrumPatternPreset("Breakbeat",    (1, 0, 0, 1, 0, 0, 1, 0)),
	DrumPatternPreset("Offbeat",      (0, 1, 0, 1, 0, 1, 0, 1)),
	DrumPatternPreset("Boom Bap",     (1, 0, 0, 0, 0, 1, 1, 0)),
	DrumPatternPreset("Gallop",       (1, 0, 1, 1, 1, 0, 1, 1)),
	DrumPatternPreset("Sparse",       (1, 0, 0, 0, 1, 0, 0, 0)),
)


def _drum_indices (*names: str) -> typing.Tuple[int, ...]:

	"""Map preset names to their indices in :data:`DRUM_PATTERNS`."""

	lookup = {preset.name: i for i, preset in enumerate(DRUM_PATTERNS)}
	return tuple(lookup[name] for name in names)


STYLES: typing.Dict[str, Style] = {
	"techno": Style(
		name = "techno",
		tempo_range = (125, 135),
		chord_progressions = (
			(0, 0, 5, 6),
			(0, 3, 0, 4),
			(0, 5, 3, 4),
		),
		bass_pattern_tags = ("offbeat", "sixteenth", "eighth"),
		arp_pattern_tags = ("rhythmic", "stabs"),
		compatible_drum_patterns = _drum_indices("4-on-Floor", "1, 2, 3&, 4"),
	),
	"house": Style(
		name = "house",
		tempo_range = (118, 126),
		chord_progressions = (
			(0, 5, 3, 4),
			(1, 4, 0, 0),
			(0, 3, 5, 4),
		),
		bass_pattern_tags = ("offbeat", "eighth", "quarter"),
		arp_pattern_tags = ("classic", "stabs", "rhythmic"),
		compatible_drum_patterns = _drum_indices("4-on-Floor", "Offbeat"),
	),
	"trance": Style(
		name = "trance",
		tempo_range = (136, 142),
		chord_progressions = (
			(0, 5, 2, 6),
			(5, 3, 0, 4),
			(0, 6, 5, 6),
		),
		bass_pattern_tags = ("offbeat", "sixteenth", "thirtysecond"),
		arp_pattern_tags = ("classic", "melodic"),
		compatible_drum_patterns = _drum_indices("4-on-Floor", "Gallop"),
	),
	"lofi": Style(
		name = "lofi",
		tempo_range = (70, 90),
		chord_progressions = (
			(1, 4, 0, 5),
			(3, 2, 1, 0),
			(0, 5, 1, 4),
		),
		bass_pattern_tags = ("quarter", "half", "eighth"),
		arp_pattern_tags = ("melodic", "atmospheric"),
		compatible_drum_patterns = _drum_indices("Boom Bap", "Half-Time"),
	),
	"ambient": Style(
		name = "ambient",
		tempo_range = (60, 80),
		chord_progressions = (
			(0, 3, 0, 3),
			(0, 5, 3, 0),
			(3, 4, 0, 0),
		),
		bass_pattern_tags = ("whole", "half"),
		arp_pattern_tags = ("atmospheric",),
		compatible_drum_patterns = _drum_indices("Sparse", "Half-Time"),
	),
	"synthwave": Style(
		name = "synthwave",
		tempo_range = (90, 110),
		chord_progressions = (
			(0, 5, 3, 4),
			(5, 3, 0, 4),
			(0, 2, 5, 4),
		),
		bass_pattern_tags = ("eighth", "sixteenth"),
		arp_pattern_tags = ("classic", "melodic", "rhythmic"),
		compatible_drum_patterns = _drum_indices("1, 2, 3&, 4", "4-on-Floor"),
	),
	"dnb": Style(
		name = "dnb",
		tempo_range = (165, 175),
		chord_progressions = (
			(0, 5, 6, 4),
			(0, 0, 3, 4),
			(5, 6, 0, 0),
		),
		bass_pattern_tags = ("half", "sixteenth", "thirtysecond"),
		arp_pattern_tags = ("stabs", "atmospheric"),
		compatible_drum_patterns = _drum_indices("Breakbeat", "Half-Time"),
	),
}


def style_names () -> typing.List[str]:

	"""Return the names of every cataloged style."""

	return list(STYLES)


def get_style (name: str) -> Style:

	"""
	Look up a style by name (case-insensitive).

	Raises:
		UnknownStyleError: If the name is not cataloged.
	"""

	key = name.strip().lower()

	if key not in STYLES:
		raise vibecoding.exceptions.UnknownStyleError(f"Unknown style {name!r}. Available: {style_names()}")

	return STYLES[key]


def get_drum_pattern (index: int) -> DrumPatternPreset:

	"""Return the drum preset at ``index``, wrapping modulo the table size."""

	return DRUM_PATTERNS[index % len(DRUM_PATTERNS)]


def training_corpus () -> typing.List[typing.Tuple[int, ...]]:

	"""Return every style's chord progressions as one training corpus."""

	return [progression for style in STYLES.values() for progression in style.chord_progressions]
