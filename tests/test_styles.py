import pytest

import vibecoding.exceptions
import vibecoding.pattern_generator
import vibecoding.styles


def test_catalog_has_seven_styles () -> None:

	assert vibecoding.styles.style_names() == ["techno", "house", "trance", "lofi", "ambient", "synthwave", "dnb"]


def test_techno_preset () -> None:

	techno = vibecoding.styles.get_style("techno")

	assert techno.tempo_range == (125, 135)
	assert set(techno.drum_pattern_names()) == {"4-on-Floor", "1, 2, 3&, 4"}


def test_get_style_is_case_insensitive () -> None:

	assert vibecoding.styles.get_style("  LoFi ") is vibecoding.styles.STYLES["lofi"]


def test_unknown_style_raises () -> None:

	with pytest.raises(vibecoding.exceptions.UnknownStyleError):
		vibecoding.styles.get_style("polka")


def test_unknown_style_is_a_value_error () -> None:

	with pytest.raises(ValueError):
		vibecoding.styles.get_style("polka")


def test_every_style_is_well_formed () -> None:

	"""
	Progressions have at least two degrees and every tag and drum index resolves.
	"""

	for style in vibecoding.styles.STYLES.values():

		low, high = style.tempo_range
		assert 0 < low <= high

		assert style.chord_progressions
		for progression in style.chord_progressions:
			assert len(progression) >= 2

		for tag in style.bass_pattern_tags:
			assert tag in vibecoding.pattern_generator.BASS_TEMPLATES

		for tag in style.arp_pattern_tags:
			assert tag in vibecoding.pattern_generator.ARP_TEMPLATES

		assert style.compatible_drum_patterns
		for index in style.compatible_drum_patterns:
			assert 0 <= index < len(vibecoding.styles.DRUM_PATTERNS)


def test_drum_presets_are_one_bar_of_eighths () -> None:

	for preset in vibecoding.styles.DRUM_PATTERNS:
		assert len(preset.onsets) == 8
		assert set(preset.onsets) <= {0, 1}
		assert sum(preset.onsets) > 0


def test_drum_pattern_lookup_wraps () -> None:

	count = len(vibecoding.styles.DRUM_PATTERNS)

	assert vibecoding.styles.get_drum_pattern(count).name == "4-on-Floor"
	assert vibecoding.styles.get_drum_pattern(1).name == "1, 2, 3&, 4"


def test_training_corpus_contains_every_progression () -> None:

	corpus = vibecoding.styles.training_corpus()
	expected = sum(len(style.chord_progressions) for style in vibecoding.styles.STYLES.values())

	assert len(corpus) == expected
	assert (0, 0, 5, 6) in corpus


def test_styles_are_immutable () -> None:

	techno = vibecoding.styles.get_style("techno")

	with pytest.raises(AttributeError):
		techno.tempo_range = (1, 2)  # type: ignore[misc]
