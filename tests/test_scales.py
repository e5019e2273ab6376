import unittest

import vibecoding.exceptions
import vibecoding.scales


class ResolveScaleTests (unittest.TestCase):

	"""
	Tests for turning scale names into scales.
	"""

	def test_a_minor (self) -> None:

		scale = vibecoding.scales.resolve_scale("A minor")

		self.assertEqual(scale.name, "A minor")
		self.assertEqual(scale.notes, ["A", "B", "C", "D", "E", "F", "G"])
		self.assertEqual(scale.pitch_classes, (9, 11, 0, 2, 4, 5, 7))


	def test_name_variants (self) -> None:

		"""
		Case, separators and shorthand all resolve to the same scale.
		"""

		expected = vibecoding.scales.resolve_scale("A minor").pitch_classes

		for name in ("a minor", "A-minor", "a_aeolian", "Am", "  A   min "):
			self.assertEqual(vibecoding.scales.resolve_scale(name).pitch_classes, expected, name)


	def test_bare_tonic_is_major (self) -> None:

		scale = vibecoding.scales.resolve_scale("C")

		self.assertEqual(scale.name, "C major")
		self.assertEqual(scale.notes, ["C", "D", "E", "F", "G", "A", "B"])


	def test_flat_tonic_spells_with_flats (self) -> None:

		scale = vibecoding.scales.resolve_scale("Bb mixolydian")

		self.assertEqual(scale.notes, ["Bb", "C", "D", "Eb", "F", "G", "Ab"])


	def test_multi_word_mode (self) -> None:

		scale = vibecoding.scales.resolve_scale("E harmonic minor")

		self.assertEqual(scale.pitch_classes, (4, 6, 7, 9, 11, 0, 3))


	def test_unknown_mode_raises (self) -> None:

		with self.assertRaises(vibecoding.exceptions.UnknownScaleError):
			vibecoding.scales.resolve_scale("C bebop")


	def test_unknown_tonic_raises (self) -> None:

		with self.assertRaises(vibecoding.exceptions.UnknownScaleError):
			vibecoding.scales.resolve_scale("H minor")


class ScaleTests (unittest.TestCase):

	"""
	Tests for degree lookups, pitches and triads.
	"""

	def setUp (self) -> None:

		self.scale = vibecoding.scales.resolve_scale("A minor")


	def test_degrees_wrap_modulo_seven (self) -> None:

		self.assertEqual(self.scale.pitch_class(7), self.scale.pitch_class(0))
		self.assertEqual(self.scale.pitch_class(-1), self.scale.pitch_class(6))
		self.assertEqual(self.scale.pitch_class(100), self.scale.pitch_class(100 % 7))


	def test_pitch_uses_c4_equals_60 (self) -> None:

		self.assertEqual(vibecoding.scales.resolve_scale("C major").pitch(0, 4), 60)
		self.assertEqual(self.scale.pitch(0, 3), 57)
		self.assertEqual(self.scale.pitch(0, 2), 45)


	def test_triad_is_voiced_upwards (self) -> None:

		"""
		Chord tones below the root move up an octave.
		"""

		self.assertEqual(self.scale.triad(0, 4), (69, 72, 76))
		self.assertEqual(self.scale.triad(2, 4), (60, 64, 67))


	def test_every_triad_ascends_within_an_octave_and_a_half (self) -> None:

		for degree in range(-7, 14):
			root, third, fifth = self.scale.triad(degree, 4)

			self.assertLess(root, third)
			self.assertLess(third, fifth)
			self.assertLess(fifth - root, 12)
			self.assertTrue(all(self.scale.contains(n) for n in (root, third, fifth)))


	def test_contains (self) -> None:

		self.assertTrue(self.scale.contains(69))
		self.assertFalse(self.scale.contains(70))


	def test_scale_needs_seven_pitch_classes (self) -> None:

		with self.assertRaises(ValueError):
			vibecoding.scales.Scale(name="broken", tonic=0, pitch_classes=(0, 2, 4))


	def test_note_name (self) -> None:

		self.assertEqual(vibecoding.scales.note_name(57), "A3")
		self.assertEqual(vibecoding.scales.note_name(70, use_flats=True), "Bb4")
