"""Per-voice pattern generation.

Each generator is a function of the current scale, style and engine flags
(plus the shared random source) that returns a fresh :class:`Pattern`:

- **Bass** - root and fifth of the first degree of a style progression,
  placed by one of seven rhythm templates (whole notes up to 32nds). The
  engine's bass rhythm override replaces the style's template choice.
- **Pad** - one diatonic triad per measure, following a style progression
  or, with the Markov flag set, a progression walked from degree 0.
- **Arp** - one of five 16-step melodic templates on scale degrees
  0, 2, 4, 5 and 6, chosen by the style's arp tags.
- **Drums** - the selected 8-step preset, or a Euclidean rhythm at the
  live pulse/step counts. Hits carry a fixed low pitch; the live pitch
  offset is applied later, when a hit fires.
"""

import dataclasses
import logging
import random
import typing

import vibecoding.constants.midi
import vibecoding.constants.pulses
import vibecoding.engine_state
import vibecoding.exceptions
import vibecoding.markov_chain
import vibecoding.pattern
import vibecoding.sequence_utils
from vibecoding.voice import Voice


logger = logging.getLogger(__name__)


ROOT = "root"
FIFTH = "fifth"

# Length of a Markov-generated pad progression, always starting on the tonic.
MARKOV_PROGRESSION_LENGTH = 4


@dataclasses.dataclass(frozen=True)
class BassTemplate:

	"""
	A fixed bass rhythm: ``"root"``, ``"fifth"`` or a rest (None) per step.
	"""

	subdivision: int
	steps: typing.Tuple[typing.Optional[str], ...]


# Ordered from sparse to dense.
BASS_TEMPLATES: typing.Dict[str, BassTemplate] = {
	"whole": BassTemplate(
		vibecoding.constants.pulses.WHOLE,
		(ROOT,)
	),
	"half": BassTemplate(
		vibecoding.constants.pulses.HALF,
		(ROOT, FIFTH)
	),
	"quarter": BassTemplate(
		vibecoding.constants.pulses.QUARTER,
		(ROOT, ROOT, FIFTH, ROOT)
	),
	"offbeat": BassTemplate(
		vibecoding.constants.pulses.EIGHTH,
		(None, ROOT, None, ROOT, None, FIFTH, None, ROOT)
	),
	"eighth": BassTemplate(
		vibecoding.constants.pulses.EIGHTH,
		(ROOT, ROOT, FIFTH, ROOT, ROOT, ROOT, FIFTH, FIFTH)
	),
	"sixteenth": BassTemplate(
		vibecoding.constants.pulses.SIXTEENTH,
		(
			ROOT, None, ROOT, ROOT, None, ROOT, FIFTH, None,
			ROOT, None, ROOT, ROOT, None, FIFTH, ROOT, FIFTH,
		)
	),
	"thirtysecond": BassTemplate(
		vibecoding.constants.pulses.THIRTYSECOND,
		(
			ROOT, ROOT, None, ROOT, ROOT, ROOT, None, ROOT,
			FIFTH, FIFTH, None, FIFTH, ROOT, ROOT, None, ROOT,
			ROOT, ROOT, None, ROOT, ROOT, ROOT, None, ROOT,
			FIFTH, FIFTH, None, FIFTH, FIFTH, ROOT, FIFTH, ROOT,
		)
	),
}


# 16-step arp templates as scale-degree offsets (0, 2, 4, 5, 6) or rests.
ARP_TEMPLATES: typing.Dict[str, typing.Tuple[typing.Optional[int], ...]] = {
	# Ascend then descend through the arpeggio, twice per bar.
	"classic": (
		0, 2, 4, 6, 5, 4, 2, 0,
		0, 2, 4, 6, 5, 4, 2, 0,
	),
	# A slower line that climbs to the top and walks back down.
	"melodic": (
		0, None, 2, None, 4, None, 5, None,
		6, None, 5, None, 4, None, 2, None,
	),
	"stabs": (
		0, None, None, 4, None, None, 2, None,
		None, None, 0, None, None, 4, None, None,
	),
	"atmospheric": (
		0, None, None, None, None, None, 4, None,
		None, None, None, None, 6, None, None, None,
	),
	"rhythmic": (
		0, 0, None, 4, 0, None, 4, None,
		0, 0, None, 5, 0, None, 6, None,
	),
}

DEFAULT_ARP_TEMPLATE = "rhythmic"


def validate_bass_template (name: str) -> str:

	"""
	Return ``name`` if it is a known bass template.

	Raises:
		InvalidGenerationInputError: If the template does not exist.
	"""

	if name not in BASS_TEMPLATES:
		raise vibecoding.exceptions.InvalidGenerationInputError(f"Unknown bass rhythm {name!r}. Available: {list(BASS_TEMPLATES)}")

	return name


class PatternGenerator:

	"""
	Builds a fresh pattern for any voice from the engine state.
	"""

	def __init__ (self, rng: random.Random, transition_table: vibecoding.markov_chain.TransitionTable) -> None:

		"""
		Store the shared random source and the learned chord transition table.
		"""

		if not transition_table:
			raise vibecoding.exceptions.InvalidGenerationInputError("The pad generator needs a non-empty transition table")

		self.rng = rng
		self.transition_table = transition_table

		self._generators: typing.Dict[Voice, typing.Callable[[vibecoding.engine_state.EngineState], vibecoding.pattern.Pattern]] = {
			Voice.BASS: self.generate_bass,
			Voice.PAD: self.generate_pad,
			Voice.ARP: self.generate_arp,
			Voice.DRUMS: self.generate_drums,
		}


	def generate (self, voice: Voice, state: vibecoding.engine_state.EngineState) -> vibecoding.pattern.Pattern:

		"""
		Generate a new pattern for ``voice``.
		"""

		pattern = self._generators[voice](state)

		logger.debug(f"Generated {voice.value} pattern '{pattern.label}' ({len(pattern)} x {pattern.subdivision_name})")

		return pattern


	def generate_all (self, state: vibecoding.engine_state.EngineState) -> typing.Dict[Voice, vibecoding.pattern.Pattern]:

		"""
		Generate a pattern for every voice.
		"""

		return {voice: self.generate(voice, state) for voice in Voice}


	def choose_progression (self, state: vibecoding.engine_state.EngineState) -> typing.Tuple[int, ...]:

		"""
		Pick one of the style's chord progressions.
		"""

		return tuple(self.rng.choice(state.style.chord_progressions))


	def generate_bass (self, state: vibecoding.engine_state.EngineState) -> vibecoding.pattern.Pattern:

		"""
		Root/fifth bass line on the first degree of a style progression.
		"""

		progression = self.choose_progression(state)

		if state.bass_rhythm_override is not None:
			template_name = validate_bass_template(state.bass_rhythm_override)
		else:
			template_name = self.rng.choice(state.style.bass_pattern_tags)

		template = BASS_TEMPLATES[template_name]
		register = vibecoding.constants.midi.BASS_REGISTER

		root_degree = progression[0]
		pitches = {
			ROOT: state.scale.pitch(root_degree, register),
			FIFTH: state.scale.pitch((root_degree + 4) % 7, register),
		}

		events = tuple(None if step is None else pitches[step] for step in template.steps)

		return vibecoding.pattern.Pattern(
			voice = Voice.BASS,
			events = events,
			subdivision = template.subdivision,
			label = template_name,
			degrees = progression
		)


	def generate_pad (self, state: vibecoding.engine_state.EngineState) -> vibecoding.pattern.Pattern:

		"""
		One triad per measure, from a style progression or the Markov chain.
		"""

		if state.use_markov_chain:
			progression = tuple(vibecoding.markov_chain.generate(
				self.transition_table,
				start = 0,
				length = MARKOV_PROGRESSION_LENGTH,
				rng = self.rng
			))
			label = "markov"

		else:
			progression = self.choose_progression(state)
			label = "style"

		register = vibecoding.constants.midi.PAD_REGISTER
		events = tuple(state.scale.triad(degree, register) for degree in progression)

		return vibecoding.pattern.Pattern(
			voice = Voice.PAD,
			events = events,
			subdivision = vibecoding.constants.pulses.MEASURE,
			label = f"{label} {'-'.join(str(d % 7) for d in progression)}",
			degrees = progression
		)


	def generate_arp (self, state: vibecoding.engine_state.EngineState) -> vibecoding.pattern.Pattern:

		"""
		A 16th-note melodic template chosen by the style's arp tags.
		"""

		tag = self.rng.choice(state.style.arp_pattern_tags)
		template_name = tag if tag in ARP_TEMPLATES else DEFAULT_ARP_TEMPLATE
		register = vibecoding.constants.midi.ARP_REGISTER

		events = tuple(
			None if offset is None else state.scale.pitch(offset, register)
			for offset in ARP_TEMPLATES[template_name]
		)

		return vibecoding.pattern.Pattern(
			voice = Voice.ARP,
			events = events,
			subdivision = vibecoding.constants.pulses.SIXTEENTH,
			label = template_name
		)


	def generate_drums (self, state: vibecoding.engine_state.EngineState) -> vibecoding.pattern.Pattern:

		"""
		The selected drum preset, or a Euclidean rhythm when that flag is set.
		"""

		if state.use_euclidean_rhythm:
			onsets = vibecoding.sequence_utils.generate_euclidean_sequence(
				steps = state.euclidean_steps,
				pulses = state.euclidean_pulses
			)
			subdivision = vibecoding.constants.pulses.SIXTEENTH
			label = f"euclidean {state.euclidean_pulses}/{state.euclidean_steps}"

		else:
			preset = state.drum_pattern
			onsets = list(preset.onsets)
			subdivision = vibecoding.constants.pulses.EIGHTH
			label = preset.name

		pitch = vibecoding.constants.midi.DRUM_PITCH
		events = tuple(pitch if hit else None for hit in onsets)

		return vibecoding.pattern.Pattern(
			voice = Voice.DRUMS,
			events = events,
			subdivision = subdivision,
			label = label
		)
