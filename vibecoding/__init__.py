"""
VibeCoding - a procedural music engine for Python.

VibeCoding generates four looping voices (bass, pad, arpeggio and drums)
from a scale, a style preset and a handful of live parameters, and keeps
them phase-locked to one shared clock while they are regenerated, muted,
faded and re-voiced on the fly. It produces pure MIDI: plug it into a
hardware synth, a DAW, or render straight to a ``.mid`` file.

- **Styles.** Seven presets (techno, house, trance, lofi, ambient,
  synthwave, dnb), each with a tempo range, chord progressions, bass and
  arp rhythm templates and compatible drum patterns.
- **Euclidean drums.** Bjorklund's algorithm spreads any number of hits
  as evenly as possible over any number of steps.
- **Markov pads.** Chord progressions walked through transition
  probabilities learned from every style's progressions.
- **Phase-locked transport.** Every voice steps on one 24 PPQN grid, so
  patterns of different lengths and subdivisions always realign.
- **Click-free mixing.** Fades and volume changes are single,
  cancel-and-replace gain ramps that never stack.

Minimal example:

	```python
	import vibecoding

	engine = vibecoding.Engine(
		output = vibecoding.MidiOutput(device_name="Scarlett 2i4 USB"),
		scale = "A minor",
		style = "techno",
	)

	engine.play()
	```

Render offline instead of playing:

	```python
	engine = vibecoding.Engine(output=vibecoding.MidiOutput(open_device=False), seed=1)
	engine.render(bars=32, filename="techno.mid")
	```

Package-level exports: ``Engine``, ``StyleSelection``, ``MidiOutput``,
``NullOutput``, ``Voice``, ``Pattern``, ``resolve_scale``, ``get_style``,
``generate_euclidean_sequence``, and the exception classes.
"""

import vibecoding.engine
import vibecoding.exceptions
import vibecoding.output
import vibecoding.pattern
import vibecoding.scales
import vibecoding.sequence_utils
import vibecoding.styles
import vibecoding.voice


Engine = vibecoding.engine.Engine
StyleSelection = vibecoding.engine.StyleSelection
MidiOutput = vibecoding.output.MidiOutput
NullOutput = vibecoding.output.NullOutput
Pattern = vibecoding.pattern.Pattern
Voice = vibecoding.voice.Voice
resolve_scale = vibecoding.scales.resolve_scale
get_style = vibecoding.styles.get_style
generate_euclidean_sequence = vibecoding.sequence_utils.generate_euclidean_sequence

VibeCodingError = vibecoding.exceptions.VibeCodingError
UnknownStyleError = vibecoding.exceptions.UnknownStyleError
UnknownScaleError = vibecoding.exceptions.UnknownScaleError
InvalidGenerationInputError = vibecoding.exceptions.InvalidGenerationInputError
SchedulingConflictError = vibecoding.exceptions.SchedulingConflictError
