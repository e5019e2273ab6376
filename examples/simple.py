import logging

import vibecoding
from vibecoding.voice import Voice

logging.basicConfig(level=logging.INFO)

engine = vibecoding.Engine(
	output=vibecoding.MidiOutput(),
	scale="A minor",
	style="techno",
	seed=7
)

# Quieter pad, drums a little hotter.
engine.set_stem_volume(Voice.PAD, 0.5)
engine.set_stem_volume(Voice.DRUMS, 0.9)

# Five kicks spread over sixteen steps.
engine.set_euclidean_params(pulses=5, steps=16)
engine.toggle_euclidean_rhythm(True)

if __name__ == "__main__":

	engine.play()
