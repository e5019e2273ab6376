import logging
import sys

import vibecoding

logging.basicConfig(level=logging.INFO)

style = sys.argv[1] if len(sys.argv) > 1 else "house"

engine = vibecoding.Engine(
	output=vibecoding.MidiOutput(open_device=False),
	scale="D dorian",
	style=style,
	seed=3
)

engine.toggle_markov_chain(True)

if __name__ == "__main__":

	engine.render(bars=16, filename=f"{style}.mid")
