"""MIDI output constants.

Registers use the MIDI octave convention where **C4 = 60** (Middle C), so the
note for pitch class ``pc`` in register ``r`` is ``12 * (r + 1) + pc``.
"""

# Registers (integer octaves) for each generated voice
BASS_REGISTER = 2
PAD_REGISTER = 4
ARP_REGISTER = 5

# Fixed drum pitch (C2 - GM "Bass Drum 1"); the live offset is added at trigger time
DRUM_PITCH = 36

# Velocity
DEFAULT_VELOCITY = 100
DEFAULT_CHORD_VELOCITY = 90
MIN_VELOCITY = 0
MAX_VELOCITY = 127

MIN_NOTE = 0
MAX_NOTE = 127

# Channel volume controller
CC_CHANNEL_VOLUME = 7
CC_ALL_SOUND_OFF = 120
CC_ALL_NOTES_OFF = 123

# Fraction of a step a note sounds for before its note_off
DEFAULT_GATE = 0.9
