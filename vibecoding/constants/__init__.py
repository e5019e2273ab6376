"""Constants for VibeCoding.

- ``vibecoding.constants.pulses`` - Pulse-based timing used by the clock and every pattern subdivision
- ``vibecoding.constants.midi`` - Registers, channels, drum pitch and velocity defaults for MIDI output

Pulse constants are re-exported here so ``vibecoding.constants.PULSES_PER_BEAT``
works without the sub-module import.
"""

PULSES_PER_BEAT = 24
BEATS_PER_BAR = 4
PULSES_PER_BAR = PULSES_PER_BEAT * BEATS_PER_BAR
