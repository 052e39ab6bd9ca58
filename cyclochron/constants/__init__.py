"""Constants for Cyclochron.

This package contains:

- ``cyclochron.constants.pulses`` - Pulse-based MIDI timing (internal engine use)
- ``cyclochron.constants.velocity`` - MIDI velocity constants

Position-count limits and the step length are defined here because every
layer (buffer, generator, transport) shares them.
"""

# A cycle must have at least two positions to have an axis of symmetry.
MIN_POSITION_COUNT = 2
MAX_POSITION_COUNT = 256

# Each position on the cycle lasts one sixteenth note.
PULSES_PER_STEP = 6
STEPS_PER_BEAT = 4
