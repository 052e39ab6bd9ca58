"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127). The cycle plays every active
position at a single fixed velocity.
"""

DEFAULT_VELOCITY = 127

MIN_VELOCITY = 0
MAX_VELOCITY = 127
