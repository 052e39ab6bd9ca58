"""Pulse-based MIDI timing constants.

The sequencer uses **24 pulses per quarter note** (PPQN = 24) as its internal
time base, which is also the rate of MIDI timing clock messages. One cycle
position is a sixteenth note, so every step is followed by six clock ticks.
"""

MIDI_QUARTER_NOTE = 24
