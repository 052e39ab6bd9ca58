
"""
Cyclochron - a circular step sequencer with a symmetric rhythm generator.

A cycle is a ring of positions, each either active (a note) or a rest.
Cyclochron generates rhythms for that ring that read the same in both
directions around an axis, while keeping every run of consecutive actives
and of consecutive rests - measured all the way round, across the wrap -
within the bounds you give it.  Only about half the ring is chosen; the
rest is its mirror image.

What it provides:

- **Symmetric generation.** ``generate(16, max_rest_run=2, max_active_run=2)``
  returns a ``GenerationResult`` holding the rhythm, or an
  ``UnsatisfiableConstraints`` error when the bounds leave no symmetric
  solution.  The axis passes through position 0 or, for even counts, may
  fall between positions.
- **Editing with memory.** ``CycleEditor`` owns the positions; shrinking the
  ring caches removed positions so growing it again restores them.  Toggle,
  invert, clear, and rotate the first beat.
- **Playback.** ``Session`` plays the ring as sixteenth notes over MIDI
  (via ``mido``), with optional MIDI clock, a live terminal view, and
  single-key control.
- **Deterministic randomness.** Pass ``seed=`` or any ``random.Random`` and
  every generation is repeatable.

Minimal example:

    ```python
    import cyclochron

    session = cyclochron.Session(seed=3)
    session.editor.generate()
    session.display()
    session.hotkeys()
    session.play()
    ```

Package-level exports: ``CycleEditor``, ``GenerationResult``, ``Session``,
``Settings``, ``UnsatisfiableConstraints``, ``InvalidCount``, ``generate``.
"""

import cyclochron.beat_buffer
import cyclochron.config
import cyclochron.editor
import cyclochron.mirror
import cyclochron.rhythm
import cyclochron.session


CycleEditor = cyclochron.editor.CycleEditor
GenerationResult = cyclochron.mirror.GenerationResult
InvalidCount = cyclochron.beat_buffer.InvalidCount
Session = cyclochron.session.Session
Settings = cyclochron.config.Settings
UnsatisfiableConstraints = cyclochron.rhythm.UnsatisfiableConstraints
generate = cyclochron.mirror.generate
