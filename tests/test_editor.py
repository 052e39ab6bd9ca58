import random

import pytest

import cyclochron.beat_buffer
import cyclochron.config
import cyclochron.editor

from cyclochron.symmetry import Axis


def _editor (**settings) -> cyclochron.editor.CycleEditor:

	return cyclochron.editor.CycleEditor(cyclochron.config.GeneratorSettings(**settings), rng=random.Random(5))


def _record (editor: cyclochron.editor.CycleEditor, event_name: str) -> list:

	received: list = []
	editor.on_event(event_name, lambda *args: received.append(args))

	return received


def test_new_editor_holds_rests () -> None:

	editor = _editor(position_count=12)

	assert len(editor) == 12
	assert editor.snapshot() == (False,) * 12
	assert editor.axis is Axis.ON


def test_generate_replaces_rhythm_and_emits_layout () -> None:

	editor = _editor(position_count=16)
	layouts = _record(editor, "layout")

	result = editor.generate()

	assert result.ok
	assert editor.snapshot() == result.sequence
	assert editor.axis is result.axis
	assert layouts == [(result.sequence,)]


def test_generate_failure_keeps_rhythm () -> None:

	"""An unsatisfiable generation leaves the current positions alone and reports the error."""

	editor = _editor(position_count=7, max_rest_run=2, max_active_run=2)
	editor.generate()
	before = editor.snapshot()

	editor.settings = cyclochron.config.GeneratorSettings(position_count=7, max_rest_run=1, max_active_run=0)
	errors = _record(editor, "unsatisfiable")
	layouts = _record(editor, "layout")

	result = editor.generate()

	assert not result.ok
	assert editor.snapshot() == before
	assert errors == [(result.error,)]
	assert layouts == []


def test_seeded_editors_agree () -> None:

	first = cyclochron.editor.CycleEditor(seed=11)
	second = cyclochron.editor.CycleEditor(seed=11)

	assert first.generate() == second.generate()


def test_set_count_caches_and_restores () -> None:

	editor = _editor(position_count=16)
	editor.generate()
	original = editor.snapshot()
	layouts = _record(editor, "layout")

	assert editor.set_count(5) is True
	assert len(editor) == 5
	assert editor.settings.position_count == 5

	editor.set_count(16)

	assert editor.snapshot() == original
	assert len(layouts) == 2


def test_set_count_same_value () -> None:

	editor = _editor(position_count=8)
	layouts = _record(editor, "layout")

	assert editor.set_count(8) is False
	assert layouts == []


def test_set_count_invalid_changes_nothing () -> None:

	editor = _editor(position_count=8)

	with pytest.raises(cyclochron.beat_buffer.InvalidCount):
		editor.set_count(300)

	assert len(editor) == 8
	assert editor.settings.position_count == 8


def test_set_count_wraps_rotation () -> None:

	editor = _editor(position_count=8)
	editor.rotate(1)

	assert editor.rotation.first_index == 7

	editor.set_count(4)

	assert editor.rotation.first_index == 3


def test_set_bounds_keeps_odd_cycle_solvable () -> None:

	editor = _editor(position_count=7, max_rest_run=2, max_active_run=1)
	editor.set_bounds(max_rest_run=1)

	assert editor.settings.max_rest_run == 1
	assert editor.settings.max_active_run == 2
	assert editor.generate().ok


@pytest.mark.parametrize("seed", range(6))
def test_shrinking_to_odd_count_keeps_cycle_solvable (seed: int) -> None:

	"""An odd ring with both bounds at one can never close, so resizing raises the active bound."""

	editor = cyclochron.editor.CycleEditor(
		cyclochron.config.GeneratorSettings(position_count=8, max_rest_run=1, max_active_run=1),
		rng = random.Random(seed)
	)

	assert editor.generate().ok

	editor.set_count(7)

	assert editor.settings.position_count == 7
	assert editor.settings.max_rest_run == 1
	assert editor.settings.max_active_run == 2
	assert editor.generate().ok


def test_resizing_leaves_workable_bounds_alone () -> None:

	editor = _editor(position_count=8, max_rest_run=1, max_active_run=1)

	editor.set_count(6)

	assert (editor.settings.max_rest_run, editor.settings.max_active_run) == (1, 1)

	editor.set_bounds(max_rest_run=3)
	editor.set_count(9)

	assert (editor.settings.max_rest_run, editor.settings.max_active_run) == (3, 1)


def test_toggle_emits_position_and_value () -> None:

	editor = _editor(position_count=4)
	toggles = _record(editor, "toggle")

	editor.toggle(2)
	editor.toggle(9)

	assert editor.snapshot() == (False, False, True, False)
	assert toggles == [(2, True)]


def test_invert () -> None:

	editor = _editor(position_count=4)
	editor.toggle(0)
	editor.invert()

	assert editor.snapshot() == (False, True, True, True)


def test_clear_resets_rhythm_cache_and_rotation () -> None:

	editor = _editor(position_count=8)
	editor.generate()
	editor.set_count(4)
	editor.rotate(-1)

	editor.clear()

	assert editor.snapshot() == (False,) * 4
	assert editor.buffer.cache == []
	assert editor.rotation.first_index == 0
	assert editor.axis is Axis.ON

	editor.set_count(8)

	assert editor.snapshot() == (False,) * 8


def test_rotate_and_playback_order () -> None:

	editor = _editor(position_count=4)
	rotations = _record(editor, "rotate")

	editor.rotate(-1)

	assert editor.playback_order() == [1, 2, 3, 0]
	assert rotations == [(1,)]

	editor.rotate(1)
	editor.rotate(1)

	assert editor.playback_order() == [3, 0, 1, 2]


def test_flip () -> None:

	editor = _editor(position_count=6)
	rotations = _record(editor, "rotate")

	editor.flip()

	assert editor.playback_order() == [3, 4, 5, 0, 1, 2]
	assert rotations == [(3,)]


def test_flip_odd_is_silent () -> None:

	editor = _editor(position_count=5)
	rotations = _record(editor, "rotate")

	editor.flip()

	assert editor.rotation.first_index == 0
	assert rotations == []
