import pytest

import cyclochron.rotation


def test_clockwise_step_moves_first_beat_back () -> None:

	rotation = cyclochron.rotation.CycleRotation()
	rotation.step(1, 8)

	assert rotation.first_index == 7
	assert rotation.rotation_degrees == pytest.approx(45)
	assert rotation.snap_degrees == pytest.approx(45)


def test_counter_clockwise_step () -> None:

	rotation = cyclochron.rotation.CycleRotation()
	rotation.step(-1, 8)
	rotation.step(-1, 8)

	assert rotation.first_index == 2
	assert rotation.rotation_degrees == pytest.approx(-90)


def test_step_round_trip () -> None:

	rotation = cyclochron.rotation.CycleRotation()

	for _ in range(5):
		rotation.step(1, 12)

	for _ in range(5):
		rotation.step(-1, 12)

	assert rotation.first_index == 0
	assert rotation.rotation_degrees == pytest.approx(0)


def test_flip_even_cycle () -> None:

	"""A half turn moves the first beat to the opposite position."""

	rotation = cyclochron.rotation.CycleRotation()

	assert rotation.flip(8) is True
	assert rotation.first_index == 4
	assert rotation.rotation_degrees == pytest.approx(180)

	rotation.flip(8)

	assert rotation.first_index == 0


def test_flip_wraps_degrees () -> None:

	rotation = cyclochron.rotation.CycleRotation()

	for _ in range(3):
		rotation.flip(4)

	assert rotation.rotation_degrees == pytest.approx(180)
	assert rotation.first_index == 2


def test_flip_odd_cycle_is_ignored () -> None:

	rotation = cyclochron.rotation.CycleRotation()

	assert rotation.flip(7) is False
	assert rotation.first_index == 0
	assert rotation.rotation_degrees == 0


def test_drag_snaps_after_half_a_step () -> None:

	"""The first beat only moves once the pointer passes halfway to the next step."""

	rotation = cyclochron.rotation.CycleRotation()
	rotation.press(0)

	rotation.drag(20, 8)
	assert rotation.first_index == 0

	rotation.drag(30, 8)
	assert rotation.first_index == 7
	assert rotation.snap_degrees == pytest.approx(45)
	assert rotation.rotation_degrees == pytest.approx(30)

	rotation.release()
	assert rotation.rotation_degrees == pytest.approx(45)


def test_drag_counter_clockwise () -> None:

	rotation = cyclochron.rotation.CycleRotation()
	rotation.press(100)
	rotation.drag(75, 8)

	assert rotation.first_index == 1
	assert rotation.snap_degrees == pytest.approx(-45)


def test_drag_without_press_only_records_pointer () -> None:

	rotation = cyclochron.rotation.CycleRotation()
	rotation.drag(90, 8)

	assert rotation.first_index == 0
	assert rotation.rotation_degrees == 0


def test_fit_wraps_first_index () -> None:

	rotation = cyclochron.rotation.CycleRotation(first_index=7)
	rotation.fit(4)

	assert rotation.first_index == 3


def test_reset () -> None:

	rotation = cyclochron.rotation.CycleRotation()
	rotation.step(1, 8)
	rotation.reset()

	assert rotation == cyclochron.rotation.CycleRotation()
