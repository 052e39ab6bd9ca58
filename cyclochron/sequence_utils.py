import typing

import cyclochron.symmetry


def sequence_to_indices (sequence: typing.Sequence[bool]) -> typing.List[int]:

	"""Extract the indices of active positions."""

	return [i for i, active in enumerate(sequence) if active]


def rotate (sequence: typing.Sequence[bool], first_index: int) -> typing.List[bool]:

	"""Return the cycle read from ``first_index`` onward, wrapping past the end."""

	if not sequence:
		return []

	first_index %= len(sequence)

	return list(sequence[first_index:]) + list(sequence[:first_index])


def longest_circular_run (sequence: typing.Sequence[bool], active: bool) -> int:

	"""
	Length of the longest run of ``active`` values, wrapping from the last position to the first.

	A cycle made entirely of ``active`` values has a run as long as the cycle.

	Example:
		```python
		longest_circular_run([True, False, False, True, True], True)  # 3
		longest_circular_run([False, False, False], False)            # 3
		```
	"""

	length = len(sequence)

	if length == 0:
		return 0

	if all(value == active for value in sequence):
		return length

	# Start just after a position of the other value so no run is split by the wrap.
	start = next(i for i, value in enumerate(sequence) if value != active) + 1

	longest = 0
	current = 0

	for offset in range(length):

		if sequence[(start + offset) % length] == active:
			current += 1
			longest = max(longest, current)
		else:
			current = 0

	return longest


def within_run_bounds (sequence: typing.Sequence[bool], max_rest_run: int, max_active_run: int) -> bool:

	"""Whether no circular run of rests or of active positions exceeds its bound."""

	return (
		longest_circular_run(sequence, True) <= max_active_run
		and longest_circular_run(sequence, False) <= max_rest_run
	)


def is_symmetric (sequence: typing.Sequence[bool], axis: cyclochron.symmetry.Axis) -> bool:

	"""Whether every position equals its mirror image across ``axis`` through position 0."""

	length = len(sequence)

	return all(
		sequence[i] == sequence[cyclochron.symmetry.mirror_index(i, length, axis)]
		for i in range(length)
	)


def symmetry_axes (sequence: typing.Sequence[bool]) -> typing.List[float]:

	"""
	Find every axis of bilateral symmetry of the cycle.

	Each axis is reported by the point it passes through on the first half of the
	circle: a whole number for an axis through that position, a half for an axis
	through the gap after the position below it.  ``[0, 1.5]`` means one axis
	through position 0 and one between positions 1 and 2.
	"""

	length = len(sequence)
	axes: typing.List[float] = []

	# An axis through point p maps index i to 2p - i.
	for doubled in range(length):

		if all(sequence[i] == sequence[(doubled - i) % length] for i in range(length)):
			axes.append(doubled / 2)

	return axes
