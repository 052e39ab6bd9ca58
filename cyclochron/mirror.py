import dataclasses
import logging
import random
import typing

import cyclochron.beat_buffer
import cyclochron.rhythm
import cyclochron.symmetry


logger = logging.getLogger(__name__)


@dataclasses.dataclass (frozen=True)
class GenerationResult:

	"""
	Outcome of one ``generate()`` call.

	Exactly one of ``sequence`` and ``error`` is set.  ``axis`` records the
	placement that was chosen, so a display can draw the line of symmetry.
	"""

	axis: cyclochron.symmetry.Axis
	sequence: typing.Optional[typing.Tuple[bool, ...]] = None
	error: typing.Optional[cyclochron.rhythm.UnsatisfiableConstraints] = None


	@property
	def ok (self) -> bool:

		return self.error is None


def reflect (half: typing.Sequence[bool], position_count: int, axis: cyclochron.symmetry.Axis) -> typing.List[bool]:

	"""Complete a cycle from its directly built half.

	``half`` holds positions ``0 .. position_count // 2`` for odd counts and for
	even on-axis counts (the opposite axis position included), or positions
	``0 .. position_count // 2 - 1`` for even off-axis counts.  Every remaining
	position copies its mirror image.
	"""

	half_count = position_count // 2
	odd = position_count % 2
	off = 1 if axis is cyclochron.symmetry.Axis.OFF else 0

	full: typing.List[typing.Optional[bool]] = [None] * position_count
	full[:len(half)] = half

	for i in range(half_count):

		index = half_count + i + odd

		# The opposite axis position of an even on-axis cycle is already built.
		if full[index] is not None:
			continue

		full[index] = full[half_count - i - off]

	return [bool(value) for value in full]


def generate (
	position_count: int,
	max_rest_run: int,
	max_active_run: int,
	allow_off_axis_symmetry: bool = True,
	rng: typing.Optional[random.Random] = None
) -> GenerationResult:

	"""Generate a symmetric rhythm whose circular runs stay within the given bounds.

	Parameters:
		position_count: Number of positions on the cycle (2-256).
		max_rest_run: Longest permitted run of rests, wrapping around the cycle.
		max_active_run: Longest permitted run of active positions, wrapping around.
		allow_off_axis_symmetry: Allow the axis to fall between positions when the
			count is even.
		rng: Random source (anything with ``random()``).  Pass a seeded
			``random.Random`` for repeatable results.

	Returns:
		A ``GenerationResult`` holding the sequence, or the
		``UnsatisfiableConstraints`` error when the chosen path has no valid
		value at some seam.  Unsatisfiable parameters are reported, never raised.

	Example:
		```python
		result = cyclochron.mirror.generate(16, max_rest_run=2, max_active_run=2, rng=random.Random(7))

		if result.ok:
			print("".join("x" if active else "." for active in result.sequence))
		```
	"""

	cyclochron.beat_buffer.check_count(position_count)

	if max_rest_run < 0 or max_active_run < 0:
		raise ValueError(f"Run bounds cannot be negative (rest {max_rest_run}, active {max_active_run})")

	if rng is None:
		rng = random.Random()

	axis = cyclochron.symmetry.select_axis(position_count, max_rest_run, max_active_run, allow_off_axis_symmetry, rng)

	half_count = position_count // 2

	try:

		if position_count % 2:
			half = cyclochron.rhythm.generate_odd_half(half_count + 1, max_rest_run, max_active_run, rng)

		elif axis is cyclochron.symmetry.Axis.ON:
			half = cyclochron.rhythm.generate_even_on_axis_half(half_count, max_rest_run, max_active_run, rng)

		else:
			half = cyclochron.rhythm.generate_even_off_axis_half(half_count, max_rest_run, max_active_run, rng)

	except cyclochron.rhythm.UnsatisfiableConstraints as error:
		logger.info(f"Generation failed for {position_count} positions ({axis.value}-axis): {error}")
		return GenerationResult(axis=axis, error=error)

	sequence = tuple(reflect(half, position_count, axis))

	logger.debug(f"Generated {position_count} positions ({axis.value}-axis), {sum(sequence)} active")

	return GenerationResult(axis=axis, sequence=sequence)
