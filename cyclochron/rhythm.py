"""Half-sequence generators for symmetric, run-constrained rhythms.

Only about half of the cycle is chosen directly; the rest is its reflection.
That makes the positions next to an axis special: a run that touches an axis
continues into its own mirror image, so its true length is roughly double what
the built half shows.  These positions are the *seams*.

Each generator builds its half one position at a time and asks two questions
of every position: would an active value keep the longest active run within
``max_active_run``, and would a rest keep the longest rest run within
``max_rest_run``?  If both are fine a coin decides; if only one is fine it is
taken; if neither is, the parameters have no symmetric solution along this
path and ``UnsatisfiableConstraints`` is raised.  There is no backtracking.

Run lengths are literal: a bound of 3 allows three consecutive actives (or
rests) and no more, and a bound of 0 forbids that value entirely.  A cycle
whose positions are all the same has a run as long as the cycle.
"""

import enum
import logging
import random
import typing


logger = logging.getLogger(__name__)


class Seam (enum.Enum):

	"""What lies beyond the end of a built half."""

	NONE = "none"
	POSITION = "position"	# the axis passes through the end position itself
	GAP = "gap"				# the axis passes between the end position and its mirror


class UnsatisfiableConstraints (ValueError):

	"""
	Raised when neither an active nor a rest value fits at some position.
	"""

	def __init__ (
		self,
		max_rest_run: int,
		max_active_run: int,
		position: int,
		projected_active_run: int,
		projected_rest_run: int
	) -> None:

		self.max_rest_run = max_rest_run
		self.max_active_run = max_active_run
		self.position = position
		self.projected_active_run = projected_active_run
		self.projected_rest_run = projected_rest_run

		super().__init__(
			f"No symmetric rhythm fits at position {position}: an active beat would make a run of "
			f"{projected_active_run} (max {max_active_run}) and a rest a run of "
			f"{projected_rest_run} (max {max_rest_run})"
		)


def coin_flip (rng: random.Random) -> bool:

	"""Unweighted coin: ``True`` with probability 0.5."""

	return rng.random() < 0.5


def trailing_run (committed: typing.Sequence[bool], active: bool) -> int:

	"""Count how many values at the end of ``committed`` equal ``active``."""

	count = 0

	for value in reversed(committed):
		if value != active:
			break
		count += 1

	return count


def projected_run (committed: typing.Sequence[bool], active: bool, opening: Seam) -> int:

	"""Length of the run that would end at the next position if it were ``active``.

	``committed`` is the half built so far, in build order.  When the run stretches
	all the way back to the first built position it also continues through the
	opening seam into its reflection: doubled across a gap, or doubled less the
	shared position when the axis passes through the first position.

	With an empty ``committed`` this is the seed rule: a first position beside a
	gap starts a run of two, a first position on the axis a run of one.

	Example:
		```python
		projected_run([True, True], True, Seam.NONE)     # 3
		projected_run([True, True], True, Seam.GAP)      # 6
		projected_run([True, True], True, Seam.POSITION) # 5
		projected_run([False, True], True, Seam.GAP)     # 2
		```
	"""

	length = trailing_run(committed, active) + 1

	if length - 1 == len(committed):

		if opening is Seam.GAP:
			return 2 * length

		if opening is Seam.POSITION:
			return 2 * length - 1

	return length


def closing_run (committed: typing.Sequence[bool], active: bool, closing: Seam, position_count: int) -> int:

	"""Length of the run through the last position of a half, which touches the second seam.

	The run coming into the last position is reflected back out of it: through
	the position itself (``Seam.POSITION``) or across the gap beside it
	(``Seam.GAP``).  If every committed value already equals ``active`` the whole
	cycle would be uniform and the run is the full ``position_count``.
	"""

	count = trailing_run(committed, active)

	if count == len(committed):
		return position_count

	if closing is Seam.POSITION:
		return 2 * count + 1

	return 2 * (count + 1)


def _decide (
	rng: random.Random,
	position: int,
	active_run: int,
	rest_run: int,
	max_rest_run: int,
	max_active_run: int
) -> bool:

	"""Pick a value given the run each choice would produce.

	The coin is only consulted when both values are within bounds, so a scripted
	random source is read once per free choice.
	"""

	active_fits = active_run <= max_active_run
	rest_fits = rest_run <= max_rest_run

	if active_fits and rest_fits:
		return coin_flip(rng)

	if active_fits:
		return True

	if rest_fits:
		return False

	raise UnsatisfiableConstraints(
		max_rest_run = max_rest_run,
		max_active_run = max_active_run,
		position = position,
		projected_active_run = active_run,
		projected_rest_run = rest_run
	)


def _next_value (
	committed: typing.Sequence[bool],
	position: int,
	opening: Seam,
	max_rest_run: int,
	max_active_run: int,
	rng: random.Random
) -> bool:

	return _decide(
		rng,
		position,
		projected_run(committed, True, opening),
		projected_run(committed, False, opening),
		max_rest_run,
		max_active_run
	)


def _closing_value (
	committed: typing.Sequence[bool],
	position: int,
	closing: Seam,
	position_count: int,
	max_rest_run: int,
	max_active_run: int,
	rng: random.Random
) -> bool:

	return _decide(
		rng,
		position,
		closing_run(committed, True, closing, position_count),
		closing_run(committed, False, closing, position_count),
		max_rest_run,
		max_active_run
	)


def generate_odd_half (half_count: int, max_rest_run: int, max_active_run: int, rng: random.Random) -> typing.List[bool]:

	"""Build positions ``0 .. half_count - 1`` of an odd-length cycle.

	The cycle has ``2 * half_count - 1`` positions.  The axis passes through
	position 0 and through the gap between positions ``half_count - 1`` and
	``half_count``, which are mirror images and therefore always equal.  Building
	starts beside that gap and walks back toward position 0, so the doubled run at
	the gap is known before it can grow too long, and position 0 is decided last
	with both of its (identical) neighbours already in place.
	"""

	if half_count < 2:
		raise ValueError(f"An odd cycle needs at least two positions per half, got {half_count}")

	position_count = 2 * half_count - 1
	built: typing.List[bool] = []

	for position in range(half_count - 1, 0, -1):
		built.append(_next_value(built, position, Seam.GAP, max_rest_run, max_active_run, rng))

	built.append(_closing_value(built, 0, Seam.POSITION, position_count, max_rest_run, max_active_run, rng))

	built.reverse()

	return built


def generate_even_on_axis_half (half_count: int, max_rest_run: int, max_active_run: int, rng: random.Random) -> typing.List[bool]:

	"""Build positions ``0 .. half_count`` of an even cycle whose axis passes through positions.

	The cycle has ``2 * half_count`` positions with the axis through position 0 and
	position ``half_count``.  Positions ``0 .. half_count - 1`` are built forward
	from position 0; the opposite axis position ``half_count`` is then resolved
	against the tail of the built half, whose reflection will be its other
	neighbour.  The returned list is one longer than ``half_count`` because it
	includes that opposite axis position.
	"""

	if half_count < 1:
		raise ValueError(f"An even cycle needs at least one position per half, got {half_count}")

	built: typing.List[bool] = []

	for position in range(half_count):
		built.append(_next_value(built, position, Seam.POSITION, max_rest_run, max_active_run, rng))

	built.append(_closing_value(built, half_count, Seam.POSITION, 2 * half_count, max_rest_run, max_active_run, rng))

	return built


def generate_even_off_axis_half (half_count: int, max_rest_run: int, max_active_run: int, rng: random.Random) -> typing.List[bool]:

	"""Build positions ``0 .. half_count - 1`` of an even cycle whose axis passes through gaps.

	Position 0 sits beside its mirror (the last position of the cycle) and
	position ``half_count - 1`` beside its mirror (position ``half_count``), so
	both ends of the half are doubled seams.  The far end is decided last, from
	the run approaching it, and is where unsatisfiable parameters show up.
	"""

	if half_count < 1:
		raise ValueError(f"An even cycle needs at least one position per half, got {half_count}")

	built: typing.List[bool] = []

	for position in range(half_count - 1):
		built.append(_next_value(built, position, Seam.GAP, max_rest_run, max_active_run, rng))

	built.append(_closing_value(built, half_count - 1, Seam.GAP, 2 * half_count, max_rest_run, max_active_run, rng))

	return built
