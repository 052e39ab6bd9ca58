"""Placement of the cycle's axis of bilateral symmetry.

Every generated rhythm reads the same in both directions around an axis.
With an odd position count the axis passes through position 0 and through the
gap on the far side of the circle.  With an even count it either passes through
two opposite positions (``Axis.ON``) or through two opposite gaps
(``Axis.OFF``), the latter placing position 0 and the last position side by
side as mirror images.
"""

import enum
import logging
import random
import typing


logger = logging.getLogger(__name__)


class Axis (enum.Enum):

	"""Where the line of symmetry falls relative to position 0."""

	ON = "on"
	OFF = "off"


def off_axis_eligible (position_count: int, max_rest_run: int, max_active_run: int) -> bool:

	"""Whether an off-axis placement may be chosen for these parameters.

	Only even counts have an off-axis placement at all.  A rest bound of 1 or
	an active bound of 0 leaves too little room on the doubled seams.
	"""

	if position_count % 2 or max_rest_run == 1 or max_active_run == 0:
		return False

	return True


def select_axis (
	position_count: int,
	max_rest_run: int,
	max_active_run: int,
	allow_off_axis_symmetry: bool,
	rng: typing.Optional[random.Random] = None
) -> Axis:

	"""Choose the axis placement for the next generation.

	When an off-axis placement is both eligible and allowed, on and off are
	equally likely.  Otherwise the axis passes through position 0.

	Parameters:
		position_count: Number of positions on the cycle.
		max_rest_run: Longest permitted run of rests.
		max_active_run: Longest permitted run of active positions.
		allow_off_axis_symmetry: Caller-level toggle for off-axis placement.
		rng: Random source; a fresh ``random.Random`` when omitted.
	"""

	if not allow_off_axis_symmetry or not off_axis_eligible(position_count, max_rest_run, max_active_run):
		return Axis.ON

	if rng is None:
		rng = random.Random()

	axis = Axis.OFF if rng.random() < 0.5 else Axis.ON

	logger.debug(f"Axis {axis.value} for {position_count} positions")

	return axis


def mirror_index (index: int, position_count: int, axis: Axis) -> int:

	"""Return the position that ``index`` reflects onto.

	Example:
		```python
		mirror_index(1, 8, Axis.ON)   # 7
		mirror_index(0, 8, Axis.OFF)  # 7
		mirror_index(3, 7, Axis.ON)   # 4
		```
	"""

	if axis is Axis.OFF:
		return position_count - 1 - (index % position_count)

	return (position_count - (index % position_count)) % position_count
