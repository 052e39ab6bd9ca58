"""Rotation of the cycle relative to its first beat.

Rotating the circle does not change the rhythm, only which position playback
treats as the start.  Turning the circle clockwise by one step makes the
previous position the first beat; a half turn (even counts only) swaps the two
halves.  Pointer drags accumulate degrees and snap to whole steps once the
pointer passes halfway to the next step.
"""

import dataclasses
import logging
import typing


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class CycleRotation:

	"""Index offsets and angles for a rotatable cycle.

	Attributes:
		first_index: Position that playback starts from.
		rotation_degrees: Angle of the drawn circle, following the pointer while dragging.
		snap_degrees: Angle of the nearest whole-step rotation.
	"""

	first_index: int = 0
	rotation_degrees: float = 0.0
	snap_degrees: float = 0.0
	_pointer_degrees: typing.Optional[float] = dataclasses.field(default=None, repr=False)


	def reset (self) -> None:

		"""Return to the unrotated state."""

		self.first_index = 0
		self.rotation_degrees = 0.0
		self.snap_degrees = 0.0
		self._pointer_degrees = None


	def fit (self, length: int) -> None:

		"""Wrap the first beat into range after the position count changed."""

		if length <= 0:
			self.reset()
			return

		self.first_index %= length


	def _shift (self, offset: int, length: int) -> None:

		self.first_index = (self.first_index + offset) % length


	def step (self, direction: int, length: int) -> None:

		"""Turn the circle by one position.

		Parameters:
			direction: ``1`` for clockwise (the first beat moves back one
				position), ``-1`` for counter-clockwise.
			length: Current position count.
		"""

		if length <= 0 or direction == 0:
			return

		step_degrees = 360 / length

		if direction > 0:
			self._shift(-1, length)
			self.rotation_degrees += step_degrees
			self.snap_degrees += step_degrees
		else:
			self._shift(1, length)
			self.rotation_degrees -= step_degrees
			self.snap_degrees -= step_degrees


	def flip (self, length: int) -> bool:

		"""Turn the circle by half a revolution.

		Odd cycles have no opposite position to start from, so they are left alone.

		Returns:
			Whether the rotation changed.
		"""

		if length <= 0 or length % 2:
			return False

		self._shift(length // 2, length)

		self.rotation_degrees += 180

		if self.rotation_degrees > 360:
			self.rotation_degrees -= 360

		self.snap_degrees += 180

		if self.snap_degrees > 360:
			self.snap_degrees -= 360

		return True


	def press (self, pointer_degrees: float) -> None:

		"""Start a pointer drag at the given angle around the circle's centre."""

		self._pointer_degrees = pointer_degrees


	def drag (self, pointer_degrees: float, length: int) -> None:

		"""Follow the pointer, moving the first beat each time the drag passes half a step."""

		if self._pointer_degrees is None or length <= 0:
			self._pointer_degrees = pointer_degrees
			return

		self.rotation_degrees += pointer_degrees - self._pointer_degrees
		self._pointer_degrees = pointer_degrees

		step_degrees = 360 / length

		if self.rotation_degrees > self.snap_degrees + step_degrees / 2:
			self.first_index = (self.first_index - 1) % length
			self.snap_degrees += step_degrees

		elif self.rotation_degrees < self.snap_degrees - step_degrees / 2:
			self.first_index = (self.first_index + 1) % length
			self.snap_degrees -= step_degrees


	def release (self) -> None:

		"""End a drag, settling the drawn circle onto the last whole step."""

		if self._pointer_degrees is None:
			return

		self.rotation_degrees = self.snap_degrees
		self._pointer_degrees = None

		logger.debug(f"Rotation settled at {self.snap_degrees:.1f} degrees (first beat {self.first_index})")
