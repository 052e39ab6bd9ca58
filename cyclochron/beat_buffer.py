import dataclasses
import logging
import typing

import cyclochron.constants


logger = logging.getLogger(__name__)


class InvalidCount (ValueError):

	"""
	Raised when a position count falls outside the supported range.
	"""

	def __init__ (self, count: int) -> None:

		self.count = count

		super().__init__(
			f"Position count must be between {cyclochron.constants.MIN_POSITION_COUNT} "
			f"and {cyclochron.constants.MAX_POSITION_COUNT}, got {count}"
		)


@dataclasses.dataclass
class Beat:

	"""
	One position on the cycle.
	"""

	active: bool = False


def check_count (count: int) -> None:

	"""Raise ``InvalidCount`` unless ``count`` is a usable position count."""

	if count < cyclochron.constants.MIN_POSITION_COUNT or count > cyclochron.constants.MAX_POSITION_COUNT:
		raise InvalidCount(count)


class BeatBuffer:

	"""
	Owns the positions of a cycle plus a cache of positions removed by shrinking.

	Shrinking moves the trailing positions to the front of the cache, and growing
	takes them back before creating fresh rests, so ``resize(16); resize(5);
	resize(16)`` restores the original sixteen positions exactly.

	The buffer is an owned value: the editor holds one and nothing else writes
	to it. Readers that need a stable view (the transport, the display) should
	take a ``snapshot()`` rather than iterate ``beats`` while it can change.
	"""

	def __init__ (self, count: int = 0) -> None:

		"""
		Create a buffer of ``count`` rests. A count of zero creates an empty buffer.
		"""

		self.beats: typing.List[Beat] = []
		self.cache: typing.List[Beat] = []

		if count:
			check_count(count)
			self._add_beats(count)


	def __len__ (self) -> int:

		return len(self.beats)


	def _add_beats (self, count: int) -> None:

		for _ in range(count):
			self.beats.append(Beat())


	def is_active (self, index: int) -> bool:

		"""
		Whether the position at ``index`` is active. Out-of-range indices read as rests.
		"""

		if 0 <= index < len(self.beats):
			return self.beats[index].active

		return False


	def snapshot (self) -> typing.Tuple[bool, ...]:

		"""
		Return an immutable copy of the current ``active`` values.
		"""

		return tuple(beat.active for beat in self.beats)


	def replace (self, sequence: typing.Sequence[bool]) -> None:

		"""
		Replace every position with a freshly generated sequence.

		The cache is left alone: it only changes when the count changes.
		"""

		self.beats = [Beat(active=bool(active)) for active in sequence]


	def resize (self, count: int) -> bool:

		"""
		Change the number of positions, remembering anything that is removed.

		Parameters:
			count: The new position count, between 2 and 256 inclusive.

		Returns:
			``True`` when positions were added or removed, ``False`` when the
			count was already ``count``.

		Raises:
			InvalidCount: When ``count`` is out of range. The buffer is untouched.
		"""

		check_count(count)

		diff = count - len(self.beats)

		if diff == 0:
			return False

		if diff < 0:
			# Keep removed positions in their original order, newest removals first.
			removed = self.beats[count:]
			del self.beats[count:]
			self.cache = removed + self.cache
			logger.debug(f"Cached {len(removed)} positions ({len(self.cache)} in cache)")

		else:
			restored = self.cache[:diff]
			del self.cache[:diff]
			self.beats.extend(restored)
			self._add_beats(diff - len(restored))
			logger.debug(f"Restored {len(restored)} cached positions, created {diff - len(restored)}")

		return True


	def clear (self) -> None:

		"""
		Remove every position and forget the cache.
		"""

		self.beats = []
		self.cache = []


	def toggle (self, index: int) -> None:

		"""
		Flip the position at ``index``.

		Stale indices from late UI events are ignored rather than raised.
		"""

		if not 0 <= index < len(self.beats):
			logger.debug(f"Ignoring toggle of position {index} (length {len(self.beats)})")
			return

		self.beats[index].active = not self.beats[index].active


	def invert (self) -> None:

		"""
		Flip every position, replacing the list rather than mutating it in place.
		"""

		self.beats = [Beat(active=not beat.active) for beat in self.beats]
