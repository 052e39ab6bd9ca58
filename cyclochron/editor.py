import dataclasses
import logging
import random
import typing

import cyclochron.beat_buffer
import cyclochron.config
import cyclochron.event_emitter
import cyclochron.mirror
import cyclochron.rotation
import cyclochron.symmetry


logger = logging.getLogger(__name__)


class CycleEditor:

	"""
	Editing state for one cycle: its positions, their rotation, and the generator settings.

	Every edit goes through this object, so there is no process-wide state.  Edits
	that replace the rhythm (generate, invert, clear) swap in a whole new list of
	positions; readers such as the transport take a ``snapshot()`` once per cycle.

	Events (via ``on_event``):
		``"layout"``: the position count changed or the rhythm was replaced, called
			with the new snapshot.
		``"toggle"``: one position was flipped, called with ``(index, active)``.
		``"rotate"``: the first beat moved, called with the new first index.
		``"unsatisfiable"``: a generation failed, called with the error.
	"""

	def __init__ (
		self,
		settings: typing.Optional[cyclochron.config.GeneratorSettings] = None,
		rng: typing.Optional[random.Random] = None,
		seed: typing.Optional[int] = None
	) -> None:

		"""Create an editor holding a cycle of rests.

		Parameters:
			settings: Generator settings; defaults when omitted.
			rng: Random source for generation and axis choice.
			seed: Seed for a private ``random.Random`` when ``rng`` is not given.
		"""

		self.settings = settings if settings is not None else cyclochron.config.GeneratorSettings()
		self.rng = rng if rng is not None else random.Random(seed)
		self.buffer = cyclochron.beat_buffer.BeatBuffer(self.settings.position_count)
		self.rotation = cyclochron.rotation.CycleRotation()
		self.axis = cyclochron.symmetry.Axis.ON
		self.events = cyclochron.event_emitter.EventEmitter()


	def __len__ (self) -> int:

		return len(self.buffer)


	def on_event (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""Register a callback for a named event."""

		self.events.on(event_name, callback)


	def snapshot (self) -> typing.Tuple[bool, ...]:

		"""Current ``active`` values, indexed by absolute position."""

		return self.buffer.snapshot()


	def playback_order (self) -> typing.List[int]:

		"""Absolute position indices in the order playback visits them, first beat first."""

		length = len(self.buffer)

		return [(self.rotation.first_index + offset) % length for offset in range(length)]


	def set_count (self, count: int) -> bool:

		"""Resize the cycle, restoring cached positions where possible.

		Moving to an odd count with both run bounds below two raises the
		active bound to two, as ``set_bounds`` would.

		Raises:
			InvalidCount: When ``count`` is outside 2-256; nothing changes.

		Returns:
			Whether the count changed.
		"""

		changed = self.buffer.resize(count)

		if not changed:
			return False

		self.settings = cyclochron.config.adjust_for_odd_count(
			dataclasses.replace(self.settings, position_count=count),
			"max_rest_run"
		)
		self.rotation.fit(count)
		self.events.emit_sync("layout", self.snapshot())

		return True


	def set_bounds (self, max_rest_run: typing.Optional[int] = None, max_active_run: typing.Optional[int] = None) -> None:

		"""Change one or both run bounds, keeping odd cycles solvable."""

		settings = self.settings

		if max_rest_run is not None:
			settings = dataclasses.replace(settings, max_rest_run=max_rest_run)
			settings = cyclochron.config.adjust_for_odd_count(settings, "max_rest_run")

		if max_active_run is not None:
			settings = dataclasses.replace(settings, max_active_run=max_active_run)
			settings = cyclochron.config.adjust_for_odd_count(settings, "max_active_run")

		self.settings = settings


	def generate (self) -> cyclochron.mirror.GenerationResult:

		"""Replace the rhythm with a freshly generated one.

		On failure the current rhythm is kept and the error is returned in the result.
		"""

		settings = self.settings

		result = cyclochron.mirror.generate(
			len(self.buffer),
			settings.max_rest_run,
			settings.max_active_run,
			settings.allow_off_axis_symmetry,
			self.rng
		)

		if result.error is not None:
			self.events.emit_sync("unsatisfiable", result.error)
			return result

		assert result.sequence is not None

		self.axis = result.axis
		self.buffer.replace(result.sequence)

		logger.info(f"Generated {len(self.buffer)} positions, {sum(result.sequence)} active ({result.axis.value}-axis)")

		self.events.emit_sync("layout", self.snapshot())

		return result


	def toggle (self, index: int) -> None:

		"""Flip one position.  Stale indices are ignored."""

		self.buffer.toggle(index)

		if 0 <= index < len(self.buffer):
			self.events.emit_sync("toggle", index, self.buffer.is_active(index))


	def invert (self) -> None:

		"""Swap every active position for a rest and vice versa."""

		self.buffer.invert()
		self.events.emit_sync("layout", self.snapshot())


	def clear (self) -> None:

		"""Forget the rhythm and the cache, leaving the same number of rests."""

		count = len(self.buffer)

		self.buffer.clear()
		self.buffer.resize(count)
		self.axis = cyclochron.symmetry.Axis.ON
		self.rotation.reset()

		self.events.emit_sync("layout", self.snapshot())


	def rotate (self, direction: int) -> None:

		"""Move the first beat one position (``1`` clockwise, ``-1`` counter-clockwise)."""

		self.rotation.step(direction, len(self.buffer))
		self.events.emit_sync("rotate", self.rotation.first_index)


	def flip (self) -> None:

		"""Move the first beat to the opposite side of an even cycle."""

		if self.rotation.flip(len(self.buffer)):
			self.events.emit_sync("rotate", self.rotation.first_index)
