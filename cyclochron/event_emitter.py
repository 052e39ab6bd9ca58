"""Named callbacks between the cycle's state and whatever is watching it.

Two objects emit: ``CycleEditor`` reports edits (``"layout"``, ``"toggle"``,
``"rotate"``, ``"unsatisfiable"``) straight from the method that made them, and
``Sequencer`` reports transport changes (``"start"``, ``"step"``,
``"pattern_reschedule"``, ``"stop"``) from inside its pulse loop.  The display,
the hotkey reader and tests subscribe by name.
"""

import asyncio
import typing


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	Listeners keyed by event name, called in the order they subscribed.

	Editor edits are plain method calls, so the editor uses ``emit_sync`` and
	its listeners must be ordinary functions.  The sequencer runs inside the
	event loop and uses ``emit_async``, which also accepts coroutine listeners.
	"""

	def __init__ (self) -> None:

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""Subscribe ``callback`` to ``event_name``; the same callback may subscribe twice."""

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Drop one subscription of ``callback``.

		Raises:
			ValueError: When ``callback`` is not subscribed to ``event_name``.
		"""

		subscribed = self._listeners.get(event_name, [])

		if callback not in subscribed:
			raise ValueError(f"Callback not registered for event {event_name!r}")

		subscribed.remove(callback)


	def has_listeners (self, event_name: str) -> bool:

		return bool(self._listeners.get(event_name))


	def emit_sync (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call each listener now, e.g. a redraw after ``CycleEditor.invert()``.

		A listener subscribing or unsubscribing during the call takes effect
		from the next emit.

		Raises:
			ValueError: When a coroutine listener is found; it could not be awaited here.
		"""

		for callback in list(self._listeners.get(event_name, [])):

			if asyncio.iscoroutinefunction(callback):
				raise ValueError(f"Async callback registered for synchronous event {event_name!r}")

			callback(*args, **kwargs)


	async def emit_async (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call plain listeners in order, then await coroutine listeners together.

		Used for transport events such as ``"step"``, which carries the absolute
		position index the playhead has reached.
		"""

		waiting: typing.List[typing.Awaitable[typing.Any]] = []

		for callback in list(self._listeners.get(event_name, [])):

			if asyncio.iscoroutinefunction(callback):
				waiting.append(callback(*args, **kwargs))
			else:
				callback(*args, **kwargs)

		if waiting:
			await asyncio.gather(*waiting)
