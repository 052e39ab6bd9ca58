import asyncio
import logging
import signal
import typing

import cyclochron.config
import cyclochron.display
import cyclochron.editor
import cyclochron.keystroke
import cyclochron.pattern
import cyclochron.rhythm
import cyclochron.sequencer


logger = logging.getLogger(__name__)


_HOTKEY_HELP = "?"

_HOTKEY_LABELS = {
	"g": "generate",
	"i": "invert",
	"c": "clear",
	"left": "rotate counter-clockwise",
	"right": "rotate clockwise",
	"up": "flip",
	"down": "flip",
	"space": "stop",
}


async def run_until_stopped (sequencer: cyclochron.sequencer.Sequencer, stop_event: asyncio.Event) -> None:

	"""
	Run the sequencer until a stop signal or ``stop_event`` is received.
	"""

	logger.info("Playing cycle. Press Ctrl+C to stop.")

	await sequencer.start()

	loop = asyncio.get_running_loop()

	for sig in (signal.SIGINT, signal.SIGTERM):
		loop.add_signal_handler(sig, stop_event.set)

	assert sequencer.task is not None, "Sequencer task should exist after start()"
	await asyncio.wait(
		[asyncio.create_task(stop_event.wait()), sequencer.task],
		return_when = asyncio.FIRST_COMPLETED
	)

	await sequencer.stop()


class Session:

	"""
	A playable cycle: the editor, the transport, and optional display and hotkeys.

	Example:
		```python
		session = cyclochron.Session(seed=7)
		session.editor.set_count(12)
		session.editor.generate()
		session.display()
		session.hotkeys()
		session.play()
		```
	"""

	def __init__ (
		self,
		settings: typing.Optional[cyclochron.config.Settings] = None,
		editor: typing.Optional[cyclochron.editor.CycleEditor] = None,
		seed: typing.Optional[int] = None
	) -> None:

		"""Create the editor and open the MIDI output.

		Parameters:
			settings: Generator and playback settings; defaults when omitted.
			editor: An existing editor to play; built from ``settings`` when omitted.
			seed: Seed for the editor's random source, for repeatable generations.
		"""

		self.settings = settings if settings is not None else cyclochron.config.Settings()
		self.editor = editor if editor is not None else cyclochron.editor.CycleEditor(self.settings.generator, seed=seed)

		playback = self.settings.playback

		self._sequencer = cyclochron.sequencer.Sequencer(
			output_device_name = playback.output_device,
			initial_bpm = playback.bpm,
			clock_output = playback.clock_output
		)

		self._display: typing.Optional[cyclochron.display.Display] = None
		self._keystroke_listener: typing.Optional[cyclochron.keystroke.KeystrokeListener] = None
		self._stop_event: typing.Optional[asyncio.Event] = None

		self._actions: typing.Dict[str, typing.Callable[[], typing.Any]] = {
			"g": self.editor.generate,
			"i": self.editor.invert,
			"c": self.editor.clear,
			"left": lambda: self.editor.rotate(-1),
			"right": lambda: self.editor.rotate(1),
			"up": self.editor.flip,
			"down": self.editor.flip,
			"space": self.stop,
		}

		self.editor.on_event("unsatisfiable", self._on_unsatisfiable)


	@property
	def sequencer (self) -> cyclochron.sequencer.Sequencer:

		return self._sequencer


	def display (self, enabled: bool = True) -> None:

		"""Enable or disable the live terminal view."""

		if enabled:
			self._display = cyclochron.display.Display(self.editor, self._sequencer)
		else:
			self._display = None


	def hotkeys (self, enabled: bool = True) -> None:

		"""Enable or disable single-key control while playing.

		``g`` generate, ``i`` invert, ``c`` clear, left/right arrows rotate by
		one step, up/down arrows flip, space stops, ``?`` lists the keys.

		Keys are only read while playing, so space ends ``play()`` rather than
		pausing; call ``play()`` again to start over from the first beat.
		"""

		if enabled:
			self._keystroke_listener = cyclochron.keystroke.KeystrokeListener()
		else:
			self._keystroke_listener = None


	def set_bpm (self, bpm: float) -> None:

		"""Change the tempo, effective from the next pulse."""

		self._sequencer.set_bpm(bpm)
		self.settings.playback.bpm = bpm


	def stop (self) -> None:

		"""Ask a running session to stop."""

		if self._stop_event is not None:
			self._stop_event.set()


	def handle_key (self, key: str) -> bool:

		"""Run the action bound to ``key``.

		Returns:
			Whether the key was bound.
		"""

		if key == _HOTKEY_HELP:
			self._list_hotkeys()
			return True

		action = self._actions.get(key)

		if action is None:
			return False

		action()
		logger.info(f"Hotkey '{key}' → {_HOTKEY_LABELS[key]}")

		return True


	def _list_hotkeys (self) -> None:

		lines = ["Hotkeys:"]

		for key, label in _HOTKEY_LABELS.items():
			lines.append(f"  {key:<6} {label}")

		logger.info("\n".join(lines))


	def _process_hotkeys (self, _: int) -> None:

		"""Drain pending keys; called on every playback step."""

		if self._keystroke_listener is None:
			return

		for key in self._keystroke_listener.drain():
			self.handle_key(key)


	def _on_unsatisfiable (self, error: cyclochron.rhythm.UnsatisfiableConstraints) -> None:

		logger.warning(f"Could not generate a rhythm: {error}")


	def play (self) -> None:

		"""
		Play the cycle until interrupted (Ctrl+C) or stopped by a hotkey.
		"""

		try:
			asyncio.run(self._run())

		except KeyboardInterrupt:
			pass


	async def _run (self) -> None:

		self._stop_event = asyncio.Event()

		pattern = cyclochron.pattern.CyclePattern(self.editor, self.settings.playback)
		await self._sequencer.schedule_pattern_repeating(pattern, start_pulse=0)

		if self._display is not None:
			self._display.start()
			self._sequencer.on_event("step", self._display.update)
			self.editor.on_event("layout", self._display.update)
			self.editor.on_event("rotate", self._display.update)

		if self._keystroke_listener is not None:
			self._keystroke_listener.start()
			self._sequencer.on_event("step", self._process_hotkeys)

		try:
			await run_until_stopped(self._sequencer, self._stop_event)

		finally:
			if self._keystroke_listener is not None:
				self._keystroke_listener.stop()

			if self._display is not None:
				self._display.stop()

			self._stop_event = None
