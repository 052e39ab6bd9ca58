"""Single-keystroke input for a live session.

A background thread reads stdin in *cbreak* mode so each keypress arrives
without Enter.  Arrow keys arrive as three-character escape sequences and are
decoded into the names ``"up"``, ``"down"``, ``"left"`` and ``"right"``; the
space bar is reported as ``"space"``.

**Platform support:** Linux and macOS (needs :mod:`tty` and :mod:`termios` and a
real TTY on stdin).  Elsewhere the listener logs a warning and stays inactive.
"""

import logging
import queue
import select
import sys
import threading
import typing


logger = logging.getLogger(__name__)


def _check_terminal () -> typing.Optional[str]:

	"""Return why single-key input cannot work here, or ``None`` if it can."""

	try:
		import termios
	except ImportError:
		return "Hotkeys need the 'termios' and 'tty' modules, which only POSIX systems (Linux, macOS) provide."

	try:
		if not sys.stdin.isatty():
			return "Hotkeys need an interactive terminal, but stdin is a pipe or file."

		termios.tcgetattr(sys.stdin.fileno())

	except (OSError, ValueError) as e:
		return f"Hotkeys need an interactive terminal on stdin ({e})."

	return None


#: Why hotkeys are unavailable, or ``None`` when they are supported.
HOTKEYS_UNAVAILABLE_REASON: typing.Optional[str] = _check_terminal()

#: ``True`` when the current platform supports single-keystroke input.
HOTKEYS_SUPPORTED: bool = HOTKEYS_UNAVAILABLE_REASON is None


_ESCAPE = "\x1b"

_ARROWS = {
	"A": "up",
	"B": "down",
	"C": "right",
	"D": "left",
}


def decode_keys (chars: typing.Sequence[str]) -> typing.Tuple[typing.List[str], typing.List[str]]:

	"""Turn raw characters into key names.

	Returns:
		``(keys, leftover)`` where ``leftover`` holds the start of an escape
		sequence that has not fully arrived yet.

	Example:
		```python
		decode_keys(["g", "\\x1b", "[", "C", " "])  # (["g", "right", "space"], [])
		decode_keys(["\\x1b", "["])                  # ([], ["\\x1b", "["])
		```
	"""

	keys: typing.List[str] = []
	i = 0

	while i < len(chars):

		char = chars[i]

		if char == _ESCAPE:

			# A lone escape followed by an ordinary key.
			if i + 1 < len(chars) and chars[i + 1] != "[":
				i += 1
				continue

			if i + 2 >= len(chars):
				return keys, list(chars[i:])

			if chars[i + 2] in _ARROWS:
				keys.append(_ARROWS[chars[i + 2]])

			i += 3
			continue

		keys.append("space" if char == " " else char)
		i += 1

	return keys, []


class KeystrokeListener:

	"""Reads stdin one character at a time on a daemon thread.

	Characters are queued as they arrive; :meth:`drain` turns them into key
	names from the session's event loop.  The terminal mode is restored when
	the thread ends.

	Example::

		listener = KeystrokeListener()
		listener.start()

		for key in listener.drain():
		    session.handle_key(key)

		listener.stop()
	"""

	def __init__ (self) -> None:

		self._queue: queue.Queue[str] = queue.Queue()
		self._thread: typing.Optional[threading.Thread] = None
		self._stop = threading.Event()
		self._partial: typing.List[str] = []

		#: ``True`` while the reader thread is running.
		self.active: bool = False


	def start (self) -> None:

		"""Start the reader thread.  Ignored while already running or when unsupported."""

		if self.active:
			return

		if not HOTKEYS_SUPPORTED:
			logger.warning(f"Hotkeys disabled: {HOTKEYS_UNAVAILABLE_REASON}")
			return

		self._stop.clear()
		self.active = True
		self._thread = threading.Thread(target=self._listen, name="cyclochron-keys", daemon=True)
		self._thread.start()


	def stop (self) -> None:

		"""Ask the reader thread to finish; it notices within a tenth of a second."""

		self._stop.set()


	def drain (self) -> typing.List[str]:

		"""Decode and return every key pressed since the last call, without blocking."""

		chars = self._partial

		while True:
			try:
				chars.append(self._queue.get_nowait())
			except queue.Empty:
				break

		keys, self._partial = decode_keys(chars)

		return keys


	def _read_into_queue (self) -> None:

		while not self._stop.is_set():

			ready, _, _ = select.select([sys.stdin], [], [], 0.1)

			if not ready:
				continue

			char = sys.stdin.read(1)

			if char:
				self._queue.put(char)


	def _listen (self) -> None:

		import termios
		import tty

		fd = sys.stdin.fileno()
		mode = termios.tcgetattr(fd)

		try:
			# cbreak rather than raw so Ctrl+C still interrupts.
			tty.setcbreak(fd)
			self._read_into_queue()

		except OSError:
			logger.exception("Keystroke listener stopped")

		finally:
			termios.tcsetattr(fd, termios.TCSADRAIN, mode)
			self.active = False
