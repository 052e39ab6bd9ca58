"""Live terminal view of the cycle during playback.

Shows the cycle unrolled from its first beat, a playhead marker under the
position that is sounding, and a status line::

	|X . X X . X . . X . X X . X . .|
	       ^
	120.00 BPM  Step: 4/16  First: 0  Axis: on

Log messages scroll above the view without disruption.
"""

import logging
import shutil
import sys
import typing

if typing.TYPE_CHECKING:
	from cyclochron.editor import CycleEditor
	from cyclochron.sequencer import Sequencer


_MIN_TERMINAL_WIDTH = 20


def format_cycle (snapshot: typing.Sequence[bool], order: typing.Sequence[int], max_width: typing.Optional[int] = None) -> str:

	"""Render positions in playback order as ``|X . X|``.

	When ``max_width`` is given the row is cut to fit, ending in ``>``.
	"""

	cells = ["X" if snapshot[index] else "." for index in order]
	row = f"|{' '.join(cells)}|"

	if max_width is not None and len(row) > max_width:
		row = row[:max(0, max_width - 1)] + ">"

	return row


def format_playhead (order: typing.Sequence[int], current_index: int) -> str:

	"""A caret under ``current_index`` aligned with ``format_cycle()``, or blank when stopped."""

	if current_index not in order:
		return ""

	offset = list(order).index(current_index)

	return " " * (1 + 2 * offset) + "^"




def _erase_lines (count: int) -> str:

	"""Terminal codes that blank ``count`` lines ending at the cursor and leave it on the top one."""

	if count <= 1:
		return "\r\033[K"

	return f"\033[{count - 1}A" + "\r\033[K\n" * count + f"\033[{count}A"


class DisplayLogHandler (logging.Handler):

	"""Writes log records above the view, redrawing it underneath each one."""

	def __init__ (self, display: "Display") -> None:

		super().__init__()
		self._display = display


	def emit (self, record: logging.LogRecord) -> None:

		try:
			text = self.format(record)
		except Exception:
			self.handleError(record)
			return

		self._display.clear_line()
		sys.stderr.write(f"{text}\n")
		sys.stderr.flush()
		self._display.draw()


class Display:

	"""Live-updating view of the cycle, drawn to stderr.

	Reads positions and rotation from the editor and tempo and playhead from the
	sequencer.  Call ``update()`` whenever either changes; the session wires it
	to the ``"step"``, ``"layout"`` and ``"rotate"`` events.

	While active, the root logger's handlers are set aside so that log output
	goes through a ``DisplayLogHandler`` and never tears the view.
	"""

	def __init__ (self, editor: "CycleEditor", sequencer: "Sequencer") -> None:

		self._editor = editor
		self._sequencer = sequencer
		self._set_aside: typing.Optional[typing.List[logging.Handler]] = None
		self._lines: typing.List[str] = []
		self._drawn: int = 0


	@property
	def active (self) -> bool:

		return self._set_aside is not None


	def start (self) -> None:

		"""Route logging through the view.  Calling it twice has no effect."""

		if self.active:
			return

		root_logger = logging.getLogger()
		previous = list(root_logger.handlers)

		handler = DisplayLogHandler(self)
		formatter = previous[0].formatter if previous else None
		handler.setFormatter(formatter or logging.Formatter("%(levelname)s:%(name)s:%(message)s"))

		for old in previous:
			root_logger.removeHandler(old)

		root_logger.addHandler(handler)
		self._set_aside = previous


	def stop (self) -> None:

		"""Erase the view and give the root logger its handlers back."""

		if self._set_aside is None:
			return

		self.clear_line()

		root_logger = logging.getLogger()

		for handler in list(root_logger.handlers):
			if isinstance(handler, DisplayLogHandler):
				root_logger.removeHandler(handler)

		for handler in self._set_aside:
			root_logger.addHandler(handler)

		self._set_aside = None


	def update (self, *_: typing.Any) -> None:

		"""Rebuild and redraw.  Event arguments are ignored; state is read directly."""

		if not self.active:
			return

		self._lines = self._build_lines()
		self.draw()


	def _build_lines (self) -> typing.List[str]:

		width = shutil.get_terminal_size(fallback=(80, 24)).columns
		order = self._editor.playback_order()
		status = self._format_status()

		if width < _MIN_TERMINAL_WIDTH:
			return [status]

		return [
			format_cycle(self._editor.snapshot(), order, width),
			format_playhead(order, self._sequencer.current_index)[:width],
			status,
		]


	def _format_status (self) -> str:

		order = self._editor.playback_order()
		current = self._sequencer.current_index
		step = str(order.index(current) + 1) if current in order else "-"

		return "  ".join([
			f"{self._sequencer.current_bpm:.2f} BPM",
			f"Step: {step}/{len(order)}",
			f"First: {self._editor.rotation.first_index}",
			f"Axis: {self._editor.axis.value}",
		])


	def draw (self) -> None:

		"""Write the current view over the previous one."""

		if not self.active or not self._lines:
			return

		moves = f"\033[{self._drawn - 1}A" if self._drawn > 1 else ""
		body = "".join(f"\r\033[K{line}\n" for line in self._lines[:-1])

		# No newline after the status line, so the cursor stays on it.
		sys.stderr.write(f"{moves}{body}\r\033[K{self._lines[-1]}")
		sys.stderr.flush()

		self._drawn = len(self._lines)


	def clear_line (self) -> None:

		"""Erase the whole view from the terminal."""

		if not self.active:
			return

		sys.stderr.write(_erase_lines(self._drawn))
		sys.stderr.flush()

		self._drawn = 0
