import dataclasses
import typing

import cyclochron.config
import cyclochron.constants
import cyclochron.constants.velocity

if typing.TYPE_CHECKING:
	from cyclochron.editor import CycleEditor


@dataclasses.dataclass
class Note:

	"""
	Represents a single MIDI note.
	"""

	pitch: int
	velocity: int
	duration: int
	channel: int


@dataclasses.dataclass
class Step:

	"""
	Represents a collection of notes at a single point in time.
	"""

	notes: typing.List[Note] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class StepMarker:

	"""
	Marks the pulse at which playback reaches a cycle position, for the playhead.
	"""

	pulse: int
	index: int


class Pattern:

	"""
	Notes and playhead markers laid out in pulses over one pass of the cycle.
	"""

	def __init__ (self, channel: int, length: float = 4, reschedule_lookahead: float = 0.25) -> None:

		"""
		Initialize an empty pattern with MIDI channel (0-based), length in beats,
		and reschedule lookahead in beats.
		"""

		self.channel = channel
		self.length = length
		self.reschedule_lookahead = reschedule_lookahead

		self.steps: typing.Dict[int, Step] = {}
		self.markers: typing.List[StepMarker] = []


	def clear (self) -> None:

		self.steps = {}
		self.markers = []


	def add_note (self, position: int, pitch: int, velocity: int = cyclochron.constants.velocity.DEFAULT_VELOCITY, duration: int = 3) -> None:

		"""
		Add a note to the pattern at a specific pulse position.
		"""

		if position not in self.steps:
			self.steps[position] = Step()

		note = Note(
			pitch = pitch,
			velocity = velocity,
			duration = duration,
			channel = self.channel
		)

		self.steps[position].notes.append(note)


	def add_marker (self, position: int, index: int) -> None:

		"""
		Record that cycle position ``index`` starts sounding at pulse ``position``.
		"""

		self.markers.append(StepMarker(pulse=position, index=index))


	def on_reschedule (self) -> None:

		"""
		Hook called immediately before the pattern is rescheduled.
		"""

		return None


class CyclePattern (Pattern):

	"""
	A pattern rebuilt from the editor at the start of every pass around the cycle.

	Each rebuild reads one snapshot of the positions and the current first beat,
	so edits made while playing are heard from the next pass, never half-applied.
	Every position gets a playhead marker; active positions also get a note
	lasting ``gate`` of the step.
	"""

	def __init__ (self, editor: "CycleEditor", playback: cyclochron.config.PlaybackSettings) -> None:

		super().__init__(channel=playback.midi_channel - 1)

		self.editor = editor
		self.playback = playback

		self.rebuild()


	def rebuild (self) -> None:

		"""Lay out one pass of the cycle, starting from the first beat."""

		self.clear()

		snapshot = self.editor.snapshot()
		order = self.editor.playback_order()
		step_pulses = cyclochron.constants.PULSES_PER_STEP
		# Release before the next step so a repeated note is never cut by its own note-off.
		note_pulses = max(1, min(step_pulses - 1, round(step_pulses * self.playback.gate)))

		self.length = len(snapshot) / cyclochron.constants.STEPS_PER_BEAT

		for offset, index in enumerate(order):

			position = offset * step_pulses
			self.add_marker(position, index)

			if snapshot[index]:
				self.add_note(position, self.playback.note, self.playback.velocity, note_pulses)


	def on_reschedule (self) -> None:

		self.rebuild()
