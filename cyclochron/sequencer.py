import asyncio
import dataclasses
import heapq
import itertools
import logging
import time
import typing

import mido

import cyclochron.constants.pulses
import cyclochron.event_emitter
import cyclochron.midi_utils


logger = logging.getLogger(__name__)


# Controller numbers sent on every channel by panic(): All Sound Off, All Notes Off.
_SILENCE_CONTROLS = (120, 123)


@typing.runtime_checkable
class PatternLike (typing.Protocol):

	"""
	Anything the transport can play: notes and playhead markers laid out in pulses.
	"""

	channel: int
	length: float
	reschedule_lookahead: float
	steps: typing.Dict[int, typing.Any]
	markers: typing.List[typing.Any]


	def on_reschedule (self) -> None:

		"""
		Hook called just before the next pass is queued.
		"""

		...


@dataclasses.dataclass (order=True)
class MidiEvent:

	"""
	Something to do at a given pulse.

	``message_type`` is a MIDI message name (``"note_on"``, ``"note_off"``) or
	``"step"`` for a playhead marker, whose ``data`` is the cycle position index.
	"""

	pulse: int
	message_type: str = dataclasses.field(compare=False)
	channel: int = dataclasses.field(compare=False)
	note: int = dataclasses.field(compare=False, default=0)
	velocity: int = dataclasses.field(compare=False, default=0)
	data: typing.Any = dataclasses.field(compare=False, default=None)


@dataclasses.dataclass
class ScheduledCycle:

	"""
	A pattern played pass after pass, and where its current pass sits on the timeline.
	"""

	pattern: PatternLike
	start_pulse: int
	length_pulses: int
	lookahead_pulses: int


	@property
	def reschedule_pulse (self) -> int:

		"""Pulse at which the next pass is built and queued."""

		return self.start_pulse + self.length_pulses - self.lookahead_pulses


def pattern_events (pattern: PatternLike, start_pulse: int) -> typing.Iterator[MidiEvent]:

	"""
	Expand one pass of a pattern into timed events, starting at ``start_pulse``.
	"""

	for position, step in pattern.steps.items():

		for note in step.notes:

			yield MidiEvent(
				pulse = start_pulse + position,
				message_type = 'note_on',
				channel = note.channel,
				note = note.pitch,
				velocity = note.velocity
			)

			yield MidiEvent(
				pulse = start_pulse + position + note.duration,
				message_type = 'note_off',
				channel = note.channel,
				note = note.pitch
			)

	for marker in pattern.markers:

		yield MidiEvent(
			pulse = start_pulse + marker.pulse,
			message_type = 'step',
			channel = pattern.channel,
			data = marker.index
		)


class Sequencer:

	"""
	The transport: a pulse clock that plays scheduled cycles out of a MIDI port.

	Runs at 24 pulses per quarter note, so one cycle step (a sixteenth note) is
	six pulses.  When ``clock_output`` is on, every pulse also sends a MIDI
	timing clock message and playback is bracketed by MIDI Start and Stop, so
	connected hardware follows the tempo.

	``current_index`` is the cycle position last reached by the playhead, or -1
	while stopped.
	"""

	def __init__ (
		self,
		output_device_name: typing.Optional[str] = None,
		initial_bpm: float = 120,
		clock_output: bool = False,
		spin_wait: bool = True
	) -> None:

		"""Open the MIDI output and set the tempo.

		Parameters:
			output_device_name: MIDI output device name.  When omitted, the first
				available output is used.
			initial_bpm: Tempo in quarter-note beats per minute.
			clock_output: Send MIDI timing clock, start, and stop messages.
			spin_wait: Busy-wait the final sub-millisecond of each pulse for
				tighter timing at the cost of some CPU.
		"""

		self.output_device_name = output_device_name
		self.clock_output = clock_output
		self.pulses_per_beat = cyclochron.constants.pulses.MIDI_QUARTER_NOTE

		self.event_queue: typing.List[MidiEvent] = []
		self.queue_lock = asyncio.Lock()
		self.cycles: typing.List[typing.Tuple[int, int, ScheduledCycle]] = []
		self._cycle_order = itertools.count()

		self.task: typing.Optional[asyncio.Task] = None
		self.running = False
		self.pulse_count = 0
		self.current_index: int = -1
		self.active_notes: typing.Set[typing.Tuple[int, int]] = set()
		self.events = cyclochron.event_emitter.EventEmitter()

		self.current_bpm: float = 0
		self.seconds_per_pulse = 0.0
		self._spin_wait = spin_wait
		# Sleep to within this many seconds of a pulse, then busy-wait.
		self._spin_threshold = 0.001

		self.set_bpm(initial_bpm)

		self.midi_out: typing.Any = None
		self._open_output()


	def set_bpm (self, bpm: float) -> None:

		"""
		Change the tempo from the next pulse on.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.current_bpm = bpm
		self.seconds_per_pulse = 60.0 / bpm / self.pulses_per_beat

		logger.info(f"BPM set to {self.current_bpm:.2f}")


	def on_event (self, event_name: str, callback: typing.Callable[..., typing.Any]) -> None:

		"""
		Register a callback for ``"start"``, ``"stop"``, ``"step"`` (called with the
		cycle position index) or ``"pattern_reschedule"``.
		"""

		self.events.on(event_name, callback)


	def _open_output (self) -> None:

		device_name, midi_out = cyclochron.midi_utils.select_output_device(self.output_device_name)

		if device_name is None:
			logger.warning("No MIDI output - playback will be silent")
			return

		self.output_device_name = device_name
		self.midi_out = midi_out


	def _cycle_timing (self, pattern: PatternLike) -> typing.Tuple[int, int]:

		"""
		Length and rebuild lookahead of one pass, in pulses.
		"""

		if pattern.length <= 0:
			raise ValueError("Pattern length must be positive")

		if not 0 <= pattern.reschedule_lookahead <= pattern.length:
			raise ValueError("Reschedule lookahead must be between zero and the pattern length")

		length_pulses = int(pattern.length * self.pulses_per_beat)

		if length_pulses <= 0:
			raise ValueError("Pattern length must be at least one pulse")

		return length_pulses, int(pattern.reschedule_lookahead * self.pulses_per_beat)


	async def schedule_pattern (self, pattern: PatternLike, start_pulse: int) -> None:

		"""
		Queue a single pass of ``pattern`` starting at ``start_pulse``.
		"""

		async with self.queue_lock:
			for event in pattern_events(pattern, start_pulse):
				heapq.heappush(self.event_queue, event)

		logger.debug(f"Queued pass at pulse {start_pulse} ({len(self.event_queue)} events pending)")


	async def schedule_pattern_repeating (self, pattern: PatternLike, start_pulse: int = 0) -> None:

		"""
		Queue the first pass of ``pattern`` and keep queueing one pass after another.

		Each following pass is built by ``pattern.on_reschedule()`` a lookahead
		before the current one ends, so it reflects the latest edits.
		"""

		length_pulses, lookahead_pulses = self._cycle_timing(pattern)

		await self.schedule_pattern(pattern, start_pulse)

		self._push_cycle(ScheduledCycle(pattern, start_pulse, length_pulses, lookahead_pulses))


	def _push_cycle (self, cycle: ScheduledCycle) -> None:

		heapq.heappush(self.cycles, (cycle.reschedule_pulse, next(self._cycle_order), cycle))


	async def play (self) -> None:

		"""
		Start playback and wait until it ends.
		"""

		await self.start()

		try:
			if self.task:
				await self.task
		except asyncio.CancelledError:
			pass
		finally:
			await self.stop()


	def _send_realtime (self, message_type: str) -> None:

		"""Send a MIDI system-realtime message (``"clock"``, ``"start"``, ``"stop"``)."""

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(mido.Message(message_type))
		except Exception:
			logger.exception(f"Failed to send MIDI {message_type} message")


	async def start (self) -> None:

		"""Start the pulse clock in its own task.

		With ``clock_output`` on, MIDI Start goes out before the first clock tick.
		An output closed by an earlier ``stop()`` is opened again.
		"""

		if self.running:
			return

		if self.midi_out is None:
			self._open_output()

		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		if self.clock_output:
			self._send_realtime("start")

		logger.info("Sequencer started")

		await self.events.emit_async("start")


	async def stop (self) -> None:

		"""
		Stop the clock, silence every note, close the output, and forget queued passes.
		"""

		if not self.running and self.midi_out is None:
			return

		logger.info("Stopping sequencer...")

		self.running = False

		# A hotkey handled inside the loop may be what asked to stop.
		if self.task and self.task is not asyncio.current_task():
			await self.task

		if self.clock_output:
			self._send_realtime("stop")

		await self.panic()

		if self.midi_out is not None:
			self.midi_out.close()
			self.midi_out = None

		async with self.queue_lock:
			self.event_queue = []
			self.cycles = []
			self._cycle_order = itertools.count()

		self.current_index = -1

		logger.info("Sequencer stopped")

		await self.events.emit_async("stop")


	async def _sleep_until (self, target: float) -> None:

		remaining = target - time.perf_counter()

		if remaining <= 0:
			return

		if not self._spin_wait or remaining <= self._spin_threshold:
			await asyncio.sleep(remaining)
			return

		await asyncio.sleep(remaining - self._spin_threshold)

		while time.perf_counter() < target:
			pass


	def _finished (self) -> bool:

		return not self.event_queue and not self.active_notes and not self.cycles


	async def _run_loop (self) -> None:

		"""Advance one pulse at a time against the wall clock until stopped or out of events."""

		self.pulse_count = 0
		next_pulse_time = time.perf_counter()

		while self.running:

			# Catch up on any pulses that are due, late ones included.
			while self.running and time.perf_counter() >= next_pulse_time:

				# Clock first so hardware receives it alongside this pulse's notes.
				if self.clock_output:
					self._send_realtime("clock")

				await self._advance_pulse()
				next_pulse_time += self.seconds_per_pulse

			if not self.running:
				break

			if self._finished():
				logger.info("Sequence complete (no more events or active notes).")
				self.running = False
				break

			await self._sleep_until(next_pulse_time)


	async def _advance_pulse (self) -> None:

		await self._reschedule_due(self.pulse_count)
		await self._process_pulse(self.pulse_count)
		self.pulse_count += 1


	async def _reschedule_due (self, pulse: int) -> None:

		"""
		Build and queue the next pass of every cycle whose lookahead point has arrived.
		"""

		due: typing.List[ScheduledCycle] = []

		while self.cycles and self.cycles[0][0] <= pulse:
			_, _, cycle = heapq.heappop(self.cycles)
			due.append(cycle)

		for cycle in due:

			cycle.start_pulse += cycle.length_pulses
			cycle.pattern.on_reschedule()

			# The rebuild may have resized the cycle, so the pass length is read again.
			cycle.length_pulses, cycle.lookahead_pulses = self._cycle_timing(cycle.pattern)

			await self.schedule_pattern(cycle.pattern, cycle.start_pulse)
			self._push_cycle(cycle)

			asyncio.create_task(self.events.emit_async("pattern_reschedule", cycle.pattern, cycle.start_pulse))


	async def _process_pulse (self, pulse: int) -> None:

		"""
		Send every note due by ``pulse`` and move the playhead.
		"""

		async with self.queue_lock:

			while self.event_queue and self.event_queue[0].pulse <= pulse:

				event = heapq.heappop(self.event_queue)

				if event.message_type == 'step':
					self.current_index = event.data
					asyncio.create_task(self.events.emit_async("step", event.data))
					continue

				key = (event.channel, event.note)

				if event.message_type == 'note_on':
					self.active_notes.add(key)
				else:
					self.active_notes.discard(key)

				self._send_note(event)


	def _send_note (self, event: MidiEvent) -> None:

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(mido.Message(
				event.message_type,
				channel = event.channel,
				note = event.note,
				velocity = event.velocity
			))

		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


	async def panic (self) -> None:

		"""
		Release every note this transport started, then silence all channels.
		"""

		logger.info("Panic: sending all notes off.")

		async with self.queue_lock:
			sounding = sorted(self.active_notes)
			self.active_notes.clear()

		if self.midi_out is None:
			return

		try:
			for channel, note in sounding:
				self.midi_out.send(mido.Message('note_off', channel=channel, note=note, velocity=0))

			for channel in range(16):
				for control in _SILENCE_CONTROLS:
					self.midi_out.send(mido.Message('control_change', channel=channel, control=control, value=0))

			self.midi_out.panic()
			self.midi_out.reset()

		except Exception:
			logger.exception("MIDI panic failed (device may be disconnected)")
