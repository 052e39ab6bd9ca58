import asyncio
import random

import mido
import pytest

import cyclochron.config
import cyclochron.editor
import cyclochron.pattern
import cyclochron.sequencer


def _cycle_pattern (count: int, active: list[int]) -> cyclochron.pattern.CyclePattern:

	editor = cyclochron.editor.CycleEditor(cyclochron.config.GeneratorSettings(position_count=count), rng=random.Random(0))

	for index in active:
		editor.toggle(index)

	return cyclochron.pattern.CyclePattern(editor, cyclochron.config.PlaybackSettings(note=40))


@pytest.mark.asyncio
async def test_schedule_pattern_queues_notes_and_markers (patch_midi: None) -> None:

	"""Each active position becomes a note-on/note-off pair; every position gets a step marker."""

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI")
	pattern = _cycle_pattern(4, [1])

	await sequencer.schedule_pattern(pattern, start_pulse=24)

	events = sorted(sequencer.event_queue, key=lambda event: (event.pulse, event.message_type))

	assert [(event.pulse, event.message_type) for event in events] == [
		(24, "step"),
		(30, "note_on"),
		(30, "step"),
		(33, "note_off"),
		(36, "step"),
		(42, "step"),
	]


@pytest.mark.asyncio
async def test_process_pulse_sends_notes_and_moves_playhead (patch_midi: None) -> None:

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI")
	fake_out = sequencer.midi_out
	steps: list[int] = []
	sequencer.on_event("step", steps.append)

	await sequencer.schedule_pattern(_cycle_pattern(4, [1]), start_pulse=0)

	await sequencer._process_pulse(6)
	await asyncio.sleep(0)

	assert sequencer.current_index == 1
	assert steps == [0, 1]
	assert fake_out.sent == [mido.Message("note_on", channel=0, note=40, velocity=127)]
	assert (0, 40) in sequencer.active_notes

	await sequencer._process_pulse(9)

	assert fake_out.types() == ["note_on", "note_off"]
	assert sequencer.active_notes == set()


@pytest.mark.asyncio
async def test_repeating_pattern_rebuilds_before_next_pass (patch_midi: None) -> None:

	"""The pattern is rebuilt a sixteenth before its pass ends and queued for the next pass."""

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI")
	pattern = _cycle_pattern(8, [0])
	rebuilt: list[int] = []
	original_rebuild = pattern.rebuild

	def tracking_rebuild () -> None:

		rebuilt.append(sequencer.pulse_count)
		original_rebuild()

	pattern.rebuild = tracking_rebuild

	await sequencer.schedule_pattern_repeating(pattern, start_pulse=0)

	assert sequencer.cycles[0][0] == 48 - 6

	await sequencer._reschedule_due(41)
	assert rebuilt == []

	await sequencer._reschedule_due(42)
	assert len(rebuilt) == 1

	note_pulses = sorted(event.pulse for event in sequencer.event_queue if event.message_type == "note_on")

	assert note_pulses == [0, 48]
	assert sequencer.cycles[0][0] == 48 + 48 - 6


@pytest.mark.asyncio
async def test_resized_cycle_changes_pass_length (patch_midi: None) -> None:

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI")
	pattern = _cycle_pattern(8, [])

	await sequencer.schedule_pattern_repeating(pattern, start_pulse=0)

	pattern.editor.set_count(4)
	await sequencer._reschedule_due(42)

	_, _, scheduled = sequencer.cycles[0]

	assert scheduled.length_pulses == 24
	assert scheduled.reschedule_pulse == 48 + 24 - 6


@pytest.mark.asyncio
async def test_clock_output_brackets_playback (patch_midi: None) -> None:

	"""With clock output on, MIDI Start precedes the first clock tick and Stop follows the last."""

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI", initial_bpm=240, clock_output=True, spin_wait=False)
	fake_out = sequencer.midi_out

	await sequencer.schedule_pattern_repeating(_cycle_pattern(4, [0, 2]), start_pulse=0)
	await sequencer.start()
	await asyncio.sleep(0.05)
	await sequencer.stop()

	types = fake_out.types()

	assert types[0] == "start"
	assert types[1] == "clock"
	assert "note_on" in types
	assert types.index("stop") > len(types) - types[::-1].index("clock") - 1
	assert fake_out.closed is True
	assert sequencer.current_index == -1
	assert sequencer.event_queue == []


@pytest.mark.asyncio
async def test_no_clock_messages_when_disabled (patch_midi: None) -> None:

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI", initial_bpm=240, spin_wait=False)
	fake_out = sequencer.midi_out

	await sequencer.schedule_pattern_repeating(_cycle_pattern(4, [0]), start_pulse=0)
	await sequencer.start()
	await asyncio.sleep(0.03)
	await sequencer.stop()

	types = fake_out.types()

	assert "note_on" in types
	assert "clock" not in types
	assert "start" not in types
	assert "stop" not in types


@pytest.mark.asyncio
async def test_stop_emits_event (patch_midi: None) -> None:

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI", spin_wait=False)
	stopped: list[bool] = []
	sequencer.on_event("stop", lambda: stopped.append(True))

	await sequencer.schedule_pattern_repeating(_cycle_pattern(4, [0]), start_pulse=0)
	await sequencer.start()
	await sequencer.stop()

	assert stopped == [True]
	assert sequencer.running is False


@pytest.mark.asyncio
async def test_start_after_stop_reopens_output (patch_midi: None) -> None:

	"""A stopped sequencer can play again; the closed port is replaced by a fresh one."""

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Dummy MIDI", initial_bpm=240, spin_wait=False)
	first_out = sequencer.midi_out

	await sequencer.schedule_pattern_repeating(_cycle_pattern(4, [0]), start_pulse=0)
	await sequencer.start()
	await sequencer.stop()

	assert first_out.closed is True
	assert sequencer.midi_out is None

	await sequencer.schedule_pattern_repeating(_cycle_pattern(4, [0]), start_pulse=0)
	await sequencer.start()
	await asyncio.sleep(0.03)

	second_out = sequencer.midi_out

	await sequencer.stop()

	assert second_out is not None
	assert second_out is not first_out
	assert sequencer.output_device_name == "Dummy MIDI"
	assert "note_on" in second_out.types()


@pytest.mark.asyncio
async def test_runs_silently_without_output (monkeypatch: pytest.MonkeyPatch) -> None:

	"""With no MIDI output available the transport still advances the playhead."""

	monkeypatch.setattr(mido, "get_output_names", lambda: [])

	sequencer = cyclochron.sequencer.Sequencer()

	assert sequencer.midi_out is None

	await sequencer.schedule_pattern(_cycle_pattern(4, [0]), start_pulse=0)
	await sequencer._process_pulse(12)

	assert sequencer.current_index == 2


@pytest.mark.asyncio
async def test_unknown_device_runs_silently (patch_midi: None) -> None:

	sequencer = cyclochron.sequencer.Sequencer(output_device_name="Not There")

	assert sequencer.midi_out is None


def test_set_bpm (patch_midi: None) -> None:

	sequencer = cyclochron.sequencer.Sequencer(initial_bpm=120)

	assert sequencer.seconds_per_pulse == pytest.approx(0.5 / 24)

	sequencer.set_bpm(60)

	assert sequencer.seconds_per_pulse == pytest.approx(1.0 / 24)

	with pytest.raises(ValueError):
		sequencer.set_bpm(0)
