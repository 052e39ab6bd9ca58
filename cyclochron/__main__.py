import argparse
import dataclasses
import logging
import random
import sys
import typing

import cyclochron.config
import cyclochron.display
import cyclochron.mirror
import cyclochron.sequence_utils
import cyclochron.session


logger = logging.getLogger(__name__)


def build_parser () -> argparse.ArgumentParser:

	"""
	Command-line interface: ``generate`` prints a rhythm, ``play`` plays one.
	"""

	parser = argparse.ArgumentParser(prog="cyclochron", description="Circular sequencer with symmetric rhythm generation")
	parser.add_argument("--config", default="cyclochron.yaml", help="YAML settings file (default: cyclochron.yaml)")
	parser.add_argument("--verbose", action="store_true", help="Log debug detail")

	subparsers = parser.add_subparsers(dest="command", required=True)

	for name, help_text in (("generate", "Generate and print a rhythm"), ("play", "Generate a rhythm and play it over MIDI")):

		sub = subparsers.add_parser(name, help=help_text)
		sub.add_argument("--steps", type=int, help="Number of positions (2-256)")
		sub.add_argument("--max-rest", type=int, help="Longest run of rests")
		sub.add_argument("--max-active", type=int, help="Longest run of active positions")
		sub.add_argument("--no-off-axis", action="store_true", help="Keep the axis on position 0")
		sub.add_argument("--seed", type=int, help="Random seed for a repeatable rhythm")

		if name == "generate":
			sub.add_argument("--count", type=int, default=1, help="How many rhythms to print (default: 1)")
		else:
			sub.add_argument("--bpm", type=float, help="Tempo in beats per minute")
			sub.add_argument("--device", help="MIDI output device name")
			sub.add_argument("--channel", type=int, help="MIDI channel (1-16)")
			sub.add_argument("--note", type=int, help="MIDI note number (0-127)")
			sub.add_argument("--no-clock", action="store_true", help="Do not send MIDI clock, start, or stop")
			sub.add_argument("--display", action="store_true", help="Show the live terminal view")
			sub.add_argument("--hotkeys", action="store_true", help="Enable single-key control")

	return parser


def _apply_overrides (settings: cyclochron.config.Settings, args: argparse.Namespace) -> cyclochron.config.Settings:

	"""Fold command-line values over the loaded settings, revalidating both sections."""

	generator: typing.Dict[str, typing.Any] = {}

	if args.steps is not None:
		generator["position_count"] = args.steps
	if args.max_rest is not None:
		generator["max_rest_run"] = args.max_rest
	if args.max_active is not None:
		generator["max_active_run"] = args.max_active
	if args.no_off_axis:
		generator["allow_off_axis_symmetry"] = False

	playback: typing.Dict[str, typing.Any] = {}

	if args.command == "play":
		if args.bpm is not None:
			playback["bpm"] = args.bpm
		if args.device is not None:
			playback["output_device"] = args.device
		if args.channel is not None:
			playback["midi_channel"] = args.channel
		if args.note is not None:
			playback["note"] = args.note
		if args.no_clock:
			playback["clock_output"] = False

	return cyclochron.config.Settings(
		generator = dataclasses.replace(settings.generator, **generator),
		playback = dataclasses.replace(settings.playback, **playback)
	)


def _generate (settings: cyclochron.config.Settings, seed: typing.Optional[int], count: int) -> int:

	rng = random.Random(seed)
	generator = settings.generator
	failures = 0

	for _ in range(count):

		result = cyclochron.mirror.generate(
			generator.position_count,
			generator.max_rest_run,
			generator.max_active_run,
			generator.allow_off_axis_symmetry,
			rng
		)

		if result.error is not None:
			logger.warning(f"Could not generate a rhythm: {result.error}")
			failures += 1
			continue

		assert result.sequence is not None

		order = list(range(len(result.sequence)))
		hits = cyclochron.sequence_utils.sequence_to_indices(result.sequence)

		print(f"{cyclochron.display.format_cycle(result.sequence, order)}  axis: {result.axis.value}  hits: {hits}")

	return 1 if failures == count else 0


def _play (settings: cyclochron.config.Settings, args: argparse.Namespace) -> int:

	session = cyclochron.session.Session(settings, seed=args.seed)

	result = session.editor.generate()

	if result.error is not None:
		return 1

	if args.display:
		session.display()

	if args.hotkeys:
		session.hotkeys()

	session.play()

	return 0


def main (argv: typing.Optional[typing.Sequence[str]] = None) -> int:

	"""
	Main entry point for the cyclochron command.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	try:
		settings = _apply_overrides(cyclochron.config.load_settings(args.config), args)
	except ValueError as e:
		logger.error(f"Invalid settings: {e}")
		return 2

	if args.command == "generate":
		return _generate(settings, args.seed, args.count)

	return _play(settings, args)


if __name__ == "__main__":
	sys.exit(main())
