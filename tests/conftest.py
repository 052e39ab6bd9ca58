import typing

import mido
import pytest


class FakeMidiOut:

	"""MIDI output stub that records every message sent to it."""

	def __init__ (self) -> None:

		self.sent: typing.List[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.sent.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


	def panic (self) -> None:

		"""No-op panic for the fake device."""

		return None


	def reset (self) -> None:

		"""No-op reset for the fake device."""

		return None


	def types (self) -> typing.List[str]:

		"""Message types in the order they were sent."""

		return [message.type for message in self.sent]


class ScriptedRandom:

	"""Random source that replays a fixed list of coin results.

	``True`` reads as a value below 0.5 (heads, active), ``False`` as a value above it.
	Reading past the end of the script fails the test.
	"""

	def __init__ (self, flips: typing.Sequence[bool]) -> None:

		self._flips = list(flips)
		self.calls = 0


	def random (self) -> float:

		assert self.calls < len(self._flips), "Random source read more often than scripted"

		flip = self._flips[self.calls]
		self.calls += 1

		return 0.0 if flip else 0.99


# Module-level reference so tests can inspect the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> typing.List[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	fake = FakeMidiOut()
	_current_fake_output = fake
	return fake


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def scripted_random () -> typing.Callable[[typing.Sequence[bool]], ScriptedRandom]:

	"""Factory for random sources that replay the given coin results."""

	return ScriptedRandom
