import logging
import random

import cyclochron
import cyclochron.display
import cyclochron.sequence_utils

logging.basicConfig(level=logging.WARNING)

rng = random.Random(2024)

# Print a few rhythms for each ring size, with every axis of symmetry they have.
for count in (5, 8, 9, 16):

	for _ in range(3):

		result = cyclochron.generate(count, max_rest_run=3, max_active_run=2, rng=rng)

		if not result.ok:
			print(f"{count:>3}: {result.error}")
			continue

		ring = cyclochron.display.format_cycle(result.sequence, range(count))
		axes = cyclochron.sequence_utils.symmetry_axes(result.sequence)

		print(f"{count:>3}: {ring}  {result.axis.value}-axis  axes at {axes}")
