import logging

import cyclochron

logging.basicConfig(level=logging.INFO)

# A ring of 12 sixteenth notes: no more than two hits or two rests in a row.
settings = cyclochron.Settings()
settings.generator.position_count = 12
settings.playback.bpm = 110
settings.playback.note = 36

session = cyclochron.Session(settings, seed=3)

result = session.editor.generate()

if result.ok:
	session.display()
	session.hotkeys()
	session.play()
