"""Standard MIDI File export of a compiled Timeline.

Writes a type 1 file at 480 ticks per beat.  The first track holds the tempo
map (one ``set_tempo`` per section, plus sampled ``tempo`` automation) and
each instrument gets its own track after it.  Melodic instruments take
channels in order, skipping channel 10; drum tokens are mapped through the
General MIDI drum map and always play on channel 10.
"""

import logging
import typing

import mido

import etherdaw.automation
import etherdaw.constants.gm_drums
import etherdaw.timeline


logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 480

MIDI_CHANNELS = 16


def velocity_to_midi (velocity: float) -> int:

	"""Map 0-1 to 1-127.  Zero is avoided because note_on at velocity 0 means note_off."""

	return max(1, min(127, int(round(velocity * 127))))


def beats_to_ticks (beats: float) -> int:

	return max(0, int(round(beats * TICKS_PER_BEAT)))


def _channels (timeline: etherdaw.timeline.Timeline) -> typing.Dict[str, int]:

	free = [channel for channel in range(MIDI_CHANNELS) if channel != etherdaw.constants.gm_drums.GM_DRUM_CHANNEL]
	channels: typing.Dict[str, int] = {}

	for i, instrument in enumerate(timeline.instruments):
		channels[instrument] = free[i % len(free)]

	return channels


def _to_track (events: typing.List[typing.Tuple[int, int, mido.Message]], name: str) -> mido.MidiTrack:

	"""Turn absolute-tick events into a track with delta times.  Events at one tick keep their sort rank order."""

	track = mido.MidiTrack()
	track.append(mido.MetaMessage("track_name", name=name, time=0))

	last_tick = 0

	for tick, _, message in sorted(events, key=lambda event: (event[0], event[1])):
		track.append(message.copy(time=tick - last_tick))
		last_tick = tick

	return track


def tempo_track (timeline: etherdaw.timeline.Timeline) -> mido.MidiTrack:

	events: typing.List[typing.Tuple[int, int, mido.Message]] = []

	if not timeline.sections:
		events.append((0, 0, mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(timeline.settings.tempo))))

	for marker in timeline.sections:
		events.append((beats_to_ticks(marker.beat), 0, mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(marker.tempo))))
		events.append((beats_to_ticks(marker.beat), 1, mido.MetaMessage("marker", text=marker.name)))

	for event in timeline.automation:
		if event.path == etherdaw.automation.TEMPO_PATH:
			bpm = max(etherdaw.automation.MIN_TEMPO, event.value)
			events.append((beats_to_ticks(event.beat), 2, mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm))))

	return _to_track(events, timeline.settings.title or "tempo")


def instrument_track (timeline: etherdaw.timeline.Timeline, instrument: str, channel: int) -> mido.MidiTrack:

	events: typing.List[typing.Tuple[int, int, mido.Message]] = []

	for note in timeline.notes_for(instrument):

		number = note.midi_note

		if number is None:
			logger.warning(f"No General MIDI note for {note.pitch!r}, skipping")
			continue

		note_channel = etherdaw.constants.gm_drums.GM_DRUM_CHANNEL if note.is_drum else channel
		start = beats_to_ticks(note.beat)
		end = max(start + 1, beats_to_ticks(note.beat + note.duration_beats))
		velocity = velocity_to_midi(note.velocity)

		# note_off sorts before note_on on the same tick so repeated notes retrigger.
		events.append((start, 1, mido.Message("note_on", note=number, velocity=velocity, channel=note_channel)))
		events.append((end, 0, mido.Message("note_off", note=number, velocity=0, channel=note_channel)))

	return _to_track(events, instrument)


def timeline_to_midi (timeline: etherdaw.timeline.Timeline) -> mido.MidiFile:

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = TICKS_PER_BEAT

	mid.tracks.append(tempo_track(timeline))

	for instrument, channel in _channels(timeline).items():
		mid.tracks.append(instrument_track(timeline, instrument, channel))

	return mid


def save_midi (timeline: etherdaw.timeline.Timeline, filename: str) -> None:

	"""Write a timeline to a ``.mid`` file."""

	logger.info(f"Saving MIDI file ({len(timeline.notes)} notes, {len(timeline.instruments)} instruments) to {filename}")

	timeline_to_midi(timeline).save(filename)
