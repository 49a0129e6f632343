from __future__ import annotations

import logging
from pathlib import Path

import mido

from .jobs import SampleJob

_LOGGER = logging.getLogger("samplebank.midi")

# 500 ticks per beat at 120 BPM: one tick per millisecond, so note-off and
# release deltas are the configured milliseconds and the rendered length
# matches durationSeconds + releaseSeconds in instrument.json. Raw millisecond
# deltas at a library-default resolution would play for a different length.
TICKS_PER_BEAT = 500
TEMPO_US_PER_BEAT = 500_000


def build_note_file(job: SampleJob, *, duration_ms: int, release_ms: int) -> mido.MidiFile:
    """Single-note sequence: program change, hold, then a release tail.

    The trailing zero-velocity note-on sits ``release_ms`` after the note-off so
    the synthesizer renders the release.
    """
    midi = mido.MidiFile(type=0, ticks_per_beat=TICKS_PER_BEAT)
    track = mido.MidiTrack()
    midi.tracks.append(track)
    track.append(mido.MetaMessage("set_tempo", tempo=TEMPO_US_PER_BEAT, time=0))
    track.append(mido.Message("program_change", channel=job.channel, program=job.program, time=0))
    track.append(
        mido.Message(
            "note_on", channel=job.channel, note=job.midi_number, velocity=job.velocity, time=0
        )
    )
    track.append(
        mido.Message(
            "note_off",
            channel=job.channel,
            note=job.midi_number,
            velocity=job.velocity,
            time=duration_ms,
        )
    )
    track.append(
        mido.Message("note_on", channel=job.channel, note=job.midi_number, velocity=0, time=release_ms)
    )
    return midi


def write_note_file(job: SampleJob, path: Path, *, duration_ms: int, release_ms: int) -> Path:
    midi = build_note_file(job, duration_ms=duration_ms, release_ms=release_ms)
    midi.save(str(path))
    _LOGGER.debug("Wrote MIDI %s", path)
    return path
