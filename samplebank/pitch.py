"""Note-name <-> MIDI number conversion.

This model numbers C0 as MIDI 12 (so A0 is 21 and C8 is 108). Sample file
names are derived from these numbers, so the convention must not drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

from .errors import InvalidNoteNameError, OutOfRangeError

MIDI_C0 = 12
MAX_VALIDATED_NUMBER = 100

NOTES: Mapping[str, int] = MappingProxyType(
    {
        "C": 0,
        "Db": 1,
        "D": 2,
        "Eb": 3,
        "E": 4,
        "F": 5,
        "Gb": 6,
        "G": 7,
        "Ab": 8,
        "A": 9,
        "Bb": 10,
        "B": 11,
    }
)
_NOTE_NAMES: Mapping[int, str] = MappingProxyType({value: name for name, value in NOTES.items()})


@dataclass(frozen=True, slots=True)
class Pitch:
    note_name: str
    octave: int

    @property
    def number(self) -> int:
        return note_to_number(self.note_name, self.octave)

    @classmethod
    def from_number(cls, number: int) -> "Pitch":
        return number_to_pitch(number)

    def __str__(self) -> str:
        return f"{self.note_name}{self.octave}"


def note_to_number(name: str, octave: int) -> int:
    """Return the MIDI number for ``name`` in ``octave``.

    Names are case-sensitive and accidentals are spelled as flats.
    """
    try:
        value = NOTES[name]
    except KeyError as exc:
        raise InvalidNoteNameError(f"Unknown note name: {name!r}") from exc
    return value + MIDI_C0 + octave * 12


def number_to_pitch(number: int) -> Pitch:
    if number < MIDI_C0:
        raise OutOfRangeError(f"MIDI number {number} is below C0 ({MIDI_C0})")
    adjusted = number - MIDI_C0
    return Pitch(note_name=_NOTE_NAMES[adjusted % 12], octave=adjusted // 12)


def pitch_range(low: int, high: int) -> Iterator[Pitch]:
    """Yield pitches from ``low`` to ``high`` inclusive, ascending."""
    for number in range(low, high + 1):
        yield number_to_pitch(number)


def validate_pitch_table(low: int = MIDI_C0, high: int = MAX_VALIDATED_NUMBER) -> None:
    for number in range(low, high + 1):
        pitch = number_to_pitch(number)
        if note_to_number(pitch.note_name, pitch.octave) != number:
            raise OutOfRangeError(f"Broken note table at MIDI number {number} ({pitch})")
