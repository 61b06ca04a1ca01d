"""Layout of FX Hammer sound effect data and conversion options."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

BANK_DEFAULT = 255
BANK_NUM_MIN = 1
BANK_NUM_MAX = 255

EFFECTNUM_USE_ALL = 999
EFFECTNUM_MAX = 59
EFFECTNUM_DEFAULT = EFFECTNUM_USE_ALL

DELAY_DEFAULT = 1

FX_CHAN_1 = 1
FX_CHAN_3 = 3

CACHE_UNSET = -1

ADDR_PRIORITY = 0x200
ADDR_CHAN_USED = 0x300
ADDR_SFX_DATA = 0x400

ADDR_SIG_START = 0x09
ADDR_SIG_END = 0x12

SFX_DATA_SZ = 0x100
FXHAMMER_FILE_MIN_SZ = ADDR_SFX_DATA + SFX_DATA_SZ

SFX_ENTRY_REC_COUNT = 32

CH2_MASK = 0x02
CH4_MASK = 0x08

_RECORD = struct.Struct("8B")


class System(IntEnum):
    """Target sound hardware."""

    UNSUPPORTED = 0
    GB = 1
    PSG = 2


SYSTEM_DEFAULT = System.GB


@dataclass(frozen=True)
class SfxRecord:
    """One frame of an effect.

    Pan values use the NR51 layout (inverted by FX Hammer), volumes NR22/NR42,
    the duty NR21 and the noise frequency NR43; ``ch2note`` is a note number
    offset by 0x40 and doubled.
    """

    duration: int
    ch2pan: int
    ch2vol: int
    ch2duty: int
    ch2note: int
    ch4pan: int
    ch4vol: int
    ch4freq: int


@dataclass
class Options:
    """Settings for converting an FX Hammer file."""

    infilename: str = ""
    outfilename: str = ""
    identifier: str = ""
    cut_sound: bool = False
    use_pan: bool = True
    effectnum: int = EFFECTNUM_DEFAULT
    system: System = SYSTEM_DEFAULT
    bank: int = BANK_DEFAULT
    delay: int = DELAY_DEFAULT


def parse_effect(data: bytes) -> list[SfxRecord]:
    """Return the populated records of one effect.

    Reading stops at the first record whose duration is 0.
    """
    data = bytes(data)
    records = []
    for index in range(SFX_ENTRY_REC_COUNT):
        start = index * _RECORD.size
        chunk = data[start:start + _RECORD.size]
        if len(chunk) < _RECORD.size:
            raise ValueError("effect data is truncated")
        record = SfxRecord(*_RECORD.unpack(chunk))
        if record.duration == 0:
            break
        records.append(record)
    return records


def _channel_mask(channels: int) -> int:
    return (CH2_MASK if channels & 0xF0 else 0) | (CH4_MASK if channels & 0x0F else 0)


def _split_delay(options: Options, duration: int) -> list[int]:
    """Split the frame delay into steps of at most 15 frames."""
    delay = max(0, options.delay * duration - 1) & 0xFF
    steps = [min(15, delay)]
    delay -= steps[0]
    while delay > 0:
        step = min(15, delay)
        steps.append(step)
        delay -= step
    return steps