"""Rendering of an FX Hammer effect for the Game Boy sound hardware."""

from __future__ import annotations

from zgbtools.pathutil import byte_to_binary
from zgbtools.sfx import (
    CACHE_UNSET,
    CH2_MASK,
    CH4_MASK,
    FX_CHAN_1,
    FX_CHAN_3,
    Options,
    _channel_mask,
    _split_delay,
    parse_effect,
)

NOTE_FREQS_GB = (
    44, 156, 262, 363, 457, 547, 631, 710, 786, 854, 923, 986,
    1046, 1102, 1155, 1205, 1253, 1297, 1339, 1379, 1417, 1452, 1486, 1517,
    1546, 1575, 1602, 1627, 1650, 1673, 1694, 1714, 1732, 1750, 1767, 1783,
    1798, 1812, 1825, 1837, 1849, 1860, 1871, 1881, 1890, 1899, 1907, 1915,
    1923, 1930, 1936, 1943, 1949, 1954, 1959, 1964, 1969, 1974, 1978, 1982,
    1985, 1988, 1992, 1995, 1998, 2001, 2004, 2006, 2009, 2011, 2013, 2015,
)

_PAN_COMMAND = 0b01000100
_END_COMMAND = 7


def _note_freq(note: int) -> int:
    index = (note - 0x40) >> 1
    if not 0 <= index < len(NOTE_FREQS_GB):
        raise ValueError(f"note {note:#04x} out of range")
    return NOTE_FREQS_GB[index]


def _frame(channel: int, a: int, b: int, c: int, d: int, cache: list[int]) -> str:
    mask = 0b01001000 | channel
    if b != cache[0]:
        mask |= 0b00100000
    if c != cache[1]:
        mask |= 0b00010000
    parts = [f",0b{byte_to_binary(mask)}", f",0x{a:02x}"]
    if b != cache[0]:
        parts.append(f",0x{b:02x}")
        cache[0] = b
    if c != cache[1]:
        parts.append(f",0x{c:02x}")
        cache[1] = c
    parts.append(f",0x{d:02x}")
    return "".join(parts)


def render_effect_gb(identifier: str, channels: int, effect_data: bytes,
                     options: Options) -> tuple[str, int]:
    """Return the C source of one effect and its channel mute mask."""
    ch_mask = _channel_mask(channels)
    out = [f"BANKREF({identifier})\nconst uint8_t {identifier}[] = {{\n"]

    ch2_cache = [CACHE_UNSET, CACHE_UNSET]
    ch4_cache = [CACHE_UNSET, CACHE_UNSET]
    old_pan = 0xFF

    for record in parse_effect(effect_data):
        count = 0
        body = []
        if options.use_pan:
            current_pan = 0b01010101 | record.ch2pan | record.ch4pan
            if current_pan != old_pan:
                count += 1
                body.append(f",0b{byte_to_binary(_PAN_COMMAND)},0x{current_pan:x}")
                old_pan = current_pan
        if record.ch2pan:
            count += 1
            freq = _note_freq(record.ch2note)
            body.append(_frame(FX_CHAN_1, record.ch2duty, record.ch2vol,
                               freq & 0xFF, ((freq >> 8) | 0x80) & 0xFF, ch2_cache))
        if record.ch4pan:
            count += 1
            body.append(_frame(FX_CHAN_3, 0x2A, record.ch4vol, record.ch4freq,
                               0x80, ch4_cache))

        first, *rest = _split_delay(options, record.duration)
        out.append(f"0x{((first & 0x0F) << 4) | count:02x}")
        out.extend(body)
        out.append(",\n")
        out.extend(f"0x{(step & 0x0F) << 4:02x},\n" for step in rest)

    count = 1
    if options.cut_sound:
        count += bool(ch_mask & CH2_MASK) + bool(ch_mask & CH4_MASK)
    if options.use_pan:
        count += 1
    out.append(f"0x{count:02x}")

    if options.cut_sound:
        if ch_mask & CH2_MASK:
            out.append(f",0b{byte_to_binary(0b00101001)},0x00,0xc0")
        if ch_mask & CH4_MASK:
            out.append(f",0b{byte_to_binary(0b00101011)},0x00,0xc0")
    if options.use_pan:
        out.append(f",0b{byte_to_binary(_PAN_COMMAND)},0xff")

    out.append(f",0b{byte_to_binary(_END_COMMAND)}\n}};\n")
    out.append(f"void AT(0b{byte_to_binary(ch_mask)}) __mute_mask_{identifier};\n\n")
    return "".join(out), ch_mask