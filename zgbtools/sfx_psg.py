"""Rendering of an FX Hammer effect for the SN76489 PSG sound chip."""

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

NOTE_FREQS_PSG = (
    0x0357, 0x0327, 0x02FA, 0x02CF, 0x02A8, 0x0280, 0x025C, 0x023B, 0x021B, 0x01FC, 0x01E0, 0x01C5,
    0x01AC, 0x0193, 0x017D, 0x0167, 0x0153, 0x0140, 0x012E, 0x011D, 0x010D, 0x00FE, 0x00F0, 0x00E3,
    0x00D6, 0x00CA, 0x00BE, 0x00B4, 0x00AA, 0x00A0, 0x0097, 0x008F, 0x0087, 0x007F, 0x0078, 0x0071,
    0x006B, 0x0065, 0x005F, 0x005A, 0x0055, 0x0050, 0x004C, 0x0047, 0x0043, 0x0040, 0x003C, 0x0039,
    0x0035, 0x0032, 0x0030, 0x002D, 0x002A, 0x0028, 0x0026, 0x0024, 0x0022, 0x0020, 0x001E, 0x001C,
    0x001B, 0x0019, 0x0018, 0x0016, 0x0015, 0x0014, 0x0013, 0x0012, 0x0011, 0x0010, 0x000F, 0x000E,
)


def _note_freq(note: int) -> int:
    index = (note - 0x40) >> 1
    if not 0 <= index < len(NOTE_FREQS_PSG):
        raise ValueError(f"note {note:#04x} out of range")
    return NOTE_FREQS_PSG[index]


def _frame(channel: int, b: int, c: int, cache: list[int]) -> tuple[list[str], int]:
    values = []
    count = 0
    if b != cache[0]:
        values.append(0b10010000 | ((channel & 0x03) << 5) | (b >> 4))
        cache[0] = b
        count += 1
    if c != cache[1]:
        if channel == FX_CHAN_1:
            values.append(0b10000000 | ((channel & 0x03) << 5) | (c & 0x0F))
            values.append((c >> 4) & 0x7F)
            cache[1] = c
            count += 2
        elif channel == FX_CHAN_3:
            values.append(0b10000100 | ((channel & 0x03) << 5) | ((c & 0xC0) >> 6))
            cache[1] = c
            count += 1
    return [f"0x{value:02x}" for value in values], count


def render_effect_psg(identifier: str, channels: int, effect_data: bytes,
                      options: Options) -> tuple[str, int]:
    """Return the C source of one effect and its channel mute mask."""
    ch_mask = _channel_mask(channels)
    out = [f"BANKREF({identifier})\nconst uint8_t {identifier}[] = {{\n"]

    ch2_cache = [CACHE_UNSET, CACHE_UNSET]
    ch4_cache = [CACHE_UNSET, CACHE_UNSET]

    for record in parse_effect(effect_data):
        count = 0
        body = []
        if record.ch2pan:
            values, cnt = _frame(FX_CHAN_1, record.ch2vol, _note_freq(record.ch2note), ch2_cache)
            count += cnt
            if cnt:
                body.append(",".join(values) + ",")
        if record.ch4pan:
            values, cnt = _frame(FX_CHAN_3, record.ch4vol, record.ch4freq, ch4_cache)
            count += cnt
            if cnt:
                body.append(",".join(values) + ",")

        first, *rest = _split_delay(options, record.duration)
        out.append(f"0x{((first & 0x0F) << 4) | count:02x},")
        out.extend(body)
        out.append("\n")
        out.extend(f"0x{(step & 0x0F) << 4:02x},\n" for step in rest)

    count = 0
    if options.cut_sound:
        count += bool(ch_mask & CH2_MASK) + bool(ch_mask & CH4_MASK)
    if count:
        out.append(f"0x{count:02x},")
    if options.cut_sound:
        if ch_mask & CH2_MASK:
            out.append(f"0x{0b10111111:02x},")
        if ch_mask & CH4_MASK:
            out.append(f"0x{0b11111111:02x},")
    if count:
        out.append("\n")

    out.append("0x00\n};\n")
    out.append(f"void AT(0b{byte_to_binary(ch_mask)}) __mute_mask_{identifier};\n\n")
    return "".join(out), ch_mask