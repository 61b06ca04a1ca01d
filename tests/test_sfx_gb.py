import pytest

from zgbtools.pathutil import byte_to_binary
from zgbtools.sfx import SFX_DATA_SZ, Options
from zgbtools.sfx_gb import render_effect_gb


def _effect(*records):
    data = b"".join(bytes(r) for r in records)
    return data + bytes(SFX_DATA_SZ - len(data))


HEADER = "BANKREF(fx)\nconst uint8_t fx[] = {\n"


def _body(text):
    return text.splitlines(keepends=True)[2:-4]


def test_empty_effect_layout():
    text, mask = render_effect_gb("fx", 0x30, _effect(), Options())
    assert mask == 0x02
    expected = (
        HEADER
        + f"0x02,0b{byte_to_binary(0b01000100)},0xff,0b{byte_to_binary(7)}\n}};\n"
        + f"void AT(0b{byte_to_binary(0x02)}) __mute_mask_fx;\n\n"
    )
    assert text == expected


def test_single_ch2_record():
    record = (1, 0x20, 0xF0, 0x80, 0x40, 0, 0, 0)
    text, _ = render_effect_gb("fx", 0x30, _effect(record), Options())
    lines = text.splitlines(keepends=True)
    assert lines[2] == "0x02,0b01000100,0x75,0b01111001,0x80,0xf0,0x2c,0x80,\n"


def test_repeated_record_uses_cache():
    record = (1, 0x20, 0xF0, 0x80, 0x40, 0, 0, 0)
    text, _ = render_effect_gb("fx", 0x30, _effect(record, record), Options())
    lines = text.splitlines(keepends=True)
    assert lines[3] == f"0x01,0b{byte_to_binary(0b01001000 | 1)},0x80,0x80,\n"


@pytest.mark.parametrize("delay,duration", [(1, 20), (2, 20), (1, 1), (3, 5)])
def test_delay_nibbles_sum_to_total(delay, duration):
    record = (duration, 0, 0, 0, 0, 0, 0, 0)
    options = Options(use_pan=False, delay=delay)
    text, _ = render_effect_gb("fx", 0x30, _effect(record), options)
    total = sum(int(line.split(",")[0], 16) >> 4 for line in _body(text))
    assert total == delay * duration - 1


def test_no_pan_option():
    text, _ = render_effect_gb("fx", 0x30, _effect(), Options(use_pan=False))
    assert byte_to_binary(0b01000100) not in text
    assert text.startswith(HEADER + "0x01,")


def test_cut_sound_both_channels():
    text, mask = render_effect_gb("fx", 0x33, _effect(), Options(cut_sound=True))
    assert mask == 0x0A
    assert f"0b{byte_to_binary(0b00101001)},0x00,0xc0" in text
    assert f"0b{byte_to_binary(0b00101011)},0x00,0xc0" in text
    assert text.startswith(HEADER + "0x04,")


def test_ch4_frame_constant_fields():
    record = (1, 0, 0, 0, 0, 0x02, 0xA0, 0x33)
    text, _ = render_effect_gb("fx", 0x03, _effect(record), Options(use_pan=False))
    line = text.splitlines(keepends=True)[2]
    assert line.startswith("0x01,")
    assert ",0x2a,0xa0,0x33,0x80," in line


def test_bad_note_raises():
    record = (1, 0x20, 0xF0, 0x80, 0x00, 0, 0, 0)
    with pytest.raises(ValueError):
        render_effect_gb("fx", 0x30, _effect(record), Options())