import pytest

from zgbtools.pathutil import byte_to_binary
from zgbtools.sfx import SFX_DATA_SZ, Options
from zgbtools.sfx_psg import render_effect_psg


def _effect(*records):
    data = b"".join(bytes(r) for r in records)
    return data + bytes(SFX_DATA_SZ - len(data))


HEADER = "BANKREF(fx)\nconst uint8_t fx[] = {\n"


def test_empty_effect_layout():
    text, mask = render_effect_psg("fx", 0x03, _effect(), Options())
    assert mask == 0x08
    expected = (
        HEADER
        + "0x00\n};\n"
        + f"void AT(0b{byte_to_binary(0x08)}) __mute_mask_fx;\n\n"
    )
    assert text == expected


def test_single_ch2_record():
    record = (1, 0x20, 0xF0, 0x80, 0x40, 0, 0, 0)
    text, _ = render_effect_psg("fx", 0x30, _effect(record), Options())
    lines = text.splitlines(keepends=True)
    assert lines[2] == "0x03,0xbf,0xa7,0x35,\n"


def test_repeated_record_emits_nothing_new():
    record = (1, 0x20, 0xF0, 0x80, 0x40, 0, 0, 0)
    text, _ = render_effect_psg("fx", 0x30, _effect(record, record), Options())
    lines = text.splitlines(keepends=True)
    assert lines[3] == "0x00,\n"


def test_ch4_record_counts_two_values():
    record = (1, 0, 0, 0, 0, 0x02, 0x80, 0x40)
    text, _ = render_effect_psg("fx", 0x03, _effect(record), Options())
    line = text.splitlines(keepends=True)[2]
    assert line.startswith("0x02,")
    assert len(line.rstrip("\n").rstrip(",").split(",")) == 3


@pytest.mark.parametrize("delay,duration", [(1, 20), (2, 20), (1, 1), (3, 5)])
def test_delay_nibbles_sum_to_total(delay, duration):
    record = (duration, 0, 0, 0, 0, 0, 0, 0)
    text, _ = render_effect_psg("fx", 0x30, _effect(record), Options(delay=delay))
    body = text.splitlines(keepends=True)[2:-4]
    total = sum(int(line.split(",")[0], 16) >> 4 for line in body)
    assert total == delay * duration - 1


def test_cut_sound_both_channels():
    text, mask = render_effect_psg("fx", 0x33, _effect(), Options(cut_sound=True))
    assert mask == 0x0A
    cut_line = f"0x02,0x{0b10111111:02x},0x{0b11111111:02x},\n"
    assert text == (
        HEADER + cut_line + "0x00\n};\n"
        + f"void AT(0b{byte_to_binary(0x0A)}) __mute_mask_fx;\n\n"
    )


def test_pan_option_has_no_effect():
    record = (2, 0x20, 0xF0, 0x80, 0x42, 0x02, 0x70, 0x11)
    with_pan, _ = render_effect_psg("fx", 0x33, _effect(record), Options(use_pan=True))
    without_pan, _ = render_effect_psg("fx", 0x33, _effect(record), Options(use_pan=False))
    assert with_pan == without_pan


def test_bad_note_raises():
    record = (1, 0x20, 0xF0, 0x80, 0xFE, 0, 0, 0)
    with pytest.raises(ValueError):
        render_effect_psg("fx", 0x30, _effect(record), Options())