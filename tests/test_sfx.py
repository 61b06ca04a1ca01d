import pytest

from zgbtools.sfx import (
    EFFECTNUM_USE_ALL,
    SFX_DATA_SZ,
    SFX_ENTRY_REC_COUNT,
    Options,
    SfxRecord,
    System,
    parse_effect,
)


def _effect(*records):
    data = b"".join(bytes(r) for r in records)
    return data + bytes(SFX_DATA_SZ - len(data))


def test_parse_stops_at_zero_duration():
    data = _effect((1, 2, 3, 4, 5, 6, 7, 8), (9, 10, 11, 12, 13, 14, 15, 16),
                   (0, 1, 1, 1, 1, 1, 1, 1), (5, 5, 5, 5, 5, 5, 5, 5))
    records = parse_effect(data)
    assert records == [SfxRecord(1, 2, 3, 4, 5, 6, 7, 8),
                       SfxRecord(9, 10, 11, 12, 13, 14, 15, 16)]


def test_parse_field_order():
    record = parse_effect(_effect((3, 0x20, 0xF0, 0x80, 0x40, 0x02, 0xA0, 0x33)))[0]
    assert record.duration == 3
    assert record.ch2pan == 0x20
    assert record.ch2vol == 0xF0
    assert record.ch2duty == 0x80
    assert record.ch2note == 0x40
    assert record.ch4pan == 0x02
    assert record.ch4vol == 0xA0
    assert record.ch4freq == 0x33


def test_parse_all_records_populated():
    data = bytes([1] * SFX_DATA_SZ)
    assert len(parse_effect(data)) == SFX_ENTRY_REC_COUNT


def test_parse_empty_effect():
    assert parse_effect(bytes(SFX_DATA_SZ)) == []


def test_parse_truncated_raises():
    with pytest.raises(ValueError):
        parse_effect(bytes([1] * 12))


def test_options_defaults():
    options = Options()
    assert options.system is System.GB
    assert options.effectnum == EFFECTNUM_USE_ALL
    assert options.use_pan is True
    assert options.cut_sound is False


def test_system_from_value():
    assert System(2) is System.PSG