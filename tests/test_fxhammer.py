import pytest

from zgbtools.fxhammer import FxHammerError, convert, validate, write_outputs
from zgbtools.pathutil import byte_to_binary
from zgbtools.sfx import (
    ADDR_CHAN_USED,
    ADDR_SFX_DATA,
    ADDR_SIG_START,
    EFFECTNUM_USE_ALL,
    FXHAMMER_FILE_MIN_SZ,
    SFX_DATA_SZ,
    Options,
    System,
)
from zgbtools.sfx_gb import render_effect_gb
from zgbtools.sfx_psg import render_effect_psg

CH2_RECORD = bytes([1, 0x20, 0xF0, 0x80, 0x40, 0x00, 0x00, 0x00])
CH4_RECORD = bytes([2, 0x00, 0x00, 0x00, 0x00, 0x02, 0xF1, 0x55])


def make_save(effects, count=1):
    buf = bytearray(ADDR_SFX_DATA + count * SFX_DATA_SZ)
    buf[ADDR_SIG_START:ADDR_SIG_START + 9] = b"FX HAMMER"
    for number, (channels, records) in effects.items():
        buf[ADDR_CHAN_USED + number] = channels
        start = ADDR_SFX_DATA + number * SFX_DATA_SZ
        buf[start:start + len(records)] = records
    return bytes(buf)


def effect_slice(data, number):
    start = ADDR_SFX_DATA + number * SFX_DATA_SZ
    return data[start:start + SFX_DATA_SZ]


def test_validate_rejects_short_file():
    with pytest.raises(FxHammerError, match="shorter"):
        validate(b"\0" * (FXHAMMER_FILE_MIN_SZ - 1))


def test_validate_rejects_bad_signature():
    with pytest.raises(FxHammerError, match="Invalid"):
        validate(b"\0" * FXHAMMER_FILE_MIN_SZ)


def test_convert_rejects_bad_signature():
    with pytest.raises(FxHammerError):
        convert(b"\0" * FXHAMMER_FILE_MIN_SZ, Options(identifier="sfx"))


def test_convert_single_gb_effect():
    data = make_save({0: (0x30, CH2_RECORD)})
    options = Options(identifier="sfx", effectnum=0)
    source, header = convert(data, options)
    expected, mask = render_effect_gb("sfx", 0x30, effect_slice(data, 0), Options(identifier="sfx", effectnum=0))
    assert expected in source
    assert source.startswith(
        "#pragma bank 255\n\n#include <gbdk/platform.h>\n#include <stdint.h>\n\n"
    )
    assert f"#define MUTE_MASK_sfx 0b{byte_to_binary(mask)}\n" in header


def test_header_structure():
    data = make_save({0: (0x30, CH2_RECORD)})
    _, header = convert(data, Options(identifier="sfx", effectnum=0))
    assert header.startswith("#ifndef __sfx_INCLUDE__\n#define __sfx_INCLUDE__\n")
    assert "BANKREF_EXTERN(sfx)\n" in header
    assert "extern const uint8_t sfx[];\n" in header
    assert "extern void __mute_mask_sfx;\n" in header
    assert header.endswith("#endif\n")


def test_all_effects_get_numbered_identifiers_and_empty_ones_are_skipped():
    data = make_save({0: (0x30, CH2_RECORD), 10: (0x03, CH4_RECORD)}, count=11)
    source, header = convert(data, Options(identifier="sfx", effectnum=EFFECTNUM_USE_ALL))
    assert "BANKREF_EXTERN(sfx_00)" in header
    assert "BANKREF_EXTERN(sfx_0a)" in header
    assert "sfx_01" not in header
    assert header.count("BANKREF_EXTERN(") == 2
    assert source.count("BANKREF(") == 2


def test_single_effect_number_selects_only_that_effect():
    data = make_save({0: (0x30, CH2_RECORD), 2: (0x03, CH4_RECORD)}, count=3)
    source, header = convert(data, Options(identifier="boom", effectnum=2))
    expected, _ = render_effect_gb("boom", 0x03, effect_slice(data, 2), Options(identifier="boom", effectnum=2))
    assert header.count("BANKREF_EXTERN(") == 1
    assert expected in source


def test_psg_system_uses_psg_renderer():
    data = make_save({0: (0x33, CH2_RECORD)})
    options = Options(identifier="sfx", effectnum=0, system=System.PSG)
    source, header = convert(data, options)
    expected, mask = render_effect_psg("sfx", 0x33, effect_slice(data, 0), Options(identifier="sfx", effectnum=0, system=System.PSG))
    assert expected in source
    assert f"#define MUTE_MASK_sfx 0b{byte_to_binary(mask)}\n" in header


def test_bank_option_sets_pragma():
    data = make_save({0: (0x30, CH2_RECORD)})
    source, _ = convert(data, Options(identifier="sfx", effectnum=0, bank=7))
    assert source.startswith("#pragma bank 7\n")


def test_used_effect_without_data_raises():
    data = make_save({5: (0x30, b"")}, count=1)
    with pytest.raises(FxHammerError):
        convert(data, Options(identifier="sfx", effectnum=5))


def test_write_outputs_writes_source_and_header(tmp_path):
    data = make_save({0: (0x30, CH2_RECORD)})
    options = Options(identifier="snd", effectnum=0, outfilename=str(tmp_path / "snd.c"))
    source_path, header_path = write_outputs(data, options)
    source, header = convert(data, options)
    assert header_path == tmp_path / "snd.h"
    assert source_path.read_text() == source
    assert header_path.read_text() == header