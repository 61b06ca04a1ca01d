"""Conversion of FX Hammer save files into C source and header text."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from zgbtools.pathutil import byte_to_binary, replace_extension, write_file
from zgbtools.sfx import (
    ADDR_CHAN_USED,
    ADDR_SFX_DATA,
    ADDR_SIG_START,
    EFFECTNUM_MAX,
    EFFECTNUM_USE_ALL,
    FXHAMMER_FILE_MIN_SZ,
    SFX_DATA_SZ,
    Options,
    System,
)
from zgbtools.sfx_gb import render_effect_gb
from zgbtools.sfx_psg import render_effect_psg

SIGNATURE = b"FX HAMMER"


class FxHammerError(Exception):
    """Raised when FX Hammer data is invalid or cannot be converted."""


def validate(data: bytes) -> None:
    """Raise FxHammerError unless ``data`` looks like an FX Hammer save file."""
    if len(data) < FXHAMMER_FILE_MIN_SZ:
        raise FxHammerError(
            f"Error: save file is shorter than minimum {FXHAMMER_FILE_MIN_SZ} bytes"
        )
    if bytes(data[ADDR_SIG_START:ADDR_SIG_START + len(SIGNATURE)]) != SIGNATURE:
        raise FxHammerError("Error: Invalid FX HAMMER file format")


def _selected_effects(options: Options) -> Iterator[tuple[int, str]]:
    if options.effectnum == EFFECTNUM_USE_ALL:
        for number in range(EFFECTNUM_MAX + 1):
            yield number, f"{options.identifier}_{number:02x}"
    elif 0 <= options.effectnum <= EFFECTNUM_MAX:
        yield options.effectnum, options.identifier


def _header_preamble(identifier: str) -> str:
    return (
        f"#ifndef __{identifier}_INCLUDE__\n"
        f"#define __{identifier}_INCLUDE__\n\n"
        "#include <gbdk/platform.h>\n"
        "#include <stdint.h>\n\n"
    )


def _source_preamble(bank: int) -> str:
    return (
        f"#pragma bank {bank}\n\n"
        "#include <gbdk/platform.h>\n"
        "#include <stdint.h>\n\n"
    )


def _header_entry(identifier: str, mask: int) -> str:
    return (
        f"#define MUTE_MASK_{identifier} 0b{byte_to_binary(mask)}\n"
        f"BANKREF_EXTERN({identifier})\n"
        f"extern const uint8_t {identifier}[];\n"
        f"extern void __mute_mask_{identifier};\n\n"
    )


def convert(data: bytes, options: Options) -> tuple[str, str]:
    """Return the C source and header text for the effects chosen by ``options``."""
    data = bytes(data)
    validate(data)
    render = render_effect_gb if options.system == System.GB else render_effect_psg

    source = [_source_preamble(options.bank)]
    header = [_header_preamble(options.identifier)]

    for number, identifier in _selected_effects(options):
        channels = data[ADDR_CHAN_USED + number]
        if channels == 0:
            continue
        start = ADDR_SFX_DATA + number * SFX_DATA_SZ
        effect = data[start:start + SFX_DATA_SZ]
        try:
            text, mask = render(identifier, channels, effect, options)
        except ValueError as exc:
            raise FxHammerError(f"Error: effect {number}: {exc}") from exc
        source.append(text)
        header.append(_header_entry(identifier, mask))

    header.append("#endif\n")
    return "".join(source), "".join(header)


def write_outputs(data: bytes, options: Options) -> tuple[Path, Path]:
    """Write the C source to ``options.outfilename`` and the header beside it.

    Returns the paths of the source and of the header written.
    """
    source_text, header_text = convert(data, options)
    source_path = Path(options.outfilename)
    header_path = Path(replace_extension(options.outfilename, ".h"))
    write_file(str(source_path), source_text.encode("latin-1"))
    write_file(str(header_path), header_text.encode("latin-1"))
    return source_path, header_path