"""Export a GBR tile set as C source and header files."""

from __future__ import annotations

import sys
from pathlib import Path

from zgbtools.gbr import Color, GBRError, GBRInfo, extract_file_name, load_gbr

USAGE = "usage: gbr2c file_in.gbr export_folder [-bpp N] [-sms]"
SUPPORTED_BPP = (2, 4)
_EMPTY_PALETTE = "RGB8(0, 0, 0), RGB8(0, 0, 0), RGB8(0, 0, 0), RGB8(0, 0, 0)"


def nearest_sms(color: Color) -> Color:
    """Return the closest colour a 6-bit SMS palette can show; alpha is kept."""
    best = color
    distance = None
    for index in range(64):
        r = (index & 0b00000011) << 6
        g = (index & 0b00001100) << 4
        b = (index & 0b00110000) << 2
        dist = (r - color.r) ** 2 + (g - color.g) ** 2 + (b - color.b) ** 2
        if distance is None or dist < distance:
            best = Color(r, g, b, color.a)
            distance = dist
    return best


def _color(color: Color, sms: bool) -> Color:
    return nearest_sms(color) if sms else color


def _palette_order(info: GBRInfo, palette: int) -> int:
    if palette < len(info.palette_order):
        return info.palette_order[palette]
    return -1


def _tile_palette(info: GBRInfo, tile: int) -> int:
    if tile >= len(info.tile_palettes):
        raise GBRError(f"no palette assigned to tile {tile}")
    return info.tile_palettes[tile]


def _rgb8(color: Color) -> str:
    return f"RGB8({color.r}, {color.g}, {color.b})"


def _palette_line(palette, sms: bool) -> str:
    return ", ".join(_rgb8(_color(color, sms)) for color in palette)


def _plane(pixels, bit: int) -> int:
    value = 0
    for pixel in pixels:
        value = (value << 1) | ((pixel >> bit) & 1)
    return value


def render_header(info: GBRInfo, sms: bool = False) -> str:
    """Return the text of the header file for ``info``."""
    export = info.tile_export
    label = export.label_name
    out = [f"#ifndef TILES_{label}_H\n", f"#define TILES_{label}_H\n"]

    if export.include_colors:
        for index, palette in enumerate(info.palettes):
            order = _palette_order(info, index)
            if order == -1:
                continue
            for c, raw in enumerate(palette):
                color = _color(raw, sms)
                value = (color.r >> 3) | ((color.g >> 3) << 5) | ((color.b >> 3) << 10)
                out.append(f"#define {label}CGBPal{order}c{c} {value}\n")
            out.append("\n")

    out.append('#include "TilesInfo.h"\n')
    out.append(f"extern const void __bank_{label};\n")
    out.append(f"extern struct TilesInfo {label};\n")
    out.append("#endif\n")
    return "".join(out)


def _render_palettes(info: GBRInfo, bpp: int, sms: bool, out: list) -> None:
    label = info.tile_export.label_name
    out.append("\n")
    out.append(f"const palette_color_t {label}_palettes[] = {{\n")
    if bpp == 2:
        for index, palette in enumerate(info.palettes):
            order = _palette_order(info, index)
            if order == -1:
                continue
            if order != 0:
                out.append(",\n")
            out.append("\t")
            out.append(_palette_line(palette, sms))
    else:
        lines = [
            _palette_line(info.palettes[p], sms) if p < len(info.palettes) else _EMPTY_PALETTE
            for p in range(4)
        ]
        out.append("\t" + ", ".join(lines))
    out.append("\n};\n")


def _render_tile_palettes(info: GBRInfo, bpp: int, out: list) -> None:
    export = info.tile_export
    out.append("\n")
    out.append(f"const unsigned char {export.label_name}CGB[] = {{\n\t")
    for count, tile in enumerate(range(export.from_tile, export.up_to + 1)):
        if tile != export.from_tile:
            out.append(",")
        if count and count % 8 == 0:
            out.append("\n\t")
        value = info.palette_order[_tile_palette(info, tile)] if bpp == 2 else 0
        out.append(f"0x{value & 0xFF:02x}")
    out.append("\n};\n")


def _render_tiles(info: GBRInfo, bpp: int, out: list) -> None:
    export = info.tile_export
    tile_set = info.tile_set
    width, height = tile_set.width, tile_set.height
    data = tile_set.data
    line_h = 8 if height == 8 else 16

    out.append("\n")
    out.append(f"const unsigned char {export.label_name}_tiles[] = {{")
    for tile in range(export.from_tile, export.up_to + 1):
        pal = (_tile_palette(info, tile) * 4) & 0xFF if export.include_colors else 0
        for y in range(0, height, line_h):
            for x in range(0, width, 8):
                offset = width * height * tile + width * y + x
                for line in range(line_h):
                    pixels = data[offset: offset + 8]
                    if len(pixels) < 8:
                        raise GBRError(f"tile data of tile {tile} is truncated")
                    if bpp == 2:
                        values = (_plane(pixels, 0), _plane(pixels, 1))
                    else:
                        shifted = [pixel + pal for pixel in pixels]
                        values = tuple(_plane(shifted, bit) for bit in (0, 1, 2, 3))
                    if offset != 0:
                        out.append(",")
                    if line % 4 == 0:
                        out.append("\n\t")
                    if x == 0 and y == 0 and line == 0:
                        if tile != export.from_tile:
                            out.append("\n\t")
                        out.append(f"//Frame {tile}\n\t")
                    out.append(",".join(f"0x{value:02x}" for value in values))
                    offset += width
    out.append("\n};\n")


def render_source(info: GBRInfo, bpp: int = 2, sms: bool = False) -> str:
    """Return the text of the C source file for ``info``."""
    if bpp not in SUPPORTED_BPP:
        raise ValueError(f"unsupported bpp depth not in [2, 4]: {bpp}")
    export = info.tile_export
    label = export.label_name
    out = [f"#pragma bank {info.bank}\n", "#include <gbdk/platform.h>\n"]

    if export.include_colors:
        _render_palettes(info, bpp, sms, out)
        _render_tile_palettes(info, bpp, out)

    _render_tiles(info, bpp, out)

    num_pals = info.num_palettes if bpp == 2 else (info.num_palettes + 3) // 4
    out.append('\n#include "TilesInfo.h"\n')
    out.append(f"const void __at({info.bank}) __bank_{label};\n")
    out.append(f"const struct TilesInfo {label} = {{\n")
    out.append(f"\t.num_frames = {export.up_to - export.from_tile + 1}, //num_tiles\n")
    out.append(f"\t.data = {label}_tiles, //tiles\n")
    out.append(f"\t.num_pals = {num_pals}, //num_palettes\n")
    if export.include_colors:
        out.append(f"\t.pals = {label}_palettes, //palettes\n")
        out.append(f"\t.color_data = {label}CGB //CGB palette\n")
    out.append("};")
    return "".join(out)


def _write_outputs(info: GBRInfo, gbr_path: str, export_folder: str,
                   bpp: int, sms: bool) -> tuple[Path, Path]:
    header_name = extract_file_name(info.tile_export.file_name, False)
    header_path = Path(f"{export_folder}/{header_name}.h")
    source_path = Path(f"{export_folder}/{extract_file_name(str(gbr_path), True)}.gbr.c")
    header_text = render_header(info, sms)
    source_text = render_source(info, bpp, sms)
    header_path.write_text(header_text)
    source_path.write_text(source_text)
    return header_path, source_path


def convert(gbr_path: str, export_folder: str, bpp: int = 2,
            sms: bool = False) -> tuple[Path, Path]:
    """Convert ``gbr_path`` into a header and a source in ``export_folder``.

    Returns the paths of the header and of the source written.
    """
    if bpp not in SUPPORTED_BPP:
        raise ValueError(f"unsupported bpp depth not in [2, 4]: {bpp}")
    info = load_gbr(gbr_path)
    return _write_outputs(info, gbr_path, export_folder, bpp, sms)


def main(argv=None) -> int:
    """Command line entry point; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(USAGE)
        return 1
    gbr_path, export_folder, *options = args

    try:
        info = load_gbr(gbr_path)
    except GBRError as exc:
        print(exc)
        return 1

    bpp = 2
    sms = False
    remaining = iter(options)
    for arg in remaining:
        if arg == "-bpp":
            value = next(remaining, None)
            if value not in ("2", "4"):
                print(f"unsupported bpp depth not in [2, 4]: {value}")
                return 1
            bpp = int(value)
        elif arg == "-sms":
            sms = True
        else:
            print(f"unknown argument {arg}")
            return 1

    try:
        _write_outputs(info, gbr_path, export_folder, bpp, sms)
    except GBRError as exc:
        print(exc)
        return 1
    except OSError:
        print("Error writing file")
        return 1
    return 0