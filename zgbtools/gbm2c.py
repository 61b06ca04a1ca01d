"""Export a GBM map as C source and header files."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass, field
from pathlib import Path

from zgbtools.gbr import GBRError, GBRInfo, extract_file_name, load_gbr, sanitize_label

OBJECT_TYPE_PRODUCER = 0x1
OBJECT_TYPE_MAP = 0x2
OBJECT_TYPE_MAP_TILE_DATA = 0x3
OBJECT_TYPE_MAP_PROPERTIES = 0x4
OBJECT_TYPE_MAP_PROPERTY_DATA = 0x5
OBJECT_TYPE_MAP_DEFAULT_PROPERTY_VALUE = 0x6
OBJECT_TYPE_MAP_SETTINGS = 0x7
OBJECT_TYPE_MAP_PROPERTY_COLORS = 0x8
OBJECT_TYPE_MAP_EXPORT_SETTINGS = 0x9
OBJECT_TYPE_MAP_EXPORT_PROPERTIES = 0xA
OBJECT_TYPE_DELETED = 0xFFFF

BANK = 255
USAGE = "usage: gbm2c file_in.gbm export_folder"

_OBJECT_HEADER = struct.Struct("<6sHHHII")
_MAP = struct.Struct("<128sIII256sII")
_EXPORT = struct.Struct("<256sB39s40sBHHH?I?BHH")
_RECORD_SIZE = 3


class GBMError(Exception):
    """Raised when a GBM file cannot be read or converted."""


@dataclass(frozen=True)
class MapTile:
    """One map cell: tile number and its attributes."""

    tile_number: int
    gbc_palette: int = 0
    sgb_palette: int = 0
    h_flip: bool = False
    v_flip: bool = False

    @classmethod
    def from_record(cls, record: int) -> "MapTile":
        return cls(
            tile_number=record & 0x3FF,
            gbc_palette=(record >> 10) & 0x1F,
            sgb_palette=(record >> 16) & 0x7,
            h_flip=bool((record >> 22) & 1),
            v_flip=bool((record >> 23) & 1),
        )

    @property
    def needs_attributes(self) -> bool:
        return (self.gbc_palette != 0 or self.h_flip or self.v_flip
                or self.tile_number > 255)


@dataclass
class GBMMap:
    """The parts of a GBM file the exporter uses."""

    name: str = ""
    width: int = 0
    height: int = 0
    prop_count: int = 0
    tile_file: str = ""
    tile_count: int = 0
    prop_color_count: int = 0
    tiles: list[MapTile] = field(default_factory=list)
    export_file_name: str = ""
    export_label_name: str = ""

    @property
    def needs_attributes(self) -> bool:
        return any(tile.needs_attributes for tile in self.tiles)


def _cstr(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


def _unpack(packer: struct.Struct, data: bytes, pos: int) -> tuple:
    if pos + packer.size > len(data):
        raise GBMError("unexpected end of GBM data")
    return packer.unpack_from(data, pos)


def parse_gbm(data: bytes) -> GBMMap:
    """Parse the contents of a GBM file."""
    data = bytes(data)
    if len(data) < 4:
        raise GBMError("not a GBM file")
    pos = 4  # marker and version
    gbm_map = None
    tiles = None
    export_file_name = ""
    export_label_name = ""

    while len(data) - pos >= _OBJECT_HEADER.size:
        _marker, object_type, _id, _master, _crc, length = _OBJECT_HEADER.unpack_from(data, pos)
        pos += _OBJECT_HEADER.size
        end = pos + length

        if object_type == OBJECT_TYPE_MAP:
            name, width, height, prop_count, tile_file, tile_count, prop_colors = _unpack(_MAP, data, pos)
            gbm_map = GBMMap(_cstr(name), width, height, prop_count,
                             _cstr(tile_file), tile_count, prop_colors)
        elif object_type == OBJECT_TYPE_MAP_TILE_DATA:
            if gbm_map is None:
                raise GBMError("tile data found before the map object")
            count = gbm_map.width * gbm_map.height
            if pos + count * _RECORD_SIZE > len(data):
                raise GBMError("unexpected end of GBM data")
            tiles = [
                MapTile.from_record(int.from_bytes(data[start: start + _RECORD_SIZE], "big"))
                for start in range(pos, pos + count * _RECORD_SIZE, _RECORD_SIZE)
            ]
        elif object_type == OBJECT_TYPE_MAP_EXPORT_SETTINGS:
            fields = _unpack(_EXPORT, data, pos)
            export_file_name = _cstr(fields[0])
            export_label_name = _cstr(fields[3])
        pos = end

    if gbm_map is None:
        raise GBMError("no map object in GBM data")
    if tiles is None:
        if gbm_map.width * gbm_map.height:
            raise GBMError("no tile data in GBM data")
        tiles = []
    gbm_map.tiles = tiles
    gbm_map.export_file_name = export_file_name
    gbm_map.export_label_name = export_label_name
    return gbm_map


def load_gbm(path: str) -> GBMMap:
    """Read and parse the GBM file at ``path``."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise GBMError(f"Error reading file {path}") from exc
    return parse_gbm(data)


def gbr_path_for(gbm_path: str, tile_file: str) -> str:
    """Return the path of the tile set next to ``gbm_path`` named by ``tile_file``."""
    tile_name = extract_file_name(tile_file, False)
    slash = gbm_path.rfind("/")
    if slash < 0:
        slash = gbm_path.rfind("\\")
    directory = gbm_path[:slash + 1]
    return f"{directory}{tile_name}.gbr"


def _label(gbm_map: GBMMap, gbm_path: str) -> str:
    label = gbm_map.export_label_name or extract_file_name(gbm_path, False)
    return sanitize_label(label)


def render_header(gbm_map: GBMMap, gbm_path: str) -> str:
    """Return the text of the header file for the map."""
    label = _label(gbm_map, gbm_path)
    return (
        f"#ifndef MAP_{label}_H\n"
        f"#define MAP_{label}_H\n"
        f"#define {label}Width {gbm_map.width}\n"
        f"#define {label}Height {gbm_map.height}\n"
        '#include "MapInfo.h"\n'
        f"extern unsigned char bank_{label};\n"
        f"extern struct MapInfo {label};\n"
        "#endif\n"
    )


def _array(values) -> str:
    out = []
    for index, value in enumerate(values):
        if index:
            out.append(",")
        if index % 10 == 0:
            out.append("\n\t")
        out.append(f"0x{value:02x}")
    return "".join(out)


def _attribute(tile: MapTile, gbr_info: GBRInfo) -> int:
    if tile.gbc_palette == 0:
        # Palette 0 means the tile's own palette from the tile set.
        if tile.tile_number >= len(gbr_info.tile_palettes):
            raise GBMError(f"tile {tile.tile_number} has no palette in the tile set")
        pal = gbr_info.tile_palettes[tile.tile_number]
        if pal >= len(gbr_info.palette_order):
            raise GBMError(f"palette {pal} out of range")
        pal_idx = gbr_info.palette_order[pal] & 0xFF
    else:
        pal_idx = tile.gbc_palette - 1
    vram_bank = int(tile.tile_number > 255)
    return pal_idx | (vram_bank << 3) | (int(tile.h_flip) << 5) | (int(tile.v_flip) << 6)


def render_source(gbm_map: GBMMap, gbm_path: str, gbr_info: GBRInfo | None = None) -> str:
    """Return the text of the C source file for the map.

    ``gbr_info`` is required when the map uses tile attributes.
    """
    label = _label(gbm_map, gbm_path)
    attributes = gbm_map.needs_attributes
    if attributes and gbr_info is None:
        raise GBMError("tile set information is needed to export attributes")

    out = [f"#pragma bank {BANK}\n", "#include <gbdk/platform.h>\n"]
    out.append(f"const unsigned char {label}_map[] = {{")
    out.append(_array(tile.tile_number for tile in gbm_map.tiles))
    out.append("\n};\n")

    if attributes:
        out.append(f"const unsigned char {label}_attributes[] = {{")
        out.append(_array(_attribute(tile, gbr_info) for tile in gbm_map.tiles))
        out.append("\n};\n")

    tile_file = extract_file_name(gbm_map.tile_file, False)
    out.append('#include "TilesInfo.h"\n')
    out.append(f"extern const void __bank_{tile_file};\n")
    out.append(f"extern const struct TilesInfo {tile_file};\n")
    out.append("\n")
    out.append('#include "MapInfo.h"\n')
    out.append(f"const void __at({BANK}) __bank_{label};\n")
    out.append(f"const struct MapInfo {label} = {{\n")
    out.append(f"\t.data = {label}_map, //map\n")
    out.append(f"\t.width = {gbm_map.width}, //width\n")
    out.append(f"\t.height = {gbm_map.height}, //height\n")
    if attributes:
        out.append(f"\t.attributes = {label}_attributes, //attributes\n")
    else:
        out.append("\t.attributes = 0, //attributes\n")
    out.append(f"\t.tiles_bank = BANK({tile_file}), //tiles bank\n")
    out.append(f"\t.tiles = &{tile_file}, //tiles info\n")
    out.append("};")
    return "".join(out)


def convert(gbm_path: str, export_folder: str) -> tuple[Path, Path]:
    """Convert ``gbm_path`` into a header and a source in ``export_folder``.

    Returns the paths of the header and of the source written.
    """
    gbm_path = str(gbm_path)
    gbm_map = load_gbm(gbm_path)

    gbr_info = None
    if gbm_map.needs_attributes:
        try:
            gbr_info = load_gbr(gbr_path_for(gbm_path, gbm_map.tile_file))
        except GBRError as exc:
            raise GBMError(f"Error reading gbr file {gbm_map.tile_file}") from exc

    export_name = gbm_map.export_file_name or extract_file_name(gbm_path, False)
    header_path = Path(f"{export_folder}/{extract_file_name(export_name, False)}.h")
    source_path = Path(f"{export_folder}/{extract_file_name(gbm_path, True)}.gbm.c")
    header_text = render_header(gbm_map, gbm_path)
    source_text = render_source(gbm_map, gbm_path, gbr_info)
    header_path.write_text(header_text)
    source_path.write_text(source_text)
    return header_path, source_path


def main(argv=None) -> int:
    """Command line entry point; returns the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print(USAGE)
        return 1
    try:
        convert(args[0], args[1])
    except GBMError as exc:
        print(exc)
        return 1
    except OSError:
        print("Error writing file")
        return 1
    return 0