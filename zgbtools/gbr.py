"""Reading of GBR tile set files and the defaults derived from them."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass, field
from pathlib import Path

OBJECT_TYPE_PRODUCER = 0x1
OBJECT_TYPE_TILE_DATA = 0x2
OBJECT_TYPE_TILE_SETTINGS = 0x3
OBJECT_TYPE_TILE_EXPORT = 0x4
OBJECT_TYPE_TILE_IMPORT = 0x5
OBJECT_TYPE_PALETTES = 0xD
OBJECT_TYPE_TILEPAL = 0xE
OBJECT_TYPE_DELETED = 0xFF

DEFAULT_BANK = 255
MAX_PALETTES = 8

_OBJECT_HEADER = struct.Struct("<HI")
_TILE_DATA_INFO = struct.Struct("<30sHHH4s")
_TILE_EXPORT = struct.Struct("<H128sB20s20sBBBBHHBBBBBIBBIB")
_COLOR = struct.Struct("<BBBB")


class GBRError(Exception):
    """Raised when a GBR file cannot be read or is malformed."""


@dataclass(frozen=True)
class Color:
    """An RGBA colour as stored in a GBR palette."""

    r: int
    g: int
    b: int
    a: int = 0


# The palette a GBR editor stores when the user never touched the colours.
DEFAULT_PALETTE = (
    Color(0xE0, 0xEF, 0x29, 0x00),
    Color(0x39, 0xB9, 0x42, 0x00),
    Color(0x20, 0x75, 0x31, 0x00),
    Color(0x07, 0x39, 0x2E, 0x00),
)


@dataclass
class TileSet:
    """Pixel data of all tiles, one byte per pixel."""

    name: str = ""
    width: int = 0
    height: int = 0
    count: int = 0
    color_set: bytes = b"\0\0\0\0"
    data: bytes = b""

    def is_tile_empty(self, tile: int) -> bool:
        """Return True when no pixel of ``tile`` uses a colour other than 0."""
        size = self.width * self.height
        if tile < 0 or tile >= self.count:
            raise IndexError(f"tile {tile} out of range")
        chunk = self.data[size * tile: size * (tile + 1)]
        return not any(pixel & 0x3 for pixel in chunk)


@dataclass
class TileExport:
    """Export settings stored in a GBR file."""

    tile_id: int = 0
    file_name: str = ""
    file_type: int = 0
    section_name: str = ""
    label_name: str = ""
    bank: int = 0
    tile_array: bool = False
    format: int = 0
    counter: int = 0
    from_tile: int = 0
    up_to: int = 0
    compression: int = 0
    include_colors: bool = False
    sgb_palettes: int = 0
    gbc_palettes: int = 0
    make_meta_tiles: bool = False
    meta_offset: int = 0
    meta_counter: int = 0
    split: bool = False
    block_size: int = 0
    sel_tab: int = 0


@dataclass
class GBRInfo:
    """Everything the exporters need from a GBR file."""

    tile_set: TileSet = field(default_factory=TileSet)
    tile_export: TileExport = field(default_factory=TileExport)
    palettes: list[tuple[Color, ...]] = field(default_factory=list)
    sgb_palettes: list[tuple[Color, ...]] = field(default_factory=list)
    tile_palettes: list[int] = field(default_factory=list)
    sgb_tile_palettes: list[int] = field(default_factory=list)
    bank: int = DEFAULT_BANK
    palette_order: list[int] = field(default_factory=lambda: [-1] * MAX_PALETTES)
    num_palettes: int = 0


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self.pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self.pos

    def take(self, size: int) -> bytes:
        if size < 0 or self.pos + size > len(self._data):
            raise GBRError("unexpected end of GBR data")
        chunk = self._data[self.pos: self.pos + size]
        self.pos += size
        return chunk

    def unpack(self, fmt: str | struct.Struct) -> tuple:
        packer = fmt if isinstance(fmt, struct.Struct) else struct.Struct(fmt)
        return packer.unpack(self.take(packer.size))


def _cstr(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


def extract_file_name(path: str, include_bank: bool) -> str:
    """Return the base name of ``path`` without extension.

    With ``include_bank`` only the last extension is dropped, so a bank
    suffix such as ``.b3`` is kept; otherwise everything from the first
    dot is dropped.
    """
    slash = path.rfind("/")
    if slash < 0:
        slash = path.rfind("\\")
    name = path[slash + 1:]
    dot = name.rfind(".") if include_bank else name.find(".")
    return name if dot < 0 else name[:dot]


def sanitize_label(label: str) -> str:
    """Replace spaces so that ``label`` can be used as a C identifier part."""
    return label.replace(" ", "_")


def get_bank(text: str) -> int:
    """Return the number following the first ``.b`` in ``text``, or 0."""
    index = text.find(".b")
    if index < 0:
        return 0
    match = re.match(r"\s*([+-]?\d+)", text[index + 2:])
    return int(match.group(1)) if match else 0


def _read_colors(reader: _Reader, count: int) -> list[tuple[Color, ...]]:
    return [
        tuple(Color(*reader.unpack(_COLOR)) for _ in range(4))
        for _ in range(count)
    ]


def _read_longs(reader: _Reader, count: int) -> list[int]:
    return list(reader.unpack(f"<{count}I")) if count else []


def _read_tile_data(reader: _Reader, info: GBRInfo) -> None:
    name, width, height, count, color_set = reader.unpack(_TILE_DATA_INFO)
    data = reader.take(width * height * count)
    info.tile_set = TileSet(_cstr(name), width, height, count, color_set, data)


def _read_tile_export(reader: _Reader, info: GBRInfo) -> None:
    fields = reader.unpack(_TILE_EXPORT)
    (tile_id, file_name, file_type, section_name, label_name, bank,
     tile_array, fmt, counter, from_tile, up_to, compression,
     include_colors, sgb_palettes, gbc_palettes, make_meta_tiles,
     meta_offset, meta_counter, split, block_size, sel_tab) = fields
    info.tile_export = TileExport(
        tile_id=tile_id,
        file_name=_cstr(file_name),
        file_type=file_type,
        section_name=_cstr(section_name),
        label_name=_cstr(label_name),
        bank=bank,
        tile_array=bool(tile_array),
        format=fmt,
        counter=counter,
        from_tile=from_tile,
        up_to=up_to,
        compression=compression,
        include_colors=bool(include_colors),
        sgb_palettes=sgb_palettes,
        gbc_palettes=gbc_palettes,
        make_meta_tiles=bool(make_meta_tiles),
        meta_offset=meta_offset,
        meta_counter=meta_counter,
        split=bool(split),
        block_size=block_size,
        sel_tab=sel_tab,
    )


def _read_palettes(reader: _Reader, info: GBRInfo) -> None:
    _palette_id, count = reader.unpack("<HH")
    info.palettes = _read_colors(reader, count)
    (sgb_count,) = reader.unpack("<H")
    info.sgb_palettes = _read_colors(reader, sgb_count)


def _read_tile_pal(reader: _Reader, info: GBRInfo) -> None:
    _pal_id, count = reader.unpack("<HH")
    info.tile_palettes = _read_longs(reader, count)
    (sgb_count,) = reader.unpack("<H")
    info.sgb_tile_palettes = _read_longs(reader, sgb_count)


_HANDLERS = {
    OBJECT_TYPE_TILE_DATA: _read_tile_data,
    OBJECT_TYPE_TILE_EXPORT: _read_tile_export,
    OBJECT_TYPE_PALETTES: _read_palettes,
    OBJECT_TYPE_TILEPAL: _read_tile_pal,
}


def _last_used_tile(tile_set: TileSet) -> int:
    tile = tile_set.count - 1
    if tile_set.count == 256:
        # The last tiles of a 256 tile set are reserved for map markers.
        tile = 254
        while tile >= 0 and not tile_set.is_tile_empty(tile):
            tile -= 1
    while tile > 0:
        if not tile_set.is_tile_empty(tile):
            return tile
        tile -= 1
    return 0


def _assign_palette_order(info: GBRInfo) -> None:
    export = info.tile_export
    for tile in range(export.from_tile, export.up_to + 1):
        if tile >= len(info.tile_palettes):
            raise GBRError(f"no palette assigned to tile {tile}")
        pal = info.tile_palettes[tile]
        if pal >= MAX_PALETTES:
            raise GBRError(f"palette {pal} of tile {tile} out of range")
        info.palette_order[pal] = 0
    order = 0
    for index, value in enumerate(info.palette_order):
        if value == 0:
            info.palette_order[index] = order
            order += 1
            info.num_palettes += 1


def parse_gbr(data: bytes, path: str) -> GBRInfo:
    """Parse GBR file contents; ``path`` supplies the default names."""
    reader = _Reader(data)
    reader.take(4)  # marker and version
    info = GBRInfo()

    while reader.remaining >= 2:
        (object_type,) = reader.unpack("<H")
        _object_id, length = reader.unpack(_OBJECT_HEADER)
        start = reader.pos
        handler = _HANDLERS.get(object_type)
        if handler is not None:
            handler(reader, info)
            if reader.pos - start > length:
                raise GBRError(
                    f"object of type {object_type:#x} overruns its length"
                )
        reader.pos = start + length

    info.bank = DEFAULT_BANK
    export = info.tile_export

    if export.file_name in ("Export.z80", ""):
        export.file_name = extract_file_name(path, False)
    if export.label_name in ("TileLabel", ""):
        export.label_name = extract_file_name(path, False)
    export.label_name = sanitize_label(export.label_name)

    if export.from_tile == 0 and export.up_to == 0:
        export.up_to = _last_used_tile(info.tile_set)

    if not export.include_colors:
        if any(tuple(palette) != DEFAULT_PALETTE for palette in info.palettes):
            export.include_colors = True

    if export.include_colors:
        _assign_palette_order(info)

    return info


def load_gbr(path: str) -> GBRInfo:
    """Read and parse the GBR file at ``path``."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise GBRError(f"Error reading file {path}") from exc
    return parse_gbr(data, str(path))