# zgbtools

Command-line converters that turn Game Boy asset files into C sources for GBDK projects.

- `gbr2c` converts a Game Boy Tile Designer tile set (`.gbr`) into a header and a `.gbr.c` source. These hold the tile data, the palettes (when the tile set uses colours) and a `TilesInfo` structure.
- `gbm2c` converts a Game Boy Map Builder map (`.gbm`) into a header and a `.gbm.c` source. These hold the map data, the attributes (when needed) and a `MapInfo` structure.
- `fxhammer2data` converts an FX Hammer save file (`.sav`) into C data for Game Boy or SMS/Game Gear PSG sound effects.

All three commands exit with status 0 on success and 1 on any error.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Usage

### Tile sets

```
gbr2c file_in.gbr export_folder [-bpp N] [-sms]
```

- `-bpp` sets the bit depth, either `2` (default) or `4`.
- `-sms` maps colours to the nearest entries of the 64-colour SMS palette.

The header is named after the export file name stored in the tile set (or the
`.gbr` file's name when that is unset); the source is named after the `.gbr`
file with `.gbr.c` appended. When the tile set has no export range, tiles are
exported up to the last non-empty one.

### Maps

```
gbm2c file_in.gbm export_folder
```

If any map cell uses a colour palette, a flip or a tile number above 255, an
attribute array is written too. Then the map's tile set must be found as
`<tile set name>.gbr` in the same folder as the `.gbm` file.

### Sound effects

```
fxhammer2data [options] INPUT_FILE_NAME.SAV
```

| Option | Meaning |
| --- | --- |
| `-o FILE`, `--out=FILE` | output file name |
| `-i NAME`, `--identifier=NAME` | source identifier |
| `-n N`, `--number=N` | effect number (0 to 59) or `all` (default) |
| `-m SYSTEM`, `--system=SYSTEM` | target system `gb` or `psg` (default `gb`); `-m` also accepts upper case |
| `-d N`, `--delay=N` | delay multiplier (default 1) |
| `-b N`, `--bank=N` | bank number from 1 to 255 (default 255) |
| `-c`, `--cut` | cut all used sound channels at the end |
| `-p`, `--no-pan` | disable channel panning |
| `-h`, `-?` | show help |

Without `-o`, the output name is the input name with its last extension
replaced by `.c`. A matching `.h` header is written next to it. Without `-i`,
the identifier is the input file name without its last extension. When all
effects are converted, each one is named `<identifier>_<nn>` with `nn` the
effect number in two hexadecimal digits; effects that use no channel are
skipped.

## Library use

The converters can also be called from Python:

```python
from zgbtools.gbr import load_gbr
from zgbtools.gbr2c import render_header, render_source

info = load_gbr("tiles.gbr")
print(render_header(info, sms=False))
print(render_source(info, bpp=2, sms=False))
```

```python
from zgbtools.gbm2c import load_gbm, render_header, render_source

gbm_map = load_gbm("level.gbm")
print(render_header(gbm_map, "level.gbm"))
print(render_source(gbm_map, "level.gbm"))  # pass a GBRInfo when attributes are needed
```

```python
from zgbtools.fxhammer import convert
from zgbtools.sfx import Options, System

with open("sounds.sav", "rb") as handle:
    data = handle.read()
c_source, header = convert(data, Options(identifier="sfx", system=System.PSG))
```

Errors are raised as `GBRError`, `GBMError` and `FxHammerError`.

## Limits

- Generated tile set and map sources always use bank 255; the bank stored in
  the file is not used.
- FX Hammer files are checked only for the minimum size and the `FX HAMMER`
  signature.
- There is no option to change how much `fxhammer2data` prints.