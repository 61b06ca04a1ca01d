"""Command line front end for converting FX Hammer save files."""

from __future__ import annotations

import re
import sys
from enum import IntEnum
from typing import Iterator

from zgbtools.fxhammer import FxHammerError, write_outputs
from zgbtools.pathutil import get_filename_from_path, read_file, remove_extension
from zgbtools.sfx import (
    BANK_NUM_MAX,
    BANK_NUM_MIN,
    EFFECTNUM_MAX,
    EFFECTNUM_USE_ALL,
    Options,
    System,
)

HELP_TEXT = (
    "\n"
    "Usage: fxhammer2data   [options] INPUT_FILE_NAME.SAV\n"
    "  -o, --out            output file name\n"
    "  -i, --identifier     source identifier\n"
    "  -n, --number         effect number or \"all\"\n"
    "  -m, --system         target system GB/PSG (default \"GB\")\n"
    "  -d, --delay          delay size\n"
    "  -b, --bank           BANK number (default AUTO=255)\n"
    "  -c, --cut            cut all used sound channels at the end\n"
    "  -p, --no-pan         disable channel panning\n"
    "\n"
)


class OutputLevel(IntEnum):
    """How much the command prints."""

    DEBUG = 0
    VERBOSE = 1
    DEFAULT = 2
    ONLY_ERRORS = 3
    QUIET = 4


class UsageError(Exception):
    """Raised for invalid command line arguments."""

    def __init__(self, message: str = "", show_help: bool = False) -> None:
        super().__init__(message)
        self.show_help = show_help


class _Log:
    def __init__(self, level: OutputLevel = OutputLevel.DEFAULT) -> None:
        self.level = level

    @staticmethod
    def _emit(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def debug(self, text: str) -> None:
        if self.level <= OutputLevel.DEBUG:
            self._emit(text)

    def verbose(self, text: str) -> None:
        if self.level <= OutputLevel.VERBOSE:
            self._emit(text)

    def standard(self, text: str) -> None:
        if self.level not in (OutputLevel.QUIET, OutputLevel.ONLY_ERRORS):
            self._emit(text)

    def error(self, text: str) -> None:
        if self.level != OutputLevel.QUIET:
            self._emit(text)


_log = _Log()


def _strtol(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _next_value(args: Iterator[str], option: str, usage: str) -> str:
    value = next(args, None)
    if value is None:
        raise UsageError(f"Error: {option} specified but argument value is missing")
    if value.startswith("-"):
        _log.standard(
            f"Warning: {option} specified but argument value (\"{value}\") has dash "
            f"and looks like an option argument. {usage}\n"
        )
    return value


def _parse_number(text: str) -> int:
    return EFFECTNUM_USE_ALL if text.startswith("all") else _strtol(text)


def _parse_system(text: str) -> System:
    if text.startswith("gb"):
        return System.GB
    if text.startswith("psg"):
        return System.PSG
    raise UsageError("Error: unknown target system, should be in [GB, PSG]", show_help=True)


def parse_args(argv) -> Options | None:
    """Parse command line arguments into Options.

    Returns None when help was requested; raises UsageError on bad input.
    """
    argv = list(argv)
    if not argv:
        raise UsageError(show_help=True)

    options = Options()
    args = iter(argv)
    for arg in args:
        if arg.startswith(("-h", "-?")):
            return None
        if arg.startswith(("-c", "--cut")):
            options.cut_sound = True
        elif arg.startswith(("-p", "--no-pan")):
            options.use_pan = False
        elif arg.startswith("-o"):
            options.outfilename = _next_value(args, "-o", "Usage: -o filename")
        elif arg.startswith("--out="):
            options.outfilename = arg[len("--out="):]
        elif arg.startswith("-i"):
            options.identifier = _next_value(args, "-i", "Usage: -i identifier")
        elif arg.startswith("--identifier="):
            options.identifier = arg[len("--identifier="):]
        elif arg.startswith("-b"):
            options.bank = _strtol(_next_value(args, "-b", "Usage: -b bank number"))
        elif arg.startswith("--bank="):
            options.bank = _strtol(arg[len("--bank="):])
        elif arg.startswith("-d"):
            options.delay = _strtol(_next_value(args, "-d", "Usage: -d delay"))
        elif arg.startswith("--delay="):
            options.delay = _strtol(arg[len("--delay="):])
        elif arg.startswith("-n"):
            options.effectnum = _parse_number(
                _next_value(args, "-n", "Usage: -n number or \"all\"")
            )
        elif arg.startswith("--number="):
            options.effectnum = _parse_number(arg[len("--number="):])
        elif arg.startswith("-m"):
            value = _next_value(args, "-m", "Usage: -m GB or PSG")
            options.system = _parse_system(value.lower())
        elif arg.startswith("--system="):
            options.system = _parse_system(arg[len("--system="):])
        elif arg.startswith("-"):
            raise UsageError(f"Unknown argument: {arg}", show_help=True)
        else:
            options.infilename = arg

    if not options.infilename:
        raise UsageError("Error: Input file name required", show_help=True)
    if not BANK_NUM_MIN <= options.bank <= BANK_NUM_MAX:
        raise UsageError(
            f"Error: Invalid bank number specified with --bank={options.bank}",
            show_help=True,
        )
    if options.effectnum != EFFECTNUM_USE_ALL and not 0 <= options.effectnum <= EFFECTNUM_MAX:
        raise UsageError(
            f"Error: Invalid effect number specified ({options.effectnum})",
            show_help=True,
        )

    if not options.outfilename:
        options.outfilename = remove_extension(options.infilename) + ".c"
    if not options.identifier:
        options.identifier = remove_extension(get_filename_from_path(options.infilename))
    return options


def main(argv=None) -> int:
    """Command line entry point; returns the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options = parse_args(args)
    except UsageError as exc:
        if str(exc):
            _log.error(f"{exc}\n")
        if exc.show_help:
            _log.standard(HELP_TEXT)
        return 1

    if options is None:
        _log.standard(HELP_TEXT)
        return 0

    try:
        data = read_file(options.infilename)
    except OSError:
        _log.error(f"ERROR: Failed to open input file {options.infilename}\n")
        return 1

    try:
        write_outputs(data, options)
    except FxHammerError as exc:
        _log.error(f"{exc}\n")
        return 1
    except OSError as exc:
        _log.error(f"ERROR: Failed to write output file: {exc}\n")
        return 1
    return 0