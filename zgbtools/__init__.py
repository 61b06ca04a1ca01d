"""Converters from Game Boy asset files (GBR tile sets, GBM maps, FX Hammer sound effects) to C sources."""

__version__ = "0.1.0"