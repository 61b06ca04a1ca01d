[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zgbtools"
version = "0.1.0"
description = "Converters from Game Boy asset files (GBR tile sets, GBM maps, FX Hammer sound effects) to C sources"
requires-python = ">=3.10"
dependencies = []
keywords = ["gameboy", "gbdk", "tiles", "maps", "sound-effects", "code-generation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gbr2c = "zgbtools.gbr2c:main"
gbm2c = "zgbtools.gbm2c:main"
fxhammer2data = "zgbtools.fxhammer_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["zgbtools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
