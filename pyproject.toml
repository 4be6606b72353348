[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pcbdrc"
version = "0.1.0"
description = "Read, edit and write KiCad .kicad_pcb boards and check tracks and pads of different nets for overlapping copper"
requires-python = ">=3.10"
dependencies = []
keywords = ["kicad", "pcb", "drc", "s-expression", "eda"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pcbdrc = "pcbdrc.drc:main"

[tool.hatch.build.targets.wheel]
packages = ["pcbdrc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
