"""Absolute pad positions computed line by line from a KiCad board file."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

_NUM = r"([-+]?[0-9]*\.?[0-9]+)"
_FOOTPRINT_AT = re.compile(r"\(at\s*" + _NUM + r"\s+" + _NUM + r"(?:\s+" + _NUM + r")?")
_PAD_AT = re.compile(r"\(at\s*" + _NUM + r"\s+" + _NUM)


@dataclass
class FootprintPadAbsolute:
    """A pad together with its footprint's placement and its absolute position."""

    footprint_name: str
    pad_name: str
    footprint_origin_x: float
    footprint_origin_y: float
    footprint_angle: float
    pad_absolute_x: float
    pad_absolute_y: float


def _to_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


def _quoted(line: str) -> str | None:
    first = line.find('"')
    if first < 0:
        return None
    second = line.find('"', first + 1)
    if second < 0:
        return None
    return line[first + 1:second]


def rotate(x: float, y: float, angle_deg: float) -> tuple[float, float]:
    """Rotate a point by ``angle_deg`` degrees as KiCad does (clockwise on screen)."""
    rad = math.radians(angle_deg)
    cos, sin = math.cos(rad), math.sin(rad)
    return x * cos + y * sin, -x * sin + y * cos


def parse_footprint_coordinates(lines: Iterable[str]) -> list[FootprintPadAbsolute]:
    """Compute absolute pad positions from the lines of a board file."""
    result: list[FootprintPadAbsolute] = []
    in_footprint = False
    depth = 0
    name = ""
    origin_x = origin_y = angle = 0.0

    for raw in lines:
        line = raw.strip()

        if "(footprint" in line:
            in_footprint = True
            depth = 1
            name = _quoted(line) or ""
            origin_x = origin_y = angle = 0.0
            continue

        if not in_footprint:
            continue

        depth += line.count("(") - line.count(")")

        if origin_x == 0 and "(at" in line:
            match = _FOOTPRINT_AT.search(line)
            if match:
                origin_x = _to_float(match.group(1))
                origin_y = _to_float(match.group(2))
                angle = _to_float(match.group(3)) if match.group(3) is not None else 0.0

        if "(pad" in line:
            pad_name = _quoted(line) or ""
            match = _PAD_AT.search(line)
            if match:
                rx, ry = rotate(_to_float(match.group(1)), _to_float(match.group(2)), angle)
                result.append(
                    FootprintPadAbsolute(
                        footprint_name=name,
                        pad_name=pad_name,
                        footprint_origin_x=origin_x,
                        footprint_origin_y=origin_y,
                        footprint_angle=angle,
                        pad_absolute_x=rx + origin_x,
                        pad_absolute_y=ry + origin_y,
                    )
                )
            else:
                logger.warning("cannot parse pad position: %s", line)

        if depth == 0:
            logger.debug(
                "Footprint: %s Origin: (%g, %g) Angle: %g", name, origin_x, origin_y, angle
            )
            in_footprint = False

    return result


def calculate_footprint_coordinates(path: str | Path) -> list[FootprintPadAbsolute]:
    """Read a board file and compute the absolute position of every pad."""
    with open(path, encoding="utf-8", errors="replace") as handle:
        return parse_footprint_coordinates(handle)


def find_pad_absolute_coor(
    fp_x: float,
    fp_y: float,
    pad_name: str,
    abs_coords: Iterable[FootprintPadAbsolute],
) -> tuple[float, float]:
    """Return the absolute position of a pad given its footprint's origin.

    Raises LookupError when no pad matches.
    """
    for entry in abs_coords:
        if (
            entry.footprint_origin_x == fp_x
            and entry.footprint_origin_y == fp_y
            and entry.pad_name == pad_name
        ):
            return entry.pad_absolute_x, entry.pad_absolute_y
    raise LookupError(
        f"pad absolute coordinates not found for footprint origin "
        f"({fp_x}, {fp_y}) and pad name {pad_name!r}"
    )