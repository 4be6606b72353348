"""Design-rule check: clearance violations between tracks and pads on copper layers."""

from __future__ import annotations

import argparse
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from pcbdrc.board import KiCadBoard
from pcbdrc.footprints import (
    FootprintPadAbsolute,
    calculate_footprint_coordinates,
    find_pad_absolute_coor,
)
from pcbdrc.geometry import Vec2
from pcbdrc.sexpr import Node
from pcbdrc.shapes import (
    boundaries_intersect,
    circle_boundaries,
    oval_boundaries,
    rect_boundaries,
    roundrect_boundaries,
    segment_boundaries,
)

DEFAULT_BOARD = "./3.kicad_pcb"
ALL_COPPER = "*.Cu"
_COPPER_MARK = ".Cu"
_INT_PREFIX = re.compile(r"\s*[+-]?\d+")


@dataclass
class PadInfo:
    """A pad's absolute position, size, copper layers, net and outline."""

    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    radius: float = 0.0
    layers: list[str] = field(default_factory=list)
    net: str = ""
    boundary: list[list[Vec2]] = field(default_factory=list)


@dataclass
class TrackInfo:
    """Geometry and net of one track segment."""

    start_x: float
    start_y: float
    end_x: float
    end_y: float
    width: float
    net: str


@dataclass
class DrcReport:
    """Result of a check: the violations found, the pads examined and the net names."""

    violations: list[str] = field(default_factory=list)
    pads: list[PadInfo] = field(default_factory=list)
    net_names: dict[int, str] = field(default_factory=dict)


def _leading_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    return int(match.group())


def _number(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"not a number: {text!r}") from None


def _net_name(names: dict[int, str], net: str) -> str:
    number = _leading_int(net)
    try:
        return names[number]
    except KeyError:
        raise LookupError(f"net {net!r} is not declared on the board") from None


def track_info(node: Node) -> TrackInfo:
    """Read start, end, width and net of a segment node.

    Raises ValueError if any of them is missing or malformed.
    """
    start: tuple[float, float] | None = None
    end: tuple[float, float] | None = None
    width: float | None = None
    net: str | None = None
    for child in node.children:
        params = child.parameters
        if child.name == "start" and len(params) >= 2:
            start = (_number(params[0]), _number(params[1]))
        elif child.name == "end" and len(params) >= 2:
            end = (_number(params[0]), _number(params[1]))
        elif child.name == "width" and params:
            width = _number(params[0])
        elif child.name == "net" and params:
            net = params[0]
    if start is None or end is None or width is None or net is None:
        raise ValueError(f"segment {node.parameters[:1]} lacks start, end, width or net")
    return TrackInfo(start[0], start[1], end[0], end[1], width, net)


def collect_layer_segments(board: KiCadBoard) -> dict[str, list[Node]]:
    """Group the board's segments by copper layer, layers in name order.

    A segment on ``*.Cu`` goes on every copper layer. A segment on a copper
    layer missing from the layer table raises ValueError.
    """
    names = sorted({layer.name for layer in board.layers if _COPPER_MARK in layer.name})
    by_layer: dict[str, list[Node]] = {name: [] for name in names}
    for segment in board.segments:
        layer_node = next(
            (c for c in segment.children if c.name in ("layer", "layers")), None
        )
        if layer_node is None:
            continue
        for name in layer_node.parameters:
            if name == ALL_COPPER:
                for nodes in by_layer.values():
                    nodes.append(segment)
                break
            if _COPPER_MARK in name:
                if name not in by_layer:
                    raise ValueError(f"segment on undeclared copper layer {name!r}")
                by_layer[name].append(segment)
    return by_layer


def _pad_boundary(pad: Node, info: PadInfo, angle: int) -> list[list[Vec2]]:
    shape = pad.parameters[-1] if pad.parameters else ""
    if shape == "rect":
        return rect_boundaries(info.x, info.y, info.width, info.height, angle)
    if shape == "circle":
        return circle_boundaries(info.x, info.y, info.radius)
    if shape == "roundrect":
        rratio = 0.0
        for child in pad.children:
            if child.name == "roundrect_rratio" and child.parameters:
                rratio = _number(child.parameters[0])
        return roundrect_boundaries(info.x, info.y, info.width, info.height, rratio, angle)
    if shape == "oval":
        return oval_boundaries(info.x, info.y, info.width, info.height, angle)
    return []


def _pad_info(
    pad: Node, fp_x: float, fp_y: float, abs_coords: Sequence[FootprintPadAbsolute]
) -> PadInfo:
    if not pad.parameters:
        raise ValueError("pad without a name")
    x, y = find_pad_absolute_coor(fp_x, fp_y, pad.parameters[0], abs_coords)
    info = PadInfo(x=x, y=y)
    angle = 0
    for child in pad.children:
        params = child.parameters
        if child.name in ("layer", "layers"):
            info.layers.extend(name for name in params if _COPPER_MARK in name)
        elif child.name == "size" and len(params) >= 2:
            info.width = _number(params[0])
            info.height = _number(params[1])
            info.radius = info.width / 2
        elif child.name == "at" and len(params) > 2:
            angle = _leading_int(params[2])
        elif child.name == "net" and params:
            info.net = params[0]
    if pad.children:
        info.boundary = _pad_boundary(pad, info, angle)
    if not info.net:
        raise ValueError(f"pad at ({info.x:g},{info.y:g}) has no net assigned")
    return info


def collect_pads(
    board: KiCadBoard, abs_coords: Sequence[FootprintPadAbsolute]
) -> list[PadInfo]:
    """Build the outline of every footprint pad at its absolute position.

    Raises ValueError for a pad without a net or a footprint without a
    position, and LookupError for a pad missing from ``abs_coords``.
    """
    pads: list[PadInfo] = []
    for footprint in board.footprints:
        at = footprint.child("at")
        if at is None or len(at.parameters) < 2:
            raise ValueError(f"footprint {footprint.parameters[:1]} has no position")
        fp_x, fp_y = _number(at.parameters[0]), _number(at.parameters[1])
        pads.extend(
            _pad_info(child, fp_x, fp_y, abs_coords)
            for child in footprint.children
            if child.name == "pad"
        )
    return pads


def _tracks_apart(track: TrackInfo, other: TrackInfo) -> bool:
    reach = track.width / 2 + other.width / 2
    low_x = min(track.start_x, track.end_x) - reach
    high_x = max(track.start_x, track.end_x) + reach
    low_y = min(track.start_y, track.end_y) - reach
    high_y = max(track.start_y, track.end_y) + reach
    return (
        (other.start_x <= low_x and other.end_x <= low_x)
        or (other.start_x >= high_x and other.end_x >= high_x)
        or (other.start_y <= low_y and other.end_y <= low_y)
        or (other.start_y >= high_y and other.end_y >= high_y)
    )


def _track_far_from_pad(track: TrackInfo, pad: PadInfo) -> bool:
    extent = max(pad.width, pad.height) + track.width / 2
    return (
        (track.start_x < pad.x - extent and track.end_x < pad.x - extent)
        or (track.start_x > pad.x + extent and track.end_x > pad.x + extent)
        or (track.start_y < pad.y - extent and track.end_y < pad.y - extent)
        or (track.start_y > pad.y + extent and track.end_y > pad.y + extent)
    )


def _pads_far_apart(first: PadInfo, second: PadInfo) -> bool:
    reach = max(second.width, second.height) + max(first.width, first.height)
    return (
        first.x < second.x - reach
        or first.x > second.x + reach
        or first.y < second.y - reach
        or first.y > second.y + reach
    )


def _pad_on_layer(pad: PadInfo, layer: str) -> bool:
    return any(name == layer or name == ALL_COPPER for name in pad.layers)


def _pads_share_layer(first: PadInfo, second: PadInfo) -> bool:
    return any(
        a == b or a == ALL_COPPER or b == ALL_COPPER
        for a in first.layers
        for b in second.layers
    )


def _track_boundaries(track: TrackInfo) -> list[list[Vec2]]:
    return segment_boundaries(
        track.start_x, track.start_y, track.end_x, track.end_y, track.width
    )


def _layer_violations(
    layer: str, tracks: list[TrackInfo], pads: list[PadInfo], names: dict[int, str]
) -> Iterator[str]:
    for index in reversed(range(len(tracks))):
        track = tracks[index]
        outline = _track_boundaries(track)
        for other in tracks[index::-1]:
            if other.net == track.net or _tracks_apart(track, other):
                continue
            if boundaries_intersect(outline, _track_boundaries(other)):
                yield (
                    f"DRC Violation between nets {_net_name(names, track.net)} and "
                    f"{_net_name(names, other.net)} on layer {layer}"
                )
        for pad in pads:
            if pad.net == track.net or not _pad_on_layer(pad, layer):
                continue
            if _track_far_from_pad(track, pad):
                continue
            if boundaries_intersect(outline, pad.boundary):
                yield (
                    f"DRC Violation between net {_net_name(names, track.net)} and pad of net "
                    f"{_net_name(names, pad.net)} at({pad.x:.6f},{pad.y:.6f}) on layer {layer}"
                )


def _pad_violations(pads: list[PadInfo], names: dict[int, str]) -> Iterator[str]:
    for index in reversed(range(len(pads))):
        first = pads[index]
        for second in reversed(pads[:index]):
            if first.net == second.net or not _pads_share_layer(first, second):
                continue
            if _pads_far_apart(first, second):
                continue
            if boundaries_intersect(first.boundary, second.boundary):
                yield (
                    f"DRC Violation between pad of net {_net_name(names, first.net)} "
                    f"and pad of net {_net_name(names, second.net)}"
                )


def _net_table(board: KiCadBoard) -> dict[int, str]:
    names: dict[int, str] = {}
    for net in board.nets:
        names.setdefault(net.id, net.name)
    return names


def _check_board(
    board: KiCadBoard, abs_coords: Iterable[FootprintPadAbsolute]
) -> DrcReport:
    names = _net_table(board)
    layer_segments = collect_layer_segments(board)
    pads = collect_pads(board, list(abs_coords))
    violations: list[str] = []
    for layer, segments in layer_segments.items():
        tracks = [track_info(node) for node in segments]
        violations.extend(_layer_violations(layer, tracks, pads, names))
    violations.extend(_pad_violations(pads, names))
    return DrcReport(violations=violations, pads=pads, net_names=names)


def check_drc(path: str | Path) -> DrcReport:
    """Check a board file for overlapping copper of different nets."""
    board = KiCadBoard.from_file(path)
    return _check_board(board, calculate_footprint_coordinates(path))


def _describe_pad(pad: PadInfo, names: dict[int, str]) -> str:
    lines = [f"Pad at ({pad.x:g},{pad.y:g})  of net {_net_name(names, pad.net)}\n"]
    lines.append("  Boundary points: ")
    for boundary in pad.boundary:
        points = "".join(f"({p.x:g},{p.y:g}) " for p in boundary)
        lines.append(f"   {points}\n")
    return "".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the check on a board file and print every violation found."""
    parser = argparse.ArgumentParser(
        prog="pcbdrc", description="Check a KiCad board for copper clearance violations."
    )
    parser.add_argument("board", nargs="?", default=DEFAULT_BOARD, help="board file")
    args = parser.parse_args(argv)
    try:
        report = check_drc(args.board)
    except (OSError, ValueError, LookupError) as exc:
        print(f"check failed: {exc}", file=sys.stderr)
        return 1
    print("Parse succeeded.")
    for pad in report.pads:
        sys.stdout.write(_describe_pad(pad, report.net_names))
    for violation in report.violations:
        print(violation)
    print(f"DRC Violations Found: {len(report.violations)}")
    return 0