"""A parsed KiCad board: layers, nets, numbered tracks and vias, editing and outline."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from pcbdrc.sexpr import Node, dumps as dump_tree, parse

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_TAG_KINDS = ("FPID", "SEID", "VIID")
_NUMBERED = (("segment", "SEID"), ("via", "VIID"), ("footprint", "FPID"))
_OUTLINE_SHAPES = frozenset({"gr_line", "gr_arc", "gr_rect", "gr_poly"})


def _leading_int(text: str) -> int | None:
    match = _INT_PREFIX.match(text)
    return int(match.group()) if match else None


def _leading_float(text: str) -> float | None:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else None


def make_tag(kind: str, number: int) -> str:
    """Build a temporary identifier such as ``[[SEID:3]]``."""
    return f"[[{kind}:{number}]]"


def is_tagged(value: str, kind: str) -> bool:
    """Return True if ``value`` is a temporary identifier of the given kind."""
    prefix = f"[[{kind}:"
    return (
        value.startswith(prefix)
        and len(value) >= len(prefix) + 2
        and value.endswith("]]")
    )


def extract_tag_id(value: str, kind: str) -> int:
    """Return the number inside a temporary identifier, or -1 if there is none."""
    if not is_tagged(value, kind):
        return -1
    colon = value.find(":")
    end = value.rfind("]]")
    if colon < 0 or end < 0 or end <= colon + 1:
        return -1
    number = _leading_int(value[colon + 1:end])
    return -1 if number is None else number


def format_number(value: float) -> str:
    """Format a coordinate the way it reads in a board file (15 significant digits)."""
    return f"{value:.15g}"


@dataclass
class LayerInfo:
    """One entry of the board's layer table."""

    id: int = -1
    name: str = ""
    kind: str = ""
    description: str = ""


@dataclass
class NetInfo:
    """One top-level net declaration."""

    id: int = -1
    name: str = ""


@dataclass(frozen=True)
class Point2D:
    """A point on the board, in millimetres."""

    x: float = 0.0
    y: float = 0.0


@dataclass
class BoardBBox:
    """Bounding box of the board outline."""

    valid: bool = False
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    def push(self, x: float, y: float) -> None:
        """Grow the box so that it holds the point (x, y)."""
        if not self.valid:
            self.valid = True
            self.min_x = self.max_x = x
            self.min_y = self.max_y = y
            return
        self.min_x = min(self.min_x, x)
        self.max_x = max(self.max_x, x)
        self.min_y = min(self.min_y, y)
        self.max_y = max(self.max_y, y)

    @property
    def width(self) -> float:
        """Horizontal extent, 0 when the box is empty."""
        return self.max_x - self.min_x if self.valid else 0.0

    @property
    def height(self) -> float:
        """Vertical extent, 0 when the box is empty."""
        return self.max_y - self.min_y if self.valid else 0.0


def _parse_layers(root: Node) -> list[LayerInfo]:
    for child in root.children:
        if child.name != "layers" or not child.children:
            continue
        layers = []
        for entry in child.children:
            number = _leading_int(entry.name)
            if number is None:
                continue
            params = entry.parameters
            layers.append(
                LayerInfo(
                    id=number,
                    name=params[0] if params else "",
                    kind=params[1] if len(params) >= 2 else "",
                    description=params[2] if len(params) >= 3 else "",
                )
            )
        return layers
    return []


def _parse_nets(root: Node) -> list[NetInfo]:
    nets = []
    for child in root.children:
        if child.name != "net":
            continue
        params = child.parameters
        number = _leading_int(params[0]) if params else None
        nets.append(
            NetInfo(
                id=-1 if number is None else number,
                name=params[1] if len(params) >= 2 else "",
            )
        )
    return nets


def _remove_matching(node: Node, predicate: Callable[[Node], bool]) -> int:
    kept = [c for c in node.children if not predicate(c)]
    removed = len(node.children) - len(kept)
    node.children[:] = kept
    return removed + sum(_remove_matching(c, predicate) for c in kept)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


def _on_edge_cuts(node: Node) -> bool:
    return any(
        c.name == "layer" and c.parameters and _unquote(c.parameters[0]) == "Edge.Cuts"
        for c in node.children
    )


def _read_xy(node: Node, name: str) -> tuple[float, float] | None:
    for child in node.children:
        if child.name == name and len(child.parameters) >= 2:
            x = _leading_float(child.parameters[0])
            y = _leading_float(child.parameters[1])
            if x is None or y is None:
                return None
            return x, y
    return None


def _leaf(name: str, *params: str) -> Node:
    return Node(name, list(params))


class KiCadBoard:
    """A board file's tree with temporary identifiers on segments, vias and footprints.

    Every segment, via and footprint gets ``[[SEID:n]]``, ``[[VIID:n]]`` or
    ``[[FPID:n]]`` as its first parameter, numbered from 1 in file order.
    """

    def __init__(self, root: Node) -> None:
        self.root = root
        self._layers = _parse_layers(root)
        self._nets = _parse_nets(root)
        for name, kind in _NUMBERED:
            self._number(name, kind)

    @classmethod
    def from_text(cls, text: str) -> KiCadBoard:
        """Parse board text; raise ValueError if it holds no S-expression."""
        return cls(parse(text))

    @classmethod
    def from_file(cls, path: str | Path) -> KiCadBoard:
        """Read and parse a board file."""
        return cls.from_text(Path(path).read_text(encoding="utf-8"))

    def _number(self, name: str, kind: str) -> None:
        for counter, node in enumerate(self.root.find_all(name), start=1):
            tag = make_tag(kind, counter)
            if node.parameters and is_tagged(node.parameters[0], kind):
                node.parameters[0] = tag
            else:
                node.parameters.insert(0, tag)

    @property
    def segments(self) -> list[Node]:
        """All segment nodes, in file order."""
        return self.root.find_all("segment")

    @property
    def vias(self) -> list[Node]:
        """All via nodes, in file order."""
        return self.root.find_all("via")

    @property
    def footprints(self) -> list[Node]:
        """All footprint nodes, in file order."""
        return self.root.find_all("footprint")

    @property
    def nodes(self) -> list[Node]:
        """Every node of the tree, depth first."""
        return list(self.root.walk())

    @property
    def layers(self) -> list[LayerInfo]:
        """The board's layer table as read when the board was loaded."""
        return self._layers

    @property
    def nets(self) -> list[NetInfo]:
        """The top-level net declarations as read when the board was loaded."""
        return self._nets

    @staticmethod
    def _next_id(nodes: Iterable[Node], kind: str) -> int:
        ids = (extract_tag_id(n.parameters[0], kind) for n in nodes if n.parameters)
        return max(ids, default=0) + 1 if True else 0

    def next_segment_id(self) -> int:
        """One more than the highest segment identifier, or 1 if there is none."""
        return max(1, self._next_id(self.segments, "SEID"))

    def next_via_id(self) -> int:
        """One more than the highest via identifier, or 1 if there is none."""
        return max(1, self._next_id(self.vias, "VIID"))

    def add_segment(
        self,
        start_x: float,
        start_y: float,
        end_x: float,
        end_y: float,
        width: float,
        layer: str,
        net: int,
        tstamp: str,
    ) -> int:
        """Append a track segment to the board and return its identifier."""
        new_id = self.next_segment_id()
        segment = Node("segment", [make_tag("SEID", new_id)])
        segment.children.extend(
            [
                _leaf("start", format_number(start_x), format_number(start_y)),
                _leaf("end", format_number(end_x), format_number(end_y)),
                _leaf("width", format_number(width)),
                _leaf("layer", layer),
                _leaf("net", str(net)),
                _leaf("tstamp", tstamp),
            ]
        )
        self.root.children.append(segment)
        return new_id

    def add_via(
        self,
        x: float,
        y: float,
        size: float,
        drill: float,
        layers: Iterable[str],
        is_free: bool,
        net: int,
        tstamp: str,
    ) -> int:
        """Append a via to the board and return its identifier."""
        new_id = self.next_via_id()
        via = Node("via", [make_tag("VIID", new_id)])
        via.children.extend(
            [
                _leaf("at", format_number(x), format_number(y)),
                _leaf("size", format_number(size)),
                _leaf("drill", format_number(drill)),
            ]
        )
        layer_names = [name for name in layers if name]
        if layer_names:
            via.children.append(_leaf("layers", *layer_names))
        if is_free:
            via.children.append(Node("free"))
        via.children.append(_leaf("net", str(net)))
        via.children.append(_leaf("tstamp", tstamp))
        self.root.children.append(via)
        return new_id

    def add_via_simple(
        self,
        x: float,
        y: float,
        size: float,
        drill: float,
        layer1: str,
        layer2_or_dash: str,
        free_flag: int,
        net: int,
        tstamp: str,
    ) -> int:
        """Add a via from command-style values: a second layer of "-" or "" means none."""
        layers = [layer1] if layer1 else []
        if layer2_or_dash and layer2_or_dash != "-":
            layers.append(layer2_or_dash)
        return self.add_via(x, y, size, drill, layers, free_flag != 0, net, tstamp)

    def _remove_tagged(self, name: str, kind: str, number: int) -> int:
        tag = make_tag(kind, number)
        return _remove_matching(
            self.root,
            lambda c: c.name == name and bool(c.parameters) and c.parameters[0] == tag,
        )

    def _remove_by_tstamp(self, name: str, tstamp: str) -> int:
        def matches(node: Node) -> bool:
            return node.name == name and any(
                gc.name == "tstamp" and gc.parameters and gc.parameters[0] == tstamp
                for gc in node.children
            )

        return _remove_matching(self.root, matches)

    def remove_via_by_id(self, via_id: int) -> int:
        """Remove every via tagged with ``via_id``; return how many were removed."""
        return self._remove_tagged("via", "VIID", via_id)

    def remove_segment_by_id(self, segment_id: int) -> int:
        """Remove every segment tagged with ``segment_id``; return how many were removed."""
        return self._remove_tagged("segment", "SEID", segment_id)

    def remove_via_by_tstamp(self, tstamp: str) -> int:
        """Remove every via with the given tstamp; return how many were removed."""
        return self._remove_by_tstamp("via", tstamp)

    def remove_segment_by_tstamp(self, tstamp: str) -> int:
        """Remove every segment with the given tstamp; return how many were removed."""
        return self._remove_by_tstamp("segment", tstamp)

    def strip_temp_ids(self) -> None:
        """Remove the temporary identifiers from every node."""
        for node in self.root.walk():
            if node.parameters and any(is_tagged(node.parameters[0], k) for k in _TAG_KINDS):
                del node.parameters[0]

    def dumps(self, strip_temp_ids: bool = True, indent_step: int = 2) -> str:
        """Serialise the board, by default removing the temporary identifiers first."""
        if strip_temp_ids:
            self.strip_temp_ids()
        return dump_tree(self.root, indent_step)

    def save(self, path: str | Path, strip_temp_ids: bool = True, indent_step: int = 2) -> None:
        """Write the board to ``path``."""
        text = self.dumps(strip_temp_ids, indent_step)
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)

    def bbox(self) -> BoardBBox:
        """Bounding box of the Edge.Cuts graphics (footprint graphics are ignored)."""
        box = BoardBBox()
        for node in self.root.walk():
            if node.name not in _OUTLINE_SHAPES or not _on_edge_cuts(node):
                continue
            if node.name == "gr_poly":
                for pts in node.children:
                    if pts.name != "pts":
                        continue
                    for pt in pts.children:
                        if pt.name == "xy" and len(pt.parameters) >= 2:
                            x = _leading_float(pt.parameters[0])
                            y = _leading_float(pt.parameters[1])
                            if x is not None and y is not None:
                                box.push(x, y)
                continue
            names = ("start", "end", "mid") if node.name == "gr_arc" else ("start", "end")
            for name in names:
                point = _read_xy(node, name)
                if point is not None:
                    box.push(*point)
        return box

    def size(self) -> tuple[float, float] | None:
        """Width and height of the board outline, or None if there is no outline."""
        box = self.bbox()
        if not box.valid:
            return None
        return box.width, box.height

    def corners(self) -> tuple[Point2D, Point2D, Point2D, Point2D] | None:
        """Bottom-left, top-left, top-right and bottom-right corners, or None."""
        box = self.bbox()
        if not box.valid:
            return None
        return (
            Point2D(box.min_x, box.min_y),
            Point2D(box.min_x, box.max_y),
            Point2D(box.max_x, box.max_y),
            Point2D(box.max_x, box.min_y),
        )