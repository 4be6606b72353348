"""Human-readable listings of board contents."""

from __future__ import annotations

from pcbdrc.board import KiCadBoard
from pcbdrc.sexpr import Node


def _quoted(params: list[str]) -> str:
    return "".join(f'"{p}" ' for p in params)


def _child_line(child: Node, with_count: bool = False) -> str:
    line = f"    - {child.name}"
    if child.parameters:
        line += " : " + _quoted(child.parameters)
    if with_count:
        line += f" (child count: {len(child.children)})"
    return line + "\n"


def _children_block(node: Node, with_count: bool = False) -> str:
    if not node.children:
        return ""
    return "  children:\n" + "".join(_child_line(c, with_count) for c in node.children)


def _tagged_item(node: Node, title: str) -> str:
    head = title
    if node.parameters:
        head += f" #{node.parameters[0]}"
    out = head + ":\n"
    if len(node.parameters) > 1:
        out += "  params: " + _quoted(node.parameters[1:]) + "\n"
    return out + _children_block(node)


def format_segment(node: Node) -> str:
    """Describe one segment: its identifier, other parameters and direct children."""
    if node.name != "segment":
        raise ValueError(f"not a segment node: {node.name!r}")
    return _tagged_item(node, "Segment")


def format_via(node: Node) -> str:
    """Describe one via: its identifier, other parameters and direct children."""
    if node.name != "via":
        raise ValueError(f"not a via node: {node.name!r}")
    return _tagged_item(node, "Via")


def format_footprint(node: Node) -> str:
    """Describe one footprint and its direct children with their child counts."""
    if node.name != "footprint":
        raise ValueError(f"not a footprint node: {node.name!r}")
    head = "Footprint: " + (node.parameters[0] if node.parameters else "") + "\n"
    return head + _children_block(node, with_count=True)


def _format_all(items: list[Node], label: str, formatter) -> str:
    if not items:
        return f"no {label} found\n"
    out = f"\n=== All {label} ({len(items)}) ===\n"
    return out + "".join(formatter(item) + "\n" for item in items)


def format_all_segments(board: KiCadBoard) -> str:
    """List every segment of the board."""
    return _format_all(board.segments, "segments", format_segment)


def format_all_vias(board: KiCadBoard) -> str:
    """List every via of the board."""
    return _format_all(board.vias, "vias", format_via)


def format_all_footprints(board: KiCadBoard) -> str:
    """List every footprint of the board."""
    return _format_all(board.footprints, "footprints", format_footprint)


def format_structure(node: Node, max_depth: int = 3) -> str:
    """Outline of the tree down to ``max_depth`` levels below ``node``."""
    lines: list[str] = []

    def visit(current: Node, depth: int) -> None:
        if depth > max_depth:
            return
        line = " " * (depth * 2) + f"Node: {current.name}"
        if current.parameters:
            line += " | Parameters: " + _quoted(current.parameters)
        lines.append(line + "\n")
        for child in current.children:
            visit(child, depth + 1)

    visit(node, 0)
    return "".join(lines)


def format_node_tree(node: Node) -> str:
    """Full recursive listing of a subtree: names, parameters and children."""
    lines: list[str] = []

    def visit(current: Node, depth: int) -> None:
        indent = " " * (depth * 2)
        lines.append(f"{indent}node: {current.name}\n")
        if current.parameters:
            lines.append(f"{indent}  params: {_quoted(current.parameters)}\n")
        if current.children:
            lines.append(f"{indent}  children:\n")
            for child in current.children:
                visit(child, depth + 1)

    visit(node, 0)
    return "".join(lines)


def format_layers(board: KiCadBoard) -> str:
    """Table of the board's layers."""
    out = f"\n=== Board layers ({len(board.layers)}) ===\n"
    for layer in board.layers:
        line = f"{layer.id:2d}  {layer.name}  {layer.kind}"
        if layer.description:
            line += f'  "{layer.description}"'
        out += line + "\n"
    return out


def format_nets(board: KiCadBoard) -> str:
    """One line per net declaration."""
    return "".join(f'Net {net.id} : "{net.name}"\n' for net in board.nets)