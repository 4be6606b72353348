"""S-expression tree used by KiCad board files: parsing and serialisation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

_WHITESPACE = frozenset(" \t\n\v\f\r")
_DELIMITERS = _WHITESPACE | {"(", ")"}
_DIGITS = frozenset("0123456789")
_LOWER = frozenset("abcdefghijklmnopqrstuvwxyz")
_SAFE_SYMBOLS = frozenset("_-./+:")


@dataclass
class Node:
    """One parenthesised list: a name, bare parameters and nested child lists."""

    name: str
    parameters: list[str] = field(default_factory=list)
    children: list["Node"] = field(default_factory=list)

    def walk(self) -> Iterator["Node"]:
        """Yield this node and every descendant, depth first, in file order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, name: str) -> list["Node"]:
        """Return every node in this subtree (itself included) with the given name."""
        return [node for node in self.walk() if node.name == name]

    def child(self, name: str) -> "Node | None":
        """Return the first direct child with the given name, or None."""
        return next((c for c in self.children if c.name == name), None)


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _current(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _read_bare(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in _DELIMITERS:
            self.pos += 1
        return self.text[start:self.pos]

    def _read_quoted(self) -> str:
        self.pos += 1  # opening quote
        out: list[str] = []
        text = self.text
        while self.pos < len(text) and text[self.pos] != '"':
            if text[self.pos] == "\\":
                self.pos += 1
            if self.pos < len(text):
                out.append(text[self.pos])
                self.pos += 1
        if self._current() == '"':
            self.pos += 1
        return "".join(out)

    def parse_node(self) -> Node | None:
        self._skip_whitespace()
        if self._current() != "(":
            return None
        self.pos += 1
        self._skip_whitespace()
        name = self._read_bare()
        if not name:
            return None
        node = Node(name)
        while self.pos < len(self.text):
            self._skip_whitespace()
            char = self._current()
            if not char:
                break
            if char == ")":
                self.pos += 1
                break
            if char == "(":
                child = self.parse_node()
                if child is not None:
                    node.children.append(child)
            elif char == '"':
                node.parameters.append(self._read_quoted())
            else:
                token = self._read_bare()
                if token:
                    node.parameters.append(token)
        return node


def parse(text: str) -> Node:
    """Parse the first S-expression in ``text``; raise ValueError if there is none."""
    root = _Parser(text).parse_node()
    if root is None:
        raise ValueError("input does not start with a named S-expression")
    return root


def is_number_token(text: str) -> bool:
    """Return True if ``text`` is a plain decimal number, optionally with exponent."""
    if not text:
        return False
    seen_digit = seen_dot = seen_exp = False
    i = 1 if text[0] in "+-" else 0
    while i < len(text):
        char = text[i]
        if char in _DIGITS:
            seen_digit = True
        elif char == ".":
            if seen_dot or seen_exp:
                return False
            seen_dot = True
        elif char in "eE":
            if seen_exp or not seen_digit:
                return False
            seen_exp = True
            seen_digit = False
            if i + 1 < len(text) and text[i + 1] in "+-":
                i += 1
        else:
            return False
        i += 1
    return seen_digit


def escape_for_quotes(text: str) -> str:
    """Backslash-escape double quotes and backslashes."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def should_quote(text: str) -> bool:
    """Decide whether a parameter must be written inside double quotes.

    Empty strings are quoted; numbers are not; tokens made only of lower-case
    letters, digits and ``_-./+:`` are not; anything else is.
    """
    if not text:
        return True
    if is_number_token(text):
        return False
    return any(
        not (c in _LOWER or c in _DIGITS or c in _SAFE_SYMBOLS) for c in text
    )


def render_param(value: str) -> str:
    """Render one parameter as it appears in the file."""
    if not value:
        return '""'
    if not should_quote(value):
        return value
    return f'"{escape_for_quotes(value)}"'


def _write(node: Node, indent: int, step: int, out: list[str]) -> None:
    pad = " " * indent
    params = [p for p in node.parameters if p != "hide"]
    hide_count = len(node.parameters) - len(params)
    head = pad + "(" + node.name + "".join(" " + render_param(p) for p in params)

    if not node.children:
        out.append(head + " hide" * hide_count + ")\n")
        return

    out.append(head + "\n")
    for index, child in enumerate(node.children):
        _write(child, indent + step, step, out)
        if index == 0:
            out.extend(" " * (indent + step) + "hide\n" for _ in range(hide_count))
    out.append(pad + ")\n")


def dumps(node: Node, indent_step: int = 2) -> str:
    """Serialise a tree, one list per line, indenting nested lists by ``indent_step``.

    A ``hide`` parameter of a node with children is written on its own line
    right after the first child.
    """
    out: list[str] = []
    _write(node, 0, indent_step, out)
    return "".join(out)