import pytest

from pcbdrc.sexpr import (
    Node,
    dumps,
    escape_for_quotes,
    is_number_token,
    parse,
    render_param,
    should_quote,
)

BOARD = """(kicad_pcb (version 20221018) (generator pcbnew)
  (layers
    (0 "F.Cu" signal)
    (31 "B.Cu" signal "Bottom")
  )
  (net 0 "")
  (net 1 "GND")
  (segment (start 1.5 2) (end 3 4) (width 0.25) (layer "F.Cu") (net 1) (tstamp abc-1))
  (footprint "R_0603" (layer "F.Cu") (at 10 20 90)
    (pad "1" smd rect (at -0.8 0) (size 0.8 0.9) (layers "F.Cu") (net 1 "GND"))
  )
)
"""


def test_parse_structure():
    root = parse(BOARD)
    assert root.name == "kicad_pcb"
    assert [c.name for c in root.children][:3] == ["version", "generator", "layers"]
    layers = root.child("layers")
    assert layers.children[1].name == "31"
    assert layers.children[1].parameters == ["B.Cu", "signal", "Bottom"]


def test_empty_quoted_parameter_preserved():
    root = parse(BOARD)
    nets = [c for c in root.children if c.name == "net"]
    assert nets[0].parameters == ["0", ""]
    assert nets[1].parameters == ["1", "GND"]


def test_escaped_quotes_in_string():
    root = parse(r'(a "x\"y\\z")')
    assert root.parameters == ['x"y\\z']


def test_walk_and_find_all():
    root = parse(BOARD)
    names = [n.name for n in root.walk()]
    assert names[0] == "kicad_pcb"
    assert names.count("net") == 4
    assert len(root.find_all("at")) == 2
    assert root.find_all("kicad_pcb") == [root]


def test_walk_preorder():
    root = Node("a", children=[Node("b", children=[Node("c")]), Node("d")])
    assert [n.name for n in root.walk()] == ["a", "b", "c", "d"]


def test_child_missing_returns_none():
    root = parse("(a (b 1))")
    assert root.child("zzz") is None
    assert root.child("b").parameters == ["1"]


@pytest.mark.parametrize("text", ["", "   ", "abc", "( )", "()"])
def test_parse_rejects_non_list(text):
    with pytest.raises(ValueError):
        parse(text)


def test_round_trip():
    root = parse(BOARD)
    assert parse(dumps(root)) == root


def test_round_trip_with_indent_step():
    root = parse(BOARD)
    text = dumps(root, indent_step=4)
    assert parse(text) == root
    assert "\n    (version" in text


def test_leaf_dump():
    assert dumps(Node("net", ["1", "GND"])) == '(net 1 "GND")\n'


def test_hide_on_leaf_goes_last():
    text = dumps(Node("fp_text", ["hide", "reference"]))
    assert text.endswith(" hide)\n")
    assert parse(text).parameters == ["reference", "hide"]


def test_hide_with_children_after_first_child():
    node = Node("fp_text", ["value", "hide"], [Node("at", ["1", "2"]), Node("layer", ["F.Fab"])])
    lines = dumps(node).splitlines()
    assert lines[1].strip().startswith("(at")
    assert lines[2].strip() == "hide"
    assert lines[3].strip().startswith("(layer")
    assert parse(dumps(node)) == node


@pytest.mark.parametrize("text", ["0", "-3", "+2.5", "1.5", "1e5", "2.5E-3", ".5"])
def test_number_tokens(text):
    assert is_number_token(text) is True


@pytest.mark.parametrize("text", ["", "+", "e5", "1.2.3", "1e", "1e5e2", "abc", "1.0a"])
def test_not_number_tokens(text):
    assert is_number_token(text) is False


@pytest.mark.parametrize("text", ["signal", "abc-1", "1.5", "a/b:c", "x_y+z"])
def test_should_not_quote(text):
    assert should_quote(text) is False
    assert render_param(text) == text


@pytest.mark.parametrize("text", ["", "F.Cu", "Top", "a b", 'q"', "é"])
def test_should_quote(text):
    assert should_quote(text) is True
    assert render_param(text).startswith('"')
    assert render_param(text).endswith('"')


def test_render_empty():
    assert render_param("") == '""'


def test_escape_round_trip():
    value = 'a"b\\c'
    escaped = escape_for_quotes(value)
    assert escaped.count("\\") == 3
    assert parse(f'(x "{escaped}")').parameters == [value]