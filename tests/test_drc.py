import pytest

from pcbdrc.board import KiCadBoard
from pcbdrc.drc import (
    DrcReport,
    PadInfo,
    TrackInfo,
    check_drc,
    collect_layer_segments,
    collect_pads,
    main,
    track_info,
)
from pcbdrc.footprints import parse_footprint_coordinates
from pcbdrc.sexpr import parse
from pcbdrc.shapes import rect_boundaries

HEADER = """(kicad_pcb (version 20211014) (generator pcbnew)
  (layers
    (0 "F.Cu" signal)
    (31 "B.Cu" signal)
    (44 "Edge.Cuts" user)
  )
  (net 0 "")
  (net 1 "A")
  (net 2 "B")
"""


def board_text(*items):
    return HEADER + "\n".join(items) + "\n)\n"


def footprint(x, y, *pads, angle=None):
    at = f"(at {x} {y})" if angle is None else f"(at {x} {y} {angle})"
    lines = ['  (footprint "R1" (layer "F.Cu")', "    (tstamp fp-0001)", f"    {at}"]
    lines += [f"    {p}" for p in pads]
    lines.append("  )")
    return "\n".join(lines)


def segment(x1, y1, x2, y2, net, layer="F.Cu", width=0.25):
    return (
        f'  (segment (start {x1} {y1}) (end {x2} {y2}) (width {width}) '
        f'(layer "{layer}") (net {net}) (tstamp s-{x1}-{y1}))'
    )


PAD_A = '(pad "1" smd rect (at -1 0) (size 1 1) (layers "F.Cu") (net 1 "A"))'
PAD_B = '(pad "2" smd rect (at 1 0) (size 1 1) (layers "F.Cu") (net 2 "B"))'


def load(text):
    return KiCadBoard.from_text(text), parse_footprint_coordinates(text.splitlines())


def write(tmp_path, text):
    path = tmp_path / "board.kicad_pcb"
    path.write_text(text, encoding="utf-8")
    return path


def test_track_info_reads_children():
    node = parse('(segment (start 1 2) (end 3 4) (width 0.25) (layer "F.Cu") (net 7))')
    assert track_info(node) == TrackInfo(1.0, 2.0, 3.0, 4.0, 0.25, "7")


def test_track_info_missing_end_raises():
    node = parse("(segment (start 1 2) (width 0.25) (net 7))")
    with pytest.raises(ValueError):
        track_info(node)


def test_collect_layer_segments_undeclared_layer_raises():
    board, _ = load(board_text(segment(0, 0, 1, 0, 1, "In1.Cu")))
    with pytest.raises(ValueError):
        collect_layer_segments(board)


def test_collect_pads_positions_and_outline():
    board, coords = load(board_text(footprint(10, 10, PAD_A, PAD_B)))
    pads = collect_pads(board, coords)
    assert [(p.x, p.y) for p in pads] == [(9.0, 10.0), (11.0, 10.0)]
    assert [p.net for p in pads] == ["1", "2"]
    assert pads[0].layers == ["F.Cu"]
    assert pads[0].boundary == rect_boundaries(9.0, 10.0, 1.0, 1.0, 0)


def test_collect_pads_rotated_footprint_and_pad():
    pad = '(pad "1" smd rect (at 1 0 90) (size 2 1) (layers "F.Cu") (net 1 "A"))'
    board, coords = load(board_text(footprint(10, 10, pad, angle=90)))
    (info,) = collect_pads(board, coords)
    assert info.x == pytest.approx(10.0)
    assert info.y == pytest.approx(9.0)
    assert info.boundary == rect_boundaries(info.x, info.y, 2.0, 1.0, 90)


def test_collect_pads_circle_radius_is_half_width():
    pad = '(pad "1" thru_hole circle (at 0 0) (size 0.8 0.8) (layers "*.Cu") (net 1 "A"))'
    board, coords = load(board_text(footprint(5, 5, pad)))
    (info,) = collect_pads(board, coords)
    assert info.radius == pytest.approx(0.4)
    assert info.layers == ["*.Cu"]
    assert len(info.boundary) == 2


def test_collect_pads_without_net_raises():
    pad = '(pad "1" smd rect (at 0 0) (size 1 1) (layers "F.Cu"))'
    board, coords = load(board_text(footprint(5, 5, pad)))
    with pytest.raises(ValueError):
        collect_pads(board, coords)


def test_collect_pads_unknown_coordinates_raise():
    board, _ = load(board_text(footprint(10, 10, PAD_A)))
    with pytest.raises(LookupError):
        collect_pads(board, [])


def test_crossing_tracks_of_different_nets(tmp_path):
    text = board_text(segment(0, 0, 5, 0, 1), segment(2, -1, 2, 1, 2))
    report = check_drc(write(tmp_path, text))
    assert isinstance(report, DrcReport)
    assert report.violations == ["DRC Violation between nets B and A on layer F.Cu"]


def test_separate_tracks_have_no_violation(tmp_path):
    text = board_text(segment(0, 0, 5, 0, 1), segment(0, 3, 5, 3, 2))
    assert check_drc(write(tmp_path, text)).violations == []


def test_crossing_tracks_of_same_net_are_allowed(tmp_path):
    text = board_text(segment(0, 0, 5, 0, 1), segment(2, -1, 2, 1, 1))
    assert check_drc(write(tmp_path, text)).violations == []


def test_tracks_on_different_layers_do_not_clash(tmp_path):
    text = board_text(segment(0, 0, 5, 0, 1, "F.Cu"), segment(2, -1, 2, 1, 2, "B.Cu"))
    assert check_drc(write(tmp_path, text)).violations == []


def test_track_over_pad_of_other_net(tmp_path):
    text = board_text(
        footprint(10, 10, PAD_A, PAD_B), segment(11, 9, 11, 11, 1, width=0.2)
    )
    report = check_drc(write(tmp_path, text))
    assert report.violations == [
        "DRC Violation between net A and pad of net B at(11.000000,10.000000) on layer F.Cu"
    ]
    assert len(report.pads) == 2


def test_track_on_other_layer_passes_pad(tmp_path):
    text = board_text(
        footprint(10, 10, PAD_A, PAD_B), segment(11, 9, 11, 11, 1, "B.Cu", width=0.2)
    )
    assert check_drc(write(tmp_path, text)).violations == []


def test_overlapping_pads_of_different_nets(tmp_path):
    pad_a = '(pad "1" smd rect (at -0.4 0) (size 1 1) (layers "F.Cu") (net 1 "A"))'
    pad_b = '(pad "2" smd rect (at 0.4 0) (size 1 1) (layers "F.Cu") (net 2 "B"))'
    report = check_drc(write(tmp_path, board_text(footprint(10, 10, pad_a, pad_b))))
    assert report.violations == ["DRC Violation between pad of net B and pad of net A"]


def test_overlapping_pads_of_same_net_are_allowed(tmp_path):
    pad_a = '(pad "1" smd rect (at -0.4 0) (size 1 1) (layers "F.Cu") (net 1 "A"))'
    pad_b = '(pad "2" smd rect (at 0.4 0) (size 1 1) (layers "F.Cu") (net 1 "A"))'
    report = check_drc(write(tmp_path, board_text(footprint(10, 10, pad_a, pad_b))))
    assert report.violations == []


def test_all_copper_pad_clashes_with_back_pad(tmp_path):
    pad_a = '(pad "1" thru_hole rect (at -0.4 0) (size 1 1) (layers "*.Cu") (net 1 "A"))'
    pad_b = '(pad "2" smd rect (at 0.4 0) (size 1 1) (layers "B.Cu") (net 2 "B"))'
    report = check_drc(write(tmp_path, board_text(footprint(10, 10, pad_a, pad_b))))
    assert len(report.violations) == 1


def test_check_drc_pad_without_net_raises(tmp_path):
    pad = '(pad "1" smd rect (at 0 0) (size 1 1) (layers "F.Cu"))'
    with pytest.raises(ValueError):
        check_drc(write(tmp_path, board_text(footprint(5, 5, pad))))


def test_pad_info_defaults():
    pad = PadInfo(x=1.0, y=2.0)
    assert (pad.width, pad.height, pad.net, pad.layers) == (0.0, 0.0, "", [])


def test_main_prints_violation_count(tmp_path, capsys):
    text = board_text(segment(0, 0, 5, 0, 1), segment(2, -1, 2, 1, 2))
    assert main([str(write(tmp_path, text))]) == 0
    out = capsys.readouterr().out
    assert "DRC Violation between nets B and A on layer F.Cu" in out
    assert out.rstrip().endswith("DRC Violations Found: 1")


def test_main_missing_file_fails(tmp_path, capsys):
    assert main([str(tmp_path / "absent.kicad_pcb")]) == 1
    assert "check failed" in capsys.readouterr().err