# pcbdrc

Tools for KiCad `.kicad_pcb` board files:

- `pcbdrc.sexpr`: a parser (`parse`) and writer (`dumps`) for the
  S-expression format, built on the `Node` tree class;
- `pcbdrc.board`: `KiCadBoard`, which lists layers, nets, segments, vias and
  footprints, can add or remove tracks and vias, writes the board back out,
  and measures the board outline from its `Edge.Cuts` graphics;
- `pcbdrc.footprints`: absolute pad positions computed from each footprint's
  origin and rotation;
- `pcbdrc.geometry` and `pcbdrc.shapes`: intersection tests for line segments
  and three-point arcs, and outlines of tracks and rect, circle, oval and
  roundrect pads;
- `pcbdrc.report`: plain-text listings of segments, vias, footprints, layers,
  nets and the tree structure;
- `pcbdrc.drc`: a check that reports where copper of different nets touches
  on the same copper layer: track against track, track against pad, and pad
  against pad.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the check

```
pcbdrc path/to/board.kicad_pcb
```

Without an argument the command reads `./3.kicad_pcb`. It prints
`Parse succeeded.`, then each pad with its position, net and outline points,
then one line per violation and finally the total:

```
DRC Violation between nets GND and VCC on layer F.Cu
DRC Violations Found: 1
```

If the file cannot be read, or a pad has no net, or a net or pad cannot be
resolved, the command prints `check failed: ...` on standard error and exits
with status 1.

From Python, `pcbdrc.drc.check_drc(path)` returns a `DrcReport` holding the
violation messages (`violations`), the pads examined (`pads`) and the table of
net names (`net_names`).

## Using the library

```python
from pcbdrc.board import KiCadBoard

board = KiCadBoard.from_file("board.kicad_pcb")

for layer in board.layers:
    print(layer.id, layer.name, layer.kind)

print(board.size())        # (width, height) of the Edge.Cuts outline, or None

new_id = board.add_segment(0, 0, 10, 0, 0.25, "F.Cu", 1, "placeholder-tstamp")
board.remove_segment_by_id(new_id)

board.save("out.kicad_pcb")
```

`segments`, `vias`, `footprints`, `nodes`, `layers` and `nets` are
properties; `bbox()`, `size()` and `corners()` are methods, the last two
returning `None` when the board has no `Edge.Cuts` outline.

While a board is loaded, each segment, via and footprint carries a temporary
tag such as `[[SEID:3]]` as its first parameter, numbered from 1 in file
order, so it can be removed by number (`remove_segment_by_id`,
`remove_via_by_id`). Segments and vias can also be removed by their tstamp.
`dumps()` and `save()` strip the tags from the tree before writing unless
called with `strip_temp_ids=False`; once stripped, removal by number no longer
finds anything.

The geometry helpers work on their own: a shape is a list of boundaries, each
boundary either a line (two `Vec2` points) or an arc through three points, and
`pcbdrc.shapes.boundaries_intersect` says whether two shapes' outlines cross.

## What the check does not do

- It tests only whether outlines touch or cross; it applies no clearance
  distance and reads no design rules from the board.
- Vias, zones and graphics take no part in the check.
- Pad rotation is honoured only for quarter turns (90, 270 and -90 degrees);
  trapezoid and custom pad shapes get no outline.
- Net and layer tables are read once when a board is loaded; they are not
  updated by later edits.