"""Outlines of tracks and pads as straight edges and three-point arcs."""

from __future__ import annotations

import math
from typing import Sequence

from pcbdrc.geometry import (
    Vec2,
    arc_intersects_arc,
    segment_intersects_arc,
    segment_intersects_segment,
)

Boundary = list[Vec2]
"""Two points describe a straight edge; three points an arc (start, middle, end)."""

_QUARTER_TURNS = (90, 270, -90)


def segment_boundaries(
    x1: float, y1: float, x2: float, y2: float, width: float
) -> list[Boundary]:
    """Outline of a track with round ends: two side edges and two end caps.

    A zero-length diagonal track has no outline and yields an empty list.
    """
    half = width / 2
    if x1 == x2:
        low, high = min(y1, y2), max(y1, y2)
        left_down = Vec2(x1 - half, low)
        right_down = Vec2(x1 + half, low)
        arc_down = Vec2(x1, low - half)
        left_up = Vec2(x2 - half, high)
        right_up = Vec2(x2 + half, high)
        arc_up = Vec2(x2, high + half)
        return [
            [left_down, left_up],
            [right_down, right_up],
            [left_down, arc_down, right_down],
            [left_up, arc_up, right_up],
        ]
    if y1 == y2:
        low, high = min(x1, x2), max(x1, x2)
        left_down = Vec2(low, y1 - half)
        right_down = Vec2(high, y1 - half)
        arc_left = Vec2(low - half, y1)
        left_up = Vec2(low, y1 + half)
        right_up = Vec2(high, y1 + half)
        arc_right = Vec2(high + half, y1)
        return [
            [left_down, right_down],
            [left_up, right_up],
            [left_down, arc_left, left_up],
            [right_down, arc_right, right_up],
        ]

    dx, dy = x2 - x1, y2 - y1
    length = math.hypot(dx, dy)
    if length == 0:
        return []
    start, end = Vec2(x1, y1), Vec2(x2, y2)
    tangent = Vec2(dx / length, dy / length)
    normal = Vec2(-tangent.y, tangent.x)
    start_left = start + normal * half
    start_right = start - normal * half
    end_left = end + normal * half
    end_right = end - normal * half
    mid_start = start - tangent * half
    mid_end = end + tangent * half
    return [
        [start_left, end_left],
        [start_right, end_right],
        [start_left, mid_start, start_right],
        [end_left, mid_end, end_right],
    ]


def rect_boundaries(
    x: float, y: float, width: float, height: float, rotation: float
) -> list[Boundary]:
    """Four edges of a rectangular pad centred on (x, y)."""
    if rotation in _QUARTER_TURNS:
        return rect_boundaries(x, y, height, width, 0)
    left_down = Vec2(x - width / 2, y - height / 2)
    right_down = Vec2(x + width / 2, y - height / 2)
    left_up = Vec2(x - width / 2, y + height / 2)
    right_up = Vec2(x + width / 2, y + height / 2)
    return [
        [left_down, right_down],
        [left_up, right_up],
        [left_down, left_up],
        [right_down, right_up],
    ]


def circle_boundaries(x: float, y: float, radius: float) -> list[Boundary]:
    """A circular pad as an upper and a lower half-circle arc."""
    top = Vec2(x, y + radius)
    bottom = Vec2(x, y - radius)
    left = Vec2(x - radius, y)
    right = Vec2(x + radius, y)
    return [[left, top, right], [left, bottom, right]]


def oval_boundaries(
    x: float, y: float, width: float, height: float, rotation: float
) -> list[Boundary]:
    """An oval pad: two straight sides and two half-circle ends along its long axis."""
    if rotation in _QUARTER_TURNS:
        return oval_boundaries(x, y, height, width, 0)
    if height > width:
        left_down = Vec2(x - width / 2, y - height / 2 + width / 2)
        right_down = Vec2(x + width / 2, y - height / 2 + width / 2)
        left_up = Vec2(x - width / 2, y + height / 2 - width / 2)
        right_up = Vec2(x + width / 2, y + height / 2 - width / 2)
        arc_top = Vec2(x, y + height / 2)
        arc_bottom = Vec2(x, y - height / 2)
        return [
            [left_down, left_up],
            [right_down, right_up],
            [left_down, arc_bottom, right_down],
            [left_up, arc_top, right_up],
        ]
    left_down = Vec2(x - width / 2 + height / 2, y - height / 2)
    right_down = Vec2(x + width / 2 - height / 2, y - height / 2)
    left_up = Vec2(x - width / 2 + height / 2, y + height / 2)
    right_up = Vec2(x + width / 2 - height / 2, y + height / 2)
    arc_left = Vec2(x - width / 2, y)
    arc_right = Vec2(x + width / 2, y)
    return [
        [left_down, right_down],
        [left_up, right_up],
        [left_down, arc_left, left_up],
        [right_down, arc_right, right_up],
    ]


def roundrect_boundaries(
    x: float, y: float, width: float, height: float, rratio: float, rotation: float
) -> list[Boundary]:
    """A rounded rectangle: four straight edges and four quarter-circle corners.

    The corner radius is ``rratio`` times the shorter side.
    """
    if rotation in _QUARTER_TURNS:
        return roundrect_boundaries(x, y, height, width, rratio, 0)
    radius = min(width, height) * rratio
    diag = radius * math.sqrt(2) / 2
    hw, hh = width / 2, height / 2

    left_down = Vec2(x - hw, y - hh + radius)
    down_left = Vec2(x - hw + radius, y - hh)
    right_down = Vec2(x + hw, y - hh + radius)
    down_right = Vec2(x + hw - radius, y - hh)
    left_up = Vec2(x - hw, y + hh - radius)
    up_left = Vec2(x - hw + radius, y + hh)
    right_up = Vec2(x + hw, y + hh - radius)
    up_right = Vec2(x + hw - radius, y + hh)
    arc_left_down = Vec2(x - hw + radius - diag, y - hh + radius - diag)
    arc_left_up = Vec2(x - hw + radius - diag, y + hh - radius + diag)
    arc_right_down = Vec2(x + hw - radius + diag, y - hh + radius - diag)
    arc_right_up = Vec2(x + hw - radius + diag, y + hh - radius + diag)

    return [
        [left_down, left_up],
        [right_down, right_up],
        [down_left, down_right],
        [up_left, up_right],
        [left_down, arc_left_down, down_left],
        [right_down, arc_right_down, down_right],
        [left_up, arc_left_up, up_left],
        [right_up, arc_right_up, up_right],
    ]


def _pair_intersects(first: Sequence[Vec2], second: Sequence[Vec2]) -> bool:
    if len(first) == 2 and len(second) == 2:
        return segment_intersects_segment(first[0], first[1], second[0], second[1])
    if len(first) == 2 and len(second) == 3:
        return segment_intersects_arc(first[0], first[1], *second)
    if len(first) == 3 and len(second) == 2:
        return segment_intersects_arc(second[0], second[1], *first)
    if len(first) == 3 and len(second) == 3:
        return arc_intersects_arc(*first, *second)
    return False


def boundaries_intersect(
    first: Sequence[Sequence[Vec2]], second: Sequence[Sequence[Vec2]]
) -> bool:
    """Return True if any edge or arc of one outline meets any of the other."""
    return any(_pair_intersects(a, b) for a in first for b in second)