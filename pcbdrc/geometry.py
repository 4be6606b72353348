"""Planar geometry: vectors and intersection tests for segments and three-point arcs."""

from __future__ import annotations

import math
from dataclasses import dataclass

EPS = 1e-9
_TAU = 2 * math.pi
_ARC_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Vec2:
    """A 2-D point or vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> Vec2:
        return Vec2(self.x * k, self.y * k)

    def dot(self, other: Vec2) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vec2) -> float:
        """Z component of the cross product."""
        return self.x * other.y - self.y * other.x

    def norm(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.dot(self))


def wrap_angle(angle: float) -> float:
    """Bring an angle in radians into the range [0, 2*pi)."""
    while angle < 0:
        angle += _TAU
    while angle >= _TAU:
        angle -= _TAU
    return angle


def circle_from_3_points(a: Vec2, b: Vec2, c: Vec2) -> tuple[Vec2, float] | None:
    """Return the centre and radius of the circle through three points.

    Returns None when the points are collinear.
    """
    a1, b1 = 2 * (b.x - a.x), 2 * (b.y - a.y)
    c1 = b.x * b.x + b.y * b.y - a.x * a.x - a.y * a.y
    a2, b2 = 2 * (c.x - a.x), 2 * (c.y - a.y)
    c2 = c.x * c.x + c.y * c.y - a.x * a.x - a.y * a.y
    det = a1 * b2 - a2 * b1
    if abs(det) < EPS:
        return None
    center = Vec2((c1 * b2 - c2 * b1) / det, (a1 * c2 - a2 * c1) / det)
    return center, (a - center).norm()


def segment_intersects_segment(p1: Vec2, p2: Vec2, q1: Vec2, q2: Vec2) -> bool:
    """Return True if segment p1-p2 touches or crosses segment q1-q2."""
    r = p2 - p1
    s = q2 - q1
    rxs = r.cross(s)
    qpr = (q1 - p1).cross(r)

    if abs(rxs) < EPS and abs(qpr) < EPS:
        def overlap(a: float, b: float, c: float, d: float) -> bool:
            a, b = sorted((a, b))
            c, d = sorted((c, d))
            return max(a, c) <= min(b, d) + EPS

        return overlap(p1.x, p2.x, q1.x, q2.x) and overlap(p1.y, p2.y, q1.y, q2.y)
    if abs(rxs) < EPS:
        return False

    t = (q1 - p1).cross(s) / rxs
    u = (q1 - p1).cross(r) / rxs
    return -EPS <= t <= 1 + EPS and -EPS <= u <= 1 + EPS


def _on_arc(p: Vec2, start: Vec2, end: Vec2, center: Vec2, ccw: bool) -> bool:
    a_start = wrap_angle(math.atan2(start.y - center.y, start.x - center.x))
    a_end = wrap_angle(math.atan2(end.y - center.y, end.x - center.x))
    a_p = wrap_angle(math.atan2(p.y - center.y, p.x - center.x))
    if ccw:
        span = math.fmod(a_end - a_start + _TAU, _TAU)
        rel = math.fmod(a_p - a_start + _TAU, _TAU)
    else:
        span = math.fmod(a_start - a_end + _TAU, _TAU)
        rel = math.fmod(a_start - a_p + _TAU, _TAU)
    return rel <= span + _ARC_TOLERANCE


def _is_ccw(a: Vec2, b: Vec2, c: Vec2) -> bool:
    return (b - a).cross(c - a) > 0


def segment_intersects_arc(p1: Vec2, p2: Vec2, a: Vec2, b: Vec2, c: Vec2) -> bool:
    """Return True if segment p1-p2 meets the arc from a through b to c."""
    circle = circle_from_3_points(a, b, c)
    if circle is None:
        return False
    center, radius = circle
    ccw = _is_ccw(a, b, c)

    d = p2 - p1
    f = p1 - center
    qa = d.dot(d)
    qb = 2 * f.dot(d)
    qc = f.dot(f) - radius * radius
    disc = qb * qb - 4 * qa * qc
    if disc < -EPS or qa == 0:
        return False

    def hits(t: float) -> bool:
        if t < -EPS or t > 1 + EPS:
            return False
        return _on_arc(p1 + d * t, a, c, center, ccw)

    if abs(disc) <= EPS:
        return hits(-qb / (2 * qa))
    root = math.sqrt(max(0.0, disc))
    return hits((-qb - root) / (2 * qa)) or hits((-qb + root) / (2 * qa))


def arc_intersects_arc(
    a1: Vec2, b1: Vec2, c1: Vec2, a2: Vec2, b2: Vec2, c2: Vec2
) -> bool:
    """Return True if two arcs, each given by start, middle and end points, meet."""
    first = circle_from_3_points(a1, b1, c1)
    second = circle_from_3_points(a2, b2, c2)
    if first is None or second is None:
        return False
    cen1, r1 = first
    cen2, r2 = second

    dist = (cen2 - cen1).norm()
    if dist > r1 + r2 + EPS:
        return False
    if dist < abs(r1 - r2) - EPS:
        return False
    if dist == 0:
        return False

    along = (r1 * r1 - r2 * r2 + dist * dist) / (2 * dist)
    h2 = r1 * r1 - along * along
    if h2 < -EPS:
        return False
    h = math.sqrt(max(h2, 0.0))
    u = (cen2 - cen1) * (1.0 / dist)
    base = cen1 + u * along
    perp = Vec2(-u.y, u.x)

    candidates = [base] if h <= EPS else [base + perp * h, base - perp * h]
    ccw1 = _is_ccw(a1, b1, c1)
    ccw2 = _is_ccw(a2, b2, c2)
    return any(
        _on_arc(p, a1, c1, cen1, ccw1) and _on_arc(p, a2, c2, cen2, ccw2)
        for p in candidates
    )