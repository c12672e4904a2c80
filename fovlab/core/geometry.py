"""Planar geometry kernel.

Points are ``(x, y)`` pairs in vehicle-local coordinates (x forward, y left).
Nothing in here knows about sensors; the coverage, overlap and constraint
modules build on these primitives.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np

Point2 = Tuple[float, float]
Polygon = Sequence[Point2]


def distance(a: Point2, b: Point2) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def point_in_polygon(point: Point2, polygon: Polygon) -> bool:
    """Even-odd ray casting along +x.

    Points exactly on an edge follow the usual half-open rule of the
    crossing test (``yi > py`` vs ``yj > py``) and are not special-cased.
    """
    px, py = point
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def nearest_point_on_segment(p: Point2, a: Point2, b: Point2) -> Point2:
    abx = b[0] - a[0]
    aby = b[1] - a[1]
    ab_len_sq = abx * abx + aby * aby
    if ab_len_sq == 0.0:
        return (a[0], a[1])
    t = ((p[0] - a[0]) * abx + (p[1] - a[1]) * aby) / ab_len_sq
    t = max(0.0, min(1.0, t))
    return (a[0] + abx * t, a[1] + aby * t)


def clamp_point_to_polygon(point: Point2, polygon: Polygon) -> Point2:
    """Return ``point`` if it lies inside ``polygon``, else the closest boundary point."""
    if point_in_polygon(point, polygon):
        return (point[0], point[1])
    nearest = (polygon[0][0], polygon[0][1])
    best = math.inf
    n = len(polygon)
    for i in range(n):
        candidate = nearest_point_on_segment(point, polygon[i], polygon[(i + 1) % n])
        d = distance(point, candidate)
        if d < best:
            best = d
            nearest = candidate
    return nearest


def wedge_triangle(origin: Point2, yaw_deg: float, fov_deg: float, range_m: float) -> List[Point2]:
    """Triangular approximation of a horizontal field of view.

    Returns ``[origin, right_edge, left_edge]``. Only meaningful for
    ``fov_deg < 180``; wider fields fold back over the origin, which is why
    callers treat ``fov_deg >= 350`` as omnidirectional.
    """
    half = math.radians(fov_deg / 2.0)
    yaw = math.radians(yaw_deg)
    ox, oy = origin
    left = (ox + range_m * math.cos(yaw + half), oy + range_m * math.sin(yaw + half))
    right = (ox + range_m * math.cos(yaw - half), oy + range_m * math.sin(yaw - half))
    return [(ox, oy), right, left]


def points_in_triangle(points: np.ndarray, a: Point2, b: Point2, c: Point2) -> np.ndarray:
    """Vectorised inclusive point-in-triangle test for an ``(N, 2)`` array."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    x = pts[:, 0]
    y = pts[:, 1]
    d1 = (x - b[0]) * (a[1] - b[1]) - (a[0] - b[0]) * (y - b[1])
    d2 = (x - c[0]) * (b[1] - c[1]) - (b[0] - c[0]) * (y - c[1])
    d3 = (x - a[0]) * (c[1] - a[1]) - (c[0] - a[0]) * (y - a[1])
    has_neg = (d1 < 0) | (d2 < 0) | (d3 < 0)
    has_pos = (d1 > 0) | (d2 > 0) | (d3 > 0)
    return ~(has_neg & has_pos)


def point_in_triangle(point: Point2, a: Point2, b: Point2, c: Point2) -> bool:
    return bool(points_in_triangle(np.asarray([point]), a, b, c)[0])


def polygon_area(polygon: Polygon) -> float:
    """Unsigned shoelace area."""
    area = 0.0
    n = len(polygon)
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1] - polygon[j][0] * polygon[i][1]
    return abs(area) / 2.0


def _inside(p: Point2, a: Point2, b: Point2) -> bool:
    return (b[0] - a[0]) * (p[1] - a[1]) - (b[1] - a[1]) * (p[0] - a[0]) >= 0.0


def _line_intersection(s: Point2, e: Point2, a: Point2, b: Point2) -> Point2:
    dcx, dcy = a[0] - b[0], a[1] - b[1]
    dpx, dpy = s[0] - e[0], s[1] - e[1]
    n1 = a[0] * b[1] - a[1] * b[0]
    n2 = s[0] * e[1] - s[1] * e[0]
    denom = dcx * dpy - dcy * dpx
    if denom == 0.0:
        return s
    return ((n1 * dpx - n2 * dcx) / denom, (n1 * dpy - n2 * dcy) / denom)


def intersection_area_convex(subject: Polygon, clip: Polygon) -> float:
    """Area of ``subject ∩ clip`` by Sutherland–Hodgman clipping.

    Both polygons must be convex. The clip polygon's edges are treated as
    counter-clockwise half-planes (left side inside); wedge triangles from
    :func:`wedge_triangle` are wound that way for ``fov_deg < 180``.
    """
    output: List[Point2] = list(subject)
    n_clip = len(clip)
    for i in range(n_clip):
        a = clip[i]
        b = clip[(i + 1) % n_clip]
        candidates = output
        output = []
        n_in = len(candidates)
        for j in range(n_in):
            s = candidates[j]
            e = candidates[(j + 1) % n_in]
            if _inside(e, a, b):
                if not _inside(s, a, b):
                    output.append(_line_intersection(s, e, a, b))
                output.append(e)
            elif _inside(s, a, b):
                output.append(_line_intersection(s, e, a, b))
        if not output:
            return 0.0
    return polygon_area(output)
