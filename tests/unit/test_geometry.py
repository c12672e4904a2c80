import math

import numpy as np
import pytest

from fovlab.core.geometry import (
    clamp_point_to_polygon,
    distance,
    intersection_area_convex,
    nearest_point_on_segment,
    point_in_polygon,
    point_in_triangle,
    points_in_triangle,
    polygon_area,
    wedge_triangle,
)
from fovlab.sensors.vehicles import get_vehicle

SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


def test_point_in_polygon_square() -> None:
    assert point_in_polygon((0.5, 0.5), SQUARE)
    assert not point_in_polygon((1.5, 0.5), SQUARE)
    assert not point_in_polygon((-0.1, 0.5), SQUARE)
    assert not point_in_polygon((0.5, 2.0), SQUARE)


def test_point_in_polygon_follows_pointed_nose() -> None:
    polygon = get_vehicle("sedan").polygon
    assert point_in_polygon((2.35, 0.0), polygon)
    assert not point_in_polygon((2.35, 0.8), polygon)
    assert point_in_polygon((-2.15, 0.0), polygon)


def test_nearest_point_on_segment_clamps_to_endpoints() -> None:
    assert nearest_point_on_segment((-1.0, 1.0), (0.0, 0.0), (1.0, 0.0)) == (0.0, 0.0)
    assert nearest_point_on_segment((0.25, 3.0), (0.0, 0.0), (1.0, 0.0)) == (0.25, 0.0)
    assert nearest_point_on_segment((5.0, 5.0), (1.0, 1.0), (1.0, 1.0)) == (1.0, 1.0)


def test_clamp_is_identity_inside() -> None:
    assert clamp_point_to_polygon((0.25, 0.75), SQUARE) == (0.25, 0.75)


@pytest.mark.parametrize(
    "point, expected",
    [
        ((2.0, 0.5), (1.0, 0.5)),
        ((2.0, 2.0), (1.0, 1.0)),
        ((-1.0, -3.0), (0.0, 0.0)),
        ((0.3, -0.4), (0.3, 0.0)),
    ],
)
def test_clamp_projects_onto_nearest_edge(point, expected) -> None:
    got = clamp_point_to_polygon(point, SQUARE)
    assert got == pytest.approx(expected)


def test_clamp_minimises_distance_for_convex_polygon() -> None:
    hexagon = [(math.cos(a), math.sin(a)) for a in np.linspace(0.0, 2.0 * math.pi, 6, endpoint=False)]
    boundary = []
    for i in range(len(hexagon)):
        a = np.asarray(hexagon[i])
        b = np.asarray(hexagon[(i + 1) % len(hexagon)])
        for t in np.linspace(0.0, 1.0, 400):
            boundary.append(a + (b - a) * t)
    boundary = np.asarray(boundary)

    rng = np.random.default_rng(7)
    checked = 0
    for p in rng.uniform(-3.0, 3.0, size=(200, 2)):
        point = (float(p[0]), float(p[1]))
        if point_in_polygon(point, hexagon):
            continue
        clamped = clamp_point_to_polygon(point, hexagon)
        best = float(np.min(np.hypot(boundary[:, 0] - p[0], boundary[:, 1] - p[1])))
        assert distance(point, clamped) <= best + 1e-9
        checked += 1
    assert checked > 50


def test_wedge_triangle_edges() -> None:
    origin, right, left = wedge_triangle((1.0, 2.0), 90.0, 60.0, 10.0)
    assert origin == (1.0, 2.0)
    assert right == pytest.approx((6.0, 2.0 + 10.0 * math.sin(math.radians(60.0))))
    assert left == pytest.approx((-4.0, 2.0 + 10.0 * math.sin(math.radians(120.0))))


def test_wedge_triangle_is_counter_clockwise() -> None:
    tri = wedge_triangle((0.0, 0.0), 0.0, 90.0, 10.0)
    (ax, ay), (bx, by), (cx, cy) = tri
    assert (bx - ax) * (cy - ay) - (by - ay) * (cx - ax) > 0.0


def test_points_in_triangle_is_inclusive() -> None:
    a, b, c = (0.0, 0.0), (4.0, 0.0), (0.0, 4.0)
    pts = np.array([[1.0, 1.0], [0.0, 0.0], [2.0, 2.0], [3.0, 3.0], [-0.1, 1.0]])
    np.testing.assert_array_equal(points_in_triangle(pts, a, b, c), [True, True, True, False, False])
    assert point_in_triangle((1.0, 1.0), a, b, c)


def test_polygon_area_ignores_orientation() -> None:
    assert polygon_area(SQUARE) == pytest.approx(1.0)
    assert polygon_area(list(reversed(SQUARE))) == pytest.approx(1.0)


def test_intersection_area_of_overlapping_squares() -> None:
    shifted = [(x + 0.5, y) for x, y in SQUARE]
    assert intersection_area_convex(SQUARE, shifted) == pytest.approx(0.5)


def test_intersection_area_contained_triangle() -> None:
    tri = [(0.2, 0.2), (0.6, 0.2), (0.2, 0.6)]
    assert intersection_area_convex(tri, SQUARE) == pytest.approx(0.08)


def test_intersection_area_disjoint_is_zero() -> None:
    far = [(x + 3.0, y) for x, y in SQUARE]
    assert intersection_area_convex(SQUARE, far) == 0.0
