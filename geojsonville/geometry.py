# This file is part of GeoJSONville, an ArcGIS to GeoJSON conversion toolkit.
# Copyright (C) 2024  GEOACE

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

# You can contact the developer via email or using the contact form provided at https://geoace.net
"""Planar geometry helpers used to rebuild polygons from ESRI rings.

Every function reads its arguments and returns new lists, so callers can
hand in rings taken straight from a parsed ESRI JSON document.
"""
from typing import List, Sequence, Tuple

Vector = List[float]
Ring = List[Vector]
Line = Tuple[Sequence[float], Sequence[float]]


def vectors_equal(vector_a: Sequence[float], vector_b: Sequence[float]) -> bool:
    """Exact comparison of the x and y components, no tolerance."""
    return vector_a[0] == vector_b[0] and vector_a[1] == vector_b[1]


def close_ring(ring: Sequence[Sequence[float]]) -> Ring:
    """Return a copy of the ring whose last vector repeats the first one."""
    closed = [list(vector) for vector in ring]
    if closed and not vectors_equal(closed[0], closed[-1]):
        closed.append(list(closed[0]))
    return closed


def is_ring_clockwise(ring: Sequence[Sequence[float]]) -> bool:
    """Shoelace test. Zero area rings count as clockwise."""
    total = 0
    for vector_a, vector_b in zip(ring, ring[1:]):
        total += (vector_b[0] - vector_a[0]) * (vector_b[1] + vector_a[1])

    return total >= 0


def do_lines_intersect(line_a: Line, line_b: Line) -> bool:
    """Check whether two segments cross or touch.

    Parallel segments never intersect here, even when they overlap.
    """
    a1, a2 = line_a
    b1, b2 = line_b

    ua_t = (b2[0] - b1[0]) * (a1[1] - b1[1]) - (b2[1] - b1[1]) * (a1[0] - b1[0])
    ub_t = (a2[0] - a1[0]) * (a1[1] - b1[1]) - (a2[1] - a1[1]) * (a1[0] - b1[0])
    u_b = (b2[1] - b1[1]) * (a2[0] - a1[0]) - (b2[0] - b1[0]) * (a2[1] - a1[1])

    if u_b != 0:
        ua = ua_t / u_b
        ub = ub_t / u_b
        return 0 <= ua <= 1 and 0 <= ub <= 1

    return False


def do_rings_intersect(ring_a: Sequence[Sequence[float]], ring_b: Sequence[Sequence[float]]) -> bool:
    for line_a in zip(ring_a, ring_a[1:]):
        for line_b in zip(ring_b, ring_b[1:]):
            if do_lines_intersect(line_a, line_b):
                return True

    return False


def does_ring_contain_vector(ring: Sequence[Sequence[float]], vector: Sequence[float]) -> bool:
    """Ray casting point in polygon test (crossing number parity)."""
    inside = False
    x, y = vector[0], vector[1]

    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]

        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i

    return inside


def ring_contains_ring(outer_ring: Sequence[Sequence[float]], inner_ring: Sequence[Sequence[float]]) -> bool:
    """Cheap containment check.

    Assumes rings that do not cross are either nested or disjoint, so testing
    the first inner vertex is enough.
    """
    return (not do_rings_intersect(outer_ring, inner_ring)
            and does_ring_contain_vector(outer_ring, inner_ring[0]))
