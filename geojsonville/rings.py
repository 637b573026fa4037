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
"""Rebuild GeoJSON Polygon/MultiPolygon geometries from ESRI rings.

ESRI polygons are a flat list of rings. Exterior rings run clockwise and
holes run counter-clockwise, and nothing says which hole belongs to which
exterior. GeoJSON wants the opposite winding and explicit nesting, so the
rings are normalized first and the holes are then handed to a hole assigner.
"""
import logging
from abc import ABC, abstractmethod
from numbers import Real
from typing import List, Optional, Sequence

from geojsonville.geometry import (Ring, close_ring, do_rings_intersect,
                                   is_ring_clockwise, ring_contains_ring)

logger = logging.getLogger(__name__)

Group = List[Ring]


class HoleAssigner(ABC):
    """Places hole rings into polygon groups.

    ``groups`` holds one list per exterior ring with the exterior (counter-
    clockwise) at index 0. ``holes`` are clockwise rings in the order they were
    found. Implementations return the groups to emit and must not drop rings.
    """

    @abstractmethod
    def assign(self, groups: List[Group], holes: List[Ring]) -> List[Group]:
        ...


class GreedyHoleAssigner(HoleAssigner):
    """Containment first, intersection second, promotion last.

    This is a heuristic, not a polygon clipper. Holes are taken from the end
    of the queue and matched against the most recently created groups first:

    1. a hole goes to the first exterior that contains it;
    2. a hole left over goes to the first exterior whose edges cross it;
    3. a hole still left over becomes an exterior ring of its own.
    """

    def assign(self, groups: List[Group], holes: List[Ring]) -> List[Group]:
        groups = [list(group) for group in groups]
        pending = list(holes)

        uncontained = []
        while pending:
            hole = pending.pop()
            if not self._attach(groups, hole, ring_contains_ring):
                uncontained.append(hole)

        while uncontained:
            hole = uncontained.pop()
            if not self._attach(groups, hole, do_rings_intersect):
                logger.debug("Promoting unmatched hole with %d vertices to an exterior ring", len(hole))
                groups.append([hole[::-1]])

        return groups

    @staticmethod
    def _attach(groups: List[Group], hole: Ring, matches) -> bool:
        for group in reversed(groups):
            if matches(group[0], hole):
                group.append(hole)
                return True
        return False


def _is_vector(vector) -> bool:
    return (isinstance(vector, (list, tuple)) and len(vector) >= 2
            and all(isinstance(value, Real) and not isinstance(value, bool) for value in vector[:2]))


def _is_ring(ring) -> bool:
    return isinstance(ring, list) and all(_is_vector(vector) for vector in ring)


def normalize_rings(rings: Sequence[Sequence[Sequence[float]]]):
    """Split raw ESRI rings into GeoJSON exterior groups and hole rings.

    Rings with fewer than four vertices once closed are dropped, and so are
    rings that are not lists of numeric vectors.
    """
    groups: List[Group] = []
    holes: List[Ring] = []

    if not isinstance(rings, list):
        return groups, holes

    for raw_ring in rings:
        if not _is_ring(raw_ring):
            logger.debug("Skipping malformed ring: %r", raw_ring)
            continue

        ring = close_ring(raw_ring)
        if len(ring) < 4:
            continue

        if is_ring_clockwise(ring):
            groups.append([ring[::-1]])
        else:
            holes.append(ring[::-1])

    return groups, holes


def rings_to_geojson(rings: Sequence[Sequence[Sequence[float]]],
                     assigner: Optional[HoleAssigner] = None) -> dict:
    """Convert an ESRI ``rings`` array into a GeoJSON Polygon or MultiPolygon."""
    if assigner is None:
        assigner = GreedyHoleAssigner()

    groups, holes = normalize_rings(rings)
    groups = assigner.assign(groups, holes)

    if len(groups) == 1:
        return {
            "type": "Polygon",
            "coordinates": groups[0]
        }

    return {
        "type": "MultiPolygon",
        "coordinates": groups
    }
