"""
Offset polygons read off a finished skeleton.

Every wavefront vertex alive at the requested distance sits somewhere on its trajectory
arc, found by linear interpolation between the arc's node times. The recorded edge
histories give the order in which those vertices followed each other along the wavefront,
so the loops come out without any geometric search.
"""
import math

import numpy as np

from .channel import channel
from .exceptions import DistanceOutOfRange, InvalidInput
from .geometry import as_tuple, signed_area
from .skeleton import Side


def _check_distance(distance):
    try:
        distance = float(distance)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Offset distance must be a number, got {distance!r}.") from e
    if not math.isfinite(distance) or distance < 0:
        raise InvalidInput(f"Offset distance must be finite and non-negative, got {distance}.")
    return distance


def wavefront_points(skeleton, distance):
    """
    Positions at the given distance of every wavefront vertex alive just before it.

    Returns a dict of wavefront vertex index to complex position.
    """
    times = skeleton.node_time
    positions = skeleton.node_position
    trajectories = skeleton.trajectories
    if len(trajectories) == 0:
        return {}
    t0 = times[trajectories[:, 0]]
    t1 = times[trajectories[:, 1]]
    alive = np.nonzero((t0 < distance) & (t1 >= distance))[0]
    if len(alive) == 0:
        return {}
    start = trajectories[alive, 0]
    end = trajectories[alive, 1]
    p0 = positions[start]
    p1 = positions[end]
    span = t1[alive] - t0[alive]
    points = p0 + (p1 - p0) * ((distance - t0[alive]) / span)
    return dict(zip(alive.tolist(), points.tolist()))


def _clean_loop(loop, tolerance, area_tolerance):
    """Drop repeated points. Returns None when nothing with an area is left."""
    points = []
    for p in loop:
        if not points or abs(p - points[-1]) > tolerance:
            points.append(p)
    while len(points) > 1 and abs(points[0] - points[-1]) <= tolerance:
        points.pop()
    if len(points) < 3:
        return None
    if abs(signed_area(points)) <= area_tolerance:
        return None
    return points


def offset_at(skeleton, distance, side=None):
    """
    Offset polygons of the skeleton's polygon at the given distance.

    Returns a list of closed polygons, each a list of (x, y) points without a repeated
    closing point. Outer boundaries run counter-clockwise, holes of exterior offsets
    clockwise. Interior offsets beyond the last event are empty, exterior offsets beyond
    the skeleton's bound raise DistanceOutOfRange.
    """
    distance = _check_distance(distance)
    side = skeleton.mode if side is None else Side(side)
    if side != skeleton.mode:
        raise InvalidInput(
            f"Cannot take an {side.name.lower()} offset from an "
            f"{skeleton.mode.name.lower()} skeleton."
        )
    if side == Side.EXTERIOR and distance > skeleton.max_distance:
        raise DistanceOutOfRange(distance, skeleton.max_distance)
    if distance == 0:
        return []
    if side == Side.INTERIOR and distance > skeleton.max_time:
        return []

    chan = channel("offset")
    points = wavefront_points(skeleton, distance)
    tolerance = skeleton.tolerance
    area_tolerance = tolerance * tolerance
    visited = set()
    polygons = []
    for start in points:
        if start in visited:
            continue
        loop = []
        current = start
        while True:
            visited.add(current)
            loop.append(points[current])
            current = skeleton.successor(current, distance)
            if current == start:
                break
            if current not in points or current in visited:
                loop = None
                if chan:
                    chan(f"Wavefront loop through vertex {start} is open at d={distance}.")
                break
        if loop is None:
            continue
        cleaned = _clean_loop(loop, tolerance, area_tolerance)
        if cleaned is None:
            continue
        if side == Side.EXTERIOR:
            cleaned.reverse()
        polygons.append([as_tuple(p) for p in cleaned])
    if chan:
        chan(f"{side.name.lower()} offset at d={distance}: {len(polygons)} polygon(s).")
    return polygons


class OffsetExtractor:
    """
    Offset queries against one skeleton, with the results kept per (distance, side).

    Every call returns fresh lists, callers are free to modify what they get.
    """

    def __init__(self, skeleton):
        self.skeleton = skeleton
        self._cache = {}

    def __len__(self):
        return len(self._cache)

    def offset(self, distance, side=None):
        side = self.skeleton.mode if side is None else Side(side)
        key = (_check_distance(distance), side)
        try:
            cached = self._cache[key]
        except KeyError:
            result = offset_at(self.skeleton, key[0], side)
            cached = tuple(tuple(polygon) for polygon in result)
            self._cache[key] = cached
        return [list(polygon) for polygon in cached]

    def clear(self):
        self._cache.clear()
