"""
Skeleton construction. The builder validates the polygon, seeds a wavefront graph and runs
the event simulation until every wavefront vertex has stopped.
"""
import math

import numpy as np

from .channel import channel
from .exceptions import DegenerateConstruction, InvalidInput
from .geometry import (
    as_complex_array,
    diagonal,
    has_spikes,
    segment_intersection,
    self_intersections,
    signed_area,
)
from .settings import DEFAULT_SETTINGS
from .skeleton import Side
from .wavefront import WavefrontGraph


def normalize_polygon(points, settings=None, chan=None):
    """
    Return the polygon as a list of complex points in counter-clockwise order.

    A repeated closing point and consecutive duplicates are dropped. Clockwise input is
    reversed. Anything that cannot bound a simple region raises InvalidInput.
    """
    if settings is None:
        settings = DEFAULT_SETTINGS
    try:
        pts = as_complex_array(points)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Polygon must be a sequence of (x, y) points: {e}") from e
    if not np.all(np.isfinite(pts)):
        raise InvalidInput("Polygon coordinates must be finite.")
    if len(pts) > 1:
        pts = pts[pts != np.roll(pts, 1)]
    if len(pts) < 3:
        raise InvalidInput(f"Polygon needs at least 3 distinct points, got {len(pts)}.")
    scale = diagonal(pts)
    area = signed_area(pts)
    if abs(area) <= settings.area_tolerance * scale * scale:
        raise InvalidInput("Polygon has zero area.")
    if area < 0:
        pts = pts[::-1]
        if chan:
            chan("Polygon is clockwise, reversed to counter-clockwise.")
    if has_spikes(pts, settings.sin_parallel):
        raise InvalidInput("Polygon boundary doubles back on itself.")
    crossings = self_intersections(pts, settings.epsilon)
    if crossings:
        i, j = crossings[0]
        n = len(pts)
        where = segment_intersection(
            pts[i], pts[(i + 1) % n], pts[j], pts[(j + 1) % n], settings.epsilon
        )
        at = "" if where is None else f" at ({where.real:.9g}, {where.imag:.9g})"
        raise InvalidInput(f"Polygon is not simple: edge {i} touches edge {j}{at}.")
    return [complex(p) for p in pts]


class SkeletonBuilder:
    """
    Builds one straight skeleton, interior or exterior, of a simple polygon.

    The skeleton is built once on first request and kept. Construction either completes or
    raises, nothing partial is ever returned.
    """

    def __init__(self, polygon, mode=Side.INTERIOR, max_distance=None, settings=None):
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.channel = channel("skeleton")
        self.mode = Side(mode)
        self.polygon = normalize_polygon(polygon, self.settings, self.channel)
        self.max_distance = None
        if self.mode == Side.EXTERIOR:
            if max_distance is None:
                max_distance = self.settings.exterior_margin_factor * diagonal(self.polygon)
            try:
                max_distance = float(max_distance)
            except (TypeError, ValueError) as e:
                raise InvalidInput(f"Invalid exterior distance: {max_distance!r}") from e
            if not math.isfinite(max_distance) or max_distance <= 0:
                raise InvalidInput(f"Exterior distance must be positive, got {max_distance}.")
            self.max_distance = max_distance
        self._skeleton = None

    def __repr__(self):
        return f"SkeletonBuilder({self.mode.name}, {len(self.polygon)} points)"

    @property
    def event_limit(self):
        n = len(self.polygon)
        return int(self.settings.max_events_factor * n * n) + n

    def build(self):
        if self._skeleton is not None:
            return self._skeleton
        graph = WavefrontGraph(self.mode, self.settings, self.channel)
        graph.initialize(self.polygon)
        limit = self.event_limit
        try:
            while graph.queue:
                event = graph.queue.pop_min()
                if self.max_distance is not None and event.time > self.max_distance:
                    break
                if graph.apply(event) and graph.events_applied > limit:
                    raise DegenerateConstruction(
                        f"Gave up after {graph.events_applied} events on {len(self.polygon)} vertices."
                    )
        except (ZeroDivisionError, OverflowError) as e:
            raise DegenerateConstruction(f"Numerical failure at t={graph.now}: {e}") from e
        if self.max_distance is not None:
            graph.freeze(self.max_distance)
        elif graph.active_vertex_count:
            raise DegenerateConstruction(
                f"Event queue exhausted with {graph.active_vertex_count} vertices still moving."
            )
        self._skeleton = graph.skeleton(self.polygon, self.max_distance)
        if self.channel:
            self.channel(
                f"Built {self.mode.name.lower()} skeleton: {len(self._skeleton.vertices())} vertices, "
                f"{graph.events_applied} events applied, {graph.events_discarded} discarded."
            )
        return self._skeleton


def build_interior_skeleton(polygon, settings=None):
    """Straight skeleton of the region inside the polygon."""
    return SkeletonBuilder(polygon, Side.INTERIOR, settings=settings).build()


def build_exterior_skeleton(polygon, max_distance=None, settings=None):
    """
    Straight skeleton of the region outside the polygon, propagated up to max_distance.

    Without a bound the polygon's bounding box diagonal times the settings'
    exterior_margin_factor is used.
    """
    return SkeletonBuilder(
        polygon, Side.EXTERIOR, max_distance=max_distance, settings=settings
    ).build()
