from bisect import bisect_left
from enum import IntEnum

import numpy as np

from .geometry import as_tuple


class Side(IntEnum):
    INTERIOR = 0
    EXTERIOR = 1


def _frozen(values, dtype):
    arr = np.array(values, dtype=dtype)
    arr.flags.writeable = False
    return arr


def history_at(history, time):
    """
    Value of a (times, values) history as it stood just before the given time.

    Several entries may share a timestamp when a number of events happen at once, the
    last one recorded wins.
    """
    times, values = history
    idx = bisect_left(times, time) - 1
    if idx < 0:
        idx = 0
    return values[idx]


class Skeleton:
    """
    A finished straight skeleton. Immutable after construction: arrays are read-only and
    histories are tuples, so any number of offset queries may read it at once.

    Nodes are the skeleton vertices, each with the time (distance from the boundary) at
    which it was created. Arcs connect two nodes. Border arcs are the polygon boundary,
    and for exterior skeletons also the frozen wavefront at the maximum distance.

    Every wavefront vertex traced a straight trajectory from its birth node to its
    death node; `successor()` recovers the wavefront at any time from the recorded
    edge histories.
    """

    def __init__(
        self,
        polygon,
        mode,
        max_distance,
        tolerance,
        node_position,
        node_time,
        arc_nodes,
        arc_border,
        trajectories,
        vertex_out,
        edge_end,
    ):
        self._polygon = tuple(complex(p) for p in polygon)
        self._mode = Side(mode)
        self._max_distance = max_distance
        self._tolerance = tolerance
        self._node_position = _frozen(node_position, complex)
        self._node_time = _frozen(node_time, float)
        self._arc_nodes = _frozen(arc_nodes, int).reshape(-1, 2)
        self._arc_border = _frozen(arc_border, bool)
        self._vertex_out = tuple(
            (tuple(t for t, _ in h), tuple(v for _, v in h)) for h in vertex_out
        )
        self._edge_end = tuple(
            (tuple(t for t, _ in h), tuple(v for _, v in h)) for h in edge_end
        )
        # Assigned last, it seals the instance.
        self._trajectories = _frozen(trajectories, int).reshape(-1, 2)

    def __repr__(self):
        return (
            f"Skeleton({self._mode.name}, nodes={len(self._node_position)}, "
            f"arcs={len(self._arc_nodes)}, max_time={self.max_time:.6g})"
        )

    def __setattr__(self, key, value):
        if hasattr(self, "_trajectories"):
            raise AttributeError("Skeleton is immutable.")
        super().__setattr__(key, value)

    @property
    def polygon(self):
        return [as_tuple(p) for p in self._polygon]

    @property
    def mode(self):
        return self._mode

    @property
    def max_distance(self):
        return self._max_distance

    @property
    def tolerance(self):
        return self._tolerance

    @property
    def max_time(self):
        if len(self._node_time) == 0:
            return 0.0
        return float(np.max(self._node_time))

    @property
    def node_position(self):
        return self._node_position

    @property
    def node_time(self):
        return self._node_time

    @property
    def trajectories(self):
        return self._trajectories

    def vertices(self):
        """Positions of all skeleton vertices, polygon corners included."""
        return [as_tuple(p) for p in self._node_position]

    def times(self):
        return self._node_time.tolist()

    def internal_vertices(self):
        """Skeleton vertices created by events, i.e. away from the original boundary."""
        mask = self._node_time > 0
        return [as_tuple(p) for p in self._node_position[mask]]

    def edges(self):
        """
        Non-border skeleton edges as ((x0, y0), (x1, y1)), one entry per pair of
        half-edges, oriented from the earlier node to the later one.
        """
        return self._arc_list(~self._arc_border)

    def border_edges(self):
        return self._arc_list(self._arc_border)

    def _arc_list(self, mask):
        pos = self._node_position
        return [
            (as_tuple(pos[a]), as_tuple(pos[b])) for a, b in self._arc_nodes[mask]
        ]

    def successor(self, vertex, time):
        """The wavefront vertex following `vertex` along the wavefront just before `time`."""
        edge = history_at(self._vertex_out[vertex], time)
        return history_at(self._edge_end[edge], time)

    def offset(self, distance, side=None):
        from .offset import offset_at

        return offset_at(self, distance, self._mode if side is None else side)
