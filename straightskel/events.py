"""
Predicted skeleton events and the queue that orders them.

The queue only schedules. Whether an event still applies when it comes up is decided by
the wavefront graph from the generation stamps each event carries.
"""
import heapq
import itertools

EDGE_COLLAPSE = "edge-collapse"
VERTEX_SPLIT = "vertex-split"


class Event:
    kind = None

    __slots__ = ("time", "point", "sequence")

    def __init__(self, time, point):
        self.time = time
        self.point = point
        self.sequence = None

    def __lt__(self, other):
        return (self.time, self.sequence) < (other.time, other.sequence)


class EdgeCollapse(Event):
    """A wavefront edge shrinks to a point."""

    kind = EDGE_COLLAPSE

    __slots__ = ("edge", "stamp")

    def __init__(self, time, point, edge, stamp):
        super().__init__(time, point)
        self.edge = edge
        self.stamp = stamp

    def __repr__(self):
        return f"EdgeCollapse(t={self.time:.6g}, {self.point}, edge={self.edge}@{self.stamp})"


class VertexSplit(Event):
    """A reflex wavefront vertex runs into the interior of an opposite edge."""

    kind = VERTEX_SPLIT

    __slots__ = ("vertex", "vertex_stamp", "edge", "edge_stamp")

    def __init__(self, time, point, vertex, vertex_stamp, edge, edge_stamp):
        super().__init__(time, point)
        self.vertex = vertex
        self.vertex_stamp = vertex_stamp
        self.edge = edge
        self.edge_stamp = edge_stamp

    def __repr__(self):
        return (
            f"VertexSplit(t={self.time:.6g}, {self.point}, "
            f"vertex={self.vertex}@{self.vertex_stamp}, edge={self.edge}@{self.edge_stamp})"
        )


class EventQueue:
    """
    Min-priority queue on predicted time. Ties go to the event pushed first, which makes
    the replay of identical input deterministic.
    """

    def __init__(self):
        self._heap = []
        self._counter = itertools.count()

    def __len__(self):
        return len(self._heap)

    def __bool__(self):
        return bool(self._heap)

    def push(self, event):
        if event is None:
            return
        event.sequence = next(self._counter)
        heapq.heappush(self._heap, (event.time, event.sequence, event))

    def push_all(self, events):
        for event in events:
            self.push(event)

    def pop_min(self):
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[-1]

    def peek(self):
        if not self._heap:
            return None
        return self._heap[0][-1]

    def clear(self):
        self._heap.clear()
