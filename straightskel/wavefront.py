"""
The wavefront graph: kinetic state of the shrinking (or growing) polygon together with the
skeleton being traced out by it.

Every original edge defines a supporting line. At time t the line has moved a distance t to
its left, which is the interior for a counter-clockwise boundary. Exterior skeletons walk the
boundary in reverse so the same left-hand propagation grows the polygon outward.

Entities live in flat arenas and refer to each other by index. Each vertex and edge carries
a generation stamp bumped on every change; events remember the stamps they were predicted
against and are discarded when they come up stale.
"""
from .events import EDGE_COLLAPSE, VERTEX_SPLIT, EdgeCollapse, EventQueue, VertexSplit
from .exceptions import DegenerateConstruction
from .geometry import (
    MOTION_REGULAR,
    diagonal,
    dot,
    is_collinear,
    is_reflex,
    signed_area,
    unit,
    vertex_velocity,
)
from .settings import DEFAULT_SETTINGS
from .skeleton import Side, Skeleton


class SupportingLine:
    __slots__ = ("index", "point", "direction", "normal")

    def __init__(self, index, start, end):
        self.index = index
        self.point = start
        self.direction = unit(end - start)
        self.normal = 1j * self.direction

    def distance(self, point, time):
        """Signed distance of point ahead of the line as it stands at the given time."""
        return dot(self.normal, point - self.point) - time

    def __repr__(self):
        return f"SupportingLine({self.index}, {self.point}, {self.direction})"


class WavefrontVertex:
    __slots__ = (
        "index",
        "origin",
        "velocity",
        "motion",
        "reflex",
        "birth",
        "node",
        "edge_in",
        "edge_out",
        "active",
        "stamp",
        "death",
        "end_node",
        "out_history",
    )

    def __init__(self, index, origin, birth, node, edge_in, edge_out):
        self.index = index
        self.origin = origin
        self.birth = birth
        self.node = node
        self.edge_in = edge_in
        self.edge_out = edge_out
        self.velocity = 0j
        self.motion = MOTION_REGULAR
        self.reflex = False
        self.active = True
        self.stamp = 0
        self.death = None
        self.end_node = None
        self.out_history = [(birth, edge_out)]

    def position(self, time):
        return self.origin + self.velocity * (time - self.birth)

    def __repr__(self):
        state = "active" if self.active else "dead"
        return (
            f"WavefrontVertex({self.index}, {self.origin}, v={self.velocity}, "
            f"t={self.birth}, {self.edge_in}->{self.edge_out}, {state})"
        )


class WavefrontEdge:
    __slots__ = ("index", "line", "start", "end", "active", "stamp", "end_history")

    def __init__(self, index, line):
        self.index = index
        self.line = line
        self.start = None
        self.end = None
        self.active = True
        self.stamp = 0
        self.end_history = []

    def __repr__(self):
        state = "active" if self.active else "dead"
        return f"WavefrontEdge({self.index}, line={self.line}, {self.start}->{self.end}, {state})"


class WavefrontGraph:
    """
    Wavefront plus the skeleton under construction.

    Skeleton nodes are stored as parallel position and time lists. Arcs are stored once
    per pair of half-edges. Trajectory arcs remember the wavefront vertex that traced them.
    """

    def __init__(self, mode=Side.INTERIOR, settings=None, channel=None):
        self.mode = Side(mode)
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.channel = channel
        self.lines = []
        self.vertices = []
        self.edges = []
        self.node_position = []
        self.node_time = []
        self.arc_nodes = []
        self.arc_border = []
        self._arc_lookup = {}
        self.queue = EventQueue()
        self.now = 0.0
        self.scale = 1.0
        self.tolerance = 0.0
        self.area_tolerance = 0.0
        self.sin_tolerance = self.settings.sin_parallel
        self.events_applied = 0
        self.events_discarded = 0
        # Insertion ordered sets keep the predictions deterministic.
        self._active_vertices = {}
        self._active_edges = {}
        self._active_reflex = {}

    def __repr__(self):
        return (
            f"WavefrontGraph({self.mode.name}, t={self.now:.6g}, "
            f"vertices={len(self._active_vertices)}, queued={len(self.queue)})"
        )

    @property
    def active_vertex_count(self):
        return len(self._active_vertices)

    def active_vertices(self):
        return [self.vertices[i] for i in self._active_vertices]

    def _log(self, message):
        if self.channel:
            self.channel(message)

    # Construction

    def initialize(self, polygon):
        """
        Seed the wavefront from a counter-clockwise polygon given as complex points and
        queue the initial predictions.
        """
        points = [complex(p) for p in polygon]
        if self.mode == Side.EXTERIOR:
            points = points[::-1]
        n = len(points)
        self.scale = diagonal(points) or 1.0
        self.tolerance = self.settings.epsilon * self.scale
        self.area_tolerance = self.settings.area_tolerance * self.scale * self.scale
        for i in range(n):
            self._add_node(points[i], 0.0)
        for i in range(n):
            self.lines.append(SupportingLine(i, points[i], points[(i + 1) % n]))
            self._add_edge(i)
            self._add_arc(i, (i + 1) % n, border=True)
        for i in range(n):
            self._add_vertex(points[i], 0.0, i, (i - 1) % n, i)
        for i in range(n):
            edge = self.edges[i]
            edge.start = i
            self._set_end(edge, (i + 1) % n, 0.0)
        if self.channel:
            straight = sum(
                1
                for i in range(n)
                if is_collinear(points[i - 1], points[i], points[(i + 1) % n], self.sin_tolerance)
            )
            self.channel(
                f"Initialized {self.mode.name.lower()} wavefront with {n} vertices, "
                f"{len(self._active_reflex)} reflex, {straight} collinear."
            )
        self._schedule(list(range(n)), list(range(n)))

    def _add_node(self, point, time):
        self.node_position.append(point)
        self.node_time.append(time)
        return len(self.node_position) - 1

    def _node_at(self, point, time):
        """Node at this position and time, reusing one created by a simultaneous event."""
        tolerance = self.tolerance
        for index in range(len(self.node_time) - 1, -1, -1):
            if self.node_time[index] < time - tolerance:
                break
            if (
                abs(self.node_time[index] - time) <= tolerance
                and abs(self.node_position[index] - point) <= tolerance
            ):
                return index
        return self._add_node(point, time)

    def _add_arc(self, a, b, border=False):
        key = (min(a, b), max(a, b))
        if key in self._arc_lookup:
            return self._arc_lookup[key]
        self.arc_nodes.append((a, b))
        self.arc_border.append(border)
        index = len(self.arc_nodes) - 1
        self._arc_lookup[key] = index
        return index

    def _add_edge(self, line):
        edge = WavefrontEdge(len(self.edges), line)
        self.edges.append(edge)
        self._active_edges[edge.index] = None
        return edge

    def _add_vertex(self, origin, time, node, edge_in, edge_out):
        vertex = WavefrontVertex(len(self.vertices), origin, time, node, edge_in, edge_out)
        d_in = self.lines[self.edges[edge_in].line].direction
        d_out = self.lines[self.edges[edge_out].line].direction
        vertex.velocity, vertex.motion = vertex_velocity(d_in, d_out, self.sin_tolerance)
        vertex.reflex = vertex.motion == MOTION_REGULAR and is_reflex(
            d_in, d_out, self.sin_tolerance
        )
        self.vertices.append(vertex)
        self._active_vertices[vertex.index] = None
        if vertex.reflex:
            self._active_reflex[vertex.index] = None
        return vertex

    def _set_end(self, edge, vertex, time):
        edge.end = vertex
        edge.stamp += 1
        edge.end_history.append((time, vertex))

    def _set_start(self, edge, vertex):
        edge.start = vertex
        edge.stamp += 1

    # A vertex keeps its motion when an adjacent edge is replaced by a fragment on the
    # same line, so its pending predictions stay valid and the stamp is left alone.

    def _set_edge_out(self, vertex, edge, time):
        vertex.edge_out = edge
        vertex.out_history.append((time, edge))

    def _set_edge_in(self, vertex, edge):
        vertex.edge_in = edge

    def _kill_vertex(self, vertex, node, time):
        vertex.active = False
        vertex.stamp += 1
        vertex.death = time
        vertex.end_node = node
        self._active_vertices.pop(vertex.index, None)
        self._active_reflex.pop(vertex.index, None)
        if node != vertex.node:
            self._add_arc(vertex.node, node)

    def _kill_edge(self, edge):
        edge.active = False
        edge.stamp += 1
        self._active_edges.pop(edge.index, None)

    # Queries

    def edge_length(self, edge, time):
        a = self.vertices[edge.start].position(time)
        b = self.vertices[edge.end].position(time)
        return abs(b - a)

    def component(self, vertex):
        """Vertex indices of the wavefront loop containing vertex, in boundary order."""
        loop = []
        current = vertex
        limit = len(self.vertices)
        while True:
            loop.append(current)
            current = self.edges[self.vertices[current].edge_out].end
            if current == vertex:
                return loop
            if not self.vertices[current].active or len(loop) > limit:
                raise DegenerateConstruction(
                    f"Wavefront loop through vertex {vertex} is broken at t={self.now}."
                )

    def _is_collapsed(self, loop, time):
        if len(loop) < 3:
            return True
        area = signed_area([self.vertices[i].position(time) for i in loop])
        return abs(area) <= self.area_tolerance

    def _within(self, edge, point, time):
        """Does point lie within the extent of edge as it stands at the given time."""
        direction = self.lines[edge.line].direction
        a = self.vertices[edge.start].position(time)
        b = self.vertices[edge.end].position(time)
        length = dot(b - a, direction)
        if length < -self.tolerance:
            return False
        along = dot(point - a, direction)
        return -self.tolerance <= along <= length + self.tolerance

    # Predictions

    def predict_collapse(self, edge):
        """Time and place where edge shrinks to zero length, or None if it never does."""
        if not edge.active or edge.start == edge.end:
            return None
        a = self.vertices[edge.start]
        b = self.vertices[edge.end]
        direction = self.lines[edge.line].direction
        now = self.now
        length = dot(b.position(now) - a.position(now), direction)
        if length < -self.tolerance:
            # Inverted edges only come from an inconsistent wavefront.
            self._log(f"Edge {edge.index} is inverted at t={now}, no collapse predicted.")
            return None
        if length <= self.tolerance:
            when = now
        else:
            rate = dot(b.velocity - a.velocity, direction)
            if rate >= -self.settings.epsilon:
                return None
            when = now - length / rate
        point = (a.position(when) + b.position(when)) / 2
        return EdgeCollapse(when, point, edge.index, edge.stamp)

    def predict_split(self, vertex, edge):
        """Time and place where reflex vertex hits the interior of edge, or None."""
        if not vertex.active or not vertex.reflex or not edge.active:
            return None
        if edge.index in (vertex.edge_in, vertex.edge_out):
            return None
        if vertex.index in (edge.start, edge.end):
            return None
        line = self.lines[edge.line]
        now = self.now
        gap = line.distance(vertex.position(now), now)
        if gap < -self.tolerance:
            return None
        closing = 1.0 - dot(line.normal, vertex.velocity)
        if closing <= self.settings.epsilon:
            return None
        when = now + max(gap, 0.0) / closing
        point = vertex.position(when)
        if not self._within(edge, point, when):
            return None
        return VertexSplit(when, point, vertex.index, vertex.stamp, edge.index, edge.stamp)

    def _schedule(self, vertices, edges):
        """Queue predictions for new vertices and for edges whose endpoints changed."""
        push = self.queue.push
        for e in edges:
            push(self.predict_collapse(self.edges[e]))
        fresh = set()
        for v in vertices:
            vertex = self.vertices[v]
            if not vertex.active or not vertex.reflex:
                continue
            fresh.add(v)
            for e in list(self._active_edges):
                push(self.predict_split(vertex, self.edges[e]))
        if not edges:
            return
        for r in list(self._active_reflex):
            if r in fresh:
                continue
            vertex = self.vertices[r]
            for e in edges:
                push(self.predict_split(vertex, self.edges[e]))

    # Events

    def apply(self, event):
        """
        Apply event to the wavefront if it is still valid. Returns True when applied,
        False when it was stale and discarded.
        """
        if event.kind == EDGE_COLLAPSE:
            applied = self.apply_edge_collapse(event)
        elif event.kind == VERTEX_SPLIT:
            applied = self.apply_vertex_split(event)
        else:
            raise ValueError(f"Unknown event kind: {event.kind}")
        if applied:
            self.events_applied += 1
        else:
            self.events_discarded += 1
        return applied

    def apply_edge_collapse(self, event):
        edge = self.edges[event.edge]
        if not edge.active or edge.stamp != event.stamp:
            return False
        a = self.vertices[edge.start]
        b = self.vertices[edge.end]
        if not a.active or not b.active:
            return False
        time = max(event.time, self.now)
        pa = a.position(time)
        pb = b.position(time)
        if abs(pb - pa) > self.tolerance:
            self._log(f"Discarded collapse of edge {edge.index} at t={time}, endpoints apart.")
            return False
        self.now = time
        point = (pa + pb) / 2

        chain = [edge.index]
        whole = False
        first = edge
        while True:
            previous = self.edges[self.vertices[first.start].edge_in]
            if previous.index == chain[-1]:
                whole = True
                break
            if self.edge_length(previous, time) > self.tolerance:
                break
            chain.insert(0, previous.index)
            first = previous
        last = edge
        while not whole:
            following = self.edges[self.vertices[last.end].edge_out]
            if following.index == chain[0]:
                whole = True
                break
            if self.edge_length(following, time) > self.tolerance:
                break
            chain.append(following.index)
            last = following

        if self.channel:
            self.channel(
                f"Edge collapse at t={time:.9g} ({point.real:.9g}, {point.imag:.9g}) "
                f"of {len(chain)} edge(s)."
            )
        if whole:
            self._retire(self.component(a.index), time, point=point)
            return True

        consumed = [self.edges[chain[0]].start] + [self.edges[c].end for c in chain]
        e_prev = self.edges[self.vertices[consumed[0]].edge_in]
        e_next = self.edges[self.vertices[consumed[-1]].edge_out]
        node = self._node_at(point, time)
        for c in chain:
            self._kill_edge(self.edges[c])
        for u in consumed:
            self._kill_vertex(self.vertices[u], node, time)
        vertex = self._add_vertex(point, time, node, e_prev.index, e_next.index)
        self._set_end(e_prev, vertex.index, time)
        self._set_start(e_next, vertex.index)
        self._settle([vertex.index], [e_prev.index, e_next.index], time)
        return True

    def apply_vertex_split(self, event):
        vertex = self.vertices[event.vertex]
        edge = self.edges[event.edge]
        if not vertex.active or vertex.stamp != event.vertex_stamp:
            return False
        if not edge.active or edge.stamp != event.edge_stamp:
            return False
        if edge.index in (vertex.edge_in, vertex.edge_out):
            return False
        if vertex.index in (edge.start, edge.end):
            return False
        time = max(event.time, self.now)
        point = vertex.position(time)
        if not self._within(edge, point, time):
            self._log(f"Discarded split of edge {edge.index} at t={time}, point outside edge.")
            return False
        self.now = time
        if self.channel:
            self.channel(
                f"Split event at t={time:.9g} ({point.real:.9g}, {point.imag:.9g}): "
                f"vertex {vertex.index} hits edge {edge.index}."
            )
        node = self._node_at(point, time)
        e_in = self.edges[vertex.edge_in]
        e_out = self.edges[vertex.edge_out]
        a = self.vertices[edge.start]
        b = self.vertices[edge.end]
        self._kill_edge(edge)
        self._kill_vertex(vertex, node, time)

        # edge becomes a->vb and va->b, with va closing the loop through b and
        # vb the loop through a.
        first = self._add_edge(edge.line)
        second = self._add_edge(edge.line)
        va = self._add_vertex(point, time, node, e_in.index, second.index)
        vb = self._add_vertex(point, time, node, first.index, e_out.index)
        self._set_start(first, a.index)
        self._set_end(first, vb.index, time)
        self._set_start(second, va.index)
        self._set_end(second, b.index, time)
        self._set_edge_out(a, first.index, time)
        self._set_edge_in(b, second.index)
        self._set_end(e_in, va.index, time)
        self._set_start(e_out, vb.index)
        self._settle(
            [va.index, vb.index],
            [e_in.index, e_out.index, first.index, second.index],
            time,
        )
        return True

    def _settle(self, vertices, edges, time):
        """Retire loops that collapsed with the last event, then predict for the rest."""
        for v in vertices:
            if not self.vertices[v].active:
                continue
            loop = self.component(v)
            if self._is_collapsed(loop, time):
                self._retire(loop, time)
        self._schedule(
            [v for v in vertices if self.vertices[v].active],
            [e for e in edges if self.edges[e].active],
        )

    def _retire(self, loop, time, point=None, border=False):
        """
        Stop a whole wavefront loop at the given time. Every vertex gets a node at its
        position, and consecutive distinct nodes are joined by arcs. Loops with no area
        left leave ridges, frozen exterior loops leave border arcs.
        """
        nodes = []
        for i in loop:
            vertex = self.vertices[i]
            position = vertex.position(time) if point is None else point
            node = self._node_at(position, time)
            nodes.append(node)
            self._kill_edge(self.edges[vertex.edge_out])
            self._kill_vertex(vertex, node, time)
        for k, node in enumerate(nodes):
            following = nodes[(k + 1) % len(nodes)]
            if node != following:
                self._add_arc(node, following, border=border)
        if self.channel:
            self.channel(f"Retired wavefront loop of {len(loop)} vertices at t={time:.9g}.")

    def freeze(self, time):
        """Stop all remaining wavefront loops at the given time."""
        self.now = max(self.now, time)
        for v in list(self._active_vertices):
            if self.vertices[v].active:
                self._retire(self.component(v), time, border=True)

    def skeleton(self, polygon, max_distance=None):
        """Package the traced skeleton once every vertex has stopped."""
        if self._active_vertices:
            raise DegenerateConstruction(
                f"{len(self._active_vertices)} wavefront vertices never terminated."
            )
        trajectories = [(v.node, v.end_node) for v in self.vertices]
        return Skeleton(
            polygon,
            self.mode,
            max_distance,
            self.tolerance,
            self.node_position,
            self.node_time,
            self.arc_nodes,
            self.arc_border,
            trajectories,
            [v.out_history for v in self.vertices],
            [e.end_history for e in self.edges],
        )
