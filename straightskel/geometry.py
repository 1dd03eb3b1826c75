"""
Geometry kernel for the straight skeleton.

Points and vectors are python complex numbers, x in the real part and y in the imaginary
part, the way the geometry of the whole package is stored. Bulk operations over polygons
use numpy arrays of complex.

All predicates take a tolerance since the coordinates are inexact doubles. Parallel
lines are not an error: intersections report None and callers treat that as a valid
outcome.
"""
import math

import numpy as np

LEFT = 1
RIGHT = -1
COLLINEAR = 0

# Vertex motion states, see vertex_velocity()
MOTION_REGULAR = 0
MOTION_COLLINEAR = 1
MOTION_STALLED = 2


def cross(a, b):
    return a.real * b.imag - a.imag * b.real


def dot(a, b):
    return a.real * b.real + a.imag * b.imag


def unit(v):
    length = abs(v)
    if length == 0.0:
        return 0j
    return v / length


def left_normal(direction):
    """
    Unit normal on the left of the direction. Counter-clockwise polygons have their
    interior on the left of every edge.
    """
    return 1j * unit(direction)


def as_tuple(point):
    return point.real, point.imag


def orientation(a, b, c, tolerance=0.0):
    """
    Determine whether c lies left of, right of or on the directed line a->b.

    The tolerance is relative: the cross product is compared with the product of the two
    vector lengths, i.e. the sine of the angle between them.
    """
    val = cross(b - a, c - a)
    scale = abs(b - a) * abs(c - a)
    if abs(val) <= tolerance * scale:
        return COLLINEAR
    return LEFT if val > 0 else RIGHT


def is_collinear(a, b, c, tolerance=0.0):
    return orientation(a, b, c, tolerance) == COLLINEAR


def is_parallel(d1, d2, sin_tolerance):
    """True if the two directions are within the angular tolerance of each other or opposed."""
    return abs(cross(unit(d1), unit(d2))) <= sin_tolerance


def is_reflex(d_in, d_out, sin_tolerance=0.0):
    """A vertex turning right while walking a counter-clockwise boundary is reflex."""
    turn = cross(unit(d_in), unit(d_out))
    return turn < -sin_tolerance


def vertex_velocity(d_in, d_out, sin_tolerance):
    """
    Velocity of a wavefront vertex between an incoming and an outgoing edge whose supporting
    lines move to their left at unit speed.

    The vertex must stay on both moving lines, so its velocity v satisfies n_in.v = 1 and
    n_out.v = 1 for the two left normals. Returns (velocity, motion):

    MOTION_REGULAR: the two lines cross, v is the unique solution.
    MOTION_COLLINEAR: both edges continue in the same direction, v is the common normal.
    MOTION_STALLED: the edges are antiparallel, both lines coincide and annihilate; the
        vertex does not move.
    """
    d_in = unit(d_in)
    d_out = unit(d_out)
    n_in = 1j * d_in
    n_out = 1j * d_out
    det = cross(n_in, n_out)
    if abs(det) <= sin_tolerance:
        if dot(d_in, d_out) > 0:
            return n_in, MOTION_COLLINEAR
        return 0j, MOTION_STALLED
    vx = (n_out.imag - n_in.imag) / det
    vy = (n_in.real - n_out.real) / det
    return complex(vx, vy), MOTION_REGULAR


def bisector(p_prev, p, p_next, sin_tolerance=0.0):
    """
    Ray of the inward angle bisector at p for the boundary p_prev->p->p_next.

    Returns (origin, unit direction), or None when the two edges are antiparallel.
    """
    velocity, motion = vertex_velocity(p - p_prev, p_next - p, sin_tolerance)
    if motion == MOTION_STALLED:
        return None
    return p, unit(velocity)


def line_intersection(p, d, q, e, sin_tolerance=0.0):
    """
    Intersection of the lines p + s*d and q + u*e.

    Lines closer to parallel than the angular tolerance have no intersection, None is
    returned rather than a point far away.
    """
    denom = cross(d, e)
    if abs(denom) <= sin_tolerance * abs(d) * abs(e) or denom == 0:
        return None
    s = cross(q - p, e) / denom
    return p + s * d


def segment_intersection(a0, a1, b0, b1, tolerance=0.0):
    """
    Intersection point of the closed segments a0-a1 and b0-b1 or None. Overlapping
    collinear segments report the first overlapping endpoint.
    """
    da = a1 - a0
    db = b1 - b0
    denom = cross(da, db)
    if abs(denom) <= tolerance * abs(da) * abs(db) or denom == 0:
        if abs(cross(da, b0 - a0)) > tolerance * abs(da) * max(abs(b0 - a0), 1.0):
            return None
        length = dot(da, da)
        if length == 0:
            return None
        for candidate in (b0, b1):
            t = dot(candidate - a0, da) / length
            if -tolerance <= t <= 1 + tolerance:
                return candidate
        for candidate in (a0, a1):
            t = dot(candidate - b0, db) / dot(db, db)
            if -tolerance <= t <= 1 + tolerance:
                return candidate
        return None
    ua = cross(b0 - a0, db) / denom
    ub = cross(b0 - a0, da) / denom
    if -tolerance <= ua <= 1 + tolerance and -tolerance <= ub <= 1 + tolerance:
        return a0 + ua * da
    return None


def as_complex_array(points):
    """
    Convert a sequence of (x, y) pairs, complex numbers or an (N, 2) array to an (N,)
    complex array.
    """
    arr = np.asarray(points)
    if arr.dtype.kind == "c":
        return arr.astype(complex).reshape(-1)
    arr = np.asarray(arr, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError("Points must be (x, y) pairs.")
    return arr[:, 0] + 1j * arr[:, 1]


def signed_area(points):
    """Shoelace area of a closed polygon, positive for counter-clockwise."""
    pts = np.asarray(points, dtype=complex)
    if len(pts) < 3:
        return 0.0
    return float(np.sum((np.conj(pts) * np.roll(pts, -1)).imag) / 2.0)


def bounding_box(points):
    pts = np.asarray(points, dtype=complex)
    return (
        float(np.min(pts.real)),
        float(np.min(pts.imag)),
        float(np.max(pts.real)),
        float(np.max(pts.imag)),
    )


def diagonal(points):
    min_x, min_y, max_x, max_y = bounding_box(points)
    return math.hypot(max_x - min_x, max_y - min_y)


def self_intersections(points, tolerance=0.0):
    """
    Find the pairs of non-adjacent edges of a closed polygon that touch or cross.

    Edge i runs from points[i] to points[i+1]. The test is vectorized over all edge pairs
    and returns a list of (i, j) with i < j.
    """
    pts = np.asarray(points, dtype=complex)
    n = len(pts)
    if n < 4:
        return []
    a0 = pts
    a1 = np.roll(pts, -1)
    d = a1 - a0
    i, j = np.triu_indices(n, k=2)
    keep = ~((i == 0) & (j == n - 1))
    i = i[keep]
    j = j[keep]

    def _cross(u, v):
        return u.real * v.imag - u.imag * v.real

    scale = np.max(np.abs(d))
    eps = tolerance * scale * scale
    o1 = _cross(d[i], a0[j] - a0[i])
    o2 = _cross(d[i], a1[j] - a0[i])
    o3 = _cross(d[j], a0[i] - a0[j])
    o4 = _cross(d[j], a1[i] - a0[j])
    o1 = np.where(np.abs(o1) <= eps, 0.0, np.sign(o1))
    o2 = np.where(np.abs(o2) <= eps, 0.0, np.sign(o2))
    o3 = np.where(np.abs(o3) <= eps, 0.0, np.sign(o3))
    o4 = np.where(np.abs(o4) <= eps, 0.0, np.sign(o4))
    straddles = (o1 * o2 <= 0) & (o3 * o4 <= 0)

    pad = tolerance * scale
    min_x = np.minimum(a0.real, a1.real)
    max_x = np.maximum(a0.real, a1.real)
    min_y = np.minimum(a0.imag, a1.imag)
    max_y = np.maximum(a0.imag, a1.imag)
    overlap = (
        (np.maximum(min_x[i], min_x[j]) <= np.minimum(max_x[i], max_x[j]) + pad)
        & (np.maximum(min_y[i], min_y[j]) <= np.minimum(max_y[i], max_y[j]) + pad)
    )
    hits = np.nonzero(straddles & overlap)[0]
    return [(int(i[k]), int(j[k])) for k in hits]


def has_spikes(points, sin_tolerance=0.0):
    """True if the boundary doubles back on itself at any vertex."""
    pts = np.asarray(points, dtype=complex)
    d_in = pts - np.roll(pts, 1)
    d_out = np.roll(pts, -1) - pts
    sine = (np.conj(d_in) * d_out).imag / (np.abs(d_in) * np.abs(d_out))
    cosine = (np.conj(d_in) * d_out).real
    return bool(np.any((np.abs(sine) <= sin_tolerance) & (cosine < 0)))


def is_simple(points, tolerance=0.0):
    return not has_spikes(points, tolerance) and not self_intersections(points, tolerance)
