import math
import unittest

from straightskel import (
    DistanceOutOfRange,
    InvalidInput,
    OffsetExtractor,
    Side,
    build_exterior_skeleton,
    build_interior_skeleton,
    offset,
    offset_at,
)
from straightskel.geometry import signed_area

SQUARE = [(-1, -1), (1, -1), (1, 1), (-1, 1)]
TRIANGLE = [(0, 0), (4, 0), (0, 3)]
L_SHAPE = [(0, 0), (4, 0), (4, 1), (2, 1), (2, 4), (0, 4)]
DART = [(0, 0), (4, 0), (4, 3), (2, 1), (0, 3)]
U_SHAPE = [(0, 0), (3, 0), (3, 3), (2, 3), (2, 1), (1, 1), (1, 3), (0, 3)]
C_SHAPE = [
    (0, 0), (10, 0), (10, 10), (5.25, 10), (5.25, 8), (8, 8),
    (8, 2), (2, 2), (2, 8), (4.75, 8), (4.75, 10), (0, 10),
]


def area(polygon):
    return signed_area([complex(x, y) for x, y in polygon])


def line_distance(point, a, b):
    """Signed distance of point left of the directed line a->b."""
    dx, dy = b[0] - a[0], b[1] - a[1]
    return (dx * (point[1] - a[1]) - dy * (point[0] - a[0])) / math.hypot(dx, dy)


def inside(point, polygon):
    """Ray casting test of (x, y) against a closed polygon of (x, y) points."""
    x, y = point
    hits = 0
    for (ax, ay), (bx, by) in zip(polygon, polygon[1:] + polygon[:1]):
        if (ay > y) != (by > y) and x < ax + (y - ay) * (bx - ax) / (by - ay):
            hits += 1
    return hits % 2 == 1


class TestInteriorOffset(unittest.TestCase):
    def test_square(self):
        skeleton = build_interior_skeleton(SQUARE)
        polygons = offset_at(skeleton, 0.5, Side.INTERIOR)
        self.assertEqual(len(polygons), 1)
        self.assertEqual(
            sorted((round(x, 9) + 0.0, round(y, 9) + 0.0) for x, y in polygons[0]),
            [(-0.5, -0.5), (-0.5, 0.5), (0.5, -0.5), (0.5, 0.5)],
        )
        self.assertAlmostEqual(area(polygons[0]), 1.0)

    def test_zero_and_beyond(self):
        skeleton = build_interior_skeleton(SQUARE)
        self.assertEqual(offset_at(skeleton, 0), [])
        self.assertEqual(offset_at(skeleton, 1.0), [])
        self.assertEqual(offset_at(skeleton, 5.0), [])

    def test_triangle_past_inradius(self):
        skeleton = build_interior_skeleton(TRIANGLE)
        self.assertEqual(len(offset_at(skeleton, 0.5)), 1)
        self.assertEqual(offset_at(skeleton, 1.5), [])

    def test_offset_edges_parallel_at_distance(self):
        """
        Before the first event every offset edge lies on its original edge moved inward.
        """
        d = 0.2
        skeleton = build_interior_skeleton(DART)
        polygons = offset_at(skeleton, d)
        self.assertEqual(len(polygons), 1)
        polygon = polygons[0]
        self.assertEqual(len(polygon), len(DART))
        n = len(polygon)
        for k in range(n):
            p = polygon[k]
            q = polygon[(k + 1) % n]
            matches = [
                i
                for i in range(n)
                if abs(line_distance(p, DART[i], DART[(i + 1) % n]) - d) < 1e-9
                and abs(line_distance(q, DART[i], DART[(i + 1) % n]) - d) < 1e-9
            ]
            self.assertEqual(len(matches), 1)

    def test_contained_and_counter_clockwise(self):
        for polygon in (SQUARE, TRIANGLE, L_SHAPE, DART):
            skeleton = build_interior_skeleton(polygon)
            for d in (0.1, 0.3, 0.45, 0.7):
                for result in offset_at(skeleton, d):
                    self.assertGreater(area(result), 0)
                    for x, y in result:
                        self.assertTrue(inside((x, y), polygon))

    def test_area_decreases(self):
        for polygon in (SQUARE, TRIANGLE, L_SHAPE, DART):
            skeleton = build_interior_skeleton(polygon)
            previous = area(polygon)
            for d in (0.05, 0.2, 0.35, 0.6, 0.8, 0.95):
                total = sum(area(p) for p in offset_at(skeleton, d))
                self.assertLess(total, previous)
                previous = total

    def test_dart_splits_in_two(self):
        skeleton = build_interior_skeleton(DART)
        self.assertEqual(len(offset_at(skeleton, 0.2)), 1)
        halves = offset_at(skeleton, 0.6)
        self.assertEqual(len(halves), 2)
        self.assertTrue(all(len(p) == 3 for p in halves))
        self.assertAlmostEqual(area(halves[0]), area(halves[1]))
        self.assertEqual(offset_at(skeleton, 1.0), [])

    def test_l_shape_after_arm_vanishes(self):
        skeleton = build_interior_skeleton(L_SHAPE)
        polygons = offset_at(skeleton, 0.75)
        self.assertEqual(len(polygons), 1)
        self.assertEqual(len(polygons[0]), 4)
        self.assertAlmostEqual(area(polygons[0]), 0.5 * 2.5)

    def test_idempotent(self):
        skeleton = build_interior_skeleton(L_SHAPE)
        self.assertEqual(offset_at(skeleton, 0.3), offset_at(skeleton, 0.3))
        self.assertEqual(skeleton.offset(0.3), offset(skeleton, 0.3, Side.INTERIOR))

    def test_bad_queries(self):
        skeleton = build_interior_skeleton(SQUARE)
        self.assertRaises(InvalidInput, lambda: offset_at(skeleton, -0.5))
        self.assertRaises(InvalidInput, lambda: offset_at(skeleton, float("nan")))
        self.assertRaises(InvalidInput, lambda: offset_at(skeleton, "far"))
        self.assertRaises(InvalidInput, lambda: offset_at(skeleton, 0.5, Side.EXTERIOR))
        # The skeleton stays usable after a failed query.
        self.assertEqual(len(offset_at(skeleton, 0.5)), 1)


class TestExteriorOffset(unittest.TestCase):
    def test_square(self):
        skeleton = build_exterior_skeleton(SQUARE, 2.0)
        polygons = offset_at(skeleton, 0.5, Side.EXTERIOR)
        self.assertEqual(len(polygons), 1)
        self.assertAlmostEqual(area(polygons[0]), 9.0)
        self.assertAlmostEqual(area(offset_at(skeleton, 2.0)[0]), 36.0)

    def test_out_of_range(self):
        skeleton = build_exterior_skeleton(SQUARE, 2.0)
        with self.assertRaises(DistanceOutOfRange) as context:
            offset_at(skeleton, 2.5, Side.EXTERIOR)
        self.assertEqual(context.exception.max_distance, 2.0)
        self.assertTrue(isinstance(context.exception, ValueError))
        self.assertRaises(InvalidInput, lambda: offset_at(skeleton, 0.5, Side.INTERIOR))
        self.assertEqual(len(offset_at(skeleton, 1.0, Side.EXTERIOR)), 1)

    def test_area_grows(self):
        skeleton = build_exterior_skeleton(L_SHAPE)
        previous = area(L_SHAPE)
        for d in (0.1, 0.5, 1.0, 2.0):
            polygons = offset_at(skeleton, d)
            self.assertEqual(len(polygons), 1)
            current = area(polygons[0])
            self.assertGreater(current, previous)
            previous = current

    def test_slot(self):
        skeleton = build_exterior_skeleton(U_SHAPE, 2.0)
        narrow = offset_at(skeleton, 0.25)
        self.assertEqual(len(narrow), 1)
        self.assertEqual(len(narrow[0]), 8)
        self.assertAlmostEqual(area(narrow[0]), 3.5 * 3.5 - 0.5 * 2.0)
        closed = offset_at(skeleton, 0.75)
        self.assertEqual(len(closed), 1)
        self.assertAlmostEqual(area(closed[0]), 4.5 * 4.5)
        for x, y in closed[0]:
            self.assertTrue(
                math.isclose(abs(x - 1.5), 2.25, abs_tol=1e-9)
                or math.isclose(abs(y - 1.5), 2.25, abs_tol=1e-9)
            )

    def test_enclosed_pocket_is_clockwise_hole(self):
        """
        Once the mouth of the C closes, the pocket inside it is left behind as a hole.
        """
        skeleton = build_exterior_skeleton(C_SHAPE, 5.0)
        open_mouth = offset_at(skeleton, 0.1)
        self.assertEqual(len(open_mouth), 1)
        self.assertGreater(area(open_mouth[0]), 0)

        outer, hole = sorted(offset_at(skeleton, 1.0), key=area, reverse=True)
        self.assertAlmostEqual(area(outer), 144.0)
        self.assertAlmostEqual(area(hole), -16.0)
        for x, y in hole:
            self.assertTrue(
                math.isclose(abs(x - 5.0), 2.0, abs_tol=1e-9)
                or math.isclose(abs(y - 5.0), 2.0, abs_tol=1e-9)
            )
        for x, y in outer:
            self.assertTrue(
                math.isclose(abs(x - 5.0), 6.0, abs_tol=1e-9)
                or math.isclose(abs(y - 5.0), 6.0, abs_tol=1e-9)
            )


class TestOffsetExtractor(unittest.TestCase):
    def test_cache(self):
        extractor = OffsetExtractor(build_interior_skeleton(L_SHAPE))
        first = extractor.offset(0.3)
        self.assertEqual(len(extractor), 1)
        first[0].append((100.0, 100.0))
        second = extractor.offset(0.3)
        self.assertEqual(len(extractor), 1)
        self.assertNotIn((100.0, 100.0), second[0])
        self.assertEqual(second, offset_at(extractor.skeleton, 0.3))
        extractor.offset(0.4, Side.INTERIOR)
        self.assertEqual(len(extractor), 2)
        extractor.clear()
        self.assertEqual(len(extractor), 0)

    def test_errors_not_cached(self):
        extractor = OffsetExtractor(build_exterior_skeleton(SQUARE, 1.0))
        self.assertRaises(DistanceOutOfRange, lambda: extractor.offset(3.0))
        self.assertRaises(DistanceOutOfRange, lambda: extractor.offset(3.0))
        self.assertEqual(len(extractor), 0)
