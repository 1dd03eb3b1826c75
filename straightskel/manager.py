"""
One polygon with both of its skeletons, computed when first needed and kept.

Results are plain dicts and lists of {"x": .., "y": ..} points so they can be handed to
any serializer as they are.
"""
from .builder import SkeletonBuilder, normalize_polygon
from .channel import channel
from .exceptions import InvalidInput
from .geometry import as_tuple
from .offset import OffsetExtractor
from .settings import DEFAULT_SETTINGS
from .skeleton import Side


def _point(p):
    x, y = p
    return {"x": x, "y": y}


def _as_side(value):
    if isinstance(value, str):
        try:
            return Side[value.upper()]
        except KeyError:
            raise InvalidInput(f"Unknown offset type: {value!r}") from None
    try:
        return Side(value)
    except ValueError:
        raise InvalidInput(f"Unknown offset type: {value!r}") from None


class SkeletonManager:
    def __init__(self, polygon, max_distance=None, settings=None):
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.channel = channel("skeleton")
        self.polygon = normalize_polygon(polygon, self.settings, self.channel)
        self.max_distance = max_distance
        self._extractors = {}

    def __repr__(self):
        return f"SkeletonManager({len(self.polygon)} points, max_distance={self.max_distance})"

    @classmethod
    def create(cls, points, max_distance=None, settings=None):
        """
        Manager for a polygon given as {"x": .., "y": ..} dicts, (x, y) pairs or complex
        numbers.
        """
        converted = []
        for p in points:
            if isinstance(p, dict):
                try:
                    converted.append((float(p["x"]), float(p["y"])))
                except (KeyError, TypeError, ValueError) as e:
                    raise InvalidInput(f"Bad point {p!r}: {e}") from e
            elif isinstance(p, complex):
                converted.append(as_tuple(p))
            else:
                converted.append(p)
        return cls(converted, max_distance=max_distance, settings=settings)

    def skeleton(self, side=Side.INTERIOR):
        side = _as_side(side)
        try:
            return self._extractors[side].skeleton
        except KeyError:
            pass
        skeleton = SkeletonBuilder(
            self.polygon, side, max_distance=self.max_distance, settings=self.settings
        ).build()
        self._extractors[side] = OffsetExtractor(skeleton)
        return skeleton

    @property
    def interior(self):
        return self.skeleton(Side.INTERIOR)

    @property
    def exterior(self):
        return self.skeleton(Side.EXTERIOR)

    def offset(self, distance, offset_type=Side.INTERIOR):
        """Offset polygons as lists of (x, y) tuples."""
        side = _as_side(offset_type)
        self.skeleton(side)
        return self._extractors[side].offset(distance, side)

    def offset_polygon(self, distance, offset_type=Side.INTERIOR):
        return [
            [_point(p) for p in polygon] for polygon in self.offset(distance, offset_type)
        ]

    def skeleton_info(self, skeleton_type=Side.INTERIOR):
        skeleton = self.skeleton(skeleton_type)
        return {
            "vertices": [_point(p) for p in skeleton.vertices()],
            "edges": [
                {"start": _point(a), "end": _point(b)} for a, b in skeleton.edges()
            ],
        }
