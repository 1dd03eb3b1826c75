from .builder import (
    SkeletonBuilder,
    build_exterior_skeleton,
    build_interior_skeleton,
    normalize_polygon,
)
from .channel import Channel, channel
from .exceptions import (
    DegenerateConstruction,
    DistanceOutOfRange,
    InvalidInput,
    SkeletonError,
)
from .manager import SkeletonManager
from .offset import OffsetExtractor, offset_at
from .settings import DEFAULT_SETTINGS, Settings, SkeletonSettings
from .skeleton import Side, Skeleton

offset = offset_at


def vertices(skeleton):
    return skeleton.vertices()


def edges(skeleton):
    return skeleton.edges()
