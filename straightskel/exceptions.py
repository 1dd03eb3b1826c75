class SkeletonError(Exception):
    """
    This root exception is provided in case we ever want to provide common functionality
    across all straight skeleton exceptions.
    """


class InvalidInput(ValueError, SkeletonError):
    """
    InvalidInput is raised before any simulation starts if the polygon or a query parameter
    cannot be used: fewer than three distinct points, non-finite coordinates, a zero area
    or self-intersecting boundary, a negative distance.
    """


class DegenerateConstruction(SkeletonError):
    """
    DegenerateConstruction aborts the whole build. The event model could not resolve a
    near-simultaneous or numerically ambiguous configuration, no partial skeleton exists.
    """


class DistanceOutOfRange(ValueError, SkeletonError):
    """
    Exterior offset requested beyond the maximum distance the skeleton was propagated to.

    The skeleton itself stays valid and can be queried again with a smaller distance.
    """

    def __init__(self, distance, max_distance):
        super().__init__(
            f"Offset distance {distance} exceeds the exterior bound {max_distance}"
        )
        self.distance = distance
        self.max_distance = max_distance
