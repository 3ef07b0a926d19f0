"""Exceptions raised by the road mesh core."""


class RoadMeshError(ValueError):
    """Base class for all road mesh errors."""


class InvalidCurveIndexError(RoadMeshError):
    """A curve index lies outside ``[0, num_curves)``."""

    def __init__(self, curve_index: int, num_curves: int):
        super().__init__(
            f"Invalid curve index {curve_index} (container holds {num_curves} curves)"
        )
        self.curve_index = curve_index
        self.num_curves = num_curves


class DegenerateGeometryError(RoadMeshError):
    """An offset direction has (near) zero length and cannot be normalised."""


class MalformedIntersectionError(RoadMeshError):
    """An intersection cannot be triangulated.

    Raised for intersections with fewer than two junctions, a weight
    list whose length differs from the junction count, or weights
    outside ``[0, 1]``.
    """
