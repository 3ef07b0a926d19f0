"""Intersections between curve endpoints.

An `Intersection` is a cluster of `Junction`s, each one the start or
end of a curve, plus one blend weight per gap between neighbouring
junctions.  The `IntersectionRegistry` holds all intersections of a
road and notifies its owner after every mutation so the mesh can be
rebuilt.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from src.utils.logging import get_logger
from .curves import BezierKnot, SplineContainer
from .errors import MalformedIntersectionError

logger = get_logger(__name__)


@dataclass
class Junction:
    """One curve endpoint taking part in an intersection."""

    curve_index: int
    knot_index: int
    """0 for the start of the curve, the last knot index for its end."""

    knot: Optional[BezierKnot] = field(default=None, compare=False)
    """Snapshot of the endpoint knot taken when the junction was built."""

    @property
    def is_start(self) -> bool:
        return self.knot_index == 0

    @property
    def t(self) -> float:
        """Curve parameter of the endpoint."""
        return 0.0 if self.is_start else 1.0

    def matches(self, curve_index: int, knot_index: int) -> bool:
        return self.curve_index == curve_index and self.knot_index == knot_index

    def to_dict(self) -> Dict:
        return {"curve_index": self.curve_index, "knot_index": self.knot_index}


@dataclass(eq=False)
class Intersection:
    """A set of junctions blended together by fill arcs.

    ``weights[i]`` controls the arc between sorted junction ``i`` and
    junction ``i + 1`` (cyclically): 0 gives a wide rounded corner, 1
    pulls the arc onto the intersection centre.

    Intersections compare by identity so that two intersections with
    the same layout can live in one registry.
    """

    junctions: List[Junction]
    weights: List[float] = field(default_factory=list)

    def __post_init__(self):
        if not self.junctions:
            raise MalformedIntersectionError("an intersection needs at least one junction")
        self.junctions = list(self.junctions)
        self.weights = [float(w) for w in self.weights]

    def __len__(self) -> int:
        return len(self.junctions)

    def add_junction(self, junction: Junction, weight: float) -> None:
        """Append a junction together with the weight of the gap after it."""
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"blend weight must lie in [0, 1], got {weight}")
        self.junctions.append(junction)
        self.weights.append(float(weight))

    def set_weight(self, gap_index: int, value: float) -> None:
        """Set the blend weight of one gap."""
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"blend weight must lie in [0, 1], got {value}")
        self.weights[gap_index] = float(value)

    def contains(self, curve_index: int, knot_index: int) -> bool:
        return any(j.matches(curve_index, knot_index) for j in self.junctions)

    def to_dict(self) -> Dict:
        return {
            "junctions": [j.to_dict() for j in self.junctions],
            "weights": list(self.weights),
        }


def validate_intersection(intersection: Intersection) -> None:
    """Raise `MalformedIntersectionError` if ``intersection`` cannot be filled."""
    n = len(intersection.junctions)
    if n < 2:
        raise MalformedIntersectionError(
            f"an intersection needs at least two junctions, got {n}"
        )
    if len(intersection.weights) != n:
        raise MalformedIntersectionError(
            f"expected {n} blend weights, got {len(intersection.weights)}"
        )
    for w in intersection.weights:
        if not 0.0 <= w <= 1.0:
            raise MalformedIntersectionError(f"blend weight {w} outside [0, 1]")


def build_intersection(
    selection: Sequence[Tuple[int, int]],
    container: SplineContainer,
    default_weight: float = 0.5,
) -> Intersection:
    """Create an intersection from a selection of curve endpoints.

    Parameters
    ----------
    selection : sequence of (int, int)
        ``(curve_index, knot_index)`` pairs.  A knot index of 0 selects
        the curve start; any other value selects the curve end.
    container : SplineContainer
        Curves the selection refers to; used to snapshot the knots.
    default_weight : float
        Blend weight assigned to every gap.
    """
    if len(selection) < 2:
        raise MalformedIntersectionError("select at least two curve endpoints to build a junction")
    junctions = []
    for curve_index, knot_index in selection:
        last = container.knot_count(curve_index) - 1
        endpoint = 0 if knot_index == 0 else last
        junctions.append(Junction(curve_index, endpoint, container.get_knot(curve_index, endpoint)))
    return Intersection(junctions, [default_weight] * len(junctions))


class IntersectionRegistry:
    """Ordered collection of a road's intersections."""

    def __init__(self, on_change: Optional[Callable[[], None]] = None):
        self.on_change = on_change
        self._intersections: List[Intersection] = []

    def __len__(self) -> int:
        return len(self._intersections)

    def __iter__(self) -> Iterator[Intersection]:
        return iter(list(self._intersections))

    def __contains__(self, intersection: Intersection) -> bool:
        return any(i is intersection for i in self._intersections)

    def add(self, intersection: Intersection) -> None:
        self._intersections.append(intersection)
        self._changed()

    def remove(self, intersection: Intersection) -> None:
        """Remove an intersection.

        Raises
        ------
        KeyError
            If the intersection is not registered.
        """
        for idx, existing in enumerate(self._intersections):
            if existing is intersection:
                del self._intersections[idx]
                self._changed()
                return
        raise KeyError("intersection is not registered")

    def clear(self) -> None:
        self._intersections.clear()
        self._changed()

    def find_by_junction(self, curve_index: int, knot_index: int) -> Optional[Intersection]:
        """Return the first intersection containing the given endpoint."""
        for intersection in self._intersections:
            if intersection.contains(curve_index, knot_index):
                return intersection
        return None

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
