"""Piecewise cubic Bezier splines used as the curve evaluation service.

The mesh builders never evaluate curves themselves; they go through
`SplineContainer.evaluate`, which returns the position, tangent and up
vector of a spline at a normalised parameter ``t``.  A spline with
``K`` knots has ``K - 1`` cubic segments and ``t`` is spread uniformly
over them (segment ``i`` covers ``[i / (K-1), (i+1) / (K-1)]``).

Knot tangents are stored as offsets relative to the knot position:
``tangent_out`` points towards the next knot, ``tangent_in`` towards
the previous one.  Zero tangents give straight segments.

The container also notifies subscribers synchronously whenever a
spline is modified, which is how a road keeps its mesh in sync with
the curves it is built from.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

import numpy as np

from src.utils.logging import get_logger
from .errors import InvalidCurveIndexError

logger = get_logger(__name__)

WORLD_UP = np.array([0.0, 1.0, 0.0])

AXES = {
    "x": np.array([1.0, 0.0, 0.0]),
    "y": np.array([0.0, 1.0, 0.0]),
    "z": np.array([0.0, 0.0, 1.0]),
}

ChangeCallback = Callable[[int, int], None]


def _vec3(value) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(3)
    return arr.copy()


@dataclass(eq=False)
class BezierKnot:
    """A spline control point."""

    position: np.ndarray
    tangent_in: np.ndarray = field(default_factory=lambda: np.zeros(3))
    tangent_out: np.ndarray = field(default_factory=lambda: np.zeros(3))
    up: np.ndarray = field(default_factory=lambda: WORLD_UP.copy())

    def __post_init__(self):
        self.position = _vec3(self.position)
        self.tangent_in = _vec3(self.tangent_in)
        self.tangent_out = _vec3(self.tangent_out)
        self.up = _vec3(self.up)

    def copy(self) -> "BezierKnot":
        return BezierKnot(self.position, self.tangent_in, self.tangent_out, self.up)

    def to_dict(self) -> dict:
        return {
            "position": self.position.tolist(),
            "tangent_in": self.tangent_in.tolist(),
            "tangent_out": self.tangent_out.tolist(),
            "up": self.up.tolist(),
        }


def cubic_bezier(p0, p1, p2, p3, t: float) -> Tuple[np.ndarray, np.ndarray]:
    """Evaluate a cubic Bezier segment and its derivative at ``t``."""
    mt = 1.0 - t
    position = (
        (mt ** 3) * p0
        + 3 * (mt ** 2) * t * p1
        + 3 * mt * (t ** 2) * p2
        + (t ** 3) * p3
    )
    derivative = (
        3 * (mt ** 2) * (p1 - p0)
        + 6 * mt * t * (p2 - p1)
        + 3 * (t ** 2) * (p3 - p2)
    )
    return position, derivative


class BezierSpline:
    """An open spline made of cubic Bezier segments."""

    def __init__(self, knots: Sequence[BezierKnot] = ()):
        self.knots: List[BezierKnot] = [k.copy() for k in knots]

    def __len__(self) -> int:
        return len(self.knots)

    def evaluate(self, t: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(position, tangent, up)`` at normalised parameter ``t``.

        The tangent is the (unnormalised) derivative of the segment.
        Where the derivative vanishes, which happens at the ends of a
        segment with zero tangents, the segment chord is used instead.
        """
        if len(self.knots) < 2:
            raise ValueError("a spline needs at least two knots to be evaluated")
        n_segments = len(self.knots) - 1
        s = t * n_segments
        idx = min(int(np.floor(s)), n_segments - 1)
        u = s - idx

        k0 = self.knots[idx]
        k1 = self.knots[idx + 1]
        p0 = k0.position
        p3 = k1.position
        position, tangent = cubic_bezier(
            p0, p0 + k0.tangent_out, p3 + k1.tangent_in, p3, u
        )
        if np.linalg.norm(tangent) < 1e-9:
            tangent = p3 - p0

        up = (1.0 - u) * k0.up + u * k1.up
        norm = np.linalg.norm(up)
        up = up / norm if norm > 1e-9 else WORLD_UP.copy()
        return position, tangent, up


class SplineContainer:
    """Ordered collection of splines with change notification."""

    def __init__(self, splines: Sequence[BezierSpline] = ()):
        self.splines: List[BezierSpline] = list(splines)
        self._listeners: List[ChangeCallback] = []

    @property
    def num_curves(self) -> int:
        return len(self.splines)

    def subscribe(self, callback: ChangeCallback) -> None:
        """Register ``callback(curve_index, knot_index)`` for change events."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: ChangeCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def notify(self, curve_index: int, knot_index: int = -1) -> None:
        for callback in list(self._listeners):
            callback(curve_index, knot_index)

    def check_index(self, curve_index: int) -> None:
        if not 0 <= curve_index < self.num_curves:
            raise InvalidCurveIndexError(curve_index, self.num_curves)

    def add_spline(self, spline: BezierSpline) -> int:
        """Append a spline and return its curve index."""
        self.splines.append(spline)
        index = len(self.splines) - 1
        self.notify(index)
        return index

    def knot_count(self, curve_index: int) -> int:
        self.check_index(curve_index)
        return len(self.splines[curve_index])

    def get_knot(self, curve_index: int, knot_index: int) -> BezierKnot:
        """Return a copy of a knot."""
        self.check_index(curve_index)
        return self.splines[curve_index].knots[knot_index].copy()

    def set_knot(self, curve_index: int, knot_index: int, knot: BezierKnot,
                 notify: bool = True) -> None:
        self.check_index(curve_index)
        self.splines[curve_index].knots[knot_index] = knot.copy()
        if notify:
            self.notify(curve_index, knot_index)

    def evaluate(self, curve_index: int, t: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Evaluate curve ``curve_index`` at ``t`` in ``[0, 1]``.

        Returns
        -------
        tuple of numpy.ndarray
            ``(position, tangent, up)`` in world space.
        """
        self.check_index(curve_index)
        if not 0.0 <= t <= 1.0:
            raise ValueError(f"t must lie in [0, 1], got {t}")
        return self.splines[curve_index].evaluate(t)


def align_knots_to_axis(container: SplineContainer, axis: str = "y") -> int:
    """Flatten every knot's forward direction against ``axis``.

    The component of each knot's forward direction along ``axis`` is
    removed, both tangents are re-aimed along the flattened direction
    (their lengths are kept) and the knot's up vector is set to
    ``axis``.  Knots whose flattened direction is (nearly) zero, for
    instance a knot pointing straight along ``axis``, are left as they
    are.

    Returns
    -------
    int
        Number of knots that were modified.
    """
    key = axis.lower()
    if key not in AXES:
        raise ValueError(f"axis must be one of {sorted(AXES)}, got {axis!r}")
    axis_index = "xyz".index(key)
    up = AXES[key]

    changed = 0
    for curve_index, spline in enumerate(container.splines):
        spline_changed = False
        for knot_index, knot in enumerate(spline.knots):
            forward = knot.tangent_out if np.linalg.norm(knot.tangent_out) > 1e-9 else -knot.tangent_in
            norm = np.linalg.norm(forward)
            if norm < 1e-9:
                continue
            forward = forward / norm
            forward[axis_index] = 0.0
            if float(np.dot(forward, forward)) < 1e-4:
                continue
            forward = forward / np.linalg.norm(forward)

            aligned = BezierKnot(
                knot.position,
                tangent_in=-forward * np.linalg.norm(knot.tangent_in),
                tangent_out=forward * np.linalg.norm(knot.tangent_out),
                up=up,
            )
            container.set_knot(curve_index, knot_index, aligned, notify=False)
            spline_changed = True
            changed += 1
        if spline_changed:
            container.notify(curve_index)
    logger.info(f"Aligned {changed} knots to the {key.upper()} axis")
    return changed
