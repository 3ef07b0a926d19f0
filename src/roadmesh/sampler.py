"""Sample road edge points from curves.

The sampler turns a curve index, a normalised parameter and a half
width into a pair of world-space points on the right and left edge of
the road::

    right = position + normalize(cross(tangent, up)) * half_width
    left  = position - normalize(cross(tangent, up)) * half_width

It holds no state of its own and only borrows the curve evaluation
service it wraps.
"""

from typing import Protocol, Tuple

import numpy as np

from src.utils.logging import get_logger
from .curves import WORLD_UP
from .errors import DegenerateGeometryError

logger = get_logger(__name__)

EPSILON = 1e-9


class CurveEvaluator(Protocol):
    """Curve evaluation service consumed by the sampler."""

    @property
    def num_curves(self) -> int: ...

    def evaluate(self, curve_index: int, t: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]: ...


def offset_direction(tangent: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Return the unit vector pointing to the right of ``tangent``.

    Raises
    ------
    DegenerateGeometryError
        If ``tangent`` and ``up`` are parallel or either has zero
        length.
    """
    right = np.cross(tangent, up)
    norm = np.linalg.norm(right)
    if not np.isfinite(norm) or norm < EPSILON:
        raise DegenerateGeometryError(
            f"cannot build an offset direction from tangent {tangent} and up {up}"
        )
    return right / norm


class CurveSampler:
    """Compute left/right road edge points along curves."""

    def __init__(self, curves: CurveEvaluator):
        self.curves = curves

    @property
    def num_curves(self) -> int:
        return self.curves.num_curves

    def sample_width(self, curve_index: int, t: float, half_width: float) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(right_point, left_point)`` at parameter ``t``.

        If the curve's up vector is parallel to its tangent the world
        up axis is tried instead; if that is degenerate too, both
        points collapse onto the centre line so no NaN reaches the
        mesh.
        """
        position, tangent, up = self.curves.evaluate(curve_index, t)
        try:
            right = offset_direction(tangent, up)
        except DegenerateGeometryError:
            try:
                right = offset_direction(tangent, WORLD_UP)
                logger.warning(
                    f"Curve {curve_index} at t={t:.3f}: up vector parallel to tangent, "
                    f"using world up"
                )
            except DegenerateGeometryError:
                logger.warning(
                    f"Curve {curve_index} at t={t:.3f}: degenerate tangent, clamping width to 0"
                )
                right = np.zeros(3)
        offset = right * half_width
        return position + offset, position - offset

    def sample_curve(self, curve_index: int, resolution: int, half_width: float) -> Tuple[np.ndarray, np.ndarray]:
        """Sample ``resolution + 1`` edge point pairs along a curve.

        Samples are taken at ``t = i / resolution`` for
        ``i = 0 .. resolution - 1`` plus a final sample at ``t = 1``.

        Returns
        -------
        tuple of numpy.ndarray
            ``(right, left)`` arrays of shape ``(resolution + 1, 3)``.
        """
        rights = []
        lefts = []
        for i in range(resolution):
            right, left = self.sample_width(curve_index, i / resolution, half_width)
            rights.append(right)
            lefts.append(left)
        right, left = self.sample_width(curve_index, 1.0, half_width)
        rights.append(right)
        lefts.append(left)
        return np.array(rights), np.array(lefts)
