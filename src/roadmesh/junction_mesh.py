"""Fill the space between junctions with a blended fan of triangles.

For every intersection the builder

1. samples each junction's road edge at the curve endpoint, oriented
   so that all edges face the intersection the same way,
2. takes the mean of all edge points as the intersection centre,
3. sorts the edges by their signed angle around the up axis,
4. walks the sorted edges cyclically and joins the left point of one
   edge to the right point of the next with a quadratic Bezier arc
   whose control point is the gap midpoint reflected through the
   centre and then pulled back towards the centre by the gap's blend
   weight,
5. fans the resulting closed outline from the centre.

The fan does not share vertices between triangles, so each triangle
carries its own planar ``(z, x)`` UVs.
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from src.utils.logging import get_logger
from .curves import AXES, WORLD_UP
from .errors import MalformedIntersectionError
from .intersections import Intersection, IntersectionRegistry, Junction, validate_intersection
from .mesh import MeshPart
from .sampler import CurveSampler
from .settings import SettingsStore

logger = get_logger(__name__)


@dataclass
class JunctionEdge:
    """The road edge where a curve enters an intersection."""

    left: np.ndarray
    right: np.ndarray

    @property
    def center(self) -> np.ndarray:
        return (self.left + self.right) / 2.0


@dataclass
class IntersectionOutline:
    """Centre, sorted edges and closed boundary of one intersection."""

    center: np.ndarray
    edges: List[JunctionEdge]
    boundary: np.ndarray


def junction_edge(junction: Junction, sampler: CurveSampler, settings: SettingsStore) -> JunctionEdge:
    """Sample the road edge of a junction at its curve endpoint."""
    curve_settings = settings.get(junction.curve_index)
    if curve_settings is None:
        raise MalformedIntersectionError(
            f"junction refers to unknown curve {junction.curve_index}"
        )
    right, left = sampler.sample_width(junction.curve_index, junction.t, curve_settings.width)
    # The curve direction is reversed at its start, so are the edge sides
    if junction.is_start:
        return JunctionEdge(left=left, right=right)
    return JunctionEdge(left=right, right=left)


def _normalized(v: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(v)
    if norm < 1e-12:
        return np.zeros(3)
    return v / norm


def signed_angle(from_dir: np.ndarray, to_dir: np.ndarray, axis: np.ndarray = WORLD_UP) -> float:
    """Angle in degrees from ``from_dir`` to ``to_dir``, signed about ``axis``.

    The unsigned angle is the full 3D angle between the vectors; the
    sign is that of ``dot(axis, cross(from_dir, to_dir))``, with zero
    counted as positive.  Zero-length input gives 0.
    """
    denom = np.linalg.norm(from_dir) * np.linalg.norm(to_dir)
    if denom < 1e-15:
        return 0.0
    cos = np.clip(np.dot(from_dir, to_dir) / denom, -1.0, 1.0)
    angle = float(np.degrees(np.arccos(cos)))
    sign = 1.0 if np.dot(axis, np.cross(from_dir, to_dir)) >= 0 else -1.0
    return sign * angle


def sort_reference_direction(center: np.ndarray, sort_reference: str = "center") -> np.ndarray:
    """Direction the angular sort measures from.

    ``"center"`` uses the normalised intersection centre, falling back
    to the world X axis when the centre is the origin.
    """
    if sort_reference == "center":
        ref = _normalized(center)
        if np.any(ref):
            return ref
    return AXES["x"]


def sort_edges(edges: Sequence[JunctionEdge], center: np.ndarray,
               sort_reference: str = "center") -> List[JunctionEdge]:
    """Order edges by signed angle around the intersection centre."""
    ref = sort_reference_direction(center, sort_reference)
    return sorted(
        edges,
        key=lambda e: signed_angle(ref, _normalized(e.center - center), WORLD_UP),
    )


def blend_control_point(a: np.ndarray, b: np.ndarray, center: np.ndarray, weight: float) -> np.ndarray:
    """Control point of the fill arc between ``a`` and ``b``.

    The midpoint of ``a`` and ``b`` is reflected through ``center``;
    ``weight`` then interpolates from that reflected point (0) to the
    centre itself (1).
    """
    mid = (a + b) * 0.5
    mid = mid - (center - mid)
    return mid + (center - mid) * weight


def quadratic_bezier(a: np.ndarray, c: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    mt = 1.0 - t
    return (mt * mt) * a + (2.0 * mt * t) * c + (t * t) * b


def boundary_loop(edges: Sequence[JunctionEdge], weights: Sequence[float],
                  center: np.ndarray, curve_steps: int) -> np.ndarray:
    """Closed outline through all sorted edges.

    Each gap contributes ``curve_steps`` arc samples at
    ``t = i / curve_steps`` followed by the arc's end point, so the
    outline has ``len(edges) * (curve_steps + 1)`` points.
    """
    n = len(edges)
    points = []
    for j in range(1, n + 1):
        a = edges[j - 1].left
        b = edges[j % n].right
        c = blend_control_point(a, b, center, weights[j - 1])
        for i in range(curve_steps):
            points.append(quadratic_bezier(a, c, b, i / curve_steps))
        points.append(b)
    return np.array(points).reshape(-1, 3)


def fan_triangulate(center: np.ndarray, boundary: np.ndarray) -> MeshPart:
    """One triangle ``(center, boundary[j-1], boundary[j])`` per outline point."""
    boundary = np.asarray(boundary, dtype=float).reshape(-1, 3)
    count = len(boundary)
    if count == 0:
        return MeshPart()
    centers = np.broadcast_to(center, (count, 3))
    nxt = np.roll(boundary, -1, axis=0)
    vertices = np.stack([centers, boundary, nxt], axis=1).reshape(-1, 3)
    uvs = vertices[:, [2, 0]].copy()
    triangles = np.arange(3 * count, dtype=np.int64)
    return MeshPart(vertices=vertices, uvs=uvs, triangles=triangles)


def intersection_outline(
    intersection: Intersection,
    sampler: CurveSampler,
    settings: SettingsStore,
    curve_steps: int,
    sort_reference: str = "center",
) -> IntersectionOutline:
    """Compute the centre, sorted edges and boundary of an intersection.

    Raises
    ------
    MalformedIntersectionError
        If the intersection has fewer than two junctions, a mismatched
        weight list, or refers to an unknown curve.
    """
    if curve_steps < 1:
        raise ValueError("curve_steps must be at least 1")
    validate_intersection(intersection)
    edges = [junction_edge(j, sampler, settings) for j in intersection.junctions]
    center = np.mean([p for e in edges for p in (e.left, e.right)], axis=0)
    edges = sort_edges(edges, center, sort_reference)
    boundary = boundary_loop(edges, intersection.weights, center, curve_steps)
    return IntersectionOutline(center=center, edges=edges, boundary=boundary)


def build_intersection_mesh(
    intersection: Intersection,
    sampler: CurveSampler,
    settings: SettingsStore,
    curve_steps: int,
    sort_reference: str = "center",
) -> MeshPart:
    """Triangulate one intersection."""
    outline = intersection_outline(intersection, sampler, settings, curve_steps, sort_reference)
    return fan_triangulate(outline.center, outline.boundary)


def build_intersections(
    registry: IntersectionRegistry,
    sampler: CurveSampler,
    settings: SettingsStore,
    curve_steps: int,
    sort_reference: str = "center",
) -> MeshPart:
    """Build the intersection submesh, skipping malformed intersections."""
    parts = []
    for idx, intersection in enumerate(registry):
        try:
            parts.append(
                build_intersection_mesh(intersection, sampler, settings, curve_steps, sort_reference)
            )
        except MalformedIntersectionError as exc:
            logger.warning(f"Skipping intersection {idx}: {exc}")
    return MeshPart.concatenate(parts)
