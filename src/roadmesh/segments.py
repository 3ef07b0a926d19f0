"""Build the straight road strips along each curve.

Each pair of consecutive samples ``(right[i-1], left[i-1])`` and
``(right[i], left[i])`` becomes one quad made of the triangles
``(p1, p3, p4)`` and ``(p4, p2, p1)`` where ``p1 = right[i-1]``,
``p2 = left[i-1]``, ``p3 = right[i]`` and ``p4 = left[i]``.  Quads do
not share vertices, and neither do curves.

UVs: ``u`` is 0 on the right edge and 1 on the left edge; ``v`` grows
by a quarter of the right-edge chord length per quad.
"""

from typing import List

import numpy as np

from src.utils.logging import get_logger
from .mesh import MeshPart
from .sampler import CurveSampler
from .settings import SettingsStore

logger = get_logger(__name__)

UV_LENGTH_SCALE = 0.25


def build_curve_segments(right: np.ndarray, left: np.ndarray) -> MeshPart:
    """Triangulate the strip between sampled right and left edge points.

    Parameters
    ----------
    right, left : numpy.ndarray
        Arrays of shape ``(R + 1, 3)`` with the edge points of one
        curve in sample order.

    Returns
    -------
    MeshPart
        ``4 R`` vertices and ``2 R`` triangles.
    """
    right = np.asarray(right, dtype=float).reshape(-1, 3)
    left = np.asarray(left, dtype=float).reshape(-1, 3)
    n_quads = max(len(right) - 1, 0)
    if n_quads == 0:
        return MeshPart()

    # Per quad: p1, p2, p3, p4
    quads = np.stack([right[:-1], left[:-1], right[1:], left[1:]], axis=1)
    vertices = quads.reshape(-1, 3)

    base = 4 * np.arange(n_quads, dtype=np.int64)[:, None]
    triangles = (base + np.array([0, 2, 3, 3, 1, 0], dtype=np.int64)).reshape(-1)

    step = np.linalg.norm(right[1:] - right[:-1], axis=1) * UV_LENGTH_SCALE
    v_end = np.cumsum(step)
    v_start = np.concatenate(([0.0], v_end[:-1]))
    uvs = np.empty((n_quads, 4, 2))
    uvs[:, :, 0] = [0.0, 1.0, 0.0, 1.0]
    uvs[:, 0, 1] = v_start
    uvs[:, 1, 1] = v_start
    uvs[:, 2, 1] = v_end
    uvs[:, 3, 1] = v_end

    return MeshPart(vertices=vertices, uvs=uvs.reshape(-1, 2), triangles=triangles)


def build_road_segments(sampler: CurveSampler, settings: SettingsStore) -> MeshPart:
    """Build the road submesh for every curve known to ``sampler``.

    Curves are processed in index order and appended independently.
    """
    parts: List[MeshPart] = []
    for curve_index in range(sampler.num_curves):
        curve_settings = settings.get(curve_index)
        if curve_settings is None:
            continue
        right, left = sampler.sample_curve(
            curve_index, curve_settings.resolution, curve_settings.width
        )
        parts.append(build_curve_segments(right, left))
    return MeshPart.concatenate(parts)
