"""Procedural road and junction mesh generation from splines.

The package samples road edges along Bezier splines, triangulates the
road strips between samples and fills intersections between curve
endpoints with blended fans.  `SplineRoad` ties everything together
and rebuilds the mesh whenever the curves, the per-curve settings or
the intersections change.
"""

from .config import RoadConfig
from .curves import BezierKnot, BezierSpline, SplineContainer, align_knots_to_axis
from .errors import (
    RoadMeshError,
    InvalidCurveIndexError,
    DegenerateGeometryError,
    MalformedIntersectionError,
)
from .sampler import CurveSampler
from .settings import CurveSettings, SettingsStore
from .segments import build_curve_segments, build_road_segments
from .intersections import (
    Junction,
    Intersection,
    IntersectionRegistry,
    build_intersection,
    validate_intersection,
)
from .junction_mesh import JunctionEdge, build_intersection_mesh, build_intersections
from .mesh import MeshPart, RoadMesh, ObjMeshSink, assemble_mesh
from .road import SplineRoad

__all__ = [
    "RoadConfig",
    "BezierKnot",
    "BezierSpline",
    "SplineContainer",
    "align_knots_to_axis",
    "RoadMeshError",
    "InvalidCurveIndexError",
    "DegenerateGeometryError",
    "MalformedIntersectionError",
    "CurveSampler",
    "CurveSettings",
    "SettingsStore",
    "build_curve_segments",
    "build_road_segments",
    "Junction",
    "Intersection",
    "IntersectionRegistry",
    "build_intersection",
    "validate_intersection",
    "JunctionEdge",
    "build_intersection_mesh",
    "build_intersections",
    "MeshPart",
    "RoadMesh",
    "ObjMeshSink",
    "assemble_mesh",
    "SplineRoad",
]
