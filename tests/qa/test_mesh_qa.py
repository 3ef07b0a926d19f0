"""Unit tests for mesh QA checks."""

import numpy as np

from src.qa.qa_tests import MeshQA
from src.roadmesh.config import RoadConfig
from src.roadmesh.curves import BezierKnot, BezierSpline, SplineContainer
from src.roadmesh.intersections import build_intersection
from src.roadmesh.mesh import RoadMesh
from src.roadmesh.road import SplineRoad


def build_t_junction():
    container = SplineContainer([
        BezierSpline([BezierKnot((-20, 0, 0)), BezierKnot((-2, 0, 0))]),
        BezierSpline([BezierKnot((2, 0, 0)), BezierKnot((20, 0, 0))]),
        BezierSpline([BezierKnot((0, 0, 2)), BezierKnot((0, 0, 20))]),
    ])
    road = SplineRoad(container, RoadConfig(road_width=1.0, road_resolution=6, curve_steps=6))
    road.enable()
    road.add_intersection(build_intersection([(0, 1), (1, 0), (2, 0)], container, 0.5))
    return road.mesh


class TestMeshQA:
    """Test suite for MeshQA."""

    def test_generated_mesh_passes(self):
        """Test that a generated T junction passes every check."""
        results = MeshQA().run(build_t_junction())

        assert results == {
            "finite_ok": True,
            "indices_ok": True,
            "road_winding_ok": True,
            "intersection_winding_ok": True,
        }

    def test_nan_detected(self):
        """Test that NaN coordinates fail the finite check."""
        mesh = build_t_junction()
        mesh.vertices[0, 0] = np.nan

        assert MeshQA().check_finite(mesh) == False

    def test_bad_index_detected(self):
        """Test that an index past the vertex buffer fails."""
        mesh = build_t_junction()
        road_tris = mesh.submeshes[0].copy()
        road_tris[0] = mesh.vertex_count
        broken = RoadMesh(mesh.vertices, mesh.uvs, (road_tris, mesh.submeshes[1]))

        assert MeshQA().check_indices(broken) == False

    def test_flipped_winding_detected(self):
        """Test that reversed triangles fail the winding check."""
        mesh = build_t_junction()
        flipped = mesh.triangles(0)[:, ::-1].reshape(-1)
        broken = RoadMesh(mesh.vertices, mesh.uvs, (flipped, mesh.submeshes[1]))

        assert MeshQA().check_winding(broken, 0) == False
        assert MeshQA().check_winding(broken, 1) == True
