"""Unit tests for the road segment builder."""

import numpy as np
import pytest

from src.roadmesh.curves import BezierKnot, BezierSpline, SplineContainer
from src.roadmesh.sampler import CurveSampler
from src.roadmesh.segments import build_curve_segments, build_road_segments
from src.roadmesh.settings import SettingsStore


class TestBuildCurveSegments:
    """Test suite for build_curve_segments."""

    def test_quad_layout(self):
        """Test vertex order, triangle indices and UVs of a two-quad strip."""
        right = np.array([[0, 0, 1], [4, 0, 1], [8, 0, 1]], dtype=float)
        left = np.array([[0, 0, -1], [4, 0, -1], [8, 0, -1]], dtype=float)

        part = build_curve_segments(right, left)

        np.testing.assert_allclose(part.vertices[:4], [right[0], left[0], right[1], left[1]])
        assert part.triangles.tolist() == [0, 2, 3, 3, 1, 0, 4, 6, 7, 7, 5, 4]
        np.testing.assert_allclose(part.uvs, [
            [0, 0], [1, 0], [0, 1], [1, 1],
            [0, 1], [1, 1], [0, 2], [1, 2],
        ])

    def test_counts_independent_of_shape(self):
        """Test 4R vertices and 2R triangles for random sample positions."""
        rng = np.random.default_rng(0)
        for resolution in (1, 3, 17):
            right = rng.normal(size=(resolution + 1, 3))
            left = rng.normal(size=(resolution + 1, 3))

            part = build_curve_segments(right, left)

            assert part.vertex_count == 4 * resolution
            assert part.triangle_count == 2 * resolution
            assert len(part.uvs) == 4 * resolution

    def test_single_sample_gives_nothing(self):
        """Test that a curve with resolution 0 emits no geometry."""
        part = build_curve_segments(np.zeros((1, 3)), np.zeros((1, 3)))

        assert part.vertex_count == 0
        assert part.triangle_count == 0


class TestBuildRoadSegments:
    """Test suite for build_road_segments."""

    def make_container(self):
        return SplineContainer([
            BezierSpline([BezierKnot((0, 0, 0)), BezierKnot((10, 0, 0))]),
            BezierSpline([
                BezierKnot((0, 0, 20), tangent_out=(5, 0, 0)),
                BezierKnot((10, 0, 30), tangent_in=(0, 0, -5)),
            ]),
        ])

    def test_per_curve_resolution(self):
        """Test that each curve contributes 2R triangles for its own R."""
        container = self.make_container()
        settings = SettingsStore(lambda: container.num_curves, default_width=1.0, default_resolution=5)
        settings.set_resolution(1, 8)

        part = build_road_segments(CurveSampler(container), settings)

        assert part.triangle_count == 2 * 5 + 2 * 8
        assert part.vertex_count == 4 * 5 + 4 * 8
        assert part.triangles.max() == part.vertex_count - 1

    def test_uv_v_monotonic(self):
        """Test that v never decreases along a curve and tracks length / 4."""
        container = self.make_container()
        settings = SettingsStore(lambda: container.num_curves, default_width=1.0, default_resolution=6)

        part = build_road_segments(CurveSampler(container), settings)

        first_curve_v = part.uvs[: 4 * 6, 1]
        assert np.all(np.diff(first_curve_v[::2]) >= 0)
        # Straight 10 m curve: right-edge chords sum to 10
        assert first_curve_v[-1] == pytest.approx(2.5)

    def test_uv_u_sides(self):
        """Test that u is 0 on the right edge and 1 on the left edge."""
        container = self.make_container()
        settings = SettingsStore(lambda: container.num_curves, default_width=1.0, default_resolution=3)

        part = build_road_segments(CurveSampler(container), settings)

        assert part.uvs[0::2, 0].tolist() == [0.0] * (part.vertex_count // 2)
        assert part.uvs[1::2, 0].tolist() == [1.0] * (part.vertex_count // 2)
