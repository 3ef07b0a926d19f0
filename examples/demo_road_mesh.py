"""Demo script for road and junction mesh generation.

This script builds three splines meeting in a T junction, generates
the road mesh with a blended intersection fill, runs the mesh QA
checks and exports the result as a Wavefront OBJ file.

Usage:
    python examples/demo_road_mesh.py [output_dir]
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.qa import MeshQA
from src.roadmesh import (
    BezierKnot,
    BezierSpline,
    ObjMeshSink,
    RoadConfig,
    SplineContainer,
    SplineRoad,
    build_intersection,
)
from src.roadmesh.mesh import INTERSECTION_SUBMESH, ROAD_SUBMESH

PROJECT_ROOT = Path(__file__).parent.parent


def create_t_junction() -> SplineContainer:
    """Create three curves whose endpoints meet around (0, 0, 0).

    Returns
    -------
    SplineContainer
        Curve 0 ends at the junction, curves 1 and 2 start there.
    """
    return SplineContainer([
        BezierSpline([
            BezierKnot((-60, 0, -10), tangent_out=(15, 0, 0)),
            BezierKnot((-4, 0, 0), tangent_in=(-10, 0, 0)),
        ]),
        BezierSpline([
            BezierKnot((4, 0, 0), tangent_out=(10, 0, 0)),
            BezierKnot((60, 0, 15), tangent_in=(-15, 0, -5)),
        ]),
        BezierSpline([
            BezierKnot((0, 0, 4), tangent_out=(0, 0, 10)),
            BezierKnot((20, 2, 50), tangent_in=(-5, 0, -15)),
        ]),
    ])


def main():
    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else PROJECT_ROOT / "output"

    config = RoadConfig.from_yaml(PROJECT_ROOT / "configs" / "road.yaml")
    container = create_t_junction()

    road = SplineRoad(container, config, name="DemoRoad")
    road.add_sink(ObjMeshSink(output_dir / "demo_road.obj"))
    road.enable()

    # Narrower side road with more detail
    road.set_width(2, 1.5)
    road.set_resolution(2, 24)

    intersection = build_intersection([(0, 1), (1, 0), (2, 0)], container, config.default_blend_weight)
    road.add_intersection(intersection)

    # Round off the first corner
    road.set_blend_weight(intersection, 0, 0.0)

    mesh = road.mesh
    print("\nMesh statistics:")
    print(f"  - Vertices: {mesh.vertex_count:,}")
    print(f"  - Road triangles: {mesh.triangle_count(ROAD_SUBMESH):,}")
    print(f"  - Intersection triangles: {mesh.triangle_count(INTERSECTION_SUBMESH):,}")

    print("\nQA flags:")
    for flag, ok in MeshQA().run(mesh).items():
        print(f"  {'✓' if ok else '✗'} {flag}")

    road.save_state(output_dir / "demo_road_state.json")
    print(f"\nOutputs written to {output_dir}/")


if __name__ == "__main__":
    main()
