"""The road entity tying curves, settings and intersections together.

`SplineRoad` owns the per-curve settings and the intersections of one
road and rebuilds its whole mesh synchronously whenever any of them,
or the curves it is built from, change.  There is no dirty flag and no
incremental update: every change runs a full rebuild, which is linear
in the total number of samples.

Usage::

    container = SplineContainer([...])
    road = SplineRoad(container, RoadConfig.from_yaml("configs/road.yaml"))
    road.add_sink(ObjMeshSink("out/road.obj"))
    road.enable()
    road.add_intersection(build_intersection([(0, 1), (1, 0)], container))
"""

import dataclasses
import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from src.utils.logging import get_logger
from .config import RoadConfig
from .curves import SplineContainer
from .errors import InvalidCurveIndexError
from .intersections import Intersection, IntersectionRegistry, Junction
from .junction_mesh import build_intersections
from .mesh import INTERSECTION_SUBMESH, ROAD_SUBMESH, MeshSink, RoadMesh, assemble_mesh
from .sampler import CurveSampler
from .segments import build_road_segments
from .settings import CurveSettings, SettingsStore

logger = get_logger(__name__)


class SplineRoad:
    """A road mesh generated from the splines of a `SplineContainer`."""

    def __init__(self, container: SplineContainer, config: Optional[RoadConfig] = None,
                 name: str = "Road"):
        self.container = container
        # Each road edits its own copy of the config
        self.config = dataclasses.replace(config) if config is not None else RoadConfig()
        self.name = name
        self.sampler = CurveSampler(container)
        self.settings = SettingsStore(
            lambda: self.container.num_curves,
            default_width=self.config.road_width,
            default_resolution=self.config.road_resolution,
            on_change=self.rebuild,
        )
        self.intersections = IntersectionRegistry(on_change=self.rebuild)
        self.sinks: List[MeshSink] = []
        self.mesh: Optional[RoadMesh] = None
        self.revision = 0
        self.enabled = False

    # Lifecycle

    def enable(self) -> None:
        """Start listening to curve changes and build the mesh."""
        if not self.enabled:
            self.container.subscribe(self._on_curve_changed)
            self.enabled = True
        self.rebuild()

    def disable(self) -> None:
        if self.enabled:
            self.container.unsubscribe(self._on_curve_changed)
            self.enabled = False

    def _on_curve_changed(self, curve_index: int, knot_index: int) -> None:
        self.rebuild()

    def add_sink(self, sink: MeshSink) -> None:
        self.sinks.append(sink)

    # Settings

    def get_settings(self, curve_index: int) -> Optional[CurveSettings]:
        return self.settings.get(curve_index)

    def set_width(self, curve_index: int, width: float) -> bool:
        return self.settings.set_width(curve_index, width)

    def set_resolution(self, curve_index: int, resolution: int) -> bool:
        return self.settings.set_resolution(curve_index, resolution)

    def set_curve_steps(self, curve_steps: int) -> None:
        if curve_steps < 1:
            raise ValueError("curve_steps must be at least 1")
        if curve_steps != self.config.curve_steps:
            self.config.curve_steps = curve_steps
            self.rebuild()

    def set_defaults(self, width: Optional[float] = None, resolution: Optional[int] = None) -> None:
        """Change the defaults used for curves without settings yet."""
        if width is not None:
            if width < 0:
                raise ValueError("width must be non-negative")
            self.config.road_width = float(width)
            self.settings.default_width = float(width)
        if resolution is not None:
            if resolution < 0:
                raise ValueError("resolution must be non-negative")
            self.config.road_resolution = int(resolution)
            self.settings.default_resolution = int(resolution)
        self.rebuild()

    # Intersections

    def add_intersection(self, intersection: Intersection) -> None:
        self.intersections.add(intersection)

    def remove_intersection(self, intersection: Intersection) -> None:
        self.intersections.remove(intersection)

    def clear_intersections(self) -> None:
        self.intersections.clear()

    def find_intersection(self, curve_index: int, knot_index: int) -> Optional[Intersection]:
        return self.intersections.find_by_junction(curve_index, knot_index)

    def set_blend_weight(self, intersection: Intersection, gap_index: int, value: float) -> None:
        """Change one gap's blend weight and rebuild."""
        intersection.set_weight(gap_index, value)
        self.rebuild()

    # Mesh

    def build_mesh(self) -> RoadMesh:
        """Build the mesh for the current state without publishing it."""
        roads = build_road_segments(self.sampler, self.settings)
        fills = build_intersections(
            self.intersections,
            self.sampler,
            self.settings,
            self.config.curve_steps,
            self.config.sort_reference,
        )
        return assemble_mesh(roads, fills, name=self.name)

    def rebuild(self) -> RoadMesh:
        """Rebuild the mesh and publish it to every sink."""
        logger.info(f"[{self.name}] rebuilding mesh...")
        mesh = self.build_mesh()
        self.mesh = mesh
        self.revision += 1
        for sink in self.sinks:
            sink.publish(mesh)
        logger.info(
            f"[{self.name}] {mesh.vertex_count} vertices, "
            f"{mesh.triangle_count(ROAD_SUBMESH)} road / "
            f"{mesh.triangle_count(INTERSECTION_SUBMESH)} intersection triangles"
        )
        return mesh

    # Persistence

    def state_dict(self) -> Dict:
        return {
            "settings": self.settings.to_records(),
            "intersections": [i.to_dict() for i in self.intersections],
        }

    def save_state(self, path: Union[str, Path]) -> None:
        """Save settings and intersections to a JSON file."""
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.state_dict(), f, indent=2)
        logger.info(f"Saved road state to {path}")

    def load_state_dict(self, state: Dict) -> None:
        """Restore settings and intersections, then rebuild once.

        The whole state is parsed before anything is replaced, so a
        malformed state raises and leaves the road as it was.
        """
        records = list(state.get("settings", []))
        SettingsStore.parse_records(records)

        intersections = []
        for data in state.get("intersections", []):
            junctions = []
            for item in data["junctions"]:
                curve_index = int(item["curve_index"])
                knot_index = int(item["knot_index"])
                try:
                    knot = self.container.get_knot(curve_index, knot_index)
                except (InvalidCurveIndexError, IndexError):
                    logger.warning(
                        f"Curve {curve_index} knot {knot_index} no longer exists, "
                        f"junction kept without snapshot"
                    )
                    knot = None
                junctions.append(Junction(curve_index, knot_index, knot))
            intersections.append(Intersection(junctions, data.get("weights", [])))

        self.settings.load_records(records)

        # Mutate the registry quietly and rebuild once at the end
        on_change = self.intersections.on_change
        self.intersections.on_change = None
        try:
            self.intersections.clear()
            for intersection in intersections:
                self.intersections.add(intersection)
        finally:
            self.intersections.on_change = on_change
        self.rebuild()

    def load_state(self, path: Union[str, Path]) -> None:
        with open(path, 'r', encoding='utf-8') as f:
            state = json.load(f)
        self.load_state_dict(state)
        logger.info(f"Loaded road state from {path}")
