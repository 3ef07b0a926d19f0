"""Mesh containers, assembly and publication.

Builders produce `MeshPart`s whose triangle indices are local to the
part.  `assemble_mesh` concatenates the road part and the intersection
part into one `RoadMesh` with a shared vertex buffer and two submeshes:

* submesh 0 - road segments
* submesh 1 - intersection fills

Finished meshes are handed to `MeshSink`s, for instance `ObjMeshSink`
which writes a Wavefront OBJ file with one group per submesh.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Protocol, Sequence, Tuple, Union

import numpy as np

from src.utils.logging import get_logger

logger = get_logger(__name__)

ROAD_SUBMESH = 0
INTERSECTION_SUBMESH = 1
SUBMESH_NAMES = ("road", "intersection")


def _empty_vertices() -> np.ndarray:
    return np.zeros((0, 3))


def _empty_uvs() -> np.ndarray:
    return np.zeros((0, 2))


def _empty_triangles() -> np.ndarray:
    return np.zeros(0, dtype=np.int64)


@dataclass
class MeshPart:
    """Vertices, UVs and a flat triangle index list with local indices."""

    vertices: np.ndarray = field(default_factory=_empty_vertices)
    uvs: np.ndarray = field(default_factory=_empty_uvs)
    triangles: np.ndarray = field(default_factory=_empty_triangles)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    @classmethod
    def concatenate(cls, parts: Sequence["MeshPart"]) -> "MeshPart":
        """Append parts one after another, offsetting their indices."""
        if not parts:
            return cls()
        offsets = np.cumsum([0] + [p.vertex_count for p in parts[:-1]])
        return cls(
            vertices=np.concatenate([p.vertices for p in parts]).reshape(-1, 3),
            uvs=np.concatenate([p.uvs for p in parts]).reshape(-1, 2),
            triangles=np.concatenate(
                [p.triangles + off for p, off in zip(parts, offsets)]
            ).astype(np.int64),
        )


@dataclass
class RoadMesh:
    """A road mesh with one vertex buffer and two triangle submeshes."""

    vertices: np.ndarray
    uvs: np.ndarray
    submeshes: Tuple[np.ndarray, np.ndarray]
    name: str = "Road"

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def triangle_count(self, submesh: int) -> int:
        return len(self.submeshes[submesh]) // 3

    def triangles(self, submesh: int) -> np.ndarray:
        """Return the triangles of a submesh as an ``(M, 3)`` index array."""
        return self.submeshes[submesh].reshape(-1, 3)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "vertices": self.vertices.tolist(),
            "uvs": self.uvs.tolist(),
            "submeshes": [s.tolist() for s in self.submeshes],
        }


def assemble_mesh(roads: MeshPart, intersections: MeshPart, name: str = "Road") -> RoadMesh:
    """Merge the road and intersection parts into a two-submesh mesh."""
    offset = roads.vertex_count
    return RoadMesh(
        vertices=np.concatenate([roads.vertices, intersections.vertices]).reshape(-1, 3),
        uvs=np.concatenate([roads.uvs, intersections.uvs]).reshape(-1, 2),
        submeshes=(
            roads.triangles.astype(np.int64),
            (intersections.triangles + offset).astype(np.int64),
        ),
        name=name,
    )


class MeshSink(Protocol):
    """Receives every freshly built road mesh."""

    def publish(self, mesh: RoadMesh) -> None: ...


class ObjMeshSink:
    """Write published meshes to a Wavefront OBJ file and its MTL file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.mtl_path = self.path.with_suffix(".mtl")

    def publish(self, mesh: RoadMesh) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lines: List[str] = [f"mtllib {self.mtl_path.name}"]
        for x, y, z in mesh.vertices:
            lines.append(f"v {x:.6f} {y:.6f} {z:.6f}")
        for u, v in mesh.uvs:
            lines.append(f"vt {u:.6f} {v:.6f}")
        for submesh, material in enumerate(SUBMESH_NAMES):
            lines.append(f"o {mesh.name}_{material}")
            lines.append(f"usemtl {material}")
            # OBJ indices are 1-based
            for a, b, c in mesh.triangles(submesh) + 1:
                lines.append(f"f {a}/{a} {b}/{b} {c}/{c}")
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines) + "\n")

        with open(self.mtl_path, 'w', encoding='utf-8') as f:
            f.write("newmtl road\nKa 0.2 0.2 0.2\nKd 0.3 0.3 0.3\nKs 0 0 0\nd 1.0\nillum 1\n")
            f.write("newmtl intersection\nKa 0.2 0.2 0.2\nKd 0.4 0.4 0.4\nKs 0 0 0\nd 1.0\nillum 1\n")
        logger.info(f"Exported {mesh.vertex_count} vertices to {self.path}")
