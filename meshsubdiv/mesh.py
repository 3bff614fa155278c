"""
Mesh Data Model
===============

Triangle mesh container shared by every engine in the toolkit, plus the
geometric utilities that operate on it:
- centering and bounding-box normalization
- per-vertex normal generation
- triangle / axis-aligned box intersection (Separating Axis Theorem)
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Sequence, Tuple
import trimesh

from .errors import DegenerateInputError


SAT_EPSILON = 1e-6
PLACEHOLDER_NORMAL = np.array([0.0, 0.0, 1.0])


class Edge(NamedTuple):
    """Undirected edge; always stored with v0 <= v1."""
    v0: int
    v1: int

    @classmethod
    def of(cls, a: int, b: int) -> "Edge":
        a, b = int(a), int(b)
        return cls(a, b) if a <= b else cls(b, a)


def edge_incidence(triangles: np.ndarray) -> Dict[Edge, int]:
    """Count how many triangles use each undirected edge."""
    counts: Dict[Edge, int] = {}
    for i0, i1, i2 in np.asarray(triangles).reshape(-1, 3).tolist():
        for a, b in ((i0, i1), (i1, i2), (i2, i0)):
            edge = Edge.of(a, b)
            counts[edge] = counts.get(edge, 0) + 1
    return counts


def _as_vertices(values) -> np.ndarray:
    array = np.asarray(values, dtype=np.float64)
    if array.size == 0:
        return np.zeros((0, 3))
    return array.reshape(-1, 3)


def _as_indices(values) -> np.ndarray:
    array = np.asarray(values, dtype=np.int64)
    return array.reshape(-1)


@dataclass(eq=False)
class Mesh:
    """
    Indexed triangle mesh.

    Every 3 consecutive entries of ``indices`` form one triangle. ``normals``
    is either empty or parallel to ``vertices``.
    """
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    indices: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    normals: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))

    def __post_init__(self):
        self.vertices = _as_vertices(self.vertices)
        self.indices = _as_indices(self.indices)
        self.normals = _as_vertices(self.normals)
        if len(self.normals) not in (0, len(self.vertices)):
            raise ValueError(f"normals must be empty or match the {len(self.vertices)} vertices, "
                             f"got {len(self.normals)}")

    def __repr__(self) -> str:
        return (f"Mesh(vertices={self.vertex_count}, "
                f"triangles={self.triangle_count}, "
                f"normals={len(self.normals)})")

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    @property
    def triangles(self) -> np.ndarray:
        """(F, 3) view of the index array; a trailing partial triple is ignored."""
        usable = self.triangle_count * 3
        return self.indices[:usable].reshape(-1, 3)

    def valid_triangles(self) -> np.ndarray:
        """Triangles whose three corners all reference existing vertices."""
        triangles = self.triangles
        if len(triangles) == 0:
            return triangles
        in_range = np.all((triangles >= 0) & (triangles < self.vertex_count), axis=1)
        return triangles[in_range]

    def copy(self) -> "Mesh":
        return Mesh(vertices=self.vertices.copy(),
                    indices=self.indices.copy(),
                    normals=self.normals.copy())

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return the (min, max) corners of the axis-aligned bounding box."""
        if self.vertex_count == 0:
            raise DegenerateInputError("Cannot compute bounds of a mesh without vertices")
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def center(self) -> "Mesh":
        """Translate all vertices so that their centroid is the origin."""
        if self.vertex_count == 0:
            raise DegenerateInputError("Cannot center a mesh without vertices")
        self.vertices = self.vertices - self.vertices.mean(axis=0)
        return self

    def normalize(self) -> "Mesh":
        """
        Uniformly scale the mesh so the largest absolute coordinate becomes 1.

        Raises:
            DegenerateInputError: if the mesh is empty or every vertex sits
                at the origin
        """
        if self.vertex_count == 0:
            raise DegenerateInputError("Cannot normalize a mesh without vertices")
        max_coord = float(np.max(np.abs(self.vertices)))
        if max_coord == 0.0:
            raise DegenerateInputError("Cannot normalize a mesh collapsed onto the origin")
        self.vertices = self.vertices / max_coord
        return self

    def compute_normals(self) -> "Mesh":
        """
        Compute smooth per-vertex normals.

        Each triangle contributes its (area weighted) cross product to its
        three corners. The sums are averaged by incidence count and
        re-normalized; vertices used by no triangle keep a zero normal.
        Triangles with out-of-range indices are skipped.
        """
        normals = np.zeros((self.vertex_count, 3))
        counts = np.zeros(self.vertex_count, dtype=np.int64)

        triangles = self.valid_triangles()
        if len(triangles) > 0:
            a = self.vertices[triangles[:, 0]]
            b = self.vertices[triangles[:, 1]]
            c = self.vertices[triangles[:, 2]]
            face_normals = np.cross(b - a, c - a)

            for corner in range(3):
                np.add.at(normals, triangles[:, corner], face_normals)
                np.add.at(counts, triangles[:, corner], 1)

        touched = counts > 0
        normals[touched] /= counts[touched, None]
        lengths = np.linalg.norm(normals, axis=1)
        nonzero = lengths > 0
        normals[nonzero] /= lengths[nonzero, None]

        self.normals = normals
        return self

    def intersects_box(self, center: np.ndarray, half_size: float) -> bool:
        """Check whether any triangle of the mesh touches a cubical box."""
        if self.vertex_count == 0:
            return False
        for face in self.valid_triangles():
            v0, v1, v2 = self.vertices[face]
            if triangle_intersects_box(v0, v1, v2, center, half_size):
                return True
        return False

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh) -> "Mesh":
        """Build a Mesh from a trimesh object (vertex normals included)."""
        vertices = np.asarray(mesh.vertices, dtype=np.float64)
        faces = np.asarray(mesh.faces, dtype=np.int64)
        result = cls(vertices=vertices.copy(), indices=faces.reshape(-1).copy())
        if len(faces) > 0:
            result.compute_normals()
        return result

    def to_trimesh(self) -> trimesh.Trimesh:
        """Hand the geometry over to trimesh (no merging or repair)."""
        faces = self.valid_triangles()
        if len(faces) == 0:
            faces = np.zeros((0, 3), dtype=np.int64)
        return trimesh.Trimesh(vertices=self.vertices.copy(), faces=faces.copy(),
                               process=False)


def concatenate(meshes: Sequence[Mesh]) -> Mesh:
    """
    Concatenate meshes into one, offsetting each mesh's indices by the
    number of vertices that precede it.
    """
    vertices: List[np.ndarray] = []
    indices: List[np.ndarray] = []
    normals: List[np.ndarray] = []
    offset = 0
    keep_normals = all(len(m.normals) == m.vertex_count for m in meshes)

    for mesh in meshes:
        vertices.append(mesh.vertices)
        indices.append(mesh.indices + offset)
        if keep_normals:
            normals.append(mesh.normals)
        offset += mesh.vertex_count

    if not vertices:
        return Mesh()

    return Mesh(vertices=np.concatenate(vertices),
                indices=np.concatenate(indices),
                normals=np.concatenate(normals) if keep_normals else np.zeros((0, 3)))


def triangle_intersects_box(v0: np.ndarray, v1: np.ndarray, v2: np.ndarray,
                            center: np.ndarray, half_size: float,
                            eps: float = SAT_EPSILON) -> bool:
    """
    Triangle / axis-aligned cube overlap test using the Separating Axis Theorem.

    Tested axes, in order:
    - the 9 cross products of the triangle edges with the box face normals
    - the 3 box face normals
    - the triangle normal

    Axes shorter than ``eps`` are skipped.

    Args:
        v0, v1, v2: Triangle corners
        center: Box center
        half_size: Half of the box edge length

    Returns:
        True if the triangle and the box overlap
    """
    center = np.asarray(center, dtype=np.float64)

    # Move the triangle into box-local space
    t0 = np.asarray(v0, dtype=np.float64) - center
    t1 = np.asarray(v1, dtype=np.float64) - center
    t2 = np.asarray(v2, dtype=np.float64) - center

    h = np.full(3, float(half_size))

    box_normals = np.eye(3)
    for edge in (t1 - t0, t2 - t1, t0 - t2):
        for box_normal in box_normals:
            axis = np.cross(edge, box_normal)
            if np.linalg.norm(axis) < eps:
                continue
            if _separated_along(axis, t0, t1, t2, h):
                return False

    # Box face normals: compare the triangle's extent with the box
    tri_min = np.minimum(np.minimum(t0, t1), t2)
    tri_max = np.maximum(np.maximum(t0, t1), t2)
    if np.any(tri_min > h) or np.any(tri_max < -h):
        return False

    normal = np.cross(t1 - t0, t2 - t1)
    if np.linalg.norm(normal) >= eps:
        d = np.dot(normal, t0)
        r = np.dot(h, np.abs(normal))
        if abs(d) > r:
            return False

    return True


def _separated_along(axis: np.ndarray, t0: np.ndarray, t1: np.ndarray,
                     t2: np.ndarray, h: np.ndarray) -> bool:
    """Project triangle and box onto an axis and test for a gap."""
    p0 = np.dot(t0, axis)
    p1 = np.dot(t1, axis)
    p2 = np.dot(t2, axis)
    r = np.dot(h, np.abs(axis))
    return min(p0, p1, p2) > r or max(p0, p1, p2) < -r
