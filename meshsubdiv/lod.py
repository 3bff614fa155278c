"""
Level of Detail by Voxel Clustering
===================================

Grid-based simplification of one or more meshes:

1. The meshes are centered, and scaled together into [-1, 1]
2. Their combined bounding box is split into S x S x S voxels
3. Each voxel is replaced by the centroid of the vertices it contains
   (or by its own center when empty)
4. Triangles are remapped onto voxel vertices; collapsed ones are dropped

A subdivision count of -1 disables clustering and simply merges the inputs.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from .mesh import Mesh, concatenate


PASS_THROUGH = -1


@dataclass
class Voxel:
    """One grid cell with the vertices that fell inside it."""
    grid_index: Tuple[int, int, int]
    center: np.ndarray
    half_size: float
    vertices: List[np.ndarray] = field(default_factory=list)

    @property
    def representative(self) -> np.ndarray:
        """Centroid of the accumulated vertices, or the cell center if empty."""
        if not self.vertices:
            return self.center.copy()
        return np.mean(self.vertices, axis=0)


class VoxelGrid:
    """
    Uniform S x S x S grid over a bounding box.

    Voxels live in a flat list indexed by ``ix + S * iy + S * S * iz``.
    """

    def __init__(self, bounds_min: np.ndarray, bounds_max: np.ndarray,
                 subdivisions: int):
        if subdivisions < 1:
            raise ValueError(f"subdivisions must be >= 1, got {subdivisions}")

        self.subdivisions = subdivisions
        self.bounds_min = np.asarray(bounds_min, dtype=np.float64)
        self.bounds_max = np.asarray(bounds_max, dtype=np.float64)
        self.voxel_size = (self.bounds_max - self.bounds_min) / subdivisions

        s = subdivisions
        half_size = float(np.max(self.voxel_size)) * 0.5
        self.voxels: List[Voxel] = [None] * (s ** 3)
        for iz in range(s):
            for iy in range(s):
                for ix in range(s):
                    center = self.bounds_min + (np.array([ix, iy, iz]) + 0.5) * self.voxel_size
                    self.voxels[self.linear_index((ix, iy, iz))] = Voxel(
                        grid_index=(ix, iy, iz), center=center, half_size=half_size
                    )

    def __len__(self) -> int:
        return len(self.voxels)

    def linear_index(self, cell: Tuple[int, int, int]) -> int:
        s = self.subdivisions
        ix, iy, iz = cell
        return ix + s * iy + s * s * iz

    def cell_of(self, point: np.ndarray) -> Tuple[int, int, int]:
        """
        Grid coordinate of a point, floor((p - min) / size) clamped to [0, S-1].

        Axes with zero extent map to cell 0.
        """
        offset = np.asarray(point, dtype=np.float64) - self.bounds_min
        with np.errstate(divide='ignore', invalid='ignore'):
            raw = np.where(self.voxel_size > 0, offset / self.voxel_size, 0.0)
        cell = np.clip(np.floor(raw), 0, self.subdivisions - 1).astype(np.int64)
        return int(cell[0]), int(cell[1]), int(cell[2])

    def voxel_at(self, point: np.ndarray) -> Voxel:
        return self.voxels[self.linear_index(self.cell_of(point))]

    def add(self, point: np.ndarray):
        self.voxel_at(point).vertices.append(np.asarray(point, dtype=np.float64))


def combined_bounds(meshes: Sequence[Mesh]) -> Tuple[np.ndarray, np.ndarray]:
    """Bounding box enclosing the vertices of every mesh."""
    populated = [m.vertices for m in meshes if m.vertex_count > 0]
    if not populated:
        return np.zeros(3), np.zeros(3)
    stacked = np.concatenate(populated)
    return stacked.min(axis=0), stacked.max(axis=0)


def normalize_meshes(meshes: Sequence[Mesh]) -> Tuple[List[Mesh], np.ndarray, np.ndarray]:
    """
    Center each mesh, then fit all of them into [-1, 1] with one shared scale.

    Args:
        meshes: Source meshes (left untouched)

    Returns:
        Tuple of (normalized copies, combined bbox min, combined bbox max)
    """
    normalized = [m.copy() for m in meshes]
    for mesh in normalized:
        if mesh.vertex_count > 0:
            mesh.center()

    bbox_min, bbox_max = combined_bounds(normalized)
    max_extent = float(np.max(bbox_max - bbox_min))

    if max_extent > 0:
        scale = 2.0 / max_extent
        center = (bbox_min + bbox_max) * 0.5
        for mesh in normalized:
            mesh.vertices = (mesh.vertices - center) * scale

    bbox_min, bbox_max = combined_bounds(normalized)
    return normalized, bbox_min, bbox_max


class LODDecimator:
    """
    Voxel clustering decimator.

    The grid and normalized inputs of the last run are kept on the instance
    so a renderer can draw the bounding box and its grid.
    """

    def __init__(self, subdivisions: int = 1, verbose: bool = False):
        """
        Initialize the decimator.

        Args:
            subdivisions: Voxels per axis, or -1 to merge without clustering
            verbose: Print a summary of every run
        """
        if subdivisions != PASS_THROUGH and subdivisions < 1:
            raise ValueError(
                f"subdivisions must be >= 1 or {PASS_THROUGH}, got {subdivisions}"
            )
        self.subdivisions = subdivisions
        self.verbose = verbose

        self.grid: Optional[VoxelGrid] = None
        self.normalized_meshes: List[Mesh] = []
        self.bounds_min: np.ndarray = np.zeros(3)
        self.bounds_max: np.ndarray = np.zeros(3)

    def decimate(self, meshes: Union[Mesh, Sequence[Mesh]]) -> Mesh:
        """
        Build a single simplified mesh from the inputs.

        Args:
            meshes: One mesh or a list of meshes

        Returns:
            New decimated mesh (or merged mesh in pass-through mode)
        """
        if isinstance(meshes, Mesh):
            meshes = [meshes]
        meshes = list(meshes)

        if self.subdivisions == PASS_THROUGH:
            result = self._merge(meshes)
        else:
            result = self._cluster(meshes)

        if self.verbose:
            input_vertices = sum(m.vertex_count for m in meshes)
            input_faces = sum(m.triangle_count for m in meshes)
            print(f"LOD (subdivisions={self.subdivisions}): "
                  f"{input_vertices} -> {result.vertex_count} vertices, "
                  f"{input_faces} -> {result.triangle_count} faces")

        return result

    def _merge(self, meshes: List[Mesh]) -> Mesh:
        """Pass-through: concatenate geometry with index offsets."""
        self.grid = None
        self.normalized_meshes = []
        merged = concatenate(meshes)
        return Mesh(vertices=merged.vertices, indices=merged.indices)

    def _cluster(self, meshes: List[Mesh]) -> Mesh:
        normalized, self.bounds_min, self.bounds_max = normalize_meshes(meshes)
        self.normalized_meshes = normalized

        if all(m.vertex_count == 0 for m in normalized):
            self.grid = None
            return Mesh()

        grid = VoxelGrid(self.bounds_min, self.bounds_max, self.subdivisions)
        self.grid = grid

        for mesh in normalized:
            for vertex in mesh.vertices:
                grid.add(vertex)

        # Every voxel yields a representative point, so output vertex i is voxel i
        vertices = np.array([voxel.representative for voxel in grid.voxels])

        indices = []
        for mesh in normalized:
            for face in mesh.valid_triangles():
                a, b, c = (grid.linear_index(grid.cell_of(mesh.vertices[vi])) for vi in face)
                # Collapsed triangle
                if a == b or a == c or b == c:
                    continue
                indices.extend([a, b, c])

        return Mesh(vertices=vertices, indices=np.array(indices, dtype=np.int64))

    def occupied_voxels(self, mesh: Optional[Mesh] = None) -> List[Voxel]:
        """
        Voxels of the last grid whose box touches a triangle of ``mesh``.

        Defaults to the normalized inputs of the last run.
        """
        if self.grid is None:
            return []
        meshes = [mesh] if mesh is not None else self.normalized_meshes
        return [
            voxel for voxel in self.grid.voxels
            if any(m.intersects_box(voxel.center, voxel.half_size) for m in meshes)
        ]


def decimate(meshes: Union[Mesh, Sequence[Mesh]], subdivisions: int) -> Mesh:
    """Functional shortcut for ``LODDecimator(subdivisions).decimate(meshes)``."""
    return LODDecimator(subdivisions=subdivisions).decimate(meshes)
