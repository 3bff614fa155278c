"""
Loop Subdivision
================

Subdivision-surface refinement of triangle meshes. Each pass splits every
triangle into four and smooths the result:

- existing ("odd") vertices move toward their 1-ring using the Loop weight β
- every undirected edge gets one new ("even") vertex, weighted by the two
  opposite vertices on interior edges or placed at the midpoint on
  boundary edges

Based on: "Smooth Subdivision Surfaces Based on Triangles"
by Charles Loop (Master's thesis, University of Utah, 1987)
"""

import math
import numpy as np
from typing import Dict, List, Optional, Set, Union

from .errors import MeshError
from .mesh import Edge, Mesh
from .off_format import load_named
from .primitives import MeshType, create_tetrahedron


def loop_beta(n: int) -> float:
    """
    Loop smoothing weight for a vertex of valence n.

    β = 3/16 for n == 3, otherwise (1/n) (5/8 - (3/8 + 1/4 cos(2π/n))^2).
    Isolated vertices (n == 0) get no weight.
    """
    if n <= 0:
        return 0.0
    if n == 3:
        return 3.0 / 16.0
    temp = 3.0 / 8.0 + 0.25 * math.cos(2.0 * math.pi / n)
    return (1.0 / n) * (5.0 / 8.0 - temp * temp)


class LoopSubdivider:
    """
    Loop subdivision engine.

    Every pass allocates its own adjacency structures and returns a new
    Mesh; the input mesh is never modified.
    """

    def __init__(self, compute_normals: bool = True, verbose: bool = False):
        """
        Initialize the subdivider.

        Args:
            compute_normals: Recompute smooth normals after the last pass
            verbose: Print per-pass statistics
        """
        self.compute_normals = compute_normals
        self.verbose = verbose

        # State variables (rebuilt per pass)
        self._vertices: Optional[np.ndarray] = None
        self._triangles: Optional[np.ndarray] = None
        self._vertex_triangles: Optional[Dict[int, List[int]]] = None
        self._vertex_neighbors: Optional[Dict[int, Set[int]]] = None
        self._edge_triangles: Optional[Dict[Edge, List[int]]] = None
        self._edge_to_midpoint: Optional[Dict[Edge, int]] = None

    def subdivide(self, mesh: Mesh, iterations: int = 1) -> Mesh:
        """
        Apply ``iterations`` Loop passes.

        Args:
            mesh: Input triangle mesh
            iterations: Number of passes, >= 0

        Returns:
            New subdivided mesh
        """
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")

        result = mesh.copy()
        for level in range(iterations):
            before_vertices, before_faces = result.vertex_count, result.triangle_count
            result = self.subdivide_once(result)
            if self.verbose:
                print(f"Loop pass {level + 1}: {before_vertices} -> {result.vertex_count} vertices, "
                      f"{before_faces} -> {result.triangle_count} faces")

        if self.compute_normals:
            result.compute_normals()

        return result

    def subdivide_once(self, mesh: Mesh) -> Mesh:
        """Perform a single Loop pass and return the refined mesh."""
        self._initialize(mesh)

        if len(self._triangles) == 0:
            return Mesh()

        odd_vertices = self._compute_odd_vertices()
        even_vertices = self._compute_even_vertices(len(odd_vertices))
        indices = self._build_triangles()

        if even_vertices:
            vertices = np.vstack([odd_vertices, np.array(even_vertices)])
        else:
            vertices = odd_vertices

        return Mesh(vertices=vertices, indices=indices)

    def _initialize(self, mesh: Mesh):
        """Build vertex and edge adjacency for one pass."""
        self._vertices = mesh.vertices
        self._triangles = mesh.valid_triangles()

        self._vertex_triangles = {}
        self._vertex_neighbors = {}
        self._edge_triangles = {}
        self._edge_to_midpoint = {}

        for ti, (i0, i1, i2) in enumerate(self._triangles.tolist()):
            for vi in (i0, i1, i2):
                self._vertex_triangles.setdefault(vi, []).append(ti)

            for a, b in ((i0, i1), (i1, i2), (i2, i0)):
                if a == b:
                    continue
                self._vertex_neighbors.setdefault(a, set()).add(b)
                self._vertex_neighbors.setdefault(b, set()).add(a)

                # A triangle is recorded at most once per edge
                incident = self._edge_triangles.setdefault(Edge.of(a, b), [])
                if not incident or incident[-1] != ti:
                    incident.append(ti)

    def _compute_odd_vertices(self) -> np.ndarray:
        """Reposition original vertices with the Loop weights."""
        odd = self._vertices.copy()

        for vi, neighbors in self._vertex_neighbors.items():
            n = len(neighbors)
            if n == 0:
                continue
            beta = loop_beta(n)
            neighbor_sum = self._vertices[list(neighbors)].sum(axis=0)
            odd[vi] = self._vertices[vi] * (1.0 - n * beta) + neighbor_sum * beta

        return odd

    def _compute_even_vertices(self, first_index: int) -> List[np.ndarray]:
        """Create one vertex per undirected edge, in first-discovery order."""
        even = []

        for i0, i1, i2 in self._triangles.tolist():
            for a, b in ((i0, i1), (i1, i2), (i2, i0)):
                edge = Edge.of(a, b)
                if edge in self._edge_to_midpoint:
                    continue
                self._edge_to_midpoint[edge] = first_index + len(even)
                even.append(self._edge_point(edge))

        return even

    def _edge_point(self, edge: Edge) -> np.ndarray:
        """Position of the new vertex inserted on an edge."""
        p0 = self._vertices[edge.v0]
        p1 = self._vertices[edge.v1]

        opposites = self._opposite_vertices(edge)
        if len(opposites) == 2:
            # Interior edge: 3/8 (p0 + p1) + 1/8 (opp0 + opp1)
            o0 = self._vertices[opposites[0]]
            o1 = self._vertices[opposites[1]]
            return (p0 + p1) * 0.375 + (o0 + o1) * 0.125

        # Boundary (or non-manifold) edge: plain midpoint
        return (p0 + p1) * 0.5

    def _opposite_vertices(self, edge: Edge) -> List[int]:
        """Third vertex of every triangle sharing the edge."""
        opposites = []
        for ti in self._edge_triangles.get(edge, []):
            remaining = set(self._triangles[ti].tolist()) - {edge.v0, edge.v1}
            if remaining:
                opposites.append(remaining.pop())
        return opposites

    def _build_triangles(self) -> np.ndarray:
        """Emit the 4 child triangles of every input triangle."""
        indices = []
        midpoint = self._edge_to_midpoint

        for v0, v1, v2 in self._triangles.tolist():
            m01 = midpoint[Edge.of(v0, v1)]
            m12 = midpoint[Edge.of(v1, v2)]
            m20 = midpoint[Edge.of(v2, v0)]

            # Corner triangles
            indices.extend([v0, m01, m20])
            indices.extend([v1, m12, m01])
            indices.extend([v2, m20, m12])

            # Center triangle
            indices.extend([m01, m12, m20])

        return np.array(indices, dtype=np.int64)


def initial_mesh(mesh_type: Union[MeshType, str] = MeshType.TETRAHEDRON) -> Mesh:
    """
    Build the starting mesh for a subdivision run.

    The cube is read from the bundled OFF file, then centered and
    normalized; if loading fails the tetrahedron is used instead.
    """
    mesh_type = MeshType(mesh_type)
    if mesh_type is MeshType.CUBE:
        try:
            mesh = load_named("cube")
            mesh.center()
            mesh.normalize()
            return mesh
        except MeshError as e:
            print(f"Error loading cube mesh: {e}")
    return create_tetrahedron()


def loop_subdivision(iterations: int,
                     mesh_type: Union[MeshType, str] = MeshType.TETRAHEDRON,
                     verbose: bool = False) -> Mesh:
    """Subdivide one of the built-in meshes ``iterations`` times (with normals)."""
    subdivider = LoopSubdivider(compute_normals=True, verbose=verbose)
    return subdivider.subdivide(initial_mesh(mesh_type), iterations)
