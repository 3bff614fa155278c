"""
Tests for the Mesh data model and its geometric utilities.
"""

import os
import sys
import numpy as np
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from meshsubdiv.errors import DegenerateInputError
from meshsubdiv.mesh import Edge, Mesh, concatenate, edge_incidence, triangle_intersects_box
from meshsubdiv.primitives import create_cube, create_tetrahedron


def create_offset_triangle():
    """Single triangle far from the origin."""
    vertices = np.array([
        [2.0, 4.0, 6.0],
        [4.0, 4.0, 6.0],
        [2.0, 8.0, 6.0],
    ])
    return Mesh(vertices=vertices, indices=[0, 1, 2])


def test_mesh_shapes():
    """Arrays are coerced to (V, 3) floats and flat integer indices."""
    mesh = Mesh(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], indices=[[0, 1, 2]])
    assert mesh.vertices.shape == (3, 3)
    assert mesh.vertices.dtype == np.float64
    assert mesh.indices.shape == (3,)
    assert mesh.vertex_count == 3
    assert mesh.triangle_count == 1
    assert np.array_equal(mesh.triangles, [[0, 1, 2]])
    assert len(mesh.normals) == 0


def test_empty_mesh():
    mesh = Mesh()
    assert mesh.vertex_count == 0
    assert mesh.triangle_count == 0
    assert mesh.triangles.shape == (0, 3)


def test_normals_must_match_vertices():
    vertices = np.zeros((3, 3))
    with pytest.raises(ValueError):
        Mesh(vertices=vertices, indices=[0, 1, 2], normals=np.zeros((2, 3)))
    # Empty or full-length normals are both accepted
    assert len(Mesh(vertices=vertices, indices=[0, 1, 2]).normals) == 0
    assert len(Mesh(vertices=vertices, indices=[0, 1, 2], normals=np.zeros((3, 3))).normals) == 3


def test_edge_incidence():
    """Two triangles sharing edge (0, 2) give one interior and four boundary edges."""
    counts = edge_incidence(np.array([[0, 1, 2], [0, 2, 3]]))
    assert len(counts) == 5
    assert counts[Edge.of(2, 0)] == 2
    assert counts[Edge(0, 1)] == 1
    assert sum(counts.values()) == 6


def test_center():
    """After centering the vertex mean is the origin."""
    mesh = create_offset_triangle()
    mesh.center()
    assert np.allclose(mesh.vertices.mean(axis=0), 0.0)


def test_normalize():
    """After normalizing the largest absolute coordinate is 1."""
    mesh = create_offset_triangle()
    mesh.normalize()
    assert np.isclose(np.max(np.abs(mesh.vertices)), 1.0)
    # Uniform scale keeps proportions
    assert np.allclose(mesh.vertices[0], np.array([2.0, 4.0, 6.0]) / 8.0)


def test_center_and_normalize_empty_mesh():
    with pytest.raises(DegenerateInputError):
        Mesh().center()
    with pytest.raises(DegenerateInputError):
        Mesh().normalize()


def test_normalize_all_at_origin():
    mesh = Mesh(vertices=np.zeros((3, 3)), indices=[0, 1, 2])
    with pytest.raises(DegenerateInputError):
        mesh.normalize()


def test_compute_normals_flat_triangle():
    """A counter-clockwise triangle in the XY plane points along +Z."""
    mesh = Mesh(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], indices=[0, 1, 2])
    mesh.compute_normals()
    assert np.allclose(mesh.normals, [[0, 0, 1]] * 3)


def test_compute_normals_unit_length_and_isolated_vertex():
    """Used vertices get unit normals, unused ones stay zero."""
    mesh = create_cube()
    vertices = np.vstack([mesh.vertices, [[5.0, 5.0, 5.0]]])
    mesh = Mesh(vertices=vertices, indices=mesh.indices)
    mesh.compute_normals()

    lengths = np.linalg.norm(mesh.normals, axis=1)
    assert np.allclose(lengths[:8], 1.0)
    assert np.allclose(mesh.normals[8], 0.0)


def test_compute_normals_skips_out_of_range_triangles():
    mesh = Mesh(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                indices=[0, 1, 2, 0, 1, 7])
    mesh.compute_normals()
    assert np.allclose(mesh.normals, [[0, 0, 1]] * 3)


def test_cube_normals_point_outward():
    mesh = create_cube()
    for vertex, normal in zip(mesh.vertices, mesh.normals):
        assert np.dot(vertex, normal) > 0


def test_valid_triangles():
    mesh = Mesh(vertices=np.zeros((3, 3)), indices=[0, 1, 2, 0, 3, 1, -1, 0, 1])
    assert np.array_equal(mesh.valid_triangles(), [[0, 1, 2]])


def test_copy_does_not_alias():
    mesh = create_tetrahedron()
    clone = mesh.copy()
    clone.vertices[0] += 10.0
    clone.indices[0] = 3
    assert not np.allclose(mesh.vertices[0], clone.vertices[0])
    assert mesh.indices[0] == 0


def test_concatenate_offsets_indices():
    a = Mesh(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], indices=[0, 1, 2])
    b = Mesh(vertices=[[0, 0, 1], [1, 0, 1], [0, 1, 1]], indices=[2, 1, 0])
    merged = concatenate([a, b])
    assert merged.vertex_count == 6
    assert np.array_equal(merged.indices, [0, 1, 2, 5, 4, 3])


def test_trimesh_round_trip():
    mesh = create_cube()
    tm = mesh.to_trimesh()
    assert len(tm.vertices) == 8
    assert len(tm.faces) == 12
    assert tm.is_watertight

    back = Mesh.from_trimesh(tm)
    assert np.allclose(back.vertices, mesh.vertices)
    assert np.array_equal(back.indices, mesh.indices)


def test_triangle_intersects_box_inside():
    """Triangle fully inside the box."""
    assert triangle_intersects_box(
        np.array([-0.1, -0.1, 0.0]), np.array([0.1, -0.1, 0.0]), np.array([0.0, 0.1, 0.0]),
        center=np.zeros(3), half_size=0.5
    )


def test_triangle_intersects_box_crossing():
    """Large triangle whose corners are all outside but which cuts the box."""
    assert triangle_intersects_box(
        np.array([-5.0, -5.0, 0.0]), np.array([5.0, -5.0, 0.0]), np.array([0.0, 5.0, 0.0]),
        center=np.zeros(3), half_size=0.5
    )


def test_triangle_intersects_box_separated_by_face_axis():
    assert not triangle_intersects_box(
        np.array([2.0, 0.0, 0.0]), np.array([3.0, 0.0, 0.0]), np.array([2.0, 1.0, 0.0]),
        center=np.zeros(3), half_size=0.5
    )


def test_triangle_intersects_box_near_corner():
    """Plane x + y + z = 2 misses the box corner (sum 1.5), x + y + z = 1 cuts it."""
    assert not triangle_intersects_box(
        np.array([2.0, 0.0, 0.0]), np.array([0.0, 2.0, 0.0]), np.array([0.0, 0.0, 2.0]),
        center=np.zeros(3), half_size=0.5
    )
    assert triangle_intersects_box(
        np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]), np.array([0.0, 0.0, 1.0]),
        center=np.zeros(3), half_size=0.5
    )


def test_triangle_intersects_box_sliver_beside_edge():
    """Sliver whose bounding box overlaps the box but which passes beside its z edge."""
    v0 = np.array([0.9, 0.4, -1.0])
    v1 = np.array([0.4, 0.9, -1.0])
    v2 = np.array([0.4, 0.9, 1.0])
    assert not triangle_intersects_box(v0, v1, v2, center=np.zeros(3), half_size=0.5)


def test_triangle_intersects_box_offset_center():
    v0, v1, v2 = np.array([10.0, 10.0, 10.0]), np.array([10.2, 10.0, 10.0]), np.array([10.0, 10.2, 10.0])
    assert triangle_intersects_box(v0, v1, v2, center=np.array([10.0, 10.0, 10.0]), half_size=0.1)
    assert not triangle_intersects_box(v0, v1, v2, center=np.zeros(3), half_size=0.1)


def test_mesh_intersects_box():
    mesh = create_cube()
    assert mesh.intersects_box(np.array([1.0, 0.0, 0.0]), 0.1)
    # Center of the hollow cube touches no face
    assert not mesh.intersects_box(np.zeros(3), 0.1)
    assert not Mesh().intersects_box(np.zeros(3), 1.0)
