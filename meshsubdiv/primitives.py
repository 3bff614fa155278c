"""
Primitive Meshes
================

Built-in test geometry and mesh inspection helpers.
"""

from enum import Enum
import numpy as np
import trimesh

from .mesh import Mesh, edge_incidence


class MeshType(str, Enum):
    """Starting geometry selectable by the subdivision demo."""
    TETRAHEDRON = "tetrahedron"
    CUBE = "cube"


def create_tetrahedron() -> Mesh:
    """Four-vertex tetrahedron, centered and normalized (every valence is 3)."""
    vertices = np.array([
        [ 0.0,  1.0,  0.0],
        [-1.0, -0.5,  1.0],
        [ 1.0, -0.5,  1.0],
        [ 0.0, -0.5, -1.0],
    ])
    indices = np.array([
        0, 1, 2,  # front
        0, 2, 3,  # right
        0, 3, 1,  # left
        1, 3, 2,  # bottom
    ])
    mesh = Mesh(vertices=vertices, indices=indices)
    mesh.center()
    mesh.normalize()
    return mesh


def create_cube(size: float = 1.0) -> Mesh:
    """
    Axis-aligned cube with 8 vertices and 12 triangles.

    The cube is centered and normalized, so ``size`` only matters
    before normalization.
    """
    h = size / 2.0
    vertices = np.array([
        [-h, -h, -h],
        [ h, -h, -h],
        [ h,  h, -h],
        [-h,  h, -h],
        [-h, -h,  h],
        [ h, -h,  h],
        [ h,  h,  h],
        [-h,  h,  h],
    ])
    indices = np.array([
        0, 2, 1, 0, 3, 2,
        4, 5, 6, 4, 6, 7,
        0, 7, 3, 0, 4, 7,
        1, 2, 6, 1, 6, 5,
        0, 1, 5, 0, 5, 4,
        3, 6, 2, 3, 7, 6,
    ])
    mesh = Mesh(vertices=vertices, indices=indices)
    mesh.center()
    mesh.normalize()
    mesh.compute_normals()
    return mesh


def create_sample_mesh(mesh_type: str = "tetrahedron") -> Mesh:
    """
    Create a sample mesh for testing.

    Args:
        mesh_type: Type of mesh to create:
            - "tetrahedron": 4 vertices, 4 triangles
            - "cube": 8 vertices, 12 triangles
            - "sphere": icosphere
            - "torus": Torus

    Returns:
        Generated mesh
    """
    if mesh_type == "cube":
        mesh = create_cube()
    elif mesh_type == "sphere":
        mesh = Mesh.from_trimesh(trimesh.creation.icosphere(subdivisions=2, radius=1.0))
    elif mesh_type == "torus":
        mesh = Mesh.from_trimesh(trimesh.creation.torus(major_radius=1.0, minor_radius=0.3,
                                                        major_sections=32, minor_sections=16))
    else:
        mesh = create_tetrahedron()

    print(f"Created {mesh_type} mesh: {mesh.vertex_count} vertices, "
          f"{mesh.triangle_count} faces")
    return mesh


def get_mesh_info(mesh: Mesh) -> dict:
    """
    Get comprehensive information about a mesh.

    Args:
        mesh: Input mesh

    Returns:
        Dictionary of mesh properties
    """
    info = {
        'vertices': mesh.vertex_count,
        'faces': mesh.triangle_count,
        'invalid_faces': mesh.triangle_count - len(mesh.valid_triangles()),
        'has_normals': len(mesh.normals) == mesh.vertex_count and mesh.vertex_count > 0,
    }

    if mesh.vertex_count > 0:
        lo, hi = mesh.bounds()
        info['bounds'] = [lo.tolist(), hi.tolist()]
        info['centroid'] = mesh.vertices.mean(axis=0).tolist()
    else:
        info['bounds'] = 'N/A'
        info['centroid'] = 'N/A'

    edge_count = edge_incidence(mesh.valid_triangles())
    info['edges'] = len(edge_count)
    info['boundary_edges'] = sum(1 for count in edge_count.values() if count == 1)
    info['is_closed'] = bool(edge_count) and info['boundary_edges'] == 0
    info['euler_number'] = info['vertices'] - info['edges'] + info['faces']

    return info


def print_mesh_info(mesh: Mesh, name: str = "Mesh"):
    """
    Print mesh information to console.

    Args:
        mesh: Input mesh
        name: Name to display
    """
    info = get_mesh_info(mesh)

    print(f"\n{name} Information:")
    print("-" * 40)
    print(f"  Vertices:        {info['vertices']}")
    print(f"  Faces:           {info['faces']}")
    print(f"  Edges:           {info['edges']}")
    print(f"  Boundary Edges:  {info['boundary_edges']}")
    print(f"  Closed:          {info['is_closed']}")
    print(f"  Euler Number:    {info['euler_number']}")
    print(f"  Invalid Faces:   {info['invalid_faces']}")
