"""
Subdivision and Level-of-Detail Mesh Toolkit
============================================

Geometry processing on triangle meshes and polylines:
- Chaikin corner cutting for open polylines
- Loop subdivision surfaces for triangle meshes
- Voxel clustering decimation for level of detail
"""

from .errors import MeshError, FormatError, NotFoundError, DegenerateInputError, ReadError
from .mesh import Edge, Mesh, concatenate, edge_incidence, triangle_intersects_box
from .off_format import parse_off, load_off, format_off, save_off, load_named
from .chaikin import chaikin_subdivide, chaikin_curve
from .loop import LoopSubdivider, loop_beta, loop_subdivision
from .lod import Voxel, VoxelGrid, LODDecimator, decimate
from .primitives import MeshType, create_cube, create_tetrahedron

__version__ = "1.0.0"
__all__ = [
    "MeshError", "FormatError", "NotFoundError", "DegenerateInputError", "ReadError",
    "Edge", "Mesh", "concatenate", "edge_incidence", "triangle_intersects_box",
    "parse_off", "load_off", "format_off", "save_off", "load_named",
    "chaikin_subdivide", "chaikin_curve",
    "LoopSubdivider", "loop_beta", "loop_subdivision",
    "Voxel", "VoxelGrid", "LODDecimator", "decimate",
    "MeshType", "create_cube", "create_tetrahedron",
]
