"""
OFF Mesh Format
===============

Reader and writer for the line-oriented OFF text format:

    OFF
    <vertexCount> <faceCount> <edgeCount>
    <x> <y> <z>                     x vertexCount
    <n> <i0> <i1> ... <i(n-1)>      x faceCount

Blank lines and lines starting with '#' are ignored. Faces are not
triangulated: all indices after the per-face count are appended flat.
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union
import numpy as np

from .errors import FormatError, NotFoundError, ReadError
from .mesh import Mesh, PLACEHOLDER_NORMAL, edge_incidence


OFF_HEADER = "OFF"
DATA_DIR = Path(__file__).parent / "data"

PathLike = Union[str, os.PathLike]


def _parse_ints(line: str) -> List[int]:
    values = []
    for token in line.split():
        try:
            values.append(int(token))
        except ValueError:
            continue
    return values


def _parse_floats(line: str) -> List[float]:
    values = []
    for token in line.split():
        try:
            values.append(float(token))
        except ValueError:
            continue
    return values


def parse_off(text: str) -> Mesh:
    """
    Parse OFF text into a new Mesh.

    Args:
        text: Full file content

    Returns:
        Parsed mesh; normals hold a placeholder (0, 0, 1) per vertex

    Raises:
        FormatError: on a missing header, a short counts line, or a
            malformed / missing vertex or face line
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line and not line.startswith("#")]

    if not lines or lines[0] != OFF_HEADER:
        raise FormatError("Missing OFF header", line=0)

    if len(lines) < 2:
        raise FormatError("Missing counts line", line=1)
    counts = _parse_ints(lines[1])
    if len(counts) < 3:
        raise FormatError("Invalid counts line", line=1)

    vertex_count, face_count = counts[0], counts[1]
    if vertex_count < 0 or face_count < 0:
        raise FormatError("Invalid counts line", line=1)

    cursor = 2
    # Built from the lines actually present
    vertices: List[List[float]] = []
    for i in range(vertex_count):
        if cursor >= len(lines):
            raise FormatError(f"Missing vertex line {i}", line=i)
        parts = _parse_floats(lines[cursor])
        if len(parts) != 3:
            raise FormatError(f"Invalid vertex line {i}", line=i)
        vertices.append(parts)
        cursor += 1

    indices: List[int] = []
    for i in range(face_count):
        if cursor >= len(lines):
            raise FormatError(f"Missing face line {i}", line=i)
        parts = _parse_ints(lines[cursor])
        if len(parts) < 4:
            raise FormatError(f"Invalid face line {i}", line=i)
        indices.extend(parts[1:])
        cursor += 1

    normals = np.tile(PLACEHOLDER_NORMAL, (vertex_count, 1))
    return Mesh(vertices=np.array(vertices, dtype=np.float64).reshape(-1, 3),
                indices=np.array(indices, dtype=np.int64),
                normals=normals)


def load_off(path: PathLike) -> Mesh:
    """
    Read and parse an OFF file in a single pass.

    Raises:
        NotFoundError: if the file does not exist
        ReadError: if the path cannot be read (directory, permissions)
        FormatError: if the content is not valid UTF-8 OFF text
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            content = handle.read()
    except FileNotFoundError as e:
        raise NotFoundError(str(path)) from e
    except UnicodeDecodeError as e:
        raise FormatError(f"{path} is not valid UTF-8 text") from e
    except OSError as e:
        raise ReadError(f"Cannot read {path}: {e.strerror or e}") from e
    return parse_off(content)


def count_edges(mesh: Mesh) -> int:
    """Number of distinct undirected edges of the triangles of a mesh."""
    return len(edge_incidence(mesh.triangles))


def format_off(mesh: Mesh) -> str:
    """Serialize a triangle mesh to OFF text."""
    lines = [OFF_HEADER,
             f"{mesh.vertex_count} {mesh.triangle_count} {count_edges(mesh)}"]
    for x, y, z in mesh.vertices:
        lines.append(f"{x:.9g} {y:.9g} {z:.9g}")
    for a, b, c in mesh.triangles:
        lines.append(f"3 {a} {b} {c}")
    return "\n".join(lines) + "\n"


def save_off(mesh: Mesh, path: PathLike):
    """Write a triangle mesh to an OFF file."""
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(format_off(mesh))


def load_named(name: str, ext: str = "off",
               search_paths: Optional[Iterable[PathLike]] = None) -> Mesh:
    """
    Resolve a logical mesh name (e.g. "cube") to a file and parse it.

    Args:
        name: Resource name without extension
        ext: File extension
        search_paths: Directories to look in (default: bundled data)

    Raises:
        NotFoundError: if no directory contains ``<name>.<ext>``
    """
    directories = [Path(p) for p in search_paths] if search_paths else [DATA_DIR]
    filename = f"{name}.{ext}" if ext else name

    for directory in directories:
        candidate = directory / filename
        if candidate.is_file():
            return load_off(candidate)

    raise NotFoundError(filename, directories)
