"""
Tests for reading and writing OFF mesh files.
"""

import os
import sys
import numpy as np
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from meshsubdiv.errors import FormatError, MeshError, NotFoundError, ReadError
from meshsubdiv.off_format import (
    count_edges,
    format_off,
    load_named,
    load_off,
    parse_off,
    save_off,
)
from meshsubdiv.primitives import create_cube


CUBE_OFF = """OFF
# cube made of 12 triangles
8 12 18

-1 -1 -1
1 -1 -1
1 1 -1
-1 1 -1
-1 -1 1
1 -1 1
1 1 1
-1 1 1
3 0 2 1
3 0 3 2
3 4 5 6
3 4 6 7
3 0 7 3
3 0 4 7
3 1 2 6
3 1 6 5
3 0 1 5
3 0 5 4
3 3 6 2
3 3 7 6
"""


def test_parse_cube():
    mesh = parse_off(CUBE_OFF)
    assert mesh.vertex_count == 8
    assert len(mesh.indices) == 36
    assert np.allclose(mesh.vertices[6], [1, 1, 1])
    assert np.array_equal(mesh.indices[:3], [0, 2, 1])


def test_parse_sets_placeholder_normals():
    mesh = parse_off(CUBE_OFF)
    assert mesh.normals.shape == (8, 3)
    assert np.allclose(mesh.normals, [0, 0, 1])


def test_parse_quad_faces_are_not_triangulated():
    text = "OFF\n4 1 4\n0 0 0\n1 0 0\n1 1 0\n0 1 0\n4 0 1 2 3\n"
    mesh = parse_off(text)
    assert np.array_equal(mesh.indices, [0, 1, 2, 3])


def test_missing_header():
    with pytest.raises(FormatError) as excinfo:
        parse_off("3 1 3\n0 0 0\n1 0 0\n0 1 0\n3 0 1 2\n")
    assert "header" in str(excinfo.value)


def test_empty_text():
    with pytest.raises(FormatError):
        parse_off("# only a comment\n\n")


def test_short_counts_line():
    with pytest.raises(FormatError) as excinfo:
        parse_off("OFF\n3 1\n0 0 0\n1 0 0\n0 1 0\n3 0 1 2\n")
    assert excinfo.value.line == 1


def test_invalid_vertex_line_reports_index():
    text = "OFF\n3 1 3\n0 0 0\n1 0\n0 1 0\n3 0 1 2\n"
    with pytest.raises(FormatError) as excinfo:
        parse_off(text)
    assert excinfo.value.line == 1
    assert "vertex line 1" in str(excinfo.value)


def test_vertex_line_with_too_many_values():
    with pytest.raises(FormatError):
        parse_off("OFF\n1 0 0\n0 0 0 1\n")


def test_invalid_face_line_reports_index():
    text = "OFF\n3 2 3\n0 0 0\n1 0 0\n0 1 0\n3 0 1 2\n2 0 1\n"
    with pytest.raises(FormatError) as excinfo:
        parse_off(text)
    assert excinfo.value.line == 1
    assert "face line 1" in str(excinfo.value)


def test_truncated_file():
    with pytest.raises(FormatError):
        parse_off("OFF\n3 1 3\n0 0 0\n1 0 0\n")


def test_huge_vertex_count_without_lines():
    """Counts far beyond the available lines fail on the first missing vertex."""
    with pytest.raises(FormatError) as excinfo:
        parse_off("OFF\n100000000000 0 0\n")
    assert excinfo.value.line == 0
    assert "Missing vertex line 0" in str(excinfo.value)


def test_huge_face_count_without_lines():
    with pytest.raises(FormatError) as excinfo:
        parse_off("OFF\n1 100000000000 0\n0 0 0\n")
    assert "Missing face line 0" in str(excinfo.value)


def test_format_round_trip():
    """A written cube parses back to the same counts and positions."""
    cube = create_cube()
    text = format_off(cube)
    assert text.splitlines()[1] == "8 12 18"

    mesh = parse_off(text)
    assert mesh.vertex_count == 8
    assert len(mesh.indices) == 36
    assert np.allclose(mesh.vertices, cube.vertices)
    assert np.array_equal(mesh.indices, cube.indices)


def test_save_and_load(tmp_path):
    path = tmp_path / "cube.off"
    save_off(create_cube(), path)
    mesh = load_off(path)
    assert mesh.vertex_count == 8
    assert mesh.triangle_count == 12


def test_load_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        load_off(tmp_path / "missing.off")


def test_load_directory_raises_read_error(tmp_path):
    with pytest.raises(ReadError) as excinfo:
        load_off(tmp_path)
    assert isinstance(excinfo.value, MeshError)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_load_invalid_utf8_raises_format_error(tmp_path):
    path = tmp_path / "binary.off"
    path.write_bytes(b"OFF\n1 0 0\n0 0 \xff\xfe\n")
    with pytest.raises(FormatError) as excinfo:
        load_off(path)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


def test_load_named_bundled_cube():
    mesh = load_named("cube")
    assert mesh.vertex_count == 8
    assert len(mesh.indices) == 36
    assert count_edges(mesh) == 18


def test_load_named_search_paths(tmp_path):
    (tmp_path / "tri.off").write_text("OFF\n3 1 3\n0 0 0\n1 0 0\n0 1 0\n3 0 1 2\n")
    mesh = load_named("tri", search_paths=[tmp_path])
    assert mesh.triangle_count == 1


def test_load_named_not_found(tmp_path):
    with pytest.raises(NotFoundError) as excinfo:
        load_named("does_not_exist", search_paths=[tmp_path])
    assert excinfo.value.name == "does_not_exist.off"
