import io

import pytest

from edgebreaker.codec import compress_obj, decompress_obj
from edgebreaker.model import EdgeBreakerError
from edgebreaker.objfile import Obj
from edgebreaker.ops import Op

QUAD_VERTICES = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)]
QUAD_FACES = [(1, 2, 3), (1, 3, 4)]

STRIP_VERTICES = [
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (1.0, 1.0, 0.0),
    (0.0, 2.0, 0.0),
]
STRIP_FACES = [(1, 2, 3), (2, 4, 3), (3, 4, 5)]

TRIANGLE_VERTICES = [(0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (0.0, 3.0, 1.5)]
TRIANGLE_FACES = [(1, 2, 3)]

MESHES = [
    (TRIANGLE_VERTICES, TRIANGLE_FACES),
    (QUAD_VERTICES, QUAD_FACES),
    (STRIP_VERTICES, STRIP_FACES),
]


def _triangles(obj):
    result = []
    for face in obj.faces:
        points = [obj.vertices[i - 1] for i in face]
        k = points.index(min(points))
        result.append(tuple(points[k:] + points[:k]))
    return sorted(result)


def _mesh(vertices, faces):
    return Obj(vertices=list(vertices), faces=list(faces))


@pytest.mark.parametrize("vertices, faces", MESHES)
def test_round_trip_preserves_triangles(vertices, faces):
    original = _mesh(vertices, faces)
    obj = _mesh(vertices, faces)
    compress_obj(obj)
    decompress_obj(obj)
    assert _triangles(obj) == _triangles(original)
    assert obj.eb_history == []
    assert obj.eb_table == []
    assert obj.eb_dup == []


@pytest.mark.parametrize("vertices, faces", MESHES)
def test_round_trip_through_text(vertices, faces):
    original = _mesh(vertices, faces)
    obj = _mesh(vertices, faces)
    compress_obj(obj)
    buffer = io.StringIO()
    obj.write(buffer)
    assert "\nf " not in "\n" + buffer.getvalue()
    restored = Obj.read(io.StringIO(buffer.getvalue()))
    decompress_obj(restored)
    assert _triangles(restored) == _triangles(original)


@pytest.mark.parametrize("vertices, faces", MESHES)
def test_compress_reorders_vertices_and_drops_faces(vertices, faces):
    obj = _mesh(vertices, faces)
    compress_obj(obj)
    assert obj.faces == []
    assert sorted(obj.vertices) == sorted(vertices)
    assert len(obj.eb_history) == len(faces)
    assert obj.eb_history[-1] is Op.E


def test_quad_history():
    obj = _mesh(QUAD_VERTICES, QUAD_FACES)
    compress_obj(obj)
    assert obj.eb_history == [Op.R, Op.E]


def test_strip_history():
    obj = _mesh(STRIP_VERTICES, STRIP_FACES)
    compress_obj(obj)
    assert obj.eb_history == [Op.L, Op.R, Op.E]
    assert obj.eb_table == []
    assert obj.eb_dup == []


def test_compress_without_faces_is_rejected():
    with pytest.raises(EdgeBreakerError):
        compress_obj(_mesh(QUAD_VERTICES, []))


def test_compress_with_missing_vertex_is_rejected():
    with pytest.raises(EdgeBreakerError):
        compress_obj(_mesh(QUAD_VERTICES, [(1, 2, 9)]))


def test_decompress_without_history_is_rejected():
    with pytest.raises(EdgeBreakerError):
        decompress_obj(_mesh(QUAD_VERTICES, []))


def test_decompress_with_excess_duplicates_is_rejected():
    obj = Obj(vertices=[(0.0, 0.0, 0.0)], eb_history=[Op.E], eb_dup=[(2, 0)])
    with pytest.raises(EdgeBreakerError):
        decompress_obj(obj)