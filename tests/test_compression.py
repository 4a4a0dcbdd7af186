import pytest

from edgebreaker.compression import HalfEdges, compress
from edgebreaker.model import EdgeBreakerError
from edgebreaker.ops import Op

TETRAHEDRON = [(1, 2, 3), (1, 3, 4), (1, 4, 2), (2, 4, 3)]
SQUARE = [(1, 2, 3), (1, 3, 4)]


def test_tetrahedron_opposites_are_symmetric():
    he = HalfEdges(4, TETRAHEDRON)
    for h in range(1, 13):
        g = he.o[h]
        assert g != 0
        assert he.o[g] == h
        assert he.s[h] == he.e[g]
        assert he.e[h] == he.s[g]


def test_closed_mesh_has_no_boundary():
    he = HalfEdges(4, TETRAHEDRON)
    assert all(x == 0 for x in he.n[1:])
    assert all(x == 0 for x in he.p[1:])
    assert he.conflicts == {}


def test_single_triangle_boundary_loop():
    he = HalfEdges(3, [(1, 2, 3)])
    assert he.o[1:] == [0, 0, 0]
    for h in range(1, 4):
        assert he.p[he.n[h]] == h
        assert he.e[h] == he.s[he.n[h]]


def test_square_boundary_is_one_loop():
    he = HalfEdges(4, SQUARE)
    start = next(h for h in range(1, 7) if he.n[h])
    loop = [start]
    h = he.n[start]
    while h != start:
        loop.append(h)
        h = he.n[h]
    assert len(loop) == 4
    assert sorted(he.s[h] for h in loop) == [1, 2, 3, 4]


def test_non_manifold_edge_is_counted():
    he = HalfEdges(5, [(1, 2, 3), (2, 1, 4), (1, 2, 5)])
    assert he.conflicts == {(1, 2): 1}


def test_vertex_out_of_range_raises():
    with pytest.raises(EdgeBreakerError):
        HalfEdges(3, [(1, 2, 4)])


def test_zero_vertex_index_raises():
    with pytest.raises(EdgeBreakerError):
        HalfEdges(3, [(0, 1, 2)])


def test_non_triangle_face_raises():
    with pytest.raises(EdgeBreakerError):
        HalfEdges(4, [(1, 2, 3, 4)])


def test_empty_mesh_cannot_be_compressed():
    with pytest.raises(EdgeBreakerError):
        compress(HalfEdges(3, []))


def test_single_triangle_compresses_to_end():
    eb = compress(HalfEdges(3, [(1, 2, 3)]))
    assert eb.history == [Op.E]
    assert sorted(eb.previous) == [1, 2, 3]
    assert eb.lengths == []
    assert eb.m_table == []


def test_tetrahedron_history():
    eb = compress(HalfEdges(4, TETRAHEDRON))
    assert eb.history == [Op.C, Op.C, Op.R, Op.E]
    assert sorted(eb.previous) == [1, 2, 3, 4]


@pytest.mark.parametrize(
    "vertex_count, faces",
    [
        (3, [(1, 2, 3)]),
        (4, SQUARE),
        (4, TETRAHEDRON),
        (6, [(1, 2, 3), (4, 5, 6)]),
        (5, [(1, 2, 3), (1, 3, 4), (1, 4, 5)]),
    ],
)
def test_one_operation_per_triangle(vertex_count, faces):
    eb = compress(HalfEdges(vertex_count, faces))
    assert len(eb.history) == len(faces)
    assert sorted(eb.previous) == list(range(1, vertex_count + 1))


def test_two_components_visit_every_vertex():
    eb = compress(HalfEdges(6, [(1, 2, 3), (4, 5, 6)]))
    assert eb.history.count(Op.E) == 2
    assert set(eb.previous[:3]) == {1, 2, 3}
    assert set(eb.previous[3:]) == {4, 5, 6}


def test_square_uses_no_side_tables():
    eb = compress(HalfEdges(4, SQUARE))
    assert eb.history[-1] == Op.E
    assert eb.lengths == []
    assert eb.m_table == []