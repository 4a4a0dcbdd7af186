import pytest

from edgebreaker.decompression import decompress
from edgebreaker.model import EdgeBreaker, EdgeBreakerError
from edgebreaker.ops import Op


def test_single_triangle():
    eb = EdgeBreaker(history=[Op.E], previous=[1, 2, 3])
    assert decompress(eb) == [(3, 1, 2)]


def test_strip_of_three_triangles():
    eb = EdgeBreaker(history=[Op.L, Op.R, Op.E], previous=[1, 2, 3, 4, 5])
    assert decompress(eb) == [(5, 1, 4), (4, 1, 2), (4, 2, 3)]


def test_face_count_matches_history():
    eb = EdgeBreaker(history=[Op.R, Op.E], previous=[1, 2, 3, 4])
    faces = decompress(eb)
    assert len(faces) == 2
    assert {v for face in faces for v in face} == {1, 2, 3, 4}


def test_previous_relabels_vertices():
    history = [Op.L, Op.R, Op.E]
    identity = decompress(EdgeBreaker(history=history, previous=[1, 2, 3, 4, 5]))
    order = [10, 20, 30, 40, 50]
    relabelled = decompress(EdgeBreaker(history=history, previous=order))
    assert relabelled == [tuple(order[v - 1] for v in face) for face in identity]


def test_input_is_not_modified():
    eb = EdgeBreaker(history=[Op.R, Op.E], previous=[1, 2, 3, 4])
    decompress(eb)
    assert eb.history == [Op.R, Op.E]
    assert eb.previous == [1, 2, 3, 4]


def test_empty_history_is_rejected():
    with pytest.raises(EdgeBreakerError):
        decompress(EdgeBreaker())


def test_negative_boundary_is_rejected():
    eb = EdgeBreaker(history=[Op.C, Op.C, Op.C, Op.C, Op.E], previous=[1] * 8)
    with pytest.raises(EdgeBreakerError):
        decompress(eb)


def test_missing_hole_length_is_rejected():
    with pytest.raises(EdgeBreakerError):
        decompress(EdgeBreaker(history=[Op.H, Op.E], previous=[1, 2, 3]))


def test_missing_merge_entry_is_rejected():
    with pytest.raises(EdgeBreakerError):
        decompress(EdgeBreaker(history=[Op.S, Op.M, Op.E], previous=[1, 2, 3]))


def test_unfinished_split_is_rejected():
    with pytest.raises(EdgeBreakerError):
        decompress(EdgeBreaker(history=[Op.S], previous=[1, 2, 3]))


def test_short_previous_is_rejected():
    with pytest.raises(EdgeBreakerError):
        decompress(EdgeBreaker(history=[Op.E], previous=[1, 2]))