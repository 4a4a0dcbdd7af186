"""Compressing and decompressing meshes held in :class:`Obj` records."""

from __future__ import annotations

import logging

from edgebreaker.compression import HalfEdges, compress
from edgebreaker.decompression import decompress
from edgebreaker.model import EdgeBreaker, EdgeBreakerError
from edgebreaker.objfile import Hole, Merge, Obj, TableEntry
from edgebreaker.ops import Op

log = logging.getLogger(__name__)

_TABLE_OPS = (Op.S, Op.M, Op.H)


def compress_obj(obj: Obj) -> None:
    """Replace the faces of ``obj`` with Edgebreaker records, in place.

    Vertices are reordered into traversal order.
    """
    he = HalfEdges(len(obj.vertices), obj.faces)
    eb = compress(he)
    log.debug("History: %s", eb.history)
    log.debug("Previous: %s", eb.previous)
    log.debug("Lengths: %s", eb.lengths)

    vertices = []
    duplicates: list[tuple[int, int]] = []
    first_seen: dict[int, int] = {}
    for position, vertex_id in enumerate(eb.previous):
        first = first_seen.get(vertex_id)
        if first is None:
            first_seen[vertex_id] = position
            vertices.append(obj.vertices[vertex_id - 1])
        else:
            duplicates.append((position, first))

    table: list[TableEntry] = []
    lengths = iter(eb.lengths)
    merges = iter(eb.m_table)
    splits = 0
    for op in eb.history:
        if op is Op.S:
            splits += 1
        elif op is Op.H:
            table.append(Hole(splits, next(lengths)))
            splits = 0
        elif op is Op.M:
            position, offset, length = next(merges)
            table.append(Merge(splits, position, offset, length))
            splits = 0

    obj.vertices = vertices
    obj.faces = []
    obj.eb_history = eb.history
    obj.eb_table = table
    obj.eb_dup = duplicates


def _expand_history(obj: Obj) -> tuple[list[Op], list[int], list[tuple[int, int, int]]]:
    """Restore H and M operations, which share the code of S, from the table."""
    history: list[Op] = []
    lengths: list[int] = []
    m_table: list[tuple[int, int, int]] = []
    entries = iter(obj.eb_table)
    entry = next(entries, None)
    skip = entry.scount if entry is not None else -1

    for op in obj.eb_history:
        if op not in _TABLE_OPS:
            history.append(op)
        elif skip == 0:
            if isinstance(entry, Hole):
                history.append(Op.H)
                lengths.append(entry.length)
            elif isinstance(entry, Merge):
                history.append(Op.M)
                m_table.append((entry.position, entry.offset, entry.length))
            else:
                raise EdgeBreakerError("history refers to a missing table entry")
            entry = next(entries, None)
            skip = entry.scount if entry is not None else -1
        else:
            history.append(op)
            skip -= 1
    return history, lengths, m_table


def _rebuild_previous(obj: Obj) -> list[int]:
    previous: list[int] = []
    counter = 0
    for position, index in obj.eb_dup:
        while len(previous) < position:
            counter += 1
            previous.append(counter)
        previous.append(index + 1)

    remaining = len(obj.vertices) - (len(previous) - len(obj.eb_dup))
    if remaining < 0:
        raise EdgeBreakerError("duplicate table refers to more vertices than exist")
    previous.extend(range(counter + 1, counter + remaining + 1))
    return previous


def decompress_obj(obj: Obj) -> None:
    """Rebuild the faces of ``obj`` from its Edgebreaker records, in place."""
    history, lengths, m_table = _expand_history(obj)
    eb = EdgeBreaker(
        history=history,
        previous=_rebuild_previous(obj),
        lengths=lengths,
        m_table=m_table,
    )
    log.debug("eb: %s", eb)
    faces = decompress(eb)
    log.debug("Faces len: %d", len(faces))
    obj.eb_history = []
    obj.eb_table = []
    obj.eb_dup = []
    obj.faces = faces