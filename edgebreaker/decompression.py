"""Edgebreaker decompression: rebuilding triangles from a traversal history."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from edgebreaker.model import EdgeBreaker, EdgeBreakerError
from edgebreaker.ops import Op

log = logging.getLogger(__name__)

NULL = 0


@dataclass
class _Loops:
    """Boundary loops being grown; lists are indexed by 1-based edge id."""

    end: list[int] = field(default_factory=lambda: [NULL])
    next: list[int] = field(default_factory=lambda: [NULL])
    prev: list[int] = field(default_factory=lambda: [NULL])

    def grow(self, size: int) -> None:
        missing = size + 1 - len(self.end)
        if missing > 0:
            for column in (self.end, self.next, self.prev):
                column.extend([NULL] * missing)


@dataclass
class _Layout:
    components: list[tuple[int, int]]
    offsets: list[int]
    loops: _Loops


def _next_or_fail(items, what: str):
    try:
        return next(items)
    except StopIteration:
        raise EdgeBreakerError(f"history needs more {what} entries") from None


def _preprocess(eb: EdgeBreaker) -> _Layout:
    """Work out split offsets and the initial boundary loop of each component."""
    components: list[tuple[int, int]] = []
    offsets = [0] * sum(1 for op in eb.history if op is Op.S)
    stack: list[tuple[int, int]] = []
    loops = _Loops()
    lengths = iter(eb.lengths)
    merges = iter(eb.m_table)

    d = 0  # |S| - |E|
    c = 0  # |C|, inner vertices
    e = 0  # 3|E| + |L| + |R| - |C| - |S|, boundary vertices
    s = 0  # |S|
    h = 0
    a = 0
    edge_count = 0
    vertex_count = 0

    for op in eb.history:
        if op is Op.S:
            e -= 1
            stack.append((e, s))
            s += 1
            d += 1
            a += 1
        elif op is Op.E:
            e += 3
            if d <= 0:
                if e < 0:
                    raise EdgeBreakerError("negative boundary length in history")
                bc = e
                new_edge_count = edge_count + a + bc
                loops.grow(new_edge_count)
                for b in range(bc):
                    index = edge_count + b + 1
                    loops.next[index] = edge_count + (b + 1) % bc + 1
                    loops.prev[index] = edge_count + (b - 1) % bc + 1
                    loops.end[index] = vertex_count + b + 1
                components.append((edge_count + 1, bc))
                log.debug("components: %s", components[-1])
                edge_count = new_edge_count
                vertex_count += bc + h + c
                e = c = d = 0
            else:
                if not stack:
                    raise EdgeBreakerError("(e, s) stack prematurely empty")
                split_e, split_index = stack.pop()
                offset = e - split_e - 2
                if offset < 0:
                    raise EdgeBreakerError("encountered negative S offset")
                offsets[split_index] = offset
                d -= 1
        elif op is Op.C:
            e -= 1
            c += 1
            a += 1
        elif op in (Op.R, Op.L):
            e += 1
        elif op is Op.H:
            length = _next_or_fail(lengths, "hole length")
            e -= length + 1
            h += length + 1
            a += length + 1
        elif op is Op.M:
            position, _, length = _next_or_fail(merges, "merge table")
            e -= 1
            a += 1
            if not 0 <= position < len(stack):
                raise EdgeBreakerError(f"merge position {position} outside stack")
            split_e, split_index = stack.pop(position)
            offset = -split_e - length
            if offset < 0:
                raise EdgeBreakerError("encountered negative S offset")
            offsets[split_index] = offset
            d -= 1

    return _Layout(components, offsets, loops)


def _generate(eb: EdgeBreaker, layout: _Layout) -> list[tuple[int, int, int]]:
    components = layout.components
    if not components:
        raise EdgeBreakerError("history contains no complete component")
    loops = layout.loops
    end, nxt, prv = loops.end, loops.next, loops.prev
    offsets = iter(layout.offsets)
    lengths = iter(eb.lengths)
    merges = iter(eb.m_table)

    g, size = components[0]
    remaining = iter(components[1:])
    vc = ec = size
    stack: list[int] = []
    triangles: list[tuple[int, int, int]] = []

    for op in eb.history:
        if op is Op.C:
            gp = prv[g]
            vc += 1
            triangles.append((end[gp], end[g], vc))
            ec += 1
            a = ec
            end[a] = vc
            nxt[gp] = a
            prv[a] = prv[g]
            nxt[a] = g
            prv[g] = a
        elif op is Op.R:
            gp, gn = prv[g], nxt[g]
            triangles.append((end[gp], end[g], end[gn]))
            nxt[gp] = gn
            prv[gn] = gp
            g = gn
        elif op is Op.L:
            gp = prv[g]
            gpp = prv[gp]
            triangles.append((end[gp], end[g], end[gpp]))
            prv[g] = gpp
            nxt[gpp] = g
        elif op is Op.E:
            gp, gn = prv[g], nxt[g]
            triangles.append((end[gp], end[g], end[gn]))
            if stack:
                g = stack.pop()
            else:
                component = next(remaining, None)
                if component is not None:
                    log.debug("new component: %s", component)
                    g, size = component
                    ec += size
                    vc += size
        elif op is Op.S:
            gp = prv[g]
            d = nxt[g]
            for _ in range(next(offsets)):
                d = nxt[d]
            triangles.append((end[gp], end[g], end[d]))
            ec += 1
            a = ec
            end[a] = end[d]
            nxt[gp] = a
            prv[a] = gp
            stack.append(a)
            dn = nxt[d]
            nxt[a] = dn
            prv[dn] = a
            prv[g] = d
            nxt[d] = g
        elif op is Op.H:
            gp = prv[g]
            triangles.append((end[gp], end[g], vc + 1))
            length = _next_or_fail(lengths, "hole length")
            d = gp
            for _ in range(length):
                ec += 1
                a = ec
                nxt[d] = a
                prv[a] = d
                vc += 1
                end[a] = vc
                d = a
            ec += 1
            a = ec
            nxt[d] = a
            prv[a] = d
            end[a] = vc + 1 - length
            nxt[a] = g
            prv[g] = a
        elif op is Op.M:
            gp = prv[g]
            position, offset, _ = _next_or_fail(merges, "merge table")
            if not 0 <= position < len(stack):
                raise EdgeBreakerError(f"merge position {position} outside stack")
            d = stack[position]
            for _ in range(offset):
                d = nxt[d]
            dn = nxt[d]
            triangles.append((end[gp], end[g], end[d]))
            ec += 1
            a = ec
            end[a] = end[d]
            nxt[gp] = a
            prv[a] = gp
            nxt[a] = dn
            prv[dn] = a
            nxt[d] = g
            prv[g] = d
            if not stack:
                raise EdgeBreakerError("invalid decompression stack")
            g = stack.pop()

    return triangles


def _vertex(previous: list[int], local: int) -> int:
    if local < 1:
        raise EdgeBreakerError("triangle refers to a missing vertex")
    return previous[local - 1]


def decompress(eb: EdgeBreaker) -> list[tuple[int, int, int]]:
    """Rebuild the triangles described by ``eb`` as 1-based vertex id triples."""
    try:
        layout = _preprocess(eb)
        triangles = _generate(eb, layout)
        return [
            (
                _vertex(eb.previous, a),
                _vertex(eb.previous, b),
                _vertex(eb.previous, c),
            )
            for a, b, c in triangles
        ]
    except IndexError as exc:
        raise EdgeBreakerError("inconsistent Edgebreaker stream") from exc