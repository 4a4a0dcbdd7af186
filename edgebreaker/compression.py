"""Edgebreaker compression: half-edge construction and mesh traversal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence, Union

from edgebreaker.model import EdgeBreaker, EdgeBreakerError
from edgebreaker.ops import Op

log = logging.getLogger(__name__)

NULL = 0


def _next_in_triangle(h: int) -> int:
    """Half-edge following ``h`` inside its own triangle."""
    if h == NULL:
        raise EdgeBreakerError("walked onto a missing half-edge")
    offset = h - 1
    i = offset % 3
    return (i + 1) % 3 + offset - i + 1


def _prev_in_triangle(h: int) -> int:
    """Half-edge preceding ``h`` inside its own triangle."""
    if h == NULL:
        raise EdgeBreakerError("walked onto a missing half-edge")
    offset = h - 1
    i = offset % 3
    return (i + 2) % 3 + offset - i + 1


class HalfEdges:
    """Half-edge structure of a triangle mesh.

    Half-edges and vertices are identified by 1-based ids; ``0`` means none.
    The lists ``s``, ``e``, ``n``, ``p`` and ``o`` are indexed by half-edge
    id (slot 0 is unused) and hold start vertex, end vertex, next and
    previous half-edge along the boundary loop, and the opposite half-edge.
    ``conflicts`` counts the extra uses of each non-manifold directed edge.
    """

    def __init__(self, vertex_count: int, faces: Iterable[Sequence[int]]) -> None:
        triangles = [tuple(face) for face in faces]
        for face in triangles:
            if len(face) != 3:
                raise EdgeBreakerError(f"face {face!r} is not a triangle")
            for vertex in face:
                if not 1 <= vertex <= vertex_count:
                    raise EdgeBreakerError(
                        f"face {face!r} refers to missing vertex {vertex}"
                    )

        size = len(triangles) * 3 + 1
        self.vertex_count = vertex_count
        self.triangle_count = len(triangles)
        self.conflicts: dict[tuple[int, int], int] = {}
        self.s = [NULL] * size
        self.e = [NULL] * size
        self.n = [NULL] * size
        self.p = [NULL] * size
        self.o = [NULL] * size

        edge_map: dict[tuple[int, int], int] = {}
        for t, face in enumerate(triangles):
            offset = t * 3
            for i in range(3):
                h = offset + i + 1
                self.s[h] = face[i]
                self.e[h] = face[(i + 1) % 3]
                self.n[h] = offset + (i + 1) % 3 + 1
                self.p[h] = offset + (i + 2) % 3 + 1

            for h in range(offset + 1, offset + 4):
                self._attach(h, edge_map)

    def _attach(self, h: int, edge_map: dict[tuple[int, int], int]) -> None:
        a, b = self.s[h], self.e[h]
        g = edge_map.get((b, a))
        if g is not None:
            g_next, g_prev = self.n[g], self.p[g]
            if g_next == NULL or g_prev == NULL:
                self._add_conflict((a, b))
                return
            h_next, h_prev = self.n[h], self.p[h]
            # Join the two boundary loops, then drop h and g from them.
            self.n[h_prev] = g_next
            self.p[g_next] = h_prev
            self.n[g_prev] = h_next
            self.p[h_next] = g_prev
            self.n[g] = self.p[g] = NULL
            self.n[h] = self.p[h] = NULL
            self.o[h] = g
            self.o[g] = h
        elif (a, b) in edge_map:
            self._add_conflict((a, b))
        else:
            edge_map[(a, b)] = h

    def _add_conflict(self, edge: tuple[int, int]) -> None:
        self.conflicts[edge] = self.conflicts.get(edge, 0) + 1

    def _tip(self, h: int) -> int:
        """Vertex of the triangle of ``h`` that is not on ``h``."""
        return self.e[_next_in_triangle(h)]

    def _describe(self, h: int) -> str:
        return f"({self.s[h]}, {self.e[h]})"


class _Mark(Enum):
    UNMARKED = "unmarked"
    EXTERNAL1 = "external1"
    EXTERNAL2 = "external2"


@dataclass(frozen=True)
class _Split:
    """Marks a loop left behind by a split, keyed by its gate."""

    gate: int


Mark = Union[_Mark, _Split]


class _Compressor:
    def __init__(self, he: HalfEdges) -> None:
        self.he = he
        self.history: list[Op] = []
        self.previous: list[int] = []
        self.lengths: list[int] = []
        self.m_table: list[tuple[int, int, int]] = []
        self.stack: list[int] = []
        self.duplicated: list[int] = []
        self.components: list[int] = []
        self.vm: list[Mark] = [_Mark.UNMARKED] * (he.vertex_count + 1)
        self.hm: list[Mark] = [_Mark.UNMARKED] * (he.triangle_count * 3 + 1)

    def mark_edges(self, mark: Mark, gate: int) -> None:
        he, vm = self.he, self.vm
        g = gate
        while True:
            sv, ev = he.s[g], he.e[g]
            edge = (sv, ev)
            count = he.conflicts.get(edge, 0)
            if count:
                # Give the non-manifold edge fresh vertex ids.
                vm.append(vm[sv])
                vm.append(vm[ev])
                self.duplicated.append(sv)
                sv = he.vertex_count + len(self.duplicated)
                self.duplicated.append(ev)
                ev = he.vertex_count + len(self.duplicated)
                he.s[g] = sv
                he.e[g] = ev
                self._rename_around(he.p[g], sv)
                self._rename_around(g, ev)
                he.conflicts[edge] = count - 1

            if mark is _Mark.EXTERNAL1:
                self.previous.append(ev)
            vm[ev] = mark
            self.hm[g] = mark
            g = he.n[g]
            if g == NULL or g == gate:
                break

    def _rename_around(self, start: int, vertex: int) -> None:
        he = self.he
        b = start
        while b != NULL:
            he.e[b] = vertex
            b = _next_in_triangle(b)
            he.s[b] = vertex
            b = he.o[b]

    def _relabel_loop(self, start: int, mark: Mark) -> int:
        """Mark the loop starting at ``start``; return the number of edges."""
        he = self.he
        b = start
        count = 0
        while True:
            self.hm[b] = mark
            self.vm[he.e[b]] = mark
            b = he.n[b]
            count += 1
            if he.e[b] == he.e[start]:
                return count

    def _splice(self, g: int, gpo: int, gno: int, b: int) -> None:
        """Insert the two inner edges of g's triangle after ``b`` and before g's loop."""
        he = self.he
        g_next, g_prev = he.n[g], he.p[g]
        he.n[g_prev] = gpo
        he.p[gpo] = g_prev
        b_next = he.n[b]
        he.n[gpo] = b_next
        he.p[b_next] = gpo
        he.n[b] = gno
        he.p[gno] = b
        he.n[gno] = g_next
        he.p[g_next] = gno

    def run(self) -> EdgeBreaker:
        he = self.he
        if he.triangle_count == 0:
            raise EdgeBreakerError("mesh has no faces")
        log.debug("conflicts: %s", he.conflicts)

        gate = next((h for h in range(1, len(he.n)) if he.n[h] != NULL), 1)
        log.debug("gate: %s", he._describe(gate))
        self.mark_edges(_Mark.EXTERNAL1, gate)

        if he.n[gate] == NULL:
            # Closed surface: open it along the gate edge.
            opposite = he.o[gate]
            if opposite == NULL:
                raise EdgeBreakerError("gate edge has no opposite")
            he.n[gate] = he.p[gate] = opposite
            he.n[opposite] = he.p[opposite] = gate
            self.hm[opposite] = _Mark.EXTERNAL1
            self.vm[he.s[gate]] = _Mark.EXTERNAL1
            self.previous.append(he.s[gate])
        else:
            for h in range(1, len(he.n)):
                if he.n[h] != NULL and self.hm[h] is _Mark.UNMARKED:
                    self.mark_edges(_Mark.EXTERNAL2, h)
                    self.components.append(h)

        self.stack.append(gate)
        while True:
            while self.stack:
                self.step(self.stack.pop())
                log.debug("hist.len %d", len(self.history))
            next_gate = self._next_component()
            if next_gate is None:
                break
            self.mark_edges(_Mark.EXTERNAL1, next_gate)
            self.stack.append(next_gate)

        limit = he.vertex_count
        previous = [
            self.duplicated[v - limit - 1] if v > limit else v for v in self.previous
        ]
        return EdgeBreaker(
            history=self.history,
            previous=previous,
            lengths=self.lengths,
            m_table=self.m_table,
        )

    def _next_component(self) -> int | None:
        while self.components:
            candidate = self.components.pop()
            if self.hm[candidate] is _Mark.EXTERNAL2:
                return candidate
        return None

    def step(self, g: int) -> None:
        he, hm = self.he, self.hm
        if isinstance(hm[g], _Split):
            self._relabel_loop(g, _Mark.EXTERNAL1)

        tip_mark = self.vm[he._tip(g)]
        if tip_mark is _Mark.UNMARKED:
            self._case_c(g)
        elif tip_mark is _Mark.EXTERNAL2:
            self._case_h(g)
        elif _prev_in_triangle(g) == he.p[g]:
            if _next_in_triangle(g) == he.n[g]:
                self._case_e(g)
            else:
                self._case_l(g)
        elif _next_in_triangle(g) == he.n[g]:
            self._case_r(g)
        elif isinstance(tip_mark, _Split):
            self._case_m(g, tip_mark.gate)
        elif tip_mark is _Mark.EXTERNAL1:
            self._case_s(g)
        else:
            raise EdgeBreakerError(f"unexpected vertex mark {tip_mark!r}")

    def _case_c(self, g: int) -> None:
        log.debug("Case C")
        he, hm = self.he, self.hm
        self.history.append(Op.C)
        tip = he._tip(g)
        self.previous.append(tip)
        gpo = he.o[_prev_in_triangle(g)]
        gno = he.o[_next_in_triangle(g)]
        g_next, g_prev = he.n[g], he.p[g]

        hm[g] = _Mark.UNMARKED
        hm[gpo] = _Mark.EXTERNAL1
        hm[gno] = _Mark.EXTERNAL1
        self.vm[tip] = _Mark.EXTERNAL1

        he.p[gpo] = g_prev
        he.n[g_prev] = gpo
        he.n[gpo] = gno
        he.p[gno] = gpo
        he.n[gno] = g_next
        he.p[g_next] = gno
        self.stack.append(gno)

    def _case_h(self, g: int) -> None:
        log.debug("Case M")
        he, hm = self.he, self.hm
        self.history.append(Op.H)
        gpo = he.o[_prev_in_triangle(g)]
        gno = he.o[_next_in_triangle(g)]

        hm[g] = _Mark.UNMARKED
        hm[gpo] = _Mark.EXTERNAL1
        hm[gno] = _Mark.EXTERNAL1

        b = _next_in_triangle(g)
        while hm[b] is not _Mark.EXTERNAL2:
            b = _prev_in_triangle(he.o[b])

        length = 0
        while True:
            hm[b] = _Mark.EXTERNAL1
            self.vm[he.s[b]] = _Mark.EXTERNAL1
            length += 1
            self.previous.append(he.e[b])
            b = he.n[b]
            if he.e[b] == he.s[gno]:
                break
        self.lengths.append(length)

        self._splice(g, gpo, gno, b)
        self.stack.append(gno)

    def _case_e(self, g: int) -> None:
        log.debug("Case E")
        self.history.append(Op.E)
        self.hm[g] = _Mark.UNMARKED
        self.hm[_next_in_triangle(g)] = _Mark.UNMARKED
        self.hm[_prev_in_triangle(g)] = _Mark.UNMARKED

    def _case_l(self, g: int) -> None:
        log.debug("Case L")
        he, hm = self.he, self.hm
        self.history.append(Op.L)
        g_prev = he.p[g]
        g_prev_prev = he.p[g_prev]
        gno = he.o[_next_in_triangle(g)]
        g_next = he.n[g]

        hm[g] = _Mark.UNMARKED
        hm[g_prev] = _Mark.UNMARKED
        hm[gno] = _Mark.EXTERNAL1

        he.n[g_prev_prev] = gno
        he.p[gno] = g_prev_prev
        he.n[gno] = g_next
        he.p[g_next] = gno
        self.stack.append(gno)

    def _case_r(self, g: int) -> None:
        log.debug("Case R")
        he, hm = self.he, self.hm
        self.history.append(Op.R)
        g_next = he.n[g]
        g_next_next = he.n[g_next]
        gpo = he.o[_prev_in_triangle(g)]
        g_prev = he.p[g]

        hm[g] = _Mark.UNMARKED
        hm[g_next] = _Mark.UNMARKED
        hm[gpo] = _Mark.EXTERNAL1

        he.p[g_next_next] = gpo
        he.n[gpo] = g_next_next
        he.p[gpo] = g_prev
        he.n[g_prev] = gpo
        self.stack.append(gpo)

    def _case_m(self, g: int, split_gate: int) -> None:
        log.debug("Case M' (split gate %d)", split_gate)
        he, hm = self.he, self.hm
        loop_length = self._relabel_loop(split_gate, _Mark.EXTERNAL1)

        if he.e[split_gate] == he.e[g]:
            # The split loop closes on itself; retry this gate.
            self.stack.append(g)
            return

        tip = he._tip(g)
        b = split_gate
        offset = 0
        while he.e[b] != tip:
            offset += 1
            b = he.n[b]
            if he.e[b] == he.e[split_gate]:
                break

        try:
            position = self.stack.index(split_gate)
        except ValueError:
            raise EdgeBreakerError(
                "invalid stack structure: split gate not found"
            ) from None

        self.history.append(Op.M)
        self.m_table.append((position, offset, loop_length))

        gpo = he.o[_prev_in_triangle(g)]
        gno = he.o[_next_in_triangle(g)]
        hm[g] = _Mark.UNMARKED
        hm[gpo] = _Mark.EXTERNAL1
        hm[gno] = _Mark.EXTERNAL1
        self._splice(g, gpo, gno, b)

    def _case_s(self, g: int) -> None:
        log.debug("Case S")
        he, hm, vm = self.he, self.hm, self.vm
        self.history.append(Op.S)
        gno = he.o[_next_in_triangle(g)]
        gpo = he.o[_prev_in_triangle(g)]

        hm[g] = _Mark.UNMARKED
        hm[gpo] = _Mark.EXTERNAL1
        hm[gno] = _Mark.EXTERNAL1

        b = _next_in_triangle(g)
        while hm[b] is _Mark.UNMARKED:
            b = _prev_in_triangle(he.o[b])
        log.debug("g: %s, b: %s", he._describe(g), he._describe(b))

        self._splice(g, gpo, gno, b)

        # Tag the left loop so that a later merge into it can be recognised.
        b = gpo
        should_mark = True
        while True:
            if isinstance(hm[b], _Split) or isinstance(vm[he.e[b]], _Split):
                should_mark = False
                break
            b = he.n[b]
            if he.e[b] == he.e[gpo]:
                break

        if should_mark:
            split = _Split(gpo)
            while True:
                hm[b] = split
                vm[he.e[b]] = split
                b = he.n[b]
                if he.e[b] == he.e[gpo]:
                    break

        self.stack.append(gpo)
        self.stack.append(gno)


def compress(he: HalfEdges) -> EdgeBreaker:
    """Traverse the mesh and return its history, vertex order and side tables.

    The half-edge structure is modified in place.
    """
    return _Compressor(he).run()