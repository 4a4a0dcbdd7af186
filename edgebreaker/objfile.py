"""Reading and writing Wavefront OBJ files with Edgebreaker extensions.

Besides ``v`` and ``f`` lines, three extra records are understood:
``ebh`` (encoded history), ``ebt`` (hole and merge table) and
``ebd`` (duplicated vertex positions).
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import IO, Iterable, Union

from edgebreaker.model import EdgeBreakerError
from edgebreaker.ops import Op, decode_history, encode_history

log = logging.getLogger(__name__)

_UINT = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class Hole:
    """Table entry for a hole: splits to skip before it, and its length."""

    scount: int
    length: int


@dataclass(frozen=True)
class Merge:
    """Table entry for a merge: splits to skip, stack position, offset, loop length."""

    scount: int
    position: int
    offset: int
    length: int


TableEntry = Union[Hole, Merge]


def _parse_uint(word: str) -> int:
    if not _UINT.fullmatch(word):
        raise EdgeBreakerError(f"expected a non-negative integer, got {word!r}")
    return int(word)


def _parse_float(word: str) -> float:
    try:
        return float(word)
    except ValueError:
        raise EdgeBreakerError(f"expected a number, got {word!r}") from None


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _words(line: str) -> list[str]:
    return [word for word in line.split(" ")[1:] if word]


def _strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


@dataclass
class Obj:
    """A triangle mesh together with any Edgebreaker records."""

    vertices: list[tuple[float, float, float]] = field(default_factory=list)
    faces: list[tuple[int, int, int]] = field(default_factory=list)
    eb_history: list[Op] = field(default_factory=list)
    eb_table: list[TableEntry] = field(default_factory=list)
    eb_dup: list[tuple[int, int]] = field(default_factory=list)

    @classmethod
    def read(cls, stream: Iterable[str]) -> Obj:
        """Parse a text stream. Polygons are split into triangle fans."""
        obj = cls()
        for number, raw in enumerate(stream):
            line = _strip_newline(raw)
            head = line[:1]
            if head == "v":
                if line[1:2] == " ":
                    obj._read_vertex(line)
            elif head == "f":
                obj._read_face(line)
            elif head == "e":
                obj._read_extension(number, line)
            elif head != "#":
                log.warning("Failed to parse line %d: %s", number, line)
        return obj

    def _read_vertex(self, line: str) -> None:
        values = [_parse_float(word) for word in _words(line)]
        if len(values) != 3:
            raise EdgeBreakerError(f"vertex needs 3 coordinates: {line!r}")
        self.vertices.append((values[0], values[1], values[2]))

    def _read_face(self, line: str) -> None:
        indices = [_parse_uint(word.split("/")[0]) for word in _words(line)]
        if len(indices) < 2:
            raise EdgeBreakerError(f"face has too few vertices: {line!r}")
        first = indices[0]
        self.faces.extend((first, b, c) for b, c in zip(indices[1:], indices[2:]))

    def _read_extension(self, number: int, line: str) -> None:
        keyword = line.split(" ")[0]
        if keyword == "ebh":
            fields = line.split(" ")[1:]
            if len(fields) != 2:
                log.warning("Failed decoding base64 at line %d", number)
                return
            encoded, pad = fields
            self.eb_history.extend(decode_history(encoded, _parse_uint(pad)))
        elif keyword == "ebt":
            for entry in _words(line):
                parts = entry.split("/")
                if len(parts) == 2:
                    self.eb_table.append(Hole(*map(_parse_uint, parts)))
                elif len(parts) >= 4:
                    self.eb_table.append(Merge(*map(_parse_uint, parts[:4])))
                else:
                    raise EdgeBreakerError(f"malformed table entry {entry!r}")
        elif keyword == "ebd":
            for entry in _words(line):
                parts = entry.split("/")
                if len(parts) != 2:
                    log.warning(
                        "Failed to parse edge breaker duplicated at line %d: %s",
                        number,
                        line,
                    )
                    continue
                pos, idx = map(_parse_uint, parts)
                self.eb_dup.append((pos, idx))
        else:
            log.warning("Failed to parse line %d: %s", number, line)

    def write(self, stream: IO[str]) -> None:
        """Write the mesh and its non-empty Edgebreaker records."""
        for vertex in self.vertices:
            stream.write("v " + " ".join(_format_float(x) for x in vertex) + "\n")
        for a, b, c in self.faces:
            stream.write(f"f {a} {b} {c}\n")
        if self.eb_history:
            encoded, pad = encode_history(self.eb_history)
            stream.write(f"ebh {encoded} {pad}\n")
        if self.eb_table:
            entries = "".join(
                f" {e.scount}/{e.length}"
                if isinstance(e, Hole)
                else f" {e.scount}/{e.position}/{e.offset}/{e.length}"
                for e in self.eb_table
            )
            stream.write(f"ebt{entries}\n")
        if self.eb_dup:
            entries = "".join(f" {pos}/{idx}" for pos, idx in self.eb_dup)
            stream.write(f"ebd{entries}\n")