"""Shared data model of the Edgebreaker codec."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from edgebreaker.ops import Op


class EdgeBreakerError(ValueError):
    """Raised when a mesh or an encoded stream cannot be processed."""


@dataclass
class EdgeBreaker:
    """Result of compressing a mesh, and the input of decompression.

    ``previous`` holds 1-based vertex ids in the order the traversal visits
    them. ``m_table`` holds ``(stack position, offset, loop length)`` for
    each merge.
    """

    history: list[Op] = field(default_factory=list)
    previous: list[int] = field(default_factory=list)
    lengths: list[int] = field(default_factory=list)
    m_table: list[tuple[int, int, int]] = field(default_factory=list)