"""Edgebreaker history operations and their compact bit encoding."""

from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Iterable

from edgebreaker.model import EdgeBreakerError


class Op(Enum):
    """One step of an Edgebreaker traversal."""

    C = "C"
    H = "H"
    L = "L"
    E = "E"
    R = "R"
    S = "S"
    M = "M"


_ENCODING = {
    Op.C: "0",
    Op.S: "100",
    Op.H: "100",
    Op.M: "100",
    Op.R: "101",
    Op.L: "110",
    Op.E: "111",
}

_DECODING = {
    "00": Op.S,
    "01": Op.R,
    "10": Op.L,
    "11": Op.E,
}


def encode_history(ops: Iterable[Op]) -> tuple[str, int]:
    """Pack a history into unpadded base64 and return it with the count of pad bits.

    H and M share the code of S; they are told apart by the side table.
    """
    bits = "".join(_ENCODING[op] for op in ops)
    pad = -len(bits) % 8
    bits += "0" * pad
    data = int(bits, 2).to_bytes(len(bits) // 8, "big") if bits else b""
    return base64.b64encode(data).decode("ascii").rstrip("="), pad


def _b64decode(text: str) -> bytes:
    if "=" in text:
        raise EdgeBreakerError(f"unexpected padding in history {text!r}")
    try:
        return base64.b64decode(text + "=" * (-len(text) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EdgeBreakerError(f"invalid base64 history {text!r}") from exc


def decode_history(encoded: str, pad: int) -> list[Op]:
    """Unpack a history written by :func:`encode_history`."""
    if pad < 0:
        raise EdgeBreakerError(f"negative pad {pad}")
    bitstring = "".join(f"{byte:08b}" for byte in _b64decode(encoded))
    limit = len(bitstring) - pad
    bits = iter(enumerate(bitstring))
    ops: list[Op] = []
    for index, bit in bits:
        if index >= limit:
            break
        if bit == "0":
            ops.append(Op.C)
            continue
        try:
            code = next(bits)[1] + next(bits)[1]
        except StopIteration:
            raise EdgeBreakerError("history ends inside an operation code") from None
        ops.append(_DECODING[code])
    return ops