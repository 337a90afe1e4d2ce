# MIT License © 2025 Motohiro Suzuki
"""
protocol/frames.py

Frame classification for the shared line channel.

Wire (newline-terminated ASCII):
- PG:<p>,<g>        Initiator -> Responder
- ACK               Responder -> Initiator
- AKEY:<public>     Initiator -> Responder
- BKEY:<public>     Responder -> Initiator
- anything else     payload (cipher tokens or literal text, per level)

classify() is pure: no state, no side effects. Field parsers return Result so
that a malformed control frame can be dropped without raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from dhlink.protocol.failure import FailureCode, handshake_failure
from dhlink.protocol.result import Result
from dhlink.protocol.types import DHParameters, Role


class ControlKind(str, Enum):
    PG = "PG"
    ACK = "ACK"
    AKEY = "AKEY"
    BKEY = "BKEY"


# prefix -> kind, checked in this order
_PREFIXES: tuple[tuple[str, ControlKind], ...] = (
    ("PG:", ControlKind.PG),
    ("ACK", ControlKind.ACK),
    ("AKEY:", ControlKind.AKEY),
    ("BKEY:", ControlKind.BKEY),
)

# the only role allowed to emit each control kind
CONTROL_SENDER: dict[ControlKind, Role] = {
    ControlKind.PG: Role.INITIATOR,
    ControlKind.AKEY: Role.INITIATOR,
    ControlKind.ACK: Role.RESPONDER,
    ControlKind.BKEY: Role.RESPONDER,
}


@dataclass(frozen=True)
class ControlFrame:
    kind: ControlKind
    fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class PayloadFrame:
    text: str


Frame = Union[ControlFrame, PayloadFrame]


def classify(line: str) -> Frame:
    text = line.rstrip("\r\n")
    for prefix, kind in _PREFIXES:
        if text.startswith(prefix):
            rest = text[len(prefix):]
            fields = tuple(rest.split(",")) if rest else ()
            return ControlFrame(kind=kind, fields=fields)
    return PayloadFrame(text=text)


# =========================
# Encoders
# =========================

def format_pg(params: DHParameters) -> str:
    return f"PG:{params.p},{params.g}"


def format_ack() -> str:
    return "ACK"


def format_akey(public_value: int) -> str:
    return f"AKEY:{public_value}"


def format_bkey(public_value: int) -> str:
    return f"BKEY:{public_value}"


# =========================
# Field parsers
# =========================

def _non_negative_int(s: str) -> int | None:
    s = s.strip()
    if not s or not (s.isascii() and s.isdigit()):
        return None
    try:
        return int(s)
    except ValueError:
        # over the interpreter's int-conversion digit limit
        return None


def parse_params(frame: ControlFrame) -> Result[DHParameters]:
    if len(frame.fields) != 2:
        return Result.Err(handshake_failure(
            FailureCode.MALFORMED_CONTROL_FRAME, f"PG expects 2 fields, got {len(frame.fields)}"
        ))
    p = _non_negative_int(frame.fields[0])
    g = _non_negative_int(frame.fields[1])
    if p is None or g is None:
        return Result.Err(handshake_failure(FailureCode.MALFORMED_CONTROL_FRAME, "PG fields not numeric"))
    if p < 5:
        return Result.Err(handshake_failure(FailureCode.MALFORMED_CONTROL_FRAME, "PG modulus too small"))
    return Result.Ok(DHParameters(p=p, g=g))


def parse_public_value(frame: ControlFrame) -> Result[int]:
    if len(frame.fields) != 1:
        return Result.Err(handshake_failure(
            FailureCode.MALFORMED_CONTROL_FRAME, f"{frame.kind.value} expects 1 field"
        ))
    v = _non_negative_int(frame.fields[0])
    if v is None:
        return Result.Err(handshake_failure(
            FailureCode.MALFORMED_CONTROL_FRAME, f"{frame.kind.value} value not numeric"
        ))
    return Result.Ok(v)
