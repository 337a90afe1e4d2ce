# MIT License © 2025 Motohiro Suzuki
"""
protocol/failure.py

Failure taxonomy for the link.

- Failures are value objects: they are attached to StateChange / events and
  written to the audit trail, never raised.
- Nothing in this taxonomy is fatal. Every anomaly degrades to "no progress".
- detail is LOCAL-ONLY (never sent on the wire, never contains key material).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureLayer(str, Enum):
    PROTOCOL = "protocol"
    CRYPTO = "crypto"


class FailurePhase(str, Enum):
    HANDSHAKE = "handshake"
    DATA = "data"


class FailureCode(str, Enum):
    # control frame with unparsable numeric fields / missing separators
    MALFORMED_CONTROL_FRAME = "MALFORMED_CONTROL_FRAME"
    # control frame kind that the sending role is not permitted to emit
    WRONG_ROLE_FRAME = "WRONG_ROLE_FRAME"
    # right role, but not valid in the current handshake state
    UNEXPECTED_FRAME = "UNEXPECTED_FRAME"
    # payload before the handshake completed
    KEY_UNAVAILABLE = "KEY_UNAVAILABLE"


@dataclass(frozen=True)
class Failure:
    layer: FailureLayer
    phase: FailurePhase
    code: FailureCode
    fatal: bool = False
    detail: Optional[str] = None

    def to_record(self) -> dict:
        return {
            "layer": self.layer.value,
            "phase": self.phase.value,
            "code": self.code.value,
            "fatal": self.fatal,
            "detail": self.detail,
        }


def handshake_failure(code: FailureCode, detail: str | None = None) -> Failure:
    return Failure(
        layer=FailureLayer.PROTOCOL,
        phase=FailurePhase.HANDSHAKE,
        code=code,
        fatal=False,
        detail=detail,
    )


def data_failure(code: FailureCode, detail: str | None = None) -> Failure:
    return Failure(
        layer=FailureLayer.CRYPTO,
        phase=FailurePhase.DATA,
        code=code,
        fatal=False,
        detail=detail,
    )
