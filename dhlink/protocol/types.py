# MIT License © 2025 Motohiro Suzuki
"""
protocol/types.py

Shared link types (roles, levels, handshake states, DH values).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    INITIATOR = "initiator"
    RESPONDER = "responder"

    @property
    def peer(self) -> "Role":
        return Role.RESPONDER if self is Role.INITIATOR else Role.INITIATOR


class SecurityLevel(str, Enum):
    CLEARTEXT = "cleartext"
    SECURED = "secured"
    # Declared but unreachable: toggle() only flips CLEARTEXT <-> SECURED and
    # config rejects it.
    HARDENED = "hardened"


ACTIVE_LEVELS = (SecurityLevel.CLEARTEXT, SecurityLevel.SECURED)


class HandshakeState(str, Enum):
    IDLE = "IDLE"
    PARAMS_SENT = "PARAMS_SENT"
    ACK_RECEIVED = "ACK_RECEIVED"
    # No transition enters PREKEY_SENT; the Initiator stays in ACK_RECEIVED
    # after sending AKEY.
    PREKEY_SENT = "PREKEY_SENT"
    COMPLETE = "COMPLETE"


@dataclass(frozen=True)
class DHParameters:
    """p prime, g primitive root mod p. Caller-supplied, not verified."""
    p: int
    g: int


@dataclass(frozen=True)
class KeyPair:
    private_scalar: int
    public_value: int

    def __repr__(self) -> str:
        # keep the private scalar out of logs / tracebacks
        return f"KeyPair(public_value={self.public_value})"
