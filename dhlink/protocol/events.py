# MIT License © 2025 Motohiro Suzuki
"""
Events surfaced by the router to the application / renderer.

One event per routed line. Handshake progress carries the StateChange but no
payload.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from dhlink.protocol.failure import Failure
from dhlink.protocol.handshake import StateChange


@dataclass(frozen=True)
class ReceivedPlaintext:
    text: str
    ciphered: bool = False


@dataclass(frozen=True)
class KeyUnavailable:
    """Payload arrived before the handshake completed; it was dropped."""
    raw: str
    failure: Failure


@dataclass(frozen=True)
class HandshakeProgress:
    change: StateChange

    @property
    def key_available(self) -> bool:
        return self.change.key_available


Event = Union[ReceivedPlaintext, KeyUnavailable, HandshakeProgress]
