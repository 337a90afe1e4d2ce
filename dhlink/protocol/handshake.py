# MIT License © 2025 Motohiro Suzuki
"""
protocol/handshake.py

Role-aware Diffie-Hellman handshake over the shared line channel.

Message order (4 control frames):
  Initiator                    Responder
     PG:p,g      ------------>
                 <------------    ACK
     AKEY:A      ------------>
                 <------------    BKEY:B
  both: shared = peer_public ^ own_private mod p, cipher key = shared mod 256

Rules:
- One engine type for both roles; legality comes from the role-guard table
  (CONTROL_SENDER) and the transition table below.
- Frames from the wrong role, out of sequence, or with malformed fields are
  dropped: state unchanged, no secret produced, nothing raised upstream. The
  returned StateChange carries the Failure for observability.
- COMPLETE ignores every further control frame until reset().
- No timeout / retransmission: a lost control frame leaves the engine waiting.
  Only reset() (via a level toggle) recovers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from dhlink.crypto.cipher import derive_cipher_key
from dhlink.crypto.dh import compute_shared, generate_keypair
from dhlink.protocol.audit import emit
from dhlink.protocol.failure import Failure, FailureCode, handshake_failure
from dhlink.protocol.frames import (
    CONTROL_SENDER,
    ControlFrame,
    ControlKind,
    format_ack,
    format_akey,
    format_bkey,
    format_pg,
    parse_params,
    parse_public_value,
)
from dhlink.protocol.ports import LineTransport, RandomSource
from dhlink.protocol.types import DHParameters, HandshakeState, KeyPair, Role


@dataclass(frozen=True)
class StateChange:
    before: HandshakeState
    after: HandshakeState
    kind: Optional[ControlKind] = None
    sent: Optional[str] = None
    key_available: bool = False
    failure: Optional[Failure] = None

    @property
    def changed(self) -> bool:
        return self.before != self.after


class HandshakeEngine:
    def __init__(
        self,
        role: Role,
        transport: LineTransport,
        rng: RandomSource,
        *,
        params: DHParameters | None = None,
        audit: Any = None,
    ) -> None:
        if role is Role.INITIATOR and params is None:
            raise ValueError("initiator requires DH parameters")
        self.role = role
        self._transport = transport
        self._rng = rng
        self._configured_params = params
        self._audit = audit

        self._state = HandshakeState.IDLE
        self._params: DHParameters | None = None
        self._keypair: KeyPair | None = None
        self._shared: int | None = None
        self._cipher_key: int | None = None

    # -------------------------
    # Queries
    # -------------------------
    @property
    def state(self) -> HandshakeState:
        return self._state

    @property
    def params(self) -> DHParameters | None:
        return self._params

    @property
    def public_value(self) -> int | None:
        return None if self._keypair is None else self._keypair.public_value

    def is_complete(self) -> bool:
        return self._state is HandshakeState.COMPLETE

    def shared_secret(self) -> int | None:
        return self._shared if self.is_complete() else None

    def cipher_key(self) -> int | None:
        return self._cipher_key if self.is_complete() else None

    # -------------------------
    # Commands
    # -------------------------
    def reset(self) -> None:
        before = self._state
        self._state = HandshakeState.IDLE
        self._params = None
        self._keypair = None
        # secret and key are always cleared together
        self._shared = None
        self._cipher_key = None
        emit(self._audit, {
            "event": "handshake_reset",
            "role": self.role.value,
            "from": before.value,
        })

    def begin_as_initiator(self) -> StateChange:
        before = self._state
        if self.role is not Role.INITIATOR or before is not HandshakeState.IDLE:
            return StateChange(before=before, after=before)

        # the constructor guarantees params for the initiator
        params = self._configured_params
        line = format_pg(params)
        self._transport.send(line)

        self._params = params
        self._state = HandshakeState.PARAMS_SENT
        return self._record(StateChange(before=before, after=self._state, kind=ControlKind.PG, sent=line))

    def on_control_frame(self, frame: ControlFrame) -> StateChange:
        before = self._state

        if before is HandshakeState.COMPLETE:
            return StateChange(before=before, after=before, kind=frame.kind)

        if CONTROL_SENDER[frame.kind] is not self.role.peer:
            return self._drop(frame, handshake_failure(
                FailureCode.WRONG_ROLE_FRAME,
                f"{frame.kind.value} is never sent by {self.role.peer.value}",
            ))

        handler = _TRANSITIONS.get((self.role, before, frame.kind))
        if handler is None:
            return self._drop(frame, handshake_failure(
                FailureCode.UNEXPECTED_FRAME,
                f"{frame.kind.value} not valid in {before.value}",
            ))

        return self._record(handler(self, frame))

    # -------------------------
    # Transitions
    # -------------------------
    def _on_pg(self, frame: ControlFrame) -> StateChange:
        before = self._state
        r = parse_params(frame)
        if not r.ok:
            return self._dropped_change(frame, r.unwrap_err())

        line = format_ack()
        self._transport.send(line)

        self._params = r.unwrap()
        self._state = HandshakeState.ACK_RECEIVED
        return StateChange(before=before, after=self._state, kind=frame.kind, sent=line)

    def _on_ack(self, frame: ControlFrame) -> StateChange:
        before = self._state
        kp = generate_keypair(self._params, self._rng)
        line = format_akey(kp.public_value)
        self._transport.send(line)

        self._keypair = kp
        self._state = HandshakeState.ACK_RECEIVED
        return StateChange(before=before, after=self._state, kind=frame.kind, sent=line)

    def _on_akey(self, frame: ControlFrame) -> StateChange:
        before = self._state
        r = parse_public_value(frame)
        if not r.ok:
            return self._dropped_change(frame, r.unwrap_err())

        kp = generate_keypair(self._params, self._rng)
        shared = compute_shared(r.unwrap(), kp.private_scalar, self._params.p)
        line = format_bkey(kp.public_value)
        self._transport.send(line)

        self._keypair = kp
        self._complete(shared)
        return StateChange(before=before, after=self._state, kind=frame.kind, sent=line, key_available=True)

    def _on_bkey(self, frame: ControlFrame) -> StateChange:
        before = self._state
        r = parse_public_value(frame)
        if not r.ok:
            return self._dropped_change(frame, r.unwrap_err())

        # reachable only through _on_ack, which set params and keypair
        shared = compute_shared(r.unwrap(), self._keypair.private_scalar, self._params.p)
        self._complete(shared)
        return StateChange(before=before, after=self._state, kind=frame.kind, key_available=True)

    def _complete(self, shared: int) -> None:
        self._shared = shared
        self._cipher_key = derive_cipher_key(shared)
        self._state = HandshakeState.COMPLETE

    # -------------------------
    # Drop / audit helpers
    # -------------------------
    def _dropped_change(self, frame: ControlFrame, failure: Failure) -> StateChange:
        return StateChange(before=self._state, after=self._state, kind=frame.kind, failure=failure)

    def _drop(self, frame: ControlFrame, failure: Failure) -> StateChange:
        return self._record(self._dropped_change(frame, failure))

    def _record(self, change: StateChange) -> StateChange:
        if change.failure is not None:
            emit(self._audit, {
                "event": "frame_dropped",
                "role": self.role.value,
                "kind": None if change.kind is None else change.kind.value,
                "state": change.before.value,
                "failure": change.failure.to_record(),
            })
        elif change.changed:
            emit(self._audit, {
                "event": "handshake_transition",
                "role": self.role.value,
                "kind": None if change.kind is None else change.kind.value,
                "from": change.before.value,
                "to": change.after.value,
                "key_available": change.key_available,
            })
        return change


_Handler = Callable[[HandshakeEngine, ControlFrame], StateChange]

# (own role, current state, received kind) -> transition
_TRANSITIONS: dict[tuple[Role, HandshakeState, ControlKind], _Handler] = {
    (Role.RESPONDER, HandshakeState.IDLE, ControlKind.PG): HandshakeEngine._on_pg,
    (Role.INITIATOR, HandshakeState.PARAMS_SENT, ControlKind.ACK): HandshakeEngine._on_ack,
    (Role.RESPONDER, HandshakeState.ACK_RECEIVED, ControlKind.AKEY): HandshakeEngine._on_akey,
    (Role.INITIATOR, HandshakeState.ACK_RECEIVED, ControlKind.BKEY): HandshakeEngine._on_bkey,
}
