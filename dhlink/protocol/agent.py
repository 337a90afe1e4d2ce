# MIT License © 2025 Motohiro Suzuki
"""
protocol/agent.py

Outbound traffic for one peer, parameterized by Role.

CLEARTEXT:
- Initiator: "<role> hello #<seq>" every send_interval_s. Responder: silent.

SECURED:
- first activation: Initiator reset() + begin_as_initiator() (PG goes out in
  the send phase); Responder reset() only and waits for PG.
- first tick with the key available: scripted pair, once, no interval gating
  (one literal passthrough line, one ciphered line).
- then: one ciphered "<role> secure #<seq>" every send_interval_s.

Timers compare a monotonic clock reading to a stored timestamp. Nothing here
blocks.
"""

from __future__ import annotations

import time
from typing import Callable

from dhlink.crypto.cipher import cipher_for
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.ports import LineTransport
from dhlink.protocol.types import Role, SecurityLevel

# role -> (passthrough line, line sent ciphered)
SCRIPTED_PAIR: dict[Role, tuple[str, str]] = {
    Role.INITIATOR: ("initiator: plain hello over secured link", "initiator: first secret message"),
    Role.RESPONDER: ("responder: plain hello over secured link", "responder: first secret reply"),
}


class PeerAgent:
    def __init__(
        self,
        role: Role,
        engine: HandshakeEngine,
        transport: LineTransport,
        *,
        send_interval_s: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if engine.role is not role:
            raise ValueError("agent role must match engine role")
        self.role = role
        self.engine = engine
        self._transport = transport
        self.send_interval_s = float(send_interval_s)
        self._clock = clock
        self.reset()

    # -------------------------
    # State
    # -------------------------
    def reset(self) -> None:
        now = self._clock()
        self.seq = 0
        self._last_clear_send = now
        self._last_secure_send = now
        self._activated = False
        self._begin_pending = False
        self._scripted_sent = False

    @property
    def activated(self) -> bool:
        return self._activated

    @property
    def scripted_sent(self) -> bool:
        return self._scripted_sent

    def activate(self, level: SecurityLevel) -> None:
        if level is not SecurityLevel.SECURED or self._activated:
            return
        self._activated = True
        self.engine.reset()
        if self.role is Role.INITIATOR:
            self._begin_pending = True

    # -------------------------
    # Send phase
    # -------------------------
    def tick(self, level: SecurityLevel) -> list[str]:
        if level is not SecurityLevel.SECURED:
            return self._tick_cleartext()

        self.activate(level)

        if self._begin_pending:
            self._begin_pending = False
            change = self.engine.begin_as_initiator()
            return [change.sent] if change.sent else []

        if not self.engine.is_complete():
            return []

        if not self._scripted_sent:
            return self._send_scripted_pair()

        now = self._clock()
        if now - self._last_secure_send < self.send_interval_s:
            return []
        self._last_secure_send = now
        self.seq += 1
        return [self._send_ciphered(f"{self.role.value} secure #{self.seq}")]

    def _tick_cleartext(self) -> list[str]:
        if self.role is not Role.INITIATOR:
            return []
        now = self._clock()
        if now - self._last_clear_send < self.send_interval_s:
            return []
        self._last_clear_send = now
        self.seq += 1
        line = f"{self.role.value} hello #{self.seq}"
        self._transport.send(line)
        return [line]

    def _send_scripted_pair(self) -> list[str]:
        plain, secret = SCRIPTED_PAIR[self.role]
        self._transport.send(plain)
        sent = [plain, self._send_ciphered(secret)]
        self._scripted_sent = True
        self._last_secure_send = self._clock()
        return sent

    def _send_ciphered(self, text: str) -> str:
        line = cipher_for(self.engine).encode_line(text)
        self._transport.send(line)
        return line
