# MIT License © 2025 Motohiro Suzuki
"""
protocol/level.py

CLEARTEXT <-> SECURED switch.

toggle() is destructive: the handshake engine is reset (shared secret and
cipher key discarded) and every registered agent goes back to its initial
counters / timers. Ciphertext still in flight becomes undecryptable.
"""

from __future__ import annotations

from typing import Any, Iterable

from dhlink.protocol.audit import emit
from dhlink.protocol.errors import ConfigError
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.agent import PeerAgent
from dhlink.protocol.ports import ToggleInput
from dhlink.protocol.types import ACTIVE_LEVELS, SecurityLevel


class SecurityLevelController:
    def __init__(
        self,
        engine: HandshakeEngine,
        agents: Iterable[PeerAgent] = (),
        *,
        initial: SecurityLevel = SecurityLevel.CLEARTEXT,
        audit: Any = None,
    ) -> None:
        if initial not in ACTIVE_LEVELS:
            raise ConfigError(f"security level {initial.value!r} cannot be selected")
        self.engine = engine
        self.agents = list(agents)
        self._level = initial
        self._audit = audit

    def current_level(self) -> SecurityLevel:
        return self._level

    def toggle(self) -> SecurityLevel:
        before = self._level
        self._level = SecurityLevel.CLEARTEXT if before is SecurityLevel.SECURED else SecurityLevel.SECURED

        self.engine.reset()
        for agent in self.agents:
            agent.reset()

        emit(self._audit, {
            "event": "level_toggle",
            "role": self.engine.role.value,
            "from": before.value,
            "to": self._level.value,
        })
        return self._level

    def poll(self, toggle_input: ToggleInput) -> bool:
        if not toggle_input.is_level_toggle_pressed():
            return False
        self.toggle()
        return True
