# MIT License © 2025 Motohiro Suzuki
"""
protocol/session.py

Explicit per-device context and the tick function.

All components are constructed here (or injected) and passed by reference;
there is no process-wide state. One tick:
  1) poll the level toggle input
  2) agent.activate(level)   (Responder's passive reset happens before receive)
  3) receive + route at most one line
  4) evaluate at most one send decision
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from dhlink.crypto.rng import make_random_source
from dhlink.protocol.agent import PeerAgent
from dhlink.protocol.audit import make_audit
from dhlink.protocol.config import LinkConfig
from dhlink.protocol.events import Event, HandshakeProgress, KeyUnavailable, ReceivedPlaintext
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.level import SecurityLevelController
from dhlink.protocol.ports import LineTransport, NeverToggle, RandomSource, Renderer, ToggleInput
from dhlink.protocol.router import MessageRouter
from dhlink.protocol.types import Role, SecurityLevel


@dataclass
class TickReport:
    toggled: bool = False
    event: Optional[Event] = None
    sent: list[str] = field(default_factory=list)


def describe_event(event: Event) -> Optional[str]:
    if isinstance(event, ReceivedPlaintext):
        return f"RX{' (secured)' if event.ciphered else ''}: {event.text}"
    if isinstance(event, KeyUnavailable):
        return "RX dropped: key unavailable"
    if isinstance(event, HandshakeProgress):
        ch = event.change
        if ch.key_available:
            return "KEY READY"
        if ch.changed:
            return f"HS {ch.before.value} -> {ch.after.value}"
    # dropped control frames stay silent
    return None


class PeerSession:
    def __init__(
        self,
        *,
        role: Role,
        engine: HandshakeEngine,
        router: MessageRouter,
        agent: PeerAgent,
        level: SecurityLevelController,
        transport: LineTransport,
        renderer: Renderer,
        toggle_input: ToggleInput,
    ) -> None:
        self.role = role
        self.engine = engine
        self.router = router
        self.agent = agent
        self.level = level
        self.transport = transport
        self.renderer = renderer
        self.toggle_input = toggle_input

    @classmethod
    def from_config(
        cls,
        cfg: LinkConfig,
        transport: LineTransport,
        renderer: Renderer,
        *,
        toggle_input: ToggleInput | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], float] = time.monotonic,
        audit: Any = None,
    ) -> "PeerSession":
        if rng is None:
            rng = make_random_source(cfg.rng_seed)
        if audit is None:
            audit = make_audit(cfg.audit_log_path)

        engine = HandshakeEngine(
            cfg.role,
            transport,
            rng,
            params=cfg.params if cfg.role is Role.INITIATOR else None,
            audit=audit,
        )
        agent = PeerAgent(cfg.role, engine, transport, send_interval_s=cfg.send_interval_s, clock=clock)
        return cls(
            role=cfg.role,
            engine=engine,
            router=MessageRouter(engine, audit=audit),
            agent=agent,
            level=SecurityLevelController(engine, [agent], initial=cfg.level, audit=audit),
            transport=transport,
            renderer=renderer,
            toggle_input=toggle_input or NeverToggle(),
        )

    def current_level(self) -> SecurityLevel:
        return self.level.current_level()

    def start(self) -> None:
        self._flash()

    def tick(self) -> TickReport:
        report = TickReport()

        if self.level.poll(self.toggle_input):
            report.toggled = True
            self._flash()

        lvl = self.level.current_level()
        self.agent.activate(lvl)

        report.event = self.router.poll(self.transport, lvl)
        if report.event is not None:
            text = describe_event(report.event)
            if text is not None:
                self._render(text)

        report.sent = self.agent.tick(lvl)
        for line in report.sent:
            self._render(f"TX: {line}")

        return report

    # -------------------------
    # Renderer calls
    # -------------------------
    def _render(self, text: str) -> None:
        try:
            self.renderer.render_line(text)
        except Exception:
            # display is informational only; the link keeps running
            pass

    def _flash(self) -> None:
        try:
            self.renderer.flash_status(self.role, self.level.current_level())
        except Exception:
            pass
