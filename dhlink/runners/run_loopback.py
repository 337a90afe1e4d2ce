# MIT License © 2025 Motohiro Suzuki
"""
runners/run_loopback.py

Both devices in one process over an in-memory link, driven by a virtual
clock (no sleeping). Both sides share one toggle period, so their levels flip
on the same tick, like two buttons pressed together.

  dhlink-sim --ticks 400 --toggle-every 6
  dhlink-sim --level secured --drop ACK     (lost ACK: handshake stalls)
"""

from __future__ import annotations

import argparse

from dhlink.crypto.rng import make_random_source
from dhlink.protocol.config import LinkConfig
from dhlink.protocol.errors import ConfigError
from dhlink.protocol.ports import ConsoleRenderer, NeverToggle, PeriodicToggle
from dhlink.protocol.session import PeerSession
from dhlink.protocol.types import Role
from dhlink.transport.loopback import LoopbackLink, drop_first


class VirtualClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="dhlink-sim", description="simulate an initiator/responder pair in-process")
    ap.add_argument("--ticks", type=int, default=400)
    ap.add_argument("--tick-s", type=float, default=0.05)
    ap.add_argument("--send-interval", type=float, default=1.0)
    ap.add_argument("--level", choices=["cleartext", "secured"], default="cleartext")
    ap.add_argument("--toggle-every", type=float, default=6.0, help="0 disables toggling")
    ap.add_argument("--seed", type=int, default=None, help="deterministic RNG seed (NOT secure)")
    ap.add_argument("--drop", default=None, help="drop the first line with this prefix (e.g. ACK)")
    return ap


def build_pair(args: argparse.Namespace, clock: VirtualClock) -> tuple[PeerSession, PeerSession]:
    a_end, b_end = LoopbackLink.pair("initiator", "responder")
    if args.drop:
        # both directions, whichever side emits it first
        a_end.drop_filter = b_end.drop_filter = drop_first(args.drop)

    sessions = []
    for role, end in ((Role.INITIATOR, a_end), (Role.RESPONDER, b_end)):
        cfg = LinkConfig(role=role, level=args.level, send_interval_s=args.send_interval, tick_s=args.tick_s)
        toggle = PeriodicToggle(args.toggle_every, clock) if args.toggle_every > 0 else NeverToggle()
        seed = None if args.seed is None else args.seed + (0 if role is Role.INITIATOR else 1)
        sessions.append(PeerSession.from_config(
            cfg,
            end,
            ConsoleRenderer(role.value),
            toggle_input=toggle,
            rng=make_random_source(seed),
            clock=clock,
        ))
    return sessions[0], sessions[1]


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    clock = VirtualClock()
    try:
        initiator, responder = build_pair(args, clock)
    except (ConfigError, ValueError) as e:
        print(f"[dhlink-sim] invalid setting: {e}")
        return 2

    initiator.start()
    responder.start()
    for _ in range(max(0, args.ticks)):
        initiator.tick()
        responder.tick()
        clock.advance(args.tick_s)

    print(
        f"[dhlink-sim] done t={clock.now:.2f}s "
        f"initiator={initiator.engine.state.value} responder={responder.engine.state.value}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
