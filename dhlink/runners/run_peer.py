# MIT License © 2025 Motohiro Suzuki
"""
runners/run_peer.py

One device over TCP. The Initiator listens, the Responder connects.

  dhlink-peer --role initiator --port 9100
  dhlink-peer --role responder --port 9100 --toggle-every 20

Both ends start in the level from config (default cleartext); --toggle-every
simulates the level button.
"""

from __future__ import annotations

import argparse
import asyncio

from dhlink.protocol.config import LinkConfig, load_config
from dhlink.protocol.errors import ConfigError
from dhlink.protocol.ports import ConsoleRenderer, NeverToggle, PeriodicToggle
from dhlink.protocol.session import PeerSession
from dhlink.protocol.types import Role
from dhlink.transport.io_async import MAX_LINE, AsyncLineIO, open_connection


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="dhlink-peer", description="run one dhlink device over TCP")
    ap.add_argument("--config", help="YAML config file")
    ap.add_argument("--role", choices=[r.value for r in Role])
    ap.add_argument("--level", choices=["cleartext", "secured"])
    ap.add_argument("--host")
    ap.add_argument("--port", type=int)
    ap.add_argument("--seed", type=int, dest="rng_seed", help="deterministic RNG seed (NOT secure)")
    ap.add_argument("--audit-log", dest="audit_log_path")
    ap.add_argument("--toggle-every", type=float, default=0.0, help="seconds between simulated level toggles")
    return ap


async def run_session(cfg: LinkConfig, io: AsyncLineIO, toggle_every: float) -> None:
    toggle = PeriodicToggle(toggle_every) if toggle_every > 0 else NeverToggle()
    session = PeerSession.from_config(cfg, io, ConsoleRenderer(cfg.role.value), toggle_input=toggle)
    session.start()
    try:
        while not io.eof:
            session.tick()
            await io.flush()
            await asyncio.sleep(cfg.tick_s)
        print(f"[{cfg.role.value}] link closed")
    finally:
        await io.close()


async def run_initiator(cfg: LinkConfig, toggle_every: float) -> None:
    done = asyncio.Event()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        if done.is_set():
            # point-to-point: one peer only
            writer.close()
            return
        io = AsyncLineIO(reader, writer)
        io.start()
        try:
            await run_session(cfg, io, toggle_every)
        finally:
            done.set()

    server = await asyncio.start_server(handle, cfg.host, cfg.port, limit=MAX_LINE)
    addrs = ", ".join(str(s.getsockname()) for s in server.sockets or [])
    print(f"[initiator] listening on {addrs}")
    async with server:
        await done.wait()


async def run_responder(cfg: LinkConfig, toggle_every: float) -> None:
    io = await open_connection(cfg.host, cfg.port)
    print(f"[responder] connected to {cfg.host}:{cfg.port}")
    await run_session(cfg, io, toggle_every)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(
            args.config,
            role=args.role,
            level=args.level,
            host=args.host,
            port=args.port,
            rng_seed=args.rng_seed,
            audit_log_path=args.audit_log_path,
        )
    except ConfigError as e:
        print(f"[dhlink-peer] config error: {e}")
        return 2

    print(f"[dhlink-peer] {cfg!r}")
    runner = run_initiator if cfg.role is Role.INITIATOR else run_responder
    try:
        asyncio.run(runner(cfg, args.toggle_every))
    except KeyboardInterrupt:
        pass
    except ConnectionError as e:
        print(f"[{cfg.role.value}] connection failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
