# MIT License © 2025 Motohiro Suzuki
"""
scenarios/s04_stalled_handshake/runner.py

S-04: lost control frame

Demonstration:
- both devices SECURED over a loopback link that loses the first ACK
- run 10 s of virtual time, then toggle both out and back in
Expected: no key before the toggle (no retransmission), key after it

Exit code:
- 0 if the link stalls and then recovers through the toggle
- 1 otherwise
"""

from dhlink.crypto.rng import SeededRandom
from dhlink.protocol.config import LinkConfig
from dhlink.protocol.ports import ManualToggle, RecordingRenderer
from dhlink.protocol.session import PeerSession
from dhlink.protocol.types import Role
from dhlink.transport.loopback import LoopbackLink, drop_first

TICK_S = 0.05


def main() -> int:
    now = [0.0]
    a_end, b_end = LoopbackLink.pair("initiator", "responder")
    b_end.drop_filter = drop_first("ACK")

    pair = [
        PeerSession.from_config(
            LinkConfig(role=role, level="secured"),
            end,
            RecordingRenderer(),
            toggle_input=ManualToggle(),
            rng=SeededRandom(seed),
            clock=lambda: now[0],
        )
        for role, end, seed in ((Role.INITIATOR, a_end, 1), (Role.RESPONDER, b_end, 2))
    ]

    def run(ticks: int) -> None:
        for _ in range(ticks):
            for s in pair:
                s.tick()
            now[0] += TICK_S

    run(200)
    if any(s.engine.is_complete() for s in pair):
        print("[FAIL] handshake completed although ACK was lost")
        return 1
    print("[OK] stalled:", " / ".join(s.engine.state.value for s in pair))

    for _ in range(2):
        for s in pair:
            s.toggle_input.press()
        run(1)
    run(10)

    if not all(s.engine.is_complete() for s in pair):
        print("[FAIL] toggle did not restart the handshake")
        return 1

    print("[OK] recovered after level toggle")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
