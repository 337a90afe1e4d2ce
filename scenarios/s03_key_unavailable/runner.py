# MIT License © 2025 Motohiro Suzuki
"""
scenarios/s03_key_unavailable/runner.py

S-03: payload before key agreement

Demonstration:
- Responder is SECURED but has not completed the handshake
- a token line "72 101 121" arrives
Expected: KeyUnavailable, nothing decoded

Exit code:
- 0 if discarded correctly
- 1 otherwise
"""

from dhlink.crypto.rng import SeededRandom
from dhlink.protocol.events import KeyUnavailable
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.router import MessageRouter
from dhlink.protocol.types import Role, SecurityLevel
from dhlink.transport.loopback import LoopbackLink


def main() -> int:
    _, b_end = LoopbackLink.pair()
    res = HandshakeEngine(Role.RESPONDER, b_end, SeededRandom(1))
    router = MessageRouter(res)

    ev = router.on_line("72 101 121", SecurityLevel.SECURED)
    if isinstance(ev, KeyUnavailable):
        print("[OK] payload discarded:", ev.failure.code.value)
        return 0

    print("[FAIL] payload surfaced without a key:", ev)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
