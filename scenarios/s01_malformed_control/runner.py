# MIT License © 2025 Motohiro Suzuki
"""
scenarios/s01_malformed_control/runner.py

S-01: malformed control frame

Demonstration:
- Responder is IDLE
- peer sends "PG:20x9,2" (non-numeric modulus)
Expected: frame dropped, state stays IDLE, no ACK on the wire

Exit code:
- 0 if dropped correctly
- 1 otherwise
"""

from dhlink.crypto.rng import SeededRandom
from dhlink.protocol.failure import FailureCode
from dhlink.protocol.frames import classify
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.types import HandshakeState, Role
from dhlink.transport.loopback import LoopbackLink


def main() -> int:
    _, b_end = LoopbackLink.pair()
    res = HandshakeEngine(Role.RESPONDER, b_end, SeededRandom(1))

    ch = res.on_control_frame(classify("PG:20x9,2"))

    if ch.failure is None or ch.failure.code is not FailureCode.MALFORMED_CONTROL_FRAME:
        print("[FAIL] malformed PG not reported:", ch.failure)
        return 1
    if res.state is not HandshakeState.IDLE or b_end.sent:
        print("[FAIL] malformed PG changed state or produced a reply:", res.state.value, b_end.sent)
        return 1

    print("[OK] malformed PG dropped:", ch.failure.detail)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
