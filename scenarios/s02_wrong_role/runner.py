# MIT License © 2025 Motohiro Suzuki
"""
scenarios/s02_wrong_role/runner.py

S-02: control frame from the wrong role

Demonstration:
- Initiator has sent PG and waits for ACK
- a forged "BKEY:5" arrives first (skipping ACK/AKEY), then a reflected "PG"
Expected: both dropped, no shared secret

Exit code:
- 0 if rejected correctly
- 1 otherwise
"""

from dhlink.crypto.rng import SeededRandom
from dhlink.protocol.config import DEFAULT_PARAMS
from dhlink.protocol.failure import FailureCode
from dhlink.protocol.frames import classify
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.types import HandshakeState, Role
from dhlink.transport.loopback import LoopbackLink


def main() -> int:
    a_end, _ = LoopbackLink.pair()
    ini = HandshakeEngine(Role.INITIATOR, a_end, SeededRandom(1), params=DEFAULT_PARAMS)
    ini.begin_as_initiator()

    early = ini.on_control_frame(classify("BKEY:5"))
    reflected = ini.on_control_frame(classify(a_end.sent[0]))

    if early.failure is None or early.failure.code is not FailureCode.UNEXPECTED_FRAME:
        print("[FAIL] early BKEY accepted:", early)
        return 1
    if reflected.failure is None or reflected.failure.code is not FailureCode.WRONG_ROLE_FRAME:
        print("[FAIL] reflected PG accepted:", reflected)
        return 1
    if ini.state is not HandshakeState.PARAMS_SENT or ini.shared_secret() is not None:
        print("[FAIL] engine moved:", ini.state.value)
        return 1

    print("[OK] out-of-order and wrong-role frames dropped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
