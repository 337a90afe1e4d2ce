# MIT License © 2025 Motohiro Suzuki
"""
scenarios/s05_level_toggle/runner.py

S-05: level toggle while secured

Demonstration:
- complete a handshake, keep the cipher key
- toggle to CLEARTEXT and back, complete a new handshake
Expected: engine forgot the first key; first key does not read new ciphertext

Exit code:
- 0 if the toggle was destructive
- 1 otherwise
"""

from dhlink.crypto.cipher import ByteXorCipher
from dhlink.protocol.config import DEFAULT_PARAMS
from dhlink.protocol.frames import classify
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.level import SecurityLevelController
from dhlink.protocol.types import Role, SecurityLevel
from dhlink.transport.loopback import LoopbackLink


class _Draws:
    def __init__(self, *values: int) -> None:
        self._values = list(values)

    def random_int(self, low: int, high: int) -> int:
        return self._values.pop(0)


def handshake(ini: HandshakeEngine, res: HandshakeEngine, a_end, b_end) -> None:
    ini.begin_as_initiator()
    for end, engine in ((b_end, res), (a_end, ini), (b_end, res), (a_end, ini)):
        engine.on_control_frame(classify(end.try_receive_line()))


def main() -> int:
    a_end, b_end = LoopbackLink.pair()
    ini = HandshakeEngine(Role.INITIATOR, a_end, _Draws(7, 13), params=DEFAULT_PARAMS)
    res = HandshakeEngine(Role.RESPONDER, b_end, _Draws(11, 17))
    ctl = SecurityLevelController(ini, initial=SecurityLevel.SECURED)

    handshake(ini, res, a_end, b_end)
    old_key = ini.cipher_key()

    ctl.toggle()
    if ini.cipher_key() is not None:
        print("[FAIL] key survived the toggle")
        return 1

    ctl.toggle()
    res.reset()
    handshake(ini, res, a_end, b_end)
    new_key = ini.cipher_key()
    if old_key is None or new_key is None:
        print("[FAIL] handshake did not complete")
        return 1

    line = ByteXorCipher(new_key).encode_line("secure after toggle")
    if ByteXorCipher(old_key).decode_line(line) == "secure after toggle":
        print("[FAIL] old key still reads new ciphertext")
        return 1

    print("[OK] toggle discarded the key; old key cannot read new traffic")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
