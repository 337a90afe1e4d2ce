# MIT License © 2025 Motohiro Suzuki
from dhlink.crypto.dh import modexp
from dhlink.protocol.frames import classify
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.types import DHParameters, HandshakeState, Role
from dhlink.transport.loopback import LoopbackLink

PARAMS = DHParameters(p=2089, g=2)


class FixedRandom:
    def __init__(self, *values):
        self._values = list(values)

    def random_int(self, low, high):
        return self._values.pop(0)


def _deliver(end, engine):
    return engine.on_control_frame(classify(end.try_receive_line()))


def test_idle_to_complete_both_roles():
    a_end, b_end = LoopbackLink.pair()
    ini = HandshakeEngine(Role.INITIATOR, a_end, FixedRandom(7), params=PARAMS)
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11))

    ch = ini.begin_as_initiator()
    assert ch.sent == "PG:2089,2"
    assert ini.state is HandshakeState.PARAMS_SENT

    ch = _deliver(b_end, res)
    assert ch.sent == "ACK"
    assert res.state is HandshakeState.ACK_RECEIVED
    assert res.params == PARAMS

    ch = _deliver(a_end, ini)
    assert ch.sent == "AKEY:128"
    assert ini.state is HandshakeState.ACK_RECEIVED
    assert ini.public_value == 128

    ch = _deliver(b_end, res)
    assert ch.sent == "BKEY:2048"
    assert ch.key_available
    assert res.is_complete()

    ch = _deliver(a_end, ini)
    assert ch.key_available
    assert ini.is_complete()

    expected = modexp(modexp(2, 7, 2089), 11, 2089)
    assert ini.shared_secret() == res.shared_secret() == expected
    assert ini.cipher_key() == res.cipher_key() == expected % 256

    assert a_end.sent == ["PG:2089,2", "AKEY:128"]
    assert b_end.sent == ["ACK", "BKEY:2048"]
    assert a_end.pending() == b_end.pending() == 0


def test_begin_is_noop_unless_idle_initiator():
    a_end, b_end = LoopbackLink.pair()
    ini = HandshakeEngine(Role.INITIATOR, a_end, FixedRandom(7), params=PARAMS)
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11))

    assert not res.begin_as_initiator().changed
    assert b_end.sent == []

    ini.begin_as_initiator()
    again = ini.begin_as_initiator()
    assert not again.changed and again.sent is None
    assert a_end.sent == ["PG:2089,2"]
