# MIT License © 2025 Motohiro Suzuki
import pytest

from dhlink.protocol.audit import MemoryAudit
from dhlink.protocol.failure import FailureCode
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


def _complete_pair():
    a_end, b_end = LoopbackLink.pair()
    ini = HandshakeEngine(Role.INITIATOR, a_end, FixedRandom(7), params=PARAMS)
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11))
    ini.begin_as_initiator()
    for end, engine in ((b_end, res), (a_end, ini), (b_end, res), (a_end, ini)):
        engine.on_control_frame(classify(end.try_receive_line()))
    assert ini.is_complete() and res.is_complete()
    return ini, res, a_end, b_end


def test_initiator_requires_params():
    a_end, _ = LoopbackLink.pair()
    with pytest.raises(ValueError):
        HandshakeEngine(Role.INITIATOR, a_end, FixedRandom(7))


def test_wrong_role_frames_are_dropped():
    a_end, b_end = LoopbackLink.pair()
    audit = MemoryAudit()
    ini = HandshakeEngine(Role.INITIATOR, a_end, FixedRandom(7), params=PARAMS, audit=audit)
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11))
    ini.begin_as_initiator()

    # an initiator never accepts PG/AKEY, a responder never accepts ACK/BKEY
    for engine, line in ((ini, "PG:2089,2"), (ini, "AKEY:5"), (res, "ACK"), (res, "BKEY:9")):
        before = engine.state
        ch = engine.on_control_frame(classify(line))
        assert ch.failure is not None
        assert ch.failure.code is FailureCode.WRONG_ROLE_FRAME
        assert engine.state is before
        assert engine.shared_secret() is None

    assert a_end.sent == ["PG:2089,2"]
    assert b_end.sent == []
    assert [r["event"] for r in audit.records].count("frame_dropped") == 2


def test_out_of_sequence_frame_is_dropped():
    _, b_end = LoopbackLink.pair()
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11))

    ch = res.on_control_frame(classify("AKEY:128"))
    assert ch.failure.code is FailureCode.UNEXPECTED_FRAME
    assert res.state is HandshakeState.IDLE
    assert b_end.sent == []


def test_malformed_control_frame_is_dropped():
    _, b_end = LoopbackLink.pair()
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11))

    for line in ("PG:abc,2", "PG:2089", "PG:"):
        ch = res.on_control_frame(classify(line))
        assert ch.failure.code is FailureCode.MALFORMED_CONTROL_FRAME
        assert res.state is HandshakeState.IDLE
    assert b_end.sent == []

    # still usable afterwards
    assert res.on_control_frame(classify("PG:2089,2")).sent == "ACK"


def test_malformed_bkey_keeps_initiator_waiting():
    a_end, b_end = LoopbackLink.pair()
    ini = HandshakeEngine(Role.INITIATOR, a_end, FixedRandom(7), params=PARAMS)
    ini.begin_as_initiator()
    ini.on_control_frame(classify("ACK"))

    ch = ini.on_control_frame(classify("BKEY:oops"))
    assert ch.failure.code is FailureCode.MALFORMED_CONTROL_FRAME
    assert ini.state is HandshakeState.ACK_RECEIVED
    assert ini.cipher_key() is None


def test_complete_ignores_further_control_frames():
    ini, res, a_end, b_end = _complete_pair()
    secret = ini.shared_secret()

    for line in ("BKEY:5", "ACK", "PG:2089,2"):
        ch = ini.on_control_frame(classify(line))
        assert not ch.changed and ch.failure is None
    assert res.on_control_frame(classify("AKEY:77")).sent is None

    assert ini.shared_secret() == res.shared_secret() == secret
    assert a_end.sent == ["PG:2089,2", "AKEY:128"]
    assert b_end.sent == ["ACK", "BKEY:2048"]


def test_reset_clears_secret_and_key():
    ini, res, _, _ = _complete_pair()
    ini.reset()
    res.reset()
    for engine in (ini, res):
        assert engine.state is HandshakeState.IDLE
        assert engine.shared_secret() is None
        assert engine.cipher_key() is None
        assert engine.public_value is None
    assert res.params is None


def test_oversized_fields_are_dropped_not_raised():
    a_end, b_end = LoopbackLink.pair()
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11))

    ch = res.on_control_frame(classify("PG:" + "1" * 5000 + ",2"))
    assert ch.failure.code is FailureCode.MALFORMED_CONTROL_FRAME
    assert res.state is HandshakeState.IDLE

    res.on_control_frame(classify("PG:2089,2"))
    ch = res.on_control_frame(classify("AKEY:" + "9" * 5000))
    assert ch.failure.code is FailureCode.MALFORMED_CONTROL_FRAME
    assert res.state is HandshakeState.ACK_RECEIVED
    assert b_end.sent == ["ACK"]
