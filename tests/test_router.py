# MIT License © 2025 Motohiro Suzuki
from dhlink.crypto.cipher import ByteXorCipher
from dhlink.protocol.audit import MemoryAudit
from dhlink.protocol.events import HandshakeProgress, KeyUnavailable, ReceivedPlaintext
from dhlink.protocol.failure import FailureCode
from dhlink.protocol.frames import classify
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.router import MessageRouter
from dhlink.protocol.types import DHParameters, HandshakeState, Role, SecurityLevel
from dhlink.transport.loopback import LoopbackLink

PARAMS = DHParameters(p=2089, g=2)
SECURED = SecurityLevel.SECURED


class FixedRandom:
    def __init__(self, *values):
        self._values = list(values)

    def random_int(self, low, high):
        return self._values.pop(0)


def _responder(audit=None):
    a_end, b_end = LoopbackLink.pair()
    res = HandshakeEngine(Role.RESPONDER, b_end, FixedRandom(11), audit=audit)
    return res, MessageRouter(res, audit=audit), a_end, b_end


def _complete(res):
    for line in ("PG:2089,2", "AKEY:128"):
        res.on_control_frame(classify(line))
    assert res.is_complete()


def test_cleartext_bypasses_handshake():
    res, router, _, _ = _responder()
    ev = router.on_line("PG:2089,2\n", SecurityLevel.CLEARTEXT)
    assert ev == ReceivedPlaintext("PG:2089,2", ciphered=False)
    assert res.state is HandshakeState.IDLE


def test_payload_before_complete_is_key_unavailable():
    audit = MemoryAudit()
    res, router, _, _ = _responder(audit)

    ev = router.on_line("72 101 121", SECURED)
    assert isinstance(ev, KeyUnavailable)
    assert ev.raw == "72 101 121"
    assert ev.failure.code is FailureCode.KEY_UNAVAILABLE
    assert audit.records[-1]["event"] == "payload_dropped"


def test_control_line_goes_to_engine():
    res, router, _, b_end = _responder()
    ev = router.on_line("PG:2089,2", SECURED)
    assert isinstance(ev, HandshakeProgress)
    assert ev.change.after is HandshakeState.ACK_RECEIVED
    assert not ev.key_available
    assert b_end.sent == ["ACK"]


def test_token_line_is_decoded_after_complete():
    res, router, _, _ = _responder()
    _complete(res)

    line = ByteXorCipher(res.cipher_key()).encode_line("initiator secure #1")
    assert router.on_line(line, SECURED) == ReceivedPlaintext("initiator secure #1", ciphered=True)


def test_literal_line_passes_through_after_complete():
    res, router, _, _ = _responder()
    _complete(res)
    ev = router.on_line("initiator: plain hello over secured link", SECURED)
    assert ev == ReceivedPlaintext("initiator: plain hello over secured link", ciphered=False)


def test_poll_reads_at_most_one_line():
    res, router, a_end, b_end = _responder()
    assert router.poll(b_end, SECURED) is None

    a_end.send("PG:2089,2")
    a_end.send("AKEY:128")
    assert isinstance(router.poll(b_end, SECURED), HandshakeProgress)
    assert b_end.pending() == 1
    assert router.poll(b_end, SECURED).key_available


def test_oversized_payload_token_does_not_raise():
    res, router, _, _ = _responder()
    _complete(res)
    line = "0" * 5000
    assert router.on_line(line, SECURED) == ReceivedPlaintext(line, ciphered=False)
