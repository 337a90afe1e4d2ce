# MIT License © 2025 Motohiro Suzuki
"""
protocol/router.py

Demultiplexes the shared channel: control frames to the handshake engine,
payload frames to the cipher (or straight through in CLEARTEXT).

CLEARTEXT : every line surfaces verbatim, handshake machinery bypassed.
SECURED   : control -> HandshakeProgress
            payload before COMPLETE -> KeyUnavailable (dropped)
            payload token line after COMPLETE -> decoded ReceivedPlaintext
            payload literal line after COMPLETE -> passthrough ReceivedPlaintext
"""

from __future__ import annotations

from typing import Any, Optional

from dhlink.crypto.cipher import cipher_for, is_token_line
from dhlink.protocol.audit import emit
from dhlink.protocol.events import Event, HandshakeProgress, KeyUnavailable, ReceivedPlaintext
from dhlink.protocol.failure import FailureCode, data_failure
from dhlink.protocol.frames import ControlFrame, PayloadFrame, classify
from dhlink.protocol.handshake import HandshakeEngine
from dhlink.protocol.ports import LineTransport
from dhlink.protocol.types import SecurityLevel


class MessageRouter:
    def __init__(self, engine: HandshakeEngine, *, audit: Any = None) -> None:
        self.engine = engine
        self._audit = audit

    def poll(self, transport: LineTransport, level: SecurityLevel) -> Optional[Event]:
        line = transport.try_receive_line()
        if line is None:
            return None
        return self.on_line(line, level)

    def on_line(self, line: str, level: SecurityLevel) -> Event:
        if level is not SecurityLevel.SECURED:
            return ReceivedPlaintext(text=line.rstrip("\r\n"), ciphered=False)

        frame = classify(line)
        if isinstance(frame, ControlFrame):
            return HandshakeProgress(change=self.engine.on_control_frame(frame))
        return self._on_payload(frame)

    def _on_payload(self, frame: PayloadFrame) -> Event:
        if not self.engine.is_complete():
            failure = data_failure(FailureCode.KEY_UNAVAILABLE, "payload before handshake complete")
            emit(self._audit, {
                "event": "payload_dropped",
                "role": self.engine.role.value,
                "state": self.engine.state.value,
                "failure": failure.to_record(),
            })
            return KeyUnavailable(raw=frame.text, failure=failure)

        if not is_token_line(frame.text):
            return ReceivedPlaintext(text=frame.text, ciphered=False)

        return ReceivedPlaintext(text=cipher_for(self.engine).decode_line(frame.text), ciphered=True)
