# MIT License © 2025 Motohiro Suzuki
from __future__ import annotations


class LinkError(Exception):
    pass


class ConfigError(LinkError):
    pass


class ProtocolError(LinkError):
    pass


class MalformedFrameError(ProtocolError):
    pass


class KeyUnavailableError(ProtocolError):
    """Cipher requested before the handshake reached COMPLETE."""
    pass
