# MIT License © 2025 Motohiro Suzuki
"""
crypto/cipher.py

Single-byte XOR stream cipher keyed by the DH shared secret.

NOT secure. No integrity tag: a corrupted token decodes to a corrupted byte
without detection. Key 0 degenerates to pass-through and is not rejected.

Wire form: one decimal token per ciphertext byte, space separated
("72 101 121").
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from dhlink.protocol.errors import KeyUnavailableError, MalformedFrameError


def derive_cipher_key(shared_secret: int) -> int:
    return int(shared_secret) % 256


class ByteXorCipher:
    name = "xor8"

    def __init__(self, key: int) -> None:
        if key < 0 or key > 0xFF:
            raise ValueError("cipher key must be a byte value")
        self.key = int(key)

    def encode(self, plaintext: bytes | bytearray) -> list[int]:
        return [b ^ self.key for b in bytes(plaintext)]

    def decode(self, tokens: Iterable[int]) -> bytes:
        return bytes((int(t) & 0xFF) ^ self.key for t in tokens)

    # ---- line helpers ----
    def encode_line(self, text: str) -> str:
        return format_tokens(self.encode(text.encode("utf-8")))

    def decode_line(self, line: str) -> str:
        return self.decode(parse_tokens(line)).decode("utf-8", errors="replace")


def format_tokens(tokens: Sequence[int]) -> str:
    return " ".join(str(int(t)) for t in tokens)


def parse_tokens(line: str) -> list[int]:
    parts = line.split()
    if not parts:
        raise MalformedFrameError("empty token line")
    out: list[int] = []
    for p in parts:
        if not (p.isascii() and p.isdigit()):
            raise MalformedFrameError(f"non-numeric token: {p!r}")
        if len(p) > 3:
            raise MalformedFrameError("token longer than 3 digits")
        v = int(p)
        if v > 0xFF:
            raise MalformedFrameError(f"token out of byte range: {v}")
        out.append(v)
    return out


def is_token_line(line: str) -> bool:
    try:
        parse_tokens(line)
    except MalformedFrameError:
        return False
    return True


def cipher_for(engine: Any) -> ByteXorCipher:
    """Cipher for the engine's current key; callers check is_complete() first."""
    key = engine.cipher_key() if engine.is_complete() else None
    if key is None:
        raise KeyUnavailableError("handshake not complete")
    return ByteXorCipher(key)
