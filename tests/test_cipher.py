# MIT License © 2025 Motohiro Suzuki
import pytest

from dhlink.crypto.cipher import (
    ByteXorCipher,
    cipher_for,
    derive_cipher_key,
    format_tokens,
    is_token_line,
    parse_tokens,
)
from dhlink.protocol.errors import KeyUnavailableError, MalformedFrameError


def test_cipher_is_an_involution():
    for key in (0, 1, 0x5A, 246, 255):
        c = ByteXorCipher(key)
        data = "Hey, 秘密!".encode("utf-8")
        assert c.decode(c.encode(data)) == data


def test_key_zero_is_passthrough():
    c = ByteXorCipher(0)
    assert c.encode_line("Hey") == "72 101 121"


def test_line_round_trip_with_derived_key():
    c = ByteXorCipher(derive_cipher_key(2038))
    assert c.key == 246
    line = c.encode_line("initiator: first secret message")
    assert is_token_line(line)
    assert c.decode_line(line) == "initiator: first secret message"


def test_key_out_of_byte_range_rejected():
    with pytest.raises(ValueError):
        ByteXorCipher(256)
    with pytest.raises(ValueError):
        ByteXorCipher(-1)


def test_parse_tokens_errors():
    for bad in ("", "   ", "12 abc", "256", "1 -2", "١٢"):
        with pytest.raises(MalformedFrameError):
            parse_tokens(bad)
    assert parse_tokens(" 0  255 ") == [0, 255]
    assert format_tokens([0, 255]) == "0 255"
    assert not is_token_line("hello world")


def test_cipher_for_requires_complete_handshake():
    class _Idle:
        def is_complete(self):
            return False

        def cipher_key(self):
            return None

    with pytest.raises(KeyUnavailableError):
        cipher_for(_Idle())


def test_oversized_tokens_are_malformed():
    for bad in ("0" * 5000, "72 " + "1" * 5000, "0001"):
        with pytest.raises(MalformedFrameError):
            parse_tokens(bad)
        assert not is_token_line(bad)
