# MIT License © 2025 Motohiro Suzuki
"""
crypto/dh.py

Finite-field Diffie-Hellman math for the link handshake.

- modexp(): square-and-multiply, result always in [0, mod-1].
- Key pairs draw the private scalar from an injected RandomSource in [2, p-2].
- generate_parameters() builds a fresh group with `cryptography`; the
  handshake itself only ever uses caller-supplied constants.
"""

from __future__ import annotations

from dhlink.protocol.ports import RandomSource
from dhlink.protocol.types import DHParameters, KeyPair


def modexp(base: int, exponent: int, modulus: int) -> int:
    if modulus <= 0:
        raise ValueError("modulus must be > 0")
    if exponent < 0:
        raise ValueError("exponent must be >= 0")
    if modulus == 1:
        return 0

    result = 1
    b = base % modulus
    e = exponent
    while e > 0:
        if e & 1:
            result = (result * b) % modulus
        b = (b * b) % modulus
        e >>= 1
    return result


def generate_keypair(params: DHParameters, rng: RandomSource) -> KeyPair:
    if params.p < 5:
        raise ValueError("modulus too small for a private scalar in [2, p-2]")
    priv = rng.random_int(2, params.p - 2)
    return KeyPair(private_scalar=priv, public_value=modexp(params.g, priv, params.p))


def compute_shared(peer_public: int, private_scalar: int, p: int) -> int:
    return modexp(peer_public, private_scalar, p)


def generate_parameters(key_size: int = 512, generator: int = 2) -> DHParameters:
    """
    Fresh safe-prime group via cryptography's DH parameter generation.

    Slow for large key sizes; meant for the offline params tool, never for the
    tick loop.
    """
    from cryptography.hazmat.primitives.asymmetric import dh

    numbers = dh.generate_parameters(generator=generator, key_size=key_size).parameter_numbers()
    return DHParameters(p=int(numbers.p), g=int(numbers.g))
