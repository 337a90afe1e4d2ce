# MIT License © 2025 Motohiro Suzuki
"""
protocol/result.py

Outcome of parsing a control frame's fields: either the parsed value, or the
Failure that gets the frame dropped. Parsers return it instead of raising so
a bad frame from the wire never escapes the handshake engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from dhlink.protocol.errors import ProtocolError
from dhlink.protocol.failure import Failure, FailureCode

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    failure: Optional[Failure] = None

    @classmethod
    def Ok(cls, v: T) -> "Result[T]":
        return cls(ok=True, value=v)

    @classmethod
    def Err(cls, f: Failure) -> "Result[T]":
        return cls(ok=False, failure=f)

    @property
    def code(self) -> Optional[FailureCode]:
        return None if self.failure is None else self.failure.code

    def unwrap(self) -> T:
        # ok alone decides: 0 is a valid public value
        if not self.ok:
            raise ProtocolError(f"parse failed: {self.code}")
        return self.value  # type: ignore[return-value]

    def unwrap_err(self) -> Failure:
        if self.ok or self.failure is None:
            raise ProtocolError("no failure on a successful parse")
        return self.failure
