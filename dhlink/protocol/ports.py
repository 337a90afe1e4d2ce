# MIT License © 2025 Motohiro Suzuki
"""
protocol/ports.py

Collaborator interfaces consumed by the link core, plus the small concrete
renderers / toggle inputs used by the runners and tests.

The core never touches a physical transport, display or button directly:
- LineTransport : send(line) / try_receive_line() (non-blocking)
- Renderer      : render_line(text) / flash_status(role, level)
- ToggleInput   : is_level_toggle_pressed() (debounced by the caller)
- RandomSource  : random_int(low, high), inclusive, uniform
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

from dhlink.protocol.types import Role, SecurityLevel


class LineTransport(Protocol):
    def send(self, line: str) -> None: ...

    def try_receive_line(self) -> Optional[str]: ...


class Renderer(Protocol):
    def render_line(self, text: str) -> None: ...

    def flash_status(self, role: Role, level: SecurityLevel) -> None: ...


class ToggleInput(Protocol):
    def is_level_toggle_pressed(self) -> bool: ...


class RandomSource(Protocol):
    def random_int(self, low: int, high: int) -> int: ...


# =========================
# Renderers
# =========================

class ConsoleRenderer:
    """Tagged evidence lines on stdout, e.g. `[initiator] RX: hello`."""

    def __init__(self, tag: str) -> None:
        self.tag = tag

    def render_line(self, text: str) -> None:
        print(f"[{self.tag}] {text}")

    def flash_status(self, role: Role, level: SecurityLevel) -> None:
        print(f"[{self.tag}] status role={role.value} level={level.value}")


class RecordingRenderer:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.statuses: list[tuple[Role, SecurityLevel]] = []

    def render_line(self, text: str) -> None:
        self.lines.append(text)

    def flash_status(self, role: Role, level: SecurityLevel) -> None:
        self.statuses.append((role, level))


# =========================
# Toggle inputs
# =========================

class NeverToggle:
    def is_level_toggle_pressed(self) -> bool:
        return False


class ManualToggle:
    """press() arms one toggle; the next poll consumes it."""

    def __init__(self) -> None:
        self._armed = False

    def press(self) -> None:
        self._armed = True

    def is_level_toggle_pressed(self) -> bool:
        pressed = self._armed
        self._armed = False
        return pressed


class PeriodicToggle:
    """Reports a press every period_s seconds of the injected clock."""

    def __init__(self, period_s: float, clock: Callable[[], float] = time.monotonic) -> None:
        if period_s <= 0:
            raise ValueError("period_s must be > 0")
        self.period_s = float(period_s)
        self._clock = clock
        self._last = clock()

    def is_level_toggle_pressed(self) -> bool:
        now = self._clock()
        if now - self._last >= self.period_s:
            self._last = now
            return True
        return False
