# MIT License © 2025 Motohiro Suzuki
"""
transport/io_async.py

Newline-terminated ASCII lines over asyncio streams.

- A background reader task fills an in-memory queue, so try_receive_line()
  never awaits (the tick loop stays non-blocking).
- send() writes immediately; drain happens on the next await point (flush()).
- Non-ASCII bytes on the wire are replaced, lines over MAX_LINE are rejected
  by the stream reader and close the link.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Optional

MAX_LINE = 64 * 1024


class AsyncLineIO:
    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._r = reader
        self._w = writer
        self._inbox: deque[str] = deque()
        self._closed = False
        self._task: asyncio.Task | None = None
        self.eof = False

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._read_loop())

    async def _read_loop(self) -> None:
        try:
            while True:
                raw = await self._r.readline()
                if not raw:
                    break
                self._inbox.append(raw.decode("ascii", errors="replace").rstrip("\r\n"))
        except (asyncio.IncompleteReadError, ConnectionError, ValueError):
            pass
        finally:
            self.eof = True

    # -------------------------
    # LineTransport
    # -------------------------
    def send(self, line: str) -> None:
        if self._closed:
            return
        if "\n" in line:
            raise ValueError("line must not contain a newline")
        self._w.write(line.encode("ascii", errors="replace") + b"\n")

    def try_receive_line(self) -> Optional[str]:
        if not self._inbox:
            return None
        return self._inbox.popleft()

    async def flush(self) -> None:
        if self._closed:
            return
        await self._w.drain()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._task is not None:
            self._task.cancel()
        try:
            self._w.close()
            await self._w.wait_closed()
        except (ConnectionError, OSError):
            pass


async def open_connection(host: str, port: int) -> AsyncLineIO:
    reader, writer = await asyncio.open_connection(host, port, limit=MAX_LINE)
    io = AsyncLineIO(reader, writer)
    io.start()
    return io
