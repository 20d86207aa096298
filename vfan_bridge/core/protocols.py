"""Protocol definitions for the transport used by the pump pair."""

from __future__ import annotations

from typing import Protocol


class LineTransport(Protocol):
    """Byte-stream contract the bridge requires from the serial link.

    Ownership: the supervisor opens and closes the transport. While a
    connection is live the telemetry reader is the only caller of
    ``readline`` and the duty writer is the only caller of ``write``.
    Neither pump may call ``close``.
    """

    async def readline(self) -> bytes:
        """Return the next newline-terminated line.

        Raises:
            TransportError: On end-of-stream or any I/O failure.
        """
        ...

    async def write(self, data: bytes) -> None:
        """Write ``data`` and wait until it has been flushed.

        Raises:
            TransportError: If the link is gone.
        """
        ...

    async def close(self) -> None:
        """Release the link. Safe to call more than once."""
        ...
