"""Session entity for the streamable HTTP transport.

A session binds a sequence of stateless HTTP calls to one logical client
conversation. Sessions live only in process memory; nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Session:
    id: str
    created_at: float
    last_activity: float
    initialized: bool = False

    def mark_initialized(self) -> None:
        # Monotonic: once the client acknowledged the handshake it stays acknowledged.
        self.initialized = True

    def idle_seconds(self, now: float) -> float:
        return now - self.last_activity
