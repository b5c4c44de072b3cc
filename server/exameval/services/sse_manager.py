"""
SSE (Server-Sent Events) Connection Manager for real-time updates.

Channels are named ``user:<id>`` for per-user notices (upload evaluated) and
``section:<name>`` for section-wide notices (test assigned).
"""
import asyncio
from typing import Dict, Iterable, List


def user_channel(user_id: int) -> str:
    return f"user:{user_id}"


def section_channel(section: str) -> str:
    return f"section:{section}"


class SSEConnectionManager:
    """Manages SSE connections for real-time dashboard updates."""

    def __init__(self):
        # Map channel -> list of queues
        self.active_connections: Dict[str, List[asyncio.Queue]] = {}

    async def connect(self, channels: Iterable[str]) -> asyncio.Queue:
        """Create a new listener subscribed to every given channel."""
        queue: asyncio.Queue = asyncio.Queue()
        for channel in channels:
            self.active_connections.setdefault(channel, []).append(queue)
        return queue

    def disconnect(self, queue: asyncio.Queue) -> None:
        """Remove a listener from every channel it joined."""
        for channel in list(self.active_connections):
            listeners = self.active_connections[channel]
            if queue in listeners:
                listeners.remove(queue)
            if not listeners:
                del self.active_connections[channel]

    async def broadcast(self, channel: str, message: dict) -> None:
        """Broadcast a message to all listeners of a channel."""
        for queue in self.active_connections.get(channel, []):
            await queue.put(message)


# Global manager instance
sse_manager = SSEConnectionManager()
