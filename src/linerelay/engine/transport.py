"""In-memory point-to-point transport over the world's links.

Each send opens a fresh PendingLink, puts exactly one encoded token in
flight, and closes the link again. Delivery is reliable and ordered; the
only way a frame is lost is the stop deadline.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from linerelay.errors import TransportError
from linerelay.model.frame import Frame

if TYPE_CHECKING:
    from linerelay.model.token import Token
    from linerelay.model.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingLink:
    """An outbound connection held by one agent for one token."""

    sender: int
    dest: int
    opened_at: float


class LineTransport:
    """Carries tokens between adjacent agents of a World.

    Args:
        world: The world whose directory and frame table are used.
        hop_latency: Simulated time for a frame to cross one link.
    """

    def __init__(self, world: World, hop_latency: float = 0.5) -> None:
        if hop_latency <= 0:
            raise ValueError(f"hop_latency must be positive, got {hop_latency}")
        self.world = world
        self.hop_latency = hop_latency
        self._pending: dict[int, PendingLink] = {}

    @property
    def frame_speed(self) -> float:
        """Progress per tick for a frame on any link."""
        return min(1.0, self.world.tick_interval / self.hop_latency)

    def pending(self, position: int) -> PendingLink | None:
        return self._pending.get(position)

    def open(self, sender: int, dest: int) -> PendingLink:
        """Open the sender's single outbound link.

        Raises:
            TransportError: If the destination is unknown or not adjacent, or
                the sender already holds a pending link.
        """
        if dest not in self.world.agents:
            raise TransportError(f"No agent at position {dest}", sender=sender, dest=dest)
        if not self.world.directory.are_adjacent(sender, dest):
            raise TransportError(
                f"Node {sender} has no link to node {dest}", sender=sender, dest=dest
            )
        if sender in self._pending:
            raise TransportError(
                f"Node {sender} already holds a pending link to node {self._pending[sender].dest}",
                sender=sender,
                dest=dest,
            )
        link = PendingLink(sender=sender, dest=dest, opened_at=self.world.time)
        self._pending[sender] = link
        return link

    def close(self, link: PendingLink) -> None:
        if self._pending.get(link.sender) == link:
            del self._pending[link.sender]

    def send(self, sender: int, dest: int, token: Token) -> None:
        """Put one encoded token in flight from `sender` to `dest`."""
        link = self.open(sender, dest)
        try:
            self.transmit(sender, dest, token.encode())
        finally:
            self.close(link)

    def transmit(self, sender: int, dest: int, payload: bytes) -> Frame:
        """Place a raw payload on the link from `sender` to `dest`."""
        frame = Frame(
            id=str(uuid.uuid4()),
            payload=payload,
            source=sender,
            dest=dest,
            progress=0.0,
            speed=self.frame_speed,
            sent_at=self.world.time,
        )
        self.world.frames[frame.id] = frame
        self.world.frames_sent += 1
        logger.debug(
            "Frame %s in flight: node %d -> node %d (%d bytes)",
            frame.id[:8],
            sender,
            dest,
            len(payload),
        )
        return frame

    def release(self, position: int) -> None:
        """Tear down any pending link held by `position`. Idempotent."""
        link = self._pending.pop(position, None)
        if link is not None:
            logger.debug("Released pending link node %d -> node %d", link.sender, link.dest)
