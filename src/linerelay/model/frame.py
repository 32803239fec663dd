"""Frame dataclass: an encoded token in flight between two adjacent agents."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Frame:
    """A token's wire payload traveling along one link.

    When progress >= 1.0, the frame is delivered to the destination agent.
    """

    id: str
    payload: bytes

    # Routing
    source: int  # sending agent position
    dest: int  # receiving agent position

    # Transit progress
    progress: float = 0.0  # 0.0 (at source) to 1.0 (at destination)
    speed: float = 0.2  # progress increment per tick

    # Lifecycle
    sent_at: float = 0.0  # simulated time the frame left the sender
    alive: bool = True  # set to False when delivered or abandoned
