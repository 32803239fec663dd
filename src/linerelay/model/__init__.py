"""Domain model: Token, LinkDirectory, NodeAgent, Frame, World."""

from linerelay.model.agent import AgentState, Hop, NodeAgent, RelayApplication, Role, Transport
from linerelay.model.frame import Frame
from linerelay.model.link import LinkDirectory, Neighbors, Side
from linerelay.model.token import TOKEN_MAX, TOKEN_MIN, TOKEN_SIZE, Token
from linerelay.model.world import Receipt, ScheduledEvent, World

__all__ = [
    "TOKEN_MAX",
    "TOKEN_MIN",
    "TOKEN_SIZE",
    "AgentState",
    "Frame",
    "Hop",
    "LinkDirectory",
    "Neighbors",
    "NodeAgent",
    "Receipt",
    "RelayApplication",
    "Role",
    "ScheduledEvent",
    "Side",
    "Token",
    "Transport",
    "World",
]
