"""NodeAgent: per-position state machine implementing the relay rule."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from linerelay.errors import ConfigurationError, ProtocolViolationError, TransportError
from linerelay.model.token import TOKEN_MAX, TOKEN_MIN, Token

logger = logging.getLogger(__name__)

ORIGIN_POSITION = 0
FLIP_POSITION = 1  # the forwarder that becomes an endpoint after the Origin's hand-off


class Role(Enum):
    """What an agent does with a received token."""

    ORIGIN = "origin"  # sends once at start, then idle
    FORWARDER = "forwarder"  # passes the token on unchanged, away from its sender
    ENDPOINT_GENERATOR = "endpoint_generator"  # replaces the token and bounces it back


class AgentState(Enum):
    """Lifecycle states. STOPPED is only entered through stop()."""

    IDLE = "idle"
    AWAITING_ROLE_DECISION = "awaiting_role_decision"
    FORWARDING = "forwarding"
    GENERATING = "generating"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Hop:
    """The single outbound send produced by a start or receive event."""

    sender: int
    dest: int
    token: Token
    regenerated: bool


class Transport(Protocol):
    """Point-to-point channel the agent sends through."""

    def send(self, sender: int, dest: int, token: Token) -> None: ...

    def release(self, position: int) -> None: ...


@runtime_checkable
class RelayApplication(Protocol):
    """Capability interface the scheduler drives."""

    def start(self) -> Hop | None: ...

    def receive(self, token: Token, sender: int) -> Hop | None: ...

    def stop(self) -> None: ...


@dataclass
class NodeAgent:
    """One agent in the line.

    Owns its role, neighbor set, and random source; never touches another
    agent's state. Every accepted receipt produces exactly one send unless the
    agent is the Origin, which only ever sends once from start().
    """

    # Identity
    position: int = 0
    left: int | None = None
    right: int | None = None

    # Role and lifecycle
    role: Role = Role.FORWARDER
    state: AgentState = AgentState.IDLE
    live_neighbor: int | None = None  # sole send target while an endpoint

    # Collaborators
    transport: Transport | None = None
    rng: random.Random = field(default_factory=random.Random)
    value_range: tuple[int, int] = (TOKEN_MIN, TOKEN_MAX)
    clock: Callable[[], float] | None = None

    # Counters
    received_count: int = 0
    sent_count: int = 0
    role_flips: int = 0

    def configure(
        self,
        position: int,
        left: int | None,
        right: int | None,
        role: Role,
        *,
        transport: Transport | None = None,
        rng: random.Random | None = None,
        value_range: tuple[int, int] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Set static identity and initial role.

        Raises:
            ConfigurationError: If the neighbors do not match the position, or
                the role does not fit an endpoint/interior position.
        """
        if position < 0:
            raise ConfigurationError(f"Position must be non-negative, got {position}")
        if left is not None and left != position - 1:
            raise ConfigurationError(f"Position {position}: left neighbor must be {position - 1}")
        if right is not None and right != position + 1:
            raise ConfigurationError(
                f"Position {position}: right neighbor must be {position + 1}"
            )
        if (left is None) != (position == ORIGIN_POSITION):
            raise ConfigurationError(
                f"Position {position}: only the first position has no left neighbor"
            )
        if left is None and right is None:
            raise ConfigurationError(f"Position {position} has no neighbors")

        is_endpoint = left is None or right is None
        if role is Role.ORIGIN and position != ORIGIN_POSITION:
            raise ConfigurationError(f"Only position {ORIGIN_POSITION} can be the Origin")
        if role is Role.FORWARDER and is_endpoint:
            raise ConfigurationError(f"Endpoint position {position} cannot be a Forwarder")
        if role is not Role.FORWARDER and not is_endpoint:
            raise ConfigurationError(
                f"Interior position {position} must start as a Forwarder, got {role.value}"
            )

        lo, hi = value_range if value_range is not None else self.value_range
        if lo > hi:
            raise ConfigurationError(f"Invalid value range [{lo}, {hi}]")

        self.position = position
        self.left = left
        self.right = right
        self.role = role
        self.state = AgentState.IDLE
        self.live_neighbor = (left if left is not None else right) if is_endpoint else None
        self.value_range = (lo, hi)
        if transport is not None:
            self.transport = transport
        if rng is not None:
            self.rng = rng
        if clock is not None:
            self.clock = clock
        self.received_count = 0
        self.sent_count = 0
        self.role_flips = 0

    @property
    def is_flip_candidate(self) -> bool:
        return self.position == FLIP_POSITION and self.role is Role.FORWARDER

    def start(self) -> Hop | None:
        """Emit the first token if this is the Origin; otherwise only wait."""
        if self.state is AgentState.STOPPED:
            logger.debug("Node %d is stopped; ignoring start", self.position, extra=self._extra())
            return None

        if self.role is Role.ORIGIN:
            if self.sent_count:
                logger.warning(
                    "Origin node %d already sent its token; ignoring repeated start",
                    self.position,
                    extra=self._extra(),
                )
                return None
            self.state = AgentState.GENERATING
            token = self._draw()
            logger.info(
                "Node %d generated initial value %d",
                self.position,
                token.value,
                extra=self._extra(),
            )
            return self._send(self.live_neighbor, token, regenerated=True)

        if self.is_flip_candidate:
            self.state = AgentState.AWAITING_ROLE_DECISION
        return None

    def receive(self, token: Token, sender: int) -> Hop | None:
        """Apply the relay rule to a token received from `sender`.

        Raises:
            ProtocolViolationError: If `sender` is not a configured neighbor.
        """
        if self.state is AgentState.STOPPED:
            logger.debug(
                "Node %d is stopped; ignoring value %d from node %d",
                self.position,
                token.value,
                sender,
                extra=self._extra(),
            )
            return None

        if sender not in (self.left, self.right):
            raise ProtocolViolationError(
                f"Node {self.position} received a token from node {sender}, "
                f"which is not a neighbor (left={self.left}, right={self.right})",
                position=self.position,
                sender=sender,
            )

        self.received_count += 1
        logger.info(
            "Node %d received value %d from node %d",
            self.position,
            token.value,
            sender,
            extra=self._extra(),
        )

        if self.role is Role.ORIGIN:
            logger.debug(
                "Origin takes no further action; dropping value %d",
                token.value,
                extra=self._extra(),
            )
            return None

        if self.is_flip_candidate and sender == ORIGIN_POSITION:
            dest = self._opposite(sender)
            self.role = Role.ENDPOINT_GENERATOR
            self.live_neighbor = dest
            self.role_flips += 1
            self.state = AgentState.FORWARDING
            logger.info(
                "Node %d hand-off from Origin: forwarding once, then generating toward node %d",
                self.position,
                dest,
                extra=self._extra(),
            )
            hop = self._send(dest, token, regenerated=False)
            self.state = AgentState.GENERATING
            return hop

        if self.role is Role.ENDPOINT_GENERATOR:
            self.state = AgentState.GENERATING
            fresh = self._draw()
            logger.info(
                "Node %d generated new value %d",
                self.position,
                fresh.value,
                extra=self._extra(),
            )
            return self._send(self.live_neighbor, fresh, regenerated=True)

        self.state = AgentState.FORWARDING
        return self._send(self._opposite(sender), token, regenerated=False)

    def stop(self) -> None:
        """Release any pending outbound link. Idempotent."""
        if self.state is AgentState.STOPPED:
            return
        if self.transport is not None:
            self.transport.release(self.position)
        self.state = AgentState.STOPPED
        logger.debug(
            "Node %d stopped after %d receipts and %d sends",
            self.position,
            self.received_count,
            self.sent_count,
            extra=self._extra(),
        )

    def _opposite(self, sender: int) -> int | None:
        return self.right if sender == self.left else self.left

    def _draw(self) -> Token:
        lo, hi = self.value_range
        return Token(self.rng.randint(lo, hi))

    def _send(self, dest: int | None, token: Token, regenerated: bool) -> Hop | None:
        if self.transport is None:
            raise ConfigurationError(f"Node {self.position} is not bound to a transport")
        if dest is None:
            logger.error(
                "Node %d has no neighbor to send value %d to",
                self.position,
                token.value,
                extra=self._extra(),
            )
            return None

        logger.info(
            "Node %d sending value %d to node %d",
            self.position,
            token.value,
            dest,
            extra=self._extra(),
        )
        try:
            self.transport.send(self.position, dest, token)
        except TransportError as e:
            # No retry: this leg of the relay ends here
            logger.error(
                "Node %d abandoned send of value %d to node %d: %s",
                self.position,
                token.value,
                dest,
                e,
                extra=self._extra(),
            )
            return None

        self.sent_count += 1
        return Hop(sender=self.position, dest=dest, token=token, regenerated=regenerated)

    def _extra(self) -> dict[str, Any]:
        if self.clock is None:
            return {}
        return {"sim_time": self.clock()}
