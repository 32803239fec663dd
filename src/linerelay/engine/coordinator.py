"""Relay coordinator: wires the line, assigns roles, and runs the scenario."""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field

from pydantic import ValidationError

from linerelay.config import RelayConfig
from linerelay.engine.simulation import abandon_in_flight, run_until, schedule
from linerelay.engine.transport import LineTransport
from linerelay.errors import ConfigurationError
from linerelay.model.agent import NodeAgent, Role
from linerelay.model.link import LinkDirectory
from linerelay.model.world import World

logger = logging.getLogger(__name__)


@dataclass
class RelaySummary:
    """What a finished run observed."""

    receipts_by_node: dict[int, int] = field(default_factory=dict)
    sends_by_node: dict[int, int] = field(default_factory=dict)
    total_receipts: int = 0
    frames_sent: int = 0
    frames_dropped: int = 0
    role_flips: dict[int, int] = field(default_factory=dict)
    final_roles: dict[int, str] = field(default_factory=dict)


class RelayCoordinator:
    """Builds the line of agents and drives it from start offset to stop deadline.

    Example:
        >>> coordinator = RelayCoordinator(RelayConfig(seed=7))
        >>> world = coordinator.run()
        >>> [r.position for r in world.receipts][:4]
        [1, 2, 3, 4]
    """

    def __init__(self, config: RelayConfig | None = None) -> None:
        self.config = config if config is not None else RelayConfig()
        self.directory: LinkDirectory | None = None
        self.roles: dict[int, Role] = {}
        self.world: World | None = None
        self.transport: LineTransport | None = None

    @classmethod
    def from_overrides(cls, **overrides: object) -> RelayCoordinator:
        """Build a coordinator from keyword overrides over the environment.

        Raises:
            ConfigurationError: If the merged settings are invalid.
        """
        try:
            config = RelayConfig(**overrides)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid relay configuration: {e}") from e
        return cls(config)

    def build(self, line_length: int | None = None) -> LinkDirectory:
        """Construct and validate the link directory for 0..line_length-1."""
        length = self.config.line_length if line_length is None else line_length
        self.directory = LinkDirectory.for_line(length)
        self.roles = {}
        logger.debug("Built link directory for %d agents", length)
        return self.directory

    def assign_roles(self) -> dict[int, Role]:
        """Origin at the first position, endpoint generator at the last, forwarders between."""
        if self.directory is None:
            raise ConfigurationError("build() must run before assign_roles()")
        if self.roles:
            return self.roles
        terminus = self.directory.terminus
        self.roles = {
            p: Role.ORIGIN
            if p == self.directory.origin
            else Role.ENDPOINT_GENERATOR
            if p == terminus
            else Role.FORWARDER
            for p in self.directory
        }
        return self.roles

    def create_world(self) -> World:
        """Instantiate the agents and transport for the configured line."""
        directory = self.directory if self.directory is not None else self.build()
        roles = self.assign_roles()

        world = World(directory=directory, tick_interval=self.config.tick_interval)
        transport = LineTransport(world, hop_latency=self.config.hop_latency)

        for p in directory:
            neighbors = directory.neighbors(p)
            agent = NodeAgent()
            agent.configure(
                p,
                neighbors.left,
                neighbors.right,
                roles[p],
                transport=transport,
                rng=self._rng_for(p),
                value_range=self.config.value_range,
                clock=lambda: world.time,
            )
            world.agents[p] = agent

        self.world = world
        self.transport = transport
        return world

    def run(self, start_offset: float | None = None, stop_deadline: float | None = None) -> World:
        """Start every agent at start_offset and stop every agent at stop_deadline.

        Frames still in flight at the deadline are abandoned.

        Raises:
            ConfigurationError: If stop_deadline <= start_offset, or both fall
                on the same scheduler tick.
        """
        start = self.config.start_offset if start_offset is None else start_offset
        stop = self.config.stop_deadline if stop_deadline is None else stop_deadline
        if start < 0:
            raise ConfigurationError(f"start_offset must be non-negative, got {start}")
        if stop <= start:
            raise ConfigurationError(
                f"stop_deadline ({stop}) must be greater than start_offset ({start})"
            )

        world = self.world if self.world is not None else self.create_world()
        # Same-tick start and stop would let agents act after the deadline
        if world.tick_for(stop) <= world.tick_for(start):
            raise ConfigurationError(
                f"start_offset ({start}) and stop_deadline ({stop}) fall on the same "
                f"tick of {world.tick_interval}; separate them by at least one tick"
            )
        for p, agent in sorted(world.agents.items()):
            schedule(world, start, f"start node {p}", agent.start)
        for p, agent in sorted(world.agents.items()):
            schedule(world, stop, f"stop node {p}", agent.stop)

        logger.info(
            "Running line of %d agents from t=%.2f to t=%.2f",
            len(world.agents),
            start,
            stop,
        )
        run_until(world, world.tick_for(stop))

        abandoned = abandon_in_flight(world)
        if abandoned:
            logger.info(
                "%d frame(s) in flight at the deadline were abandoned",
                abandoned,
                extra={"sim_time": stop},
            )
        return world

    def summarize(self, world: World | None = None) -> RelaySummary:
        world = world if world is not None else self.world
        if world is None:
            raise ConfigurationError("No world to summarize; call run() first")
        counts = Counter(r.position for r in world.receipts)
        return RelaySummary(
            receipts_by_node={p: counts.get(p, 0) for p in sorted(world.agents)},
            sends_by_node={p: a.sent_count for p, a in sorted(world.agents.items())},
            total_receipts=len(world.receipts),
            frames_sent=world.frames_sent,
            frames_dropped=world.frames_dropped,
            role_flips={p: a.role_flips for p, a in sorted(world.agents.items()) if a.role_flips},
            final_roles={p: a.role.value for p, a in sorted(world.agents.items())},
        )

    def _rng_for(self, position: int) -> random.Random:
        if self.config.seed is None:
            return random.Random()
        return random.Random(self.config.seed + position)
