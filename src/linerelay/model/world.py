"""World, ScheduledEvent and Receipt dataclasses."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linerelay.model.agent import NodeAgent
    from linerelay.model.frame import Frame
    from linerelay.model.link import LinkDirectory


@dataclass(order=True)
class ScheduledEvent:
    """A callback the scheduler fires at the start of a given tick.

    Events due on the same tick fire in the order they were scheduled.
    """

    tick: int
    seq: int
    label: str = field(compare=False)
    action: Callable[[], object] = field(compare=False, repr=False)


@dataclass(frozen=True)
class Receipt:
    """One accepted token receipt: the observable output of the protocol."""

    time: float
    position: int
    sender: int
    value: int


@dataclass
class World:
    """Container holding all simulation state.

    The World is the source of truth for a run: the static link directory,
    the agents keyed by position, frames in flight, pending events, and the
    receipts observed so far.
    """

    directory: LinkDirectory
    agents: dict[int, NodeAgent] = field(default_factory=dict)  # position → agent
    frames: dict[str, Frame] = field(default_factory=dict)  # id → Frame (in flight only)
    events: list[ScheduledEvent] = field(default_factory=list)  # kept as a heap
    receipts: list[Receipt] = field(default_factory=list)

    # Simulation clock
    tick: int = 0
    tick_interval: float = 0.1  # simulated time per tick

    # Bookkeeping
    frames_sent: int = 0
    frames_dropped: int = 0
    _next_seq: int = field(default=0, repr=False)

    @property
    def time(self) -> float:
        """Simulated time at the start of the current tick."""
        return self.tick * self.tick_interval

    def tick_for(self, at: float) -> int:
        """First tick whose start time is at or after `at`."""
        # Rounding absorbs float error such as 3 * 0.1 != 0.3
        return max(0, math.ceil(round(at / self.tick_interval, 9)))

    def next_seq(self) -> int:
        seq = self._next_seq
        self._next_seq += 1
        return seq
