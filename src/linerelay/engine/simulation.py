"""World tick driver: the single logical timeline that invokes agent callbacks."""

from __future__ import annotations

import heapq
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from linerelay.errors import ProtocolViolationError
from linerelay.model.agent import AgentState
from linerelay.model.token import Token
from linerelay.model.world import Receipt, ScheduledEvent

if TYPE_CHECKING:
    from linerelay.model.frame import Frame
    from linerelay.model.world import World

logger = logging.getLogger(__name__)


def schedule(world: World, at: float, label: str, action: Callable[[], object]) -> ScheduledEvent:
    """Schedule `action` to fire at the first tick at or after simulated time `at`."""
    event = ScheduledEvent(tick=world.tick_for(at), seq=world.next_seq(), label=label, action=action)
    heapq.heappush(world.events, event)
    return event


def tick_world(world: World) -> None:
    """Execute one simulation tick.

    Tick sequence:
    1. Fire scheduled events due this tick, in scheduling order
    2. Advance all frames (progress += speed)
    3. Deliver frames where progress >= 1.0, oldest first
    4. Garbage collect delivered frames
    5. Increment world.tick

    Callbacks run one at a time, so no two agents ever act concurrently.

    Args:
        world: The world to advance
    """
    _fire_due_events(world)
    _advance_frames(world)
    _deliver_frames(world)
    _garbage_collect_frames(world)

    world.tick += 1

    if world.tick % 100 == 0:
        logger.debug(
            "Simulation tick %d: frames in flight=%d, receipts=%d",
            world.tick,
            len(world.frames),
            len(world.receipts),
        )


def run_until(world: World, last_tick: int) -> None:
    """Tick the world until `last_tick` has been executed."""
    while world.tick <= last_tick:
        tick_world(world)


def _fire_due_events(world: World) -> None:
    while world.events and world.events[0].tick <= world.tick:
        event = heapq.heappop(world.events)
        logger.debug("Firing %s at tick %d", event.label, world.tick)
        event.action()


def _advance_frames(world: World) -> None:
    now = world.time
    for frame in world.frames.values():
        # Frames put in flight this tick start moving on the next one
        if frame.alive and frame.progress < 1.0 and frame.sent_at < now:
            frame.progress += frame.speed


def _deliver_frames(world: World) -> None:
    # Snapshot: receipts may put new frames in flight during this loop
    arrived = [f for f in world.frames.values() if f.alive and f.progress >= 1.0 - 1e-9]
    for frame in arrived:
        frame.alive = False
        _deliver(world, frame)


def _deliver(world: World, frame: Frame) -> None:
    sim_time = {"sim_time": world.time}
    agent = world.agents.get(frame.dest)
    if agent is None:
        logger.warning("Dropping frame for unknown node %d", frame.dest, extra=sim_time)
        world.frames_dropped += 1
        return
    if agent.state is AgentState.STOPPED:
        logger.debug("Node %d is stopped; frame from node %d lost", frame.dest, frame.source)
        world.frames_dropped += 1
        return

    try:
        token = Token.decode(frame.payload)
        agent.receive(token, frame.source)
    except ProtocolViolationError as e:
        logger.warning(
            "Protocol violation at node %d (from node %d): %s; message dropped",
            frame.dest,
            frame.source,
            e,
            extra=sim_time,
        )
        world.frames_dropped += 1
        return

    world.receipts.append(
        Receipt(time=world.time, position=frame.dest, sender=frame.source, value=token.value)
    )


def _garbage_collect_frames(world: World) -> None:
    dead_ids = [fid for fid, f in world.frames.items() if not f.alive]
    for fid in dead_ids:
        del world.frames[fid]


def abandon_in_flight(world: World) -> int:
    """Drop every frame still in flight. Returns how many were abandoned."""
    count = sum(1 for f in world.frames.values() if f.alive)
    world.frames.clear()
    world.frames_dropped += count
    return count
