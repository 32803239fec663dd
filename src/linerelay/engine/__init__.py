"""Simulation substrate: tick driver, in-memory transport, relay coordinator."""

from linerelay.engine.coordinator import RelayCoordinator, RelaySummary
from linerelay.engine.simulation import abandon_in_flight, run_until, schedule, tick_world
from linerelay.engine.transport import LineTransport, PendingLink

__all__ = [
    "LineTransport",
    "PendingLink",
    "RelayCoordinator",
    "RelaySummary",
    "abandon_in_flight",
    "run_until",
    "schedule",
    "tick_world",
]
