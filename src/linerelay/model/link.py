"""LinkDirectory: static neighbor table for a line of agents."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from linerelay.errors import ConfigurationError


class Side(Enum):
    """Which side of an agent a neighbor sits on."""

    LEFT = "left"
    RIGHT = "right"

    def opposite(self) -> Side:
        return Side.RIGHT if self is Side.LEFT else Side.LEFT


@dataclass(frozen=True)
class Neighbors:
    """Left and right neighbor positions of one agent; None means absent."""

    left: int | None = None
    right: int | None = None

    def get(self, side: Side) -> int | None:
        return self.left if side is Side.LEFT else self.right

    def present(self) -> list[int]:
        """Neighbor positions that exist, left first."""
        return [p for p in (self.left, self.right) if p is not None]


@dataclass(frozen=True)
class LinkDirectory:
    """Static mapping from each agent position to its (left, right) neighbors.

    Built once at setup and never mutated: entries are exposed through a
    read-only mapping.
    """

    entries: Mapping[int, Neighbors] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @classmethod
    def for_line(cls, length: int) -> LinkDirectory:
        """Build the directory for positions 0..length-1.

        Raises:
            ConfigurationError: If length < 2.
        """
        if length < 2:
            raise ConfigurationError(f"A line needs at least 2 agents, got {length}")
        entries = {
            p: Neighbors(
                left=p - 1 if p > 0 else None,
                right=p + 1 if p < length - 1 else None,
            )
            for p in range(length)
        }
        directory = cls(entries)
        directory.validate()
        return directory

    def validate(self) -> None:
        """Check the directory describes a well-formed line.

        Raises:
            ConfigurationError: On gaps in positions, missing interior
                neighbors, or neighbors that are not p-1 / p+1.
        """
        length = len(self.entries)
        if length < 2:
            raise ConfigurationError(f"A line needs at least 2 agents, got {length}")
        if sorted(self.entries) != list(range(length)):
            raise ConfigurationError(
                f"Positions must be contiguous from 0, got {sorted(self.entries)}"
            )

        for p, neighbors in self.entries.items():
            expected_left = p - 1 if p > 0 else None
            expected_right = p + 1 if p < length - 1 else None
            if neighbors.left != expected_left:
                raise ConfigurationError(
                    f"Position {p}: left neighbor must be {expected_left}, got {neighbors.left}"
                )
            if neighbors.right != expected_right:
                raise ConfigurationError(
                    f"Position {p}: right neighbor must be {expected_right}, got {neighbors.right}"
                )

    def neighbors(self, position: int) -> Neighbors:
        try:
            return self.entries[position]
        except KeyError:
            raise ConfigurationError(f"Unknown position {position}") from None

    def neighbor(self, position: int, side: Side) -> int | None:
        return self.neighbors(position).get(side)

    def side_of(self, position: int, other: int) -> Side | None:
        """Side of `position` on which `other` sits, or None if not adjacent."""
        neighbors = self.neighbors(position)
        if other == neighbors.left:
            return Side.LEFT
        if other == neighbors.right:
            return Side.RIGHT
        return None

    def are_adjacent(self, a: int, b: int) -> bool:
        return a in self.entries and self.side_of(a, b) is not None

    def is_endpoint(self, position: int) -> bool:
        return len(self.neighbors(position).present()) == 1

    @property
    def origin(self) -> int:
        return 0

    @property
    def terminus(self) -> int:
        return len(self.entries) - 1

    @property
    def positions(self) -> list[int]:
        return sorted(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self.positions)
