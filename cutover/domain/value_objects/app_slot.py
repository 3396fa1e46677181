"""
Application Slot Value Objects

Architectural Intent:
- Immutable names for the remote applications a rollout touches
- Owns the slot naming convention (-venerable, -g1, -g2, -now-on-swapping)
- Slots are addressed purely by name; nothing here talks to the remote system
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

VENERABLE_SUFFIX = "venerable"
SWAP_SUFFIX = "now-on-swapping"


class Generation(Enum):
    """Blue/green generation retained for rollback."""

    G1 = "g1"
    G2 = "g2"

    @staticmethod
    def parse(value: str) -> "Generation":
        try:
            return Generation(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown generation {value!r}, expected one of: g1, g2"
            ) from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AppSlot:
    """
    Value Object naming one live application and its derived slots.
    """
    name: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Application name cannot be empty")
        if self.name != self.name.strip():
            raise ValueError(f"Invalid application name: {self.name!r}")

    def __str__(self) -> str:
        return self.name

    @property
    def venerable(self) -> str:
        return f"{self.name}-{VENERABLE_SUFFIX}"

    def generation(self, generation: Generation) -> str:
        return f"{self.name}-{generation.value}"

    @property
    def g1(self) -> str:
        return self.generation(Generation.G1)

    @property
    def g2(self) -> str:
        return self.generation(Generation.G2)

    @property
    def swapping(self) -> str:
        return f"{self.name}-{SWAP_SUFFIX}"
