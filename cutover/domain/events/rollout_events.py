"""
Rollout Events

Domain Events:
- RolloutStartedEvent: Published before a plan starts executing
- RolloutCompletedEvent: Published when every step succeeded
- RolloutFailedEvent: Published when planning or a step failed
"""

from dataclasses import dataclass
from typing import Any
from cutover.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class RolloutStartedEvent(DomainEvent):
    kind: str = ""
    steps: tuple[str, ...] = ()


@dataclass(frozen=True)
class RolloutCompletedEvent(DomainEvent):
    kind: str = ""


@dataclass(frozen=True)
class RolloutFailedEvent(DomainEvent):
    kind: str = ""
    error_message: str = ""
    step_name: str = ""
    rewound: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            error_message=self.error_message,
            step_name=self.step_name,
            rewound=self.rewound,
        )
        return data
