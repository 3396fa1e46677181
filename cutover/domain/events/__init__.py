"""
Domain Events Package

Architectural Intent:
- Contains rollout domain events
- Events are the primary mechanism for reporting rollout progress outward
"""

from cutover.domain.events.event_base import DomainEvent
from cutover.domain.events.rollout_events import (
    RolloutStartedEvent,
    RolloutCompletedEvent,
    RolloutFailedEvent,
)

__all__ = [
    "DomainEvent",
    "RolloutStartedEvent",
    "RolloutCompletedEvent",
    "RolloutFailedEvent",
]
