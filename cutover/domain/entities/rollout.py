"""
Rollout Module

Architectural Intent:
- RolloutContext is the only channel through which steps of one plan share data
- A context is created fresh per invocation and discarded once the plan returns
- Lead-in steps record what they produced; later steps and compensations read it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from cutover.domain.value_objects.app_slot import AppSlot, Generation


class RolloutKind(Enum):
    ZERO_DOWNTIME_PUSH = "zero-downtime-push"
    BLUE_GREEN_PUSH = "blue-green-push"
    BLUE_GREEN_ROLLBACK = "blue-green-rollback"


@dataclass
class RolloutContext:
    app: AppSlot
    manifest_path: Optional[str] = None
    app_path: Optional[str] = None
    keep_old_app: bool = False
    show_app_log: bool = False
    generation: Optional[Generation] = None

    # observed before the plan is built
    live_exists: bool = False
    live_state: str = ""
    venerable_exists: bool = False
    g1_exists: bool = False
    g2_exists: bool = False

    # written while the plan runs
    venerable_to_cleanup: bool = False
    completed_steps: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "app": str(self.app),
            "manifest_path": self.manifest_path,
            "app_path": self.app_path,
            "keep_old_app": self.keep_old_app,
            "generation": str(self.generation) if self.generation else None,
            "live_exists": self.live_exists,
            "live_state": self.live_state,
            "venerable_exists": self.venerable_exists,
            "g1_exists": self.g1_exists,
            "g2_exists": self.g2_exists,
            "venerable_to_cleanup": self.venerable_to_cleanup,
            "completed_steps": list(self.completed_steps),
        }
