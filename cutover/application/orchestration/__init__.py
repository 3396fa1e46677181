"""
Application Orchestration Package

Architectural Intent:
- Contains rollout planning and execution components
- Plans are ordered step lists executed with single-step rewind
"""

from cutover.application.orchestration.rewind_executor import (
    RewindExecutor,
    Plan,
    Step,
)
from cutover.application.orchestration.plan_builder import PlanBuilder, PushScenario

__all__ = ["RewindExecutor", "Plan", "Step", "PlanBuilder", "PushScenario"]
