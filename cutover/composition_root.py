"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the Cutover application
- Single place where the adapter, planner, executor and use cases are wired
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- One plan builder and executor are shared by all use cases; plans and
  contexts are still built fresh per invocation
"""

from dataclasses import dataclass
from typing import Optional
from cutover.infrastructure.adapters.cf_cli_adapter import CloudFoundryCliAdapter
from cutover.infrastructure.config import CutoverConfig
from cutover.infrastructure.event_bus import EventBus
from cutover.application.orchestration.plan_builder import PlanBuilder
from cutover.application.orchestration.rewind_executor import RewindExecutor
from cutover.application.use_cases.zero_downtime_push import ZeroDowntimePush
from cutover.application.use_cases.blue_green_push import BlueGreenPush
from cutover.application.use_cases.blue_green_rollback import BlueGreenRollback


@dataclass
class CutoverContainer:
    """DI container holding all wired dependencies."""

    config: CutoverConfig
    cf_adapter: CloudFoundryCliAdapter
    event_bus: EventBus
    plan_builder: PlanBuilder
    executor: RewindExecutor
    zero_downtime_push: ZeroDowntimePush
    blue_green_push: BlueGreenPush
    blue_green_rollback: BlueGreenRollback


def create_container(config: Optional[CutoverConfig] = None) -> CutoverContainer:
    """Create and wire all dependencies."""
    config = config or CutoverConfig()
    cf_adapter = CloudFoundryCliAdapter(config.cf)
    event_bus = EventBus()
    plan_builder = PlanBuilder(
        cf_adapter, rewind_failure_message=config.rollout.rewind_failure_message
    )
    executor = RewindExecutor()

    def wire(use_case_cls):
        return use_case_cls(
            cf_adapter,
            plan_builder=plan_builder,
            executor=executor,
            event_bus=event_bus,
        )

    return CutoverContainer(
        config=config,
        cf_adapter=cf_adapter,
        event_bus=event_bus,
        plan_builder=plan_builder,
        executor=executor,
        zero_downtime_push=wire(ZeroDowntimePush),
        blue_green_push=wire(BlueGreenPush),
        blue_green_rollback=wire(BlueGreenRollback),
    )
