"""
Rollout Use Case Base

Architectural Intent:
- Shared plumbing of the push and rollback use cases
- Runs a built plan through the rewind executor and publishes rollout events
- Keeps the informational app listing from ever failing a finished rollout
"""

from __future__ import annotations
import logging
from typing import Optional
from cutover.domain.entities.rollout import RolloutContext, RolloutKind
from cutover.domain.errors import CutoverError, RolloutError
from cutover.domain.events.rollout_events import (
    RolloutStartedEvent,
    RolloutCompletedEvent,
    RolloutFailedEvent,
)
from cutover.domain.ports.event_bus_port import EventBusPort
from cutover.domain.ports.remote_operations_port import RemoteOperationsPort
from cutover.application.orchestration.plan_builder import PlanBuilder
from cutover.application.orchestration.rewind_executor import Plan, RewindExecutor

logger = logging.getLogger(__name__)


class RolloutUseCase:
    kind: RolloutKind

    def __init__(
        self,
        remote: RemoteOperationsPort,
        plan_builder: Optional[PlanBuilder] = None,
        executor: Optional[RewindExecutor] = None,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.remote = remote
        self.plan_builder = plan_builder or PlanBuilder(remote)
        self.executor = executor or RewindExecutor()
        self.event_bus = event_bus

    async def _publish(self, event) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish([event])

    async def _fail(self, context: RolloutContext, error: CutoverError) -> None:
        await self._publish(
            RolloutFailedEvent(
                aggregate_id=str(context.app),
                kind=self.kind.value,
                error_message=str(error),
                step_name=getattr(error, "step_name", ""),
                rewound=isinstance(error, RolloutError) and error.rewound,
            )
        )

    async def _run(self, plan: Plan, context: RolloutContext) -> None:
        await self._publish(
            RolloutStartedEvent(
                aggregate_id=str(context.app),
                kind=self.kind.value,
                steps=plan.step_names,
            )
        )
        try:
            await self.executor.execute(plan, context)
        except RolloutError as e:
            if e.rewound:
                logger.error("%s of %s failed and was rewound: %s", self.kind.value, context.app, e)
            else:
                logger.error("%s of %s failed: %s", self.kind.value, context.app, e)
            await self._fail(context, e)
            raise

        logger.info("%s of %s succeeded", self.kind.value, context.app)
        await self._publish(
            RolloutCompletedEvent(aggregate_id=str(context.app), kind=self.kind.value)
        )

    async def _list_applications(self) -> None:
        try:
            await self.remote.list_applications()
        except Exception as e:
            logger.warning("Listing applications failed: %s", e)
