"""
Rewind Executor Module

Architectural Intent:
- Saga-style execution of an ordered list of side-effecting steps
- Steps run strictly in sequence on a single task; never out of order or concurrently
- On the first failure, only the failing step's own compensation runs (single-step
  rewind); multi-step rollback, if needed, is encoded inside one compensation
- Reports a truthful outcome: the original failure when rewinding worked, a
  combined failure when rewinding itself failed

Outcomes:
- ALL_SUCCEEDED: every forward action returned normally
- FAILED_COMPENSATED: a forward failed and its compensation succeeded
- FAILED_UNCOMPENSATED: a forward failed and had no compensation, or the
  compensation failed too
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Awaitable, Optional
from cutover.domain.entities.rollout import RolloutContext
from cutover.domain.errors import (
    SagaOutcome,
    StepForwardError,
    CompensationError,
)

logger = logging.getLogger(__name__)

StepAction = Callable[[RolloutContext], Awaitable[None]]


@dataclass(frozen=True)
class Step:
    name: str
    forward: StepAction
    compensate: Optional[StepAction] = None


@dataclass(frozen=True)
class Plan:
    steps: tuple[Step, ...]
    rewind_failure_message: str = ""

    @property
    def step_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.steps)

    def __len__(self) -> int:
        return len(self.steps)


class RewindExecutor:
    async def execute(self, plan: Plan, context: RolloutContext) -> SagaOutcome:
        for step in plan.steps:
            logger.info("Running step %s for %s", step.name, context.app)
            try:
                await step.forward(context)
            except Exception as forward_error:
                logger.error("Step %s failed: %s", step.name, forward_error)
                if step.compensate is None:
                    raise StepForwardError(
                        str(forward_error), step_name=step.name
                    ) from forward_error

                await self._compensate(plan, step, context, forward_error)
                raise StepForwardError(
                    str(forward_error), step_name=step.name, compensated=True
                ) from forward_error

            context.completed_steps.append(step.name)

        return SagaOutcome.ALL_SUCCEEDED

    async def _compensate(
        self,
        plan: Plan,
        step: Step,
        context: RolloutContext,
        forward_error: Exception,
    ) -> None:
        logger.warning("Rewinding the step before %s", step.name)
        try:
            await step.compensate(context)
        except Exception as rewind_error:
            logger.error("Rewind of %s failed: %s", step.name, rewind_error)
            if plan.rewind_failure_message:
                message = f"{plan.rewind_failure_message}: {rewind_error}"
            else:
                message = str(rewind_error)
            raise CompensationError(
                message, step_name=step.name, forward_error=forward_error
            ) from rewind_error
        logger.info("Rewind of %s succeeded", step.name)
