"""
Blue/Green Rollback Use Case

Architectural Intent:
- Puts a retained generation back in front of traffic: start it, move the
  live route onto it, then swap names with the live application
- Verifies the live application exists before any plan is built; a missing
  app aborts without touching the remote system
- No step is compensated; a partial failure is reported as-is
"""

import logging
from cutover.domain.entities.rollout import RolloutContext, RolloutKind
from cutover.domain.errors import PlanningError
from cutover.domain.value_objects.app_slot import AppSlot, Generation
from cutover.application.use_cases.rollout_base import RolloutUseCase

logger = logging.getLogger(__name__)


class BlueGreenRollback(RolloutUseCase):
    kind = RolloutKind.BLUE_GREEN_ROLLBACK

    async def execute(self, app_name: str, generation: str) -> RolloutContext:
        app = AppSlot(app_name)
        try:
            target = Generation.parse(generation)
        except ValueError as e:
            raise PlanningError(str(e)) from e

        context = RolloutContext(app=app, generation=target)
        context.live_exists = await self.remote.does_app_exist(app.name)
        if not context.live_exists:
            error = PlanningError(f"Application: {app} not found")
            await self._fail(context, error)
            raise error

        plan = self.plan_builder.blue_green_rollback(context)
        await self._run(plan, context)
        logger.info("%s is swapped with %s", app, app.generation(target))
        return context
