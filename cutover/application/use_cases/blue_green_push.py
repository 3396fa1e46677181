"""
Blue/Green Push Use Case

Architectural Intent:
- Zero-downtime push that retains two stopped generations (-g1, -g2) of the
  application instead of deleting the old version, so it can be rolled back
"""

from typing import Optional
from cutover.domain.entities.rollout import RolloutContext, RolloutKind
from cutover.domain.value_objects.app_slot import AppSlot
from cutover.application.use_cases.rollout_base import RolloutUseCase


class BlueGreenPush(RolloutUseCase):
    kind = RolloutKind.BLUE_GREEN_PUSH

    async def execute(
        self,
        app_name: str,
        manifest_path: Optional[str] = None,
        app_path: Optional[str] = None,
    ) -> RolloutContext:
        app = AppSlot(app_name)
        context = RolloutContext(
            app=app, manifest_path=manifest_path, app_path=app_path
        )

        context.live_exists = await self.remote.does_app_exist(app.name)
        context.g1_exists = await self.remote.does_app_exist(app.g1)
        context.g2_exists = await self.remote.does_app_exist(app.g2)

        plan = self.plan_builder.blue_green_push(context)
        await self._run(plan, context)

        await self._list_applications()
        return context
