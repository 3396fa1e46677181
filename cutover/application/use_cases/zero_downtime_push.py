"""
Zero-Downtime Push Use Case

Architectural Intent:
- Replaces a running application without downtime by renaming it aside
  (<name>-venerable), pushing the new version under the live name and
  deleting the venerable app once the push succeeded
- Observes the live and venerable slots once, then delegates to the plan builder
"""

from typing import Optional
from cutover.domain.entities.rollout import RolloutContext, RolloutKind
from cutover.domain.value_objects.app_slot import AppSlot
from cutover.application.use_cases.rollout_base import RolloutUseCase


class ZeroDowntimePush(RolloutUseCase):
    kind = RolloutKind.ZERO_DOWNTIME_PUSH

    async def execute(
        self,
        app_name: str,
        manifest_path: Optional[str] = None,
        app_path: Optional[str] = None,
        keep_old_app: bool = False,
        show_app_log: bool = False,
    ) -> RolloutContext:
        app = AppSlot(app_name)
        context = RolloutContext(
            app=app,
            manifest_path=manifest_path,
            app_path=app_path,
            keep_old_app=keep_old_app,
            show_app_log=show_app_log,
        )

        live = await self.remote.get_app_metadata(app.name)
        venerable = await self.remote.get_app_metadata(app.venerable)
        context.live_exists = live is not None
        context.live_state = live.state if live is not None else ""
        context.venerable_exists = venerable is not None

        plan = self.plan_builder.zero_downtime_push(context)
        await self._run(plan, context)

        await self._list_applications()
        return context
