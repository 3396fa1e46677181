"""
Plan Builder Module

Architectural Intent:
- Turns the observed state of the application slots into the exact ordered
  list of steps a rollout needs, no more and no fewer
- The plan variant is chosen once, from explicit inputs, before execution
- Steps receive the RolloutContext explicitly; flags produced by one step and
  consumed by a later one live on the context, never in closure state

Zero-downtime push:
- NEW_APP:                        [push]
- REPLACE_STOPPED:                [delete-live, push, delete-venerable]
- REPLACE_STARTED:                [rename-live-to-venerable, push, delete-venerable]
- REPLACE_STARTED_WITH_VENERABLE: [delete-stale-venerable, rename-live-to-venerable,
                                   push, delete-venerable]
The trailing delete-venerable step is left out when the old app is kept.

Blue/green push keeps two generations (-g1, -g2) and only stops -g1.
Blue/green rollback has no compensation at all.
"""

from __future__ import annotations
import logging
from enum import Enum, auto
from cutover.domain.entities.rollout import RolloutContext
from cutover.domain.errors import PlanningError, RemoteError
from cutover.domain.ports.remote_operations_port import RemoteOperationsPort
from cutover.domain.value_objects.app_metadata import STARTED
from cutover.application.orchestration.log_tail import LogTail
from cutover.application.orchestration.rewind_executor import Plan, Step

logger = logging.getLogger(__name__)

DEFAULT_REWIND_FAILURE_MESSAGE = (
    "Oh no. Something's gone wrong. I've tried to roll back "
    "but you should check to see if everything is OK."
)


class PushScenario(Enum):
    NEW_APP = auto()
    REPLACE_STOPPED = auto()
    REPLACE_STARTED = auto()
    REPLACE_STARTED_WITH_VENERABLE = auto()


class PlanBuilder:
    def __init__(
        self,
        remote: RemoteOperationsPort,
        rewind_failure_message: str = DEFAULT_REWIND_FAILURE_MESSAGE,
    ) -> None:
        self.remote = remote
        self.rewind_failure_message = rewind_failure_message

    @staticmethod
    def classify(context: RolloutContext) -> PushScenario:
        if not context.live_exists:
            return PushScenario.NEW_APP
        if context.live_state.upper() != STARTED:
            return PushScenario.REPLACE_STOPPED
        if context.venerable_exists:
            return PushScenario.REPLACE_STARTED_WITH_VENERABLE
        return PushScenario.REPLACE_STARTED

    def _plan(self, *steps: Step) -> Plan:
        return Plan(
            steps=tuple(steps), rewind_failure_message=self.rewind_failure_message
        )

    # -- zero-downtime push ------------------------------------------------

    def zero_downtime_push(self, context: RolloutContext) -> Plan:
        scenario = self.classify(context)
        logger.info("Planning zero-downtime push of %s as %s", context.app, scenario.name)

        if scenario is PushScenario.NEW_APP:
            return self._plan(Step("push", self._push_live))

        if scenario is PushScenario.REPLACE_STOPPED:
            lead_in = [Step("delete-live", self._delete_stopped_live)]
        elif scenario is PushScenario.REPLACE_STARTED_WITH_VENERABLE:
            lead_in = [
                Step("delete-stale-venerable", self._delete_stale_venerable),
                Step("rename-live-to-venerable", self._rename_live_to_venerable),
            ]
        else:
            lead_in = [Step("rename-live-to-venerable", self._rename_live_to_venerable)]

        steps = lead_in + [
            Step("push", self._push_live, compensate=self._restore_venerable),
        ]
        if not context.keep_old_app:
            steps.append(Step("delete-venerable", self._delete_venerable))
        return self._plan(*steps)

    async def _delete_stopped_live(self, ctx: RolloutContext) -> None:
        # a venerable left behind by an earlier rollout stays the fallback
        ctx.venerable_to_cleanup = ctx.venerable_exists
        await self.remote.delete_application(ctx.app.name)

    async def _delete_stale_venerable(self, ctx: RolloutContext) -> None:
        await self.remote.delete_application(ctx.app.venerable)

    async def _rename_live_to_venerable(self, ctx: RolloutContext) -> None:
        await self.remote.rename_application(ctx.app.name, ctx.app.venerable)
        ctx.venerable_to_cleanup = True

    async def _push_live(self, ctx: RolloutContext) -> None:
        if not ctx.show_app_log:
            await self.remote.push_application(
                ctx.app.name, ctx.manifest_path, ctx.app_path
            )
            return

        await self.remote.push_application(
            ctx.app.name, ctx.manifest_path, ctx.app_path, no_start=True
        )
        async with LogTail(self.remote, ctx.app.name):
            await self.remote.start_application(ctx.app.name)

    async def _restore_venerable(self, ctx: RolloutContext) -> None:
        if not ctx.venerable_to_cleanup:
            return
        await self._delete_half_created(ctx.app.name)
        await self.remote.rename_application(ctx.app.venerable, ctx.app.name)

    async def _delete_venerable(self, ctx: RolloutContext) -> None:
        if not ctx.venerable_to_cleanup:
            logger.info("No venerable app of %s to delete", ctx.app)
            return
        await self.remote.delete_application(ctx.app.venerable)

    async def _delete_half_created(self, name: str) -> None:
        # the push may have failed before the app was created at all
        try:
            await self.remote.delete_application(name)
        except Exception as e:
            logger.warning("Could not delete half-created app %s: %s", name, e)

    # -- blue/green push ---------------------------------------------------

    def blue_green_push(self, context: RolloutContext) -> Plan:
        if not context.live_exists:
            logger.info("Planning blue/green push of new app %s", context.app)
            return self._plan(Step("push", self._push_live))

        logger.info(
            "Planning blue/green push of %s (g1=%s, g2=%s)",
            context.app,
            context.g1_exists,
            context.g2_exists,
        )
        return self._plan(
            Step("rotate-generations", self._rotate_generations),
            Step("push", self._push_live, compensate=self._restore_g1),
            Step("retire-g1", self._retire_g1),
        )

    async def _rotate_generations(self, ctx: RolloutContext) -> None:
        if ctx.g2_exists:
            await self.remote.delete_application(ctx.app.g2)
        if ctx.g1_exists:
            await self.remote.rename_application(ctx.app.g1, ctx.app.g2)
        await self.remote.rename_application(ctx.app.name, ctx.app.g1)

    async def _restore_g1(self, ctx: RolloutContext) -> None:
        await self._delete_half_created(ctx.app.name)
        await self.remote.rename_application(ctx.app.g1, ctx.app.name)

    async def _retire_g1(self, ctx: RolloutContext) -> None:
        route = await self.remote.get_route(ctx.app.g1)
        await self.remote.unmap_route(ctx.app.g1, route.host, route.domain)
        await self.remote.stop_application(ctx.app.g1)

    # -- blue/green rollback -----------------------------------------------

    def blue_green_rollback(self, context: RolloutContext) -> Plan:
        if context.generation is None:
            raise PlanningError("A generation (g1 or g2) is required to roll back")
        logger.info(
            "Planning rollback of %s to %s",
            context.app,
            context.app.generation(context.generation),
        )
        return self._plan(
            Step("start-generation", self._start_generation),
            Step("move-route", self._move_route),
            Step("swap-names", self._swap_names),
        )

    async def _start_generation(self, ctx: RolloutContext) -> None:
        await self.remote.start_application(ctx.app.generation(ctx.generation))

    async def _move_route(self, ctx: RolloutContext) -> None:
        target = ctx.app.generation(ctx.generation)
        try:
            route = await self.remote.get_route(ctx.app.name)
        except Exception as e:
            raise RemoteError(f"Can not get hostname of the {ctx.app}") from e
        await self.remote.map_route(target, route.host, route.domain)
        await self.remote.unmap_route(ctx.app.name, route.host, route.domain)

    async def _swap_names(self, ctx: RolloutContext) -> None:
        target = ctx.app.generation(ctx.generation)
        await self.remote.rename_application(ctx.app.name, ctx.app.swapping)
        await self.remote.rename_application(target, ctx.app.name)
        await self.remote.rename_application(ctx.app.swapping, target)
