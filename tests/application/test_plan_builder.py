"""Tests for plan building and the plans' behaviour against an in-memory remote."""

import pytest
from cutover.application.orchestration.plan_builder import (
    DEFAULT_REWIND_FAILURE_MESSAGE,
    PlanBuilder,
    PushScenario,
)
from cutover.application.orchestration.rewind_executor import RewindExecutor
from cutover.domain.entities.rollout import RolloutContext
from cutover.domain.errors import (
    CompensationError,
    PlanningError,
    StepForwardError,
)
from cutover.domain.value_objects.app_slot import AppSlot, Generation
from cutover.infrastructure.adapters.in_memory_adapter import InMemoryRemoteAdapter


def _push_context(remote, keep_old_app=False, **kwargs):
    ctx = RolloutContext(
        app=AppSlot("myapp"),
        manifest_path="manifest.yml",
        keep_old_app=keep_old_app,
        **kwargs,
    )
    live = remote.apps.get("myapp")
    ctx.live_exists = live is not None
    ctx.live_state = live.state if live else ""
    ctx.venerable_exists = "myapp-venerable" in remote.apps
    ctx.g1_exists = "myapp-g1" in remote.apps
    ctx.g2_exists = "myapp-g2" in remote.apps
    return ctx


PUSH = ("push", "myapp", "manifest.yml", None, False)


class TestClassify:
    @pytest.mark.parametrize(
        "live_exists, state, venerable, expected",
        [
            (False, "", False, PushScenario.NEW_APP),
            (False, "", True, PushScenario.NEW_APP),
            (True, "STOPPED", False, PushScenario.REPLACE_STOPPED),
            (True, "CRASHED", True, PushScenario.REPLACE_STOPPED),
            (True, "STARTED", False, PushScenario.REPLACE_STARTED),
            (True, "STARTED", True, PushScenario.REPLACE_STARTED_WITH_VENERABLE),
        ],
    )
    def test_decision_table(self, live_exists, state, venerable, expected):
        ctx = RolloutContext(
            app=AppSlot("myapp"),
            live_exists=live_exists,
            live_state=state,
            venerable_exists=venerable,
        )
        assert PlanBuilder.classify(ctx) is expected


class TestZeroDowntimePlans:
    def test_new_app_is_push_only(self):
        remote = InMemoryRemoteAdapter()
        plan = PlanBuilder(remote).zero_downtime_push(_push_context(remote))
        assert plan.step_names == ("push",)
        assert plan.steps[0].compensate is None

    def test_healthy_app_without_venerable(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        plan = PlanBuilder(remote).zero_downtime_push(_push_context(remote))
        assert plan.step_names == ("rename-live-to-venerable", "push", "delete-venerable")
        assert plan.steps[1].compensate is not None

    def test_healthy_app_with_stale_venerable(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.add_app("myapp-venerable")
        plan = PlanBuilder(remote).zero_downtime_push(_push_context(remote))
        assert plan.step_names == (
            "delete-stale-venerable",
            "rename-live-to-venerable",
            "push",
            "delete-venerable",
        )

    def test_stopped_app_is_deleted_not_renamed(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp", state="STOPPED")
        plan = PlanBuilder(remote).zero_downtime_push(_push_context(remote))
        assert plan.step_names == ("delete-live", "push", "delete-venerable")

    def test_keep_old_app_drops_trailing_delete(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        plan = PlanBuilder(remote).zero_downtime_push(
            _push_context(remote, keep_old_app=True)
        )
        assert plan.step_names == ("rename-live-to-venerable", "push")

    def test_plan_carries_rewind_failure_message(self):
        remote = InMemoryRemoteAdapter()
        plan = PlanBuilder(remote, rewind_failure_message="uh oh").zero_downtime_push(
            _push_context(remote)
        )
        assert plan.rewind_failure_message == "uh oh"


class TestZeroDowntimeExecution:
    @pytest.mark.asyncio
    async def test_new_app_push_failure_has_nothing_to_rewind(self):
        remote = InMemoryRemoteAdapter()
        remote.fail("push", "myapp")
        ctx = _push_context(remote)

        with pytest.raises(StepForwardError, match="push myapp failed") as exc_info:
            await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert exc_info.value.compensated is False
        assert remote.mutations() == [PUSH]

    @pytest.mark.asyncio
    async def test_healthy_app_is_replaced(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        ctx = _push_context(remote)

        await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations() == [
            ("rename", "myapp", "myapp-venerable"),
            PUSH,
            ("delete", "myapp-venerable"),
        ]
        assert list(remote.apps) == ["myapp"]
        assert remote.apps["myapp"].version > 1

    @pytest.mark.asyncio
    async def test_push_failure_restores_venerable(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.fail("push", "myapp")
        ctx = _push_context(remote)

        with pytest.raises(StepForwardError, match="push myapp failed") as exc_info:
            await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert exc_info.value.compensated is True
        assert remote.mutations() == [
            ("rename", "myapp", "myapp-venerable"),
            PUSH,
            ("delete", "myapp"),
            ("rename", "myapp-venerable", "myapp"),
        ]
        assert list(remote.apps) == ["myapp"]
        assert remote.apps["myapp"].version == 1

    @pytest.mark.asyncio
    async def test_failed_half_created_delete_does_not_stop_restore(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.fail("push", "myapp")
        remote.fail("delete", "myapp")
        ctx = _push_context(remote)

        with pytest.raises(StepForwardError) as exc_info:
            await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert exc_info.value.compensated is True
        assert remote.mutations()[-1] == ("rename", "myapp-venerable", "myapp")

    @pytest.mark.asyncio
    async def test_failed_restore_reports_rewind_failure(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.fail("push", "myapp")
        remote.fail("rename", "myapp-venerable")
        ctx = _push_context(remote)

        with pytest.raises(CompensationError) as exc_info:
            await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert str(exc_info.value) == (
            f"{DEFAULT_REWIND_FAILURE_MESSAGE}: rename myapp-venerable failed"
        )

    @pytest.mark.asyncio
    async def test_stale_venerable_is_replaced(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.add_app("myapp-venerable")
        ctx = _push_context(remote)

        await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations() == [
            ("delete", "myapp-venerable"),
            ("rename", "myapp", "myapp-venerable"),
            PUSH,
            ("delete", "myapp-venerable"),
        ]

    @pytest.mark.asyncio
    async def test_stopped_app_without_venerable(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp", state="STOPPED")
        ctx = _push_context(remote)

        await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations() == [("delete", "myapp"), PUSH]
        assert ctx.venerable_to_cleanup is False

    @pytest.mark.asyncio
    async def test_stopped_app_with_venerable_cleans_it_up(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp", state="STOPPED")
        remote.add_app("myapp-venerable")
        ctx = _push_context(remote)

        await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations() == [
            ("delete", "myapp"),
            PUSH,
            ("delete", "myapp-venerable"),
        ]

    @pytest.mark.asyncio
    async def test_stopped_app_push_failure_falls_back_to_venerable(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp", state="STOPPED")
        remote.add_app("myapp-venerable")
        remote.fail("push", "myapp")
        ctx = _push_context(remote)

        with pytest.raises(StepForwardError):
            await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations()[-1] == ("rename", "myapp-venerable", "myapp")
        assert list(remote.apps) == ["myapp"]

    @pytest.mark.asyncio
    async def test_keep_old_app_leaves_venerable(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        ctx = _push_context(remote, keep_old_app=True)

        await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations() == [("rename", "myapp", "myapp-venerable"), PUSH]
        assert sorted(remote.apps) == ["myapp", "myapp-venerable"]

    @pytest.mark.asyncio
    async def test_show_app_log_pushes_without_start_then_starts(self):
        remote = InMemoryRemoteAdapter()
        ctx = _push_context(remote, show_app_log=True)

        await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations() == [
            ("push", "myapp", "manifest.yml", None, True),
            ("start", "myapp"),
        ]
        assert remote.apps["myapp"].state == "STARTED"

    @pytest.mark.asyncio
    async def test_failed_start_is_a_push_failure(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.fail("start", "myapp")
        ctx = _push_context(remote, show_app_log=True)

        with pytest.raises(StepForwardError, match="start myapp failed"):
            await RewindExecutor().execute(PlanBuilder(remote).zero_downtime_push(ctx), ctx)

        assert remote.mutations()[-1] == ("rename", "myapp-venerable", "myapp")


class TestBlueGreenPlans:
    def test_new_app_is_push_only(self):
        remote = InMemoryRemoteAdapter()
        plan = PlanBuilder(remote).blue_green_push(_push_context(remote))
        assert plan.step_names == ("push",)

    def test_existing_app(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        plan = PlanBuilder(remote).blue_green_push(_push_context(remote))
        assert plan.step_names == ("rotate-generations", "push", "retire-g1")

    def test_rollback_has_no_compensation(self):
        remote = InMemoryRemoteAdapter()
        ctx = RolloutContext(app=AppSlot("myapp"), generation=Generation.G1)
        plan = PlanBuilder(remote).blue_green_rollback(ctx)
        assert plan.step_names == ("start-generation", "move-route", "swap-names")
        assert all(step.compensate is None for step in plan.steps)

    def test_rollback_requires_generation(self):
        remote = InMemoryRemoteAdapter()
        ctx = RolloutContext(app=AppSlot("myapp"))
        with pytest.raises(PlanningError):
            PlanBuilder(remote).blue_green_rollback(ctx)


class TestBlueGreenExecution:
    @pytest.mark.asyncio
    async def test_rotates_two_generations(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.add_app("myapp-g1", state="STOPPED")
        remote.add_app("myapp-g2", state="STOPPED")
        ctx = _push_context(remote)

        await RewindExecutor().execute(PlanBuilder(remote).blue_green_push(ctx), ctx)

        assert remote.mutations() == [
            ("delete", "myapp-g2"),
            ("rename", "myapp-g1", "myapp-g2"),
            ("rename", "myapp", "myapp-g1"),
            PUSH,
            ("unmap-route", "myapp-g1", "myapp", "apps.example.com"),
            ("stop", "myapp-g1"),
        ]
        assert sorted(remote.apps) == ["myapp", "myapp-g1", "myapp-g2"]
        assert remote.apps["myapp-g1"].state == "STOPPED"
        assert remote.apps["myapp-g1"].routes == []

    @pytest.mark.asyncio
    async def test_first_rotation_without_generations(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        ctx = _push_context(remote)

        await RewindExecutor().execute(PlanBuilder(remote).blue_green_push(ctx), ctx)

        assert remote.mutations()[:2] == [("rename", "myapp", "myapp-g1"), PUSH]
        assert sorted(remote.apps) == ["myapp", "myapp-g1"]

    @pytest.mark.asyncio
    async def test_push_failure_restores_g1(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.fail("push", "myapp")
        ctx = _push_context(remote)

        with pytest.raises(StepForwardError) as exc_info:
            await RewindExecutor().execute(PlanBuilder(remote).blue_green_push(ctx), ctx)

        assert exc_info.value.compensated is True
        assert remote.mutations()[-2:] == [
            ("delete", "myapp"),
            ("rename", "myapp-g1", "myapp"),
        ]
        assert list(remote.apps) == ["myapp"]

    @pytest.mark.asyncio
    async def test_rollback_swaps_generation_in(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        old = remote.add_app("myapp-g1", state="STOPPED")
        old.routes = []
        new = remote.apps["myapp"]
        ctx = RolloutContext(app=AppSlot("myapp"), generation=Generation.G1)

        await RewindExecutor().execute(PlanBuilder(remote).blue_green_rollback(ctx), ctx)

        assert remote.mutations() == [
            ("start", "myapp-g1"),
            ("map-route", "myapp-g1", "myapp", "apps.example.com"),
            ("unmap-route", "myapp", "myapp", "apps.example.com"),
            ("rename", "myapp", "myapp-now-on-swapping"),
            ("rename", "myapp-g1", "myapp"),
            ("rename", "myapp-now-on-swapping", "myapp-g1"),
        ]
        assert remote.apps["myapp"] is old
        assert remote.apps["myapp-g1"] is new
        assert old.state == "STARTED"
        assert [str(r) for r in old.routes] == ["myapp.apps.example.com"]
        assert new.routes == []

    @pytest.mark.asyncio
    async def test_rollback_without_route_stops_before_mapping(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp").routes = []
        remote.add_app("myapp-g2", state="STOPPED")
        ctx = RolloutContext(app=AppSlot("myapp"), generation=Generation.G2)

        with pytest.raises(StepForwardError, match="Can not get hostname of the myapp") as exc_info:
            await RewindExecutor().execute(PlanBuilder(remote).blue_green_rollback(ctx), ctx)

        assert exc_info.value.step_name == "move-route"
        assert exc_info.value.compensated is False
        assert remote.mutations() == [("start", "myapp-g2")]

    @pytest.mark.asyncio
    async def test_rollback_swap_failure_is_not_rewound(self):
        remote = InMemoryRemoteAdapter()
        remote.add_app("myapp")
        remote.add_app("myapp-g1", state="STOPPED")
        remote.fail("rename", "myapp-g1")
        ctx = RolloutContext(app=AppSlot("myapp"), generation=Generation.G1)

        with pytest.raises(StepForwardError) as exc_info:
            await RewindExecutor().execute(PlanBuilder(remote).blue_green_rollback(ctx), ctx)

        assert exc_info.value.step_name == "swap-names"
        assert "myapp-now-on-swapping" in remote.apps
