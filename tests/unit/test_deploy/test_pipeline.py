"""Tests for the background deployment pipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from structlog.testing import capture_logs

from src.api.filters import PushEvent
from src.deploy.pipeline import DeploymentPipeline
from src.deploy.runner import DeploymentResult
from src.exceptions import ScriptStartError

EVENT = PushEvent(ref="refs/heads/master", after="abc123")


def _runner(returncode=0, side_effect=None):
    runner = MagicMock()
    runner.run = AsyncMock(
        return_value=DeploymentResult(script_path="./run.sh", returncode=returncode),
        side_effect=side_effect,
    )
    return runner


def _invalidator():
    invalidator = MagicMock()
    invalidator.invalidate_all = AsyncMock(return_value=[])
    return invalidator


class TestDeploymentPipeline:
    async def test_invalidates_after_successful_run(self):
        order = []
        runner = _runner()
        invalidator = _invalidator()
        runner.run.side_effect = lambda: order.append("run") or DeploymentResult(
            script_path="./run.sh", returncode=0
        )
        invalidator.invalidate_all.side_effect = lambda: order.append("purge") or []

        result = await DeploymentPipeline(runner, invalidator).run(EVENT)

        assert result.succeeded
        assert order == ["run", "purge"]

    async def test_start_failure_skips_invalidation(self):
        runner = _runner(side_effect=ScriptStartError("nope", script_path="./run.sh"))
        invalidator = _invalidator()

        with capture_logs() as logs:
            result = await DeploymentPipeline(runner, invalidator).run(EVENT)

        assert result is None
        invalidator.invalidate_all.assert_not_awaited()
        assert any(e["event"] == "Couldn't start deploy script" for e in logs)

    async def test_failed_script_still_invalidates_by_default(self):
        runner = _runner(returncode=1)
        invalidator = _invalidator()

        result = await DeploymentPipeline(runner, invalidator).run(EVENT)

        assert result.returncode == 1
        invalidator.invalidate_all.assert_awaited_once()

    async def test_failed_script_skips_invalidation_when_disabled(self):
        runner = _runner(returncode=1)
        invalidator = _invalidator()
        pipeline = DeploymentPipeline(runner, invalidator, invalidate_on_failure=False)

        await pipeline.run(EVENT)

        invalidator.invalidate_all.assert_not_awaited()

    async def test_unexpected_error_is_logged_not_raised(self):
        runner = _runner(side_effect=RuntimeError("boom"))

        with capture_logs() as logs:
            result = await DeploymentPipeline(runner, _invalidator()).run(EVENT)

        assert result is None
        assert any(e["event"] == "Unhandled error in deployment" for e in logs)

    async def test_trigger_returns_before_deployment_finishes(self):
        release = asyncio.Event()
        runner = _runner()

        async def _slow_run():
            await release.wait()
            return DeploymentResult(script_path="./run.sh", returncode=0)

        runner.run.side_effect = _slow_run
        pipeline = DeploymentPipeline(runner, _invalidator())

        task = pipeline.trigger(EVENT)
        await asyncio.sleep(0)

        assert not task.done()
        assert pipeline.active_jobs == 1

        release.set()
        result = await task

        assert result.succeeded
        await asyncio.sleep(0)
        assert pipeline.active_jobs == 0

    async def test_concurrent_triggers_run_independently(self):
        started = 0
        both_started = asyncio.Event()
        release = asyncio.Event()
        runner = _runner()

        async def _blocking_run():
            nonlocal started
            started += 1
            if started == 2:
                both_started.set()
            await release.wait()
            return DeploymentResult(script_path="./run.sh", returncode=0)

        runner.run.side_effect = _blocking_run
        invalidator = _invalidator()
        pipeline = DeploymentPipeline(runner, invalidator)

        first = pipeline.trigger(EVENT)
        second = pipeline.trigger(PushEvent(ref="refs/heads/master", after="def456"))

        await asyncio.wait_for(both_started.wait(), 1)
        assert pipeline.active_jobs == 2

        release.set()
        await asyncio.gather(first, second)

        assert invalidator.invalidate_all.await_count == 2

    async def test_output_logged_before_invalidation(self, tmp_path):
        """Every script line is in the log before the CDN purge starts."""
        from src.deploy.runner import DeploymentRunner

        script = tmp_path / "run.sh"
        script.write_text(
            "for i in 1 2 3 4; do echo out-$i; echo err-$i >&2; done\n"
        )

        with capture_logs() as logs:
            invalidator = _invalidator()
            invalidator.invalidate_all.side_effect = lambda: logs.append(
                {"event": "purge"}
            ) or []
            await DeploymentPipeline(DeploymentRunner(str(script)), invalidator).run(
                EVENT
            )

        events = [e["event"] for e in logs]
        purge_at = events.index("purge")
        output_at = [
            i for i, event in enumerate(events) if event == "Deploy script output"
        ]
        assert len(output_at) == 8
        assert max(output_at) < purge_at


@pytest.mark.parametrize("returncode", [0, 2])
async def test_completion_logged(returncode):
    with capture_logs() as logs:
        await DeploymentPipeline(_runner(returncode), _invalidator()).run(EVENT)

    complete = [e for e in logs if e["event"] == "Deployment complete"]
    assert complete[0]["returncode"] == returncode
