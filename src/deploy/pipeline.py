"""Background deployment pipeline: run the script, then purge the CDN.

Each accepted webhook spawns its own task. Tasks are never awaited by the
request handler and are not serialised against each other, so two pushes
in quick succession run two scripts side by side.
"""

import asyncio
from typing import Optional, Set

import structlog

from ..api.filters import PushEvent
from ..exceptions import ScriptStartError
from .invalidator import CacheInvalidator
from .runner import DeploymentResult, DeploymentRunner

logger = structlog.get_logger()


class DeploymentPipeline:
    """Fire-and-forget deployments with post-deploy CDN invalidation."""

    def __init__(
        self,
        runner: DeploymentRunner,
        invalidator: CacheInvalidator,
        invalidate_on_failure: bool = True,
    ):
        self.runner = runner
        self.invalidator = invalidator
        self.invalidate_on_failure = invalidate_on_failure
        # Strong references so running tasks are not garbage collected
        self._tasks: Set["asyncio.Task[Optional[DeploymentResult]]"] = set()

    @property
    def active_jobs(self) -> int:
        """Number of deployments still running."""
        return len(self._tasks)

    def trigger(self, event: PushEvent) -> "asyncio.Task[Optional[DeploymentResult]]":
        """Start a deployment in the background and return immediately."""
        task = asyncio.create_task(self.run(event), name=f"deploy:{event.after}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(
            "Deployment scheduled",
            ref=event.ref,
            after=event.after,
            repository=event.repository,
            active_jobs=self.active_jobs,
        )
        return task

    async def run(self, event: PushEvent) -> Optional[DeploymentResult]:
        """Run one deployment; errors end up in the log, never raised."""
        try:
            return await self._run(event)
        except Exception:
            logger.exception("Unhandled error in deployment", ref=event.ref)
            return None

    async def _run(self, event: PushEvent) -> Optional[DeploymentResult]:
        try:
            result = await self.runner.run()
        except ScriptStartError as e:
            logger.error(
                "Couldn't start deploy script",
                script_path=e.script_path,
                error=str(e),
            )
            return None

        if not result.succeeded and not self.invalidate_on_failure:
            logger.warning(
                "Skipping CloudFront invalidation after failed deploy",
                returncode=result.returncode,
            )
            return result

        await self.invalidator.invalidate_all()
        logger.info(
            "Deployment complete",
            ref=event.ref,
            after=event.after,
            returncode=result.returncode,
        )
        return result
