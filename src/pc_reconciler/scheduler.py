"""Bounded-parallel application of provisioned concurrency.

One task per function runs resolve -> reconcile -> put -> wait, strictly in
that order. Tasks share a semaphore sized to the host's CPU count. A failed
task never cancels its siblings: every task runs to completion, then a
single ReconciliationFailed is raised if any of them failed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from .config import ReconcilerSettings
from .exceptions import ProviderRequestFailed, ReconciliationFailed
from .models import FunctionTarget, ResolvedTarget, TaskOutcome
from .poller import ReadinessPoller
from .provider_protocol import ProviderProtocol
from .reconciler import SingleVersionReconciler
from .reporting import ProgressSink, Reporter, RunContext
from .resolver import VersionResolver

logger = logging.getLogger(__name__)

INVALID_PARAMETER_CODE = "InvalidParameterValueException"


class ProvisioningScheduler:
    """Applies desired capacity to every target under bounded parallelism."""

    def __init__(
        self,
        provider: ProviderProtocol,
        reporter: Reporter,
        progress: ProgressSink,
        settings: ReconcilerSettings | None = None,
        name_for: Callable[[str], str] | None = None,
        poller: ReadinessPoller | None = None,
    ) -> None:
        self.settings = settings or ReconcilerSettings()
        self.reporter = reporter
        self.progress = progress
        self._name_for = name_for or (lambda name: name)
        self.resolver = VersionResolver(provider)
        self.reconciler = SingleVersionReconciler(provider, reporter)
        self.poller = poller or ReadinessPoller(
            provider,
            reporter,
            interval=self.settings.poll_interval,
            max_attempts=self.settings.max_attempts,
        )
        self.provider = provider

    async def run(
        self,
        targets: list[FunctionTarget],
        title: str = "Setting provisioned concurrency",
    ) -> list[TaskOutcome]:
        """
        Reconcile every target.

        Args:
            targets: Validated targets; excluded functions are only cleaned up
            title: Leading text of the progress line

        Returns:
            One TaskOutcome per target, in input order

        Raises:
            ReconciliationFailed: After all tasks finished, if any task failed
        """
        if not targets:
            return []

        workers = self.settings.worker_count
        self.reporter.info(f"Using concurrency limit of {workers} (based on available CPUs)")

        semaphore = asyncio.Semaphore(workers)
        context = RunContext(self.progress, total=len(targets), title=title)
        ticker: asyncio.Task[None] | None = None
        if self.settings.progress_refresh > 0:
            ticker = asyncio.create_task(context.tick(self.settings.progress_refresh))

        try:
            outcomes = await asyncio.gather(
                *(self._run_task(semaphore, target, context) for target in targets)
            )
        finally:
            if ticker is not None:
                ticker.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await ticker
            context.close()

        if any(o.error is not None for o in outcomes):
            raise ReconciliationFailed(list(outcomes))
        return list(outcomes)

    async def _run_task(
        self,
        semaphore: asyncio.Semaphore,
        target: FunctionTarget,
        context: RunContext,
    ) -> TaskOutcome:
        outcome = TaskOutcome(
            function_name=self._name_for(target.name),
            desired=target.desired_capacity or 0,
        )
        async with semaphore:
            try:
                await self.process(target, outcome, context)
            except Exception as e:
                logger.debug("Task for %s failed", outcome.function_name, exc_info=True)
                self.reporter.error(f"Error processing function {target.name}: {e}")
                outcome.error = e
            finally:
                completed, total, elapsed = context.mark_completed()
                logger.debug("Progress %d/%d after %ds", completed, total, elapsed)
        return outcome

    async def process(
        self,
        target: FunctionTarget,
        outcome: TaskOutcome,
        context: RunContext | None = None,
    ) -> None:
        """
        Run the per-function pipeline, filling in ``outcome`` as it goes.

        Excluded functions and targets without positive capacity skip
        resolution and apply; all of their configs are removed.
        """
        function_name = outcome.function_name
        excluded = self.settings.is_excluded(target.name)
        if excluded:
            logger.info("Function %s is excluded from provisioned concurrency", function_name)

        if excluded or not target.wants_capacity:
            outcome.skipped_apply = True
            outcome.deleted_versions = await self.reconciler.reconcile(function_name, None)
            return

        desired = target.desired_capacity or 0
        try:
            version = await self.resolver.resolve(function_name, target.version_ref)
        except ProviderRequestFailed as e:
            self.reporter.error(
                f"Failed to resolve version for {function_name} "
                f"(version={target.version_ref or 'latest'}, requested={desired}): {e}"
            )
            raise

        resolved = ResolvedTarget(function_name, version, desired)
        outcome.version = resolved.version

        # Previous versions must lose capacity before the new version gets it
        outcome.deleted_versions = await self.reconciler.reconcile(function_name, version)

        await self.apply(resolved)
        await self.poller.wait(function_name, version, context)

    async def apply(self, resolved: ResolvedTarget) -> None:
        target = f"{resolved.function_name}:{resolved.version}"
        self.reporter.info(
            f"Setting provisioned concurrency for {target} to {resolved.desired_capacity}"
        )
        try:
            await self.provider.put_provisioned_capacity(
                resolved.function_name, resolved.version, resolved.desired_capacity
            )
        except ProviderRequestFailed as e:
            if e.code == INVALID_PARAMETER_CODE:
                self.reporter.error(
                    f"Invalid provisioned concurrency configuration for {target}. "
                    f"Check that the value ({resolved.desired_capacity}) is within AWS limits "
                    "and doesn't exceed reserved concurrency."
                )
            self.reporter.error(
                f"Failed to set provisioned concurrency for {target} "
                f"(requested={resolved.desired_capacity}): {e}"
            )
            raise
