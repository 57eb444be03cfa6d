"""Polling provisioned concurrency until it is ready."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .config import DEFAULT_MAX_ATTEMPTS, DEFAULT_POLL_INTERVAL
from .exceptions import ProviderRequestFailed, ProvisioningFailedError, ReadinessTimeout
from .models import ProvisionedStatus
from .provider_protocol import ProviderProtocol
from .reporting import Reporter, RunContext

logger = logging.getLogger(__name__)


class ReadinessPoller:
    """
    Waits for a version's provisioned concurrency to reach READY.

    Polls every ``interval`` seconds for at most ``max_attempts`` attempts,
    sleeping after each one that is not READY, so a timeout is raised after
    ``max_attempts * interval`` seconds.
    A failed status call ends the wait immediately; it is not retried.
    """

    def __init__(
        self,
        provider: ProviderProtocol,
        reporter: Reporter,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.reporter = reporter
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def wait(
        self,
        function_name: str,
        version: str,
        context: RunContext | None = None,
    ) -> None:
        """
        Block (asynchronously) until the config is READY.

        Args:
            function_name: Fully qualified function name
            version: The version that was just given capacity
            context: Run progress to annotate while waiting

        Raises:
            ProviderRequestFailed: If a status call fails
            ProvisioningFailedError: If Lambda reports FAILED
            ReadinessTimeout: If READY is not reached within max_attempts
        """
        target = f"{function_name}:{version}"
        if context is not None:
            context.refresh(f"Waiting for {target}")

        try:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    status, reason = await self.provider.get_provisioned_status(
                        function_name, version
                    )
                except ProviderRequestFailed as e:
                    self.reporter.error(f"Error checking provisioned concurrency status: {e}")
                    raise

                logger.debug("%s status %s (attempt %d)", target, status.value, attempt)
                if status is ProvisionedStatus.READY:
                    return
                if status is ProvisionedStatus.FAILED:
                    raise ProvisioningFailedError(function_name, version, reason)

                if context is not None:
                    context.refresh(f"Waiting for {target} ({attempt}/{self.max_attempts})")
                await self._sleep(self.interval)
        finally:
            if context is not None:
                context.refresh()

        raise ReadinessTimeout(function_name, version, self.max_attempts)
