"""Entry points for hosting orchestrators.

A host calls ``validate_all()`` and, only if it succeeds, ``reconcile_all()``
for a full deployment; ``validate_one()`` / ``reconcile_one()`` do the same
for a single function during incremental deployments.
"""

from __future__ import annotations

from .config import ReconcilerSettings
from .exceptions import (
    CapacityValidationFailed,
    ProvisionedConcurrencyError,
    ReconciliationFailed,
)
from .manifest import DeploymentManifest
from .models import FunctionTarget, TaskOutcome
from .provider import LambdaProvider
from .provider_protocol import ProviderProtocol
from .reporting import LoggingReporter, NullProgress, ProgressSink, Reporter
from .scheduler import ProvisioningScheduler
from .validator import CapacityValidator


class ProvisionedConcurrencyService:
    """
    Reconciles provisioned concurrency for the functions of one manifest.

    The manifest is read once at construction; the provider's configs are
    the only state and are re-read on every run.

    Example:
        manifest = DeploymentManifest.from_file("serverless.yml", stage="prod")
        async with ProvisionedConcurrencyService(manifest) as service:
            service.validate_all()
            await service.reconcile_all()
    """

    def __init__(
        self,
        manifest: DeploymentManifest,
        provider: ProviderProtocol | None = None,
        reporter: Reporter | None = None,
        progress: ProgressSink | None = None,
        settings: ReconcilerSettings | None = None,
    ) -> None:
        self.manifest = manifest
        self.settings = settings or ReconcilerSettings()
        self._provider = provider
        self._owns_provider = provider is None
        self._scheduler: ProvisioningScheduler | None = None
        self.reporter = reporter or LoggingReporter()
        self.progress = progress or NullProgress()
        self.validator = CapacityValidator(
            manifest.margin_percent, name_for=manifest.function_name
        )
        self.targets: list[FunctionTarget] = manifest.targets()

    @property
    def provider(self) -> ProviderProtocol:
        """The provider, created on first use so validation never builds one."""
        if self._provider is None:
            self._provider = LambdaProvider(
                region=self.settings.region,
                endpoint_url=self.settings.endpoint_url,
            )
        return self._provider

    @property
    def scheduler(self) -> ProvisioningScheduler:
        if self._scheduler is None:
            self._scheduler = ProvisioningScheduler(
                self.provider,
                self.reporter,
                self.progress,
                settings=self.settings,
                name_for=self.manifest.function_name,
            )
        return self._scheduler

    async def close(self) -> None:
        if self._owns_provider and isinstance(self._provider, LambdaProvider):
            await self._provider.close()

    async def __aenter__(self) -> ProvisionedConcurrencyService:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    def _find(self, function: str | None) -> FunctionTarget | None:
        if not function:
            self.reporter.error("Function name not provided")
            return None
        return self.manifest.target(function)

    # -------------------------------------------------------------------------
    # Pre-flight
    # -------------------------------------------------------------------------

    def validate_all(self) -> None:
        """
        Validate every target before a full deployment.

        Raises:
            CapacityValidationFailed: Listing every offending function
        """
        self.validator.validate_all(self.targets)

    def validate_one(self, function: str | None) -> None:
        """
        Validate one declared function. Untargeted functions pass.

        Raises:
            CapacityValidationFailed: If the function fails validation
        """
        target = self._find(function)
        if target is None:
            return
        self.validator.validate_all([target], scope=self.manifest.function_name(target.name))

    # -------------------------------------------------------------------------
    # Apply
    # -------------------------------------------------------------------------

    async def reconcile_all(self) -> list[TaskOutcome]:
        """
        Reconcile every targeted function.

        Raises:
            CapacityValidationFailed: Before any change, if validation fails
            ReconciliationFailed: After all tasks finished, if any failed
        """
        if not self.targets:
            self.reporter.info("No functions configured for provisioned concurrency")
            return []

        try:
            self.validate_all()
            outcomes = await self.scheduler.run(self.targets)
        except ProvisionedConcurrencyError as e:
            self.reporter.error(f"Error setting provisioned concurrency: {e}")
            raise

        self.reporter.info("Provisioned concurrency configuration completed")
        return outcomes

    async def reconcile_one(self, function: str | None) -> TaskOutcome | None:
        """
        Reconcile a single declared function.

        Returns:
            The outcome, or None if the function declares no provisioned concurrency

        Raises:
            CapacityValidationFailed: If the function fails validation
            ProvisionedConcurrencyError: The error that ended the function's task
        """
        target = self._find(function)
        if target is None:
            if function:
                self.reporter.info(
                    f"Function {function} does not have provisioned concurrency configured"
                )
            return None

        function_name = self.manifest.function_name(target.name)
        self.reporter.info(f"Checking provisioned concurrency for function: {function_name}")
        try:
            self.validator.validate_all([target], scope=function_name)
            outcomes = await self.scheduler.run(
                [target],
                title=f"Setting provisioned concurrency for function {function_name}",
            )
        except ReconciliationFailed as e:
            error = e.failures[0].error
            self.reporter.error(
                f"Error setting provisioned concurrency for function {function_name}: {error}"
            )
            if error is not None:
                raise error from e
            raise
        except CapacityValidationFailed as e:
            self.reporter.error(
                f"Error setting provisioned concurrency for function {function_name}: {e}"
            )
            raise

        self.reporter.info(f"Provisioned concurrency set for function {function_name}")
        return outcomes[0]
