"""Exceptions for pc-reconciler."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TaskOutcome, ValidationFailure


# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class ProvisionedConcurrencyError(Exception):
    """
    Base exception for all pc-reconciler errors.

    All exceptions raised by this library inherit from this class,
    allowing callers to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Category Exceptions
# ---------------------------------------------------------------------------


class ConfigurationError(ProvisionedConcurrencyError):
    """
    Base exception for errors in the declared desired state.

    Raised before any provider mutation takes place.
    """

    pass


class ProviderError(ProvisionedConcurrencyError):
    """
    Base exception for errors reported by, or about, the Lambda provider.

    This includes failed API calls, missing versions, and provisioned
    concurrency that never becomes ready.
    """

    pass


# ---------------------------------------------------------------------------
# Configuration Exceptions
# ---------------------------------------------------------------------------


class ManifestError(ConfigurationError):
    """Raised when the deployment manifest itself cannot be interpreted."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid manifest field '{field}': {reason}")


class CapacityValidationFailed(ConfigurationError):  # noqa: N818
    """
    Raised when one or more functions request more provisioned concurrency
    than their reserved ceiling allows.

    Validation is performed for the whole batch before anything is applied,
    so this error always carries every offending function.

    Attributes:
        failures: One ValidationFailure per offending function
    """

    def __init__(self, failures: list["ValidationFailure"], scope: str | None = None) -> None:
        if not failures:
            raise ValueError("CapacityValidationFailed requires at least one failure")
        self.failures = failures
        self.scope = scope
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        details = "\n\n".join(f.message() for f in self.failures)
        if self.scope:
            header = f"Validation failed for function {self.scope}:"
        else:
            header = "Validation failed for the following functions:"
        return f"{header}\n\n{details}\n\nDeployment process stopped."

    @property
    def function_names(self) -> list[str]:
        """Names of the functions that failed validation."""
        return [f.function_name for f in self.failures]


# ---------------------------------------------------------------------------
# Provider Exceptions
# ---------------------------------------------------------------------------


class NoVersionFoundError(ProviderError):
    """
    Raised when a function has no published (numbered) version, or when
    the manifest names $LATEST as the version to provision.
    """

    def __init__(
        self, function_name: str, only_head: bool = False, reference: str | None = None
    ) -> None:
        self.function_name = function_name
        self.only_head = only_head
        self.reference = reference
        if reference is not None:
            msg = (
                f"Version {reference} of function {function_name} cannot hold "
                "provisioned concurrency. Use a published version or 'latest'."
            )
        elif only_head:
            msg = (
                f"No numbered versions found for function {function_name}. "
                "Only $LATEST version exists."
            )
        else:
            msg = f"No versions found for function {function_name}"
        super().__init__(msg)


class ProviderRequestFailed(ProviderError):  # noqa: N818
    """
    Raised when a Lambda API call fails.

    Wraps botocore errors so that they never leak past the provider boundary.

    Attributes:
        operation: The Lambda API operation that failed
        function_name: The function the call was made for
        version: The qualifier, if the call was version-specific
        code: The provider error code (e.g. 'InvalidParameterValueException')
        cause: The underlying exception
    """

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        function_name: str | None = None,
        version: str | None = None,
        code: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.operation = operation
        self.function_name = function_name
        self.version = version
        self.code = code
        self.cause = cause
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        target = self.function_name or "unknown"
        if self.version:
            target = f"{target}:{self.version}"
        prefix = f"{self.operation} failed for {target}"
        if self.code:
            prefix += f" ({self.code})"
        return f"{prefix}: {message}"


class ReadinessTimeout(ProviderError):  # noqa: N818
    """Raised when provisioned concurrency does not become READY in time."""

    def __init__(self, function_name: str, version: str, attempts: int) -> None:
        self.function_name = function_name
        self.version = version
        self.attempts = attempts
        super().__init__(
            f"Provisioned concurrency for {function_name}:{version} "
            f"did not become ready within timeout ({attempts} attempts)"
        )


class ProvisioningFailedError(ProviderError):
    """Raised when the provider reports a FAILED provisioned concurrency status."""

    def __init__(self, function_name: str, version: str, reason: str | None = None) -> None:
        self.function_name = function_name
        self.version = version
        self.reason = reason
        msg = f"Provisioned concurrency for {function_name}:{version} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


# ---------------------------------------------------------------------------
# Batch Exceptions
# ---------------------------------------------------------------------------


class ReconciliationFailed(ProvisionedConcurrencyError):  # noqa: N818
    """
    Raised after a batch run when at least one function task failed.

    Every task is allowed to finish before this is raised, so ``outcomes``
    describes the whole batch, not just the first failure.

    Attributes:
        outcomes: Outcome of every task in the batch
        failures: Only the outcomes that carry an error
    """

    def __init__(self, outcomes: list["TaskOutcome"]) -> None:
        self.outcomes = outcomes
        self.failures = [o for o in outcomes if o.error is not None]
        if not self.failures:
            raise ValueError("ReconciliationFailed requires at least one failed outcome")
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        lines = [f"{o.function_name}: {o.error}" for o in self.failures]
        return (
            f"Provisioned concurrency failed for {len(self.failures)} of "
            f"{len(self.outcomes)} function(s):\n" + "\n".join(lines)
        )
