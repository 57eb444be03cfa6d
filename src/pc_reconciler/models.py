"""Core models for pc-reconciler."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .naming import extract_version

HEAD_VERSION = "$LATEST"
"""Mutable pseudo-version that can never hold provisioned concurrency."""

LATEST_REF = "latest"
"""Symbolic version reference that triggers resolution of the newest version."""


class ProvisionedStatus(str, Enum):
    """Provider-reported status of a provisioned concurrency config."""

    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    FAILED = "FAILED"

    @classmethod
    def parse(cls, value: str | None) -> "ProvisionedStatus":
        """Parse a provider status; unknown values are treated as in progress."""
        try:
            return cls(value or "")
        except ValueError:
            return cls.IN_PROGRESS


@dataclass(frozen=True)
class FunctionTarget:
    """
    Declared provisioned concurrency target for one function.

    Attributes:
        name: Function name as declared in the manifest (not qualified)
        desired_capacity: Provisioned executions to hold, or None to clear
        version_ref: "latest", an explicit version, or None (same as "latest")
        reserved_ceiling: Explicit per-function reserved capacity override
        reserved_concurrency: Function-level reserved concurrency (fallback ceiling)
    """

    name: str
    desired_capacity: int | None = None
    version_ref: str | None = None
    reserved_ceiling: int | None = None
    reserved_concurrency: int | None = None

    @property
    def wants_capacity(self) -> bool:
        """True when the target asks for a positive amount of capacity."""
        return bool(self.desired_capacity and self.desired_capacity > 0)

    @property
    def needs_resolution(self) -> bool:
        """True when the version reference must be looked up at the provider."""
        return self.version_ref is None or self.version_ref == LATEST_REF


@dataclass(frozen=True)
class ResolvedTarget:
    """A target bound to a concrete, provider-known version for one pass."""

    function_name: str
    version: str
    desired_capacity: int

    def __post_init__(self) -> None:
        if self.version == HEAD_VERSION:
            raise ValueError(f"{HEAD_VERSION} cannot hold provisioned concurrency")


@dataclass(frozen=True)
class ProvisionedRecord:
    """
    Snapshot of one provisioned concurrency config as reported by Lambda.

    Never mutated locally; fetched again on every poll.
    """

    function_arn: str
    version: str | None
    requested: int
    available: int
    allocated: int
    status: ProvisionedStatus
    status_reason: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "ProvisionedRecord":
        """Build from a ListProvisionedConcurrencyConfigs entry."""
        arn = data.get("FunctionArn", "")
        return cls(
            function_arn=arn,
            version=extract_version(arn),
            requested=int(data.get("RequestedProvisionedConcurrentExecutions", 0)),
            available=int(data.get("AvailableProvisionedConcurrentExecutions", 0)),
            allocated=int(data.get("AllocatedProvisionedConcurrentExecutions", 0)),
            status=ProvisionedStatus.parse(data.get("Status")),
            status_reason=data.get("StatusReason"),
        )

    @property
    def ready(self) -> bool:
        return self.status is ProvisionedStatus.READY


@dataclass(frozen=True)
class ValidationFailure:
    """A single function whose desired capacity exceeds its allowed maximum."""

    function_name: str
    desired: int
    ceiling: int
    max_allowed: int
    margin_percent: int

    def message(self) -> str:
        """Human-readable explanation naming the function and the limits."""
        return (
            f"Function {self.function_name} has provisioned concurrency ({self.desired}) "
            f"higher than {self.margin_percent}% of reserved concurrency ({self.ceiling}). "
            f"Maximum recommended provisioned concurrency is {self.max_allowed}. "
            f"Maximum available provisioned concurrency is {self.ceiling - 1}."
        )


@dataclass
class TaskOutcome:
    """
    Result of reconciling a single function.

    Attributes:
        function_name: Fully qualified function name
        desired: Requested capacity (0 when clearing)
        version: Version that holds capacity afterwards, if any
        deleted_versions: Versions whose provisioned concurrency was removed
        skipped_apply: True when no capacity was put (cleared or excluded)
        error: The exception that ended the task, if it failed
    """

    function_name: str
    desired: int = 0
    version: str | None = None
    deleted_versions: list[str] = field(default_factory=list)
    skipped_apply: bool = False
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
