"""Provider protocol for provisioned concurrency backends.

The reconciliation stages only depend on this protocol, so any object with
these coroutines (the aioboto3-backed LambdaProvider, an in-memory fake in
tests) can be used. Implementations raise ProviderRequestFailed on failure.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import ProvisionedRecord, ProvisionedStatus


@runtime_checkable
class ProviderProtocol(Protocol):
    """
    Protocol for the resource-management API.

    Example:
        class InMemoryLambda:
            async def list_versions(self, function_name: str) -> list[str]:
                return ["$LATEST", "1"]
            ...

        assert isinstance(InMemoryLambda(), ProviderProtocol)
    """

    async def list_versions(self, function_name: str) -> list[str]:
        """All version identifiers of a function, including the head pseudo-version."""
        ...

    async def list_provisioned_records(self, function_name: str) -> list["ProvisionedRecord"]:
        """Every provisioned concurrency config attached to a function."""
        ...

    async def put_provisioned_capacity(self, function_name: str, version: str, count: int) -> None:
        """Request ``count`` provisioned executions on one version."""
        ...

    async def delete_provisioned_capacity(self, function_name: str, version: str) -> None:
        """Remove provisioned concurrency from one version."""
        ...

    async def get_provisioned_status(
        self, function_name: str, version: str
    ) -> tuple["ProvisionedStatus", str | None]:
        """Status and optional reason for one version's config."""
        ...
