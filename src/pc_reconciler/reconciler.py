"""Enforcement of the single-active-version invariant.

At most one version of a function may hold provisioned concurrency. Before
new capacity is put on the target version, every other version's config is
deleted. When there is no target version (capacity cleared, or a function
that must never hold capacity), every config is deleted.
"""

from __future__ import annotations

import logging

from .exceptions import ProviderRequestFailed
from .models import ProvisionedRecord
from .provider_protocol import ProviderProtocol
from .reporting import Reporter

logger = logging.getLogger(__name__)


class SingleVersionReconciler:
    """Deletes provisioned concurrency from every version but the target."""

    def __init__(self, provider: ProviderProtocol, reporter: Reporter) -> None:
        self.provider = provider
        self.reporter = reporter

    async def existing_records(self, function_name: str) -> list[ProvisionedRecord]:
        """
        List current configs; failures degrade to an empty list.

        A failed enumeration is reported and the task carries on.
        """
        try:
            return await self.provider.list_provisioned_records(function_name)
        except ProviderRequestFailed as e:
            self.reporter.error(
                f"Error getting versions with provisioned concurrency for {function_name}: {e}"
            )
            return []

    async def reconcile(self, function_name: str, target_version: str | None) -> list[str]:
        """
        Remove provisioned concurrency from every version except ``target_version``.

        Records whose ARN carries no version are skipped.

        Returns:
            The versions whose configs were deleted

        Raises:
            ProviderRequestFailed: If a delete call fails
        """
        deleted: list[str] = []
        for record in await self.existing_records(function_name):
            if record.version is None:
                logger.warning(
                    "Skipping provisioned config with unparseable ARN %r", record.function_arn
                )
                continue
            if record.version == target_version:
                continue

            self.reporter.info(
                f"Deleting provisioned concurrency for {function_name}:{record.version}"
            )
            try:
                await self.provider.delete_provisioned_capacity(function_name, record.version)
            except ProviderRequestFailed as e:
                self.reporter.error(
                    f"Error deleting provisioned concurrency for "
                    f"{function_name}:{record.version}: {e}"
                )
                raise
            deleted.append(record.version)

        return deleted
