"""Lambda API access for provisioned concurrency management."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import ProviderRequestFailed
from .models import ProvisionedRecord, ProvisionedStatus

logger = logging.getLogger(__name__)

PAGE_SIZE = 50


class LambdaProvider:
    """
    Thin async wrapper over the Lambda API calls used by the reconciler.

    Supports both AWS and LocalStack environments. Every botocore error is
    converted to ProviderRequestFailed so nothing provider-specific leaks
    to the reconciliation stages.
    """

    def __init__(
        self,
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            region: AWS region (default: use boto3 defaults)
            endpoint_url: Optional endpoint URL (for LocalStack or other AWS-compatible services)
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self._session: aioboto3.Session | None = None
        self._client: Any = None
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> Any:
        """Get or create the Lambda client. Concurrent callers share one client."""
        if self._client is not None:
            return self._client

        async with self._client_lock:
            if self._client is not None:
                return self._client

            if self._session is None:
                self._session = aioboto3.Session()

            kwargs: dict[str, Any] = {}
            if self.region:
                kwargs["region_name"] = self.region
            if self.endpoint_url:
                kwargs["endpoint_url"] = self.endpoint_url

            session = self._session
            self._client = await session.client("lambda", **kwargs).__aenter__()
            return self._client

    async def close(self) -> None:
        """Close the underlying client session."""
        if self._client is not None:
            try:
                await self._client.__aexit__(None, None, None)
            finally:
                self._client = None

    async def __aenter__(self) -> LambdaProvider:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def _call(
        self,
        operation: str,
        function_name: str,
        version: str | None = None,
        **params: Any,
    ) -> dict[str, Any]:
        client = await self._get_client()
        method = getattr(client, operation)
        try:
            response: dict[str, Any] = await method(**params)
            return response
        except ClientError as e:
            error = e.response.get("Error", {})
            raise ProviderRequestFailed(
                operation,
                error.get("Message") or str(e),
                function_name=function_name,
                version=version,
                code=error.get("Code"),
                cause=e,
            ) from e
        except BotoCoreError as e:
            raise ProviderRequestFailed(
                operation,
                str(e),
                function_name=function_name,
                version=version,
                cause=e,
            ) from e

    async def list_versions(self, function_name: str) -> list[str]:
        """All version identifiers of a function, including $LATEST."""
        versions: list[str] = []
        marker: str | None = None
        while True:
            params: dict[str, Any] = {"FunctionName": function_name, "MaxItems": PAGE_SIZE}
            if marker:
                params["Marker"] = marker
            response = await self._call("list_versions_by_function", function_name, **params)
            versions.extend(v["Version"] for v in response.get("Versions", []) if "Version" in v)
            marker = response.get("NextMarker")
            if not marker:
                break
            logger.debug("Fetching next page of versions for %s", function_name)
        return versions

    async def list_provisioned_records(self, function_name: str) -> list[ProvisionedRecord]:
        """Every provisioned concurrency config currently attached to a function."""
        records: list[ProvisionedRecord] = []
        marker: str | None = None
        while True:
            params: dict[str, Any] = {"FunctionName": function_name, "MaxItems": PAGE_SIZE}
            if marker:
                params["Marker"] = marker
            response = await self._call(
                "list_provisioned_concurrency_configs", function_name, **params
            )
            records.extend(
                ProvisionedRecord.from_response(item)
                for item in response.get("ProvisionedConcurrencyConfigs", [])
            )
            marker = response.get("NextMarker")
            if not marker:
                break
        return records

    async def put_provisioned_capacity(self, function_name: str, version: str, count: int) -> None:
        await self._call(
            "put_provisioned_concurrency_config",
            function_name,
            version,
            FunctionName=function_name,
            Qualifier=version,
            ProvisionedConcurrentExecutions=count,
        )

    async def delete_provisioned_capacity(self, function_name: str, version: str) -> None:
        await self._call(
            "delete_provisioned_concurrency_config",
            function_name,
            version,
            FunctionName=function_name,
            Qualifier=version,
        )

    async def get_provisioned_status(
        self, function_name: str, version: str
    ) -> tuple[ProvisionedStatus, str | None]:
        """
        Current status of one version's provisioned concurrency.

        Returns:
            Tuple of (status, status reason reported by Lambda, if any)
        """
        response = await self._call(
            "get_provisioned_concurrency_config",
            function_name,
            version,
            FunctionName=function_name,
            Qualifier=version,
        )
        return ProvisionedStatus.parse(response.get("Status")), response.get("StatusReason")
