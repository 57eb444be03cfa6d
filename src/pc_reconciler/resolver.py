"""Resolution of symbolic version references to published versions."""

from __future__ import annotations

import logging

from .exceptions import NoVersionFoundError
from .models import HEAD_VERSION, LATEST_REF
from .provider_protocol import ProviderProtocol

logger = logging.getLogger(__name__)


def latest_version(function_name: str, versions: list[str]) -> str:
    """
    Pick the newest published version.

    Versions are integers encoded as strings, so they are compared
    numerically ("10" is newer than "2"). The $LATEST pseudo-version and
    any non-numeric identifiers are ignored.

    Raises:
        NoVersionFoundError: If no numbered version exists
    """
    if not versions:
        raise NoVersionFoundError(function_name)

    numbered = [v for v in versions if v != HEAD_VERSION and v.isdigit()]
    if not numbered:
        raise NoVersionFoundError(function_name, only_head=True)

    return max(numbered, key=int)


class VersionResolver:
    """Turns a version reference into a concrete version for one function."""

    def __init__(self, provider: ProviderProtocol) -> None:
        self.provider = provider

    async def resolve(self, function_name: str, version_ref: str | None = None) -> str:
        """
        Resolve a version reference.

        ``None`` and ``"latest"`` trigger a lookup of the newest published
        version; any other value except $LATEST is returned verbatim without
        calling the provider.

        Raises:
            NoVersionFoundError: If the function has no numbered version, or
                the reference is $LATEST
            ProviderRequestFailed: If listing versions fails
        """
        if version_ref == HEAD_VERSION:
            raise NoVersionFoundError(function_name, reference=version_ref)
        if version_ref is not None and version_ref != LATEST_REF:
            return version_ref

        versions = await self.provider.list_versions(function_name)
        version = latest_version(function_name, versions)
        logger.debug("Resolved %s:%s to version %s", function_name, version_ref, version)
        return version
