"""Runtime settings for a reconciliation run."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_MAX_ATTEMPTS = 30  # 5 minute ceiling at the default interval
DEFAULT_EXCLUDED_PREFIXES = ("warmUpPlugin",)
DEFAULT_PROGRESS_REFRESH = 1.0


def default_max_workers() -> int:
    """Worker permits based on the host's processing units."""
    return max(1, os.cpu_count() or 1)


def _split(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class ReconcilerSettings:
    """
    Settings shared by every stage of a run.

    The safety margin is not a setting: it belongs to the manifest
    and is read from there once per run.
    """

    region: str | None = None
    endpoint_url: str | None = None
    max_workers: int = 0
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    excluded_prefixes: tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES
    progress_refresh: float = DEFAULT_PROGRESS_REFRESH

    def __post_init__(self) -> None:
        if self.max_workers < 0:
            raise ValueError("max_workers must be >= 0 (0 selects the CPU count)")
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be >= 0")
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be positive")

    @property
    def worker_count(self) -> int:
        return self.max_workers or default_max_workers()

    def is_excluded(self, function_name: str) -> bool:
        """True for functions that must never receive new capacity."""
        return any(function_name.startswith(prefix) for prefix in self.excluded_prefixes)

    @classmethod
    def from_environment(cls) -> ReconcilerSettings:
        """Create settings from environment variables."""
        excluded = os.environ.get("PC_EXCLUDED_PREFIXES")
        return cls(
            region=os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION"),
            endpoint_url=os.environ.get("AWS_ENDPOINT_URL"),
            max_workers=int(os.environ.get("PC_MAX_WORKERS", "0")),
            poll_interval=float(os.environ.get("PC_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL))),
            max_attempts=int(os.environ.get("PC_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))),
            excluded_prefixes=(
                _split(excluded) if excluded is not None else DEFAULT_EXCLUDED_PREFIXES
            ),
            progress_refresh=float(
                os.environ.get("PC_PROGRESS_REFRESH", str(DEFAULT_PROGRESS_REFRESH))
            ),
        )
