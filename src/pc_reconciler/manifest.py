"""Deployment manifest parsing and function target normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ManifestError
from .models import FunctionTarget
from .naming import qualified_name

DEFAULT_STAGE = "dev"
DEFAULT_MARGIN_PERCENT = 80

# Keys that mark a function as managed for provisioned concurrency
CAPACITY_BLOCK_KEY = "concurrency"
FLAT_CAPACITY_KEY = "provisionedConcurrency"
FLAT_VERSION_KEY = "provisionedConcurrencyVersion"
RESERVED_KEY = "reservedConcurrency"


def _as_int(value: Any) -> int | None:
    """Coerce ints and numeric strings; anything else becomes None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_version(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


def normalize_function(name: str, config: Any) -> FunctionTarget | None:
    """
    Turn one declared function entry into a FunctionTarget.

    Accepts either a nested ``concurrency`` block or flat
    ``provisionedConcurrency`` fields. An explicitly empty block still
    yields a target (with ``desired_capacity=None``) so that existing
    capacity gets cleared.

    Returns:
        The target, or None if the entry has no provisioned concurrency keys.
        Never raises: unknown or malformed values are treated as None.
    """
    if not isinstance(config, dict):
        return None
    if CAPACITY_BLOCK_KEY not in config and FLAT_CAPACITY_KEY not in config:
        return None

    block = config.get(CAPACITY_BLOCK_KEY)
    if not isinstance(block, dict):
        block = {}

    desired = _as_int(block.get("provisioned"))
    if desired is None:
        desired = _as_int(config.get(FLAT_CAPACITY_KEY))

    version = _as_version(block.get("version"))
    if version is None:
        version = _as_version(config.get(FLAT_VERSION_KEY))

    return FunctionTarget(
        name=name,
        desired_capacity=desired,
        version_ref=version,
        reserved_ceiling=_as_int(block.get("reserved")),
        reserved_concurrency=_as_int(config.get(RESERVED_KEY)),
    )


@dataclass(frozen=True)
class DeploymentManifest:
    """Parsed serverless-style manifest, read once per run."""

    service: str
    stage: str = DEFAULT_STAGE
    margin_percent: int = DEFAULT_MARGIN_PERCENT
    functions: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any], stage: str | None = None) -> DeploymentManifest:
        if not isinstance(d, dict):
            raise ManifestError("<root>", "manifest must be a mapping")

        service = d.get("service")
        # serverless allows `service: {name: ...}`
        if isinstance(service, dict):
            service = service.get("name")
        if not service:
            raise ManifestError("service", "'service' is required")

        functions = d.get("functions") or {}
        if not isinstance(functions, dict):
            raise ManifestError("functions", "'functions' must be a mapping")

        provider = d.get("provider") or {}
        resolved_stage = stage or (provider.get("stage") if isinstance(provider, dict) else None)

        custom = d.get("custom") or {}
        settings = custom.get("provisionedConcurrency") if isinstance(custom, dict) else None
        margin = _as_int(settings.get("maxPercent")) if isinstance(settings, dict) else None

        return cls(
            service=str(service),
            stage=str(resolved_stage or DEFAULT_STAGE),
            margin_percent=margin if margin is not None else DEFAULT_MARGIN_PERCENT,
            functions=dict(functions),
        )

    @classmethod
    def from_yaml(cls, yaml_str: str, stage: str | None = None) -> DeploymentManifest:
        import yaml

        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ManifestError("<root>", f"invalid YAML: {e}") from e
        return cls.from_dict(data, stage=stage)

    @classmethod
    def from_file(cls, path: str | Path, stage: str | None = None) -> DeploymentManifest:
        return cls.from_yaml(Path(path).read_text(), stage=stage)

    def targets(self) -> list[FunctionTarget]:
        """Every function that declares provisioned concurrency, in manifest order."""
        result = []
        for name, config in self.functions.items():
            target = normalize_function(name, config)
            if target is not None:
                result.append(target)
        return result

    def target(self, name: str) -> FunctionTarget | None:
        """The target for a single declared function, if it has one."""
        return normalize_function(name, self.functions.get(name))

    def function_name(self, name: str) -> str:
        """Deployed (fully qualified) name of a declared function."""
        return qualified_name(self.service, self.stage, name)
