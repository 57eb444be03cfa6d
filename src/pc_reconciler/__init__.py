"""
pc-reconciler: provisioned concurrency reconciliation for AWS Lambda.

Keeps exactly one published version of every declared function holding
provisioned concurrency:
- Resolves "latest" to the newest numbered version
- Validates desired capacity against reserved concurrency before any change
- Removes capacity from every other version, then applies and waits for READY
- Processes functions in parallel, bounded by the host's CPU count

Example:
    from pc_reconciler import DeploymentManifest, ProvisionedConcurrencyService

    manifest = DeploymentManifest.from_file("serverless.yml", stage="prod")
    async with ProvisionedConcurrencyService(manifest) as service:
        service.validate_all()
        await service.reconcile_all()
"""

from importlib.metadata import PackageNotFoundError, version

from .config import ReconcilerSettings
from .exceptions import (
    CapacityValidationFailed,
    ConfigurationError,
    ManifestError,
    NoVersionFoundError,
    ProviderError,
    ProviderRequestFailed,
    ProvisionedConcurrencyError,
    ProvisioningFailedError,
    ReadinessTimeout,
    ReconciliationFailed,
)
from .manifest import DeploymentManifest, normalize_function
from .models import (
    FunctionTarget,
    ProvisionedRecord,
    ProvisionedStatus,
    ResolvedTarget,
    TaskOutcome,
    ValidationFailure,
)
from .provider import LambdaProvider
from .provider_protocol import ProviderProtocol
from .reporting import (
    ClickProgress,
    ClickReporter,
    LoggingReporter,
    NullProgress,
    ProgressSink,
    Reporter,
    RunContext,
)
from .service import ProvisionedConcurrencyService

try:
    __version__ = version("pc-reconciler")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    # Version
    "__version__",
    # Main classes
    "ProvisionedConcurrencyService",
    "DeploymentManifest",
    "LambdaProvider",
    "ProviderProtocol",
    "ReconcilerSettings",
    "normalize_function",
    # Models
    "FunctionTarget",
    "ResolvedTarget",
    "ProvisionedRecord",
    "ProvisionedStatus",
    "ValidationFailure",
    "TaskOutcome",
    # Reporting
    "Reporter",
    "LoggingReporter",
    "ClickReporter",
    "ProgressSink",
    "ClickProgress",
    "NullProgress",
    "RunContext",
    # Exceptions
    "ProvisionedConcurrencyError",
    "ConfigurationError",
    "ProviderError",
    "ManifestError",
    "CapacityValidationFailed",
    "NoVersionFoundError",
    "ProviderRequestFailed",
    "ReadinessTimeout",
    "ProvisioningFailedError",
    "ReconciliationFailed",
]
