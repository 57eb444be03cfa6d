"""Command-line interface for provisioned concurrency reconciliation."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import replace

import click

from .config import ReconcilerSettings
from .exceptions import ProvisionedConcurrencyError
from .manifest import DeploymentManifest
from .models import TaskOutcome
from .provider import LambdaProvider
from .provider_protocol import ProviderProtocol
from .reporting import (
    ClickProgress,
    ClickReporter,
    LoggingReporter,
    NullProgress,
    ProgressSink,
    Reporter,
)
from .service import ProvisionedConcurrencyService


def _build_provider(settings: ReconcilerSettings) -> ProviderProtocol:
    return LambdaProvider(region=settings.region, endpoint_url=settings.endpoint_url)


def _load_manifest(file_path: str, stage: str | None) -> DeploymentManifest:
    try:
        return DeploymentManifest.from_file(file_path, stage=stage)
    except ProvisionedConcurrencyError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)


def _format_outcome(outcome: TaskOutcome) -> str:
    if outcome.skipped_apply:
        line = f"  - {outcome.function_name}: cleared"
    else:
        line = f"  ✓ {outcome.function_name}:{outcome.version} = {outcome.desired}"
    if outcome.deleted_versions:
        line += f" (removed from version(s) {', '.join(outcome.deleted_versions)})"
    return line


manifest_option = click.option(
    "--file",
    "-f",
    "file_path",
    default="serverless.yml",
    show_default=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Deployment manifest.",
)
stage_option = click.option("--stage", "-s", help="Deployment stage (default: provider.stage).")
function_option = click.option(
    "--function", "function", help="Only handle this declared function."
)


@click.group()
@click.version_option(package_name="pc-reconciler")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Provisioned concurrency reconciliation for versioned Lambda functions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@cli.command()
@manifest_option
@stage_option
@function_option
def validate(file_path: str, stage: str | None, function: str | None) -> None:
    """Check desired capacity against reserved concurrency without applying."""
    manifest = _load_manifest(file_path, stage)
    service = ProvisionedConcurrencyService(manifest, reporter=ClickReporter())
    try:
        if function:
            service.validate_one(function)
        else:
            service.validate_all()
    except ProvisionedConcurrencyError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ {len(service.targets)} function(s) passed validation")


@cli.command()
@manifest_option
@stage_option
@function_option
@click.option("--region", help="AWS region (default: use boto3 defaults).")
@click.option("--endpoint-url", help="AWS endpoint URL (e.g., http://localhost:4566).")
@click.option(
    "--max-workers",
    type=click.IntRange(min=1),
    help="Functions processed in parallel (default: CPU count).",
)
@click.option("--plain", is_flag=True, help="Log through `logging` and hide the progress line.")
def apply(
    file_path: str,
    stage: str | None,
    function: str | None,
    region: str | None,
    endpoint_url: str | None,
    max_workers: int | None,
    plain: bool,
) -> None:
    """Validate, then reconcile provisioned concurrency with the manifest."""
    manifest = _load_manifest(file_path, stage)

    settings = ReconcilerSettings.from_environment()
    overrides: dict[str, object] = {}
    if region:
        overrides["region"] = region
    if endpoint_url:
        overrides["endpoint_url"] = endpoint_url
    if max_workers:
        overrides["max_workers"] = max_workers
    if overrides:
        settings = replace(settings, **overrides)  # type: ignore[arg-type]

    async def _apply() -> list[TaskOutcome]:
        if plain:
            reporter: Reporter = LoggingReporter()
            progress: ProgressSink = NullProgress()
        else:
            line = ClickProgress()
            reporter, progress = ClickReporter(line), line
        service = ProvisionedConcurrencyService(
            manifest,
            provider=_build_provider(settings),
            reporter=reporter,
            progress=progress,
            settings=settings,
        )
        try:
            if function:
                service.validate_one(function)
                outcome = await service.reconcile_one(function)
                return [outcome] if outcome is not None else []
            service.validate_all()
            return await service.reconcile_all()
        finally:
            provider = service.provider
            if isinstance(provider, LambdaProvider):
                await provider.close()

    try:
        outcomes = asyncio.run(_apply())
    except ProvisionedConcurrencyError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    for outcome in outcomes:
        click.echo(_format_outcome(outcome))


@cli.command()
@manifest_option
@stage_option
@function_option
@click.option("--region", help="AWS region (default: use boto3 defaults).")
@click.option("--endpoint-url", help="AWS endpoint URL (e.g., http://localhost:4566).")
def status(
    file_path: str,
    stage: str | None,
    function: str | None,
    region: str | None,
    endpoint_url: str | None,
) -> None:
    """Show provisioned concurrency currently held by each declared function."""
    manifest = _load_manifest(file_path, stage)
    settings = ReconcilerSettings(region=region, endpoint_url=endpoint_url)
    targets = manifest.targets()
    if function:
        targets = [t for t in targets if t.name == function]

    async def _status() -> None:
        provider = _build_provider(settings)
        try:
            for target in targets:
                name = manifest.function_name(target.name)
                records = await provider.list_provisioned_records(name)
                desired = target.desired_capacity or 0
                click.echo(f"{name} (desired: {desired})")
                if not records:
                    click.echo("  (none)")
                for record in records:
                    click.echo(
                        f"  version {record.version or '?'}: {record.status.value} "
                        f"requested={record.requested} allocated={record.allocated} "
                        f"available={record.available}"
                    )
        finally:
            if isinstance(provider, LambdaProvider):
                await provider.close()

    try:
        asyncio.run(_status())
    except ProvisionedConcurrencyError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
