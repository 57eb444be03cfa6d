"""Tests for manifest parsing and function target normalization."""

import pytest

from pc_reconciler.exceptions import ManifestError
from pc_reconciler.manifest import DEFAULT_MARGIN_PERCENT, DeploymentManifest, normalize_function
from pc_reconciler.models import FunctionTarget


class TestNormalizeFunction:
    """Tests for turning declared entries into FunctionTargets."""

    def test_nested_block(self):
        target = normalize_function(
            "api",
            {
                "reservedConcurrency": 100,
                "concurrency": {"provisioned": 10, "version": "latest", "reserved": 50},
            },
        )
        assert target == FunctionTarget(
            name="api",
            desired_capacity=10,
            version_ref="latest",
            reserved_ceiling=50,
            reserved_concurrency=100,
        )

    def test_flat_fields(self):
        target = normalize_function(
            "worker", {"provisionedConcurrency": 5, "provisionedConcurrencyVersion": 3}
        )
        assert target is not None
        assert target.desired_capacity == 5
        assert target.version_ref == "3"
        assert target.reserved_ceiling is None

    def test_empty_block_still_produces_target(self):
        """An explicitly empty block means 'clear capacity'."""
        target = normalize_function("cleanup", {"concurrency": {}})
        assert target == FunctionTarget(name="cleanup")

    def test_null_block_still_produces_target(self):
        target = normalize_function("cleanup", {"concurrency": None})
        assert target is not None
        assert target.desired_capacity is None

    def test_flat_null_still_produces_target(self):
        target = normalize_function("cleanup", {"provisionedConcurrency": None})
        assert target is not None
        assert target.desired_capacity is None

    def test_no_capacity_keys(self):
        assert normalize_function("plain", {"handler": "h.main"}) is None

    def test_reserved_only_is_not_a_target(self):
        assert normalize_function("plain", {"reservedConcurrency": 10}) is None

    def test_non_mapping_entry(self):
        assert normalize_function("odd", None) is None
        assert normalize_function("odd", "string") is None

    def test_numeric_strings_are_coerced(self):
        target = normalize_function("api", {"concurrency": {"provisioned": "7", "reserved": "20"}})
        assert target is not None
        assert target.desired_capacity == 7
        assert target.reserved_ceiling == 20

    def test_garbage_values_become_none(self):
        target = normalize_function(
            "api",
            {
                "reservedConcurrency": "lots",
                "concurrency": {"provisioned": "many", "version": ["1"], "reserved": True},
            },
        )
        assert target == FunctionTarget(name="api")

    def test_nested_wins_over_flat(self):
        target = normalize_function(
            "api", {"provisionedConcurrency": 3, "concurrency": {"provisioned": 9}}
        )
        assert target is not None
        assert target.desired_capacity == 9


class TestDeploymentManifest:
    """Tests for DeploymentManifest parsing."""

    def test_parse(self, manifest):
        assert manifest.service == "orders"
        assert manifest.stage == "prod"
        assert manifest.margin_percent == 80

    def test_targets_in_declaration_order(self, manifest):
        assert [t.name for t in manifest.targets()] == ["api", "worker", "cleanup"]

    def test_function_name(self, manifest):
        assert manifest.function_name("api") == "orders-prod-api"

    def test_target_lookup(self, manifest):
        assert manifest.target("api").desired_capacity == 10
        assert manifest.target("plain") is None
        assert manifest.target("missing") is None

    def test_stage_argument_overrides_provider(self, manifest_data):
        manifest = DeploymentManifest.from_dict(manifest_data, stage="staging")
        assert manifest.function_name("api") == "orders-staging-api"

    def test_default_stage_and_margin(self):
        manifest = DeploymentManifest.from_dict({"service": "svc"})
        assert manifest.stage == "dev"
        assert manifest.margin_percent == DEFAULT_MARGIN_PERCENT
        assert manifest.targets() == []

    def test_custom_margin(self):
        manifest = DeploymentManifest.from_dict(
            {"service": "svc", "custom": {"provisionedConcurrency": {"maxPercent": 90}}}
        )
        assert manifest.margin_percent == 90

    def test_service_mapping_form(self):
        manifest = DeploymentManifest.from_dict({"service": {"name": "svc"}})
        assert manifest.service == "svc"

    def test_missing_service(self):
        with pytest.raises(ManifestError, match="service"):
            DeploymentManifest.from_dict({"functions": {}})

    def test_functions_must_be_mapping(self):
        with pytest.raises(ManifestError, match="functions"):
            DeploymentManifest.from_dict({"service": "svc", "functions": ["api"]})

    def test_root_must_be_mapping(self):
        with pytest.raises(ManifestError):
            DeploymentManifest.from_dict(None)  # type: ignore[arg-type]

    def test_from_yaml(self):
        yaml_str = """
service: orders
provider:
  stage: prod
functions:
  api:
    concurrency:
      provisioned: 4
      version: 12
"""
        manifest = DeploymentManifest.from_yaml(yaml_str)
        target = manifest.target("api")
        assert target.desired_capacity == 4
        assert target.version_ref == "12"

    def test_from_yaml_invalid(self):
        with pytest.raises(ManifestError, match="invalid YAML"):
            DeploymentManifest.from_yaml("service: [unclosed")

    def test_from_file(self, tmp_path):
        path = tmp_path / "serverless.yml"
        path.write_text("service: svc\nfunctions:\n  api:\n    provisionedConcurrency: 2\n")
        manifest = DeploymentManifest.from_file(path, stage="qa")
        assert manifest.function_name("api") == "svc-qa-api"
        assert manifest.target("api").desired_capacity == 2
