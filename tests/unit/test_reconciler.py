"""Tests for single-active-version enforcement."""

import pytest

from pc_reconciler.exceptions import ProviderRequestFailed
from pc_reconciler.reconciler import SingleVersionReconciler

FN = "orders-prod-api"


class TestSingleVersionReconciler:
    @pytest.mark.asyncio
    async def test_deletes_every_other_version(self, fake_lambda, reporter):
        fake_lambda.publish(FN, "1", "2", "3")
        fake_lambda.seed(FN, "1", 5)
        fake_lambda.seed(FN, "2", 5)
        fake_lambda.seed(FN, "3", 5)

        deleted = await SingleVersionReconciler(fake_lambda, reporter).reconcile(FN, "3")

        assert sorted(deleted) == ["1", "2"]
        assert fake_lambda.active_versions(FN) == ["3"]
        assert any("Deleting provisioned concurrency for orders-prod-api:1" in m for m in reporter.infos)

    @pytest.mark.asyncio
    async def test_target_only_issues_no_delete(self, fake_lambda, reporter):
        fake_lambda.publish(FN, "3")
        fake_lambda.seed(FN, "3", 5)

        deleted = await SingleVersionReconciler(fake_lambda, reporter).reconcile(FN, "3")

        assert deleted == []
        assert fake_lambda.calls_for("delete") == []

    @pytest.mark.asyncio
    async def test_no_target_deletes_everything(self, fake_lambda, reporter):
        fake_lambda.publish(FN, "1", "2")
        fake_lambda.seed(FN, "1", 5)
        fake_lambda.seed(FN, "2", 5)

        deleted = await SingleVersionReconciler(fake_lambda, reporter).reconcile(FN, None)

        assert sorted(deleted) == ["1", "2"]
        assert fake_lambda.active_versions(FN) == []

    @pytest.mark.asyncio
    async def test_malformed_arn_is_skipped(self, fake_lambda, reporter):
        fake_lambda.publish(FN, "1", "2")
        fake_lambda.seed(FN, "1", 5)
        fake_lambda.malformed_arns[FN] = ["arn:aws:lambda:us-east-1"]

        deleted = await SingleVersionReconciler(fake_lambda, reporter).reconcile(FN, "2")

        assert deleted == ["1"]
        assert len(fake_lambda.calls_for("delete")) == 1

    @pytest.mark.asyncio
    async def test_listing_failure_degrades_to_empty(self, fake_lambda, reporter):
        fake_lambda.publish(FN, "1")
        fake_lambda.seed(FN, "1", 5)
        fake_lambda.fail("list_provisioned_records", FN)

        deleted = await SingleVersionReconciler(fake_lambda, reporter).reconcile(FN, "2")

        assert deleted == []
        assert fake_lambda.active_versions(FN) == ["1"]
        assert any("Error getting versions" in m for m in reporter.errors)

    @pytest.mark.asyncio
    async def test_delete_failure_propagates(self, fake_lambda, reporter):
        fake_lambda.publish(FN, "1")
        fake_lambda.seed(FN, "1", 5)
        fake_lambda.fail("delete", FN)

        with pytest.raises(ProviderRequestFailed):
            await SingleVersionReconciler(fake_lambda, reporter).reconcile(FN, "2")
        assert any("Error deleting provisioned concurrency" in m for m in reporter.errors)

    @pytest.mark.asyncio
    async def test_other_functions_untouched(self, fake_lambda, reporter):
        fake_lambda.publish(FN, "1")
        fake_lambda.publish("orders-prod-worker", "1")
        fake_lambda.seed(FN, "1", 5)
        fake_lambda.seed("orders-prod-worker", "1", 5)

        await SingleVersionReconciler(fake_lambda, reporter).reconcile(FN, None)

        assert fake_lambda.active_versions("orders-prod-worker") == ["1"]
