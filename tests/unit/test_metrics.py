"""Tests for the Prometheus histograms."""

import time

from prometheus_client import CollectorRegistry

from wallet_core.metrics import WalletMetrics, default_metrics, observe_call


class TestWalletMetrics:
    def test_histograms_use_prefix(self) -> None:
        registry = CollectorRegistry()
        metrics = WalletMetrics(prefix="ledger", registry=registry)

        observe_call(metrics.service_queries, "get_account", time.perf_counter(), failed=False)
        observe_call(metrics.storage_queries, "commit", time.perf_counter(), failed=True)

        assert (
            registry.get_sample_value(
                "ledger_queries_count", {"method": "get_account", "error": "false"}
            )
            == 1
        )
        assert (
            registry.get_sample_value(
                "ledger_storage_queries_count", {"method": "commit", "error": "true"}
            )
            == 1
        )

    def test_slow_call_lands_above_first_bucket(self) -> None:
        registry = CollectorRegistry()
        metrics = WalletMetrics(registry=registry)

        observe_call(metrics.service_queries, "apply_payment", time.perf_counter() - 0.03, False)

        labels = {"method": "apply_payment", "error": "false"}
        assert registry.get_sample_value("wallet_queries_bucket", {**labels, "le": "0.025"}) == 0
        assert registry.get_sample_value("wallet_queries_bucket", {**labels, "le": "0.05"}) == 1

    def test_default_metrics_registered_once(self) -> None:
        assert default_metrics("wallet") is default_metrics("wallet")
