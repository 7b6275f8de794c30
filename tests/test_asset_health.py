"""
Tests for asset health scoring, snapshot history and the dashboard aggregation.
"""

from datetime import timedelta

import pytest

from rdtrack.models.models import Asset, AssetHealthMetrics, AssetVersion
from rdtrack.schemas.asset_health import HealthMetrics
from rdtrack.services import asset_health
from rdtrack.services.asset_health import (
    build_health_dashboard,
    calculate_health_metrics,
    compute_asset_health,
    get_asset_health_history,
    latest_version,
    record_health_snapshot,
)
from rdtrack.services.errors import AssetNotFoundError

from conftest import NOW


def _asset(created_days_ago=60, reuse_count=0, versions=()):
    return Asset(
        id="a1",
        name="Motor driver",
        type="code",
        maturity="stable",
        reuse_count=reuse_count,
        created_at=NOW - timedelta(days=created_days_ago),
        versions=list(versions),
    )


def _version(days_ago=0, **kw):
    return AssetVersion(version=f"v{days_ago}", version_date=NOW - timedelta(days=days_ago), **kw)


# =============================================================================
# Calculator
# =============================================================================


class TestCalculateHealthMetrics:
    def test_two_of_ten_projects_two_months_old(self):
        """reuse 2/10, one version (5, 20, 10), two months old -> 83.0."""
        asset = _asset(
            created_days_ago=60,
            reuse_count=2,
            versions=[_version(defect_density=5, regression_cost=20, maintenance_burden=10)],
        )
        m = calculate_health_metrics(asset, total_projects=10, now=NOW)
        assert m.reuse_rate == 0.2
        assert m.change_frequency == 0.5
        assert m.defect_density == 5
        assert m.regression_cost == 20
        assert m.maintenance_burden == 10
        assert m.health_score == pytest.approx(83.0)

    def test_no_versions_uses_zero_signals_and_unclamped_change_score(self):
        asset = _asset(created_days_ago=90)
        m = calculate_health_metrics(asset, total_projects=5, now=NOW)
        assert m.defect_density == 0
        assert m.regression_cost == 0
        assert m.maintenance_burden == 0
        assert m.change_frequency == 0
        # change score is 150 here: 0*.3 + 100*.25 + 150*.15 + 100*.15 + 100*.15
        assert m.health_score == pytest.approx(77.5)

    def test_zero_projects_gives_zero_reuse_rate(self):
        asset = _asset(reuse_count=7, versions=[_version()])
        m = calculate_health_metrics(asset, total_projects=0, now=NOW)
        assert m.reuse_rate == 0.0

    def test_rounding_precision(self):
        asset = _asset(created_days_ago=45, reuse_count=1, versions=[_version(defect_density=1.23456)])
        m = calculate_health_metrics(asset, total_projects=3, now=NOW)
        assert m.reuse_rate == 0.3333
        assert m.change_frequency == 0.67
        assert m.defect_density == 1.23
        assert m.health_score == round(m.health_score, 2)

    def test_defect_density_never_raises_score(self):
        scores = []
        for dd in [0, 0.5, 1, 2, 5, 9.9, 10, 15, 50]:
            asset = _asset(reuse_count=1, versions=[_version(defect_density=dd)])
            scores.append(calculate_health_metrics(asset, total_projects=4, now=NOW).health_score)
        assert scores == sorted(scores, reverse=True)

    def test_reuse_score_saturates_at_ten_percent(self):
        low = calculate_health_metrics(_asset(reuse_count=1, versions=[_version()]), 10, now=NOW)
        high = calculate_health_metrics(_asset(reuse_count=10, versions=[_version()]), 10, now=NOW)
        assert low.health_score == high.health_score

    def test_brand_new_asset_counts_as_one_month(self):
        asset = _asset(created_days_ago=2, versions=[_version(), _version(1), _version(2)])
        m = calculate_health_metrics(asset, total_projects=1, now=NOW)
        assert m.change_frequency == 3.0

    def test_asset_created_in_future_does_not_raise(self):
        asset = _asset(created_days_ago=-30, versions=[_version()])
        m = calculate_health_metrics(asset, total_projects=1, now=NOW)
        assert m.change_frequency == 1.0

    def test_high_change_frequency_penalised(self):
        versions = [_version(i) for i in range(8)]
        asset = _asset(created_days_ago=30, versions=versions)
        m = calculate_health_metrics(asset, total_projects=1, now=NOW)
        assert m.change_frequency == 8.0
        # change score 100 - 3*10 = 70
        expected = 0 * 0.3 + 100 * 0.25 + 70 * 0.15 + 100 * 0.15 + 100 * 0.15
        assert m.health_score == pytest.approx(round(expected, 2))

    def test_latest_version_by_date_not_insertion_order(self):
        older = _version(10, defect_density=8)
        newer = _version(1, defect_density=2)
        asset = _asset(versions=[newer, older])
        assert latest_version(asset.versions) is newer
        m = calculate_health_metrics(asset, total_projects=1, now=NOW)
        assert m.defect_density == 2

    def test_non_numeric_quality_value_treated_as_absent(self):
        version = _version()
        version.defect_density = "n/a"
        m = calculate_health_metrics(_asset(versions=[version]), total_projects=1, now=NOW)
        assert m.defect_density == 0.0

    def test_same_input_same_output(self):
        asset = _asset(reuse_count=3, versions=[_version(defect_density=4, regression_cost=12)])
        first = calculate_health_metrics(asset, 9, now=NOW)
        second = calculate_health_metrics(asset, 9, now=NOW)
        assert first == second


# =============================================================================
# Snapshots
# =============================================================================


class TestHealthSnapshots:
    def test_compute_records_a_snapshot_each_call(self, make, repo, db):
        make.asset("a1", created_at=NOW - timedelta(days=60))
        make.version("a1", NOW - timedelta(days=5), defect_density=3)

        first = compute_asset_health(repo, "a1", now=NOW)
        second = compute_asset_health(repo, "a1", now=NOW + timedelta(minutes=1))

        assert first == second
        assert db.query(AssetHealthMetrics).filter_by(asset_id="a1").count() == 2

    def test_compute_unknown_asset_raises(self, repo):
        with pytest.raises(AssetNotFoundError):
            compute_asset_health(repo, "missing", now=NOW)

    def test_record_stores_metrics_and_timestamp(self, make, repo):
        make.asset("a1")
        metrics = HealthMetrics(reuse_rate=0.25, defect_density=1.5, health_score=71.25)
        row = record_health_snapshot(repo, "a1", metrics, now=NOW)
        assert row.id
        assert row.calculated_at == NOW
        assert row.reuse_rate == 0.25
        assert row.health_score == 71.25

    def test_history_window_is_inclusive_and_newest_first(self, make, repo):
        make.asset("a1")
        for days in (31, 30, 10, 0):
            record_health_snapshot(repo, "a1", HealthMetrics(health_score=float(days)), now=NOW - timedelta(days=days))

        history = get_asset_health_history(repo, "a1", days=30, now=NOW)

        assert [h.health_score for h in history] == [0.0, 10.0, 30.0]

    def test_history_scoped_to_asset(self, make, repo):
        make.asset("a1")
        make.asset("a2")
        record_health_snapshot(repo, "a1", HealthMetrics(), now=NOW)
        record_health_snapshot(repo, "a2", HealthMetrics(), now=NOW)
        assert len(get_asset_health_history(repo, "a1", days=1, now=NOW)) == 1


# =============================================================================
# Dashboard
# =============================================================================


class TestHealthDashboard:
    def test_groups_and_rankings(self, make, repo):
        make.project("p1")
        make.project("p2")
        make.asset("a1", type="code", maturity="stable", reuse_count=2, created_at=NOW - timedelta(days=3))
        make.asset("a2", type="pcba", maturity="experimental", reuse_count=0, created_at=NOW - timedelta(days=2))
        make.asset("a3", type="code", maturity="experimental", reuse_count=1, created_at=NOW - timedelta(days=1))
        make.version("a2", NOW, defect_density=9)

        dash = build_health_dashboard(repo, now=NOW)

        assert dash.total_assets == 3
        assert [(t.type, t.count) for t in dash.assets_by_type] == [("code", 2), ("pcba", 1)]
        assert [(m.maturity, m.count) for m in dash.assets_by_maturity] == [("stable", 1), ("experimental", 2)]
        assert [a.id for a in dash.top_reused_assets] == ["a1", "a3", "a2"]
        scores = [row.health_score for row in dash.assets_health]
        assert scores == sorted(scores, reverse=True)
        assert dash.assets_health[0].id == "a1"

    def test_top_reused_limited_to_ten(self, make, repo):
        for i in range(12):
            make.asset(f"a{i:02d}", reuse_count=i, created_at=NOW - timedelta(days=20 - i))
        dash = build_health_dashboard(repo, now=NOW)
        assert len(dash.top_reused_assets) == 10
        assert dash.top_reused_assets[0].reuse_count == 11
        assert len(dash.assets_health) == 12

    def test_dashboard_does_not_write_snapshots(self, make, repo, db):
        make.asset("a1")
        build_health_dashboard(repo, now=NOW)
        assert db.query(AssetHealthMetrics).count() == 0

    def test_failing_asset_degrades_instead_of_aborting(self, make, repo, monkeypatch):
        make.asset("good", reuse_count=1, created_at=NOW - timedelta(days=2))
        make.asset("bad", created_at=NOW - timedelta(days=1))
        real = asset_health.calculate_health_metrics

        def flaky(asset, total_projects, now=None):
            if asset.id == "bad":
                raise ValueError("corrupt row")
            return real(asset, total_projects, now)

        monkeypatch.setattr(asset_health, "calculate_health_metrics", flaky)
        dash = build_health_dashboard(repo, now=NOW)

        rows = {r.id: r for r in dash.assets_health}
        assert rows["bad"].health_score == 0.0
        assert rows["good"].health_score > 0
        assert dash.assets_health[-1].id == "bad"

    def test_empty_dashboard(self, repo):
        dash = build_health_dashboard(repo, now=NOW)
        assert dash.total_assets == 0
        assert dash.assets_health == []
