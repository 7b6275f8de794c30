"""
Asset health scoring service.
Weighted 0-100 score from reuse, defect, change-frequency, regression-cost and
maintenance signals, plus snapshot history and the dashboard aggregation.
"""
import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

import structlog

from ..config import settings
from ..models.models import Asset, AssetHealthMetrics, AssetVersion
from ..schemas.asset_health import (
    AssetHealthRow,
    HealthDashboard,
    HealthMetrics,
    MaturityCount,
    TopReusedAsset,
    TypeCount,
)
from .errors import AssetNotFoundError
from .repository import Repository


logger = structlog.get_logger(__name__)

REUSE_WEIGHT = 0.3
DEFECT_WEIGHT = 0.25
CHANGE_WEIGHT = 0.15
REGRESSION_WEIGHT = 0.15
MAINTENANCE_WEIGHT = 0.15


def _as_float(value) -> Optional[float]:
    """Coerce a stored quality value; anything non-numeric counts as not measured."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def latest_version(versions: Iterable[AssetVersion]) -> Optional[AssetVersion]:
    latest = None
    for version in versions:
        if version.version_date is None:
            if latest is None:
                latest = version
            continue
        if latest is None or latest.version_date is None or version.version_date > latest.version_date:
            latest = version
    return latest


def calculate_health_metrics(
    asset: Asset,
    total_projects: int,
    now: Optional[datetime] = None,
) -> HealthMetrics:
    """
    Calculate health metrics for one asset.

    Pure: the only time dependency is `now`, used for the asset age.

    Args:
        asset: Asset with its versions loaded
        total_projects: Number of projects in the system
        now: Reference time (defaults to the current local time)

    Returns:
        HealthMetrics with reuse_rate rounded to 4 places, the rest to 2
    """
    now = now or datetime.now()
    versions = list(asset.versions or [])
    reuse_count = asset.reuse_count or 0

    reuse_rate = reuse_count / total_projects if total_projects > 0 else 0.0

    latest = latest_version(versions)
    defect_density = _as_float(latest.defect_density) if latest else None
    regression_cost = _as_float(latest.regression_cost) if latest else None
    maintenance_burden = _as_float(latest.maintenance_burden) if latest else None
    defect_density = defect_density if defect_density is not None else 0.0
    regression_cost = regression_cost if regression_cost is not None else 0.0
    maintenance_burden = maintenance_burden if maintenance_burden is not None else 0.0

    # Never below one month so brand-new assets don't blow up the rate
    months_since_creation = 1.0
    if asset.created_at is not None:
        days = (now - asset.created_at.replace(tzinfo=None)).total_seconds() / 86400
        months_since_creation = max(1.0, days / 30)
    change_frequency = len(versions) / months_since_creation

    reuse_score = min(100, reuse_rate * 100 * 10)
    defect_score = max(0, 100 - defect_density * 10)
    # No upper clamp: change_frequency == 0 lands in the else branch and scores 150
    if 0 < change_frequency < 5:
        change_score = 100
    else:
        change_score = max(0, 100 - (change_frequency - 5) * 10)
    regression_score = max(0, 100 - regression_cost)
    maintenance_score = max(0, 100 - maintenance_burden)

    health_score = (
        reuse_score * REUSE_WEIGHT
        + defect_score * DEFECT_WEIGHT
        + change_score * CHANGE_WEIGHT
        + regression_score * REGRESSION_WEIGHT
        + maintenance_score * MAINTENANCE_WEIGHT
    )

    return HealthMetrics(
        reuse_rate=round(reuse_rate, 4),
        defect_density=round(defect_density, 2),
        change_frequency=round(change_frequency, 2),
        regression_cost=round(regression_cost, 2),
        maintenance_burden=round(maintenance_burden, 2),
        health_score=round(health_score, 2),
    )


def record_health_snapshot(
    repo: Repository,
    asset_id: str,
    metrics: HealthMetrics,
    now: Optional[datetime] = None,
) -> AssetHealthMetrics:
    """Insert a new snapshot row. Existing rows are never touched."""
    now = now or datetime.now()
    snapshot = AssetHealthMetrics(
        asset_id=asset_id,
        reuse_rate=metrics.reuse_rate,
        defect_density=metrics.defect_density,
        change_frequency=metrics.change_frequency,
        regression_cost=metrics.regression_cost,
        maintenance_burden=metrics.maintenance_burden,
        health_score=metrics.health_score,
        calculated_at=now,
        created_at=now,
    )
    snapshot = repo.insert_health_snapshot(snapshot)
    logger.info("health_snapshot_recorded", asset_id=asset_id, health_score=metrics.health_score)
    return snapshot


def compute_asset_health(repo: Repository, asset_id: str, now: Optional[datetime] = None) -> HealthMetrics:
    """
    Current health of an asset. Every call also records a snapshot, so the
    history view gains a data point per detail read.
    """
    now = now or datetime.now()
    asset = repo.get_asset(asset_id)
    if asset is None:
        raise AssetNotFoundError(asset_id)
    metrics = calculate_health_metrics(asset, repo.count_projects(), now)
    record_health_snapshot(repo, asset_id, metrics, now)
    return metrics


def get_asset_health_history(
    repo: Repository,
    asset_id: str,
    days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[AssetHealthMetrics]:
    """Snapshots with calculated_at >= now - days, newest first."""
    if days is None:
        days = settings.health_history_days_default
    now = now or datetime.now()
    cutoff = now - timedelta(days=days)
    return repo.list_health_snapshots(asset_id, cutoff)


def _group_counts(values: Iterable[Optional[str]]) -> List[tuple]:
    # Counter keeps first-seen order
    return list(Counter(values).items())


def build_health_dashboard(repo: Repository, now: Optional[datetime] = None) -> HealthDashboard:
    """
    Aggregate health across all assets.

    Does not record snapshots: dashboard reads must not pollute history.
    """
    now = now or datetime.now()
    assets = repo.list_assets()
    total_projects = repo.count_projects()

    by_type = [TypeCount(type=k, count=c) for k, c in _group_counts(a.type for a in assets)]
    by_maturity = [MaturityCount(maturity=k, count=c) for k, c in _group_counts(a.maturity for a in assets)]

    # sorted() is stable, ties keep load order
    top_reused = sorted(assets, key=lambda a: a.reuse_count or 0, reverse=True)[: settings.dashboard_top_reused_limit]
    top_reused_rows = [
        TopReusedAsset(id=a.id, name=a.name, type=a.type, reuse_count=a.reuse_count or 0)
        for a in top_reused
    ]

    health_rows = []
    for asset in assets:
        try:
            metrics = calculate_health_metrics(asset, total_projects, now)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("dashboard_asset_degraded", asset_id=asset.id, error=str(e))
            metrics = HealthMetrics()
        health_rows.append(
            AssetHealthRow(
                id=asset.id,
                name=asset.name,
                type=asset.type,
                maturity=asset.maturity,
                health_score=metrics.health_score,
                reuse_rate=metrics.reuse_rate,
                defect_density=metrics.defect_density,
                change_frequency=metrics.change_frequency,
            )
        )
    health_rows.sort(key=lambda r: r.health_score, reverse=True)

    return HealthDashboard(
        total_assets=len(assets),
        assets_by_type=by_type,
        assets_by_maturity=by_maturity,
        top_reused_assets=top_reused_rows,
        assets_health=health_rows,
    )
