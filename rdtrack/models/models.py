import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    ForeignKey,
    Integer,
    Float,
    JSON,
    Text,
    Index,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


def str_pk() -> Mapped[str]:
    return mapped_column(String(50), primary_key=True, default=lambda: str(uuid.uuid4()))


class User(Base):
    """Engineer account; reports resolve assignee ids to names through this table."""

    __tablename__ = "users"

    id: Mapped[str] = str_pk()
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(200), unique=True)
    role: Mapped[Optional[str]] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = str_pk()
    order_number: Mapped[Optional[str]] = mapped_column(String(100), unique=True, index=True)
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    sales_name: Mapped[Optional[str]] = mapped_column(String(200))  # Free-text stakeholder, not a FK
    status: Mapped[Optional[str]] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = str_pk()
    project_id: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Ordered list of engineer ids
    assigned_to: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    # Loose date strings (yyyy-MM-dd or yyyy-MM-dd HH:mm:ss); may be unparsable
    start_date: Mapped[Optional[str]] = mapped_column(String(50))
    end_date: Mapped[Optional[str]] = mapped_column(String(50))
    completed_date: Mapped[Optional[str]] = mapped_column(String(50))
    stakeholder: Mapped[Optional[str]] = mapped_column(String(200))
    status: Mapped[Optional[str]] = mapped_column(String(50), default="pending", index=True)
    task_type: Mapped[Optional[str]] = mapped_column(String(50), default="project")
    priority: Mapped[Optional[str]] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (Index("ix_tasks_project_status", "project_id", "status"),)


class LaborCost(Base):
    __tablename__ = "labor_costs"

    id: Mapped[str] = str_pk()
    # Each link is optional and independent of the others
    task_id: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    project_id: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    asset_id: Mapped[Optional[str]] = mapped_column(String(50))
    engineer_id: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    engineer_name: Mapped[Optional[str]] = mapped_column(String(200))
    work_description: Mapped[Optional[str]] = mapped_column(String(200))
    role: Mapped[Optional[str]] = mapped_column(String(50))
    hours: Mapped[float] = mapped_column(Float, default=0)
    hourly_rate: Mapped[float] = mapped_column(Float, default=0)
    total_cost: Mapped[float] = mapped_column(Float, default=0)
    work_date: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class Stakeholder(Base):
    """Names seen as task stakeholders or project sales contacts."""

    __tablename__ = "stakeholders"

    id: Mapped[str] = str_pk()
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    # stakeholder | sales | other
    type: Mapped[Optional[str]] = mapped_column(String(50), default="stakeholder")
    email: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    company: Mapped[Optional[str]] = mapped_column(String(200))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (Index("ix_stakeholders_name_type", "name", "type"),)


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[str] = str_pk()
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    maturity: Mapped[str] = mapped_column(String(50), default="experimental", index=True)
    owner_id: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    owner_name: Mapped[Optional[str]] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text)
    tags: Mapped[Optional[list]] = mapped_column(JSON)
    # Maintained by the relation write path, not recomputed on read
    reuse_count: Mapped[int] = mapped_column(Integer, default=0)
    related_project_ids: Mapped[Optional[list]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    versions = relationship(
        "AssetVersion", back_populates="asset", cascade="all, delete-orphan"
    )
    project_relations = relationship(
        "AssetProjectRelation", back_populates="asset", cascade="all, delete-orphan"
    )
    health_snapshots = relationship(
        "AssetHealthMetrics", cascade="all, delete-orphan"
    )


class AssetVersion(Base):
    __tablename__ = "asset_versions"

    id: Mapped[str] = str_pk()
    asset_id: Mapped[str] = mapped_column(String(50), ForeignKey("assets.id", ondelete="CASCADE"), index=True)
    version: Mapped[str] = mapped_column(String(50), nullable=False)
    change_reason: Mapped[Optional[str]] = mapped_column(Text)
    quality_changes: Mapped[Optional[str]] = mapped_column(Text)
    technical_debt: Mapped[Optional[str]] = mapped_column(Text)
    changed_by: Mapped[Optional[str]] = mapped_column(String(100))
    # Quality signals; NULL means "not measured"
    quality_score: Mapped[Optional[float]] = mapped_column(Float)
    defect_density: Mapped[Optional[float]] = mapped_column(Float)
    change_frequency: Mapped[Optional[float]] = mapped_column(Float)
    regression_cost: Mapped[Optional[float]] = mapped_column(Float)
    maintenance_burden: Mapped[Optional[float]] = mapped_column(Float)
    version_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    asset = relationship("Asset", back_populates="versions")


class AssetProjectRelation(Base):
    __tablename__ = "asset_project_relations"

    id: Mapped[str] = str_pk()
    asset_id: Mapped[str] = mapped_column(String(50), ForeignKey("assets.id", ondelete="CASCADE"), index=True)
    project_id: Mapped[str] = mapped_column(String(50), ForeignKey("projects.id", ondelete="CASCADE"), index=True)
    relation_type: Mapped[str] = mapped_column(String(50), nullable=False, default="used", index=True)  # used|modified|created
    version: Mapped[Optional[str]] = mapped_column(String(100))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    asset = relationship("Asset", back_populates="project_relations")
    project = relationship("Project")

    __table_args__ = (Index("ix_asset_project_relations_pair", "asset_id", "project_id"),)


class AssetHealthMetrics(Base):
    """Insert-only snapshot of one health calculation."""

    __tablename__ = "asset_health_metrics"

    id: Mapped[str] = str_pk()
    asset_id: Mapped[str] = mapped_column(String(50), ForeignKey("assets.id", ondelete="CASCADE"), index=True)
    reuse_rate: Mapped[float] = mapped_column(Float, default=0.0)
    defect_density: Mapped[float] = mapped_column(Float, default=0.0)
    change_frequency: Mapped[float] = mapped_column(Float, default=0.0)
    regression_cost: Mapped[float] = mapped_column(Float, default=0.0)
    maintenance_burden: Mapped[float] = mapped_column(Float, default=0.0)
    health_score: Mapped[float] = mapped_column(Float, default=0.0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
