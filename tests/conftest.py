import os
from datetime import datetime

# Keep the app off disk and out of the rate limiter before importing app modules.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_DB", "false")
os.environ.setdefault("RATE_LIMIT", "100000/minute")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rdtrack.db import Base, get_db
from rdtrack.main import app
from rdtrack.models.models import (
    Asset,
    AssetProjectRelation,
    AssetVersion,
    LaborCost,
    Project,
    Task,
    User,
)
from rdtrack.services.repository import Repository


NOW = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repo(db):
    return Repository(db)


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


class Factory:
    """Inserts rows with sensible defaults; every helper commits."""

    def __init__(self, db):
        self.db = db

    def _save(self, row):
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def engineer(self, id, name, **kw):
        return self._save(User(id=id, name=name, **kw))

    def project(self, id, name=None, created_at=NOW, **kw):
        return self._save(Project(id=id, project_name=name or id, created_at=created_at, updated_at=created_at, **kw))

    def task(self, id, assigned_to=None, created_at=NOW, **kw):
        kw.setdefault("name", id)
        return self._save(Task(id=id, assigned_to=assigned_to or [], created_at=created_at, updated_at=created_at, **kw))

    def labor(self, id, engineer_id, hours, work_date, **kw):
        return self._save(LaborCost(id=id, engineer_id=engineer_id, hours=hours, work_date=work_date, **kw))

    def asset(self, id, created_at=NOW, reuse_count=0, **kw):
        kw.setdefault("name", id)
        kw.setdefault("type", "code")
        kw.setdefault("maturity", "experimental")
        return self._save(
            Asset(id=id, created_at=created_at, updated_at=created_at, reuse_count=reuse_count, **kw)
        )

    def version(self, asset_id, version_date, **kw):
        kw.setdefault("version", version_date.strftime("v%Y%m%d"))
        return self._save(AssetVersion(asset_id=asset_id, version_date=version_date, **kw))

    def relation(self, asset_id, project_id, relation_type="used"):
        return self._save(AssetProjectRelation(asset_id=asset_id, project_id=project_id, relation_type=relation_type))


@pytest.fixture
def make(db):
    return Factory(db)
