import shutil
import sys
import tempfile
from pathlib import Path

import pytest
from flask_jwt_extended import create_access_token

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from taskboard import create_app
from taskboard.config import TestingConfig
from taskboard.core.users.models import User
from taskboard.domains.automations.telemetry import automation_telemetry
from taskboard.domains.projects.services.project_service import add_member, create_project
from taskboard.extensions import db


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


@pytest.fixture()
def app(monkeypatch):
    """
    Create a per-test app backed by a throwaway sqlite file.

    Automations commit once per rule and roll back on failure, so each test
    gets a real database instead of a wrapping transaction.
    """
    tmp_dir = tempfile.mkdtemp(prefix="taskboard-tests-")
    monkeypatch.setattr(TestingConfig, "SQLALCHEMY_DATABASE_URI", f"sqlite:///{tmp_dir}/test.db")
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    automation_telemetry.reset()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
        ctx.pop()
        shutil.rmtree(tmp_dir, ignore_errors=True)


@pytest.fixture()
def client(app):
    return app.test_client()


def make_user(email: str, full_name: str | None = None) -> User:
    user = User(email=email, full_name=full_name, badges=[])
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def owner(app):
    return make_user("owner@example.com", "Olive Owner")


@pytest.fixture()
def member(app, owner):
    return make_user("member@example.com", "Max Member")


@pytest.fixture()
def project(app, owner, member):
    """A project with the default statuses and one extra member."""
    project = create_project(owner.id, name="Website Redesign")
    add_member(owner.id, project.id, member.id)
    return project


def headers_for(user: User) -> dict:
    token = create_access_token(identity=str(user.id))
    return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}


@pytest.fixture()
def owner_headers(app, owner):
    return headers_for(owner)


@pytest.fixture()
def member_headers(app, member):
    return headers_for(member)


@pytest.fixture()
def user_factory(app):
    return make_user


@pytest.fixture()
def headers_factory(app):
    return headers_for
