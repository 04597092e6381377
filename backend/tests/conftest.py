import pytest
from argon2 import PasswordHasher
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.database import get_db
from app.main import app
from app.config import settings
from app.models import MembershipClaim, Profile, Project
from app.utils import security

API = settings.api_prefix


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(autouse=True)
def fast_password_hasher(monkeypatch):
    """Cheap argon2 parameters; hashing cost is irrelevant to these tests."""
    monkeypatch.setattr(security, "ph", PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "DevConnector"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    from app.database import init_db
    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def client(tmp_data, test_db):
    original_data_path = settings.data_path
    settings.data_path = tmp_data
    c = TestClient(app)
    yield c
    settings.data_path = original_data_path


# --- helpers ---------------------------------------------------------------


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name, skills="python", email=None):
    """Register a user with a profile; returns (token, user_id)."""
    r = client.post(f"{API}/users", json={
        "name": name,
        "email": email or f"{name.lower()}@example.com",
        "password": "secret123",
    })
    assert r.status_code == 200, r.text
    token = r.json()["token"]
    r = client.post(f"{API}/profile", json={"skills": skills}, headers=auth(token))
    assert r.status_code == 200, r.text
    return token, r.json()["user_id"]


def create_project(client, token, roles, title="Project"):
    r = client.post(f"{API}/project", json={
        "title": title,
        "description": f"{title} description",
        "roles": roles,
    }, headers=auth(token))
    assert r.status_code == 201, r.text
    return r.json()


def me(client, token):
    return client.get(f"{API}/profile/me", headers=auth(token)).json()


def snapshot(session):
    """Versions and list contents of every profile and project, for no-op checks."""
    session.expire_all()
    profiles = {
        p.user_id: (p.version, p.current_job_id, sorted((c.project_id, c.kind) for c in p.pending_claims))
        for p in session.query(Profile).all()
    }
    projects = {
        p.id: (
            p.version,
            p.status,
            [(m.role, m.vacancy, m.developer_id) for m in p.members],
            sorted((c.developer_id, c.kind, c.state) for c in p.claims),
        )
        for p in session.query(Project).all()
    }
    return profiles, projects


def assert_invariants(session):
    """Cross-document invariants that must hold after every committed operation."""
    session.expire_all()
    profiles = {p.user_id: p for p in session.query(Profile).all()}
    projects = session.query(Project).all()

    filled_by = {}
    for project in projects:
        for slot in project.members:
            if slot.vacancy:
                assert slot.developer_id is None
                continue
            # one filled slot per developer, and it matches their current job
            assert slot.developer_id not in filled_by, slot.developer_id
            filled_by[slot.developer_id] = project.id
            assert profiles[slot.developer_id].current_job_id == project.id

        if project.status != "COMPLETE":
            staffed = all(not m.vacancy for m in project.members)
            assert project.status == ("FULL" if staffed else "HIRING")

    for user_id, profile in profiles.items():
        if profile.current_job_id is not None:
            assert filled_by.get(user_id) == profile.current_job_id

    pending = session.query(MembershipClaim).filter(MembershipClaim.state == "PENDING").all()
    seen = set()
    for claim in pending:
        # never applied and offered at once
        key = (claim.developer_id, claim.project_id)
        assert key not in seen, key
        seen.add(key)
        # employed developers carry no open claims
        assert profiles[claim.developer_id].current_job_id is None
        project = claim.project
        assert project.status != "COMPLETE"
        assert any(m.vacancy and m.role == claim.role for m in project.members)
