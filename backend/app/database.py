import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from app.config import settings
from app.errors import TransactionAbortedError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={
            "check_same_thread": False,
            "timeout": settings.db_busy_timeout_seconds,
        },
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """Run a unit of work as one transaction.

    Everything flushed inside the block is committed together or not at all.
    Lost optimistic version checks, lock timeouts and unique-index
    violations mean another request changed the same rows first; they are
    rolled back and reported as TransactionAbortedError.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Concurrent modification detected: %s", exc)
        raise TransactionAbortedError() from exc
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Constraint violated by concurrent write: %s", exc.orig)
        raise TransactionAbortedError() from exc
    except OperationalError as exc:
        db.rollback()
        if "locked" not in str(exc.orig):
            raise
        logger.warning("Database busy, transaction aborted: %s", exc.orig)
        raise TransactionAbortedError("Database is busy, please retry") from exc
    except Exception:
        db.rollback()
        raise


SCHEMA_SQL = """\
-- ============================================================
-- USERS
-- ============================================================
CREATE TABLE IF NOT EXISTS users (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    email         TEXT UNIQUE,
    password_hash TEXT NOT NULL,
    avatar        TEXT,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

-- ============================================================
-- PROFILES
-- ============================================================
CREATE TABLE IF NOT EXISTS profiles (
    id             TEXT PRIMARY KEY,
    user_id        TEXT NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
    current_job_id TEXT REFERENCES projects(id) ON DELETE SET NULL,
    website        TEXT,
    location       TEXT,
    bio            TEXT,
    githubusername TEXT,
    youtube        TEXT,
    twitter        TEXT,
    facebook       TEXT,
    linkedin       TEXT,
    instagram      TEXT,
    version        INTEGER NOT NULL DEFAULT 1,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_profiles_current_job ON profiles(current_job_id);

CREATE TABLE IF NOT EXISTS profile_skills (
    profile_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    name       TEXT NOT NULL,
    PRIMARY KEY (profile_id, name)
);

CREATE INDEX IF NOT EXISTS idx_profile_skills_name ON profile_skills(name);

CREATE TABLE IF NOT EXISTS education (
    id           TEXT PRIMARY KEY,
    profile_id   TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    school       TEXT NOT NULL,
    degree       TEXT NOT NULL,
    fieldofstudy TEXT NOT NULL,
    from_date    TEXT NOT NULL,
    to_date      TEXT,
    current      INTEGER NOT NULL DEFAULT 0,
    description  TEXT,
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS project_history (
    id         TEXT PRIMARY KEY,
    profile_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    project_id TEXT REFERENCES projects(id) ON DELETE SET NULL,
    title      TEXT NOT NULL,
    role       TEXT NOT NULL,
    joined_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_history_profile ON project_history(profile_id);

-- ============================================================
-- PROJECTS
-- ============================================================
CREATE TABLE IF NOT EXISTS projects (
    id          TEXT PRIMARY KEY,
    owner_id    TEXT NOT NULL REFERENCES users(id),
    title       TEXT NOT NULL,
    description TEXT NOT NULL,
    status      TEXT NOT NULL DEFAULT 'HIRING'
                CHECK(status IN ('HIRING','FULL','COMPLETE')),
    version     INTEGER NOT NULL DEFAULT 1,
    created_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_projects_owner ON projects(owner_id);
CREATE INDEX IF NOT EXISTS idx_projects_status ON projects(status);

CREATE TABLE IF NOT EXISTS project_members (
    id           TEXT PRIMARY KEY,
    project_id   TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    developer_id TEXT REFERENCES users(id),
    role         TEXT NOT NULL,
    vacancy      INTEGER NOT NULL DEFAULT 1,
    position     INTEGER NOT NULL,
    CHECK ((vacancy = 1 AND developer_id IS NULL) OR (vacancy = 0 AND developer_id IS NOT NULL))
);

CREATE INDEX IF NOT EXISTS idx_members_project ON project_members(project_id);
-- A developer fills at most one slot anywhere.
CREATE UNIQUE INDEX IF NOT EXISTS idx_members_filled_developer
    ON project_members(developer_id) WHERE vacancy = 0;

-- ============================================================
-- MEMBERSHIP CLAIMS (applications and offers)
-- ============================================================
CREATE TABLE IF NOT EXISTS membership_claims (
    id           TEXT PRIMARY KEY,
    project_id   TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    developer_id TEXT NOT NULL REFERENCES users(id),
    role         TEXT NOT NULL,
    kind         TEXT NOT NULL CHECK(kind IN ('APPLICATION','OFFER')),
    state        TEXT NOT NULL DEFAULT 'PENDING'
                 CHECK(state IN ('PENDING','ACCEPTED','REJECTED','WITHDRAWN',
                                 'REVOKED','DISPLACED','SUPERSEDED','CLOSED')),
    created_at   TEXT NOT NULL,
    resolved_at  TEXT
);

CREATE INDEX IF NOT EXISTS idx_claims_project ON membership_claims(project_id, state);
CREATE INDEX IF NOT EXISTS idx_claims_developer ON membership_claims(developer_id, state);
-- One open claim per developer and project: never applied and offered at once.
CREATE UNIQUE INDEX IF NOT EXISTS idx_claims_pending
    ON membership_claims(developer_id, project_id) WHERE state = 'PENDING';

-- ============================================================
-- TASKS
-- ============================================================
CREATE TABLE IF NOT EXISTS tasks (
    id           TEXT PRIMARY KEY,
    project_id   TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    developer_id TEXT NOT NULL REFERENCES users(id),
    title        TEXT NOT NULL,
    description  TEXT NOT NULL,
    note         TEXT,
    status       TEXT NOT NULL DEFAULT 'TODO'
                 CHECK(status IN ('TODO','DOING','DONE','COMPLETE')),
    position     INTEGER NOT NULL,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tasks_project ON tasks(project_id);
CREATE INDEX IF NOT EXISTS idx_tasks_developer ON tasks(developer_id);

-- ============================================================
-- POSTS
-- ============================================================
CREATE TABLE IF NOT EXISTS posts (
    id         TEXT PRIMARY KEY,
    project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
    user_id    TEXT NOT NULL REFERENCES users(id),
    title      TEXT NOT NULL,
    text       TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_posts_project ON posts(project_id);

CREATE TABLE IF NOT EXISTS comments (
    id         TEXT PRIMARY KEY,
    post_id    TEXT NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
    user_id    TEXT NOT NULL REFERENCES users(id),
    text       TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_comments_post ON comments(post_id);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()
