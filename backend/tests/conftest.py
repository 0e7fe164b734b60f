"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.
"""

from __future__ import annotations

import os

import pytest
from authgate.core.extensions import db as _db  # Flask-SQLAlchemy instance
from authgate.factory import create_app  # application factory under test
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker


class TestConfig:
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Keeps the denylist in process (no Redis).
    - ``admin`` tokens never expire, ``clerk`` tokens live eight hours.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-key-of-at-least-32-bytes"
    JWT_TTL_MINUTES = 60
    JWT_NEVER_EXPIRE_TTL_MINUTES = 0
    JWT_ROLE_TTLS = {"admin": "never", "clerk": "480"}
    DENYLIST_RETENTION_MINUTES = 60
    REDIS_URL = None
    FRONTEND_URL = "http://frontend.test"
    GOOGLE_CLIENT_ID = "client-id"
    GOOGLE_CLIENT_SECRET = "client-secret"
    GOOGLE_REDIRECT_URI = "http://api.test/api/v1/auth/google/callback"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and asset
        stores rooted in a temporary directory.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    storage = tmp_path_factory.mktemp("storage")

    class SessionConfig(TestConfig):
        ASSET_PUBLIC_ROOT = str(storage / "public")
        ASSET_PRIMARY_ROOT = None

    app = create_app(SessionConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    Mirrors the SQLAlchemy 2.0 pattern for transactional tests: a top-level
    transaction, a SAVEPOINT per test, and a fresh SAVEPOINT whenever
    SQLAlchemy ends the previous one. ``db.session`` is swapped for the
    scoped session so services and Units of Work share it.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture()
def issuer(app):
    """The application's process-wide JWT issuer."""
    from authgate.api.deps import ISSUER_EXTENSION

    return app.extensions[ISSUER_EXTENSION]


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
