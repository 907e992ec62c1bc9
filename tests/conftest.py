"""
Pytest fixtures and configuration for AtCreator tests
"""
import os
import sys
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

# Add app directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'app')))


@pytest.fixture
def app_config(tmp_path):
    """Test configuration: in-memory database, settings under tmp_path"""
    return {
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'CONFIG_FILE': str(tmp_path / 'settings.yaml'),
        'RATELIMIT_ENABLED': False,
    }


@pytest.fixture
def app(app_config, monkeypatch):
    """Application built by the factory against a fresh database"""
    monkeypatch.delenv('USER_ADMIN_NAME', raising=False)
    monkeypatch.delenv('USER_GUEST_NAME', raising=False)

    from app import create_app

    _app = create_app(app_config)
    yield _app

    with _app.app_context():
        from db import db
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client; keeps the session cookie between requests"""
    return app.test_client()


@pytest.fixture
def contacts(app):
    """The application's contact book, inside an app context"""
    with app.app_context():
        yield app.contacts


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    logger = MagicMock()
    logger.info = MagicMock()
    logger.error = MagicMock()
    logger.warning = MagicMock()
    logger.debug = MagicMock()
    return logger


@pytest.fixture
def sample_people(contacts):
    """
    Alice (vip, paris, solicited twice), Bob (paris, five times),
    Carol (london, never solicited)
    """
    people = contacts.people
    alice = people.add_person('Alice', 'Martin', ['vip', 'paris'])
    bob = people.add_person('Bob', 'Durand', ['paris'])
    carol = people.add_person('Carol', 'Smith', ['london'])

    from db import db
    alice.solicitation_count = 2
    alice.last_solicitation_date = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    bob.solicitation_count = 5
    bob.last_solicitation_date = datetime(2026, 9, 15, 14, 0, tzinfo=timezone.utc)
    db.session.commit()

    return {'alice': alice, 'bob': bob, 'carol': carol}


class FakePerson:
    """Plain stand-in for a Person when no database is needed"""

    def __init__(self, id, firstname, lastname, tags=(), solicitation_count=0, last_solicitation_date=None):
        self.id = id
        self.firstname = firstname
        self.lastname = lastname
        self.tag_names = sorted(tags)
        self.solicitation_count = solicitation_count
        self.last_solicitation_date = last_solicitation_date


@pytest.fixture
def fake_person():
    return FakePerson
