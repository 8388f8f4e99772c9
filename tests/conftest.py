"""
Activity Tracker - Test Configuration and Fixtures
"""
import io
from datetime import date, datetime

import pytest
from werkzeug.datastructures import FileStorage

from activity_tracker import create_app
from activity_tracker.extensions import db
from activity_tracker.models import Activity
from activity_tracker.security import create_access_token
from activity_tracker.services.uploads import UploadStorage
from activity_tracker.services.users import create_user
from activity_tracker.storage import MemoryStore, get_store

PASSWORD = 'secret123'


def make_profile(name, email, role='student', department='Computer Science', **extra):
    profile = {'name': name, 'email': email, 'password': PASSWORD, 'role': role, 'department': department}
    profile.update(extra)
    return profile


def make_upload(filename='certificate.pdf', content=b'%PDF-1.4 test document', content_type='application/pdf'):
    return FileStorage(stream=io.BytesIO(content), filename=filename, content_type=content_type)


def add_activity(store, owner, status='pending', credits=2, activity_type='certification',
                 submitted_at=None, reviewer=None, title='Activity'):
    """Insert an activity directly, bypassing submission checks."""
    activity = Activity(
        owner=owner,
        owner_id=owner.id,
        title=title,
        description='Description',
        type=activity_type,
        organization='Organization',
        date=date(2024, 1, 15),
        credits=credits,
        status=status,
        submitted_at=submitted_at or datetime(2024, 1, 16, 10, 30),
        tags=[],
    )
    if status == 'verified' and reviewer is not None:
        activity.verified_by = reviewer.id
        activity.verifier = reviewer
        activity.verified_at = datetime(2024, 1, 17)
    store.add_activity(activity)
    store.commit()
    return activity


# ─── In-memory store (no application context) ─────────────────────────────────

@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def uploads(tmp_path):
    return UploadStorage(str(tmp_path / 'uploads'), max_files=5, max_file_size=1024)


@pytest.fixture
def people(memory_store):
    """Two students, a faculty member and an admin in the memory store."""
    return {
        'alice': create_user(memory_store, make_profile('Alice', 'alice@example.edu', studentId='CS20240001', gpa=3.5)),
        'bob': create_user(memory_store, make_profile('Bob', 'bob@example.edu', studentId='CS20240002',
                                                      department='Mathematics', gpa=3.0)),
        'faculty': create_user(memory_store, make_profile('Dr. Smith', 'smith@example.edu', role='faculty')),
        'admin': create_user(memory_store, make_profile('Admin', 'admin@example.edu', role='admin')),
    }


# ─── Flask application (SQL store on SQLite) ──────────────────────────────────

@pytest.fixture
def app(tmp_path):
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return get_store()


@pytest.fixture
def users(store):
    return {
        'alice': create_user(store, make_profile('Alice', 'alice@example.edu', studentId='CS20240001', gpa=3.5)),
        'bob': create_user(store, make_profile('Bob', 'bob@example.edu', studentId='CS20240002')),
        'faculty': create_user(store, make_profile('Dr. Smith', 'smith@example.edu', role='faculty')),
        'admin': create_user(store, make_profile('Admin', 'admin@example.edu', role='admin')),
    }


@pytest.fixture
def headers(app):
    def make(user):
        token = create_access_token(user, app.config['JWT_SECRET_KEY'], 3600)
        return {'Authorization': f'Bearer {token}'}
    return make
