"""Demo data set, loadable into any store."""
import logging
from datetime import date, datetime

from activity_tracker.models import User, Activity
from activity_tracker.models.user import default_preferences
from activity_tracker.models.activity import VERIFIED, PENDING
from activity_tracker.security import hash_password

logger = logging.getLogger(__name__)

DEMO_PASSWORD = 'password123'

DEMO_USERS = [
    {
        'name': 'Alex Johnson',
        'email': 'student@demo.com',
        'role': 'student',
        'student_id': 'CS2023001',
        'department': 'Computer Science',
        'year': 'Senior',
        'gpa': 3.8,
    },
    {
        'name': 'Dr. Sarah Wilson',
        'email': 'faculty@demo.com',
        'role': 'faculty',
        'department': 'Faculty of Engineering',
    },
    {
        'name': 'Campus Administrator',
        'email': 'admin@demo.com',
        'role': 'admin',
        'department': 'Administration',
    },
]

DEMO_ACTIVITIES = [
    {
        'title': 'Python Programming Certificate',
        'type': 'certification',
        'description': 'Completed Python programming course with distinction',
        'organization': 'Python Institute',
        'date': date(2024, 1, 15),
        'credits': 3,
        'status': VERIFIED,
        'submitted_at': datetime(2024, 1, 16, 10, 30),
        'verified_at': datetime(2024, 1, 17, 10, 30),
    },
    {
        'title': 'Tech Conference 2024',
        'type': 'conference',
        'description': 'Attended annual technology conference and presented research',
        'organization': 'Tech Innovation Summit',
        'date': date(2024, 1, 10),
        'credits': 2,
        'status': VERIFIED,
        'submitted_at': datetime(2024, 1, 11, 14, 20),
        'verified_at': datetime(2024, 1, 12, 14, 20),
    },
    {
        'title': 'Community Service Project',
        'type': 'volunteering',
        'description': 'Organized food drive for local community center',
        'organization': 'Local Community Center',
        'date': date(2024, 1, 8),
        'credits': 1,
        'status': PENDING,
        'submitted_at': datetime(2024, 1, 9, 9, 15),
    },
    {
        'title': 'Research Paper Publication',
        'type': 'research',
        'description': 'Published research paper in IEEE conference',
        'organization': 'IEEE Computer Society',
        'date': date(2024, 1, 5),
        'credits': 5,
        'status': VERIFIED,
        'submitted_at': datetime(2024, 1, 6, 16, 45),
        'verified_at': datetime(2024, 1, 7, 10, 30),
    },
]


def seed_demo_data(store):
    """Load the demo users and activities. Returns False if already present."""
    if store.find_user(email='student@demo.com') is not None:
        return False

    users = {}
    password_hash = hash_password(DEMO_PASSWORD)
    for data in DEMO_USERS:
        user = User(password_hash=password_hash, is_active=True,
                    preferences=default_preferences(), **data)
        user.avatar = 'https://ui-avatars.com/api/?name={}&background=667eea&color=fff'.format(
            data['name'].replace(' ', '+'))
        store.add_user(user)
        users[data['role']] = user
    store.commit()

    student, reviewer = users['student'], users['faculty']
    for data in DEMO_ACTIVITIES:
        activity = Activity(owner=student, owner_id=student.id, tags=[], is_public=True, **data)
        if activity.status == VERIFIED:
            activity.verified_by = reviewer.id
            activity.verifier = reviewer
        store.add_activity(activity)
    store.commit()
    logger.info('Seeded %d demo users and %d demo activities', len(DEMO_USERS), len(DEMO_ACTIVITIES))
    return True
