"""User model."""
from datetime import datetime, timezone

from activity_tracker.extensions import db, JSONType

YEARS = ['Freshman', 'Sophomore', 'Junior', 'Senior', 'Graduate']
THEMES = ['light', 'dark', 'auto']


def utcnow():
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def default_preferences():
    return {'notifications': {'email': True, 'push': True}, 'theme': 'auto'}


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.String(20), default='student', index=True)  # student, faculty, admin
    student_id = db.Column(db.String(20), unique=True)  # students only, immutable once set
    department = db.Column(db.String(120), nullable=False, index=True)
    year = db.Column(db.String(20), default='Freshman')
    gpa = db.Column(db.Float, default=0.0)
    avatar = db.Column(db.String(500), default='')
    is_active = db.Column(db.Boolean, default=True)
    last_login = db.Column(db.DateTime)
    preferences = db.Column(JSONType)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    @property
    def profile_url(self):
        return f'/portfolio/{self.student_id or self.id}'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'studentId': self.student_id,
            'department': self.department,
            'year': self.year,
            'gpa': self.gpa if self.gpa is not None else 0.0,
            'avatar': self.avatar or '',
            'isActive': bool(self.is_active),
            'lastLogin': _iso(self.last_login),
            'preferences': self.preferences or default_preferences(),
            'profileUrl': self.profile_url,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


def _iso(value):
    return value.isoformat() if value else None
