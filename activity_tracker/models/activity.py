"""Activity, attached file and comment models."""
from activity_tracker.extensions import db, JSONType
from activity_tracker.models.user import utcnow

PENDING = 'pending'
VERIFIED = 'verified'
REJECTED = 'rejected'
STATUSES = [PENDING, VERIFIED, REJECTED]

ACTIVITY_TYPES = ['certification', 'conference', 'research', 'volunteering', 'competition', 'internship']


class Activity(db.Model):
    __tablename__ = 'activities'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False, index=True)
    organization = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False)
    credits = db.Column(db.Integer, nullable=False)
    tags = db.Column(JSONType)
    is_public = db.Column(db.Boolean, default=True)

    status = db.Column(db.String(20), default=PENDING, index=True)  # pending, verified, rejected
    submitted_at = db.Column(db.DateTime, default=utcnow, index=True)
    verified_at = db.Column(db.DateTime)
    verified_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    rejected_at = db.Column(db.DateTime)
    rejected_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    rejection_reason = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    owner = db.relationship('User', foreign_keys=[owner_id])
    verifier = db.relationship('User', foreign_keys=[verified_by])
    rejecter = db.relationship('User', foreign_keys=[rejected_by])
    files = db.relationship('ActivityFile', backref='activity', cascade='all, delete-orphan',
                            order_by='ActivityFile.id')
    comments = db.relationship('ActivityComment', backref='activity', cascade='all, delete-orphan',
                               order_by='ActivityComment.id')

    @property
    def is_pending(self):
        return self.status == PENDING

    def file_by_id(self, file_id):
        for f in self.files:
            if f.id == file_id:
                return f
        return None

    def to_dict(self):
        owner = self.owner
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'type': self.type,
            'organization': self.organization,
            'date': self.date.isoformat() if self.date else None,
            'credits': self.credits,
            'tags': list(self.tags or []),
            'isPublic': self.is_public is not False,
            'status': self.status,
            # Display fields come from the owner join, not a stored copy
            'student': _person(owner, detailed=True),
            'studentId': owner.student_id if owner else None,
            'studentName': owner.name if owner else None,
            'files': [f.to_dict() for f in self.files],
            'comments': [c.to_dict() for c in self.comments],
            'submittedAt': _iso(self.submitted_at),
            'verifiedAt': _iso(self.verified_at),
            'verifiedBy': _person(self.verifier),
            'rejectedAt': _iso(self.rejected_at),
            'rejectedBy': _person(self.rejecter),
            'rejectionReason': self.rejection_reason,
            'activityUrl': f'/activities/{self.id}',
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Activity {self.id} {self.status}>'


class ActivityFile(db.Model):
    __tablename__ = 'activity_files'

    id = db.Column(db.Integer, primary_key=True)
    activity_id = db.Column(db.Integer, db.ForeignKey('activities.id'), nullable=False)
    name = db.Column(db.String(255), nullable=False)  # stored name on disk
    original_name = db.Column(db.String(255), nullable=False)
    path = db.Column(db.String(500), nullable=False)
    size = db.Column(db.Integer, nullable=False)
    mime_type = db.Column(db.String(120), nullable=False)
    uploaded_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'originalName': self.original_name,
            'size': self.size,
            'mimeType': self.mime_type,
            'uploadedAt': _iso(self.uploaded_at),
        }


class ActivityComment(db.Model):
    __tablename__ = 'activity_comments'

    id = db.Column(db.Integer, primary_key=True)
    activity_id = db.Column(db.Integer, db.ForeignKey('activities.id'), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    author = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'user': _person(self.author),
            'content': self.content,
            'createdAt': _iso(self.created_at),
        }


def _person(user, detailed=False):
    if user is None:
        return None
    data = {'id': user.id, 'name': user.name}
    if detailed:
        data.update(email=user.email, department=user.department, studentId=user.student_id)
    return data


def _iso(value):
    return value.isoformat() if value else None
