"""Store backed by Flask-SQLAlchemy."""
import logging

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError

from activity_tracker.errors import DuplicateKey
from activity_tracker.models import db, User, Activity
from activity_tracker.storage.base import Store, ActivityFilter

logger = logging.getLogger(__name__)


class SqlStore(Store):

    def get_user(self, user_id):
        return db.session.get(User, user_id)

    def find_user(self, email=None, role=None, student_id=None):
        if email is None and student_id is None:
            return None
        query = User.query
        if email is not None:
            query = query.filter(User.email == email.strip().lower())
        if student_id is not None:
            query = query.filter(User.student_id == student_id)
        if role:
            query = query.filter(User.role == role)
        return query.first()

    def list_users(self, role=None, department=None, year=None, search=None):
        query = User.query
        if role:
            query = query.filter(User.role == role)
        if department:
            query = query.filter(User.department == department)
        if year:
            query = query.filter(User.year == year)
        if search:
            pattern = f'%{search}%'
            query = query.filter(or_(
                User.name.ilike(pattern),
                User.student_id.ilike(pattern),
                User.email.ilike(pattern),
            ))
        return query.order_by(User.name, User.id).all()

    def list_departments(self):
        rows = (db.session.query(User.department)
                .filter(User.role == 'student')
                .distinct()
                .order_by(User.department)
                .all())
        return [row[0] for row in rows]

    def add_user(self, user):
        db.session.add(user)

    def get_activity(self, activity_id):
        return db.session.get(Activity, activity_id)

    def list_activities(self, criteria=None):
        c = criteria or ActivityFilter()
        query = Activity.query

        if c.student_id is not None or c.department is not None:
            query = query.join(Activity.owner)
            if c.student_id is not None:
                query = query.filter(User.student_id == c.student_id)
            if c.department is not None:
                query = query.filter(User.department == c.department)
        if c.owner_ids is not None:
            query = query.filter(Activity.owner_id.in_(c.owner_ids))
        if c.ids is not None:
            query = query.filter(Activity.id.in_(c.ids))
        if c.status:
            query = query.filter(Activity.status == c.status)
        if c.type:
            query = query.filter(Activity.type == c.type)
        if c.submitted_from is not None:
            query = query.filter(Activity.submitted_at >= c.submitted_from)
        if c.submitted_to is not None:
            query = query.filter(Activity.submitted_at <= c.submitted_to)

        total = query.count()

        column = getattr(Activity, c.sort_attribute)
        if c.descending:
            query = query.order_by(column.desc(), Activity.id.desc())
        else:
            query = query.order_by(column.asc(), Activity.id.asc())
        if c.offset is not None:
            query = query.offset(c.offset).limit(c.limit)
        return query.all(), total

    def add_activity(self, activity):
        db.session.add(activity)

    def delete_activity(self, activity):
        db.session.delete(activity)

    def add_comment(self, activity, comment):
        activity.comments.append(comment)

    def transition(self, activity, from_status, **fields):
        result = db.session.execute(
            update(Activity)
            .where(Activity.id == activity.id, Activity.status == from_status)
            .values(**fields)
        )
        # Reload columns and reviewer relationships on next access
        db.session.expire(activity)
        return result.rowcount == 1

    def commit(self):
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            if 'unique' in str(exc.orig).lower():
                raise DuplicateKey('A record with the same unique value already exists')
            raise

    def rollback(self):
        db.session.rollback()
